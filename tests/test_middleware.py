import logging

import pytest
from django.http import HttpResponse
from django.test import RequestFactory

from core.middleware import ApiCorsMiddleware
from core.middleware_logging import RequestLoggingMiddleware


@pytest.fixture
def rf():
    return RequestFactory()


def ok(request):
    return HttpResponse('ok')


class TestApiCorsMiddleware:
    def test_api_responses_get_cors_headers(self, rf):
        response = ApiCorsMiddleware(ok)(rf.get('/api/active-surveys'))
        assert response['Access-Control-Allow-Origin'] == '*'
        assert 'PATCH' in response['Access-Control-Allow-Methods']

    def test_preflight_short_circuits(self, rf):
        def never(request):
            raise AssertionError('preflight must not reach the view')

        request = rf.options('/api/survey-responses', HTTP_ACCESS_CONTROL_REQUEST_METHOD='POST')
        response = ApiCorsMiddleware(never)(request)
        assert response.status_code == 204
        assert response['Access-Control-Max-Age'] == '86400'

    def test_other_paths_untouched(self, rf):
        response = ApiCorsMiddleware(ok)(rf.get('/admin/'))
        assert not response.has_header('Access-Control-Allow-Origin')

    def test_configured_origin(self, rf, settings):
        settings.SURVEY_CORS_ALLOW_ORIGIN = 'https://shop.example.com'
        response = ApiCorsMiddleware(ok)(rf.get('/surveys/1/script.js'))
        assert response['Access-Control-Allow-Origin'] == 'https://shop.example.com'


def test_request_logging(rf, caplog):
    # the 'django' logger does not propagate in test settings
    request_logger = logging.getLogger('django.request')
    request_logger.addHandler(caplog.handler)
    try:
        with caplog.at_level(logging.INFO, logger='django.request'):
            RequestLoggingMiddleware(ok)(rf.get('/api/surveys?storeId=1'))
    finally:
        request_logger.removeHandler(caplog.handler)
    assert '[REQ] GET /api/surveys?storeId=1 from 127.0.0.1 -> 200' in caplog.text


@pytest.mark.django_db
def test_unknown_route_is_json_404(client):
    resp = client.get('/api/nothing-here')
    assert resp.status_code == 404
    assert resp.json() == {'error': 'Not found', 'path': '/api/nothing-here'}
