import json
from datetime import date

import pytest
from asgiref.sync import async_to_sync
from django.core.exceptions import ValidationError
from django.http import JsonResponse
from django.test import RequestFactory

from core.exceptions import NotFoundError, UpstreamError
from core.utils.helpers import (
    DateFilterHelper,
    absolute_url,
    api_view,
    parse_id,
    parse_json_body,
)


@pytest.fixture
def rf():
    return RequestFactory()


def call(view, request):
    response = async_to_sync(view)(request)
    return response.status_code, json.loads(response.content)


class TestApiView:
    def test_passes_through(self, rf):
        @api_view
        async def view(request):
            return JsonResponse({'ok': True})

        assert call(view, rf.get('/x')) == (200, {'ok': True})

    def test_validation_error_is_400(self, rf):
        @api_view
        async def view(request):
            raise ValidationError('title is required')

        assert call(view, rf.get('/x')) == (400, {'error': 'title is required'})

    def test_not_found_carries_details(self, rf):
        @api_view
        async def view(request):
            raise NotFoundError('Survey not found', surveyId='9')

        assert call(view, rf.get('/x')) == (404, {'error': 'Survey not found', 'surveyId': '9'})

    def test_upstream_detail_hidden_outside_debug(self, rf, settings):
        @api_view
        async def view(request):
            raise UpstreamError('Database query failed', detail='connection reset')

        settings.DEBUG = False
        assert call(view, rf.get('/x')) == (500, {'error': 'Database query failed', 'message': None})
        settings.DEBUG = True
        assert call(view, rf.get('/x'))[1]['message'] == 'connection reset'

    def test_unexpected_error_is_logged(self, rf, caplog):
        @api_view
        async def view(request):
            raise RuntimeError('kaboom')

        status, body = call(view, rf.post('/api/thing'))
        assert status == 500
        assert body == {'error': 'Internal server error', 'message': None}
        assert '[API_ERROR] POST /api/thing: kaboom' in caplog.text


class TestParsing:
    def test_parse_json_body(self, rf):
        assert parse_json_body(rf.post('/x', data='{"a": 1}', content_type='application/json')) == {'a': 1}
        assert parse_json_body(rf.post('/x', data='', content_type='application/json')) == {}

    def test_invalid_json(self, rf):
        with pytest.raises(ValidationError, match='Invalid JSON'):
            parse_json_body(rf.post('/x', data='{nope', content_type='application/json'))

    def test_parse_id(self):
        assert parse_id('12') == 12
        with pytest.raises(NotFoundError, match='Store not found'):
            parse_id('abc', 'Store')


class TestDateFilterHelper:
    def test_build_filters(self):
        assert DateFilterHelper.build_filters('2024-01-01', '2024-01-31') == {
            'created_at__date__gte': date(2024, 1, 1),
            'created_at__date__lte': date(2024, 1, 31),
        }
        assert DateFilterHelper.build_filters() == {}

    def test_reversed_window(self):
        with pytest.raises(ValidationError):
            DateFilterHelper.build_filters('2024-02-01', '2024-01-01')

    @pytest.mark.parametrize('start,end,label', [
        ('2024-01-01', '2024-01-31', '2024-01-01 to 2024-01-31'),
        ('2024-01-01', None, 'Since 2024-01-01'),
        (None, '2024-01-31', 'Until 2024-01-31'),
        (None, None, 'All time'),
    ])
    def test_labels(self, start, end, label):
        assert DateFilterHelper.build_date_range_label(start, end) == label


def test_absolute_url_prefers_public_base(rf, settings):
    request = rf.get('/x')
    settings.PUBLIC_BASE_URL = ''
    assert absolute_url(request, '/surveys/1/script.js') == 'http://testserver/surveys/1/script.js'
    settings.PUBLIC_BASE_URL = 'https://surveys.example.com/'
    assert absolute_url(request, '/surveys/1/script.js') == 'https://surveys.example.com/surveys/1/script.js'
