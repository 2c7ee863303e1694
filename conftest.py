# conftest.py
"""
Pytest configuration for the compra project.
Forces the test settings regardless of environment variables.
"""
import os

import pytest

os.environ['DJANGO_ENV'] = 'test'
os.environ['DJANGO_SETTINGS_MODULE'] = 'compra.settings.test'


@pytest.fixture(autouse=True)
def _clear_cache():
    from django.core.cache import cache

    cache.clear()
    yield
    cache.clear()


@pytest.fixture
def store(db):
    from surveys.models import Store

    return Store.objects.create(
        shop_domain='test-store.myshopify.com',
        access_token='shpat_test',
        email='store@example.com',
        settings={'defaultSurveyStyle': {'primaryColor': '#111111', 'fontFamily': 'Georgia'}},
    )


@pytest.fixture
def make_survey(store):
    from surveys.models import Survey, SurveyAnalytics

    def _make(**overrides):
        values = {
            'store': store,
            'title': 'Checkout feedback',
            'questions': [
                {'id': 'q-rating', 'questionText': 'Rate checkout', 'questionType': 'rating'},
                {'id': 'q-text', 'questionText': 'Anything else?', 'questionType': 'text'},
            ],
            'status': Survey.STATUS_ACTIVE,
            'active': True,
            'target_audience': {'newCustomers': True, 'returningCustomers': True},
        }
        values.update(overrides)
        survey = Survey.objects.create(**values)
        SurveyAnalytics.objects.create(survey=survey)
        return survey

    return _make
