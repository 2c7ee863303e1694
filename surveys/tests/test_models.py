import pytest
from django.core.exceptions import ValidationError

from surveys.models import Survey, SurveyAnalytics, validate_status_transition


@pytest.mark.parametrize('current,new', [
    ('draft', 'active'),
    ('active', 'paused'),
    ('active', 'completed'),
    ('paused', 'active'),
    ('paused', 'completed'),
    ('active', 'active'),
])
def test_allowed_transitions(current, new):
    validate_status_transition(current, new)


@pytest.mark.parametrize('current,new', [
    ('active', 'draft'),
    ('completed', 'active'),
    ('draft', 'paused'),
    ('paused', 'draft'),
])
def test_rejected_transitions(current, new):
    with pytest.raises(ValidationError, match='Transition not allowed'):
        validate_status_transition(current, new)


def test_unknown_status():
    with pytest.raises(ValidationError, match='Unknown status'):
        validate_status_transition('draft', 'archived')


@pytest.mark.django_db
def test_survey_document_round_trip(make_survey, store):
    survey = make_survey(priority=3, style={'primaryColor': '#000'})
    document = survey.to_document()

    assert document['id'] == survey.id
    assert document['storeId'] == store.id
    assert document['priority'] == 3
    assert document['targetAudience'] == {'newCustomers': True, 'returningCustomers': True}
    assert 'target_audience' not in document

    copy = Survey.from_document({k: v for k, v in document.items() if k != 'id'})
    assert copy.store_id == store.id
    assert copy.style == {'primaryColor': '#000'}


@pytest.mark.django_db
def test_analytics_document_nests_demographics(make_survey):
    survey = make_survey()
    SurveyAnalytics.objects.filter(survey=survey).update(new_customers=3, average_cart_value=12.5)
    document = SurveyAnalytics.objects.get(survey=survey).to_document()
    assert document['demographicData'] == {
        'newCustomers': 3,
        'returningCustomers': 0,
        'averageCartValue': 12.5,
    }


@pytest.mark.django_db
def test_deleting_survey_cascades(make_survey):
    survey = make_survey()
    survey.responses.create(customer_type='new', responses=[])
    survey.delete()
    assert SurveyAnalytics.objects.count() == 0
