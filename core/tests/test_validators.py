"""
Unit tests for core/validators.py
"""
from datetime import date

import pytest
from django.core.exceptions import ValidationError

from core.validators import DateFilterValidator, ResponsePayloadValidator, SurveyPayloadValidator
from surveys.services import ALLOWED_QUESTION_TYPES


def survey_payload(**overrides):
    payload = {
        'storeId': 1,
        'title': 'Checkout survey',
        'questions': [{'questionText': 'How was it?', 'questionType': 'rating'}],
    }
    payload.update(overrides)
    return payload


class TestDateFilterValidator:
    def test_validate_date_string_valid(self):
        assert DateFilterValidator.validate_date_string('2024-12-25') == date(2024, 12, 25)

    def test_accepts_iso_timestamps(self):
        assert DateFilterValidator.validate_date_string('2024-12-25T10:00:00Z') == date(2024, 12, 25)

    def test_validate_date_string_none(self):
        assert DateFilterValidator.validate_date_string(None) is None
        assert DateFilterValidator.validate_date_string('') is None

    def test_validate_date_string_invalid_format(self):
        with pytest.raises(ValidationError, match='Invalid startDate format'):
            DateFilterValidator.validate_date_string('25-12-2024', 'startDate')
        with pytest.raises(ValidationError):
            DateFilterValidator.validate_date_string('invalid')

    def test_validate_date_range(self):
        DateFilterValidator.validate_date_range(date(2024, 1, 1), date(2024, 1, 2))
        with pytest.raises(ValidationError, match='startDate cannot be after endDate'):
            DateFilterValidator.validate_date_range(date(2024, 1, 2), date(2024, 1, 1))


class TestSurveyPayloadValidator:
    def test_valid_payload(self):
        assert SurveyPayloadValidator.validate_create(survey_payload(), ALLOWED_QUESTION_TYPES) == (1, 'Checkout survey')

    @pytest.mark.parametrize('value', [None, 'abc', 0, -3, True])
    def test_invalid_ids(self, value):
        with pytest.raises(ValidationError):
            SurveyPayloadValidator.validate_id(value, 'storeId')

    def test_numeric_string_id(self):
        assert SurveyPayloadValidator.validate_id(' 42 ', 'storeId') == 42

    @pytest.mark.parametrize('overrides,message', [
        ({'title': '  '}, 'title is required'),
        ({'title': 'x' * 201}, 'at most 200'),
        ({'questions': []}, 'non-empty list'),
        ({'questions': [{'questionType': 'rating'}]}, 'missing questionText'),
        ({'questions': [{'questionText': 'Q', 'questionType': 'slider'}]}, "invalid questionType 'slider'"),
        ({'questions': [{'questionText': 'Q', 'questionType': 'checkbox', 'options': 'a,b'}]}, 'options must be a list'),
        ({'priority': '1'}, 'priority must be an integer'),
        ({'style': 'dark'}, 'style must be an object'),
        ({'targetAudience': {'cartValue': {'min': '10'}}}, r'targetAudience.cartValue.min must be a number'),
        ({'targetAudience': {'orderCount': {'max': True}}}, r'targetAudience.orderCount.max must be a number'),
        ({'targetAudience': {'cartValue': 25}}, r'targetAudience.cartValue must be an object'),
        ({'targetAudience': {'productCategories': 'Shoes'}}, 'productCategories must be a list of strings'),
        ({'displayRules': {'displayLocation': [1, 2]}}, 'displayLocation must be a list of strings'),
        ({'displayRules': {'startDate': 'soon'}}, r'Invalid displayRules.startDate format'),
        ({'displayRules': {'endDate': 20240101}}, 'endDate must be a date string'),
        ({'questions': [{'questionText': 'Q', 'questionType': 'rating', 'maxRating': 'ten'}]},
         'maxRating must be a positive integer'),
        ({'questions': [{'questionText': 'Q', 'questionType': 'text', 'maxLength': 0}]},
         'maxLength must be a positive integer'),
    ])
    def test_rejects(self, overrides, message):
        with pytest.raises(ValidationError, match=message):
            SurveyPayloadValidator.validate_create(survey_payload(**overrides), ALLOWED_QUESTION_TYPES)

    def test_legacy_types_are_accepted(self):
        questions = [{'questionText': 'Pick', 'questionType': t} for t in ('single_choice', 'select', 'image_radio')]
        SurveyPayloadValidator.validate_create(survey_payload(questions=questions), ALLOWED_QUESTION_TYPES)

    def test_well_formed_targeting_rules_are_accepted(self):
        payload = survey_payload(
            targetAudience={'cartValue': {'min': 10, 'max': 99.5}, 'orderCount': {'min': 1},
                            'productCategories': ['Shoes']},
            displayRules={'displayLocation': ['checkout'], 'startDate': '2024-05-01',
                          'endDate': '2024-07-01T00:00:00Z'},
            questions=[{'questionText': 'Q', 'questionType': 'rating', 'maxRating': 10}],
        )
        assert SurveyPayloadValidator.validate_create(payload, ALLOWED_QUESTION_TYPES) == (1, 'Checkout survey')


class TestResponsePayloadValidator:
    def test_valid(self):
        payload = {'surveyId': '5', 'responses': [], 'customerType': 'new'}
        # an empty list is present, not missing
        assert ResponsePayloadValidator.validate(payload) == 5

    def test_missing_fields_are_listed(self):
        with pytest.raises(ValidationError, match='Missing required fields: surveyId, customerType'):
            ResponsePayloadValidator.validate({'responses': {}})

    def test_customer_type(self):
        with pytest.raises(ValidationError, match='customerType'):
            ResponsePayloadValidator.validate({'surveyId': 1, 'responses': [], 'customerType': 'vip'})

    def test_metadata_must_be_object(self):
        with pytest.raises(ValidationError, match='metadata must be an object'):
            ResponsePayloadValidator.validate({
                'surveyId': 1, 'responses': [], 'customerType': 'new', 'metadata': ['x'],
            })
