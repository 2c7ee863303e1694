"""
Request validators.
Centralizes payload checks so views stay thin and messages stay consistent.
"""
import math
from datetime import datetime

from django.core.exceptions import ValidationError


class DateFilterValidator:
    """Validates date filters on analytics endpoints."""

    @staticmethod
    def validate_date_string(date_str, field_name="date"):
        """Accepts YYYY-MM-DD or a full ISO timestamp and returns a date."""
        if not date_str:
            return None

        for parser in (
            lambda s: datetime.strptime(s, '%Y-%m-%d').date(),
            lambda s: datetime.fromisoformat(s.replace('Z', '+00:00')).date(),
        ):
            try:
                return parser(date_str)
            except ValueError:
                continue
        raise ValidationError(
            f"Invalid {field_name} format. Use YYYY-MM-DD (e.g. 2024-12-31)"
        )

    @staticmethod
    def validate_date_range(start_date, end_date):
        if start_date and end_date and start_date > end_date:
            raise ValidationError("startDate cannot be after endDate")


class SurveyPayloadValidator:
    """Validates survey creation payloads."""

    @staticmethod
    def validate_id(value, field_name):
        if isinstance(value, bool):
            raise ValidationError(f"Invalid {field_name}")
        if isinstance(value, str):
            value = value.strip()
        try:
            numeric = int(value)
        except (TypeError, ValueError):
            raise ValidationError(f"Invalid {field_name}: '{value}'")
        if numeric <= 0:
            raise ValidationError(f"Invalid {field_name}: '{value}'")
        return numeric

    @staticmethod
    def validate_questions(questions, allowed_types):
        if not isinstance(questions, list) or not questions:
            raise ValidationError("questions must be a non-empty list")
        for position, question in enumerate(questions, 1):
            if not isinstance(question, dict):
                raise ValidationError(f"Question {position} must be an object")
            if not str(question.get('questionText') or '').strip():
                raise ValidationError(f"Question {position} is missing questionText")
            if question.get('questionType') not in allowed_types:
                raise ValidationError(
                    f"Question {position} has invalid questionType '{question.get('questionType')}'"
                )
            options = question.get('options')
            if options is not None and not isinstance(options, list):
                raise ValidationError(f"Question {position} options must be a list")
            for key in ('maxRating', 'maxLength'):
                value = question.get(key)
                if value is None:
                    continue
                if isinstance(value, bool) or not isinstance(value, int) or value <= 0:
                    raise ValidationError(f"Question {position} {key} must be a positive integer")
        return questions

    @staticmethod
    def validate_range(bounds, field_name):
        if bounds is None:
            return
        if not isinstance(bounds, dict):
            raise ValidationError(f"{field_name} must be an object")
        for side in ('min', 'max'):
            value = bounds.get(side)
            if value is None:
                continue
            if isinstance(value, bool) or not isinstance(value, (int, float)) or not math.isfinite(value):
                raise ValidationError(f"{field_name}.{side} must be a number")

    @staticmethod
    def validate_string_list(values, field_name):
        if values is None:
            return
        if not isinstance(values, list) or not all(isinstance(v, str) for v in values):
            raise ValidationError(f"{field_name} must be a list of strings")

    @staticmethod
    def validate_target_audience(audience):
        if not audience:
            return
        SurveyPayloadValidator.validate_range(audience.get('cartValue'), 'targetAudience.cartValue')
        SurveyPayloadValidator.validate_range(audience.get('orderCount'), 'targetAudience.orderCount')
        SurveyPayloadValidator.validate_string_list(
            audience.get('productCategories'), 'targetAudience.productCategories'
        )

    @staticmethod
    def validate_display_rules(rules):
        if not rules:
            return
        SurveyPayloadValidator.validate_string_list(
            rules.get('displayLocation'), 'displayRules.displayLocation'
        )
        for key in ('startDate', 'endDate'):
            value = rules.get(key)
            if value in (None, ''):
                continue
            if not isinstance(value, str):
                raise ValidationError(f"displayRules.{key} must be a date string")
            DateFilterValidator.validate_date_string(value, f"displayRules.{key}")

    @staticmethod
    def validate_create(payload, allowed_types):
        if not isinstance(payload, dict):
            raise ValidationError("Request body must be a JSON object")
        store_id = SurveyPayloadValidator.validate_id(payload.get('storeId'), 'storeId')
        title = str(payload.get('title') or '').strip()
        if not title:
            raise ValidationError("title is required")
        if len(title) > 200:
            raise ValidationError("title must be at most 200 characters")
        SurveyPayloadValidator.validate_questions(payload.get('questions'), allowed_types)
        priority = payload.get('priority')
        if priority is not None and (isinstance(priority, bool) or not isinstance(priority, int)):
            raise ValidationError("priority must be an integer")
        for key in ('targetAudience', 'displayRules', 'style'):
            if payload.get(key) is not None and not isinstance(payload[key], dict):
                raise ValidationError(f"{key} must be an object")
        SurveyPayloadValidator.validate_target_audience(payload.get('targetAudience'))
        SurveyPayloadValidator.validate_display_rules(payload.get('displayRules'))
        return store_id, title


class ResponsePayloadValidator:
    """Validates shopper submissions before they reach the aggregator."""

    CUSTOMER_TYPES = ('new', 'returning')

    @staticmethod
    def validate(payload):
        if not isinstance(payload, dict):
            raise ValidationError("Request body must be a JSON object")
        missing = [
            key for key in ('surveyId', 'responses', 'customerType')
            if payload.get(key) in (None, '')
        ]
        if missing:
            raise ValidationError(f"Missing required fields: {', '.join(missing)}")
        if not isinstance(payload['responses'], (list, dict)):
            raise ValidationError("responses must be a list or an object")
        if payload['customerType'] not in ResponsePayloadValidator.CUSTOMER_TYPES:
            raise ValidationError("customerType must be 'new' or 'returning'")
        survey_id = SurveyPayloadValidator.validate_id(payload['surveyId'], 'surveyId')
        metadata = payload.get('metadata')
        if metadata is not None and not isinstance(metadata, dict):
            raise ValidationError("metadata must be an object")
        return survey_id
