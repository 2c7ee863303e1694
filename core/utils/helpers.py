"""
Shared request helpers: JSON body parsing, date filters and the ``api_view``
decorator that maps pipeline errors to JSON responses.
"""
import functools
import json
import logging

from django.conf import settings
from django.core.exceptions import ValidationError
from django.http import JsonResponse

from core.exceptions import NotFoundError, SurveyAppError
from core.validators import DateFilterValidator

logger = logging.getLogger(__name__)


def validation_message(exc: ValidationError) -> str:
    return '; '.join(str(m) for m in exc.messages)


def _reject_constant(name):
    raise ValidationError(f'Invalid JSON value {name} in request body')


def parse_json_body(request):
    """Decode the request body; an empty body is an empty object."""
    if not request.body:
        return {}
    try:
        return json.loads(request.body, parse_constant=_reject_constant)
    except (json.JSONDecodeError, UnicodeDecodeError):
        raise ValidationError('Invalid JSON in request body')


def parse_id(value, label='Survey'):
    """Path ids are integers; anything else cannot match a stored document."""
    try:
        return int(value)
    except (TypeError, ValueError):
        raise NotFoundError(f'{label} not found', id=value)


def api_view(view_func):
    """
    Wraps an async JSON view.

    ``ValidationError`` becomes 400, ``SurveyAppError`` uses its own status and
    anything else is logged and answered with a generic 500.
    """
    @functools.wraps(view_func)
    async def wrapper(request, *args, **kwargs):
        try:
            return await view_func(request, *args, **kwargs)
        except ValidationError as exc:
            return JsonResponse({'error': validation_message(exc)}, status=400)
        except SurveyAppError as exc:
            if exc.status_code >= 500:
                logger.error(f"[API_ERROR] {request.method} {request.path}: {exc.message}")
            return JsonResponse(exc.as_payload(debug=settings.DEBUG), status=exc.status_code)
        except Exception as exc:
            logger.error(f"[API_ERROR] {request.method} {request.path}: {exc}", exc_info=True)
            return JsonResponse({
                'error': 'Internal server error',
                'message': str(exc) if settings.DEBUG else None,
            }, status=500)
    return wrapper


class DateFilterHelper:
    """Builds document-store filters for a date window."""

    @staticmethod
    def build_filters(start=None, end=None, date_field='created_at'):
        """
        Returns lookups for an inclusive [start, end] window on ``date_field``.

        Raises:
            ValidationError: if either date is malformed or start > end
        """
        filters = {}
        start_date = DateFilterValidator.validate_date_string(start, 'startDate')
        end_date = DateFilterValidator.validate_date_string(end, 'endDate')
        DateFilterValidator.validate_date_range(start_date, end_date)
        if start_date:
            filters[f'{date_field}__date__gte'] = start_date
        if end_date:
            filters[f'{date_field}__date__lte'] = end_date
        return filters

    @staticmethod
    def build_date_range_label(start=None, end=None):
        if start and end:
            return f"{start} to {end}"
        if start:
            return f"Since {start}"
        if end:
            return f"Until {end}"
        return "All time"


def absolute_url(request, path):
    """Public URL for ``path``; PUBLIC_BASE_URL wins over the request host."""
    base = getattr(settings, 'PUBLIC_BASE_URL', '')
    return f"{base.rstrip('/')}{path}" if base else request.build_absolute_uri(path)
