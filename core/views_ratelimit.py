"""
Rate limiting error handler for core app.
"""
from django.http import JsonResponse

from core.utils.logging_utils import log_security_event


def ratelimit_error(request, exception=None):
    """JSON 429 for the public widget endpoints."""
    log_security_event(
        'rate_limit_exceeded',
        severity='WARNING',
        path=request.path,
        ip=request.META.get('REMOTE_ADDR'),
    )
    return JsonResponse(
        {'error': 'Too many requests. Please try again later.'},
        status=429,
    )
