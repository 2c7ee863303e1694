"""
Error kinds shared by the survey pipeline.

Validation problems are raised as ``django.core.exceptions.ValidationError``;
the classes below cover the remaining cases the HTTP layer has to map.
"""


class SurveyAppError(Exception):
    """Base error carrying the HTTP status the API should answer with."""

    status_code = 500
    default_message = 'Internal server error'

    def __init__(self, message=None, **details):
        self.message = message or self.default_message
        self.details = details
        super().__init__(self.message)

    def as_payload(self, debug=False):
        payload = {'error': self.message}
        if self.details:
            payload.update(self.details)
        return payload


class NotFoundError(SurveyAppError):
    """A store or survey referenced by the request does not exist."""

    status_code = 404
    default_message = 'Not found'


class UpstreamError(SurveyAppError):
    """The document store or the commerce platform failed."""

    status_code = 500
    default_message = 'Upstream service failure'

    def __init__(self, message=None, detail=None, **details):
        super().__init__(message, **details)
        self.detail = detail

    def as_payload(self, debug=False):
        # Detail only leaks in development mode
        return {
            'error': self.message,
            'message': self.detail if debug else None,
        }
