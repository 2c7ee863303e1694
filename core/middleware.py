"""
CORS handling for the public API.
The checkout widget posts from storefront origins without credentials.
"""
from django.conf import settings
from django.http import HttpResponse


class ApiCorsMiddleware:
    """
    Adds CORS headers to ``/api/`` responses and answers preflight requests.
    """
    ALLOWED_METHODS = 'GET, POST, PATCH, DELETE, OPTIONS'
    ALLOWED_HEADERS = 'Content-Type, Authorization'

    def __init__(self, get_response):
        self.get_response = get_response

    def _applies(self, request):
        prefixes = getattr(settings, 'SURVEY_CORS_PATH_PREFIXES', ('/api/',))
        return request.path.startswith(tuple(prefixes))

    def __call__(self, request):
        if not self._applies(request):
            return self.get_response(request)

        if request.method == 'OPTIONS' and 'HTTP_ACCESS_CONTROL_REQUEST_METHOD' in request.META:
            response = HttpResponse(status=204)
        else:
            response = self.get_response(request)

        response['Access-Control-Allow-Origin'] = getattr(settings, 'SURVEY_CORS_ALLOW_ORIGIN', '*')
        response['Access-Control-Allow-Methods'] = self.ALLOWED_METHODS
        response['Access-Control-Allow-Headers'] = self.ALLOWED_HEADERS
        response['Access-Control-Max-Age'] = '86400'
        return response
