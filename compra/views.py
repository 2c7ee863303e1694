# compra/views.py
from django.http import JsonResponse


def custom_404(request, exception=None):
    """JSON 404 for unmatched routes."""
    return JsonResponse({'error': 'Not found', 'path': request.path}, status=404)


def custom_500(request):
    """JSON 500; the traceback goes to the error log, never to the client."""
    return JsonResponse({'error': 'Internal server error', 'message': None}, status=500)
