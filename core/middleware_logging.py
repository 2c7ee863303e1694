import logging
import time


class RequestLoggingMiddleware:
    def __init__(self, get_response):
        self.get_response = get_response
        self.logger = logging.getLogger("django.request")

    def __call__(self, request):
        client_ip = request.META.get("REMOTE_ADDR")
        method = request.method
        path = request.get_full_path()
        started = time.time()
        response = self.get_response(request)
        elapsed_ms = (time.time() - started) * 1000
        self.logger.info(f"[REQ] {method} {path} from {client_ip} -> {response.status_code} ({elapsed_ms:.1f}ms)")
        return response
