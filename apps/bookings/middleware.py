import logging

from .services import build_services

logger = logging.getLogger(__name__)


class BookingServicesMiddleware:
    """Attach the booking services to every request as ``request.booking``.

    Services are built once, when Django loads the middleware chain.
    """

    def __init__(self, get_response):
        self.get_response = get_response
        self.services = build_services()

    def __call__(self, request):
        request.booking = self.services
        response = self.get_response(request)
        return response
