import logging
from urllib.parse import urlparse

from django.conf import settings
from django.http import JsonResponse
from django.shortcuts import resolve_url

logger = logging.getLogger(__name__)

# Bad credentials here are a real 401 and pass through untouched
AUTH_PREFIX = "/api/v1/auth/"


def redirects_to_login(response):
    if response.status_code != 302:
        return False
    target = urlparse(response.get("Location", "")).path
    return target == urlparse(resolve_url(settings.LOGIN_URL)).path


def session_expired(request):
    """JSON 401 the frontend treats as "log in again"."""
    logger.info("%s %s needs a session", request.method, request.path)
    return JsonResponse({
        "success": False,
        "error": "session_expired",
        "message": "Your session has expired. Please log in again.",
    }, status=401)


class SessionExpiredMiddleware:
    """
    An API client cannot follow the login redirect of ``login_required``, and
    an anonymous 401/403 from a role check means the same thing. Both become
    one session_expired response. Authenticated users keep their 403.
    """

    def __init__(self, get_response):
        self.get_response = get_response

    def __call__(self, request):
        response = self.get_response(request)

        if request.path.startswith(AUTH_PREFIX):
            return response

        if redirects_to_login(response):
            return session_expired(request)

        if response.status_code in (401, 403) and not request.user.is_authenticated:
            return session_expired(request)

        return response
