"""
Role checks for the JSON API.
"""
import logging
from functools import wraps

from django.http import JsonResponse

from .models import Profile

logger = logging.getLogger(__name__)


def get_profile(user):
    if not user.is_authenticated:
        return None
    return Profile.objects.filter(user=user).first()


def role_required(role):
    """
    Only lets through a logged-in user whose profile has the given role.
    The profile is attached to the request as ``request.profile``.
    """
    def decorator(view_func):
        @wraps(view_func)
        def _wrapped_view(request, *args, **kwargs):
            if not request.user.is_authenticated:
                return JsonResponse({
                    "success": False,
                    "error": "You need to log in"
                }, status=401)

            profile = get_profile(request.user)
            if profile is None:
                return JsonResponse({
                    "success": False,
                    "error": "Profile not found"
                }, status=403)

            if profile.role != role:
                logger.warning(
                    "User %s (%s) tried to reach a %s-only endpoint: %s",
                    request.user.id, profile.role, role, request.path,
                )
                return JsonResponse({
                    "success": False,
                    "error": "You are not allowed to do this"
                }, status=403)

            request.profile = profile
            return view_func(request, *args, **kwargs)
        return _wrapped_view
    return decorator


client_required = role_required(Profile.ROLE_CLIENT)
vendor_required = role_required(Profile.ROLE_VENDOR)
