from django.http import JsonResponse


def ratelimited_error(request, exception):
    return JsonResponse({
        "success": False,
        "error": "Too many requests. Please wait a moment and try again."
    }, status=429)
