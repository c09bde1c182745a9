import logging

from django.contrib.auth import authenticate
from django.contrib.auth import login as auth_login
from django.contrib.auth import logout as auth_logout
from django.contrib.auth.decorators import login_required
from django.contrib.auth.models import User
from django.db import DatabaseError, transaction
from django.http import JsonResponse
from django.views.decorators.csrf import csrf_exempt
from django_ratelimit.decorators import ratelimit

from eventhub.utils import load_json_object
from .models import Profile

logger = logging.getLogger(__name__)

MIN_PASSWORD_LENGTH = 6


@csrf_exempt
@ratelimit(key='ip', rate='10/m', method='POST', block=True)
def register(request):
    if request.method != "POST":
        return JsonResponse({"error": "Only POST is allowed"}, status=405)

    data = load_json_object(request)
    if data is None:
        return JsonResponse({"success": False, "error": "Invalid JSON"}, status=400)

    required_fields = ['full_name', 'email', 'password', 'role']
    for field in required_fields:
        if not data.get(field):
            return JsonResponse({
                "success": False,
                "error": f"{field} is required"
            }, status=400)
        if not isinstance(data[field], str):
            return JsonResponse({"success": False, "error": f"{field} must be text"}, status=400)

    phone = data.get('phone') or None
    if phone is not None and not isinstance(phone, str):
        return JsonResponse({"success": False, "error": "phone must be text"}, status=400)

    role = data['role']
    if role not in dict(Profile.ROLE_CHOICES):
        return JsonResponse({
            "success": False,
            "error": "role must be 'client' or 'vendor'"
        }, status=400)

    if len(data['password']) < MIN_PASSWORD_LENGTH:
        return JsonResponse({
            "success": False,
            "error": f"Password must be at least {MIN_PASSWORD_LENGTH} characters"
        }, status=400)

    email = data['email'].strip().lower()
    if User.objects.filter(email=email).exists():
        return JsonResponse({
            "success": False,
            "error": "This email is already registered"
        }, status=400)

    try:
        with transaction.atomic():
            # User first (holds the password), then the profile bound to it
            user = User.objects.create_user(
                username=email,
                email=email,
                password=data['password']
            )
            profile = Profile.objects.create(
                user=user,
                full_name=data['full_name'].strip(),
                email=email,
                phone=phone,
                role=role
            )
    except DatabaseError:
        logger.exception("Registration failed for %s", email)
        return JsonResponse({"success": False, "error": "Registration failed. Please try again."}, status=500)

    auth_login(request, user)
    logger.info("Registered %s profile %s", profile.role, profile.id)

    return JsonResponse({
        "success": True,
        "user": profile.to_dict()
    }, status=201)


@csrf_exempt
@ratelimit(key='ip', rate='20/m', method='POST', block=True)
def login(request):
    if request.method != "POST":
        return JsonResponse({"error": "Only POST is allowed"}, status=405)

    data = load_json_object(request)
    if data is None:
        return JsonResponse({"success": False, "error": "Invalid JSON"}, status=400)

    email = data.get('email')
    password = data.get('password')

    if not isinstance(email, str) or not isinstance(password, str) or not email or not password:
        return JsonResponse({
            "success": False,
            "error": "Email and password are required"
        }, status=400)

    user = User.objects.filter(email=email.strip().lower()).first()
    if user is None:
        return JsonResponse({"success": False, "error": "User not found"}, status=404)

    auth_user = authenticate(username=user.username, password=password)
    if auth_user is None:
        return JsonResponse({
            "success": False,
            "error": "Wrong password"
        }, status=401)

    profile = Profile.objects.filter(user=auth_user).first()
    if profile is None:
        return JsonResponse({
            "success": False,
            "error": "Profile not found"
        }, status=404)

    auth_login(request, auth_user)

    return JsonResponse({
        "success": True,
        "user": profile.to_dict()
    })


@csrf_exempt
def logout(request):
    if request.method != "POST":
        return JsonResponse({"error": "Only POST is allowed"}, status=405)

    auth_logout(request)
    return JsonResponse({"success": True, "message": "Logged out"})


@csrf_exempt
@login_required
def me(request):
    try:
        profile = Profile.objects.get(user=request.user)
    except Profile.DoesNotExist:
        return JsonResponse({"success": False, "error": "Profile not found"}, status=404)

    if request.method == "GET":
        return JsonResponse({"success": True, "user": profile.to_dict()})

    elif request.method == "PUT":
        payload = load_json_object(request)
        if payload is None:
            return JsonResponse({"success": False, "error": "Invalid JSON"}, status=400)

        # role and email are fixed after signup
        allowed_fields = ["full_name", "phone"]

        updated = False
        for field in allowed_fields:
            if field in payload:
                if payload[field] is not None and not isinstance(payload[field], str):
                    return JsonResponse({"success": False, "error": f"{field} must be text"}, status=400)
                setattr(profile, field, payload[field])
                updated = True

        if not updated:
            return JsonResponse({"success": False, "error": "No updatable field given"}, status=400)

        if not profile.full_name:
            return JsonResponse({"success": False, "error": "full_name cannot be empty"}, status=400)

        profile.save()
        return JsonResponse({"success": True, "message": "Profile updated", "user": profile.to_dict()})

    return JsonResponse({"error": "Only GET or PUT"}, status=405)
