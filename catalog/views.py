import logging

from django.contrib.auth.decorators import login_required
from django.db import DatabaseError
from django.db.models import ProtectedError, Q
from django.http import JsonResponse
from django.views.decorators.csrf import csrf_exempt

from accounts.decorators import vendor_required
from eventhub.utils import load_json_object, parse_decimal, parse_positive_int, sanitize_text
from .models import Service, ServiceCategory

logger = logging.getLogger(__name__)

PRICE_UNITS = dict(Service.PRICE_UNIT_CHOICES)


def clean_service_fields(data, partial=False):
    """
    Validates a service payload. Returns (fields, error); on a partial update
    only the keys present in ``data`` are checked.
    """
    fields = {}

    if not partial:
        for field in ['title', 'description', 'category_id', 'price']:
            if data.get(field) in (None, ""):
                return None, f"{field} is required"

    for field in ['title', 'description']:
        if data.get(field) is not None and not isinstance(data[field], str):
            return None, f"{field} must be text"

    if 'title' in data:
        title = sanitize_text(data['title'] or "")
        if not title:
            return None, "title cannot be empty"
        fields['title'] = title

    if 'description' in data:
        description = sanitize_text(data['description'] or "")
        if not description:
            return None, "description cannot be empty"
        fields['description'] = description

    if 'category_id' in data:
        try:
            fields['category'] = ServiceCategory.objects.get(id=data['category_id'])
        except (ServiceCategory.DoesNotExist, ValueError, TypeError):
            return None, "Invalid category"

    if 'price' in data:
        price = parse_decimal(data['price'])
        if price is None or price < 0:
            return None, "price must be a number of 0 or more"
        fields['price'] = price

    if 'price_unit' in data:
        if not isinstance(data['price_unit'], str) or data['price_unit'] not in PRICE_UNITS:
            return None, f"price_unit must be one of: {', '.join(PRICE_UNITS)}"
        fields['price_unit'] = data['price_unit']

    if 'is_available' in data:
        if not isinstance(data['is_available'], bool):
            return None, "is_available must be true or false"
        fields['is_available'] = data['is_available']

    return fields, None


# =============================================================================
# GET /api/v1/categories
# =============================================================================
@csrf_exempt
@login_required
def categories(request):
    if request.method != "GET":
        return JsonResponse({"error": "Only GET is allowed"}, status=405)

    result = [category.to_dict() for category in ServiceCategory.objects.order_by('name')]

    return JsonResponse({
        "success": True,
        "count": len(result),
        "categories": result
    })


# =============================================================================
# GET /api/v1/services
# Clients browse available services (?q=..., ?category=<id>)
# =============================================================================
@csrf_exempt
@login_required
def browse_services(request):
    if request.method != "GET":
        return JsonResponse({"error": "Only GET is allowed"}, status=405)

    queryset = Service.objects.filter(is_available=True).select_related('category', 'vendor')

    search = request.GET.get('q', '').strip()
    if search:
        queryset = queryset.filter(
            Q(title__icontains=search)
            | Q(description__icontains=search)
            | Q(vendor__full_name__icontains=search)
        )

    category_id = request.GET.get('category')
    if category_id:
        category_id = parse_positive_int(category_id)
        if category_id is None:
            return JsonResponse({"success": False, "error": "Invalid category"}, status=400)
        queryset = queryset.filter(category_id=category_id)

    result = [service.to_dict(with_vendor=True) for service in queryset.order_by('-created_at')]

    return JsonResponse({
        "success": True,
        "count": len(result),
        "services": result
    })


# =============================================================================
# GET/POST /api/v1/vendor/services
# Vendor: list own services | add a new one
# =============================================================================
@csrf_exempt
@vendor_required
def vendor_services(request):
    vendor = request.profile

    if request.method == "GET":
        services = Service.objects.filter(vendor=vendor).select_related('category').order_by('-created_at')
        result = [service.to_dict() for service in services]

        return JsonResponse({
            "success": True,
            "count": len(result),
            "services": result
        })

    elif request.method == "POST":
        data = load_json_object(request)
        if data is None:
            return JsonResponse({"success": False, "error": "Invalid JSON"}, status=400)

        fields, error = clean_service_fields(data)
        if error:
            return JsonResponse({"success": False, "error": error}, status=400)

        try:
            service = Service.objects.create(vendor=vendor, is_available=True, **fields)
        except DatabaseError:
            logger.exception("Could not add service for vendor %s", vendor.id)
            return JsonResponse({"success": False, "error": "Failed to add service"}, status=500)

        logger.info("Vendor %s added service %s", vendor.id, service.id)

        return JsonResponse({
            "success": True,
            "message": "Service added",
            "service": service.to_dict()
        }, status=201)

    return JsonResponse({"error": "Only GET or POST"}, status=405)


# =============================================================================
# PUT/DELETE /api/v1/vendor/services/{id}
# =============================================================================
@csrf_exempt
@vendor_required
def vendor_service_detail(request, id):
    # Another vendor's service looks the same as a missing one
    try:
        service = Service.objects.select_related('category').get(id=id, vendor=request.profile)
    except Service.DoesNotExist:
        return JsonResponse({"success": False, "error": "Service not found"}, status=404)

    if request.method == "PUT":
        data = load_json_object(request)
        if data is None:
            return JsonResponse({"success": False, "error": "Invalid JSON"}, status=400)

        fields, error = clean_service_fields(data, partial=True)
        if error:
            return JsonResponse({"success": False, "error": error}, status=400)
        if not fields:
            return JsonResponse({"success": False, "error": "No updatable field given"}, status=400)

        for name, value in fields.items():
            setattr(service, name, value)

        try:
            service.save()
        except DatabaseError:
            logger.exception("Could not update service %s", service.id)
            return JsonResponse({"success": False, "error": "Failed to update service"}, status=500)

        return JsonResponse({
            "success": True,
            "message": "Service updated",
            "service": service.to_dict()
        })

    elif request.method == "DELETE":
        try:
            service.delete()
        except ProtectedError:
            return JsonResponse({
                "success": False,
                "error": "This service has bids and cannot be deleted. Mark it unavailable instead."
            }, status=400)
        except DatabaseError:
            logger.exception("Could not delete service %s", id)
            return JsonResponse({"success": False, "error": "Failed to delete service"}, status=500)

        logger.info("Vendor %s deleted service %s", request.profile.id, id)
        return JsonResponse({"success": True, "message": "Service deleted"})

    return JsonResponse({"error": "Only PUT or DELETE"}, status=405)


# =============================================================================
# POST /api/v1/vendor/services/{id}/availability
# =============================================================================
@csrf_exempt
@vendor_required
def toggle_availability(request, id):
    if request.method != "POST":
        return JsonResponse({"error": "Only POST is allowed"}, status=405)

    try:
        service = Service.objects.select_related('category').get(id=id, vendor=request.profile)
    except Service.DoesNotExist:
        return JsonResponse({"success": False, "error": "Service not found"}, status=404)

    service.is_available = not service.is_available
    service.save(update_fields=['is_available', 'updated_at'])

    return JsonResponse({
        "success": True,
        "service": service.to_dict()
    })
