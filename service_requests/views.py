import logging
from datetime import date

from django.db import DatabaseError, transaction
from django.db.models import Count
from django.http import JsonResponse
from django.utils import timezone
from django.views.decorators.csrf import csrf_exempt
from django_ratelimit.decorators import ratelimit

from accounts.decorators import client_required, vendor_required
from bids.models import Bid
from catalog.models import Service, ServiceCategory
from eventhub.utils import load_json_object, parse_decimal, parse_positive_int, sanitize_text
from .models import RequestItem, ServiceRequest

logger = logging.getLogger(__name__)


def is_visible_to_vendor(request_status, item_category_ids, vendor_category_ids):
    """
    A vendor sees an open request when at least one of its categories is a
    category the vendor offers a service in (available or not).
    """
    if request_status != ServiceRequest.STATUS_OPEN:
        return False
    return bool(set(item_category_ids) & set(vendor_category_ids))


def clean_request_fields(data):
    """
    Validates a new request payload before anything is written.
    Returns (fields, categories, error).
    """
    category_ids = data.get('category_ids')
    if not isinstance(category_ids, list) or not category_ids:
        return None, None, "Please select at least one service category"

    # duplicates collapse to one item, selection order is kept
    unique_ids = []
    for raw_id in category_ids:
        category_id = parse_positive_int(raw_id)
        if category_id is None:
            return None, None, "Invalid category"
        if category_id not in unique_ids:
            unique_ids.append(category_id)

    found = ServiceCategory.objects.in_bulk(unique_ids)
    if len(found) != len(unique_ids):
        return None, None, "Invalid category"
    categories = [found[category_id] for category_id in unique_ids]

    raw_date = data.get('event_date')
    if not raw_date:
        return None, None, "event_date is required"
    try:
        event_date = date.fromisoformat(str(raw_date))
    except ValueError:
        return None, None, "event_date must be a date (YYYY-MM-DD)"
    if event_date < timezone.localdate():
        return None, None, "event_date cannot be in the past"

    event_location = data.get('event_location')
    if not isinstance(event_location, str) or not sanitize_text(event_location):
        return None, None, "event_location is required"

    notes = data.get('notes')
    if notes is not None and not isinstance(notes, str):
        return None, None, "notes must be text"

    budgets = {}
    for field in ['budget_min', 'budget_max']:
        if data.get(field) in (None, ""):
            budgets[field] = None
            continue
        value = parse_decimal(data[field])
        if value is None or value < 0:
            return None, None, f"{field} must be a number of 0 or more"
        budgets[field] = value

    if budgets['budget_min'] is not None and budgets['budget_max'] is not None \
    and budgets['budget_min'] > budgets['budget_max']:
        return None, None, "budget_min cannot be greater than budget_max"

    fields = {
        "event_date": event_date,
        "event_location": sanitize_text(event_location),
        "notes": sanitize_text(notes) or None,
        **budgets,
    }
    return fields, categories, None


# =============================================================================
# GET/POST /api/v1/requests
# Client: list own requests | post a new one
# =============================================================================
@csrf_exempt
@client_required
@ratelimit(key='user', rate='20/m', method='POST', block=True)
def requests(request):
    client = request.profile

    if request.method == "GET":
        queryset = ServiceRequest.objects.filter(client=client)

        status_filter = request.GET.get('status')  # ?status=open
        if status_filter:
            if status_filter not in dict(ServiceRequest.STATUS_CHOICES):
                return JsonResponse({"success": False, "error": "Invalid status"}, status=400)
            queryset = queryset.filter(status=status_filter)

        queryset = queryset.annotate(bid_count=Count('bids')).prefetch_related('items__category')

        requests_list = []
        for service_request in queryset.order_by('-created_at'):
            data = service_request.to_dict(items=service_request.items.all())
            data["bid_count"] = service_request.bid_count
            requests_list.append(data)

        return JsonResponse({
            "success": True,
            "count": len(requests_list),
            "requests": requests_list
        })

    elif request.method == "POST":
        data = load_json_object(request)
        if data is None:
            return JsonResponse({"success": False, "error": "Invalid JSON"}, status=400)

        fields, categories, error = clean_request_fields(data)
        if error:
            return JsonResponse({"success": False, "error": error}, status=400)

        # request row and its items are written together or not at all
        try:
            with transaction.atomic():
                service_request = ServiceRequest.objects.create(
                    client=client,
                    status=ServiceRequest.STATUS_OPEN,
                    **fields
                )
                items = RequestItem.objects.bulk_create([
                    RequestItem(request=service_request, category=category)
                    for category in categories
                ])
        except DatabaseError:
            logger.exception("Could not create request for client %s", client.id)
            return JsonResponse({"success": False, "error": "Failed to create request"}, status=500)

        logger.info(
            "Client %s opened request %s for %d categories",
            client.id, service_request.id, len(items),
        )

        return JsonResponse({
            "success": True,
            "message": "Request created",
            "request": service_request.to_dict(items=items)
        }, status=201)

    return JsonResponse({"error": "Only GET or POST"}, status=405)


# =============================================================================
# GET /api/v1/requests/{id}
# =============================================================================
@csrf_exempt
@client_required
def request_detail(request, id):
    if request.method != "GET":
        return JsonResponse({"error": "Only GET is allowed"}, status=405)

    # Exists and belongs to this client?
    try:
        service_request = ServiceRequest.objects.get(id=id, client=request.profile)
    except ServiceRequest.DoesNotExist:
        return JsonResponse({"success": False, "error": "Request not found"}, status=404)

    data = service_request.to_dict(items=service_request.items.select_related('category'))
    data["bid_count"] = service_request.bids.count()

    return JsonResponse({
        "success": True,
        "request": data
    })


# =============================================================================
# GET /api/v1/vendor/requests
# Vendor: open requests in the categories the vendor offers
# =============================================================================
@csrf_exempt
@vendor_required
def vendor_requests(request):
    if request.method != "GET":
        return JsonResponse({"error": "Only GET is allowed"}, status=405)

    vendor = request.profile
    vendor_category_ids = set(
        Service.objects.filter(vendor=vendor).values_list('category_id', flat=True)
    )

    # candidates only; is_visible_to_vendor still decides
    open_requests = (
        ServiceRequest.objects.filter(
            status=ServiceRequest.STATUS_OPEN,
            id__in=RequestItem.objects.filter(category_id__in=vendor_category_ids).values('request_id')
        )
        .select_related('client')
        .prefetch_related('items__category')
        .annotate(bid_count=Count('bids'))
        .order_by('-created_at')
    )

    visible = [
        service_request for service_request in open_requests
        if is_visible_to_vendor(
            service_request.status,
            [item.category_id for item in service_request.items.all()],
            vendor_category_ids,
        )
    ]

    my_bids = {
        bid.request_id: bid
        for bid in Bid.objects.filter(vendor=vendor, request__in=[r.id for r in visible])
    }

    result = []
    for service_request in visible:
        data = service_request.to_dict(items=service_request.items.all())
        data["client"] = {
            "id": service_request.client.id,
            "full_name": service_request.client.full_name,
            "email": service_request.client.email,
            "phone": service_request.client.phone,
        }
        data["bid_count"] = service_request.bid_count
        my_bid = my_bids.get(service_request.id)
        data["my_bid"] = my_bid.to_dict() if my_bid else None
        result.append(data)

    return JsonResponse({
        "success": True,
        "count": len(result),
        "requests": result
    })
