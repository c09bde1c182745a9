import logging

from django.contrib.auth.decorators import login_required
from django.db import DatabaseError, transaction
from django.http import JsonResponse
from django.utils import timezone
from django.views.decorators.csrf import csrf_exempt
from django_ratelimit.decorators import ratelimit

from accounts.decorators import client_required, get_profile, vendor_required
from catalog.models import Service
from chat.models import Conversation
from eventhub.utils import load_json_object, parse_decimal, parse_positive_int, sanitize_text
from service_requests.models import ServiceRequest
from .models import Bid

logger = logging.getLogger(__name__)


def flag_lowest_bid(bids):
    """
    Id of the bid to highlight as lowest, or None once a bid is awarded.
    Strict minimum over the list as given, so ties go to the earlier bid.
    Withdrawn bids are not candidates.
    """
    if any(bid.status == Bid.STATUS_AWARDED for bid in bids):
        return None

    lowest = None
    for bid in bids:
        if bid.status == Bid.STATUS_WITHDRAWN:
            continue
        if lowest is None or bid.amount < lowest.amount:
            lowest = bid
    return lowest.id if lowest else None


def clean_bid_fields(data):
    """Returns (fields, error); nothing is looked up in the database here."""
    service_id = data.get('service_id')
    if not service_id:
        return None, "Please select a service"

    amount = parse_decimal(data.get('amount'))
    if amount is None or amount <= 0:
        return None, "Please enter a valid bid amount"

    message = data.get('message')
    if not isinstance(message, str) or not sanitize_text(message):
        return None, "message is required"

    delivery_days = data.get('delivery_days')
    if delivery_days in (None, ""):
        delivery_days = None
    else:
        # whole days only, 3.7 is not rounded
        delivery_days = parse_positive_int(delivery_days)
        if delivery_days is None:
            return None, "delivery_days must be a whole number of days"

    return {
        "service_id": service_id,
        "amount": amount,
        "message": sanitize_text(message),
        "delivery_days": delivery_days,
    }, None


# =============================================================================
# GET/POST /api/v1/requests/{requestId}/bids
# GET: client sees the bids on their request | POST: vendor places a bid
# =============================================================================
@csrf_exempt
@login_required
@ratelimit(key='user', rate='20/m', method='POST', block=True)
def request_bids(request, request_id):
    profile = get_profile(request.user)
    if profile is None:
        return JsonResponse({"success": False, "error": "Profile not found"}, status=403)

    if request.method == "GET":
        if not profile.is_client:
            return JsonResponse({"success": False, "error": "You are not allowed to do this"}, status=403)
        return list_bids(request, profile, request_id)

    elif request.method == "POST":
        if not profile.is_vendor:
            return JsonResponse({"success": False, "error": "Only vendors can place bids"}, status=403)
        return submit_bid(request, profile, request_id)

    return JsonResponse({"error": "Only GET or POST"}, status=405)


def list_bids(request, client, request_id):
    # Exists and belongs to this client?
    try:
        service_request = ServiceRequest.objects.get(id=request_id)
    except ServiceRequest.DoesNotExist:
        return JsonResponse({"success": False, "error": "Request not found"}, status=404)

    if service_request.client_id != client.id:
        return JsonResponse({"success": False, "error": "This request is not yours"}, status=403)

    bids = list(
        Bid.objects.filter(request=service_request)
        .select_related('vendor', 'service__category')
        .order_by('-created_at', '-id')
    )

    lowest_id = flag_lowest_bid(bids)
    awarded = next((bid for bid in bids if bid.status == Bid.STATUS_AWARDED), None)

    result = []
    for bid in bids:
        data = bid.to_dict(with_vendor=True, with_service=True)
        data["is_lowest"] = bid.id == lowest_id
        result.append(data)

    return JsonResponse({
        "success": True,
        "request": service_request.to_dict(),
        "count": len(result),
        "awarded_bid_id": awarded.id if awarded else None,
        "bids": result
    })


def submit_bid(request, vendor, request_id):
    data = load_json_object(request)
    if data is None:
        return JsonResponse({"success": False, "error": "Invalid JSON"}, status=400)

    fields, error = clean_bid_fields(data)
    if error:
        return JsonResponse({"success": False, "error": error}, status=400)

    try:
        service_request = ServiceRequest.objects.select_related('client').get(id=request_id)
    except ServiceRequest.DoesNotExist:
        return JsonResponse({"success": False, "error": "Request not found"}, status=404)

    if not service_request.is_open:
        return JsonResponse({"success": False, "error": "This request is closed"}, status=400)

    # Only one of the vendor's own, available services
    try:
        service = Service.objects.get(id=fields['service_id'], vendor=vendor, is_available=True)
    except (Service.DoesNotExist, ValueError, TypeError):
        return JsonResponse({"success": False, "error": "Please select one of your available services"}, status=400)

    existing = Bid.objects.filter(request=service_request, vendor=vendor).first()
    if existing:
        return JsonResponse({
            "success": False,
            "error": f"You already bid {existing.amount} on this request (status: {existing.status})"
        }, status=400)

    try:
        with transaction.atomic():
            bid = Bid.objects.create(
                request=service_request,
                vendor=vendor,
                service=service,
                amount=fields['amount'],
                delivery_days=fields['delivery_days'],
                message=fields['message'],
                status=Bid.STATUS_PENDING
            )
            Conversation.objects.get_or_create(
                request=service_request,
                client=service_request.client,
                vendor=vendor
            )
    except DatabaseError:
        logger.exception("Could not place bid of vendor %s on request %s", vendor.id, request_id)
        return JsonResponse({"success": False, "error": "Failed to place bid"}, status=500)

    logger.info("Vendor %s bid %s on request %s", vendor.id, bid.amount, service_request.id)

    return JsonResponse({
        "success": True,
        "message": "Bid placed",
        "bid": bid.to_dict(),
        "hints": {
            "difference_from_standard_price": str(bid.amount - service.price),
            "exceeds_budget": service_request.budget_max is not None and bid.amount > service_request.budget_max,
        }
    }, status=201)


# =============================================================================
# POST /api/v1/bids/{id}/award
# Client: award one bid, close the request, reject the rest
# =============================================================================
@csrf_exempt
@client_required
@ratelimit(key='user', rate='10/m', method='POST', block=True)
def award_bid(request, id):
    if request.method != "POST":
        return JsonResponse({"error": "Only POST is allowed"}, status=405)

    client = request.profile

    try:
        with transaction.atomic():
            try:
                bid = Bid.objects.select_related('vendor').get(id=id)
            except Bid.DoesNotExist:
                return JsonResponse({"success": False, "error": "Bid not found"}, status=404)

            # Lock the request so two awards cannot both pass the checks below
            service_request = ServiceRequest.objects.select_for_update().get(id=bid.request_id)

            if service_request.client_id != client.id:
                logger.warning("Client %s tried to award bid %s on a foreign request", client.id, id)
                return JsonResponse({"success": False, "error": "This bid is not on your request"}, status=403)

            if not service_request.is_open:
                return JsonResponse({"success": False, "error": "This request is already closed"}, status=400)

            if Bid.objects.filter(request=service_request, status=Bid.STATUS_AWARDED).exists():
                return JsonResponse({"success": False, "error": "A bid has already been awarded"}, status=400)

            if bid.status != Bid.STATUS_PENDING:
                return JsonResponse({
                    "success": False,
                    "error": f"This bid is already {bid.status}"
                }, status=400)

            now = timezone.now()

            # 1. award the chosen bid
            bid.status = Bid.STATUS_AWARDED
            bid.awarded_at = now
            bid.save(update_fields=['status', 'awarded_at', 'updated_at'])

            # 2. close the request for the chosen vendor
            service_request.awarded_vendor = bid.vendor
            service_request.status = ServiceRequest.STATUS_CLOSED
            service_request.save(update_fields=['awarded_vendor', 'status', 'updated_at'])

            # 3. reject every other bid
            rejected = Bid.objects.filter(request=service_request).exclude(id=bid.id).update(
                status=Bid.STATUS_REJECTED, awarded_at=None, updated_at=now
            )
    except DatabaseError:
        logger.exception("Award of bid %s failed", id)
        return JsonResponse({"success": False, "error": "Failed to award bid. Please try again."}, status=500)

    logger.info(
        "Client %s awarded bid %s on request %s to vendor %s (%d rejected)",
        client.id, bid.id, service_request.id, bid.vendor_id, rejected,
    )

    return JsonResponse({
        "success": True,
        "message": "Bid awarded",
        "bid": bid.to_dict(),
        "request": service_request.to_dict(),
        "rejected_count": rejected
    })


# =============================================================================
# POST /api/v1/bids/{id}/withdraw
# Vendor: pull back a pending bid while the request is still open
# =============================================================================
@csrf_exempt
@vendor_required
def withdraw_bid(request, id):
    if request.method != "POST":
        return JsonResponse({"error": "Only POST is allowed"}, status=405)

    try:
        bid = Bid.objects.select_related('request').get(id=id, vendor=request.profile)
    except Bid.DoesNotExist:
        return JsonResponse({"success": False, "error": "Bid not found"}, status=404)

    if bid.status != Bid.STATUS_PENDING:
        return JsonResponse({"success": False, "error": f"This bid is already {bid.status}"}, status=400)

    if not bid.request.is_open:
        return JsonResponse({"success": False, "error": "This request is closed"}, status=400)

    # Re-checked in the UPDATE itself so an award landing in between wins
    withdrawn = Bid.objects.filter(
        id=bid.id,
        status=Bid.STATUS_PENDING,
        request__status=ServiceRequest.STATUS_OPEN
    ).update(status=Bid.STATUS_WITHDRAWN, updated_at=timezone.now())

    if not withdrawn:
        logger.warning("Withdraw of bid %s lost to a concurrent change", bid.id)
        return JsonResponse({"success": False, "error": "This bid can no longer be withdrawn"}, status=400)

    bid.refresh_from_db()
    logger.info("Vendor %s withdrew bid %s", request.profile.id, bid.id)

    return JsonResponse({"success": True, "message": "Bid withdrawn", "bid": bid.to_dict()})


# =============================================================================
# GET /api/v1/vendor/bids
# =============================================================================
@csrf_exempt
@vendor_required
def vendor_bids(request):
    if request.method != "GET":
        return JsonResponse({"error": "Only GET is allowed"}, status=405)

    bids = (
        Bid.objects.filter(vendor=request.profile)
        .select_related('request', 'service__category')
        .order_by('-created_at')
    )

    status_filter = request.GET.get('status')
    if status_filter:
        if status_filter not in dict(Bid.STATUS_CHOICES):
            return JsonResponse({"success": False, "error": "Invalid status"}, status=400)
        bids = bids.filter(status=status_filter)

    result = []
    for bid in bids:
        data = bid.to_dict(with_service=True)
        data["request"] = {
            "id": bid.request.id,
            "event_date": bid.request.event_date.isoformat(),
            "event_location": bid.request.event_location,
            "status": bid.request.status,
        }
        result.append(data)

    return JsonResponse({
        "success": True,
        "count": len(result),
        "bids": result
    })
