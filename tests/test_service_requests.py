from datetime import timedelta

import pytest
from django.utils import timezone

from service_requests.models import RequestItem, ServiceRequest
from service_requests.views import is_visible_to_vendor

pytestmark = pytest.mark.django_db


def request_payload(category_ids, **overrides):
    payload = {
        "category_ids": category_ids,
        "event_date": (timezone.localdate() + timedelta(days=14)).isoformat(),
        "event_location": "Stellenbosch Wine Estate",
        "budget_min": 2000,
        "budget_max": 3000,
        "notes": "Outdoor, about 80 guests",
    }
    payload.update(overrides)
    return payload


def test_create_request_opens_with_one_item_per_category(client_profile, login, category):
    catering, photo = category("Catering"), category("Photography")

    response = login(client_profile).post(
        "/api/v1/requests", request_payload([catering.id, photo.id]), content_type="application/json"
    )

    assert response.status_code == 201
    service_request = ServiceRequest.objects.get()
    assert service_request.status == ServiceRequest.STATUS_OPEN
    assert service_request.client == client_profile
    assert service_request.awarded_vendor is None
    assert set(service_request.items.values_list("category_id", flat=True)) == {catering.id, photo.id}
    assert [i["category"]["name"] for i in response.json()["request"]["items"]] == ["Catering", "Photography"]


def test_duplicate_categories_collapse(client_profile, login, category):
    catering = category("Catering")

    login(client_profile).post(
        "/api/v1/requests", request_payload([catering.id, catering.id]), content_type="application/json"
    )

    assert RequestItem.objects.count() == 1


def test_event_today_is_allowed(client_profile, login, category):
    response = login(client_profile).post(
        "/api/v1/requests",
        request_payload([category("Venue").id], event_date=timezone.localdate().isoformat()),
        content_type="application/json",
    )

    assert response.status_code == 201


@pytest.mark.parametrize("overrides, message", [
    ({"category_ids": []}, "Please select at least one service category"),
    ({"category_ids": [424242]}, "Invalid category"),
    ({"category_ids": ["\u00b2"]}, "Invalid category"),
    ({"category_ids": [1.5]}, "Invalid category"),
    ({"event_date": "2001-01-01"}, "event_date cannot be in the past"),
    ({"event_date": "next friday"}, "event_date must be a date (YYYY-MM-DD)"),
    ({"event_location": "   "}, "event_location is required"),
    ({"event_location": 42}, "event_location is required"),
    ({"notes": ["outdoor"]}, "notes must be text"),
    ({"budget_min": -5}, "budget_min must be a number of 0 or more"),
    ({"budget_min": 5000, "budget_max": 3000}, "budget_min cannot be greater than budget_max"),
])
def test_create_request_validation_writes_nothing(client_profile, login, category, overrides, message):
    payload = request_payload([category("Catering").id])
    payload.update(overrides)

    response = login(client_profile).post("/api/v1/requests", payload, content_type="application/json")

    assert response.status_code == 400
    assert response.json()["error"] == message
    assert not ServiceRequest.objects.exists()
    assert not RequestItem.objects.exists()


def test_request_text_is_stored_as_plain_text(client_profile, login, category):
    response = login(client_profile).post(
        "/api/v1/requests",
        request_payload([category("Venue").id], event_location="Hall A & B", notes="<b>budget</b> < 500 please"),
        content_type="application/json",
    )

    assert response.status_code == 201
    assert response.json()["request"]["event_location"] == "Hall A & B"
    service_request = ServiceRequest.objects.get()
    assert service_request.event_location == "Hall A & B"
    assert service_request.notes == "budget < 500 please"


def test_create_request_needs_a_json_object(client_profile, login):
    response = login(client_profile).post("/api/v1/requests", [1, 2], content_type="application/json")

    assert response.status_code == 400
    assert response.json()["error"] == "Invalid JSON"
    assert not ServiceRequest.objects.exists()


def test_vendor_cannot_create_request(vendor_profile, login, category):
    response = login(vendor_profile).post(
        "/api/v1/requests", request_payload([category("Catering").id]), content_type="application/json"
    )

    assert response.status_code == 403
    assert not ServiceRequest.objects.exists()


def test_client_lists_own_requests(client_profile, vendor_profile, make_profile, make_request, make_service, make_bid, login, category):
    catering = category("Catering")
    mine = make_request(client_profile, [catering])
    make_request(client_profile, [catering], status=ServiceRequest.STATUS_CLOSED)
    make_request(make_profile("other@example.com", "client"), [catering])
    make_bid(mine, make_service(vendor_profile, catering), "1500")
    http = login(client_profile)

    body = http.get("/api/v1/requests").json()
    assert body["count"] == 2

    open_only = http.get("/api/v1/requests", {"status": "open"}).json()
    assert open_only["count"] == 1
    assert open_only["requests"][0]["bid_count"] == 1
    assert open_only["requests"][0]["items"][0]["category"]["name"] == "Catering"


def test_request_detail_is_owner_only(client_profile, make_profile, make_request, login, category):
    service_request = make_request(client_profile, [category("Catering")])
    stranger = make_profile("stranger@example.com", "client")

    assert login(client_profile).get(f"/api/v1/requests/{service_request.id}").status_code == 200
    assert login(stranger).get(f"/api/v1/requests/{service_request.id}").status_code == 404


def test_vendor_sees_requests_in_own_categories(client_profile, vendor_profile, make_request, make_service, login, category):
    catering, photo = category("Catering"), category("Photography")
    make_service(vendor_profile, catering)
    catering_request = make_request(client_profile, [catering, photo])
    make_request(client_profile, [photo])

    body = login(vendor_profile).get("/api/v1/vendor/requests").json()

    assert [r["id"] for r in body["requests"]] == [catering_request.id]
    assert body["requests"][0]["client"]["full_name"] == "Hana Host"
    assert body["requests"][0]["my_bid"] is None


def test_vendor_never_sees_requests_outside_their_categories(client_profile, vendor_profile, make_request, make_service, login, category):
    make_service(vendor_profile, category("Catering"))
    make_request(client_profile, [category("Photography")])
    make_request(client_profile, [category("Venue"), category("Florist")])

    body = login(vendor_profile).get("/api/v1/vendor/requests").json()

    assert body["count"] == 0


def test_visibility_ignores_service_availability(client_profile, vendor_profile, make_request, make_service, login, category):
    catering = category("Catering")
    make_service(vendor_profile, catering, is_available=False)
    make_request(client_profile, [catering])

    assert login(vendor_profile).get("/api/v1/vendor/requests").json()["count"] == 1


def test_closed_requests_are_hidden_from_vendors(client_profile, vendor_profile, make_request, make_service, login, category):
    catering = category("Catering")
    make_service(vendor_profile, catering)
    make_request(client_profile, [catering], status=ServiceRequest.STATUS_CLOSED)

    assert login(vendor_profile).get("/api/v1/vendor/requests").json()["count"] == 0


def test_vendor_listing_carries_own_bid(client_profile, vendor_profile, make_request, make_service, make_bid, login, category):
    catering = category("Catering")
    service = make_service(vendor_profile, catering)
    service_request = make_request(client_profile, [catering])
    make_bid(service_request, service, "1800")

    entry = login(vendor_profile).get("/api/v1/vendor/requests").json()["requests"][0]

    assert entry["bid_count"] == 1
    assert entry["my_bid"]["amount"] == "1800.00"


@pytest.mark.parametrize("status, items, vendor_categories, expected", [
    ("open", [1, 2], {2, 3}, True),
    ("open", [1], {2}, False),
    ("open", [], {1}, False),
    ("open", [1], set(), False),
    ("closed", [1], {1}, False),
])
def test_is_visible_to_vendor(status, items, vendor_categories, expected):
    assert is_visible_to_vendor(status, items, vendor_categories) is expected


def test_request_matching_several_vendor_categories_is_listed_once(client_profile, vendor_profile, make_profile, make_request, make_service, make_bid, login, category):
    catering, photo = category("Catering"), category("Photography")
    make_service(vendor_profile, catering)
    make_service(vendor_profile, photo)
    service_request = make_request(client_profile, [catering, photo])
    make_bid(service_request, make_service(make_profile("lens@example.com", "vendor"), photo), "900")

    body = login(vendor_profile).get("/api/v1/vendor/requests").json()

    assert body["count"] == 1
    assert body["requests"][0]["bid_count"] == 1
