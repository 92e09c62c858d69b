"""Tests for the contact form endpoint."""

from datetime import UTC, datetime, timedelta

from fastapi import status

from gatehouse.models.contact import Contact, ContactStatus

CONTACT_URL = "/api/v1/contact"
CLIENT_HEADERS = {"X-Forwarded-For": "1.2.3.4"}


def _payload(**overrides) -> dict[str, str]:
    data = {
        "name": "Ann Smith",
        "email": "ann@example.com",
        "subject": "Question about pricing",
        "message": "Could you tell me more about the plans?",
    }
    data.update(overrides)
    return data


def test_fourth_submission_within_window_is_limited(client) -> None:
    first_request_at = datetime.now(UTC)
    remaining = []
    for _ in range(3):
        r = client.post(CONTACT_URL, json=_payload(), headers=CLIENT_HEADERS)
        assert r.status_code == status.HTTP_201_CREATED
        remaining.append(r.headers["X-RateLimit-Remaining"])
    assert remaining == ["2", "1", "0"]

    r = client.post(CONTACT_URL, json=_payload(), headers=CLIENT_HEADERS)
    assert r.status_code == status.HTTP_429_TOO_MANY_REQUESTS
    assert r.headers["X-RateLimit-Remaining"] == "0"

    detail = r.json()["detail"]
    assert detail["message"] == "Too many requests, please try again later"
    assert r.headers["X-RateLimit-Reset"] == detail["reset_time"]
    reset_at = datetime.fromisoformat(detail["reset_time"].replace("Z", "+00:00"))
    assert abs(reset_at - (first_request_at + timedelta(minutes=15))) < timedelta(seconds=30)


def test_other_callers_keep_their_own_quota(client) -> None:
    for _ in range(3):
        client.post(CONTACT_URL, json=_payload(), headers=CLIENT_HEADERS)
    assert client.post(CONTACT_URL, json=_payload(), headers=CLIENT_HEADERS).status_code == 429

    r = client.post(CONTACT_URL, json=_payload(), headers={"X-Forwarded-For": "5.6.7.8"})
    assert r.status_code == status.HTTP_201_CREATED


def test_submission_is_stored(client, db_session) -> None:
    r = client.post(CONTACT_URL, json=_payload(phone="+4412345678901"), headers=CLIENT_HEADERS)
    assert r.status_code == status.HTTP_201_CREATED
    body = r.json()
    assert body["success"] is True

    contact = db_session.get(Contact, body["data"]["id"])
    assert contact is not None
    assert contact.status is ContactStatus.PENDING
    assert contact.phone == "+4412345678901"
    assert contact.user_id is None


def test_submission_links_signed_in_user(client, db_session, test_user, sign_in_as) -> None:
    sign_in_as(test_user)
    r = client.post(CONTACT_URL, json=_payload(), headers=CLIENT_HEADERS)
    assert r.status_code == status.HTTP_201_CREATED
    assert db_session.get(Contact, r.json()["data"]["id"]).user_id == test_user.id


def test_markup_is_stripped_before_storage(client, db_session) -> None:
    payload = _payload(message="<script>alert(1)</script>Hello, <b>please</b> call me back")
    r = client.post(CONTACT_URL, json=payload, headers=CLIENT_HEADERS)
    assert r.status_code == status.HTTP_201_CREATED
    assert db_session.get(Contact, r.json()["data"]["id"]).message == "Hello, please call me back"


def test_invalid_submission_reports_field_errors(client) -> None:
    r = client.post(
        CONTACT_URL,
        json=_payload(name="A1", email="nope", subject="Hi", phone="12345"),
        headers=CLIENT_HEADERS,
    )
    assert r.status_code == status.HTTP_400_BAD_REQUEST
    errors = r.json()["detail"]["errors"]
    assert {"name", "email", "subject", "phone"} <= errors.keys()
    assert errors["email"] == ["Please enter a valid email address"]


def test_malformed_json_is_rejected(client) -> None:
    r = client.post(
        CONTACT_URL,
        content=b"{not json",
        headers={**CLIENT_HEADERS, "Content-Type": "application/json"},
    )
    assert r.status_code == status.HTTP_400_BAD_REQUEST
    assert r.json()["detail"]["message"] == "Invalid request format"


def test_cross_origin_post_is_rejected_without_using_quota(client) -> None:
    r = client.post(
        CONTACT_URL,
        json=_payload(),
        headers={**CLIENT_HEADERS, "Origin": "https://evil.test"},
    )
    assert r.status_code == status.HTTP_403_FORBIDDEN
    assert r.json()["detail"] == "Request origin verification failed"

    r = client.post(CONTACT_URL, json=_payload(), headers={**CLIENT_HEADERS, "Origin": "http://testserver"})
    assert r.status_code == status.HTTP_201_CREATED
    assert r.headers["X-RateLimit-Remaining"] == "2"


def test_disallowed_content_type_is_rejected(client) -> None:
    r = client.post(
        CONTACT_URL,
        content=b"name=Ann",
        headers={**CLIENT_HEADERS, "Content-Type": "text/plain"},
    )
    assert r.status_code == status.HTTP_403_FORBIDDEN


def test_listing_requires_admin(client, test_user, sign_in_as) -> None:
    assert client.get(CONTACT_URL).status_code == status.HTTP_401_UNAUTHORIZED

    sign_in_as(test_user)
    r = client.get(CONTACT_URL)
    assert r.status_code == status.HTTP_403_FORBIDDEN
    assert r.json()["detail"] == "Insufficient permissions to access this resource"


def test_admin_lists_and_filters_contacts(client, db_session, admin_user, sign_in_as) -> None:
    for index in range(3):
        client.post(CONTACT_URL, json=_payload(subject=f"Question number {index}"), headers=CLIENT_HEADERS)
    resolved = db_session.query(Contact).filter(Contact.subject == "Question number 0").one()
    resolved.status = ContactStatus.RESOLVED
    db_session.commit()

    sign_in_as(admin_user)
    r = client.get(CONTACT_URL, params={"page": 1, "limit": 2})
    assert r.status_code == status.HTTP_200_OK
    body = r.json()
    assert len(body["data"]) == 2
    assert body["pagination"] == {"page": 1, "limit": 2, "total": 3, "pages": 2}

    r = client.get(CONTACT_URL, params={"status": "RESOLVED"})
    assert [item["subject"] for item in r.json()["data"]] == ["Question number 0"]

    r = client.get(CONTACT_URL, params={"status": "BOGUS"})
    assert r.json()["pagination"]["total"] == 3
