"""Newsletter signup."""

from modules.newsletter.models import NewsletterSubscriber
from modules.newsletter.service import newsletter_service


def test_subscribe_normalizes_email(db):
    result = newsletter_service.subscribe(db, "  Reader@Example.COM ")
    assert result.success
    assert db.query(NewsletterSubscriber).one().email == "reader@example.com"


def test_duplicate_is_distinct_outcome(db):
    assert newsletter_service.subscribe(db, "reader@example.com").success
    result = newsletter_service.subscribe(db, "READER@example.com")
    assert not result.success
    assert result.already_subscribed
    assert result.error == "This email is already subscribed"
    assert db.query(NewsletterSubscriber).count() == 1


def test_invalid_email(db):
    assert newsletter_service.subscribe(db, "").error == "Email is required"
    assert newsletter_service.subscribe(db, "not-an-email").error == "Please enter a valid email address"


def test_endpoint(client):
    assert client.post("/api/newsletter", json={"email": "fan@example.com"}).status_code == 200
    resp = client.post("/api/newsletter", json={"email": "fan@example.com"})
    assert resp.status_code == 409
    assert resp.json()["error"] == "This email is already subscribed"
    assert client.post("/api/newsletter", json={"email": "x"}).status_code == 400
