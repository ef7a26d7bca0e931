import pytest

pytestmark = pytest.mark.asyncio


async def test_contact_form_sends_mail(client, store, sent_emails, monkeypatch):
    monkeypatch.setenv("CONTACT_US_EMAIL", "support@lms.example.com")

    response = await client.post(
        "/api/v1/contact",
        json={"name": "Ada", "email": "ada@example.com", "message": "<b>Hi</b> there"},
    )

    assert response.status_code == 200
    assert sent_emails[0]["to"] == "support@lms.example.com"
    assert "&lt;b&gt;Hi&lt;/b&gt;" in sent_emails[0]["html"]


async def test_contact_form_rejects_bad_email(client, store, sent_emails):
    response = await client.post(
        "/api/v1/contact",
        json={"name": "Ada", "email": "ada-at-example", "message": "Hi"},
    )
    assert response.status_code == 400
    assert sent_emails == []


async def test_user_stats_for_admin(client, store, headers_for):
    admin = await store.add_user(email="admin@example.com", role="ADMIN")
    await store.add_user(email="a@example.com", subscription_status="active")
    await store.add_user(email="b@example.com")

    response = await client.get("/api/v1/admin/stats/users", headers=headers_for(admin))

    assert response.status_code == 200
    assert response.json()["all_users_count"] == 3
    assert response.json()["subscribed_users_count"] == 1


async def test_user_stats_forbidden_for_users(client, store, headers_for):
    user = await store.add_user()
    response = await client.get("/api/v1/admin/stats/users", headers=headers_for(user))
    assert response.status_code == 403


async def test_health(client):
    response = await client.get("/health")
    assert response.json() == {"status": "ok"}
