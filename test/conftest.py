"""
Shared fixtures.

HTTP tests drive the FastAPI app through httpx's ASGI transport. The lifespan
(and therefore the asyncpg pool) never starts: every repository function is
replaced with an in-memory fake, and the Razorpay and SES clients are stubbed.
"""

from __future__ import annotations

import os
import tempfile
from datetime import datetime, timezone
from typing import AsyncGenerator

import pytest
import pytest_asyncio
from httpx import ASGITransport, AsyncClient

# Must be set before `main` is imported: it mounts MEDIA_ROOT at import time.
os.environ.setdefault("MEDIA_ROOT", tempfile.mkdtemp(prefix="lms-media-"))
os.environ.setdefault("JWT_SECRET", "test-secret")
os.environ.setdefault("RAZORPAY_KEY_ID", "rzp_test_key")
os.environ.setdefault("RAZORPAY_SECRET", "rzp_test_secret")
os.environ.setdefault("RAZORPAY_PLAN_ID", "plan_test")

from admin_requests import repository as admin_request_repository  # noqa: E402
from auth import repository as user_repository  # noqa: E402
from auth import security  # noqa: E402
from core import mailer, razorpay  # noqa: E402
from courses import repository as course_repository  # noqa: E402
from payments import repository as payment_repository  # noqa: E402


def _now() -> datetime:
    return datetime.now(timezone.utc)


class FakeStore:
    """
    Dict-backed stand-in for the repository modules. Method names match the
    repository functions they replace.
    """

    def __init__(self) -> None:
        self.users: dict[int, dict] = {}
        self.courses: dict[int, dict] = {}
        self.lectures: dict[int, dict] = {}
        self.payments: dict[int, dict] = {}
        self.admin_requests: dict[int, dict] = {}
        self._ids = {"users": 0, "courses": 0, "lectures": 0, "payments": 0, "admin_requests": 0}

    def _next_id(self, table: str) -> int:
        self._ids[table] += 1
        return self._ids[table]

    # users

    async def create_user(self, *, full_name, email, password_hash, avatar_public_id=None, avatar_url=None, role="USER"):
        user_id = self._next_id("users")
        row = {
            "id": user_id,
            "full_name": full_name.strip(),
            "email": user_repository.normalize_email(email),
            "password_hash": password_hash,
            "avatar_public_id": avatar_public_id,
            "avatar_url": avatar_url,
            "role": role,
            "subscription_id": None,
            "subscription_status": None,
            "forgot_password_token": None,
            "forgot_password_expiry": None,
            "created_at": _now(),
            "updated_at": _now(),
        }
        self.users[user_id] = row
        return dict(row)

    async def get_user_by_email(self, email):
        email = user_repository.normalize_email(email)
        for row in self.users.values():
            if row["email"] == email:
                return dict(row)
        return None

    async def get_user_by_id(self, user_id):
        row = self.users.get(user_id)
        return dict(row) if row else None

    async def update_profile(self, user_id, *, full_name=None, avatar_public_id=None, avatar_url=None):
        row = self.users.get(user_id)
        if row is None:
            return None
        if full_name:
            row["full_name"] = full_name.strip()
        if avatar_public_id is not None:
            row["avatar_public_id"] = avatar_public_id
        if avatar_url is not None:
            row["avatar_url"] = avatar_url
        return dict(row)

    async def update_password(self, user_id, *, password_hash):
        row = self.users[user_id]
        row["password_hash"] = password_hash
        row["forgot_password_token"] = None
        row["forgot_password_expiry"] = None

    async def set_reset_token(self, user_id, *, token_hash, expires_at):
        self.users[user_id]["forgot_password_token"] = token_hash
        self.users[user_id]["forgot_password_expiry"] = expires_at

    async def clear_reset_token(self, user_id):
        self.users[user_id]["forgot_password_token"] = None
        self.users[user_id]["forgot_password_expiry"] = None

    async def get_user_by_reset_token(self, token_hash):
        for row in self.users.values():
            expiry = row["forgot_password_expiry"]
            if row["forgot_password_token"] == token_hash and expiry is not None and expiry > _now():
                return dict(row)
        return None

    async def set_subscription(self, user_id, *, subscription_id, status):
        row = self.users.get(user_id)
        if row is None:
            return None
        row["subscription_id"] = subscription_id
        row["subscription_status"] = status
        return dict(row)

    async def set_role(self, user_id, *, role):
        row = self.users.get(user_id)
        if row is None:
            return None
        row["role"] = role
        return dict(row)

    async def count_users(self):
        return len(self.users)

    async def count_subscribed_users(self):
        return sum(1 for row in self.users.values() if row["subscription_status"] == "active")

    # admin requests

    async def create_request(self, *, user_id, reason):
        # admin_requests_one_pending_idx: one PENDING request per user
        if any(r["user_id"] == user_id and r["status"] == "PENDING" for r in self.admin_requests.values()):
            return None
        request_id = self._next_id("admin_requests")
        row = {
            "id": request_id,
            "user_id": user_id,
            "reason": reason.strip(),
            "status": "PENDING",
            "reviewed_by": None,
            "reviewed_at": None,
            "created_at": _now(),
        }
        self.admin_requests[request_id] = row
        return dict(row)

    async def get_request(self, request_id):
        row = self.admin_requests.get(request_id)
        return dict(row) if row else None

    async def get_pending_for_user(self, user_id):
        for row in self.admin_requests.values():
            if row["user_id"] == user_id and row["status"] == "PENDING":
                return dict(row)
        return None

    async def list_for_user(self, user_id):
        rows = [dict(r) for r in self.admin_requests.values() if r["user_id"] == user_id]
        return sorted(rows, key=lambda r: r["id"], reverse=True)

    async def list_requests(self, *, status=None, limit=50, offset=0):
        rows = [dict(r) for r in self.admin_requests.values() if status is None or r["status"] == status]
        rows.sort(key=lambda r: r["id"], reverse=True)
        return rows[offset : offset + limit]

    async def review_request(self, request_id, *, status, reviewed_by):
        row = self.admin_requests.get(request_id)
        if row is None or row["status"] != "PENDING":
            return None
        row.update(status=status, reviewed_by=reviewed_by, reviewed_at=_now())
        return dict(row)

    # courses and lectures

    async def list_courses(self, *, category="", search_query="", limit=50, offset=0):
        rows = [
            dict(r)
            for r in self.courses.values()
            if (not category or r["category"].lower() == category.lower())
            and (not search_query or search_query.lower() in r["title"].lower())
        ]
        rows.sort(key=lambda r: r["id"], reverse=True)
        return rows[offset : offset + limit]

    async def get_course(self, course_id):
        row = self.courses.get(course_id)
        return dict(row) if row else None

    async def create_course(self, *, title, description, category, created_by, thumbnail_public_id=None, thumbnail_url=None):
        course_id = self._next_id("courses")
        row = {
            "id": course_id,
            "title": title.strip(),
            "description": description.strip(),
            "category": category.strip(),
            "created_by": created_by.strip(),
            "thumbnail_public_id": thumbnail_public_id,
            "thumbnail_url": thumbnail_url,
            "number_of_lectures": 0,
            "created_at": _now(),
            "updated_at": _now(),
        }
        self.courses[course_id] = row
        return dict(row)

    async def update_course(self, course_id, fields):
        row = self.courses.get(course_id)
        if row is None:
            return None
        row.update({k: v for k, v in fields.items() if v is not None})
        return dict(row)

    async def delete_course(self, course_id):
        row = self.courses.pop(course_id, None)
        if row is None:
            return None
        for lecture_id in [i for i, r in self.lectures.items() if r["course_id"] == course_id]:
            del self.lectures[lecture_id]
        return row

    async def list_lectures(self, course_id):
        rows = [dict(r) for r in self.lectures.values() if r["course_id"] == course_id]
        return sorted(rows, key=lambda r: (r["position"], r["id"]))

    async def get_lecture(self, course_id, lecture_id):
        row = self.lectures.get(lecture_id)
        return dict(row) if row and row["course_id"] == course_id else None

    async def add_lecture(self, course_id, *, title, description, video_public_id, video_url):
        course = self.courses.get(course_id)
        if course is None:
            return None
        positions = [r["position"] for r in self.lectures.values() if r["course_id"] == course_id]
        lecture_id = self._next_id("lectures")
        row = {
            "id": lecture_id,
            "course_id": course_id,
            "title": title.strip(),
            "description": description.strip(),
            "video_public_id": video_public_id,
            "video_url": video_url,
            "position": max(positions, default=0) + 1,
            "created_at": _now(),
            "updated_at": _now(),
        }
        self.lectures[lecture_id] = row
        course["number_of_lectures"] += 1
        return dict(row)

    async def update_lecture(self, course_id, lecture_id, fields):
        row = self.lectures.get(lecture_id)
        if row is None or row["course_id"] != course_id:
            return None
        row.update({k: v for k, v in fields.items() if v is not None})
        return dict(row)

    async def delete_lecture(self, course_id, lecture_id):
        row = self.lectures.get(lecture_id)
        if row is None or row["course_id"] != course_id:
            return None
        del self.lectures[lecture_id]
        course = self.courses[course_id]
        course["number_of_lectures"] = max(course["number_of_lectures"] - 1, 0)
        return row

    # payments

    async def create_payment(self, *, user_id, razorpay_payment_id, razorpay_subscription_id, razorpay_signature):
        # payments.razorpay_payment_id is UNIQUE
        if await self.get_by_payment_id(razorpay_payment_id) is not None:
            return None
        payment_id = self._next_id("payments")
        row = {
            "id": payment_id,
            "user_id": user_id,
            "razorpay_payment_id": razorpay_payment_id,
            "razorpay_subscription_id": razorpay_subscription_id,
            "razorpay_signature": razorpay_signature,
            "created_at": _now(),
        }
        self.payments[payment_id] = row
        return dict(row)

    async def get_by_payment_id(self, razorpay_payment_id):
        for row in self.payments.values():
            if row["razorpay_payment_id"] == razorpay_payment_id:
                return dict(row)
        return None

    async def get_latest_by_subscription(self, subscription_id):
        rows = [r for r in self.payments.values() if r["razorpay_subscription_id"] == subscription_id]
        if not rows:
            return None
        return dict(max(rows, key=lambda r: (r["created_at"], r["id"])))

    async def delete_payment(self, payment_id):
        self.payments.pop(payment_id, None)

    async def monthly_payment_counts(self, year):
        counts: dict[int, int] = {}
        for row in self.payments.values():
            if row["created_at"].year == year:
                counts[row["created_at"].month] = counts.get(row["created_at"].month, 0) + 1
        return counts

    def install(self, monkeypatch: pytest.MonkeyPatch) -> None:
        modules = (user_repository, admin_request_repository, course_repository, payment_repository)
        for module in modules:
            for name in dir(module):
                fn = getattr(module, name)
                if name.startswith("_") or not callable(fn) or getattr(fn, "__module__", None) != module.__name__:
                    continue
                if name == "normalize_email":
                    continue
                monkeypatch.setattr(module, name, getattr(self, name))

    # helpers for tests

    async def add_user(
        self,
        *,
        email: str = "student@example.com",
        password: str = "password123",
        full_name: str = "Student One",
        role: str = "USER",
        subscription_id: str | None = None,
        subscription_status: str | None = None,
    ) -> dict:
        row = await self.create_user(
            full_name=full_name,
            email=email,
            password_hash=security.hash_password(password),
            role=role,
        )
        self.users[row["id"]].update(subscription_id=subscription_id, subscription_status=subscription_status)
        return dict(self.users[row["id"]])


class RazorpayStub:
    """
    `fail_with` fails every call; `fail_calls` fails only the named ones.
    Cancelling a subscription twice fails, as it does at Razorpay.
    """

    def __init__(self) -> None:
        self.calls: list[tuple] = []
        self.fail_with: str | None = None
        self.fail_calls: set[str] = set()
        self.cancelled: set[str] = set()

    def _record(self, *call):
        self.calls.append(call)
        if self.fail_with:
            raise razorpay.RazorpayError(self.fail_with)
        if call[0] in self.fail_calls:
            raise razorpay.RazorpayError(f"Razorpay {call[0]} failed: 500 Internal server error")

    async def create_subscription(self, *, plan, total_count=12, customer_notify=True):
        self._record("create_subscription", plan, total_count)
        return {"id": "sub_test_1", "status": "created", "plan_id": plan}

    async def cancel_subscription(self, subscription_id):
        self._record("cancel_subscription", subscription_id)
        if subscription_id in self.cancelled:
            raise razorpay.RazorpayError(
                "Razorpay POST cancel failed: 400 Subscription is not cancellable in cancelled status."
            )
        self.cancelled.add(subscription_id)
        return {"id": subscription_id, "status": "cancelled"}

    async def refund_payment(self, payment_id, *, speed="optimum"):
        self._record("refund_payment", payment_id)
        return {"id": "rfnd_test_1", "payment_id": payment_id, "status": "processed"}

    async def list_subscriptions(self, *, count=10, skip=0):
        self._record("list_subscriptions", count, skip)
        return {"entity": "collection", "count": 1, "items": [{"id": "sub_test_1", "status": "active"}]}


@pytest.fixture
def store(monkeypatch: pytest.MonkeyPatch) -> FakeStore:
    fake = FakeStore()
    fake.install(monkeypatch)
    return fake


@pytest.fixture
def razorpay_stub(monkeypatch: pytest.MonkeyPatch) -> RazorpayStub:
    stub = RazorpayStub()
    for name in ("create_subscription", "cancel_subscription", "refund_payment", "list_subscriptions"):
        monkeypatch.setattr(razorpay, name, getattr(stub, name))
    return stub


@pytest.fixture
def sent_emails(monkeypatch: pytest.MonkeyPatch) -> list[dict]:
    outbox: list[dict] = []

    async def fake_send_email(*, to, subject, html):
        outbox.append({"to": to, "subject": subject, "html": html})

    monkeypatch.setattr(mailer, "send_email", fake_send_email)
    return outbox


@pytest.fixture
def media_root(monkeypatch: pytest.MonkeyPatch, tmp_path):
    monkeypatch.setenv("MEDIA_ROOT", str(tmp_path))
    return tmp_path


@pytest_asyncio.fixture
async def client(store: FakeStore, media_root) -> AsyncGenerator[AsyncClient, None]:
    from main import app

    async with AsyncClient(transport=ASGITransport(app=app), base_url="http://test") as ac:
        yield ac


def auth_headers(user_row: dict) -> dict[str, str]:
    token = security.build_access_token(
        user_id=int(user_row["id"]),
        email=str(user_row["email"]),
        role=str(user_row["role"]),
        subscription_status=user_row.get("subscription_status"),
    )
    return {"Authorization": f"Bearer {token}"}


@pytest.fixture
def headers_for():
    return auth_headers
