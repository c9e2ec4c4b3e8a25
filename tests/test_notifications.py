import pytest
from datetime import timedelta
from httpx import AsyncClient

from models.notification import ReminderNotification, OverdueNotification, CommentNotification
from services.notifications import get_unread_notifications, mark_notifications_as_read, mark_notifications_as_sent

pytestmark = pytest.mark.asyncio


@pytest.fixture
async def inbox(db, users, make_task, now):
    """Alice: two unread (different times), one read. Bob: one unread."""
    task = await make_task(title="Inbox Task", deadline=now + timedelta(days=3))
    docs = [
        ReminderNotification(id="n-old", user_id="alice", task_id=task["id"], reminder_offset=4320, message="old", scheduled_for=now - timedelta(days=1)),
        OverdueNotification(id="n-new", user_id="alice", task_id=task["id"], message="new", scheduled_for=now),
        CommentNotification(id="n-read", user_id="alice", task_id=task["id"], comment_id="c", message="read", scheduled_for=now, read=True),
        OverdueNotification(id="n-bob", user_id="bob", task_id=task["id"], message="bob", scheduled_for=now),
    ]
    await db.notifications.insert_many([d.model_dump() for d in docs])
    return task


async def test_unread_sorted_newest_first_with_task(db, inbox):
    unread = await get_unread_notifications(db, "alice")

    assert [n["id"] for n in unread] == ["n-new", "n-old"]
    assert unread[0]["task"]["title"] == "Inbox Task"
    assert isinstance(unread[0]["_id"], str)


async def test_unread_with_deleted_task(db, users, now):
    await db.notifications.insert_one(OverdueNotification(user_id="bob", task_id="gone", message="m", scheduled_for=now).model_dump())

    unread = await get_unread_notifications(db, "bob")
    assert unread[0]["task"] is None


async def test_mark_read_and_sent_batches(db, inbox):
    assert await mark_notifications_as_read(db, ["n-old", "n-bob"]) == 2
    assert await mark_notifications_as_sent(db, ["n-new"]) == 1

    assert (await db.notifications.find_one({"id": "n-old"}))["read"] is True
    assert (await db.notifications.find_one({"id": "n-new"}))["sent"] is True
    assert (await db.notifications.find_one({"id": "n-new"}))["read"] is False


async def test_mark_helpers_noop_on_empty(db, inbox):
    assert await mark_notifications_as_read(db, []) == 0
    assert await mark_notifications_as_sent(db, []) == 0
    assert await db.notifications.count_documents({"read": True}) == 1


async def test_mark_read_scoped_to_user(db, inbox):
    assert await mark_notifications_as_read(db, ["n-bob", "n-new"], user_id="alice") == 1
    assert (await db.notifications.find_one({"id": "n-bob"}))["read"] is False


# --- HTTP ---

async def test_get_notifications_requires_auth(async_client: AsyncClient):
    resp = await async_client.get("/api/notifications")
    assert resp.status_code == 401


async def test_get_notifications(async_client: AsyncClient, auth_headers: dict, inbox):
    resp = await async_client.get("/api/notifications", headers=auth_headers)
    assert resp.status_code == 200
    data = resp.json()
    assert [n["id"] for n in data] == ["n-new", "n-old"]
    assert data[0]["task"]["title"] == "Inbox Task"


async def test_get_notifications_empty(async_client: AsyncClient, auth_headers: dict):
    resp = await async_client.get("/api/notifications", headers=auth_headers)
    assert resp.status_code == 200
    assert resp.json() == []


async def test_unread_count(async_client: AsyncClient, auth_headers: dict, inbox):
    resp = await async_client.get("/api/notifications/unread-count", headers=auth_headers)
    assert resp.status_code == 200
    assert resp.json() == {"count": 2}


async def test_mark_nonexistent_notification(async_client: AsyncClient, auth_headers: dict):
    """Marking a non-existent notification as read returns 404."""
    resp = await async_client.patch("/api/notifications/fake_id/read", headers=auth_headers)
    assert resp.status_code == 404


async def test_cannot_mark_someone_elses_notification(async_client: AsyncClient, auth_headers: dict, inbox):
    resp = await async_client.patch("/api/notifications/n-bob/read", headers=auth_headers)
    assert resp.status_code == 404


async def test_mark_one_read(async_client: AsyncClient, db, auth_headers: dict, inbox):
    resp = await async_client.patch("/api/notifications/n-old/read", headers=auth_headers)
    assert resp.status_code == 200
    assert (await db.notifications.find_one({"id": "n-old"}))["read"] is True


async def test_mark_selected_read(async_client: AsyncClient, db, bob_auth_headers: dict, inbox):
    resp = await async_client.post(
        "/api/notifications/mark-read",
        json={"ids": ["n-bob", "n-new"]},
        headers=bob_auth_headers,
    )
    assert resp.status_code == 200
    assert resp.json() == {"updated": 1}
    assert (await db.notifications.find_one({"id": "n-new"}))["read"] is False


async def test_mark_all_read(async_client: AsyncClient, db, auth_headers: dict, inbox):
    resp = await async_client.post("/api/notifications/mark-all-read", headers=auth_headers)
    assert resp.status_code == 200
    assert await db.notifications.count_documents({"user_id": "alice", "read": False}) == 0
    assert await db.notifications.count_documents({"user_id": "bob", "read": False}) == 1


async def test_root_health(async_client: AsyncClient):
    resp = await async_client.get("/")
    assert resp.status_code == 200
    assert resp.json()["status"] == "online"
    assert "X-Request-ID" in resp.headers
