# tests/v1/test_notifications.py
from fastapi import status

from coffee.models import Notification


def _seed(db_session, user, count=3):
    rows = [
        Notification(user_id=user.id, type="comment", title=f"Title {i}", message=f"Message {i}")
        for i in range(count)
    ]
    db_session.add_all(rows)
    db_session.commit()
    return [row.id for row in rows]


def test_list_with_unread_count(client, db_session, member, other_member) -> None:
    user, headers = member
    other, _ = other_member
    _seed(db_session, user)
    _seed(db_session, other, count=1)

    body = client.get("/api/v1/notifications", headers=headers).json()

    assert body["unread_count"] == 3
    assert len(body["notifications"]) == 3
    assert {n["title"] for n in body["notifications"]} == {"Title 0", "Title 1", "Title 2"}
    assert client.get("/notifications", headers=headers).json()["unread_count"] == 3


def test_mark_one_read(client, db_session, member) -> None:
    user, headers = member
    first, *_ = _seed(db_session, user)

    response = client.post(f"/api/v1/notifications/{first}/read", headers=headers)

    assert response.status_code == status.HTTP_200_OK
    assert response.json()["is_read"] is True
    assert client.get("/api/v1/notifications/unread-count", headers=headers).json() == {
        "unread_count": 2
    }


def test_mark_all_read(client, db_session, member, other_member) -> None:
    user, headers = member
    other, other_headers = other_member
    _seed(db_session, user)
    _seed(db_session, other, count=2)

    response = client.post("/api/v1/notifications/read-all", headers=headers)

    assert response.json() == {"updated": 3}
    assert client.get("/api/v1/notifications/unread-count", headers=headers).json()["unread_count"] == 0
    assert client.get("/api/v1/notifications/unread-count", headers=other_headers).json()["unread_count"] == 2
    assert client.post("/api/v1/notifications/read-all", headers=headers).json() == {"updated": 0}


def test_cannot_read_someone_elses_notification(client, db_session, member, other_member) -> None:
    user, _ = member
    _, other_headers = other_member
    notification_id = _seed(db_session, user, count=1)[0]

    response = client.post(f"/api/v1/notifications/{notification_id}/read", headers=other_headers)

    assert response.status_code == status.HTTP_404_NOT_FOUND
    db_session.expire_all()
    assert db_session.get(Notification, notification_id).is_read is False


def test_feed_reports_unread_notifications(client, db_session, member) -> None:
    user, headers = member
    _seed(db_session, user, count=2)

    assert client.get("/api/v1/posts", headers=headers).json()["unread_notifications"] == 2
