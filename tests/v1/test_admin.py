# tests/v1/test_admin.py
"""Tests for admin moderation actions."""

import pytest
from fastapi import status
from sqlalchemy.exc import OperationalError

from coffee.core.errors import PermissionDeniedError, RateLimitedError
from coffee.models import Alert, AuthAccount, Comment, Notification, Post, User, Vote
from coffee.services import admin as admin_service
from coffee.services import identity
from coffee.services.admin import AdminService

NOT_ADMIN = {"success": False, "error": "Unauthorized: Not an admin."}


def _flags(db_session, user_id):
    db_session.expire_all()
    user = db_session.get(User, user_id)
    return user.is_approved, user.is_rejected


def test_approve_and_reject_stay_mutually_exclusive(client, db_session, admin, make_member) -> None:
    _, headers = admin
    target, _ = make_member("target", is_approved=False)

    reject = client.post(f"/api/v1/admin/users/{target.id}/reject", headers=headers)
    assert reject.json() == {"success": True, "error": None}
    assert _flags(db_session, target.id) == (False, True)

    approve = client.post(f"/api/v1/admin/users/{target.id}/approve", headers=headers)
    assert approve.json()["success"] is True
    assert _flags(db_session, target.id) == (True, False)

    back_to_pending = client.post(
        f"/api/v1/admin/users/{target.id}/approve",
        json={"approve": False},
        headers=headers,
    )
    assert back_to_pending.json()["success"] is True
    assert _flags(db_session, target.id) == (False, False)


def test_rejected_member_lands_on_pending_with_message(client, admin, make_member) -> None:
    _, admin_headers = admin
    target, headers = make_member("target", is_approved=False)

    client.post(f"/api/v1/admin/users/{target.id}/reject", headers=admin_headers)

    response = client.get("/swipe", headers=headers, follow_redirects=False)
    assert response.headers["location"] == "/pending"
    assert client.get("/pending", headers=headers).json()["is_rejected"] is True


def test_approval_notifies_member(client, db_session, admin, make_member) -> None:
    _, headers = admin
    target, _ = make_member("target", is_approved=False)

    client.post(f"/api/v1/admin/users/{target.id}/approve", headers=headers)

    notification = db_session.query(Notification).filter_by(user_id=target.id).one()
    assert notification.type == "moderation"
    assert notification.title == "Account approved"


def test_non_admin_gets_403_action_result(client, db_session, member, make_member) -> None:
    _, headers = member
    target, _ = make_member("target", is_approved=False)

    for method, path in (
        ("post", f"/api/v1/admin/users/{target.id}/approve"),
        ("post", f"/api/v1/admin/users/{target.id}/reject"),
        ("delete", f"/api/v1/admin/users/{target.id}"),
        ("get", "/api/v1/admin/users"),
        ("get", "/api/v1/admin/stats"),
    ):
        response = client.request(method, path, headers=headers)
        assert response.status_code == status.HTTP_403_FORBIDDEN, path
        assert response.json() == NOT_ADMIN

    assert _flags(db_session, target.id) == (False, False)


def test_set_admin(client, db_session, admin, member) -> None:
    _, headers = admin
    target, target_headers = member

    response = client.post(
        f"/api/v1/admin/users/{target.id}/admin",
        json={"is_admin": True},
        headers=headers,
    )

    assert response.json()["success"] is True
    assert client.get("/admin", headers=target_headers).status_code == status.HTTP_200_OK


def test_unknown_user(client, admin) -> None:
    _, headers = admin
    response = client.post("/api/v1/admin/users/nobody/approve", headers=headers)
    assert response.json() == {"success": False, "error": "User not found."}


def test_list_users_filters_by_status(client, admin, make_member) -> None:
    _, headers = admin
    pending, _ = make_member("pending", is_approved=False)
    rejected, _ = make_member("rejected", is_approved=False, is_rejected=True)

    all_users = client.get("/api/v1/admin/users", headers=headers).json()
    assert len(all_users) == 3
    assert all("verification_photo_url" in u for u in all_users)

    only_pending = client.get("/api/v1/admin/users", params={"status": "pending"}, headers=headers)
    assert [u["id"] for u in only_pending.json()] == [pending.id]

    only_rejected = client.get(
        "/api/v1/admin/users", params={"status": "rejected"}, headers=headers
    )
    assert [u["state"] for u in only_rejected.json()] == ["rejected"]

    bad = client.get("/api/v1/admin/users", params={"status": "weird"}, headers=headers)
    assert bad.status_code == status.HTTP_400_BAD_REQUEST


def test_stats(client, admin, make_member, make_post) -> None:
    admin_user, headers = admin
    make_member("pending", is_approved=False)
    make_post(admin_user)

    stats = client.get("/api/v1/admin/stats", headers=headers).json()

    assert stats["total_users"] == 2
    assert stats["pending_users"] == 1
    assert stats["approved_users"] == 1
    assert stats["admins"] == 1
    assert stats["total_posts"] == 1


def _populate(db_session, victim, bystander, make_post):
    victim_post = make_post(victim, subject_name="Victim's post")
    bystander_post = make_post(bystander, subject_name="Bystander's post")
    db_session.add_all(
        [
            Vote(post_id=victim_post.id, user_id=bystander.id, vote_type="green"),
            Vote(post_id=bystander_post.id, user_id=victim.id, vote_type="red"),
            Comment(post_id=victim_post.id, user_id=bystander.id, content="on victim"),
            Comment(post_id=bystander_post.id, user_id=victim.id, content="by victim"),
            Notification(
                user_id=bystander.id,
                type="vote",
                title="t",
                message="m",
                related_post_id=victim_post.id,
            ),
            Notification(user_id=victim.id, type="comment", title="t", message="m"),
            Alert(user_id=victim.id, alert_type="name", alert_term="casey"),
        ]
    )
    bystander_post.red_flags = 1
    db_session.commit()
    return victim_post.id, bystander_post.id


def test_delete_user_cascades_without_orphans(
    client, db_session, admin, make_member, make_post
) -> None:
    _, headers = admin
    victim, _ = make_member("victim")
    bystander, _ = make_member("bystander")
    victim_id, bystander_id = victim.id, bystander.id
    victim_post_id, bystander_post_id = _populate(db_session, victim, bystander, make_post)

    response = client.delete(f"/api/v1/admin/users/{victim_id}", headers=headers)

    assert response.json()["success"] is True
    db_session.expire_all()
    assert db_session.get(User, victim_id) is None
    assert db_session.get(AuthAccount, victim_id) is None
    assert db_session.get(Post, victim_post_id) is None
    assert db_session.query(Vote).filter(
        (Vote.user_id == victim_id) | (Vote.post_id == victim_post_id)
    ).count() == 0
    assert db_session.query(Comment).filter(
        (Comment.user_id == victim_id) | (Comment.post_id == victim_post_id)
    ).count() == 0
    assert db_session.query(Notification).filter(
        (Notification.user_id == victim_id) | (Notification.related_post_id == victim_post_id)
    ).count() == 0
    assert db_session.query(Alert).filter(Alert.user_id == victim_id).count() == 0
    # The bystander's post survives with its counts recomputed.
    survivor = db_session.get(Post, bystander_post_id)
    assert survivor is not None
    assert survivor.red_flags == 0
    assert db_session.get(User, bystander_id) is not None


def test_delete_user_rolls_back_on_failure(
    db_session, admin, make_member, make_post, monkeypatch
) -> None:
    admin_user, _ = admin
    victim, _ = make_member("victim")
    bystander, _ = make_member("bystander")
    victim_id = victim.id
    victim_post_id, _ = _populate(db_session, victim, bystander, make_post)

    def boom(db, post_ids):
        raise OperationalError("DELETE", {}, Exception("disk I/O error"))

    monkeypatch.setattr(admin_service, "purge_posts", boom)

    result = AdminService(db_session, sleep=lambda _: None).delete_user(admin_user.id, victim_id)

    assert result.success is False
    db_session.expire_all()
    assert db_session.get(User, victim_id) is not None
    assert db_session.get(Post, victim_post_id) is not None
    assert db_session.query(Vote).filter(Vote.user_id == victim_id).count() == 1
    assert db_session.query(Alert).filter(Alert.user_id == victim_id).count() == 1


def test_identity_deletion_failure_is_not_fatal(
    client, db_session, admin, make_member, monkeypatch, caplog
) -> None:
    _, headers = admin
    victim, _ = make_member("victim")
    victim_id = victim.id

    def unavailable(db, account_id):
        raise RateLimitedError("identity provider unavailable")

    monkeypatch.setattr(identity, "delete_account", unavailable)

    response = client.delete(f"/api/v1/admin/users/{victim_id}", headers=headers)

    assert response.json()["success"] is True
    db_session.expire_all()
    assert db_session.get(User, victim_id) is None
    assert "Could not delete identity account" in caplog.text


def test_admin_cannot_delete_themselves(client, admin) -> None:
    admin_user, headers = admin
    response = client.delete(f"/api/v1/admin/users/{admin_user.id}", headers=headers)
    assert response.json()["success"] is False


def test_admin_delete_post(client, db_session, admin, member, make_post) -> None:
    _, headers = admin
    author, _ = member
    post = make_post(author)
    db_session.add(Vote(post_id=post.id, user_id=author.id, vote_type="green"))
    db_session.commit()
    post_id = post.id

    response = client.delete(f"/api/v1/admin/posts/{post_id}", headers=headers)

    assert response.json()["success"] is True
    assert db_session.query(Post).filter(Post.id == post_id).count() == 0
    assert db_session.query(Vote).count() == 0


def test_admin_check_retries_rate_limits(db_session, admin, member, monkeypatch) -> None:
    admin_user, _ = admin
    target, _ = member
    calls = []
    real_scalar_query = db_session.query

    def flaky_query(*entities, **kwargs):
        if entities and entities[0] is User.is_admin and len(calls) < 2:
            calls.append(1)
            raise RateLimitedError("rate limit exceeded")
        return real_scalar_query(*entities, **kwargs)

    monkeypatch.setattr(db_session, "query", flaky_query)
    sleeps: list[float] = []

    result = AdminService(db_session, sleep=sleeps.append).reject(admin_user.id, target.id)

    assert result.success is True
    assert sleeps == [1.0, 2.0]


def test_admin_check_fails_closed(db_session, admin, member, monkeypatch) -> None:
    admin_user, _ = admin
    target, _ = member
    real_query = db_session.query

    def broken(*entities, **kwargs):
        if entities and entities[0] is User.is_admin:
            raise OperationalError("SELECT", {}, Exception("connection reset"))
        return real_query(*entities, **kwargs)

    monkeypatch.setattr(db_session, "query", broken)

    with pytest.raises(PermissionDeniedError):
        AdminService(db_session, sleep=lambda _: None).approve(admin_user.id, target.id)
