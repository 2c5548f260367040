# tests/v1/test_comments.py
"""Tests for comments."""

from fastapi import status

from coffee.models import Notification


def _comment(client, headers, post_id, content):
    return client.post(
        "/api/v1/comments",
        json={"post_id": post_id, "content": content},
        headers=headers,
    )


def test_comment_is_trimmed_and_notifies_owner(
    client, db_session, member, other_member, make_post
) -> None:
    _, headers = member
    owner, _ = other_member
    post = make_post(owner)

    response = _comment(client, headers, post.id, "  Seemed kind.  ")

    assert response.status_code == status.HTTP_201_CREATED
    assert response.json()["content"] == "Seemed kind."
    assert response.json()["author"]["name"] == "Member"
    notification = db_session.query(Notification).one()
    assert notification.user_id == owner.id
    assert notification.title == "New Comment"
    assert notification.message == "Member commented on your post about Jordan Smith"


def test_commenting_on_own_post_does_not_notify(client, db_session, member, make_post) -> None:
    user, headers = member
    post = make_post(user)
    assert _comment(client, headers, post.id, "update").status_code == status.HTTP_201_CREATED
    assert db_session.query(Notification).count() == 0


def test_comment_length_rules(client, member, make_post) -> None:
    user, headers = member
    post = make_post(user)

    empty = _comment(client, headers, post.id, "    ")
    assert empty.status_code == status.HTTP_400_BAD_REQUEST
    assert empty.json()["code"] == "empty"

    too_long = _comment(client, headers, post.id, "x" * 501)
    assert too_long.json()["code"] == "too_long"

    assert _comment(client, headers, post.id, "x" * 500).status_code == status.HTTP_201_CREATED


def test_comments_listed_oldest_first(client, member, make_post) -> None:
    user, headers = member
    post = make_post(user)
    for text in ("one", "two", "three"):
        _comment(client, headers, post.id, text)

    listed = client.get("/api/v1/comments", params={"post_id": post.id}, headers=headers).json()

    assert [c["content"] for c in listed] == ["one", "two", "three"]


def test_pending_member_cannot_comment(client, make_member, member, make_post) -> None:
    owner, _ = member
    post = make_post(owner)
    _, headers = make_member("waiting", is_approved=False)
    assert _comment(client, headers, post.id, "hi").status_code == status.HTTP_403_FORBIDDEN
