# tests/v1/test_posts.py
"""Tests for post endpoints: create, feed, detail, swipe, delete and photos."""

from fastapi import status

from coffee.models import Comment, Notification, Post, Vote

VALID_POST = {
    "subject_name": "Casey Jones",
    "subject_age": 29,
    "city": "Denver",
    "state": "CO",
    "phone_number": "303-555-0199",
    "caption": "Great first date, very respectful.",
    "photos": ["https://cdn.coffee.test/post-images/a.png"],
}


def test_create_post(client, member) -> None:
    user, headers = member
    response = client.post("/api/v1/posts", json=VALID_POST, headers=headers)

    assert response.status_code == status.HTTP_201_CREATED
    body = response.json()
    assert body["subject_name"] == "Casey Jones"
    assert body["green_flags"] == 0
    assert body["red_flags"] == 0
    assert body["author"]["id"] == user.id


def test_create_post_validates_fields(client, member) -> None:
    _, headers = member
    for override in (
        {"subject_age": 17},
        {"subject_age": 101},
        {"caption": ""},
        {"caption": "x" * 1001},
        {"photos": [f"https://cdn.coffee.test/{n}.png" for n in range(7)]},
        {"subject_name": "   "},
    ):
        response = client.post("/api/v1/posts", json={**VALID_POST, **override}, headers=headers)
        assert response.status_code == status.HTTP_422_UNPROCESSABLE_ENTITY, override


def test_pending_member_cannot_post(client, make_member) -> None:
    _, headers = make_member("waiting", is_approved=False)
    response = client.post("/api/v1/posts", json=VALID_POST, headers=headers)
    assert response.status_code == status.HTTP_403_FORBIDDEN
    assert response.json()["redirect_to"] == "/pending"


def test_feed_is_paginated_newest_first(client, db_session, member, make_post) -> None:
    user, headers = member
    for n in range(14):
        make_post(user, subject_name=f"Subject {n:02d}")

    first = client.get("/api/v1/posts", headers=headers).json()
    second = client.get("/api/v1/posts", params={"page": 2}, headers=headers).json()

    assert first["total_posts"] == 14
    assert first["total_pages"] == 2
    assert len(first["posts"]) == 12
    assert len(second["posts"]) == 2
    assert first["posts"][0]["subject_name"] == "Subject 13"
    assert first["unread_notifications"] == 0


def test_feed_page_matches_api(client, member, make_post) -> None:
    user, headers = member
    make_post(user)
    page = client.get("/feed", headers=headers)
    assert page.status_code == status.HTTP_200_OK
    assert page.json()["total_posts"] == 1


def test_post_detail_includes_comments_and_my_vote(
    client, db_session, member, other_member, make_post
) -> None:
    user, headers = member
    other, _ = other_member
    post = make_post(other)
    db_session.add(Vote(post_id=post.id, user_id=user.id, vote_type="red"))
    db_session.add(Comment(post_id=post.id, user_id=other.id, content="first"))
    db_session.commit()

    body = client.get(f"/api/v1/posts/{post.id}", headers=headers).json()

    assert body["my_vote"] == "red"
    assert body["is_owner"] is False
    assert [c["content"] for c in body["comments"]] == ["first"]
    assert client.get(f"/post/{post.id}", headers=headers).json()["my_vote"] == "red"


def test_unknown_post_is_404(client, member) -> None:
    _, headers = member
    response = client.get("/api/v1/posts/does-not-exist", headers=headers)
    assert response.status_code == status.HTTP_404_NOT_FOUND
    assert response.json()["code"] == "not_found"


def test_swipe_queue_skips_own_and_voted_posts(
    client, db_session, member, other_member, make_post
) -> None:
    user, headers = member
    other, _ = other_member
    make_post(user, subject_name="Mine")
    voted = make_post(other, subject_name="Voted")
    fresh = make_post(other, subject_name="Fresh")
    db_session.add(Vote(post_id=voted.id, user_id=user.id, vote_type="green"))
    db_session.commit()

    queue = client.get("/api/v1/posts/swipe", headers=headers).json()

    assert [p["id"] for p in queue] == [fresh.id]


def test_owner_delete_cascades(client, db_session, member, other_member, make_post) -> None:
    user, headers = member
    other, _ = other_member
    post = make_post(user)
    db_session.add(Vote(post_id=post.id, user_id=other.id, vote_type="green"))
    db_session.add(Comment(post_id=post.id, user_id=other.id, content="hi"))
    db_session.add(
        Notification(
            user_id=user.id,
            type="vote",
            title="t",
            message="m",
            related_post_id=post.id,
        )
    )
    db_session.commit()
    post_id = post.id

    response = client.delete(f"/api/v1/posts/{post_id}", headers=headers)

    assert response.json() == {"success": True}
    assert db_session.query(Post).count() == 0
    assert db_session.query(Vote).count() == 0
    assert db_session.query(Comment).count() == 0
    assert db_session.query(Notification).count() == 0


def test_cannot_delete_someone_elses_post(client, member, other_member, make_post) -> None:
    _, headers = member
    other, _ = other_member
    post = make_post(other)
    response = client.delete(f"/api/v1/posts/{post.id}", headers=headers)
    assert response.status_code == status.HTTP_403_FORBIDDEN


def test_photo_upload(client, member, s3_client, png_bytes) -> None:
    user, headers = member
    response = client.post(
        "/api/v1/posts/photos",
        headers=headers,
        files={"photo": ("../evil name.png", png_bytes, "image/png")},
    )

    assert response.status_code == status.HTTP_201_CREATED
    path = response.json()["path"]
    assert path.startswith(f"{user.id}/")
    assert path.endswith("-evil_name.png")
    assert response.json()["url"] == f"https://cdn.coffee.test/post-images/{path}"
    assert ("post-images", path) in s3_client.objects


def test_photo_upload_size_limit(client, member, s3_client) -> None:
    _, headers = member
    too_big = b"\x00" * (5 * 1024 * 1024 + 1)
    response = client.post(
        "/api/v1/posts/photos",
        headers=headers,
        files={"photo": ("big.png", too_big, "image/png")},
    )
    assert response.status_code == status.HTTP_400_BAD_REQUEST
    assert response.json()["detail"] == "Image file must be smaller than 5MB"
    assert s3_client.objects == {}


def test_create_post_page_describes_limits(client, member) -> None:
    _, headers = member
    body = client.get("/post", headers=headers).json()
    assert body["max_photos"] == 6
    assert body["max_photo_mb"] == 5
