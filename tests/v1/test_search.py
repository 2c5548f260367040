# tests/v1/test_search.py
import pytest
from fastapi import status

from coffee.models import Alert


@pytest.fixture()
def posts(member, make_post):
    author, _ = member
    return {
        "austin": make_post(author, subject_name="Jordan Smith", city="Austin", state="TX"),
        "dallas": make_post(
            author,
            subject_name="Riley Jones",
            city="Dallas",
            state="TX",
            phone_number="214-555-0123",
            caption="Cancelled twice, then ghosted.",
        ),
        "portland": make_post(
            author,
            subject_name="Jordan Lee",
            city="Portland",
            state="OR",
            phone_number=None,
        ),
    }


def _ids(response):
    return {p["id"] for p in response.json()["posts"]}


def test_search_all_fields_is_case_insensitive(client, member, posts) -> None:
    _, headers = member

    response = client.get("/api/v1/search", params={"q": "JORDAN"}, headers=headers)

    assert response.status_code == status.HTTP_200_OK
    assert _ids(response) == {posts["austin"].id, posts["portland"].id}
    assert response.json()["count"] == 2
    assert response.json()["alert"] is None


def test_search_by_type(client, member, posts) -> None:
    _, headers = member

    by_caption = client.get("/api/v1/search", params={"q": "ghosted", "type": "caption"}, headers=headers)
    assert _ids(by_caption) == {posts["dallas"].id}

    by_name = client.get("/api/v1/search", params={"q": "dallas", "type": "subject_name"}, headers=headers)
    assert _ids(by_name) == set()

    by_phone = client.get("/api/v1/search", params={"q": "214", "type": "phone_number"}, headers=headers)
    assert _ids(by_phone) == {posts["dallas"].id}


def test_search_filters(client, member, posts) -> None:
    _, headers = member

    texas = client.get("/api/v1/search", params={"state": "tx"}, headers=headers)
    assert _ids(texas) == {posts["austin"].id, posts["dallas"].id}

    any_state = client.get("/api/v1/search", params={"q": "jordan", "state": "any"}, headers=headers)
    assert _ids(any_state) == {posts["austin"].id, posts["portland"].id}

    city = client.get("/api/v1/search", params={"q": "jordan", "city": "port"}, headers=headers)
    assert _ids(city) == {posts["portland"].id}


def test_search_treats_wildcards_literally(client, member, posts) -> None:
    _, headers = member

    response = client.get("/api/v1/search", params={"q": "%"}, headers=headers)

    assert response.json()["count"] == 0


def test_unknown_search_type(client, member) -> None:
    _, headers = member

    response = client.get("/api/v1/search", params={"q": "x", "type": "zodiac"}, headers=headers)

    assert response.status_code == status.HTTP_400_BAD_REQUEST


def test_create_alert_only_when_results_exist(client, db_session, member, posts) -> None:
    user, headers = member

    empty = client.get(
        "/api/v1/search",
        params={"q": "nobody", "type": "subject_name", "create_alert": "true"},
        headers=headers,
    )
    assert empty.json()["alert"] is None
    assert db_session.query(Alert).count() == 0

    found = client.get(
        "/api/v1/search",
        params={"q": "Riley", "type": "subject_name", "create_alert": "true"},
        headers=headers,
    )
    alert = found.json()["alert"]
    assert alert["alert_type"] == "name"
    assert alert["alert_term"] == "riley"
    assert db_session.query(Alert).filter(Alert.user_id == user.id).count() == 1


def test_search_page_never_creates_alerts(client, db_session, member, posts) -> None:
    _, headers = member

    response = client.get("/search", params={"q": "Riley", "create_alert": "true"}, headers=headers)

    assert response.json()["count"] == 1
    assert db_session.query(Alert).count() == 0


def test_pending_member_cannot_search(client, make_member) -> None:
    _, headers = make_member("pending", is_approved=False)

    response = client.get("/api/v1/search", params={"q": "x"}, headers=headers)

    assert response.status_code == status.HTTP_403_FORBIDDEN
