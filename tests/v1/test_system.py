# tests/v1/test_system.py
from fastapi import status


def test_public_config_is_sanitized(client) -> None:
    response = client.get("/api/v1/system/config")

    assert response.status_code == status.HTTP_200_OK
    body = response.json()
    assert set(body["storage"]["buckets"]) == {"avatars", "post-images", "verification-photos"}
    flat = str(body).lower()
    assert "secret" not in flat
    assert "sqlite" not in flat


def test_setup_storage_creates_missing_buckets(client, admin, s3_client) -> None:
    _, headers = admin

    first = client.post("/api/v1/system/setup-storage", headers=headers)
    assert first.status_code == status.HTTP_200_OK
    assert sorted(first.json()["created"]) == ["avatars", "post-images", "verification-photos"]
    assert first.json()["existing"] == []
    assert s3_client.buckets == {"avatars", "post-images", "verification-photos"}

    second = client.post("/api/v1/system/setup-storage", headers=headers)
    assert second.json()["created"] == []
    assert sorted(second.json()["existing"]) == ["avatars", "post-images", "verification-photos"]


def test_setup_storage_requires_admin(client, member, s3_client) -> None:
    _, headers = member

    response = client.post("/api/v1/system/setup-storage", headers=headers)

    assert response.status_code == status.HTTP_403_FORBIDDEN
    assert s3_client.buckets == set()
