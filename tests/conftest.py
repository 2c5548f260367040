# tests/conftest.py
from __future__ import annotations

import os
from collections.abc import Callable, Generator, Iterator
from itertools import count
from typing import Any

import pytest
from fastapi import FastAPI
from fastapi.testclient import TestClient
from sqlalchemy import create_engine
from sqlalchemy.engine import Engine
from sqlalchemy.orm import Session, sessionmaker
from sqlalchemy.pool import StaticPool

os.environ.setdefault("SECRET_KEY", "test-secret-key-not-for-production")
os.environ.setdefault("DATABASE_URL", "sqlite://")
os.environ.setdefault("ADMIN_EMAIL", "admin@coffee.test")
os.environ.setdefault("SESSION_COOKIE_SECURE", "false")
os.environ.setdefault("RATE_LIMIT_BACKOFF_SECONDS", "1.0")

from coffee.api.v1.dependencies import get_optional_object_store, get_sleep  # noqa: E402
from coffee.core.security import create_access_token  # noqa: E402
from coffee.db.session import Base  # noqa: E402
from coffee.db.session import get_db as app_get_session  # noqa: E402
from coffee.main import app as fastapi_app  # noqa: E402
from coffee.models import AuthAccount, Post, User  # noqa: E402
from coffee.services.storage import ObjectStore, get_object_store  # noqa: E402

TEST_DB_URL = "sqlite://"

_EMAIL_COUNTER = count(1)

PNG_BYTES = b"\x89PNG\r\n\x1a\n" + b"\x00" * 64


class FakeS3Client:
    """In-memory stand-in for the handful of S3 calls the object store makes."""

    def __init__(self) -> None:
        self.buckets: set[str] = set()
        self.objects: dict[tuple[str, str], dict[str, Any]] = {}
        self.policies: dict[str, str] = {}

    def _missing(self, operation: str) -> Exception:
        from botocore.exceptions import ClientError

        return ClientError({"Error": {"Code": "404", "Message": "Not Found"}}, operation)

    def head_bucket(self, Bucket: str) -> dict[str, Any]:
        if Bucket not in self.buckets:
            raise self._missing("HeadBucket")
        return {}

    def create_bucket(self, Bucket: str, **_: Any) -> dict[str, Any]:
        self.buckets.add(Bucket)
        return {}

    def put_bucket_policy(self, Bucket: str, Policy: str) -> dict[str, Any]:
        self.policies[Bucket] = Policy
        return {}

    def put_object(self, Bucket: str, Key: str, Body: bytes, ContentType: str) -> dict[str, Any]:
        self.objects[(Bucket, Key)] = {"body": Body, "content_type": ContentType}
        return {}

    def head_object(self, Bucket: str, Key: str) -> dict[str, Any]:
        if (Bucket, Key) not in self.objects:
            raise self._missing("HeadObject")
        return {"ContentLength": len(self.objects[(Bucket, Key)]["body"])}

    def generate_presigned_post(
        self,
        Bucket: str,
        Key: str,
        Fields: dict[str, str],
        Conditions: list[Any],
        ExpiresIn: int,
    ) -> dict[str, Any]:
        return {
            "url": f"https://storage.test/{Bucket}",
            "fields": {"key": Key, **Fields, "policy": "signed"},
        }


@pytest.fixture(scope="session")
def engine() -> Generator[Engine, None, None]:
    engine = create_engine(
        TEST_DB_URL,
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    Base.metadata.create_all(bind=engine)
    try:
        yield engine
    finally:
        Base.metadata.drop_all(bind=engine)
        engine.dispose()


@pytest.fixture()
def db_session(engine: Engine) -> Iterator[Session]:
    SessionLocal = sessionmaker(bind=engine, autocommit=False, autoflush=False)
    session = SessionLocal()
    try:
        yield session
    finally:
        session.rollback()
        session.close()

        # Ensure each test sees a clean database even if commits occurred.
        with engine.begin() as cleanup_conn:
            for table in reversed(Base.metadata.sorted_tables):
                cleanup_conn.execute(table.delete())


@pytest.fixture(scope="session")
def app() -> FastAPI:
    return fastapi_app


@pytest.fixture()
def s3_client() -> FakeS3Client:
    return FakeS3Client()


@pytest.fixture()
def object_store(s3_client: FakeS3Client) -> ObjectStore:
    return ObjectStore(
        s3_client,
        region="us-east-1",
        public_url="https://cdn.coffee.test",
    )


@pytest.fixture()
def sleeps() -> list[float]:
    """Records every backoff the retry helper asks for instead of sleeping."""
    return []


@pytest.fixture(autouse=True)
def override_dependencies(
    app: FastAPI,
    db_session: Session,
    object_store: ObjectStore,
    sleeps: list[float],
) -> Iterator[None]:
    def _get_session_override() -> Generator[Session, None, None]:
        yield db_session

    app.dependency_overrides[app_get_session] = _get_session_override
    app.dependency_overrides[get_object_store] = lambda: object_store
    app.dependency_overrides[get_optional_object_store] = lambda: object_store
    app.dependency_overrides[get_sleep] = lambda: sleeps.append
    try:
        yield
    finally:
        app.dependency_overrides.clear()


@pytest.fixture()
def client(app: FastAPI) -> Iterator[TestClient]:
    with TestClient(app, base_url="http://test") as test_client:
        yield test_client


def _unique_email(prefix: str) -> str:
    return f"{prefix}{next(_EMAIL_COUNTER)}@coffee.test"


@pytest.fixture()
def make_member(db_session: Session) -> Callable[..., tuple[User, dict[str, str]]]:
    """Create an identity account plus profile and return it with auth headers.

    Keyword arguments override profile columns, e.g. ``is_approved=False``.
    Pass ``profile=False`` to create only the identity account.
    """

    def _make(
        prefix: str = "member",
        *,
        profile: bool = True,
        email: str | None = None,
        **fields: Any,
    ) -> tuple[User | None, dict[str, str]]:
        account = AuthAccount(email=email or _unique_email(prefix), password_hash="unused")
        db_session.add(account)
        db_session.flush()

        user = None
        if profile:
            values: dict[str, Any] = {
                "full_name": f"{prefix.title()} Person",
                "display_name": prefix.title(),
                "verification_photo_url": "https://cdn.coffee.test/verification-photos/x.png",
                "agreed_to_terms": True,
                "is_approved": True,
                "is_rejected": False,
                "is_admin": False,
            }
            values.update(fields)
            user = User(id=account.id, email=account.email, **values)
            db_session.add(user)
        db_session.commit()

        token = create_access_token(
            account.id,
            email=account.email,
            token_version=account.token_version,
        )
        return user, {"Authorization": f"Bearer {token}"}

    return _make


@pytest.fixture()
def member(make_member) -> tuple[User, dict[str, str]]:
    return make_member("member")


@pytest.fixture()
def other_member(make_member) -> tuple[User, dict[str, str]]:
    return make_member("other")


@pytest.fixture()
def admin(make_member) -> tuple[User, dict[str, str]]:
    return make_member("admin", is_admin=True)


@pytest.fixture()
def make_post(db_session: Session) -> Callable[..., Post]:
    def _make(author: User, **fields: Any) -> Post:
        values: dict[str, Any] = {
            "subject_name": "Jordan Smith",
            "subject_age": 31,
            "city": "Austin",
            "state": "TX",
            "phone_number": "512-555-0100",
            "caption": "Met on an app, seemed genuine.",
            "photos": [],
        }
        values.update(fields)
        post = Post(user_id=author.id, **values)
        db_session.add(post)
        db_session.commit()
        db_session.refresh(post)
        return post

    return _make


@pytest.fixture()
def png_bytes() -> bytes:
    return PNG_BYTES
