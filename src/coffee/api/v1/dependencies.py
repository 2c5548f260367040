"""Shared API dependencies for authentication and access control.

``Guard`` is the single enforcement point of the access policy: every page
and every protected API route depends on it, and it is the only caller of
``coffee.services.access.evaluate``.
"""

from __future__ import annotations

import logging
import time
from collections.abc import Callable
from typing import Annotated

from fastapi import Depends, Request
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from coffee.core.errors import AccessRedirect, CoffeeError
from coffee.core.settings import settings
from coffee.db.session import get_db
from coffee.models import AuthAccount, User
from coffee.services import identity
from coffee.services.access import LOGIN_PAGE, Capability, capability_for_path, evaluate
from coffee.services.admin import AdminService
from coffee.services.storage import ObjectStore, get_object_store
from coffee.services.users import load_profile, repair_admin_profile

logger = logging.getLogger(__name__)

# Bearer is optional because browsers authenticate with the session cookie.
bearer_scheme = HTTPBearer(auto_error=False)

# Type alias for database session dependency
SessionDep = Annotated[Session, Depends(get_db)]


def get_sleep() -> Callable[[float], None]:
    """Sleep used between rate-limit retries; tests override it."""
    return time.sleep


SleepDep = Annotated[Callable[[float], None], Depends(get_sleep)]
StoreDep = Annotated[ObjectStore, Depends(get_object_store)]


def get_optional_object_store() -> ObjectStore | None:
    """Object store for routes where an upload is optional."""
    if not settings.storage_configured:
        return None
    return get_object_store()


OptionalStoreDep = Annotated[ObjectStore | None, Depends(get_optional_object_store)]


def get_session_token(
    request: Request,
    credentials: Annotated[HTTPAuthorizationCredentials | None, Depends(bearer_scheme)],
) -> str | None:
    """Return the caller's token from the Authorization header or the session cookie."""
    if credentials is not None and credentials.scheme.lower() == "bearer":
        return credentials.credentials
    return request.cookies.get(settings.session_cookie_name)


def get_optional_account(
    token: Annotated[str | None, Depends(get_session_token)],
    db: SessionDep,
) -> AuthAccount | None:
    """Resolve the identity account behind the session, if there is one."""
    return identity.resolve_token(db, token)


OptionalAccountDep = Annotated[AuthAccount | None, Depends(get_optional_account)]


def get_current_account(account: OptionalAccountDep) -> AuthAccount:
    """Require a valid session.

    Raises:
        AccessRedirect: To the login page when the caller is not signed in.
    """
    if account is None:
        raise AccessRedirect(LOGIN_PAGE, "Please sign in to continue.", authenticated=False)
    return account


CurrentAccountDep = Annotated[AuthAccount, Depends(get_current_account)]


class Guard:
    """Load the caller's profile and check it against the access policy.

    Args:
        capability: Capability the route needs. When omitted it is derived
            from the request path, which is how page routes are guarded.

    The profile read retries on rate limits; any other failure fails closed
    and sends the caller to the login page. Approved admins with incomplete
    onboarding are repaired before the decision is taken.
    """

    def __init__(self, capability: Capability | None = None) -> None:
        self.capability = capability

    def __call__(
        self,
        request: Request,
        account: CurrentAccountDep,
        db: SessionDep,
        sleep: SleepDep,
    ) -> User:
        try:
            user = load_profile(db, account, sleep=sleep)
            repair_admin_profile(db, user)
        except (SQLAlchemyError, CoffeeError) as exc:
            db.rollback()
            logger.error("Profile lookup failed for %s: %s", account.id, exc)
            raise AccessRedirect(
                LOGIN_PAGE,
                "We could not load your account. Please sign in again.",
                authenticated=False,
            ) from exc

        capability = self.capability or capability_for_path(request.url.path)
        if capability is None:
            return user
        decision = evaluate(user, capability)
        if not decision.allowed:
            logger.info(
                "Denied %s to %s in state %s",
                capability.value,
                user.id,
                decision.state.value,
            )
            raise AccessRedirect(decision.redirect_to or LOGIN_PAGE, decision.reason or "")
        return user


# Type aliases for the common guards. ProfileDep derives the capability from the
# request path: page routes are checked, API routes only get the loaded profile.
ProfileDep = Annotated[User, Depends(Guard())]
MemberDep = Annotated[User, Depends(Guard(Capability.VIEW_CONTENT))]
AdminDep = Annotated[User, Depends(Guard(Capability.ADMINISTER))]


def get_admin_service(db: SessionDep, sleep: SleepDep) -> AdminService:
    return AdminService(db, sleep=sleep)


AdminServiceDep = Annotated[AdminService, Depends(get_admin_service)]
