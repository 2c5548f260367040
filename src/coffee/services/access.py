# src/coffee/services/access.py
"""Account states and the access policy built on them.

Everything in this module is pure: it looks at a ``User`` row (or its absence)
and answers which state the account is in, what the account may do, and where
a caller should be sent when a route asks for something the account may not
do. The only enforcement point that calls it is
``coffee.api.v1.dependencies.Guard``.

State resolution, in order::

    no profile row                       -> NEW
    terms, full name or photo missing    -> AGREEMENT_PENDING
    is_rejected                          -> REJECTED
    is_approved                          -> APPROVED
    otherwise                            -> APPROVAL_PENDING
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum

from coffee.models import User

LOGIN_PAGE = "/login"
AGREEMENT_PAGE = "/agreement"
PENDING_PAGE = "/pending"
FEED_PAGE = "/feed"


class AccountState(str, Enum):
    """Lifecycle state of a member account."""

    NEW = "new"
    AGREEMENT_PENDING = "agreement_pending"
    APPROVAL_PENDING = "approval_pending"
    APPROVED = "approved"
    REJECTED = "rejected"


class Capability(str, Enum):
    """Actions a route or API call can require."""

    VIEW_CONTENT = "view_content"
    CREATE_POST = "create_post"
    COMMENT = "comment"
    VOTE = "vote"
    MANAGE_ALERTS = "manage_alerts"
    READ_NOTIFICATIONS = "read_notifications"
    EDIT_PROFILE = "edit_profile"
    COMPLETE_AGREEMENT = "complete_agreement"
    VIEW_PENDING = "view_pending"
    ADMINISTER = "administer"


_MEMBER_CAPABILITIES = frozenset(
    {
        Capability.VIEW_CONTENT,
        Capability.CREATE_POST,
        Capability.COMMENT,
        Capability.VOTE,
        Capability.MANAGE_ALERTS,
        Capability.READ_NOTIFICATIONS,
        Capability.EDIT_PROFILE,
    }
)

STATE_CAPABILITIES: dict[AccountState, frozenset[Capability]] = {
    AccountState.NEW: frozenset({Capability.COMPLETE_AGREEMENT}),
    AccountState.AGREEMENT_PENDING: frozenset({Capability.COMPLETE_AGREEMENT}),
    AccountState.APPROVAL_PENDING: frozenset({Capability.VIEW_PENDING}),
    AccountState.REJECTED: frozenset({Capability.VIEW_PENDING}),
    AccountState.APPROVED: _MEMBER_CAPABILITIES,
}

LANDING_PAGES: dict[AccountState, str] = {
    AccountState.NEW: AGREEMENT_PAGE,
    AccountState.AGREEMENT_PENDING: AGREEMENT_PAGE,
    AccountState.APPROVAL_PENDING: PENDING_PAGE,
    AccountState.REJECTED: PENDING_PAGE,
    AccountState.APPROVED: FEED_PAGE,
}

# Page prefixes and the capability each one needs. Longest prefix wins.
ROUTE_CAPABILITIES: dict[str, Capability] = {
    "/feed": Capability.VIEW_CONTENT,
    "/post": Capability.VIEW_CONTENT,
    "/swipe": Capability.VOTE,
    "/search": Capability.VIEW_CONTENT,
    "/alerts": Capability.MANAGE_ALERTS,
    "/notifications": Capability.READ_NOTIFICATIONS,
    "/admin": Capability.ADMINISTER,
    "/profile": Capability.EDIT_PROFILE,
    "/user": Capability.VIEW_CONTENT,
    AGREEMENT_PAGE: Capability.COMPLETE_AGREEMENT,
    PENDING_PAGE: Capability.VIEW_PENDING,
}


@dataclass(frozen=True)
class AccessDecision:
    """Outcome of evaluating a capability for an account."""

    allowed: bool
    state: AccountState
    redirect_to: str | None = None
    reason: str | None = None


def resolve_state(user: User | None) -> AccountState:
    """Map a profile row to its account state."""
    if user is None:
        return AccountState.NEW
    if not user.has_completed_agreement:
        return AccountState.AGREEMENT_PENDING
    if user.is_rejected:
        return AccountState.REJECTED
    if user.is_approved:
        return AccountState.APPROVED
    return AccountState.APPROVAL_PENDING


def allowed_capabilities(state: AccountState, *, is_admin: bool = False) -> frozenset[Capability]:
    """Return every capability granted to an account in ``state``."""
    granted = STATE_CAPABILITIES[state]
    if is_admin and state is AccountState.APPROVED:
        granted = granted | {Capability.ADMINISTER}
    return granted


def capability_for_path(path: str) -> Capability | None:
    """Return the capability guarding ``path``, or None for public pages."""
    matches = [
        prefix
        for prefix in ROUTE_CAPABILITIES
        if path == prefix or path.startswith(prefix.rstrip("/") + "/")
    ]
    if not matches:
        return None
    return ROUTE_CAPABILITIES[max(matches, key=len)]


def _denial_reason(state: AccountState, capability: Capability) -> str:
    if state in (AccountState.NEW, AccountState.AGREEMENT_PENDING):
        return "Complete the member agreement to continue."
    if state is AccountState.APPROVAL_PENDING:
        return "Your account is awaiting admin approval."
    if state is AccountState.REJECTED:
        return "Your account has been rejected."
    if capability is Capability.ADMINISTER:
        return "Admin access required."
    return "You have already completed this step."


def evaluate(user: User | None, capability: Capability) -> AccessDecision:
    """Decide whether ``user`` may exercise ``capability``.

    A denied decision carries the landing page of the account's state, so an
    approved member asking for the agreement page is sent to the feed and a
    pending member asking for the feed is sent to the pending page.
    """
    state = resolve_state(user)
    is_admin = bool(user and user.is_admin)
    if capability in allowed_capabilities(state, is_admin=is_admin):
        return AccessDecision(allowed=True, state=state)
    return AccessDecision(
        allowed=False,
        state=state,
        redirect_to=LANDING_PAGES[state],
        reason=_denial_reason(state, capability),
    )


def needs_admin_repair(user: User | None) -> bool:
    """True for an approved admin whose agreement fields are incomplete.

    Such rows are repaired instead of being sent to the agreement page, so an
    admin can never be locked out by missing onboarding data.
    """
    if user is None:
        return False
    return bool(user.is_admin and user.is_approved and not user.has_completed_agreement)
