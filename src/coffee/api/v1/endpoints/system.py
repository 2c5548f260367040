"""System endpoints for the Coffee API."""

from __future__ import annotations

import logging

from fastapi import APIRouter

from coffee.api.v1.dependencies import AdminDep, StoreDep
from coffee.core.settings import settings
from coffee.schemas.admin import StorageSetupResponse
from coffee.services.storage import BUCKETS

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/system", tags=["system"])


@router.get("/config")
async def get_public_config() -> dict[str, object]:
    """Return a sanitized snapshot of public runtime configuration.

    Excludes secrets and connection strings.
    """
    return {
        "app": {
            "name": settings.app_name,
            "version": settings.app_version,
            "debug": settings.debug,
        },
        "limits": {
            "feed_page_size": settings.feed_page_size,
            "search_result_limit": settings.search_result_limit,
            "min_password_length": settings.min_password_length,
        },
        "storage": {
            "configured": settings.storage_configured,
            "buckets": {
                name: {
                    "max_bytes": spec.max_bytes,
                    "allowed_mime_types": list(spec.allowed_mime_types),
                }
                for name, spec in BUCKETS.items()
            },
        },
    }


@router.post("/setup-storage", response_model=StorageSetupResponse)
async def setup_storage(admin: AdminDep, store: StoreDep) -> StorageSetupResponse:
    """Create any missing bucket. Buckets that already exist are left as they are."""
    created: list[str] = []
    existing: list[str] = []
    for spec in BUCKETS.values():
        if store.ensure_bucket(spec):
            created.append(spec.name)
        else:
            existing.append(spec.name)
    logger.info("Storage setup by %s: created=%s existing=%s", admin.id, created, existing)
    return StorageSetupResponse(created=created, existing=existing)
