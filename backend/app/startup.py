"""FastAPI startup registration.

Keep import-time side effects out of routers/modules. Filesystem setup and the
metadata convergence pass are registered here.
"""

from __future__ import annotations

import logging
import os

from fastapi import FastAPI

from .services.vault_service import get_service, get_settings

logger = logging.getLogger(__name__)


def register_startup(app: FastAPI) -> None:
    """Register startup hooks on the provided FastAPI app."""

    @app.on_event("startup")
    async def _prepare_storage() -> None:
        settings = get_settings()
        if settings.storage != "filesystem":
            return
        os.makedirs(settings.data_dir, exist_ok=True)
        # A previous process may have died between a record write and its
        # metadata write.
        report = get_service().reconcile()
        if report.changed:
            logger.warning("Startup reconcile touched %s", report)
