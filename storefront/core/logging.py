"""Logging setup driven by the ``logging`` settings section."""

from __future__ import annotations

import logging

from storefront.core.config import Settings, get_settings


def configure_logging(settings: Settings | None = None) -> None:
    settings = settings or get_settings()
    level = logging.DEBUG if settings.debug else settings.logging.level.upper()
    logging.basicConfig(level=level, format=settings.logging.format)
    # SQL echo is controlled by database.echo, keep the engine logger quiet otherwise.
    if not settings.database.echo:
        logging.getLogger("sqlalchemy.engine").setLevel(logging.WARNING)


__all__ = ["configure_logging"]
