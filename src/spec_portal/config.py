"""Runtime configuration, read from SPEC_PORTAL_* environment variables."""

import logging
import os
from pathlib import Path

from pydantic import BaseModel

from spec_portal.catalog.cache import DEFAULT_TTL_SECONDS

SUPPORTED_LANGUAGES = ("en", "ar")

LOG_FORMAT = "%(asctime)s %(levelname)s %(name)s: %(message)s"


class PortalConfig(BaseModel):
    content_root: Path = Path("src/content/docs")
    cache_ttl: float = DEFAULT_TTL_SECONDS
    default_language: str = "en"
    default_version: str = "v3"
    properties_path: Path = Path("application.properties")
    log_level: str = "INFO"


def load_config() -> PortalConfig:
    defaults = PortalConfig()
    return PortalConfig(
        content_root=os.getenv("SPEC_PORTAL_CONTENT_ROOT", defaults.content_root),
        cache_ttl=os.getenv("SPEC_PORTAL_CACHE_TTL", defaults.cache_ttl),
        default_language=os.getenv("SPEC_PORTAL_DEFAULT_LANGUAGE", defaults.default_language),
        default_version=os.getenv("SPEC_PORTAL_DEFAULT_VERSION", defaults.default_version),
        properties_path=os.getenv("SPEC_PORTAL_PROPERTIES", defaults.properties_path),
        log_level=os.getenv("SPEC_PORTAL_LOG_LEVEL", defaults.log_level),
    )


def configure_logging(level: str = "INFO") -> None:
    """Install one stream handler on the package logger."""
    logger = logging.getLogger("spec_portal")
    logger.setLevel(level.upper())
    if not logger.handlers:
        handler = logging.StreamHandler()
        handler.setFormatter(logging.Formatter(LOG_FORMAT))
        logger.addHandler(handler)
