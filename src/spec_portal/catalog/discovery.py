"""Spec discovery over the content tree, with a time-bounded cache.

``SpecCatalog.list_specs`` is the entry point used by every view: it serves a
``(language, version)`` key from the injected ``SpecCache`` while the entry is
younger than the TTL, and otherwise rescans the tree.
"""

import logging
import time
from collections.abc import Awaitable, Callable
from pathlib import Path
from typing import Any

import aiofiles
from pydantic import ValidationError

from spec_portal.errors import MissingInfoError, SpecNotFoundError, SpecParseError

from .base import (
    ApiSpecDocument,
    Operation,
    ScanReport,
    ServiceInventory,
    SkippedFile,
    SkipReason,
)
from .cache import DEFAULT_TTL_SECONDS, SpecCache
from .parser import build_legacy_document, build_spec_document, parse_spec_text
from .paths import SPECS_SEGMENT, is_spec_file, parse_legacy_path, parse_spec_path

logger = logging.getLogger(__name__)

DEFAULT_LANGUAGES = ["en"]
DEFAULT_VERSIONS = ["v3"]

Reader = Callable[[Path], Awaitable[str]]


async def read_spec_file(path: Path) -> str:
    async with aiofiles.open(path, "r", encoding="utf-8") as f:
        return await f.read()


class SpecCatalog:
    """Discovers API specs under a content root and caches them per (language, version)."""

    def __init__(
        self,
        content_root: Path,
        cache: SpecCache | None = None,
        ttl: float = DEFAULT_TTL_SECONDS,
        clock: Callable[[], float] = time.monotonic,
        reader: Reader = read_spec_file,
    ):
        self.content_root = Path(content_root)
        self.cache = cache if cache is not None else SpecCache()
        self.ttl = ttl
        self.clock = clock
        self._reader = reader

    # -- file access ----------------------------------------------------------

    def specs_dir(self, language: str) -> Path:
        return self.content_root / language / SPECS_SEGMENT

    def spec_files(self, language: str, recursive: bool = True) -> list[Path]:
        """All spec files under a language's apispecs directory, in sorted path order."""
        base = self.specs_dir(language)
        if not base.is_dir():
            return []
        candidates = base.rglob("*") if recursive else base.glob("*")
        return sorted(p for p in candidates if p.is_file() and is_spec_file(p.name))

    def relative(self, path: Path) -> str:
        return path.relative_to(self.content_root).as_posix()

    async def load_document(self, path: Path) -> dict[str, Any]:
        """Read and parse one spec file. Raises OSError or SpecParseError."""
        text = await self._reader(path)
        return parse_spec_text(text, self.relative(path))

    # -- scanning -------------------------------------------------------------

    async def scan(self, language: str, version: str) -> ScanReport:
        """Scan the versioned layout for one (language, version) pair. Always hits the file system."""
        report = ScanReport(language=language, version=version)
        loaded_services: set[str] = set()

        for path in self.spec_files(language):
            relative = self.relative(path)
            location = parse_spec_path(relative)
            if location is None:
                if parse_legacy_path(relative) is None:
                    _skip(report, relative, SkipReason.MALFORMED_PATH,
                          "expected <language>/apispecs/<service>/<version>/<file>.yaml")
                continue
            if location.language != language or location.version != version:
                continue

            report.candidates += 1
            if location.service in loaded_services:
                _skip(report, relative, SkipReason.DUPLICATE_SERVICE,
                      f"service '{location.service}' already loaded from an earlier file")
                continue

            document = await self._load_or_skip(path, relative, report)
            if document is None:
                continue

            try:
                spec = build_spec_document(document, location, relative)
            except ValidationError as e:
                _skip(report, relative, SkipReason.INVALID_DOCUMENT, str(e))
                continue
            report.loaded.append(spec)
            loaded_services.add(location.service)
            logger.info("Loaded spec %s (%s) with %d operations", spec.title, version, len(spec.operations))

        return report

    async def scan_legacy(self, language: str) -> ScanReport:
        """Scan the flat ``<language>/apispecs/<file>.yaml`` layout. Never cached."""
        report = ScanReport(language=language, version=None)
        loaded_ids: set[str] = set()

        for path in self.spec_files(language, recursive=False):
            relative = self.relative(path)
            location = parse_legacy_path(relative)
            if location is None:
                continue

            report.candidates += 1
            if location.spec_id in loaded_ids:
                _skip(report, relative, SkipReason.DUPLICATE_SERVICE,
                      f"spec '{location.spec_id}' already loaded from an earlier file")
                continue

            document = await self._load_or_skip(path, relative, report)
            if document is None:
                continue

            try:
                spec = build_legacy_document(document, location, relative)
            except ValidationError as e:
                _skip(report, relative, SkipReason.INVALID_DOCUMENT, str(e))
                continue
            report.loaded.append(spec)
            loaded_ids.add(location.spec_id)
            logger.info("Loaded legacy spec %s with %d operations", spec.title, len(spec.operations))

        return report

    async def _load_or_skip(self, path: Path, relative: str, report: ScanReport) -> dict[str, Any] | None:
        try:
            return await self.load_document(path)
        except (OSError, UnicodeDecodeError) as e:
            _skip(report, relative, SkipReason.UNREADABLE, str(e))
        except MissingInfoError as e:
            _skip(report, relative, SkipReason.MISSING_INFO, e.reason)
        except SpecParseError as e:
            _skip(report, relative, SkipReason.INVALID_YAML, e.reason)
        return None

    # -- cached views ---------------------------------------------------------

    async def list_specs(self, language: str, version: str) -> list[ApiSpecDocument]:
        """Specs for one (language, version), served from cache while fresh.

        The returned list is shared with the cache; callers must not mutate it.
        """
        key = (language, version)
        entry = self.cache.get(key)
        if entry is not None and entry.is_fresh(self.clock(), self.ttl):
            return entry.value

        logger.info("Loading API specs for language=%s version=%s", language, version)
        try:
            report = await self.scan(language, version)
        except OSError as e:
            logger.error("Spec scan failed for %s/%s: %s", language, version, e)
            return []

        if report.candidates == 0:
            logger.info("No versioned specs for %s/%s, falling back to legacy layout", language, version)
            try:
                legacy = await self.scan_legacy(language)
            except OSError as e:
                logger.error("Legacy spec scan failed for %s: %s", language, e)
                return []
            return legacy.loaded

        self.cache.put(key, report.loaded, self.clock())
        logger.info("Loaded %d API specs for %s/%s", len(report.loaded), language, version)
        return report.loaded

    def clear_cache(self) -> None:
        self.cache.clear()

    async def find_spec(self, service: str, language: str, version: str) -> ApiSpecDocument | None:
        specs = await self.list_specs(language, version)
        return next((spec for spec in specs if spec.id == service), None)

    async def get_spec(self, service: str, language: str, version: str) -> ApiSpecDocument:
        spec = await self.find_spec(service, language, version)
        if spec is None:
            raise SpecNotFoundError(service, language, version)
        return spec

    async def get_operation(
        self, service: str, operation_id: str, language: str, version: str
    ) -> Operation | None:
        spec = await self.find_spec(service, language, version)
        if spec is None:
            return None
        return next((op for op in spec.operations if op.operation_id == operation_id), None)

    # -- inventory ------------------------------------------------------------

    def discover_services(self) -> ServiceInventory:
        """Walk the directory tree for languages, service directories and version directories."""
        languages: list[str] = []
        services: list[str] = []
        versions: list[str] = []

        if not self.content_root.is_dir():
            logger.warning("Content root not found: %s", self.content_root)
            return ServiceInventory(languages=list(DEFAULT_LANGUAGES), services=[], versions=list(DEFAULT_VERSIONS))

        for lang_dir in _subdirs(self.content_root):
            languages.append(lang_dir.name)
            specs_dir = lang_dir / SPECS_SEGMENT
            if not specs_dir.is_dir():
                continue
            for service_dir in _subdirs(specs_dir):
                if service_dir.name not in services:
                    services.append(service_dir.name)
                for version_dir in _subdirs(service_dir):
                    if version_dir.name not in versions:
                        versions.append(version_dir.name)

        return ServiceInventory(
            languages=languages or list(DEFAULT_LANGUAGES),
            services=services,
            versions=sorted(versions) or list(DEFAULT_VERSIONS),
        )

    async def list_all_specs(self) -> list[ApiSpecDocument]:
        """Every versioned spec across all discovered languages and versions."""
        inventory = self.discover_services()
        specs: list[ApiSpecDocument] = []
        for language in inventory.languages:
            for version in inventory.versions:
                specs.extend(spec for spec in await self.list_specs(language, version) if not spec.is_legacy)
        return specs


def _skip(report: ScanReport, path: str, reason: SkipReason, detail: str) -> None:
    logger.warning("Skipping %s (%s): %s", path, reason.value, detail)
    report.skipped.append(SkippedFile(path=path, reason=reason, detail=detail))


def _subdirs(path: Path) -> list[Path]:
    return sorted(p for p in path.iterdir() if p.is_dir())
