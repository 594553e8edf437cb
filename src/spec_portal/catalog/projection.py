"""Presentation views over discovered specs: header navigation and version listings."""

import logging
from urllib.parse import parse_qs, urlencode

from pydantic import BaseModel

from spec_portal.errors import SpecParseError

from .base import ApiSpecDocument, HeaderOperation, HeaderSpec, VersionInfo
from .discovery import SpecCatalog
from .paths import is_version_directory, parse_spec_path, version_number

logger = logging.getLogger(__name__)

HEADER_OPERATION_LIMIT = 8
DEFAULT_API_VERSION = "v2"

LATEST_DESCRIPTION = "Current stable version with latest features"
LEGACY_DESCRIPTION = "Legacy version - consider upgrading"
STABLE_DESCRIPTION = "Stable version"


class ApiPathInfo(BaseModel):
    service: str | None
    operation_id: str | None
    version: str
    language: str


# -- header ------------------------------------------------------------------


def _navigation_path(spec: ApiSpecDocument, language: str, version: str, operation_id: str | None = None) -> str:
    path = f"/api/{spec.id}"
    if operation_id:
        path += f"/{operation_id}"
    if spec.is_legacy:
        return f"{path}?lang={language}"
    return f"{path}?version={version}&lang={language}"


def header_entry(spec: ApiSpecDocument, language: str, version: str) -> HeaderSpec:
    return HeaderSpec(
        id=spec.id,
        title=spec.title,
        navigation_path=_navigation_path(spec, language, version),
        service_name=spec.service_name,
        operations=[
            HeaderOperation(
                operation_id=op.operation_id,
                summary=op.summary,
                navigation_path=_navigation_path(spec, language, version, op.operation_id),
            )
            for op in spec.operations[:HEADER_OPERATION_LIMIT]
        ],
    )


async def specs_for_header(catalog: SpecCatalog, language: str, version: str) -> list[HeaderSpec]:
    """Compact header-menu view: one entry per service, first 8 operations each."""
    entries: list[HeaderSpec] = []
    seen: set[str] = set()
    for spec in await catalog.list_specs(language, version):
        if spec.id in seen:
            logger.warning("Duplicate header spec %s ignored (%s)", spec.id, spec.source_path)
            continue
        seen.add(spec.id)
        entries.append(header_entry(spec, language, version))
    return entries


# -- versions ----------------------------------------------------------------


async def list_versions(catalog: SpecCatalog, service: str, language: str) -> list[VersionInfo]:
    """Versions available for a service, latest first.

    Cached in the catalog's cache under ``("versions", service, language)``.
    """
    key = ("versions", service, language)
    entry = catalog.cache.get(key)
    if entry is not None and entry.is_fresh(catalog.clock(), catalog.ttl):
        return entry.value

    found: dict[str, dict] = {}  # version -> info block of first valid spec
    for path in catalog.spec_files(language):
        relative = catalog.relative(path)
        location = parse_spec_path(relative)
        if location is None or location.service != service:
            continue
        if not is_version_directory(location.version) or location.version in found:
            continue
        try:
            document = await catalog.load_document(path)
        except (OSError, UnicodeDecodeError, SpecParseError) as e:
            logger.warning("Skipping %s while listing versions: %s", relative, e)
            continue
        found[location.version] = document["info"]

    ordered = sorted(found, key=version_number, reverse=True)
    versions = [_version_info(v, found[v], index, len(ordered)) for index, v in enumerate(ordered)]

    catalog.cache.put(key, versions, catalog.clock())
    logger.info("Detected %d versions for %s: %s", len(versions), service, ordered)
    return versions


def _version_info(version: str, info: dict, index: int, total: int) -> VersionInfo:
    is_latest = index == 0
    is_legacy = not is_latest and index == total - 1

    badge = info.get("x-version-status")
    if not badge:
        declared = str(info.get("version") or "")
        if "beta" in declared:
            badge = "Beta"
        elif "alpha" in declared:
            badge = "Alpha"
        elif is_latest:
            badge = "Latest"
        elif is_legacy:
            badge = "Legacy"

    if is_latest:
        default_description = LATEST_DESCRIPTION
    elif is_legacy:
        default_description = LEGACY_DESCRIPTION
    else:
        default_description = STABLE_DESCRIPTION

    return VersionInfo(
        version=version,
        label=f"{version} (Latest)" if is_latest else version,
        badge=str(badge) if badge else None,
        description=str(info.get("description") or default_description),
        spec_exists=True,
    )


async def version_exists(catalog: SpecCatalog, service: str, version: str, language: str) -> bool:
    versions = await list_versions(catalog, service, language)
    return any(v.version == version and v.spec_exists for v in versions)


async def services_with_versions(catalog: SpecCatalog, language: str) -> dict[str, list[VersionInfo]]:
    services: list[str] = []
    for path in catalog.spec_files(language):
        location = parse_spec_path(catalog.relative(path))
        if location is not None and location.service not in services:
            services.append(location.service)
    return {service: await list_versions(catalog, service, language) for service in services}


# -- URL helpers ---------------------------------------------------------------


def parse_api_path(url: str) -> ApiPathInfo:
    """Split ``/api/<service>[/<operationId>][?lang=..&version=..]``."""
    path, _, query = url.partition("?")
    parts = [p for p in path.split("/") if p]
    params = parse_qs(query)
    return ApiPathInfo(
        service=parts[1] if len(parts) > 1 else None,
        operation_id=parts[2] if len(parts) > 2 else None,
        version=current_api_version(params),
        language=params.get("lang", ["en"])[0],
    )


def current_api_version(params: dict[str, list[str]], default: str = DEFAULT_API_VERSION) -> str:
    version = params.get("version", [None])[0]
    if version and is_version_directory(version):
        return version
    return default


def generate_api_version_path(current: str, new_version: str) -> str:
    """Same API page, pointed at another version; other query params are kept."""
    path, _, query = current.partition("?")
    params = {key: values[0] for key, values in parse_qs(query).items()}
    params["version"] = new_version

    parts = [p for p in path.split("/") if p]
    if len(parts) >= 2 and parts[0] == "api":
        path = "/" + "/".join(parts[:3])
    return f"{path}?{urlencode(params)}"
