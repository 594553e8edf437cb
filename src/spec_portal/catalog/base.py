"""Unified data models for discovered API specs.

The path grammar, spec parser and discovery catalog all produce these
models for the projection views and the HTTP/CLI surfaces.
"""

from enum import Enum

from pydantic import BaseModel


class SpecLocation(BaseModel):
    """Where a versioned spec file sits in the content tree."""

    language: str
    service: str
    version: str  # version directory, e.g. v2
    file_name: str


class LegacyLocation(BaseModel):
    """A spec file in the flat, non-versioned layout."""

    language: str
    spec_id: str  # file stem
    file_name: str


class Operation(BaseModel):
    """One HTTP method + path pair within a spec."""

    operation_id: str
    method: str  # GET / POST / PUT / PATCH / DELETE / HEAD / OPTIONS
    path: str  # /payments/{id}
    summary: str
    description: str | None = None
    tags: list[str] = []


class ApiSpecDocument(BaseModel):
    """A parsed OpenAPI file, keyed by its service directory."""

    id: str
    file_name: str
    language: str
    version_directory: str | None  # None for the legacy flat layout
    declared_version: str  # info.version, may disagree with version_directory
    title: str
    description: str | None = None
    service_name: str
    operations: list[Operation]
    raw_document: dict  # full parsed tree, kept for $ref resolution
    source_path: str

    @property
    def version(self) -> str:
        return self.declared_version

    @property
    def is_legacy(self) -> bool:
        return self.version_directory is None


class SkipReason(str, Enum):
    MALFORMED_PATH = "malformed_path"
    UNREADABLE = "unreadable"
    INVALID_YAML = "invalid_yaml"
    MISSING_INFO = "missing_info"
    INVALID_DOCUMENT = "invalid_document"
    DUPLICATE_SERVICE = "duplicate_service"


class SkippedFile(BaseModel):
    path: str
    reason: SkipReason
    detail: str = ""


class ScanReport(BaseModel):
    """Outcome of one scan: what loaded and what was skipped, and why."""

    language: str
    version: str | None
    candidates: int = 0
    loaded: list[ApiSpecDocument] = []
    skipped: list[SkippedFile] = []


class HeaderOperation(BaseModel):
    operation_id: str
    summary: str
    navigation_path: str


class HeaderSpec(BaseModel):
    """Compact spec entry for the header navigation menu."""

    id: str
    title: str
    navigation_path: str
    service_name: str
    operations: list[HeaderOperation]


class VersionInfo(BaseModel):
    version: str
    label: str
    badge: str | None = None
    description: str | None = None
    spec_exists: bool = True


class ServiceInventory(BaseModel):
    languages: list[str]
    services: list[str]
    versions: list[str]
