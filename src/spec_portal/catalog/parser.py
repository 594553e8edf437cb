"""OpenAPI document parser.

Parses YAML spec text and extracts operations into Operation models.
"""

import re
from functools import lru_cache
from typing import Any

import yaml
from pyuca import Collator

from spec_portal.errors import MissingInfoError, SpecParseError

from .base import ApiSpecDocument, LegacyLocation, Operation, SpecLocation

HTTP_METHODS = ("get", "post", "put", "delete", "patch", "options", "head")

DEFAULT_DECLARED_VERSION = "1.0.0"


def parse_spec_text(text: str, file_name: str = "<string>") -> dict[str, Any]:
    """Parse YAML text into an OpenAPI document tree.

    Raises SpecParseError when the YAML is broken or the document has no ``info`` block.
    """
    try:
        doc = yaml.safe_load(text)
    except yaml.YAMLError as e:
        raise SpecParseError(file_name, f"invalid YAML: {e}") from e

    if not isinstance(doc, dict):
        raise SpecParseError(file_name, "document is not a mapping")
    if not doc.get("info"):
        raise MissingInfoError(file_name, "missing info section")
    if not isinstance(doc["info"], dict):
        raise MissingInfoError(file_name, "info section is not a mapping")
    return doc


def generate_operation_id(method: str, path: str) -> str:
    """Synthesize an operationId, e.g. ``get /users/{id}/orders`` -> ``get_users_id_orders``."""
    clean = re.sub(r"[{}]", "", path)
    clean = re.sub(r"[^a-zA-Z0-9]+", "_", clean)
    clean = clean.strip("_")
    return f"{method.lower()}_{clean}"


def format_service_name(spec_id: str) -> str:
    """Display name for a service directory: ``payment-api`` -> ``Payment API``."""
    words = [word[:1].upper() + word[1:] for word in spec_id.split("-")]
    return re.sub(r"Api$", "API", " ".join(words))


def extract_operations(doc: dict[str, Any]) -> list[Operation]:
    """Extract every method+path operation, sorted by summary."""
    operations: list[Operation] = []
    seen_ids: dict[str, int] = {}
    paths = doc.get("paths") or {}
    if not isinstance(paths, dict):
        return operations

    for path, path_item in paths.items():
        if not isinstance(path_item, dict):
            continue
        for method in HTTP_METHODS:
            operation = path_item.get(method)
            if not isinstance(operation, dict):
                continue

            operation_id = _text(operation.get("operationId")) or generate_operation_id(method, str(path))
            operation_id = _unique_id(operation_id, seen_ids)

            operations.append(
                Operation(
                    operation_id=operation_id,
                    method=method.upper(),
                    path=str(path),
                    summary=_text(operation.get("summary")) or f"{method.upper()} {path}",
                    description=_text(operation.get("description")),
                    tags=_tags(operation.get("tags")),
                )
            )

    return sorted(operations, key=lambda op: _collator().sort_key(op.summary))


@lru_cache(maxsize=None)
def _collator() -> Collator:
    """Unicode collation, so summaries order case-insensitively like a browser locale compare."""
    return Collator()


def _text(value: Any) -> str | None:
    """YAML scalars such as dates and numbers, as the text they were written as."""
    if value is None:
        return None
    return str(value)


def _tags(value: Any) -> list[str]:
    if not value:
        return []
    if not isinstance(value, list):
        return [str(value)]
    return [str(tag) for tag in value]


def _unique_id(operation_id: str, seen_ids: dict[str, int]) -> str:
    count = seen_ids.get(operation_id, 0) + 1
    seen_ids[operation_id] = count
    if count == 1:
        return operation_id
    return _unique_id(f"{operation_id}_{count}", seen_ids)


def build_spec_document(doc: dict[str, Any], location: SpecLocation, source_path: str) -> ApiSpecDocument:
    info = doc["info"]
    return ApiSpecDocument(
        id=location.service,
        file_name=location.file_name,
        language=location.language,
        version_directory=location.version,
        declared_version=str(info.get("version") or location.version),
        title=_text(info.get("title")) or format_service_name(location.service),
        description=_text(info.get("description")),
        service_name=format_service_name(location.service),
        operations=extract_operations(doc),
        raw_document=doc,
        source_path=source_path,
    )


def build_legacy_document(doc: dict[str, Any], location: LegacyLocation, source_path: str) -> ApiSpecDocument:
    info = doc["info"]
    return ApiSpecDocument(
        id=location.spec_id,
        file_name=location.file_name,
        language=location.language,
        version_directory=None,
        declared_version=str(info.get("version") or DEFAULT_DECLARED_VERSION),
        title=_text(info.get("title")) or location.spec_id,
        description=_text(info.get("description")),
        service_name=format_service_name(location.spec_id),
        operations=extract_operations(doc),
        raw_document=doc,
        source_path=source_path,
    )
