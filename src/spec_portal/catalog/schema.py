"""Schema reference resolution and example synthesis.

Raw schema mappings are first turned into typed nodes (``to_schema_node``);
resolution and example generation then work purely over those nodes.

Cyclic ``$ref`` chains and overly deep schemas produce ``None`` instead of
recursing forever.
"""

import logging
from typing import Any, Union

from pydantic import BaseModel

logger = logging.getLogger(__name__)

MAX_EXAMPLE_DEPTH = 32

EXAMPLE_EMAIL = "user@example.com"
EXAMPLE_DATE_TIME = "2024-01-01T00:00:00Z"
EXAMPLE_DATE = "2024-01-01"
EXAMPLE_STRING = "string"


class ExampleValue(BaseModel):
    """A schema carrying an explicit ``example``; wins over everything else."""

    value: Any = None


class RefPointer(BaseModel):
    ref: str


class StringSchema(BaseModel):
    format: str | None = None
    enum: list[Any] | None = None


class NumberSchema(BaseModel):
    default: Any = None
    has_default: bool = False


class BooleanSchema(BaseModel):
    default: Any = None
    has_default: bool = False


class ArraySchema(BaseModel):
    items: "SchemaNode | None" = None


class ObjectSchema(BaseModel):
    properties: dict[str, "SchemaNode | None"] = {}


class UntypedSchema(BaseModel):
    type: str | None = None


SchemaNode = Union[
    ExampleValue,
    RefPointer,
    StringSchema,
    NumberSchema,
    BooleanSchema,
    ArraySchema,
    ObjectSchema,
    UntypedSchema,
]

ArraySchema.model_rebuild()
ObjectSchema.model_rebuild()


def to_schema_node(raw: Any, depth: int = 0) -> SchemaNode | None:
    """Convert a raw schema mapping into a typed node. Non-mappings give None."""
    if not isinstance(raw, dict):
        return None
    if depth > MAX_EXAMPLE_DEPTH:
        return UntypedSchema()

    if "example" in raw:
        return ExampleValue(value=raw["example"])
    if "$ref" in raw:
        return RefPointer(ref=str(raw["$ref"]))

    schema_type = raw.get("type")
    if schema_type == "string":
        enum = raw.get("enum")
        fmt = raw.get("format")
        return StringSchema(
            format=fmt if isinstance(fmt, str) else None,
            enum=enum if isinstance(enum, list) and enum else None,
        )
    if schema_type in ("number", "integer"):
        return NumberSchema(default=raw.get("default"), has_default="default" in raw)
    if schema_type == "boolean":
        return BooleanSchema(default=raw.get("default"), has_default="default" in raw)
    if schema_type == "array":
        return ArraySchema(items=to_schema_node(raw.get("items"), depth + 1))
    if schema_type == "object":
        properties = raw.get("properties")
        if not isinstance(properties, dict):
            return ObjectSchema()
        return ObjectSchema(
            properties={str(name): to_schema_node(prop, depth + 1) for name, prop in properties.items()}
        )
    return UntypedSchema(type=schema_type if isinstance(schema_type, str) else None)


def resolve_pointer(ref: str, root: Any) -> Any | None:
    """Walk a local JSON pointer (``#/components/schemas/User``) through the document."""
    if not isinstance(ref, str) or not ref.startswith("#/"):
        return None

    current = root
    for segment in ref[2:].split("/"):
        segment = segment.replace("~1", "/").replace("~0", "~")
        if isinstance(current, dict) and segment in current:
            current = current[segment]
        elif isinstance(current, list) and segment.isdigit() and int(segment) < len(current):
            current = current[int(segment)]
        else:
            return None
    return current


def resolve(schema_or_ref: Any, root: Any) -> SchemaNode | None:
    """Follow ``$ref`` pointers until a concrete schema node is reached."""
    node = to_schema_node(schema_or_ref)
    seen: set[str] = set()
    while isinstance(node, RefPointer):
        if node.ref in seen:
            logger.debug("cyclic $ref chain through %s", node.ref)
            return None
        seen.add(node.ref)
        node = to_schema_node(resolve_pointer(node.ref, root))
    return node


def generate_example(schema_or_ref: Any, root: Any) -> Any:
    """Synthesize a representative example value for a schema."""
    return _example(to_schema_node(schema_or_ref), root, frozenset(), 0)


def _example(node: SchemaNode | None, root: Any, active_refs: frozenset[str], depth: int) -> Any:
    if node is None or depth > MAX_EXAMPLE_DEPTH:
        return None

    if isinstance(node, ExampleValue):
        return node.value

    if isinstance(node, RefPointer):
        if node.ref in active_refs:
            logger.debug("cyclic $ref %s, no example", node.ref)
            return None
        target = resolve_pointer(node.ref, root)
        if target is None:
            logger.debug("unresolved $ref %s", node.ref)
            return None
        return _example(to_schema_node(target), root, active_refs | {node.ref}, depth + 1)

    if isinstance(node, StringSchema):
        if node.format == "email":
            return EXAMPLE_EMAIL
        if node.format == "date-time":
            return EXAMPLE_DATE_TIME
        if node.format == "date":
            return EXAMPLE_DATE
        if node.enum:
            return node.enum[0]
        return EXAMPLE_STRING

    if isinstance(node, NumberSchema):
        return node.default if node.has_default else 0

    if isinstance(node, BooleanSchema):
        return node.default if node.has_default else False

    if isinstance(node, ArraySchema):
        if node.items is None:
            return []
        return [_example(node.items, root, active_refs, depth + 1)]

    if isinstance(node, ObjectSchema):
        return {
            name: _example(prop, root, active_refs, depth + 1)
            for name, prop in node.properties.items()
        }

    return None
