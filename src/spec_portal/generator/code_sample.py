"""Code sample extractor. Turns one OpenAPI operation into request data and a curl snippet."""

import json
import shlex
from typing import Any

from pydantic import BaseModel

from spec_portal.catalog.parser import HTTP_METHODS
from spec_portal.catalog.schema import generate_example, resolve_pointer

DEFAULT_SERVER = "https://api.example.com"


class OperationData(BaseModel):
    """Everything about an operation needed to build a request."""

    method: str
    path: str
    operation_id: str | None = None
    summary: str | None = None
    description: str | None = None
    request_body: dict | None = None
    parameters: list[dict] = []
    responses: dict = {}
    security: list[dict] = []
    servers: list[dict] = []


class CodeSample(BaseModel):
    method: str
    path: str  # path parameters already substituted
    server_url: str
    headers: dict[str, str]
    request_body: Any = None
    parameters: list[dict] = []
    operation_id: str | None = None
    summary: str | None = None

    @property
    def url(self) -> str:
        return f"{self.server_url.rstrip('/')}{self.path}"


def _substitute_variables(server: dict) -> str:
    url = str(server.get("url", ""))
    for name, variable in (server.get("variables") or {}).items():
        placeholder = f"{{{name}}}"
        if placeholder in url and isinstance(variable, dict):
            enum = variable.get("enum") or [""]
            url = url.replace(placeholder, str(variable.get("default") or enum[0]))
    if not url.startswith("http"):
        url = f"https://{url}"
    return url


def _simple_example(schema: dict | None) -> Any:
    """Placeholder value for a parameter that declares no example."""
    if not schema:
        return "example_value"
    schema_type = schema.get("type")
    if schema_type == "string":
        if schema.get("format") == "email":
            return "user@example.com"
        if schema.get("format") == "uuid":
            return "550e8400-e29b-41d4-a716-446655440000"
        return "example_string"
    if schema_type in ("number", "integer"):
        return 123
    if schema_type == "boolean":
        return True
    return "example_value"


class CodeSampleExtractor:
    """Extracts request samples from a parsed OpenAPI document."""

    def __init__(self, document: dict, default_server: str | None = None):
        self.document = document
        self.default_server = default_server or self._document_server()

    def _document_server(self) -> str:
        servers = self.document.get("servers") or []
        if servers and isinstance(servers[0], dict):
            return _substitute_variables(servers[0])
        return DEFAULT_SERVER

    def server_url(self, servers: list[dict] | None) -> str:
        if servers and isinstance(servers[0], dict):
            return _substitute_variables(servers[0])
        return self.default_server

    def extract_operation(self, path: str, method: str) -> OperationData | None:
        path_item = (self.document.get("paths") or {}).get(path)
        if not isinstance(path_item, dict):
            return None
        operation = path_item.get(method.lower())
        if not isinstance(operation, dict):
            return None

        return OperationData(
            method=method.upper(),
            path=path,
            operation_id=operation.get("operationId"),
            summary=operation.get("summary"),
            description=operation.get("description"),
            request_body=operation.get("requestBody"),
            parameters=[*(path_item.get("parameters") or []), *(operation.get("parameters") or [])],
            responses=operation.get("responses") or {},
            security=operation.get("security") or self.document.get("security") or [],
            servers=operation.get("servers") or path_item.get("servers") or self.document.get("servers") or [],
        )

    def all_operations(self) -> list[OperationData]:
        operations = []
        for path, path_item in (self.document.get("paths") or {}).items():
            if not isinstance(path_item, dict):
                continue
            for method in HTTP_METHODS:
                if method in path_item:
                    data = self.extract_operation(path, method)
                    if data is not None:
                        operations.append(data)
        return operations

    def build(self, operation: OperationData) -> CodeSample:
        parameters = self._parameters(operation)
        path = operation.path
        for param in parameters:
            if param.get("in") == "path":
                path = path.replace(f"{{{param['name']}}}", str(param["example"]))

        return CodeSample(
            method=operation.method,
            path=path,
            server_url=self.server_url(operation.servers),
            headers=self._headers(operation),
            request_body=self._request_body(operation),
            parameters=parameters,
            operation_id=operation.operation_id,
            summary=operation.summary,
        )

    def _parameters(self, operation: OperationData) -> list[dict]:
        params = []
        for param in operation.parameters:
            if "$ref" in param:
                param = resolve_pointer(param["$ref"], self.document) or {}
            if "name" not in param:
                continue
            example = param.get("example")
            if example is None:
                example = _simple_example(param.get("schema"))
            params.append({**param, "example": example})
        return params

    def _headers(self, operation: OperationData) -> dict[str, str]:
        headers = {"Content-Type": "application/json", "Accept": "application/json"}
        schemes = (self.document.get("components") or {}).get("securitySchemes") or {}

        for requirement in operation.security:
            for name in requirement:
                scheme = schemes.get(name)
                if not isinstance(scheme, dict):
                    continue
                if scheme.get("type") == "http" and scheme.get("scheme") == "bearer":
                    headers["Authorization"] = "Bearer YOUR_ACCESS_TOKEN"
                elif scheme.get("type") == "apiKey" and scheme.get("in") == "header":
                    headers[str(scheme.get("name"))] = "YOUR_API_KEY"

        for param in self._parameters(operation):
            if param.get("in") == "header" and param.get("required"):
                headers[str(param["name"])] = str(param["example"])
        return headers

    def _request_body(self, operation: OperationData) -> Any:
        body = operation.request_body
        if not body:
            return None
        if "$ref" in body:
            body = resolve_pointer(body["$ref"], self.document) or {}
        content = body.get("content") or {}
        media = content.get("application/json")
        if not (isinstance(media, dict) and media.get("schema")):
            media = next(iter(content.values()), None)
        if isinstance(media, dict) and media.get("schema"):
            return generate_example(media["schema"], self.document)
        return None


def render_curl(sample: CodeSample) -> str:
    lines = [f"curl -X {sample.method} {shlex.quote(sample.url)}"]
    for name, value in sample.headers.items():
        lines.append(f"  -H {shlex.quote(f'{name}: {value}')}")
    if sample.request_body is not None and sample.method not in ("GET", "HEAD"):
        body = json.dumps(sample.request_body, indent=2, ensure_ascii=False, default=str)
        lines.append(f"  -d {shlex.quote(body)}")
    return " \\\n".join(lines)
