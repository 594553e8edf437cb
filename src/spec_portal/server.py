"""HTTP surface: raw specs as JSON/YAML, header and version views, access checks."""

import json
import logging

import yaml
from fastapi import APIRouter, Depends, FastAPI, Request
from fastapi.responses import JSONResponse, Response
from pydantic import BaseModel

from spec_portal.access.visibility import VisibilityPolicy, load_visibility_rules
from spec_portal.catalog.discovery import SpecCatalog
from spec_portal.catalog.projection import list_versions, specs_for_header
from spec_portal.config import PortalConfig, load_config
from spec_portal.errors import SpecNotFoundError

logger = logging.getLogger(__name__)

CORS_HEADERS = {
    "Access-Control-Allow-Origin": "*",
    "Access-Control-Allow-Methods": "GET, OPTIONS",
    "Access-Control-Allow-Headers": "Content-Type",
}
SPEC_CACHE_CONTROL = "public, max-age=300"

router = APIRouter()


class AccessCheckRequest(BaseModel):
    path: str | None = None
    roles: list[str] = []


def get_catalog(request: Request) -> SpecCatalog:
    return request.app.state.catalog


def get_config(request: Request) -> PortalConfig:
    return request.app.state.config


def get_policy(request: Request) -> VisibilityPolicy:
    return request.app.state.policy


def error_response(status_code: int, error: str, message: str) -> JSONResponse:
    return JSONResponse({"error": error, "message": message}, status_code=status_code, headers=CORS_HEADERS)


async def _find_spec(spec: str, lang: str | None, version: str | None, catalog: SpecCatalog, config: PortalConfig):
    return await catalog.get_spec(spec, lang or config.default_language, version or config.default_version)


@router.get("/apispecs/{spec}.json")
async def spec_json(
    spec: str,
    lang: str | None = None,
    version: str | None = None,
    catalog: SpecCatalog = Depends(get_catalog),
    config: PortalConfig = Depends(get_config),
):
    """Raw parsed spec as JSON."""
    try:
        document = await _find_spec(spec, lang, version, catalog, config)
        body = json.dumps(document.raw_document, indent=2, ensure_ascii=False, default=str)
    except SpecNotFoundError as e:
        return error_response(404, "Not found", str(e))
    except Exception as e:
        logger.exception("Error serving API spec %s", spec)
        return error_response(500, "Internal server error", str(e))
    return Response(
        body,
        media_type="application/json",
        headers={**CORS_HEADERS, "Cache-Control": SPEC_CACHE_CONTROL},
    )


@router.get("/apispecs/{spec}.yaml")
async def spec_yaml(
    spec: str,
    lang: str | None = None,
    version: str | None = None,
    catalog: SpecCatalog = Depends(get_catalog),
    config: PortalConfig = Depends(get_config),
):
    """Same spec re-serialized to YAML, for the interactive API explorer."""
    try:
        document = await _find_spec(spec, lang, version, catalog, config)
        body = yaml.safe_dump(document.raw_document, sort_keys=False, allow_unicode=True)
    except SpecNotFoundError as e:
        return error_response(404, "Not found", str(e))
    except Exception as e:
        logger.exception("Error serving API spec %s as YAML", spec)
        return error_response(500, "Internal server error", str(e))
    return Response(
        body,
        media_type="application/x-yaml",
        headers={**CORS_HEADERS, "Cache-Control": SPEC_CACHE_CONTROL},
    )


@router.options("/apispecs/{spec}.json")
@router.options("/apispecs/{spec}.yaml")
async def spec_preflight(spec: str):
    return Response(status_code=200, headers=CORS_HEADERS)


@router.get("/api/header")
async def header(
    lang: str | None = None,
    version: str | None = None,
    catalog: SpecCatalog = Depends(get_catalog),
    config: PortalConfig = Depends(get_config),
):
    try:
        specs = await specs_for_header(catalog, lang or config.default_language, version or config.default_version)
    except Exception as e:
        logger.exception("Error building header view")
        return error_response(500, "Internal server error", str(e))
    return [s.model_dump() for s in specs]


@router.get("/api/versions/{service}")
async def versions(
    service: str,
    lang: str | None = None,
    catalog: SpecCatalog = Depends(get_catalog),
    config: PortalConfig = Depends(get_config),
):
    try:
        found = await list_versions(catalog, service, lang or config.default_language)
    except Exception as e:
        logger.exception("Error listing versions for %s", service)
        return error_response(500, "Internal server error", str(e))
    return [v.model_dump() for v in found]


@router.post("/api/auth/check-access")
async def check_access(body: AccessCheckRequest, policy: VisibilityPolicy = Depends(get_policy)):
    if not body.path:
        return JSONResponse({"error": "Path is required"}, status_code=400)
    decision = policy.check(body.path, body.roles)
    return decision.model_dump()


def create_app(
    config: PortalConfig | None = None,
    catalog: SpecCatalog | None = None,
    policy: VisibilityPolicy | None = None,
) -> FastAPI:
    """Build the app; the catalog (and its cache) is owned here and injected per request."""
    config = config or load_config()
    app = FastAPI(title="spec-portal")
    app.state.config = config
    app.state.catalog = catalog or SpecCatalog(config.content_root, ttl=config.cache_ttl)
    app.state.policy = policy or load_visibility_rules(config.properties_path)
    app.include_router(router)
    return app
