"""
HTTP JSON APIs for the hostkit tools.

``create_app`` builds one FastAPI application per tool. Collaborators
(sorter, classifier, stores, scanners) are handed in as keyword arguments and
exposed to the routers through ``app.state``.
"""

from typing import Any, Dict

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

from .. import __version__
from ..utils.logging import get_logger
from .branches import router as branches_router
from .downloads import router as downloads_router
from .network import router as network_router
from .ports import router as ports_router

logger = get_logger("api")

ROUTERS = {
    "downloads": downloads_router,
    "branches": branches_router,
    "network": network_router,
    "ports": ports_router,
}

TITLES = {
    "downloads": "Download Manager API",
    "branches": "Git Branch Cleaner API",
    "network": "Network Monitor API",
    "ports": "Port Resolver API",
}


def _validation_message(exc: RequestValidationError) -> str:
    errors = exc.errors()
    if not errors:
        return "Invalid request"
    first = errors[0]
    location = ".".join(str(part) for part in first.get("loc", ()) if part != "body")
    message = first.get("msg", "invalid value")
    return f"Invalid request: {location} {message}".replace("  ", " ").strip()


def _register_error_handlers(app: FastAPI) -> None:
    @app.exception_handler(StarletteHTTPException)
    async def http_error(request: Request, exc: StarletteHTTPException):
        return JSONResponse(status_code=exc.status_code, content={"error": exc.detail})

    @app.exception_handler(RequestValidationError)
    async def validation_error(request: Request, exc: RequestValidationError):
        return JSONResponse(status_code=400, content={"error": _validation_message(exc)})

    @app.exception_handler(Exception)
    async def unhandled_error(request: Request, exc: Exception):
        logger.error(f"Unhandled error on {request.url.path}: {exc}", exc_info=True)
        return JSONResponse(status_code=500, content={"error": str(exc)})


def create_app(tool: str, **services: Any) -> FastAPI:
    """
    Build the FastAPI application for one tool.

    Args:
        tool: One of "downloads", "branches", "network", "ports"
        **services: Objects the tool's router reads from ``app.state``

    Raises:
        ValueError: If the tool is unknown
    """
    if tool not in ROUTERS:
        raise ValueError(f"Unknown tool: {tool}")

    app = FastAPI(title=TITLES[tool], version=__version__)
    app.state.tool = tool
    for name, service in services.items():
        setattr(app.state, name, service)

    _register_error_handlers(app)
    app.include_router(ROUTERS[tool], prefix="/api", tags=[tool])

    @app.get("/")
    async def root() -> Dict[str, Any]:
        endpoints = []
        for route in app.routes:
            path = getattr(route, "path", "")
            if not path.startswith("/api"):
                continue
            for method in sorted(getattr(route, "methods", None) or ()):
                endpoints.append(f"{method} {path}")
        return {"name": TITLES[tool], "version": __version__, "endpoints": endpoints}

    logger.info(f"{TITLES[tool]} application initialized")
    return app


__all__ = ["create_app", "ROUTERS"]
