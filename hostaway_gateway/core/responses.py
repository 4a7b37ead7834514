from typing import Any, Iterable

from fastapi import Request
from fastapi.responses import JSONResponse, Response
from starlette.exceptions import HTTPException as StarletteHTTPException

from hostaway_gateway.core.errors import GatewayError

ALLOW_HEADERS = "Content-Type, Authorization"


def cors_headers(methods: Iterable[str]) -> dict:
    return {
        "Access-Control-Allow-Origin": "*",
        "Access-Control-Allow-Headers": ALLOW_HEADERS,
        "Access-Control-Allow-Methods": ", ".join([*methods, "OPTIONS"]),
    }


def json_response(status_code: int, body: Any, methods: Iterable[str] = ("POST",)) -> JSONResponse:
    return JSONResponse(
        status_code=status_code,
        content=body,
        headers=cors_headers(methods),
        media_type="application/json; charset=utf-8",
    )


def preflight_response(methods: Iterable[str]) -> Response:
    return Response(status_code=204, headers=cors_headers(methods))


def _route_methods(request: Request) -> Iterable[str]:
    route = request.scope.get("route")
    methods = getattr(route, "methods", None) or ("POST",)
    return sorted(m for m in methods if m != "OPTIONS")


async def gateway_error_handler(request: Request, exc: GatewayError) -> JSONResponse:
    return json_response(exc.status_code, exc.to_body(), _route_methods(request))


async def http_error_handler(request: Request, exc: StarletteHTTPException) -> JSONResponse:
    if exc.status_code == 405:
        allowed = (exc.headers or {}).get("Allow", "POST")
        methods = [m.strip() for m in allowed.split(",") if m.strip() and m.strip() != "OPTIONS"]
        return json_response(
            405,
            {"error": f"Method not allowed. Use {', '.join(methods)}."},
            methods,
        )
    return json_response(exc.status_code, {"error": exc.detail})
