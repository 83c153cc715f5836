"""
Middleware para responder los preflight CORS con 204.

CORSMiddleware arma las cabeceras Access-Control-* pero responde 200;
este middleware (registrado por fuera) conserva esas cabeceras y cambia
la respuesta a 204 sin cuerpo.
"""
from fastapi import Request, Response, status
from starlette.middleware.base import BaseHTTPMiddleware

_BODY_HEADERS = {"content-length", "content-type"}


def is_preflight(request: Request) -> bool:
    """Un preflight es un OPTIONS con Origin y Access-Control-Request-Method."""
    return (
        request.method == "OPTIONS"
        and "origin" in request.headers
        and "access-control-request-method" in request.headers
    )


class CorsPreflightMiddleware(BaseHTTPMiddleware):
    """Convierte los preflight aceptados (200) en 204 No Content."""

    async def dispatch(self, request: Request, call_next):
        response = await call_next(request)
        if not is_preflight(request) or response.status_code != status.HTTP_200_OK:
            return response

        headers = {
            key: value
            for key, value in response.headers.items()
            if key.lower() not in _BODY_HEADERS
        }
        return Response(status_code=status.HTTP_204_NO_CONTENT, headers=headers)
