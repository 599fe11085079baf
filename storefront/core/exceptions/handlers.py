import logging
from urllib.parse import urlencode

from fastapi import FastAPI, Request, status
from fastapi.encoders import jsonable_encoder
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse, RedirectResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

from storefront.core.exceptions.app_exception import AppHttpException
from storefront.core.templates import render

JSON_PREFIXES = ("/api/", "/auth/")


def wants_json(request: Request) -> bool:
    path = request.url.path
    return path.startswith(JSON_PREFIXES) or path in ("/api", "/auth")


def _error_page(request: Request, status_code: int, message: str):
    return render(request, "error.html", {
        "status_code": status_code,
        "message": message,
    }, status_code=status_code)


async def http_exception_handler(request: Request, exc: StarletteHTTPException):
    if wants_json(request):
        content = exc.content if isinstance(exc, AppHttpException) else {"detail": exc.detail}
        return JSONResponse(status_code=exc.status_code, content=content, headers=getattr(exc, "headers", None))

    if exc.status_code == status.HTTP_401_UNAUTHORIZED:
        target = request.url.path if request.method == "GET" else "/products"
        if request.method == "GET" and request.url.query:
            target = f"{target}?{request.url.query}"
        return RedirectResponse(url=f"/login?{urlencode({'next': target})}", status_code=status.HTTP_303_SEE_OTHER)

    if exc.status_code == status.HTTP_403_FORBIDDEN:
        return RedirectResponse(url="/products?error=access_denied", status_code=status.HTTP_303_SEE_OTHER)

    return _error_page(request, exc.status_code, str(exc.detail))


async def validation_exception_handler(request: Request, exc: RequestValidationError):
    error = AppHttpException.invalid_request(jsonable_encoder(exc.errors()))
    if wants_json(request):
        return JSONResponse(status_code=error.status_code, content=error.content)

    return _error_page(request, error.status_code, f"Invalid or missing fields: {', '.join(error.fields)}")


async def unhandled_exception_handler(request: Request, exc: Exception):
    logging.error(f"SYSTEM >>> Unexpected error on {request.method} {request.url.path}: {exc}", exc_info=True)
    if wants_json(request):
        return JSONResponse(status_code=status.HTTP_500_INTERNAL_SERVER_ERROR, content={"detail": "Internal server error"})
    return _error_page(request, status.HTTP_500_INTERNAL_SERVER_ERROR, "Something went wrong. Please try again later.")


def register_exception_handlers(app: FastAPI):
    app.add_exception_handler(StarletteHTTPException, http_exception_handler)
    app.add_exception_handler(RequestValidationError, validation_exception_handler)
    app.add_exception_handler(Exception, unhandled_exception_handler)
