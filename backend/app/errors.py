from typing import Any, Dict, List, Optional
import logging

from fastapi import FastAPI, HTTPException, Request
from fastapi.encoders import jsonable_encoder
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from pydantic import ValidationError
from starlette.exceptions import HTTPException as StarletteHTTPException

from .core.constants import ResponseMessage
from .core.exceptions import DomainException

logger = logging.getLogger(__name__)


def _message_from_status(status_code: int) -> str:
    mapping = {
        400: ResponseMessage.BAD_REQUEST,
        401: ResponseMessage.UNAUTHORIZED,
        403: ResponseMessage.FORBIDDEN,
        404: ResponseMessage.not_found("Route"),
        429: ResponseMessage.TOO_MANY_REQUESTS,
        500: ResponseMessage.INTERNAL_SERVER_ERROR,
    }
    return mapping.get(status_code, ResponseMessage.SOMETHING_WENT_WRONG)


def error_payload(
    request: Request,
    status_code: int,
    message: Optional[str] = None,
    errors: Optional[Any] = None,
    code: Optional[str] = None,
) -> Dict[str, Any]:
    """The failure envelope: the success envelope with success=false and an errors field."""
    url = request.url.path
    if request.url.query:
        url = f"{url}?{request.url.query}"
    payload: Dict[str, Any] = {
        "success": False,
        "statusCode": status_code,
        "request": {"method": request.method, "url": url},
        "message": message or _message_from_status(status_code),
        "data": None,
        "errors": jsonable_encoder(errors) if errors is not None else None,
    }
    if code:
        payload["code"] = code
    return payload


def _parse_detail(detail: Any) -> tuple[Optional[str], Optional[str], Optional[Any]]:
    if isinstance(detail, dict):
        code = detail.get("code") if isinstance(detail.get("code"), str) else None
        message = detail.get("message") or detail.get("detail")
        detail_text = message if isinstance(message, str) else None
        errors = detail.get("details") or detail.get("errors")
        return detail_text, code, errors
    if isinstance(detail, str):
        return detail, None, None
    if detail is None:
        return None, None, None
    return str(detail), None, None


def _field_errors(raw_errors: List[Dict[str, Any]]) -> List[Dict[str, str]]:
    """Flatten pydantic errors into {field, message} pairs, dropping the body/query prefix."""
    fields = []
    for error in raw_errors:
        location = [str(part) for part in error.get("loc", ()) if part not in ("body", "query", "path")]
        fields.append({"field": ".".join(location), "message": error.get("msg", "Invalid value")})
    return fields


def register_error_handlers(app: FastAPI) -> None:
    @app.exception_handler(DomainException)
    async def domain_exception_handler(request: Request, exc: DomainException) -> JSONResponse:
        http_exc = exc.to_http_exception()
        return JSONResponse(
            error_payload(request, exc.status_code, exc.message, exc.details, exc.code),
            status_code=exc.status_code,
            headers=http_exc.headers,
        )

    @app.exception_handler(HTTPException)
    async def http_exception_handler(request: Request, exc: HTTPException) -> JSONResponse:
        detail_text, code, errors = _parse_detail(exc.detail)
        return JSONResponse(
            error_payload(request, exc.status_code, detail_text, errors, code),
            status_code=exc.status_code,
            headers=exc.headers,
        )

    @app.exception_handler(StarletteHTTPException)
    async def starlette_http_exception_handler(
        request: Request, exc: StarletteHTTPException
    ) -> JSONResponse:
        detail_text, code, errors = _parse_detail(exc.detail)
        if exc.status_code == 404 and detail_text == "Not Found":
            detail_text = None
        return JSONResponse(
            error_payload(request, exc.status_code, detail_text, errors, code),
            status_code=exc.status_code,
            headers=exc.headers,
        )

    @app.exception_handler(RequestValidationError)
    async def request_validation_exception_handler(
        request: Request, exc: RequestValidationError
    ) -> JSONResponse:
        errors = _field_errors(exc.errors())
        message = errors[0]["message"] if len(errors) == 1 else ResponseMessage.VALIDATION_FAILED
        return JSONResponse(
            error_payload(request, 400, message, errors, "validation_error"),
            status_code=400,
        )

    @app.exception_handler(ValidationError)
    async def validation_exception_handler(request: Request, exc: ValidationError) -> JSONResponse:
        return JSONResponse(
            error_payload(
                request, 400, ResponseMessage.VALIDATION_FAILED, _field_errors(exc.errors()), "validation_error"
            ),
            status_code=400,
        )

    @app.exception_handler(Exception)
    async def generic_exception_handler(request: Request, exc: Exception) -> JSONResponse:
        logger.exception("Unhandled error on %s %s", request.method, request.url.path)
        return JSONResponse(
            error_payload(request, 500, ResponseMessage.INTERNAL_SERVER_ERROR, code="internal_server_error"),
            status_code=500,
        )
