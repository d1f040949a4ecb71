"""Error handling helpers for the pet API."""
from typing import Any, Dict
import logging

from fastapi import FastAPI, Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse

logger = logging.getLogger(__name__)


class ErrorHandler:
    def handle_exception(self, exc: Exception, context: Dict[str, Any] = None) -> Dict[str, Any]:
        logger.error("Unhandled exception in pet API: %s", exc, exc_info=True)
        return {
            "error": "internal_error",
            "message": "An internal error occurred while processing your request. Please try again later.",
            "metadata": {"error": str(exc), "context": context or {}},
        }

    def handle_validation_error(self, exc: RequestValidationError, context: Dict[str, Any] = None) -> Dict[str, Any]:
        logger.info("Rejected invalid request: %s", exc.errors())
        return {
            "error": "validation_failed",
            "message": "The request body is not a valid pet.",
            "detail": [
                {"loc": list(err.get("loc", ())), "msg": err.get("msg"), "type": err.get("type")}
                for err in exc.errors()
            ],
            "metadata": {"context": context or {}},
        }


def register_exception_handlers(app: FastAPI, handler: ErrorHandler = None) -> None:
    handler = handler or ErrorHandler()

    @app.exception_handler(RequestValidationError)
    async def _validation_error(request: Request, exc: RequestValidationError):
        payload = handler.handle_validation_error(exc, context={"path": request.url.path, "method": request.method})
        return JSONResponse(status_code=status.HTTP_422_UNPROCESSABLE_ENTITY, content=payload)

    @app.exception_handler(Exception)
    async def _unhandled_error(request: Request, exc: Exception):
        payload = handler.handle_exception(exc, context={"path": request.url.path, "method": request.method})
        return JSONResponse(status_code=status.HTTP_500_INTERNAL_SERVER_ERROR, content=payload)
