from flask import jsonify, request
from pydantic import ValidationError as PydanticValidationError
from werkzeug.exceptions import HTTPException


class ApiError(Exception):
    """Base class for errors rendered as ``{"success": false, "error": ...}``."""

    status_code = 400
    message = "Bad Request"

    def __init__(self, message=None, details=None, status_code=None):
        super().__init__(message or self.message)
        self.message = message or self.message
        self.details = details
        if status_code is not None:
            self.status_code = status_code

    def to_dict(self):
        payload = {"success": False, "error": self.message}
        if self.details:
            payload["details"] = self.details
        return payload


class BadRequestError(ApiError):
    status_code = 400
    message = "Bad Request"


class ValidationError(ApiError):
    status_code = 422
    message = "Validation failed"


class UnauthorizedError(ApiError):
    status_code = 401
    message = "Authentication required"


class ForbiddenError(ApiError):
    status_code = 403
    message = "Forbidden"


class NotFoundError(ApiError):
    status_code = 404
    message = "Not Found"


class ConflictError(ApiError):
    status_code = 409
    message = "Conflict"


DUPLICATE_SUBMISSION = "Duplicate submission detected"
RECEIPT_EXISTS = "Receipt number already exists"


def pydantic_details(exc: PydanticValidationError) -> list[dict]:
    """Flatten pydantic errors into ``[{path, message}]``."""
    details = []
    for err in exc.errors():
        path = ".".join(str(p) for p in err.get("loc", ()))
        message = err.get("msg", "Invalid value")
        if message.startswith("Value error, "):
            message = message[len("Value error, "):]
        details.append({"path": path, "message": message})
    return details


def register_error_handlers(app):
    @app.errorhandler(ApiError)
    def _api_error(e: ApiError):
        if e.status_code >= 500:
            app.logger.error("API error on %s: %s", request.path, e.message)
        return jsonify(e.to_dict()), e.status_code

    @app.errorhandler(PydanticValidationError)
    def _validation_error(e: PydanticValidationError):
        return jsonify({"success": False, "error": "Validation failed", "details": pydantic_details(e)}), 422

    @app.errorhandler(HTTPException)
    def _http_error(e: HTTPException):
        payload = {"success": False, "error": e.name}
        if e.code == 404:
            payload["path"] = request.path
        elif e.description:
            payload["message"] = e.description
        return jsonify(payload), e.code

    @app.errorhandler(Exception)
    def _server_error(e):
        app.logger.exception("Unhandled exception: %s", e)
        return jsonify({"success": False, "error": "Internal Server Error"}), 500
