import logging

from flask import render_template
from flask_limiter import RateLimitExceeded
from werkzeug.exceptions import HTTPException

from .logging import get_request_id


class AppError(Exception):
    def __init__(self, message, status_code=400, code="bad_request"):
        super().__init__(message)
        self.message = message
        self.status_code = status_code
        self.code = code


class StoreUnavailable(AppError):
    """Le store clé-valeur n'a pas pu traiter l'opération (panne, timeout)."""

    def __init__(self, message="Storage is temporarily unavailable."):
        super().__init__(message, status_code=503, code="store_unavailable")


def _html_error(message, status, code):
    return render_template("error.html", message=message, code=code, status=status), status


def register_error_handlers(app):
    @app.errorhandler(StoreUnavailable)
    def handle_store_unavailable(e: StoreUnavailable):
        logging.getLogger("kvnotes.store").error(
            "store_unavailable", extra={"error": str(e.__cause__ or e)}
        )
        return _html_error(e.message, e.status_code, e.code)

    @app.errorhandler(AppError)
    def handle_app_error(e: AppError):
        return _html_error(e.message, e.status_code, e.code)

    @app.errorhandler(RateLimitExceeded)
    def handle_rate_limit(e):
        return _html_error("Too many attempts, try again later.", 429, "rate_limited")

    @app.errorhandler(HTTPException)
    def handle_http_exception(e: HTTPException):
        # Ex: 404, 405…
        if e.code == 404:
            return render_template("404.html"), 404
        return _html_error(e.description or "HTTP error", e.code or 500, "http_error")

    @app.errorhandler(Exception)
    def handle_unexpected(e: Exception):
        logging.getLogger("kvnotes.error").error(
            "unhandled_exception", exc_info=e, extra={"request_id": get_request_id()}
        )
        return _html_error("Internal server error.", 500, "internal_error")
