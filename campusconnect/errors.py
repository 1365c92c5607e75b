from flask import jsonify
from sqlalchemy.exc import IntegrityError
from werkzeug.exceptions import HTTPException


class AppError(Exception):
    status_code = 400

    def __init__(self, message, status_code=None):
        super().__init__(message)
        self.message = message
        if status_code is not None:
            self.status_code = status_code


class BadRequestError(AppError):
    status_code = 400


class UnauthenticatedError(AppError):
    status_code = 401


class UnauthorizedError(AppError):
    status_code = 403


class NotFoundError(AppError):
    status_code = 404


def _error(message, status_code):
    return jsonify({"msg": message}), status_code


def register_error_handlers(app):
    @app.errorhandler(AppError)
    def handle_app_error(err):
        return _error(err.message, err.status_code)

    @app.errorhandler(IntegrityError)
    def handle_integrity_error(_err):
        from campusconnect.extensions import db

        db.session.rollback()
        app.logger.warning("Database integrity error")
        return _error("Conflict. Resource already exists.", 409)

    @app.errorhandler(400)
    def bad_request(_err):
        return _error("Bad request", 400)

    @app.errorhandler(401)
    def unauthenticated(_err):
        return _error("Authentication invalid", 401)

    @app.errorhandler(403)
    def forbidden(_err):
        return _error("Not authorized to access this route", 403)

    @app.errorhandler(404)
    def not_found(_err):
        return _error("Route does not exist", 404)

    @app.errorhandler(405)
    def method_not_allowed(_err):
        return _error("Method not allowed", 405)

    @app.errorhandler(413)
    def payload_too_large(_err):
        return _error("File size too large.", 413)

    @app.errorhandler(429)
    def too_many_requests(_err):
        return _error("Too many requests, please try again later.", 429)

    @app.errorhandler(500)
    def server_error(_err):
        app.logger.exception("Internal server error")
        return _error("Something went wrong, please try again later.", 500)

    @app.errorhandler(Exception)
    def unhandled_error(err):
        if isinstance(err, HTTPException):
            return _error(err.description or err.name, err.code)
        from campusconnect.extensions import db

        db.session.rollback()
        app.logger.exception("Unhandled error: %s", err)
        return _error("Something went wrong, please try again later.", 500)
