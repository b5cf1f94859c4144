"""
Service-level exceptions and the handlers that turn them into JSON responses.

Services raise these; routes never catch them. A missing row and a row owned
by somebody else both raise NotFound so callers cannot tell them apart.
"""
from core.imports import jsonify, current_app, SQLAlchemyError
from core.extensions import db


class ServiceError(Exception):
    status_code = 400

    def __init__(self, message):
        super().__init__(message)
        self.message = message

    def to_dict(self):
        return {"message": self.message, "error": self.__class__.__name__}


class NotFound(ServiceError):
    status_code = 404


class ValidationFailed(ServiceError):
    status_code = 400


class InvalidParent(ValidationFailed):
    pass


class InsufficientStock(ServiceError):
    status_code = 409


class PrescriptionRequired(ServiceError):
    status_code = 400


class InvalidPrescription(ServiceError):
    status_code = 400


class EmptyCart(ServiceError):
    status_code = 400


class AuthenticationFailed(ServiceError):
    status_code = 401


class Forbidden(ServiceError):
    status_code = 403


class UploadFailed(ServiceError):
    status_code = 502


def register_error_handlers(app):

    @app.errorhandler(ServiceError)
    def handle_service_error(error):
        db.session.rollback()
        if error.status_code >= 500:
            current_app.logger.error("%s: %s", error.__class__.__name__, error.message)
        else:
            current_app.logger.warning("%s: %s", error.__class__.__name__, error.message)
        return jsonify(error.to_dict()), error.status_code

    @app.errorhandler(SQLAlchemyError)
    def handle_database_error(error):
        db.session.rollback()
        current_app.logger.exception("Database error: %s", error)
        return jsonify({"message": "Internal server error"}), 500
