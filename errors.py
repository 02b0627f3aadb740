"""Error taxonomy shared by services and blueprints.

Services raise these; `register_error_handlers` turns them into the JSON
envelope (`{"error": message}`) for API requests and into an error page for
browser requests.
"""
from flask import jsonify, request, render_template, current_app
from sqlalchemy.exc import SQLAlchemyError


class SiteError(Exception):
    status_code = 500
    message = 'Unexpected error'

    def __init__(self, message=None):
        super().__init__(message or self.message)
        self.message = message or self.message


class ValidationError(SiteError, ValueError):
    status_code = 400
    message = 'Invalid request'


class NotFound(SiteError, LookupError):
    status_code = 404
    message = 'Not found'


class AuthError(SiteError):
    status_code = 401
    message = 'Authentication required'

    def __init__(self, message=None, forbidden=False):
        if forbidden:
            self.status_code = 403
            message = message or 'Admin privileges required'
        super().__init__(message)


class StorageError(SiteError):
    """Database or object-storage failure. Details stay in the server log."""
    status_code = 500
    message = 'Storage operation failed'


def _wants_json():
    return request.path.startswith('/api') or request.path.startswith('/admin/api') or request.is_json


def _error_response(message, status):
    if _wants_json():
        return jsonify({'error': message}), status
    return render_template('errors/error.html', message=message, status=status), status


def register_error_handlers(app):
    @app.errorhandler(SiteError)
    def handle_site_error(error):
        if isinstance(error, StorageError):
            current_app.logger.error('Storage error on %s %s: %s', request.method, request.path, error)
            return _error_response(StorageError.message, 500)
        return _error_response(error.message, error.status_code)

    @app.errorhandler(SQLAlchemyError)
    def handle_database_error(error):
        from models import db
        db.session.rollback()
        current_app.logger.exception('Database error on %s %s', request.method, request.path)
        return _error_response(StorageError.message, 500)

    @app.errorhandler(404)
    def handle_not_found(error):
        return _error_response('Not found', 404)

    @app.errorhandler(413)
    def handle_too_large(error):
        return _error_response('File size must be less than 10MB', 413)
