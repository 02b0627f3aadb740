"""Request helpers shared by the JSON API blueprints."""
from flask import request, jsonify
from flask_login import current_user
from errors import ValidationError, AuthError
from services import crud
from services.content_cache import get_cache


def json_body(allow_list=False):
    data = request.get_json(silent=True)
    if data is None:
        raise ValidationError('Request body must be valid JSON')
    if isinstance(data, list) and allow_list:
        return data
    if not isinstance(data, dict):
        raise ValidationError('Request body must be a JSON object')
    return data


def arg_flag(name, default=False):
    return crud.parse_bool(request.args.get(name), default)


def arg_int(name):
    return crud.parse_int(request.args.get(name), name)


def require_id(name='id'):
    value = request.args.get(name)
    if not value:
        raise ValidationError('ID parameter is required')
    return value


def is_admin():
    return current_user.is_authenticated and current_user.role == 'Admin'


def ensure_admin():
    """Inline form of `admin_required` for endpoints that are only partly public."""
    if not current_user.is_authenticated:
        raise AuthError('Authentication required')
    if current_user.role != 'Admin':
        raise AuthError(forbidden=True)


def editor_name():
    return current_user.username if current_user.is_authenticated else None


def content_cache():
    return get_cache()


def success(status=200, **payload):
    return jsonify({'success': True, **payload}), status
