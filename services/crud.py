"""Small helpers shared by the resource services.

Every service follows the same shape: look the row up, apply the fields the
caller sent, commit, and roll back on failure. These helpers keep that shape
in one place.
"""
import re
from datetime import datetime, date, timezone
from typing import Any, Dict, Iterable, Optional
from flask import current_app
from sqlalchemy import func
from sqlalchemy.exc import SQLAlchemyError
from models import db, utcnow
from errors import NotFound, ValidationError, StorageError

TRUE_VALUES = ('true', '1', 'on', 'yes')


def parse_bool(value, default=False) -> bool:
    if value is None or value == '':
        return default
    if isinstance(value, bool):
        return value
    return str(value).strip().lower() in TRUE_VALUES


def parse_int(value, field='value') -> Optional[int]:
    if value in (None, ''):
        return None
    if isinstance(value, bool):
        raise ValidationError(f'Invalid integer for {field}')
    try:
        return int(value)
    except (TypeError, ValueError):
        raise ValidationError(f'Invalid integer for {field}')


def parse_datetime(value, field='date') -> Optional[datetime]:
    """Accept ISO-8601 strings (with or without a trailing Z) and datetimes."""
    if value in (None, ''):
        return None
    if isinstance(value, datetime):
        return value.replace(tzinfo=None)
    try:
        parsed = datetime.fromisoformat(str(value).replace('Z', '+00:00'))
    except ValueError:
        raise ValidationError(f'Invalid date format for {field}')
    if parsed.tzinfo is not None:
        parsed = parsed.astimezone(timezone.utc).replace(tzinfo=None)
    return parsed


def parse_date(value, field='date') -> Optional[date]:
    if value in (None, ''):
        return None
    if isinstance(value, date) and not isinstance(value, datetime):
        return value
    return parse_datetime(value, field).date()


def require(data: Dict[str, Any], *fields, message=None):
    """Raise ValidationError when any of `fields` is missing, blank or not a string."""
    missing = [f for f in fields if data.get(f) is None or (isinstance(data.get(f), str) and not data.get(f).strip())]
    if missing:
        raise ValidationError(message or f"Missing required fields: {', '.join(missing)}")
    for field in fields:
        if not isinstance(data[field], str):
            raise ValidationError(f'{field} must be a string')


def clean_text(value, field='value') -> str:
    """Stripped, non-empty string or ValidationError."""
    if not isinstance(value, str):
        raise ValidationError(f'{field} must be a string')
    value = value.strip()
    if not value:
        raise ValidationError(f'{field} cannot be empty')
    return value


def get_or_404(model, obj_id, message=None):
    if not obj_id:
        raise ValidationError('ID parameter is required')
    obj = db.session.get(model, obj_id)
    if obj is None:
        raise NotFound(message or f'{model.__name__} not found')
    return obj


def next_order(model, *criteria) -> int:
    """Order value that places a new row after its current siblings."""
    current = db.session.query(func.max(model.order_index)).filter(*criteria).scalar()
    return 0 if current is None else current + 1


def apply_fields(obj, data: Dict[str, Any], mapping: Dict[str, Any]):
    """Copy present keys of `data` onto `obj`.

    `mapping` maps payload keys to either an attribute name or a tuple of
    (attribute, converter).
    """
    try:
        for key, target in mapping.items():
            if key not in data:
                continue
            value = data[key]
            if isinstance(target, tuple):
                attr, convert = target
                value = convert(value)
            else:
                attr = target
            setattr(obj, attr, value)
    except ValidationError:
        # Drop the fields already applied
        db.session.rollback()
        raise
    obj.updated_at = utcnow()
    return obj


def commit(action='saving record'):
    """Commit the session; roll back and raise StorageError on failure."""
    try:
        db.session.commit()
    except SQLAlchemyError:
        db.session.rollback()
        current_app.logger.exception('Database error while %s', action)
        raise StorageError()


def save(obj, action='saving record'):
    db.session.add(obj)
    commit(action)
    return obj


def remove(obj, action='deleting record'):
    db.session.delete(obj)
    commit(action)


def reorder(model, pairs: Iterable, label=None, action='reordering'):
    """Apply (id, order) pairs in one transaction.

    Accepts `[{'id': ..., 'order': ...}]` or `[(id, order)]`. Any unknown id or
    malformed pair leaves every row untouched. Returns the touched rows.
    """
    if not isinstance(pairs, (list, tuple)) or not pairs:
        raise ValidationError('Items array is required')

    normalized = []
    for pair in pairs:
        if isinstance(pair, dict):
            obj_id, order = pair.get('id'), pair.get('order')
        elif isinstance(pair, (list, tuple)) and len(pair) == 2:
            obj_id, order = pair
        else:
            raise ValidationError('Each item needs an id and an order')
        if not obj_id or order is None or isinstance(order, bool):
            raise ValidationError('Each item needs an id and an order')
        try:
            normalized.append((obj_id, int(order)))
        except (TypeError, ValueError):
            raise ValidationError(f'Invalid order for {obj_id}')

    touched = []
    try:
        for obj_id, order in normalized:
            obj = db.session.get(model, obj_id)
            if obj is None:
                raise NotFound(f'{label or model.__name__} not found: {obj_id}')
            obj.order_index = order
            obj.updated_at = utcnow()
            touched.append(obj)
        db.session.commit()
    except NotFound:
        db.session.rollback()
        raise
    except SQLAlchemyError:
        db.session.rollback()
        current_app.logger.exception('Database error while %s', action)
        raise StorageError()
    return touched


EMAIL_RE = re.compile(r'^[^@\s]+@[^@\s]+\.[^@\s]+$')


def normalize_email(email) -> str:
    email = email.strip().lower() if isinstance(email, str) else ''
    if not email:
        raise ValidationError('Email is required')
    if not EMAIL_RE.match(email):
        raise ValidationError('Please provide a valid email address')
    return email
