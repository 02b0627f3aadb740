"""Read/write access to the `website_content` table.

Pages read through the content cache; admin writes go through here and
invalidate every section they touch.
"""
from typing import Any, Dict, List, Optional
from collections.abc import Mapping
from flask import current_app
from models import db, ContentItem, utcnow
from errors import ValidationError, NotFound
from services import crud


def _clean_section(value, field='section'):
    if not isinstance(value, str) or not value.strip():
        raise ValidationError(f'{field.capitalize()} parameter is required')
    return value.strip()


def _clean_subsection(value):
    if value is None:
        return None
    if not isinstance(value, str):
        raise ValidationError('Subsection must be a string')
    return value.strip() or None


def _clean_content(value):
    if not isinstance(value, str):
        raise ValidationError('Content must be a string')
    return value


def _clean_metadata(value):
    if value is None:
        return {}
    if not isinstance(value, Mapping):
        raise ValidationError('Metadata must be an object')
    return dict(value)


def _clean_content_type(value):
    if not isinstance(value, str) or not value.strip():
        raise ValidationError('Content type must be a non-empty string')
    return value.strip()


def _clean_order(value):
    order = crud.parse_int(value, 'order')
    if order is None:
        raise ValidationError('Invalid integer for order')
    return order


def _clean_active(value):
    if value is None:
        raise ValidationError('isActive must be true or false')
    return crud.parse_bool(value)


FIELD_MAP = {
    'section': ('section', _clean_section),
    'subsection': ('subsection', _clean_subsection),
    'contentType': ('content_type', _clean_content_type),
    'content': ('content', _clean_content),
    'metadata': ('meta', _clean_metadata),
    'order': ('order_index', _clean_order),
    'isActive': ('is_active', _clean_active),
}


def _invalidate(cache, *sections):
    if cache is None:
        return
    for section in {s for s in sections if s}:
        cache.invalidate(section)


def fetch_section(section: str, subsection: Optional[str] = None, include_inactive: bool = False) -> List[ContentItem]:
    """Items of a section (and subsection), ordered by order then creation time."""
    section = _clean_section(section)
    query = ContentItem.query.filter(ContentItem.section == section)
    if subsection:
        query = query.filter(ContentItem.subsection == subsection)
    if not include_inactive:
        query = query.filter(ContentItem.is_active.is_(True))
    return query.order_by(ContentItem.order_index.asc(), ContentItem.created_at.asc()).all()


def fetch_section_dicts(section: str) -> List[Dict[str, Any]]:
    """Cache fetcher: the active items of a section in their JSON shape."""
    return [item.to_dict() for item in fetch_section(section)]


def fetch_by_id(content_id: str) -> ContentItem:
    if not content_id:
        raise ValidationError('ID parameter is required')
    item = db.session.get(ContentItem, content_id)
    if item is None:
        raise NotFound('Content not found')
    return item


def create_content(fields: Dict[str, Any], user: Optional[str] = None, cache=None) -> ContentItem:
    if not isinstance(fields, Mapping):
        raise ValidationError('Request body must be a JSON object')
    section = _clean_section(fields.get('section'))
    if 'content' not in fields:
        raise ValidationError('Content is required')

    item = ContentItem(
        section=section,
        subsection=_clean_subsection(fields.get('subsection')),
        content_type=_clean_content_type(fields.get('contentType', 'text')),
        content=_clean_content(fields.get('content')),
        meta=_clean_metadata(fields.get('metadata')),
        is_active=crud.parse_bool(fields.get('isActive'), default=True),
        updated_by=user,
    )
    if fields.get('order') is not None:
        item.order_index = _clean_order(fields.get('order'))
    else:
        item.order_index = crud.next_order(ContentItem, ContentItem.section == section)

    now = utcnow()
    item.created_at = now
    item.updated_at = now
    crud.save(item, 'creating content')
    _invalidate(cache, section)
    current_app.logger.info('Created content %s in section %s', item.id, section)
    return item


def update_content(content_id: str, patch: Dict[str, Any], user: Optional[str] = None, cache=None) -> ContentItem:
    """Merge the provided keys into the item. An empty patch only refreshes updated_at."""
    if patch is None:
        patch = {}
    if not isinstance(patch, Mapping):
        raise ValidationError('Request body must be a JSON object')
    item = fetch_by_id(content_id)
    old_section = item.section

    crud.apply_fields(item, patch, FIELD_MAP)
    if user and patch:
        item.updated_by = user
    crud.commit('updating content')
    _invalidate(cache, old_section, item.section)
    return item


def delete_content(content_id: str, cache=None) -> None:
    item = fetch_by_id(content_id)
    section = item.section
    crud.remove(item, 'deleting content')
    _invalidate(cache, section)


def reorder_content(pairs, cache=None) -> List[ContentItem]:
    """Apply (id, order) pairs atomically; an unknown id leaves every order unchanged."""
    items = crud.reorder(ContentItem, pairs, 'Content', 'reordering content')
    _invalidate(cache, *[item.section for item in items])
    return items
