from typing import Any, Dict
from models import RegistrationType
from services import crud


def _optional_text(value):
    if value in (None, ''):
        return None
    return crud.clean_text(value, 'link')


def list_types(include_inactive: bool = False):
    query = RegistrationType.query
    if not include_inactive:
        query = query.filter(RegistrationType.is_active.is_(True))
    return query.order_by(RegistrationType.order_index.asc(), RegistrationType.created_at.asc()).all()


def create_type(data: Dict[str, Any]) -> RegistrationType:
    crud.require(data, 'name', message='Name is required')
    registration_type = RegistrationType(
        name=data['name'].strip(),
        description=data.get('description') or None,
        form_link=_optional_text(data.get('formLink')),
        pdf_link=_optional_text(data.get('pdfLink')),
        order_index=crud.next_order(RegistrationType),
        is_active=crud.parse_bool(data.get('isActive'), default=True),
    )
    return crud.save(registration_type, 'creating registration type')


def update_type(type_id: str, data: Dict[str, Any]) -> RegistrationType:
    registration_type = crud.get_or_404(RegistrationType, type_id, 'Registration type not found')
    crud.apply_fields(registration_type, data, {
        'name': ('name', lambda v: crud.clean_text(v, 'name')),
        'description': ('description', lambda v: v or None),
        'formLink': ('form_link', _optional_text),
        'pdfLink': ('pdf_link', _optional_text),
        'isActive': ('is_active', crud.parse_bool),
    })
    crud.commit('updating registration type')
    return registration_type


def reorder_types(pairs):
    return crud.reorder(RegistrationType, pairs, 'Registration type', 'reordering registration types')


def delete_type(type_id: str) -> RegistrationType:
    registration_type = crud.get_or_404(RegistrationType, type_id, 'Registration type not found')
    crud.remove(registration_type, 'deleting registration type')
    return registration_type
