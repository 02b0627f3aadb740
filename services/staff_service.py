from typing import Any, Dict
from models import StaffMember
from services import crud


def list_staff(include_inactive: bool = False):
    query = StaffMember.query
    if not include_inactive:
        query = query.filter(StaffMember.is_active.is_(True))
    return query.order_by(StaffMember.order_index.asc(), StaffMember.created_at.asc()).all()


def create_staff_member(data: Dict[str, Any]) -> StaffMember:
    crud.require(data, 'name', 'title', message='Name and title are required')
    order = crud.parse_int(data.get('order'), 'order')
    member = StaffMember(
        name=data['name'].strip(),
        title=data['title'].strip(),
        email=data.get('email'),
        phone=data.get('phone'),
        bio=data.get('bio'),
        image_url=data.get('imageUrl'),
        order_index=order if order is not None else crud.next_order(StaffMember),
        is_active=crud.parse_bool(data.get('isActive'), default=True),
    )
    return crud.save(member, 'creating staff member')


def update_staff_member(member_id: str, data: Dict[str, Any]) -> StaffMember:
    member = crud.get_or_404(StaffMember, member_id, 'Staff member not found')
    crud.apply_fields(member, data, {
        'name': 'name',
        'title': 'title',
        'email': 'email',
        'phone': 'phone',
        'bio': 'bio',
        'imageUrl': 'image_url',
        'order': ('order_index', lambda v: crud.parse_int(v, 'order') or 0),
        'isActive': ('is_active', crud.parse_bool),
    })
    crud.commit('updating staff member')
    return member


def reorder_staff(pairs):
    return crud.reorder(StaffMember, pairs, 'Staff member', 'reordering staff')


def delete_staff_member(member_id: str) -> StaffMember:
    member = crud.get_or_404(StaffMember, member_id, 'Staff member not found')
    crud.remove(member, 'deleting staff member')
    return member
