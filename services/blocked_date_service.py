from typing import Any, Dict
from models import db, BlockedDate
from errors import ValidationError
from services import crud


def _check_range(start_date, end_date):
    if start_date > end_date:
        raise ValidationError('Start date must be before or equal to end date')


def list_blocked_dates(include_inactive: bool = True):
    query = BlockedDate.query
    if not include_inactive:
        query = query.filter(BlockedDate.is_active.is_(True))
    return query.order_by(BlockedDate.start_date.asc()).all()


def create_blocked_date(data: Dict[str, Any]) -> BlockedDate:
    crud.require(data, 'title', 'startDate', 'endDate', message='Title, start date, and end date are required')
    start_date = crud.parse_date(data['startDate'], 'startDate')
    end_date = crud.parse_date(data['endDate'], 'endDate')
    _check_range(start_date, end_date)
    blocked = BlockedDate(
        title=data['title'].strip(),
        start_date=start_date,
        end_date=end_date,
        reason=data.get('reason') or '',
        is_active=crud.parse_bool(data.get('isActive'), default=True),
    )
    return crud.save(blocked, 'creating blocked date')


def update_blocked_date(blocked_id: str, data: Dict[str, Any]) -> BlockedDate:
    blocked = crud.get_or_404(BlockedDate, blocked_id, 'Blocked date not found')
    crud.apply_fields(blocked, data, {
        'title': 'title',
        'startDate': ('start_date', lambda v: crud.parse_date(v, 'startDate')),
        'endDate': ('end_date', lambda v: crud.parse_date(v, 'endDate')),
        'reason': 'reason',
        'isActive': ('is_active', crud.parse_bool),
    })
    if not blocked.title or blocked.start_date is None or blocked.end_date is None:
        db.session.rollback()
        raise ValidationError('Title, start date, and end date are required')
    try:
        _check_range(blocked.start_date, blocked.end_date)
    except ValidationError:
        db.session.rollback()
        raise
    crud.commit('updating blocked date')
    return blocked


def delete_blocked_date(blocked_id: str) -> BlockedDate:
    blocked = crud.get_or_404(BlockedDate, blocked_id, 'Blocked date not found')
    crud.remove(blocked, 'deleting blocked date')
    return blocked
