from datetime import datetime
from typing import Optional, Dict, Any
from flask import current_app
from models import db, Event, utcnow
from errors import ValidationError
from services import crud


def _validate_range(start_date: datetime, end_date: Optional[datetime]):
    if end_date and end_date < start_date:
        raise ValidationError('Start date must be before end date')


def _parse_capacity(value) -> Optional[int]:
    capacity = crud.parse_int(value, 'maxAttendees')
    if capacity is not None and capacity < 0:
        raise ValidationError('maxAttendees cannot be negative')
    return capacity


def list_events(include_inactive: bool = False):
    query = Event.query
    if not include_inactive:
        query = query.filter(Event.is_active.is_(True))
    return query.order_by(Event.start_date.asc()).all()


def upcoming_events(limit: Optional[int] = None, now: Optional[datetime] = None):
    """Active events that have not ended yet, soonest first."""
    now = now or utcnow()
    query = Event.query.filter(Event.is_active.is_(True)).filter(
        db.or_(Event.end_date >= now, db.and_(Event.end_date.is_(None), Event.start_date >= now)))
    query = query.order_by(Event.start_date.asc())
    if limit:
        query = query.limit(limit)
    return query.all()


def get_event(event_id: str) -> Event:
    return crud.get_or_404(Event, event_id, 'Event not found')


def create_event(data: Dict[str, Any]) -> Event:
    crud.require(data, 'title', 'type', 'startDate', message='Missing required fields: title, type, startDate')
    start_date = crud.parse_datetime(data.get('startDate'), 'startDate')
    end_date = crud.parse_datetime(data.get('endDate'), 'endDate') or start_date
    _validate_range(start_date, end_date)

    event = Event(
        title=data['title'].strip(),
        event_type=data['type'],
        start_date=start_date,
        end_date=end_date,
        description=data.get('description') or '',
        location=data.get('location'),
        image_url=data.get('imageUrl'),
        max_attendees=_parse_capacity(data.get('maxAttendees')),
        current_attendees=0,
        is_active=crud.parse_bool(data.get('isActive'), default=True),
    )
    crud.save(event, 'creating event')
    current_app.logger.info('Created event %s (%s)', event.id, event.title)
    return event


def update_event(event_id: str, data: Dict[str, Any]) -> Event:
    event = get_event(event_id)
    for field in ('title', 'type', 'startDate'):
        if field in data and not data.get(field):
            raise ValidationError('Missing required fields: title, type, startDate')

    crud.apply_fields(event, data, {
        'title': ('title', lambda v: crud.clean_text(v, 'title')),
        'type': ('event_type', lambda v: crud.clean_text(v, 'type')),
        'startDate': ('start_date', lambda v: crud.parse_datetime(v, 'startDate')),
        'endDate': ('end_date', lambda v: crud.parse_datetime(v, 'endDate')),
        'description': 'description',
        'location': 'location',
        'imageUrl': 'image_url',
        'maxAttendees': ('max_attendees', _parse_capacity),
        'isActive': ('is_active', crud.parse_bool),
    })
    if event.end_date is None:
        event.end_date = event.start_date
    try:
        _validate_range(event.start_date, event.end_date)
    except ValidationError:
        db.session.rollback()
        raise
    crud.commit('updating event')
    return event


def delete_event(event_id: str) -> Event:
    event = get_event(event_id)
    crud.remove(event, 'deleting event')
    return event
