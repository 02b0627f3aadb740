from typing import Any, Dict, Optional
from flask import current_app
from models import db, Event, EventRegistration
from errors import ValidationError, NotFound
from metrics import track_form_submission
from services import crud, notifier

REQUIRED_FIELDS = ('firstName', 'lastName', 'email', 'phone')
VALID_STATUSES = ('confirmed', 'cancelled', 'waitlisted')


def _require(data, fields):
    for field in fields:
        value = data.get(field)
        if value is None or (isinstance(value, str) and not value.strip()):
            raise ValidationError(f'Missing required field: {field}')
        if not isinstance(value, str):
            raise ValidationError(f'{field} must be a string')


def _full_name(data):
    return f"{data['firstName'].strip()} {data['lastName'].strip()}"


def list_registrations(event_id: Optional[str] = None):
    query = EventRegistration.query
    if event_id:
        query = query.filter(EventRegistration.event_id == event_id)
    return query.order_by(EventRegistration.created_at.desc()).all()


def register_for_event(data: Dict[str, Any]) -> EventRegistration:
    """Store a registration, bump the attendee count and send the notification.

    The notification is best-effort; the registration stands even if it fails.
    """
    _require(data, ('eventId',) + REQUIRED_FIELDS)
    event = db.session.get(Event, data['eventId'])
    if event is None or not event.is_active:
        raise NotFound('Event not found')

    seats = crud.parse_int(data.get('numAttendees'), 'numAttendees') or 1
    if seats < 1:
        raise ValidationError('numAttendees must be at least 1')
    current = event.current_attendees or 0
    if event.max_attendees and current + seats > event.max_attendees:
        raise ValidationError('This event is full')

    registration = EventRegistration(
        event_id=event.id,
        user_name=_full_name(data),
        user_email=data['email'].strip(),
        phone=data['phone'].strip(),
        num_attendees=seats,
        special_requests=data.get('specialRequests') or '',
        status='confirmed',
    )
    event.current_attendees = current + seats
    db.session.add(registration)
    crud.commit('creating registration')
    track_form_submission('registration')
    current_app.logger.info('Registration %s for event %s', registration.id, event.id)

    notifier.send_notification('event_registration', {
        'eventTitle': event.title,
        'eventDate': event.start_date.strftime('%B %d, %Y') if event.start_date else '',
        'userName': registration.user_name,
        'userEmail': registration.user_email,
        'userPhone': registration.phone,
        'firstName': data['firstName'].strip(),
        'numAttendees': str(seats),
        'specialRequests': registration.special_requests or 'None',
    }, user_email=registration.user_email)
    return registration


def update_registration(registration_id: str, data: Dict[str, Any]) -> EventRegistration:
    registration = crud.get_or_404(EventRegistration, registration_id, 'Registration not found')
    _require(data, REQUIRED_FIELDS)
    status = data.get('status', registration.status)
    if status not in VALID_STATUSES:
        raise ValidationError(f"Invalid status. Must be one of: {', '.join(VALID_STATUSES)}")

    registration.user_name = _full_name(data)
    crud.apply_fields(registration, data, {
        'email': ('user_email', lambda v: crud.clean_text(v, 'email')),
        'phone': ('phone', lambda v: crud.clean_text(v, 'phone')),
        'specialRequests': ('special_requests', lambda v: v or ''),
    })
    registration.status = status
    crud.commit('updating registration')
    return registration


def delete_registration(registration_id: str) -> EventRegistration:
    """Remove a registration and release its seats (the count never drops below 0)."""
    registration = crud.get_or_404(EventRegistration, registration_id, 'Registration not found')
    event = db.session.get(Event, registration.event_id)
    if event is not None:
        event.current_attendees = max(0, (event.current_attendees or 0) - (registration.num_attendees or 1))
    crud.remove(registration, 'deleting registration')
    return registration
