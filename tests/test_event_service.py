from datetime import datetime, timedelta

import pytest

from errors import ValidationError, NotFound
from models import db, Event
from services import event_service


NOW = datetime(2030, 6, 1, 12, 0)


def _add(title, start, end=None, is_active=True):
    event = Event(title=title, event_type='retreat', start_date=start, end_date=end, is_active=is_active)
    db.session.add(event)
    db.session.commit()
    return event


def test_create_event_success(ctx):
    event = event_service.create_event({
        'title': ' Men\'s Retreat ',
        'type': 'retreat',
        'startDate': '2030-09-12T17:00',
        'endDate': '2030-09-14T12:00',
        'maxAttendees': '40',
        'location': 'Main Lodge',
    })
    assert event.id
    assert event.title == "Men's Retreat"
    assert event.max_attendees == 40
    assert event.current_attendees == 0
    assert event.is_active is True


def test_create_event_rejects_negative_capacity(ctx):
    with pytest.raises(ValidationError):
        event_service.create_event({'title': 'x', 'type': 'camp', 'startDate': '2030-01-01', 'maxAttendees': -1})


def test_update_event_keeps_range_valid(ctx):
    event = event_service.create_event({'title': 'Camp', 'type': 'camp', 'startDate': '2030-07-01',
                                        'endDate': '2030-07-05'})

    with pytest.raises(ValidationError):
        event_service.update_event(event.id, {'endDate': '2030-06-01'})
    db.session.expire_all()
    assert event_service.get_event(event.id).end_date == datetime(2030, 7, 5)

    updated = event_service.update_event(event.id, {'location': 'Lakeside', 'endDate': None})
    assert updated.location == 'Lakeside'
    assert updated.end_date == updated.start_date


def test_upcoming_events_skips_past_and_inactive(ctx):
    _add('Past', NOW - timedelta(days=3), NOW - timedelta(days=2))
    _add('Running', NOW - timedelta(days=1), NOW + timedelta(days=1))
    _add('Hidden', NOW + timedelta(days=2), is_active=False)
    _add('Next', NOW + timedelta(days=5))
    _add('Later', NOW + timedelta(days=9))

    titles = [e.title for e in event_service.upcoming_events(now=NOW)]
    assert titles == ['Running', 'Next', 'Later']
    assert [e.title for e in event_service.upcoming_events(limit=1, now=NOW)] == ['Running']


def test_delete_event(ctx):
    event = _add('Gone', NOW)
    event_service.delete_event(event.id)
    with pytest.raises(NotFound):
        event_service.get_event(event.id)
