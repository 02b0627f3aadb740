from typing import Optional
from flask import current_app
from flask_login import current_user
from models import Activity
from errors import StorageError
from metrics import track_admin_action
from services import crud

ACTIVITY_TYPES = ('content', 'blog', 'event', 'gallery', 'category', 'staff', 'settings', 'user')


def _current_username():
    if current_user and getattr(current_user, 'is_authenticated', False):
        return current_user.username
    return 'system'


def record(action: str, item: str, activity_type: str = 'content', section: Optional[str] = None,
           details: Optional[str] = None, user: Optional[str] = None) -> Optional[Activity]:
    """Append an entry to the admin activity log.

    The edit it describes is already committed, so a failure here is logged
    and the entry is dropped.
    """
    if activity_type not in ACTIVITY_TYPES:
        activity_type = 'content'
    track_admin_action(f"{action.lower().replace(' ', '_')}_{activity_type}")
    activity = Activity(
        action=action,
        item=(item or '')[:255] or 'Untitled',
        section=section,
        user=user or _current_username(),
        details=details,
        activity_type=activity_type,
    )
    try:
        return crud.save(activity, 'recording activity')
    except StorageError:
        current_app.logger.warning('Activity not recorded: %s %s', action, item)
        return None


def list_activities(limit: int = 50, activity_type: Optional[str] = None):
    query = Activity.query
    if activity_type:
        query = query.filter(Activity.activity_type == activity_type)
    query = query.order_by(Activity.timestamp.desc())
    if limit:
        query = query.limit(limit)
    return query.all()
