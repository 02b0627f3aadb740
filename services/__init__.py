"""Service package exports.

This module re-exports service modules so callers can use
`from services import <service_name>` consistently across the
codebase (used by blueprints and tests).
"""

from . import crud
from . import email_settings_service
from . import notifier
from . import content_service
from . import content_cache
from . import page_renderer
from . import activity_service
from . import blog_service
from . import category_service
from . import event_service
from . import registration_service
from . import blocked_date_service
from . import gallery_service
from . import staff_service
from . import newsletter_service
from . import contact_service
from . import storage
from . import file_utils

__all__ = [
    'crud',
    'email_settings_service',
    'notifier',
    'content_service',
    'content_cache',
    'page_renderer',
    'activity_service',
    'blog_service',
    'category_service',
    'event_service',
    'registration_service',
    'blocked_date_service',
    'gallery_service',
    'staff_service',
    'newsletter_service',
    'contact_service',
    'storage',
    'file_utils',
]
