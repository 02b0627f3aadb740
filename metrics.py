"""
Custom Prometheus metrics for the Clear View Retreat site
Tracks admin edits, content cache efficiency, form traffic and email delivery
"""

from prometheus_client import Counter, Gauge

# Login metrics
login_attempts = Counter(
    'cvr_login_attempts_total',
    'Total login attempts',
    ['status']  # success or failure
)

# Admin metrics
admin_actions = Counter(
    'cvr_admin_actions_total',
    'Total admin actions performed',
    ['action']  # create_content, delete_event, reorder_gallery, etc.
)

# Content cache
content_cache_requests = Counter(
    'cvr_content_cache_requests_total',
    'Content cache lookups by section and result',
    ['section', 'result']  # hit or miss
)

content_cache_entries = Gauge(
    'cvr_content_cache_entries',
    'Sections currently held in the content cache'
)

# Public forms
form_submissions = Counter(
    'cvr_form_submissions_total',
    'Public form submissions',
    ['form']  # newsletter, contact, volunteer, registration
)

# Email notifications
notifications_sent = Counter(
    'cvr_notifications_total',
    'Email notifications by type and outcome',
    ['notification_type', 'status']  # sent, failed, skipped
)


def track_login_attempt(success=True):
    """Track login attempt"""
    status = 'success' if success else 'failure'
    login_attempts.labels(status=status).inc()


def track_admin_action(action):
    """Track admin action"""
    admin_actions.labels(action=action).inc()


def track_cache_lookup(section, hit):
    content_cache_requests.labels(section=section, result='hit' if hit else 'miss').inc()


def update_cache_size(count):
    content_cache_entries.set(count)


def track_form_submission(form):
    form_submissions.labels(form=form).inc()


def track_notification(notification_type, status):
    notifications_sent.labels(notification_type=notification_type, status=status).inc()
