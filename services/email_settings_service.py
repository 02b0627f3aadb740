"""SMTP settings, per-notification templates and admin recipients."""
from typing import Any, Dict, List, Optional
from models import db, EmailSettings, EmailNotificationSetting, EmailRecipient, utcnow
from errors import ValidationError
from services import crud

NOTIFICATION_TYPES = ('event_registration', 'contact_form', 'newsletter_signup', 'volunteer_form')

DEFAULT_TEMPLATES = {
    'event_registration': {
        'admin_subject': 'New Event Registration: {{eventTitle}}',
        'admin_body': (
            '<h2>New Event Registration</h2>'
            '<p>A new registration has been submitted for <strong>{{eventTitle}}</strong>.</p>'
            '<h3>Registrant Details</h3>'
            '<ul>'
            '<li><strong>Name:</strong> {{userName}}</li>'
            '<li><strong>Email:</strong> {{userEmail}}</li>'
            '<li><strong>Phone:</strong> {{userPhone}}</li>'
            '<li><strong>Attendees:</strong> {{numAttendees}}</li>'
            '<li><strong>Special Requests:</strong> {{specialRequests}}</li>'
            '</ul>'
            '<p>View all registrations in the <a href="{{adminUrl}}">admin dashboard</a>.</p>'
        ),
        'user_subject': 'Registration Confirmed: {{eventTitle}}',
        'user_body': (
            '<h2>Your Registration is Confirmed!</h2>'
            '<p>Dear {{userName}},</p>'
            '<p>Thank you for registering for <strong>{{eventTitle}}</strong>!</p>'
            "<p>We're excited to have you join us. You'll receive more details as the event approaches.</p>"
            '<h3>Event Details</h3>'
            '<ul><li><strong>Event:</strong> {{eventTitle}}</li><li><strong>Date:</strong> {{eventDate}}</li></ul>'
            "<p>If you have any questions, please don't hesitate to contact us.</p>"
            '<p>Blessings,<br>Clear View Retreat</p>'
        ),
    },
    'contact_form': {
        'admin_subject': 'New Contact Form: {{subject}}',
        'admin_body': (
            '<h2>New Contact Form Submission</h2>'
            '<h3>Contact Details</h3>'
            '<ul>'
            '<li><strong>Name:</strong> {{firstName}} {{lastName}}</li>'
            '<li><strong>Email:</strong> {{email}}</li>'
            '<li><strong>Phone:</strong> {{phone}}</li>'
            '<li><strong>Subject:</strong> {{subject}}</li>'
            '</ul>'
            '<h3>Message</h3><p>{{message}}</p>'
            '<p><em>Newsletter opt-in: {{newsletterOptIn}}</em></p>'
        ),
        'user_subject': 'We received your message',
        'user_body': (
            '<h2>Thank You for Contacting Us</h2>'
            '<p>Dear {{firstName}},</p>'
            "<p>We've received your message and will get back to you within 24 hours.</p>"
            '<p>Your message:</p><blockquote>{{message}}</blockquote>'
            '<p>Blessings,<br>Clear View Retreat</p>'
        ),
    },
    'newsletter_signup': {
        'admin_subject': 'New Newsletter Subscriber',
        'admin_body': (
            '<h2>New Newsletter Subscriber</h2>'
            '<p>A new user has subscribed to the newsletter:</p>'
            '<ul>'
            '<li><strong>Email:</strong> {{email}}</li>'
            '<li><strong>Name:</strong> {{firstName}} {{lastName}}</li>'
            '<li><strong>Source:</strong> {{source}}</li>'
            '</ul>'
        ),
        'user_subject': 'Welcome to Clear View Retreat Newsletter',
        'user_body': (
            '<h2>Welcome to Our Newsletter!</h2>'
            '<p>Dear {{firstName}},</p>'
            '<p>Thank you for subscribing to the Clear View Retreat newsletter!</p>'
            "<p>You'll receive updates about upcoming retreats, ministry news, and special events.</p>"
            '<p>Blessings,<br>Clear View Retreat</p>'
        ),
    },
    'volunteer_form': {
        'admin_subject': 'New Volunteer Interest',
        'admin_body': (
            '<h2>New Volunteer Interest</h2>'
            '<h3>Contact Details</h3>'
            '<ul>'
            '<li><strong>Name:</strong> {{firstName}} {{lastName}}</li>'
            '<li><strong>Email:</strong> {{email}}</li>'
            '<li><strong>Phone:</strong> {{phone}}</li>'
            '</ul>'
            '<h3>Message</h3><p>{{message}}</p>'
        ),
        'user_subject': 'Thank you for your interest in volunteering',
        'user_body': (
            '<h2>Thank You for Your Interest in Volunteering!</h2>'
            '<p>Dear {{firstName}},</p>'
            "<p>We've received your volunteer inquiry and are excited about your interest in serving with us.</p>"
            '<p>Someone from our team will be in touch soon to discuss opportunities.</p>'
            '<p>Blessings,<br>Clear View Retreat</p>'
        ),
    },
}

TEMPLATE_FIELDS = ('admin_subject_template', 'user_subject_template', 'admin_body_template', 'user_body_template')


# --- SMTP settings ---

def get_smtp_settings() -> Optional[EmailSettings]:
    return db.session.get(EmailSettings, 'main')


def save_smtp_settings(data: Dict[str, Any]) -> EmailSettings:
    """Store SMTP settings. A masked or empty password keeps the stored one."""
    settings = get_smtp_settings() or EmailSettings(id='main')
    password = data.get('smtp_password')
    if password and password != EmailSettings.MASK:
        settings.smtp_password = password

    settings.smtp_host = (data.get('smtp_host') or '').strip() or None
    settings.smtp_port = crud.parse_int(data.get('smtp_port'), 'smtp_port') or 587
    settings.smtp_secure = crud.parse_bool(data.get('smtp_secure'))
    settings.smtp_user = (data.get('smtp_user') or '').strip() or None
    settings.from_email = (data.get('from_email') or '').strip() or None
    settings.from_name = data.get('from_name') or 'Clear View Retreat'
    settings.reply_to = data.get('reply_to') or None
    if 'is_configured' in data:
        settings.is_configured = crud.parse_bool(data.get('is_configured'))
    else:
        settings.is_configured = bool(settings.smtp_host and settings.from_email)
    settings.updated_at = utcnow()
    return crud.save(settings, 'saving email settings')


# --- Notification settings ---

def get_notification_setting(notification_type: str) -> Optional[EmailNotificationSetting]:
    return EmailNotificationSetting.query.filter_by(notification_type=notification_type).first()


def default_notification_setting(notification_type: str) -> EmailNotificationSetting:
    templates = DEFAULT_TEMPLATES[notification_type]
    return EmailNotificationSetting(
        notification_type=notification_type,
        is_enabled=True,
        send_to_admin=True,
        send_to_user=notification_type == 'event_registration',
        admin_subject_template=templates['admin_subject'],
        user_subject_template=templates['user_subject'],
        admin_body_template=templates['admin_body'],
        user_body_template=templates['user_body'],
    )


def ensure_notification_defaults() -> List[EmailNotificationSetting]:
    """Create any missing notification rows with the default templates."""
    created = []
    for notification_type in NOTIFICATION_TYPES:
        if get_notification_setting(notification_type) is None:
            setting = default_notification_setting(notification_type)
            db.session.add(setting)
            created.append(setting)
    if created:
        crud.commit('creating notification defaults')
    return created


def list_notification_settings() -> List[EmailNotificationSetting]:
    ensure_notification_defaults()
    return EmailNotificationSetting.query.order_by(EmailNotificationSetting.notification_type.asc()).all()


def save_notification_setting(data: Dict[str, Any]) -> EmailNotificationSetting:
    notification_type = data.get('notification_type')
    if notification_type not in NOTIFICATION_TYPES:
        raise ValidationError(f"Invalid notification type. Must be one of: {', '.join(NOTIFICATION_TYPES)}")
    setting = get_notification_setting(notification_type)
    if setting is None:
        setting = default_notification_setting(notification_type)
        db.session.add(setting)
    crud.apply_fields(setting, data, {
        'is_enabled': ('is_enabled', crud.parse_bool),
        'send_to_admin': ('send_to_admin', crud.parse_bool),
        'send_to_user': ('send_to_user', crud.parse_bool),
        **{field: field for field in TEMPLATE_FIELDS},
    })
    crud.commit('saving notification settings')
    return setting


# --- Recipients ---

def _clean_types(value):
    if value is None:
        return list(NOTIFICATION_TYPES)
    if not isinstance(value, (list, tuple)):
        raise ValidationError('notification_types must be a list')
    unknown = [t for t in value if t not in NOTIFICATION_TYPES]
    if unknown:
        raise ValidationError(f"Unknown notification types: {', '.join(unknown)}")
    return list(value)


def list_recipients(notification_type: Optional[str] = None, active_only: bool = False) -> List[EmailRecipient]:
    query = EmailRecipient.query
    if active_only:
        query = query.filter(EmailRecipient.is_active.is_(True))
    recipients = query.order_by(EmailRecipient.created_at.desc()).all()
    if notification_type:
        recipients = [r for r in recipients if notification_type in (r.notification_types or [])]
    return recipients


def add_recipient(data: Dict[str, Any]) -> EmailRecipient:
    recipient = EmailRecipient(
        email=crud.normalize_email(data.get('email')),
        name=data.get('name') or None,
        notification_types=_clean_types(data.get('notification_types')),
        is_active=crud.parse_bool(data.get('is_active'), default=True),
    )
    return crud.save(recipient, 'adding email recipient')


def update_recipient(recipient_id: str, data: Dict[str, Any]) -> EmailRecipient:
    recipient = crud.get_or_404(EmailRecipient, recipient_id, 'Recipient not found')
    crud.apply_fields(recipient, data, {
        'email': ('email', crud.normalize_email),
        'name': 'name',
        'notification_types': ('notification_types', lambda v: _clean_types(v or [])),
        'is_active': ('is_active', crud.parse_bool),
    })
    crud.commit('updating email recipient')
    return recipient


def delete_recipient(recipient_id: str) -> EmailRecipient:
    recipient = crud.get_or_404(EmailRecipient, recipient_id, 'Recipient not found')
    crud.remove(recipient, 'deleting email recipient')
    return recipient
