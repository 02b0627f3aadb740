"""Best-effort email notifications for public form submissions.

`send_notification` never raises: the write that triggered it is already
committed, so a delivery problem is logged and reported in the return value.
"""
import re
from typing import Dict, Optional
from flask import current_app
from markupsafe import escape
import email_utils
from metrics import track_notification
from services import email_settings_service

PLACEHOLDER_RE = re.compile(r'\{\{\s*(\w+)\s*\}\}')


def render_template_string(template: str, variables: Dict[str, str], html: bool = False) -> str:
    """Replace `{{name}}` placeholders; unknown names are left as written."""
    def _sub(match):
        key = match.group(1)
        if key not in variables:
            return match.group(0)
        value = '' if variables[key] is None else str(variables[key])
        return str(escape(value)) if html else value
    return PLACEHOLDER_RE.sub(_sub, template or '')


def _templates_for(notification_type, setting):
    defaults = email_settings_service.DEFAULT_TEMPLATES[notification_type]
    if setting is None:
        return defaults['admin_subject'], defaults['admin_body'], defaults['user_subject'], defaults['user_body']
    return (
        setting.admin_subject_template or defaults['admin_subject'],
        setting.admin_body_template or defaults['admin_body'],
        setting.user_subject_template or defaults['user_subject'],
        setting.user_body_template or defaults['user_body'],
    )


def send_notification(notification_type: str, variables: Dict[str, str], user_email: Optional[str] = None) -> Dict:
    if notification_type not in email_settings_service.NOTIFICATION_TYPES:
        return {'success': False, 'error': f'Unknown notification type: {notification_type}'}

    if email_utils.emails_disabled():
        current_app.logger.info('Email disabled by configuration; not sending %s notification', notification_type)
        track_notification(notification_type, 'skipped')
        return {'success': False, 'error': 'Email disabled'}

    try:
        settings = email_settings_service.get_smtp_settings()
        if settings is None or not settings.is_configured:
            current_app.logger.info('Email not configured, skipping %s notification', notification_type)
            track_notification(notification_type, 'skipped')
            return {'success': False, 'error': 'Email not configured'}

        setting = email_settings_service.get_notification_setting(notification_type)
        if setting is not None and not setting.is_enabled:
            track_notification(notification_type, 'skipped')
            return {'success': False, 'error': 'Notification disabled'}

        send_to_admin = setting.send_to_admin if setting is not None else True
        send_to_user = setting.send_to_user if setting is not None else notification_type == 'event_registration'
        admin_subject, admin_body, user_subject, user_body = _templates_for(notification_type, setting)

        variables = dict(variables)
        variables.setdefault('adminUrl', current_app.config.get('APP_URL', '').rstrip('/') + '/admin/')
        state = email_utils.mail_state(settings)
        sent = failed = 0

        if send_to_admin:
            recipients = email_settings_service.list_recipients(notification_type, active_only=True)
            for recipient in recipients:
                ok = email_utils.send_email(
                    state, settings, recipient.email,
                    render_template_string(admin_subject, variables),
                    render_template_string(admin_body, variables, html=True),
                    reply_to=settings.reply_to or user_email or settings.from_email,
                )
                sent, failed = (sent + 1, failed) if ok else (sent, failed + 1)

        if send_to_user and user_email:
            ok = email_utils.send_email(
                state, settings, user_email,
                render_template_string(user_subject, variables),
                render_template_string(user_body, variables, html=True),
                reply_to=settings.reply_to or settings.from_email,
            )
            sent, failed = (sent + 1, failed) if ok else (sent, failed + 1)

        track_notification(notification_type, 'failed' if failed else 'sent')
        result = {'success': True, 'sent': sent, 'failed': failed}
        if failed:
            result['error'] = f'{failed} message(s) could not be delivered'
        return result
    except Exception as e:
        current_app.logger.exception('Error sending %s notification', notification_type)
        track_notification(notification_type, 'failed')
        return {'success': False, 'error': str(e)}


def test_email_config(address: str) -> Dict:
    """Check the stored SMTP settings and send a test message to `address`."""
    settings = email_settings_service.get_smtp_settings()
    if settings is None:
        return {'success': False, 'error': 'Email settings not found. Please save your settings first.'}
    if not settings.smtp_host:
        return {'success': False, 'error': 'SMTP host is not configured'}
    if not settings.from_email:
        return {'success': False, 'error': 'From email is not configured'}
    if not settings.smtp_password or settings.smtp_password == settings.MASK:
        return {'success': False, 'error': 'SMTP password not found in database. Please re-enter and save your password.'}
    if not address:
        return {'success': False, 'error': 'Test email address is required'}

    try:
        email_utils.verify_connection(settings)
    except Exception as e:
        current_app.logger.warning('SMTP verification failed for %s: %s', settings.smtp_host, e)
        return {'success': False, 'error': f'Could not connect to SMTP server: {e}'}

    html = (
        '<h2>Test Email</h2>'
        '<p>This is a test email from Clear View Retreat admin panel.</p>'
        '<p>If you received this, your email configuration is working correctly!</p>'
        f'<p style="color: #666; font-size: 12px;">Sent from: {escape(settings.smtp_host)}</p>'
    )
    if not email_utils.send_email(email_utils.mail_state(settings), settings, address,
                                  'Test Email - Clear View Retreat', html):
        return {'success': False, 'error': 'Test email could not be sent. Check the server log for details.'}
    return {'success': True}
