"""
Email delivery through Flask-Mail using the SMTP settings stored in the database
"""
from flask_mail import Mail, Message
from flask import current_app

mail = Mail()


def init_mail(app):
    """Initialize Flask-Mail with app configuration"""
    app.config.setdefault('MAIL_SUPPRESS_SEND', app.testing)
    mail.init_app(app)


def emails_disabled():
    return bool(current_app.config.get('DISABLE_EMAILS'))


def mail_config(settings):
    """Flask-Mail configuration for an EmailSettings row.

    Port 465 means implicit TLS; any other port upgrades with STARTTLS unless
    the row asks for SSL explicitly.
    """
    port = settings.smtp_port or 587
    use_ssl = bool(settings.smtp_secure) or port == 465
    return {
        'MAIL_SERVER': settings.smtp_host,
        'MAIL_PORT': port,
        'MAIL_USE_SSL': use_ssl,
        'MAIL_USE_TLS': not use_ssl and port == 587,
        'MAIL_USERNAME': settings.smtp_user or None,
        'MAIL_PASSWORD': settings.smtp_password or None,
        'MAIL_DEFAULT_SENDER': sender_for(settings),
        'MAIL_SUPPRESS_SEND': current_app.config.get('MAIL_SUPPRESS_SEND', current_app.testing),
    }


def sender_for(settings):
    return (settings.from_name or 'Clear View Retreat', settings.from_email)


def mail_state(settings):
    """A Flask-Mail sender bound to the given settings rather than app config."""
    return mail.init_mail(mail_config(settings), debug=current_app.debug, testing=current_app.testing)


def send_email(state, settings, to, subject, html, reply_to=None):
    """Send one HTML message. Returns True on success, False (logged) otherwise."""
    try:
        msg = Message(subject=subject, sender=sender_for(settings), recipients=[to], reply_to=reply_to)
        msg.html = html
        state.send(msg)
        return True
    except Exception as e:
        current_app.logger.error(f"Failed to send email to {to}: {str(e)}")
        return False


def verify_connection(settings):
    """Open and close an SMTP connection with the given settings. Raises on failure."""
    state = mail_state(settings)
    with state.connect():
        pass
