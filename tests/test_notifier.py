import pytest

import email_utils
from models import db, EmailSettings, EmailRecipient, EmailNotificationSetting
from services import notifier, email_settings_service


@pytest.fixture
def configured(ctx):
    db.session.add(EmailSettings(id='main', smtp_host='smtp.example.com', smtp_port=587,
                                 smtp_user='mailer', smtp_password='secret',
                                 from_email='site@example.com', from_name='Clear View Retreat',
                                 is_configured=True))
    db.session.add(EmailRecipient(email='office@example.com', notification_types=['contact_form', 'event_registration']))
    db.session.add(EmailRecipient(email='events@example.com', notification_types=['event_registration']))
    db.session.add(EmailRecipient(email='off@example.com', notification_types=['contact_form'], is_active=False))
    db.session.commit()
    return ctx


@pytest.fixture
def outbox(monkeypatch):
    messages = []

    def _fake_send(state, settings, to, subject, html, reply_to=None):
        messages.append({'to': to, 'subject': subject, 'html': html, 'reply_to': reply_to})
        return True

    monkeypatch.setattr(email_utils, 'send_email', _fake_send)
    return messages


def test_render_template_string_replaces_known_placeholders():
    out = notifier.render_template_string('Hi {{firstName}}, {{ unknown }}!', {'firstName': 'Ann'})
    assert out == 'Hi Ann, {{ unknown }}!'


def test_render_template_string_escapes_for_html():
    out = notifier.render_template_string('<p>{{message}}</p>', {'message': '<script>x</script>'}, html=True)
    assert out == '<p>&lt;script&gt;x&lt;/script&gt;</p>'


def test_skipped_when_not_configured(ctx, outbox):
    result = notifier.send_notification('contact_form', {'firstName': 'Ann'})
    assert result == {'success': False, 'error': 'Email not configured'}
    assert outbox == []


def test_skipped_when_disabled_by_config(configured, outbox):
    configured.config['DISABLE_EMAILS'] = True
    result = notifier.send_notification('contact_form', {})
    assert result['success'] is False
    assert outbox == []


def test_unknown_type_is_reported():
    result = notifier.send_notification('birthday', {})
    assert result['success'] is False


def test_contact_form_goes_to_active_subscribed_recipients(configured, outbox):
    result = notifier.send_notification('contact_form', {
        'firstName': 'Ann', 'lastName': 'Lee', 'email': 'ann@example.com', 'message': 'Hello',
        'subject': 'Group booking',
    }, user_email='ann@example.com')

    assert result == {'success': True, 'sent': 1, 'failed': 0}
    assert [m['to'] for m in outbox] == ['office@example.com']
    assert outbox[0]['reply_to'] == 'ann@example.com'
    assert outbox[0]['subject'] == 'New Contact Form: Group booking'


def test_event_registration_also_sends_user_copy(configured, outbox):
    result = notifier.send_notification('event_registration', {
        'eventTitle': 'Spring Retreat', 'firstName': 'Cy', 'userName': 'Cy Park',
    }, user_email='cy@example.com')

    assert result['sent'] == 3
    assert sorted(m['to'] for m in outbox) == ['cy@example.com', 'events@example.com', 'office@example.com']


def test_disabled_notification_setting_sends_nothing(configured, outbox):
    setting = email_settings_service.default_notification_setting('contact_form')
    setting.is_enabled = False
    db.session.add(setting)
    db.session.commit()

    result = notifier.send_notification('contact_form', {})
    assert result == {'success': False, 'error': 'Notification disabled'}
    assert outbox == []


def test_custom_templates_override_defaults(configured, outbox):
    email_settings_service.save_notification_setting({
        'notification_type': 'contact_form',
        'admin_subject_template': 'Note from {{firstName}}',
    })

    notifier.send_notification('contact_form', {'firstName': 'Ann'})
    assert outbox[0]['subject'] == 'Note from Ann'
    assert EmailNotificationSetting.query.count() == 1


def test_delivery_failures_are_counted_not_raised(configured, monkeypatch):
    monkeypatch.setattr(email_utils, 'send_email', lambda *a, **k: False)
    result = notifier.send_notification('contact_form', {})
    assert result['success'] is True
    assert result['failed'] == 1
    assert 'error' in result


def test_unexpected_errors_are_swallowed(configured, monkeypatch):
    def _boom(settings):
        raise RuntimeError('no route to host')

    monkeypatch.setattr(email_utils, 'mail_state', _boom)
    result = notifier.send_notification('contact_form', {})
    assert result == {'success': False, 'error': 'no route to host'}


def test_mail_config_picks_ssl_or_tls(ctx):
    settings = EmailSettings(smtp_host='smtp.example.com', smtp_port=465, from_email='a@example.com')
    config = email_utils.mail_config(settings)
    assert config['MAIL_USE_SSL'] is True and config['MAIL_USE_TLS'] is False

    settings.smtp_port = 587
    config = email_utils.mail_config(settings)
    assert config['MAIL_USE_SSL'] is False and config['MAIL_USE_TLS'] is True
    assert config['MAIL_DEFAULT_SENDER'] == ('Clear View Retreat', 'a@example.com')


def test_test_email_config_reports_missing_settings(ctx):
    assert notifier.test_email_config('me@example.com') == {
        'success': False, 'error': 'Email settings not found. Please save your settings first.'}
