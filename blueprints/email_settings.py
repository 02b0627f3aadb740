"""Admin endpoints for SMTP settings, notification templates and recipients.

Keys stay snake_case here, matching the stored settings rows.
"""
from flask import Blueprint, request, jsonify
from decorators import admin_required
from errors import ValidationError
from services import email_settings_service, notifier, activity_service
from blueprints.common import json_body, require_id, success

email_settings_bp = Blueprint('email_settings', __name__, url_prefix='/api/email-settings')


def _smtp_payload():
    settings = email_settings_service.get_smtp_settings()
    return settings.to_dict() if settings else None


@email_settings_bp.route('', methods=['GET'])
@admin_required
def get_settings():
    kind = request.args.get('type', 'all')
    if kind == 'smtp':
        return jsonify(_smtp_payload())
    if kind == 'notifications':
        return jsonify([s.to_dict() for s in email_settings_service.list_notification_settings()])
    if kind == 'recipients':
        return jsonify([r.to_dict() for r in email_settings_service.list_recipients()])
    if kind != 'all':
        raise ValidationError('Invalid type parameter')
    return jsonify({
        'smtp': _smtp_payload(),
        'notifications': [s.to_dict() for s in email_settings_service.list_notification_settings()],
        'recipients': [r.to_dict() for r in email_settings_service.list_recipients()],
    })


@email_settings_bp.route('', methods=['POST'])
@admin_required
def save_settings():
    kind = request.args.get('type')
    data = json_body()

    if kind == 'smtp':
        settings = email_settings_service.save_smtp_settings(data)
        activity_service.record('Updated', 'SMTP settings', 'settings', section='email')
        return success(settings=settings.to_dict())

    if kind == 'notification':
        setting = email_settings_service.save_notification_setting(data)
        activity_service.record('Updated', f'{setting.notification_type} notification', 'settings', section='email')
        return success(setting=setting.to_dict())

    if kind == 'recipient':
        recipient = email_settings_service.add_recipient(data)
        activity_service.record('Added', f'Email recipient {recipient.email}', 'settings', section='email')
        return success(201, id=recipient.id, recipient=recipient.to_dict())

    if kind == 'test':
        result = notifier.test_email_config(data.get('test_email') or data.get('email'))
        if not result.get('success'):
            raise ValidationError(result.get('error') or 'Test email failed')
        return success(message='Test email sent successfully')

    raise ValidationError('Invalid type parameter')


@email_settings_bp.route('', methods=['PUT'])
@admin_required
def update_recipient():
    recipient = email_settings_service.update_recipient(require_id(), json_body())
    activity_service.record('Updated', f'Email recipient {recipient.email}', 'settings', section='email')
    return success(recipient=recipient.to_dict())


@email_settings_bp.route('', methods=['DELETE'])
@admin_required
def delete_recipient():
    recipient = email_settings_service.delete_recipient(require_id())
    activity_service.record('Deleted', f'Email recipient {recipient.email}', 'settings', section='email')
    return success(message='Recipient deleted successfully')
