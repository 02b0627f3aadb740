from flask import Blueprint, request, jsonify
from decorators import admin_required
from errors import NotFound
from extensions import limiter, PUBLIC_FORM_LIMIT
from services import (event_service, registration_service, registration_type_service, blocked_date_service,
                      activity_service)
from blueprints.common import json_body, arg_flag, require_id, is_admin, success

events_bp = Blueprint('events', __name__, url_prefix='/api/events')
registrations_bp = Blueprint('registrations', __name__, url_prefix='/api/registrations')
registration_types_bp = Blueprint('registration_types', __name__, url_prefix='/api/registration-types')
blocked_dates_bp = Blueprint('blocked_dates', __name__, url_prefix='/api/blocked-dates')


# --- Events ---

@events_bp.route('', methods=['GET'])
def list_events():
    event_id = request.args.get('id')
    if event_id:
        event = event_service.get_event(event_id)
        if not event.is_active and not is_admin():
            raise NotFound('Event not found')
        return jsonify(event.to_dict())
    include_inactive = arg_flag('includeInactive') and is_admin()
    return jsonify([e.to_dict() for e in event_service.list_events(include_inactive=include_inactive)])


@events_bp.route('', methods=['POST'])
@admin_required
def create_event():
    event = event_service.create_event(json_body())
    activity_service.record('Created', event.title, 'event', section='events')
    return success(201, id=event.id, event=event.to_dict())


@events_bp.route('', methods=['PUT'])
@admin_required
def update_event():
    event = event_service.update_event(require_id(), json_body())
    activity_service.record('Updated', event.title, 'event', section='events')
    return success(event=event.to_dict())


@events_bp.route('', methods=['DELETE'])
@admin_required
def delete_event():
    event = event_service.get_event(require_id())
    title = event.title
    event_service.delete_event(event.id)
    activity_service.record('Deleted', title, 'event', section='events')
    return success(message='Event deleted successfully')


# --- Registrations ---

@registrations_bp.route('', methods=['POST'])
@limiter.limit(PUBLIC_FORM_LIMIT)
def register():
    registration = registration_service.register_for_event(json_body())
    return success(registrationId=registration.id, message='Registration successful')


@registrations_bp.route('', methods=['GET'])
@admin_required
def list_registrations():
    registrations = registration_service.list_registrations(request.args.get('eventId'))
    return jsonify([r.to_dict() for r in registrations])


@registrations_bp.route('', methods=['PUT'])
@admin_required
def update_registration():
    registration = registration_service.update_registration(require_id(), json_body())
    activity_service.record('Updated', f'Registration for {registration.user_name}', 'event', section='registrations')
    return success(registration=registration.to_dict(), message='Registration updated successfully')


@registrations_bp.route('', methods=['DELETE'])
@admin_required
def delete_registration():
    registration = registration_service.delete_registration(require_id())
    activity_service.record('Deleted', f'Registration for {registration.user_name}', 'event', section='registrations')
    return success(message='Registration deleted successfully')


# --- Registration types ---

@registration_types_bp.route('', methods=['GET'])
def list_registration_types():
    include_inactive = arg_flag('includeInactive') and is_admin()
    types = registration_type_service.list_types(include_inactive=include_inactive)
    return jsonify([t.to_dict() for t in types])


@registration_types_bp.route('', methods=['POST'])
@admin_required
def create_registration_type():
    registration_type = registration_type_service.create_type(json_body())
    activity_service.record('Created', registration_type.name, 'event', section='registration-types')
    return success(201, id=registration_type.id, type=registration_type.to_dict())


@registration_types_bp.route('', methods=['PUT'])
@admin_required
def update_registration_type():
    registration_type = registration_type_service.update_type(require_id(), json_body())
    activity_service.record('Updated', registration_type.name, 'event', section='registration-types')
    return success(type=registration_type.to_dict())


@registration_types_bp.route('/reorder', methods=['PUT'])
@admin_required
def reorder_registration_types():
    body = json_body(allow_list=True)
    types = registration_type_service.reorder_types(body.get('items') if isinstance(body, dict) else body)
    activity_service.record('Reordered', f'{len(types)} registration types', 'event', section='registration-types')
    return success(updated=len(types))


@registration_types_bp.route('', methods=['DELETE'])
@admin_required
def delete_registration_type():
    registration_type = registration_type_service.delete_type(require_id())
    activity_service.record('Deleted', registration_type.name, 'event', section='registration-types')
    return success(message='Registration type deleted successfully')


# --- Blocked dates ---

@blocked_dates_bp.route('', methods=['GET'])
def list_blocked_dates():
    # The public booking calendar only needs the active ranges
    include_inactive = is_admin() and arg_flag('includeInactive', default=True)
    return jsonify([b.to_dict() for b in blocked_date_service.list_blocked_dates(include_inactive=include_inactive)])


@blocked_dates_bp.route('', methods=['POST'])
@admin_required
def create_blocked_date():
    blocked = blocked_date_service.create_blocked_date(json_body())
    activity_service.record('Created', blocked.title, 'event', section='blocked-dates')
    return success(201, id=blocked.id, blockedDate=blocked.to_dict())


@blocked_dates_bp.route('', methods=['PUT'])
@admin_required
def update_blocked_date():
    blocked = blocked_date_service.update_blocked_date(require_id(), json_body())
    activity_service.record('Updated', blocked.title, 'event', section='blocked-dates')
    return success(blockedDate=blocked.to_dict())


@blocked_dates_bp.route('', methods=['DELETE'])
@admin_required
def delete_blocked_date():
    blocked = blocked_date_service.delete_blocked_date(require_id())
    activity_service.record('Deleted', blocked.title, 'event', section='blocked-dates')
    return success(message='Blocked date deleted successfully')
