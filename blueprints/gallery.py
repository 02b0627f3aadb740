from flask import Blueprint, request, jsonify
from decorators import admin_required
from services import gallery_service, staff_service, activity_service
from blueprints.common import json_body, arg_flag, require_id, is_admin, success

gallery_bp = Blueprint('gallery', __name__, url_prefix='/api/gallery')
staff_bp = Blueprint('staff', __name__, url_prefix='/api/staff')


def _pairs():
    body = json_body(allow_list=True)
    return body.get('items') if isinstance(body, dict) else body


# --- Gallery ---

@gallery_bp.route('', methods=['GET'])
def list_images():
    images = gallery_service.list_images(
        gallery_type=request.args.get('type'),
        category=request.args.get('category'),
        include_inactive=arg_flag('includeInactive') and is_admin(),
    )
    return jsonify([i.to_dict() for i in images])


@gallery_bp.route('', methods=['POST'])
@admin_required
def create_image():
    image = gallery_service.create_image(json_body())
    activity_service.record('Created', image.title, 'gallery', section=image.gallery_type)
    return success(201, id=image.id, image=image.to_dict())


@gallery_bp.route('', methods=['PUT'])
@admin_required
def update_image():
    image = gallery_service.update_image(require_id(), json_body())
    activity_service.record('Updated', image.title, 'gallery', section=image.gallery_type)
    return success(image=image.to_dict())


@gallery_bp.route('/reorder', methods=['PUT'])
@admin_required
def reorder_images():
    images = gallery_service.reorder_images(_pairs())
    activity_service.record('Reordered', f'{len(images)} images', 'gallery', section='gallery')
    return success(updated=len(images))


@gallery_bp.route('', methods=['DELETE'])
@admin_required
def delete_image():
    image = gallery_service.delete_image(require_id())
    activity_service.record('Deleted', image.title, 'gallery', section=image.gallery_type)
    return success(message='Image deleted successfully')


# --- Staff ---

@staff_bp.route('', methods=['GET'])
def list_staff():
    include_inactive = arg_flag('includeInactive') and is_admin()
    return jsonify([m.to_dict() for m in staff_service.list_staff(include_inactive=include_inactive)])


@staff_bp.route('', methods=['POST'])
@admin_required
def create_staff_member():
    member = staff_service.create_staff_member(json_body())
    activity_service.record('Created', member.name, 'staff', section='staff')
    return success(201, id=member.id, staffMember=member.to_dict())


@staff_bp.route('', methods=['PUT'])
@admin_required
def update_staff_member():
    member = staff_service.update_staff_member(require_id(), json_body())
    activity_service.record('Updated', member.name, 'staff', section='staff')
    return success(staffMember=member.to_dict())


@staff_bp.route('/reorder', methods=['PUT'])
@admin_required
def reorder_staff():
    members = staff_service.reorder_staff(_pairs())
    activity_service.record('Reordered', f'{len(members)} staff members', 'staff', section='staff')
    return success(updated=len(members))


@staff_bp.route('', methods=['DELETE'])
@admin_required
def delete_staff_member():
    member = staff_service.delete_staff_member(require_id())
    activity_service.record('Deleted', member.name, 'staff', section='staff')
    return success(message='Staff member deleted successfully')
