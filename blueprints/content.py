from flask import Blueprint, request, jsonify
from decorators import admin_required
from errors import ValidationError
from services import content_service, activity_service
from blueprints.common import json_body, arg_flag, require_id, is_admin, editor_name, content_cache, success

content_bp = Blueprint('content', __name__, url_prefix='/api/content')


def _label(item):
    return (item.meta or {}).get('name') or item.subsection or item.section


@content_bp.route('', methods=['GET'])
def get_content():
    """One item by `id`, or the items of `section` (optionally `subsection`)."""
    content_id = request.args.get('id')
    if content_id:
        return jsonify(content_service.fetch_by_id(content_id).to_dict())

    section = request.args.get('section')
    if not section:
        raise ValidationError('Section parameter is required')
    subsection = request.args.get('subsection')

    if arg_flag('includeInactive') and is_admin():
        items = content_service.fetch_section(section, subsection, include_inactive=True)
        return jsonify([item.to_dict() for item in items])

    items = content_cache().get(section)
    if subsection:
        items = [item for item in items if item.get('subsection') == subsection]
    return jsonify(items)


@content_bp.route('', methods=['POST'])
@admin_required
def create_content():
    item = content_service.create_content(json_body(), user=editor_name(), cache=content_cache())
    activity_service.record('Created', _label(item), 'content', section=item.section)
    return success(id=item.id, item=item.to_dict())


@content_bp.route('', methods=['PUT'])
@admin_required
def update_content():
    item = content_service.update_content(require_id(), json_body(), user=editor_name(), cache=content_cache())
    activity_service.record('Updated', _label(item), 'content', section=item.section)
    return success(item=item.to_dict())


@content_bp.route('', methods=['DELETE'])
@admin_required
def delete_content():
    item = content_service.fetch_by_id(require_id())
    label, section = _label(item), item.section
    content_service.delete_content(item.id, cache=content_cache())
    activity_service.record('Deleted', label, 'content', section=section)
    return success(message='Content deleted successfully')


@content_bp.route('/reorder', methods=['PUT'])
@admin_required
def reorder_content():
    body = json_body(allow_list=True)
    pairs = body.get('items') if isinstance(body, dict) else body
    items = content_service.reorder_content(pairs, cache=content_cache())
    sections = sorted({item.section for item in items})
    activity_service.record('Reordered', f'{len(items)} items', 'content', section=', '.join(sections))
    return success(updated=len(items))
