from flask import Blueprint, jsonify
from decorators import admin_required
from services import category_service, activity_service
from blueprints.common import json_body, require_id, success

categories_bp = Blueprint('categories', __name__, url_prefix='/api/categories')


@categories_bp.route('', methods=['GET'])
def list_categories():
    return jsonify([c.to_dict() for c in category_service.list_categories()])


@categories_bp.route('', methods=['POST'])
@admin_required
def create_category():
    category = category_service.create_category(json_body())
    activity_service.record('Created', category.name, 'category', section='blog')
    return success(201, id=category.id, category=category.to_dict())


@categories_bp.route('', methods=['PUT'])
@admin_required
def update_category():
    category = category_service.update_category(require_id(), json_body())
    activity_service.record('Updated', category.name, 'category', section='blog')
    return success(category=category.to_dict())


@categories_bp.route('', methods=['DELETE'])
@admin_required
def delete_category():
    category = category_service.delete_category(require_id())
    activity_service.record('Deleted', category.name, 'category', section='blog')
    return success(message='Category deleted successfully')
