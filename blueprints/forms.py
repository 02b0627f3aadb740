"""Public form endpoints (newsletter, contact) and their admin listings."""
from flask import Blueprint, request, jsonify
from decorators import admin_required
from extensions import limiter, PUBLIC_FORM_LIMIT
from services import newsletter_service, contact_service
from blueprints.common import json_body, arg_flag, arg_int, require_id, ensure_admin, success

newsletter_bp = Blueprint('newsletter', __name__, url_prefix='/api/newsletter')
contact_bp = Blueprint('contact', __name__, url_prefix='/api/contact')


# --- Newsletter ---

@newsletter_bp.route('', methods=['POST'])
@limiter.limit(PUBLIC_FORM_LIMIT)
def subscribe():
    _, message = newsletter_service.subscribe(json_body())
    return success(message=message)


@newsletter_bp.route('', methods=['GET'])
@admin_required
def list_subscribers():
    subscribers = newsletter_service.list_subscribers(active_only=arg_flag('active', default=True))
    return jsonify([s.to_dict() for s in subscribers])


@newsletter_bp.route('', methods=['DELETE'])
@limiter.limit(PUBLIC_FORM_LIMIT)
def unsubscribe():
    """Anyone may unsubscribe an address; removing by id is an admin action."""
    subscriber_id = request.args.get('id')
    if subscriber_id:
        ensure_admin()
    newsletter_service.unsubscribe(email=request.args.get('email'), subscriber_id=subscriber_id)
    return success(message=newsletter_service.UNSUBSCRIBED)


# --- Contact ---

@contact_bp.route('', methods=['POST'])
@limiter.limit(PUBLIC_FORM_LIMIT)
def submit_contact():
    submission = contact_service.submit(json_body())
    return success(submissionId=submission.id, message=contact_service.RECEIVED_MESSAGE)


@contact_bp.route('', methods=['GET'])
@admin_required
def list_submissions():
    submissions = contact_service.list_submissions(status=request.args.get('status'), limit=arg_int('limit'))
    return jsonify([s.to_dict() for s in submissions])


@contact_bp.route('', methods=['PUT'])
@admin_required
def update_submission():
    submission = contact_service.update_status(require_id(), json_body())
    return success(submission=submission.to_dict())


@contact_bp.route('', methods=['DELETE'])
@admin_required
def delete_submission():
    contact_service.delete_submission(require_id())
    return success(message='Submission deleted successfully')
