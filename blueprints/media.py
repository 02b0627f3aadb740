from flask import Blueprint, request, jsonify, Response
from decorators import admin_required
from errors import ValidationError
from services import file_utils, activity_service
from services.storage import get_storage
from blueprints.common import arg_int, success

media_bp = Blueprint('media', __name__, url_prefix='/api')
activities_bp = Blueprint('activities', __name__, url_prefix='/api/activities')


@media_bp.route('/upload', methods=['POST'])
@admin_required
def upload():
    """Store an image plus thumbnail. `type` picks the folder (blog-main-image, event-image, ...)."""
    upload_type = request.form.get('type') or request.args.get('type')
    result = file_utils.save_upload(request.files.get('file'), upload_type, get_storage())
    activity_service.record('Uploaded', result['fileName'], 'gallery', section=file_utils.folder_for(upload_type))
    return success(**result)


@media_bp.route('/images/<path:key>', methods=['GET'])
def serve_image(key):
    data, content_type = get_storage().get(key)
    response = Response(data, mimetype=content_type)
    # Keys carry a timestamp, so a stored object never changes
    response.headers['Cache-Control'] = 'public, max-age=31536000, immutable'
    return response


@media_bp.route('/files', methods=['GET'])
@admin_required
def list_files():
    return jsonify(get_storage().list(request.args.get('prefix', '')))


@media_bp.route('/files', methods=['DELETE'])
@admin_required
def delete_file():
    key = request.args.get('key')
    if not key:
        raise ValidationError('File key is required')
    get_storage().delete(key)
    activity_service.record('Deleted', key.rsplit('/', 1)[-1], 'gallery', section='files')
    return success(message='File deleted successfully')


@activities_bp.route('', methods=['GET'])
@admin_required
def list_activities():
    activities = activity_service.list_activities(
        limit=arg_int('limit') or 50,
        activity_type=request.args.get('type'),
    )
    return jsonify([a.to_dict() for a in activities])
