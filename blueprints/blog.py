from flask import Blueprint, request, jsonify
from decorators import admin_required
from errors import NotFound
from services import blog_service, activity_service
from blueprints.common import json_body, arg_int, require_id, is_admin, success

blog_bp = Blueprint('blog', __name__, url_prefix='/api/blog')


@blog_bp.route('', methods=['GET'])
def list_posts():
    """Get blog posts with optional filtering, or one post by `id`."""
    post_id = request.args.get('id')
    if post_id:
        post = blog_service.get_post(post_id)
        if not post.published and not is_admin():
            raise NotFound('Blog post not found')
        return jsonify(post.to_dict())

    published = request.args.get('published')
    if not is_admin():
        # Drafts stay private
        published_filter = True
    elif published is None:
        published_filter = None
    else:
        published_filter = published.lower() == 'true'

    posts = blog_service.list_posts(
        published=published_filter,
        category=request.args.get('category'),
        limit=arg_int('limit'),
    )
    return jsonify([p.to_dict() for p in posts])


@blog_bp.route('/<slug>', methods=['GET'])
def get_post_by_slug(slug):
    """Get a single blog post by slug and count the view."""
    post = blog_service.get_post_by_slug(slug)
    if not post.published and not is_admin():
        raise NotFound('Blog post not found')
    post = blog_service.get_post_by_slug(slug, count_view=post.published)
    return jsonify(post.to_dict())


@blog_bp.route('', methods=['POST'])
@admin_required
def create_post():
    post = blog_service.create_post(json_body())
    activity_service.record('Created', post.title, 'blog', section='blog')
    return success(201, id=post.id, slug=post.slug, post=post.to_dict())


@blog_bp.route('', methods=['PUT'])
@admin_required
def update_post():
    post = blog_service.update_post(require_id(), json_body())
    activity_service.record('Updated', post.title, 'blog', section='blog')
    return success(post=post.to_dict())


@blog_bp.route('', methods=['DELETE'])
@admin_required
def delete_post():
    post = blog_service.get_post(require_id())
    title = post.title
    blog_service.delete_post(post.id)
    activity_service.record('Deleted', title, 'blog', section='blog')
    return success(message='Blog post deleted successfully')
