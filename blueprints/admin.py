from flask import Blueprint, render_template, request, flash, redirect, url_for, jsonify
from flask_login import current_user
from models import db, ContentItem, BlogPost, Event, NewsletterSubscriber, ContactSubmission
from errors import AuthError
from decorators import _is_api_request
from password_validator import validate_password_strength, password_requirements
from services import activity_service, crud
from services.content_cache import get_cache
from blueprints.common import success

admin_bp = Blueprint('admin', __name__, url_prefix='/admin')

CONTENT_STATUSES = ('all', 'active', 'inactive')


@admin_bp.before_request
def require_admin():
    """Every admin page and admin API call needs an Admin session, checked before any view runs."""
    if not current_user.is_authenticated:
        if _is_api_request():
            raise AuthError('Authentication required')
        flash('Please log in to access this page.', 'warning')
        return redirect(url_for('auth.login', next=request.path))
    if not current_user.is_admin:
        if _is_api_request():
            raise AuthError(forbidden=True)
        flash('Access denied. You do not have the required permissions.', 'danger')
        return redirect(url_for('pages.home'))


@admin_bp.route('/')
@admin_bp.route('/dashboard')
def dashboard():
    counts = {
        'content': ContentItem.query.count(),
        'posts': BlogPost.query.count(),
        'published_posts': BlogPost.query.filter_by(published=True).count(),
        'events': Event.query.filter_by(is_active=True).count(),
        'subscribers': NewsletterSubscriber.query.filter_by(is_active=True).count(),
        'new_messages': ContactSubmission.query.filter_by(status='new').count(),
    }
    return render_template('admin/dashboard.html',
                           counts=counts,
                           activities=activity_service.list_activities(limit=10),
                           cache_stats=get_cache().stats())


@admin_bp.route('/content')
def content():
    """Content list with section and status filters."""
    section = request.args.get('section') or None
    status = request.args.get('status', 'all')
    if status not in CONTENT_STATUSES:
        status = 'all'

    query = ContentItem.query
    if section:
        query = query.filter(ContentItem.section == section)
    if status == 'active':
        query = query.filter(ContentItem.is_active.is_(True))
    elif status == 'inactive':
        query = query.filter(ContentItem.is_active.is_(False))
    items = query.order_by(ContentItem.section.asc(), ContentItem.order_index.asc(),
                           ContentItem.created_at.asc()).all()

    sections = [row[0] for row in db.session.query(ContentItem.section).distinct().order_by(ContentItem.section)]
    return render_template('admin/content.html', items=items, sections=sections,
                           selected_section=section, status=status, statuses=CONTENT_STATUSES)


@admin_bp.route('/change-password', methods=['GET', 'POST'])
def change_password():
    requirements = password_requirements()
    if request.method == 'POST':
        current_password = request.form.get('current_password', '')
        new_password = request.form.get('new_password', '')
        confirm_password = request.form.get('confirm_password', '')

        if not current_password or not new_password or not confirm_password:
            flash('All fields are required', 'danger')
        elif not current_user.check_password(current_password):
            flash('Current password is incorrect', 'danger')
        elif new_password != confirm_password:
            flash('New passwords do not match', 'danger')
        elif current_user.check_password(new_password):
            flash('New password must be different from current password', 'danger')
        else:
            is_valid, error_message = validate_password_strength(new_password, current_user.username)
            if not is_valid:
                flash(error_message, 'danger')
            else:
                current_user.set_password(new_password)
                crud.commit('changing password')
                activity_service.record('Changed password', current_user.username, 'user', section='account')
                flash('Password changed successfully!', 'success')
                return redirect(url_for('admin.dashboard'))
        return render_template('admin/change_password.html', requirements=requirements), 400

    return render_template('admin/change_password.html', requirements=requirements)


# --- Cache monitor ---

@admin_bp.route('/api/cache', methods=['GET'])
def cache_stats():
    return jsonify(get_cache().stats())


@admin_bp.route('/api/cache', methods=['DELETE'])
def clear_cache():
    section = request.args.get('section')
    cache = get_cache()
    if section:
        cache.invalidate(section)
        message = f'Cache cleared for section: {section}'
    else:
        cache.clear()
        message = 'All cache cleared'
    activity_service.record('Cleared cache', section or 'all sections', 'settings', section='cache')
    return success(message=message)
