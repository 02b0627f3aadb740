from flask import Blueprint, render_template, request, redirect, url_for, flash
from flask_login import login_user, logout_user, current_user
from models import User, utcnow
from extensions import limiter, LOGIN_LIMIT
from metrics import track_login_attempt

auth_bp = Blueprint('auth', __name__)


def _landing_for(user):
    # Only admins have a dashboard, viewers go back to the public site
    if user.is_admin:
        return url_for('admin.dashboard')
    return url_for('pages.home')


def _safe_next(target):
    if target and target.startswith('/') and not target.startswith('//'):
        return target
    return None


@auth_bp.route('/login', methods=['GET', 'POST'])
@limiter.limit(LOGIN_LIMIT, methods=["POST"])
def login():
    if current_user.is_authenticated:
        return redirect(_landing_for(current_user))

    if request.method == 'POST':
        username = (request.form.get('username') or '').strip()
        password = request.form.get('password') or ''

        user = User.query.filter_by(username=username).first()

        if user:
            # Check if account is locked
            if user.is_locked():
                remaining_time = max(1, int((user.locked_until - utcnow()).total_seconds() / 60))
                flash(f'Account is locked due to too many failed login attempts. Please try again in {remaining_time} minutes.', 'danger')
                track_login_attempt(success=False)
                return render_template('auth/login.html'), 403

            if user.check_password(password):
                user.reset_failed_logins()
                login_user(user, remember=True)
                track_login_attempt(success=True)
                flash('Logged in successfully', 'success')
                return redirect(_safe_next(request.args.get('next')) or _landing_for(user))

            # Failed login - record attempt
            user.record_failed_login()
            remaining_attempts = User.MAX_FAILED_LOGINS - (user.failed_login_attempts or 0)
            if remaining_attempts > 0:
                flash(f'Invalid username or password. {remaining_attempts} attempts remaining before account lockout.', 'danger')
            else:
                flash('Account locked due to too many failed login attempts. Please try again in 30 minutes.', 'danger')
        else:
            # Username not found - don't reveal this info
            flash('Invalid username or password', 'danger')
        track_login_attempt(success=False)

    return render_template('auth/login.html')


@auth_bp.route('/logout')
def logout():
    logout_user()
    flash('You have been logged out.', 'success')
    return redirect(url_for('auth.login'))
