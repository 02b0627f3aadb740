from functools import wraps
from flask import redirect, url_for, flash, request
from flask_login import current_user
from errors import AuthError


def _is_api_request():
  return request.path.startswith('/api') or request.path.startswith('/admin/api') or request.is_json


def roles_required(*roles):
  def wrapper(f):
    @wraps(f)
    def decorated_function(*args, **kwargs):
      # Require authentication
      if not current_user.is_authenticated:
        if _is_api_request():
          raise AuthError('Authentication required')
        flash('Please log in to access this page.', 'warning')
        return redirect(url_for('auth.login', next=request.path))

      # Role check (roles passed should match stored role strings)
      if current_user.role not in roles:
        if _is_api_request():
          raise AuthError(forbidden=True)
        flash('Access denied. You do not have the required permissions.', 'danger')
        return redirect(url_for('pages.home'))
      return f(*args, **kwargs)
    return decorated_function
  return wrapper

#Convenience Decorators for clarity
# Use canonical role strings (capitalized) throughout the app
admin_required = roles_required('Admin')
