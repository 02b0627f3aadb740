from .admin import admin_bp
from .auth import auth_bp
from .pages import pages_bp
from .content import content_bp
from .blog import blog_bp
from .categories import categories_bp
from .events import events_bp, registrations_bp, registration_types_bp, blocked_dates_bp
from .gallery import gallery_bp, staff_bp
from .forms import newsletter_bp, contact_bp
from .email_settings import email_settings_bp
from .media import media_bp, activities_bp

# JSON endpoints authenticate with the session and are exempt from form CSRF tokens
API_BLUEPRINTS = (
    content_bp,
    blog_bp,
    categories_bp,
    events_bp,
    registrations_bp,
    registration_types_bp,
    blocked_dates_bp,
    gallery_bp,
    staff_bp,
    newsletter_bp,
    contact_bp,
    email_settings_bp,
    media_bp,
    activities_bp,
)


def register_blueprints(app, csrf=None):
    """Register all blueprints with the Flask app."""
    app.register_blueprint(pages_bp)
    app.register_blueprint(auth_bp, url_prefix='/auth')
    app.register_blueprint(admin_bp)
    for blueprint in API_BLUEPRINTS:
        if csrf is not None:
            csrf.exempt(blueprint)
        app.register_blueprint(blueprint)
