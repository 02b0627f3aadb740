from models import db, User, utcnow
import os
import time
from flask import Flask, redirect, url_for, flash, request, jsonify
from flask_login import LoginManager
from flask_migrate import Migrate
from flask_wtf.csrf import CSRFProtect, CSRFError
from extensions import limiter
from errors import register_error_handlers
from email_utils import init_mail
from dotenv import load_dotenv
import sentry_sdk
from sentry_sdk.integrations.flask import FlaskIntegration
from prometheus_client import CollectorRegistry
from prometheus_flask_exporter import PrometheusMetrics

load_dotenv()

# Initialize Sentry for error tracking (production only)
sentry_dsn = os.environ.get('SENTRY_DSN')
if sentry_dsn:
    sentry_sdk.init(
        dsn=sentry_dsn,
        integrations=[FlaskIntegration()],
        traces_sample_rate=float(os.environ.get('SENTRY_TRACES_SAMPLE_RATE', '0.2')),
        environment=os.environ.get('FLASK_ENV', 'production'),
    )

APP_VERSION = '1.0.0'


def _env_flag(name, default=False):
    value = os.environ.get(name)
    if value is None:
        return default
    return value.strip().lower() in ('1', 'true', 'yes', 'on')


def _load_config(app):
    """Settings read from the environment. `test_config` is applied on top."""
    app.config['SECRET_KEY'] = os.environ.get('SECRET_KEY')

    database_url = os.environ.get('DATABASE_URL')
    # Render/Heroku hand out postgres:// but SQLAlchemy 1.4+ requires postgresql://
    if database_url and database_url.startswith('postgres://'):
        database_url = database_url.replace('postgres://', 'postgresql://', 1)
    app.config['SQLALCHEMY_DATABASE_URI'] = database_url
    app.config['SQLALCHEMY_TRACK_MODIFICATIONS'] = False

    # Uploads are capped at 10MB by file_utils; leave room for the multipart envelope
    app.config['MAX_CONTENT_LENGTH'] = int(os.environ.get('MAX_CONTENT_LENGTH', 12 * 1024 * 1024))
    app.config['UPLOAD_FOLDER'] = os.environ.get('UPLOAD_FOLDER')
    app.config['USE_S3'] = _env_flag('USE_S3')
    app.config['S3_BUCKET'] = os.environ.get('S3_BUCKET')
    app.config['S3_REGION'] = os.environ.get('S3_REGION', 'us-east-1')
    app.config['S3_ENDPOINT_URL'] = os.environ.get('S3_ENDPOINT_URL')
    app.config['S3_ACCESS_KEY'] = os.environ.get('S3_ACCESS_KEY')
    app.config['S3_SECRET_ACCESS_KEY'] = os.environ.get('S3_SECRET_ACCESS_KEY')
    app.config['S3_PUBLIC'] = _env_flag('S3_PUBLIC')
    app.config['S3_PUBLIC_URL'] = os.environ.get('S3_PUBLIC_URL')

    app.config['CONTENT_CACHE_TTL'] = int(os.environ.get('CONTENT_CACHE_TTL', 300))
    app.config['DISABLE_EMAILS'] = _env_flag('DISABLE_EMAILS')
    app.config['APP_URL'] = os.environ.get('APP_URL', 'http://localhost:5000')

    # Session security settings
    app.config['SESSION_COOKIE_SECURE'] = os.environ.get('FLASK_ENV') == 'production'
    app.config['SESSION_COOKIE_HTTPONLY'] = True
    app.config['SESSION_COOKIE_SAMESITE'] = 'Lax'
    app.config['PERMANENT_SESSION_LIFETIME'] = 3600  # 1 hour

    # WTF-CSRF Protection
    app.config['WTF_CSRF_ENABLED'] = True
    app.config['WTF_CSRF_TIME_LIMIT'] = None  # No time limit for CSRF tokens


def create_app(test_config=None):
    app = Flask(__name__)

    # --- Configuration ---
    _load_config(app)

    # Allow tests to override config before anything is validated or initialized
    if test_config:
        app.config.update(test_config)

    if not app.config.get('SECRET_KEY'):
        raise ValueError("SECRET_KEY environment variable must be set")
    if not app.config.get('SQLALCHEMY_DATABASE_URI'):
        raise ValueError("DATABASE_URL environment variable must be set")

    # Prometheus metrics; each test app gets its own registry
    if app.testing:
        metrics = PrometheusMetrics(app, registry=CollectorRegistry())
    else:
        metrics = PrometheusMetrics(app)
    metrics.info('app_info', 'Clear View Retreat website', version=APP_VERSION)

    # --- Initialization ---
    db.init_app(app)

    # CSRF Protection
    csrf = CSRFProtect(app)

    @app.errorhandler(CSRFError)
    def handle_csrf_error(e):
        if request.path.startswith('/admin/api'):
            return jsonify({'error': 'Security token expired or invalid'}), 400
        flash('Security token expired or invalid. Please try again.', 'danger')
        return redirect(request.referrer or url_for('auth.login'))

    # Flask-Login setup
    login_manager = LoginManager()
    login_manager.init_app(app)
    login_manager.login_view = 'auth.login'
    login_manager.login_message_category = 'info'

    @login_manager.user_loader
    def load_user(user_id):
        return db.session.get(User, int(user_id))

    @login_manager.unauthorized_handler
    def unauthorized():
        if request.path.startswith('/api') or request.path.startswith('/admin/api'):
            return jsonify({'error': 'Authentication required'}), 401
        return redirect(url_for('auth.login', next=request.path))

    limiter.init_app(app)
    init_mail(app)
    register_error_handlers(app)

    # Content cache, storage backend and template helpers live on the app
    from services import content_service, page_renderer
    from services.content_cache import ContentCache
    from services.storage import build_storage
    app.extensions['content_cache'] = ContentCache(content_service.fetch_section_dicts,
                                                   ttl=app.config['CONTENT_CACHE_TTL'])
    app.extensions['storage'] = build_storage(app.config, app.instance_path)
    page_renderer.register_template_helpers(app)

    # Security headers
    @app.after_request
    def set_security_headers(response):
        response.headers['Content-Security-Policy'] = "default-src 'self'; style-src 'self' 'unsafe-inline' https://fonts.googleapis.com; font-src 'self' https://fonts.gstatic.com; script-src 'self' 'unsafe-inline'; img-src 'self' data: https:; frame-src https://www.google.com https://www.youtube.com;"
        # Prevent clickjacking
        response.headers['X-Frame-Options'] = 'SAMEORIGIN'
        # Prevent MIME type sniffing
        response.headers['X-Content-Type-Options'] = 'nosniff'
        response.headers['Referrer-Policy'] = 'strict-origin-when-cross-origin'
        # HSTS for HTTPS (only in production)
        if os.environ.get('FLASK_ENV') == 'production':
            response.headers['Strict-Transport-Security'] = 'max-age=31536000; includeSubDomains'
        return response

    # --- Blueprints (Routes) ---
    from blueprints import register_blueprints
    register_blueprints(app, csrf=csrf)

    @app.route('/health')
    @limiter.exempt
    def health_check():
        """Database connectivity and cache status for uptime monitoring."""
        health_status = {
            'status': 'healthy',
            'timestamp': utcnow().isoformat(),
            'service': 'Clear View Retreat',
            'version': APP_VERSION,
            'checks': {}
        }

        try:
            start_time = time.time()
            db.session.execute(db.text('SELECT 1'))
            health_status['checks']['database'] = {
                'status': 'healthy',
                'response_time_ms': round((time.time() - start_time) * 1000, 2),
            }
        except Exception as e:
            db.session.rollback()
            app.logger.error('Health check database failure: %s', e)
            health_status['status'] = 'unhealthy'
            health_status['checks']['database'] = {
                'status': 'unhealthy',
                'message': 'Database connection failed'
            }

        cache_stats = app.extensions['content_cache'].stats()
        health_status['checks']['content_cache'] = {
            'status': 'healthy',
            'sections': cache_stats['totalCached'],
            'ttl_seconds': cache_stats['ttlSeconds'],
        }
        health_status['checks']['storage'] = {'backend': 's3' if app.config.get('USE_S3') else 'local'}
        health_status['checks']['sentry'] = {'status': 'enabled' if sentry_dsn else 'disabled'}

        http_status = 200 if health_status['status'] == 'healthy' else 503
        return jsonify(health_status), http_status

    # --- Database Setup/Migration ---
    Migrate(app, db)

    return app, limiter


if __name__ == '__main__':
    app, limiter = create_app()
    app.run(debug=True)
