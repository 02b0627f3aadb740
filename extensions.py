from flask_limiter import Limiter
from flask_limiter.util import get_remote_address
import os

# Initialize Limiter here to avoid circular imports
# Public forms and login get their own per-route limits on top of these
is_production = os.environ.get('FLASK_ENV') == 'production'
default_limits = ["2000 per day", "500 per hour"] if is_production else ["10000 per day", "1000 per hour"]
limiter = Limiter(key_func=get_remote_address, default_limits=default_limits,
                  storage_uri=os.environ.get('RATELIMIT_STORAGE_URL', 'memory://'))

# Shared limit strings
LOGIN_LIMIT = "10 per minute"
PUBLIC_FORM_LIMIT = "20 per minute"
