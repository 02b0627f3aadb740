import unittest
import sys
import os

# Ensure we can import from the parent directory
sys.path.append(os.path.abspath(os.path.join(os.path.dirname(__file__), '..')))

from app import create_app
from models import db


class RateLimitTestCase(unittest.TestCase):
    def setUp(self):
        # In-memory limiter storage, so no Redis is needed
        test_config = {
            'TESTING': True,
            'RATELIMIT_ENABLED': True,
            'RATELIMIT_STORAGE_URI': 'memory://',
            'SQLALCHEMY_DATABASE_URI': 'sqlite:///:memory:',
            'SECRET_KEY': 'test-secret-key',
            'WTF_CSRF_ENABLED': False,
        }
        self.app, self.limiter = create_app(test_config)
        self.client = self.app.test_client()

        self.ctx = self.app.app_context()
        self.ctx.push()
        db.create_all()

    def tearDown(self):
        db.session.remove()
        db.drop_all()
        self.ctx.pop()

    def test_login_rate_limit_flow(self):
        """Ten login posts per minute are allowed; the eleventh is rejected until the window resets."""
        login_url = '/auth/login'
        credentials = {'username': 'testuser', 'password': 'wrongpassword'}

        for i in range(10):
            response = self.client.post(login_url, data=credentials)
            self.assertNotEqual(response.status_code, 429, f"Attempt {i+1} was rate limited prematurely.")

        response = self.client.post(login_url, data=credentials)
        self.assertEqual(response.status_code, 429, "Rate limit was not triggered on the 11th attempt.")
        self.assertIn(b"Too Many Requests", response.data)

        # Simulate the window passing
        self.limiter.reset()

        response = self.client.post(login_url, data=credentials)
        self.assertNotEqual(response.status_code, 429, "Rate limit did not reset after clearing.")

    def test_login_page_views_are_not_limited(self):
        for _ in range(15):
            self.assertEqual(self.client.get('/auth/login').status_code, 200)

    def test_health_is_exempt(self):
        for _ in range(15):
            self.assertEqual(self.client.get('/health').status_code, 200)


if __name__ == '__main__':
    unittest.main()
