"""WSGI entrypoint for deployment.

Gunicorn and Render load the site via `wsgi:app`; tests use the
`create_app()` factory in `app.py` directly.
"""
from app import create_app

app, _ = create_app()
