"""
Seed the database with the admin account, notification defaults and starter content.
Run with: python seed.py

Sections that already hold content are left alone, so the script can be re-run.
"""
import os
from app import create_app
from models import db, User, ContentItem
from services import content_service, email_settings_service

STARTER_CONTENT = {
    'hero': [
        {'metadata': {'name': 'headline'}, 'contentType': 'text', 'content': 'Welcome to Clear View Retreat'},
        {'metadata': {'name': 'subheadline'}, 'contentType': 'text',
         'content': 'A place of rest, reflection and renewal in the hills.'},
        {'metadata': {'name': 'Call to Action', 'link': '/contact'}, 'contentType': 'text',
         'content': 'Plan Your Visit'},
    ],
    'about': [
        {'metadata': {'name': 'Main Content'}, 'contentType': 'richtext',
         'content': '<p>Clear View Retreat is a Christian retreat center serving churches, families and groups.</p>'},
        {'metadata': {'name': 'The Vision'}, 'contentType': 'richtext',
         'content': '<p>To offer a quiet place where people can step away and meet with God.</p>'},
    ],
    'contact': [
        {'metadata': {'name': 'Contact Introduction'}, 'contentType': 'text',
         'content': "We'd love to hear from you. Send us a message and we'll reply within 24 hours."},
        {'metadata': {'name': 'Email'}, 'contentType': 'text', 'content': 'info@clearviewretreat.org'},
    ],
    'donate': [
        {'metadata': {'name': 'Donate Introduction'}, 'contentType': 'richtext',
         'content': '<p>Your gifts keep the retreat open to everyone who needs it.</p>'},
    ],
}


def seed_data():
    app, _ = create_app()

    with app.app_context():
        db.create_all()

        print("Creating notification defaults...")
        created = email_settings_service.ensure_notification_defaults()
        print(f"  {len(created)} notification settings created")

        username = os.environ.get('ADMIN_USERNAME', 'admin')
        if User.query.filter_by(username=username).first():
            print(f"Admin user '{username}' already exists")
        else:
            password = os.environ.get('ADMIN_PASSWORD')
            if not password:
                raise SystemExit('Set ADMIN_PASSWORD to create the admin account')
            admin = User(username=username, email=os.environ.get('ADMIN_EMAIL'))
            admin.set_role('Admin')
            admin.set_password(password)
            db.session.add(admin)
            db.session.commit()
            print(f"Created admin user '{username}'")

        print("Creating starter content...")
        for section, items in STARTER_CONTENT.items():
            if ContentItem.query.filter_by(section=section).first():
                print(f"  {section}: already has content, skipped")
                continue
            for item in items:
                content_service.create_content({'section': section, **item}, user='seed')
            print(f"  {section}: {len(items)} items")

        print("Done.")


if __name__ == '__main__':
    seed_data()
