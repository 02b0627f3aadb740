#!/usr/bin/env python3
"""Create an admin account, or reset the password of an existing one.

Usage: python scripts/create_admin.py <username> [email]
The password is read from ADMIN_PASSWORD or prompted for.
"""
import os
import sys
from getpass import getpass

sys.path.insert(0, os.path.abspath(os.path.join(os.path.dirname(__file__), '..')))

from app import create_app
from models import db, User
from password_validator import validate_password_strength, password_requirements


def main(argv):
    if len(argv) < 2:
        print(__doc__)
        return 1
    username = argv[1]
    email = argv[2] if len(argv) > 2 else None

    password = os.environ.get('ADMIN_PASSWORD') or getpass('Password: ')
    is_valid, error_message = validate_password_strength(password, username)
    if not is_valid:
        print(error_message)
        print('Requirements:')
        for requirement in password_requirements():
            print(' -', requirement)
        return 1

    app, _ = create_app()
    with app.app_context():
        db.create_all()
        user = User.query.filter_by(username=username).first()
        if user:
            user.set_password(password)
            user.set_role(User.ROLE_ADMIN)
            user.reset_failed_logins()
            print('Password reset for admin:', username)
        else:
            user = User(username=username, email=email)
            user.set_password(password)
            user.set_role(User.ROLE_ADMIN)
            db.session.add(user)
            print('Created admin:', username)
        db.session.commit()

        admins = User.query.filter_by(role=User.ROLE_ADMIN).all()
        print('Total admins:', len(admins))
        for a in admins:
            print(' -', a.username, a.email or '')
    return 0


if __name__ == '__main__':
    sys.exit(main(sys.argv))
