"""Password strength rules for admin accounts."""
import re

SPECIAL_CHARACTERS = r'!@#$%^&*()_+\-=\[\]{}|;:,.<>?'
MIN_LENGTH = 10

# (pattern that must match, message shown when it does not)
RULES = [
    (r'[A-Z]', "Password must contain at least one uppercase letter"),
    (r'[a-z]', "Password must contain at least one lowercase letter"),
    (r'\d', "Password must contain at least one number"),
    (f'[{SPECIAL_CHARACTERS}]', "Password must contain at least one special character (!@#$%^&* etc.)"),
]


def validate_password_strength(password, username=None):
    """
    Check a candidate admin password.

    Returns:
        tuple: (is_valid: bool, error_message: str or None)
    """
    if not password or len(password) < MIN_LENGTH:
        return False, f"Password must be at least {MIN_LENGTH} characters long"

    for pattern, message in RULES:
        if not re.search(pattern, password):
            return False, message

    if username and username.lower() in password.lower():
        return False, "Password must not contain the username"

    return True, None


def password_requirements():
    return [
        f"At least {MIN_LENGTH} characters long",
        "Contains uppercase and lowercase letters",
        "Contains at least one number",
        "Contains at least one special character (!@#$%^&* etc.)",
        "Does not contain the username",
    ]
