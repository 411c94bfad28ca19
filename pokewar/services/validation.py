"""Signup form rules shared by the API and the identity directory."""
import re

from pokewar.errors import ValidationFailed

EMAIL_RE = re.compile(r'^[^\s@]+@[^\s@]+\.[^\s@]+$')

PASSWORD_RULES = [
    ('At least 8 characters', lambda value: len(value) >= 8),
    ('One uppercase letter', lambda value: re.search(r'[A-Z]', value) is not None),
    ('One lowercase letter', lambda value: re.search(r'[a-z]', value) is not None),
    ('One number', lambda value: re.search(r'\d', value) is not None),
]


def validate_email(value):
    """Return an error message, or '' when the email is acceptable."""
    cleaned = str(value or '').strip()
    if not cleaned:
        return 'Email is required.'
    if not EMAIL_RE.match(cleaned.lower()):
        return 'Enter a valid email address.'
    return ''


def validate_display_name(value):
    cleaned = str(value or '').strip()
    if not cleaned:
        return 'Name is required.'
    if len(cleaned) < 2:
        return 'Name must be at least 2 characters.'
    return ''


def validate_password(value):
    """Return the labels of every password rule the value fails."""
    password = str(value or '')
    if not password:
        return ['Password is required.']
    return [label for label, rule in PASSWORD_RULES if not rule(password)]


def validate_signup(name, email, password):
    errors = []
    name_error = validate_display_name(name)
    if name_error:
        errors.append(name_error)
    email_error = validate_email(email)
    if email_error:
        errors.append(email_error)
    password_errors = validate_password(password)
    if password_errors and not password:
        errors.append(password_errors[0])
    elif password_errors:
        errors.append('Password must include: ' + ', '.join(password_errors))
    if errors:
        raise ValidationFailed(errors[0], details=errors)
