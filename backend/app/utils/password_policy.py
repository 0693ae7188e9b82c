"""
Password Policy Utilities
Provides password validation rules.
"""

import re
from typing import List


MIN_PASSWORD_LENGTH = 8


def validate_password(password: str) -> List[str]:
    """
    Validate password strength and return a list of errors.
    Every rule is checked so the caller sees all violations at once.
    """
    errors: List[str] = []

    if len(password) < MIN_PASSWORD_LENGTH:
        errors.append(f"Password must be at least {MIN_PASSWORD_LENGTH} characters long")

    if not re.search(r"[A-Z]", password):
        errors.append("Password must contain at least one uppercase letter")

    if not re.search(r"[a-z]", password):
        errors.append("Password must contain at least one lowercase letter")

    if not re.search(r"\d", password):
        errors.append("Password must contain at least one number")

    # bcrypt cannot hash NUL bytes
    if "\x00" in password:
        errors.append("Password must not contain null characters")

    return errors
