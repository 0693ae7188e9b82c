"""
Users API Database Models
Exports all models for use throughout the application.
"""

from app.models.user import User, UserRole

__all__ = [
    "User",
    "UserRole",
]
