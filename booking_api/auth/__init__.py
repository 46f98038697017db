"""
Identity & Authentication Module

- utils.py: bcrypt password hashing and signed session tokens
- store.py: persistence for identity records
- service.py: registration, login, password change and profile edits
- dependencies.py: the authorization guard every protected route depends on
- router.py: /auth endpoints
"""

from .router import router

__all__ = ["router"]
