"""
Clerk Bridge Services

User persistence and Clerk Backend API access.
"""

from .clerk_client import ClerkClient
from .user_store import UserStore

__all__ = ["ClerkClient", "UserStore"]
