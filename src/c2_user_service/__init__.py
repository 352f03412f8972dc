"""C2 User Service - User administration."""
from src.c2_user_service.user_service import UserService
__all__ = ["UserService"]
