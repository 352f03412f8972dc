"""Authentication helpers and FastAPI dependencies for TicketDesk."""

from src.auth.security import (
    hash_password,
    verify_password,
    create_access_token,
    create_user_token,
    verify_access_token,
    generate_reset_token,
    hash_token,
)
from src.auth.dependencies import (
    CurrentUser,
    get_current_user,
    get_admin_user,
    get_kanban_editor,
)
from src.auth.rate_limit import RateLimiter, login_rate_limit, upload_rate_limit, general_rate_limit

__all__ = [
    "hash_password",
    "verify_password",
    "create_access_token",
    "create_user_token",
    "verify_access_token",
    "generate_reset_token",
    "hash_token",
    "CurrentUser",
    "get_current_user",
    "get_admin_user",
    "get_kanban_editor",
    "RateLimiter",
    "login_rate_limit",
    "upload_rate_limit",
    "general_rate_limit",
]
