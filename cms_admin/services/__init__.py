from .user_manager import UserManager

__all__ = ["UserManager"]
