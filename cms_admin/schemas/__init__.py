from .user_menu import UserMenuBase, UserMenuCreate, UserMenuRead

__all__ = ["UserMenuBase", "UserMenuCreate", "UserMenuRead"]
