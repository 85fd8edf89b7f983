from .auth import AuthAPI, LoginResult
from .posts import PostsAPI
from .categories import CategoriesAPI
from .tags import TagsAPI
from .media import MediaAPI
from .settings import SettingsAPI
from .themes import ThemesAPI

__all__ = [
    "AuthAPI",
    "LoginResult",
    "PostsAPI",
    "CategoriesAPI",
    "TagsAPI",
    "MediaAPI",
    "SettingsAPI",
    "ThemesAPI",
]
