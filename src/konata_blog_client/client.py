from typing import Optional
import requests

from .base_client import BaseAPIClient
from .config import ClientSettings
from .endpoints import (
    AuthAPI,
    PostsAPI,
    CategoriesAPI,
    TagsAPI,
    MediaAPI,
    SettingsAPI,
    ThemesAPI,
)
from .fallback import OfflineFallback
from .token_store import TokenStore


class KonataBlogClient:
    """
    Central entry point for all KonataBlog API groups.
    Aggregates sub-clients such as PostsAPI, TagsAPI, etc.
    """

    def __init__(
        self,
        *,
        api_client: BaseAPIClient,
    ):
        self.api_client = api_client

        # Sub-clients share one pipeline, hence one token store and one
        # pending-refresh handle.
        self.auth = AuthAPI(api_client=api_client)
        self.posts = PostsAPI(api_client=api_client)
        self.categories = CategoriesAPI(api_client=api_client)
        self.tags = TagsAPI(api_client=api_client)
        self.media = MediaAPI(api_client=api_client)
        self.settings = SettingsAPI(api_client=api_client)
        self.themes = ThemesAPI(api_client=api_client)

    @classmethod
    def from_settings(
        cls,
        settings: Optional[ClientSettings] = None,
        *,
        token_store: Optional[TokenStore] = None,
        session: Optional[requests.Session] = None,
        fallback: Optional[OfflineFallback] = None,
    ) -> "KonataBlogClient":
        """Build the full client stack, reading the environment by default."""
        settings = settings or ClientSettings.from_env()
        api_client = BaseAPIClient.from_settings(
            settings,
            token_store=token_store,
            session=session,
            fallback=fallback,
        )
        return cls(api_client=api_client)
