from typing import Any, Dict

from .base import BaseEndpoint
from ..models import ApiResponse, BlogSettings


class SettingsAPI(BaseEndpoint):
    """Blog-wide settings."""

    def get_public_settings(self) -> ApiResponse:
        return self.api_client.get(
            "/settings/public", parse=BlogSettings.with_defaults
        )

    def get_all_settings(self) -> ApiResponse:
        """Raw setting rows (`key`, `value`, `group`, ...). Admin only."""
        return self.api_client.get("/settings")

    def update_settings(self, settings: Dict[str, Any]) -> ApiResponse:
        """
        Update settings.

        Parameters
        ----------
        settings : dict
            Partial settings in wire format, e.g. `{"blogName": "..."}`.
        """
        return self.api_client.put(
            "/settings", settings, parse=BlogSettings.from_dict
        )

    def upload_avatar(self, file: Any) -> ApiResponse:
        return self.api_client.upload_file(
            "/settings/avatar", file, field_name="avatar"
        )
