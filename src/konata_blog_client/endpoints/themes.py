from typing import Any, Dict

from .base import BaseEndpoint
from ..models import ApiResponse, Theme, list_of


class ThemesAPI(BaseEndpoint):

    def get_themes(self) -> ApiResponse:
        return self.api_client.get("/themes", parse=list_of(Theme.from_dict))

    def activate_theme(self, theme_id: int) -> ApiResponse:
        return self.api_client.post(
            f"/themes/{theme_id}/activate", parse=Theme.from_dict
        )

    def update_theme_config(
        self,
        theme_id: int,
        config: Dict[str, Any]
    ) -> ApiResponse:
        return self.api_client.put(
            f"/themes/{theme_id}/config", {"config": config},
            parse=Theme.from_dict,
        )
