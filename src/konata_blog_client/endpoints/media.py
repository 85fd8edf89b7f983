from typing import Any, Dict, Optional

from .base import BaseEndpoint, SortKeys, page_params, with_query
from ..models import ApiResponse, MediaFile, PageResponse


class MediaAPI(BaseEndpoint):

    def get_media(
        self,
        *,
        page: Optional[int] = None,
        size: Optional[int] = None,
        sort: Optional[SortKeys] = None,
        type: Optional[str] = None,
        uploaded_by: Optional[int] = None
    ) -> ApiResponse:
        params = page_params(page, size, sort) + [
            ("type", type or None),
            ("uploadedBy", uploaded_by or None),
        ]
        return self.api_client.get(
            with_query("/media", params),
            parse=PageResponse.parser(MediaFile.from_dict),
        )

    def upload_media(
        self,
        file: Any,
        description: Optional[str] = None,
        alt_text: Optional[str] = None,
        type: Optional[str] = None
    ) -> ApiResponse:
        """
        Upload a media file.

        Raises
        ------
        UploadError
            If the backend rejects the upload.
        """
        additional_data: Dict[str, str] = {}
        if description:
            additional_data["description"] = description
        if alt_text:
            additional_data["altText"] = alt_text
        if type:
            additional_data["type"] = type

        return self.api_client.upload_file(
            "/media/upload",
            file,
            additional_data,
            parse=MediaFile.from_dict,
        )

    def delete_media(self, media_id: int) -> ApiResponse:
        return self.api_client.delete(f"/media/{media_id}")
