from typing import Dict, List, Optional

from .base import (
    BaseEndpoint,
    SortKeys,
    encode_component,
    page_params,
    with_query,
)
from .posts import parse_post_page
from ..models import ApiResponse, PageResponse, Post, Tag, list_of


parse_tags = list_of(Tag.from_dict)


class TagsAPI(BaseEndpoint):
    """Tag browsing, search, suggestions and admin CRUD."""

    def get_tags(self) -> ApiResponse:
        return self.api_client.get("/tags", parse=parse_tags)

    def get_tag_by_id(self, tag_id: int) -> ApiResponse:
        return self.api_client.get(f"/tags/{tag_id}", parse=Tag.from_dict)

    def get_tag_by_slug(self, slug: str) -> ApiResponse:
        return self.api_client.get(f"/tags/slug/{slug}", parse=Tag.from_dict)

    def get_popular_tags(self, limit: int = 10) -> ApiResponse:
        return self.api_client.get(
            f"/tags/popular?limit={limit}", parse=parse_tags
        )

    def search_tags(
        self,
        query: str,
        page: int = 0,
        size: int = 20,
        ignore_case: bool = True
    ) -> ApiResponse:
        """
        Paged tag search.

        `q` is omitted when `query` is empty; `page`, `size` and
        `ignoreCase` are always sent.
        """
        path = with_query("/tags/search", [
            ("q", query or None),
            ("page", page),
            ("size", size),
            ("ignoreCase", ignore_case),
        ], always=True)
        return self.api_client.get(
            path, parse=PageResponse.parser(Tag.from_dict)
        )

    def get_tag_suggestions(self, query: str, limit: int = 8) -> ApiResponse:
        return self.api_client.get(
            f"/tags/suggestions?q={encode_component(query)}&limit={limit}",
            parse=parse_tags,
        )

    def get_tag_posts(
        self,
        tag_id: int,
        *,
        page: Optional[int] = None,
        size: Optional[int] = None,
        sort: Optional[SortKeys] = None,
        status: Optional[str] = None
    ) -> ApiResponse:
        params = page_params(page, size, sort) + [("status", status or None)]
        path = with_query(f"/tags/{tag_id}/posts", params)
        return self.api_client.get(path, parse=parse_post_page)

    def create_tag(
        self,
        *,
        name: str,
        slug: Optional[str] = None,
        description: Optional[str] = None,
        color: Optional[str] = None
    ) -> ApiResponse:
        body = _compact(
            name=name, slug=slug, description=description, color=color
        )
        return self.api_client.post("/tags", body, parse=Tag.from_dict)

    def update_tag(
        self,
        tag_id: int,
        *,
        name: Optional[str] = None,
        slug: Optional[str] = None,
        description: Optional[str] = None,
        color: Optional[str] = None
    ) -> ApiResponse:
        body = _compact(
            name=name, slug=slug, description=description, color=color
        )
        return self.api_client.put(
            f"/tags/{tag_id}", body, parse=Tag.from_dict
        )

    def delete_tag(self, tag_id: int, force: bool = False) -> ApiResponse:
        return self.api_client.delete(
            with_query(f"/tags/{tag_id}", [("force", force)])
        )

    def bulk_create_tags(self, names: List[str]) -> ApiResponse:
        return self.api_client.post(
            "/tags/bulk", {"names": names}, parse=parse_tags
        )

    def smart_create_tag(
        self,
        *,
        name: str,
        description: Optional[str] = None,
        color: Optional[str] = None
    ) -> ApiResponse:
        """Create a tag, or return the existing one with the same name."""
        body = _compact(name=name, description=description, color=color)
        return self.api_client.post(
            "/tags/smart-create", body, parse=Tag.from_dict
        )

    def set_post_tags(self, post_id: int, tag_ids: List[int]) -> ApiResponse:
        return self.api_client.put(
            f"/posts/{post_id}/tags", {"tagIds": tag_ids},
            parse=Post.from_dict,
        )


def _compact(**fields) -> Dict:
    return {k: v for k, v in fields.items() if v is not None}
