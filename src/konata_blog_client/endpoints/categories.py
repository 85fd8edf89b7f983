from typing import Dict, List, Optional

from .base import BaseEndpoint, SortKeys, page_params, with_query
from .posts import parse_post_page
from ..models import ApiResponse, Category, list_of


class CategoriesAPI(BaseEndpoint):
    """Category listing, tree, per-category posts and admin CRUD."""

    def get_categories(
        self,
        *,
        include_counts: Optional[bool] = None,
        parent_id: Optional[int] = None
    ) -> ApiResponse:
        """
        List categories.

        Parameters
        ----------
        include_counts : bool, optional
            Sent as "true"/"false" when not None.
        parent_id : int, optional
            Sent when truthy.
        """
        path = with_query("/categories", [
            ("includeCounts", include_counts),
            ("parentId", parent_id or None),
        ])
        return self.api_client.get(path, parse=list_of(Category.from_dict))

    def get_category_by_id(self, category_id: int) -> ApiResponse:
        return self.api_client.get(
            f"/categories/{category_id}", parse=Category.from_dict
        )

    def get_category_by_slug(self, slug: str) -> ApiResponse:
        return self.api_client.get(
            f"/categories/slug/{slug}", parse=Category.from_dict
        )

    def get_category_tree(self, include_empty: bool = False) -> ApiResponse:
        path = with_query("/categories/tree", [("includeEmpty", include_empty)])
        return self.api_client.get(path, parse=list_of(Category.from_dict))

    def get_category_posts(
        self,
        category_id: int,
        *,
        page: Optional[int] = None,
        size: Optional[int] = None,
        sort: Optional[SortKeys] = None,
        status: Optional[str] = None
    ) -> ApiResponse:
        params = page_params(page, size, sort) + [("status", status or None)]
        path = with_query(f"/categories/{category_id}/posts", params)
        return self.api_client.get(path, parse=parse_post_page)

    def create_category(
        self,
        *,
        name: str,
        description: Optional[str] = None,
        slug: Optional[str] = None,
        sort_order: Optional[int] = None,
        is_active: Optional[bool] = None,
        parent_id: Optional[int] = None
    ) -> ApiResponse:
        body = _category_body(
            name=name,
            description=description,
            slug=slug,
            sort_order=sort_order,
            is_active=is_active,
            parent_id=parent_id,
        )
        return self.api_client.post(
            "/categories", body, parse=Category.from_dict
        )

    def update_category(
        self,
        category_id: int,
        *,
        name: Optional[str] = None,
        description: Optional[str] = None,
        slug: Optional[str] = None,
        sort_order: Optional[int] = None,
        is_active: Optional[bool] = None,
        parent_id: Optional[int] = None
    ) -> ApiResponse:
        body = _category_body(
            name=name,
            description=description,
            slug=slug,
            sort_order=sort_order,
            is_active=is_active,
            parent_id=parent_id,
        )
        return self.api_client.put(
            f"/categories/{category_id}", body, parse=Category.from_dict
        )

    def delete_category(self, category_id: int) -> ApiResponse:
        return self.api_client.delete(f"/categories/{category_id}")

    def reorder_categories(self, orders: List[Dict[str, int]]) -> ApiResponse:
        """
        Persist a new ordering.

        Parameters
        ----------
        orders : list of dict
            Items of the form `{"id": <category id>, "order": <position>}`.
        """
        return self.api_client.patch(
            "/categories/reorder", {"orders": orders}
        )

    def get_category_stats(self) -> ApiResponse:
        return self.api_client.get("/categories/stats")


def _category_body(**fields) -> Dict:
    names = {
        "sort_order": "sortOrder",
        "is_active": "isActive",
        "parent_id": "parentId",
    }
    return {
        names.get(key, key): value
        for key, value in fields.items()
        if value is not None
    }
