from concurrent.futures import ThreadPoolExecutor, as_completed
from typing import Any, Dict, List, Optional
from rich.progress import Progress
import logging

from .base import BaseEndpoint, SortKeys, page_params, with_query
from ..models import ApiResponse, PageResponse, Post


log = logging.getLogger(__name__)

PUBLIC_SORT = "publishedAt,desc"
ADMIN_SORT = "createdAt,desc"

parse_post_page = PageResponse.parser(Post.from_dict)


def _search_params(
    q: Optional[str],
    category: Optional[int],
    tag: Optional[int],
    page: Optional[int],
    size: Optional[int],
    sort: Optional[SortKeys]
) -> list:
    return [
        ("q", q or None),
        ("category", category or None),
        ("tag", tag or None),
    ] + page_params(page, size, sort)


class PostsAPI(BaseEndpoint):
    """
    Access to public and admin post endpoints.

    Listing methods return `ApiResponse[PageResponse[Post]]`; single-post
    methods return `ApiResponse[Post]`.
    """

    def get_posts(
        self,
        *,
        page: Optional[int] = None,
        size: Optional[int] = None,
        sort: Optional[SortKeys] = None
    ) -> ApiResponse:
        """
        List published posts.

        Parameters
        ----------
        page : int, optional
            Zero-based page index. Sent when not None.
        size : int, optional
            Page size. Sent when not None.
        sort : str or sequence of str, optional
            Sort keys, e.g. "publishedAt,desc" or ["publishedAt", "desc"].
        """
        path = with_query("/posts", page_params(page, size, sort))
        return self.api_client.get(path, parse=parse_post_page)

    def get_admin_posts(
        self,
        *,
        page: Optional[int] = None,
        size: Optional[int] = None,
        sort: Optional[SortKeys] = None
    ) -> ApiResponse:
        """List all posts, drafts included. Requires an admin token."""
        path = with_query("/posts/admin/all", page_params(page, size, sort))
        return self.api_client.get(path, parse=parse_post_page)

    def get_post_by_id(self, post_id: int) -> ApiResponse:
        return self.api_client.get(
            f"/posts/{post_id}", parse=Post.from_dict
        )

    def get_admin_post_by_id(self, post_id: int) -> ApiResponse:
        return self.api_client.get(
            f"/posts/admin/{post_id}", parse=Post.from_dict
        )

    def get_post_by_slug(self, slug: str) -> ApiResponse:
        return self.api_client.get(
            f"/posts/slug/{slug}", parse=Post.from_dict
        )

    def get_admin_post_by_slug(self, slug: str) -> ApiResponse:
        return self.api_client.get(
            f"/posts/admin/slug/{slug}", parse=Post.from_dict
        )

    def search_posts(
        self,
        *,
        q: Optional[str] = None,
        category: Optional[int] = None,
        tag: Optional[int] = None,
        page: Optional[int] = None,
        size: Optional[int] = None,
        sort: Optional[SortKeys] = None
    ) -> ApiResponse:
        """
        Full-text search over published posts.

        Parameters
        ----------
        q : str, optional
            Search text. Omitted when empty.
        category, tag : int, optional
            Filter IDs. Omitted when falsy.
        page, size : int, optional
            Paging. Sent when not None.
        sort : str or sequence of str, optional
            Sort keys.

        Notes
        -----
        The path always carries a `?`, even with no parameters.
        """
        path = with_query(
            "/posts/search",
            _search_params(q, category, tag, page, size, sort),
            always=True,
        )
        return self.api_client.get(path, parse=parse_post_page)

    def search_admin_posts(
        self,
        *,
        q: Optional[str] = None,
        category: Optional[int] = None,
        tag: Optional[int] = None,
        page: Optional[int] = None,
        size: Optional[int] = None,
        sort: Optional[SortKeys] = None
    ) -> ApiResponse:
        """Same as `search_posts`, including drafts."""
        path = with_query(
            "/posts/admin/search",
            _search_params(q, category, tag, page, size, sort),
            always=True,
        )
        return self.api_client.get(path, parse=parse_post_page)

    def create_post(
        self,
        *,
        title: str,
        content: str,
        excerpt: Optional[str] = None,
        slug: Optional[str] = None,
        status: Optional[str] = None,
        is_featured: Optional[bool] = None,
        category_id: Optional[int] = None,
        tag_ids: Optional[List[int]] = None
    ) -> ApiResponse:
        body = _post_body(
            title=title,
            content=content,
            excerpt=excerpt,
            slug=slug,
            status=status,
            is_featured=is_featured,
            category_id=category_id,
            tag_ids=tag_ids,
        )
        return self.api_client.post("/posts", body, parse=Post.from_dict)

    def update_post(
        self,
        post_id: int,
        *,
        title: Optional[str] = None,
        content: Optional[str] = None,
        excerpt: Optional[str] = None,
        slug: Optional[str] = None,
        status: Optional[str] = None,
        is_featured: Optional[bool] = None,
        category_id: Optional[int] = None,
        tag_ids: Optional[List[int]] = None
    ) -> ApiResponse:
        body = _post_body(
            title=title,
            content=content,
            excerpt=excerpt,
            slug=slug,
            status=status,
            is_featured=is_featured,
            category_id=category_id,
            tag_ids=tag_ids,
        )
        return self.api_client.put(
            f"/posts/{post_id}", body, parse=Post.from_dict
        )

    def delete_post(self, post_id: int) -> ApiResponse:
        return self.api_client.delete(f"/posts/{post_id}")

    def publish_post(self, post_id: int) -> ApiResponse:
        return self.api_client.post(
            f"/posts/{post_id}/publish", parse=Post.from_dict
        )

    def unpublish_post(self, post_id: int) -> ApiResponse:
        return self.api_client.post(
            f"/posts/{post_id}/unpublish", parse=Post.from_dict
        )

    def get_all_posts(
        self,
        *,
        admin: bool = False,
        page_size: int = 50,
        sort: Optional[SortKeys] = None,
        max_workers: int = 4
    ) -> ApiResponse:
        """
        Retrieve every post by walking all pages.

        The first page is fetched alone to learn the page count; the
        remaining pages are fetched concurrently and merged back in page
        order.

        Parameters
        ----------
        admin : bool
            Use the admin listing (drafts included).
        page_size : int
            Posts per page request.
        sort : str or sequence of str, optional
            Sort keys, applied per page.
        max_workers : int
            Number of threads used for the remaining pages.

        Returns
        -------
        ApiResponse
            `data` is a list of `Post`. If any page fails, that page's
            failure envelope is returned instead.
        """
        path = "/posts/admin/all" if admin else "/posts"
        sort = sort or (ADMIN_SORT if admin else PUBLIC_SORT)

        def fetch(page: int) -> ApiResponse:
            return self.api_client.get(
                with_query(path, page_params(page, page_size, sort))
            )

        first = fetch(0)
        if not first.success or not first.data:
            return first

        pages: Dict[int, List[Dict[str, Any]]] = {
            0: first.data.get("content") or []
        }
        total_pages = int(first.data.get("totalPages") or 1)

        with Progress() as progress:
            task = progress.add_task(
                "[cyan]Fetching posts...", total=total_pages
            )
            progress.advance(task, 1)

            with ThreadPoolExecutor(max_workers=max_workers) as ex:
                futures = {
                    ex.submit(fetch, page): page
                    for page in range(1, total_pages)
                }

                for fut in as_completed(futures):
                    page = futures[fut]
                    res = fut.result()
                    progress.advance(task, 1)

                    if not res.success:
                        log.warning(f"Failed to fetch posts page {page}")
                        return res

                    pages[page] = (res.data or {}).get("content") or []

        posts = [
            Post.from_dict(item)
            for page in sorted(pages)
            for item in pages[page]
        ]
        return ApiResponse(success=True, data=posts)


def _post_body(**fields: Any) -> Dict[str, Any]:
    names = {
        "is_featured": "isFeatured",
        "category_id": "categoryId",
        "tag_ids": "tagIds",
    }
    return {
        names.get(key, key): value
        for key, value in fields.items()
        if value is not None
    }
