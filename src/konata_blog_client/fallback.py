from typing import Any, Dict, Iterable, List, Optional
import logging
import re

from .exceptions import AuthenticationError
from .models import ApiResponse


log = logging.getLogger(__name__)

DEMO_USERNAME = "admin"
DEMO_PASSWORD = "admin"
DEMO_TOKEN = "mock_admin_token"

DEMO_USER: Dict[str, Any] = {
    "id": 1,
    "username": "admin",
    "email": "admin@example.com",
    "displayName": "Admin User",
    "nickname": "Admin User",
    "role": "ADMIN",
    "avatar": "/placeholder.svg",
    "isActive": True,
}

_ADMIN_POST_ID = re.compile(r"/posts/admin/(\d+)$")


def _page(items: List[Dict[str, Any]]) -> Dict[str, Any]:
    return {
        "content": items,
        "totalPages": 1,
        "totalElements": len(items),
        "size": 10,
        "number": 0,
        "first": True,
        "last": True,
        "pageable": {},
    }


def _not_found() -> ApiResponse:
    return ApiResponse.failure("NOT_FOUND", "Post not found")


class OfflineFallback:
    """
    Canned responses served when the backend cannot be reached.

    This keeps the client usable for demos without a live server. Replies
    are built from the seed lists given at construction and never reflect
    earlier calls. Endpoints outside the known set get no reply, and the
    caller re-raises the original transport error.

    Parameters
    ----------
    posts, categories, tags : iterable of dict
        Seed records in wire format (camelCase keys).
    """

    def __init__(
        self,
        *,
        posts: Iterable[Dict[str, Any]] = (),
        categories: Iterable[Dict[str, Any]] = (),
        tags: Iterable[Dict[str, Any]] = (),
    ) -> None:
        self.posts = list(posts)
        self.categories = list(categories)
        self.tags = list(tags)

    def respond(
        self,
        method: str,
        endpoint: str,
        body: Optional[Dict[str, Any]] = None
    ) -> Optional[ApiResponse]:
        """
        Return a canned envelope for `endpoint`, or None if there is none.

        Raises
        ------
        AuthenticationError
            For an offline login with anything but the demo credentials.
        """
        method = method.upper()
        body = body or {}

        if endpoint == "/auth/login":
            return self._login(body)

        if endpoint == "/auth/validate":
            return ApiResponse(success=True, data=True)

        if endpoint == "/auth/profile":
            if method == "PUT":
                return ApiResponse(success=True, data=self._edited_user(body))
            return ApiResponse(success=True, data=dict(DEMO_USER))

        if endpoint.startswith("/posts"):
            return self._posts(endpoint)

        if endpoint.startswith("/categories"):
            return ApiResponse(success=True, data=list(self.categories))

        if endpoint.startswith("/tags"):
            return ApiResponse(success=True, data=list(self.tags))

        log.error("No offline data for endpoint: %s", endpoint)
        return None

    def _login(self, body: Dict[str, Any]) -> ApiResponse:
        if (
            body.get("username") == DEMO_USERNAME
            and body.get("password") == DEMO_PASSWORD
        ):
            return ApiResponse(
                success=True,
                data={"token": DEMO_TOKEN, "user": dict(DEMO_USER)},
            )
        raise AuthenticationError("Invalid credentials")

    @staticmethod
    def _edited_user(body: Dict[str, Any]) -> Dict[str, Any]:
        user = dict(DEMO_USER)
        for key in ("username", "email", "displayName", "nickname"):
            if body.get(key):
                user[key] = body[key]
        return user

    def _find_post(self, field: str, value: Any) -> ApiResponse:
        for post in self.posts:
            if post.get(field) == value:
                return ApiResponse(success=True, data=post)
        return _not_found()

    def _posts(self, endpoint: str) -> ApiResponse:
        if endpoint.startswith("/posts/admin"):
            if "/posts/admin/slug/" in endpoint:
                slug = endpoint.split("/posts/admin/slug/")[1]
                return self._find_post("slug", slug)

            match = _ADMIN_POST_ID.search(endpoint)
            if match:
                return self._find_post("id", int(match.group(1)))

            return ApiResponse(success=True, data=_page(list(self.posts)))

        if "/slug/" in endpoint:
            slug = endpoint.split("/slug/")[1]
            return self._find_post("slug", slug)

        published = [p for p in self.posts if p.get("status") == "PUBLISHED"]
        return ApiResponse(success=True, data=_page(published))
