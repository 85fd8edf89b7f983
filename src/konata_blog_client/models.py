from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime
from typing import Any, Callable, Dict, Generic, List, Optional, TypeVar
from dateutil.parser import isoparse
import logging


T = TypeVar("T")

log = logging.getLogger(__name__)

INVALID_RESPONSE = "INVALID_RESPONSE"


def _parse_ts(value: Optional[str]) -> Optional[datetime]:
    """Parse an ISO-8601 timestamp, returning None for empty values."""
    if not value:
        return None
    try:
        return isoparse(value)
    except (TypeError, ValueError):
        return None


@dataclass(frozen=True)
class ApiError:
    code: str
    message: str

    @classmethod
    def from_dict(cls, raw: Dict[str, Any]) -> "ApiError":
        return cls(
            code=str(raw.get("code") or ""),
            message=str(raw.get("message") or ""),
        )


@dataclass(frozen=True)
class ApiResponse(Generic[T]):
    """
    Uniform envelope returned by every backend call.

    Callers branch on `success`; failures carry `error` and are never
    raised by the request pipeline.
    """

    success: bool
    data: Optional[T] = None
    message: Optional[str] = None
    error: Optional[ApiError] = None

    @classmethod
    def from_dict(cls, raw: Dict[str, Any]) -> "ApiResponse":
        error = raw.get("error")
        return cls(
            success=bool(raw.get("success")),
            data=raw.get("data"),
            message=raw.get("message"),
            error=ApiError.from_dict(error) if isinstance(error, dict) else None,
        )

    @classmethod
    def failure(cls, code: str, message: str) -> "ApiResponse":
        return cls(
            success=False,
            data=None,
            error=ApiError(code=code, message=message),
        )

    def map_data(self, parse: Callable[[Any], Any]) -> "ApiResponse":
        """
        Return a copy with `data` converted, when there is data.

        Data of an unexpected shape (e.g. a list where an object is
        expected) yields an `INVALID_RESPONSE` failure instead of raising.
        """
        if not self.success or self.data is None:
            return self
        try:
            parsed = parse(self.data)
        except (AttributeError, TypeError, KeyError, ValueError) as exc:
            log.warning(
                f"Unexpected response data ({type(self.data).__name__}): {exc}"
            )
            return ApiResponse.failure(
                INVALID_RESPONSE, "Unexpected response data"
            )
        return ApiResponse(
            success=self.success,
            data=parsed,
            message=self.message,
            error=self.error,
        )

    def to_dict(self) -> Dict[str, Any]:
        out: Dict[str, Any] = {"success": self.success, "data": self.data}
        if self.message is not None:
            out["message"] = self.message
        if self.error is not None:
            out["error"] = {
                "code": self.error.code,
                "message": self.error.message,
            }
        return out


@dataclass(frozen=True)
class User:
    id: int
    username: str
    email: str
    nickname: str
    role: str
    avatar: str
    is_active: bool
    display_name: Optional[str] = None
    last_login_at: Optional[datetime] = None
    created_at: Optional[datetime] = None

    @property
    def is_admin(self) -> bool:
        return self.role == "ADMIN"

    @classmethod
    def from_dict(cls, raw: Dict[str, Any]) -> "User":
        return cls(
            id=raw.get("id"),
            username=raw.get("username", ""),
            email=raw.get("email", ""),
            nickname=raw.get("nickname", ""),
            role=raw.get("role", "USER"),
            avatar=raw.get("avatar", ""),
            is_active=bool(raw.get("isActive", False)),
            display_name=raw.get("displayName"),
            last_login_at=_parse_ts(raw.get("lastLoginAt")),
            created_at=_parse_ts(raw.get("createdAt")),
        )


@dataclass(frozen=True)
class PostAuthor:
    id: int
    username: str
    display_name: str

    @classmethod
    def from_dict(cls, raw: Dict[str, Any]) -> "PostAuthor":
        return cls(
            id=raw.get("id"),
            username=raw.get("username", ""),
            display_name=raw.get("displayName", ""),
        )


@dataclass(frozen=True)
class Category:
    id: int
    name: str
    slug: str
    sort_order: int = 0
    is_active: bool = True
    description: Optional[str] = None
    parent_id: Optional[int] = None
    parent_name: Optional[str] = None
    post_count: Optional[int] = None
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None

    @classmethod
    def from_dict(cls, raw: Dict[str, Any]) -> "Category":
        return cls(
            id=raw.get("id"),
            name=raw.get("name", ""),
            slug=raw.get("slug", ""),
            sort_order=raw.get("sortOrder", 0),
            is_active=bool(raw.get("isActive", True)),
            description=raw.get("description"),
            parent_id=raw.get("parentId"),
            parent_name=raw.get("parentName"),
            post_count=raw.get("postCount"),
            created_at=_parse_ts(raw.get("createdAt")),
            updated_at=_parse_ts(raw.get("updatedAt")),
        )


@dataclass(frozen=True)
class Tag:
    id: int
    name: str
    slug: str
    description: Optional[str] = None
    usage_count: Optional[int] = None
    post_count: Optional[int] = None
    color: Optional[str] = None
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None

    @classmethod
    def from_dict(cls, raw: Dict[str, Any]) -> "Tag":
        return cls(
            id=raw.get("id"),
            name=raw.get("name", ""),
            slug=raw.get("slug", ""),
            description=raw.get("description"),
            usage_count=raw.get("usageCount"),
            post_count=raw.get("postCount"),
            color=raw.get("color"),
            created_at=_parse_ts(raw.get("createdAt")),
            updated_at=_parse_ts(raw.get("updatedAt")),
        )


@dataclass(frozen=True)
class Post:
    id: int
    title: str
    slug: str
    excerpt: str
    content: str
    status: str
    is_featured: bool = False
    view_count: int = 0
    created_at: Optional[datetime] = None
    published_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None
    author: Optional[PostAuthor] = None
    category: Optional[Category] = None
    tags: List[Tag] = field(default_factory=list)

    @property
    def is_published(self) -> bool:
        return self.status == "PUBLISHED"

    @classmethod
    def from_dict(cls, raw: Dict[str, Any]) -> "Post":
        author = raw.get("author")
        category = raw.get("category")
        return cls(
            id=raw.get("id"),
            title=raw.get("title", ""),
            slug=raw.get("slug", ""),
            excerpt=raw.get("excerpt") or "",
            content=raw.get("content") or "",
            status=raw.get("status", "DRAFT"),
            is_featured=bool(raw.get("isFeatured", False)),
            view_count=int(raw.get("viewCount") or 0),
            created_at=_parse_ts(raw.get("createdAt")),
            published_at=_parse_ts(raw.get("publishedAt")),
            updated_at=_parse_ts(raw.get("updatedAt")),
            author=PostAuthor.from_dict(author) if author else None,
            category=Category.from_dict(category) if category else None,
            tags=[Tag.from_dict(t) for t in raw.get("tags") or []],
        )


@dataclass(frozen=True)
class MediaFile:
    id: int
    original_name: str
    file_name: str
    file_extension: str
    file_size: int
    mime_type: str
    url: str
    local_path: str
    type: str
    width: Optional[int] = None
    height: Optional[int] = None
    description: Optional[str] = None
    alt_text: Optional[str] = None
    uploaded_at: Optional[datetime] = None
    uploaded_by: Optional[PostAuthor] = None

    @classmethod
    def from_dict(cls, raw: Dict[str, Any]) -> "MediaFile":
        uploader = raw.get("uploadedBy")
        return cls(
            id=raw.get("id"),
            original_name=raw.get("originalName", ""),
            file_name=raw.get("fileName", ""),
            file_extension=raw.get("fileExtension", ""),
            file_size=int(raw.get("fileSize") or 0),
            mime_type=raw.get("mimeType", ""),
            url=raw.get("url", ""),
            local_path=raw.get("localPath", ""),
            type=raw.get("type", "IMAGE"),
            width=raw.get("width"),
            height=raw.get("height"),
            description=raw.get("description"),
            alt_text=raw.get("altText"),
            uploaded_at=_parse_ts(raw.get("uploadedAt")),
            uploaded_by=PostAuthor.from_dict(uploader) if uploader else None,
        )


DEFAULT_BLOG_SETTINGS: Dict[str, Any] = {
    "blogName": "KonataBlog",
    "blogDescription": "A modern personal blog platform",
    "blogTagline": "",
    "authorName": "",
    "authorEmail": "",
    "pageSize": 10,
    "commentEnabled": False,
    "theme": "default",
}


@dataclass(frozen=True)
class BlogSettings:
    blog_name: str
    blog_description: str
    blog_tagline: str
    author_name: str
    author_email: str
    page_size: int
    comment_enabled: bool
    theme: str

    @classmethod
    def from_dict(cls, raw: Dict[str, Any]) -> "BlogSettings":
        return cls(
            blog_name=raw.get("blogName", ""),
            blog_description=raw.get("blogDescription", ""),
            blog_tagline=raw.get("blogTagline", ""),
            author_name=raw.get("authorName", ""),
            author_email=raw.get("authorEmail", ""),
            page_size=int(raw.get("pageSize") or 0),
            comment_enabled=bool(raw.get("commentEnabled", False)),
            theme=raw.get("theme", ""),
        )

    @classmethod
    def with_defaults(
        cls,
        raw: Optional[Dict[str, Any]] = None
    ) -> "BlogSettings":
        """Overlay server values on the built-in defaults."""
        merged = dict(DEFAULT_BLOG_SETTINGS)
        merged.update(raw or {})
        return cls.from_dict(merged)


@dataclass(frozen=True)
class Theme:
    id: int
    name: str
    slug: str
    description: str = ""
    version: str = ""
    author: str = ""
    preview_url: str = ""
    active: bool = False
    is_default: bool = False
    config: Dict[str, Any] = field(default_factory=dict)
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None

    @classmethod
    def from_dict(cls, raw: Dict[str, Any]) -> "Theme":
        return cls(
            id=raw.get("id"),
            name=raw.get("name", ""),
            slug=raw.get("slug", ""),
            description=raw.get("description") or "",
            version=raw.get("version") or "",
            author=raw.get("author") or "",
            preview_url=raw.get("previewUrl") or "",
            active=bool(raw.get("active", False)),
            is_default=bool(raw.get("isDefault", False)),
            config=dict(raw.get("config") or {}),
            created_at=_parse_ts(raw.get("createdAt")),
            updated_at=_parse_ts(raw.get("updatedAt")),
        )


@dataclass(frozen=True)
class PageResponse(Generic[T]):
    content: List[T]
    total_elements: int
    total_pages: int
    size: int
    number: int
    first: bool
    last: bool
    pageable: Any = None

    @classmethod
    def parser(
        cls,
        item_parser: Callable[[Dict[str, Any]], T]
    ) -> Callable[[Dict[str, Any]], "PageResponse[T]"]:
        """Return a function turning a raw page into a typed page."""
        def parse(raw: Dict[str, Any]) -> "PageResponse[T]":
            return cls(
                content=[item_parser(item) for item in raw.get("content") or []],
                total_elements=int(raw.get("totalElements") or 0),
                total_pages=int(raw.get("totalPages") or 0),
                size=int(raw.get("size") or 0),
                number=int(raw.get("number") or 0),
                first=bool(raw.get("first", True)),
                last=bool(raw.get("last", True)),
                pageable=raw.get("pageable"),
            )
        return parse


def list_of(
    item_parser: Callable[[Dict[str, Any]], T]
) -> Callable[[List[Dict[str, Any]]], List[T]]:
    def parse(raw: List[Dict[str, Any]]) -> List[T]:
        return [item_parser(item) for item in raw]
    return parse
