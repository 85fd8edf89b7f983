from .base_client import BaseAPIClient, RequestMeta, build_auth_header
from .cancellation import CancellationToken
from .client import KonataBlogClient
from .config import ClientSettings
from .dashboard import DashboardStats, fetch_dashboard_stats
from .exceptions import (
    AuthenticationError,
    ConfigurationError,
    KonataClientError,
    RequestCancelledError,
    UploadError,
)
from .fallback import OfflineFallback
from .models import ApiError, ApiResponse
from .token_store import FileTokenStore, MemoryTokenStore, TokenStore

__all__ = [
    "ApiError",
    "ApiResponse",
    "AuthenticationError",
    "BaseAPIClient",
    "CancellationToken",
    "ClientSettings",
    "ConfigurationError",
    "DashboardStats",
    "FileTokenStore",
    "KonataBlogClient",
    "KonataClientError",
    "MemoryTokenStore",
    "OfflineFallback",
    "RequestCancelledError",
    "RequestMeta",
    "TokenStore",
    "UploadError",
    "build_auth_header",
    "fetch_dashboard_stats",
]
