from unittest.mock import MagicMock, patch
from konata_blog_client.base_client import BaseAPIClient
from konata_blog_client.client import KonataBlogClient
from konata_blog_client.config import ClientSettings
from konata_blog_client.fallback import OfflineFallback
from konata_blog_client.token_store import FileTokenStore, MemoryTokenStore
import pytest


@patch("konata_blog_client.client.PostsAPI")
def test_client_initializes_posts(mock_posts):
    """
    Ensure KonataBlogClient instantiates PostsAPI with the shared
    pipeline.
    """
    api_client = MagicMock()
    client = KonataBlogClient(api_client=api_client)

    assert client.api_client is api_client
    mock_posts.assert_called_once_with(api_client=api_client)
    assert client.posts == mock_posts.return_value


def test_sub_clients_share_one_pipeline():
    api_client = BaseAPIClient(
        base_url="http://x", token_store=MemoryTokenStore()
    )
    client = KonataBlogClient(api_client=api_client)

    groups = [
        client.auth, client.posts, client.categories, client.tags,
        client.media, client.settings, client.themes,
    ]
    assert all(g.api_client is api_client for g in groups)


def test_from_settings_builds_file_store_and_fallback(tmp_path):
    settings = ClientSettings(
        base_url="http://blog.test/api/",
        token_file=str(tmp_path / "t.json"),
        timeout_seconds=5,
        auth_variant="raw",
    )

    client = KonataBlogClient.from_settings(settings)
    api = client.api_client

    assert api.base_url == "http://blog.test/api"
    assert isinstance(api.token_store, FileTokenStore)
    assert api.token_store.token_file == str(tmp_path / "t.json")
    assert isinstance(api.fallback, OfflineFallback)
    assert api.timeout == 5
    assert api.auth_variant == "raw"


def test_from_settings_without_offline_mode():
    settings = ClientSettings(offline_fallback=False)
    store = MemoryTokenStore()

    client = KonataBlogClient.from_settings(settings, token_store=store)

    assert client.api_client.fallback is None
    assert client.api_client.token_store is store


@patch.object(ClientSettings, "from_env")
def test_from_settings_reads_environment_by_default(mock_from_env):
    mock_from_env.return_value = ClientSettings()

    KonataBlogClient.from_settings(token_store=MemoryTokenStore())

    mock_from_env.assert_called_once()
