from unittest.mock import MagicMock
from requests.structures import CaseInsensitiveDict
import pytest

from konata_blog_client.base_client import BaseAPIClient
from konata_blog_client.token_store import MemoryTokenStore


BASE_URL = "http://blog.test/api"


def _make_response(
    status_code=200,
    json_body=None,
    *,
    content_type="application/json",
    reason="OK",
    json_error=False,
):
    resp = MagicMock()
    resp.status_code = status_code
    resp.ok = status_code < 400
    resp.reason = reason
    resp.headers = CaseInsensitiveDict(
        {"Content-Type": content_type} if content_type else {}
    )
    if json_error:
        resp.json.side_effect = ValueError("Expecting value")
    else:
        resp.json.return_value = json_body
    return resp


@pytest.fixture
def response_factory():
    """
    Build MagicMock responses shaped like `requests.Response`.
    """
    return _make_response


@pytest.fixture
def token_store():
    return MemoryTokenStore()


@pytest.fixture
def session():
    return MagicMock()


@pytest.fixture
def api_client(token_store, session):
    """
    Provide a pipeline over a mocked session with no offline fallback.
    """
    return BaseAPIClient(
        base_url=BASE_URL,
        token_store=token_store,
        session=session,
    )


def path_of(call):
    """Return the endpoint path of a recorded `session.request` call."""
    url = call.args[1]
    return url[len(BASE_URL):]
