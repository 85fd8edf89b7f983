from konata_blog_client.endpoints import (
    AuthAPI,
    CategoriesAPI,
    MediaAPI,
    PostsAPI,
    SettingsAPI,
    TagsAPI,
    ThemesAPI,
)
from konata_blog_client.endpoints.base import with_query
from konata_blog_client.models import ApiResponse, BlogSettings, Post, User
from unittest.mock import MagicMock
from conftest import path_of
import requests
import pytest


@pytest.fixture
def mock_api():
    """
    Provide a mocked pipeline whose calls all succeed with no data.
    """
    api = MagicMock()
    ok = ApiResponse(success=True, data=None)
    for name in ("get", "post", "put", "patch", "delete", "upload_file"):
        getattr(api, name).return_value = ok
    return api


def called_path(method):
    return method.call_args.args[0]


@pytest.mark.parametrize("kwargs, expected", [
    ({}, "/posts"),
    ({"page": 0, "size": 10}, "/posts?page=0&size=10"),
    ({"sort": "publishedAt,desc"}, "/posts?sort=publishedAt%2Cdesc"),
    (
        {"page": 1, "sort": ["createdAt", "desc"]},
        "/posts?page=1&sort=createdAt%2Cdesc",
    ),
    ({"sort": ""}, "/posts"),
])
def test_get_posts_query(mock_api, kwargs, expected):
    PostsAPI(api_client=mock_api).get_posts(**kwargs)
    assert called_path(mock_api.get) == expected


def test_get_admin_posts_path(mock_api):
    PostsAPI(api_client=mock_api).get_admin_posts(size=100)
    assert called_path(mock_api.get) == "/posts/admin/all?size=100"


def test_search_posts_always_has_query_marker(mock_api):
    PostsAPI(api_client=mock_api).search_posts()
    assert called_path(mock_api.get) == "/posts/search?"


def test_search_posts_gating(mock_api):
    """
    Filters are sent only when truthy; paging whenever not None.
    """
    PostsAPI(api_client=mock_api).search_admin_posts(
        q="hello world", category=0, tag=3, page=0, size=None
    )
    assert called_path(mock_api.get) == (
        "/posts/admin/search?q=hello+world&tag=3&page=0"
    )


def test_post_lookup_paths(mock_api):
    api = PostsAPI(api_client=mock_api)

    api.get_post_by_id(7)
    assert called_path(mock_api.get) == "/posts/7"
    api.get_admin_post_by_id(7)
    assert called_path(mock_api.get) == "/posts/admin/7"
    api.get_post_by_slug("hi")
    assert called_path(mock_api.get) == "/posts/slug/hi"
    api.get_admin_post_by_slug("hi")
    assert called_path(mock_api.get) == "/posts/admin/slug/hi"


def test_create_post_body_uses_wire_names(mock_api):
    PostsAPI(api_client=mock_api).create_post(
        title="T",
        content="C",
        status="DRAFT",
        is_featured=False,
        category_id=2,
        tag_ids=[1, 3],
    )

    args = mock_api.post.call_args.args
    assert args[0] == "/posts"
    assert args[1] == {
        "title": "T",
        "content": "C",
        "status": "DRAFT",
        "isFeatured": False,
        "categoryId": 2,
        "tagIds": [1, 3],
    }


def test_update_and_status_changes(mock_api):
    api = PostsAPI(api_client=mock_api)

    api.update_post(4, title="New")
    assert mock_api.put.call_args.args == ("/posts/4", {"title": "New"})

    api.publish_post(4)
    assert called_path(mock_api.post) == "/posts/4/publish"
    api.unpublish_post(4)
    assert called_path(mock_api.post) == "/posts/4/unpublish"
    api.delete_post(4)
    assert called_path(mock_api.delete) == "/posts/4"


def test_typed_post_parsing(api_client, session, response_factory):
    session.request.return_value = response_factory(200, {
        "success": True,
        "data": {
            "id": 1,
            "title": "Hello",
            "slug": "hello",
            "excerpt": "",
            "content": "# Hello",
            "status": "PUBLISHED",
            "viewCount": 12,
            "createdAt": "2024-05-01T10:00:00Z",
            "author": {"id": 1, "username": "admin", "displayName": "Admin"},
            "tags": [{"id": 2, "name": "python", "slug": "python"}],
        },
    })

    res = PostsAPI(api_client=api_client).get_post_by_slug("hello")

    post = res.data
    assert isinstance(post, Post)
    assert post.is_published
    assert post.view_count == 12
    assert post.created_at.year == 2024
    assert post.author.display_name == "Admin"
    assert post.tags[0].name == "python"


def test_failed_response_is_not_parsed(api_client, session, response_factory):
    session.request.return_value = response_factory(404, {
        "success": False,
        "error": {"code": "NOT_FOUND", "message": "Post not found"},
    })

    res = PostsAPI(api_client=api_client).get_post_by_id(1)

    assert res.success is False
    assert res.data is None
    assert res.error.code == "NOT_FOUND"


def _page(items, total_pages):
    return ApiResponse(success=True, data={
        "content": items,
        "totalPages": total_pages,
        "totalElements": len(items) * total_pages,
    })


def test_get_all_posts_merges_pages_in_order(mock_api):
    def fake_get(path, **kwargs):
        page = int(path.split("page=")[1].split("&")[0])
        return _page([{"id": page * 10, "title": f"p{page}"}], 3)

    mock_api.get.side_effect = fake_get

    res = PostsAPI(api_client=mock_api).get_all_posts(admin=True, page_size=1)

    assert res.success is True
    assert [p.id for p in res.data] == [0, 10, 20]
    requested = sorted(c.args[0] for c in mock_api.get.call_args_list)
    assert requested[0].startswith("/posts/admin/all?page=0&size=1")
    assert all("sort=createdAt%2Cdesc" in p for p in requested)


def test_get_all_posts_returns_failed_page(mock_api):
    failure = ApiResponse.failure("500", "boom")

    def fake_get(path, **kwargs):
        if "page=0" in path:
            return _page([{"id": 1}], 2)
        return failure

    mock_api.get.side_effect = fake_get

    res = PostsAPI(api_client=mock_api).get_all_posts()

    assert res is failure


@pytest.mark.parametrize("kwargs, expected", [
    ({}, "/categories"),
    ({"include_counts": False}, "/categories?includeCounts=false"),
    ({"include_counts": True, "parent_id": 5}, "/categories?includeCounts=true&parentId=5"),
    ({"parent_id": 0}, "/categories"),
])
def test_get_categories_query(mock_api, kwargs, expected):
    CategoriesAPI(api_client=mock_api).get_categories(**kwargs)
    assert called_path(mock_api.get) == expected


def test_category_paths(mock_api):
    api = CategoriesAPI(api_client=mock_api)

    api.get_category_tree()
    assert called_path(mock_api.get) == "/categories/tree?includeEmpty=false"
    api.get_category_posts(3, page=0, size=5, status="PUBLISHED")
    assert called_path(mock_api.get) == (
        "/categories/3/posts?page=0&size=5&status=PUBLISHED"
    )
    api.get_category_stats()
    assert called_path(mock_api.get) == "/categories/stats"

    api.reorder_categories([{"id": 1, "order": 0}])
    assert mock_api.patch.call_args.args == (
        "/categories/reorder", {"orders": [{"id": 1, "order": 0}]}
    )

    api.create_category(name="Notes", sort_order=1, is_active=True)
    assert mock_api.post.call_args.args[1] == {
        "name": "Notes", "sortOrder": 1, "isActive": True
    }


def test_tag_paths(mock_api):
    api = TagsAPI(api_client=mock_api)

    api.get_popular_tags()
    assert called_path(mock_api.get) == "/tags/popular?limit=10"
    api.search_tags("")
    assert called_path(mock_api.get) == (
        "/tags/search?page=0&size=20&ignoreCase=true"
    )
    api.search_tags("py", page=1, size=50, ignore_case=False)
    assert called_path(mock_api.get) == (
        "/tags/search?q=py&page=1&size=50&ignoreCase=false"
    )
    api.get_tag_suggestions("c++ & go")
    assert called_path(mock_api.get) == (
        "/tags/suggestions?q=c%2B%2B%20%26%20go&limit=8"
    )
    api.get_tag_posts(2, sort="createdAt,desc")
    assert called_path(mock_api.get) == "/tags/2/posts?sort=createdAt%2Cdesc"

    api.delete_tag(5)
    assert called_path(mock_api.delete) == "/tags/5?force=false"
    api.delete_tag(5, force=True)
    assert called_path(mock_api.delete) == "/tags/5?force=true"

    api.bulk_create_tags(["a", "b"])
    assert mock_api.post.call_args.args == ("/tags/bulk", {"names": ["a", "b"]})
    api.smart_create_tag(name="rust")
    assert mock_api.post.call_args.args == ("/tags/smart-create", {"name": "rust"})
    api.set_post_tags(9, [1, 2])
    assert mock_api.put.call_args.args == ("/posts/9/tags", {"tagIds": [1, 2]})


def test_media_query_and_upload(mock_api):
    api = MediaAPI(api_client=mock_api)

    api.get_media(type="IMAGE", uploaded_by=2)
    assert called_path(mock_api.get) == "/media?type=IMAGE&uploadedBy=2"

    api.upload_media(("a.png", b"0"), description="cat", alt_text="")
    args = mock_api.upload_file.call_args.args
    assert args[0] == "/media/upload"
    assert args[2] == {"description": "cat"}

    api.delete_media(3)
    assert called_path(mock_api.delete) == "/media/3"


def test_settings_and_themes(mock_api):
    settings = SettingsAPI(api_client=mock_api)
    themes = ThemesAPI(api_client=mock_api)

    settings.get_public_settings()
    assert called_path(mock_api.get) == "/settings/public"
    settings.update_settings({"blogName": "K"})
    assert mock_api.put.call_args.args == ("/settings", {"blogName": "K"})
    settings.upload_avatar(("me.png", b"0"))
    assert mock_api.upload_file.call_args.args[0] == "/settings/avatar"
    assert mock_api.upload_file.call_args.kwargs["field_name"] == "avatar"

    themes.activate_theme(2)
    assert called_path(mock_api.post) == "/themes/2/activate"
    themes.update_theme_config(2, {"accent": "pink"})
    assert mock_api.put.call_args.args == (
        "/themes/2/config", {"config": {"accent": "pink"}}
    )


def test_public_settings_fill_defaults():
    settings = BlogSettings.with_defaults({"blogName": "Lucky Star"})

    assert settings.blog_name == "Lucky Star"
    assert settings.page_size == 10
    assert settings.theme == "default"


def test_login_stores_token(api_client, session, token_store, response_factory):
    session.request.return_value = response_factory(200, {
        "success": True,
        "data": {"token": " jwt-123 ", "user": {"id": 1, "role": "ADMIN"}},
    })

    res = AuthAPI(api_client=api_client).login("admin", "secret")

    assert res.data.user.id == 1
    assert token_store.get_token() == "jwt-123"


def test_failed_login_does_not_store(api_client, session, token_store, response_factory):
    session.request.return_value = response_factory(401, {
        "success": False,
        "error": {"code": "BAD_CREDENTIALS", "message": "Wrong password"},
    })

    res = AuthAPI(api_client=api_client).login("admin", "nope")

    assert res.success is False
    assert res.error.message == "Wrong password"
    assert token_store.get_token() is None


def test_logout_clears_token_even_if_backend_fails(
    api_client, session, token_store
):
    token_store.set_token("abc")
    session.request.side_effect = requests.exceptions.ConnectionError("down")

    with pytest.raises(requests.exceptions.ConnectionError):
        AuthAPI(api_client=api_client).logout()

    assert token_store.get_token() is None


def test_update_profile_falls_back_to_users_me(
    api_client, session, token_store, response_factory
):
    token_store.set_token("old")
    session.request.side_effect = [
        response_factory(404, {"success": False}, reason="Not Found"),
        response_factory(200, {
            "success": True,
            "data": {"token": "renamed", "user": {"id": 1, "username": "kona"}},
        }),
    ]

    res = AuthAPI(api_client=api_client).update_profile(username="kona")

    assert [path_of(c) for c in session.request.call_args_list] == [
        "/auth/profile", "/users/me"
    ]
    assert res.data.username == "kona"
    assert token_store.get_token() == "renamed"


def test_update_profile_401_keeps_token(
    api_client, session, token_store, response_factory
):
    """
    A 401 from the profile endpoints never clears the stored token.
    """
    token_store.set_token("abc")
    session.request.return_value = response_factory(401, {"success": False})

    res = AuthAPI(api_client=api_client).update_profile(nickname="k")

    assert res.success is False
    assert res.error.code == "401"
    assert [path_of(c) for c in session.request.call_args_list] == [
        "/auth/profile", "/auth/refresh", "/users/me", "/auth/refresh"
    ]
    assert token_store.get_token() == "abc"


def test_update_profile_with_non_object_data(
    api_client, session, token_store, response_factory
):
    """
    A success reply whose data is not an object is passed through and
    leaves the stored token alone.
    """
    token_store.set_token("abc")
    session.request.return_value = response_factory(
        200, {"success": True, "data": True}
    )

    res = AuthAPI(api_client=api_client).update_profile(nickname="k")

    assert res.success is True
    assert res.data is True
    assert token_store.get_token() == "abc"


def test_update_profile_without_token_keeps_stored_one(
    api_client, session, token_store, response_factory
):
    token_store.set_token("abc")
    session.request.return_value = response_factory(200, {
        "success": True,
        "data": {"id": 1, "username": "kona", "nickname": "k"},
    })

    res = AuthAPI(api_client=api_client).update_profile(nickname="k")

    assert isinstance(res.data, User)
    assert res.data.nickname == "k"
    assert token_store.get_token() == "abc"


def test_login_reply_without_token_stores_nothing(
    api_client, session, token_store, response_factory
):
    session.request.return_value = response_factory(200, {
        "success": True,
        "data": {"user": {"id": 1}},
    })

    res = AuthAPI(api_client=api_client).login("admin", "secret")

    assert res.success is True
    assert res.data.token == ""
    assert token_store.get_token() is None


def test_login_reply_with_non_object_data(
    api_client, session, token_store, response_factory
):
    session.request.return_value = response_factory(
        200, {"success": True, "data": "jwt-123"}
    )

    res = AuthAPI(api_client=api_client).login("admin", "secret")

    assert res.success is False
    assert res.error.code == "INVALID_RESPONSE"
    assert token_store.get_token() is None


def test_map_data_rejects_unexpected_shape():
    res = ApiResponse(success=True, data=[{"id": 1}], message="ok")

    mapped = res.map_data(Post.from_dict)

    assert mapped.success is False
    assert mapped.data is None
    assert mapped.error.code == "INVALID_RESPONSE"


@pytest.mark.parametrize("value, expected", [
    ("a b", "/x?q=a+b"),
    ("a~b", "/x?q=a%7Eb"),
    ("a*b", "/x?q=a*b"),
    ("a-b_c.d", "/x?q=a-b_c.d"),
    ("a&b=c", "/x?q=a%26b%3Dc"),
    ("café", "/x?q=caf%C3%A9"),
])
def test_query_values_form_encoded(value, expected):
    assert with_query("/x", [("q", value)]) == expected
