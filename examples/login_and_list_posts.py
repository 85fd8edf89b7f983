from konata_blog_client.client import KonataBlogClient
from konata_blog_client.config import ClientSettings
from konata_blog_client.toolbox import posts_to_dataframe

if __name__ == "__main__":
    # Settings come from KONATA_* environment variables.
    settings = ClientSettings.from_env()

    # Facade Pattern, KonataBlogClient is an entry point.
    client = KonataBlogClient.from_settings(settings)

    # With the backend down and offline fallback enabled, admin/admin
    # logs in with the demo account.
    login = client.auth.login("admin", "admin")
    if not login.success:
        raise SystemExit(login.error.message if login.error else "Login failed")

    print(f"Logged in as {login.data.user.display_name}")

    # First page of published posts
    page = client.posts.get_posts(page=0, size=10)
    if page.success:
        for post in page.data.content:
            print(post.published_at, post.title)

    # Every post, admin view, fetched page by page in parallel
    posts = client.posts.get_all_posts(admin=True, page_size=50)
    if posts.success:
        df = posts_to_dataframe(posts.data)
        print(df[["id", "title", "status", "view_count"]])

    client.auth.logout()
