from konata_blog_client.client import KonataBlogClient
from konata_blog_client.dashboard import fetch_dashboard_stats

if __name__ == "__main__":
    client = KonataBlogClient.from_settings()

    # Follow token changes (login, refresh, logout).
    client.api_client.token_store.subscribe(
        lambda token: print("Token changed:", "set" if token else "cleared")
    )

    client.auth.login("admin", "admin")

    stats = fetch_dashboard_stats(client)
    print(stats)
