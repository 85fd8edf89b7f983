from concurrent.futures import ThreadPoolExecutor
from dataclasses import dataclass
import logging

from .toolbox import posts_to_dataframe, summarize_posts


log = logging.getLogger(__name__)


@dataclass(frozen=True)
class DashboardStats:
    total_posts: int = 0
    published_posts: int = 0
    draft_posts: int = 0
    total_categories: int = 0
    total_tags: int = 0
    total_views: int = 0


def fetch_dashboard_stats(
    client,
    *,
    max_workers: int = 3
) -> DashboardStats:
    """
    Collect the admin dashboard counters.

    Posts (first 100), categories and tags are requested concurrently.
    A section whose request fails keeps its counters at zero.

    Parameters
    ----------
    client : KonataBlogClient
        Client to query.
    max_workers : int
        Number of threads used for the three requests.
    """
    with ThreadPoolExecutor(max_workers=max_workers) as ex:
        posts_fut = ex.submit(client.posts.get_posts, page=0, size=100)
        categories_fut = ex.submit(client.categories.get_categories)
        tags_fut = ex.submit(client.tags.get_tags)

        posts_res = posts_fut.result()
        categories_res = categories_fut.result()
        tags_res = tags_fut.result()

    stats = {}

    if posts_res.success and posts_res.data:
        page = posts_res.data
        stats["total_posts"] = page.total_elements
        stats.update(summarize_posts(posts_to_dataframe(page.content)))
    else:
        log.warning("Dashboard: posts unavailable")

    if categories_res.success and categories_res.data is not None:
        stats["total_categories"] = len(categories_res.data)

    if tags_res.success and tags_res.data is not None:
        stats["total_tags"] = len(tags_res.data)

    return DashboardStats(**stats)
