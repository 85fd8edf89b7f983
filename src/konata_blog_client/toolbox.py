from typing import Dict, Iterable, List
import pandas as pd

from .models import Post


POST_COLUMNS = [
    "id", "title", "slug", "status", "is_featured", "view_count",
    "created_at", "published_at", "category", "tags",
]


def posts_to_dataframe(
    posts: Iterable[Post]
) -> pd.DataFrame:
    """
    Convert posts into a flat pandas DataFrame.

    Parameters
    ----------
    posts : iterable of Post
        Typed posts, e.g. the `content` of a `PageResponse`.

    Returns
    -------
    pandas.DataFrame
        One row per post with the columns
        ['id', 'title', 'slug', 'status', 'is_featured', 'view_count',
         'created_at', 'published_at', 'category', 'tags'].
        `category` is the category name (or None), `tags` a
        comma-separated list of tag names. Timestamps are pandas
        datetimes; `view_count` is an integer column.
    """
    rows: List[Dict] = [
        {
            "id": p.id,
            "title": p.title,
            "slug": p.slug,
            "status": p.status,
            "is_featured": p.is_featured,
            "view_count": p.view_count,
            "created_at": p.created_at,
            "published_at": p.published_at,
            "category": p.category.name if p.category else None,
            "tags": ",".join(t.name for t in p.tags),
        }
        for p in posts
    ]

    df = pd.DataFrame(rows, columns=POST_COLUMNS)

    df["view_count"] = df["view_count"].fillna(0).astype("int64")
    df["is_featured"] = df["is_featured"].fillna(False).astype(bool)
    df["created_at"] = pd.to_datetime(df["created_at"], utc=True)
    df["published_at"] = pd.to_datetime(df["published_at"], utc=True)

    return df


def summarize_posts(
    df: pd.DataFrame
) -> Dict[str, int]:
    """Count published and draft posts and total their views."""
    status_counts = df["status"].value_counts()
    return {
        "published_posts": int(status_counts.get("PUBLISHED", 0)),
        "draft_posts": int(status_counts.get("DRAFT", 0)),
        "total_views": int(df["view_count"].sum()),
    }
