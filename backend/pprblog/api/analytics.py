"""Analytics, activity feed and admin endpoints."""
from datetime import timedelta

from fastapi import APIRouter, Depends

from pprblog.api.deps import get_queries, require_admin
from pprblog.database import utcnow
from pprblog.schemas.analytics import ActivityItem, AdminStats, AnalyticsSummary, Greeting
from pprblog.schemas.user import UserOut
from pprblog.services.queries import BlogQueries

router = APIRouter(tags=["analytics"])


def demo_activity_feed() -> list[ActivityItem]:
    """Fixed sample feed for the dashboard. Not backed by real events."""
    now = utcnow()
    return [
        ActivityItem(id=1, type="post", message="New post created", timestamp=now),
        ActivityItem(id=2, type="user", message="User joined the platform", timestamp=now - timedelta(minutes=30)),
        ActivityItem(id=3, type="like", message="Post liked", timestamp=now - timedelta(hours=1)),
    ]


@router.get("/hello", response_model=Greeting)
def hello(name: str):
    return Greeting(greeting=f"Hello {name}!")


@router.get("/analytics", response_model=AnalyticsSummary)
def get_analytics(queries: BlogQueries = Depends(get_queries)):
    """Site-wide totals."""
    return queries.analytics()


@router.get("/activity/recent", response_model=list[ActivityItem])
def recent_activity():
    return demo_activity_feed()


@router.get("/admin/stats", response_model=AdminStats)
def admin_stats(
    queries: BlogQueries = Depends(get_queries),
    admin: UserOut = Depends(require_admin),
):
    """Admin dashboard summary."""
    summary = queries.analytics()
    return AdminStats(
        total_users=summary.total_users,
        total_posts=summary.total_posts,
        system_health="excellent",
        generated_at=utcnow(),
    )
