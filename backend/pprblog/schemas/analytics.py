"""Analytics and admin schemas."""
from datetime import datetime
from typing import Literal

from pydantic import BaseModel


class AnalyticsSummary(BaseModel):
    total_users: int = 0
    total_posts: int = 0
    total_comments: int = 0
    total_views: int = 0
    total_likes: int = 0


class ActivityItem(BaseModel):
    id: int
    type: Literal["post", "user", "like"]
    message: str
    timestamp: datetime


class AdminStats(BaseModel):
    total_users: int
    total_posts: int
    system_health: Literal["excellent", "degraded"]
    generated_at: datetime


class Greeting(BaseModel):
    greeting: str
