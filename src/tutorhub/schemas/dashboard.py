from typing import Dict, List

from pydantic import BaseModel


class GrowthStat(BaseModel):
    count: int
    growth: int


class DashboardStatistics(BaseModel):
    total_users: GrowthStat
    total_courses: GrowthStat
    total_enrollments: GrowthStat
    system_admins: GrowthStat


class RecentActivity(BaseModel):
    type: str
    message: str
    timestamp: str
    color: str


class DashboardStats(BaseModel):
    statistics: DashboardStatistics
    users_by_role: Dict[str, int]
    recent_activity: List[RecentActivity]
