from typing import Dict, Optional

from pydantic import BaseModel, Field


class FocusTimeStats(BaseModel):
    plannedMinutes: int = 0
    completedMinutes: int = 0


class TodayStats(BaseModel):
    tasksCompleted: int = 0
    tasksPlanned: int = 0
    totalFocusTime: float = 0


class DayCompletion(BaseModel):
    hasPlannedTasks: bool = False
    allCompleted: bool = False


class WeeklyLoad(BaseModel):
    dayMinutes: Dict[str, int]
    dayTaskCounts: Dict[str, int]
    dayPercentages: Dict[str, float]
    totalMinutes: int = 0
    totalTasks: int = 0
    activeDays: int = 0
    avgDailyMinutes: float = 0
    maxLoadDay: Optional[str] = None


class WeeklySummary(BaseModel):
    weekOf: Optional[str] = None
    goalsPlanned: int = 0
    goalsAchieved: int = 0
    tasksPlanned: int = 0
    tasksCompleted: int = 0
    focusTimeSpent: float = 0


class DashboardAnalytics(BaseModel):
    weeklyCompletion: int = 0
    streak: int = 0
    focus: FocusTimeStats = Field(default_factory=FocusTimeStats)
    focusTimeLabel: str = "0h"
    productivityScore: int = 0
    weeklyStreak: int = 0
    dayStats: Dict[str, DayCompletion] = Field(default_factory=dict)
