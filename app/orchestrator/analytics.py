import math
from datetime import date, timedelta
from typing import Any, Dict, Iterable, List, Optional

from ..schemas.analytics import DashboardAnalytics, DayCompletion, FocusTimeStats, TodayStats, WeeklyLoad, WeeklySummary
from ..schemas.goal import WEEKDAYS, Goal, Task, parse_goals, parse_snapshots, parse_tasks, to_day, weekday_of
from ..utils.durations import format_hours, minutes_to_hours

GoalsInput = Optional[Iterable[Any]]
TasksInput = Optional[Iterable[Any]]


def _percentage(part: int, total: int) -> int:
    if total <= 0:
        return 0
    return int(math.floor(part / total * 100 + 0.5))


def _all_tasks(goals: List[Goal]) -> List[Task]:
    return [task for goal in goals for task in goal.tasks]


def compute_weekly_completion_rate(goals: GoalsInput) -> int:
    tasks = _all_tasks(parse_goals(goals))
    completed = len([task for task in tasks if task.completed])
    return _percentage(completed, len(tasks))


def calculate_productivity_score(goals: GoalsInput) -> int:
    # Separate dashboard metric, same formula as the weekly completion rate.
    return compute_weekly_completion_rate(goals)


def compute_daily_streak(snapshots: Optional[Iterable[Any]], today: Any) -> int:
    """Count consecutive days, ending today, with at least one completed task.

    Snapshots are indexed by calendar day, so their order does not matter and
    a missing day breaks the streak.
    """
    parsed = parse_snapshots(snapshots)
    if not parsed:
        return 0
    completed_by_day: Dict[date, int] = {}
    for snapshot in parsed:
        completed_by_day[snapshot.date] = completed_by_day.get(snapshot.date, 0) + snapshot.tasksCompleted
    cursor = to_day(today)
    streak = 0
    while completed_by_day.get(cursor, 0) > 0:
        streak += 1
        cursor -= timedelta(days=1)
    return streak


def compute_focus_time_stats_for_tasks(tasks: TasksInput) -> FocusTimeStats:
    planned = 0
    completed = 0
    for task in parse_tasks(tasks):
        planned += task.estTime
        if task.completed:
            completed += task.timeSpent or 0
    return FocusTimeStats(plannedMinutes=planned, completedMinutes=completed)


def compute_focus_time_stats(goals: GoalsInput) -> FocusTimeStats:
    return compute_focus_time_stats_for_tasks(_all_tasks(parse_goals(goals)))


def compute_today_stats(tasks: TasksInput) -> TodayStats:
    parsed = parse_tasks(tasks)
    completed = [task for task in parsed if task.completed]
    minutes = sum(task.timeSpent or 0 for task in completed)
    return TodayStats(
        tasksCompleted=len(completed),
        tasksPlanned=len(parsed),
        totalFocusTime=minutes_to_hours(minutes),
    )


def calculate_daily_completion_stats(goals: GoalsInput, include_repeating: bool = False) -> Dict[str, DayCompletion]:
    """Per-weekday completion flags for the weekly streak strip.

    Only tasks pinned to a day count unless ``include_repeating`` is set, in
    which case repeating tasks count toward every weekday.
    """
    day_tasks: Dict[str, List[Task]] = {day: [] for day in WEEKDAYS}
    for task in _all_tasks(parse_goals(goals)):
        if task.is_repeating:
            if include_repeating:
                for day in task.scheduled_days():
                    day_tasks[day].append(task)
        elif task.day:
            day_tasks[task.day].append(task)
    stats: Dict[str, DayCompletion] = {}
    for day, tasks in day_tasks.items():
        planned = len(tasks) > 0
        stats[day] = DayCompletion(
            hasPlannedTasks=planned,
            allCompleted=planned and all(task.completed for task in tasks),
        )
    return stats


def _day_flags(value: Any) -> DayCompletion:
    if isinstance(value, DayCompletion):
        return value
    if isinstance(value, dict):
        return DayCompletion(
            hasPlannedTasks=bool(value.get("hasPlannedTasks")),
            allCompleted=bool(value.get("allCompleted")),
        )
    return DayCompletion()


def calculate_current_streak(day_stats: Optional[Dict[str, Any]], today_weekday: str) -> int:
    if not day_stats or today_weekday not in WEEKDAYS:
        return 0
    streak = 0
    for day in reversed(WEEKDAYS[: WEEKDAYS.index(today_weekday) + 1]):
        flags = _day_flags(day_stats.get(day))
        if not flags.hasPlannedTasks:
            continue
        if not flags.allCompleted:
            break
        streak += 1
    return streak


def compute_weekly_load(goals: GoalsInput) -> WeeklyLoad:
    day_minutes: Dict[str, int] = {day: 0 for day in WEEKDAYS}
    day_counts: Dict[str, int] = {day: 0 for day in WEEKDAYS}
    for task in _all_tasks(parse_goals(goals)):
        if not task.name:
            continue
        for day in task.scheduled_days():
            day_minutes[day] += task.estTime
            day_counts[day] += 1

    total_minutes = sum(day_minutes.values())
    active_days = len([day for day in WEEKDAYS if day_counts[day] > 0])
    max_day: Optional[str] = None
    max_minutes = 0
    for day in WEEKDAYS:
        if day_minutes[day] > max_minutes:
            max_minutes = day_minutes[day]
            max_day = day
    divisor = max(max_minutes, 1)
    return WeeklyLoad(
        dayMinutes=day_minutes,
        dayTaskCounts=day_counts,
        dayPercentages={day: day_minutes[day] / divisor * 100 for day in WEEKDAYS},
        totalMinutes=total_minutes,
        totalTasks=sum(day_counts.values()),
        activeDays=active_days,
        avgDailyMinutes=total_minutes / active_days if active_days else 0,
        maxLoadDay=max_day,
    )


def previous_week_start(today: Any) -> date:
    current = to_day(today)
    monday = current - timedelta(days=current.weekday())
    return monday - timedelta(days=7)


def summarize_week(goals: GoalsInput, week_of: Any = None) -> WeeklySummary:
    parsed = parse_goals(goals)
    summary = WeeklySummary(
        weekOf=to_day(week_of).isoformat() if week_of else None,
        goalsPlanned=len(parsed),
    )
    minutes = 0
    for goal in parsed:
        completed = len([task for task in goal.tasks if task.completed])
        if goal.tasks and completed == len(goal.tasks):
            summary.goalsAchieved += 1
        summary.tasksPlanned += len(goal.tasks)
        summary.tasksCompleted += completed
        minutes += sum(task.timeSpent or 0 for task in goal.tasks)
    summary.focusTimeSpent = minutes_to_hours(minutes)
    return summary


def build_dashboard(
    weekly_goals: GoalsInput,
    todays_tasks: TasksInput,
    snapshots: Optional[Iterable[Any]],
    today: Any,
    include_repeating: bool = False,
) -> DashboardAnalytics:
    goals = parse_goals(weekly_goals)
    day = to_day(today)
    focus = compute_focus_time_stats_for_tasks(todays_tasks)
    day_stats = calculate_daily_completion_stats(goals, include_repeating=include_repeating)
    return DashboardAnalytics(
        weeklyCompletion=compute_weekly_completion_rate(goals),
        streak=compute_daily_streak(snapshots, day),
        focus=focus,
        focusTimeLabel=format_hours(focus.completedMinutes),
        productivityScore=calculate_productivity_score(goals),
        weeklyStreak=calculate_current_streak(day_stats, weekday_of(day)) if goals else 0,
        dayStats=day_stats,
    )
