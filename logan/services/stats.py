from datetime import date
from typing import Any, Dict, List, Optional

import pandas as pd

from logan.models import Workout


def workout_stats(workouts: List[Workout], today: Optional[date] = None) -> Dict[str, Any]:
    """대시보드 통계: 전체/완료/이번 달 운동 수와 완료율."""
    today = today or date.today()
    if not workouts:
        return {
            "totalWorkouts": 0,
            "completedWorkouts": 0,
            "completionRate": 0,
            "thisMonth": 0,
            "thisMonthCompleted": 0,
            "byStatus": {},
        }

    df = pd.DataFrame([{"date": w.date, "status": w.status} for w in workouts])
    df["date"] = pd.to_datetime(df["date"], errors="coerce")

    total = len(df)
    completed = int((df["status"] == "completed").sum())
    this_month = df[df["date"].dt.to_period("M") == pd.Period(today.isoformat(), freq="M")]

    return {
        "totalWorkouts": total,
        "completedWorkouts": completed,
        "completionRate": round(completed / total * 100),
        "thisMonth": len(this_month),
        "thisMonthCompleted": int((this_month["status"] == "completed").sum()),
        "byStatus": {k: int(v) for k, v in df["status"].value_counts().items()},
    }


def filter_workouts(workouts: List[Workout], month: Optional[str] = None,
                    day: Optional[str] = None) -> List[Workout]:
    """캘린더 뷰 필터. month 는 YYYY-MM, day 는 YYYY-MM-DD."""
    if day:
        workouts = [w for w in workouts if w.date == day]
    if month:
        workouts = [w for w in workouts if w.date.startswith(month)]
    return workouts
