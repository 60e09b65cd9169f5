from typing import Optional

from fastapi import APIRouter, Depends, HTTPException

from logan.dependencies import get_workout_repository
from logan.errors import InvalidTransition
from logan.models import Workout, WorkoutUpdate, advance_status
from logan.services.stats import filter_workouts, workout_stats

router = APIRouter()


def _get_or_404(repository, workout_id: str) -> Workout:
    workout = repository.get_workout(workout_id)
    if workout is None:
        raise HTTPException(status_code=404, detail="Workout not found")
    return workout


@router.get("/workouts")
def list_workouts(userId: Optional[str] = None, month: Optional[str] = None, date: Optional[str] = None,
                  repository=Depends(get_workout_repository)):
    """운동 목록 (캘린더 뷰용 month=YYYY-MM, date=YYYY-MM-DD 필터)."""
    return filter_workouts(repository.list_workouts(userId), month=month, day=date)


@router.get("/workouts/stats")
def get_workout_stats(userId: Optional[str] = None, repository=Depends(get_workout_repository)):
    return workout_stats(repository.list_workouts(userId))


@router.post("/workouts", status_code=201)
def create_workout(workout: Workout, userId: Optional[str] = None,
                   repository=Depends(get_workout_repository)):
    if not workout.name.strip() or not workout.date or not workout.exercises:
        raise HTTPException(status_code=400, detail="Missing required fields: name, date, exercises")
    if workout.id and repository.get_workout(workout.id) is not None:
        raise HTTPException(status_code=409, detail="Workout already exists")
    # 새 운동은 항상 proposed 에서 시작 (이후 상태는 PUT/세션으로만 전진)
    fresh = workout.model_copy(update={
        "status": "proposed",
        "completed": False,
        "started_at": None,
        "completed_at": None,
    })
    return repository.create_workout(fresh, user_id=userId)


@router.get("/workouts/{workout_id}")
def get_workout(workout_id: str, repository=Depends(get_workout_repository)):
    return _get_or_404(repository, workout_id)


@router.put("/workouts/{workout_id}")
def update_workout(workout_id: str, update: WorkoutUpdate, repository=Depends(get_workout_repository)):
    existing = _get_or_404(repository, workout_id)
    changes = {
        k: v for k, v in update.model_dump(exclude_unset=True, exclude={"status"}).items() if v is not None
    }
    if update.exercises is not None:
        changes["exercises"] = update.exercises
    workout = existing.model_copy(update=changes)

    if update.status is not None:
        try:
            workout = advance_status(workout, update.status)
        except InvalidTransition as e:
            raise HTTPException(status_code=409, detail=str(e))

    return repository.update_workout(workout)


@router.delete("/workouts/{workout_id}")
def delete_workout(workout_id: str, repository=Depends(get_workout_repository)):
    if not repository.delete_workout(workout_id):
        raise HTTPException(status_code=404, detail="Workout not found")
    return {"success": True}
