from typing import Any, Dict, List, Optional

from fastapi import APIRouter, Depends, HTTPException
from pydantic import BaseModel, ConfigDict, Field

from logan.dependencies import get_chat_repository, get_llm, get_workout_repository
from logan.errors import MISSING_KEY_MESSAGE, ConfigError, UpstreamError
from logan.graph.builder import create_generation_graph
from logan.graph.nodes import GenerationNodes
from logan.models import ChatMessage

router = APIRouter()


class SimpleWorkoutRequest(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    fitness_level: str = Field("", alias="fitnessLevel")
    goals: str = ""
    time_available: str = Field("", alias="timeAvailable")
    equipment: str = ""
    conversation: Optional[List[ChatMessage]] = None
    user_id: Optional[str] = Field(None, alias="userId")


class CustomWorkoutRequest(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    fitness_level: str = Field("intermediate", alias="fitnessLevel")
    workout_type: str = Field("strength", alias="workoutType")
    focus_area: str = Field("full body", alias="focusArea")
    duration: int = Field(30, ge=1)
    equipment: List[str] = []
    conversation: Optional[List[ChatMessage]] = None
    user_id: Optional[str] = Field(None, alias="userId")


class WorkoutPlanRequest(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    fitness_level: str = Field("", alias="fitnessLevel")
    goals: str = ""
    time_available: str = Field("", alias="timeAvailable")
    equipment: str = ""
    focus_areas: str = Field("", alias="focusAreas")
    workout_frequency: str = Field("", alias="workoutFrequency")
    conversation: Optional[List[ChatMessage]] = None


async def run_generation(kind: str, params: Dict[str, Any], llm, fallback_message: str):
    """생성 그래프를 실행하고 실패를 HTTPException 으로 바꿉니다."""
    graph = create_generation_graph(GenerationNodes(llm))
    try:
        result = await graph.ainvoke({"kind": kind, "params": params})
    except ConfigError:
        raise HTTPException(status_code=500, detail=MISSING_KEY_MESSAGE)
    except UpstreamError as e:
        print(f"[GenerateRouter] 오류: {e}")
        raise HTTPException(status_code=500, detail=e.user_message(fallback_message))

    if result.get("parse_error") is not None:
        raise HTTPException(status_code=500, detail=result["parse_error"].message)
    return result["result"]


def save_generated(workout, user_id: Optional[str], repository, chats):
    """
    사용자가 지정된 경우 제안 상태로 저장하고 활성 대화에 연결합니다.
    저장이나 연결 실패는 생성 결과를 막지 않습니다.
    """
    if not user_id:
        return workout
    try:
        saved = repository.create_workout(workout, user_id=user_id)
    except Exception as e:
        print(f"⚠️ [GenerateRouter] 생성된 운동 저장 실패: {e}")
        return workout
    try:
        chats.record_generated_workout(user_id, saved)
    except Exception as e:
        print(f"⚠️ [GenerateRouter] 대화-운동 연결 실패: {e}")
    return saved


@router.post("/generate-simple-workout")
async def generate_simple_workout(request: SimpleWorkoutRequest, llm=Depends(get_llm),
                                  repository=Depends(get_workout_repository),
                                  chats=Depends(get_chat_repository)):
    params = request.model_dump(by_alias=True, exclude={"user_id"})
    workout = await run_generation("simple", params, llm, "Failed to generate workout. Please try again.")
    return save_generated(workout, request.user_id, repository, chats)


@router.post("/generate-workout")
async def generate_workout(request: CustomWorkoutRequest, llm=Depends(get_llm),
                           repository=Depends(get_workout_repository),
                           chats=Depends(get_chat_repository)):
    params = request.model_dump(by_alias=True, exclude={"user_id"})
    workout = await run_generation("custom", params, llm, "Failed to generate workout. Please try again.")
    return save_generated(workout, request.user_id, repository, chats)


@router.post("/generate-workout-plan")
async def generate_workout_plan(request: WorkoutPlanRequest, llm=Depends(get_llm)):
    params = request.model_dump(by_alias=True)
    return await run_generation("plan", params, llm, "Failed to generate workout plan. Please try again.")
