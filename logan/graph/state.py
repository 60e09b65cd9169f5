from typing import Any, Dict, List, Optional, TypedDict, Union

from logan.errors import ParseError
from logan.models import FitnessIntent, WeeklyPlan, Workout


class ChatState(TypedDict, total=False):
    """
    Logan 대화 한 턴의 상태를 정의합니다.
    """
    # --- 입력 데이터 ---
    user_id: Optional[str]
    mode: str                               # "simple" (LLM) | "plan" (로컬 결정 테이블)
    messages: List[Dict[str, str]]          # {role, content} 전체 대화
    latest_message: str
    previous_intent: FitnessIntent

    # --- 처리 결과 ---
    intent: FitnessIntent
    changed_fields: Dict[str, str]
    user_profile: Dict[str, Any]            # 기억에서 복원한 프로필
    user_memories: List[str]
    reply: str
    ready_for_workout: bool


class GenerationState(TypedDict, total=False):
    """
    운동 생성 워크플로우의 상태를 정의합니다.
    """
    kind: str                               # "simple" | "custom" | "plan"
    params: Dict[str, Any]

    system_prompt: str
    prompt: str
    temperature: float
    max_tokens: int
    raw_response: str

    result: Union[Workout, WeeklyPlan, None]
    parse_error: Optional[ParseError]
