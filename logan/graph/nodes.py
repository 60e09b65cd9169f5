from typing import Any, Dict, List

from logan.errors import ParseError
from logan.prompts import (
    CUSTOM_WORKOUT_SYSTEM_PROMPT,
    PLAN_SYSTEM_PROMPT,
    WORKOUT_SYSTEM_PROMPT,
    get_custom_workout_prompt,
    get_logan_chat_prompt,
    get_weekly_plan_prompt,
    get_workout_generation_prompt,
)
from logan.models import FitnessIntent
from logan.services.intent_extractor import changed_fields, update_intent
from logan.services.llm_client import (
    CHAT_MAX_TOKENS,
    CHAT_TEMPERATURE,
    PLAN_MAX_TOKENS,
    WORKOUT_MAX_TOKENS,
    WORKOUT_TEMPERATURE,
)
from logan.services.response_composer import PLAN_FIELDS, compose_response, is_ready_signal
from logan.services.workout_parser import parse_weekly_plan_response, parse_workout_response
from logan.utils.background import fire_and_forget

from .state import ChatState, GenerationState

# LLM 에 넘기는 최근 대화 개수
HISTORY_LIMIT = 10


def latest_user_message(messages: List[Dict[str, str]]) -> str:
    for message in reversed(messages or []):
        if message.get("role") == "user":
            return message.get("content", "")
    return ""


class ChatNodes:
    """
    대화 워크플로우 노드 모음. LLM, 기억, 프로필 저장소를 주입받습니다.
    """

    def __init__(self, llm, memory, profiles):
        self.llm = llm
        self.memory = memory
        self.profiles = profiles

    def extract_intent_node(self, state: ChatState) -> dict:
        print("--- [Node 1] 사용자 의도 추출 ---")
        previous = state.get("previous_intent") or FitnessIntent()
        message = state.get("latest_message") or latest_user_message(state.get("messages"))
        intent = update_intent(previous, message)
        changes = changed_fields(previous, intent)
        print(f"🧩 추출 결과: {intent.model_dump(by_alias=True)} (변경: {changes})")

        user_id = state.get("user_id")
        if user_id and changes and self.profiles is not None:
            fire_and_forget(self.profiles.upsert_from_intent, user_id, changes, label="profile-upsert")

        return {"intent": intent, "changed_fields": changes, "latest_message": message}

    async def recall_memory_node(self, state: ChatState) -> dict:
        print("--- [Node 2] 사용자 기억 조회 ---")
        user_id = state.get("user_id")
        if not user_id or self.memory is None:
            return {"user_profile": {}, "user_memories": []}
        recalled = await self.memory.recall(user_id, state.get("latest_message", ""))
        print(f"🧠 기억 {len(recalled['userMemories'])}건, 프로필: {recalled['userProfile']}")
        return {"user_profile": recalled["userProfile"], "user_memories": recalled["userMemories"]}

    def compose_local_node(self, state: ChatState) -> dict:
        print("--- [Node 3] 로컬 답변 생성 ---")
        intent = state["intent"]
        message = state.get("latest_message", "")
        reply = compose_response(intent, message, PLAN_FIELDS)
        return {"reply": reply, "ready_for_workout": intent.has_enough_info or is_ready_signal(message)}

    async def compose_llm_node(self, state: ChatState) -> dict:
        print("--- [Node 3] LLM 답변 생성 ---")
        intent = state["intent"]
        system_prompt = get_logan_chat_prompt(intent, state.get("user_profile"), state.get("user_memories"))
        history = [
            m for m in (state.get("messages") or [])
            if m.get("role") in ("user", "assistant") and m.get("content")
        ][-HISTORY_LIMIT:]
        reply = await self.llm.complete(system_prompt, history,
                                        temperature=CHAT_TEMPERATURE, max_tokens=CHAT_MAX_TOKENS)
        message = state.get("latest_message", "")
        return {"reply": reply, "ready_for_workout": intent.has_enough_info or is_ready_signal(message)}

    async def remember_node(self, state: ChatState) -> dict:
        print("--- [Node 4] 사용자 선호 기억 저장 ---")
        user_id = state.get("user_id")
        if user_id and self.memory is not None and state.get("changed_fields"):
            self.memory.remember(user_id, state["intent"], state.get("latest_message"))
        return {}


class GenerationNodes:
    """
    운동 생성 워크플로우 노드 모음.
    """

    def __init__(self, llm):
        self.llm = llm

    def build_prompt_node(self, state: GenerationState) -> dict:
        print("--- [Node 1] 생성 프롬프트 구성 ---")
        kind = state.get("kind", "simple")
        params = state.get("params") or {}
        if kind == "plan":
            return {
                "system_prompt": PLAN_SYSTEM_PROMPT,
                "prompt": get_weekly_plan_prompt(params),
                "temperature": WORKOUT_TEMPERATURE,
                "max_tokens": PLAN_MAX_TOKENS,
            }
        if kind == "custom":
            return {
                "system_prompt": CUSTOM_WORKOUT_SYSTEM_PROMPT,
                "prompt": get_custom_workout_prompt(params),
                "temperature": WORKOUT_TEMPERATURE,
                "max_tokens": WORKOUT_MAX_TOKENS,
            }
        return {
            "system_prompt": WORKOUT_SYSTEM_PROMPT,
            "prompt": get_workout_generation_prompt(params),
            "temperature": WORKOUT_TEMPERATURE,
            "max_tokens": WORKOUT_MAX_TOKENS,
        }

    async def call_llm_node(self, state: GenerationState) -> dict:
        print("--- [Node 2] LLM 운동 생성 요청 ---")
        raw = await self.llm.complete(
            state["system_prompt"],
            [{"role": "user", "content": state["prompt"]}],
            temperature=state.get("temperature", WORKOUT_TEMPERATURE),
            max_tokens=state.get("max_tokens", WORKOUT_MAX_TOKENS),
        )
        return {"raw_response": raw}

    def parse_response_node(self, state: GenerationState) -> dict:
        print("--- [Node 3] 응답 파싱 및 검증 ---")
        params = state.get("params") or {}
        raw = state.get("raw_response", "")
        if state.get("kind") == "plan":
            parsed = parse_weekly_plan_response(raw, params)
        else:
            time_available = params.get("duration") if state.get("kind") == "custom" else params.get("timeAvailable")
            parsed = parse_workout_response(raw, time_available)

        if isinstance(parsed, ParseError):
            return {"result": None, "parse_error": parsed}
        return {"result": parsed, "parse_error": None}

    def report_parse_error_node(self, state: GenerationState) -> dict:
        error = state["parse_error"]
        print(f"🚨 [{error.kind}] {error.message}")
        print(f"🚨 원본 응답: {error.raw_text}")
        print(f"🚨 정리된 응답: {error.cleaned_text}")
        return {}

    def finalize_node(self, state: GenerationState) -> Dict[str, Any]:
        result = state["result"]
        print(f"✅ 생성 완료: {result.name}")
        return {}
