from typing import List, Literal, Optional

from fastapi import APIRouter, Depends, HTTPException
from pydantic import BaseModel, ConfigDict, Field

from logan.dependencies import (
    get_chat_repository,
    get_conversation_store,
    get_llm,
    get_memory_service,
    get_profile_repository,
)
from logan.errors import MISSING_KEY_MESSAGE, ConfigError, UpstreamError
from logan.graph.builder import create_chat_graph
from logan.graph.nodes import ChatNodes, latest_user_message
from logan.models import ChatMessage, FitnessIntent
from logan.services.base_repository import profile_to_intent
from logan.utils.background import fire_and_forget

router = APIRouter()

CHAT_FALLBACK_MESSAGE = "Failed to generate response. Please try again."


class ChatRequest(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    messages: List[ChatMessage]
    conversation_context: Optional[FitnessIntent] = Field(None, alias="conversationContext")
    user_id: Optional[str] = Field(None, alias="userId")
    session_id: Optional[str] = Field(None, alias="sessionId")
    mode: Literal["simple", "plan"] = "simple"


class ResetRequest(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    user_id: Optional[str] = Field(None, alias="userId")
    session_id: Optional[str] = Field(None, alias="sessionId")


def _starting_intent(request: ChatRequest, store, profiles) -> FitnessIntent:
    """클라이언트 컨텍스트 → Redis 세션 → 저장된 프로필 순으로 이전 슬롯을 찾습니다."""
    if request.conversation_context is not None:
        return request.conversation_context
    if request.session_id:
        session = store.load(request.session_id)
        if session:
            return session["intent"]
    if request.user_id:
        try:
            return profile_to_intent(profiles.get_profile(request.user_id))
        except Exception as e:
            print(f"⚠️ [ChatRouter] 프로필 조회 실패, 빈 컨텍스트로 시작합니다: {e}")
    return FitnessIntent()


@router.post("/chat-with-logan")
async def chat_with_logan(
    request: ChatRequest,
    llm=Depends(get_llm),
    memory=Depends(get_memory_service),
    profiles=Depends(get_profile_repository),
    chats=Depends(get_chat_repository),
    store=Depends(get_conversation_store),
):
    if not request.messages:
        raise HTTPException(status_code=400, detail="Messages array is required")

    messages = [m.model_dump() for m in request.messages]
    latest = latest_user_message(messages)
    graph = create_chat_graph(ChatNodes(llm, memory, profiles))

    try:
        result = await graph.ainvoke({
            "user_id": request.user_id,
            "mode": request.mode,
            "messages": messages,
            "latest_message": latest,
            "previous_intent": _starting_intent(request, store, profiles),
        })
    except ConfigError:
        raise HTTPException(status_code=500, detail=MISSING_KEY_MESSAGE)
    except UpstreamError as e:
        print(f"[ChatRouter] 오류: {e}")
        raise HTTPException(status_code=500, detail=e.user_message(CHAT_FALLBACK_MESSAGE))

    intent = result["intent"]
    reply = result["reply"]

    if request.session_id:
        store.save(request.session_id, intent, messages + [{"role": "assistant", "content": reply}])
    if request.user_id and latest:
        fire_and_forget(chats.save_turn, request.user_id, latest, reply, label="chat-history")

    return {
        "message": reply,
        "readyForWorkout": result.get("ready_for_workout", False),
        "conversationContext": intent.model_dump(by_alias=True),
    }


@router.post("/chat-with-logan/reset")
def reset_conversation(
    request: ResetRequest,
    profiles=Depends(get_profile_repository),
    store=Depends(get_conversation_store),
):
    """대화 세션과 저장된 프로필 슬롯을 비웁니다."""
    if request.session_id:
        store.clear(request.session_id)
    if request.user_id:
        profiles.reset_profile(request.user_id)
    return {"status": "reset", "conversationContext": FitnessIntent().model_dump(by_alias=True)}
