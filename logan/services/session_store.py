import json
from typing import Any, Dict, List, Optional

import redis

from logan import config
from logan.models import FitnessIntent

SESSION_KEY_PREFIX = "logan_session"


class ConversationStore:
    """
    대화 세션(슬롯 + 최근 대화)을 Redis 에 24시간 보관합니다.
    Redis 오류는 부가 경로 실패로 보고 출력만 합니다.
    """

    def __init__(self, client: Optional[redis.Redis] = None, ttl: int = config.SESSION_TTL_SECONDS):
        self.client = client or redis.Redis(host=config.REDIS_HOST, port=config.REDIS_PORT, db=0,
                                            decode_responses=True, socket_connect_timeout=2)
        self.ttl = ttl

    @staticmethod
    def _key(session_id: str) -> str:
        return f"{SESSION_KEY_PREFIX}:{session_id}"

    def load(self, session_id: str) -> Optional[Dict[str, Any]]:
        if not session_id:
            return None
        try:
            raw = self.client.get(self._key(session_id))
        except redis.RedisError as e:
            print(f"⚠️ [ConversationStore] 세션 조회 실패: {e}")
            return None
        if not raw:
            return None
        try:
            data = json.loads(raw)
        except json.JSONDecodeError:
            print(f"🚨 [ConversationStore] 손상된 세션 데이터: {session_id}")
            return None
        return {
            "intent": FitnessIntent.model_validate(data.get("intent") or {}),
            "history": data.get("history") or [],
        }

    def save(self, session_id: str, intent: FitnessIntent, history: List[Dict[str, str]]) -> None:
        if not session_id:
            return
        payload = {"intent": intent.model_dump(by_alias=True), "history": history}
        try:
            self.client.set(self._key(session_id), json.dumps(payload, ensure_ascii=False), ex=self.ttl)
        except redis.RedisError as e:
            print(f"⚠️ [ConversationStore] 세션 저장 실패: {e}")

    def clear(self, session_id: str) -> None:
        if not session_id:
            return
        try:
            self.client.delete(self._key(session_id))
        except redis.RedisError as e:
            print(f"⚠️ [ConversationStore] 세션 삭제 실패: {e}")
