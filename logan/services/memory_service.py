import re
from typing import Any, Dict, List, Optional

import httpx

from logan import config
from logan.models import FitnessIntent
from logan.utils.background import fire_and_forget, with_timeout

DEFAULT_PROFILE_QUERY = "fitness preferences workout goals equipment time"

# 저장된 사실 문장에서 프로필을 복원하는 패턴
PROFILE_PATTERNS = {
    "fitnessLevel": re.compile(r"fitness level is (\w+)", re.IGNORECASE),
    "goals": re.compile(r"fitness goal is ([^.]+)", re.IGNORECASE),
    "timeAvailable": re.compile(r"(\d+) minutes available", re.IGNORECASE),
    "equipment": re.compile(r"access to ([^.]+)", re.IGNORECASE),
    "focusAreas": re.compile(r"focus on ([^.]+)", re.IGNORECASE),
    "workoutFrequency": re.compile(r"(\d+) days per week", re.IGNORECASE),
}


def build_memory_facts(intent: FitnessIntent) -> List[str]:
    facts = []
    if intent.fitness_level:
        facts.append(f"User's fitness level is {intent.fitness_level}")
    if intent.goals:
        facts.append(f"User's fitness goal is {intent.goals}")
    if intent.time_available:
        facts.append(f"User has {intent.time_available} minutes available for workouts")
    if intent.equipment:
        facts.append(f"User has access to {intent.equipment}")
    if intent.focus_areas:
        facts.append(f"User wants to focus on {intent.focus_areas}")
    if intent.workout_frequency:
        facts.append(f"User wants to workout {intent.workout_frequency} days per week")
    return facts


def memory_texts(response: Any) -> List[str]:
    """mem0 응답은 list, {results: []}, {memories: []} 중 하나로 옵니다."""
    if isinstance(response, dict):
        items = response.get("results") or response.get("memories") or []
    elif isinstance(response, list):
        items = response
    else:
        items = []
    texts = []
    for item in items:
        if isinstance(item, str):
            texts.append(item)
        elif isinstance(item, dict):
            text = item.get("memory") or item.get("text")
            if text:
                texts.append(text)
    return texts


def parse_profile(memories: List[str]) -> Dict[str, str]:
    """여러 기억 문장에서 프로필 필드를 뽑습니다. 뒤쪽 기억이 앞쪽을 덮어씁니다."""
    profile: Dict[str, str] = {}
    for text in memories:
        for field, pattern in PROFILE_PATTERNS.items():
            match = pattern.search(text)
            if match:
                profile[field] = match.group(1).strip()
    return profile


class MemoryService:
    """
    mem0 REST 클라이언트.
    읽기는 timeout 과 경쟁시키고, 쓰기는 fire-and-forget 으로 보냅니다.
    """

    def __init__(self, api_key: Optional[str] = None, base_url: Optional[str] = None,
                 enabled: Optional[bool] = None, timeout: Optional[float] = None):
        self.api_key = api_key if api_key is not None else config.MEM0_API_KEY
        self.base_url = (base_url or config.MEM0_API_URL).rstrip("/")
        self.enabled = (config.ENABLE_MEMORY if enabled is None else enabled) and bool(self.api_key)
        self.timeout = config.MEMORY_TIMEOUT_SECONDS if timeout is None else timeout
        if not self.enabled:
            print("[MemoryService] 메모리 기능이 비활성화되어 있습니다.")

    def _headers(self) -> Dict[str, str]:
        return {"Authorization": f"Token {self.api_key}", "Content-Type": "application/json"}

    async def add(self, user_id: str, text: str, metadata: Optional[Dict[str, Any]] = None) -> Any:
        if not self.enabled:
            return None
        payload = {
            "messages": [{"role": "user", "content": text}],
            "user_id": user_id,
            "metadata": metadata or {},
        }
        async with httpx.AsyncClient(timeout=10) as client:
            response = await client.post(f"{self.base_url}/v1/memories/", json=payload, headers=self._headers())
            response.raise_for_status()
            return response.json()

    async def store_facts(self, user_id: str, facts: List[str], message: Optional[str] = None) -> None:
        for fact in facts:
            await self.add(user_id, fact, {"type": "fitness_preference"})
        if message:
            await self.add(user_id, f'User said: "{message}"', {"type": "conversation"})
        print(f"[MemoryService] {user_id} 사용자 기억 {len(facts)}건 저장")

    def remember(self, user_id: str, intent: FitnessIntent, message: Optional[str] = None):
        """선호 정보를 결과를 기다리지 않고 저장합니다."""
        if not self.enabled or not user_id:
            return None
        return fire_and_forget(self.store_facts, user_id, build_memory_facts(intent), message,
                               label="memory-store")

    async def search(self, user_id: str, query: str = DEFAULT_PROFILE_QUERY) -> List[str]:
        if not self.enabled or not user_id:
            return []
        payload = {"query": query or DEFAULT_PROFILE_QUERY, "user_id": user_id}
        async with httpx.AsyncClient(timeout=10) as client:
            response = await client.post(f"{self.base_url}/v1/memories/search/", json=payload,
                                         headers=self._headers())
            response.raise_for_status()
            return memory_texts(response.json())

    async def get_user_profile(self, user_id: str) -> Dict[str, str]:
        memories = await self.search(user_id, DEFAULT_PROFILE_QUERY)
        return parse_profile(memories)

    async def recall(self, user_id: str, query: str = "") -> Dict[str, Any]:
        """기억 검색과 프로필 복원을 각각 timeout 과 경쟁시킵니다. 늦으면 빈 값."""
        memories = await with_timeout(self.search(user_id, query), [], self.timeout, label="memory-search")
        profile = await with_timeout(self.get_user_profile(user_id), {}, self.timeout, label="memory-profile")
        return {"userMemories": memories, "userProfile": profile}
