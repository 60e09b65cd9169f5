from typing import Dict, List, Optional

from langchain_core.prompts import ChatPromptTemplate, MessagesPlaceholder
from langchain_openai import ChatOpenAI

from logan import config
from logan.errors import ConfigError, UpstreamError

# 대화 경로와 생성 경로의 호출 파라미터
CHAT_TEMPERATURE = 0.8
CHAT_MAX_TOKENS = 200
WORKOUT_TEMPERATURE = 0.7
WORKOUT_MAX_TOKENS = 1000
PLAN_MAX_TOKENS = 2000


class LoganLLM:
    """
    ChatOpenAI 호출 래퍼.
    키가 없으면 ConfigError, 제공자 오류는 UpstreamError 로 바꿉니다. 재시도는 하지 않습니다.
    """

    def __init__(self, model_name: Optional[str] = None):
        self.model_name = model_name or config.LLM_MODEL_NAME

    def _chat_model(self, temperature: float, max_tokens: int) -> ChatOpenAI:
        if not config.openai_key_configured():
            raise ConfigError()
        return ChatOpenAI(
            model=self.model_name,
            temperature=temperature,
            max_tokens=max_tokens,
            api_key=config.openai_api_key(),
            max_retries=0,
        )

    async def complete(self, system_prompt: str, messages: List[Dict[str, str]],
                       temperature: float = WORKOUT_TEMPERATURE,
                       max_tokens: int = WORKOUT_MAX_TOKENS) -> str:
        llm = self._chat_model(temperature, max_tokens)
        prompt = ChatPromptTemplate.from_messages([
            ("system", "{system_prompt}"),
            MessagesPlaceholder("history"),
        ])
        chain = prompt | llm
        history = [(m.get("role", "user"), m.get("content", "")) for m in messages]

        try:
            result = await chain.ainvoke({"system_prompt": system_prompt, "history": history})
        except Exception as e:
            print(f"[LoganLLM] OpenAI 호출 오류: {e}")
            raise UpstreamError.from_exception(e) from e

        content = (result.content or "").strip()
        if not content:
            print("[LoganLLM] 빈 응답을 받았습니다.")
            raise UpstreamError(detail="no response from AI")
        print(f"🔍 LLM 원본 응답: {content[:200]}")
        return content
