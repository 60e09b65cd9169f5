from typing import Literal, Optional

from pydantic import BaseModel

MISSING_KEY_MESSAGE = "OpenAI API key not configured. Please check your .env file."

INVALID_FORMAT_MESSAGE = "Invalid response format from AI. Please try again."
INVALID_WORKOUT_MESSAGE = "Invalid workout structure from AI. Please try again."
INVALID_PLAN_MESSAGE = "Invalid plan structure from AI. Please try again."


class ConfigError(Exception):
    """필수 설정(예: OpenAI 키)이 없을 때. 재시도하지 않습니다."""

    def __init__(self, message: str = MISSING_KEY_MESSAGE):
        super().__init__(message)
        self.message = message


class UpstreamError(Exception):
    """
    LLM 제공자 호출 실패.
    status_code 클래스(401 / 429 / 5xx)에 따라 사용자 메시지가 정해집니다.
    """

    def __init__(self, status_code: Optional[int] = None, detail: str = ""):
        super().__init__(detail or f"upstream error (status={status_code})")
        self.status_code = status_code
        self.detail = detail

    @classmethod
    def from_exception(cls, exc: Exception) -> "UpstreamError":
        status = getattr(exc, "status_code", None)
        if status is None:
            response = getattr(exc, "response", None)
            status = getattr(response, "status_code", None)
        return cls(status_code=status, detail=str(exc))

    def user_message(self, fallback: str) -> str:
        status = self.status_code
        if status == 401:
            return "Invalid OpenAI API key. Please check your API key."
        if status == 429:
            return "Rate limit exceeded. Please wait a moment and try again."
        if status is not None and status >= 500:
            return "OpenAI service error. Please try again later."
        return fallback


class PersistenceWarning(Warning):
    """부가 경로(메모리, 프로필, 진행 상황 저장) 실패. 출력만 하고 삼킵니다."""


class ParseError(BaseModel):
    """LLM 응답을 운동 JSON으로 만들지 못했을 때의 결과 값."""
    kind: Literal["MalformedResponse", "InvalidStructure"]
    message: str
    raw_text: str = ""
    cleaned_text: str = ""


class InvalidTransition(ValueError):
    pass
