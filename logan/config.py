import os
from dotenv import load_dotenv

# .env 파일에서 환경 변수 로드
# 이 파일의 위치를 기준으로 프로젝트 루트의 .env 파일을 찾습니다.
dotenv_path = os.path.join(os.path.dirname(os.path.dirname(__file__)), '.env')
load_dotenv(dotenv_path=dotenv_path)

# --- API & Model Settings ---
OPENAI_API_KEY = os.getenv("OPENAI_API_KEY")
LLM_MODEL_NAME = os.getenv("LLM_MODEL_NAME", "gpt-4o-mini")
OPENAI_REALTIME_MODEL = os.getenv("OPENAI_REALTIME_MODEL", "gpt-4o-realtime-preview-2024-12-17")
OPENAI_REALTIME_VOICE = os.getenv("OPENAI_REALTIME_VOICE", "alloy")
OPENAI_REALTIME_SESSIONS_URL = "https://api.openai.com/v1/realtime/sessions"

# --- Memory (mem0) Settings ---
MEM0_API_KEY = os.getenv("MEM0_API_KEY")
MEM0_API_URL = os.getenv("MEM0_API_URL", "https://api.mem0.ai")
ENABLE_MEMORY = os.getenv("ENABLE_MEMORY", "true").lower() == "true"
MEMORY_TIMEOUT_SECONDS = float(os.getenv("MEMORY_TIMEOUT_SECONDS", "2.0"))

# --- Storage Settings ---
DATABASE_URL = os.getenv("DATABASE_URL")
REDIS_HOST = os.getenv("REDIS_HOST", "localhost")
REDIS_PORT = int(os.getenv("REDIS_PORT", "6379"))
SESSION_TTL_SECONDS = 60 * 60 * 24  # 24시간
SESSION_IDLE_TTL_SECONDS = int(os.getenv("SESSION_IDLE_TTL_SECONDS", str(60 * 60 * 4)))  # 4시간


def openai_api_key() -> str:
    return os.getenv("OPENAI_API_KEY", OPENAI_API_KEY or "")


def openai_key_configured() -> bool:
    """OpenAI 키가 비어있거나 예시 값이면 False."""
    key = openai_api_key()
    return bool(key) and key != "your_openai_api_key_here"
