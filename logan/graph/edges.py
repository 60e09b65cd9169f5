from .state import ChatState, GenerationState


def route_by_mode_edge(state: ChatState) -> str:
    """
    대화 모드에 따라 답변 생성 노드를 고릅니다.
    'plan' 은 로컬 결정 테이블, 그 외는 LLM.
    """
    mode = state.get("mode") or "simple"
    if mode == "plan":
        print("판단 결과: 📋 주간 계획 모드. 로컬 결정 테이블로 답변합니다.")
        return "compose_local"
    print("판단 결과: 💬 대화 모드. LLM 으로 답변합니다.")
    return "compose_llm"


def check_parse_result_edge(state: GenerationState) -> str:
    if state.get("parse_error") is not None:
        return "parse_failed"
    return "parsed"
