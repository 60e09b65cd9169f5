from langgraph.graph import StateGraph, END

from .state import ChatState, GenerationState
from .nodes import ChatNodes, GenerationNodes
from .edges import route_by_mode_edge, check_parse_result_edge


def create_chat_graph(nodes: ChatNodes):
    """
    Logan 대화 한 턴의 워크플로우 그래프를 생성합니다.
    """
    builder = StateGraph(ChatState)

    # 1. 노드 정의
    builder.add_node("extract_intent", nodes.extract_intent_node)
    builder.add_node("recall_memory", nodes.recall_memory_node)
    builder.add_node("compose_local", nodes.compose_local_node)
    builder.add_node("compose_llm", nodes.compose_llm_node)
    builder.add_node("remember", nodes.remember_node)

    # 2. 시작점
    builder.set_entry_point("extract_intent")
    builder.add_edge("extract_intent", "recall_memory")

    # 3. 모드에 따라 답변 방식 분기
    builder.add_conditional_edges(
        "recall_memory",
        route_by_mode_edge,
        {"compose_local": "compose_local", "compose_llm": "compose_llm"}
    )
    builder.add_edge("compose_local", "remember")
    builder.add_edge("compose_llm", "remember")
    builder.add_edge("remember", END)

    return builder.compile()


def create_generation_graph(nodes: GenerationNodes):
    """
    운동(하루치 / 지정형 / 주간 계획) 생성 워크플로우 그래프를 생성합니다.
    """
    builder = StateGraph(GenerationState)

    builder.add_node("build_prompt", nodes.build_prompt_node)
    builder.add_node("call_llm", nodes.call_llm_node)
    builder.add_node("parse_response", nodes.parse_response_node)
    builder.add_node("report_parse_error", nodes.report_parse_error_node)
    builder.add_node("finalize", nodes.finalize_node)

    builder.set_entry_point("build_prompt")
    builder.add_edge("build_prompt", "call_llm")
    builder.add_edge("call_llm", "parse_response")

    # 파싱 성공 여부에 따라 분기
    builder.add_conditional_edges(
        "parse_response",
        check_parse_result_edge,
        {"parsed": "finalize", "parse_failed": "report_parse_error"}
    )
    builder.add_edge("finalize", END)
    builder.add_edge("report_parse_error", END)

    return builder.compile()
