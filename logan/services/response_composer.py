import re
from typing import List

from logan.models import FitnessIntent

# (필드, 사용자에게 보여줄 이름), 우선순위 순서
PLAN_FIELDS = [
    ("fitness_level", "fitness level"),
    ("goals", "fitness goals"),
    ("time_available", "time availability"),
    ("equipment", "equipment access"),
    ("focus_areas", "focus areas"),
    ("workout_frequency", "workout frequency"),
]
SIMPLE_FIELDS = PLAN_FIELDS[:4]

READY_PATTERN = re.compile(r"\b(create|make|generate|ready|now|start)")

ESCAPE_HATCH = "Or just say 'create workout now' and I'll use reasonable defaults!"

READY_MESSAGE = (
    "Great! I can create a workout plan for you right now with the information I have. "
    "I'll use reasonable defaults for any missing details. Click the 'Create Workout Plan' "
    "button below to generate your personalized workout schedule!"
)

FIELD_PROMPTS = {
    "fitness_level": (
        "Thanks for sharing! To create the perfect workout for you, could you tell me about "
        "your current fitness level? Are you a beginner, intermediate, or advanced?"
    ),
    "goals": (
        "Great! What are your main fitness goals? Are you looking to lose weight, build muscle, "
        "get stronger, improve cardio, or just get in better shape overall?"
    ),
    "time_available": (
        "Perfect! How much time do you typically have for each workout session? "
        "For example, 30 minutes, 45 minutes, or an hour?"
    ),
    "equipment": (
        "Excellent! What equipment do you have access to? Do you work out at a gym, at home "
        "with dumbbells or resistance bands, or do you prefer bodyweight exercises?"
    ),
    "focus_areas": (
        "Got it! Are there any specific areas you'd like to focus on? "
        "Upper body, lower body, core, or a full-body approach?"
    ),
    "workout_frequency": (
        "Almost there! How many days per week would you like to work out? "
        "For example, 3 days, 4 days, or 5 days?"
    ),
}


def is_ready_signal(message: str) -> bool:
    return bool(READY_PATTERN.search((message or "").lower()))


def missing_fields(intent: FitnessIntent, fields=PLAN_FIELDS) -> List[tuple]:
    return [(field, label) for field, label in fields if not getattr(intent, field)]


def _ready_summary(intent: FitnessIntent) -> str:
    parts = []
    if intent.workout_frequency:
        parts.append(f"a {intent.workout_frequency}-day split")
    if intent.time_available:
        parts.append(f"{intent.time_available}-minute sessions")
    if intent.equipment:
        parts.append(f"using {intent.equipment}")
    if intent.focus_areas:
        parts.append(f"focusing on {intent.focus_areas}")
    plan = ", ".join(parts) if parts else "a balanced routine"
    return (
        "Perfect! I have all the information I need to create your personalized workout plan. "
        f"I'll design {plan} tailored to your {intent.fitness_level or 'current'} level and "
        f"{intent.goals or 'fitness'} goals. Click the 'Create Workout Plan' button below when "
        "you're ready!"
    )


def compose_response(intent: FitnessIntent, message: str, fields=PLAN_FIELDS) -> str:
    """
    로컬 결정 테이블로 Logan의 다음 답변을 만듭니다. (LLM 호출 없음)

    1. 생성 요청 키워드 → 바로 생성 가능 안내
    2. 빠진 필드가 1개 → 해당 필드 질문
    3. 빠진 필드가 2개 → 두 필드를 함께 질문
    4. 빠진 필드가 없음 → 준비 완료 요약
    5. 그 외 → 우선순위상 첫 번째 빠진 필드 질문
    """
    if is_ready_signal(message):
        return READY_MESSAGE

    missing = missing_fields(intent, fields)

    if len(missing) == 1:
        field, _ = missing[0]
        return f"{FIELD_PROMPTS[field]} {ESCAPE_HATCH}"

    if len(missing) == 2:
        first, second = missing[0][1], missing[1][1]
        return (
            f"Thanks for sharing that! I just need a couple more details: {first} and {second}. "
            f"Can you tell me about those? {ESCAPE_HATCH}"
        )

    if not missing:
        return _ready_summary(intent)

    return FIELD_PROMPTS[missing[0][0]]
