import re
from typing import Dict, List, Optional, Tuple

from logan.models import FitnessIntent

# (phrases, value) 규칙 테이블. 필드마다 위에서부터 검사하고 처음 일치한 규칙이 이깁니다.
FITNESS_LEVEL_RULES: List[Tuple[List[str], str]] = [
    (["beginner", "new to", "just started", "just starting", "never worked out"], "beginner"),
    (["intermediate", "some experience", "been working out for", "moderately active"], "intermediate"),
    (["advanced", "experienced", "very fit", "athlete"], "advanced"),
]

GOAL_RULES: List[Tuple[List[str], str]] = [
    (["lose weight", "weight loss", "fat loss", "cut", "get lean"], "weight loss"),
    (["build muscle", "muscle gain", "bulk", "get bigger", "mass"], "muscle building"),
    (["strength", "get stronger", "powerlifting", "lift heavy"], "strength training"),
    (["cardio", "endurance", "conditioning"], "cardio fitness"),
    (["tone", "definition", "get in shape", "fitness", "workout", "exercise"], "general fitness"),
]

EQUIPMENT_RULES: List[Tuple[List[str], str]] = [
    (["no equipment", "bodyweight", "body weight", "at home", "no gym"], "bodyweight only"),
    (["gym", "full equipment", "everything available"], "full gym"),
    (["dumbbell", "free weights", "weights at home"], "dumbbells"),
    (["resistance bands", "bands"], "resistance bands"),
]

FOCUS_RULES: List[Tuple[List[str], str]] = [
    (["upper body", "arms", "chest", "shoulders"], "upper body"),
    (["lower body", "legs", "glutes"], "lower body"),
    (["core", "abs", "stomach"], "core"),
    (["full body", "everything", "overall"], "full body"),
]

FREQUENCY_RULES: List[Tuple[List[str], str]] = [
    (["3 days", "three days", "3 times", "three times"], "3"),
    (["4 days", "four days", "4 times", "four times"], "4"),
    (["5 days", "five days", "5 times", "five times"], "5"),
    (["6 days", "six days", "6 times", "six times"], "6"),
    (["every day", "daily", "7 days", "seven days"], "7"),
    (["2 days", "two days", "twice"], "2"),
]

TIME_KEYWORD_RULES: List[Tuple[List[str], str]] = [
    (["half hour", "half an hour"], "30"),
    (["quick workout", "short workout"], "20"),
    (["long workout", "extended workout", "an hour", "one hour"], "60"),
]

# 숫자 + 단위 표현은 키워드 매칭보다 우선합니다.
TIME_PATTERN = re.compile(r"(\d+)\s*(minutes?|mins?|hours?|hrs?)\b")

INTENT_FIELDS = [
    "fitness_level",
    "goals",
    "time_available",
    "equipment",
    "focus_areas",
    "workout_frequency",
]

_phrase_cache: Dict[str, re.Pattern] = {}


def _phrase_pattern(phrase: str) -> re.Pattern:
    # 단어 시작 위치에서만 일치 ("cut"은 "cutting"에는 맞지만 "execute"에는 맞지 않음)
    pattern = _phrase_cache.get(phrase)
    if pattern is None:
        pattern = re.compile(r"\b" + re.escape(phrase))
        _phrase_cache[phrase] = pattern
    return pattern


def match_rules(text: str, rules: List[Tuple[List[str], str]]) -> Optional[str]:
    """lower-case 된 text에 대해 규칙 테이블을 순서대로 검사합니다."""
    for phrases, value in rules:
        if any(_phrase_pattern(phrase).search(text) for phrase in phrases):
            return value
    return None


def extract_time(text: str) -> Optional[str]:
    match = TIME_PATTERN.search(text)
    if match:
        amount = int(match.group(1))
        unit = match.group(2)
        if unit.startswith("h"):
            amount *= 60
        return str(amount)
    return match_rules(text, TIME_KEYWORD_RULES)


def compute_has_enough_info(intent: FitnessIntent) -> bool:
    level = bool(intent.fitness_level)
    goals = bool(intent.goals)
    time = bool(intent.time_available)
    equipment = bool(intent.equipment)
    return (goals and (level or time or equipment)) or (level and (time or equipment))


def update_intent(intent: Optional[FitnessIntent], message: str) -> FitnessIntent:
    """
    사용자 메시지 한 턴으로 FitnessIntent를 갱신한 새 객체를 반환합니다.

    - 메시지에서 찾지 못한 필드는 이전 값을 유지합니다.
    - 새로 일치한 값은 이전 값을 덮어씁니다 (마지막 언급이 이김).
    - hasEnoughInfo는 필드로부터 매번 다시 계산합니다.
    """
    current = intent or FitnessIntent()
    text = (message or "").lower()

    found = {
        "fitness_level": match_rules(text, FITNESS_LEVEL_RULES),
        "goals": match_rules(text, GOAL_RULES),
        "time_available": extract_time(text),
        "equipment": match_rules(text, EQUIPMENT_RULES),
        "focus_areas": match_rules(text, FOCUS_RULES),
        "workout_frequency": match_rules(text, FREQUENCY_RULES),
    }
    update = {field: value for field, value in found.items() if value}
    updated = current.model_copy(update=update)
    return updated.model_copy(update={"has_enough_info": compute_has_enough_info(updated)})


def changed_fields(old: Optional[FitnessIntent], new: FitnessIntent) -> Dict[str, str]:
    """이번 턴에서 값이 바뀐 필드만 돌려줍니다. 비어 있으면 프로필 저장을 생략합니다."""
    old = old or FitnessIntent()
    return {
        field: getattr(new, field)
        for field in INTENT_FIELDS
        if getattr(new, field) and getattr(new, field) != getattr(old, field)
    }
