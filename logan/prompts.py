"""Logan 프롬프트 템플릿 모음. (사용자 응답은 영어)"""
import json
from typing import Any, Dict, List, Optional

from logan.models import FitnessIntent

WORKOUT_SYSTEM_PROMPT = (
    "You are Logan, an expert personal trainer and fitness coach. You create safe, effective, "
    "personalized workouts. Always respond with valid JSON only, using plain numbers for sets, "
    "reps and weight."
)

PLAN_SYSTEM_PROMPT = (
    "You are Logan, an expert personal trainer who designs weekly workout schedules. You balance "
    "muscle groups across the week and allow for recovery. Always respond with valid JSON only."
)

CUSTOM_WORKOUT_SYSTEM_PROMPT = (
    "You are a certified personal trainer. Create workouts that match the requested type, focus "
    "area, duration and available equipment. Always respond with valid JSON only."
)

WORKOUT_JSON_EXAMPLE = {
    "name": "Full Body Strength",
    "exercises": [
        {"name": "Push-ups", "sets": 3, "reps": 12, "weight": 0, "notes": "Keep your core tight"},
        {"name": "Goblet Squats", "sets": 3, "reps": 10, "weight": 25, "notes": "Sit back into your hips"},
    ],
    "notes": "Rest 60 seconds between sets.",
}

WORKOUT_RULES = """Rules:
- Create 4-8 exercises appropriate for the time available.
- sets, reps and weight must be numbers, never quoted strings (use 30 instead of "30 seconds").
- Use weight 0 for bodyweight exercises.
- For timed exercises put the duration in seconds into reps.
- Respond with the JSON object only, no extra text."""


def _format_conversation(conversation: Optional[List[Dict[str, Any]]]) -> str:
    if not conversation:
        return ""
    lines = [f"{m.get('role', 'user')}: {m.get('content', '')}" for m in conversation]
    return "Conversation so far:\n" + "\n".join(lines) + "\n\n"


def get_workout_generation_prompt(params: Dict[str, Any]) -> str:
    """하루치 운동 생성 프롬프트 (/generate-simple-workout)."""
    prefix = _format_conversation(params.get("conversation"))
    return f"""{prefix}Create a single workout for today with these details:
- Fitness level: {params.get('fitnessLevel') or 'intermediate'}
- Goals: {params.get('goals') or 'general fitness'}
- Time available: {params.get('timeAvailable') or 30} minutes
- Equipment: {params.get('equipment') or 'bodyweight only'}

Respond in exactly this JSON format:
{json.dumps(WORKOUT_JSON_EXAMPLE, indent=2)}

{WORKOUT_RULES}"""


def get_custom_workout_prompt(params: Dict[str, Any]) -> str:
    """운동 유형/부위 지정 생성 프롬프트 (/generate-workout)."""
    equipment = params.get("equipment") or []
    equipment_text = ", ".join(equipment) if equipment else "bodyweight only"
    prefix = _format_conversation(params.get("conversation"))
    return f"""{prefix}Create a {params.get('duration') or 30}-minute {params.get('workoutType') or 'strength'} workout.
- Fitness level: {params.get('fitnessLevel') or 'intermediate'}
- Focus area: {params.get('focusArea') or 'full body'}
- Available equipment: {equipment_text}

Respond in exactly this JSON format:
{json.dumps(WORKOUT_JSON_EXAMPLE, indent=2)}

{WORKOUT_RULES}"""


def get_weekly_plan_prompt(params: Dict[str, Any]) -> str:
    frequency = params.get("workoutFrequency") or 3
    example = {
        "name": "4-Week Foundation Plan",
        "description": "A balanced weekly schedule",
        "weeklyPlan": [
            {"day": "Monday", "focus": "Upper Body", "workout": WORKOUT_JSON_EXAMPLE},
        ],
        "notes": "Rest on the remaining days.",
    }
    prefix = _format_conversation(params.get("conversation"))
    return f"""{prefix}Create a weekly workout plan with these details:
- Fitness level: {params.get('fitnessLevel') or 'intermediate'}
- Goals: {params.get('goals') or 'general fitness'}
- Time per session: {params.get('timeAvailable') or 30} minutes
- Equipment: {params.get('equipment') or 'bodyweight only'}
- Focus areas: {params.get('focusAreas') or 'full body'}

Create exactly {frequency} workout days.

Respond in exactly this JSON format:
{json.dumps(example, indent=2)}

{WORKOUT_RULES}"""


def _describe_intent(intent: FitnessIntent) -> str:
    known = {
        "Fitness level": intent.fitness_level,
        "Goals": intent.goals,
        "Time available (minutes)": intent.time_available,
        "Equipment": intent.equipment,
        "Focus areas": intent.focus_areas,
    }
    lines = [f"- {label}: {value or 'unknown'}" for label, value in known.items()]
    return "\n".join(lines)


def get_logan_chat_prompt(intent: FitnessIntent, user_profile: Optional[Dict[str, Any]] = None,
                          user_memories: Optional[List[str]] = None) -> str:
    """LLM 대화 경로의 시스템 프롬프트. 오늘 하루 세션만 다룹니다."""
    profile_text = ""
    if user_profile:
        profile_lines = [f"- {key}: {value}" for key, value in user_profile.items() if value]
        if profile_lines:
            profile_text = "\nWhat you remember about this user from previous conversations:\n" + "\n".join(profile_lines)
    memory_text = ""
    if user_memories:
        memory_text = "\nRelevant memories:\n" + "\n".join(f"- {m}" for m in user_memories[:5])

    return f"""You are Logan, a friendly and motivating personal fitness coach.
You are helping the user plan a single workout session for TODAY.

Current context from this conversation:
{_describe_intent(intent)}
{profile_text}{memory_text}

Guidelines:
- Keep responses short (2-3 sentences), warm and encouraging.
- Ask about at most one missing detail at a time (fitness level, goals, time, equipment).
- Do NOT ask about a weekly schedule or workout frequency; this is one session for today.
- Use what you remember about the user instead of asking again.
- When you know the goal and at least one other detail, tell the user you can create their workout now."""


def get_voice_coach_prompt(workout_name: str, exercise: Dict[str, Any], exercise_number: int,
                           total_exercises: int, completed_sets: int) -> str:
    """실시간 음성 코치 지시문."""
    return f"""You are Logan, an energetic voice fitness coach guiding the user through "{workout_name}".

Workout status:
- Current exercise: {exercise.get('name')} ({exercise_number} of {total_exercises})
- Target: {exercise.get('sets')} sets x {exercise.get('reps')} reps at {exercise.get('weight') or 0} lbs
- Sets completed: {completed_sets} of {exercise.get('sets')}

Coaching style:
- Short, upbeat spoken sentences.
- Cue form and breathing, count reps when asked.
- When the user says they finished a set, call the complete_set function with the set number (1-based).
- Never mark a set complete unless the user tells you they finished it."""
