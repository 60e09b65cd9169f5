from logan.models import FitnessIntent
from logan.services.intent_extractor import changed_fields, compute_has_enough_info, update_intent


def test_extracts_all_core_fields_from_one_sentence():
    intent = update_intent(
        FitnessIntent(),
        "I'm a total beginner, want to lose weight, have 30 minutes and just bodyweight",
    )
    assert intent.fitness_level == "beginner"
    assert intent.goals == "weight loss"
    assert intent.time_available == "30"
    assert intent.equipment == "bodyweight only"
    assert intent.has_enough_info is True


def test_numeric_time_overrides_keyword_time():
    intent = update_intent(None, "a quick workout, maybe 45 minutes")
    assert intent.time_available == "45"


def test_keyword_time_and_hours():
    assert update_intent(None, "I have half an hour").time_available == "30"
    assert update_intent(None, "about 1 hour").time_available == "60"


def test_first_rule_wins_within_a_turn():
    # "no gym" belongs to the bodyweight rule, which is checked before "gym"
    intent = update_intent(None, "no gym for me, I train at home")
    assert intent.equipment == "bodyweight only"


def test_later_message_overwrites_field():
    intent = update_intent(None, "I'm a beginner")
    intent = update_intent(intent, "actually I'm pretty advanced")
    assert intent.fitness_level == "advanced"


def test_missing_fields_are_kept():
    intent = update_intent(None, "I want to build muscle")
    intent = update_intent(intent, "hello there")
    assert intent.goals == "muscle building"


def test_word_start_matching_avoids_false_positives():
    intent = update_intent(None, "I need to execute my plan")
    assert intent.goals == ""


def test_focus_and_frequency():
    intent = update_intent(None, "legs please, three days a week")
    assert intent.focus_areas == "lower body"
    assert intent.workout_frequency == "3"
    assert update_intent(None, "I can train daily").workout_frequency == "7"


def test_has_enough_info_requires_goal_plus_one_more():
    intent = update_intent(None, "I want to get stronger")
    assert intent.goals == "strength training"
    assert intent.has_enough_info is False
    intent = update_intent(intent, "I go to the gym")
    assert intent.has_enough_info is True


def test_has_enough_info_never_flips_back():
    messages = [
        "I'm intermediate",
        "I have 20 minutes",
        "hmm not sure",
        "what about cardio?",
        "ok thanks",
        "",
    ]
    intent = FitnessIntent()
    seen_true = False
    for message in messages:
        intent = update_intent(intent, message)
        if seen_true:
            assert intent.has_enough_info is True
        seen_true = seen_true or intent.has_enough_info
    assert seen_true


def test_has_enough_info_is_derived_from_fields():
    stale = FitnessIntent(has_enough_info=True)
    assert compute_has_enough_info(stale) is False
    assert update_intent(stale, "hi").has_enough_info is False


def test_changed_fields_only_reports_new_values():
    old = update_intent(None, "beginner")
    new = update_intent(old, "beginner who wants to bulk")
    assert changed_fields(old, new) == {"goals": "muscle building"}
    assert changed_fields(new, new) == {}
