import pytest

from assistant import FALLBACK, RULES, build_ai_messages, find_rule, route_message


@pytest.mark.parametrize("message, rule", [
    ("Define ADR please", "adr_definition"),
    ("what does adr mean", "adr_definition"),
    ("how to report multiple medications", "multiple_medications"),
    ("how to report adr", "how_to_report"),
    ("psur submission schedule", "psur_schedule"),
    ("psur content", "psur_content"),
    ("psur submission", "psur_submission"),
    ("psur requirements", "psur"),
    ("reporting timeline", "timeline"),
    ("serious adr definition", "serious_adr"),
    ("explain form sections", "form_sections"),
    ("what is psmf", "psmf"),
    ("how to assess causality", "causality"),
    ("contact support", "contact_support"),
    ("check drug interaction with warfarin", "drug_interaction"),
    ("safety signal detection methods", "signal_detection"),
    ("reporting requirements", "adverse_event"),
    ("geriatric patients", "elderly"),
    ("GxP compliance", "regulatory"),
])
def test_first_matching_rule_answers(message, rule):
    assert find_rule(message).name == rule


def test_matching_ignores_case():
    assert find_rule("WHAT IS ADR").name == "adr_definition"


def test_calendar_question_wins_over_later_rules():
    # "calendar" is tested before "how to report"
    assert find_rule("how to report deadlines in the calendar").name == "deadlines"


def test_no_rule_for_small_talk():
    assert find_rule("good morning") is None


def test_every_quick_reply_can_be_answered(storage):
    for rule in RULES:
        for option in rule.respond(storage).options:
            reply = route_message(option.query, storage)
            assert reply.message


def test_rule_names_are_unique():
    names = [rule.name for rule in RULES]
    assert len(names) == len(set(names))


def test_fallback_options_are_fresh_lists(storage):
    first = FALLBACK(storage)
    first.options.clear()
    assert len(FALLBACK(storage).options) == 5


def test_build_ai_messages_keeps_recent_history():
    history = [{"role": "user", "content": str(i)} for i in range(5)]

    messages = build_ai_messages("next", history, limit=2)

    assert [m["content"] for m in messages[1:]] == ["3", "4", "next"]
    assert messages[0]["role"] == "system"


def test_build_ai_messages_without_history():
    messages = build_ai_messages("next", [], limit=0)

    assert len(messages) == 2


@pytest.mark.parametrize("message, closing", [
    ("safety signal review", "Regular review cycles should be established to monitor emerging safety patterns"),
    ("adverse event reporting", "Maintain comprehensive documentation and follow-up procedures"),
    ("geriatric dosing", "Recommendation: Establish comprehensive medication review protocols"),
    ("compliance checklist", "Essential: Stay current with regulatory updates"),
])
def test_knowledge_base_answers_keep_their_closing_advice(storage, message, closing):
    text = route_message(message, storage).message

    assert text.splitlines()[-1].startswith(closing)


def test_adverse_event_answer_lists_quality_standards(storage):
    text = route_message("adverse event reporting", storage).message

    assert "4. **Quality Standards**" in text
    assert "5. **Regulatory Submission**" in text
