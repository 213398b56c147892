from __future__ import annotations

import pytest

from backend.domain.errors import ValidationError
from backend.domain.rules import FAQ_FALLBACK_RESPONSE
from backend.repository.room_catalog import RoomCatalog, build_room
from backend.services.assistant_service import AssistantService, answer


@pytest.fixture()
def assistant() -> AssistantService:
    return AssistantService(catalog=RoomCatalog.with_sample_rooms())


def test_first_matching_topic_wins(assistant: AssistantService) -> None:
    # "cancel" is checked before "price".
    reply = assistant.answer("What is the cancellation price?")
    assert reply.startswith("You can cancel a booking up to 24 hours")


def test_pricing_is_rendered_from_the_catalog(assistant: AssistantService) -> None:
    reply = assistant.answer("How much does it cost?")
    assert "Auditorium $150/hour" in reply
    assert "Library $75/hour" in reply
    assert "Grounds $200/hour" in reply


def test_room_name_returns_room_details(assistant: AssistantService) -> None:
    reply = assistant.answer("Tell me about the library")
    assert "Capacity: 50 people." in reply
    assert "Quiet Zone" in reply


def test_greeting_matches_at_the_end_of_the_query(assistant: AssistantService) -> None:
    assert assistant.answer("hi").startswith("Hello!")


def test_unmatched_query_returns_help_message(assistant: AssistantService) -> None:
    assert assistant.answer("xyzzy") == FAQ_FALLBACK_RESPONSE


def test_matching_is_case_insensitive(assistant: AssistantService) -> None:
    assert assistant.answer("REFUND please") == assistant.answer("refund please")


def test_chat_without_ai_backend_uses_keyword_table(assistant: AssistantService) -> None:
    assert assistant.chat("what are your policies?").startswith("Key policies")
    assert assistant.answer_question("Which payment methods?").startswith("We accept")


def test_blank_messages_are_rejected(assistant: AssistantService) -> None:
    with pytest.raises(ValidationError):
        assistant.chat("   ")
    with pytest.raises(ValidationError):
        assistant.answer_question("")


def test_room_descriptions_with_braces_are_rendered_verbatim() -> None:
    room = build_room(room_id="lab", name="Lab", capacity=10, description="Robotics {beta}")
    service = AssistantService(catalog=RoomCatalog([room]))
    assert "Robotics {beta}" in service.answer("lab")


def test_categories_list_room_entries_first(assistant: AssistantService) -> None:
    assert assistant.categories[0] == "room_info"
    assert "greeting" in assistant.categories


def test_plain_answer_keeps_unknown_placeholders() -> None:
    assert "{room_rates}" in answer("price")


# --- keyword boundaries ---

@pytest.mark.parametrize(
    "query",
    ["Can you translate this?", "Keep them separate", "sushi for lunch", "history of the school"],
)
def test_keywords_inside_other_words_do_not_match(assistant: AssistantService, query: str) -> None:
    assert assistant.answer(query) == FAQ_FALLBACK_RESPONSE


def test_whole_word_keywords_still_match(assistant: AssistantService) -> None:
    assert assistant.answer("I might arrive late").startswith("Please arrive on time")
    assert assistant.answer("is there an ai tool").startswith("Smart booking")
    assert assistant.answer("hi there").startswith("Hello!")
    assert assistant.answer("What are the fees?").startswith("Hourly rates")


def test_keywords_match_word_prefixes(assistant: AssistantService) -> None:
    assert assistant.answer("Cancellations?").startswith("You can cancel")
    assert assistant.answer("booking steps").startswith("To book a room")
