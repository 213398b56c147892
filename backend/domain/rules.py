"""Static rule tables: suggestion scoring profiles and the assistant FAQ."""

from __future__ import annotations

import math
import re
from dataclasses import dataclass

from backend.domain.constraints import BonusRule, CapacityTier, EventCategory, SuggestionConfig
from backend.domain.models import (
    IS_INTIMATE_MEETING_SPACE,
    IS_OUTDOOR_SPACE,
    IS_QUIET_STUDY_SPACE,
    SUPPORTS_LARGE_PRESENTATION,
)


FIT_THRESHOLDS = ((70, "perfect"), (50, "good"), (30, "acceptable"))

# Evaluated in order; the first category with a keyword hit wins.
EVENT_CATEGORIES: tuple[EventCategory, ...] = (
    EventCategory(
        name="presentation",
        keywords=("presentation", "demo", "showcase", "pitch", "meeting"),
        preferred_amenities=frozenset({"projector", "wifi"}),
    ),
    EventCategory(
        name="conference",
        keywords=("conference", "seminar", "workshop", "training"),
        preferred_amenities=frozenset({"projector", "wifi", "coffee"}),
    ),
    EventCategory(
        name="study",
        keywords=("study", "research", "reading", "quiet", "focus"),
        preferred_amenities=frozenset({"wifi"}),
    ),
    EventCategory(
        name="social",
        keywords=("party", "celebration", "gathering", "social", "event"),
        preferred_amenities=frozenset({"wifi", "parking"}),
    ),
    EventCategory(
        name="outdoor",
        keywords=("outdoor", "team building", "sports", "activities"),
        preferred_amenities=frozenset({"parking"}),
    ),
    EventCategory(
        name="meeting",
        keywords=("meeting", "discussion", "brainstorm", "planning"),
        preferred_amenities=frozenset({"wifi", "projector"}),
    ),
    EventCategory(
        name="interview",
        keywords=("interview", "hiring", "recruitment"),
        preferred_amenities=frozenset({"wifi"}),
    ),
    EventCategory(
        name="training",
        keywords=("training", "course", "lesson", "education"),
        preferred_amenities=frozenset({"projector", "wifi", "coffee"}),
    ),
)

ADDITIVE_PROFILE = SuggestionConfig(
    name="additive",
    base_score=0,
    capacity_tiers=(
        CapacityTier(0.5, 40, "Plenty of space ({attendees}/{capacity} capacity)"),
        CapacityTier(0.8, 30, "Good fit ({attendees}/{capacity} capacity)"),
        CapacityTier(1.0, 20, "At capacity limit ({attendees}/{capacity})"),
        CapacityTier(math.inf, 0, "Exceeds capacity ({attendees}/{capacity})"),
    ),
    event_categories=EVENT_CATEGORIES,
    amenity_points=10,
    bonus_rules=(
        BonusRule(
            points=25,
            reason="Large presentation space",
            categories=frozenset({"presentation", "conference"}),
            capability=SUPPORTS_LARGE_PRESENTATION,
        ),
        BonusRule(
            points=25,
            reason="Quiet study environment",
            categories=frozenset({"study"}),
            capability=IS_QUIET_STUDY_SPACE,
        ),
        BonusRule(
            points=25,
            reason="Outdoor space for activities",
            categories=frozenset({"outdoor", "social"}),
            capability=IS_OUTDOOR_SPACE,
        ),
        BonusRule(
            points=15,
            reason="Intimate meeting space",
            categories=frozenset({"meeting"}),
            capability=IS_INTIMATE_MEETING_SPACE,
            max_attendees=20,
        ),
    ),
    fit_thresholds=FIT_THRESHOLDS,
)

# Coarser rule set used when the external AI service cannot be reached.
FALLBACK_PROFILE = SuggestionConfig(
    name="fallback",
    base_score=100,
    capacity_tiers=(
        CapacityTier(0.5, 5, "Room has extra space available", inclusive=False),
        CapacityTier(0.8, 20, "Optimal capacity utilization"),
        CapacityTier(1.0, 0, ""),
        CapacityTier(
            math.inf,
            -50,
            "Room capacity ({capacity}) is below required ({attendees})",
        ),
    ),
    event_categories=(),
    amenity_points=0,
    bonus_rules=(
        BonusRule(
            points=15,
            reason="Equipped with presentation tools",
            keywords=("presentation", "conference"),
            amenity="projector",
        ),
        BonusRule(
            points=15,
            reason="Has whiteboard for interactive sessions",
            keywords=("workshop",),
            amenity="whiteboard",
        ),
        BonusRule(
            points=25,
            reason="Perfect for outdoor events",
            keywords=("outdoor",),
            capability=IS_OUTDOOR_SPACE,
        ),
        BonusRule(
            points=20,
            reason="Quiet environment for focused work",
            keywords=("quiet", "study"),
            capability=IS_QUIET_STUDY_SPACE,
        ),
        BonusRule(
            points=15,
            reason="Ideal for large gatherings",
            capability=SUPPORTS_LARGE_PRESENTATION,
            min_attendees=101,
        ),
    ),
    fit_thresholds=FIT_THRESHOLDS,
    default_reason="Standard room for {attendees} attendees",
)

SUGGESTION_PROFILES: dict[str, SuggestionConfig] = {
    ADDITIVE_PROFILE.name: ADDITIVE_PROFILE,
    FALLBACK_PROFILE.name: FALLBACK_PROFILE,
}


@dataclass(frozen=True)
class FaqEntry:
    """Keyword set mapped to a canned response.

    Keywords match lowercased text at the start of a word, so "cancel" also
    covers "cancellation". A trailing space pins the end of the word too:
    "hi " matches "hi" but not "history".

    Responses may reference ``{room_rates}``, ``{room_capacities}`` and
    ``{room_amenities}``; these are rendered from the live room catalog.
    """

    category: str
    keywords: tuple[str, ...]
    response: str

    def matches(self, text: str) -> bool:
        return any(re.search(_keyword_pattern(keyword), text) for keyword in self.keywords)


def _keyword_pattern(keyword: str) -> str:
    pattern = r"\b" + re.escape(keyword.strip())
    return pattern + r"\b" if keyword.endswith(" ") else pattern


FAQ_ENTRIES: tuple[FaqEntry, ...] = (
    FaqEntry(
        category="cancellation",
        keywords=("cancel", "refund"),
        response=(
            "You can cancel a booking up to 24 hours before the scheduled time for a full "
            "refund. Cancellations within 24 hours are subject to a 50% fee, and no-shows "
            "are charged the full amount."
        ),
    ),
    FaqEntry(
        category="payment",
        keywords=("payment", "credit card", "paypal", "pay "),
        response=(
            "We accept all major credit cards, debit cards, bank transfers, and PayPal. "
            "Payment is required at the time of booking."
        ),
    ),
    FaqEntry(
        category="discounts",
        keywords=("discount", "promo", "deal", "cheaper"),
        response=(
            "Discounts: educational institutions 20% off, non-profit organizations 15% off, "
            "and bulk bookings of 10+ hours 10% off. Contact us for discount codes."
        ),
    ),
    FaqEntry(
        category="pricing",
        keywords=("price", "cost", "rate", "fee ", "fees"),
        response="Hourly rates: {room_rates}. All prices include basic amenities.",
    ),
    FaqEntry(
        category="policy",
        keywords=("policy", "policies", "rules"),
        response=(
            "Key policies: bookings must be made at least 24 hours in advance, sessions are "
            "limited to 4 hours, rooms must be left as found, no smoking or vaping, and "
            "capacity limits must be respected."
        ),
    ),
    FaqEntry(
        category="late_arrival",
        keywords=("late ", "arrive"),
        response=(
            "Please arrive on time. If you are more than 15 minutes late your reservation "
            "may be released to other users without refund."
        ),
    ),
    FaqEntry(
        category="advance_booking",
        keywords=("advance", "early"),
        response=(
            "Rooms can be booked up to 90 days in advance. Popular slots fill quickly, so "
            "book early."
        ),
    ),
    FaqEntry(
        category="hours",
        keywords=("hours", "time", "when", "open"),
        response=(
            "Rooms are available Monday through Friday from 9:00 AM to 5:00 PM in 1-hour "
            "slots. Weekend bookings may be available on request."
        ),
    ),
    FaqEntry(
        category="booking",
        keywords=("book", "reserve", "reservation", "how to"),
        response=(
            "To book a room: 1) select a room, 2) choose a date and an available time slot, "
            "3) fill in the booking form with your event details, 4) submit the request. "
            "New requests stay pending until approved."
        ),
    ),
    FaqEntry(
        category="suggestions",
        keywords=("suggest", "recommend"),
        response=(
            "Describe your event (for example 'presentation', 'study session' or 'team "
            "building') and enter the number of attendees; rooms are ranked by capacity "
            "fit, amenities, and event type."
        ),
    ),
    FaqEntry(
        category="smart_booking",
        keywords=("smart", "artificial intelligence", "ai "),
        response=(
            "Smart booking matches your event requirements with the best room, weighing "
            "capacity, amenities, and event type."
        ),
    ),
    FaqEntry(
        category="capacity",
        keywords=("capacity", "people", "how many"),
        response=(
            "Room capacities: {room_capacities}. You will be warned when your group size "
            "exceeds a room's capacity."
        ),
    ),
    FaqEntry(
        category="amenities",
        keywords=("amenities", "amenity", "features", "equipment", "included"),
        response="Room amenities: {room_amenities}.",
    ),
    FaqEntry(
        category="contact",
        keywords=("contact", "help", "support"),
        response=(
            "For additional help call +1 (555) 123-4567 (Mon-Fri, 9 AM - 6 PM) or email "
            "booking@bchs.edu."
        ),
    ),
    FaqEntry(
        category="greeting",
        keywords=("hello", "hey ", "hi "),
        response=(
            "Hello! I can help with room features, booking policies, pricing, and smart "
            "room suggestions."
        ),
    ),
)

FAQ_FALLBACK_RESPONSE = (
    "I'm not sure about that one. I can help with: room information, the booking "
    "process, pricing, cancellation and other policies, payment methods, opening "
    "hours, and room amenities. For anything else contact booking@bchs.edu."
)
