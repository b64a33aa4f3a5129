# conversation_engine/intent_classifier.py
"""
Intent Classifier

Keyword-based classification of free-form user input, used once the
scripted options are exhausted.

Rules are checked in order; the first rule with a keyword contained in the
(lowercased) input wins. No scoring, no combination.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Optional, Tuple

from .session_context import Option


@dataclass(frozen=True)
class ClassifiedIntent:
    intent: str
    content: str
    options: Optional[Tuple[Option, ...]]


@dataclass(frozen=True)
class KeywordRule:
    intent: str
    keywords: Tuple[str, ...]
    content: str
    options: Optional[Tuple[Option, ...]]

    def matches(self, text_lower: str) -> bool:
        return any(keyword in text_lower for keyword in self.keywords)

    def to_result(self) -> ClassifiedIntent:
        return ClassifiedIntent(intent=self.intent, content=self.content, options=self.options)


RULES: Tuple[KeywordRule, ...] = (
    KeywordRule(
        intent="pricing",
        keywords=("price", "cost", "how much"),
        content=(
            "This session is fully complimentary (free) for my alumni network. "
            "Just need your time and focus. Interested?"
        ),
        options=(
            Option("Yes, I'm interested", "positive"),
            Option("Tell me more first", "neutral"),
        ),
    ),
    KeywordRule(
        intent="recording",
        keywords=("record", "replay", "watch later"),
        content=(
            "We prioritize live interaction for the best results. But register anyway — "
            "if we do release a recap, you'll be on the list. Shall I send the registration link?"
        ),
        options=(
            Option("Yes, send the link", "positive"),
            Option("No thanks", "negative"),
        ),
    ),
    KeywordRule(
        intent="busy",
        keywords=("busy", "not available", "no time"),
        content=(
            "No worries at all. Shall I text you the details so you can check it "
            "later when you have time?"
        ),
        options=(
            Option("Yes please", "positive"),
            Option("Not interested", "negative"),
        ),
    ),
    KeywordRule(
        intent="help",
        keywords=("help", "what", "?"),
        content=(
            "I'm here to help you with the Final Sprint 2025 Momentum Clinic. "
            "What specific information would be most helpful for you?"
        ),
        options=(
            Option("Tell me about pricing", "neutral"),
            Option("Can I watch the recording?", "neutral"),
            Option("How long is the session?", "neutral"),
        ),
    ),
    KeywordRule(
        intent="affirmative",
        keywords=("yes", "sure", "okay", "ok"),
        content="Great! Let me get you set up. What would be most valuable for you right now?",
        options=(
            Option("Join the webinar", "positive"),
            Option("Schedule a 1-on-1 call", "positive"),
            Option("Get the checklist", "neutral"),
        ),
    ),
    KeywordRule(
        intent="decline",
        keywords=("no", "not interested", "stop"),
        content="I understand. Thanks for your time. If anything changes, feel free to reach out.",
        options=None,
    ),
)

DEFAULT_RESULT = ClassifiedIntent(
    intent="clarify",
    content=(
        "I want to make sure I understand you correctly. Could you tell me more about "
        "what you're looking for? Or feel free to select one of these common questions:"
    ),
    options=(
        Option("Tell me about pricing", "neutral"),
        Option("Can I watch the recording?", "neutral"),
        Option("I'm too busy right now", "neutral"),
        Option("What's included in the program?", "neutral"),
    ),
)


def classify(text: str) -> ClassifiedIntent:
    """
    Map free text to a canned reply. Callers must not pass blank input.
    """
    text_lower = text.lower()
    for rule in RULES:
        if rule.matches(text_lower):
            return rule.to_result()
    return DEFAULT_RESULT
