"""Fixed phrase tables and the text heuristics built on them."""

from __future__ import annotations

# Hub messages containing any of these end the conversation
END_PHRASES = (
    "bye",
    "see ya",
    "see you",
    "see you later",
    "seeya",
    "over and out",
    "goodbye",
    "later",
    "gtg",
    "gotta go",
    "talk later",
    "thanks, bye",
    "thanks bye",
)

COMPLETION_MARKER = "complete"

# In-progress markers rewritten to a readable label
KNOWN_MARKERS = {
    "procedure e": "Cleanup pass in progress",
}

IDLE_LABEL = "Idle"
NO_ACTIVITY_LABEL = "No recent activity"


def is_end_phrase(message: str | None) -> bool:
    lower = (message or "").lower()
    return any(phrase in lower for phrase in END_PHRASES)


def is_completion(message: str | None) -> bool:
    return COMPLETION_MARKER in (message or "").lower()


def current_activity_label(message: str | None) -> str:
    """Label for an agent's latest activity message.

    Precedence: completion > known marker > raw text > placeholder.
    Dashboards key their state off these exact strings.
    """
    raw = message or ""
    lower = raw.lower()
    if COMPLETION_MARKER in lower:
        return IDLE_LABEL
    for marker, label in KNOWN_MARKERS.items():
        if marker in lower:
            return label
    return raw or NO_ACTIVITY_LABEL
