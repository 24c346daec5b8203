"""Channel identity: participant parsing and canonical channel names."""

from __future__ import annotations

from collections.abc import Iterable

HUB_IDENTITY = "product-owner"
DELIMITER = "__"


def parse_participants(raw: str) -> list[str]:
    """Split a channel name into participant ids.

    A name without the delimiter is a single-participant channel.
    """
    if DELIMITER not in raw:
        return [raw]
    return [part.strip() for part in raw.split(DELIMITER) if part.strip()]


def canonicalize(participants: Iterable[str], hub: str = HUB_IDENTITY) -> str:
    """Return the canonical channel name, or "" for an empty participant set.

    The hub identity always leads when present; otherwise participants
    are sorted lexicographically.
    """
    unique = {p for p in participants if p}
    if not unique:
        return ""
    if hub in unique:
        return DELIMITER.join([hub, *sorted(unique - {hub})])
    return DELIMITER.join(sorted(unique))


def normalize_channel(raw: str, hub: str = HUB_IDENTITY) -> str:
    return canonicalize(parse_participants(raw), hub) or raw


def hub_channel(agent_id: str, hub: str = HUB_IDENTITY) -> str:
    """Canonical channel between the hub and one agent."""
    return canonicalize([hub, agent_id], hub)


def other_participant(participants: list[str], hub: str = HUB_IDENTITY) -> str:
    """The non-hub side of a hub conversation (the hub itself for a self channel)."""
    return next((p for p in participants if p != hub), hub)


def validate_name(name: str) -> str:
    """Reject ids that would escape the log directory when used as a file name."""
    if not name or name.startswith(".") or "/" in name or "\\" in name or "\x00" in name:
        raise ValueError(f"Invalid name: {name!r}")
    return name
