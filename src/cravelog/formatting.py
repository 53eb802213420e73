"""Output formatters for craving records."""

import json

from cravelog.config import DESCRIPTION_ALERT_AT, DESCRIPTION_LIMIT, DESCRIPTION_WARN_AT
from cravelog.models import CravingRecord


def _short_timestamp(record: CravingRecord) -> str:
    """Local time in compact form: '2026-02-23 14:30'."""
    if record.timestamp is None:
        return "----------------"
    return record.timestamp.astimezone().strftime("%Y-%m-%d %H:%M")


def _rating(value: float) -> str:
    return f"{value:g}"


def format_craving_compact(record: CravingRecord) -> str:
    """Single-line compact format for one craving."""
    ts = _short_timestamp(record)
    emotions = f" ({', '.join(e.value for e in record.emotions)})" if record.emotions else ""
    archived = " [archived]" if record.archived else ""
    return (
        f"[{ts}] [{record.id}] intensity {_rating(record.intensity)}"
        f" / resistance {_rating(record.resistance)}{archived} — "
        f"{record.description}{emotions}"
    )


def format_compact(records: list[CravingRecord], empty_message: str = "(no cravings)") -> str:
    """Compact multi-line output for a list of cravings."""
    if not records:
        return empty_message
    return "\n".join(format_craving_compact(r) for r in records)


def craving_to_dict(record: CravingRecord) -> dict:
    return {
        "id": record.id,
        "timestamp": record.timestamp.isoformat() if record.timestamp else None,
        "description": record.description,
        "intensity": record.intensity,
        "resistance": record.resistance,
        "emotions": [e.value for e in record.emotions],
        "archived": record.archived,
    }


def format_json(records: list[CravingRecord]) -> str:
    """JSON array output."""
    return json.dumps([craving_to_dict(r) for r in records], indent=2)


def format_detail(record: CravingRecord) -> str:
    """Multi-line view of a single craving."""
    lines = [
        f"ID:          {record.id}",
        f"Logged:      {_short_timestamp(record)}",
        f"Intensity:   {_rating(record.intensity)}",
        f"Resistance:  {_rating(record.resistance)}",
        f"Emotions:    {', '.join(e.value for e in record.emotions) or 'none'}",
    ]
    if record.archived:
        lines.append("Status:      archived")
    lines.append("")
    lines.append(record.description)
    return "\n".join(lines)


def description_counter(text: str) -> tuple[str, str]:
    """Character counter for the description field.

    Returns the ``"n/300"`` label and a level: ``"ok"``, ``"warn"`` past 250
    characters, ``"alert"`` past 280. Over-long text is never rejected.
    """
    count = len(text)
    if count > DESCRIPTION_ALERT_AT:
        level = "alert"
    elif count > DESCRIPTION_WARN_AT:
        level = "warn"
    else:
        level = "ok"
    return f"{count}/{DESCRIPTION_LIMIT}", level
