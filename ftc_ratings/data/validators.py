"""Schema validators for match payloads."""

from __future__ import annotations

import math
from typing import Dict, List, Optional

_ALLIANCES = {"red", "blue"}


def _to_float(value) -> Optional[float]:
    if value is None:
        return None
    try:
        return float(value)
    except (TypeError, ValueError):
        return None


def _validate_team_ids(teams, label: str) -> List[str]:
    if not isinstance(teams, list) or not teams:
        return [f"{label} must be a non-empty list"]
    errors = []
    for team in teams:
        if isinstance(team, bool) or not isinstance(team, int):
            errors.append(f"{label} contains non-integer team id {team!r}")
    if len(set(t for t in teams if isinstance(t, int))) != len(teams):
        errors.append(f"{label} lists a team more than once")
    return errors


def validate_match_record(record: Dict, label: str = "match") -> List[str]:
    """Check a single match record; returns human-readable errors."""
    if not isinstance(record, dict):
        return [f"{label} must be an object"]

    errors: List[str] = []
    if "participants" in record:
        participants = record["participants"]
        if not isinstance(participants, list) or not participants:
            errors.append(f"{label}.participants must be a non-empty list")
        else:
            for idx, participant in enumerate(participants):
                if not isinstance(participant, dict):
                    errors.append(f"{label}.participants[{idx}] must be an object")
                    continue
                team = participant.get("team_id")
                if isinstance(team, bool) or not isinstance(team, int):
                    errors.append(f"{label}.participants[{idx}] has non-integer team_id {team!r}")
                    continue
                alliance = str(participant.get("alliance", "")).lower()
                if alliance not in _ALLIANCES:
                    errors.append(f"{label}.participants[{idx}] has invalid alliance {alliance!r}")
    else:
        red = record.get("red_teams")
        blue = record.get("blue_teams")
        errors.extend(_validate_team_ids(red, f"{label}.red_teams"))
        errors.extend(_validate_team_ids(blue, f"{label}.blue_teams"))
        if isinstance(red, list) and isinstance(blue, list):
            both = set(red) & set(blue)
            if both:
                errors.append(f"{label} has teams on both alliances: {sorted(both)}")

    for field in ("red_score", "blue_score"):
        value = _to_float(record.get(field))
        if value is None or not math.isfinite(value):
            errors.append(f"{label}.{field} must be a finite number")
    for field in ("red_penalties", "blue_penalties"):
        if field in record:
            value = _to_float(record[field])
            if value is None or not math.isfinite(value) or value < 0:
                errors.append(f"{label}.{field} must be a non-negative number")
    return errors


def validate_matches_payload(payload: Dict) -> List[str]:
    """Validate a ``{"matches": [...]}`` or ``{"events": {code: [...]}}`` payload."""
    if not isinstance(payload, dict):
        return ["payload must be an object"]

    if "events" in payload:
        events = payload["events"]
        if not isinstance(events, dict) or not events:
            return ["events payload must include a non-empty 'events' object"]
        groups = {f"events[{code}]": records for code, records in events.items()}
    else:
        groups = {"matches": payload.get("matches")}

    errors: List[str] = []
    for label, records in groups.items():
        if not isinstance(records, list) or not records:
            errors.append(f"{label} must be a non-empty list")
            continue
        for idx, record in enumerate(records):
            errors.extend(validate_match_record(record, f"{label}[{idx}]"))
    return errors
