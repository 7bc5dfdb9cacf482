"""Data loader for match results."""

import json
import logging
import re
from typing import Dict, List, Optional

import pandas as pd

from ..models.match import BLUE, RED, Match
from .validators import validate_match_record, validate_matches_payload

logger = logging.getLogger(__name__)

_TEAM_COLUMN = re.compile(r"^(red|blue)(\d+)$")
DEFAULT_EVENT = ""


def _team_columns(columns, alliance: str) -> List[str]:
    found = []
    for column in columns:
        m = _TEAM_COLUMN.match(str(column).strip().lower())
        if m and m.group(1) == alliance:
            found.append((int(m.group(2)), column))
    return [column for _, column in sorted(found)]


def _is_missing(value) -> bool:
    return value is None or (isinstance(value, float) and pd.isna(value))


def _number(value) -> Optional[float]:
    if _is_missing(value):
        return None
    try:
        number = float(value)
    except (TypeError, ValueError):
        return None
    return None if pd.isna(number) else number


def _team_id(value) -> Optional[int]:
    if _is_missing(value) or isinstance(value, bool):
        return None
    try:
        return int(value)
    except (TypeError, ValueError):
        return None


def _team_list(teams) -> Optional[List[int]]:
    if not isinstance(teams, (list, tuple)):
        return None
    ids = [_team_id(t) for t in teams if not _is_missing(t)]
    return None if None in ids else ids


def match_from_record(record: Dict) -> Optional[Match]:
    """
    Convert a raw match record into a Match.

    Records either list ``red_teams``/``blue_teams`` directly or carry a
    ``participants`` list of ``{team_id, alliance, on_field, dq}`` entries.
    Participants who were off the field or disqualified are left out.

    Args:
        record: Raw match dictionary

    Returns:
        Match, or None when a score is missing, a team list is malformed or
        an alliance has no teams
    """
    if not isinstance(record, dict):
        logger.debug("Skipping match record of type %s", type(record).__name__)
        return None

    match_id = record.get("match_id")
    if _is_missing(match_id):
        match_id = None

    if "participants" in record:
        red, blue = [], []
        participants = record.get("participants") or []
        if not isinstance(participants, list):
            logger.debug("Skipping match %s: participants is not a list", match_id)
            return None
        for participant in participants:
            if not isinstance(participant, dict):
                logger.debug("Skipping match %s: malformed participant %r", match_id, participant)
                return None
            if not participant.get("on_field", True) or participant.get("dq", False):
                continue
            team = _team_id(participant.get("team_id"))
            if team is None:
                logger.debug("Skipping match %s: participant has no team_id", match_id)
                return None
            alliance = str(participant.get("alliance", "")).strip().lower()
            if alliance == RED:
                red.append(team)
            elif alliance == BLUE:
                blue.append(team)
    else:
        red = _team_list(record.get("red_teams") or [])
        blue = _team_list(record.get("blue_teams") or [])
        if red is None or blue is None:
            logger.debug("Skipping match %s: team lists must be lists of team numbers", match_id)
            return None

    red_score = _number(record.get("red_score"))
    blue_score = _number(record.get("blue_score"))
    if red_score is None or blue_score is None:
        logger.debug("Skipping match %s: missing alliance score", match_id)
        return None
    if not red or not blue:
        logger.debug("Skipping match %s: an alliance has no eligible teams", match_id)
        return None

    red_penalties = _number(record.get("red_penalties"))
    blue_penalties = _number(record.get("blue_penalties"))
    return Match(
        red_teams=red,
        blue_teams=blue,
        red_score=red_score,
        blue_score=blue_score,
        red_penalties=red_penalties or 0.0,
        blue_penalties=blue_penalties or 0.0,
        match_id=None if match_id is None else str(match_id),
    )


def _matches_from_records(records) -> List[Match]:
    matches = []
    for idx, record in enumerate(records if isinstance(records, list) else []):
        problems = validate_match_record(record, f"match[{idx}]")
        if problems:
            logger.debug("Skipping %s", "; ".join(problems))
            continue
        match = match_from_record(record)
        if match is not None:
            matches.append(match)
    return matches


class DataLoader:
    """Loads match results from CSV and JSON files."""

    @staticmethod
    def load_matches_from_csv(file_path: str) -> Dict[str, List[Match]]:
        """
        Load matches from a CSV file.

        Expected columns: red1..redN, blue1..blueN, red_score, blue_score,
        and optionally red_penalties, blue_penalties, event, match_id.

        Args:
            file_path: Path to CSV file

        Returns:
            Event code -> matches (one unnamed event when there is no event column)
        """
        df = pd.read_csv(file_path)
        df.columns = [str(c).strip().lower() for c in df.columns]

        missing = [c for c in ("red_score", "blue_score") if c not in df.columns]
        red_columns = _team_columns(df.columns, RED)
        blue_columns = _team_columns(df.columns, BLUE)
        if not red_columns or not blue_columns:
            missing.append("red1/blue1 team columns")
        if missing:
            raise ValueError(f"{file_path} is missing columns: {', '.join(missing)}")

        events: Dict[str, List[Match]] = {}
        for row in df.to_dict(orient="records"):
            record = {
                "match_id": row.get("match_id"),
                "red_teams": [row[c] for c in red_columns],
                "blue_teams": [row[c] for c in blue_columns],
                "red_score": row.get("red_score"),
                "blue_score": row.get("blue_score"),
                "red_penalties": row.get("red_penalties"),
                "blue_penalties": row.get("blue_penalties"),
            }
            match = match_from_record(record)
            if match is None:
                continue
            event = row.get("event", DEFAULT_EVENT)
            event = DEFAULT_EVENT if _is_missing(event) else str(event)
            events.setdefault(event, []).append(match)

        logger.info("Loaded %d matches across %d events from %s",
                    sum(len(m) for m in events.values()), len(events), file_path)
        return events

    @staticmethod
    def load_matches_from_json(file_path: str, strict: bool = False) -> Dict[str, List[Match]]:
        """
        Load matches from a JSON file.

        Accepts ``{"events": {code: [match, ...]}}`` or ``{"matches": [...]}``.

        Args:
            file_path: Path to JSON file
            strict: Raise on any schema error instead of skipping bad records

        Returns:
            Event code -> matches
        """
        with open(file_path, 'r') as f:
            data = json.load(f)
        if not isinstance(data, dict):
            raise ValueError(f"{file_path} must contain a JSON object")

        errors = validate_matches_payload(data)
        if errors:
            if strict:
                raise ValueError(f"Invalid match payload in {file_path}: " + "; ".join(errors[:5]))
            logger.warning("%d schema problems in %s; affected matches may be skipped", len(errors), file_path)

        if isinstance(data.get("events"), dict):
            return {str(code): _matches_from_records(records) for code, records in data["events"].items()}
        return {DEFAULT_EVENT: _matches_from_records(data.get("matches", []))}

    @staticmethod
    def load_matches(file_path: str, strict: bool = False) -> Dict[str, List[Match]]:
        """Load matches, choosing the reader from the file extension."""
        if str(file_path).lower().endswith(".csv"):
            return DataLoader.load_matches_from_csv(file_path)
        return DataLoader.load_matches_from_json(file_path, strict=strict)

    @staticmethod
    def save_rankings_to_json(payload: Dict, file_path: str) -> None:
        """
        Save rankings to JSON file.

        Args:
            payload: Serializable rankings report
            file_path: Output file path
        """
        with open(file_path, 'w') as f:
            json.dump(payload, f, indent=2)

    @staticmethod
    def create_sample_data(output_path: str) -> None:
        """
        Create sample match data for testing.

        Args:
            output_path: Path to save sample data
        """
        qualification = [
            ([1001, 1002], [1003, 1004], 120, 95, 10, 0),
            ([1005, 1006], [1001, 1003], 80, 130, 0, 15),
            ([1002, 1004], [1005, 1006], 105, 70, 5, 5),
            ([1003, 1005], [1002, 1006], 110, 90, 0, 10),
            ([1004, 1006], [1001, 1005], 75, 125, 20, 0),
            ([1001, 1004], [1002, 1003], 118, 112, 0, 0),
            ([1002, 1005], [1004, 1006], 98, 84, 0, 12),
            ([1003, 1006], [1001, 1002], 101, 127, 5, 0),
        ]
        sample_data = {
            "events": {
                "SAMPLE1": [
                    {
                        "match_id": f"Q{i + 1}",
                        "red_teams": red,
                        "blue_teams": blue,
                        "red_score": red_score,
                        "blue_score": blue_score,
                        "red_penalties": red_pen,
                        "blue_penalties": blue_pen,
                    }
                    for i, (red, blue, red_score, blue_score, red_pen, blue_pen) in enumerate(qualification)
                ]
            }
        }

        with open(output_path, 'w') as f:
            json.dump(sample_data, f, indent=2)
