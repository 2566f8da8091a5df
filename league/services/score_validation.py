"""
Bulk score entry validation.

Checks the structure of a tournament's score sheet before anything is
written. Rules are applied in order and the first failure is reported:

1. At least one golfer participated
2. The participant count selects a tier: 1-10, 11-19 or 20+
3. The tier's podium places are assigned (1st / 1st+2nd / 1st+2nd+3rd)
4. No podium place (1st, 2nd, 3rd) is given to two participants

Positions on non-participating rows are ignored. A golfer listed more than
once counts as one participant; request payloads and stored sheets reject
such repeats outright.
"""

import logging
from typing import Any, Iterable, List, Mapping, Optional, Sequence

from pydantic import ValidationError

from league.constants import ValidationConstants
from league.data_models.scoring import ScoreEntry, ValidationResult
from league.schemas.scores import validate_score_sheet
from league.utils.league_exceptions import ScoreInputError

logger = logging.getLogger(__name__)

TIER_SMALL = "1-10"
TIER_MEDIUM = "11-19"
TIER_LARGE = "20+"

REQUIRED_PODIUM = {
    TIER_SMALL: (1,),
    TIER_MEDIUM: (1, 2),
    TIER_LARGE: (1, 2, 3),
}

TIER_MESSAGES = {
    TIER_SMALL: "With 1-10 golfers, you must assign a 1st place finish",
    TIER_MEDIUM: "With 11-19 golfers, you must assign both 1st and 2nd place finishes",
    TIER_LARGE: "With 20+ golfers, you must assign 1st, 2nd, and 3rd place finishes",
}

NO_PARTICIPANTS_MESSAGE = "At least one golfer must have participated"
DUPLICATE_MESSAGE = "Duplicate positions found. Each position (1st, 2nd, 3rd) can only be assigned once"


class ScoreEntryValidator:
    """Validates bulk score submissions. Pure; never touches storage."""
    
    @staticmethod
    def tier_for(participant_count: int) -> str:
        if participant_count <= ValidationConstants.SMALL_FIELD_MAX:
            return TIER_SMALL
        if participant_count <= ValidationConstants.MEDIUM_FIELD_MAX:
            return TIER_MEDIUM
        return TIER_LARGE
    
    @staticmethod
    def validate(entries: Iterable[ScoreEntry]) -> ValidationResult:
        # A golfer listed twice is one participant; the later row wins
        rows_by_golfer = {entry.golfer_id: entry for entry in entries}
        participants = [entry for entry in rows_by_golfer.values() if entry.participated]
        
        if not participants:
            return ValidationResult.fail(NO_PARTICIPANTS_MESSAGE)
        
        count = len(participants)
        tier = ScoreEntryValidator.tier_for(count)
        assigned = {entry.position for entry in participants}
        
        missing = [p for p in REQUIRED_PODIUM[tier] if p not in assigned]
        if missing:
            logger.debug(f"Score sheet with {count} participants is missing positions {missing}")
            return ValidationResult.fail(TIER_MESSAGES[tier], count, tier)
        
        podium = [
            entry.position for entry in participants
            if entry.position in ValidationConstants.PODIUM_POSITIONS
        ]
        if len(podium) != len(set(podium)):
            return ValidationResult.fail(DUPLICATE_MESSAGE, count, tier)
        
        return ValidationResult.ok(count, tier)


def find_repeated_golfer(entries: Iterable[ScoreEntry]) -> Optional[int]:
    """Index of the first row whose golfer already appeared earlier, or None."""
    seen = set()
    for index, entry in enumerate(entries):
        if entry.golfer_id in seen:
            return index
        seen.add(entry.golfer_id)
    return None


def raise_if_repeated_golfer(entries: List[ScoreEntry]):
    index = find_repeated_golfer(entries)
    if index is not None:
        raise ScoreInputError(index, f"golfer {entries[index].golfer_id} appears more than once")


def parse_score_entries(payload: Sequence[Mapping[str, Any]]) -> List[ScoreEntry]:
    """
    Convert raw request rows into ScoreEntry records.
    
    Accepts both camelCase (golferId) and snake_case (golfer_id) keys.
    
    Raises:
        ScoreInputError: If the payload is not a non-empty list of valid rows,
            or lists a golfer more than once
    """
    if isinstance(payload, Mapping):
        raise ScoreInputError(0, "scores must be a list of entries")
    
    try:
        rows = validate_score_sheet(payload)
    except ValidationError as e:
        error = e.errors()[0]
        location = error.get('loc', ())
        index = location[0] if location and isinstance(location[0], int) else 0
        field = next((str(part) for part in location[1:] if isinstance(part, str)), None)
        reason = f"{field}: {error['msg']}" if field else error['msg']
        raise ScoreInputError(index, reason)
    
    entries = [row.to_entry() for row in rows]
    raise_if_repeated_golfer(entries)
    return entries
