"""Pydantic schemas for bulk score submissions."""

from typing import List, Optional

from pydantic import BaseModel, ConfigDict, Field, StrictBool, TypeAdapter, conint, conlist, constr

from league.constants import ValidationConstants
from league.data_models.scoring import ScoreEntry


class ScoreEntryPayload(BaseModel):
    """One row of a score sheet as sent by the client.

    Accepts camelCase keys (``golferId``, ``scored36Plus``) and their
    snake_case field names. Golfer ids must be strings; positions must be
    whole numbers between 1 and 100 or null.
    """

    golfer_id: constr(strict=True, strip_whitespace=True, min_length=1) = Field(alias="golferId")
    position: Optional[
        conint(strict=True, ge=ValidationConstants.MIN_POSITION, le=ValidationConstants.MAX_POSITION)
    ] = None
    participated: StrictBool = False
    scored_36_plus: StrictBool = Field(default=False, alias="scored36Plus")

    model_config = ConfigDict(populate_by_name=True, frozen=True)

    def to_entry(self) -> ScoreEntry:
        return ScoreEntry(
            golfer_id=self.golfer_id,
            participated=self.participated,
            position=self.position,
            scored_36_plus=self.scored_36_plus,
        )


# A score sheet holds at least one row
ScoreSheetPayload = TypeAdapter(conlist(ScoreEntryPayload, min_length=1))


def validate_score_sheet(payload) -> List[ScoreEntryPayload]:
    """Validate raw rows. Raises pydantic.ValidationError on malformed input."""
    return ScoreSheetPayload.validate_python(payload)
