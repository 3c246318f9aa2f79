"""Award definition and result models."""

from __future__ import annotations

from enum import Enum

from pydantic import BaseModel, ConfigDict


class AwardType(str, Enum):
    TEAM = "team"
    PLAYER = "player"


class AwardScope(str, Enum):
    GAME = "game"
    SERIES = "series"


class AwardDefinition(BaseModel):
    """Static catalog entry: what the award is and how it is displayed."""

    model_config = ConfigDict(frozen=True)

    id: str
    name: str
    description: str
    type: AwardType
    scope: AwardScope
    important: bool = False
    icon: str


class AwardCandidate(BaseModel):
    """A player or team that ranked first for an award."""

    model_config = ConfigDict(frozen=True)

    winner: str
    team: str
    stat_details: str


class Award(AwardDefinition):
    """An award handed out to a winner, with the stat that earned it."""

    winner: str
    team: str  # the winning team, or the winning player's team
    stat_details: str

    @classmethod
    def from_candidate(cls, definition: AwardDefinition, candidate: AwardCandidate) -> Award:
        return cls(**definition.model_dump(), **candidate.model_dump())
