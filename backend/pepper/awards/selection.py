"""
Award selection for finished games and series.

Every catalog entry is evaluated. Entries with a winner are ordered with the
important ones first (each group in catalog order) and the list is capped
by the settings. Ties between candidates are broken with the injected
random.Random so a seeded generator gives reproducible picks.
"""

from __future__ import annotations

import random
from typing import TYPE_CHECKING

import structlog

from pepper.awards.catalog import GAME_AWARDS, SERIES_AWARDS
from pepper.awards.models import Award
from pepper.logic.settings import GameSettings

if TYPE_CHECKING:
    from collections.abc import Sequence

    from pepper.awards.catalog import CatalogEntry
    from pepper.stats.models import AwardTrackingData

logger = structlog.get_logger()


def evaluate_award(entry: CatalogEntry, data: AwardTrackingData, rng: random.Random) -> Award | None:
    """Return the award with its winner, or None when nobody qualifies."""
    candidates = entry.evaluate(data)
    if not candidates:
        return None
    candidate = candidates[0] if len(candidates) == 1 else rng.choice(candidates)
    return Award.from_candidate(entry.definition, candidate)


def select_awards(
    entries: Sequence[CatalogEntry],
    data: AwardTrackingData,
    *,
    rng: random.Random,
    limit: int,
) -> list[Award]:
    awarded = [award for entry in entries if (award := evaluate_award(entry, data, rng)) is not None]
    important = [award for award in awarded if award.important]
    others = [award for award in awarded if not award.important]
    selected = (important + others)[:limit]
    logger.debug(
        "awards selected",
        qualified=[award.id for award in awarded],
        selected=[award.id for award in selected],
    )
    return selected


def select_game_awards(
    data: AwardTrackingData,
    *,
    rng: random.Random | None = None,
    settings: GameSettings | None = None,
) -> list[Award]:
    settings = settings if settings is not None else GameSettings()
    return select_awards(
        GAME_AWARDS,
        data,
        rng=rng if rng is not None else random.Random(),  # noqa: S311
        limit=settings.max_game_awards,
    )


def select_series_awards(
    data: AwardTrackingData,
    *,
    rng: random.Random | None = None,
    settings: GameSettings | None = None,
) -> list[Award]:
    settings = settings if settings is not None else GameSettings()
    return select_awards(
        SERIES_AWARDS,
        data,
        rng=rng if rng is not None else random.Random(),  # noqa: S311
        limit=settings.max_series_awards,
    )
