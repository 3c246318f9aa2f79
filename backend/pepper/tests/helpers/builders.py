"""Shared rosters and a deterministic clock for scorer tests."""

from __future__ import annotations

from datetime import UTC, datetime, timedelta

PLAYERS = ("Alice", "Bob", "Charlie", "Diana")
TEAMS = ("Team 1", "Team 2")
START_TIME = datetime(2026, 1, 1, 12, 0, tzinfo=UTC)

# With dealer 4 opening, the four pepper rounds are bid by seats 1, 2, 3, 4
# and start "41P", "12P", "23P", "34P".
OPENING_DEALER = 4

# A non-clubs pepper opening in which every bidder makes 4 and every
# defending team takes 2 tricks: both teams end it on 12.
PEPPER_OPENING = ("41PHP2", "12PSP2", "23PDP2", "34PNP2")

# Team 1 (seats 1 and 3) makes three Double Moons after the pepper opening:
# 12 + 3 * 14 = 54 against 12 - 3 * 14 = -30. The deal ends on seat 2.
TEAM_ONE_ROUT = ("41DNP0", "11DNP0", "21DNP0")

# The next game of a series after PEPPER_OPENING + TEAM_ONE_ROUT: seat 3
# deals first and Alice bids every Double Moon again.
SECOND_GAME = ("34PHP2", "41PHP2", "12PSP2", "23PDP2", "31DNP0", "41DNP0", "11DNP0")


class FixedClock:
    """Deterministic clock advancing one minute per call."""

    def __init__(self, start: datetime = START_TIME) -> None:
        self._now = start

    def __call__(self) -> datetime:
        now = self._now
        self._now += timedelta(minutes=1)
        return now
