"""
Accumulators for per-player and per-team award statistics.

These are mutable dataclasses filled in by a single pass over the hand
history (see pepper.stats.tracking) and then read by the award catalog.
Series data is built by merging the per-game records.
"""

from __future__ import annotations

from dataclasses import dataclass, field

from pepper.logic.enums import Trump


@dataclass
class AttemptRecord:
    attempts: int = 0
    successes: int = 0

    @property
    def failures(self) -> int:
        return self.attempts - self.successes

    @property
    def rate(self) -> float:
        return self.successes / self.attempts if self.attempts else 0.0

    def record(self, *, success: bool) -> None:
        self.attempts += 1
        if success:
            self.successes += 1

    def merge(self, other: AttemptRecord) -> None:
        self.attempts += other.attempts
        self.successes += other.successes


@dataclass
class PepperRoundRecord(AttemptRecord):
    """Pepper-round bids, plus how often this player's team set a pepper bidder."""

    opponents_set: int = 0

    def merge(self, other: AttemptRecord) -> None:
        super().merge(other)
        if isinstance(other, PepperRoundRecord):
            self.opponents_set += other.opponents_set


def _trump_records() -> dict[Trump, AttemptRecord]:
    return {trump: AttemptRecord() for trump in Trump}


@dataclass
class PlayerStats:
    name: str
    team: int  # team index 0 or 1
    bids_won: int = 0
    bids_succeeded: int = 0
    bids_failed: int = 0
    trump_bids: dict[Trump, AttemptRecord] = field(default_factory=_trump_records)
    high_value_bids: AttemptRecord = field(default_factory=AttemptRecord)  # 6, Moon, Double Moon
    moon_bids: AttemptRecord = field(default_factory=AttemptRecord)  # Moon, Double Moon
    no_trump_bids: int = 0
    failed_bid_values: list[int] = field(default_factory=list)
    pepper_round_bids: PepperRoundRecord = field(default_factory=PepperRoundRecord)
    non_pepper_successes: int = 0
    non_pepper_four_bid_successes: int = 0
    net_points: int = 0
    points_per_bid: list[int] = field(default_factory=list)
    big_fours: int = 0
    won_final_bid: bool = False

    @property
    def suited_bids(self) -> AttemptRecord:
        """Combined record of every bid that named a trump suit."""
        combined = AttemptRecord()
        for trump, record in self.trump_bids.items():
            if trump != Trump.NO_TRUMP:
                combined.merge(record)
        return combined

    @property
    def failed_no_trump_bids(self) -> int:
        return self.trump_bids[Trump.NO_TRUMP].failures

    def merge(self, other: PlayerStats) -> None:
        self.bids_won += other.bids_won
        self.bids_succeeded += other.bids_succeeded
        self.bids_failed += other.bids_failed
        for trump, record in other.trump_bids.items():
            self.trump_bids.setdefault(trump, AttemptRecord()).merge(record)
        self.high_value_bids.merge(other.high_value_bids)
        self.moon_bids.merge(other.moon_bids)
        self.no_trump_bids += other.no_trump_bids
        self.failed_bid_values.extend(other.failed_bid_values)
        self.pepper_round_bids.merge(other.pepper_round_bids)
        self.non_pepper_successes += other.non_pepper_successes
        self.non_pepper_four_bid_successes += other.non_pepper_four_bid_successes
        self.net_points += other.net_points
        self.points_per_bid.extend(other.points_per_bid)
        self.big_fours += other.big_fours
        self.won_final_bid = self.won_final_bid or other.won_final_bid


@dataclass
class TeamStats:
    name: str
    index: int
    total_defenses: int = 0
    successful_defenses: int = 0
    total_bids: int = 0
    successful_bids: int = 0
    high_value_bids: AttemptRecord = field(default_factory=AttemptRecord)
    points_allowed_to_opponents: int = 0
    max_deficit: int = 0
    min_score_trailing: int = 0  # own score at the moment of max_deficit
    comeback_achieved: bool = False
    longest_streak: int = 0

    @property
    def defensive_success_rate(self) -> float:
        return self.successful_defenses / self.total_defenses if self.total_defenses else 0.0

    @property
    def bid_success_rate(self) -> float:
        return self.successful_bids / self.total_bids if self.total_bids else 0.0

    @property
    def failed_bids(self) -> int:
        return self.total_bids - self.successful_bids

    def merge(self, other: TeamStats) -> None:
        """Add ``other`` into this record. longest_streak is left for the caller."""
        self.total_defenses += other.total_defenses
        self.successful_defenses += other.successful_defenses
        self.total_bids += other.total_bids
        self.successful_bids += other.successful_bids
        self.high_value_bids.merge(other.high_value_bids)
        self.points_allowed_to_opponents += other.points_allowed_to_opponents
        if other.max_deficit > self.max_deficit:
            self.max_deficit = other.max_deficit
            self.min_score_trailing = other.min_score_trailing
        self.comeback_achieved = self.comeback_achieved or other.comeback_achieved


@dataclass
class AwardTrackingData:
    """Everything the award catalog reads for one game or one series."""

    player_stats: dict[str, PlayerStats]
    team_stats: list[TeamStats]
    final_scores: tuple[int, int] = (0, 0)
    winning_team: int | None = None
    # Running totals after each scored hand, starting from (0, 0).
    points_history: list[tuple[int, int]] = field(default_factory=lambda: [(0, 0)])
    hand_scores: list[tuple[int, int]] = field(default_factory=list)
    hands: list[str] = field(default_factory=list)

    @property
    def winning_team_name(self) -> str | None:
        if self.winning_team is None:
            return None
        return self.team_stats[self.winning_team].name

    def team_name_for(self, player: PlayerStats) -> str:
        return self.team_stats[player.team].name

    def players_on(self, team: int) -> list[PlayerStats]:
        return [player for player in self.player_stats.values() if player.team == team]
