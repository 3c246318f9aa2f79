"""
Fixed catalog of game and series awards.

Each entry pairs an AwardDefinition with an evaluator. An evaluator returns
every candidate tied for first place among those who qualify, or an empty
list when nobody does; the selector breaks ties. Defensive Fortress is the
exception and returns nothing on a tie.
"""

from __future__ import annotations

import statistics
from dataclasses import dataclass
from typing import TYPE_CHECKING, TypeVar

from pepper.awards.models import AwardCandidate, AwardDefinition, AwardScope, AwardType
from pepper.logic.enums import TRUMP_NAMES

if TYPE_CHECKING:
    from collections.abc import Callable, Iterable

    from pepper.stats.models import AwardTrackingData, PlayerStats, TeamStats

    Evaluator = Callable[[AwardTrackingData], list[AwardCandidate]]

_Ranked = TypeVar("_Ranked")

# Game thresholds
MIN_FORTRESS_SETS = 4
MIN_SPECIALIST_BIDS = 3
MIN_SUITED_BIDS = 3
MIN_HONEYPOT_BIG_FOURS = 2
MIN_SAFE_SUCCESSES = 5
SAFE_FOUR_SHARE = 0.8
MIN_NO_TRUMP_BIDS = 4
NO_TRUMP_SHARE = 0.5
FOOTPRINTS_SHARE = 0.75
FOOTPRINTS_PARTNER_SHARE = 0.25
MIN_MOON_SUCCESSES = 2
MIN_OVERREACHING_FAILURES = 2

# Series thresholds
MIN_SERIES_DEFENSES = 5
MIN_STREAK = 2
MIN_SUIT_BIDS = 4
MIN_MOON_FAILURES = 3
MIN_GAMBLING_FAILURES = 3
GAMBLING_MAX_BID = 5
MIN_FEAST_BIDS = 4


@dataclass(frozen=True)
class CatalogEntry:
    definition: AwardDefinition
    evaluate: Evaluator

    @property
    def id(self) -> str:
        return self.definition.id


def _plural(count: int, word: str) -> str:
    return f"{count} {word}" if count == 1 else f"{count} {word}s"


def _percent(rate: float) -> str:
    return f"{round(rate * 100)}%"


def _leaders(items: Iterable[_Ranked], key: Callable[[_Ranked], float]) -> list[_Ranked]:
    """Return every item sharing the highest key."""
    pool = list(items)
    if not pool:
        return []
    best = max(key(item) for item in pool)
    return [item for item in pool if key(item) == best]


def _team(team: TeamStats, details: str) -> AwardCandidate:
    return AwardCandidate(winner=team.name, team=team.name, stat_details=details)


def _player(data: AwardTrackingData, player: PlayerStats, details: str) -> AwardCandidate:
    return AwardCandidate(winner=player.name, team=data.team_name_for(player), stat_details=details)


def _opponent_of(data: AwardTrackingData, team: TeamStats) -> TeamStats:
    return data.team_stats[1 - team.index]


# ----------------------------------------------------------------------
# Game awards: teams
# ----------------------------------------------------------------------


def _defensive_fortress(data: AwardTrackingData) -> list[AwardCandidate]:
    if len(data.team_stats) < 2:  # noqa: PLR2004
        return []
    sets = {team.index: _opponent_of(data, team).failed_bids for team in data.team_stats}
    qualifying = [team for team in data.team_stats if sets[team.index] >= MIN_FORTRESS_SETS]
    leaders = _leaders(qualifying, lambda team: sets[team.index])
    if len(leaders) != 1:
        return []
    team = leaders[0]
    return [_team(team, f"{team.name} set their opponents {sets[team.index]} times")]


def _bid_specialists(data: AwardTrackingData) -> list[AwardCandidate]:
    qualifying = [team for team in data.team_stats if team.total_bids >= MIN_SPECIALIST_BIDS]
    leaders = _leaders(qualifying, lambda team: team.bid_success_rate)
    return [
        _team(
            team,
            f"{team.name} made {team.successful_bids} of {team.total_bids} bids ({_percent(team.bid_success_rate)})",
        )
        for team in leaders
        if team.bid_success_rate > 0
    ]


def _remember_the_time(data: AwardTrackingData) -> list[AwardCandidate]:
    return [
        _team(team, f"{team.name} came back from {team.max_deficit} points down")
        for team in data.team_stats
        if team.comeback_achieved
    ]


def _helping_hand(data: AwardTrackingData) -> list[AwardCandidate]:
    leaders = _leaders(data.team_stats, lambda team: team.points_allowed_to_opponents)
    return [
        _team(team, f"{team.name} gave up {team.points_allowed_to_opponents} points to their opponents")
        for team in leaders
        if team.points_allowed_to_opponents > 0
    ]


# ----------------------------------------------------------------------
# Game awards: players
# ----------------------------------------------------------------------


def _trump_master(data: AwardTrackingData) -> list[AwardCandidate]:
    qualifying = [p for p in data.player_stats.values() if p.suited_bids.attempts >= MIN_SUITED_BIDS]
    leaders = _leaders(qualifying, lambda p: p.suited_bids.rate)
    candidates = []
    for player in leaders:
        suited = player.suited_bids
        if suited.rate > 0:
            details = f"{player.name} made {suited.successes} of {suited.attempts} suited bids"
            candidates.append(_player(data, player, details))
    return candidates


def _bid_royalty(data: AwardTrackingData) -> list[AwardCandidate]:
    leaders = _leaders(data.player_stats.values(), lambda p: p.bids_won)
    return [
        _player(data, player, f"{player.name} won {_plural(player.bids_won, 'bid')}")
        for player in leaders
        if player.bids_won > 0
    ]


def _clutch_player(data: AwardTrackingData) -> list[AwardCandidate]:
    return [
        _player(data, player, f"{player.name} made the bid that clinched the game")
        for player in data.player_stats.values()
        if player.won_final_bid
    ]


def _honeypot(data: AwardTrackingData) -> list[AwardCandidate]:
    qualifying = [p for p in data.player_stats.values() if p.big_fours >= MIN_HONEYPOT_BIG_FOURS]
    leaders = _leaders(qualifying, lambda p: p.big_fours)
    return [_player(data, player, f"{player.name} had {player.big_fours} Big Fours") for player in leaders]


def _four_share(player: PlayerStats) -> float:
    return player.non_pepper_four_bid_successes / player.non_pepper_successes if player.non_pepper_successes else 0.0


def _playing_it_safe(data: AwardTrackingData) -> list[AwardCandidate]:
    qualifying = [
        p
        for p in data.player_stats.values()
        if p.non_pepper_successes >= MIN_SAFE_SUCCESSES and _four_share(p) >= SAFE_FOUR_SHARE
    ]
    leaders = _leaders(qualifying, _four_share)
    return [
        _player(
            data,
            player,
            f"{player.name} made {player.non_pepper_four_bid_successes} of "
            f"{player.non_pepper_successes} successful bids at 4",
        )
        for player in leaders
    ]


def _no_trump_share(player: PlayerStats) -> float:
    return player.no_trump_bids / player.bids_won if player.bids_won else 0.0


def _no_trump_no_problem(data: AwardTrackingData) -> list[AwardCandidate]:
    qualifying = [
        p
        for p in data.player_stats.values()
        if p.bids_won >= MIN_NO_TRUMP_BIDS and _no_trump_share(p) >= NO_TRUMP_SHARE
    ]
    leaders = _leaders(qualifying, _no_trump_share)
    return [
        _player(data, player, f"{player.name} called no trump on {player.no_trump_bids} of {player.bids_won} bids")
        for player in leaders
    ]


def _footprints_in_the_sand(data: AwardTrackingData) -> list[AwardCandidate]:
    if data.winning_team is None:
        return []
    teammates = data.players_on(data.winning_team)
    combined = sum(abs(p.net_points) for p in teammates)
    if combined == 0:
        return []
    candidates = []
    for player in teammates:
        share = abs(player.net_points) / combined
        partners_share = max((abs(p.net_points) / combined for p in teammates if p is not player), default=0.0)
        if share >= FOOTPRINTS_SHARE and partners_share <= FOOTPRINTS_PARTNER_SHARE:
            details = f"{player.name} accounted for {_percent(share)} of their team's bid points"
            candidates.append(_player(data, player, details))
    return candidates


def _shoot_for_the_moons(data: AwardTrackingData) -> list[AwardCandidate]:
    qualifying = [p for p in data.player_stats.values() if p.moon_bids.successes >= MIN_MOON_SUCCESSES]
    leaders = _leaders(qualifying, lambda p: p.moon_bids.successes)
    return [_player(data, player, f"{player.name} made {player.moon_bids.successes} Moon bids") for player in leaders]


def _average_failed_bid(player: PlayerStats) -> float:
    return statistics.fmean(player.failed_bid_values) if player.failed_bid_values else 0.0


def _overreaching(data: AwardTrackingData) -> list[AwardCandidate]:
    qualifying = [p for p in data.player_stats.values() if len(p.failed_bid_values) >= MIN_OVERREACHING_FAILURES]
    leaders = _leaders(qualifying, _average_failed_bid)
    return [
        _player(data, player, f"{player.name} averaged {_average_failed_bid(player):g} points on failed bids")
        for player in leaders
    ]


def _false_confidence(data: AwardTrackingData) -> list[AwardCandidate]:
    qualifying = [p for p in data.player_stats.values() if p.failed_no_trump_bids > 0]
    leaders = _leaders(qualifying, lambda p: p.failed_no_trump_bids)
    return [
        _player(
            data,
            player,
            f"{player.name} went set on {_plural(player.failed_no_trump_bids, 'no-trump bid')}",
        )
        for player in leaders
    ]


# ----------------------------------------------------------------------
# Series awards
# ----------------------------------------------------------------------


def _defensive_specialists(data: AwardTrackingData) -> list[AwardCandidate]:
    qualifying = [team for team in data.team_stats if team.total_defenses >= MIN_SERIES_DEFENSES]
    leaders = _leaders(qualifying, lambda team: team.defensive_success_rate)
    return [
        _team(team, f"{team.name} won {team.successful_defenses} of {team.total_defenses} defenses")
        for team in leaders
        if team.defensive_success_rate > 0
    ]


def _bid_bullies(data: AwardTrackingData) -> list[AwardCandidate]:
    leaders = _leaders(data.team_stats, lambda team: team.high_value_bids.successes)
    return [
        _team(team, f"{team.name} made {_plural(team.high_value_bids.successes, 'high-value bid')}")
        for team in leaders
        if team.high_value_bids.successes > 0
    ]


def _streak_masters(data: AwardTrackingData) -> list[AwardCandidate]:
    leaders = _leaders(data.team_stats, lambda team: team.longest_streak)
    return [
        _team(team, f"{team.name} came out ahead on {team.longest_streak} hands in a row")
        for team in leaders
        if team.longest_streak >= MIN_STREAK
    ]


def _series_mvp(data: AwardTrackingData) -> list[AwardCandidate]:
    qualifying = [p for p in data.player_stats.values() if p.net_points > 0]
    leaders = _leaders(qualifying, lambda p: p.net_points)
    return [_player(data, player, f"{player.name} netted {player.net_points} points on bids") for player in leaders]


def _best_suit(player: PlayerStats) -> tuple[str, float, int, int]:
    best = ("", 0.0, 0, 0)
    for trump, record in player.trump_bids.items():
        if record.attempts >= MIN_SUIT_BIDS and record.rate > best[1]:
            best = (TRUMP_NAMES[trump], record.rate, record.successes, record.attempts)
    return best


def _suit_specialist(data: AwardTrackingData) -> list[AwardCandidate]:
    qualifying = [
        p for p in data.player_stats.values() if any(r.attempts >= MIN_SUIT_BIDS for r in p.trump_bids.values())
    ]
    leaders = _leaders(qualifying, lambda p: _best_suit(p)[1])
    candidates = []
    for player in leaders:
        suit, rate, successes, attempts = _best_suit(player)
        if rate > 0:
            details = f"{player.name} made {successes} of {attempts} bids in {suit}"
            candidates.append(_player(data, player, details))
    return candidates


def _pepper_perfect(data: AwardTrackingData) -> list[AwardCandidate]:
    return [
        _player(
            data,
            player,
            f"{player.name} never went set in pepper rounds and set pepper bidders "
            f"{_plural(player.pepper_round_bids.opponents_set, 'time')}",
        )
        for player in data.player_stats.values()
        if player.pepper_round_bids.attempts > 0
        and player.pepper_round_bids.failures == 0
        and player.pepper_round_bids.opponents_set > 0
    ]


def _moon_struck(data: AwardTrackingData) -> list[AwardCandidate]:
    qualifying = [p for p in data.player_stats.values() if p.moon_bids.failures >= MIN_MOON_FAILURES]
    leaders = _leaders(qualifying, lambda p: p.moon_bids.failures)
    return [
        _player(data, player, f"{player.name} went set on {player.moon_bids.failures} Moon bids") for player in leaders
    ]


def _gambling_failures(player: PlayerStats) -> int:
    return sum(1 for value in player.failed_bid_values if value <= GAMBLING_MAX_BID)


def _gambling_problem(data: AwardTrackingData) -> list[AwardCandidate]:
    qualifying = [p for p in data.player_stats.values() if _gambling_failures(p) >= MIN_GAMBLING_FAILURES]
    leaders = _leaders(qualifying, _gambling_failures)
    return [
        _player(data, player, f"{player.name} went set on {_gambling_failures(player)} bids of 4 or 5")
        for player in leaders
    ]


def _points_spread(player: PlayerStats) -> float:
    return statistics.pstdev(player.points_per_bid)


def _feast_or_famine(data: AwardTrackingData) -> list[AwardCandidate]:
    qualifying = [p for p in data.player_stats.values() if len(p.points_per_bid) >= MIN_FEAST_BIDS]
    leaders = _leaders(qualifying, _points_spread)
    return [
        _player(data, player, f"{player.name} swung {_points_spread(player):.1f} points per bid")
        for player in leaders
    ]


# ----------------------------------------------------------------------
# Catalogs
# ----------------------------------------------------------------------


def _entry(
    evaluate: Evaluator,
    award_id: str,
    name: str,
    description: str,
    award_type: AwardType,
    scope: AwardScope,
    icon: str,
    *,
    important: bool = False,
) -> CatalogEntry:
    definition = AwardDefinition(
        id=award_id,
        name=name,
        description=description,
        type=award_type,
        scope=scope,
        important=important,
        icon=icon,
    )
    return CatalogEntry(definition=definition, evaluate=evaluate)


_TEAM = AwardType.TEAM
_PLAYER = AwardType.PLAYER
_GAME = AwardScope.GAME
_SERIES = AwardScope.SERIES

GAME_AWARDS: tuple[CatalogEntry, ...] = (
    _entry(
        _defensive_fortress,
        "defensive_fortress",
        "Defensive Fortress",
        "Masters of stopping opponents in their tracks",
        _TEAM,
        _GAME,
        "shield",
    ),
    _entry(
        _bid_specialists,
        "bid_specialists",
        "Bid Specialists",
        "Consistently delivered on their promises",
        _TEAM,
        _GAME,
        "check-circle",
    ),
    _entry(
        _remember_the_time,
        "remember_the_time",
        "Remember the Time...",
        "Overcame a massive deficit to claim victory",
        _TEAM,
        _GAME,
        "clock-rewind",
        important=True,
    ),
    _entry(
        _trump_master,
        "trump_master",
        "Trump Master",
        "Unmatched skill with trump suits",
        _PLAYER,
        _GAME,
        "crown",
    ),
    _entry(
        _bid_royalty,
        "bid_royalty",
        "Bid Royalty",
        "Dominated the bidding all game long",
        _PLAYER,
        _GAME,
        "sceptre",
    ),
    _entry(
        _clutch_player,
        "clutch_player",
        "Clutch Player",
        "Delivered when it mattered most",
        _PLAYER,
        _GAME,
        "zap",
        important=True,
    ),
    _entry(
        _honeypot,
        "honeypot",
        "Honeypot",
        "Kept catching the defenders with nothing",
        _PLAYER,
        _GAME,
        "honey-pot",
        important=True,
    ),
    _entry(
        _playing_it_safe,
        "playing_it_safe",
        "Playing it Safe",
        "Never met a 4-bid they didn't like",
        _PLAYER,
        _GAME,
        "life-buoy",
    ),
    _entry(
        _no_trump_no_problem,
        "no_trump_no_problem",
        "No Trump? No Problem",
        "Who needs trump anyway?",
        _PLAYER,
        _GAME,
        "ban",
    ),
    _entry(
        _footprints_in_the_sand,
        "footprints_in_the_sand",
        "Footprints in the Sand",
        "Carried their partner to victory",
        _PLAYER,
        _GAME,
        "footprints",
    ),
    _entry(
        _shoot_for_the_moons,
        "shoot_for_the_moons",
        "Shoot for the Moons",
        "Reached for the moon and got there",
        _PLAYER,
        _GAME,
        "rocket",
        important=True,
    ),
    _entry(
        _overreaching,
        "overreaching",
        "Overreaching",
        "Eyes bigger than their hand",
        _PLAYER,
        _GAME,
        "hand-grabbing",
    ),
    _entry(
        _false_confidence,
        "false_confidence",
        "False Confidence",
        "No trump? No problem! (Or so they thought)",
        _PLAYER,
        _GAME,
        "thumbs-down",
    ),
    _entry(
        _helping_hand,
        "helping_hand",
        "Helping Hand",
        "Extraordinarily generous to opponents",
        _TEAM,
        _GAME,
        "hand",
    ),
)

SERIES_AWARDS: tuple[CatalogEntry, ...] = (
    _entry(
        _defensive_specialists,
        "defensive_specialists",
        "Defensive Specialists",
        "The team you didn't want to bid against",
        _TEAM,
        _SERIES,
        "shield-check",
    ),
    _entry(
        _bid_bullies,
        "bid_bullies",
        "Bid Bullies",
        "Go big or go home was their motto",
        _TEAM,
        _SERIES,
        "trophy",
        important=True,
    ),
    _entry(
        _streak_masters,
        "streak_masters",
        "Streak Masters",
        "Unstoppable momentum",
        _TEAM,
        _SERIES,
        "flame",
    ),
    _entry(
        _series_mvp,
        "series_mvp",
        "Series MVP",
        "The backbone of their team's success",
        _PLAYER,
        _SERIES,
        "medal",
        important=True,
    ),
    _entry(
        _suit_specialist,
        "suit_specialist",
        "Suit Specialist",
        "Mastered their favorite suit",
        _PLAYER,
        _SERIES,
        "spade",
    ),
    _entry(
        _pepper_perfect,
        "pepper_perfect",
        "Pepper Perfect",
        "Unbeatable during the pepper round",
        _PLAYER,
        _SERIES,
        "chili-hot",
        important=True,
    ),
    _entry(
        _moon_struck,
        "moon_struck",
        "Moon Struck",
        "Reached for the moon but fell short... repeatedly",
        _PLAYER,
        _SERIES,
        "moon",
        important=True,
    ),
    _entry(
        _gambling_problem,
        "gambling_problem",
        "Gambling Problem",
        "Should have folded but couldn't resist playing",
        _PLAYER,
        _SERIES,
        "dice-5",
    ),
    _entry(
        _feast_or_famine,
        "feast_or_famine",
        "Feast or Famine",
        "Spectacularly inconsistent",
        _PLAYER,
        _SERIES,
        "scale",
    ),
)


def get_award_definition(award_id: str) -> AwardDefinition:
    """Look up a definition by id across both catalogs. Raises KeyError if unknown."""
    for entry in (*GAME_AWARDS, *SERIES_AWARDS):
        if entry.id == award_id:
            return entry.definition
    raise KeyError(award_id)
