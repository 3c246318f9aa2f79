"""
Single-pass award statistics over an encoded hand history.

Only complete, non-throw-in hands contribute. A fold counts as a made bid.
Hands are read through the total decoder, so malformed history entries are
scored with default fields instead of raising.
"""

from __future__ import annotations

from typing import TYPE_CHECKING

import structlog

from pepper.logic.codec import decode_hand, is_hand_complete, is_pepper_round
from pepper.logic.enums import Bid, Decision, Trump
from pepper.logic.scoring import bid_value, bidding_team_for, is_bid_made, score_hand
from pepper.logic.settings import NUM_TEAMS, GameSettings
from pepper.logic.state import DEFAULT_TEAMS
from pepper.stats.models import AwardTrackingData, PlayerStats, TeamStats

if TYPE_CHECKING:
    from collections.abc import Sequence

    from pepper.logic.codec import HandFields
    from pepper.logic.state import GameSummary

logger = structlog.get_logger()

HIGH_VALUE_BIDS = frozenset({Bid.SIX, Bid.MOON, Bid.DOUBLE_MOON})
MOON_BIDS = frozenset({Bid.MOON, Bid.DOUBLE_MOON})
BIG_FOUR_POINTS = 4


def _completed_hands(hands: Sequence[str]) -> list[tuple[int, HandFields]]:
    """Return (index, fields) for every complete hand, throw-ins included."""
    return [(index, decode_hand(encoded)) for index, encoded in enumerate(hands) if is_hand_complete(encoded)]


def is_big_four(fields: HandFields) -> bool:
    """A 4-point bid outside clubs, played out, with the defenders held to zero."""
    return (
        bid_value(fields.bid) == BIG_FOUR_POINTS
        and fields.trump != Trump.CLUBS
        and fields.decision == Decision.PLAY
        and fields.tricks == 0
    )


def initialize_award_tracking(
    players: Sequence[str],
    teams: Sequence[str] = DEFAULT_TEAMS,
) -> AwardTrackingData:
    """Empty tracking data: one record per named player and one per team."""
    player_stats = {name: PlayerStats(name=name, team=seat % NUM_TEAMS) for seat, name in enumerate(players)}
    team_stats = [TeamStats(name=name, index=index) for index, name in enumerate(teams[:NUM_TEAMS])]
    return AwardTrackingData(player_stats=player_stats, team_stats=team_stats)


def calculate_longest_streak(hands: Sequence[str], team: int) -> int:
    """
    Longest run of consecutive hands in which ``team`` came out ahead.

    The team extends its streak by making its own bid (a fold counts) or by
    setting the opposing bidder. A throw-in breaks the streak. Incomplete
    hands are ignored.
    """
    current = 0
    longest = 0
    for _index, fields in _completed_hands(hands):
        if fields.is_throw_in:
            current = 0
            continue
        made = is_bid_made(fields)
        won = made if bidding_team_for(fields.bidder) == team else not made
        if won:
            current += 1
            longest = max(longest, current)
        else:
            current = 0
    return longest


def _player_for(data: AwardTrackingData, players: Sequence[str], seat: int) -> PlayerStats | None:
    if not (1 <= seat <= len(players)):
        return None
    return data.player_stats.get(players[seat - 1])


def _track_player(
    data: AwardTrackingData,
    players: Sequence[str],
    fields: HandFields,
    *,
    pepper_round: bool,
    bidder_delta: int,
) -> None:
    player = _player_for(data, players, fields.bidder)
    if player is None:
        return

    made = is_bid_made(fields)
    points = bid_value(fields.bid)

    player.bids_won += 1
    if made:
        player.bids_succeeded += 1
    else:
        player.bids_failed += 1
        player.failed_bid_values.append(points)

    player.trump_bids[fields.trump].record(success=made)
    if fields.trump == Trump.NO_TRUMP:
        player.no_trump_bids += 1
    if fields.bid in HIGH_VALUE_BIDS:
        player.high_value_bids.record(success=made)
    if fields.bid in MOON_BIDS:
        player.moon_bids.record(success=made)

    if pepper_round:
        player.pepper_round_bids.record(success=made)
        if not made:
            defending_team = 1 - player.team
            for defender in data.players_on(defending_team):
                defender.pepper_round_bids.opponents_set += 1
    elif made:
        player.non_pepper_successes += 1
        if points == BIG_FOUR_POINTS:
            player.non_pepper_four_bid_successes += 1

    player.net_points += bidder_delta
    player.points_per_bid.append(bidder_delta)
    if is_big_four(fields):
        player.big_fours += 1


def _track_teams(data: AwardTrackingData, fields: HandFields, deltas: tuple[int, int]) -> None:
    if len(data.team_stats) < NUM_TEAMS:
        return
    made = is_bid_made(fields)
    bidding = data.team_stats[bidding_team_for(fields.bidder)]
    defending = data.team_stats[1 - bidding.index]

    bidding.total_bids += 1
    if made:
        bidding.successful_bids += 1
    if fields.bid in HIGH_VALUE_BIDS:
        bidding.high_value_bids.record(success=made)

    defending.total_defenses += 1
    if not made or (fields.decision == Decision.FOLD and fields.tricks > 0):
        defending.successful_defenses += 1

    for team in data.team_stats:
        opponent_delta = deltas[1 - team.index]
        if opponent_delta > 0:
            team.points_allowed_to_opponents += opponent_delta


def _track_deficits(data: AwardTrackingData, running: list[int]) -> None:
    for team in data.team_stats[:NUM_TEAMS]:
        deficit = running[1 - team.index] - running[team.index]
        if deficit > team.max_deficit:
            team.max_deficit = deficit
            team.min_score_trailing = running[team.index]


def track_award_data(
    hands: Sequence[str],
    players: Sequence[str],
    teams: Sequence[str] = DEFAULT_TEAMS,
    final_scores: tuple[int, int] | None = None,
    winner_index: int | None = None,
    *,
    settings: GameSettings | None = None,
) -> AwardTrackingData:
    """
    Collect player and team award statistics for one game.

    Bidders whose seat has no roster entry are skipped for player statistics
    but still count toward team statistics. ``winner_index`` enables the
    winner-dependent statistics (clinching bid, comeback).
    """
    settings = settings if settings is not None else GameSettings()
    data = initialize_award_tracking(players, teams)
    data.winning_team = winner_index
    data.hands = list(hands)

    running = [0, 0]
    clinched = False
    for index, fields in _completed_hands(hands):
        if fields.is_throw_in:
            continue
        deltas = score_hand(fields)
        bidding_team = bidding_team_for(fields.bidder)

        _track_player(
            data,
            players,
            fields,
            pepper_round=is_pepper_round(index, settings.pepper_rounds),
            bidder_delta=deltas[bidding_team],
        )
        _track_teams(data, fields, deltas)

        before = running[winner_index] if winner_index is not None else 0
        running[0] += deltas[0]
        running[1] += deltas[1]
        data.hand_scores.append((deltas[0], deltas[1]))
        data.points_history.append((running[0], running[1]))
        _track_deficits(data, running)

        if winner_index is None or clinched:
            continue
        if before < settings.target_score <= running[winner_index]:
            clinched = True
            if bidding_team == winner_index and deltas[winner_index] > 0:
                player = _player_for(data, players, fields.bidder)
                if player is not None:
                    player.won_final_bid = True

    data.final_scores = final_scores if final_scores is not None else (running[0], running[1])
    for team in data.team_stats:
        team.comeback_achieved = winner_index == team.index and team.max_deficit >= settings.comeback_deficit
        team.longest_streak = calculate_longest_streak(hands, team.index)

    logger.debug(
        "award data tracked",
        hand_count=len(hands),
        players=len(data.player_stats),
        winner=winner_index,
    )
    return data


def merge_award_data(games: Sequence[AwardTrackingData], players: Sequence[str], teams: Sequence[str]) -> AwardTrackingData:
    """
    Sum per-game tracking data into one record. Streaks are not merged.

    Hand scores are concatenated and the points history keeps running across
    game boundaries.
    """
    merged = initialize_award_tracking(players, teams)
    scores = [0, 0]
    for game in games:
        for name, player in game.player_stats.items():
            if name in merged.player_stats:
                merged.player_stats[name].merge(player)
        for team, other in zip(merged.team_stats, game.team_stats, strict=False):
            team.merge(other)
        scores[0] += game.final_scores[0]
        scores[1] += game.final_scores[1]
        merged.hands.extend(game.hands)
        for delta in game.hand_scores:
            running = merged.points_history[-1]
            merged.hand_scores.append(delta)
            merged.points_history.append((running[0] + delta[0], running[1] + delta[1]))
    merged.final_scores = (scores[0], scores[1])
    return merged


def track_series_award_data(
    summaries: Sequence[GameSummary],
    players: Sequence[str],
    teams: Sequence[str] = DEFAULT_TEAMS,
    series_winner: int | None = None,
    *,
    settings: GameSettings | None = None,
) -> AwardTrackingData:
    """
    Collect award statistics across every completed game of a series.

    Each game is tracked on its own so pepper rounds restart per game; the
    longest streak runs across the concatenated history.
    """
    games = [
        track_award_data(
            summary.hand_strings,
            players,
            teams,
            summary.final_scores,
            summary.winner,
            settings=settings,
        )
        for summary in summaries
    ]
    merged = merge_award_data(games, players, teams)
    merged.winning_team = series_winner

    all_hands = [encoded for summary in summaries for encoded in summary.hand_strings]
    for team in merged.team_stats:
        team.longest_streak = calculate_longest_streak(all_hands, team.index)

    logger.debug("series award data tracked", games=len(games), winner=series_winner)
    return merged
