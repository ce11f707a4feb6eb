"""
Tournament standings derived from the games tagged with a tournament id.

Two points formulas coexist and are kept apart on purpose:

- standings points follow the 3/1/0 table convention (dashboard view)
- literal points add up each game's recorded points_earned (tournaments list),
  which lets the user record bonus or penalty points

They are known to diverge for the same games; callers choose one by view.
"""

from collections import OrderedDict
from typing import Any, Dict, Iterable, List

from ..config import STAGE_ORDER
from ..models import GameResult, TournamentStats, TournamentOverview, Tournament
from ..utils import get_field, to_int, percentage, sort_by_date
from .results import PointsMode, classify_game, standings_points


def tournament_games(games: Iterable[Any], tournament_id: Any) -> List[Any]:
    """Games whose tournament_id matches; orphaned games simply never match"""
    if tournament_id is None:
        return []
    return [g for g in games if get_field(g, 'tournament_id') is not None
            and to_int(get_field(g, 'tournament_id')) == to_int(tournament_id)]


def compute_standings_points(games: Iterable[Any]) -> int:
    """3 points per win, 1 per draw, 0 per loss"""
    return sum(standings_points(classify_game(g)) for g in games)


def compute_literal_points(games: Iterable[Any]) -> int:
    """Sum of each game's recorded points_earned"""
    return sum(to_int(get_field(g, 'points_earned')) for g in games)


def compute_points(games: Iterable[Any], mode: PointsMode = PointsMode.STANDINGS) -> int:
    if mode == PointsMode.LITERAL:
        return compute_literal_points(games)
    return compute_standings_points(games)


def compute_win_rate(wins: int, games_played: int) -> int:
    """Win percentage 0-100; 0 when nothing has been played"""
    return percentage(wins, games_played)


def tally_games(games: Iterable[Any], mode: PointsMode = PointsMode.STANDINGS) -> TournamentStats:
    """Tally already-filtered tournament games"""
    games = list(games)
    results = [classify_game(g) for g in games]

    return TournamentStats(
        points=compute_points(games, mode),
        wins=results.count(GameResult.WIN),
        draws=results.count(GameResult.DRAW),
        losses=results.count(GameResult.LOSS),
        team_goals_scored=sum(to_int(get_field(g, 'team_score')) for g in games),
        goals_conceded=sum(to_int(get_field(g, 'opponent_score')) for g in games),
        player_goals_scored=sum(to_int(get_field(g, 'player_goals')) for g in games),
        player_assists=sum(to_int(get_field(g, 'player_assists')) for g in games),
        games_played=len(games),
    )


def compute_tournament_stats(tournament: Any, games: Iterable[Any],
                             mode: PointsMode = PointsMode.STANDINGS) -> TournamentStats:
    """
    Calculate standings for one tournament.

    Args:
        tournament: Tournament model or dict; only its id is read
        games: Any list of games; filtered to this tournament here
        mode: Which points formula fills TournamentStats.points

    Returns:
        TournamentStats; all zero when no game belongs to the tournament
    """
    return tally_games(tournament_games(games, get_field(tournament, 'id')), mode)


def build_tournament_overview(tournament: Tournament, games: Iterable[Any],
                              mode: PointsMode = PointsMode.LITERAL) -> TournamentOverview:
    """Tournaments list row with both points totals and the win rate"""
    own_games = tournament_games(games, tournament.id)
    stats = tally_games(own_games, mode)
    return TournamentOverview(
        tournament=tournament,
        stats=stats,
        standings_points=compute_standings_points(own_games),
        literal_points=compute_literal_points(own_games),
        win_rate=compute_win_rate(stats.wins, stats.games_played),
    )


def group_games_by_stage(games: Iterable[Any]) -> Dict[str, List[Any]]:
    """
    Group tournament games by stage in bracket order.

    Games with no stage, or a stage outside the known list, are 'unassigned'.
    Only stages that have games are returned. Games are oldest first.
    """
    buckets: Dict[str, List[Any]] = {stage: [] for stage in STAGE_ORDER}
    for game in sort_by_date(list(games), newest_first=False):
        stage = get_field(game, 'tournament_stage')
        stage = getattr(stage, 'value', stage)
        if stage not in buckets:
            stage = 'unassigned'
        buckets[stage].append(game)

    return OrderedDict((stage, buckets[stage]) for stage in STAGE_ORDER if buckets[stage])
