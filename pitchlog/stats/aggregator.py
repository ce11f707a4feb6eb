"""
Career and trailing-window totals for the dashboard.

All totals are calculated from the player's full game list on every request.
"""

import logging
from datetime import datetime
from typing import Any, Iterable, List, Optional

from ..config import SEASON_WINDOW_MONTHS, MONTH_WINDOW_MONTHS
from ..models import GameResult, StatsSummary
from ..utils import get_field, to_int, parse_datetime, subtract_months, percentage
from .results import classify_game

logger = logging.getLogger(__name__)


def sum_field(games: Iterable[Any], field: str) -> int:
    return sum(to_int(get_field(g, field)) for g in games)


def count_wins(games: Iterable[Any]) -> int:
    return sum(1 for g in games if classify_game(g) == GameResult.WIN)


def games_since(games: Iterable[Any], cutoff: datetime) -> List[Any]:
    """
    Games dated on or after cutoff.

    Games without a usable date are left out of every window.
    """
    selected = []
    for game in games:
        played = parse_datetime(get_field(game, 'date'))
        if played is None:
            logger.debug("Game %s has no usable date; excluded from window", get_field(game, 'id'))
            continue
        if played >= cutoff:
            selected.append(game)
    return selected


def compute_stats_summary(games: Iterable[Any], now: Optional[datetime] = None) -> StatsSummary:
    """
    Calculate the dashboard summary for a list of games.

    Args:
        games: Game models or raw game dicts, any order, may be empty
        now: Reference time for the trailing windows (defaults to the current time)

    Returns:
        StatsSummary with every field populated; all zero for an empty list
    """
    games = list(games)
    # Game dates are compared as naive local times
    now = parse_datetime(now) or datetime.now()

    total_games = len(games)
    wins = count_wins(games)

    season_games = games_since(games, subtract_months(now, SEASON_WINDOW_MONTHS))
    month_games = games_since(games, subtract_months(now, MONTH_WINDOW_MONTHS))

    return StatsSummary(
        total_goals=sum_field(games, 'player_goals'),
        total_assists=sum_field(games, 'player_assists'),
        total_games=total_games,
        win_rate=percentage(wins, total_games),
        season_goals=sum_field(season_games, 'player_goals'),
        month_assists=sum_field(month_games, 'player_assists'),
    )
