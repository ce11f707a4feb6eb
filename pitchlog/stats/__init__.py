"""
PitchLog statistics core

Pure functions over a player's game and tournament records:
1. Result classifier - the single win/draw/loss rule and points conventions
2. Aggregator - dashboard totals and trailing-window counts
3. Standings - per-tournament tallies with standings and literal points
4. Breakdowns - chart series for the statistics page
"""

from .results import PointsMode, classify, classify_game, standings_points, parse_points_mode
from .aggregator import compute_stats_summary
from .standings import (
    tournament_games,
    compute_standings_points,
    compute_literal_points,
    compute_points,
    compute_win_rate,
    compute_tournament_stats,
    build_tournament_overview,
    group_games_by_stage,
)
from .breakdowns import build_breakdown, recent_form, monthly_totals, position_counts, result_counts

__all__ = [
    'PointsMode',
    'classify',
    'classify_game',
    'standings_points',
    'parse_points_mode',
    'compute_stats_summary',
    'tournament_games',
    'compute_standings_points',
    'compute_literal_points',
    'compute_points',
    'compute_win_rate',
    'compute_tournament_stats',
    'build_tournament_overview',
    'group_games_by_stage',
    'build_breakdown',
    'recent_form',
    'monthly_totals',
    'position_counts',
    'result_counts',
]
