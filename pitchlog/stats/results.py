"""
Game result classification shared by every statistic that counts wins,
draws or losses.
"""

from enum import Enum
from typing import Any

from ..config import WIN_POINTS, DRAW_POINTS, LOSS_POINTS
from ..models import GameResult
from ..utils import get_field, to_int


class PointsMode(str, Enum):
    """How a tournament's points total is derived"""
    STANDINGS = "standings"  # 3 per win, 1 per draw, 0 per loss
    LITERAL = "literal"      # sum of each game's points_earned


def classify(team_score: Any, opponent_score: Any) -> GameResult:
    """
    Classify a scoreline from the player's team's point of view.

    Equal scores are always a draw. Missing or malformed scores count as 0.
    """
    ours = to_int(team_score)
    theirs = to_int(opponent_score)
    if ours > theirs:
        return GameResult.WIN
    if ours < theirs:
        return GameResult.LOSS
    return GameResult.DRAW


def classify_game(game: Any) -> GameResult:
    return classify(get_field(game, 'team_score'), get_field(game, 'opponent_score'))


def standings_points(result: GameResult) -> int:
    if result == GameResult.WIN:
        return WIN_POINTS
    if result == GameResult.DRAW:
        return DRAW_POINTS
    return LOSS_POINTS


def parse_points_mode(value: Any, default: PointsMode = PointsMode.STANDINGS) -> PointsMode:
    """Resolve a points mode from a query value, raising ValueError on unknown names"""
    if value is None or (isinstance(value, str) and not value.strip()):
        return default
    if isinstance(value, PointsMode):
        return value
    try:
        return PointsMode(str(value).strip().lower())
    except ValueError:
        raise ValueError(f"Unknown points mode '{value}'. Use 'standings' or 'literal'")
