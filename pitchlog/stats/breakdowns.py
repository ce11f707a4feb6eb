"""
Chart-ready series for the statistics page. Raw numbers only; labels,
colours and locale formatting belong to the client.
"""

from collections import OrderedDict
from typing import Any, Dict, Iterable, List

from ..config import RECENT_FORM_GAMES
from ..models import GameResult
from ..utils import get_field, to_int, parse_datetime, sort_by_date
from .results import classify_game


def recent_form(games: Iterable[Any], last_n: int = RECENT_FORM_GAMES) -> List[Dict[str, Any]]:
    """Goals and assists for the last N games, oldest of them first"""
    if last_n <= 0:
        return []
    latest = sort_by_date(list(games), newest_first=True)[:last_n]
    latest.reverse()

    series = []
    for index, game in enumerate(latest, start=1):
        played = parse_datetime(get_field(game, 'date'))
        series.append({
            'index': index,
            'game_id': get_field(game, 'id'),
            'date': played.isoformat() if played else None,
            'goals': to_int(get_field(game, 'player_goals')),
            'assists': to_int(get_field(game, 'player_assists')),
        })
    return series


def monthly_totals(games: Iterable[Any]) -> List[Dict[str, Any]]:
    """Goals, assists and games per calendar month in chronological order"""
    months: Dict[str, Dict[str, Any]] = {}
    for game in games:
        played = parse_datetime(get_field(game, 'date'))
        if played is None:
            continue
        key = played.strftime("%Y-%m")
        bucket = months.setdefault(key, {'month': key, 'goals': 0, 'assists': 0, 'games': 0})
        bucket['goals'] += to_int(get_field(game, 'player_goals'))
        bucket['assists'] += to_int(get_field(game, 'player_assists'))
        bucket['games'] += 1
    return [months[key] for key in sorted(months)]


def position_counts(games: Iterable[Any]) -> Dict[str, int]:
    """Games played per position, most frequent first"""
    counts: Dict[str, int] = {}
    for game in games:
        position = get_field(game, 'position_played')
        position = position.strip() if isinstance(position, str) else ''
        position = position or 'Unknown'
        counts[position] = counts.get(position, 0) + 1
    return OrderedDict(sorted(counts.items(), key=lambda item: (-item[1], item[0])))


def result_counts(games: Iterable[Any]) -> Dict[str, int]:
    counts = {'wins': 0, 'draws': 0, 'losses': 0}
    for game in games:
        result = classify_game(game)
        if result == GameResult.WIN:
            counts['wins'] += 1
        elif result == GameResult.DRAW:
            counts['draws'] += 1
        else:
            counts['losses'] += 1
    return counts


def build_breakdown(games: Iterable[Any], last_n: int = RECENT_FORM_GAMES) -> Dict[str, Any]:
    games = list(games)
    return {
        'recent_form': recent_form(games, last_n),
        'monthly': monthly_totals(games),
        'positions': [{'position': position, 'games': count}
                      for position, count in position_counts(games).items()],
        'results': result_counts(games),
    }
