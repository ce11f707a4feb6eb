from flask import Blueprint, request, jsonify, current_app
from datetime import datetime, timedelta
from typing import Dict, Any, List, Optional
from pydantic import ValidationError

from .models import TrainingSession, Attendance
from .storage import StorageManager
from .utils import parse_id, parse_datetime, validate_game_data, format_validation_errors
from .config import RECENT_GAMES_LIMIT, RECENT_FORM_GAMES, WEEKDAYS
from .stats import (
    PointsMode,
    parse_points_mode,
    compute_stats_summary,
    compute_tournament_stats,
    compute_standings_points,
    compute_literal_points,
    compute_win_rate,
    build_tournament_overview,
    tournament_games,
    group_games_by_stage,
    build_breakdown,
)

# Create blueprint
bp = Blueprint('api', __name__, url_prefix='/api')


def get_storage() -> StorageManager:
    """Storage bound to the running app"""
    return current_app.extensions['pitchlog_storage']


def _error(messages, status: int = 400):
    if isinstance(messages, str):
        messages = [messages]
    return jsonify({'success': False, 'errors': messages}), status


def _dump(item) -> Dict[str, Any]:
    return item.model_dump(mode='json')


def _player_scope() -> Optional[int]:
    """The playerId query parameter, or None when missing or not a positive integer"""
    return parse_id(request.args.get('playerId'))


def _scope_error():
    current_app.logger.warning(f"Rejected {request.path}: missing or invalid playerId")
    return _error('playerId query parameter is required and must be a positive integer')


def _json_body() -> Optional[Dict[str, Any]]:
    data = request.get_json(silent=True)
    return data if isinstance(data, dict) else None


def _body_with_player(data: Dict[str, Any]) -> Optional[Dict[str, Any]]:
    """Fill player_id from the query string when the body leaves it out"""
    player_id = parse_id(data.get('player_id'))
    if player_id is None:
        player_id = _player_scope()
    if player_id is None:
        return None
    data = dict(data)
    data['player_id'] = player_id
    return data


def _create(entity: str, key: str, create_fn):
    """Shared POST handler for player-scoped records"""
    data = _json_body()
    if data is None:
        return _error('Request body must be a JSON object')
    data = _body_with_player(data)
    if data is None:
        return _scope_error()
    try:
        item = create_fn(data)
    except ValidationError as e:
        current_app.logger.warning(f"Invalid {entity} data: {e.error_count()} error(s)")
        return _error([f'Invalid {entity} data: {msg}' for msg in format_validation_errors(e)])

    current_app.logger.info(f"Created {entity} {item.id}")
    return jsonify({'success': True, key: _dump(item)}), 201


def _update(entity: str, key: str, update_fn, record_id: int):
    """Shared PUT/PATCH handler; the body may hold any subset of fields"""
    data = _json_body()
    if data is None:
        return _error('Request body must be a JSON object')
    try:
        item = update_fn(record_id, data)
    except ValidationError as e:
        current_app.logger.warning(f"Invalid {entity} update for {record_id}")
        return _error([f'Invalid {entity} data: {msg}' for msg in format_validation_errors(e)])

    if item is None:
        return _error(f'{entity.capitalize()} not found', 404)
    return jsonify({'success': True, key: _dump(item)})


def _delete(entity: str, delete_fn, record_id: int):
    if delete_fn(record_id):
        current_app.logger.info(f"Deleted {entity} {record_id}")
        return jsonify({'success': True})
    return _error(f'{entity.capitalize()} not found', 404)


def _points_mode(default: PointsMode):
    """Returns (mode, None) or (None, error response)"""
    try:
        return parse_points_mode(request.args.get('pointsMode'), default), None
    except ValueError as e:
        return None, _error(str(e))


# Players

@bp.route('/players')
def get_players():
    """Get all players"""
    players = get_storage().get_all_players()
    return jsonify({'success': True, 'players': [_dump(p) for p in players]})


@bp.route('/players/<int:player_id>')
def get_player(player_id):
    player = get_storage().get_player(player_id)
    if player:
        return jsonify({'success': True, 'player': _dump(player)})
    return _error('Player not found', 404)


@bp.route('/players', methods=['POST'])
def create_player():
    """Create a player profile"""
    data = _json_body()
    if data is None:
        return _error('Request body must be a JSON object')
    try:
        player = get_storage().create_player(data)
    except ValidationError as e:
        return _error([f'Invalid player data: {msg}' for msg in format_validation_errors(e)])

    current_app.logger.info(f"Created player {player.id}")
    return jsonify({'success': True, 'player': _dump(player)}), 201


@bp.route('/players/<int:player_id>', methods=['PUT', 'PATCH'])
def update_player(player_id):
    return _update('player', 'player', get_storage().update_player, player_id)


# Games

@bp.route('/games')
def get_games():
    """All games for a player, newest first"""
    player_id = _player_scope()
    if player_id is None:
        return _scope_error()
    games = get_storage().get_games_by_player(player_id)
    return jsonify({'success': True, 'games': [_dump(g) for g in games]})


@bp.route('/games/recent')
def get_recent_games():
    player_id = _player_scope()
    if player_id is None:
        return _scope_error()

    limit = RECENT_GAMES_LIMIT
    if request.args.get('limit') is not None:
        limit = parse_id(request.args.get('limit'))
        if limit is None:
            return _error('limit must be a positive integer')

    games = get_storage().get_recent_games(player_id, limit)
    return jsonify({'success': True, 'games': [_dump(g) for g in games]})


@bp.route('/games/<int:game_id>')
def get_game(game_id):
    game = get_storage().get_game(game_id)
    if game:
        return jsonify({'success': True, 'game': _dump(game)})
    return _error('Game not found', 404)


@bp.route('/games', methods=['POST'])
def create_game():
    """Create a new game"""
    data = _json_body()
    if data is None:
        return _error('Request body must be a JSON object')
    data = _body_with_player(data)
    if data is None:
        return _scope_error()

    errors = validate_game_data(data)
    if errors:
        current_app.logger.warning(f"Rejected game: {errors}")
        return _error(errors)

    return _create('game', 'game', get_storage().create_game)


@bp.route('/games/<int:game_id>', methods=['PUT', 'PATCH'])
def update_game(game_id):
    """Update an existing game with any subset of its fields"""
    data = _json_body()
    if data is None:
        return _error('Request body must be a JSON object')

    errors = validate_game_data(data, partial=True)
    if errors:
        return _error(errors)

    return _update('game', 'game', get_storage().update_game, game_id)


@bp.route('/games/<int:game_id>', methods=['DELETE'])
def delete_game(game_id):
    return _delete('game', get_storage().delete_game, game_id)


# Tournaments

@bp.route('/tournaments')
def get_tournaments():
    """
    Tournaments with their list-view figures.

    Points default to the literal sum of points_earned; pass
    pointsMode=standings for 3/1/0 points instead.
    """
    player_id = _player_scope()
    if player_id is None:
        return _scope_error()
    mode, error = _points_mode(PointsMode.LITERAL)
    if error:
        return error

    storage = get_storage()
    games = storage.get_games_by_player(player_id)
    rows = [build_tournament_overview(t, games, mode).to_row()
            for t in storage.get_tournaments_by_player(player_id)]
    return jsonify({'success': True, 'points_mode': mode.value, 'tournaments': rows})


@bp.route('/tournaments/active')
def get_active_tournaments():
    player_id = _player_scope()
    if player_id is None:
        return _scope_error()
    tournaments = get_storage().get_active_tournaments(player_id)
    return jsonify({'success': True, 'tournaments': [_dump(t) for t in tournaments]})


@bp.route('/tournaments/<int:tournament_id>')
def get_tournament(tournament_id):
    tournament = get_storage().get_tournament(tournament_id)
    if tournament:
        return jsonify({'success': True, 'tournament': _dump(tournament)})
    return _error('Tournament not found', 404)


@bp.route('/tournaments', methods=['POST'])
def create_tournament():
    return _create('tournament', 'tournament', get_storage().create_tournament)


@bp.route('/tournaments/<int:tournament_id>', methods=['PUT', 'PATCH'])
def update_tournament(tournament_id):
    return _update('tournament', 'tournament', get_storage().update_tournament, tournament_id)


@bp.route('/tournaments/<int:tournament_id>', methods=['DELETE'])
def delete_tournament(tournament_id):
    """Delete a tournament; its games stay and no longer count towards any tournament"""
    return _delete('tournament', get_storage().delete_tournament, tournament_id)


def _scoped_tournament(tournament_id: int, player_id: int):
    tournament = get_storage().get_tournament(tournament_id)
    if tournament is None or tournament.player_id != player_id:
        return None
    return tournament


@bp.route('/tournaments/<int:tournament_id>/stats')
def get_tournament_stats(tournament_id):
    """Standings for one tournament (3/1/0 points unless pointsMode=literal)"""
    player_id = _player_scope()
    if player_id is None:
        return _scope_error()
    mode, error = _points_mode(PointsMode.STANDINGS)
    if error:
        return error

    tournament = _scoped_tournament(tournament_id, player_id)
    if tournament is None:
        return _error('Tournament not found', 404)

    games = tournament_games(get_storage().get_games_by_player(player_id), tournament.id)
    stats = compute_tournament_stats(tournament, games, mode)
    return jsonify({
        'success': True,
        'tournament_id': tournament.id,
        'points_mode': mode.value,
        'stats': stats.model_dump(),
        'standings_points': compute_standings_points(games),
        'literal_points': compute_literal_points(games),
        'win_rate': compute_win_rate(stats.wins, stats.games_played),
    })


@bp.route('/tournaments/<int:tournament_id>/stages')
def get_tournament_stages(tournament_id):
    player_id = _player_scope()
    if player_id is None:
        return _scope_error()

    tournament = _scoped_tournament(tournament_id, player_id)
    if tournament is None:
        return _error('Tournament not found', 404)

    games = tournament_games(get_storage().get_games_by_player(player_id), tournament.id)
    stages = [{'stage': stage, 'games': [_dump(g) for g in stage_games]}
              for stage, stage_games in group_games_by_stage(games).items()]
    return jsonify({'success': True, 'tournament_id': tournament.id, 'stages': stages})


# Training

@bp.route('/training')
def get_training_sessions():
    player_id = _player_scope()
    if player_id is None:
        return _scope_error()
    sessions = get_storage().get_training_sessions_by_player(player_id)
    return jsonify({'success': True, 'training_sessions': [_dump(s) for s in sessions]})


@bp.route('/training/upcoming')
def get_upcoming_training():
    player_id = _player_scope()
    if player_id is None:
        return _scope_error()
    sessions = get_storage().get_upcoming_training(player_id)
    return jsonify({'success': True, 'training_sessions': [_dump(s) for s in sessions]})


@bp.route('/training', methods=['POST'])
def create_training_session():
    return _create('training session', 'training_session', get_storage().create_training_session)


@bp.route('/training/<int:session_id>', methods=['PUT', 'PATCH'])
def update_training_session(session_id):
    return _update('training session', 'training_session', get_storage().update_training_session, session_id)


@bp.route('/training/<int:session_id>', methods=['DELETE'])
def delete_training_session(session_id):
    return _delete('training session', get_storage().delete_training_session, session_id)


def _recurring_dates(start: datetime, end: datetime, hour: int, minute: int, days: List[str]) -> List[datetime]:
    """Every selected weekday between start and end, both inclusive, at the given time"""
    dates = []
    current = start.replace(hour=0, minute=0, second=0, microsecond=0)
    last = end.replace(hour=0, minute=0, second=0, microsecond=0)
    while current <= last:
        if WEEKDAYS[current.weekday()] in days:
            dates.append(current.replace(hour=hour, minute=minute))
        current += timedelta(days=1)
    return dates


@bp.route('/training/recurring', methods=['POST'])
def create_recurring_training():
    """Create one session per selected weekday in a date range"""
    data = _json_body()
    if data is None:
        return _error('Request body must be a JSON object')
    data = _body_with_player(data)
    if data is None:
        return _scope_error()

    errors = []
    start = parse_datetime(data.get('start_date'))
    end = parse_datetime(data.get('end_date'))
    if start is None:
        errors.append('Start date is required')
    if end is None:
        errors.append('End date is required')
    if start and end and end < start:
        errors.append('End date must not be before start date')

    hour = minute = 0
    try:
        hour, minute = (int(part) for part in str(data.get('time', '')).split(':'))
        if not (0 <= hour < 24 and 0 <= minute < 60):
            raise ValueError
    except ValueError:
        errors.append("Time must be in HH:MM format")

    raw_days = data.get('recurring_days') or []
    if not isinstance(raw_days, list):
        raw_days = []
    days = [str(d).strip().capitalize() for d in raw_days]
    if not days:
        errors.append('Select at least one day for recurring training')
    unknown = [d for d in days if d not in WEEKDAYS]
    if unknown:
        errors.append(f"Unknown day(s): {', '.join(unknown)}")

    if errors:
        return _error(errors)

    template = {
        'player_id': data['player_id'],
        'type': data.get('type'),
        'duration': data.get('duration'),
        'location': data.get('location'),
        'coach': data.get('coach'),
        'notes': data.get('notes'),
    }
    dates = _recurring_dates(start, end, hour, minute, days)
    try:
        # Validate the shared fields once before anything is written
        TrainingSession(date=start, **template)
    except ValidationError as e:
        return _error([f'Invalid training session data: {msg}' for msg in format_validation_errors(e)])

    storage = get_storage()
    sessions = [storage.create_training_session(dict(template, date=d)) for d in dates]

    current_app.logger.info(f"Created {len(sessions)} recurring training sessions for player {data['player_id']}")
    return jsonify({
        'success': True,
        'count': len(sessions),
        'training_sessions': [_dump(s) for s in sessions]
    }), 201


@bp.route('/training/<int:session_id>/attendance', methods=['PUT', 'PATCH'])
def update_training_attendance(session_id):
    """Mark a session completed, missed or cancelled"""
    data = _json_body() or {}
    allowed = [Attendance.COMPLETED.value, Attendance.MISSED.value, Attendance.CANCELLED.value]
    attendance = str(data.get('attendance', '')).strip().lower()
    if attendance not in allowed:
        return _error(f"Attendance must be one of: {', '.join(allowed)}")

    session = get_storage().update_training_session(session_id, {
        'attendance': attendance,
        'completed': attendance == Attendance.COMPLETED.value,
    })
    if session is None:
        return _error('Training session not found', 404)
    return jsonify({'success': True, 'training_session': _dump(session)})


# Coach feedback

@bp.route('/feedback')
def get_feedback():
    """Coach feedback, newest first; limit is optional"""
    player_id = _player_scope()
    if player_id is None:
        return _scope_error()

    storage = get_storage()
    if request.args.get('limit') is not None:
        limit = parse_id(request.args.get('limit'))
        if limit is None:
            return _error('limit must be a positive integer')
        feedback = storage.get_recent_feedback(player_id, limit)
    else:
        feedback = storage.get_feedback_by_player(player_id)
    return jsonify({'success': True, 'feedback': [_dump(f) for f in feedback]})


@bp.route('/feedback', methods=['POST'])
def create_feedback():
    return _create('feedback', 'feedback', get_storage().create_coach_feedback)


@bp.route('/feedback/<int:feedback_id>', methods=['PUT', 'PATCH'])
def update_feedback(feedback_id):
    return _update('feedback', 'feedback', get_storage().update_coach_feedback, feedback_id)


@bp.route('/feedback/<int:feedback_id>', methods=['DELETE'])
def delete_feedback(feedback_id):
    return _delete('feedback', get_storage().delete_coach_feedback, feedback_id)


# Squad

@bp.route('/squad')
def get_squad():
    player_id = _player_scope()
    if player_id is None:
        return _scope_error()
    squad = get_storage().get_squad_by_player(player_id)
    return jsonify({'success': True, 'squad': [_dump(m) for m in squad]})


@bp.route('/squad', methods=['POST'])
def create_squad_member():
    return _create('squad member', 'squad_member', get_storage().create_squad_member)


@bp.route('/squad/<int:member_id>', methods=['PUT', 'PATCH'])
def update_squad_member(member_id):
    return _update('squad member', 'squad_member', get_storage().update_squad_member, member_id)


@bp.route('/squad/<int:member_id>', methods=['DELETE'])
def delete_squad_member(member_id):
    return _delete('squad member', get_storage().delete_squad_member, member_id)


# Clubs

@bp.route('/clubs')
def get_clubs():
    player_id = _player_scope()
    if player_id is None:
        return _scope_error()
    clubs = get_storage().get_clubs_by_player(player_id)
    return jsonify({'success': True, 'clubs': [_dump(c) for c in clubs]})


@bp.route('/clubs/active')
def get_active_clubs():
    player_id = _player_scope()
    if player_id is None:
        return _scope_error()
    clubs = get_storage().get_active_clubs(player_id)
    return jsonify({'success': True, 'clubs': [_dump(c) for c in clubs]})


@bp.route('/clubs', methods=['POST'])
def create_club():
    return _create('club', 'club', get_storage().create_club)


@bp.route('/clubs/<int:club_id>', methods=['PUT', 'PATCH'])
def update_club(club_id):
    return _update('club', 'club', get_storage().update_club, club_id)


@bp.route('/clubs/<int:club_id>', methods=['DELETE'])
def delete_club(club_id):
    return _delete('club', get_storage().delete_club, club_id)


@bp.route('/clubs/<int:club_id>/coaches')
def get_club_coaches(club_id):
    storage = get_storage()
    if storage.get_club(club_id) is None:
        return _error('Club not found', 404)
    coaches = storage.get_coaches_by_club(club_id)
    return jsonify({'success': True, 'coaches': [_dump(c) for c in coaches]})


# Coaches

@bp.route('/coaches')
def get_coaches():
    player_id = _player_scope()
    if player_id is None:
        return _scope_error()
    coaches = get_storage().get_coaches_by_player(player_id)
    return jsonify({'success': True, 'coaches': [_dump(c) for c in coaches]})


@bp.route('/coaches/active')
def get_active_coaches():
    player_id = _player_scope()
    if player_id is None:
        return _scope_error()
    coaches = get_storage().get_active_coaches(player_id)
    return jsonify({'success': True, 'coaches': [_dump(c) for c in coaches]})


@bp.route('/coaches', methods=['POST'])
def create_coach():
    return _create('coach', 'coach', get_storage().create_coach)


@bp.route('/coaches/<int:coach_id>', methods=['PUT', 'PATCH'])
def update_coach(coach_id):
    return _update('coach', 'coach', get_storage().update_coach, coach_id)


@bp.route('/coaches/<int:coach_id>', methods=['DELETE'])
def delete_coach(coach_id):
    return _delete('coach', get_storage().delete_coach, coach_id)


# Coaching staff

@bp.route('/coaching-staff')
def get_coaching_staff():
    player_id = _player_scope()
    if player_id is None:
        return _scope_error()
    staff = get_storage().get_coaching_staff_by_player(player_id)
    return jsonify({'success': True, 'coaching_staff': [_dump(s) for s in staff]})


@bp.route('/coaching-staff', methods=['POST'])
def create_coaching_staff():
    return _create('staff member', 'staff_member', get_storage().create_coaching_staff_member)


@bp.route('/coaching-staff/<int:staff_id>', methods=['PUT', 'PATCH'])
def update_coaching_staff(staff_id):
    return _update('staff member', 'staff_member', get_storage().update_coaching_staff_member, staff_id)


@bp.route('/coaching-staff/<int:staff_id>', methods=['DELETE'])
def delete_coaching_staff(staff_id):
    return _delete('staff member', get_storage().delete_coaching_staff_member, staff_id)


# Statistics

@bp.route('/stats/summary')
def get_stats_summary():
    """Dashboard totals, recalculated from every game on each request"""
    player_id = _player_scope()
    if player_id is None:
        return _scope_error()
    games = get_storage().get_games_by_player(player_id)
    summary = compute_stats_summary(games)
    return jsonify({'success': True, 'stats': summary.model_dump()})


@bp.route('/stats/breakdown')
def get_stats_breakdown():
    player_id = _player_scope()
    if player_id is None:
        return _scope_error()

    last_n = RECENT_FORM_GAMES
    if request.args.get('lastN') is not None:
        last_n = parse_id(request.args.get('lastN'))
        if last_n is None:
            return _error('lastN must be a positive integer')

    games = get_storage().get_games_by_player(player_id)
    return jsonify({'success': True, 'breakdown': build_breakdown(games, last_n)})
