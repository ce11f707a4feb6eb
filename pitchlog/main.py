"""
PitchLog - Flask Application
"""

from flask import Flask, request, jsonify
from werkzeug.middleware.proxy_fix import ProxyFix
from dotenv import load_dotenv
import os
import secrets
import sys
from datetime import datetime, timedelta

# Load environment variables from .env file
load_dotenv()

from . import config
from .routes import bp
from .storage import StorageManager


def create_app(test_config=None):
    """Create and configure the Flask application"""
    app = Flask(__name__)

    # No sessions or logins, so a per-process key is enough when none is set
    app.config['SECRET_KEY'] = os.environ.get('SECRET_KEY', '').strip() or secrets.token_hex(32)
    app.config['DATA_DIR'] = config.DATA_DIR
    app.config['SEED_SAMPLE_DATA'] = config.SEED_SAMPLE_DATA
    app.config['MAX_CONTENT_LENGTH'] = 1 * 1024 * 1024
    app.json.ensure_ascii = False

    if test_config:
        app.config.update(test_config)

    # Handle reverse proxy headers (X-Forwarded-*)
    try:
        num_proxies = int(os.environ.get('PROXY_FIX_NUM_PROXIES', '1'))
    except ValueError:
        app.logger.warning("PROXY_FIX_NUM_PROXIES is not a number; ProxyFix disabled")
        num_proxies = 0
    if num_proxies > 0:
        app.wsgi_app = ProxyFix(app.wsgi_app, x_for=num_proxies, x_proto=num_proxies, x_host=num_proxies)
        app.logger.info(f"ProxyFix enabled with {num_proxies} proxy(ies)")

    # Storage is shared by every request of this app
    storage = StorageManager(app.config['DATA_DIR'])
    app.extensions['pitchlog_storage'] = storage

    app.register_blueprint(bp)

    @app.route('/health', methods=['GET'])
    def health_check():
        """Health check endpoint for load balancers and monitoring"""
        return jsonify({
            'status': 'healthy',
            'service': 'PitchLog'
        }), 200

    # Error handlers return JSON for API routes instead of HTML
    @app.errorhandler(500)
    def handle_500_error(e):
        """Return JSON for API errors - details stay in the server log"""
        if request.path.startswith('/api/'):
            app.logger.error(f"500 error on {request.path}: {e}", exc_info=True)
            return jsonify({
                'success': False,
                'errors': ['An internal error occurred. Please try again later.']
            }), 500
        return e

    @app.errorhandler(404)
    def handle_404_error(e):
        """Return JSON for API 404 errors"""
        if request.path.startswith('/api/'):
            return jsonify({
                'success': False,
                'errors': ['Endpoint not found']
            }), 404
        return e

    @app.errorhandler(405)
    def handle_405_error(e):
        if request.path.startswith('/api/'):
            return jsonify({
                'success': False,
                'errors': [f'Method {request.method} not allowed']
            }), 405
        return e

    @app.errorhandler(400)
    def handle_400_error(e):
        """Return JSON for malformed requests"""
        if request.path.startswith('/api/'):
            error_description = str(e.description) if hasattr(e, 'description') else str(e)
            return jsonify({
                'success': False,
                'errors': [error_description if error_description else 'Bad request']
            }), 400
        return e

    if app.config['SEED_SAMPLE_DATA']:
        _initialize_sample_data(app, storage)

    return app


def _initialize_sample_data(app: Flask, storage: StorageManager):
    """Seed a sample player with a few records if the store has no players"""
    if not storage.is_empty():
        return

    now = datetime.now().replace(second=0, microsecond=0)

    player = storage.create_player({
        "name": "Sam Carter",
        "age": 11,
        "position": "Midfielder",
        "team_name": "Riverside Rovers",
        "jersey_number": "8",
        "is_captain": True,
        "division": "U11 League One"
    })

    club = storage.create_club({
        "player_id": player.id,
        "name": "Riverside Rovers",
        "type": "primary",
        "squad_level": "U11 Development Squad",
        "season_start": (now - timedelta(days=60)).isoformat(),
        "season_end": (now + timedelta(days=200)).isoformat(),
        "status": "active"
    })

    storage.create_coach({
        "player_id": player.id,
        "club_id": club.id,
        "name": "Alex Moreno",
        "title": "Head Coach",
        "is_active": True
    })

    tournament = storage.create_tournament({
        "player_id": player.id,
        "club_id": club.id,
        "name": "Autumn Cup",
        "description": "Regional U11 tournament",
        "start_date": (now - timedelta(days=21)).isoformat(),
        "end_date": (now + timedelta(days=14)).isoformat(),
        "status": "active",
        "format": "league",
        "match_format": "7v7",
        "total_teams": 8,
        "current_position": 3,
        "points": 4
    })

    sample_games = [
        {
            "game_type": "tournament",
            "tournament_id": tournament.id,
            "tournament_stage": "league",
            "opponent": "Hillside United",
            "date": (now - timedelta(days=14)).isoformat(),
            "home_away": "home",
            "team_score": 3,
            "opponent_score": 1,
            "player_goals": 1,
            "player_assists": 1,
            "points_earned": 3,
            "position_played": "Midfielder",
            "minutes_played": 40,
            "rating": "8/10",
            "notes": "Controlled the middle of the park."
        },
        {
            "game_type": "tournament",
            "tournament_id": tournament.id,
            "tournament_stage": "league",
            "opponent": "Harbour Athletic",
            "date": (now - timedelta(days=7)).isoformat(),
            "home_away": "away",
            "team_score": 2,
            "opponent_score": 2,
            "player_goals": 0,
            "player_assists": 1,
            "points_earned": 1,
            "position_played": "Midfielder",
            "minutes_played": 40
        },
        {
            "game_type": "friendly",
            "opponent": "Northgate Juniors",
            "date": (now - timedelta(days=3)).isoformat(),
            "home_away": "home",
            "match_format": "5v5",
            "team_score": 1,
            "opponent_score": 2,
            "player_goals": 1,
            "player_assists": 0,
            "position_played": "Forward",
            "minutes_played": 30,
            "mistakes": 2
        }
    ]
    for game in sample_games:
        storage.create_game(dict(game, player_id=player.id))

    sample_training = [
        ("Ball Control", now - timedelta(days=5), 75, "completed"),
        ("Speed & Agility", now + timedelta(days=2), 60, "pending"),
        ("Team Practice", now + timedelta(days=5), 90, "pending"),
    ]
    for session_type, when, duration, attendance in sample_training:
        storage.create_training_session({
            "player_id": player.id,
            "type": session_type,
            "date": when.isoformat(),
            "duration": duration,
            "location": "Riverside Park",
            "coach": "Alex Moreno",
            "attendance": attendance,
            "completed": attendance == "completed"
        })

    storage.create_coach_feedback({
        "player_id": player.id,
        "coach": "Alex Moreno",
        "date": (now - timedelta(days=7)).isoformat(),
        "comment": "Good scanning before receiving. Keep working on the weaker foot.",
        "strengths": ["Vision", "Work rate"],
        "improvements": ["Weak foot", "Shooting from distance"],
        "rating": 8
    })

    app.logger.info(f"Seeded sample data for player {player.id}")


def main():
    """Main entry point - Development only"""
    flask_env = os.environ.get('FLASK_ENV', '').strip().lower()
    if flask_env == 'production':
        print("ERROR: Flask development server cannot run in production mode.")
        print("Use gunicorn instead:")
        print("  gunicorn -c gunicorn.conf.py wsgi:app")
        sys.exit(1)

    app = create_app()
    port = int(os.environ.get('PORT', '8080'))

    print("PitchLog starting in DEVELOPMENT mode...")
    print(f"API available at http://127.0.0.1:{port}/api")
    print("Press Ctrl+C to stop the application")

    try:
        app.run(host='127.0.0.1', port=port, debug=False)
    except KeyboardInterrupt:
        print("\nShutting down PitchLog...")


if __name__ == '__main__':
    main()
