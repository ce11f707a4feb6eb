"""
Configuration constants for PitchLog
"""
import os

# JSON store location - can be overridden by environment variable
DATA_DIR = os.environ.get('PITCHLOG_DATA_DIR', 'data')

# Seed a sample player and records when the store is empty
SEED_SAMPLE_DATA = os.environ.get('PITCHLOG_SEED_SAMPLE_DATA', 'true').strip().lower() in ('1', 'true', 'yes')

# Trailing windows for the dashboard summary (calendar months)
SEASON_WINDOW_MONTHS = 3
MONTH_WINDOW_MONTHS = 1

# Standings-table points per result
WIN_POINTS = 3
DRAW_POINTS = 1
LOSS_POINTS = 0

# List limits
RECENT_GAMES_LIMIT = 5
UPCOMING_TRAINING_LIMIT = 5
RECENT_FORM_GAMES = 10

# Tournament stages in display order; games without a stage land in 'unassigned'
STAGE_ORDER = ['league', 'knockout', 'round-of-16', 'quarter-final', 'semi-final', 'final', 'unassigned']

WEEKDAYS = ['Monday', 'Tuesday', 'Wednesday', 'Thursday', 'Friday', 'Saturday', 'Sunday']
