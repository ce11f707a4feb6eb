from datetime import datetime
from typing import Optional, List, Dict
from pydantic import BaseModel, Field, validator
from enum import Enum


class GameResult(str, Enum):
    WIN = "Win"
    DRAW = "Draw"
    LOSS = "Loss"


class GameType(str, Enum):
    PRACTICE = "practice"
    FRIENDLY = "friendly"
    TOURNAMENT = "tournament"


class HomeAway(str, Enum):
    HOME = "home"
    AWAY = "away"


class TournamentStage(str, Enum):
    LEAGUE = "league"
    KNOCKOUT = "knockout"
    ROUND_OF_16 = "round-of-16"
    QUARTER_FINAL = "quarter-final"
    SEMI_FINAL = "semi-final"
    FINAL = "final"


class TournamentStatus(str, Enum):
    UPCOMING = "upcoming"
    ACTIVE = "active"
    COMPLETED = "completed"


class Attendance(str, Enum):
    PENDING = "pending"
    COMPLETED = "completed"
    MISSED = "missed"
    CANCELLED = "cancelled"


class ClubType(str, Enum):
    PRIMARY = "primary"
    ADHOC = "adhoc"


class ClubStatus(str, Enum):
    ACTIVE = "active"
    INACTIVE = "inactive"


def _blank_to_none(v):
    if isinstance(v, str) and not v.strip():
        return None
    return v


class Player(BaseModel):
    id: Optional[int] = None
    name: str
    age: int
    position: str
    team_name: str
    jersey_number: Optional[str] = None
    is_captain: bool = False
    division: Optional[str] = None
    profile_picture: Optional[str] = None  # URL supplied by the client

    @validator('name', 'position', 'team_name')
    def validate_required_text(cls, v):
        if not v or not v.strip():
            raise ValueError('Value cannot be empty')
        return v.strip()

    @validator('age')
    def validate_age(cls, v):
        if v < 0:
            raise ValueError('Age must be non-negative')
        return v


class Game(BaseModel):
    id: Optional[int] = None
    player_id: int
    game_type: GameType = GameType.FRIENDLY
    match_format: str = "7v7"  # "2v2", "4v4", "5v5", "7v7", ...
    tournament_id: Optional[int] = None  # Weak reference, never cascaded
    tournament_stage: Optional[TournamentStage] = None
    opponent: str
    date: datetime
    home_away: HomeAway = HomeAway.HOME
    team_score: int
    opponent_score: int
    player_goals: int = 0
    player_assists: int = 0
    points_earned: int = 0  # Literal points entered by the user
    position_played: str = ""
    minutes_played: int = 0
    mistakes: int = 0
    rating: Optional[str] = None
    coach_feedback: Optional[str] = None
    notes: Optional[str] = None
    venue: Optional[str] = None

    @validator('tournament_id', 'tournament_stage', pre=True)
    def validate_optional_refs(cls, v):
        return _blank_to_none(v)

    @validator('player_goals', 'player_assists', 'points_earned', 'minutes_played', 'mistakes', pre=True)
    def default_missing_counters(cls, v):
        # Partially-filled records contribute zero
        if v is None or (isinstance(v, str) and not v.strip()):
            return 0
        return v

    @validator('team_score', 'opponent_score', 'player_goals', 'player_assists',
               'points_earned', 'minutes_played', 'mistakes')
    def validate_non_negative(cls, v):
        if v < 0:
            raise ValueError('Value must be non-negative')
        return v

    @validator('opponent')
    def validate_opponent(cls, v):
        if not v or not v.strip():
            raise ValueError('Opponent cannot be empty')
        return v.strip()


class Tournament(BaseModel):
    id: Optional[int] = None
    player_id: int
    club_id: Optional[int] = None
    name: str
    description: Optional[str] = None
    start_date: Optional[datetime] = None
    end_date: Optional[datetime] = None
    status: TournamentStatus = TournamentStatus.UPCOMING
    format: Optional[str] = None  # 'league', 'knockout', 'group'
    match_format: Optional[str] = None
    venue: Optional[str] = None
    total_teams: Optional[int] = None
    current_position: Optional[int] = None  # Read off the points table
    points: Optional[int] = 0  # Read off the points table
    logo: Optional[str] = None

    @validator('club_id', 'start_date', 'end_date', 'total_teams', 'current_position', pre=True)
    def validate_blank_optionals(cls, v):
        return _blank_to_none(v)

    @validator('name')
    def validate_name(cls, v):
        if not v or not v.strip():
            raise ValueError('Tournament name cannot be empty')
        return v.strip()


class TrainingSession(BaseModel):
    id: Optional[int] = None
    player_id: int
    type: str
    date: datetime
    duration: int  # Minutes
    location: Optional[str] = None
    coach: Optional[str] = None
    notes: Optional[str] = None
    completed: bool = False
    attendance: Attendance = Attendance.PENDING
    coach_feedback: Optional[str] = None

    @validator('duration')
    def validate_duration(cls, v):
        if v <= 0:
            raise ValueError('Duration must be positive')
        return v


class CoachFeedback(BaseModel):
    id: Optional[int] = None
    player_id: int
    game_id: Optional[int] = None
    coach: str
    date: datetime
    comment: str
    strengths: List[str] = Field(default_factory=list)
    improvements: List[str] = Field(default_factory=list)
    rating: Optional[float] = None

    @validator('game_id', 'rating', pre=True)
    def validate_blank_optionals(cls, v):
        return _blank_to_none(v)

    @validator('comment')
    def validate_comment(cls, v):
        if not v or not v.strip():
            raise ValueError('Comment cannot be empty')
        return v.strip()


class SquadMember(BaseModel):
    id: Optional[int] = None
    player_id: int
    club_id: Optional[int] = None
    name: str
    position: str  # "Goalkeeper", "Defender", "Midfielder", "Forward"
    jersey_number: Optional[int] = None
    age: Optional[int] = None
    profile_picture: Optional[str] = None
    notes: Optional[str] = None

    @validator('club_id', 'jersey_number', 'age', pre=True)
    def validate_blank_optionals(cls, v):
        return _blank_to_none(v)


class Club(BaseModel):
    id: Optional[int] = None
    player_id: int
    name: str
    type: ClubType = ClubType.PRIMARY
    squad_level: Optional[str] = None  # e.g. "U10 Elite Squad Training"
    season_start: Optional[datetime] = None
    season_end: Optional[datetime] = None
    status: ClubStatus = ClubStatus.ACTIVE
    description: Optional[str] = None
    logo: Optional[str] = None

    @validator('season_start', 'season_end', pre=True)
    def validate_blank_dates(cls, v):
        return _blank_to_none(v)

    @validator('logo', pre=True)
    def drop_blob_urls(cls, v):
        # Browser-local object URLs are meaningless once stored
        if isinstance(v, str) and v.startswith('blob:'):
            return None
        return _blank_to_none(v)


class Coach(BaseModel):
    id: Optional[int] = None
    player_id: int
    club_id: Optional[int] = None
    name: str
    title: str  # "Head Coach", "Assistant Coach", "Adhoc Coach"
    contact: Optional[str] = None
    is_active: bool = True
    profile_picture: Optional[str] = None

    @validator('club_id', pre=True)
    def validate_blank_club(cls, v):
        return _blank_to_none(v)

    @validator('is_active', pre=True)
    def parse_form_boolean(cls, v):
        if isinstance(v, str):
            return v.strip().lower() == 'true'
        return v


class CoachingStaff(BaseModel):
    id: Optional[int] = None
    player_id: int
    name: str
    role: str  # 'Head Coach', 'Assistant Coach', 'Goalkeeper Coach'
    contact: Optional[str] = None


class StatsSummary(BaseModel):
    """Dashboard totals, computed fresh on every request"""
    total_goals: int = 0
    total_assists: int = 0
    total_games: int = 0
    win_rate: int = 0  # 0-100
    season_goals: int = 0
    month_assists: int = 0


class TournamentStats(BaseModel):
    """Per-tournament tallies, computed fresh on every request"""
    points: int = 0
    wins: int = 0
    draws: int = 0
    losses: int = 0
    team_goals_scored: int = 0
    goals_conceded: int = 0
    player_goals_scored: int = 0
    player_assists: int = 0
    games_played: int = 0


class TournamentOverview(BaseModel):
    """Tournaments list row: the stored tournament plus its derived figures"""
    tournament: Tournament
    stats: TournamentStats
    standings_points: int = 0
    literal_points: int = 0
    win_rate: int = 0

    def to_row(self) -> Dict:
        # Stored points (read off the points table) stay under 'points'
        row = self.tournament.model_dump(mode='json')
        row['stats'] = self.stats.model_dump()
        row['games_played'] = self.stats.games_played
        row['standings_points'] = self.standings_points
        row['literal_points'] = self.literal_points
        row['win_rate'] = self.win_rate
        return row
