import json
import logging
from pathlib import Path
from typing import Optional, Dict, Any, List, Type
from datetime import datetime

from pydantic import BaseModel

from .config import DATA_DIR, RECENT_GAMES_LIMIT, UPCOMING_TRAINING_LIMIT
from .models import (
    Player, Game, Tournament, TrainingSession, CoachFeedback, SquadMember, Club, Coach, CoachingStaff,
    TournamentStatus, ClubStatus,
)
from .utils import parse_datetime, sort_by_date

logger = logging.getLogger(__name__)

# collection name -> (file name, model)
COLLECTIONS: Dict[str, tuple] = {
    'players': ("players.json", Player),
    'games': ("games.json", Game),
    'tournaments': ("tournaments.json", Tournament),
    'training_sessions': ("training_sessions.json", TrainingSession),
    'coach_feedback': ("coach_feedback.json", CoachFeedback),
    'squad_members': ("squad_members.json", SquadMember),
    'clubs': ("clubs.json", Club),
    'coaches': ("coaches.json", Coach),
    'coaching_staff': ("coaching_staff.json", CoachingStaff),
}


class StorageManager:
    """
    JSON-file record store.

    Each collection lives in its own file as a list of records. Ids are
    positive integers from a per-collection counter that never goes back,
    so a deleted record's id is never handed out again.
    """

    def __init__(self, data_dir: Optional[str] = None):
        self.data_dir = Path(data_dir or DATA_DIR)
        self.counters_file = self.data_dir / "counters.json"

        # Ensure data directory exists
        self.data_dir.mkdir(parents=True, exist_ok=True)

        # Initialize files if they don't exist
        self._initialize_files()

    def _initialize_files(self):
        """Create empty collection files and the id counters on first run"""
        for name in COLLECTIONS:
            if not self._file_for(name).exists():
                self._save(name, [])

        if not self.counters_file.exists():
            self._save_counters({})

    def _file_for(self, collection: str) -> Path:
        return self.data_dir / COLLECTIONS[collection][0]

    def _model_for(self, collection: str) -> Type[BaseModel]:
        return COLLECTIONS[collection][1]

    def _save(self, collection: str, records: list) -> None:
        """Write a whole collection back to its JSON file"""
        try:
            with open(self._file_for(collection), 'w', encoding='utf-8') as f:
                json.dump(records, f, indent=2, ensure_ascii=False)
        except (IOError, OSError) as e:
            raise RuntimeError(f"Failed to save {collection.replace('_', ' ')}: {str(e)}")

    def _load(self, collection: str) -> list:
        """Load raw records; an unreadable file reads as an empty collection"""
        try:
            with open(self._file_for(collection), 'r', encoding='utf-8') as f:
                data = json.load(f)
                return data if isinstance(data, list) else []
        except (FileNotFoundError, json.JSONDecodeError):
            logger.warning("Could not read %s; treating it as empty", self._file_for(collection))
            return []

    def _load_counters(self) -> Dict[str, int]:
        try:
            with open(self.counters_file, 'r', encoding='utf-8') as f:
                data = json.load(f)
                return data if isinstance(data, dict) else {}
        except (FileNotFoundError, json.JSONDecodeError):
            return {}

    def _save_counters(self, counters: Dict[str, int]) -> None:
        try:
            with open(self.counters_file, 'w', encoding='utf-8') as f:
                json.dump(counters, f, indent=2)
        except (IOError, OSError) as e:
            raise RuntimeError(f"Failed to save id counters: {str(e)}")

    def _next_id(self, collection: str, records: list) -> int:
        counters = self._load_counters()
        highest = max((r.get('id') or 0 for r in records if isinstance(r.get('id'), int)), default=0)
        next_id = max(counters.get(collection, 0), highest) + 1
        counters[collection] = next_id
        self._save_counters(counters)
        return next_id

    def _parse(self, collection: str, record: Dict[str, Any]) -> Optional[BaseModel]:
        try:
            return self._model_for(collection)(**record)
        except (ValueError, TypeError, KeyError) as e:
            # Skip invalid records rather than failing the whole list
            logger.warning("Skipping invalid %s record %s: %s", collection, record.get('id'), e)
            return None

    def _all(self, collection: str, player_id: Optional[int] = None) -> list:
        records = self._load(collection)
        if player_id is not None:
            records = [r for r in records if r.get('player_id') == player_id]
        parsed = (self._parse(collection, r) for r in records)
        return [item for item in parsed if item is not None]

    def _get(self, collection: str, record_id: int):
        for record in self._load(collection):
            if record.get('id') == record_id:
                return self._parse(collection, record)
        return None

    def _create(self, collection: str, data: Dict[str, Any]):
        """Validate and insert a new record, returning the stored model"""
        model = self._model_for(collection)
        data = {k: v for k, v in data.items() if k != 'id'}
        item = model(**data)  # raises ValidationError before anything is written

        records = self._load(collection)
        item.id = self._next_id(collection, records)
        records.append(item.model_dump(mode='json'))
        self._save(collection, records)
        return item

    def _update(self, collection: str, record_id: int, changes: Dict[str, Any]):
        """Apply a partial update; returns None when the record does not exist"""
        model = self._model_for(collection)
        records = self._load(collection)
        for index, record in enumerate(records):
            if record.get('id') == record_id:
                merged = dict(record)
                # A record never changes id or owner
                merged.update({k: v for k, v in changes.items() if k not in ('id', 'player_id')})
                item = model(**merged)
                item.id = record_id
                records[index] = item.model_dump(mode='json')
                self._save(collection, records)
                return item
        return None

    def _delete(self, collection: str, record_id: int) -> bool:
        records = self._load(collection)
        remaining = [r for r in records if r.get('id') != record_id]
        if len(remaining) < len(records):
            self._save(collection, remaining)
            return True
        return False

    # Player methods
    def get_player(self, player_id: int) -> Optional[Player]:
        return self._get('players', player_id)

    def create_player(self, data: Dict[str, Any]) -> Player:
        return self._create('players', data)

    def update_player(self, player_id: int, changes: Dict[str, Any]) -> Optional[Player]:
        return self._update('players', player_id, changes)

    def get_all_players(self) -> List[Player]:
        return self._all('players')

    # Game methods
    def get_game(self, game_id: int) -> Optional[Game]:
        return self._get('games', game_id)

    def create_game(self, data: Dict[str, Any]) -> Game:
        return self._create('games', data)

    def update_game(self, game_id: int, changes: Dict[str, Any]) -> Optional[Game]:
        return self._update('games', game_id, changes)

    def delete_game(self, game_id: int) -> bool:
        return self._delete('games', game_id)

    def get_games_by_player(self, player_id: int) -> List[Game]:
        """All of a player's games, newest first"""
        return sort_by_date(self._all('games', player_id))

    def get_recent_games(self, player_id: int, limit: int = RECENT_GAMES_LIMIT) -> List[Game]:
        return self.get_games_by_player(player_id)[:limit]

    def get_games_by_tournament(self, tournament_id: int) -> List[Game]:
        return sort_by_date([g for g in self._all('games') if g.tournament_id == tournament_id])

    # Tournament methods
    def get_tournament(self, tournament_id: int) -> Optional[Tournament]:
        return self._get('tournaments', tournament_id)

    def create_tournament(self, data: Dict[str, Any]) -> Tournament:
        return self._create('tournaments', data)

    def update_tournament(self, tournament_id: int, changes: Dict[str, Any]) -> Optional[Tournament]:
        return self._update('tournaments', tournament_id, changes)

    def delete_tournament(self, tournament_id: int) -> bool:
        """Delete a tournament; its games keep their tournament_id and become orphans"""
        return self._delete('tournaments', tournament_id)

    def get_tournaments_by_player(self, player_id: int) -> List[Tournament]:
        return self._all('tournaments', player_id)

    def get_active_tournaments(self, player_id: int) -> List[Tournament]:
        return [t for t in self.get_tournaments_by_player(player_id) if t.status == TournamentStatus.ACTIVE]

    # Training methods
    def create_training_session(self, data: Dict[str, Any]) -> TrainingSession:
        return self._create('training_sessions', data)

    def update_training_session(self, session_id: int, changes: Dict[str, Any]) -> Optional[TrainingSession]:
        return self._update('training_sessions', session_id, changes)

    def delete_training_session(self, session_id: int) -> bool:
        return self._delete('training_sessions', session_id)

    def get_training_sessions_by_player(self, player_id: int) -> List[TrainingSession]:
        """All sessions, earliest first"""
        return sort_by_date(self._all('training_sessions', player_id), newest_first=False)

    def get_upcoming_training(self, player_id: int, now: Optional[datetime] = None,
                              limit: int = UPCOMING_TRAINING_LIMIT) -> List[TrainingSession]:
        now = now or datetime.now()
        upcoming = [s for s in self.get_training_sessions_by_player(player_id)
                    if (parse_datetime(s.date) or datetime.min) >= now]
        return upcoming[:limit]

    # Coach feedback methods
    def create_coach_feedback(self, data: Dict[str, Any]) -> CoachFeedback:
        return self._create('coach_feedback', data)

    def update_coach_feedback(self, feedback_id: int, changes: Dict[str, Any]) -> Optional[CoachFeedback]:
        return self._update('coach_feedback', feedback_id, changes)

    def delete_coach_feedback(self, feedback_id: int) -> bool:
        return self._delete('coach_feedback', feedback_id)

    def get_feedback_by_player(self, player_id: int) -> List[CoachFeedback]:
        """All feedback, newest first"""
        return sort_by_date(self._all('coach_feedback', player_id))

    def get_recent_feedback(self, player_id: int, limit: int = 5) -> List[CoachFeedback]:
        return self.get_feedback_by_player(player_id)[:limit]

    # Squad methods
    def create_squad_member(self, data: Dict[str, Any]) -> SquadMember:
        return self._create('squad_members', data)

    def update_squad_member(self, member_id: int, changes: Dict[str, Any]) -> Optional[SquadMember]:
        return self._update('squad_members', member_id, changes)

    def delete_squad_member(self, member_id: int) -> bool:
        return self._delete('squad_members', member_id)

    def get_squad_by_player(self, player_id: int) -> List[SquadMember]:
        return self._all('squad_members', player_id)

    # Club methods
    def get_club(self, club_id: int) -> Optional[Club]:
        return self._get('clubs', club_id)

    def create_club(self, data: Dict[str, Any]) -> Club:
        return self._create('clubs', data)

    def update_club(self, club_id: int, changes: Dict[str, Any]) -> Optional[Club]:
        return self._update('clubs', club_id, changes)

    def delete_club(self, club_id: int) -> bool:
        return self._delete('clubs', club_id)

    def get_clubs_by_player(self, player_id: int) -> List[Club]:
        return self._all('clubs', player_id)

    def get_active_clubs(self, player_id: int) -> List[Club]:
        return [c for c in self.get_clubs_by_player(player_id) if c.status == ClubStatus.ACTIVE]

    # Coach methods
    def create_coach(self, data: Dict[str, Any]) -> Coach:
        return self._create('coaches', data)

    def update_coach(self, coach_id: int, changes: Dict[str, Any]) -> Optional[Coach]:
        return self._update('coaches', coach_id, changes)

    def delete_coach(self, coach_id: int) -> bool:
        return self._delete('coaches', coach_id)

    def get_coaches_by_player(self, player_id: int) -> List[Coach]:
        return self._all('coaches', player_id)

    def get_coaches_by_club(self, club_id: int) -> List[Coach]:
        return [c for c in self._all('coaches') if c.club_id == club_id]

    def get_active_coaches(self, player_id: int) -> List[Coach]:
        return [c for c in self.get_coaches_by_player(player_id) if c.is_active]

    # Coaching staff methods
    def create_coaching_staff_member(self, data: Dict[str, Any]) -> CoachingStaff:
        return self._create('coaching_staff', data)

    def update_coaching_staff_member(self, staff_id: int, changes: Dict[str, Any]) -> Optional[CoachingStaff]:
        return self._update('coaching_staff', staff_id, changes)

    def delete_coaching_staff_member(self, staff_id: int) -> bool:
        return self._delete('coaching_staff', staff_id)

    def get_coaching_staff_by_player(self, player_id: int) -> List[CoachingStaff]:
        return self._all('coaching_staff', player_id)

    def is_empty(self) -> bool:
        return not self._load('players')
