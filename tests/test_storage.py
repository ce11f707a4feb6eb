import unittest
import tempfile
import os
import json
import shutil
from datetime import datetime, timedelta

# Add the project root to the path
import sys
sys.path.insert(0, os.path.join(os.path.dirname(__file__), '..'))

from pydantic import ValidationError

from pitchlog.storage import StorageManager, COLLECTIONS
from pitchlog.models import Attendance, TournamentStatus


class TestStorageManager(unittest.TestCase):
    def setUp(self):
        """Set up test environment with temporary directory"""
        self.temp_dir = tempfile.mkdtemp()
        self.storage = StorageManager(data_dir=self.temp_dir)
        self.player = self.storage.create_player({
            'name': 'Test Player',
            'age': 11,
            'position': 'Midfielder',
            'team_name': 'Test FC',
        })

    def tearDown(self):
        """Clean up test environment"""
        shutil.rmtree(self.temp_dir)

    def _game(self, **overrides):
        data = {
            'player_id': self.player.id,
            'opponent': 'Rivals FC',
            'date': '2025-05-01T10:00:00',
            'team_score': 2,
            'opponent_score': 1,
        }
        data.update(overrides)
        return self.storage.create_game(data)

    def test_initialize_files(self):
        """Test that files are initialized on first run"""
        fresh_dir = tempfile.mkdtemp()
        try:
            StorageManager(data_dir=fresh_dir)
            for file_name, _ in COLLECTIONS.values():
                with open(os.path.join(fresh_dir, file_name), 'r') as f:
                    self.assertEqual(json.load(f), [])
            self.assertTrue(os.path.exists(os.path.join(fresh_dir, 'counters.json')))
        finally:
            shutil.rmtree(fresh_dir)

    def test_create_and_get_game(self):
        game = self._game(player_goals=2)
        self.assertEqual(game.id, 1)

        loaded = self.storage.get_game(game.id)
        self.assertEqual(loaded.opponent, 'Rivals FC')
        self.assertEqual(loaded.player_goals, 2)
        self.assertEqual(loaded.date, datetime(2025, 5, 1, 10, 0))
        self.assertIsNone(self.storage.get_game(999))

    def test_invalid_game_is_not_written(self):
        with self.assertRaises(ValidationError):
            self._game(team_score=-1)
        self.assertEqual(self.storage.get_games_by_player(self.player.id), [])

    def test_client_supplied_id_is_ignored(self):
        game = self._game(id=42)
        self.assertEqual(game.id, 1)

    def test_ids_are_never_reused(self):
        first = self._game()
        second = self._game()
        self.assertTrue(self.storage.delete_game(second.id))

        third = self._game()
        self.assertNotEqual(third.id, second.id)
        self.assertGreater(third.id, first.id)

    def test_games_by_player_newest_first(self):
        self._game(date='2025-03-01T10:00:00', opponent='Oldest')
        self._game(date='2025-05-01T10:00:00', opponent='Newest')
        self._game(date='2025-04-01T10:00:00', opponent='Middle')
        self._game(player_id=99, opponent='Someone else')

        games = self.storage.get_games_by_player(self.player.id)
        self.assertEqual([g.opponent for g in games], ['Newest', 'Middle', 'Oldest'])
        self.assertEqual([g.opponent for g in self.storage.get_recent_games(self.player.id, 2)],
                         ['Newest', 'Middle'])

    def test_partial_update(self):
        game = self._game(player_goals=1, notes='First half only')
        updated = self.storage.update_game(game.id, {'player_goals': 3, 'id': 500})

        self.assertEqual(updated.id, game.id)
        self.assertEqual(updated.player_goals, 3)
        self.assertEqual(updated.notes, 'First half only')
        self.assertEqual(self.storage.get_game(game.id).player_goals, 3)
        self.assertIsNone(self.storage.update_game(999, {'player_goals': 1}))

        # Updates cannot move a record to another player
        moved = self.storage.update_game(game.id, {'player_id': 99, 'notes': 'Moved'})
        self.assertEqual(moved.player_id, self.player.id)
        self.assertEqual(moved.notes, 'Moved')
        self.assertEqual(self.storage.get_games_by_player(99), [])

        with self.assertRaises(ValidationError):
            self.storage.update_game(game.id, {'opponent_score': -4})
        self.assertEqual(self.storage.get_game(game.id).opponent_score, 1)

    def test_delete_tournament_leaves_games_orphaned(self):
        tournament = self.storage.create_tournament({'player_id': self.player.id, 'name': 'Cup'})
        game = self._game(tournament_id=tournament.id, game_type='tournament')

        self.assertTrue(self.storage.delete_tournament(tournament.id))
        self.assertFalse(self.storage.delete_tournament(tournament.id))

        orphan = self.storage.get_game(game.id)
        self.assertEqual(orphan.tournament_id, tournament.id)
        self.assertEqual(len(self.storage.get_games_by_tournament(tournament.id)), 1)

        # A new tournament never picks up the orphaned games
        replacement = self.storage.create_tournament({'player_id': self.player.id, 'name': 'Cup 2'})
        self.assertNotEqual(replacement.id, tournament.id)
        self.assertEqual(self.storage.get_games_by_tournament(replacement.id), [])

    def test_active_tournaments(self):
        self.storage.create_tournament({'player_id': self.player.id, 'name': 'Now', 'status': 'active'})
        self.storage.create_tournament({'player_id': self.player.id, 'name': 'Later'})
        active = self.storage.get_active_tournaments(self.player.id)
        self.assertEqual([t.name for t in active], ['Now'])
        self.assertEqual(active[0].status, TournamentStatus.ACTIVE)
        self.assertEqual(len(self.storage.get_tournaments_by_player(self.player.id)), 2)

    def test_upcoming_training(self):
        now = datetime(2025, 6, 1, 12, 0)
        for offset in [-3, 1, 2, 3, 4, 5, 6]:
            self.storage.create_training_session({
                'player_id': self.player.id,
                'type': 'Drills',
                'date': (now + timedelta(days=offset)).isoformat(),
                'duration': 60,
            })

        upcoming = self.storage.get_upcoming_training(self.player.id, now=now)
        self.assertEqual(len(upcoming), 5)
        self.assertEqual(upcoming[0].date, now + timedelta(days=1))
        self.assertTrue(all(s.date >= now for s in upcoming))

        sessions = self.storage.get_training_sessions_by_player(self.player.id)
        self.assertEqual(sessions[0].date, now - timedelta(days=3))
        self.assertEqual(sessions[0].attendance, Attendance.PENDING)

    def test_recent_feedback(self):
        for day in [1, 3, 2]:
            self.storage.create_coach_feedback({
                'player_id': self.player.id,
                'coach': 'Coach',
                'date': f'2025-05-0{day}',
                'comment': f'Day {day}',
            })
        recent = self.storage.get_recent_feedback(self.player.id, 2)
        self.assertEqual([f.comment for f in recent], ['Day 3', 'Day 2'])

    def test_clubs_and_coaches(self):
        club = self.storage.create_club({'player_id': self.player.id, 'name': 'Main Club', 'logo': 'blob:abc'})
        self.storage.create_club({'player_id': self.player.id, 'name': 'Old Club', 'status': 'inactive'})
        self.assertIsNone(club.logo)
        self.assertEqual([c.name for c in self.storage.get_active_clubs(self.player.id)], ['Main Club'])

        self.storage.create_coach({'player_id': self.player.id, 'club_id': club.id,
                                   'name': 'A', 'title': 'Head Coach'})
        self.storage.create_coach({'player_id': self.player.id, 'club_id': club.id,
                                   'name': 'B', 'title': 'Assistant Coach', 'is_active': 'false'})
        self.storage.create_coach({'player_id': self.player.id, 'name': 'C', 'title': 'Adhoc Coach'})

        self.assertEqual([c.name for c in self.storage.get_coaches_by_club(club.id)], ['A', 'B'])
        self.assertEqual([c.name for c in self.storage.get_active_coaches(self.player.id)], ['A', 'C'])

    def test_squad_and_staff(self):
        member = self.storage.create_squad_member({'player_id': self.player.id, 'name': 'Kit',
                                                   'position': 'Defender', 'jersey_number': ''})
        self.assertIsNone(member.jersey_number)
        staff = self.storage.create_coaching_staff_member({'player_id': self.player.id,
                                                           'name': 'Pat', 'role': 'Goalkeeper Coach'})
        self.assertEqual(len(self.storage.get_squad_by_player(self.player.id)), 1)
        self.assertTrue(self.storage.delete_coaching_staff_member(staff.id))
        self.assertEqual(self.storage.get_coaching_staff_by_player(self.player.id), [])

    def test_corrupt_file_reads_as_empty(self):
        with open(os.path.join(self.temp_dir, 'games.json'), 'w') as f:
            f.write('{not json')
        self.assertEqual(self.storage.get_games_by_player(self.player.id), [])

    def test_invalid_records_are_skipped(self):
        self._game()
        path = os.path.join(self.temp_dir, 'games.json')
        with open(path, 'r') as f:
            records = json.load(f)
        records.append({'id': 50, 'player_id': self.player.id, 'opponent': 'Broken'})
        with open(path, 'w') as f:
            json.dump(records, f)

        self.assertEqual(len(self.storage.get_games_by_player(self.player.id)), 1)

    def test_players(self):
        self.assertFalse(self.storage.is_empty())
        updated = self.storage.update_player(self.player.id, {'is_captain': True})
        self.assertTrue(updated.is_captain)
        self.assertEqual(updated.name, 'Test Player')
        self.assertEqual(len(self.storage.get_all_players()), 1)


if __name__ == '__main__':
    unittest.main()
