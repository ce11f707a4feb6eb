import unittest

# Add the project root to the path
import sys
import os
sys.path.insert(0, os.path.join(os.path.dirname(__file__), '..'))

from pitchlog.stats.breakdowns import recent_form, monthly_totals, position_counts, result_counts, build_breakdown


GAMES = [
    {'id': 1, 'date': '2025-03-02T10:00:00', 'team_score': 2, 'opponent_score': 1,
     'player_goals': 1, 'player_assists': 0, 'position_played': 'Midfielder'},
    {'id': 2, 'date': '2025-03-20T10:00:00', 'team_score': 0, 'opponent_score': 0,
     'player_goals': 0, 'player_assists': 2, 'position_played': 'Midfielder'},
    {'id': 3, 'date': '2025-04-05T10:00:00', 'team_score': 1, 'opponent_score': 3,
     'player_goals': 1, 'player_assists': 1, 'position_played': 'Forward'},
    {'id': 4, 'date': None, 'team_score': 4, 'opponent_score': 0,
     'player_goals': 3, 'player_assists': None, 'position_played': ''},
]


class TestBreakdowns(unittest.TestCase):
    def test_recent_form_is_chronological(self):
        form = recent_form(GAMES[:3], last_n=2)
        self.assertEqual([point['game_id'] for point in form], [2, 3])
        self.assertEqual([point['index'] for point in form], [1, 2])
        self.assertEqual(form[1]['goals'], 1)
        self.assertEqual(form[0]['date'], '2025-03-20T10:00:00')

    def test_recent_form_non_positive(self):
        self.assertEqual(recent_form(GAMES, last_n=0), [])

    def test_monthly_totals_skip_undated(self):
        months = monthly_totals(GAMES)
        self.assertEqual([m['month'] for m in months], ['2025-03', '2025-04'])
        self.assertEqual(months[0], {'month': '2025-03', 'goals': 1, 'assists': 2, 'games': 2})

    def test_position_counts(self):
        counts = position_counts(GAMES)
        self.assertEqual(list(counts.items()), [('Midfielder', 2), ('Forward', 1), ('Unknown', 1)])

    def test_result_counts(self):
        self.assertEqual(result_counts(GAMES), {'wins': 2, 'draws': 1, 'losses': 1})

    def test_build_breakdown(self):
        breakdown = build_breakdown(GAMES, last_n=10)
        self.assertEqual(len(breakdown['recent_form']), 4)
        self.assertEqual(breakdown['positions'][0], {'position': 'Midfielder', 'games': 2})
        self.assertEqual(breakdown['results']['wins'], 2)

    def test_empty(self):
        breakdown = build_breakdown([])
        self.assertEqual(breakdown['recent_form'], [])
        self.assertEqual(breakdown['monthly'], [])
        self.assertEqual(breakdown['positions'], [])
        self.assertEqual(breakdown['results'], {'wins': 0, 'draws': 0, 'losses': 0})


if __name__ == '__main__':
    unittest.main()
