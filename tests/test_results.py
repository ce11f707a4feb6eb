import unittest

# Add the project root to the path
import sys
import os
sys.path.insert(0, os.path.join(os.path.dirname(__file__), '..'))

from pitchlog.models import GameResult, Game
from pitchlog.stats.results import PointsMode, classify, classify_game, standings_points, parse_points_mode


class TestClassify(unittest.TestCase):
    def test_equal_scores_are_draws(self):
        for score in range(0, 8):
            self.assertEqual(classify(score, score), GameResult.DRAW)

    def test_exhaustive_and_exclusive(self):
        """Every scoreline maps to exactly the outcome its comparison implies"""
        for ours in range(0, 6):
            for theirs in range(0, 6):
                result = classify(ours, theirs)
                self.assertEqual(result == GameResult.WIN, ours > theirs)
                self.assertEqual(result == GameResult.LOSS, ours < theirs)
                self.assertEqual(result == GameResult.DRAW, ours == theirs)

    def test_malformed_scores_count_as_zero(self):
        self.assertEqual(classify(None, None), GameResult.DRAW)
        self.assertEqual(classify("2", None), GameResult.WIN)
        self.assertEqual(classify("abc", 1), GameResult.LOSS)

    def test_classify_game_accepts_models_and_dicts(self):
        game = Game(player_id=1, opponent="Test FC", date="2025-03-01T10:00:00",
                    team_score=2, opponent_score=1)
        self.assertEqual(classify_game(game), GameResult.WIN)
        self.assertEqual(classify_game({'team_score': 0, 'opponent_score': 3}), GameResult.LOSS)
        self.assertEqual(classify_game({}), GameResult.DRAW)


class TestPoints(unittest.TestCase):
    def test_standings_points(self):
        self.assertEqual(standings_points(GameResult.WIN), 3)
        self.assertEqual(standings_points(GameResult.DRAW), 1)
        self.assertEqual(standings_points(GameResult.LOSS), 0)

    def test_parse_points_mode(self):
        self.assertEqual(parse_points_mode(None), PointsMode.STANDINGS)
        self.assertEqual(parse_points_mode('', PointsMode.LITERAL), PointsMode.LITERAL)
        self.assertEqual(parse_points_mode('Literal'), PointsMode.LITERAL)
        self.assertEqual(parse_points_mode(PointsMode.STANDINGS, PointsMode.LITERAL), PointsMode.STANDINGS)

        with self.assertRaises(ValueError):
            parse_points_mode('bonus')


if __name__ == '__main__':
    unittest.main()
