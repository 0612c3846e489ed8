"""Tests for standings ordering."""

from pickpool.pool.standings import build_standings
from pickpool.pool.types import UserStats


def stats_for(**points):
    return {name: UserStats(total_points=p, wins=p) for name, p in points.items()}


class TestBuildStandings:
    def test_sorted_by_points_descending(self):
        rows = build_standings(stats_for(A=5, B=7, C=7))
        assert [row.username for row in rows] == ["B", "C", "A"]

    def test_tie_broken_by_username(self):
        rows = build_standings(stats_for(C=7, B=7))
        assert [row.username for row in rows] == ["B", "C"]

    def test_tie_on_points_broken_by_wins(self):
        stats = {
            "alice": UserStats(total_points=4, wins=3, losses=0, parlays=1),
            "bob": UserStats(total_points=4, wins=4, losses=2, parlays=0),
        }
        rows = build_standings(stats)
        assert [row.username for row in rows] == ["bob", "alice"]
        assert [row.rank for row in rows] == [1, 2]

    def test_username_order_is_case_insensitive(self):
        rows = build_standings(stats_for(bob=3, Alice=3))
        assert [row.username for row in rows] == ["Alice", "bob"]

    def test_equal_rows_share_rank(self):
        rows = build_standings(stats_for(A=5, B=7, C=7))
        assert [row.rank for row in rows] == [1, 1, 3]

    def test_row_carries_all_stats(self):
        stats = {"alice": UserStats(total_points=9, wins=7, losses=5, parlays=2)}
        row = build_standings(stats)[0]
        assert row.to_dict() == {
            "rank": 1,
            "username": "alice",
            "total_points": 9,
            "wins": 7,
            "losses": 5,
            "parlays": 2,
        }

    def test_deterministic(self):
        stats = stats_for(d=1, c=1, b=2, a=2)
        assert build_standings(stats) == build_standings(dict(reversed(stats.items())))

    def test_empty(self):
        assert build_standings({}) == []
