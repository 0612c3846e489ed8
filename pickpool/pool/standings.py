from pickpool.pool.types import StandingsRow


def standings_sort_key(row):
    """Points, then wins (both descending), then username ascending."""
    return (-row.total_points, -row.wins, row.username.lower(), row.username)


def build_standings(stats):
    """
    Rank aggregated statistics into a leaderboard

    Args:
        stats: mapping of username to UserStats, as built by compute_stats()

    Returns:
        list of StandingsRow, best first, with 1-based ``rank``. Rows with
        equal points and wins share a rank.
    """
    rows = sorted(
        (
            StandingsRow(
                username=username,
                total_points=user_stats.total_points,
                wins=user_stats.wins,
                losses=user_stats.losses,
                parlays=user_stats.parlays,
            )
            for username, user_stats in stats.items()
        ),
        key=standings_sort_key,
    )

    ranked = []
    for position, row in enumerate(rows, start=1):
        previous = ranked[-1] if ranked else None
        if (
            previous
            and previous.total_points == row.total_points
            and previous.wins == row.wins
        ):
            rank = previous.rank
        else:
            rank = position
        ranked.append(
            StandingsRow(
                username=row.username,
                total_points=row.total_points,
                wins=row.wins,
                losses=row.losses,
                parlays=row.parlays,
                rank=rank,
            )
        )
    return ranked
