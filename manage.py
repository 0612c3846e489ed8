#!/usr/bin/env python3
"""
Pick'em Pool Management CLI

Command-line management for the pool: game catalog upkeep, pick submission
and standings.
"""

import logging

import click
from flask import current_app
from flask.cli import with_appcontext
from sqlalchemy import text
from sqlalchemy.exc import SQLAlchemyError

from pickpool import create_app, db
from pickpool.models import Game, Submission
from pickpool.pool.errors import PoolError
from pickpool.pool.types import Game as GameRecord
from pickpool.stores.sql import SqlGameCatalog
from pickpool.utils.cache_utils import invalidate_standings_cache
from pickpool.utils.odds_sync import OddsSync
from pickpool.utils.timezone_utils import format_game_time, parse_kickoff


def pool_service():
    return current_app.extensions["pool_service"]


def validate_week(ctx, param, value):
    max_week = current_app.config.get("MAX_WEEK", 18)
    if value is not None and not 1 <= value <= max_week:
        raise click.BadParameter(f"must be between 1 and {max_week}")
    return value


@click.group()
def cli():
    """Pick'em Pool Management CLI"""
    pass


# Database Commands
@cli.group(name="db")
def db_cmd():
    """Database management commands"""
    pass


@db_cmd.command()
@with_appcontext
def init():
    """Create all tables"""
    try:
        db.create_all()
        click.echo("✅ Database tables created")
    except SQLAlchemyError as e:
        click.echo(f"❌ Database error: {str(e)}")
        logging.error(f"Table creation failed: {e}")


# Game Catalog Commands
@cli.group()
def games():
    """Game catalog commands"""
    pass


@games.command()
@click.argument("week", type=int, callback=validate_week)
@with_appcontext
def sync(week):
    """Pull games, odds and results for WEEK from ESPN"""
    odds_sync = OddsSync(
        SqlGameCatalog(), api_base_url=current_app.config.get("ODDS_API_BASE_URL")
    )
    success, message = odds_sync.sync_week(week)
    if success:
        invalidate_standings_cache()
        click.echo(f"✅ {message}")
    else:
        click.echo(f"❌ Sync failed: {message}")


@games.command()
@click.argument("game_id")
@click.argument("week", type=int, callback=validate_week)
@click.argument("away_team")
@click.argument("home_team")
@click.option("--spread", default="", help="Spread display text, e.g. 'KC -3.5'")
@click.option("--away-spread", type=float, default=0.0, help="Away team spread value")
@click.option("--kickoff", default=None, help="Kickoff as ISO timestamp")
@click.option("--winner", default="", help="Winning team, if already final")
@with_appcontext
def add(game_id, week, away_team, home_team, spread, away_spread, kickoff, winner):
    """Add or update a game by hand (test data, corrections)"""
    if winner and winner not in (away_team, home_team):
        click.echo(f"❌ {winner} is not playing in {game_id}")
        return

    catalog = SqlGameCatalog()
    existing = catalog.get_game(game_id)
    if existing and (existing.week, existing.away_team, existing.home_team) != (
        week,
        away_team,
        home_team,
    ):
        click.echo(
            f"❌ Game {game_id} already exists as {existing.away_team} @ "
            f"{existing.home_team} (week {existing.week})"
        )
        return
    if existing and existing.winner and winner and winner != existing.winner:
        click.echo(f"❌ Game {game_id} is already final ({existing.winner} won)")
        return

    record = GameRecord(
        game_id=game_id,
        week=week,
        away_team=away_team,
        home_team=home_team,
        spread=spread,
        away_spread_value=away_spread,
        kickoff=parse_kickoff(kickoff),
        winner=winner,
    )
    try:
        catalog.upsert_game(record)
        db.session.commit()
    except SQLAlchemyError as e:
        db.session.rollback()
        click.echo(f"❌ Database error adding game: {str(e)}")
        logging.error(f"Game add failed: {e}")
        return

    invalidate_standings_cache()
    click.echo(f"✅ Saved game {game_id}: {away_team} @ {home_team} (week {week})")


@games.command(name="set-winner")
@click.argument("game_id")
@click.argument("team")
@with_appcontext
def set_winner(game_id, team):
    """Record TEAM as the winner of GAME_ID"""
    try:
        game = SqlGameCatalog().set_winner(game_id, team)
    except (PoolError, ValueError) as e:
        click.echo(f"❌ {getattr(e, 'message', str(e))}")
        return

    if game is None:
        click.echo(f"❌ Game {game_id} not found")
        return

    invalidate_standings_cache()
    click.echo(f"✅ {game_id}: {team} wins")


@games.command(name="list")
@click.argument("week", type=int, callback=validate_week)
@with_appcontext
def list_games(week):
    """List games for WEEK"""
    week_games = (
        Game.query.filter_by(week=week).order_by(Game.kickoff, Game.game_id).all()
    )
    if not week_games:
        click.echo(f"No games for week {week}")
        return

    for game in week_games:
        if game.winner:
            result = f"winner: {game.winner}"
        elif game.completed:
            result = "over, no winner"
        else:
            result = "pending"
        click.echo(
            f"{game.game_id:>6}  {game.away_team} @ {game.home_team}  "
            f"[{game.spread or 'no line'}]  {format_game_time(game.kickoff)}  {result}"
        )


# Pick Commands
@cli.group()
def picks():
    """Pick submission commands"""
    pass


@picks.command()
@click.argument("username")
@click.argument("week", type=int, callback=validate_week)
@click.argument("picks_str", metavar="PICKS")
@with_appcontext
def submit(username, week, picks_str):
    """Submit PICKS ("gameId-team,gameId-team") for USERNAME in WEEK"""
    result = pool_service().submit(username, week, picks_str)
    if result.success:
        click.echo(f"✅ {result.message}")
    else:
        click.echo(f"❌ {result.message}")


@picks.command(name="list")
@click.option("--username", default=None, help="Only this user's picks")
@click.option("--week", type=int, default=None, help="Only this week")
@with_appcontext
def list_picks(username, week):
    """List accepted submissions"""
    submissions = pool_service().user_picks(username=username, week=week)
    if not submissions:
        click.echo("No picks found")
        return

    for submission in submissions:
        picked = ", ".join(f"{p.game_id} {p.team}" for p in submission.picks)
        click.echo(f"{submission.username} week {submission.week}: {picked}")


# Info Commands
@cli.command()
@with_appcontext
def standings():
    """Show the current leaderboard"""
    try:
        rows = pool_service().standings()
    except PoolError as e:
        click.echo(f"❌ {e.message}")
        return

    if not rows:
        click.echo("No picks yet")
        return

    click.echo(f"{'#':>3}  {'User':<20} {'Pts':>4} {'W':>4} {'L':>4} {'Parlays':>8}")
    for row in rows:
        click.echo(
            f"{row.rank:>3}  {row.username:<20} {row.total_points:>4} "
            f"{row.wins:>4} {row.losses:>4} {row.parlays:>8}"
        )


@cli.command()
@with_appcontext
def status():
    """Show application status"""
    click.echo("🏈 Pick'em Pool Status")
    click.echo("=" * 40)

    try:
        db.session.execute(text("SELECT 1"))
        click.echo("✅ Database: Connected")
    except SQLAlchemyError as e:
        click.echo(f"❌ Database: Error - {str(e)}")
        return

    game_count = Game.query.count()
    final_count = Game.query.filter(Game.winner != "").count()
    click.echo(f"🏈 Games: {final_count}/{game_count} completed")
    click.echo(f"📝 Submissions: {Submission.query.count()}")


if __name__ == "__main__":
    app = create_app()
    with app.app_context():
        cli()
