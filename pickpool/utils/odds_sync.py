"""
Weekly odds and results sync from the ESPN scoreboard API.

Games are keyed "<week>-<n>", n being the 1-based position of the event in the
week's scoreboard. The sync fills in winners as games complete but never
rewrites one that is already set.
"""

import logging
import time
from functools import wraps

import requests

from pickpool import db
from pickpool.pool.types import Game
from pickpool.utils.timezone_utils import parse_kickoff

logger = logging.getLogger(__name__)

DEFAULT_API_BASE_URL = "https://site.api.espn.com/apis/site/v2/sports/football/nfl"

# Over without being played to a result
OVER_STATUSES = ("STATUS_CANCELED", "STATUS_FORFEIT")


def rate_limit_decorator(max_retries=3, base_delay=1.0, backoff_factor=2.0):
    """
    Decorator to handle API rate limiting with exponential backoff
    """

    def decorator(func):
        @wraps(func)
        def wrapper(self, *args, **kwargs):
            for attempt in range(max_retries):
                try:
                    return func(self, *args, **kwargs)
                except requests.exceptions.HTTPError as e:
                    status = e.response.status_code if e.response is not None else 0
                    if status != 429 and status < 500:
                        raise
                    delay = base_delay * (backoff_factor**attempt)
                    if e.response is not None and status == 429:
                        delay = float(e.response.headers.get("Retry-After", delay))
                    logger.warning(
                        f"HTTP {status}. Waiting {delay}s before retry {attempt + 1}/{max_retries}"
                    )
                    if attempt == max_retries - 1:
                        raise
                    time.sleep(delay)
                except requests.exceptions.RequestException as e:
                    delay = base_delay * (backoff_factor**attempt)
                    logger.warning(
                        f"Request failed: {e}. Waiting {delay}s before retry {attempt + 1}/{max_retries}"
                    )
                    if attempt == max_retries - 1:
                        raise
                    time.sleep(delay)

            raise RuntimeError(f"Max retries ({max_retries}) exceeded")

        return wrapper

    return decorator


def _team_name(competitor):
    team = competitor.get("team", {})
    return (
        team.get("abbreviation")
        or team.get("shortDisplayName")
        or team.get("displayName")
        or ""
    )


def _parse_odds(competition):
    """Spread display string and the away team's spread value."""
    odds = competition.get("odds") or []
    if not odds:
        return "", 0.0
    line = odds[0]
    details = line.get("details") or ""
    spread = line.get("spread")
    if spread is None:
        return details, 0.0
    # ESPN quotes the spread from the home side
    return details, -float(spread)


def parse_scoreboard(payload, week):
    """
    Turn a scoreboard payload into Game records.

    Events without exactly two competitors are skipped but still consume
    their index, so game ids stay stable between syncs.
    """
    games = []
    for index, event in enumerate(payload.get("events", []), start=1):
        competitions = event.get("competitions", [])
        if not competitions:
            continue
        competition = competitions[0]

        competitors = competition.get("competitors", [])
        if len(competitors) != 2:
            continue

        home = next((c for c in competitors if c.get("homeAway") == "home"), None)
        away = next((c for c in competitors if c.get("homeAway") == "away"), None)
        if not home or not away:
            continue

        status = competition.get("status", {}).get("type", {})
        completed = bool(status.get("completed")) or status.get("name") in OVER_STATUSES
        winner = ""
        if completed:
            # A tie has no single winner but the game is still over
            winning = [c for c in competitors if c.get("winner")]
            if len(winning) == 1:
                winner = _team_name(winning[0])

        spread, away_spread_value = _parse_odds(competition)

        games.append(
            Game(
                game_id=f"{week}-{index}",
                week=week,
                away_team=_team_name(away),
                home_team=_team_name(home),
                spread=spread,
                away_spread_value=away_spread_value,
                kickoff=parse_kickoff(event.get("date")),
                winner=winner,
                completed=completed,
            )
        )
    return games


class OddsSync:
    """
    Pulls a week's games, odds and results from ESPN into the game catalog
    """

    def __init__(self, catalog, api_base_url=None, min_request_interval=0.5):
        self.catalog = catalog
        self.api_base_url = api_base_url or DEFAULT_API_BASE_URL
        self.session = requests.Session()
        self.session.headers.update({"User-Agent": "PickPool/1.0"})

        self.min_request_interval = min_request_interval
        self.last_request_time = 0
        self.request_count = 0

    def _enforce_rate_limit(self):
        time_since_last = time.time() - self.last_request_time
        if time_since_last < self.min_request_interval:
            time.sleep(self.min_request_interval - time_since_last)
        self.last_request_time = time.time()
        self.request_count += 1

    @rate_limit_decorator(max_retries=3, base_delay=2.0)
    def _make_api_request(self, url, params=None):
        """Make API request with rate limiting and retry logic"""
        self._enforce_rate_limit()
        response = self.session.get(url, params=params, timeout=30)
        response.raise_for_status()
        return response

    def fetch_week(self, week):
        url = f"{self.api_base_url}/scoreboard"
        params = {"seasontype": 2, "week": week}
        response = self._make_api_request(url, params=params)
        return parse_scoreboard(response.json(), week)

    def sync_week(self, week):
        """
        Sync one week into the catalog

        Returns:
            (success, message) tuple
        """
        try:
            games = self.fetch_week(week)
            finals = 0
            for record in games:
                game = self.catalog.upsert_game(record)
                if game.winner:
                    finals += 1
            db.session.commit()
        except Exception as e:
            db.session.rollback()
            logger.error(f"Error syncing week {week}: {str(e)}")
            return False, str(e)

        logger.info(f"Synced week {week}: {len(games)} games, {finals} final")
        return True, f"Synced {len(games)} games ({finals} final) for week {week}"
