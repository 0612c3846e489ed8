"""
Wire encoding of picks at the API boundary: ``"gameId-team,gameId-team"``.

Game ids look like ``"<week>-<n>"`` and so contain a hyphen themselves; a
leading ``<digits>-<digits>-`` is read as the game id, anything else is split
on its first hyphen.
"""

import re

from pickpool.pool.errors import InvalidRequest
from pickpool.pool.types import Pick

GAME_ID_PATTERN = re.compile(r"^(\d+-\d+)-(.+)$")
# A bare game id, with or without the trailing hyphen
BARE_GAME_ID_PATTERN = re.compile(r"^\d+-\d+-?$")


def parse_pick(token):
    token = token.strip()
    if BARE_GAME_ID_PATTERN.match(token):
        raise InvalidRequest(f"Pick '{token}' is missing a team, expected gameId-team")
    match = GAME_ID_PATTERN.match(token)
    if match:
        game_id, team = match.groups()
    elif "-" in token:
        game_id, team = token.split("-", 1)
    else:
        raise InvalidRequest(f"Malformed pick '{token}', expected gameId-team")

    game_id, team = game_id.strip(), team.strip()
    if not game_id or not team:
        raise InvalidRequest(f"Malformed pick '{token}', expected gameId-team")
    return Pick(game_id, team)


def parse_picks(picks_str):
    """Parse the comma-joined picks string into a list of Picks."""
    if picks_str is None:
        raise InvalidRequest("Picks are required")
    tokens = [token for token in picks_str.split(",") if token.strip()]
    return [parse_pick(token) for token in tokens]


def format_picks(picks):
    return ",".join(f"{pick.game_id}-{pick.team}" for pick in picks)
