"""User facing text for command results."""

import datetime

from valheimbot.models import InstanceState

FAILED_MESSAGE = "Something broke and I couldn't get to the server :("
UNRECOGNIZED_MESSAGE = "I don't recognize your command :("

ALREADY_STARTED_MESSAGE = "The server is already started."
START_FAILED_MESSAGE = "Couldn't start the server :("
STARTED_MESSAGE = "The server has been started! It should be up soon!"

ALREADY_STOPPED_MESSAGE = "The server is already shut down."
STOP_FAILED_MESSAGE = "Couldn't stop the server :("
STOPPED_MESSAGE = "The server is shutting down."


def format_instance_status(state: InstanceState) -> str:
    match state:
        case InstanceState.RUNNING:
            return "The server is running!"
        case InstanceState.STOPPING:
            return "The server is shutting down..."
        case InstanceState.TERMINATED:
            return "The server is shut down."
        case InstanceState.OTHER:
            return "The server is in a mysterious state."


def parse_start_timestamp(raw: str) -> datetime.datetime:
    """
    Parse the RFC 3339 timestamp the compute API reports.

    Naive values are assumed to be UTC.

    :raises ValueError: if the value is not a timestamp
    """
    started_at = datetime.datetime.fromisoformat(raw)
    if started_at.tzinfo is None:
        started_at = started_at.replace(tzinfo=datetime.timezone.utc)
    return started_at


def format_duration(duration: datetime.timedelta) -> str:
    """
    Render a duration truncated to whole minutes, e.g. ``2h5m0s`` or ``45m0s``.

    Hours are not rolled up into days, a day and a half reads ``36h0m0s``.
    """
    total_minutes = max(int(duration.total_seconds() // 60), 0)
    if total_minutes == 0:
        return "0s"
    hours, minutes = divmod(total_minutes, 60)
    if hours:
        return f"{hours}h{minutes}m0s"
    return f"{minutes}m0s"


def format_uptime(started_at: datetime.datetime, now: datetime.datetime) -> str:
    return f"It has been up for {format_duration(now - started_at)}."


def format_player_count(player_count: int) -> str:
    if player_count == 0:
        return "There's no one playing."
    if player_count == 1:
        return "There's 1 person online. They're probably lonely, go join them!"
    return f"There's {player_count} people online."


def format_stop_refusal(player_count: int) -> str:
    return f"There are {player_count} people online, refusing to shut down."
