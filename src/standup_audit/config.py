from __future__ import annotations

from dataclasses import dataclass, field
from datetime import time, timedelta
import os
from typing import FrozenSet, Optional

from dotenv import load_dotenv


AGGREGATION_LATEST = "latest"
AGGREGATION_LAST_SEEN = "last_seen"


@dataclass
class Config:
    slack_token: str
    channel_name: str = "stand-ups"
    approver_name: str = "jetbot"  # Bot user whose reaction approves a stand-up
    approval_reaction: str = "heavy_check_mark"
    excluded_names: FrozenSet[str] = field(default_factory=lambda: frozenset({"jetbot", "mattbates"}))
    deadline: time = time(11, 1, 0)  # Local time of day
    lookback_hours: int = 24
    history_count: int = 1000  # Single page, no pagination
    aggregation: str = AGGREGATION_LATEST  # "latest" or "last_seen"
    log_level: str = "DEBUG"

    @property
    def lookback_timedelta(self) -> timedelta:
        return timedelta(hours=self.lookback_hours)


def _parse_time_of_day(value: Optional[str], default: time) -> time:
    if not value:
        return default
    try:
        return time.fromisoformat(value.strip())
    except ValueError:
        return default


def load_config() -> Config:
    """Load configuration from environment variables / .env file."""

    load_dotenv()

    slack_token = os.getenv("SLACK_TOKEN") or os.getenv("SLACK_BOT_TOKEN")
    if not slack_token:
        raise RuntimeError(
            "SLACK_TOKEN must be set in environment or .env file. "
            "The token needs groups:read, users:read and groups:history scopes."
        )

    def _int_env(name: str, default: int) -> int:
        val = os.getenv(name)
        if not val:
            return default
        try:
            return int(val)
        except ValueError:
            return default

    excluded_raw = os.getenv("STANDUP_EXCLUDED")
    if excluded_raw is None:
        excluded_names = frozenset({"jetbot", "mattbates"})
    else:
        excluded_names = frozenset(n.strip() for n in excluded_raw.split(",") if n.strip())

    aggregation = os.getenv("STANDUP_AGGREGATION", AGGREGATION_LATEST).strip().lower()
    if aggregation not in {AGGREGATION_LATEST, AGGREGATION_LAST_SEEN}:
        aggregation = AGGREGATION_LATEST

    return Config(
        slack_token=slack_token,
        channel_name=os.getenv("STANDUP_CHANNEL", "stand-ups"),
        approver_name=os.getenv("STANDUP_APPROVER", "jetbot"),
        approval_reaction=os.getenv("STANDUP_REACTION", "heavy_check_mark"),
        excluded_names=excluded_names,
        deadline=_parse_time_of_day(os.getenv("STANDUP_DEADLINE"), time(11, 1, 0)),
        lookback_hours=_int_env("STANDUP_LOOKBACK_HOURS", 24),
        history_count=_int_env("STANDUP_HISTORY_COUNT", 1000),
        aggregation=aggregation,
        log_level=os.getenv("LOG_LEVEL", "DEBUG").upper(),
    )
