"""Daily stand-up timeliness audit for a private Slack channel."""

from .config import Config, load_config
from .slack_client import SlackAPI, SlackChannel, SlackMessage, SlackTimestamp, SlackUser, parse_ts
from .status_rules import StandupStatus
from .auditor import StandupAuditor, StandupResult

__all__ = [
    "Config",
    "load_config",
    "SlackAPI",
    "SlackChannel",
    "SlackMessage",
    "SlackTimestamp",
    "SlackUser",
    "parse_ts",
    "StandupStatus",
    "StandupAuditor",
    "StandupResult",
]
