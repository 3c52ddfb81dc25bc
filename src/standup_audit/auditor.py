from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
import logging
from typing import Callable, Dict, Iterable, List, Optional, Set

from .config import AGGREGATION_LAST_SEEN, Config
from .reporting import log_results
from .slack_client import NANOS_PER_SECOND, SlackAPI, SlackChannel, SlackMessage, SlackTimestamp, parse_ts
from .status_rules import StandupStatus, classify_delta

logger = logging.getLogger(__name__)


@dataclass
class StandupResult:
    user_id: str
    user_name: str
    status: str
    posted_at: Optional[SlackTimestamp] = None
    delta_ns: Optional[int] = None  # deadline minus posted_at


def _local_now() -> datetime:
    return datetime.now().astimezone()


def find_channel(channels: Iterable[SlackChannel], name_normalized: str) -> Optional[SlackChannel]:
    for channel in channels:
        if channel.name_normalized == name_normalized:
            return channel
    return None


def has_approval(message: SlackMessage, approver_ids: Set[str], reaction_name: str) -> bool:
    """True if an approver added `reaction_name` to the message."""
    for reaction in message.reactions or []:
        if reaction.get("name") != reaction_name:
            continue
        if any(user_id in approver_ids for user_id in reaction.get("users", [])):
            return True
    return False


def collect_approved_standups(
    messages: Iterable[SlackMessage],
    approver_ids: Set[str],
    reaction_name: str,
    keep_latest: bool = True,
) -> Dict[str, SlackTimestamp]:
    """Map author ID to the timestamp of their approved stand-up.

    With keep_latest the chronologically latest approved message wins;
    otherwise the last one visited in iteration order does.
    """

    approved: Dict[str, SlackTimestamp] = {}
    valid_count = 0

    for message in messages:
        if not has_approval(message, approver_ids, reaction_name):
            continue
        if not message.user:
            logger.debug("skipping approved message %s without an author", message.ts)
            continue
        try:
            timestamp = parse_ts(message.ts)
        except ValueError as e:
            logger.error("error parsing timestamp: %s", e)
            continue

        valid_count += 1
        logger.debug("approved stand-up by %s at %s", message.user, timestamp.to_datetime(None).isoformat())
        previous = approved.get(message.user)
        if keep_latest and previous is not None and previous >= timestamp:
            continue
        approved[message.user] = timestamp

    logger.debug("found %d valid stand-ups", valid_count)
    return approved


def deadline_for(now: datetime, cfg: Config) -> datetime:
    return now.replace(
        hour=cfg.deadline.hour,
        minute=cfg.deadline.minute,
        second=cfg.deadline.second,
        microsecond=cfg.deadline.microsecond,
    )


def _datetime_to_ns(dt: datetime) -> int:
    whole = dt.replace(microsecond=0)
    return int(whole.timestamp()) * NANOS_PER_SECOND + dt.microsecond * 1000


def evaluate_members(
    members: Iterable[str],
    users_by_id: Dict[str, str],
    approved: Dict[str, SlackTimestamp],
    deadline: datetime,
    excluded_names: Iterable[str],
) -> List[StandupResult]:
    """Compare each member's approved stand-up with the deadline, in membership order."""

    excluded = set(excluded_names)
    deadline_ns = _datetime_to_ns(deadline)
    results: List[StandupResult] = []

    for user_id in members:
        user_name = users_by_id.get(user_id)
        if user_name is None or user_name in excluded:
            continue

        timestamp = approved.get(user_id)
        if timestamp is None:
            results.append(StandupResult(user_id=user_id, user_name=user_name, status=StandupStatus.MISSING))
            continue

        delta_ns = deadline_ns - timestamp.epoch_ns
        results.append(
            StandupResult(
                user_id=user_id,
                user_name=user_name,
                status=classify_delta(delta_ns),
                posted_at=timestamp,
                delta_ns=delta_ns,
            )
        )

    return results


class StandupAuditor:
    """One audit pass over the stand-ups channel.

    Any RuntimeError raised by the Slack calls, or a missing channel, aborts
    the pass before a single per-member line is logged.
    """

    def __init__(
        self,
        cfg: Config,
        slack: SlackAPI,
        clock: Optional[Callable[[], datetime]] = None,
    ) -> None:
        self.cfg = cfg
        self.slack = slack
        self.clock = clock or _local_now

    def _now(self) -> datetime:
        now = self.clock()
        # Naive datetimes are taken as local time.
        return now if now.tzinfo is not None else now.astimezone()

    def resolve_channel(self) -> SlackChannel:
        channel = find_channel(self.slack.list_private_channels(), self.cfg.channel_name)
        if channel is None:
            raise RuntimeError(f"error finding {self.cfg.channel_name} private channel")
        channel.members = self.slack.get_channel_members(channel.id)
        return channel

    def resolve_users(self) -> Dict[str, str]:
        users = self.slack.list_users()
        users_by_id = {u.id: u.name for u in users if not u.deleted}
        logger.debug("found %d users", len(users))
        return users_by_id

    def run(self) -> List[StandupResult]:
        now = self._now()

        channel = self.resolve_channel()
        users_by_id = self.resolve_users()

        oldest = str(int((now - self.cfg.lookback_timedelta).timestamp()))
        messages = self.slack.get_channel_history(
            channel.id,
            oldest=oldest,
            count=self.cfg.history_count,
            inclusive=True,
        )
        logger.debug("found %d messages in the last %d hours", len(messages), self.cfg.lookback_hours)

        approver_ids = {uid for uid, name in users_by_id.items() if name == self.cfg.approver_name}
        approved = collect_approved_standups(
            messages,
            approver_ids,
            self.cfg.approval_reaction,
            keep_latest=self.cfg.aggregation != AGGREGATION_LAST_SEEN,
        )

        results = evaluate_members(
            channel.members,
            users_by_id,
            approved,
            deadline_for(now, self.cfg),
            self.cfg.excluded_names,
        )
        log_results(results)
        return results
