from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime, timedelta, timezone, tzinfo
from typing import Dict, List, Optional
import re

from slack_sdk import WebClient
from slack_sdk.errors import SlackApiError, SlackClientError


# Slack timestamps are like "1701985150.000200" (seconds.fraction)
_TS_REGEX = re.compile(r"^(\d+)(?:\.(\d*))?$")

NANOS_PER_SECOND = 1_000_000_000


@dataclass(frozen=True, order=True)
class SlackTimestamp:
    seconds: int
    nanos: int = 0

    @property
    def epoch_ns(self) -> int:
        return self.seconds * NANOS_PER_SECOND + self.nanos

    def to_datetime(self, tz: Optional[tzinfo] = timezone.utc) -> datetime:
        # datetime only resolves microseconds; the remainder is dropped here.
        base = datetime.fromtimestamp(self.seconds, tz=timezone.utc)
        return (base + timedelta(microseconds=self.nanos // 1000)).astimezone(tz)


@dataclass
class SlackUser:
    id: str
    name: str
    deleted: bool = False


@dataclass
class SlackChannel:
    id: str
    name: str
    name_normalized: str
    members: List[str] = field(default_factory=list)


@dataclass
class SlackMessage:
    channel: str
    ts: str
    user: Optional[str]
    text: str
    thread_ts: Optional[str]
    reactions: List[Dict]


def _error_code(e: Exception) -> str:
    # Transport failures carry no Slack error code.
    if isinstance(e, SlackApiError):
        return e.response["error"]
    return f"{type(e).__name__}: {e}"


def parse_ts(ts: str) -> SlackTimestamp:
    """Parse a Slack "seconds.fraction" timestamp without going through float.

    The fraction is scaled to nanoseconds; digits past nanosecond resolution
    are truncated. Raises ValueError for anything else.
    """
    match = _TS_REGEX.match(ts.strip()) if isinstance(ts, str) else None
    if not match:
        raise ValueError(f"invalid Slack timestamp: {ts!r}")
    seconds = int(match.group(1))
    fraction = (match.group(2) or "")[:9]
    nanos = int(fraction.ljust(9, "0")) if fraction else 0
    return SlackTimestamp(seconds=seconds, nanos=nanos)


class SlackAPI:
    """Thin wrapper over Slack WebClient for the read-only operations we need."""

    def __init__(self, token: str, client: Optional[WebClient] = None) -> None:
        self.client = client or WebClient(token=token)

    def list_private_channels(self) -> List[SlackChannel]:
        """Return every private channel visible to the token (without members)."""

        channels: List[SlackChannel] = []
        cursor: Optional[str] = None

        while True:
            try:
                resp = self.client.conversations_list(
                    types="private_channel",
                    exclude_archived=True,
                    limit=1000,
                    cursor=cursor,
                )
            except (SlackClientError, OSError) as e:
                raise RuntimeError(f"Failed to list private channels: {_error_code(e)}") from e

            for ch in resp.get("channels", []):
                name = ch.get("name", "")
                channels.append(
                    SlackChannel(
                        id=ch["id"],
                        name=name,
                        name_normalized=ch.get("name_normalized", name),
                    )
                )

            cursor = resp.get("response_metadata", {}).get("next_cursor") or None
            if not cursor:
                break

        return channels

    def get_channel_members(self, channel_id: str) -> List[str]:
        """Return member user IDs of a channel, in the order Slack lists them."""

        members: List[str] = []
        cursor: Optional[str] = None

        while True:
            try:
                resp = self.client.conversations_members(channel=channel_id, limit=1000, cursor=cursor)
            except (SlackClientError, OSError) as e:
                raise RuntimeError(f"Failed to list members of channel {channel_id}: {_error_code(e)}") from e

            members.extend(resp.get("members", []))

            cursor = resp.get("response_metadata", {}).get("next_cursor") or None
            if not cursor:
                break

        return members

    def list_users(self) -> List[SlackUser]:
        users: List[SlackUser] = []
        cursor: Optional[str] = None

        while True:
            try:
                resp = self.client.users_list(limit=200, cursor=cursor)
            except (SlackClientError, OSError) as e:
                raise RuntimeError(f"Failed to list users: {_error_code(e)}") from e

            for u in resp.get("members", []):
                users.append(SlackUser(id=u["id"], name=u.get("name", ""), deleted=bool(u.get("deleted"))))

            cursor = resp.get("response_metadata", {}).get("next_cursor") or None
            if not cursor:
                break

        return users

    def get_channel_history(
        self,
        channel_id: str,
        oldest: str,
        count: int = 1000,
        inclusive: bool = True,
    ) -> List[SlackMessage]:
        """Return at most `count` messages posted at or after `oldest` (one page only)."""

        try:
            resp = self.client.conversations_history(
                channel=channel_id,
                oldest=oldest,
                limit=count,
                inclusive=inclusive,
            )
        except (SlackClientError, OSError) as e:
            raise RuntimeError(f"Failed to fetch history for channel {channel_id}: {_error_code(e)}") from e

        return [
            SlackMessage(
                channel=channel_id,
                ts=m.get("ts", ""),
                user=m.get("user"),
                text=m.get("text", ""),
                thread_ts=m.get("thread_ts"),
                reactions=m.get("reactions", []),
            )
            for m in resp.get("messages", [])
        ]
