"""Shared fixtures: an in-memory stand-in for SlackAPI and a fixed clock."""

from datetime import datetime, timedelta, timezone

import pytest

from standup_audit.config import Config
from standup_audit.slack_client import SlackChannel, SlackMessage, SlackUser

LOCAL_TZ = timezone(timedelta(hours=-5))
NOW = datetime(2024, 3, 5, 13, 0, 0, tzinfo=LOCAL_TZ)


def local_ts(hour: int, minute: int = 0, second: int = 0, fraction: str = "000000") -> str:
    """Slack ts string for a local time of day on NOW's date."""
    dt = NOW.replace(hour=hour, minute=minute, second=second)
    return f"{int(dt.timestamp())}.{fraction}"


def approved(user: str, ts: str, approver: str = "UBOT", reaction: str = "heavy_check_mark") -> SlackMessage:
    return SlackMessage(
        channel="GSTANDUP",
        ts=ts,
        user=user,
        text="yesterday / today / blockers",
        thread_ts=None,
        reactions=[{"name": reaction, "users": [approver], "count": 1}],
    )


class FakeSlack:
    def __init__(self):
        self.channels = [
            SlackChannel(id="GRANDOM", name="random", name_normalized="random"),
            SlackChannel(id="GSTANDUP", name="Stand-Ups", name_normalized="stand-ups"),
        ]
        self.members = {"GSTANDUP": ["UALICE", "UBOB", "UBOT", "UMATT", "UGHOST", "UCAROL"]}
        self.users = [
            SlackUser(id="UALICE", name="alice"),
            SlackUser(id="UBOB", name="bob"),
            SlackUser(id="UBOT", name="jetbot"),
            SlackUser(id="UMATT", name="mattbates"),
            SlackUser(id="UCAROL", name="carol"),
            SlackUser(id="UGONE", name="gone", deleted=True),
        ]
        self.messages = []
        self.history_calls = []
        self.fail = set()

    def _maybe_fail(self, name):
        if name in self.fail:
            raise RuntimeError(f"Failed to {name}: not_authed")

    def list_private_channels(self):
        self._maybe_fail("list_private_channels")
        return [SlackChannel(id=c.id, name=c.name, name_normalized=c.name_normalized) for c in self.channels]

    def get_channel_members(self, channel_id):
        self._maybe_fail("get_channel_members")
        return list(self.members.get(channel_id, []))

    def list_users(self):
        self._maybe_fail("list_users")
        return list(self.users)

    def get_channel_history(self, channel_id, oldest, count=1000, inclusive=True):
        self._maybe_fail("get_channel_history")
        self.history_calls.append({"channel_id": channel_id, "oldest": oldest, "count": count, "inclusive": inclusive})
        return list(self.messages)


@pytest.fixture
def fake_slack():
    return FakeSlack()


@pytest.fixture
def cfg():
    return Config(slack_token="xoxb-test")


@pytest.fixture
def clock():
    return lambda: NOW
