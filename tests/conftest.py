"""Shared test fixtures."""

from __future__ import annotations

import asyncio
from collections import defaultdict
from datetime import datetime, timezone
from uuid import UUID

import pytest

from globaltags.api.models import BanInfo, Icon, PlayerInfo, ReferralInfo

SELF_UUID = UUID("11111111-1111-1111-1111-111111111111")
PLAYER_A = UUID("aaaaaaaa-aaaa-aaaa-aaaa-aaaaaaaaaaaa")
PLAYER_B = UUID("bbbbbbbb-bbbb-bbbb-bbbb-bbbbbbbbbbbb")
PLAYER_C = UUID("cccccccc-cccc-cccc-cccc-cccccccccccc")


def make_info(uuid: UUID, tag: str = "&aTag") -> PlayerInfo:
    return PlayerInfo(uuid=uuid, tag=tag)


async def settle(rounds: int = 5) -> None:
    """Let freshly created tasks run up to their next await."""
    for _ in range(rounds):
        await asyncio.sleep(0)


class FakeFetcher:
    """Stand-in for the player info endpoint.

    Ungated, it answers right away with ``responses[key]`` or a fresh
    ``PlayerInfo``. Gated, every call parks until ``release`` is called for
    its key. Exceptions given as results are raised.
    """

    def __init__(self, gated: bool = False) -> None:
        self.gated = gated
        self.calls: list[UUID] = []
        self.responses: dict[UUID, object] = {}
        self.pending: dict[UUID, list[asyncio.Future]] = defaultdict(list)

    async def __call__(self, key: UUID) -> PlayerInfo | None:
        self.calls.append(key)
        if self.gated:
            fut = asyncio.get_running_loop().create_future()
            self.pending[key].append(fut)
            result = await fut
        elif key in self.responses:
            result = self.responses[key]
        else:
            result = make_info(key, tag=f"fetch-{len(self.calls)}")
        if isinstance(result, Exception):
            raise result
        return result

    def release(self, key: UUID, result: object = None) -> None:
        """Complete the oldest parked call for ``key``."""
        if result is None:
            result = make_info(key, tag=f"fetch-{len(self.calls)}")
        self.pending[key].pop(0).set_result(result)

    def fail(self, key: UUID, exc: Exception) -> None:
        self.pending[key].pop(0).set_result(exc)


@pytest.fixture
def fetcher() -> FakeFetcher:
    return FakeFetcher()


@pytest.fixture
def gated_fetcher() -> FakeFetcher:
    return FakeFetcher(gated=True)


@pytest.fixture
def player_payload() -> dict:
    """A GET /players/{uuid} body as the API sends it."""
    return {
        "tag": "&bRappy",
        "position": "below",
        "icon": {"type": "custom", "hash": "abc123"},
        "referrals": {
            "has_referred": True,
            "total_referrals": 12,
            "current_month_referrals": 3,
        },
        "roleIcon": "admin",
        "hideRoleIcon": False,
        "roles": ["ADMIN", "SUPPORTER"],
        "permissions": ["manage_bans", "manage_tags", "some_future_permission"],
        "ban": {
            "appealable": True,
            "appealed": False,
            "banned_at": 1735689600000,
            "expires_at": None,
            "id": "ban-1",
            "reason": "Offensive tag",
            "staff": str(PLAYER_B),
        },
    }


@pytest.fixture
def banned_player() -> PlayerInfo:
    return PlayerInfo(
        uuid=PLAYER_A,
        tag="&cBanned",
        position="LEFT",
        icon=Icon(type="star"),
        referrals=ReferralInfo(),
        roles=[],
        permissions=[],
        ban=BanInfo(
            banned_at=datetime(2025, 1, 1, tzinfo=timezone.utc),
            id="ban-2",
            reason="Spam",
            staff=PLAYER_B,
        ),
    )
