"""Typed request functions for the GlobalTags API."""

from __future__ import annotations

import logging
from uuid import UUID

from globaltags.api.client import GlobalTagsClient
from globaltags.api.models import (
    ApiInfo,
    GlobalIcon,
    GlobalPosition,
    PlayerInfo,
    ReferralLeaderboardEntry,
    ReferralLeaderboardType,
    TagHistoryEntry,
)
from globaltags.errors import ApiError

log = logging.getLogger(__name__)

# The server rejects DELETE requests without a body.
EMPTY_BODY = {"data": "placeholder data"}


async def get_api_info(client: GlobalTagsClient) -> ApiInfo:
    data = await client.get("/")
    return ApiInfo(**data)


async def get_referral_leaderboards(
    client: GlobalTagsClient,
) -> dict[ReferralLeaderboardType, list[ReferralLeaderboardEntry]]:
    """Fetch both referral leaderboards, ranked from 1."""
    data = await client.get("/referrals")
    boards: dict[ReferralLeaderboardType, list[ReferralLeaderboardEntry]] = {}
    for board in ReferralLeaderboardType:
        boards[board] = [
            ReferralLeaderboardEntry(position=i + 1, **entry)
            for i, entry in enumerate(data.get(board.value) or [])
        ]
    return boards


async def get_player_info(client: GlobalTagsClient, uuid: UUID) -> PlayerInfo | None:
    """Fetch a player's tag data. Returns None if the player has no record."""
    try:
        data = await client.get(f"/players/{uuid}")
    except ApiError as exc:
        if exc.status_code == 404:
            log.debug("No player record for %s", uuid)
            return None
        raise
    return PlayerInfo(**{**data, "uuid": uuid})


async def get_tag_history(client: GlobalTagsClient, uuid: UUID) -> list[TagHistoryEntry]:
    data = await client.get(f"/players/{uuid}/history")
    return [TagHistoryEntry(**e) for e in data]


async def _message(client: GlobalTagsClient, method: str, path: str, body: dict) -> str:
    data = await client.request(method, path, json=body)
    if isinstance(data, dict):
        return data.get("message", "")
    return ""


async def set_tag(client: GlobalTagsClient, uuid: UUID, tag: str) -> str:
    return await _message(client, "POST", f"/players/{uuid}", {"tag": tag})


async def reset_tag(client: GlobalTagsClient, uuid: UUID) -> str:
    return await _message(client, "DELETE", f"/players/{uuid}", EMPTY_BODY)


async def set_position(client: GlobalTagsClient, uuid: UUID, position: GlobalPosition) -> str:
    return await _message(
        client, "POST", f"/players/{uuid}/position", {"position": position.value}
    )


async def set_icon(client: GlobalTagsClient, uuid: UUID, icon: GlobalIcon) -> str:
    return await _message(client, "POST", f"/players/{uuid}/icon", {"icon": icon.value})


async def ban_player(client: GlobalTagsClient, uuid: UUID, reason: str) -> str:
    return await _message(client, "POST", f"/players/{uuid}/bans", {"reason": reason})


async def unban_player(client: GlobalTagsClient, uuid: UUID) -> str:
    return await _message(client, "DELETE", f"/players/{uuid}/bans", EMPTY_BODY)
