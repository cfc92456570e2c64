"""GlobalTagsAPI: HTTP client, player cache and scheduler in one place."""

from __future__ import annotations

import logging
from uuid import UUID

from globaltags.api.client import Agent, GlobalTagsClient, Urls
from globaltags.api.endpoints import (
    ban_player,
    get_api_info,
    get_player_info,
    get_referral_leaderboards,
    get_tag_history,
    reset_tag,
    set_icon,
    set_position,
    set_tag,
    unban_player,
)
from globaltags.api.models import (
    ApiInfo,
    GlobalIcon,
    GlobalPosition,
    PlayerInfo,
    ReferralLeaderboardEntry,
    ReferralLeaderboardType,
    TagHistoryEntry,
)
from globaltags.config import Settings
from globaltags.errors import SelfKeyMissingError
from globaltags.services.cache import PlayerCache
from globaltags.services.scheduler import Scheduler

log = logging.getLogger(__name__)


class GlobalTagsAPI:
    """Entry point for applications talking to the GlobalTags API."""

    def __init__(
        self,
        settings: Settings,
        client: GlobalTagsClient | None = None,
        cache: PlayerCache | None = None,
        scheduler: Scheduler | None = None,
    ) -> None:
        self.settings = settings
        self.urls = Urls(settings.api_base)
        self.client = client or GlobalTagsClient(
            base_url=settings.api_base,
            authorization_header=settings.authorization_header,
            language=settings.language,
            agent=Agent(
                settings.agent_name,
                settings.agent_version,
                settings.minecraft_version,
            ),
        )
        self.cache = cache or PlayerCache(
            self.fetch_player_info,
            self_key=self.client_uuid,
            clear_interval=settings.cache_clear_interval,
            renew_interval=settings.cache_renew_interval,
            scheduler=scheduler,
        )

    def client_uuid(self) -> UUID | None:
        return self.settings.client_uuid

    def start(self) -> None:
        """Start background cache maintenance. Needs a running event loop."""
        self.cache.scheduler.start()

    async def close(self) -> None:
        await self.cache.scheduler.stop()
        await self.cache.join()
        await self.client.close()

    def _target(self, uuid: UUID | None) -> UUID:
        target = uuid or self.client_uuid()
        if target is None:
            raise SelfKeyMissingError()
        return target

    # ── Reads ──

    async def fetch_player_info(self, uuid: UUID) -> PlayerInfo | None:
        """Fetch player info from the API, bypassing the cache."""
        return await get_player_info(self.client, uuid)

    async def get_api_info(self) -> ApiInfo:
        return await get_api_info(self.client)

    async def get_tag_history(self, uuid: UUID | None = None) -> list[TagHistoryEntry]:
        return await get_tag_history(self.client, self._target(uuid))

    async def get_referral_leaderboards(
        self,
    ) -> dict[ReferralLeaderboardType, list[ReferralLeaderboardEntry]]:
        return await get_referral_leaderboards(self.client)

    # ── Mutations ──
    # Each successful mutation renews the player's cache entry so later
    # resolves see the server's new state.

    async def set_tag(self, tag: str, uuid: UUID | None = None) -> str:
        target = self._target(uuid)
        message = await set_tag(self.client, target, tag)
        self.cache.renew(target)
        return message

    async def reset_tag(self, uuid: UUID | None = None) -> str:
        target = self._target(uuid)
        message = await reset_tag(self.client, target)
        self.cache.renew(target)
        return message

    async def set_position(self, position: GlobalPosition, uuid: UUID | None = None) -> str:
        target = self._target(uuid)
        message = await set_position(self.client, target, position)
        self.cache.renew(target)
        return message

    async def set_icon(self, icon: GlobalIcon, uuid: UUID | None = None) -> str:
        target = self._target(uuid)
        message = await set_icon(self.client, target, icon)
        self.cache.renew(target)
        return message

    async def ban_player(self, uuid: UUID, reason: str) -> str:
        message = await ban_player(self.client, uuid, reason)
        self.cache.renew(uuid)
        return message

    async def unban_player(self, uuid: UUID) -> str:
        message = await unban_player(self.client, uuid)
        self.cache.renew(uuid)
        return message

    def icon_url(self, info: PlayerInfo) -> str:
        return info.icon_url(self.urls)
