"""Pydantic models and enums for GlobalTags API responses."""

from __future__ import annotations

from datetime import datetime
from enum import Enum
from uuid import UUID

from pydantic import BaseModel, ConfigDict, Field


class AuthProvider(str, Enum):
    BEARER = "Bearer"
    YGGDRASIL = "Minecraft"
    LABYCONNECT = "LabyConnect"

    @property
    def id(self) -> str:
        """Scheme name sent in the Authorization header."""
        return self.value


class GlobalPosition(str, Enum):
    ABOVE = "ABOVE"
    BELOW = "BELOW"
    RIGHT = "RIGHT"
    LEFT = "LEFT"


class GlobalIcon(str, Enum):
    NONE = "NONE"
    CUSTOM = "CUSTOM"
    ANDROID = "ANDROID"
    APPLE = "APPLE"
    BEREAL = "BEREAL"
    CROWN = "CROWN"
    DISCORD = "DISCORD"
    DUOLINGO = "DUOLINGO"
    EBIO = "EBIO"
    EPICGAMES = "EPICGAMES"
    GAMESCOM = "GAMESCOM"
    GITHUB = "GITHUB"
    GITLAB = "GITLAB"
    HEART = "HEART"
    INSTAGRAM = "INSTAGRAM"
    KICK = "KICK"
    LABYNET = "LABYNET"
    PAYPAL = "PAYPAL"
    PINTEREST = "PINTEREST"
    PLAYSTATION = "PLAYSTATION"
    REDDIT = "REDDIT"
    SNAPCHAT = "SNAPCHAT"
    SOUNDCLOUD = "SOUNDCLOUD"
    SPOTIFY = "SPOTIFY"
    STAR = "STAR"
    STATSFM = "STATSFM"
    STEAM = "STEAM"
    TELEGRAM = "TELEGRAM"
    THREADS = "THREADS"
    TIKTOK = "TIKTOK"
    TWITCH = "TWITCH"
    X = "X"
    XBOX = "XBOX"
    YOUTUBE = "YOUTUBE"


class GlobalPermission(str, Enum):
    BYPASS_VALIDATION = "BYPASS_VALIDATION"
    CUSTOM_ICON = "CUSTOM_ICON"
    MANAGE_BANS = "MANAGE_BANS"
    MANAGE_API_KEYS = "MANAGE_API_KEYS"
    MANAGE_CONNECTIONS = "MANAGE_CONNECTIONS"
    MANAGE_GIFT_CODES = "MANAGE_GIFT_CODES"
    MANAGE_NOTES = "MANAGE_NOTES"
    MANAGE_REPORTS = "MANAGE_REPORTS"
    MANAGE_ROLES = "MANAGE_ROLES"
    MANAGE_TAGS = "MANAGE_TAGS"
    MANAGE_WATCHLIST = "MANAGE_WATCHLIST"
    REPORT_IMMUNITY = "REPORT_IMMUNITY"


class GlobalRole(str, Enum):
    ADMIN = "ADMIN"
    DEVELOPER = "DEVELOPER"
    MODERATOR = "MODERATOR"
    PARTNER = "PARTNER"
    SUPPORTER = "SUPPORTER"


class ReferralLeaderboardType(str, Enum):
    TOTAL = "total"
    CURRENT_MONTH = "current_month"


class CommitData(BaseModel):
    branch: str
    sha: str
    tree: str


class ApiInfo(BaseModel):
    version: str
    requests: int = 0
    commit: CommitData


class TagHistoryEntry(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    tag: str
    flagged_words: list[str] = Field(default_factory=list, alias="flaggedWords")


class ReferralLeaderboardEntry(BaseModel):
    position: int
    uuid: UUID
    total_referrals: int = 0
    current_month_referrals: int = 0


class Icon(BaseModel):
    model_config = ConfigDict(frozen=True)

    type: str = "none"
    hash: str | None = None


class ReferralInfo(BaseModel):
    model_config = ConfigDict(frozen=True)

    has_referred: bool = False
    total_referrals: int = 0
    current_month_referrals: int = 0


class BanInfo(BaseModel):
    model_config = ConfigDict(frozen=True)

    appealable: bool = False
    appealed: bool = False
    banned_at: datetime  # epoch milliseconds on the wire
    expires_at: datetime | None = None
    id: str
    reason: str
    staff: UUID


class PlayerInfo(BaseModel):
    """Snapshot of a player's tag data at fetch time.

    ``position``, ``icon.type`` and ``permissions`` are kept as the raw strings
    the API sent; the typed accessors fall back to defaults for values this
    client does not know about.
    """

    model_config = ConfigDict(frozen=True, populate_by_name=True)

    uuid: UUID
    tag: str | None = None
    position: str = "ABOVE"
    icon: Icon = Field(default_factory=Icon)
    referrals: ReferralInfo = Field(default_factory=ReferralInfo)
    role_icon: str | None = Field(default=None, alias="roleIcon")
    hide_role_icon: bool = Field(default=False, alias="hideRoleIcon")
    roles: list[str] = Field(default_factory=list)
    permissions: list[str] = Field(default_factory=list)
    ban: BanInfo | None = None

    @property
    def plain_tag(self) -> str:
        return self.tag or ""

    @property
    def global_position(self) -> GlobalPosition:
        try:
            return GlobalPosition(self.position.upper())
        except ValueError:
            return GlobalPosition.ABOVE

    @property
    def global_icon(self) -> GlobalIcon:
        try:
            return GlobalIcon(self.icon.type.upper())
        except ValueError:
            return GlobalIcon.NONE

    @property
    def icon_hash(self) -> str | None:
        return self.icon.hash

    @property
    def has_custom_icon(self) -> bool:
        return self.global_icon is GlobalIcon.CUSTOM and self.icon.hash is not None

    def icon_url(self, urls) -> str:
        """Resolve the icon URL using a ``globaltags.api.client.Urls`` instance."""
        if self.has_custom_icon:
            return urls.custom_icon(self.uuid, self.icon.hash)
        return urls.default_icon(self.global_icon)

    def has_permission(self, permission: GlobalPermission) -> bool:
        return permission.value in {p.upper() for p in self.permissions}

    @property
    def has_referred(self) -> bool:
        return self.referrals.has_referred

    @property
    def total_referrals(self) -> int:
        return self.referrals.total_referrals

    @property
    def current_month_referrals(self) -> int:
        return self.referrals.current_month_referrals

    @property
    def highest_role(self) -> str | None:
        """Roles arrive ordered by rank, highest first."""
        return self.roles[0] if self.roles else None

    @property
    def is_banned(self) -> bool:
        return self.ban is not None
