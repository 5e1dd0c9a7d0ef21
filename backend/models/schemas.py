from datetime import datetime
from typing import List, Optional

from pydantic import BaseModel, ConfigDict, EmailStr, Field

from repositories.db_models import (
    BanScope,
    CreatorStatus,
    PlaybackEventType,
    ReactionType,
    ReportContentKind,
    ReportStatus,
    TitleContentType,
)


# User Schemas
class UserBase(BaseModel):
    email: EmailStr
    username: str
    display_name: str


class UserLogin(BaseModel):
    email: EmailStr
    password: str


class User(UserBase):
    id: int
    is_moderator: bool
    is_active: bool
    created_at: datetime

    model_config = ConfigDict(from_attributes=True)


# Token Schemas
class Token(BaseModel):
    access_token: str
    token_type: str


class TokenData(BaseModel):
    email: Optional[str] = None


class AuthRateLimitCheck(BaseModel):
    """Pre-login check of the auth-attempt limiter."""

    identifier: Optional[str] = None


class AuthRateLimitResponse(BaseModel):
    within_limit: bool
    message: Optional[str] = None
    retry_after: Optional[int] = None


# Comment Schemas
class CommentCreate(BaseModel):
    title_id: int
    content: str
    episode_id: Optional[int] = None
    parent_comment_id: Optional[int] = None


class ReactionCounts(BaseModel):
    like: int = 0
    love: int = 0
    laugh: int = 0


class Comment(BaseModel):
    id: int
    user_id: int
    title_id: int
    episode_id: Optional[int] = None
    parent_comment_id: Optional[int] = None
    content: str
    created_at: datetime
    display_name: str
    reactions: ReactionCounts = ReactionCounts()
    total_reactions: int = 0
    user_reaction: Optional[ReactionType] = None


class ReactionToggle(BaseModel):
    comment_id: int
    reaction_type: str


class ReactionToggleResponse(BaseModel):
    action: str  # added, updated or removed


# ============================================================================
# Content Moderation Schemas
# ============================================================================


# --- Report Schemas ---


class ReportCreate(BaseModel):
    """Schema for reporting content."""

    content_type: str
    content_id: int
    reason: str


class ReportResponse(BaseModel):
    """Schema for report response."""

    id: int
    content_kind: ReportContentKind
    content_id: int
    reporter_id: int
    reason: str
    status: ReportStatus
    reviewer_id: Optional[int] = None
    reviewed_at: Optional[datetime] = None
    resolution_notes: Optional[str] = None
    created_at: datetime

    model_config = ConfigDict(from_attributes=True)


class ReportQueueItem(ReportResponse):
    """Report with reported content details (moderator view)."""

    reporter_username: str
    content_text: Optional[str] = None
    content_author_id: Optional[int] = None
    content_hidden: bool = False


class ReportQueueResponse(BaseModel):
    items: List[ReportQueueItem]
    total: int


class ReportBanAction(BaseModel):
    """Schema for banning the author of reported content."""

    reason: Optional[str] = Field(None, max_length=1000)
    duration_hours: Optional[int] = Field(None, gt=0)


class ReportDismissAction(BaseModel):
    notes: Optional[str] = Field(None, max_length=1000)


# --- Ban Schemas ---


class BanCreate(BaseModel):
    """Schema for issuing a ban directly."""

    user_id: int
    reason: str = Field(..., min_length=1, max_length=2000)
    scope: BanScope = BanScope.COMMENT
    duration_hours: Optional[int] = Field(None, gt=0)


class BanResponse(BaseModel):
    """Schema for ban response."""

    id: int
    actor_id: int
    issued_by: int
    reason: str
    scope: BanScope
    expires_at: Optional[datetime] = None
    is_active: bool
    created_at: datetime
    lifted_by: Optional[int] = None
    lifted_at: Optional[datetime] = None

    model_config = ConfigDict(from_attributes=True)


class BanWithUser(BaseModel):
    """Ban with banned user's names (moderator view)."""

    id: int
    actor_id: int
    username: str
    display_name: str
    issued_by: int
    reason: str
    scope: BanScope
    expires_at: Optional[datetime] = None
    is_active: bool
    created_at: datetime


class BanListResponse(BaseModel):
    items: List[BanWithUser]
    total: int


class ReportBanResponse(BaseModel):
    report: ReportResponse
    ban: BanResponse


# --- Feature Flag Schemas ---


class FeatureFlagResponse(BaseModel):
    name: str
    enabled: bool
    description: Optional[str] = None
    updated_at: Optional[datetime] = None
    updated_by: Optional[int] = None

    model_config = ConfigDict(from_attributes=True)


class FeatureFlagState(BaseModel):
    """Public view of a single flag."""

    name: str
    enabled: bool


class FeatureFlagUpdate(BaseModel):
    enabled: bool
    description: Optional[str] = Field(None, max_length=500)


# ============================================================================
# Creator Schemas
# ============================================================================


class CreatorApply(BaseModel):
    name: str = Field(..., min_length=1, max_length=255)
    bio: Optional[str] = Field(None, max_length=2000)
    application_notes: Optional[str] = Field(None, max_length=2000)


class CreatorResponse(BaseModel):
    id: int
    user_id: int
    name: str
    bio: Optional[str] = None
    status: CreatorStatus
    admin_notes: Optional[str] = None
    reviewed_at: Optional[datetime] = None
    created_at: datetime

    model_config = ConfigDict(from_attributes=True)


class CreatorApplicationItem(CreatorResponse):
    email: str
    application_notes: Optional[str] = None


class CreatorApplicationList(BaseModel):
    items: List[CreatorApplicationItem]
    total: int


class CreatorReview(BaseModel):
    status: CreatorStatus
    admin_notes: Optional[str] = Field(None, max_length=2000)


class CreatorPostCreate(BaseModel):
    content: str
    image_url: Optional[str] = Field(None, max_length=2048)
    title_id: Optional[int] = None


class CreatorPostResponse(BaseModel):
    id: int
    creator_id: int
    title_id: Optional[int] = None
    content: str
    image_url: Optional[str] = None
    created_at: datetime

    model_config = ConfigDict(from_attributes=True)


# --- Video Upload Schemas ---


class VideoUploadCreate(BaseModel):
    title: str = Field(..., min_length=1, max_length=255)
    description: Optional[str] = Field(None, max_length=5000)


class VideoUploadTarget(BaseModel):
    """Where the client should PUT the video file."""

    upload_id: str
    upload_url: str


class VideoUploadStatus(BaseModel):
    upload_id: str
    status: str
    asset_id: Optional[str] = None
    playback_id: Optional[str] = None
    ready: bool
    duration: Optional[float] = None


# ============================================================================
# Title Schemas
# ============================================================================


class TitleCreate(BaseModel):
    title: str = Field(..., min_length=1, max_length=255)
    content_type: TitleContentType = TitleContentType.FILM
    category: Optional[str] = Field(None, max_length=50)
    playback_id: Optional[str] = Field(None, max_length=255)
    runtime_seconds: int = Field(0, ge=0)
    description: Optional[str] = Field(None, max_length=5000)


class TitleUpdate(BaseModel):
    """Only the fields sent are changed."""

    title: Optional[str] = Field(None, min_length=1, max_length=255)
    content_type: Optional[TitleContentType] = None
    category: Optional[str] = Field(None, max_length=50)
    playback_id: Optional[str] = Field(None, max_length=255)
    runtime_seconds: Optional[int] = Field(None, ge=0)
    description: Optional[str] = Field(None, max_length=5000)


class TitleResponse(BaseModel):
    id: int
    title: str
    content_type: TitleContentType
    category: Optional[str] = None
    playback_id: Optional[str] = None
    runtime_seconds: int
    description: Optional[str] = None
    created_at: datetime

    model_config = ConfigDict(from_attributes=True)


class TitleListResponse(BaseModel):
    items: List[TitleResponse]
    total: int


# --- Ad Schemas ---


class AdConfigUpdate(BaseModel):
    ads_enabled: Optional[bool] = None
    ad_duration_seconds: Optional[int] = None
    ad_url: Optional[str] = Field(None, max_length=2048)


class AdConfigResponse(BaseModel):
    title_id: int
    ads_enabled: bool
    ad_duration_seconds: int
    ad_url: Optional[str] = None
    updated_at: Optional[datetime] = None

    model_config = ConfigDict(from_attributes=True)


class AdConfigItem(AdConfigResponse):
    """Ad settings row of the admin listing."""

    title: str
    content_type: TitleContentType


class PrerollAd(BaseModel):
    ad_url: str
    ad_duration_seconds: int

    model_config = ConfigDict(from_attributes=True)


class TitleAdResponse(BaseModel):
    """Pre-roll ad for a title; ad is null when none should play."""

    title_id: int
    ad: Optional[PrerollAd] = None


# --- Playback Schemas ---


class PlaybackEventCreate(BaseModel):
    event_type: PlaybackEventType
    title_id: Optional[int] = None
    episode_id: Optional[int] = None
    session_id: Optional[str] = Field(None, max_length=64)
    watch_percentage: Optional[float] = None
    ad_duration_seconds: Optional[int] = Field(None, ge=0)
    ad_completed: Optional[bool] = None


class PlaybackEventResult(BaseModel):
    recorded: bool


class PlaybackStats(BaseModel):
    tracking_enabled: bool
    play_events: int
    completion_events: int
    ad_impressions: int
    avg_watch_percentage: float


class ProgressUpdate(BaseModel):
    title_id: int
    episode_id: Optional[int] = None
    position_seconds: float = Field(..., ge=0)
    duration_seconds: Optional[float] = Field(None, gt=0)


class ProgressSaveResult(BaseModel):
    saved: bool


class ResumePosition(BaseModel):
    title_id: int
    episode_id: Optional[int] = None
    position_seconds: float


class ContinueWatchingItem(BaseModel):
    title_id: int
    episode_id: Optional[int] = None
    position_seconds: float
    updated_at: datetime
    title: TitleResponse

    model_config = ConfigDict(from_attributes=True)
