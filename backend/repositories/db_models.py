"""
Database models using SQLAlchemy 2.0 style with Mapped type hints.

This module defines all database models with proper type annotations
for improved IDE support and type checking.
"""

import enum
from datetime import datetime, timezone
from typing import List, Optional

from sqlalchemy import (
    Boolean,
    DateTime,
    Enum,
    Float,
    ForeignKey,
    Index,
    Integer,
    String,
    Text,
    UniqueConstraint,
)
from sqlalchemy.orm import Mapped, mapped_column, relationship

from repositories.database import Base


class TitleContentType(str, enum.Enum):
    FILM = "film"
    SERIES = "series"
    MUSIC_VIDEO = "music_video"
    PODCAST = "podcast"


class PlaybackEventType(str, enum.Enum):
    """Kinds of playback analytics events."""

    PLAY = "play"
    COMPLETION = "completion"
    AD_IMPRESSION = "ad_impression"


class ReactionType(str, enum.Enum):
    LIKE = "like"
    LOVE = "love"
    LAUGH = "laugh"


class CreatorStatus(str, enum.Enum):
    """Review status of a creator application."""

    PENDING = "pending"
    APPROVED = "approved"
    REJECTED = "rejected"


# Content Moderation Enums


class ActionType(str, enum.Enum):
    """Rate-limited action types."""

    COMMENT = "comment"
    REACTION = "reaction"
    REPORT = "report"
    CREATOR_POST = "creator_post"
    UPLOAD = "upload"
    AUTH_ATTEMPT = "auth_attempt"


class ReportContentKind(str, enum.Enum):
    """Type of content being reported."""

    COMMENT = "comment"
    CREATOR_POST = "creator_post"
    USER = "user"


class ReportStatus(str, enum.Enum):
    """Status of a content report."""

    PENDING = "pending"
    ACTIONED = "actioned"
    DISMISSED = "dismissed"


class BanScope(str, enum.Enum):
    """What a ban restricts."""

    COMMENT = "comment"  # comments, reactions and posts
    FULL = "full"  # every authenticated action


def _utc_now() -> datetime:
    """Return current UTC datetime (timezone-aware)."""
    return datetime.now(timezone.utc)


class User(Base):
    __tablename__ = "users"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, index=True)
    email: Mapped[str] = mapped_column(String, unique=True, index=True, nullable=False)
    username: Mapped[str] = mapped_column(
        String, unique=True, index=True, nullable=False
    )
    display_name: Mapped[str] = mapped_column(String, nullable=False)
    hashed_password: Mapped[str] = mapped_column(String, nullable=False)
    is_moderator: Mapped[bool] = mapped_column(Boolean, default=False)
    is_active: Mapped[bool] = mapped_column(Boolean, default=True)
    created_at: Mapped[datetime] = mapped_column(DateTime, default=_utc_now)

    # Relationships
    comments: Mapped[List["Comment"]] = relationship(
        "Comment", back_populates="user", foreign_keys="Comment.user_id"
    )
    creator: Mapped[Optional["Creator"]] = relationship(
        "Creator",
        back_populates="user",
        foreign_keys="Creator.user_id",
        uselist=False,
    )


class Title(Base):
    """Catalog entry that comments and creator posts attach to."""

    __tablename__ = "titles"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, index=True)
    title: Mapped[str] = mapped_column(String(255), nullable=False)
    content_type: Mapped[TitleContentType] = mapped_column(
        Enum(TitleContentType), nullable=False, default=TitleContentType.FILM
    )
    category: Mapped[Optional[str]] = mapped_column(String(50), nullable=True)
    playback_id: Mapped[Optional[str]] = mapped_column(String(255), nullable=True)
    runtime_seconds: Mapped[int] = mapped_column(Integer, default=0)
    description: Mapped[Optional[str]] = mapped_column(Text, nullable=True)
    creator_id: Mapped[Optional[int]] = mapped_column(
        Integer, ForeignKey("creators.id"), nullable=True
    )
    created_at: Mapped[datetime] = mapped_column(DateTime, default=_utc_now)


class Comment(Base):
    __tablename__ = "comments"
    __table_args__ = (
        Index("ix_comments_title_episode", "title_id", "episode_id"),
        Index("ix_comments_user_created", "user_id", "created_at"),
        Index("ix_comments_hidden", "is_hidden"),
    )

    id: Mapped[int] = mapped_column(Integer, primary_key=True, index=True)
    user_id: Mapped[int] = mapped_column(
        Integer, ForeignKey("users.id"), nullable=False
    )
    title_id: Mapped[int] = mapped_column(
        Integer, ForeignKey("titles.id"), nullable=False
    )
    episode_id: Mapped[Optional[int]] = mapped_column(Integer, nullable=True)
    parent_comment_id: Mapped[Optional[int]] = mapped_column(
        Integer, ForeignKey("comments.id"), nullable=True
    )
    content: Mapped[str] = mapped_column(Text, nullable=False)
    is_deleted: Mapped[bool] = mapped_column(Boolean, default=False)
    created_at: Mapped[datetime] = mapped_column(DateTime, default=_utc_now)

    # Moderation fields
    is_hidden: Mapped[bool] = mapped_column(Boolean, default=False)
    hidden_by: Mapped[Optional[int]] = mapped_column(
        Integer, ForeignKey("users.id"), nullable=True
    )
    hidden_at: Mapped[Optional[datetime]] = mapped_column(DateTime, nullable=True)
    hidden_reason: Mapped[Optional[str]] = mapped_column(Text, nullable=True)

    # Relationships
    user: Mapped["User"] = relationship(
        "User", back_populates="comments", foreign_keys=[user_id]
    )
    reactions: Mapped[List["CommentReaction"]] = relationship(
        "CommentReaction", back_populates="comment", cascade="all, delete-orphan"
    )


class CommentReaction(Base):
    """One reaction per user per comment."""

    __tablename__ = "comment_reactions"
    __table_args__ = (
        UniqueConstraint("comment_id", "user_id", name="uq_comment_reaction_user"),
    )

    id: Mapped[int] = mapped_column(Integer, primary_key=True, index=True)
    comment_id: Mapped[int] = mapped_column(
        Integer, ForeignKey("comments.id"), nullable=False, index=True
    )
    user_id: Mapped[int] = mapped_column(
        Integer, ForeignKey("users.id"), nullable=False
    )
    reaction_type: Mapped[ReactionType] = mapped_column(
        Enum(ReactionType), nullable=False
    )
    created_at: Mapped[datetime] = mapped_column(DateTime, default=_utc_now)

    comment: Mapped["Comment"] = relationship("Comment", back_populates="reactions")


class Creator(Base):
    """Creator application and profile."""

    __tablename__ = "creators"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, index=True)
    user_id: Mapped[int] = mapped_column(
        Integer, ForeignKey("users.id"), nullable=False, unique=True
    )
    name: Mapped[str] = mapped_column(String(255), nullable=False)
    bio: Mapped[Optional[str]] = mapped_column(Text, nullable=True)
    application_notes: Mapped[Optional[str]] = mapped_column(Text, nullable=True)
    status: Mapped[CreatorStatus] = mapped_column(
        Enum(CreatorStatus), default=CreatorStatus.PENDING, nullable=False
    )
    admin_notes: Mapped[Optional[str]] = mapped_column(Text, nullable=True)
    reviewed_by: Mapped[Optional[int]] = mapped_column(
        Integer, ForeignKey("users.id"), nullable=True
    )
    reviewed_at: Mapped[Optional[datetime]] = mapped_column(DateTime, nullable=True)
    created_at: Mapped[datetime] = mapped_column(DateTime, default=_utc_now)

    user: Mapped["User"] = relationship(
        "User", back_populates="creator", foreign_keys=[user_id]
    )


class CreatorPost(Base):
    __tablename__ = "creator_posts"
    __table_args__ = (Index("ix_creator_posts_creator", "creator_id", "created_at"),)

    id: Mapped[int] = mapped_column(Integer, primary_key=True, index=True)
    creator_id: Mapped[int] = mapped_column(
        Integer, ForeignKey("creators.id"), nullable=False
    )
    title_id: Mapped[Optional[int]] = mapped_column(
        Integer, ForeignKey("titles.id"), nullable=True
    )
    content: Mapped[str] = mapped_column(Text, nullable=False)
    image_url: Mapped[Optional[str]] = mapped_column(String(2048), nullable=True)
    created_at: Mapped[datetime] = mapped_column(DateTime, default=_utc_now)

    # Moderation fields
    is_hidden: Mapped[bool] = mapped_column(Boolean, default=False)
    hidden_by: Mapped[Optional[int]] = mapped_column(
        Integer, ForeignKey("users.id"), nullable=True
    )
    hidden_at: Mapped[Optional[datetime]] = mapped_column(DateTime, nullable=True)
    hidden_reason: Mapped[Optional[str]] = mapped_column(Text, nullable=True)

    creator: Mapped["Creator"] = relationship("Creator")


class VideoUpload(Base):
    """Local mirror of an upload target created on the video pipeline."""

    __tablename__ = "video_uploads"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, index=True)
    creator_id: Mapped[int] = mapped_column(
        Integer, ForeignKey("creators.id"), nullable=False
    )
    upload_id: Mapped[str] = mapped_column(
        String(255), unique=True, index=True, nullable=False
    )
    asset_id: Mapped[Optional[str]] = mapped_column(String(255), nullable=True)
    playback_id: Mapped[Optional[str]] = mapped_column(String(255), nullable=True)
    status: Mapped[str] = mapped_column(String(50), default="waiting")
    is_ready: Mapped[bool] = mapped_column(Boolean, default=False)
    duration_seconds: Mapped[Optional[float]] = mapped_column(Float, nullable=True)
    title: Mapped[str] = mapped_column(String(255), nullable=False)
    description: Mapped[Optional[str]] = mapped_column(Text, nullable=True)
    created_at: Mapped[datetime] = mapped_column(DateTime, default=_utc_now)
    updated_at: Mapped[datetime] = mapped_column(
        DateTime, default=_utc_now, onupdate=_utc_now
    )

    creator: Mapped["Creator"] = relationship("Creator")


# ============================================================================
# Content Moderation Models
# ============================================================================


class RateLimitEvent(Base):
    """
    Append-only log of rate-limited actions.

    actor_id is a string: a user id for user actions, an e-mail or client
    IP for authentication attempts.
    """

    __tablename__ = "rate_limit_events"
    __table_args__ = (
        Index("ix_rate_limit_actor_action_created", "actor_id", "action_type", "created_at"),
    )

    id: Mapped[int] = mapped_column(Integer, primary_key=True, index=True)
    actor_id: Mapped[str] = mapped_column(String(255), nullable=False)
    action_type: Mapped[ActionType] = mapped_column(Enum(ActionType), nullable=False)
    created_at: Mapped[datetime] = mapped_column(DateTime, default=_utc_now)


class Ban(Base):
    """
    Restriction placed on a user by a moderator.

    expires_at NULL means permanent. is_active only ever goes from true to
    false; re-banning creates a new row.
    """

    __tablename__ = "user_bans"
    __table_args__ = (
        Index("ix_user_bans_actor_active", "actor_id", "is_active"),
        Index("ix_user_bans_expires", "expires_at"),
    )

    id: Mapped[int] = mapped_column(Integer, primary_key=True, index=True)
    actor_id: Mapped[int] = mapped_column(
        Integer, ForeignKey("users.id"), nullable=False
    )
    issued_by: Mapped[int] = mapped_column(
        Integer, ForeignKey("users.id"), nullable=False
    )
    reason: Mapped[str] = mapped_column(Text, nullable=False)
    scope: Mapped[BanScope] = mapped_column(
        Enum(BanScope), default=BanScope.COMMENT, nullable=False
    )
    expires_at: Mapped[Optional[datetime]] = mapped_column(
        DateTime, nullable=True
    )  # NULL = permanent
    is_active: Mapped[bool] = mapped_column(Boolean, default=True, nullable=False)
    created_at: Mapped[datetime] = mapped_column(DateTime, default=_utc_now)
    lifted_by: Mapped[Optional[int]] = mapped_column(
        Integer, ForeignKey("users.id"), nullable=True
    )
    lifted_at: Mapped[Optional[datetime]] = mapped_column(DateTime, nullable=True)

    # Relationships
    actor: Mapped["User"] = relationship("User", foreign_keys=[actor_id])
    issuer: Mapped["User"] = relationship("User", foreign_keys=[issued_by])


class Report(Base):
    """
    User-submitted report against a comment, creator post or user.

    status moves pending -> actioned or pending -> dismissed exactly once.
    """

    __tablename__ = "reports"
    __table_args__ = (
        Index("ix_reports_content", "content_kind", "content_id"),
        Index("ix_reports_status", "status"),
        Index("ix_reports_reporter", "reporter_id"),
    )

    id: Mapped[int] = mapped_column(Integer, primary_key=True, index=True)
    content_kind: Mapped[ReportContentKind] = mapped_column(
        Enum(ReportContentKind), nullable=False
    )
    content_id: Mapped[int] = mapped_column(Integer, nullable=False)
    reporter_id: Mapped[int] = mapped_column(
        Integer, ForeignKey("users.id"), nullable=False
    )
    reason: Mapped[str] = mapped_column(Text, nullable=False)
    status: Mapped[ReportStatus] = mapped_column(
        Enum(ReportStatus), default=ReportStatus.PENDING, nullable=False
    )
    reviewer_id: Mapped[Optional[int]] = mapped_column(
        Integer, ForeignKey("users.id"), nullable=True
    )
    reviewed_at: Mapped[Optional[datetime]] = mapped_column(DateTime, nullable=True)
    resolution_notes: Mapped[Optional[str]] = mapped_column(Text, nullable=True)
    created_at: Mapped[datetime] = mapped_column(DateTime, default=_utc_now)

    # Relationships
    reporter: Mapped["User"] = relationship("User", foreign_keys=[reporter_id])
    reviewer: Mapped[Optional["User"]] = relationship(
        "User", foreign_keys=[reviewer_id]
    )


class FeatureFlag(Base):
    """Named on/off switch for gated capabilities."""

    __tablename__ = "feature_flags"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, index=True)
    name: Mapped[str] = mapped_column(
        String(100), unique=True, index=True, nullable=False
    )
    enabled: Mapped[bool] = mapped_column(Boolean, default=False, nullable=False)
    description: Mapped[Optional[str]] = mapped_column(Text, nullable=True)
    updated_at: Mapped[datetime] = mapped_column(
        DateTime, default=_utc_now, onupdate=_utc_now
    )
    updated_by: Mapped[Optional[int]] = mapped_column(
        Integer, ForeignKey("users.id"), nullable=True
    )


class TitleAdConfig(Base):
    """Pre-roll ad settings for one title."""

    __tablename__ = "title_ad_configs"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, index=True)
    title_id: Mapped[int] = mapped_column(
        Integer, ForeignKey("titles.id"), unique=True, nullable=False
    )
    ads_enabled: Mapped[bool] = mapped_column(Boolean, default=False, nullable=False)
    ad_duration_seconds: Mapped[int] = mapped_column(
        Integer, default=15, nullable=False
    )
    ad_url: Mapped[Optional[str]] = mapped_column(String(2048), nullable=True)
    updated_at: Mapped[datetime] = mapped_column(
        DateTime, default=_utc_now, onupdate=_utc_now
    )
    updated_by: Mapped[Optional[int]] = mapped_column(
        Integer, ForeignKey("users.id"), nullable=True
    )


class PlaybackEvent(Base):
    """Play, completion or ad impression recorded while tracking is on."""

    __tablename__ = "playback_events"
    __table_args__ = (
        Index("ix_playback_events_type_created", "event_type", "created_at"),
        Index("ix_playback_events_title", "title_id"),
    )

    id: Mapped[int] = mapped_column(Integer, primary_key=True, index=True)
    event_type: Mapped[PlaybackEventType] = mapped_column(
        Enum(PlaybackEventType), nullable=False
    )
    user_id: Mapped[Optional[int]] = mapped_column(
        Integer, ForeignKey("users.id"), nullable=True
    )
    title_id: Mapped[Optional[int]] = mapped_column(
        Integer, ForeignKey("titles.id"), nullable=True
    )
    episode_id: Mapped[Optional[int]] = mapped_column(Integer, nullable=True)
    session_id: Mapped[Optional[str]] = mapped_column(String(64), nullable=True)
    watch_percentage: Mapped[Optional[float]] = mapped_column(Float, nullable=True)
    ad_duration_seconds: Mapped[Optional[int]] = mapped_column(Integer, nullable=True)
    ad_completed: Mapped[Optional[bool]] = mapped_column(Boolean, nullable=True)
    created_at: Mapped[datetime] = mapped_column(DateTime, default=_utc_now)


class PlaybackProgress(Base):
    """Last known resume position of a user on a title or episode."""

    __tablename__ = "playback_progress"
    __table_args__ = (
        UniqueConstraint(
            "user_id", "title_id", "episode_id", name="uq_playback_progress_position"
        ),
        Index("ix_playback_progress_user_updated", "user_id", "updated_at"),
    )

    id: Mapped[int] = mapped_column(Integer, primary_key=True, index=True)
    user_id: Mapped[int] = mapped_column(
        Integer, ForeignKey("users.id"), nullable=False
    )
    title_id: Mapped[int] = mapped_column(
        Integer, ForeignKey("titles.id"), nullable=False
    )
    episode_id: Mapped[Optional[int]] = mapped_column(Integer, nullable=True)
    position_seconds: Mapped[float] = mapped_column(Float, nullable=False)
    updated_at: Mapped[datetime] = mapped_column(
        DateTime, default=_utc_now, onupdate=_utc_now
    )

    title: Mapped["Title"] = relationship("Title")
