"""
Services layer for business logic.

This package contains service modules that encapsulate business logic
separate from the API routes.
"""

from .ad_service import AdService
from .ban_service import BanService
from .comment_service import CommentService
from .creator_post_service import CreatorPostService
from .creator_service import CreatorService
from .feature_flag_service import FeatureFlagService
from .moderation_service import ModerationService
from .playback_service import PlaybackProgressService
from .rate_limit_service import RateLimitService
from .reaction_service import ReactionService
from .report_service import ReportService
from .title_service import TitleService
from .tracking_service import TrackingService
from .video_upload_service import VideoUploadService

__all__ = [
    "AdService",
    "BanService",
    "CommentService",
    "CreatorPostService",
    "CreatorService",
    "FeatureFlagService",
    "ModerationService",
    "PlaybackProgressService",
    "RateLimitService",
    "ReactionService",
    "ReportService",
    "TitleService",
    "TrackingService",
    "VideoUploadService",
]
