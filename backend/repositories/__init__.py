"""
Repository pattern implementation for data access layer.
"""

from .base import BaseRepository
from .ban_repository import BanRepository
from .comment_repository import CommentRepository
from .creator_post_repository import CreatorPostRepository
from .creator_repository import CreatorRepository
from .feature_flag_repository import FeatureFlagRepository
from .playback_event_repository import PlaybackEventRepository
from .playback_progress_repository import PlaybackProgressRepository
from .rate_limit_repository import RateLimitRepository
from .reaction_repository import ReactionRepository
from .report_repository import ReportRepository
from .title_ad_config_repository import TitleAdConfigRepository
from .title_repository import TitleRepository
from .user_repository import UserRepository
from .video_upload_repository import VideoUploadRepository

__all__ = [
    "BanRepository",
    "BaseRepository",
    "CommentRepository",
    "CreatorPostRepository",
    "CreatorRepository",
    "FeatureFlagRepository",
    "PlaybackEventRepository",
    "PlaybackProgressRepository",
    "RateLimitRepository",
    "ReactionRepository",
    "ReportRepository",
    "TitleAdConfigRepository",
    "TitleRepository",
    "UserRepository",
    "VideoUploadRepository",
]
