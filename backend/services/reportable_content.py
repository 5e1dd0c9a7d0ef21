"""
Lookup table of content kinds that users can report.

Each kind knows how to load its row, who authored it, how to hide it and
what text to show in the moderation queue. Report intake and the moderation
dispatcher go through this table instead of branching on the kind.
"""

from datetime import datetime
from typing import Any, Callable, NamedTuple, Optional

from sqlalchemy.orm import Session

from models.exceptions import ValidationException
from repositories.comment_repository import CommentRepository
from repositories.creator_post_repository import CreatorPostRepository
from repositories.creator_repository import CreatorRepository
from repositories.db_models import Comment, CreatorPost, ReportContentKind, User
from repositories.user_repository import UserRepository


class ReportableContent(NamedTuple):
    kind: ReportContentKind
    fetch: Callable[[Session, int], Any]
    author_of: Callable[[Session, Any], Optional[int]]
    text_of: Callable[[Any], str]
    hide: Optional[Callable[[Any, int, str, datetime], None]] = None


def _hide_row(row: Comment | CreatorPost, moderator_id: int, reason: str, now: datetime) -> None:
    row.is_hidden = True
    row.hidden_by = moderator_id
    row.hidden_at = now
    row.hidden_reason = reason


def _creator_post_author(db: Session, post: CreatorPost) -> Optional[int]:
    creator = CreatorRepository(db).get_by_id(post.creator_id)
    return creator.user_id if creator else None


def _user_text(user: User) -> str:
    return f"{user.display_name} (@{user.username})"


REPORTABLE_CONTENT: dict[ReportContentKind, ReportableContent] = {
    ReportContentKind.COMMENT: ReportableContent(
        kind=ReportContentKind.COMMENT,
        fetch=lambda db, content_id: CommentRepository(db).get_by_id(content_id),
        author_of=lambda db, comment: comment.user_id,
        text_of=lambda comment: comment.content,
        hide=_hide_row,
    ),
    ReportContentKind.CREATOR_POST: ReportableContent(
        kind=ReportContentKind.CREATOR_POST,
        fetch=lambda db, content_id: CreatorPostRepository(db).get_by_id(content_id),
        author_of=_creator_post_author,
        text_of=lambda post: post.content,
        hide=_hide_row,
    ),
    # Users are banned, not hidden
    ReportContentKind.USER: ReportableContent(
        kind=ReportContentKind.USER,
        fetch=lambda db, content_id: UserRepository(db).get_by_id(content_id),
        author_of=lambda db, user: user.id,
        text_of=_user_text,
    ),
}


def parse_content_kind(value: str | ReportContentKind) -> ReportContentKind:
    """
    Convert a raw content type into a ReportContentKind.

    Raises:
        ValidationException: If the value is not a reportable kind
    """
    if isinstance(value, ReportContentKind):
        return value
    try:
        return ReportContentKind(value)
    except ValueError:
        raise ValidationException("Invalid content type") from None


def get_handler(kind: str | ReportContentKind) -> ReportableContent:
    """Handler for a content kind."""
    return REPORTABLE_CONTENT[parse_content_kind(kind)]
