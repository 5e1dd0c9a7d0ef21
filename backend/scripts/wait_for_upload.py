#!/usr/bin/env python
"""
Poll the video pipeline until a creator upload is ready.

Usage:
    python scripts/wait_for_upload.py <upload_id> --email creator@example.com

Options:
    --max-attempts N: Maximum status polls (default: UPLOAD_POLL_MAX_ATTEMPTS)
    --delay S: Seconds between polls (default: UPLOAD_POLL_DELAY_SECONDS)

Exit codes: 0 ready, 2 still processing after the last poll, 1 error.
"""

import argparse
import sys
from pathlib import Path

# Add the backend directory to the path for imports
sys.path.insert(0, str(Path(__file__).resolve().parent.parent))

from loguru import logger
from sqlalchemy.orm import Session

from models.exceptions import DomainException
from repositories.database import SessionLocal
from repositories.user_repository import UserRepository
from services.video_upload_service import VideoUploadService


def main(argv: list[str] | None = None) -> int:
    """Run the upload wait loop."""
    parser = argparse.ArgumentParser(description="Wait for a video upload to be ready")
    parser.add_argument("upload_id", help="Pipeline upload ID")
    parser.add_argument("--email", required=True, help="E-mail of the owning creator")
    parser.add_argument("--max-attempts", type=int, default=None)
    parser.add_argument("--delay", type=float, default=None)
    args = parser.parse_args(argv)

    db: Session = SessionLocal()
    try:
        user = UserRepository(db).get_by_email(args.email)
        if not user:
            logger.error(f"No user with e-mail {args.email}")
            return 1

        upload = VideoUploadService.wait_until_ready(
            db,
            args.upload_id,
            user,
            max_attempts=args.max_attempts,
            delay_seconds=args.delay,
        )
        if upload.is_ready:
            logger.info(
                f"Upload {args.upload_id} ready: playback_id={upload.playback_id} "
                f"duration={upload.duration_seconds}"
            )
            return 0

        logger.warning(f"Upload {args.upload_id} still {upload.status}")
        return 2
    except DomainException as e:
        logger.error(f"Waiting for upload failed: {e.message}")
        return 1
    finally:
        db.close()


if __name__ == "__main__":
    sys.exit(main())
