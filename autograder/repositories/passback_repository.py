from typing import Optional

from loguru import logger
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from autograder.models.database import PASSBACK_PENDING, PASSBACK_PUBLISHED, GradePassback
from autograder.models.results import GradePassbackRecord


class PassbackRepository:
    def __init__(self, session: Session):
        self.session = session

    def get_published(self, submission_token: str) -> Optional[GradePassback]:
        return self.session.query(GradePassback).filter(
            GradePassback.submission_token == submission_token,
            GradePassback.status == PASSBACK_PUBLISHED,
        ).first()

    def reserve(self, record: GradePassbackRecord) -> bool:
        """
        Claim the submission token before the platform is written to.

        Returns False when the token was already claimed, pending or published.
        """
        row = GradePassback(
            submission_token=record.submission_token,
            grade_target_ref=record.grade_target_ref,
            user_id=record.user_id,
            score=record.score,
            max_score=record.max_score,
            published_at=record.published_at,
            status=PASSBACK_PENDING,
        )
        self.session.add(row)
        try:
            self.session.commit()
        except IntegrityError:
            self.session.rollback()
            logger.info("passback_already_claimed", submission_token=record.submission_token)
            return False
        return True

    def mark_published(self, submission_token: str) -> None:
        self.session.query(GradePassback).filter(
            GradePassback.submission_token == submission_token
        ).update({GradePassback.status: PASSBACK_PUBLISHED})
        self.session.commit()
        logger.info("passback_recorded", submission_token=submission_token)

    def release(self, submission_token: str) -> None:
        """Drop a pending claim whose platform write did not go through."""
        self.session.query(GradePassback).filter(
            GradePassback.submission_token == submission_token,
            GradePassback.status == PASSBACK_PENDING,
        ).delete()
        self.session.commit()

    def count_for_submission(self, submission_token: str) -> int:
        return self.session.query(GradePassback).filter(
            GradePassback.submission_token == submission_token
        ).count()
