"""
Database models for the grade passback ledger.

A row is claimed as `pending` before the platform is written to and turns
`published` once the platform acknowledges the score. The unique constraint
on `submission_token` is the idempotency key: a submission is published to
the gradebook at most once.
"""
from sqlalchemy import Column, DateTime, Float, Index, Integer, String, Text, UniqueConstraint
from sqlalchemy.orm import declarative_base
from sqlalchemy.sql import func

Base = declarative_base()

PASSBACK_PENDING = "pending"
PASSBACK_PUBLISHED = "published"


class GradePassback(Base):
    __tablename__ = "grade_passbacks"

    id = Column(Integer, primary_key=True, autoincrement=True)
    submission_token = Column(String(255), nullable=False)
    grade_target_ref = Column(Text, nullable=False)
    user_id = Column(String(255), nullable=False)
    score = Column(Float, nullable=False)
    max_score = Column(Float, nullable=False)
    published_at = Column(DateTime(timezone=True), nullable=False)
    status = Column(String(20), nullable=False, default=PASSBACK_PENDING)

    created_at = Column(DateTime(timezone=True), server_default=func.now(), nullable=False)

    __table_args__ = (
        UniqueConstraint("submission_token", name="unique_passback_submission_token"),
        Index("idx_grade_passbacks_user", "user_id"),
    )
