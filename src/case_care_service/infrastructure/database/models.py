"""SQLAlchemy database models."""

from datetime import datetime, timezone

from sqlalchemy import (
    JSON,
    Column,
    DateTime,
    Enum,
    ForeignKey,
    Integer,
    String,
    Text,
    UniqueConstraint,
)
from sqlalchemy.orm import declarative_base, relationship

from case_care_service.models.case import CaseStatus

Base = declarative_base()


class CaseDB(Base):
    """SQLAlchemy model for cases table."""

    __tablename__ = "cases"

    id = Column(Integer, primary_key=True, autoincrement=True)

    title = Column(Text, nullable=False)
    patient_name = Column(Text, nullable=False)
    patient_age = Column(Integer, nullable=True)
    clinical_notes = Column(Text, nullable=True)
    transcript = Column(Text, nullable=True)
    audio_url = Column(Text, nullable=True)

    status = Column(
        Enum(CaseStatus, values_callable=lambda e: [m.value for m in e], name="casestatus"),
        nullable=False,
        default=CaseStatus.PENDING,
        index=True,
    )

    created_at = Column(
        DateTime(timezone=True),
        nullable=False,
        default=lambda: datetime.now(timezone.utc),
        index=True,
    )

    insight = relationship(
        "InsightDB",
        uselist=False,
        back_populates="case",
        cascade="all, delete-orphan",
        passive_deletes=True,
    )


class InsightDB(Base):
    """SQLAlchemy model for insights table (one row per analysed case)."""

    __tablename__ = "insights"
    __table_args__ = (UniqueConstraint("case_id", name="uq_insights_case_id"),)

    id = Column(Integer, primary_key=True, autoincrement=True)
    case_id = Column(
        Integer,
        ForeignKey("cases.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )

    summary = Column(Text, nullable=True)
    blind_spots = Column(JSON, nullable=False, default=list)
    questions = Column(JSON, nullable=False, default=list)
    original_language = Column(String(100), nullable=True)

    created_at = Column(
        DateTime(timezone=True),
        nullable=False,
        default=lambda: datetime.now(timezone.utc),
    )

    case = relationship("CaseDB", back_populates="insight")
