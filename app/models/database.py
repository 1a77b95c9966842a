"""SQLAlchemy models and async database engine."""

from datetime import datetime
from sqlalchemy import (
    Column, Integer, String, Float, Boolean, DateTime, Text, ForeignKey,
    Index, UniqueConstraint, JSON,
)
from sqlalchemy.orm import declarative_base, relationship
from sqlalchemy.ext.asyncio import create_async_engine, AsyncSession, async_sessionmaker
from app.config import get_settings

Base = declarative_base()

# ─── MODELS ──────────────────────────────────────────────────────────────────

class Account(Base):
    __tablename__ = "accounts"

    id = Column(Integer, primary_key=True, autoincrement=True)
    name = Column(String(255), nullable=False)

    # Fractions of 100; null means use the app defaults
    signal_good_threshold = Column(Float, nullable=True)
    signal_bad_threshold = Column(Float, nullable=True)

    created_at = Column(DateTime, default=datetime.utcnow)

    metric_sets = relationship("TargetMetricSet", back_populates="account", cascade="all, delete-orphan")
    assessments = relationship("SiteAssessment", back_populates="account", cascade="all, delete-orphan")


class TargetMetricSet(Base):
    """A named set of target values that assessments are scored against."""
    __tablename__ = "target_metric_sets"

    id = Column(Integer, primary_key=True, autoincrement=True)
    account_id = Column(Integer, ForeignKey("accounts.id"), nullable=False, index=True)
    name = Column(String(255), nullable=False)
    enabled_optional_sections = Column(JSON, default=list)

    created_at = Column(DateTime, default=datetime.utcnow)
    updated_at = Column(DateTime, default=datetime.utcnow, onupdate=datetime.utcnow)

    account = relationship("Account", back_populates="metric_sets")
    settings = relationship(
        "MetricSetting", back_populates="metric_set",
        cascade="all, delete-orphan", lazy="selectin",
    )


class MetricSetting(Base):
    """Target and direction for one metric within a metric set."""
    __tablename__ = "metric_settings"

    id = Column(Integer, primary_key=True, autoincrement=True)
    metric_set_id = Column(Integer, ForeignKey("target_metric_sets.id"), nullable=False)
    metric_identifier = Column(String(100), nullable=False)
    label = Column(String(255), default="")
    category = Column(String(100), default="")
    target_value = Column(Float, nullable=True)
    higher_is_better = Column(Boolean, default=True)
    measurement_type = Column(String(20), nullable=True)  # Index, Amount

    metric_set = relationship("TargetMetricSet", back_populates="settings")

    __table_args__ = (
        UniqueConstraint("metric_set_id", "metric_identifier", name="uq_set_metric"),
    )


class StandardMetricSet(Base):
    """A shared template that new target metric sets can be copied from."""
    __tablename__ = "standard_metric_sets"

    id = Column(Integer, primary_key=True, autoincrement=True)
    name = Column(String(255), nullable=False)
    description = Column(Text, nullable=True)
    enabled_optional_sections = Column(JSON, nullable=True)  # null means infer from settings

    created_at = Column(DateTime, default=datetime.utcnow)
    updated_at = Column(DateTime, default=datetime.utcnow, onupdate=datetime.utcnow)

    settings = relationship(
        "StandardMetricSetting", back_populates="standard_set",
        cascade="all, delete-orphan", lazy="selectin",
    )


class StandardMetricSetting(Base):
    __tablename__ = "standard_metric_settings"

    id = Column(Integer, primary_key=True, autoincrement=True)
    standard_set_id = Column(Integer, ForeignKey("standard_metric_sets.id"), nullable=False)
    metric_identifier = Column(String(100), nullable=False)
    label = Column(String(255), default="")
    category = Column(String(100), default="")
    target_value = Column(Float, nullable=True)
    higher_is_better = Column(Boolean, default=True)
    measurement_type = Column(String(20), nullable=True)

    standard_set = relationship("StandardMetricSet", back_populates="settings")

    __table_args__ = (
        UniqueConstraint("standard_set_id", "metric_identifier", name="uq_standard_set_metric"),
    )


class SiteAssessment(Base):
    """A candidate site scored against one target metric set."""
    __tablename__ = "site_assessments"

    id = Column(Integer, primary_key=True, autoincrement=True)
    account_id = Column(Integer, ForeignKey("accounts.id"), nullable=False)
    target_metric_set_id = Column(Integer, ForeignKey("target_metric_sets.id"), nullable=True)

    assessment_name = Column(String(255), nullable=False)
    address = Column(String(500), default="")
    latitude = Column(Float, nullable=True)
    longitude = Column(Float, nullable=True)
    site_status = Column(String(50), default="Prospect")

    site_signal_score = Column(Integer, nullable=True)      # 0-100, null when nothing scored
    completion_percentage = Column(Integer, default=0)      # 0-100
    executive_summary = Column(Text, nullable=True)

    created_at = Column(DateTime, default=datetime.utcnow)
    updated_at = Column(DateTime, default=datetime.utcnow, onupdate=datetime.utcnow)

    account = relationship("Account", back_populates="assessments")
    metric_set = relationship("TargetMetricSet", lazy="selectin")
    metric_values = relationship(
        "AssessmentMetricValue", back_populates="assessment",
        cascade="all, delete-orphan", lazy="selectin",
    )
    site_visit_ratings = relationship(
        "SiteVisitRating", back_populates="assessment",
        cascade="all, delete-orphan", lazy="selectin",
    )

    __table_args__ = (
        Index("ix_assessments_account", "account_id"),
        Index("ix_assessments_metric_set", "target_metric_set_id"),
        Index("ix_assessments_status", "site_status"),
    )


class AssessmentMetricValue(Base):
    """A value entered for one metric on one assessment."""
    __tablename__ = "assessment_metric_values"

    id = Column(Integer, primary_key=True, autoincrement=True)
    assessment_id = Column(Integer, ForeignKey("site_assessments.id"), nullable=False)
    metric_identifier = Column(String(100), nullable=False)
    label = Column(String(255), default="")
    category = Column(String(100), default="")
    entered_value = Column(Float, nullable=True)
    notes = Column(Text, default="")
    signal_score = Column(Float, nullable=True)  # written by recalculation

    assessment = relationship("SiteAssessment", back_populates="metric_values")

    __table_args__ = (
        UniqueConstraint("assessment_id", "metric_identifier", name="uq_assessment_metric"),
    )


class SiteVisitRating(Base):
    """Letter grade for one site-visit criterion."""
    __tablename__ = "site_visit_ratings"

    id = Column(Integer, primary_key=True, autoincrement=True)
    assessment_id = Column(Integer, ForeignKey("site_assessments.id"), nullable=False)
    criterion_key = Column(String(50), nullable=False)
    grade = Column(String(1), nullable=True)  # A, B, C, D, F
    notes = Column(Text, default="")

    assessment = relationship("SiteAssessment", back_populates="site_visit_ratings")

    __table_args__ = (
        UniqueConstraint("assessment_id", "criterion_key", name="uq_assessment_criterion"),
    )


# ─── DATABASE ENGINE ─────────────────────────────────────────────────────────

def get_engine():
    settings = get_settings()
    return create_async_engine(
        settings.database_url,
        echo=settings.app_env == "development",
    )


_engine = None
_session_factory = None


def get_session_factory():
    global _engine, _session_factory
    if _session_factory is None:
        _engine = get_engine()
        _session_factory = async_sessionmaker(_engine, class_=AsyncSession, expire_on_commit=False)
    return _session_factory


async def init_db():
    """Create all tables."""
    get_session_factory()  # ensures _engine is initialized
    async with _engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)


async def get_db():
    """FastAPI dependency for database sessions."""
    session_factory = get_session_factory()
    async with session_factory() as session:
        try:
            yield session
            await session.commit()
        except Exception:
            await session.rollback()
            raise
        finally:
            await session.close()
