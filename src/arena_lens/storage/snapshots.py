"""로컬 스냅샷 저장소 및 트렌드 집계 모듈."""

import logging
from collections.abc import Sequence
from datetime import UTC, datetime, timedelta
from enum import Enum
from typing import Self

from pydantic import BaseModel
from sqlalchemy import (
    JSON,
    DateTime,
    ForeignKey,
    Index,
    Integer,
    String,
    Text,
    create_engine,
    func,
    or_,
    select,
)
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import DeclarativeBase, Mapped, Session, mapped_column

from arena_lens.models import MetricPoint, Project, TrendRecord

logger = logging.getLogger(__name__)


class TrendPeriod(str, Enum):
    """트렌드 집계 기간."""

    hour = "1h"
    day = "24h"
    week = "7d"
    month = "30d"
    all = "all"

    @property
    def hours(self) -> int:
        """기간을 시간 단위로 환산한다."""
        return PERIOD_HOURS[self]


PERIOD_HOURS: dict[TrendPeriod, int] = {
    TrendPeriod.hour: 1,
    TrendPeriod.day: 24,
    TrendPeriod.week: 24 * 7,
    TrendPeriod.month: 24 * 30,
    TrendPeriod.all: 24 * 365,
}


def _utcnow() -> datetime:
    """SQLite에는 타임존 없는 UTC로 저장한다."""
    return datetime.now(UTC).replace(tzinfo=None)


def _to_naive_utc(value: datetime) -> datetime:
    if value.tzinfo is None:
        return value
    return value.astimezone(UTC).replace(tzinfo=None)


class Base(DeclarativeBase):
    pass


class ProjectRow(Base):
    """프로젝트 기본 정보 (``projects`` 테이블)."""

    __tablename__ = "projects"

    id: Mapped[int] = mapped_column(Integer, primary_key=True)
    name: Mapped[str] = mapped_column(String, nullable=False)
    slug: Mapped[str] = mapped_column(String, nullable=False, unique=True)
    description: Mapped[str | None] = mapped_column(Text)
    tracks: Mapped[list[str]] = mapped_column(JSON, default=list)
    country: Mapped[str | None] = mapped_column(String, index=True)
    twitter_handle: Mapped[str | None] = mapped_column(String)
    team_size: Mapped[int | None] = mapped_column(Integer)
    created_at: Mapped[datetime] = mapped_column(DateTime, default=_utcnow)
    updated_at: Mapped[datetime] = mapped_column(
        DateTime, default=_utcnow, onupdate=_utcnow
    )


class ProjectMetricRow(Base):
    """시점별 좋아요/댓글 스냅샷 (``project_metrics`` 테이블)."""

    __tablename__ = "project_metrics"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    project_id: Mapped[int] = mapped_column(ForeignKey("projects.id"), nullable=False)
    likes: Mapped[int] = mapped_column(Integer, default=0)
    comments: Mapped[int] = mapped_column(Integer, default=0)
    recorded_at: Mapped[datetime] = mapped_column(DateTime, default=_utcnow)

    __table_args__ = (Index("idx_metrics_project_date", "project_id", "recorded_at"),)


class SaveResult(BaseModel):
    """스냅샷 저장 결과."""

    saved: int = 0
    failed: int = 0
    recorded_at: datetime


class SnapshotStore:
    """프로젝트와 지표 스냅샷을 관계형 DB에 기록하고 트렌드를 계산한다."""

    def __init__(self, url: str) -> None:
        """
        Args:
            url: SQLAlchemy 데이터베이스 URL (예: sqlite:///projects_tracking.db)
        """
        self.engine = create_engine(url)
        Base.metadata.create_all(self.engine)

    def __enter__(self) -> Self:
        return self

    def __exit__(self, *exc_info: object) -> None:
        self.close()

    def close(self) -> None:
        """커넥션 풀을 정리한다."""
        self.engine.dispose()

    def save_projects(
        self,
        projects: Sequence[Project],
        recorded_at: datetime | None = None,
    ) -> SaveResult:
        """프로젝트 정보를 갱신하고 같은 시각의 지표 스냅샷을 추가한다.

        개별 프로젝트 저장 실패는 기록만 하고 나머지는 계속 저장한다.
        """
        timestamp = _to_naive_utc(recorded_at) if recorded_at else _utcnow()
        saved = failed = 0
        logger.debug(f"Saving {len(projects)} projects to database")

        with Session(self.engine) as session:
            for project in projects:
                try:
                    session.merge(
                        ProjectRow(
                            id=project.id,
                            name=project.name,
                            slug=project.slug,
                            description=project.description or None,
                            tracks=list(project.tracks),
                            country=project.country or None,
                            twitter_handle=project.twitter_handle or None,
                            team_size=project.team_size,
                            updated_at=timestamp,
                        )
                    )
                    session.add(
                        ProjectMetricRow(
                            project_id=project.id,
                            likes=project.likes,
                            comments=project.comments,
                            recorded_at=timestamp,
                        )
                    )
                    session.commit()
                    saved += 1
                except (SQLAlchemyError, OverflowError) as e:
                    session.rollback()
                    failed += 1
                    logger.error(f"Error saving project {project.name}: {e}")

        logger.info(f"Recorded metrics for {saved} projects ({failed} failed)")
        return SaveResult(
            saved=saved, failed=failed, recorded_at=timestamp.replace(tzinfo=UTC)
        )

    def compute_trends(
        self,
        period: TrendPeriod = TrendPeriod.hour,
        limit: int = 10,
        now: datetime | None = None,
    ) -> list[TrendRecord]:
        """기간 내 첫 스냅샷과 마지막 스냅샷을 비교해 지표가 오른 프로젝트를 찾는다.

        좋아요 증가량, 댓글 증가량, 현재 좋아요 순으로 정렬한다. 조회 중
        오류가 나면 기록하고 빈 목록을 반환한다.
        """
        threshold = _to_naive_utc(now or _utcnow()) - timedelta(hours=period.hours)
        metric = ProjectMetricRow

        ranked = (
            select(
                metric.project_id,
                metric.likes,
                metric.comments,
                metric.recorded_at,
                func.row_number()
                .over(
                    partition_by=metric.project_id,
                    order_by=[metric.recorded_at.desc(), metric.id.desc()],
                )
                .label("rn_desc"),
                func.row_number()
                .over(
                    partition_by=metric.project_id,
                    order_by=[metric.recorded_at.asc(), metric.id.asc()],
                )
                .label("rn_asc"),
            )
            .where(metric.recorded_at >= threshold)
            .subquery("ranked")
        )
        latest = select(ranked).where(ranked.c.rn_desc == 1).subquery("latest")
        earliest = select(ranked).where(ranked.c.rn_asc == 1).subquery("earliest")

        likes_change = latest.c.likes - earliest.c.likes
        comments_change = latest.c.comments - earliest.c.comments

        stmt = (
            select(
                ProjectRow.id,
                ProjectRow.name,
                ProjectRow.slug,
                ProjectRow.tracks,
                ProjectRow.country,
                latest.c.likes.label("current_likes"),
                latest.c.comments.label("current_comments"),
                earliest.c.likes.label("start_likes"),
                earliest.c.comments.label("start_comments"),
                likes_change.label("likes_change"),
                comments_change.label("comments_change"),
                latest.c.recorded_at.label("latest_time"),
                earliest.c.recorded_at.label("earliest_time"),
            )
            .join(latest, latest.c.project_id == ProjectRow.id)
            .join(earliest, earliest.c.project_id == ProjectRow.id)
            .where(or_(likes_change > 0, comments_change > 0))
            .order_by(
                likes_change.desc(),
                comments_change.desc(),
                latest.c.likes.desc(),
                ProjectRow.id.asc(),
            )
            .limit(limit)
        )

        try:
            with Session(self.engine) as session:
                rows = session.execute(stmt).all()
                return [
                    TrendRecord(
                        project_id=row.id,
                        name=row.name,
                        slug=row.slug,
                        tracks=row.tracks or [],
                        country=row.country or "",
                        current_likes=row.current_likes,
                        current_comments=row.current_comments,
                        start_likes=row.start_likes,
                        start_comments=row.start_comments,
                        likes_change=row.likes_change,
                        comments_change=row.comments_change,
                        latest_time=row.latest_time.replace(tzinfo=UTC),
                        earliest_time=row.earliest_time.replace(tzinfo=UTC),
                        history=self._history(session, row.id, threshold),
                    )
                    for row in rows
                ]
        except SQLAlchemyError as e:
            logger.error(f"Error getting trends: {e}")
            return []

    def _history(
        self, session: Session, project_id: int, since: datetime
    ) -> list[MetricPoint]:
        """스파크라인용 기간 내 스냅샷 (오래된 순)."""
        stmt = (
            select(
                ProjectMetricRow.likes,
                ProjectMetricRow.comments,
                ProjectMetricRow.recorded_at,
            )
            .where(
                ProjectMetricRow.project_id == project_id,
                ProjectMetricRow.recorded_at >= since,
            )
            .order_by(ProjectMetricRow.recorded_at.asc(), ProjectMetricRow.id.asc())
        )
        return [
            MetricPoint(
                likes=row.likes,
                comments=row.comments,
                recorded_at=row.recorded_at.replace(tzinfo=UTC),
            )
            for row in session.execute(stmt)
        ]

    def get_project_metrics(self, project_id: int, limit: int = 30) -> list[MetricPoint]:
        """프로젝트의 최근 스냅샷 (최신 순)."""
        stmt = (
            select(
                ProjectMetricRow.likes,
                ProjectMetricRow.comments,
                ProjectMetricRow.recorded_at,
            )
            .where(ProjectMetricRow.project_id == project_id)
            .order_by(ProjectMetricRow.recorded_at.desc(), ProjectMetricRow.id.desc())
            .limit(limit)
        )
        try:
            with Session(self.engine) as session:
                return [
                    MetricPoint(
                        likes=row.likes,
                        comments=row.comments,
                        recorded_at=row.recorded_at.replace(tzinfo=UTC),
                    )
                    for row in session.execute(stmt)
                ]
        except SQLAlchemyError as e:
            logger.error(f"Error getting metrics for project {project_id}: {e}")
            return []
