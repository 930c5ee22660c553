#!/usr/bin/env python3
"""
query_engine.py
---------------
Filtered, sorted listing of mistakes.

Every criterion is optional and narrows the result as a conjunction:

    q           substring of title OR body (SQL LIKE, wildcards escaped)
    subject     exact subject name ("ALL" means any)
    importance  exact level (0 means any)
    from / to   half-open range on occurred_at: from <= occurred_at < to
    sort        date | importance | subject | review

Each result carries the URI of the mistake's earliest photo, looked up
with a correlated subquery so rows are never multiplied by photos.

Usage:
    criteria = SearchCriteria.from_dict({"q": "sign", "sort": "review"})
    engine = QueryEngine(session)
    for result in engine.search(criteria):
        print(result.mistake.title, result.first_photo_uri)
"""
# --- Annotations ---
from __future__ import annotations

# --- Standard library imports ---
from dataclasses import dataclass
from datetime import datetime, timedelta, timezone
from typing import Any, Dict, List, Mapping, Optional, Tuple, Union

# --- Third party imports ---
from sqlalchemy import func, or_, select
from sqlalchemy.orm import Session

# --- Local imports ---
from missnote.core.exceptions import ValidationError
from missnote.core.logging_manager import MissNoteLogger
from missnote.core.validators import DataValidator
from missnote.database.decorators import handle_db_errors, log_database_operation
from missnote.database.models import Mistake, MistakePhoto, SortMode

# Sentinel values meaning "no constraint" in query input
ALL_SUBJECTS = "ALL"
ANY_IMPORTANCE = 0

# Review windows as (from, to) day offsets relative to the start of today
REVIEW_WINDOWS: Dict[str, Tuple[int, int]] = {
    "yesterday": (-1, 0),
    "week_ago": (-8, -5),
    "month_ago": (-33, -28),
}


@dataclass
class SearchCriteria:
    """Search criteria; None leaves a facet unconstrained."""

    q: Optional[str] = None
    subject: Optional[str] = None
    importance: Optional[int] = None
    from_: Optional[str] = None
    to: Optional[str] = None
    sort: SortMode = SortMode.DATE

    def __post_init__(self) -> None:
        self.q = DataValidator.normalize_string(self.q)
        self.subject = DataValidator.normalize_string(self.subject)
        if self.subject == ALL_SUBJECTS:
            self.subject = None
        if self.importance == ANY_IMPORTANCE:
            self.importance = None
        self.importance = DataValidator.normalize_importance(self.importance)
        self.from_ = DataValidator.normalize_timestamp(self.from_)
        self.to = DataValidator.normalize_timestamp(self.to)
        if self.sort is None:
            self.sort = SortMode.DATE
        try:
            self.sort = SortMode(self.sort)
        except ValueError as e:
            raise ValidationError(
                f"Unknown sort mode '{self.sort}', expected one of {SortMode.choices()}"
            ) from e

    @classmethod
    def from_dict(cls, params: Mapping[str, Any]) -> "SearchCriteria":
        """
        Build criteria from query input keys.

        Accepts ``q, subject, importance, from, to, sort``; absent keys,
        ``subject == "ALL"`` and ``importance == 0`` are unconstrained.
        """
        return cls(
            q=params.get("q"),
            subject=params.get("subject"),
            importance=params.get("importance"),
            from_=params.get("from"),
            to=params.get("to"),
            sort=params.get("sort") or SortMode.DATE,
        )


@dataclass
class SearchResult:
    """A matching mistake and the URI of its earliest photo."""

    mistake: Mistake
    first_photo_uri: Optional[str] = None


class QueryEngine:
    """Execute searches over the mistakes table."""

    def __init__(self, session: Session, logger: Optional[MissNoteLogger] = None):
        self.session = session
        self.logger = logger

    @staticmethod
    def _first_photo_uri():
        return (
            select(MistakePhoto.uri)
            .where(MistakePhoto.mistake_id == Mistake.id)
            .order_by(MistakePhoto.id.asc())
            .limit(1)
            .correlate(Mistake)
            .scalar_subquery()
            .label("first_photo_uri")
        )

    @staticmethod
    def _order_by(sort: SortMode) -> list:
        if sort is SortMode.REVIEW:
            return [Mistake.importance.desc(), Mistake.occurred_at.asc(), Mistake.id.asc()]
        if sort is SortMode.IMPORTANCE:
            return [Mistake.importance.desc(), Mistake.occurred_at.desc(), Mistake.id.desc()]
        if sort is SortMode.SUBJECT:
            return [Mistake.subject.asc(), Mistake.occurred_at.desc(), Mistake.id.desc()]
        return [Mistake.occurred_at.desc(), Mistake.id.desc()]

    @handle_db_errors
    @log_database_operation("search_mistakes")
    def search(
        self, criteria: Union[SearchCriteria, Mapping[str, Any], None] = None
    ) -> List[SearchResult]:
        """
        Execute a search.

        Args:
            criteria: SearchCriteria, or a dict with query input keys

        Returns:
            Ordered list of SearchResult

        Raises:
            ValidationError: If the criteria hold an unknown sort mode or
                an unparsable bound
        """
        if criteria is None:
            criteria = SearchCriteria()
        elif not isinstance(criteria, SearchCriteria):
            criteria = SearchCriteria.from_dict(criteria)

        stmt = select(Mistake, self._first_photo_uri())

        conditions = []
        if criteria.q:
            conditions.append(
                or_(
                    Mistake.title.contains(criteria.q, autoescape=True),
                    Mistake.body.contains(criteria.q, autoescape=True),
                )
            )
        if criteria.subject is not None:
            conditions.append(Mistake.subject == criteria.subject)
        if criteria.importance is not None:
            conditions.append(Mistake.importance == criteria.importance)
        if criteria.from_ is not None:
            conditions.append(Mistake.occurred_at >= criteria.from_)
        if criteria.to is not None:
            conditions.append(Mistake.occurred_at < criteria.to)

        if conditions:
            stmt = stmt.where(*conditions)
        stmt = stmt.order_by(*self._order_by(criteria.sort))

        rows = self.session.execute(stmt).all()
        return [SearchResult(mistake=row[0], first_photo_uri=row[1]) for row in rows]

    @handle_db_errors
    @log_database_operation("count_by_day")
    def count_by_day(self, from_: Any = None, to: Any = None) -> Dict[str, int]:
        """
        Count mistakes per day of occurred_at.

        Days are the ``YYYY-MM-DD`` prefix of the stored UTC timestamp.
        Bounds follow the same half-open rule as search().

        Returns:
            Mapping of day to count, in ascending day order
        """
        day = func.substr(Mistake.occurred_at, 1, 10).label("day")
        stmt = select(day, func.count(Mistake.id)).group_by(day).order_by(day)

        lower = DataValidator.normalize_timestamp(from_)
        upper = DataValidator.normalize_timestamp(to)
        if lower is not None:
            stmt = stmt.where(Mistake.occurred_at >= lower)
        if upper is not None:
            stmt = stmt.where(Mistake.occurred_at < upper)

        return {row[0]: row[1] for row in self.session.execute(stmt).all()}

    def review(self, now: Optional[datetime] = None) -> Dict[str, List[SearchResult]]:
        """
        Mistakes due for review, grouped by window.

        Windows are computed from the start of ``now``'s day: yesterday,
        about a week ago (8 to 5 days back) and about a month ago (33 to
        28 days back). Each window is sorted in review order.

        Returns:
            Mapping of window name to results
        """
        return {
            name: self.search(SearchCriteria(from_=lower, to=upper, sort=SortMode.REVIEW))
            for name, (lower, upper) in review_ranges(now).items()
        }


def review_ranges(now: Optional[datetime] = None) -> Dict[str, Tuple[datetime, datetime]]:
    """Half-open datetime ranges of the review windows relative to ``now``."""
    now = now or datetime.now(timezone.utc)
    today = now.replace(hour=0, minute=0, second=0, microsecond=0)
    return {
        name: (today + timedelta(days=lower), today + timedelta(days=upper))
        for name, (lower, upper) in REVIEW_WINDOWS.items()
    }
