# src/fixmyhood/services/duplicates.py
"""Advisory duplicate detection for reports that are still being written.

Before a report is submitted, its draft title is compared against recent
reports in the same category. Detection only informs the author; it never
blocks submission, so every failure degrades to "no duplicates found".
"""

from __future__ import annotations

import asyncio
import logging
from collections.abc import Awaitable, Callable
from typing import Any, Generic, TypeVar

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from fixmyhood.core.settings import settings
from fixmyhood.models.report import Report
from fixmyhood.repositories import ReportRepository
from fixmyhood.schemas.report import DuplicateMatch
from fixmyhood.utils.distance import format_distance, has_coordinates, haversine_km
from fixmyhood.utils.text import count_token_overlap, tokenize_title

logger = logging.getLogger(__name__)

T = TypeVar("T")


class DuplicateDetector:
    """Scores a draft against recent reports and returns likely duplicates.

    Thresholds default to the application settings and can be overridden per
    instance.
    """

    def __init__(
        self,
        session: Session,
        *,
        pool_size: int | None = None,
        min_title_length: int | None = None,
        min_token_overlap: int | None = None,
        radius_km: float | None = None,
        max_results: int | None = None,
    ) -> None:
        self.session = session
        self.reports = ReportRepository(session)
        self.pool_size = settings.duplicate_pool_size if pool_size is None else pool_size
        self.min_title_length = (
            settings.duplicate_min_title_length if min_title_length is None else min_title_length
        )
        self.min_token_overlap = (
            settings.duplicate_min_token_overlap if min_token_overlap is None else min_token_overlap
        )
        self.radius_km = settings.duplicate_radius_km if radius_km is None else radius_km
        self.max_results = settings.duplicate_max_results if max_results is None else max_results

    def find_potential_duplicates(
        self,
        title: str,
        category: str,
        latitude: float | None = None,
        longitude: float | None = None,
    ) -> list[DuplicateMatch]:
        """Return up to ``max_results`` likely duplicates, newest first.

        Short titles and missing categories return an empty list without
        querying. Store errors are logged and also yield an empty list.
        """
        if len(title.strip()) < self.min_title_length or not category:
            return []

        try:
            pool = self.reports.list_duplicate_pool(str(category), self.pool_size)
        except SQLAlchemyError as exc:
            logger.warning("Duplicate lookup failed for category %s: %s", category, exc)
            return []

        tokens = tokenize_title(title)
        matches: list[DuplicateMatch] = []
        for report in pool:
            if len(matches) >= self.max_results:
                break
            if count_token_overlap(tokens, tokenize_title(report.title)) < self.min_token_overlap:
                continue
            distance = self._distance_km(latitude, longitude, report)
            if distance is not None and distance >= self.radius_km:
                continue
            match = DuplicateMatch.model_validate(report)
            if distance is not None:
                match = match.model_copy(update={"distance": format_distance(distance)})
            matches.append(match)
        return matches

    def check_draft(
        self,
        title: str,
        category: str,
        latitude: float | None = None,
        longitude: float | None = None,
    ) -> list[DuplicateMatch]:
        """Run one check for a long-lived caller and end the read transaction.

        The session returns its connection to the pool after every check, so a
        draft stream that sits idle between edits holds no connection.
        """
        try:
            return self.find_potential_duplicates(title, category, latitude, longitude)
        finally:
            self.session.rollback()

    @staticmethod
    def _distance_km(latitude: float | None, longitude: float | None, report: Report) -> float | None:
        if not (has_coordinates(latitude, longitude) and has_coordinates(report.latitude, report.longitude)):
            return None
        return haversine_km(latitude, longitude, report.latitude, report.longitude)  # type: ignore[arg-type]


def find_potential_duplicates(
    session: Session,
    title: str,
    category: str,
    latitude: float | None = None,
    longitude: float | None = None,
) -> list[DuplicateMatch]:
    """Module-level shortcut for :meth:`DuplicateDetector.find_potential_duplicates`."""
    return DuplicateDetector(session).find_potential_duplicates(title, category, latitude, longitude)


class DuplicateCheckDebouncer(Generic[T]):
    """Runs only the last check scheduled within a quiet window.

    Every :meth:`schedule` call cancels a check that is still waiting out its
    delay. A check that has already started querying is left to finish, but a
    generation counter discards its result so ``on_result`` never sees stale
    matches.
    """

    def __init__(
        self,
        check: Callable[..., Awaitable[T]],
        *,
        delay_seconds: float | None = None,
        on_result: Callable[[T], Awaitable[None]] | None = None,
    ) -> None:
        self._check = check
        self._on_result = on_result
        self.delay_seconds = (
            settings.duplicate_debounce_seconds if delay_seconds is None else delay_seconds
        )
        self._generation = 0
        self._waiting: set[asyncio.Task[T | None]] = set()
        self._tasks: set[asyncio.Task[T | None]] = set()
        self.latest: T | None = None

    @property
    def pending(self) -> bool:
        """True while any scheduled check has not finished."""
        return any(not task.done() for task in self._tasks)

    def schedule(self, *args: Any, **kwargs: Any) -> asyncio.Task[T | None]:
        """Schedule a check, replacing any check still waiting out its delay."""
        self.cancel()
        self._generation += 1
        task = asyncio.create_task(self._run(self._generation, args, kwargs))
        self._waiting.add(task)
        self._tasks.add(task)
        task.add_done_callback(self._tasks.discard)
        return task

    def cancel(self) -> None:
        """Cancel checks that have not started querying yet."""
        for task in self._waiting:
            task.cancel()
        self._waiting.clear()

    async def close(self) -> None:
        """Cancel everything, including in-flight checks, and wait for them to exit."""
        self.cancel()
        for task in list(self._tasks):
            task.cancel()
        if self._tasks:
            await asyncio.gather(*self._tasks, return_exceptions=True)

    async def _run(self, generation: int, args: tuple[Any, ...], kwargs: dict[str, Any]) -> T | None:
        await asyncio.sleep(self.delay_seconds)
        current = asyncio.current_task()
        if current is not None:
            self._waiting.discard(current)  # type: ignore[arg-type]
        result = await self._check(*args, **kwargs)
        if generation != self._generation:
            logger.debug("Discarding stale duplicate check (generation %d)", generation)
            return None
        self.latest = result
        if self._on_result is not None:
            await self._on_result(result)
        return result
