# app/reporting/session.py
"""Per-view report session with last-request-wins result handling.

Executions run concurrently with user edits. Every run takes a fresh
generation token before it starts; its result is displayed only if no
newer run has been accepted in the meantime, so a slow early request can
never overwrite the result of a later one.
"""

import itertools
import logging
from typing import List, Optional, Sequence, Tuple

from app.reporting.configuration import ReportConfiguration
from app.reporting.executor import ReportExecutor, ReportResult
from app.reporting.field_catalog import FieldMetadata
from app.reporting.filters import FilterPredicate

logger = logging.getLogger(__name__)


class ResultGenerations:
    """Monotonic request tokens with last-request-wins acceptance."""

    def __init__(self):
        self._counter = itertools.count(1)
        self.last_accepted = 0

    def next_token(self) -> int:
        return next(self._counter)

    def accept(self, token: int) -> bool:
        """True if the token is newer than every token accepted so far."""
        if token <= self.last_accepted:
            return False
        self.last_accepted = token
        return True


class ReportSession:
    """Holds the configuration, fields and displayed result of one report view."""

    def __init__(self, executor: ReportExecutor, config: ReportConfiguration, fields: Sequence[FieldMetadata] = ()):
        self.executor = executor
        self.config = config
        self.fields: List[FieldMetadata] = list(fields)
        self.result: Optional[ReportResult] = None
        self.last_error: Optional[str] = None
        self.generations = ResultGenerations()

    async def run(self, config: Optional[ReportConfiguration] = None) -> Tuple[int, bool]:
        """Execute the current (or given) configuration.

        Returns the generation token and whether its outcome was applied.
        """
        if config is not None:
            self.config = config
        token = self.generations.next_token()
        result = await self.executor.execute(self.config)

        if not self.generations.accept(token):
            logger.debug("Discarding superseded result for generation %d", token)
            return token, False

        if result is None:
            # keep the previous result on screen
            self.last_error = "Could not run report"
        else:
            self.result = result
            self.last_error = None
        return token, True

    async def apply_filters(self, predicates: Sequence[FilterPredicate]) -> Tuple[int, bool]:
        config = self.config.clear_filters()
        for predicate in predicates:
            config = config.add_filter(predicate)
        return await self.run(config)

    async def clear_filters(self) -> Tuple[int, bool]:
        return await self.run(self.config.clear_filters())

    async def use_template(
        self, config: ReportConfiguration, fields: Sequence[FieldMetadata]
    ) -> Tuple[int, bool]:
        self.fields = list(fields)
        return await self.run(config)
