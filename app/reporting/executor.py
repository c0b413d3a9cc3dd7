# app/reporting/executor.py
"""Report executor: one DataClient round-trip per configuration."""

import logging
import time
from dataclasses import dataclass, field
from datetime import datetime
from typing import Any, Dict, List, Optional

from sqlalchemy.exc import SQLAlchemyError

from app.reporting.configuration import ReportConfiguration
from app.reporting.data_client import DataClient
from app.reporting.exceptions import DataClientError
from app.reporting.translator import QueryTranslator

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class ReportResult:
    """Raw rows of one execution, keyed by the configured field keys."""

    rows: List[Dict[str, Any]]
    executed_at: datetime = field(default_factory=datetime.now)
    execution_time_ms: float = 0.0

    @property
    def row_count(self) -> int:
        return len(self.rows)


class ReportExecutor:
    """Translates a configuration, runs it and records the execution."""

    def __init__(self, client: DataClient, translator: Optional[QueryTranslator] = None, execution_log=None):
        self.client = client
        self.translator = translator or QueryTranslator()
        self.execution_log = execution_log

    async def execute(
        self,
        config: ReportConfiguration,
        template_id: Optional[str] = None,
        user_id: Optional[str] = None,
    ) -> Optional[ReportResult]:
        """Run the configuration. Returns None when the data store fails."""
        start_time = time.time()
        request = self.translator.compile(config)

        try:
            raw_rows = await self.client.execute(request)
        except DataClientError as e:
            elapsed = (time.time() - start_time) * 1000
            logger.error("Report on %s failed after %.1fms: %s", config.data_source.value, elapsed, e)
            self._record(config, template_id, user_id, elapsed, 0, False, str(e))
            return None

        rows = [{key: raw.get(key) for key in config.fields} for raw in raw_rows[: config.limit]]
        elapsed = (time.time() - start_time) * 1000
        logger.info("Report on %s returned %d rows in %.1fms", config.data_source.value, len(rows), elapsed)
        self._record(config, template_id, user_id, elapsed, len(rows), True)
        return ReportResult(rows=rows, execution_time_ms=elapsed)

    def _record(
        self,
        config: ReportConfiguration,
        template_id: Optional[str],
        user_id: Optional[str],
        execution_time_ms: float,
        row_count: int,
        success: bool,
        error_message: Optional[str] = None,
    ) -> None:
        if self.execution_log is None:
            return
        try:
            self.execution_log.record(
                data_source=config.data_source.value,
                template_id=template_id,
                executed_by=user_id,
                execution_time_ms=execution_time_ms,
                row_count=row_count,
                success=success,
                error_message=error_message,
            )
        except SQLAlchemyError as e:
            logger.warning("Could not record report execution: %s", e)
