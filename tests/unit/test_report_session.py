"""
Unit tests for report sessions and last-request-wins result handling.
"""

import asyncio
from unittest.mock import AsyncMock, Mock

from app.reporting.configuration import ReportConfiguration
from app.reporting.executor import ReportResult
from app.reporting.field_catalog import DataSource, resolve_field
from app.reporting.filters import FilterPredicate
from app.reporting.session import ReportSession, ResultGenerations


class ControlledExecutor:
    """Executor whose runs finish only when the test releases them."""

    def __init__(self):
        self.pending = []

    async def execute(self, config, template_id=None, user_id=None):
        release = asyncio.Event()
        outcome = {}
        self.pending.append((release, outcome))
        await release.wait()
        return outcome.get("result")

    def finish(self, index, result):
        release, outcome = self.pending[index]
        outcome["result"] = result
        release.set()


def _config(**kwargs):
    return ReportConfiguration.build(DataSource.PROJECTS, ["project_number", "status"], **kwargs)


def _result(*numbers):
    return ReportResult(rows=[{"project_number": number, "status": "approved"} for number in numbers])


class TestResultGenerations:
    """Test generation token bookkeeping"""

    def test_tokens_increase(self):
        generations = ResultGenerations()
        assert [generations.next_token() for _ in range(3)] == [1, 2, 3]

    def test_older_token_rejected_after_newer_accepted(self):
        generations = ResultGenerations()
        first, second = generations.next_token(), generations.next_token()
        assert generations.accept(second) is True
        assert generations.accept(first) is False

    def test_in_order_completion_accepts_both(self):
        generations = ResultGenerations()
        first, second = generations.next_token(), generations.next_token()
        assert generations.accept(first) is True
        assert generations.accept(second) is True


class TestReportSession:
    """Test session state across overlapping runs"""

    async def test_later_request_wins_when_it_finishes_first(self):
        executor = ControlledExecutor()
        session = ReportSession(executor, _config())

        run_a = asyncio.create_task(session.run(_config(limit=10)))
        await asyncio.sleep(0)
        run_b = asyncio.create_task(session.run(_config(limit=20)))
        await asyncio.sleep(0)

        executor.finish(1, _result("P-B"))
        token_b, applied_b = await run_b
        executor.finish(0, _result("P-A"))
        token_a, applied_a = await run_a

        assert token_a < token_b
        assert applied_b is True
        assert applied_a is False
        assert session.result.rows[0]["project_number"] == "P-B"

    async def test_in_order_completion_shows_latest(self):
        executor = ControlledExecutor()
        session = ReportSession(executor, _config())

        run_a = asyncio.create_task(session.run())
        await asyncio.sleep(0)
        run_b = asyncio.create_task(session.run())
        await asyncio.sleep(0)

        executor.finish(0, _result("P-A"))
        await run_a
        executor.finish(1, _result("P-B"))
        await run_b

        assert session.result.rows[0]["project_number"] == "P-B"

    async def test_failed_run_keeps_previous_result(self):
        executor = Mock()
        executor.execute = AsyncMock(side_effect=[_result("P-1"), None])
        session = ReportSession(executor, _config())

        await session.run()
        token, applied = await session.run()

        assert applied is True
        assert session.last_error == "Could not run report"
        assert session.result.rows == [{"project_number": "P-1", "status": "approved"}]

    async def test_success_clears_error(self):
        executor = Mock()
        executor.execute = AsyncMock(side_effect=[None, _result("P-1")])
        session = ReportSession(executor, _config())

        await session.run()
        assert session.result is None
        await session.run()
        assert session.last_error is None
        assert session.result.row_count == 1

    async def test_apply_filters_replaces_existing_filters(self):
        executor = Mock()
        executor.execute = AsyncMock(return_value=_result())
        old = FilterPredicate("status", "equals", "complete")
        session = ReportSession(executor, _config(filters=[old]))

        new = FilterPredicate("status", "equals", "approved")
        await session.apply_filters([new])

        executed = executor.execute.call_args.args[0]
        assert executed.predicates() == [new]
        assert session.config is executed

    async def test_clear_filters(self):
        executor = Mock()
        executor.execute = AsyncMock(return_value=_result())
        session = ReportSession(executor, _config(filters=[FilterPredicate("status", "equals", "complete")]))

        await session.clear_filters()
        assert session.config.filters == {}

    async def test_use_template_swaps_fields(self):
        executor = Mock()
        executor.execute = AsyncMock(return_value=_result())
        session = ReportSession(executor, _config())
        config = ReportConfiguration.build(DataSource.QUOTES, ["quote_number"])
        fields = [resolve_field(DataSource.QUOTES, "quote_number")]

        await session.use_template(config, fields)

        assert session.fields == fields
        assert session.config.data_source == DataSource.QUOTES
