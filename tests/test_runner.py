"""Tests for the concurrent diagnostics runner."""

from __future__ import annotations

import threading
import time

import pytest

from sqldiag.checks.base import BaseCheck, Outcome
from sqldiag.checks.registry import OVERVIEW_CATEGORY, CheckRegistry
from sqldiag.config import ConnectionConfig, DiagnosticsConfig
from sqldiag.errors import Fault, FaultKind, QueryError
from sqldiag.models import Status
from sqldiag.runner import DiagnosticsRunner


class _StubCheck(BaseCheck):
    """Check that records concurrency and optionally raises."""

    def __init__(
        self,
        check_id: int,
        category: str,
        fail_with: Exception | None = None,
        delay: float = 0.0,
        gauge: _Gauge | None = None,
    ) -> None:
        super().__init__()
        self.id = check_id
        self.name = f"Stub {check_id}"
        self.category = category
        self.code = f"STUB_{check_id}"
        self.fail_with = fail_with
        self.delay = delay
        self.gauge = gauge

    def run(self, executor):
        if self.gauge:
            self.gauge.enter()
        try:
            time.sleep(self.delay)
            if self.fail_with is not None:
                raise self.fail_with
            return Outcome(Status.PASS, f"stub {self.id} ok")
        finally:
            if self.gauge:
                self.gauge.leave()


class _Gauge:
    """Tracks the highest number of simultaneously running checks."""

    def __init__(self) -> None:
        self._lock = threading.Lock()
        self.current = 0
        self.peak = 0

    def enter(self) -> None:
        with self._lock:
            self.current += 1
            self.peak = max(self.peak, self.current)

    def leave(self) -> None:
        with self._lock:
            self.current -= 1


def _runner(checks: list[BaseCheck], max_concurrency: int = 5) -> DiagnosticsRunner:
    return DiagnosticsRunner(
        registry=CheckRegistry(checks),
        config=DiagnosticsConfig(max_concurrency=max_concurrency),
    )


class TestRunnerSelection:
    """One result per selected check."""

    def test_runs_every_check_without_filter(self, connection_config: ConnectionConfig) -> None:
        checks = [_StubCheck(i, "Keys") for i in range(1, 5)]
        results = _runner(checks).run(connection_config)

        assert sorted(r.check_id for r in results) == [1, 2, 3, 4]
        assert all(r.status == Status.PASS for r in results)

    def test_filter_includes_overview(self, connection_config: ConnectionConfig) -> None:
        checks = [
            _StubCheck(1, "Keys"),
            _StubCheck(2, "Index Health"),
            _StubCheck(3, OVERVIEW_CATEGORY),
        ]
        results = _runner(checks).run(connection_config, category="index health")

        assert sorted(r.check_id for r in results) == [2, 3]

    def test_empty_selection(self, connection_config: ConnectionConfig) -> None:
        assert _runner([_StubCheck(1, "Keys")]).run(connection_config, "Nope") == []


class TestRunnerFaultIsolation:
    """A throwing check turns into its own Fail result."""

    def test_throwing_check_becomes_fail(self, connection_config: ConnectionConfig) -> None:
        checks = [
            _StubCheck(1, "Keys"),
            _StubCheck(2, "Keys", fail_with=RuntimeError("catalog view missing")),
            _StubCheck(3, "Keys"),
        ]

        results = {r.check_id: r for r in _runner(checks).run(connection_config)}

        assert len(results) == 3
        assert results[2].status == Status.FAIL
        assert results[2].message == "Check threw: catalog view missing"
        assert results[2].name == "Stub 2"
        assert results[2].code == "STUB_2"
        assert results[1].status == results[3].status == Status.PASS

    def test_query_error_handled_inside_check(self, connection_config: ConnectionConfig) -> None:
        fault = Fault(FaultKind.AUTHORIZATION, "18456", "Login failed")
        checks = [_StubCheck(1, "Keys", fail_with=QueryError(fault))]

        [result] = _runner(checks).run(connection_config)

        assert result.status == Status.FAIL
        assert result.message == "Query failed | AUTHORIZATION | Code: 18456 | Login failed"


class TestRunnerConcurrency:
    def test_bounded_parallelism(self, connection_config: ConnectionConfig) -> None:
        gauge = _Gauge()
        checks = [_StubCheck(i, "Keys", delay=0.05, gauge=gauge) for i in range(1, 9)]

        results = _runner(checks, max_concurrency=2).run(connection_config)

        assert len(results) == 8
        assert gauge.peak <= 2

    def test_single_worker_runs_sequentially(self, connection_config: ConnectionConfig) -> None:
        gauge = _Gauge()
        checks = [_StubCheck(i, "Keys", delay=0.01, gauge=gauge) for i in range(1, 4)]

        _runner(checks, max_concurrency=1).run(connection_config)

        assert gauge.peak == 1

    def test_invalid_concurrency(self) -> None:
        with pytest.raises(ValueError):
            DiagnosticsRunner(config=DiagnosticsConfig(max_concurrency=0))


class TestRunnerConnection:
    """Unusable handles yield no results instead of raising."""

    @pytest.mark.parametrize("handle", [None, "", "   "])
    def test_blank_handle(self, handle: str | None) -> None:
        assert _runner([_StubCheck(1, "Keys")]).run(handle) == []

    def test_invalid_config(self) -> None:
        config = ConnectionConfig(provider="oracle", database="x", username="u")
        assert _runner([_StubCheck(1, "Keys")]).run(config) == []

    def test_connection_string(self) -> None:
        results = _runner([_StubCheck(1, "Keys")]).run(
            "Server=db1;Database=SalesDB;Uid=sa;Pwd=secret"
        )
        assert [r.check_id for r in results] == [1]
