# Copyright 2026 Firefly Software Solutions Inc.
#
# Licensed under the Apache License, Version 2.0 (the "License");
# you may not use this file except in compliance with the License.
# You may obtain a copy of the License at
#
#     http://www.apache.org/licenses/LICENSE-2.0
#
# Unless required by applicable law or agreed to in writing, software
# distributed under the License is distributed on an "AS IS" BASIS,
# WITHOUT WARRANTIES OR CONDITIONS OF ANY KIND, either express or implied.
# See the License for the specific language governing permissions and
# limitations under the License.
"""Tests for RootInitializer: ordering, fail-fast, cancellation and logging."""

import pytest
from structlog.testing import capture_logs

from asyncinit.initialization import AsyncInitializer, DelegateInitializer, RootInitializer
from asyncinit.kernel.cancellation import CancellationToken
from asyncinit.kernel.exceptions import OperationCancelledException
from asyncinit.testing import CallRecorder, RecordingInitializer, RecordingTeardown


def _steps(recorder: CallRecorder, count: int, overrides: dict | None = None) -> list[AsyncInitializer]:
    steps: list[AsyncInitializer] = []
    for i in range(count):
        kwargs = (overrides or {}).get(i, {})
        steps.append(RecordingTeardown(f"s{i}", recorder, **kwargs))
    return steps


class TestInitialize:
    @pytest.mark.asyncio
    async def test_runs_in_registration_order(self):
        recorder = CallRecorder()
        await RootInitializer(_steps(recorder, 3)).initialize(CancellationToken())
        assert recorder.names("initialize") == ["s0", "s1", "s2"]

    @pytest.mark.asyncio
    async def test_no_steps_is_a_no_op(self):
        await RootInitializer([]).initialize()

    @pytest.mark.asyncio
    async def test_stops_at_first_failure(self):
        recorder = CallRecorder()
        steps = _steps(recorder, 4, {1: {"fail_with": ValueError("s1 failed")}})
        with pytest.raises(ValueError, match="s1 failed"):
            await RootInitializer(steps).initialize()
        assert recorder.names("initialize") == ["s0", "s1"]
        assert recorder.names("teardown") == []

    @pytest.mark.asyncio
    async def test_pre_cancelled_token_runs_nothing(self):
        recorder = CallRecorder()
        with pytest.raises(OperationCancelledException):
            await RootInitializer(_steps(recorder, 2)).initialize(CancellationToken(cancelled=True))
        assert recorder.calls == []

    @pytest.mark.asyncio
    async def test_cancellation_between_steps(self):
        recorder = CallRecorder()
        token = CancellationToken()
        steps = _steps(recorder, 3, {0: {"cancel": token}})
        with pytest.raises(OperationCancelledException):
            await RootInitializer(steps).initialize(token)
        assert recorder.names("initialize") == ["s0"]

    @pytest.mark.asyncio
    async def test_step_list_captured_at_construction(self):
        recorder = CallRecorder()
        steps = _steps(recorder, 1)
        root = RootInitializer(steps)
        steps.append(RecordingInitializer("late", recorder))
        await root.initialize()
        assert recorder.names("initialize") == ["s0"]


class TestTeardown:
    @pytest.mark.asyncio
    async def test_reverse_order_over_teardown_capable_steps(self):
        recorder = CallRecorder()
        steps = [
            RecordingTeardown("a", recorder),
            RecordingInitializer("b", recorder),
            RecordingTeardown("c", recorder),
        ]
        await RootInitializer(steps).teardown()
        assert recorder.names("teardown") == ["c", "a"]
        assert recorder.names("initialize") == []

    @pytest.mark.asyncio
    async def test_teardown_stops_at_first_failure(self):
        recorder = CallRecorder()
        steps = _steps(recorder, 3, {1: {"teardown_fail_with": RuntimeError("td")}})
        with pytest.raises(RuntimeError, match="td"):
            await RootInitializer(steps).teardown()
        assert recorder.names("teardown") == ["s2", "s1"]

    @pytest.mark.asyncio
    async def test_cancelled_teardown_token_stops_remaining_steps(self):
        recorder = CallRecorder()
        token = CancellationToken()
        steps = _steps(recorder, 3, {2: {"cancel_on_teardown": token}})
        with pytest.raises(OperationCancelledException):
            await RootInitializer(steps).teardown(token)
        assert recorder.names("teardown") == ["s2"]

    @pytest.mark.asyncio
    async def test_delegate_without_teardown_is_skipped(self):
        calls = []

        async def init() -> None:
            calls.append("init")

        await RootInitializer([DelegateInitializer(init)]).teardown()
        assert calls == []


class TestLogging:
    @pytest.mark.asyncio
    async def test_success_events(self):
        recorder = CallRecorder()
        with capture_logs() as logs:
            await RootInitializer(_steps(recorder, 2)).initialize()
        events = [entry["event"] for entry in logs]
        assert events == [
            "async_phase_started",
            "step_started",
            "step_completed",
            "step_started",
            "step_completed",
            "async_phase_completed",
        ]
        assert all(entry["phase"] == "initialization" for entry in logs)
        assert logs[1]["index"] == 0
        assert logs[1]["initializer"] == "RecordingTeardown"

    @pytest.mark.asyncio
    async def test_failure_events(self):
        recorder = CallRecorder()
        steps = _steps(recorder, 1, {0: {"fail_with": ValueError("nope")}})
        with capture_logs() as logs, pytest.raises(ValueError):
            await RootInitializer(steps).initialize()
        failed = [entry for entry in logs if entry["event"] == "step_failed"]
        assert failed[0]["log_level"] == "error"
        assert failed[0]["error_type"] == "ValueError"
        assert logs[-1]["event"] == "async_phase_failed"

    @pytest.mark.asyncio
    async def test_cancellation_logged_as_warning(self):
        recorder = CallRecorder()
        with capture_logs() as logs, pytest.raises(OperationCancelledException):
            await RootInitializer(_steps(recorder, 1)).teardown(CancellationToken(cancelled=True))
        assert logs[-1]["event"] == "async_phase_cancelled"
        assert logs[-1]["log_level"] == "warning"
        assert logs[-1]["phase"] == "teardown"
