"""DebounceScheduler 测试"""

from ptrap.pipeline.context import PipelineState
from ptrap.pipeline.scheduler import DebounceScheduler
from tests.conftest import pump_events, wait_until


class TestDebounceScheduler:
    """去抖调度测试"""

    def test_on_edit_increments_sequence(self, qapp):
        state = PipelineState()
        scheduler = DebounceScheduler(interval_ms=10)
        assert scheduler.on_edit(state) == 1
        assert scheduler.on_edit(state) == 2
        assert state.sequence == 2

    def test_each_edit_fires_its_own_tag(self, qapp):
        """每次编辑都会在间隔后发出带各自 tag 的请求"""
        state = PipelineState()
        scheduler = DebounceScheduler(interval_ms=20)
        fired = []
        scheduler.rerun_requested.connect(fired.append)

        for _ in range(3):
            scheduler.on_edit(state)

        assert wait_until(lambda: len(fired) == 3, timeout_ms=2000)
        assert fired == [1, 2, 3]

    def test_request_not_fired_before_interval(self, qapp):
        state = PipelineState()
        scheduler = DebounceScheduler(interval_ms=300)
        fired = []
        scheduler.rerun_requested.connect(fired.append)

        scheduler.on_edit(state)
        pump_events(50)
        assert fired == []
        assert wait_until(lambda: fired == [1], timeout_ms=2000)
