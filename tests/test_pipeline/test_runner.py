"""PipelineRunner 测试"""

import threading
import time

from ptrap.pipeline.executor import CancelToken
from ptrap.pipeline.node import CommandNode
from ptrap.pipeline.runner import PipelineRunner


class TestPipelineRunner:
    """串联执行测试"""

    def test_single_cat_stage(self, sample_input, cat_node):
        result = PipelineRunner().run([cat_node], sample_input)
        assert result.ok
        assert result.output == "hello\nworld\n"

    def test_cat_then_grep(self, sample_input, cat_node, grep_node):
        result = PipelineRunner().run([cat_node, grep_node], sample_input)
        assert result.output == "world\n"
        assert [t.status for t in result.trace] == ["completed", "completed"]

    def test_empty_pipeline_returns_input(self, sample_input):
        result = PipelineRunner().run([], sample_input)
        assert result.output == sample_input
        assert result.trace == []

    def test_failing_stage_halts_chain(self, sample_input, cat_node):
        """第一个失败的阶段之后的阶段不会执行"""
        stages = [CommandNode(command="nonexistent-binary"), cat_node]
        result = PipelineRunner().run(stages, sample_input)

        assert result.failed_index == 0
        assert len(result.trace) == 1
        assert result.trace[0].status == "failed"
        assert result.output.startswith("\n")
        assert "not found" in result.output

    def test_failure_in_middle_keeps_that_stage_output(self, sample_input, cat_node):
        stages = [
            cat_node,
            CommandNode(command="grep", arg="no-such-line"),
            CommandNode(command="wc", base_args=("-l",)),
        ]
        result = PipelineRunner().run(stages, sample_input)

        assert result.failed_index == 1
        assert result.output == "\nexit status 1"

    def test_rerun_is_idempotent(self, sample_input, cat_node, grep_node):
        runner = PipelineRunner()
        first = runner.run([cat_node, grep_node], sample_input)
        second = runner.run([cat_node, grep_node], sample_input)
        assert first.output == second.output

    def test_cancelled_before_start_returns_none(self, sample_input, cat_node):
        token = CancelToken()
        token.cancel()
        assert PipelineRunner().run([cat_node], sample_input, token) is None

    def test_cancel_mid_run_returns_none_and_skips_later_stages(self, tmp_path):
        marker = tmp_path / "marker"
        stages = [
            CommandNode(command="sleep", arg="10"),
            CommandNode(command="touch", arg=str(marker)),
        ]
        token = CancelToken()
        results = []
        worker = threading.Thread(
            target=lambda: results.append(PipelineRunner().run(stages, "", token))
        )
        worker.start()
        time.sleep(0.2)
        token.cancel()
        worker.join(timeout=3)

        assert not worker.is_alive()
        assert results == [None]
        assert not marker.exists()
