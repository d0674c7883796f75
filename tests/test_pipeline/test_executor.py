"""ProcessExecutor 与 CancelToken 测试"""

import threading
import time

from ptrap.pipeline.executor import CancelToken, ProcessExecutor


class TestProcessExecutor:
    """单命令执行测试"""

    def test_cat_passes_input_through(self, sample_input):
        result = ProcessExecutor().execute("cat", [], sample_input)
        assert result.ok
        assert result.output == sample_input

    def test_stderr_merged_into_output(self):
        result = ProcessExecutor().execute("sh", ["-c", "echo out; echo err >&2"], "")
        assert result.ok
        assert "out\n" in result.output
        assert "err\n" in result.output

    def test_missing_binary_reports_not_found(self):
        result = ProcessExecutor().execute("nonexistent-binary", [], "")
        assert not result.ok
        assert not result.cancelled
        assert result.output.startswith("\n")
        assert "not found" in result.output

    def test_nonzero_exit_keeps_partial_output(self):
        """失败时保留已捕获的输出，并追加错误描述"""
        result = ProcessExecutor().execute("sh", ["-c", "echo partial; exit 3"], "")
        assert not result.ok
        assert result.output == "partial\n\nexit status 3"
        assert result.error == "exit status 3"

    def test_already_cancelled_token_skips_spawn(self):
        token = CancelToken()
        token.cancel()
        result = ProcessExecutor().execute("cat", [], "x", token)
        assert result.cancelled
        assert result.output == ""

    def test_cancel_terminates_running_process(self):
        """取消会强制结束子进程（包括 shell 派生的子进程）"""
        token = CancelToken()
        results = []

        def target():
            results.append(
                ProcessExecutor().execute("sh", ["-c", "sleep 10; echo late"], "", token)
            )

        worker = threading.Thread(target=target)
        start = time.monotonic()
        worker.start()
        time.sleep(0.2)
        token.cancel()
        worker.join(timeout=3)

        assert not worker.is_alive()
        assert time.monotonic() - start < 3
        assert results[0].cancelled
        assert "late" not in results[0].output


class TestCancelToken:
    """CancelToken 测试"""

    def test_bind_calls_callback_on_cancel(self):
        token = CancelToken()
        calls = []
        with token.bind(lambda: calls.append("kill")):
            token.cancel()
        assert calls == ["kill"]
        assert token.cancelled

    def test_bind_after_cancel_calls_immediately(self):
        token = CancelToken()
        token.cancel()
        calls = []
        with token.bind(lambda: calls.append("kill")):
            pass
        assert calls == ["kill"]

    def test_callback_unregistered_after_block(self):
        token = CancelToken()
        calls = []
        with token.bind(lambda: calls.append("kill")):
            pass
        token.cancel()
        assert calls == []

    def test_cancel_is_idempotent(self):
        token = CancelToken()
        calls = []
        with token.bind(lambda: calls.append("kill")):
            token.cancel()
            token.cancel()
        assert calls == ["kill"]
