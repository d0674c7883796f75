"""Thread module test fixtures and utilities."""

from PyQt5.QtCore import QEventLoop, QTimer


def run_thread_with_timeout(thread, timeout_ms: int = 5000) -> dict:
    """Run a PipelineThread with timeout and collect results.

    Args:
        thread: PipelineThread instance to run
        timeout_ms: Timeout in milliseconds (default 5s)

    Returns:
        dict with keys: 'finished', 'error', 'output', 'token'
    """
    result = {"finished": False, "error": None, "output": None, "token": None}
    loop = QEventLoop()

    def on_completed(token, output):
        result["token"] = token
        result["output"] = output

    def on_error(token, error_msg):
        result["token"] = token
        result["error"] = error_msg

    def on_finished():
        result["finished"] = True
        loop.quit()

    def on_timeout():
        result["error"] = "Thread execution timed out"
        thread.cancel_token.cancel()
        loop.quit()

    thread.completed.connect(on_completed)
    thread.error.connect(on_error)
    thread.finished.connect(on_finished)

    timer = QTimer()
    timer.timeout.connect(on_timeout)
    timer.setSingleShot(True)
    timer.start(timeout_ms)

    thread.start()
    loop.exec_()
    timer.stop()
    thread.wait(2000)

    return result
