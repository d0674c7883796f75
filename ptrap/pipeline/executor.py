"""单个外部命令的执行器"""

from __future__ import annotations

import os
import signal
import subprocess
import threading
from contextlib import contextmanager
from dataclasses import dataclass
from typing import Callable, Iterator, List, Optional

from ptrap.core.utils.logger import setup_logger

logger = setup_logger("executor")


class CancelToken:
    """
    协作式取消令牌

    执行器在子进程存活期间通过 bind() 注册终止回调，
    cancel() 会立即调用这些回调强制结束进程，而不只是丢弃后台任务。
    """

    def __init__(self) -> None:
        self._ev = threading.Event()
        self._lock = threading.Lock()
        self._callbacks: List[Callable[[], None]] = []

    def cancel(self) -> None:
        with self._lock:
            if self._ev.is_set():
                return
            self._ev.set()
            callbacks = list(self._callbacks)
        for callback in callbacks:
            try:
                callback()
            except OSError as e:
                # 进程可能恰好已经退出
                logger.debug(f"取消回调失败: {e}")

    @property
    def cancelled(self) -> bool:
        return self._ev.is_set()

    @contextmanager
    def bind(self, callback: Callable[[], None]) -> Iterator[None]:
        """在 with 块内注册取消回调；若已取消则立即调用"""
        with self._lock:
            already = self._ev.is_set()
            if not already:
                self._callbacks.append(callback)
        if already:
            callback()
        try:
            yield
        finally:
            with self._lock:
                if callback in self._callbacks:
                    self._callbacks.remove(callback)


@dataclass(frozen=True)
class ExecResult:
    """一次命令执行的结果"""

    output: str
    ok: bool
    cancelled: bool = False
    error: Optional[str] = None


class ProcessExecutor:
    """启动外部命令、写入输入、收集合并后的 stdout/stderr"""

    def __init__(self, encoding: str = "utf-8"):
        self.encoding = encoding

    def execute(
        self,
        command: str,
        args: List[str],
        input_data: str,
        cancel_token: Optional[CancelToken] = None,
    ) -> ExecResult:
        """
        执行命令

        Args:
            command: 命令名
            args: 参数列表
            input_data: 写入 stdin 的文本
            cancel_token: 取消令牌

        Returns:
            ExecResult；失败时 output 为已捕获输出 + 换行 + 错误描述
        """
        token = cancel_token or CancelToken()
        if token.cancelled:
            return ExecResult(output="", ok=False, cancelled=True)

        try:
            process = subprocess.Popen(
                [command, *args],
                stdin=subprocess.PIPE,
                stdout=subprocess.PIPE,
                stderr=subprocess.STDOUT,
                start_new_session=True,
            )
        except OSError as e:
            error = _describe_spawn_error(command, e)
            logger.debug(f"无法启动 {command}: {error}")
            return ExecResult(output="\n" + error, ok=False, error=error)

        with token.bind(lambda: _kill_process_group(process)):
            raw, _ = process.communicate(input_data.encode(self.encoding))

        if token.cancelled:
            logger.debug(f"{command} 已被取消 (pid={process.pid})")
            return ExecResult(output="", ok=False, cancelled=True)

        output = raw.decode(self.encoding, errors="replace")
        if process.returncode != 0:
            error = _describe_exit(process.returncode)
            return ExecResult(output=output + "\n" + error, ok=False, error=error)
        return ExecResult(output=output, ok=True)


def _describe_spawn_error(command: str, e: OSError) -> str:
    if isinstance(e, FileNotFoundError):
        return f'exec: "{command}": executable file not found in $PATH'
    if isinstance(e, PermissionError):
        return f'exec: "{command}": permission denied'
    return f'exec: "{command}": {e.strerror or e}'


def _describe_exit(returncode: int) -> str:
    if returncode < 0:
        return f"signal: {-returncode}"
    return f"exit status {returncode}"


def _kill_process_group(process: subprocess.Popen) -> None:
    """结束命令及其派生的子进程，避免孙进程继续占用输出管道"""
    if process.returncode is not None:
        return
    try:
        os.killpg(process.pid, signal.SIGKILL)
    except ProcessLookupError:
        pass
