"""去抖调度器"""

from __future__ import annotations

from typing import Optional

from PyQt5.QtCore import QObject, QTimer, pyqtSignal

from ptrap.config import DEBOUNCE_MS
from ptrap.core.utils.logger import setup_logger
from ptrap.pipeline.context import PipelineState

logger = setup_logger("scheduler")


class DebounceScheduler(QObject):
    """
    尾沿去抖

    每次参数变化递增全局序号，并在静默间隔后发出携带该序号的 rerun_requested。
    控制器只在序号仍等于当前值时执行，因此只有最后一次编辑会真正触发执行。
    """

    rerun_requested = pyqtSignal(int)

    def __init__(self, interval_ms: int = DEBOUNCE_MS, parent: Optional[QObject] = None):
        super().__init__(parent)
        self.interval_ms = interval_ms

    def on_edit(self, state: PipelineState) -> int:
        """递增序号并调度一次延迟的重新执行请求，返回本次的 tag"""
        state.sequence += 1
        tag = state.sequence

        # 定时器挂在调度器下，调度器销毁时未到期的请求随之失效
        timer = QTimer(self)
        timer.setSingleShot(True)
        timer.timeout.connect(lambda: self._fire(tag, timer))
        timer.start(self.interval_ms)
        return tag

    def cancel_pending(self) -> None:
        """丢弃所有尚未到期的请求"""
        for timer in self.findChildren(QTimer):
            timer.stop()
            timer.deleteLater()

    def _fire(self, tag: int, timer: QTimer) -> None:
        timer.deleteLater()
        logger.debug(f"去抖定时器到期: tag={tag}")
        self.rerun_requested.emit(tag)
