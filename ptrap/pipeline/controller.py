"""管线控制器 - 持有管线状态并处理事件"""

from __future__ import annotations

from typing import Optional, Set

from PyQt5.QtCore import QObject, pyqtSignal, pyqtSlot

from ptrap.config import DEBOUNCE_MS
from ptrap.core.utils.logger import setup_logger
from ptrap.pipeline.context import PipelineState
from ptrap.pipeline.events import (
    AddStage,
    ChangeFocus,
    Edit,
    PipelineEvent,
    RemoveStage,
    RerunRequested,
    RunCompleted,
)
from ptrap.pipeline.executor import CancelToken
from ptrap.pipeline.node import CommandNode, format_pipeline, parse_command_line
from ptrap.pipeline.runner import PipelineRunner
from ptrap.pipeline.scheduler import DebounceScheduler
from ptrap.thread.pipeline_thread import PipelineThread

logger = setup_logger("controller")


class PipelineController(QObject):
    """
    事件驱动的管线状态机

    所有状态修改都发生在主线程的事件处理中：
    - 参数编辑经去抖调度后才重新执行
    - 增删阶段绕过去抖立即执行
    - 启动新的执行前总是先取消仍在进行的执行
    """

    output_changed = pyqtSignal(str)
    state_changed = pyqtSignal()
    run_started = pyqtSignal(int)  # 累计启动次数

    def __init__(
        self,
        input_data: str = "",
        initial_node: Optional[CommandNode] = None,
        debounce_ms: int = DEBOUNCE_MS,
        runner: Optional[PipelineRunner] = None,
        parent: Optional[QObject] = None,
    ):
        super().__init__(parent)
        self.state = PipelineState(input_data=input_data)
        if initial_node is not None:
            self.state.stages.append(initial_node)
        else:
            self.state.awaiting_command = True

        self.runner = runner or PipelineRunner()
        self.scheduler = DebounceScheduler(debounce_ms, parent=self)
        self.scheduler.rerun_requested.connect(self._on_rerun_requested)

        self.runs_started = 0
        self._threads: Set[PipelineThread] = set()

    # ------------------------------------------------------------------
    # 生命周期
    # ------------------------------------------------------------------

    def start(self) -> None:
        """初始执行（有初始命令时）"""
        if self.state.stages:
            self._run_pipeline()

    def shutdown(self, timeout_ms: int = 2000) -> None:
        """取消当前执行与未到期的重新执行请求，并等待所有后台线程退出"""
        self.scheduler.cancel_pending()
        self._cancel_active()
        for thread in list(self._threads):
            if not thread.wait(timeout_ms):
                logger.warning("管线线程未能在超时内退出")

    # ------------------------------------------------------------------
    # 事件分发
    # ------------------------------------------------------------------

    def dispatch(self, event: PipelineEvent) -> bool:
        """
        处理一个事件

        Args:
            event: 事件对象

        Returns:
            事件是否被接受（被拒绝或无变化时为 False）
        """
        if isinstance(event, Edit):
            return self._handle_edit(event)
        if isinstance(event, AddStage):
            return self._handle_add_stage(event)
        if isinstance(event, RemoveStage):
            return self._handle_remove_stage(event)
        if isinstance(event, ChangeFocus):
            return self._handle_change_focus(event)
        if isinstance(event, RunCompleted):
            return self._handle_run_completed(event)
        if isinstance(event, RerunRequested):
            return self._handle_rerun_requested(event)
        raise TypeError(f"未知事件类型: {type(event).__name__}")

    def edit(self, stage_index: int, new_arg: str) -> bool:
        return self.dispatch(Edit(stage_index, new_arg))

    def add_stage(self, raw_line: str) -> bool:
        return self.dispatch(AddStage(raw_line))

    def remove_stage(self, index: Optional[int] = None) -> bool:
        return self.dispatch(RemoveStage(index))

    def change_focus(self, delta: int) -> bool:
        return self.dispatch(ChangeFocus(delta))

    # ------------------------------------------------------------------
    # 对外导出
    # ------------------------------------------------------------------

    def pipeline_string(self) -> str:
        return format_pipeline(self.state.stages)

    def current_output(self) -> str:
        return self.state.last_output

    # ------------------------------------------------------------------
    # 状态转移
    # ------------------------------------------------------------------

    def _handle_edit(self, event: Edit) -> bool:
        if not 0 <= event.stage_index < len(self.state.stages):
            logger.warning(f"忽略对不存在阶段的编辑: {event.stage_index}")
            return False

        node = self.state.stages[event.stage_index]
        if node.arg == event.new_arg:
            return False

        node.arg = event.new_arg
        tag = self.scheduler.on_edit(self.state)
        logger.debug(f"阶段 {event.stage_index} 参数更新为 {event.new_arg!r}, tag={tag}")
        self.state_changed.emit()
        return True

    def _handle_add_stage(self, event: AddStage) -> bool:
        node = parse_command_line(event.raw_line)
        if node is None:
            logger.debug("空命令，忽略添加")
            return False

        self.state.stages.append(node)
        self.state.focus_index = len(self.state.stages) - 1
        self.state.awaiting_command = False
        logger.info(f"添加阶段: {node.display()}")
        self.state_changed.emit()
        self._run_pipeline()
        return True

    def _handle_remove_stage(self, event: RemoveStage) -> bool:
        stages = self.state.stages
        if not stages:
            return False

        index = self.state.focus_index if event.index is None else event.index
        if not 0 <= index < len(stages):
            logger.warning(f"忽略删除不存在的阶段: {index}")
            return False

        removed = stages.pop(index)
        logger.info(f"删除阶段: {removed.display()}")

        if not stages:
            # 没有剩余阶段：进入等待输入状态并清空输出
            self._cancel_active()
            self.state.focus_index = 0
            self.state.awaiting_command = True
            self.state.last_output = ""
            self.output_changed.emit("")
            self.state_changed.emit()
            return True

        if index < self.state.focus_index:
            self.state.focus_index -= 1
        self.state.clamp_focus()
        self.state_changed.emit()
        self._run_pipeline()
        return True

    def _handle_change_focus(self, event: ChangeFocus) -> bool:
        if not self.state.stages:
            return False

        old = self.state.focus_index
        self.state.focus_index = old + event.delta
        self.state.clamp_focus()
        if self.state.focus_index == old:
            return False

        self.state_changed.emit()
        return True

    def _handle_run_completed(self, event: RunCompleted) -> bool:
        self.state.last_output = event.output
        self.output_changed.emit(event.output)
        return True

    def _handle_rerun_requested(self, event: RerunRequested) -> bool:
        if event.tag != self.state.sequence:
            return False
        if not self.state.stages:
            return False
        self._run_pipeline()
        return True

    # ------------------------------------------------------------------
    # 执行
    # ------------------------------------------------------------------

    def _cancel_active(self) -> None:
        if self.state.active_token is not None:
            self.state.active_token.cancel()
            self.state.active_token = None

    def _run_pipeline(self) -> None:
        self._cancel_active()
        token = CancelToken()
        self.state.active_token = token

        stages, input_data = self.state.snapshot()
        thread = PipelineThread(stages, input_data, token, self.runner)
        thread.completed.connect(self._on_thread_completed)
        thread.error.connect(self._on_thread_error)
        thread.finished.connect(self._on_thread_finished)
        self._threads.add(thread)
        thread.start()

        self.runs_started += 1
        logger.debug(f"启动第 {self.runs_started} 次执行: {format_pipeline(list(stages))}")
        self.run_started.emit(self.runs_started)

    def _is_current(self, token: CancelToken) -> bool:
        return token is self.state.active_token and not token.cancelled

    @pyqtSlot(int)
    def _on_rerun_requested(self, tag: int) -> None:
        self.dispatch(RerunRequested(tag))

    @pyqtSlot(object, str)
    def _on_thread_completed(self, token: CancelToken, output: str) -> None:
        if not self._is_current(token):
            logger.debug("丢弃已被取代的执行结果")
            return
        self.dispatch(RunCompleted(output))

    @pyqtSlot(object, str)
    def _on_thread_error(self, token: CancelToken, message: str) -> None:
        if not self._is_current(token):
            return
        self.dispatch(RunCompleted("\n" + message))

    @pyqtSlot()
    def _on_thread_finished(self) -> None:
        thread = self.sender()
        if isinstance(thread, PipelineThread):
            self._threads.discard(thread)
            thread.deleteLater()
