"""终端交互层：按键分发、添加命令弹窗、剪贴板导出与重绘"""

from __future__ import annotations

from typing import Callable, Optional

from PyQt5.QtCore import QCoreApplication, QObject, QTimer, pyqtSlot
from rich.console import Console
from rich.live import Live

from ptrap.core.utils.clipboard import copy_text
from ptrap.core.utils.logger import setup_logger
from ptrap.pipeline.controller import PipelineController
from ptrap.thread.key_reader_thread import KeyReaderThread
from ptrap.tui.view import ViewModel, ViewStyle, footer_height, max_scroll, render_screen

logger = setup_logger("tui")


class TerminalApp(QObject):
    """把按键翻译为控制器事件，并在状态变化时重绘屏幕"""

    def __init__(
        self,
        controller: PipelineController,
        console: Optional[Console] = None,
        style: Optional[ViewStyle] = None,
        copy: Callable[[str], bool] = copy_text,
        key_reader: Optional[KeyReaderThread] = None,
        parent: Optional[QObject] = None,
    ):
        super().__init__(parent)
        self.controller = controller
        self.console = console or Console()
        self.style = style or ViewStyle()
        self.copy = copy
        self.key_reader = key_reader
        self.view = ViewModel(modal_open=controller.state.awaiting_command)

        self._live: Optional[Live] = None
        self._last_size = None
        self._resize_timer = QTimer(self)
        self._resize_timer.setInterval(200)
        self._resize_timer.timeout.connect(self._check_resize)

        controller.output_changed.connect(self._on_output_changed)
        controller.state_changed.connect(self._on_state_changed)

    # ------------------------------------------------------------------
    # 生命周期
    # ------------------------------------------------------------------

    def start(self) -> None:
        self._live = Live(
            console=self.console,
            screen=True,
            auto_refresh=False,
            transient=True,
        )
        self._live.start()
        self._last_size = self.console.size
        self._resize_timer.start()

        if self.key_reader is not None:
            self.key_reader.key_pressed.connect(self.handle_key)
            self.key_reader.error.connect(self._on_key_reader_error)
            self.key_reader.start()

        self.controller.start()
        self.render()

    def quit(self) -> None:
        logger.info("用户退出")
        self.controller.shutdown()
        self._resize_timer.stop()
        if self.key_reader is not None:
            self.key_reader.requestInterruption()
            self.key_reader.wait(1000)
        if self._live is not None:
            self._live.stop()
            self._live = None
        app = QCoreApplication.instance()
        if app is not None:
            app.quit()

    # ------------------------------------------------------------------
    # 按键分发
    # ------------------------------------------------------------------

    @pyqtSlot(str)
    def handle_key(self, key: str) -> None:
        if key == "ctrl+c":
            self.quit()
            return

        self.view.status = ""
        if self.view.modal_open:
            self._handle_modal_key(key)
        else:
            self._handle_pipeline_key(key)
        self.render()

    def _handle_modal_key(self, key: str) -> None:
        if key == "enter":
            entry = self.view.modal_text.strip()
            if not entry:
                # 没有任何阶段时保持弹窗打开
                if self.controller.state.stages:
                    self.view.modal_open = False
                return
            if self.controller.add_stage(entry):
                self.view.modal_open = False
                self.view.modal_text = ""
        elif key == "esc":
            self.view.modal_open = False
        elif key == "backspace":
            self.view.modal_text = self.view.modal_text[:-1]
        elif key == "ctrl+u":
            self.view.modal_text = ""
        elif len(key) == 1:
            self.view.modal_text += key

    def _handle_pipeline_key(self, key: str) -> None:
        state = self.controller.state
        if key == "|":
            self.open_modal()
        elif key == "enter":
            self._copy(self.controller.current_output(), "output")
        elif key == "ctrl+y":
            self._copy(self.controller.pipeline_string(), "pipeline")
        elif key == "ctrl+d":
            self.controller.remove_stage()
            if state.awaiting_command:
                self.open_modal()
        elif key == "esc":
            self.controller.change_focus(-1)
        elif key == "ctrl+]":
            self.controller.change_focus(1)
        elif key in ("pageup", "pagedown", "up", "down"):
            self._scroll(key)
        elif state.stages:
            node = state.stages[state.focus_index]
            if key == "backspace":
                self.controller.edit(state.focus_index, node.arg[:-1])
            elif key == "ctrl+u":
                self.controller.edit(state.focus_index, "")
            elif len(key) == 1:
                self.controller.edit(state.focus_index, node.arg + key)

    def open_modal(self) -> None:
        self.view.modal_open = True
        self.view.modal_text = ""

    def _copy(self, text: str, what: str) -> None:
        if self.copy(text):
            self.view.status = f"Copied {what}"
        else:
            self.view.status = "Clipboard unavailable"

    def _scroll(self, key: str) -> None:
        page = max(self.console.size.height - footer_height(self.view), 1)
        step = {"pageup": -page, "pagedown": page, "up": -1, "down": 1}[key]
        limit = max_scroll(self.controller.current_output(), page)
        self.view.scroll = max(0, min(self.view.scroll + step, limit))

    # ------------------------------------------------------------------
    # 重绘
    # ------------------------------------------------------------------

    def render(self) -> None:
        if self._live is None:
            return
        width, height = self.console.size
        self._live.update(
            render_screen(self.controller.state, self.view, width, height, self.style),
            refresh=True,
        )

    @pyqtSlot(str)
    def _on_output_changed(self, output: str) -> None:
        self.view.scroll = 0
        self.render()

    @pyqtSlot()
    def _on_state_changed(self) -> None:
        if self.controller.state.awaiting_command:
            self.view.modal_open = True
        self.render()

    @pyqtSlot(str)
    def _on_key_reader_error(self, message: str) -> None:
        logger.error(f"按键读取线程退出: {message}")
        self.quit()

    @pyqtSlot()
    def _check_resize(self) -> None:
        size = self.console.size
        if size != self._last_size:
            self._last_size = size
            self.render()
