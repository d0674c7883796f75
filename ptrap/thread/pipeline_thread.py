from typing import Optional, Sequence

from PyQt5.QtCore import QThread, pyqtSignal

from ptrap.core.utils.logger import setup_logger
from ptrap.pipeline.executor import CancelToken
from ptrap.pipeline.node import CommandNode
from ptrap.pipeline.runner import PipelineRunner

logger = setup_logger("pipeline_thread")


class PipelineThread(QThread):
    """在后台执行一次管线，结果连同取消令牌一起发回主线程"""

    completed = pyqtSignal(object, str)  # 取消令牌, 输出
    error = pyqtSignal(object, str)  # 取消令牌, 错误描述

    def __init__(
        self,
        stages: Sequence[CommandNode],
        input_data: str,
        cancel_token: CancelToken,
        runner: Optional[PipelineRunner] = None,
    ):
        super().__init__()
        self.stages = tuple(stages)
        self.input_data = input_data
        self.cancel_token = cancel_token
        self.runner = runner or PipelineRunner()
        logger.debug(f"初始化 PipelineThread，阶段数: {len(self.stages)}")

    def run(self):
        try:
            result = self.runner.run(self.stages, self.input_data, self.cancel_token)
            if result is None:
                logger.debug("管线执行已取消，不发送结果")
                return
            self.completed.emit(self.cancel_token, result.output)
        except Exception as e:
            logger.exception(f"管线执行异常: {e}")
            self.error.emit(self.cancel_token, str(e))
