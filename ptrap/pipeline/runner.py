"""管线执行器 - 按顺序串联执行各阶段"""

from __future__ import annotations

import time
from dataclasses import dataclass, field
from typing import List, Optional, Sequence

from ptrap.core.utils.logger import setup_logger
from ptrap.pipeline.executor import CancelToken, ProcessExecutor
from ptrap.pipeline.node import CommandNode

logger = setup_logger("runner")


@dataclass(frozen=True)
class StageTrace:
    """单个阶段的执行追踪记录"""

    index: int
    command: str
    status: str  # 'completed' | 'failed'
    elapsed_ms: int
    error: Optional[str] = None


@dataclass
class PipelineRunResult:
    """一次完整执行的结果"""

    output: str
    trace: List[StageTrace] = field(default_factory=list)
    failed_index: Optional[int] = None

    @property
    def ok(self) -> bool:
        return self.failed_index is None


class PipelineRunner:
    """
    管线执行器

    依次执行各阶段，上一阶段的输出作为下一阶段的输入：
    - 遇到第一个失败的阶段即停止，结果为该阶段带错误描述的输出
    - 整次执行共享一个取消令牌，取消后不产生结果
    """

    def __init__(self, executor: Optional[ProcessExecutor] = None):
        self.executor = executor or ProcessExecutor()

    def run(
        self,
        stages: Sequence[CommandNode],
        input_data: str,
        cancel_token: Optional[CancelToken] = None,
    ) -> Optional[PipelineRunResult]:
        """
        执行管线

        Args:
            stages: 阶段快照
            input_data: 第一阶段的输入
            cancel_token: 取消令牌

        Returns:
            执行结果；被取消时返回 None
        """
        token = cancel_token or CancelToken()
        result = PipelineRunResult(output=input_data)

        for index, node in enumerate(stages):
            if token.cancelled:
                return None

            start_time = time.time()
            exec_result = self.executor.execute(
                node.command, node.effective_args(), result.output, token
            )
            elapsed_ms = int((time.time() - start_time) * 1000)

            if exec_result.cancelled or token.cancelled:
                logger.debug(f"阶段 {index} ({node.command}) 执行中被取消")
                return None

            result.output = exec_result.output
            if not exec_result.ok:
                result.trace.append(
                    StageTrace(
                        index=index,
                        command=node.command,
                        status="failed",
                        elapsed_ms=elapsed_ms,
                        error=exec_result.error,
                    )
                )
                result.failed_index = index
                logger.info(f"阶段 {index} ({node.command}) 失败: {exec_result.error}")
                break

            result.trace.append(
                StageTrace(
                    index=index,
                    command=node.command,
                    status="completed",
                    elapsed_ms=elapsed_ms,
                )
            )

        logger.debug(
            "管线执行完成: "
            + ", ".join(f"{t.command}={t.status}({t.elapsed_ms}ms)" for t in result.trace)
        )
        return result
