"""管线状态 - 由控制器独占持有"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import List, Optional, Tuple

from ptrap.pipeline.executor import CancelToken
from ptrap.pipeline.node import CommandNode


@dataclass
class PipelineState:
    """交互期间的全部管线状态，只在控制器处理事件时被修改"""

    # 原始输入（来自 stdin 或 --run）
    input_data: str = ""

    # 阶段列表，顺序即执行顺序
    stages: List[CommandNode] = field(default_factory=list)
    focus_index: int = 0

    # 去抖序号，每次参数变化都会递增
    sequence: int = 0

    # 当前运行的取消句柄，至多一个
    active_token: Optional[CancelToken] = None

    # 最近一次被采纳的输出
    last_output: str = ""

    # 所有阶段被删除后等待用户输入第一条命令
    awaiting_command: bool = False

    @property
    def focused(self) -> Optional[CommandNode]:
        if not self.stages:
            return None
        return self.stages[self.focus_index]

    def clamp_focus(self) -> None:
        """把焦点限制在 [0, len(stages)) 内"""
        if not self.stages:
            self.focus_index = 0
            return
        self.focus_index = max(0, min(self.focus_index, len(self.stages) - 1))

    def snapshot(self) -> Tuple[Tuple[CommandNode, ...], str]:
        """生成一次执行所需的不可变快照"""
        return tuple(node.snapshot() for node in self.stages), self.input_data
