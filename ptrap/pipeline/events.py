"""控制器事件定义"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Optional, Union


@dataclass(frozen=True)
class Edit:
    """某个阶段的尾参数被修改"""

    stage_index: int
    new_arg: str


@dataclass(frozen=True)
class AddStage:
    """从添加命令弹窗提交的原始命令行"""

    raw_line: str


@dataclass(frozen=True)
class RemoveStage:
    """删除阶段，index 为 None 时删除当前焦点阶段"""

    index: Optional[int] = None


@dataclass(frozen=True)
class ChangeFocus:
    delta: int


@dataclass(frozen=True)
class RunCompleted:
    output: str


@dataclass(frozen=True)
class RerunRequested:
    """去抖定时器到期，tag 为调度时的序号"""

    tag: int


PipelineEvent = Union[Edit, AddStage, RemoveStage, ChangeFocus, RunCompleted, RerunRequested]
