"""管线阶段节点"""

from __future__ import annotations

import shlex
from dataclasses import dataclass, field, replace
from typing import List, Optional, Tuple


@dataclass
class CommandNode:
    """管线中的一个阶段：固定的命令与基础参数，加上用户正在编辑的尾参数"""

    command: str
    base_args: Tuple[str, ...] = field(default_factory=tuple)
    arg: str = ""

    def __post_init__(self) -> None:
        if not self.command or not self.command.strip():
            raise ValueError("命令不能为空")
        self.base_args = tuple(self.base_args)

    def effective_args(self) -> List[str]:
        """基础参数 + 去除首尾空白后的尾参数（为空时不追加）"""
        args = list(self.base_args)
        arg = self.arg.strip()
        if arg:
            args.append(arg)
        return args

    def display(self) -> str:
        """渲染为可直接粘贴到 shell 的片段"""
        return shlex.join([self.command, *self.effective_args()])

    def snapshot(self) -> "CommandNode":
        """复制一份供后台执行使用，之后的编辑不会影响它"""
        return replace(self)

    def __repr__(self) -> str:
        return (
            f"{self.__class__.__name__}(command={self.command!r}, "
            f"base_args={list(self.base_args)!r}, arg={self.arg!r})"
        )


def parse_command_line(line: str) -> Optional[CommandNode]:
    """
    按空白切分命令行：第一个 token 为命令，其余为基础参数

    Args:
        line: 用户输入的原始命令行

    Returns:
        新建的节点；命令为空时返回 None
    """
    tokens = line.split()
    if not tokens:
        return None
    return CommandNode(command=tokens[0], base_args=tuple(tokens[1:]))


def format_pipeline(nodes: List[CommandNode]) -> str:
    """把整条管线渲染为 `cmd1 arg1 | cmd2 arg2` 形式"""
    return " | ".join(node.display() for node in nodes)
