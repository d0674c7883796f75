"""终端界面渲染"""

from __future__ import annotations

from dataclasses import dataclass
from typing import List

from rich import box
from rich.console import Group, RenderableType
from rich.panel import Panel
from rich.style import Style
from rich.text import Text

from ptrap.pipeline.context import PipelineState

KEY_HELP = (
    "[Ctrl+C] Quit  [Enter] Copy output  [Ctrl+Y] Copy pipeline  "
    "[|] Add  [Ctrl+[] Prev  [Ctrl+]] Next  [Ctrl+D] Del"
)
EMPTY_PROMPT = "(press | to add a command)"
MODAL_PROMPT = "New command: "
CURSOR = "▏"


@dataclass(frozen=True)
class ViewStyle:
    """界面配色，由调用方传入"""

    info: Style = Style(color="bright_black")
    focused: Style = Style(color="color(63)", bold=True)
    cursor: Style = Style(color="color(63)")
    status: Style = Style(color="green")


@dataclass
class ViewModel:
    """渲染一帧所需的界面状态（不含管线状态本身）"""

    modal_open: bool = False
    modal_text: str = ""
    scroll: int = 0
    status: str = ""


def output_lines(output: str) -> List[Text]:
    """把输出按行解析为带样式的 Text（保留 ANSI 颜色）"""
    if not output:
        return []
    return [Text.from_ansi(line, no_wrap=True, overflow="crop") for line in output.split("\n")]


def max_scroll(output: str, height: int) -> int:
    return max(0, len(output_lines(output)) - max(height, 1))


def render_prompt(state: PipelineState, style: ViewStyle) -> Text:
    """渲染底部的管线提示行，焦点阶段显示光标"""
    prompt = Text("Command: ")
    if not state.stages:
        prompt.append(EMPTY_PROMPT, style=style.info)
        return prompt

    for i, node in enumerate(state.stages):
        if i:
            prompt.append(" | ")
        base = " ".join([node.command, *node.base_args])
        if i == state.focus_index:
            prompt.append(base, style=style.focused)
            prompt.append(" " + node.arg)
            prompt.append(CURSOR, style=style.cursor)
        else:
            arg = node.arg.strip()
            prompt.append(f"{base} {arg}" if arg else base)
    return prompt


def render_footer(
    state: PipelineState, view: ViewModel, width: int, style: ViewStyle
) -> RenderableType:
    """渲染按键帮助、管线提示以及可选的添加命令弹窗"""
    info = f"{view.status}  " if view.status else ""
    help_line = Text(KEY_HELP, style=style.info, no_wrap=True, overflow="ellipsis")
    fill = width - len(KEY_HELP) - len(info) - 1
    if fill > 0:
        help_line.append(" " + "─" * fill, style=style.info)
    if info:
        help_line.append(" " + info.rstrip(), style=style.status)

    parts: List[RenderableType] = [help_line, render_prompt(state, style)]
    if view.modal_open:
        modal = Text(MODAL_PROMPT)
        modal.append(view.modal_text)
        modal.append(CURSOR, style=style.cursor)
        parts.append(Panel(modal, box=box.ROUNDED, padding=(0, 1), expand=False))
    return Group(*parts)


def footer_height(view: ViewModel) -> int:
    # 帮助行 + 提示行，弹窗占三行
    return 2 + (3 if view.modal_open else 0)


def render_screen(
    state: PipelineState, view: ViewModel, width: int, height: int, style: ViewStyle
) -> RenderableType:
    """渲染整屏：上方为输出区域，下方为固定的页脚"""
    body_height = max(height - footer_height(view), 0)
    lines = output_lines(state.last_output)
    visible = lines[view.scroll : view.scroll + body_height]

    body = Text(no_wrap=True, overflow="crop")
    for i in range(body_height):
        if i:
            body.append("\n")
        if i < len(visible):
            body.append_text(visible[i])

    return Group(body, render_footer(state, view, width, style))
