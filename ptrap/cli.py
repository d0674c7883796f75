"""命令行入口：解析参数、读取输入并启动交互界面"""

from __future__ import annotations

import argparse
import subprocess
import sys
from typing import IO, List, Optional

from PyQt5.QtCore import QCoreApplication, QTimer
from PyQt5.QtGui import QGuiApplication
from rich.console import Console

from ptrap.config import APP_NAME, VERSION
from ptrap.core.utils.clipboard import has_display
from ptrap.core.utils.logger import configure_logging, setup_logger
from ptrap.core.utils.subprocess_helper import run_shell_command
from ptrap.pipeline.controller import PipelineController
from ptrap.pipeline.node import CommandNode
from ptrap.settings import get_settings
from ptrap.thread.key_reader_thread import KeyReaderThread
from ptrap.tui.app import TerminalApp

logger = setup_logger("cli")

DESCRIPTION = """\
ptrap - interactively run pipelines over piped stdin or a command's stdout

ptrap lets you build an interactive pipeline (e.g., jq | rg) and see live output.
Provide input via: (1) stdin (e.g., curl ... | ptrap jq), or (2) --run to execute
a command and use its stdout as input.
"""

EPILOG = """\
examples:
  curl <API-endpoint> | ptrap jq
  cat <file> | ptrap rg --color=always
  ptrap -r "cat file.json" jq

keyboard shortcuts:
  Enter copy output, Ctrl+Y copy pipeline, | add command, Ctrl+D delete command,
  Ctrl+[ / Ctrl+] previous / next command, PgUp / PgDn scroll, Ctrl+C quit
"""


class InputIngestionError(Exception):
    """初始输入读取失败"""

    pass


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog=APP_NAME,
        description=DESCRIPTION,
        epilog=EPILOG,
        formatter_class=argparse.RawDescriptionHelpFormatter,
    )
    parser.add_argument(
        "-r",
        "--run",
        metavar="COMMAND",
        help="execute COMMAND with the shell and use its stdout as input",
    )
    parser.add_argument("--version", action="version", version=f"%(prog)s {VERSION}")
    parser.add_argument(
        "pipeline",
        nargs=argparse.REMAINDER,
        help="initial command and its fixed arguments",
    )
    return parser


def read_input(run_cmd: Optional[str], shell: str, stdin: IO) -> Optional[str]:
    """
    读取管线的原始输入

    Args:
        run_cmd: --run 指定的命令；为空时从 stdin 读取
        shell: 执行 --run 的 shell
        stdin: 标准输入

    Returns:
        去除首尾空白后的输入；stdin 是终端且未指定 --run 时返回 None

    Raises:
        InputIngestionError: 命令执行失败或无法读取 stdin
    """
    if run_cmd:
        try:
            data = run_shell_command(run_cmd, shell=shell)
        except (subprocess.CalledProcessError, OSError) as e:
            raise InputIngestionError(f"Error executing --run command: {e}") from e
        return data.strip()

    if stdin.isatty():
        return None

    try:
        raw = stdin.buffer.read() if hasattr(stdin, "buffer") else stdin.read()
    except OSError as e:
        raise InputIngestionError(f"Error getting input: {e}") from e
    if isinstance(raw, bytes):
        raw = raw.decode("utf-8", errors="replace")
    return raw.strip()


def initial_node(pipeline: List[str]) -> Optional[CommandNode]:
    if not pipeline or not pipeline[0].strip():
        return None
    return CommandNode(command=pipeline[0], base_args=tuple(pipeline[1:]))


def _open_tty_console() -> Console:
    # stdout 可能被重定向，界面直接输出到控制终端
    try:
        tty_out = open("/dev/tty", "w", encoding="utf-8")
    except OSError:
        return Console()
    return Console(file=tty_out)


def main(argv: Optional[List[str]] = None) -> int:
    parser = build_parser()
    args = parser.parse_args(argv)

    settings = get_settings()
    log_file = configure_logging(settings.log_dir, settings.log_level)
    logger.info(f"{APP_NAME} {VERSION} 启动, 日志文件: {log_file}")

    try:
        input_data = read_input(args.run, settings.shell, sys.stdin)
    except InputIngestionError as e:
        logger.error(str(e))
        print(e)
        return 1

    if input_data is None:
        parser.print_help()
        return 0

    if has_display():
        app = QGuiApplication(sys.argv[:1])
    else:
        app = QCoreApplication(sys.argv[:1])

    controller = PipelineController(
        input_data=input_data,
        initial_node=initial_node(args.pipeline),
        debounce_ms=settings.debounce_ms,
    )
    tui = TerminalApp(
        controller,
        console=_open_tty_console(),
        key_reader=KeyReaderThread(),
    )
    QTimer.singleShot(0, tui.start)

    rc = app.exec_()
    logger.info(f"{APP_NAME} 退出, code={rc}")
    return rc
