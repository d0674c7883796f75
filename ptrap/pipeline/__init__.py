"""管线执行引擎"""

from ptrap.pipeline.context import PipelineState
from ptrap.pipeline.executor import CancelToken, ExecResult, ProcessExecutor
from ptrap.pipeline.node import CommandNode, format_pipeline, parse_command_line
from ptrap.pipeline.runner import PipelineRunner, PipelineRunResult, StageTrace
from ptrap.pipeline.scheduler import DebounceScheduler

__all__ = [
    "PipelineState",
    "CancelToken",
    "ExecResult",
    "ProcessExecutor",
    "CommandNode",
    "format_pipeline",
    "parse_command_line",
    "PipelineRunner",
    "PipelineRunResult",
    "StageTrace",
    "DebounceScheduler",
]
