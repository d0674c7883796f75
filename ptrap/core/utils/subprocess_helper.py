"""子进程工具模块"""

import subprocess

from ..utils.logger import setup_logger

logger = setup_logger("subprocess_helper")


def run_shell_command(cmd: str, shell: str = "sh", **popen_kwargs) -> str:
    """
    通过 shell 执行命令并返回其 stdout

    Args:
        cmd: 命令字符串
        shell: 使用的 shell
        **popen_kwargs: 传递给 subprocess.run 的额外参数

    Returns:
        命令的标准输出文本

    Raises:
        subprocess.CalledProcessError: 命令以非零状态退出
        OSError: shell 无法启动
    """
    default_kwargs = {
        "stdout": subprocess.PIPE,
        "text": True,
        "encoding": "utf-8",
        "errors": "replace",
        "check": True,
    }
    default_kwargs.update(popen_kwargs)

    logger.info(f"执行输入命令: {cmd}")
    result = subprocess.run([shell, "-c", cmd], **default_kwargs)
    return result.stdout
