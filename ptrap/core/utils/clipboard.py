"""剪贴板导出"""

import os
import sys

from PyQt5.QtCore import QCoreApplication
from PyQt5.QtGui import QGuiApplication

from .logger import setup_logger

logger = setup_logger("clipboard")


def has_display() -> bool:
    """当前环境是否可以创建 QGuiApplication"""
    if sys.platform in ("darwin", "win32"):
        return True
    return bool(os.environ.get("DISPLAY") or os.environ.get("WAYLAND_DISPLAY"))


def copy_text(text: str) -> bool:
    """
    写入系统剪贴板

    Args:
        text: 要复制的文本

    Returns:
        是否成功；没有图形环境时返回 False
    """
    app = QCoreApplication.instance()
    if not isinstance(app, QGuiApplication):
        logger.warning("没有可用的图形环境，无法访问剪贴板")
        return False

    QGuiApplication.clipboard().setText(text)
    logger.debug(f"已复制 {len(text)} 个字符到剪贴板")
    return True
