"""日志工具模块

所有模块通过 setup_logger(name) 获取 logger。终端由界面独占，
因此日志只写入轮转文件，不输出到控制台。
"""

import logging
from logging.handlers import RotatingFileHandler
from pathlib import Path
from typing import Optional

from ptrap.config import LOG_BACKUP_COUNT, LOG_FORMAT, LOG_MAX_BYTES

ROOT_LOGGER_NAME = "ptrap"

_file_handler: Optional[logging.Handler] = None


def configure_logging(log_dir: Path, level: int) -> Optional[Path]:
    """
    为 ptrap 根 logger 安装文件输出

    Args:
        log_dir: 日志目录
        level: 日志级别

    Returns:
        日志文件路径；目录不可写时返回 None
    """
    global _file_handler

    root = logging.getLogger(ROOT_LOGGER_NAME)
    root.setLevel(level)

    if _file_handler is not None:
        root.removeHandler(_file_handler)
        _file_handler.close()
        _file_handler = None

    log_file = Path(log_dir) / "ptrap.log"
    try:
        log_file.parent.mkdir(parents=True, exist_ok=True)
        handler = RotatingFileHandler(
            log_file,
            maxBytes=LOG_MAX_BYTES,
            backupCount=LOG_BACKUP_COUNT,
            encoding="utf-8",
        )
    except OSError:
        return None

    handler.setFormatter(logging.Formatter(LOG_FORMAT))
    root.addHandler(handler)
    _file_handler = handler
    return log_file


def setup_logger(name: str) -> logging.Logger:
    """获取 ptrap 命名空间下的 logger，写入由 configure_logging 统一配置"""
    logger = logging.getLogger(f"{ROOT_LOGGER_NAME}.{name}")
    if not logging.getLogger(ROOT_LOGGER_NAME).handlers:
        # 未配置文件输出前不向 stderr 打印 lastResort 警告
        logging.getLogger(ROOT_LOGGER_NAME).addHandler(logging.NullHandler())
    return logger
