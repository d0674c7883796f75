import logging
import os
from pathlib import Path

VERSION = "v0.3.0"
APP_NAME = "ptrap"

HELP_URL = "https://github.com/ptrap-dev/ptrap"

# 核心路径
ROOT_PATH = Path(__file__).parent

APPDATA_PATH = Path(os.environ.get("XDG_STATE_HOME", Path.home() / ".local" / "state")) / APP_NAME
LOG_PATH = APPDATA_PATH / "logs"
LOG_FILE = LOG_PATH / "ptrap.log"

# 日志配置
LOG_LEVEL = logging.INFO
LOG_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"
LOG_MAX_BYTES = 1024 * 1024
LOG_BACKUP_COUNT = 3

# 管线重新执行的静默间隔（毫秒）
DEBOUNCE_MS = 150

# --run 使用的 shell
DEFAULT_SHELL = "sh"
