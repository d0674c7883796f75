"""ptrap - 交互式构建命令管线并实时查看输出"""

from ptrap.config import VERSION

__version__ = VERSION
