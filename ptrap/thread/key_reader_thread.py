import codecs
import os
import select
import termios
from typing import List, Optional

from PyQt5.QtCore import QThread, pyqtSignal

from ptrap.core.utils.logger import setup_logger

logger = setup_logger("key_reader_thread")

# 控制字符 -> 按键名
_CONTROL_KEYS = {
    "\x03": "ctrl+c",
    "\x04": "ctrl+d",
    "\x15": "ctrl+u",
    "\x19": "ctrl+y",
    "\x1d": "ctrl+]",
    "\r": "enter",
    "\n": "enter",
    "\x7f": "backspace",
    "\x08": "backspace",
    "\t": "tab",
}

# CSI 序列 -> 按键名
_CSI_KEYS = {
    "A": "up",
    "B": "down",
    "C": "right",
    "D": "left",
    "5~": "pageup",
    "6~": "pagedown",
}


def decode_keys(text: str) -> List[str]:
    """
    把一次读取到的终端输入拆分为按键名

    可打印字符原样返回；单独的 ESC 视为 "esc"（即 Ctrl+[）；
    无法识别的转义序列和控制字符被丢弃。
    """
    keys: List[str] = []
    i = 0
    while i < len(text):
        ch = text[i]
        if ch == "\x1b":
            if i + 1 < len(text) and text[i + 1] in "[O":
                # 读到 CSI/SS3 序列的终止字节为止
                j = i + 2
                while j < len(text) and not ("\x40" <= text[j] <= "\x7e"):
                    j += 1
                name = _CSI_KEYS.get(text[i + 2 : j + 1])
                if name:
                    keys.append(name)
                i = j + 1
                continue
            keys.append("esc")
            i += 1
            continue
        if ch in _CONTROL_KEYS:
            keys.append(_CONTROL_KEYS[ch])
        elif ch.isprintable():
            keys.append(ch)
        i += 1
    return keys


class KeyReaderThread(QThread):
    """从控制终端读取按键，逐个通过 key_pressed 发出"""

    key_pressed = pyqtSignal(str)
    error = pyqtSignal(str)

    def __init__(self, tty_path: str = "/dev/tty", poll_interval: float = 0.1):
        super().__init__()
        self.tty_path = tty_path
        self.poll_interval = poll_interval

    def run(self):
        try:
            fd = os.open(self.tty_path, os.O_RDONLY)
        except OSError as e:
            logger.exception(f"无法打开终端 {self.tty_path}: {e}")
            self.error.emit(str(e))
            return

        old_attrs: Optional[list] = None
        try:
            old_attrs = _enter_key_mode(fd)
            decoder = codecs.getincrementaldecoder("utf-8")(errors="replace")
            while not self.isInterruptionRequested():
                ready, _, _ = select.select([fd], [], [], self.poll_interval)
                if not ready:
                    continue
                data = os.read(fd, 1024)
                if not data:
                    break
                for key in decode_keys(decoder.decode(data)):
                    self.key_pressed.emit(key)
        except (OSError, termios.error) as e:
            logger.exception(f"读取终端输入失败: {e}")
            self.error.emit(str(e))
        finally:
            if old_attrs is not None:
                termios.tcsetattr(fd, termios.TCSADRAIN, old_attrs)
            os.close(fd)


def _enter_key_mode(fd: int) -> list:
    """关闭行缓冲、回显与信号键，返回原有终端属性"""
    old = termios.tcgetattr(fd)
    new = termios.tcgetattr(fd)
    new[0] &= ~(termios.IXON | termios.ICRNL)
    new[3] &= ~(termios.ICANON | termios.ECHO | termios.ISIG | termios.IEXTEN)
    new[6][termios.VMIN] = 1
    new[6][termios.VTIME] = 0
    termios.tcsetattr(fd, termios.TCSADRAIN, new)
    return old
