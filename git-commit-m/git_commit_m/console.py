"""
コンソール出力

ユーザー向けのメッセージをcolorlogのエスケープコードで色付けして出力する。
出力先がTTYでない場合やNO_COLORが設定されている場合は色を付けない。
"""

import os
import sys
from typing import Optional, TextIO

from colorlog.escape_codes import escape_codes, parse_colors


def _supports_color(stream: TextIO) -> bool:
    if os.environ.get('NO_COLOR'):
        return False
    isatty = getattr(stream, 'isatty', None)
    return bool(isatty and isatty())


class Console:
    """色付きのユーザー向け出力"""

    def __init__(self, out: Optional[TextIO] = None, err: Optional[TextIO] = None,
                 color: Optional[bool] = None):
        """
        Args:
            out: 通常出力の出力先（デフォルトはsys.stdout）
            err: エラー出力の出力先（デフォルトはsys.stderr）
            color: 色付けの有無（Noneの場合は出力先から自動判定）
        """
        self.out = out if out is not None else sys.stdout
        self.err = err if err is not None else sys.stderr
        self.color = _supports_color(self.out) if color is None else color

    def style(self, text: str, colors: str) -> str:
        """colorlog形式の色指定（例: "bold_blue"）で文字列を装飾"""
        if not self.color:
            return text
        return f"{parse_colors(colors)}{text}{escape_codes['reset']}"

    def _write(self, stream: TextIO, text: str) -> None:
        print(text, file=stream, flush=True)

    def step(self, text: str) -> None:
        self._write(self.out, self.style(text, 'bold_blue'))

    def success(self, text: str) -> None:
        self._write(self.out, self.style(text, 'bold_green'))

    def warning(self, text: str) -> None:
        self._write(self.out, self.style(text, 'bold_yellow'))

    def error(self, text: str, detail: bool = False) -> None:
        self._write(self.err, self.style(text, 'red' if detail else 'bold_red'))

    def dim(self, text: str) -> None:
        self._write(self.err, self.style(text, 'light_black'))

    def labeled(self, label: str, text: str) -> None:
        self._write(self.out, f"{self.style(label, 'bold_green')} {self.style(text, 'green')}")
