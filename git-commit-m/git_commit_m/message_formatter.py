"""
メッセージフォーマッターモジュール

AI CLIツールが出力したコミットメッセージを整形し、署名を付与する。
"""

import logging

from git_commit_m import SIGNATURE

logger = logging.getLogger(__name__)


class MessageFormatter:
    """メッセージフォーマッタークラス"""

    def __init__(self, signature: str = SIGNATURE):
        """
        Args:
            signature: メッセージ末尾に付与する署名行
        """
        if not signature or not signature.strip():
            raise ValueError("signature must be a non-empty string")
        self.signature = signature.strip()

    def clean(self, raw_message: str) -> str:
        """
        生成されたメッセージの改行を正規化し前後の空白を除去する

        Args:
            raw_message: AI CLIツールの標準出力

        Returns:
            整形済みメッセージ（空の場合は空文字列）
        """
        if not raw_message:
            return ""
        return raw_message.replace('\r\n', '\n').replace('\r', '\n').strip()

    def append_signature(self, message: str) -> str:
        """メッセージ末尾に空行を挟んで署名を付与"""
        signed = f"{message}\n\n{self.signature}"
        logger.debug("署名を付与しました")
        return signed
