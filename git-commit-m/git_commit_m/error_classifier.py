"""
AI CLIエラー分類器

失敗したAI CLIツールの出力を分析し、エラーの種類と
ユーザー向けの対処方法を判定する。
"""

import re
import logging
from enum import Enum
from dataclasses import dataclass

logger = logging.getLogger(__name__)


class ErrorType(Enum):
    """エラータイプの定義"""
    NOT_INSTALLED = "not_installed"
    NOT_EXECUTABLE = "not_executable"
    QUOTA_EXCEEDED = "quota_exceeded"
    AUTHENTICATION_ERROR = "authentication_error"
    NETWORK_ERROR = "network_error"
    TIMEOUT_ERROR = "timeout_error"
    EMPTY_RESPONSE = "empty_response"
    UNKNOWN_ERROR = "unknown_error"


@dataclass
class ErrorAnalysisResult:
    """エラー分析結果"""
    error_type: ErrorType
    message: str
    suggested_action: str


class ProviderErrorClassifier:
    """AI CLIエラー分類器"""

    # 判定順に評価する（クォータは認証より先）
    ERROR_PATTERNS = {
        ErrorType.QUOTA_EXCEEDED: [
            r"429.*Too Many Requests",
            r"quota.*exceeded",
            r"rate.?limit",
            r"RESOURCE_EXHAUSTED",
        ],
        ErrorType.AUTHENTICATION_ERROR: [
            r"401.*Unauthorized",
            r"403.*Forbidden",
            r"authentication.*failed",
            r"invalid.*api.*key",
            r"not.*authenticated",
            r"credential",
            r"\blog ?in\b",
        ],
        ErrorType.NETWORK_ERROR: [
            r"network.*error",
            r"connection.*(failed|refused|reset)",
            r"ENOTFOUND",
            r"ECONNREFUSED",
            r"getaddrinfo",
            r"dns.*resolution.*failed",
        ],
        ErrorType.TIMEOUT_ERROR: [
            r"timed?.?out",
            r"ETIMEDOUT",
        ],
    }

    MESSAGES = {
        ErrorType.NOT_INSTALLED: (
            "The AI provider command was not found",
            "Install the provider CLI or pass --provider with the right executable name",
        ),
        ErrorType.NOT_EXECUTABLE: (
            "The AI provider command exists but cannot be executed",
            "Check that the provider path points to an executable file with execute permission",
        ),
        ErrorType.QUOTA_EXCEEDED: (
            "The AI provider rejected the request because of a quota or rate limit",
            "Wait a while or switch to another provider with --provider",
        ),
        ErrorType.AUTHENTICATION_ERROR: (
            "The AI provider could not authenticate",
            "Check your API keys or log in to the provider CLI",
        ),
        ErrorType.NETWORK_ERROR: (
            "The AI provider could not reach its service",
            "Check your network connectivity",
        ),
        ErrorType.TIMEOUT_ERROR: (
            "The AI provider did not answer in time",
            "Retry later or raise --timeout",
        ),
        ErrorType.EMPTY_RESPONSE: (
            "The AI provider returned no text",
            "Check that the provider accepts the prompt argument (--prompt-arg)",
        ),
        ErrorType.UNKNOWN_ERROR: (
            "The AI provider failed",
            "Run the provider on its own to see what went wrong",
        ),
    }

    def classify(self, stdout: str = "", stderr: str = "", return_code: int = 0) -> ErrorAnalysisResult:
        """
        エラーを分類する

        Args:
            stdout: 標準出力
            stderr: 標準エラー出力
            return_code: 終了コード（127はコマンド未検出、126は実行不可、-1はタイムアウト）

        Returns:
            ErrorAnalysisResult: 分析結果
        """
        if return_code == 127:
            return self._create_result(ErrorType.NOT_INSTALLED)
        if return_code == 126:
            return self._create_result(ErrorType.NOT_EXECUTABLE)
        if return_code == -1:
            return self._create_result(ErrorType.TIMEOUT_ERROR)
        if return_code == 0:
            return self._create_result(ErrorType.EMPTY_RESPONSE)

        combined_output = f"{stdout}\n{stderr}"
        for error_type, patterns in self.ERROR_PATTERNS.items():
            for pattern in patterns:
                if re.search(pattern, combined_output, re.IGNORECASE):
                    logger.debug("エラーパターンに一致: %s (%s)", error_type.value, pattern)
                    return self._create_result(error_type)

        return self._create_result(ErrorType.UNKNOWN_ERROR)

    def _create_result(self, error_type: ErrorType) -> ErrorAnalysisResult:
        message, action = self.MESSAGES[error_type]
        return ErrorAnalysisResult(error_type=error_type, message=message, suggested_action=action)
