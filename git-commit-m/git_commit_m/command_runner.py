"""
外部コマンド実行インターフェース

gitやAI CLIツールの呼び出しを一箇所にまとめる抽象基底クラスと、
subprocessによる標準実装を定義する。テストでは偽の実装に差し替える。
"""

import os
import shlex
import subprocess
import logging
from abc import ABC, abstractmethod
from dataclasses import dataclass
from pathlib import Path
from typing import Optional, Sequence, Union

from git_commit_m import CommitMError

logger = logging.getLogger(__name__)
logger.addHandler(logging.NullHandler())

PathLike = Union[str, os.PathLike]


@dataclass(frozen=True)
class CommandResult:
    """外部コマンドの実行結果"""
    args: tuple
    returncode: int
    stdout: str = ""
    stderr: str = ""

    @property
    def succeeded(self) -> bool:
        return self.returncode == 0


class CommandError(CommitMError):
    """外部コマンドの実行に失敗した"""

    def __init__(self, message: str, result: Optional[CommandResult] = None):
        super().__init__(message)
        self.result = result

    @property
    def returncode(self) -> Optional[int]:
        return self.result.returncode if self.result else None

    @property
    def stdout(self) -> str:
        return self.result.stdout if self.result else ""

    @property
    def stderr(self) -> str:
        return self.result.stderr if self.result else ""


class CommandNotFoundError(CommandError):
    """実行ファイルが見つからない"""
    pass


class CommandNotExecutableError(CommandError):
    """実行ファイルは存在するが実行できない"""
    pass


class CommandTimeoutError(CommandError):
    """コマンドがタイムアウトした"""
    pass


def format_command(args: Sequence[str]) -> str:
    """ログ表示用にコマンドラインをシェル形式で整形"""
    return shlex.join(str(arg) for arg in args)


class CommandRunner(ABC):
    """外部コマンド実行の抽象基底クラス"""

    @abstractmethod
    def run(self, args: Sequence[str], cwd: Optional[PathLike] = None,
            timeout: Optional[float] = None) -> CommandResult:
        """
        コマンドを実行して出力を取得

        Args:
            args: 実行するコマンドと引数
            cwd: 作業ディレクトリ
            timeout: タイムアウト秒数（Noneの場合は無制限）

        Returns:
            成功したコマンドの実行結果

        Raises:
            CommandNotFoundError: 実行ファイルが見つからない
            CommandNotExecutableError: 実行ファイルを実行できない
            CommandTimeoutError: タイムアウト
            CommandError: 終了コードが0以外
        """
        pass


class SubprocessCommandRunner(CommandRunner):
    """subprocessでコマンドを実行する標準実装"""

    def run(self, args: Sequence[str], cwd: Optional[PathLike] = None,
            timeout: Optional[float] = None) -> CommandResult:
        args = tuple(str(arg) for arg in args)
        if not args:
            raise ValueError("実行するコマンドが空です")

        command_line = format_command(args)
        logger.debug("コマンド実行: %s (cwd=%s)", command_line, cwd)

        try:
            completed = subprocess.run(
                args,
                capture_output=True,
                text=True,
                encoding='utf-8',
                errors='replace',
                timeout=timeout,
                shell=False,
                cwd=str(Path(cwd)) if cwd is not None else None,
            )
        except FileNotFoundError as e:
            logger.error("コマンドが見つかりません: %s", args[0])
            result = CommandResult(args=args, returncode=127, stderr=str(e))
            raise CommandNotFoundError(f"command not found: {args[0]}", result) from e
        except OSError as e:
            # 実行権限がない、ディレクトリを指しているなど
            logger.error("コマンドを実行できません: %s (%s)", args[0], e)
            result = CommandResult(args=args, returncode=126, stderr=str(e))
            raise CommandNotExecutableError(f"command cannot be executed: {args[0]}: {e}", result) from e
        except subprocess.TimeoutExpired as e:
            logger.error("コマンドがタイムアウトしました（%s秒）: %s", timeout, command_line)
            result = CommandResult(args=args, returncode=-1, stdout=_as_text(e.stdout),
                                   stderr=_as_text(e.stderr))
            raise CommandTimeoutError(f"command timed out after {timeout}s: {command_line}", result) from e

        result = CommandResult(
            args=args,
            returncode=completed.returncode,
            stdout=completed.stdout or "",
            stderr=completed.stderr or "",
        )

        if not result.succeeded:
            error_msg = result.stderr.strip() or result.stdout.strip() or "unknown error"
            logger.debug("コマンドが失敗 (code: %d): %s", result.returncode, error_msg)
            raise CommandError(
                f"`{command_line}` failed with exit code {result.returncode}: {error_msg}",
                result,
            )

        return result


def _as_text(output) -> str:
    """TimeoutExpiredが保持する出力（bytesの場合あり）を文字列化"""
    if output is None:
        return ""
    if isinstance(output, bytes):
        return output.decode('utf-8', errors='replace')
    return output
