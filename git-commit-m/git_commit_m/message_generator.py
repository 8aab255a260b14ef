"""
AI CLIメッセージ生成モジュール

プロンプトと差分を作業ファイルに書き出し、AI CLIツールに
`<provider> <prompt_flag> @<path>` 形式で渡してコミットメッセージを生成する。
"""

import shlex
import logging
from contextlib import contextmanager
from pathlib import Path
from typing import Iterator, List, Optional

from git_commit_m import CommitMError, DEFAULT_PROMPT, SCRATCH_FILE_NAME
from git_commit_m.command_runner import CommandRunner, CommandError, PathLike

logger = logging.getLogger(__name__)


class GenerationError(CommitMError):
    """
    コミットメッセージ生成エラー

    Attributes:
        stdout: AI CLIツールの標準出力
        stderr: AI CLIツールの標準エラー出力
        returncode: 終了コード（空レスポンスの場合は0）
    """

    def __init__(self, message: str, stdout: str = "", stderr: str = "",
                 returncode: Optional[int] = None):
        super().__init__(message)
        self.stdout = stdout
        self.stderr = stderr
        self.returncode = returncode


@contextmanager
def scratch_file(path: Path, content: str) -> Iterator[Path]:
    """
    作業ファイルを書き出し、ブロック終了時に必ず削除する

    削除に失敗しても例外は送出しない。
    """
    path.write_text(content, encoding='utf-8')
    logger.debug("作業ファイルを作成: %s", path)
    try:
        yield path
    finally:
        try:
            path.unlink()
            logger.debug("作業ファイルを削除: %s", path)
        except OSError as e:
            logger.debug("作業ファイルの削除に失敗（無視）: %s", e)


class MessageGenerator:
    """AI CLIツールでコミットメッセージを生成するクラス"""

    def __init__(self, runner: CommandRunner, provider: str = 'gemini', prompt_flag: str = '-p',
                 cwd: Optional[PathLike] = None, prompt: str = DEFAULT_PROMPT,
                 timeout: Optional[float] = None):
        """
        Args:
            runner: コマンド実行に使うCommandRunner
            provider: AI CLIツールの実行ファイル名（引数付きも可）
            prompt_flag: プロンプトを渡すための引数名
            cwd: 作業ファイルを作成するディレクトリ
            prompt: 差分の前に置く指示文
            timeout: AI CLIツールのタイムアウト秒数
        """
        provider_args = shlex.split(provider or "")
        if not provider_args:
            raise ValueError("provider must not be empty")
        self.runner = runner
        self.provider = provider.strip()
        self.provider_args = provider_args
        self.prompt_flag = prompt_flag
        self.cwd = Path(cwd) if cwd is not None else Path.cwd()
        self.prompt = prompt
        self.timeout = timeout

    @property
    def scratch_path(self) -> Path:
        return self.cwd / SCRATCH_FILE_NAME

    def build_prompt(self, diff: str) -> str:
        """指示文と差分を改行で連結"""
        return f"{self.prompt}\n{diff}"

    def build_command(self, prompt_path: Path) -> List[str]:
        """AI CLIツールの呼び出しコマンドを構築"""
        command = list(self.provider_args)
        if self.prompt_flag:
            command.append(self.prompt_flag)
        command.append(f"@{prompt_path}")
        return command

    def generate(self, diff: str) -> str:
        """
        差分からコミットメッセージを生成

        Args:
            diff: ステージ済み差分

        Returns:
            前後の空白を除去した生成メッセージ

        Raises:
            GenerationError: AI CLIツールの実行に失敗した、または空の出力だった場合
        """
        with scratch_file(self.scratch_path, self.build_prompt(diff)) as prompt_path:
            command = self.build_command(prompt_path)
            try:
                result = self.runner.run(command, cwd=self.cwd, timeout=self.timeout)
            except CommandError as e:
                logger.error("%s によるメッセージ生成に失敗: %s", self.provider, e)
                raise GenerationError(str(e), stdout=e.stdout, stderr=e.stderr,
                                      returncode=e.returncode) from e

        message = result.stdout.strip()
        if not message:
            logger.warning("%s から空のレスポンス", self.provider)
            raise GenerationError(f"{self.provider} returned an empty response",
                                  stdout=result.stdout, stderr=result.stderr,
                                  returncode=result.returncode)

        logger.info("コミットメッセージを生成しました (%d文字)", len(message))
        return message
