"""
コミットパイプライン

ステージング → 差分取得 → AIによるメッセージ生成 → コミット
の一連の処理を順番に実行する。

外部コマンド・作業ディレクトリ・出力先・時計はすべてコンストラクタで受け取り、
プロセスの終了は例外（PipelineAbort.exit_code）として呼び出し元へ伝える。
"""

import time
import logging
from pathlib import Path
from typing import Callable, Optional, Tuple

from git_commit_m import CommitMError
from git_commit_m.command_runner import CommandRunner, SubprocessCommandRunner, PathLike
from git_commit_m.config_manager import Options
from git_commit_m.console import Console
from git_commit_m.error_classifier import ProviderErrorClassifier, ErrorAnalysisResult
from git_commit_m.git_processor import GitRepository, parse_diff
from git_commit_m.message_formatter import MessageFormatter
from git_commit_m.message_generator import MessageGenerator, GenerationError

logger = logging.getLogger(__name__)


class DiffReadError(CommitMError):
    """--diff で指定された差分ファイルを読み込めない"""
    pass


class PipelineAbort(CommitMError):
    """コミットせずに終了する必要がある状態"""
    exit_code = 1


class NothingToCommitError(PipelineAbort):
    """差分が空"""
    pass


class MessageGenerationError(PipelineAbort):
    """コミットメッセージを生成できなかった"""
    pass


class CommitPipeline:
    """コミットメッセージ生成からコミットまでを実行するパイプライン"""

    def __init__(self, runner: Optional[CommandRunner] = None, cwd: Optional[PathLike] = None,
                 console: Optional[Console] = None,
                 clock: Callable[[], float] = time.perf_counter,
                 classifier: Optional[ProviderErrorClassifier] = None):
        """
        Args:
            runner: 外部コマンドの実行に使うCommandRunner
            cwd: 作業ディレクトリ（リポジトリと作業ファイルの場所）
            console: ユーザー向け出力
            clock: 経過時間の計測に使う時計
            classifier: 生成失敗時のエラー分類器
        """
        self.runner = runner or SubprocessCommandRunner()
        self.cwd = Path(cwd) if cwd is not None else Path.cwd()
        self.console = console or Console()
        self.clock = clock
        self.classifier = classifier or ProviderErrorClassifier()

    def run(self, options: Options) -> bool:
        """
        パイプラインを実行

        Args:
            options: 実行オプション

        Returns:
            成功した場合True

        Raises:
            StagingError: ステージングに失敗した場合
            DiffReadError: 差分ファイルを読み込めない場合
            NothingToCommitError: 差分が空の場合
            MessageGenerationError: メッセージを生成できなかった場合
            CommitError: コミットに失敗した場合
        """
        start = self.clock()
        repo = GitRepository(self.runner, cwd=self.cwd)

        if not options.skip_staging and not options.diff_file:
            self.console.step("Adding all changes to git...")
            repo.stage_all()

        diff = self._obtain_diff(repo, options)
        if not diff.strip():
            self.console.warning("No changes to commit.")
            raise NothingToCommitError("no changes to commit")

        stats = parse_diff(diff)
        logger.info("差分: %s", stats.summary())
        self.console.step(f"Changes: {stats.summary()}")

        formatter = MessageFormatter(options.signature)
        message, failure = self._generate(diff, options, formatter)
        if not message:
            if not options.fallback_message:
                self._report_generation_failure(failure)
                raise MessageGenerationError("failed to generate commit message")
            logger.warning("フォールバックメッセージを使用します: %s", options.fallback_message)
            self.console.warning(f"Falling back to default message: {options.fallback_message}")
            message = options.fallback_message

        if not options.skip_signature:
            message = formatter.append_signature(message)

        self.console.labeled("Commit message:", message)

        if options.skip_commit:
            self.console.step("Note: No commit was made (dry run mode).")
        elif options.diff_file:
            self.console.step("Note: No commit was made as a diff file was provided.")
        else:
            repo.commit(message)
            self.console.step("Changes committed successfully.")

        elapsed = self.clock() - start
        self.console.success(f"Successfully processed in {elapsed:.2f} seconds.")
        return True

    def _obtain_diff(self, repo: GitRepository, options: Options) -> str:
        if not options.diff_file:
            return repo.read_staged_diff()

        diff_path = Path(options.diff_file)
        if not diff_path.is_absolute():
            diff_path = self.cwd / diff_path
        self.console.step(f"Reading diff from file: {options.diff_file}...")
        try:
            return diff_path.read_text(encoding='utf-8', errors='replace')
        except OSError as e:
            logger.error("差分ファイルの読み込みに失敗: %s", e)
            raise DiffReadError(f"cannot read diff file {options.diff_file}: {e}") from e

    def _generate(self, diff: str, options: Options,
                  formatter: MessageFormatter) -> Tuple[str, Optional[ErrorAnalysisResult]]:
        """
        コミットメッセージを生成

        生成に失敗した場合は例外を送出せず、空文字列とエラー分類結果を返す。
        """
        generator = MessageGenerator(
            self.runner,
            provider=options.provider,
            prompt_flag=options.prompt_flag,
            cwd=self.cwd,
            prompt=options.prompt,
            timeout=options.timeout,
        )
        self.console.step(f"Generating commit message with {options.provider}...")
        try:
            raw = generator.generate(diff)
        except GenerationError as e:
            analysis = self.classifier.classify(e.stdout, e.stderr,
                                                e.returncode if e.returncode is not None else 1)
            logger.debug("エラー分類: %s", analysis.error_type.value)
            self.console.error(f"Failed to generate commit message with {options.provider}: {analysis.message}.")
            self.console.dim(f"Error details: {e}")
            return "", analysis
        return formatter.clean(raw), None

    def _report_generation_failure(self, failure: Optional[ErrorAnalysisResult]) -> None:
        if failure is not None:
            self.console.error(f"{failure.suggested_action}.", detail=True)
        for line in (
            "Please make sure:",
            "  - The AI provider (codex, gemini, etc.) is installed",
            "  - You have network connectivity",
            "  - Your API keys are properly configured or authentication is set up properly",
            '  - The AI provider is working correctly (test by typing e.g. "gemini" in the console)',
        ):
            self.console.error(line, detail=True)
        self.console.error("Exiting without committing changes.")
