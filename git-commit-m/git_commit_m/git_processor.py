"""
Git操作モジュール

作業ツリーのステージング、ステージ済み差分の取得、コミット作成を
CommandRunner経由で実行する。差分の簡易統計も提供する。
"""

import re
import logging
from dataclasses import dataclass, field
from pathlib import Path
from typing import List, Optional

from git_commit_m import CommitMError
from git_commit_m.command_runner import CommandRunner, CommandError, PathLike

logger = logging.getLogger(__name__)


@dataclass
class DiffStats:
    """Git差分の統計情報"""
    file_count: int = 0
    additions: int = 0
    deletions: int = 0
    files_changed: List[str] = field(default_factory=list)

    def summary(self) -> str:
        return f"{self.file_count} file(s), +{self.additions}/-{self.deletions}"


class GitError(CommitMError):
    """Git処理関連のエラー"""
    pass


class StagingError(GitError):
    """`git add .` に失敗した"""
    pass


class CommitError(GitError):
    """`git commit` に失敗した"""
    pass


class GitRepository:
    """
    Gitリポジトリ操作クラス

    カレントディレクトリ（cwd）のリポジトリに対してgitコマンドを実行する。
    ステージングとコミットの失敗は呼び出し元へ伝播し、
    差分取得の失敗は空文字列として扱う。
    """

    def __init__(self, runner: CommandRunner, cwd: Optional[PathLike] = None,
                 git_executable: str = 'git'):
        """
        Args:
            runner: コマンド実行に使うCommandRunner
            cwd: リポジトリの作業ディレクトリ（Noneの場合はプロセスのカレントディレクトリ）
            git_executable: gitコマンド名
        """
        self.runner = runner
        self.cwd = Path(cwd) if cwd is not None else None
        self.git = git_executable

    def stage_all(self) -> None:
        """
        作業ツリーの全変更をステージする

        Raises:
            StagingError: git add に失敗した場合
        """
        try:
            self.runner.run([self.git, 'add', '.'], cwd=self.cwd)
        except CommandError as e:
            logger.error("git add . に失敗: %s", e)
            raise StagingError(str(e)) from e
        logger.debug("作業ツリーの変更をステージしました")

    def read_staged_diff(self) -> str:
        """
        ステージ済み変更の差分を取得

        ステージ済みの変更がない場合やgitの実行に失敗した場合は空文字列を返す。

        Returns:
            `git diff --cached` の出力
        """
        try:
            result = self.runner.run([self.git, 'diff', '--cached'], cwd=self.cwd)
        except CommandError as e:
            logger.warning("git diff --cached に失敗したため空の差分として扱います: %s", e)
            return ""

        diff = result.stdout
        logger.debug("gitコマンド経由でGit差分を取得しました (%d文字)", len(diff))
        return diff

    def commit(self, message: str) -> str:
        """
        指定メッセージでコミットを作成

        メッセージはシェルを経由せず単一の引数として渡すため、
        引用符などの文字はそのまま記録される。

        Args:
            message: コミットメッセージ

        Returns:
            gitの出力

        Raises:
            CommitError: git commit に失敗した場合
        """
        try:
            result = self.runner.run([self.git, 'commit', '-m', message], cwd=self.cwd)
        except CommandError as e:
            logger.error("git commit に失敗: %s", e)
            raise CommitError(str(e)) from e
        logger.info("コミットを作成しました")
        return result.stdout


def parse_diff(diff: str) -> DiffStats:
    """
    差分内容を解析して統計情報を生成

    Args:
        diff: 差分内容

    Returns:
        解析されたDiffStats
    """
    stats = DiffStats()
    if not diff:
        return stats

    # diff --git a/file b/file
    for _old_file, new_file in re.findall(r'^diff --git a/(.+?) b/(.+?)$', diff, re.MULTILINE):
        if new_file != '/dev/null' and new_file not in stats.files_changed:
            stats.files_changed.append(new_file)

    for line in diff.splitlines():
        if line.startswith('+') and not line.startswith('+++'):
            stats.additions += 1
        elif line.startswith('-') and not line.startswith('---'):
            stats.deletions += 1

    # ヘッダーがない差分は ---/+++ 行から推測
    if not stats.files_changed:
        alt_old = re.findall(r'^--- a/(.+?)$', diff, re.MULTILINE)
        alt_new = re.findall(r'^\+\+\+ b/(.+?)$', diff, re.MULTILINE)
        stats.files_changed = sorted({p for p in alt_old + alt_new if p != '/dev/null'})

    stats.file_count = len(stats.files_changed)
    logger.debug("差分解析結果: %s %s", stats.summary(), stats.files_changed)
    return stats
