"""
git-commit-m

ステージ済みのGit差分を外部のAI CLIツールで要約してコミットメッセージを生成し、
そのままコミットまで行うコマンドラインツール。
"""

__version__ = "1.0.0"
__author__ = "git-commit-m contributors"
__description__ = "Generate commit messages with an AI CLI tool and commit staged changes"

# コミットメッセージ末尾に付与する署名
SIGNATURE = "Generated using git-commit-m"

# AIツールへ渡す指示文
DEFAULT_PROMPT = "Summarize this git diff into a clear commit message:"

# プロンプトを書き出す作業ファイル名（カレントディレクトリに作成）
SCRATCH_FILE_NAME = "git_diff.txt"


class CommitMError(Exception):
    """git-commit-m の全エラーの基底クラス"""
    pass
