#!/usr/bin/env python3
"""
git-commit-m - メインエントリーポイント

作業ツリーの変更をステージし、AI CLIツールでコミットメッセージを生成してコミットする。

使用方法:
    git-commit-m                     # git add . → 生成 → コミット
    git-commit-m -n                  # ステージングを省略
    git-commit-m --provider claude   # 別のAI CLIツールを使用
    git-commit-m --diff changes.diff # ファイルの差分からメッセージのみ生成
    git-commit-m --no-commit         # ドライラン
"""

import sys
import argparse
import logging
import tempfile
from pathlib import Path
from typing import List, Optional

import colorlog

from git_commit_m import __version__, CommitMError
from git_commit_m.config_manager import ConfigManager, ConfigError
from git_commit_m.console import Console
from git_commit_m.pipeline import CommitPipeline, PipelineAbort

LOG_FILE_NAME = 'git-commit-m.log'


def setup_logging(verbose: bool = False) -> None:
    """
    ロギング設定を初期化

    ログは常に一時ディレクトリのファイルへ出力し、
    verbose指定時は標準エラーにも色付きで出力する。

    Args:
        verbose: 詳細ログを有効にする場合True
    """
    level = logging.DEBUG if verbose else logging.INFO
    log_file = Path(tempfile.gettempdir()) / LOG_FILE_NAME
    handlers: List[logging.Handler] = [logging.FileHandler(str(log_file), encoding='utf-8')]
    handlers[0].setFormatter(logging.Formatter('%(asctime)s - %(name)s - %(levelname)s - %(message)s'))
    if verbose:
        stream_handler = colorlog.StreamHandler(sys.stderr)
        stream_handler.setFormatter(colorlog.ColoredFormatter(
            '%(log_color)s%(levelname)-8s%(reset)s %(name)s: %(message)s'
        ))
        handlers.append(stream_handler)
    logging.basicConfig(level=level, handlers=handlers)


def parse_arguments(argv: Optional[List[str]] = None) -> argparse.Namespace:
    """
    コマンドライン引数を解析

    Args:
        argv: 引数リスト（Noneの場合はsys.argv）

    Returns:
        解析された引数
    """
    parser = argparse.ArgumentParser(
        prog='git-commit-m',
        description='CLI tool that automatically generates commit messages using AI and commits changes',
        formatter_class=argparse.RawDescriptionHelpFormatter,
    )

    parser.add_argument(
        '-n', '--no-add-dot',
        dest='no_add_dot',
        action='store_true',
        help='skip the "git add ." step'
    )

    parser.add_argument(
        '-p', '--prompt-arg',
        dest='prompt_arg',
        metavar='ARG',
        default=None,
        help='prompt argument to pass to the AI tool (default: -p); use --prompt-arg=--print for values starting with a dash'
    )

    parser.add_argument(
        '--provider',
        default=None,
        help='AI provider to use: gemini, qwen, claude, codex, continue, or any command (default: gemini)'
    )

    parser.add_argument(
        '--diff',
        metavar='FILE',
        default=None,
        help='diff file to use instead of generating one from git (no commit is made)'
    )

    parser.add_argument(
        '--no-commit',
        dest='no_commit',
        action='store_true',
        help='dry run mode - generate commit message without committing'
    )

    parser.add_argument(
        '--no-signature',
        dest='no_signature',
        action='store_true',
        help='disable adding signature to commit message'
    )

    parser.add_argument(
        '--config', '-c',
        default=None,
        help='YAML configuration file (default: ~/.config/git-commit-m/config.yml if present)'
    )

    parser.add_argument(
        '--timeout',
        type=float,
        default=None,
        help='seconds to wait for the AI provider (default: no timeout)'
    )

    parser.add_argument(
        '--verbose', '-v',
        action='store_true',
        help='print debug logs to stderr'
    )

    parser.add_argument(
        '--version',
        action='version',
        version=f'%(prog)s {__version__}'
    )

    return parser.parse_args(argv)


def main(argv: Optional[List[str]] = None, pipeline: Optional[CommitPipeline] = None) -> int:
    """
    メイン処理

    Args:
        argv: コマンドライン引数
        pipeline: 使用するパイプライン（テスト用）

    Returns:
        終了コード (0: 成功, 1: エラー, 130: 中断)
    """
    args = parse_arguments(argv)
    setup_logging(args.verbose)
    logger = logging.getLogger(__name__)
    console = pipeline.console if pipeline is not None else Console()

    try:
        config_manager = ConfigManager()
        config_manager.load_config(args.config)
        options = config_manager.build_options(
            skip_staging=args.no_add_dot,
            prompt_arg=args.prompt_arg,
            provider=args.provider,
            diff_file=args.diff,
            skip_commit=args.no_commit,
            skip_signature=args.no_signature,
            timeout=args.timeout,
        )

        if pipeline is None:
            pipeline = CommitPipeline(console=console)
        pipeline.run(options)
        return 0

    except PipelineAbort as e:
        logger.info("コミットせずに終了: %s", e)
        return e.exit_code

    except ConfigError as e:
        logger.error("設定エラー: %s", e)
        console.error(f"Configuration error: {e}")
        return 1

    except CommitMError as e:
        logger.exception("処理に失敗")
        console.error(f"Error: {e}")
        return 1

    except KeyboardInterrupt:
        console.error("Interrupted.")
        return 130

    except Exception as e:
        logger.exception("予期しないエラー")
        console.error(f"Error: {e}")
        return 1


if __name__ == "__main__":
    sys.exit(main())
