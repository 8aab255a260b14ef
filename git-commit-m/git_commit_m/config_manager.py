"""
設定管理モジュール

YAML設定ファイルと環境変数を読み込み、コマンドライン引数と合わせて
1回の実行で使う不変のOptionsを組み立てる。

優先順位: コマンドライン引数 > 環境変数 > 設定ファイル > デフォルト値
"""

import os
import shlex
import yaml
import logging
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Dict, Mapping, Optional

from git_commit_m import CommitMError, DEFAULT_PROMPT, SIGNATURE

logger = logging.getLogger(__name__)

DEFAULT_PROVIDER = 'gemini'
DEFAULT_PROMPT_ARG = '-p'
DEFAULT_CONFIG_PATH = Path('~/.config/git-commit-m/config.yml')

ENV_PROVIDER = 'GIT_COMMIT_M_PROVIDER'
ENV_PROMPT_ARG = 'GIT_COMMIT_M_PROMPT_ARG'
ENV_TIMEOUT = 'GIT_COMMIT_M_TIMEOUT'


@dataclass(frozen=True)
class Options:
    """1回の実行で使用するオプション"""
    skip_staging: bool = False
    prompt_flag: str = DEFAULT_PROMPT_ARG
    provider: str = DEFAULT_PROVIDER
    diff_file: Optional[str] = None
    skip_commit: bool = False
    skip_signature: bool = False
    timeout: Optional[float] = None
    signature: str = SIGNATURE
    prompt: str = DEFAULT_PROMPT
    fallback_message: Optional[str] = None


class ConfigError(CommitMError):
    """設定関連のエラー"""
    pass


class ConfigManager:
    """
    設定管理クラス

    YAML設定ファイルの読み込みと検証を行い、環境変数・コマンドライン引数と
    マージしてOptionsを生成する。
    """

    # キー名と許可される型
    KNOWN_KEYS = {
        'provider': (str,),
        'prompt_arg': (str,),
        'timeout': (int, float),
        'signature': (str,),
        'prompt': (str,),
        'fallback_message': (str,),
        'no_signature': (bool,),
    }

    def __init__(self, environ: Optional[Mapping[str, str]] = None):
        """
        Args:
            environ: 参照する環境変数（Noneの場合はos.environ）
        """
        self.config: Dict[str, Any] = {}
        self.environ = environ if environ is not None else os.environ

    def load_config(self, config_path: Optional[str] = None) -> Dict[str, Any]:
        """
        設定ファイルを読み込み

        パスを省略した場合はデフォルトの場所を探し、存在しなければ空の設定とする。

        Args:
            config_path: 設定ファイルのパス

        Returns:
            読み込まれた設定データ

        Raises:
            ConfigError: 指定されたファイルが存在しない、または解析・検証に失敗した場合
        """
        if config_path is None:
            config_file = DEFAULT_CONFIG_PATH.expanduser()
            if not config_file.exists():
                logger.debug("設定ファイルなし、デフォルト設定を使用: %s", config_file)
                self.config = {}
                return self.config
        else:
            config_file = Path(config_path).expanduser()
            if not config_file.exists():
                raise ConfigError(f"config file not found: {config_file}")

        try:
            with open(config_file, 'r', encoding='utf-8') as f:
                raw_config = yaml.safe_load(f)
        except yaml.YAMLError as e:
            raise ConfigError(f"invalid YAML in {config_file}: {e}") from e
        except OSError as e:
            raise ConfigError(f"cannot read config file {config_file}: {e}") from e

        # 空ファイルは {} とみなす
        if raw_config is None:
            raw_config = {}
        elif not isinstance(raw_config, dict):
            raise ConfigError(f"config root must be a mapping: {config_file}")

        self.config = raw_config
        self.validate_config()
        logger.info("設定ファイルを読み込みました: %s", config_file)
        return self.config

    def validate_config(self) -> bool:
        """
        読み込んだ設定を検証

        Raises:
            ConfigError: 値の型や範囲が不正な場合
        """
        for key, value in self.config.items():
            if key not in self.KNOWN_KEYS:
                logger.warning("未知の設定項目を無視します: %s", key)
                continue
            if value is None:
                continue
            allowed = self.KNOWN_KEYS[key]
            # bool は int のサブクラスなので timeout では除外
            if not isinstance(value, allowed) or (key == 'timeout' and isinstance(value, bool)):
                names = ' or '.join(t.__name__ for t in allowed)
                raise ConfigError(f"config '{key}' must be {names}, got {type(value).__name__}")

        if self.config.get('timeout') is not None:
            _validate_timeout(self.config['timeout'])
        if self.config.get('provider') is not None:
            _validate_provider(self.config['provider'])
        return True

    def get(self, key: str, default: Any = None) -> Any:
        value = self.config.get(key)
        return default if value is None else value

    def build_options(self, skip_staging: bool = False, prompt_arg: Optional[str] = None,
                      provider: Optional[str] = None, diff_file: Optional[str] = None,
                      skip_commit: bool = False, skip_signature: bool = False,
                      timeout: Optional[float] = None) -> Options:
        """
        コマンドライン引数・環境変数・設定ファイルからOptionsを生成

        Args:
            各引数はコマンドラインで指定された値（未指定はNone/False）

        Returns:
            不変のOptions

        Raises:
            ConfigError: 値が不正な場合
        """
        resolved_provider = provider or self.environ.get(ENV_PROVIDER) or self.get('provider', DEFAULT_PROVIDER)
        _validate_provider(resolved_provider)

        resolved_prompt_arg = prompt_arg
        if resolved_prompt_arg is None:
            resolved_prompt_arg = self.environ.get(ENV_PROMPT_ARG) or self.get('prompt_arg', DEFAULT_PROMPT_ARG)

        resolved_timeout = timeout
        if resolved_timeout is None:
            env_timeout = self.environ.get(ENV_TIMEOUT)
            if env_timeout:
                try:
                    resolved_timeout = float(env_timeout)
                except ValueError as e:
                    raise ConfigError(f"{ENV_TIMEOUT} must be a number: {env_timeout!r}") from e
            else:
                resolved_timeout = self.get('timeout')
        if resolved_timeout is not None:
            resolved_timeout = _validate_timeout(resolved_timeout)

        signature = self.get('signature', SIGNATURE).strip()
        if not signature:
            raise ConfigError("config 'signature' must not be empty")

        options = Options(
            skip_staging=skip_staging,
            prompt_flag=resolved_prompt_arg,
            provider=resolved_provider,
            diff_file=diff_file,
            skip_commit=skip_commit,
            skip_signature=skip_signature or bool(self.get('no_signature', False)),
            timeout=resolved_timeout,
            signature=signature,
            prompt=self.get('prompt', DEFAULT_PROMPT),
            fallback_message=self.get('fallback_message') or None,
        )
        logger.debug("オプションを解決しました: %s", options)
        return options


def _validate_timeout(value: Any) -> float:
    try:
        timeout = float(value)
    except (TypeError, ValueError) as e:
        raise ConfigError(f"timeout must be a number: {value!r}") from e
    if timeout <= 0:
        raise ConfigError(f"timeout must be positive: {value!r}")
    return timeout


def _validate_provider(value: str) -> None:
    try:
        args = shlex.split(value)
    except ValueError as e:
        raise ConfigError(f"invalid provider command {value!r}: {e}") from e
    if not args:
        raise ConfigError("provider must not be empty")
