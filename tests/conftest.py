"""
pytest設定ファイルと共通フィクスチャ

テスト実行時の設定とテスト間で共有するフィクスチャを定義。
"""

import io
import sys
import pytest
from pathlib import Path
from typing import Callable, Dict, List, Optional, Tuple

# パッケージディレクトリをPythonパスに追加
project_root = Path(__file__).parent.parent
sys.path.insert(0, str(project_root / 'git-commit-m'))

from git_commit_m.command_runner import CommandRunner, CommandResult, CommandError  # noqa: E402
from git_commit_m.console import Console  # noqa: E402

# テスト用のサンプルデータ
SAMPLE_GIT_DIFF = """diff --git a/test.py b/test.py
new file mode 100644
index 0000000..ed708ec
--- /dev/null
+++ b/test.py
@@ -0,0 +1,5 @@
+def hello_world():
+    print("Hello, World!")
+    return True
+
+# Test comment
"""


class FakeCommandRunner(CommandRunner):
    """
    外部コマンドを実行せずに呼び出しを記録するCommandRunner

    `on()` でコマンドの先頭引数ごとに応答を登録する。
    未登録のコマンドは空出力で成功する。
    """

    def __init__(self):
        self.calls: List[Tuple[str, ...]] = []
        self.timeouts: List[Optional[float]] = []
        self._handlers: Dict[Tuple[str, ...], dict] = {}

    def on(self, *prefix: str, stdout: str = "", stderr: str = "", returncode: int = 0,
           error: Optional[Exception] = None,
           callback: Optional[Callable[[Tuple[str, ...]], str]] = None) -> None:
        self._handlers[tuple(prefix)] = {
            'stdout': stdout, 'stderr': stderr, 'returncode': returncode,
            'error': error, 'callback': callback,
        }

    def run(self, args, cwd=None, timeout=None) -> CommandResult:
        args = tuple(str(arg) for arg in args)
        self.calls.append(args)
        self.timeouts.append(timeout)

        handler = None
        for prefix in sorted(self._handlers, key=len, reverse=True):
            if args[:len(prefix)] == prefix:
                handler = self._handlers[prefix]
                break
        if handler is None:
            return CommandResult(args=args, returncode=0)

        if handler['error'] is not None:
            raise handler['error']
        stdout = handler['callback'](args) if handler['callback'] else handler['stdout']
        result = CommandResult(args=args, returncode=handler['returncode'],
                               stdout=stdout, stderr=handler['stderr'])
        if result.returncode != 0:
            raise CommandError(f"{args[0]} failed with exit code {result.returncode}", result)
        return result

    def called(self, *prefix: str) -> bool:
        return any(call[:len(prefix)] == prefix for call in self.calls)

    def calls_to(self, *prefix: str) -> List[Tuple[str, ...]]:
        return [call for call in self.calls if call[:len(prefix)] == prefix]


@pytest.fixture
def sample_git_diff():
    """サンプルGit差分データ"""
    return SAMPLE_GIT_DIFF


@pytest.fixture
def fake_runner():
    """呼び出しを記録する偽のCommandRunner"""
    return FakeCommandRunner()


@pytest.fixture
def console():
    """出力をメモリに記録する色なしConsole"""
    return Console(out=io.StringIO(), err=io.StringIO(), color=False)


@pytest.fixture(autouse=True)
def clean_environment(monkeypatch, tmp_path):
    """ユーザーの設定ファイルと環境変数の影響を受けないようにする"""
    for var in ('GIT_COMMIT_M_PROVIDER', 'GIT_COMMIT_M_PROMPT_ARG', 'GIT_COMMIT_M_TIMEOUT', 'NO_COLOR'):
        monkeypatch.delenv(var, raising=False)
    monkeypatch.setattr('git_commit_m.config_manager.DEFAULT_CONFIG_PATH',
                        tmp_path / 'no-such-config.yml')


# pytest設定
def pytest_configure(config):
    """カスタムマーカーを登録"""
    config.addinivalue_line(
        "markers", "integration: mark test as integration test"
    )
