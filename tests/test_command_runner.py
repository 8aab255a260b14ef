"""
SubprocessCommandRunnerのユニットテスト
"""

import subprocess
import sys
import pytest
from unittest.mock import Mock, patch

from git_commit_m.command_runner import (
    SubprocessCommandRunner, CommandResult, CommandError,
    CommandNotFoundError, CommandNotExecutableError, CommandTimeoutError, format_command,
)


def completed(returncode=0, stdout="", stderr=""):
    mock_result = Mock()
    mock_result.returncode = returncode
    mock_result.stdout = stdout
    mock_result.stderr = stderr
    return mock_result


class TestSubprocessCommandRunner:
    """SubprocessCommandRunnerのテストクラス"""

    def setup_method(self):
        self.runner = SubprocessCommandRunner()

    @patch('subprocess.run')
    def test_run_success(self, mock_run, tmp_path):
        """成功時は出力を返す"""
        mock_run.return_value = completed(stdout="ok\n")

        result = self.runner.run(['git', 'status'], cwd=tmp_path, timeout=5)

        assert result == CommandResult(args=('git', 'status'), returncode=0, stdout="ok\n", stderr="")
        assert result.succeeded
        call_kwargs = mock_run.call_args[1]
        assert mock_run.call_args[0][0] == ('git', 'status')
        assert call_kwargs['shell'] is False
        assert call_kwargs['capture_output'] is True
        assert call_kwargs['timeout'] == 5
        assert call_kwargs['cwd'] == str(tmp_path)

    @patch('subprocess.run')
    def test_run_nonzero_exit_raises(self, mock_run):
        """終了コードが0以外ならCommandError"""
        mock_run.return_value = completed(returncode=1, stderr="fatal: not a git repository")

        with pytest.raises(CommandError, match="not a git repository") as exc_info:
            self.runner.run(['git', 'diff', '--cached'])

        assert exc_info.value.returncode == 1
        assert exc_info.value.stderr == "fatal: not a git repository"

    @patch('subprocess.run', side_effect=FileNotFoundError("No such file or directory: 'gemini'"))
    def test_run_missing_executable(self, mock_run):
        """実行ファイルがない場合はCommandNotFoundError（終了コード127扱い）"""
        with pytest.raises(CommandNotFoundError) as exc_info:
            self.runner.run(['gemini', '-p', '@prompt.txt'])

        assert exc_info.value.returncode == 127
        assert isinstance(exc_info.value, CommandError)

    @pytest.mark.parametrize("error", [
        PermissionError(13, "Permission denied", "./provider.sh"),
        IsADirectoryError(21, "Is a directory", "./providers"),
    ])
    def test_run_unexecutable_command(self, error):
        """実行できないファイルはCommandNotExecutableError（終了コード126扱い）"""
        with patch('subprocess.run', side_effect=error):
            with pytest.raises(CommandNotExecutableError) as exc_info:
                self.runner.run(['./provider.sh', '-p', '@prompt.txt'])

        assert exc_info.value.returncode == 126
        assert exc_info.value.stderr == str(error)
        assert isinstance(exc_info.value, CommandError)

    @pytest.mark.skipif(sys.platform == 'win32', reason="POSIX permissions only")
    def test_run_real_file_without_exec_bit(self, tmp_path):
        script = tmp_path / 'provider.sh'
        script.write_text("#!/bin/sh\necho hi\n", encoding='utf-8')
        script.chmod(0o644)

        with pytest.raises(CommandNotExecutableError) as exc_info:
            self.runner.run([str(script), '-p', '@prompt.txt'])

        assert exc_info.value.returncode == 126

    @patch('subprocess.run', side_effect=subprocess.TimeoutExpired(cmd='gemini', timeout=3, output=b"partial"))
    def test_run_timeout(self, mock_run):
        """タイムアウト時はCommandTimeoutError"""
        with pytest.raises(CommandTimeoutError) as exc_info:
            self.runner.run(['gemini', '-p', '@prompt.txt'], timeout=3)

        assert exc_info.value.returncode == -1
        assert exc_info.value.stdout == "partial"

    def test_run_empty_command(self):
        """空のコマンドは拒否"""
        with pytest.raises(ValueError):
            self.runner.run([])


def test_format_command_quotes_arguments():
    """ログ表示用のコマンドは引数ごとに引用される"""
    assert format_command(['git', 'commit', '-m', 'He said "hi"']) == "git commit -m 'He said \"hi\"'"


def test_command_error_without_result():
    error = CommandError("boom")
    assert error.returncode is None
    assert error.stdout == ""
    assert error.stderr == ""
