import subprocess
import sys

import pytest

from adminlib import shell


def test_run_sequence_captures_output():
    result = shell.run([sys.executable, "-c", "print('hello from child')"])
    assert result.ok
    assert result.stdout.strip() == "hello from child"


def test_run_logged_failure_is_logged(caplog):
    result = shell.run_logged([sys.executable, "-c", "import sys; sys.stderr.write('bad'); sys.exit(3)"])
    assert not result.ok
    assert result.returncode == 3
    assert "rc=3" in caplog.text
    assert "STDERR: bad" in caplog.text


def test_run_check_raises():
    with pytest.raises(subprocess.CalledProcessError):
        shell.run([sys.executable, "-c", "raise SystemExit(1)"], check=True)


def test_run_logged_missing_executable():
    result = shell.run_logged(["adminkit-definitely-not-a-command"])
    assert result.returncode == 127
    assert not result.ok
