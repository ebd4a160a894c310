"""Property-based tests for feed script execution.

Covers path containment, interpreter selection and the failure modes of
running a script: nonzero exit, unreadable output and timeouts.
"""

import asyncio
import shutil
from pathlib import Path

import pytest
from hypothesis import HealthCheck, given, settings, strategies as st

from feedhub.errors import (
    FeedParseFailed,
    FeedHubError,
    InvalidPath,
    ScriptExecutionFailed,
    UnsupportedPlatform,
)
from feedhub.ingestion import ScriptRunner

from .conftest import rss_document

needs_bash = pytest.mark.skipif(shutil.which("bash") is None, reason="bash not available")


def write_script(directory: Path, name: str, body: str) -> Path:
    path = directory / name
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(body)
    return path


@pytest.fixture
def scripts_dir(tmp_path: Path) -> Path:
    directory = tmp_path / "scripts"
    directory.mkdir()
    return directory


def _no_spawn(*args, **kwargs):
    raise AssertionError("no process may be spawned for a rejected path")


# Feature: feedhub, Property: Script paths never escape the scripts directory
@settings(max_examples=30, suppress_health_check=[HealthCheck.function_scoped_fixture])
@given(
    depth=st.integers(min_value=1, max_value=8),
    target=st.sampled_from(["etc/passwd", "tmp/evil.sh", "home/user/.bashrc", ""]),
)
def test_parent_traversal_is_rejected(scripts_dir, monkeypatch, depth, target):
    """Any path that climbs out of the scripts directory raises InvalidPath."""
    monkeypatch.setattr(asyncio, "create_subprocess_exec", _no_spawn)
    runner = ScriptRunner(scripts_dir)
    script_path = "/".join([".."] * depth) + ("/" + target if target else "")

    with pytest.raises(InvalidPath):
        asyncio.run(runner.run(script_path))


@pytest.mark.parametrize("script_path", ["/etc/passwd", "/bin/sh", ".", "sub/../.."])
def test_absolute_and_root_paths_are_rejected(scripts_dir, monkeypatch, script_path):
    monkeypatch.setattr(asyncio, "create_subprocess_exec", _no_spawn)
    runner = ScriptRunner(scripts_dir)

    with pytest.raises(InvalidPath) as excinfo:
        asyncio.run(runner.run(script_path))

    assert "must be within the scripts directory" in str(excinfo.value)
    assert isinstance(excinfo.value, PermissionError)


def test_symlink_out_of_scripts_dir_is_rejected(scripts_dir, tmp_path):
    outside = write_script(tmp_path / "outside", "evil.sh", "echo pwned\n")
    (scripts_dir / "link.sh").symlink_to(outside)
    runner = ScriptRunner(scripts_dir)

    with pytest.raises(InvalidPath):
        runner.resolve_script("link.sh")


@pytest.mark.parametrize("script_path", ["a\x00b.sh", "feeds/\x00", "\x00"])
def test_null_byte_in_path_is_rejected(scripts_dir, monkeypatch, script_path):
    monkeypatch.setattr(asyncio, "create_subprocess_exec", _no_spawn)
    runner = ScriptRunner(scripts_dir)

    with pytest.raises(InvalidPath):
        runner.resolve_script(script_path)
    with pytest.raises(InvalidPath):
        asyncio.run(runner.run(script_path))


def test_nested_script_path_resolves(scripts_dir):
    runner = ScriptRunner(scripts_dir)
    resolved = runner.resolve_script("feeds/./site.py")
    assert resolved == scripts_dir.resolve() / "feeds" / "site.py"


class TestBuildCommand:
    """Interpreter selection by extension and platform."""

    def test_python_on_linux_and_windows(self, scripts_dir):
        script = scripts_dir / "feed.py"
        assert ScriptRunner(scripts_dir, platform="linux").build_command(script) == [
            "python3",
            str(script),
        ]
        assert ScriptRunner(scripts_dir, platform="win32").build_command(script) == [
            "python",
            str(script),
        ]

    def test_extension_match_is_case_insensitive(self, scripts_dir):
        script = scripts_dir / "FEED.SH"
        assert ScriptRunner(scripts_dir, platform="linux").build_command(script) == [
            "bash",
            str(script),
        ]

    def test_powershell_uses_bypass_on_windows(self, scripts_dir):
        script = scripts_dir / "feed.ps1"
        command = ScriptRunner(scripts_dir, platform="win32").build_command(script)
        assert command[0] == "powershell.exe"
        assert "Bypass" in command
        assert command[-1] == str(script)

    def test_shell_scripts_unsupported_on_windows(self, scripts_dir):
        runner = ScriptRunner(scripts_dir, platform="win32")
        with pytest.raises(UnsupportedPlatform):
            runner.build_command(scripts_dir / "feed.sh")

    @pytest.mark.parametrize("name", ["feed", "feed.bin", "feed.exe"])
    def test_unknown_extensions_run_directly(self, scripts_dir, name):
        script = scripts_dir / name
        assert ScriptRunner(scripts_dir, platform="linux").build_command(script) == [str(script)]


@needs_bash
class TestRun:
    """Running real scripts through bash."""

    def test_successful_script_is_parsed(self, scripts_dir):
        body = "cat <<'EOF'\n" + rss_document("Scripted Feed") + "EOF\n"
        write_script(scripts_dir, "feed.sh", body)

        document = asyncio.run(ScriptRunner(scripts_dir).run("feed.sh"))

        assert document.title == "Scripted Feed"
        assert [e.link for e in document.entries] == [
            "https://example.com/first",
            "https://example.com/second",
        ]

    def test_script_runs_inside_scripts_dir(self, scripts_dir):
        write_script(scripts_dir, "data.xml", rss_document("From Data File"))
        write_script(scripts_dir, "feed.sh", "cat data.xml\n")

        document = asyncio.run(ScriptRunner(scripts_dir).run("feed.sh"))

        assert document.title == "From Data File"

    def test_nonzero_exit_carries_stderr(self, scripts_dir):
        write_script(scripts_dir, "broken.sh", "echo 'upstream returned 500' >&2\nexit 3\n")

        with pytest.raises(ScriptExecutionFailed) as excinfo:
            asyncio.run(ScriptRunner(scripts_dir).run("broken.sh"))

        assert excinfo.value.stderr == "upstream returned 500"
        assert "exit status 3" in str(excinfo.value)
        assert "upstream returned 500" in str(excinfo.value)

    def test_missing_script_fails(self, scripts_dir):
        with pytest.raises(ScriptExecutionFailed):
            asyncio.run(ScriptRunner(scripts_dir).run("missing.sh"))

    def test_garbage_output_is_a_parse_error(self, scripts_dir):
        write_script(scripts_dir, "garbage.sh", "echo 'this is not a feed'\n")

        with pytest.raises(FeedParseFailed):
            asyncio.run(ScriptRunner(scripts_dir).run("garbage.sh"))

    def test_hung_script_times_out(self, scripts_dir):
        write_script(scripts_dir, "hang.sh", "exec sleep 10\n")
        runner = ScriptRunner(scripts_dir, timeout=0.5)

        with pytest.raises(ScriptExecutionFailed) as excinfo:
            asyncio.run(runner.run("hang.sh"))

        assert "timed out after 0.5s" in str(excinfo.value)

    def test_caller_deadline_shortens_timeout(self, scripts_dir):
        write_script(scripts_dir, "hang.sh", "exec sleep 10\n")
        runner = ScriptRunner(scripts_dir, timeout=30.0)

        with pytest.raises(ScriptExecutionFailed) as excinfo:
            asyncio.run(runner.run("hang.sh", deadline=0.3))

        assert "timed out after 0.3s" in str(excinfo.value)

    def test_every_failure_is_a_feedhub_error(self, scripts_dir):
        write_script(scripts_dir, "fail.sh", "exit 1\n")

        with pytest.raises(FeedHubError):
            asyncio.run(ScriptRunner(scripts_dir).run("fail.sh"))
