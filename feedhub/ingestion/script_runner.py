"""Run local feed scripts and parse their output as feeds."""

import asyncio
import logging
import sys
from dataclasses import dataclass
from pathlib import Path
from typing import Dict, List, Optional

from ..errors import InvalidPath, ScriptExecutionFailed, UnsupportedPlatform
from .feed_parser import FeedParser
from .models import RawFeedDocument

logger = logging.getLogger(__name__)

DEFAULT_SCRIPT_TIMEOUT = 30.0


@dataclass(frozen=True)
class Interpreter:
    """How to launch a script with a given extension.

    Attributes:
        command: Arguments placed before the script path on POSIX systems,
            None when the extension is not supported there
        windows_command: Same, for Windows
    """

    command: Optional[List[str]]
    windows_command: Optional[List[str]]

    def build(self, script: Path, platform: str) -> List[str]:
        """Build the full argument list for ``script`` on ``platform``."""
        prefix = self.windows_command if platform == "win32" else self.command
        if prefix is None:
            raise UnsupportedPlatform(
                f"{script.suffix} scripts are not supported on {platform}"
            )
        return [*prefix, str(script)]


INTERPRETERS: Dict[str, Interpreter] = {
    ".py": Interpreter(["python3"], ["python"]),
    ".sh": Interpreter(["bash"], None),
    ".ps1": Interpreter(
        ["pwsh", "-File"],
        ["powershell.exe", "-ExecutionPolicy", "Bypass", "-File"],
    ),
    ".js": Interpreter(["node"], ["node"]),
    ".rb": Interpreter(["ruby"], ["ruby"]),
}

# Anything else is executed directly (compiled binaries, shebang scripts)
DIRECT = Interpreter([], [])


class ScriptRunner:
    """Execute scripts from the scripts directory and parse their stdout."""

    def __init__(
        self,
        scripts_dir: Path,
        parser: Optional[FeedParser] = None,
        timeout: float = DEFAULT_SCRIPT_TIMEOUT,
        platform: str = sys.platform,
    ) -> None:
        """
        Initialize script runner.

        Args:
            scripts_dir: Root directory every script must live in
            parser: Parser used on the script output
            timeout: Hard ceiling on a single execution in seconds
            platform: Platform name used for interpreter selection
        """
        self.scripts_dir = Path(scripts_dir).resolve()
        self.parser = parser or FeedParser()
        self.timeout = timeout
        self.platform = platform

    def resolve_script(self, script_path: str) -> Path:
        """Resolve a script path, rejecting anything outside the scripts directory."""
        if "\x00" in script_path:
            raise InvalidPath(f"Invalid script path {script_path!r}: embedded null byte")
        try:
            full_path = (self.scripts_dir / script_path).resolve()
        except (ValueError, OSError) as e:
            raise InvalidPath(f"Invalid script path {script_path!r}: {e}") from e
        if self.scripts_dir not in full_path.parents:
            raise InvalidPath(
                f"Invalid script path {script_path!r}: script must be within the scripts directory"
            )
        return full_path

    def build_command(self, script: Path) -> List[str]:
        """Pick the interpreter invocation for a script by its extension."""
        interpreter = INTERPRETERS.get(script.suffix.lower(), DIRECT)
        return interpreter.build(script, self.platform)

    async def run(self, script_path: str, deadline: Optional[float] = None) -> RawFeedDocument:
        """
        Execute a script and parse its standard output as a feed.

        Args:
            script_path: Path relative to the scripts directory
            deadline: Caller's time budget in seconds; the runner's own
                timeout still applies when it is shorter

        Returns:
            Parsed feed document
        """
        script = self.resolve_script(script_path)
        command = self.build_command(script)
        timeout = self.timeout if deadline is None else min(self.timeout, deadline)

        logger.debug(f"Running feed script {script_path}: {command}")
        try:
            process = await asyncio.create_subprocess_exec(
                *command,
                cwd=str(self.scripts_dir),
                stdin=asyncio.subprocess.DEVNULL,
                stdout=asyncio.subprocess.PIPE,
                stderr=asyncio.subprocess.PIPE,
            )
        except OSError as e:
            raise ScriptExecutionFailed(f"Script execution failed: {e}") from e

        try:
            stdout, stderr = await asyncio.wait_for(process.communicate(), timeout=timeout)
        except asyncio.TimeoutError:
            process.kill()
            await process.wait()
            raise ScriptExecutionFailed(f"Script execution failed: timed out after {timeout:g}s")

        if process.returncode != 0:
            raise ScriptExecutionFailed(
                f"Script execution failed: exit status {process.returncode}",
                stderr=stderr.decode("utf-8", errors="replace").strip(),
            )

        return self.parser.parse_document(stdout)
