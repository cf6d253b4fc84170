"""Run external commands for the provisioning pipeline.

Every command is given as a single shell command line. The line is turned
into an argument list for the platform shell by ``build_invocation`` and run
with an explicit working directory; the parent process's cwd never changes.
"""
import os
import subprocess
from typing import Callable, List, Optional, Union

from appforge.core.logger import console, get_logger
from appforge.models.run import CommandResult, CommandSpec

logger = get_logger(__name__)

# Exit status reported when a command cannot be spawned at all
SPAWN_FAILURE = 127


def build_invocation(command_line: str, platform: Optional[str] = None) -> List[str]:
    """Build the argument list that runs command_line on platform.

    Args:
        command_line: Shell command line
        platform: ``os.name`` style platform ("nt" or "posix"); defaults to
            the current platform

    Returns:
        Argument list suitable for ``subprocess`` without ``shell=True``
    """
    platform = platform or os.name
    if platform == "nt":
        return ["cmd", "/c", command_line.replace("/", "\\")]
    return ["/bin/sh", "-c", command_line]


def prepare_invocation(command_line: str, platform: Optional[str] = None) -> Union[str, List[str]]:
    """Return what to hand to subprocess for command_line on platform.

    On "nt" the argument list is joined into one string as-is. Passing the
    list would make subprocess re-quote the command with \\" escapes, which
    cmd.exe passes through literally.
    """
    platform = platform or os.name
    argv = build_invocation(command_line, platform)
    if platform == "nt":
        return " ".join(argv)
    return argv


def _print_line(line: str) -> None:
    console.out(line.rstrip("\n"), highlight=False)


class CommandRunner:
    """Executes CommandSpecs and reports their exit status."""

    def __init__(
        self,
        mock: bool = False,
        sink: Optional[Callable[[str], None]] = None,
        platform: Optional[str] = None,
    ):
        self.mock = mock
        self.sink = sink or _print_line
        self.platform = platform

    def run(self, spec: CommandSpec) -> CommandResult:
        """Run one command and return its exit status and output.

        Never raises on a non-zero exit; callers decide what is fatal.
        """
        where = spec.working_directory or "current directory"
        if self.mock:
            logger.info(f"MOCK: Would run '{spec.command_line}' in {where}")
            return CommandResult(returncode=0)

        argv = prepare_invocation(spec.command_line, self.platform)
        cwd = str(spec.working_directory) if spec.working_directory else None
        logger.debug(f"Running {argv} in {where}")

        try:
            if spec.stream_output:
                return self._run_streaming(argv, cwd)
            result = subprocess.run(
                argv,
                cwd=cwd,
                capture_output=True,
                text=True,
                check=False,
            )
        except OSError as exc:
            logger.error(f"Could not start '{spec.command_line}': {exc}")
            return CommandResult(returncode=SPAWN_FAILURE, output=str(exc))

        output = (result.stdout or "") + (result.stderr or "")
        if result.returncode != 0:
            logger.debug(f"'{spec.command_line}' exited with {result.returncode}")
        return CommandResult(returncode=result.returncode, output=output)

    def _run_streaming(self, argv: Union[str, List[str]], cwd: Optional[str]) -> CommandResult:
        """Forward each output line to the sink as soon as it is read."""
        proc = subprocess.Popen(
            argv,
            cwd=cwd,
            stdout=subprocess.PIPE,
            stderr=subprocess.STDOUT,
            text=True,
            encoding="utf-8",
            errors="replace",
        )

        lines = []
        try:
            for line in proc.stdout or ():
                lines.append(line)
                self.sink(line)
        except BaseException:
            proc.kill()
            proc.wait()
            raise

        returncode = proc.wait()
        return CommandResult(returncode=returncode, output="".join(lines))
