"""Command and run records for the provisioning pipeline."""
from dataclasses import dataclass, field
from pathlib import Path
from typing import List, Optional, Tuple

from appforge.models.options import Options


@dataclass(frozen=True)
class CommandSpec:
    """One external command invocation.

    A working_directory of None runs the command from the process cwd.
    """

    command_line: str
    working_directory: Optional[Path] = None
    stream_output: bool = False


@dataclass(frozen=True)
class CommandResult:
    """Exit status and collected output of a command."""

    returncode: int
    output: str = ""

    @property
    def ok(self) -> bool:
        return self.returncode == 0


@dataclass
class Run:
    """Everything one pipeline invocation did."""

    options: Options
    executions: List[Tuple[str, CommandSpec, CommandResult]] = field(default_factory=list)
    changed_files: List[str] = field(default_factory=list)
    soft_steps: List[str] = field(default_factory=list)

    @property
    def target_path(self) -> Path:
        return self.options.target_path

    def record(self, step: str, spec: CommandSpec, result: CommandResult, soft: bool = False) -> None:
        self.executions.append((step, spec, result))
        if soft:
            self.soft_steps.append(step)

    @property
    def soft_failures(self) -> List[str]:
        """Steps that failed without stopping the run."""
        return [
            step for step, _, result in self.executions
            if step in self.soft_steps and not result.ok
        ]
