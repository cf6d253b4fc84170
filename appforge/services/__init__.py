"""Services that talk to the outside world."""
from appforge.services.command_runner import CommandRunner, build_invocation

__all__ = ["CommandRunner", "build_invocation"]
