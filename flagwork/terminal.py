"""
Secure input.

Secure arguments never take their value from argv: after a successful parse the
parser asks the injected terminal for each of them, in declaration order. Any
object with a read_secret(prompt) -> str method can serve; a failed read is
never retried and becomes a SecureInputError naming the flag.
"""
from typing import Protocol, runtime_checkable

from rich.console import Console


@runtime_checkable
class Terminal(Protocol):
    def read_secret(self, prompt, /): ...


class ConsoleTerminal:
    """hidden-input prompt on a rich console bound to stderr."""

    def __init__(self, console=None, /):
        self._console = console if console is not None else Console(stderr=True)

    def read_secret(self, prompt, /):
        return self._console.input(prompt, password=True)


__all__ = (
    "Terminal",
    "ConsoleTerminal",
)
