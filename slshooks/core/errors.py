"""
Exceptions raised while binding and running hook scripts.
"""


class HookError(Exception):
    """Base exception for hook failures."""


class ContextError(HookError):
    """Raised when the invocation context snapshot cannot be written."""


class ScriptNotFoundError(HookError):
    """Raised when a script pattern matches nothing runnable in the manifest."""

    def __init__(self, pattern: str):
        super().__init__(f"Missing script: {pattern}")
        self.pattern = pattern


class ScriptFailedError(HookError):
    """Raised when a script exits with a non-zero code."""

    def __init__(self, name: str, returncode: int):
        super().__init__(f"Script {name} exited with code {returncode}")
        self.name = name
        self.returncode = returncode


class ScriptsFailedError(HookError):
    """Raised when more than one script of a run failed."""

    def __init__(self, failures: list[ScriptFailedError]):
        names = ", ".join(f"{f.name} ({f.returncode})" for f in failures)
        super().__init__(f"{len(failures)} scripts failed: {names}")
        self.failures = failures
