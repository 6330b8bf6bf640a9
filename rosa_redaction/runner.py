"""
Runs the packaged ROSA CLI for the test harness.

The raw stdout/stderr stay on the CommandResult so scenarios can assert on
them; everything written to the log goes through the redaction engine first.
"""

import logging
import shlex
import subprocess
from dataclasses import dataclass, replace
from typing import Optional

from .base_rule import MASK
from .config import HarnessConfig
from .engine import RedactionEngine, get_default_engine

logger = logging.getLogger(__name__)


def redact_args(engine: RedactionEngine, args) -> tuple[str, ...]:
    """
    Redact an argv, pairing each value with the flag before it.

    The value is shell-quoted inside the pair, as it would be on a command
    line. A value that needs quoting is masked whole once its pair matches,
    so a secret containing spaces never survives in part.
    """
    redacted = []
    for i, arg in enumerate(args):
        previous = args[i - 1] if i else ""
        if previous.startswith("-"):
            quoted = shlex.quote(arg)
            pair, changed = engine.redact(f"{previous} {quoted}")
            if changed and pair.startswith(f"{previous} "):
                arg = pair[len(previous) + 1:] if quoted == arg else MASK
        redacted.append(engine.redact(arg)[0])
    return tuple(redacted)


class RosaCommandError(RuntimeError):
    """A CLI invocation exited non-zero. The message is already redacted."""

    def __init__(self, message: str, result: "CommandResult"):
        super().__init__(message)
        self.result = result


@dataclass(frozen=True)
class CommandResult:
    args: tuple[str, ...]
    exit_code: int
    stdout: str
    stderr: str
    engine: Optional[RedactionEngine] = None

    @property
    def _engine(self) -> RedactionEngine:
        return self.engine or get_default_engine()

    @property
    def command_line(self) -> str:
        return shlex.join(self.args)

    @property
    def succeeded(self) -> bool:
        return self.exit_code == 0

    def redacted(self) -> "CommandResult":
        """Return a copy whose command line and streams are redacted."""
        engine = self._engine
        return replace(
            self,
            args=redact_args(engine, self.args),
            stdout=engine.redact(self.stdout)[0],
            stderr=engine.redact(self.stderr)[0],
        )

    def check(self) -> "CommandResult":
        """Raise RosaCommandError when the command failed, else return self."""
        if not self.succeeded:
            safe = self.redacted()
            detail = safe.stderr.strip() or safe.stdout.strip()
            raise RosaCommandError(
                f"Command '{safe.command_line}' exited with code {self.exit_code}: {detail}",
                self,
            )
        return self


class RosaRunner:
    """
    Executes CLI commands and logs them redacted.

    Example:
        runner = RosaRunner()
        result = runner.run("create", "idp", "--type", "htpasswd",
                            "--users", "admin:Sup3rS3cret").check()
        # log: Running command: rosa create idp --type htpasswd --users 'admin:*************'
    """

    def __init__(
        self,
        config: Optional[HarnessConfig] = None,
        engine: Optional[RedactionEngine] = None,
    ):
        self.config = config or HarnessConfig.from_env()
        self.engine = engine or get_default_engine()

    def run(self, *args: str, timeout: Optional[float] = None) -> CommandResult:
        """
        Run the CLI with the given arguments.

        Raises:
            FileNotFoundError: the CLI binary does not exist.
            subprocess.TimeoutExpired: the call ran past its timeout.
        """
        argv = (self.config.binary, *args)
        command_line = shlex.join(redact_args(self.engine, argv))
        logger.info(f"Running command: {command_line}")

        completed = subprocess.run(
            list(argv),
            capture_output=True,
            text=True,
            timeout=timeout or self.config.timeout,
            check=False,
        )
        result = CommandResult(
            args=argv,
            exit_code=completed.returncode,
            stdout=completed.stdout or "",
            stderr=completed.stderr or "",
            engine=self.engine,
        )

        safe = result.redacted()
        if safe.stdout:
            logger.debug(f"Stdout:\n{safe.stdout}")
        if safe.stderr:
            logger.debug(f"Stderr:\n{safe.stderr}")
        if not result.succeeded:
            logger.warning(f"Command exited with code {result.exit_code}: {command_line}")
        return result
