"""
ROSA Redaction - MCP Server for safely driving the ROSA CLI

A local MCP (Model Context Protocol) server that lets AI agents run ROSA CLI
commands and read their output without ever seeing the secrets in it.

Tools:
    - redact_text: Mask credentials, certificates and AWS account numbers in text
    - run_rosa: Run a ROSA CLI command and return its redacted output

Safety Constraints:
    - Command lines, stdout and stderr are redacted before they are returned or logged
    - Output is truncated to MAX_OUTPUT_CHARS after redaction
    - Commands are killed after ROSA_COMMAND_TIMEOUT seconds
"""

import shlex
import subprocess
from typing import Any

from dotenv import load_dotenv
from mcp.server.fastmcp import FastMCP

from rosa_redaction import get_default_engine
from rosa_redaction.config import ConfigurationError, HarnessConfig
from rosa_redaction.log import get_logger
from rosa_redaction.runner import RosaRunner, redact_args

# Load environment variables from .env file
load_dotenv()

# Initialize MCP server
mcp = FastMCP(
    "rosa-redaction",
    instructions="MCP Server for running the ROSA CLI with secrets redacted from its output"
)

# Safety constants
MAX_OUTPUT_CHARS = 20000


def get_runner() -> RosaRunner:
    """Create a runner from the environment and route its log through the redacting sink."""
    config = HarnessConfig.from_env(dotenv=False)
    get_logger("rosa_redaction", level=config.log_level, log_file=config.log_file)
    return RosaRunner(config=config)


def _truncate(text: str) -> str:
    return text[:MAX_OUTPUT_CHARS] + "..." if len(text) > MAX_OUTPUT_CHARS else text


def _safe(text: str) -> str:
    return get_default_engine().redact(text)[0]


@mcp.tool()
def redact_text(text: str) -> dict[str, Any]:
    """
    Mask secrets in a piece of text.

    Args:
        text: Any text, e.g. CLI output, an API error payload or a log excerpt.

    Returns:
        A dictionary containing:
        - status: "success"
        - text: The text with every recognized secret replaced by *************
        - was_redacted: True if anything was masked

    Example usage:
        redact_text('{"password":"S3cr3t!"}')
        redact_text("rosa login --client-secret abcdef123")

    Notes:
        - Covers JSON password / additional_trust_bundle fields (plain or escaped),
          PEM certificate bodies, sensitive CLI flags, --users lists and
          AWS account numbers in ARNs and 'AWS Account:' lines
        - Redacting already redacted text returns it unchanged
    """
    safe_text, was_redacted = get_default_engine().redact(text)
    return {
        "status": "success",
        "text": safe_text,
        "was_redacted": was_redacted
    }


@mcp.tool()
def run_rosa(args: list[str]) -> dict[str, Any]:
    """
    Run a ROSA CLI command and return its redacted output.

    Args:
        args: The CLI arguments, without the binary name.
              Example: ["describe", "cluster", "-c", "my-cluster", "-o", "json"]

    Returns:
        A dictionary containing:
        - status: "success" if the command exited 0, "error" otherwise
        - command: The redacted command line that was run
        - exit_code: The process exit code
        - stdout: Redacted standard output (truncated to MAX_OUTPUT_CHARS)
        - stderr: Redacted standard error (truncated to MAX_OUTPUT_CHARS)

    Example usage:
        run_rosa(["list", "machinepools", "-c", "my-cluster"])
        run_rosa(["create", "idp", "-c", "my-cluster", "--type", "htpasswd",
                  "--users", "admin:Sup3rS3cret"])
    """
    engine = get_default_engine()
    command = shlex.join(redact_args(engine, ["rosa", *args]))
    try:
        runner = get_runner()
        result = runner.run(*args).redacted()

        return {
            "status": "success" if result.succeeded else "error",
            "command": result.command_line,
            "exit_code": result.exit_code,
            "stdout": _truncate(result.stdout),
            "stderr": _truncate(result.stderr)
        }

    except ConfigurationError as e:
        return {
            "status": "error",
            "command": command,
            "message": f"Configuration error: {_safe(str(e))}"
        }
    except FileNotFoundError:
        return {
            "status": "error",
            "command": command,
            "message": "ROSA CLI binary not found. Please install rosa or set ROSA_BINARY."
        }
    except subprocess.TimeoutExpired as e:
        return {
            "status": "error",
            "command": command,
            "message": f"Command timed out after {e.timeout} seconds"
        }
    except Exception as e:
        return {
            "status": "error",
            "command": command,
            "message": f"Unexpected error: {_safe(str(e))}"
        }


if __name__ == "__main__":
    # Run the MCP server using stdio transport
    mcp.run()
