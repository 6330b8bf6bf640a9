"""
Pytest configuration and shared fixtures for the ROSA redaction tests.

The CLI is replaced by a small executable script written to tmp_path, so the
runner and the MCP tools can be exercised without a real ROSA install.
"""

import logging
import os
import stat
import sys

import pytest

# Add parent directory to path for server imports
sys.path.insert(0, os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

HARNESS_VARIABLES = (
    "ROSA_BINARY",
    "CLUSTER_ID",
    "ROSA_LOG_LEVEL",
    "ROSA_LOG_FILE",
    "ROSA_COMMAND_TIMEOUT",
    "FAKE_ROSA_STDOUT",
    "FAKE_ROSA_STDERR",
    "FAKE_ROSA_EXIT",
    "FAKE_ROSA_SLEEP",
)

FAKE_ROSA = """#!{python}
import os
import sys
import time

time.sleep(float(os.environ.get("FAKE_ROSA_SLEEP", "0")))
sys.stdout.write(os.environ.get("FAKE_ROSA_STDOUT", "args: " + " ".join(sys.argv[1:]) + "\\n"))
sys.stderr.write(os.environ.get("FAKE_ROSA_STDERR", ""))
sys.exit(int(os.environ.get("FAKE_ROSA_EXIT", "0")))
"""


@pytest.fixture(autouse=True)
def clean_environment(monkeypatch):
    """
    Clear harness variables so a developer's shell or .env cannot leak in.
    This runs automatically before each test.
    """
    for name in HARNESS_VARIABLES:
        monkeypatch.delenv(name, raising=False)
    yield


@pytest.fixture(autouse=True)
def reset_package_logger():
    """Undo handlers installed by get_logger() so caplog keeps seeing records."""
    yield
    package_logger = logging.getLogger("rosa_redaction")
    for handler in list(package_logger.handlers):
        package_logger.removeHandler(handler)
        handler.close()
    package_logger.propagate = True
    package_logger.setLevel(logging.NOTSET)


@pytest.fixture
def fake_rosa(tmp_path, monkeypatch):
    """Write a stand-in CLI executable and point ROSA_BINARY at it."""
    path = tmp_path / "rosa"
    path.write_text(FAKE_ROSA.format(python=sys.executable))
    path.chmod(path.stat().st_mode | stat.S_IXUSR | stat.S_IXGRP | stat.S_IXOTH)
    monkeypatch.setenv("ROSA_BINARY", str(path))
    return path


@pytest.fixture
def describe_cluster_output():
    """Text output of a cluster description, as the CLI prints it."""
    return (
        "Name:                       my-hcp\n"
        "ID:                         2a3b4c5d6e7f8g9h\n"
        "AWS Account:                123456789012\n"
        "AWS Billing Account:        210987654321\n"
        "Role (STS) ARN:             arn:aws:iam::123456789012:role/ManagedOpenShift-HCP-ROSA-Installer-Role\n"
        "Additional trust bundle:    REDACTED\n"
        "State:                      ready \n"
    )
