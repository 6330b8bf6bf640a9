"""
Redaction Module - Output sanitization for the ROSA CLI test harness

This module masks secrets (passwords, client secrets, certificates, AWS
account numbers) in command output and log text before it is logged,
displayed or stored as a test artifact.

Architecture:
    - RedactionEngine: applies every rule, in order, to a text buffer
    - RuleProfile: abstract base class for an ordered table of rules
    - profiles/: the rule tables (rosa_cli is the default)
    - log: logging filter that hands only redacted text to handlers
    - runner: runs the CLI and logs its command line and output redacted

Example:
    from rosa_redaction import RedactionEngine

    engine = RedactionEngine()
    safe_text, was_redacted = engine.redact('{"password":"S3cr3t!"}')
    # safe_text: '{"password":"*************"}'
    # was_redacted: True
"""

from .base_rule import MASK, RedactionRule, RuleConfigurationError, RuleProfile
from .engine import RedactionEngine, get_default_engine, redact

__all__ = [
    "MASK",
    "RedactionEngine",
    "RedactionRule",
    "RuleConfigurationError",
    "RuleProfile",
    "get_default_engine",
    "redact",
]
