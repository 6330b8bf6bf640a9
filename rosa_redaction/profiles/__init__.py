"""
Rule Profiles Package

This package contains the redaction rule profiles.

Available profiles:
    - rosa_cli: Default rules for ROSA CLI output (credentials, certificates,
      AWS account numbers)

To add a new profile:
    1. Create a new file (e.g., vault.py)
    2. Subclass RuleProfile
    3. Implement get_rules() returning a tuple of RedactionRules
    4. Pass it to RedactionEngine(profiles=[...]) or engine.with_profile()
"""

from .rosa_cli import RosaCLIProfile, DEFAULT_PROFILE

__all__ = ["RosaCLIProfile", "DEFAULT_PROFILE"]
