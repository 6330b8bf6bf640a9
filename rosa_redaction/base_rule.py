"""
Base Rule Profile - Redaction rule type and abstract rule-set class.

A redaction rule is a compiled pattern with three named groups:
    - prefix: literal text kept verbatim (e.g. '--client-secret ')
    - value:  the sensitive span that gets masked
    - suffix: literal text kept verbatim (may be empty)

Only the value group is ever replaced, so surrounding flags, JSON keys and
certificate markers survive redaction unchanged.

Subclass RuleProfile to group rules for a given output family, e.g.:
    - rosa_cli.py for the CLI flags, JSON fields and AWS identifiers
      printed by the managed-cluster client and its test harness
"""

import re
from abc import ABC, abstractmethod
from dataclasses import dataclass

# Every rule masks with the same literal. It is made only of '*', which no
# rule accepts as a prefix or suffix character.
MASK = "*************"

REQUIRED_GROUPS = ("prefix", "value", "suffix")


class RuleConfigurationError(ValueError):
    """Raised when a rule cannot be used as declared.

    This is a startup-time error: a rule that is silently dropped would let
    its secrets through, so it is never caught inside the package.
    """


@dataclass(frozen=True)
class RedactionRule:
    """A single redaction rule definition."""
    name: str  # e.g., "json_password", "flag_client_secret"
    pattern: re.Pattern[str]  # Compiled regex with prefix/value/suffix groups
    replacement: str = MASK
    description: str = ""  # Human-readable description

    def __post_init__(self):
        missing = [g for g in REQUIRED_GROUPS if g not in self.pattern.groupindex]
        if missing:
            raise RuleConfigurationError(
                f"Rule '{self.name}' is missing named group(s): {', '.join(missing)}"
            )
        if self.pattern.search(self.replacement):
            # A mask that can be matched again would let a later pass expand it.
            raise RuleConfigurationError(
                f"Rule '{self.name}' matches its own replacement '{self.replacement}'"
            )

    def _substitute(self, match: re.Match[str]) -> str:
        return match.group("prefix") + self.replacement + (match.group("suffix") or "")

    def apply(self, text: str) -> str:
        """Return text with every value group of this rule masked."""
        return self.pattern.sub(self._substitute, text)


class RuleProfile(ABC):
    """
    Abstract base class for rule profiles.

    A profile is an ordered, immutable table of rules. Profiles are read
    at engine construction and never mutated afterwards.

    Example:
        class VaultProfile(RuleProfile):
            @property
            def name(self) -> str:
                return "vault"

            @property
            def description(self) -> str:
                return "Vault tokens printed by helper scripts"

            def get_rules(self) -> tuple[RedactionRule, ...]:
                return (
                    RedactionRule(
                        name="vault_token",
                        pattern=re.compile(
                            r'(?P<prefix>VAULT_TOKEN=)(?P<value>[^\\s*]+)(?P<suffix>)'
                        ),
                    ),
                )
    """

    @property
    @abstractmethod
    def name(self) -> str:
        """Unique identifier for this profile (e.g., 'rosa_cli')."""
        pass

    @property
    @abstractmethod
    def description(self) -> str:
        """Human-readable description of what this profile covers."""
        pass

    @abstractmethod
    def get_rules(self) -> tuple[RedactionRule, ...]:
        """
        Return the rules of this profile, in the order they must be applied.

        Each rule sees the output of the rules before it.
        """
        pass

    def __repr__(self) -> str:
        return f"<RuleProfile: {self.name}>"
