"""
RedactionEngine - Core engine for sanitizing CLI output before it is logged.

This engine:
1. Freezes the rules of its profiles into one ordered tuple at construction
2. Folds every rule over the input, each rule seeing the previous rule's output
3. Repeats the fold until the text stops changing (at most MAX_PASSES times)
4. Reports whether anything was masked

Engines are immutable after construction, so one instance can be shared by
any number of threads without locking.
"""

import logging
from typing import Iterable, Iterator, Optional, Union

from .base_rule import RedactionRule, RuleConfigurationError, RuleProfile
from .profiles import DEFAULT_PROFILE

logger = logging.getLogger(__name__)

Text = Union[str, bytes]

PEM_BEGIN = "-----BEGIN CERTIFICATE-----"
PEM_END = "-----END CERTIFICATE-----"

# Upper bound on rule-table folds per input.
MAX_PASSES = 10


def _opens_certificate(line: str) -> bool:
    return line.rfind(PEM_BEGIN) > line.rfind(PEM_END)


class RedactionEngine:
    """
    Engine for masking secrets in command output and log text.

    Example:
        engine = RedactionEngine()

        safe_text, was_redacted = engine.redact("rosa login --client-secret s3cr3t")
        # safe_text: "rosa login --client-secret *************"
        # was_redacted: True

        # With an extra profile
        engine = engine.with_profile(VaultProfile())

    Thread Safety:
        The rule table is a tuple built in __init__ and never modified.
        with_profile() returns a new engine instead of changing this one.
    """

    def __init__(
        self,
        profiles: Optional[Iterable[RuleProfile]] = None,
        load_default_profile: bool = True,
    ):
        """
        Initialize the RedactionEngine.

        Args:
            profiles: Extra profiles, applied after the default one.
            load_default_profile: If True, the ROSA CLI profile is applied first.
                                  Set to False for a clean slate.

        Raises:
            RuleConfigurationError: if a profile returns an invalid rule.
        """
        loaded: dict[str, RuleProfile] = {}
        if load_default_profile:
            loaded[DEFAULT_PROFILE.name] = DEFAULT_PROFILE
        for profile in profiles or ():
            # A profile with the same name replaces the earlier one.
            loaded[profile.name] = profile

        rules: list[RedactionRule] = []
        for profile in loaded.values():
            profile_rules = tuple(profile.get_rules())
            for rule in profile_rules:
                if not isinstance(rule, RedactionRule):
                    raise RuleConfigurationError(
                        f"Profile '{profile.name}' returned {rule!r}, not a RedactionRule"
                    )
            rules.extend(profile_rules)
            logger.debug(f"Loaded rule profile: {profile.name} ({len(profile_rules)} rules)")

        self._profiles: tuple[RuleProfile, ...] = tuple(loaded.values())
        self._rules: tuple[RedactionRule, ...] = tuple(rules)

    @property
    def rules(self) -> tuple[RedactionRule, ...]:
        """The ordered rule table this engine applies."""
        return self._rules

    def list_profiles(self) -> list[str]:
        """Return the names of the loaded profiles, in application order."""
        return [profile.name for profile in self._profiles]

    def with_profile(self, profile: RuleProfile) -> "RedactionEngine":
        """Return a new engine that also applies the given profile."""
        return RedactionEngine(profiles=[*self._profiles, profile], load_default_profile=False)

    def _fold(self, text: str) -> str:
        for rule in self._rules:
            text = rule.apply(text)
        return text

    def _redact_str(self, text: str) -> str:
        # A mask can expose a match an earlier rule already passed over, so
        # fold again until nothing changes.
        for _ in range(MAX_PASSES):
            redacted = self._fold(text)
            if redacted == text:
                break
            text = redacted
        return text

    def redact(self, text: Optional[Text]) -> tuple[Optional[Text], bool]:
        """
        Mask every secret the rules recognize in the given text.

        Args:
            text: The input to sanitize. bytes are decoded as UTF-8 with
                  surrogateescape, so undecodable bytes come back unchanged.

        Returns:
            A tuple of (redacted_text, was_redacted):
            - redacted_text: same type as the input, secrets masked
            - was_redacted: True if any rule replaced something

        Redacting already redacted text returns it unchanged.
        """
        if not text:
            return text, False

        if isinstance(text, bytes):
            decoded = text.decode("utf-8", "surrogateescape")
            redacted = self._redact_str(decoded)
            return redacted.encode("utf-8", "surrogateescape"), redacted != decoded

        redacted = self._redact_str(text)
        return redacted, redacted != text

    def redact_batch(self, texts: list[Text]) -> tuple[list[Text], bool]:
        """
        Redact multiple texts.

        Returns:
            A tuple of (redacted_texts, any_redacted).
        """
        results = []
        any_redacted = False

        for text in texts:
            redacted_text, was_redacted = self.redact(text)
            results.append(redacted_text)
            if was_redacted:
                any_redacted = True

        return results, any_redacted

    def redact_lines(self, lines: Iterable[str]) -> Iterator[str]:
        """
        Redact a stream of lines (with their line endings kept).

        Each line is yielded redacted as soon as it is read, except inside a
        certificate block: those lines are held until the END marker and the
        whole block is yielded as one chunk, so the block body is masked even
        though it spans lines.
        """
        pending: list[str] = []
        for line in lines:
            if pending:
                pending.append(line)
                if PEM_END in line and not _opens_certificate(line):
                    yield self._redact_str("".join(pending))
                    pending = []
                continue
            if _opens_certificate(line):
                pending.append(line)
                continue
            yield self._redact_str(line)

        if pending:
            # Unterminated block: nothing to pair it with, redact what we have.
            yield self._redact_str("".join(pending))


# Singleton instance for convenience
_default_engine: Optional[RedactionEngine] = None


def get_default_engine() -> RedactionEngine:
    """
    Get the default RedactionEngine instance.

    This is a convenience function for simple use cases.
    For more control, instantiate RedactionEngine directly.
    """
    global _default_engine
    if _default_engine is None:
        _default_engine = RedactionEngine()
    return _default_engine


def redact(text: Text) -> Text:
    """Redact text with the default engine and return only the result."""
    return get_default_engine().redact(text)[0]
