"""
ROSA CLI Rule Profile - Default redaction rules.

This profile covers the secrets that show up in the output of the managed
cluster CLI, in the command lines the test harness runs, and in the API
error payloads those commands echo back.

Rules covered, in the order they are applied:
    - JSON string fields (password, additional_trust_bundle), plain and
      escaped once, e.g. inside a wrapping JSON string
    - PEM certificate blocks, across raw or escaped newlines
    - AWS account numbers inside ARNs and after 'AWS Account:' labels
    - Sensitive CLI flags (--password, --client-id, --bind-password,
      --client-secret, --cluster-admin-password, --billing-account)
    - htpasswd user lists (--users name:secret,...)
"""

import re

from ..base_rule import RedactionRule, RuleProfile

JSON_KEYS = ("password", "additional_trust_bundle")

# Flags whose next token is a secret, in the order the harness passes them.
SENSITIVE_FLAGS = (
    "password",
    "client-id",
    "bind-password",
    "client-secret",
    "cluster-admin-password",
    "billing-account",
)

# Plain JSON string body: anything up to the first unescaped quote.
_JSON_VALUE = r'(?:[^"\\]|\\.)*'

# JSON string body that was itself encoded once more. At this depth an inner
# quote reads \\\" and an inner backslash reads \\\\, while a bare \" closes
# the string.
_ESCAPED_JSON_VALUE = (
    r'(?:'
    r'\\\\\\\\|'  # inner escaped backslash
    r'\\\\\\"|'  # inner escaped quote
    r'\\\\[^"\\]|'  # inner escape such as \\n
    r'\\[^"\\]|'  # outer escape such as \n
    r'[^"\\]'
    r')*'
)

# Certificate marker separators: raw whitespace or an escaped \r / \n.
_PEM_SEPARATOR = re.compile(r'(?:\\r|\\n|\s)*')
_ESCAPED_SEPARATORS = ("\\r", "\\n")

# A flag value: a quoted string or a bare token that ends at whitespace or a
# backslash line continuation. A following '--flag' is never taken as value.
# Quoted values never contain a backslash, so an escaped quote is not eaten.
_FLAG_VALUE = r'''(?!--)(?:"[^"\n\\]*"|'[^'\n\\]*'|[^\s\\]+)'''


def _json_field_rule(key: str) -> RedactionRule:
    return RedactionRule(
        name=f"json_{key}",
        pattern=re.compile(
            rf'(?P<prefix>"{key}"\s*:\s*")'
            rf'(?P<value>{_JSON_VALUE})'
            r'(?P<suffix>")'
        ),
        description=f"JSON '{key}' string field",
    )


def _escaped_json_field_rule(key: str) -> RedactionRule:
    return RedactionRule(
        name=f"escaped_json_{key}",
        pattern=re.compile(
            rf'(?P<prefix>\\"{key}\\"\s*:\s*\\")'
            rf'(?P<value>{_ESCAPED_JSON_VALUE})'
            r'(?P<suffix>\\")'
        ),
        description=f"JSON '{key}' string field with escaped quotes",
    )


def _flag_rule(flag: str) -> RedactionRule:
    return RedactionRule(
        name=f"flag_{flag.replace('-', '_')}",
        pattern=re.compile(
            rf'(?P<prefix>(?<![\w-])--{flag}(?:[ \t]+|=))'
            rf'(?P<value>{_FLAG_VALUE})'
            r'(?P<suffix>)(?=[\s\\]|$)'
        ),
        description=f"Value of the --{flag} flag",
    )


def _split_separators(body: str) -> tuple[str, str, str]:
    """Split body into (leading separators, certificate data, trailing separators)."""
    start = _PEM_SEPARATOR.match(body).end()
    end = len(body)
    while end > start:
        if body[end - 1].isspace():
            end -= 1
        elif end - start >= 2 and body[end - 2:end] in _ESCAPED_SEPARATORS:
            end -= 2
        else:
            break
    return body[:start], body[start:end], body[end:]


class CertificateRule(RedactionRule):
    """
    Masks the data between certificate markers, keeping the separators.

    The pattern matches the whole block with no overlap between its groups;
    the separators around the data are split off here, in one linear scan.
    """

    def _substitute(self, match: re.Match[str]) -> str:
        leading, data, trailing = _split_separators(match.group("value"))
        if not data:
            return match.group(0)
        return match.group("prefix") + leading + self.replacement + trailing + match.group("suffix")


def _account_label_rule(name: str, label: str) -> RedactionRule:
    return RedactionRule(
        name=name,
        pattern=re.compile(
            rf'(?P<prefix>{label}:\s*)'
            r'(?P<value>[0-9]{12})'
            r'(?P<suffix>)(?![0-9])'
        ),
        description=f"AWS account number after '{label}:'",
    )


class RosaCLIProfile(RuleProfile):
    """
    Default rule profile for the managed-cluster CLI and its test harness.

    The table is built once; get_rules() always returns the same tuple.
    """

    def __init__(self):
        rules = []
        for key in JSON_KEYS:
            rules.append(_escaped_json_field_rule(key))
            rules.append(_json_field_rule(key))

        rules.append(
            CertificateRule(
                name="pem_certificate",
                pattern=re.compile(
                    r'(?P<prefix>-----BEGIN CERTIFICATE-----)'
                    r'(?P<value>(?:(?!-----).)*)'
                    r'(?P<suffix>-----END CERTIFICATE-----)',
                    re.DOTALL,
                ),
                description="PEM certificate body between BEGIN/END markers",
            )
        )

        # Account numbers go before the flags: masking one can expose a flag
        # that a leading digit used to hide.
        rules.append(
            RedactionRule(
                name="arn_account",
                pattern=re.compile(
                    r'(?P<prefix>arn:aws(?:-[a-z]+)*:[a-z0-9-]+:[a-z0-9-]*:)'
                    r'(?P<value>[0-9]{12})'
                    r'(?P<suffix>:)'
                ),
                description="AWS account number inside an ARN",
            )
        )
        rules.append(_account_label_rule("aws_account_label", "AWS Account"))
        rules.append(_account_label_rule("aws_billing_account_label", "AWS Billing Account"))

        for flag in SENSITIVE_FLAGS:
            rules.append(_flag_rule(flag))

        rules.append(
            RedactionRule(
                name="flag_users",
                pattern=re.compile(
                    r'''(?P<prefix>(?<![\w-])--users(?:[ \t]+|=)["']?[A-Za-z0-9._-]+:)'''
                    r'(?P<value>[^\s\\]+)'
                    r'(?P<suffix>)'
                ),
                description="Secrets of an htpasswd --users name:secret list",
            )
        )

        self._rules = tuple(rules)

    @property
    def name(self) -> str:
        return "rosa_cli"

    @property
    def description(self) -> str:
        return "Credentials, certificates and AWS account numbers in ROSA CLI output"

    def get_rules(self) -> tuple[RedactionRule, ...]:
        return self._rules


# Export the default profile; a rule that fails to compile fails this import.
DEFAULT_PROFILE = RosaCLIProfile()
