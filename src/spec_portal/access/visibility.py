"""Page visibility rules loaded from ``application.properties``.

Rules are keyed as ``visibility.folder.<path>=<rule>`` or
``visibility.file.<path>=<rule>`` where ``<rule>`` is ``public``,
``authenticated`` or ``role:<name>``. ``visibility.default`` sets the rule for
pages no other rule matches.
"""

import logging
from pathlib import Path
from typing import Literal

from pydantic import BaseModel

logger = logging.getLogger(__name__)

FOLDER_PREFIX = "visibility.folder."
FILE_PREFIX = "visibility.file."
DEFAULT_KEY = "visibility.default"

PUBLIC = "public"
AUTHENTICATED = "authenticated"
ROLE_PREFIX = "role:"


class VisibilityRule(BaseModel):
    path: str
    kind: Literal["folder", "file"]
    rule: str  # public / authenticated / role:<name>


class VisibilityDecision(BaseModel):
    visible: bool
    requires_auth: bool
    required_role: str | None = None
    rule: VisibilityRule


class VisibilityPolicy(BaseModel):
    rules: list[VisibilityRule] = []
    default_rule: str = PUBLIC

    def check(self, page_path: str, user_roles: list[str] | None = None) -> VisibilityDecision:
        return check_page_visibility(page_path, self.rules, user_roles or [], self.default_rule)


def parse_properties(text: str) -> dict[str, str]:
    """Parse Java-style ``key=value`` lines; ``#`` comments and blank lines are skipped."""
    properties: dict[str, str] = {}
    for line in text.splitlines():
        line = line.strip()
        if not line or line.startswith("#"):
            continue
        key, sep, value = line.partition("=")
        if sep and key.strip():
            properties[key.strip()] = value.strip()
    return properties


def rules_from_properties(properties: dict[str, str]) -> VisibilityPolicy:
    rules = []
    for key, value in properties.items():
        if key.startswith(FOLDER_PREFIX):
            rules.append(VisibilityRule(path=key[len(FOLDER_PREFIX):], kind="folder", rule=value))
        elif key.startswith(FILE_PREFIX):
            rules.append(VisibilityRule(path=key[len(FILE_PREFIX):], kind="file", rule=value))
    return VisibilityPolicy(rules=rules, default_rule=properties.get(DEFAULT_KEY) or PUBLIC)


def load_visibility_rules(path: Path) -> VisibilityPolicy:
    try:
        text = Path(path).read_text(encoding="utf-8")
    except FileNotFoundError:
        logger.warning("Properties file not found: %s, all pages public", path)
        return VisibilityPolicy()
    policy = rules_from_properties(parse_properties(text))
    logger.debug("Loaded %d visibility rules from %s", len(policy.rules), path)
    return policy


def match_rule(page_path: str, rules: list[VisibilityRule]) -> VisibilityRule | None:
    """Exact file rule first; otherwise the longest matching folder prefix."""
    best: VisibilityRule | None = None
    for rule in rules:
        if rule.kind == "file" and rule.path == page_path:
            return rule
        if rule.kind == "folder" and page_path.startswith(rule.path):
            if best is None or len(rule.path) > len(best.path):
                best = rule
    return best


def check_page_visibility(
    page_path: str,
    rules: list[VisibilityRule],
    user_roles: list[str],
    default_rule: str = PUBLIC,
) -> VisibilityDecision:
    rule = match_rule(page_path, rules) or VisibilityRule(path=page_path, kind="file", rule=default_rule)

    if rule.rule == AUTHENTICATED:
        return VisibilityDecision(visible=bool(user_roles), requires_auth=True, rule=rule)
    if rule.rule.startswith(ROLE_PREFIX):
        role = rule.rule[len(ROLE_PREFIX):]
        return VisibilityDecision(visible=role in user_roles, requires_auth=True, required_role=role, rule=rule)
    # public, and anything unrecognised
    return VisibilityDecision(visible=True, requires_auth=False, rule=rule)
