from spec_portal.access.visibility import (
    VisibilityRule,
    check_page_visibility,
    load_visibility_rules,
    match_rule,
    parse_properties,
    rules_from_properties,
)

PROPERTIES = """\
# portal visibility
visibility.default=public
visibility.folder.en/internal=authenticated
visibility.folder.en/internal/finance=role:finance
visibility.file.en/internal/handbook.md=public

server.port=8080
"""


class TestParseProperties:
    def test_skips_comments_and_blanks(self):
        props = parse_properties(PROPERTIES)
        assert props["visibility.default"] == "public"
        assert props["server.port"] == "8080"
        assert len(props) == 5

    def test_value_may_contain_equals(self):
        assert parse_properties("a.b = x=y\n") == {"a.b": "x=y"}

    def test_lines_without_separator_ignored(self):
        assert parse_properties("just words\n") == {}


class TestRulesFromProperties:
    def test_builds_folder_and_file_rules(self):
        policy = rules_from_properties(parse_properties(PROPERTIES))
        assert len(policy.rules) == 3
        assert {r.kind for r in policy.rules} == {"folder", "file"}
        assert policy.default_rule == "public"

    def test_default_rule_falls_back_to_public(self):
        assert rules_from_properties({}).default_rule == "public"


class TestMatchRule:
    RULES = [
        VisibilityRule(path="en/internal", kind="folder", rule="authenticated"),
        VisibilityRule(path="en/internal/finance", kind="folder", rule="role:finance"),
        VisibilityRule(path="en/internal/finance/summary.md", kind="file", rule="public"),
    ]

    def test_longest_folder_prefix_wins(self):
        assert match_rule("en/internal/finance/q3.md", self.RULES).rule == "role:finance"
        assert match_rule("en/internal/hr.md", self.RULES).rule == "authenticated"

    def test_exact_file_rule_wins(self):
        assert match_rule("en/internal/finance/summary.md", self.RULES).rule == "public"

    def test_no_match(self):
        assert match_rule("en/guides/intro.md", self.RULES) is None


class TestCheckPageVisibility:
    RULES = TestMatchRule.RULES

    def test_public_by_default(self):
        decision = check_page_visibility("en/guides/intro.md", self.RULES, [])
        assert decision.visible
        assert not decision.requires_auth

    def test_default_rule_applies(self):
        decision = check_page_visibility("en/guides/intro.md", [], [], default_rule="authenticated")
        assert not decision.visible
        assert decision.requires_auth

    def test_authenticated_needs_any_role(self):
        assert not check_page_visibility("en/internal/hr.md", self.RULES, []).visible
        assert check_page_visibility("en/internal/hr.md", self.RULES, ["user"]).visible

    def test_role_rule(self):
        denied = check_page_visibility("en/internal/finance/q3.md", self.RULES, ["user"])
        assert not denied.visible
        assert denied.required_role == "finance"

        allowed = check_page_visibility("en/internal/finance/q3.md", self.RULES, ["finance"])
        assert allowed.visible


class TestLoadVisibilityRules:
    def test_load_from_file(self, tmp_path):
        path = tmp_path / "application.properties"
        path.write_text(PROPERTIES, encoding="utf-8")
        policy = load_visibility_rules(path)
        assert policy.check("en/internal/handbook.md").visible
        assert not policy.check("en/internal/finance/q3.md", ["user"]).visible

    def test_missing_file_is_all_public(self, tmp_path):
        policy = load_visibility_rules(tmp_path / "missing.properties")
        assert policy.rules == []
        assert policy.check("en/internal/anything.md").visible
