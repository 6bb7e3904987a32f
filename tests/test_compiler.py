"""Tests for hear/respond pattern compilation."""

import re

import pytest

from core.config import ConfigError
from core.types import BotIdentity
from responders.compiler import (
    PatternCompileError,
    compile_hear,
    compile_respond,
    mention_prefix,
)


class TestCompileHear:
    def test_string_pattern_matches_anywhere(self):
        pattern = compile_hear("ping")
        assert pattern.search("well ping there")

    def test_compiled_pattern_is_returned_unchanged(self):
        original = re.compile(r"hello", re.IGNORECASE)
        assert compile_hear(original) is original

    def test_pcre_named_group_is_accepted(self):
        pattern = compile_hear(r"i like (?<subject>\w+)")
        assert pattern.groupindex == {"subject": 1}
        assert pattern.search("i like pizza").group("subject") == "pizza"

    def test_lookbehind_is_left_alone(self):
        assert compile_hear(r"(?<=a)b").search("ab").group(0) == "b"
        assert compile_hear(r"(?<!a)b").search("ab") is None

    def test_escaped_paren_is_left_alone(self):
        pattern = compile_hear(r"\(?<x")
        assert pattern.search("<x")

    def test_malformed_pattern_raises(self):
        with pytest.raises(PatternCompileError):
            compile_hear("(unclosed")

    def test_non_pattern_raises(self):
        with pytest.raises(PatternCompileError):
            compile_hear(42)

    def test_bytes_pattern_raises(self):
        with pytest.raises(PatternCompileError):
            compile_hear(re.compile(b"ping"))


class TestCompileRespond:
    def test_name_separators(self):
        pattern = compile_respond("hello", BotIdentity("bob"))
        assert pattern.search("bob: hello")
        assert pattern.search("@bob hello")
        assert pattern.search("bob, hello")
        assert pattern.search("   bob hello")

    def test_requires_boundary_after_name(self):
        pattern = compile_respond("hello", BotIdentity("bob"))
        assert pattern.search("bobhello") is None

    def test_requires_name_at_start(self):
        pattern = compile_respond("hello", BotIdentity("bob"))
        assert pattern.search("hello") is None
        assert pattern.search("hey bob hello") is None

    def test_alias_consumed_entirely(self):
        pattern = compile_respond("hi", BotIdentity("al", "alice"))
        match = pattern.search("alice: hi")
        assert match is not None
        assert match.group(0) == "alice: hi"
        assert pattern.search("al: hi")

    def test_longer_name_tried_first(self):
        expected = r"\A\s*@?(?:alice[:,]?|al[:,]?)\s+"
        assert mention_prefix(BotIdentity("al", "alice")) == expected
        assert mention_prefix(BotIdentity("alice", "al")) == expected

    def test_name_is_matched_literally(self):
        pattern = compile_respond("hi", BotIdentity("r2.d2"))
        assert pattern.search("r2.d2 hi")
        assert pattern.search("r2xd2 hi") is None

    def test_inner_alternation_is_grouped(self):
        pattern = compile_respond("hi|hello", BotIdentity("bob"))
        assert pattern.search("hello") is None
        assert pattern.search("bob hello")

    def test_flags_are_preserved(self):
        pattern = compile_respond(re.compile("hello", re.IGNORECASE), BotIdentity("bob"))
        assert pattern.flags & re.IGNORECASE
        assert pattern.search("BOB: Hello")

    def test_leading_inline_flags_are_hoisted(self):
        pattern = compile_respond("(?i)hello", BotIdentity("bob"))
        assert pattern.search("Bob HELLO")

    def test_named_groups_survive_rewrite(self):
        pattern = compile_respond(r"deploy (?<app>\w+)", BotIdentity("zen"))
        assert pattern.search("zen deploy api").groupdict() == {"app": "api"}

    def test_missing_identity_is_configuration_error(self):
        with pytest.raises(ConfigError):
            compile_respond("status", None)

    def test_malformed_pattern_raises(self):
        with pytest.raises(PatternCompileError):
            compile_respond("[", BotIdentity("bob"))

    def test_multiline_flag_keeps_prefix_at_message_start(self):
        pattern = compile_respond(re.compile("status", re.MULTILINE), BotIdentity("zen"))
        assert pattern.search("hello\nzen status") is None
        assert pattern.search("zen status")

    def test_inline_multiline_flag_keeps_prefix_at_message_start(self):
        pattern = compile_respond("(?m)status$", BotIdentity("zen"))
        assert pattern.search("hello\nzen status") is None
        assert pattern.search("zen status\nmore")


class TestBotIdentity:
    def test_empty_name_rejected(self):
        with pytest.raises(ConfigError):
            BotIdentity("  ")

    def test_empty_alias_rejected(self):
        with pytest.raises(ConfigError):
            BotIdentity("zen", "")

    def test_surrounding_whitespace_stripped(self):
        identity = BotIdentity(" zen ", " z ")
        assert identity == BotIdentity("zen", "z")
        assert compile_respond("status", identity).search("zen status")

    def test_is_hashable(self):
        assert hash(BotIdentity("zen", "z")) == hash(BotIdentity("zen", "z"))


class TestVerbosePatterns:
    def test_trailing_comment_does_not_swallow_group(self):
        pattern = compile_respond(re.compile(r"deploy \s (\w+)  # target app", re.VERBOSE), BotIdentity("zen"))
        assert pattern.search("zen deploy api").group(1) == "api"
