"""Unit tests for subagent tag extraction."""

import pytest

from relay_router.core.routing.subagent import extract_from_content, extract_subagent_tag
from relay_router.models.messages import TextBlock, ToolResultBlock


class TestExtractSubagentTag:
    """Scanning plain text."""

    def test_leading_tag(self):
        result = extract_subagent_tag("<ROUTE>acme,fast-model</ROUTE>do the thing")
        assert result.found is True
        assert result.provider == "acme"
        assert result.model == "fast-model"
        assert result.remaining_text == "do the thing"

    def test_tag_in_middle_keeps_words_apart(self):
        result = extract_subagent_tag("please <ROUTE>acme,m1</ROUTE> review this")
        assert result.found is True
        assert result.remaining_text == "please review this"

    def test_tag_between_lines_keeps_line_break(self):
        result = extract_subagent_tag("first line\n<ROUTE>acme,m1</ROUTE>\nsecond line")
        assert result.remaining_text == "first line\nsecond line"

    def test_trailing_tag(self):
        result = extract_subagent_tag("summarize this   <ROUTE>acme,m1</ROUTE>  ")
        assert result.remaining_text == "summarize this"

    def test_parts_are_trimmed_and_split_on_first_comma(self):
        result = extract_subagent_tag("<ROUTE> openrouter , anthropic/claude,beta </ROUTE>go")
        assert result.provider == "openrouter"
        assert result.model == "anthropic/claude,beta"

    def test_custom_tag_name(self):
        result = extract_subagent_tag(
            "<CCR-SUBAGENT-MODEL>acme,m1</CCR-SUBAGENT-MODEL>task",
            tag="CCR-SUBAGENT-MODEL",
        )
        assert result.found is True
        assert result.remaining_text == "task"

    def test_every_complete_tag_is_removed(self):
        result = extract_subagent_tag("<ROUTE>a,b</ROUTE>x <ROUTE>c,d</ROUTE> y")
        assert (result.provider, result.model) == ("a", "b")
        assert "<ROUTE>" not in result.remaining_text

    def test_malformed_first_tag_does_not_hide_later_valid_tag(self):
        result = extract_subagent_tag("Use <ROUTE>example</ROUTE> like this <ROUTE>acme,m1</ROUTE> go")
        assert result.found is True
        assert (result.provider, result.model) == ("acme", "m1")
        assert result.remaining_text == "Use <ROUTE>example</ROUTE> like this go"

    def test_malformed_tag_left_when_valid_tag_removed(self):
        once = extract_subagent_tag("<ROUTE>a,b</ROUTE>mention <ROUTE>x</ROUTE>").remaining_text
        assert once == "mention <ROUTE>x</ROUTE>"
        assert extract_subagent_tag(once).found is False

    @pytest.mark.parametrize("text", [
        "<ROUTE>no-comma</ROUTE>do it",
        "<ROUTE>,model</ROUTE>do it",
        "<ROUTE>provider,</ROUTE>do it",
        "<ROUTE> , </ROUTE>do it",
        "<ROUTE>acme,m1 do it",
        "acme,m1</ROUTE> do it",
        "no tag at all",
        "",
    ])
    def test_malformed_leaves_text_untouched(self, text):
        result = extract_subagent_tag(text)
        assert result.found is False
        assert result.remaining_text == text
        assert result.provider is None

    def test_none_text(self):
        result = extract_subagent_tag(None)
        assert result.found is False
        assert result.remaining_text == ""

    @pytest.mark.parametrize("text", [
        "<ROUTE>acme,fast-model</ROUTE>do the thing",
        "a <ROUTE>x,y</ROUTE> b",
        "<ROUTE>bad</ROUTE>",
        "plain",
    ])
    def test_idempotent(self, text):
        once = extract_subagent_tag(text).remaining_text
        twice = extract_subagent_tag(once)
        assert twice.found is False
        assert twice.remaining_text == once


class TestExtractFromContent:
    """Applying the extractor to message content."""

    def test_plain_text_content(self):
        match, content = extract_from_content("<ROUTE>acme,m1</ROUTE>hello")
        assert match.found is True
        assert content == "hello"

    def test_plain_text_without_tag_is_returned_unchanged(self):
        match, content = extract_from_content("hello")
        assert match.found is False
        assert content == "hello"

    def test_first_matching_text_block_wins(self):
        blocks = [
            ToolResultBlock(tool_use_id="t1", content="<ROUTE>x,y</ROUTE>ignored"),
            TextBlock(text="no tag here"),
            TextBlock(text="<ROUTE>acme,m1</ROUTE>first"),
            TextBlock(text="<ROUTE>other,m2</ROUTE>second"),
        ]
        match, content = extract_from_content(blocks)

        assert (match.provider, match.model) == ("acme", "m1")
        assert content[2].text == "first"
        # Only the matching block is rewritten
        assert content[0] is blocks[0]
        assert content[1] is blocks[1]
        assert content[3].text == "<ROUTE>other,m2</ROUTE>second"
        # The input list is not modified
        assert blocks[2].text == "<ROUTE>acme,m1</ROUTE>first"

    def test_blocks_with_null_text_and_absent_entries(self):
        blocks = [None, TextBlock(text=None), TextBlock(text="<ROUTE>a,b</ROUTE>go")]
        match, content = extract_from_content(blocks)
        assert match.found is True
        assert content[2].text == "go"

    def test_absent_content(self):
        match, content = extract_from_content(None)
        assert match.found is False
        assert content is None
