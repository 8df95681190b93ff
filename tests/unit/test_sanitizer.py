"""Unit tests for transient markup stripping."""

import pytest

from focuspad.services.sanitizer import strip_transient_markup


class TestStripTransientMarkup:
    """Tests for strip_transient_markup."""

    def test_search_highlight_unwrapped(self):
        """Test that highlight wrappers are replaced by their text."""
        content = '<p>find <mark class="search-highlight">me</mark> here</p>'

        assert strip_transient_markup(content) == "<p>find me here</p>"

    def test_highlight_variants(self):
        """Test highlight classes with suffixes and mixed case tags."""
        content = (
            '<MARK class="search-highlight active" data-i="1">a</MARK>'
            '<mark class="search-highlight-current">b</mark>'
        )

        assert strip_transient_markup(content) == "ab"

    def test_focus_class_removed(self):
        """Test that focus-mode dimming is dropped."""
        content = '<p class="focused-block">x</p><h1 class="focused-block">y</h1>'

        assert strip_transient_markup(content) == "<p >x</p><h1 >y</h1>"

    def test_both(self):
        """Test content carrying both kinds of markup."""
        content = '<p class="focused-block"><mark class="search-highlight">X</mark></p>'

        assert strip_transient_markup(content) == "<p >X</p>"

    @pytest.mark.parametrize(
        "content",
        [
            "",
            "plain text",
            "<p>Hello <b>world</b></p>",
            '<mark class="user-mark">kept</mark>',
            '<p class="focused">kept</p>',
        ],
    )
    def test_plain_content_is_fixed_point(self, content):
        """Test that content without transient markup is unchanged."""
        assert strip_transient_markup(content) == content

    def test_idempotent(self):
        """Test that stripping twice equals stripping once."""
        content = '<p class="focused-block">a <mark class="search-highlight">b</mark></p>'

        once = strip_transient_markup(content)

        assert strip_transient_markup(once) == once
