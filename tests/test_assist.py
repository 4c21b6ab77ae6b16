#!/usr/bin/env python3
"""
Tests for code completion.
"""

from prompt_toolkit.document import Document

from vibecoder.assist import (
    MAX_SUGGESTIONS,
    CodeAssistCompleter,
    accept,
    candidate_pool,
    current_prefix,
    suggest,
)


class TestPrefix:

    def test_trailing_identifier(self):
        """The identifier ending at the caret is the prefix"""
        assert current_prefix('x = scre', 8) == 'scre'

    def test_caret_in_middle(self):
        """Only the text before the caret counts"""
        assert current_prefix('screen.fill', 3) == 'scr'

    def test_no_identifier(self):
        """Punctuation before the caret gives an empty prefix"""
        assert current_prefix('x = (', 5) == ''

    def test_leading_digit_skipped(self):
        """An identifier cannot start with a digit"""
        assert current_prefix('9abc', 4) == 'abc'


class TestSuggest:

    def test_keyword_match(self):
        """Static keywords complete a prefix"""
        assert suggest('scre', 4) == ['screen']

    def test_exact_match_excluded(self):
        """A word already typed in full is not suggested again"""
        assert 'screen' not in suggest('screen', 6)

    def test_assigned_names_included(self):
        """Names the kid assigned are offered too"""
        buffer = "hero_color = (0, 0, 255)\nhe"
        assert suggest(buffer, len(buffer)) == ['hero_color']

    def test_keywords_before_user_names(self):
        """Keywords come first and names are not repeated"""
        pool = candidate_pool("player = 1\nprint_me = 2")
        assert pool.index('print') < pool.index('print_me')
        assert pool.count('player') == 1

    def test_capped(self):
        """Never more than MAX_SUGGESTIONS suggestions"""
        buffer = "\n".join(f"item{i} = {i}" for i in range(10)) + "\nitem"
        assert len(suggest(buffer, len(buffer))) == MAX_SUGGESTIONS

    def test_empty_prefix_suggests_nothing(self):
        """No identifier at the caret means no suggestions"""
        assert suggest('x = ', 4) == []


class TestAccept:

    def test_replaces_prefix(self):
        """Accepting swaps the prefix for the candidate"""
        buffer, caret = accept('x = scre', 8, 'screen')
        assert buffer == 'x = screen'
        assert caret == 10

    def test_keeps_text_after_caret(self):
        """Text after the caret survives an accept"""
        buffer, caret = accept('pygame.dr.circle', 9, 'draw')
        assert buffer == 'pygame.draw.circle'
        assert caret == 11


class TestCompleter:

    def test_yields_completions_replacing_prefix(self):
        """Completions replace the typed prefix"""
        completions = list(CodeAssistCompleter().get_completions(Document('scre', 4), None))

        assert [c.text for c in completions] == ['screen']
        assert completions[0].start_position == -4
