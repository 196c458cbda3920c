"""Tests for the text algorithms behind the string built-ins."""

import pytest

from bstvm.text import (
    add_period,
    change_case,
    purify,
    substring,
    text_length,
    text_prefix,
    width,
)


class TestChangeCase:
    def test_upper(self):
        assert change_case("hello world", "u") == "HELLO WORLD"

    def test_lower(self):
        assert change_case("HELLO World", "l") == "hello world"

    def test_mode_is_case_insensitive(self):
        assert change_case("abc", "U") == "ABC"

    def test_title_keeps_first_character(self):
        assert change_case("The Art Of Programming", "t") == "The art of programming"

    def test_title_after_colon(self):
        assert change_case("Title: Subtitle Here", "t") == "Title: Subtitle here"

    def test_braced_group_preserved(self):
        assert change_case("The {TeX} Book", "t") == "The {TeX} book"
        assert change_case("The {TeX} Book", "u") == "THE {TeX} BOOK"

    def test_special_character_untouched(self):
        assert change_case("caf{\\'e}", "u") == "CAF{\\'e}"
        assert change_case("{\\'E}cole", "l") == "{\\'E}cole"
        assert change_case("{\\ae}sop {\\OE}uvre", "u") == "{\\ae}SOP {\\OE}UVRE"

    def test_title_keeps_leading_special_character(self):
        assert change_case("{\\'E}cole Normale", "t") == "{\\'E}cole normale"

    def test_upper_then_title_restores_protected_text(self):
        text = "{A}{D}/{C}ycle: {I}{B}{M}'s {F}ramework for {A}pplication {D}evelopment and {C}ase"
        assert change_case(change_case(text, "u"), "t") == text

    def test_title_idempotent(self):
        once = change_case("A Study Of {RNA}: Methods", "t")
        assert once == "A study of {RNA}: Methods"
        assert change_case(once, "t") == once

    def test_illegal_mode(self):
        with pytest.raises(ValueError, match="Illegal"):
            change_case("text", "q")


class TestTextLength:
    def test_plain(self):
        assert text_length("hello") == 5
        assert text_length("") == 0

    def test_braces_not_counted(self):
        assert text_length("{ABC}de") == 5

    def test_special_character_counts_once(self):
        assert text_length("{\\'e}t{\\'e}") == 3


class TestTextPrefix:
    def test_plain(self):
        assert text_prefix("hello", 3) == "hel"

    def test_longer_than_text(self):
        assert text_prefix("hi", 10) == "hi"

    def test_closes_open_groups(self):
        assert text_prefix("{A}{D}/{Cycle}", 4) == "{A}{D}/{C}"

    def test_special_character_whole(self):
        assert text_prefix("{\\'e}t{\\'e}", 2) == "{\\'e}t"


class TestAddPeriod:
    def test_adds_period(self):
        assert add_period("Hello") == "Hello."

    def test_existing_punctuation(self):
        assert add_period("Hello.") == "Hello."
        assert add_period("Hello!") == "Hello!"
        assert add_period("Hello?") == "Hello?"

    def test_inside_closing_braces(self):
        assert add_period("{Hello}") == "{Hello.}"
        assert add_period("{Hello.}") == "{Hello.}"

    def test_trailing_whitespace_and_braces(self):
        assert add_period("Johnny} }}}") == "Johnny.}"

    def test_empty(self):
        assert add_period("") == ""


class TestSubstring:
    def test_from_start(self):
        assert substring("123456789", 1, 3) == "123"
        assert substring("123456789", 2, 1) == "2"

    def test_length_past_end(self):
        assert substring("123456789", 7, 10) == "789"

    def test_negative_start(self):
        assert substring("123456789", -1, 1) == "9"
        assert substring("123456789", -1, 2) == "89"
        assert substring("123456789", -2, 2) == "78"

    def test_negative_start_past_beginning(self):
        assert substring("123456789", -9, 5) == "1"

    def test_invalid(self):
        assert substring("abcd", -5, 2) == ""
        assert substring("123456789", 0, 3) == ""
        assert substring("123456789", 10, 3) == ""
        assert substring("123456789", 1, 0) == ""
        assert substring("", 1, 1) == ""


class TestPurify:
    def test_plain(self):
        assert purify("Hello, World!") == "Hello World"

    def test_hyphen_and_tie_become_spaces(self):
        assert purify("Jean-Paul~Sartre") == "Jean Paul Sartre"

    def test_accents(self):
        assert purify("{\\'E}cole d'{\\'e}t{\\'e}") == "Ecole dete"

    def test_foreign_letters_kept(self):
        assert purify("{\\ss}") == "ss"
        assert purify("{\\AE}sop") == "AEsop"

    def test_other_commands_dropped(self):
        assert purify("The {\\TeX}book") == "The book"

    def test_plain_braces(self):
        assert purify("{ABC} 123") == "ABC 123"


class TestWidth:
    def test_plain(self):
        assert width("hello") == 2056
        assert width("ABC") == 2180

    def test_digit(self):
        assert width("1") == 500

    def test_named_special_characters(self):
        assert width("{\\ss}") == 500
        assert width("{\\AE}") == 903

    def test_accented_letter(self):
        assert width("{\\'e}") == 444

    def test_empty(self):
        assert width("") == 0
