"""Tests for the built-in functions, run through complete styles."""

import logging

import pytest

from bstvm import BibEntry, BstVM
from bstvm.errors import BstVMError, StackUnderflowError, TypeMismatchError


def _run(source, entries=(), preamble=None):
    vm = BstVM(source)
    vm.render(entries, preamble=preamble)
    return vm


def _default_entry():
    return BibEntry("InProceedings", "canh05", {
        "author": "Crowston, K. and Annabi, H. and Howison, J. and Masango, C.",
        "title": "Effective work practices for floss development: A model and propositions",
        "booktitle": "Hawaii International Conference On System Sciences (HICSS)",
        "year": "2005",
    })


class TestComparison:
    def test_compare(self):
        vm = _run("""
            FUNCTION { test.compare } {
                #5 #5 =
                #1 #2 =
                #3 #4 <
                #4 #3 <
                #4 #4 <
                #3 #4 >
                #4 #3 >
                #4 #4 >
                "H" "H" =
                "H" "Ha" =
            }
            EXECUTE { test.compare }
        """)
        assert vm.stack == [1, 0, 1, 0, 0, 0, 1, 0, 1, 0]

    def test_compare_mixed_kinds(self):
        with pytest.raises(TypeMismatchError, match="cannot compare"):
            _run('FUNCTION {f} { #1 "1" = } EXECUTE {f}')

    def test_compare_requires_integers(self):
        with pytest.raises(TypeMismatchError):
            _run('FUNCTION {f} { "a" #1 < } EXECUTE {f}')


class TestArithmetic:
    def test_add_subtract(self):
        vm = _run("""
            FUNCTION { test } {
                #1 #1 +
                #5 #2 -
                #2 #5 -
            }
            EXECUTE { test }
        """)
        assert vm.stack == [2, 3, -3]

    def test_add_string_fails(self):
        with pytest.raises(TypeMismatchError) as exc_info:
            _run('FUNCTION {test} { #1 "HELLO" + } EXECUTE {test}')
        assert exc_info.value.function == "+"

    def test_wraps_to_32_bits(self):
        vm = _run("FUNCTION {f} { global.max$ #1 + } EXECUTE {f}")
        assert vm.stack == [-2147483648]

    def test_constants(self):
        vm = _run("FUNCTION {f} { global.max$ entry.max$ } EXECUTE {f}")
        assert vm.stack == [2147483647, 250]


class TestStackFunctions:
    def test_swap(self):
        vm = _run("""
            FUNCTION { a } { #3 "Hallo" swap$ }
            EXECUTE { a }
        """)
        assert vm.stack == ["Hallo", 3]

    def test_duplicate_and_pop(self):
        vm = _run('FUNCTION {f} { "x" duplicate$ #1 #2 pop$ } EXECUTE {f}')
        assert vm.stack == ["x", "x", 1]

    def test_pop_empty_stack(self):
        with pytest.raises(StackUnderflowError) as exc_info:
            _run("FUNCTION {f} { pop$ } EXECUTE {f}")
        assert exc_info.value.function == "pop$"

    def test_top_and_stack_consume(self, caplog):
        with caplog.at_level(logging.INFO, logger="bstvm"):
            vm = _run('FUNCTION {f} { #1 #2 "three" top$ stack$ } EXECUTE {f}')
        assert vm.stack == []
        assert "'three'" in caplog.text


class TestControl:
    def test_simple_if(self):
        vm = _run("""
            FUNCTION { path1 } { #1 }
            FUNCTION { path0 } { #0 }
            FUNCTION { test } {
                #1 path1 path0 if$
                #0 path1 path0 if$
            }
            EXECUTE { test }
        """)
        assert vm.stack == [1, 0]

    def test_if_with_references(self):
        vm = _run("""
            FUNCTION { yes } { "yes" }
            FUNCTION { no } { "no" }
            FUNCTION { test } { #7 'yes 'no if$ #0 'yes 'no if$ }
            EXECUTE { test }
        """)
        assert vm.stack == ["yes", "no"]

    def test_simple_while(self):
        vm = _run("""
            INTEGERS { i }
            FUNCTION { test } {
                #3 'i :=
                { i #0 > }
                {
                    i
                    i #1 - 'i :=
                }
                while$
            }
            EXECUTE { test }
        """)
        assert vm.stack == [3, 2, 1]

    def test_while_never_runs(self):
        vm = _run("FUNCTION {f} { { #0 } { \"body\" } while$ } EXECUTE {f}")
        assert vm.stack == []

    def test_logic(self):
        vm = _run("""
            FUNCTION { not } { { #0 } { #1 } if$ }
            FUNCTION { and } { 'skip$ { pop$ #0 } if$ }
            FUNCTION { or } { { pop$ #1 } 'skip$ if$ }
            FUNCTION { test } {
                #1 #1 and
                #0 #1 and
                #1 #0 and
                #0 #0 and
                #0 not
                #1 not
                #1 #1 or
                #0 #1 or
                #1 #0 or
                #0 #0 or
            }
            EXECUTE { test }
        """)
        assert vm.stack == [1, 0, 0, 0, 1, 0, 1, 1, 1, 0]

    def test_nested_control_functions(self):
        vm = _run("""
            STRINGS { t }
            FUNCTION { not } { { #0 } { #1 } if$ }
            FUNCTION { n.dashify } {
                "HELLO-WORLD" 't :=
                ""
                { t empty$ not }
                {
                    t #1 #1 substring$ "-" =
                    {
                        t #1 #2 substring$ "--" = not
                        {
                            "--" *
                            t #2 global.max$ substring$ 't :=
                        }
                        {
                            { t #1 #1 substring$ "-" = }
                            {
                                "-" *
                                t #2 global.max$ substring$ 't :=
                            }
                            while$
                        }
                        if$
                    }
                    {
                        t #1 #1 substring$ *
                        t #2 global.max$ substring$ 't :=
                    }
                    if$
                }
                while$
            }
            EXECUTE { n.dashify }
        """)
        assert vm.stack == ["HELLO--WORLD"]

    def test_skip(self):
        vm = _run("FUNCTION {f} { #1 skip$ } EXECUTE {f}")
        assert vm.stack == [1]


class TestAssignment:
    def test_assign_function(self):
        vm = _run("""
            INTEGERS { test.var }
            FUNCTION { test.func } { #1 'test.var := }
            EXECUTE { test.func }
        """)
        ctx = vm.latest_context
        assert "test.func" in ctx.functions
        assert ctx.integers["test.var"] == 1

    def test_assign_and_read_string(self):
        vm = _run("""
            STRINGS { s }
            FUNCTION { f } { "value" 's := s }
            EXECUTE { f }
        """)
        assert vm.stack == ["value"]

    def test_assign_wrong_kind(self):
        with pytest.raises(TypeMismatchError, match="integer variable"):
            _run("""
                INTEGERS { i }
                FUNCTION { f } { "text" 'i := }
                EXECUTE { f }
            """)

    def test_assign_to_function(self):
        with pytest.raises(TypeMismatchError, match="cannot assign"):
            _run("""
                FUNCTION { g } { }
                FUNCTION { f } { #1 'g := }
                EXECUTE { f }
            """)

    def test_assign_needs_reference(self):
        with pytest.raises(TypeMismatchError, match="function reference"):
            _run('STRINGS { s } FUNCTION { f } { "a" "s" := } EXECUTE { f }')

    def test_string_variables_start_missing(self):
        vm = _run("STRINGS { s } FUNCTION { f } { s missing$ s empty$ } EXECUTE { f }")
        assert vm.stack == [1, 1]


class TestStringFunctions:
    def test_concat_and_add_period(self):
        vm = _run("""
            FUNCTION { test } {
                "H" "ello" *
                "Johnny" add.period$
                "Johnny." add.period$
                "Johnny!" add.period$
                "Johnny?" add.period$
                "Johnny} }}}" add.period$
                "Johnny!}" add.period$
                "Johnny?}" add.period$
                "Johnny.}" add.period$
            }
            EXECUTE { test }
        """)
        assert vm.stack == [
            "Hello", "Johnny.", "Johnny.", "Johnny!", "Johnny?",
            "Johnny.}", "Johnny!}", "Johnny?}", "Johnny.}",
        ]

    def test_substring(self):
        vm = _run("""
            FUNCTION { test } {
                "123456789" #2 #1 substring$
                "123456789" #4 global.max$ substring$
                "123456789" #1 #9 substring$
                "123456789" #1 #10 substring$
                "123456789" #1 #99 substring$
                "123456789" #-7 #3 substring$
                "123456789" #-1 #1 substring$
                "123456789" #-1 #3 substring$
                "123456789" #-1 #-1 substring$
            }
            EXECUTE { test }
        """)
        assert vm.stack == [
            "2", "456789", "123456789", "123456789", "123456789",
            "123", "9", "789", "",
        ]

    def test_empty(self):
        vm = _run("""
            ENTRY { title } { } { }
            READ
            STRINGS { s }
            FUNCTION { test } {
                s empty$
                "" empty$
                "   " empty$
                "  a  " empty$
            }
            EXECUTE { test }
        """, [BibEntry("article", "test")])
        assert vm.stack == [1, 1, 1, 0]

    def test_empty_integer_fails(self):
        with pytest.raises(TypeMismatchError):
            _run("FUNCTION {f} { #1 empty$ } EXECUTE {f}")

    def test_text_length(self):
        vm = _run(r"""
            FUNCTION { test } {
                "hello world" text.length$
                "Hello {W}orld" text.length$
                "" text.length$
                "{A}{D}/{Cycle}" text.length$
                "{\This is one character}" text.length$
                "{\This {is} {one} {c{h}}aracter as well}" text.length$
                "{\And this too" text.length$
                "These are {\11}" text.length$
            }
            EXECUTE { test }
        """)
        assert vm.stack == [11, 11, 0, 8, 1, 1, 1, 11]

    def test_text_prefix(self):
        vm = _run(r"""
            FUNCTION { test } {
                "hello world" #5 text.prefix$
                "{\'e}t{\'e}" #2 text.prefix$
                "{A}{D}/{Cycle}" #4 text.prefix$
            }
            EXECUTE { test }
        """)
        assert vm.stack == ["hello", "{\\'e}t", "{A}{D}/{C}"]

    def test_int_to_str(self):
        vm = _run("FUNCTION {test} { #3 int.to.str$ #9999 int.to.str$ #-5 int.to.str$ } EXECUTE {test}")
        assert vm.stack == ["3", "9999", "-5"]

    def test_chr_to_int(self):
        vm = _run('FUNCTION {test} { "H" chr.to.int$ } EXECUTE {test}')
        assert vm.stack == [72]

    def test_chr_to_int_round_trip(self):
        vm = _run('FUNCTION {test} { "H" chr.to.int$ int.to.chr$ } EXECUTE {test}')
        assert vm.stack == ["H"]

    def test_chr_to_int_needs_one_character(self):
        with pytest.raises(BstVMError, match="single character"):
            _run('FUNCTION {test} { "ab" chr.to.int$ } EXECUTE {test}')

    def test_change_case(self):
        vm = _run("""
            STRINGS { title }
            READ
            FUNCTION { format.title } {
                duplicate$ empty$
                { pop$ "" }
                { "t" change.case$ }
                if$
            }
            FUNCTION { test } {
                "hello world" "u" change.case$
                "Hello World" "t" change.case$
                "Hello World" "l" change.case$
                "In the {Big Apple}" format.title
            }
            EXECUTE { test }
        """)
        assert vm.stack == ["HELLO WORLD", "Hello world", "hello world", "In the {Big Apple}"]

    def test_change_case_illegal_mode(self, caplog):
        vm = _run('FUNCTION {test} { "Text" "x" change.case$ } EXECUTE {test}')
        assert vm.stack == ["Text"]
        assert "illegal case-conversion" in caplog.text

    def test_purify(self):
        vm = _run(r"""
            FUNCTION { test } {
                "i" purify$
                "0I~ " purify$
                "Hello World!" purify$
                "{\'E}cole" purify$
            }
            EXECUTE { test }
        """)
        assert vm.stack == ["i", "0I  ", "Hello World", "Ecole"]

    def test_width(self):
        vm = _run('FUNCTION {test} { "ABC" width$ "" width$ } EXECUTE {test}')
        assert vm.stack == [2180, 0]

    def test_quote(self):
        vm = _run("FUNCTION {test} { quote$ } EXECUTE {test}")
        assert vm.stack == ['"']


class TestNameFunctions:
    def test_num_names(self):
        vm = _run("""
            FUNCTION { test } {
                "Johnny Foo and Mary Bar" num.names$
                "Johnny Foo and Mary Bar and Bob Baz" num.names$
                "Johnny Foo" num.names$
            }
            EXECUTE { test }
        """)
        assert vm.stack == [2, 3, 1]

    def test_format_name_static(self):
        vm = _run("""
            FUNCTION { format } {
                "Charles Louis Xavier Joseph de la Vall{\\'e}e Poussin" #1 "{vv~}{ll}{, jj}{, f}?" format.name$
            }
            EXECUTE { format }
        """)
        assert vm.stack == ["de~la Vall{\\'e}e~Poussin, C.~L. X.~J?"]

    def test_format_name_unicode(self):
        vm = _run("""
            FUNCTION { format } {
                "Charles Louis Xavier Joseph de la Vallée Poussin" #1 "{vv~}{ll}{, jj}{, f}?" format.name$
            }
            EXECUTE { format }
        """)
        assert vm.stack == ["de~la Vallée~Poussin, C.~L. X.~J?"]

    def test_format_name_in_entries(self):
        vm = _run("""
            ENTRY { author } { } { }
            FUNCTION { presort } { cite$ 'sort.key$ := }
            ITERATE { presort }
            READ
            SORT
            FUNCTION { format } { author #2 "{vv~}{ll}{, jj}{, f}?" format.name$ }
            ITERATE { format }
        """, [
            _default_entry(),
            BibEntry("book", "test").with_field("author", "Jonathan Meyer and Charles Louis Xavier Joseph de la Vall{\\'e}e Poussin"),
        ])
        assert vm.stack == ["Annabi, H?", "de~la Vall{\\'e}e~Poussin, C.~L. X.~J?"]

    def test_format_name_index_out_of_range(self):
        with pytest.raises(BstVMError, match="no name 3"):
            _run('FUNCTION {f} { "A and B" #3 "{ll}" format.name$ } EXECUTE {f}')


class TestEntryFunctions:
    def test_missing(self):
        vm = _run("""
            ENTRY { title } { } { }
            FUNCTION { presort } { cite$ 'sort.key$ := }
            ITERATE { presort }
            READ
            SORT
            FUNCTION { test } { title missing$ cite$ }
            ITERATE { test }
        """, [_default_entry(), BibEntry("article", "test")])
        assert vm.stack == [0, "canh05", 1, "test"]

    def test_missing_is_not_empty_text(self):
        vm = _run("""
            ENTRY { note } { } { }
            READ
            FUNCTION { test } { note missing$ note empty$ }
            ITERATE { test }
        """, [BibEntry("misc", "a", {"note": "   "})])
        assert vm.stack == [0, 1]

    def test_type(self):
        vm = _run("""
            ENTRY { } { } { }
            FUNCTION { presort } { cite$ 'sort.key$ := }
            ITERATE { presort }
            SORT
            FUNCTION { test } { type$ }
            ITERATE { test }
        """, [
            BibEntry("article", "a"),
            BibEntry("book", "b"),
            BibEntry("misc", "c"),
            BibEntry("InProceedings", "d"),
        ])
        assert vm.stack == ["article", "book", "misc", "inproceedings"]

    def test_call_type(self):
        vm = _run("""
            ENTRY { title } { } { }
            FUNCTION { inproceedings } { "InProceedings called on " title * }
            FUNCTION { default.type } { "Default called on " title * }
            READ
            ITERATE { call.type$ }
        """, [_default_entry(), BibEntry("book", "test").with_field("title", "Test")])
        assert vm.stack == [
            "InProceedings called on Effective work practices for floss development: A model and propositions",
            "Default called on Test",
        ]

    def test_field_value_is_text(self):
        vm = _run("""
            ENTRY { year } { } { }
            READ
            FUNCTION { test } { year }
            ITERATE { test }
        """, [_default_entry()])
        assert vm.stack == ["2005"]

    def test_field_names_case_insensitive(self):
        vm = _run("""
            ENTRY { Title } { } { }
            READ
            FUNCTION { test } { Title }
            ITERATE { test }
        """, [BibEntry("misc", "a", {"TITLE": "Upper"})])
        assert vm.stack == ["Upper"]

    def test_entry_variables(self):
        vm = _run("""
            ENTRY { } { count } { label }
            INTEGERS { n }
            FUNCTION { number } {
                n #1 + 'n :=
                n 'count :=
                n int.to.str$ 'label :=
            }
            FUNCTION { show } { count label }
            ITERATE { number }
            ITERATE { show }
        """, [BibEntry("misc", "a"), BibEntry("misc", "b")])
        assert vm.stack == [1, "1", 2, "2"]

    def test_entry_variable_initial_values(self):
        vm = _run("""
            ENTRY { } { count } { label }
            FUNCTION { show } { count label missing$ }
            ITERATE { show }
        """, [BibEntry("misc", "a")])
        assert vm.stack == [0, 1]

    def test_width_of_labels(self):
        vm = _run(r"""
            ENTRY { address author title type } { } { label }
            STRINGS { longest.label }
            INTEGERS { number.label longest.label.width }
            FUNCTION { initialize.longest.label } {
                "" 'longest.label :=
                #1 'number.label :=
                #0 'longest.label.width :=
            }
            FUNCTION { longest.label.pass } {
                number.label int.to.str$ 'label :=
                number.label #1 + 'number.label :=
                label width$ longest.label.width >
                {
                    label 'longest.label :=
                    label width$ 'longest.label.width :=
                }
                'skip$
                if$
            }
            EXECUTE { initialize.longest.label }
            ITERATE { longest.label.pass }
            FUNCTION { begin.bib } {
                preamble$ empty$
                'skip$
                { preamble$ write$ newline$ }
                if$
                "\begin{thebibliography}{" longest.label * "}" *
            }
            EXECUTE { begin.bib }
        """, [_default_entry()])
        ctx = vm.latest_context
        assert ctx.integers["longest.label.width"] == 500
        assert vm.stack == ["\\begin{thebibliography}{1}"]


class TestOutput:
    def test_preamble_write_newline_quote(self):
        vm = _run("""
            FUNCTION { test } {
                preamble$
                write$
                newline$
                "hello"
                write$
                quote$ "quoted" * quote$ *
                write$
            }
            EXECUTE { test }
        """, preamble="A Preamble")
        assert vm.latest_context.output == 'A Preamble\nhello"quoted"'

    def test_preamble_absent(self):
        vm = _run("FUNCTION {f} { preamble$ } EXECUTE {f}")
        assert vm.stack == [""]

    def test_write_needs_text(self):
        with pytest.raises(TypeMismatchError):
            _run("FUNCTION {f} { #1 write$ } EXECUTE {f}")

    def test_warning(self, caplog):
        vm = _run('FUNCTION {f} { "careful" warning$ } EXECUTE {f}')
        assert vm.latest_context.warnings == 1
        assert "Warning--careful" in caplog.text

    def test_warning_on_missing_field(self, caplog):
        vm = _run("""
            ENTRY { title } { } { }
            READ
            FUNCTION { f } { title warning$ }
            ITERATE { f }
        """, [BibEntry("misc", "a")])
        assert vm.latest_context.warnings == 1

    def test_missing_value_not_writable(self):
        with pytest.raises(TypeMismatchError, match="missing"):
            _run("STRINGS { s } FUNCTION {f} { s write$ } EXECUTE {f}")

    def test_fields_are_unchanged(self):
        entry = _default_entry()
        _run("""
            ENTRY { title } { } { }
            READ
            FUNCTION { f } { title "u" change.case$ pop$ }
            ITERATE { f }
        """, [entry])
        assert entry.get("title").startswith("Effective")
