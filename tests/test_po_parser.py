import pytest

from domain.models import message_key
from parsing.errors import FormatError, UnescapeError
from parsing.po_parser import parse, parse_catalog

from conftest import read_po

PETS = (
    'msgid ""\n'
    'msgstr "Plural-Forms: nplurals=2; plural=(n != 1);\\n"\n'
    "\n"
    'msgid "cat"\n'
    'msgid_plural "cats"\n'
    'msgstr[0] "Katze"\n'
    'msgstr[1] "Katzen"'
)


def test_parse_simple_file_structure():
    po = parse(read_po("de"))
    assert po.meta["Language"] == "de"
    assert po.meta["Content-Type"] == "text/plain; charset=UTF-8"
    assert po.plural == "nplurals=2; plural=(n != 1);"
    assert list(po.meta)[0] == "Project-Id-Version"
    assert po.header_comment.splitlines() == [
        "# German translations for the simple test domain.",
        "# This file is distributed under the same license as the package.",
        "#",
    ]
    ids = [(e.context, e.id) for e in po.entries]
    assert ids == [
        (None, "This is a message"),
        (None, "This is another message"),
        ("menu", "open"),
        (None, "open"),
        (None, "This contains … unicode."),
        (None, "A message spread over several lines"),
        (None, "New text"),
    ]


def test_parse_comments_by_type():
    po = parse(read_po("de"))
    first = po.find("This is a message")
    assert first.extracted_comments == ["Shown on the start page"]
    assert first.references == ["src/app.py:12"]
    second = po.find("This is another message")
    assert second.references == ["src/app.py:20 src/app.py:31"]
    assert second.flags == ["python-format"]
    assert po.find("open", context="menu").translator_comments == ["Translator note"]
    fuzzy = po.find("New text")
    assert fuzzy.flags == ["fuzzy"]
    assert fuzzy.previous == ['msgid "Old text"']


def test_parse_plural_and_multiline_strings():
    po = parse(read_po("de"))
    entry = po.find("This is another message")
    assert entry.plural_id == "These are other messages"
    assert entry.forms == ["Dies ist eine andere Nachricht", "Dies sind andere Nachrichten"]
    multi = po.find("A message spread over several lines")
    assert multi.forms == ["Eine Nachricht über\nmehrere Zeilen"]
    assert multi.plural_id is None


def test_obsolete_entries_are_skipped():
    po = parse(read_po("de"))
    assert po.find("Obsolete") is None


def test_empty_context_differs_from_no_context():
    po = parse('msgctxt ""\nmsgid "a"\nmsgstr "x"\n\nmsgid "a"\nmsgstr "y"\n')
    assert [e.context for e in po.entries] == ["", None]
    data = po.to_catalog_data()
    assert data.messages[message_key("", "a")] == ["x"]
    assert data.messages["a"] == ["y"]


def test_consecutive_msgctxt_blocks_are_separate_entries():
    source = 'msgctxt "one"\nmsgid "a"\nmsgstr "1"\nmsgctxt "two"\nmsgid "a"\nmsgstr "2"\n'
    po = parse(source)
    assert [(e.context, e.forms[0]) for e in po.entries] == [("one", "1"), ("two", "2")]


def test_msgid_without_blank_line_starts_new_entry():
    po = parse('msgid "a"\nmsgstr "1"\nmsgid "b"\nmsgstr "2"')
    assert [e.id for e in po.entries] == ["a", "b"]


def test_last_entry_flushed_without_trailing_newline():
    po = parse(PETS)
    assert po.entries[-1].forms == ["Katze", "Katzen"]


def test_whitespace_and_crlf_lines():
    source = '  msgid "a"  \r\n\tmsgstr ""\r\n   "b"\r\n'
    po = parse(source)
    assert po.entries[0].forms == ["b"]


def test_escapes_are_resolved():
    po = parse('msgid "tab\\there"\nmsgstr "quote \\" and \\\\ and \\n"\n')
    entry = po.entries[0]
    assert entry.id == "tab\there"
    assert entry.forms == ['quote " and \\ and \n']


def test_sparse_mode_matches_full_mode():
    source = read_po("de")
    full = parse_catalog(source)
    sparse = parse_catalog(source, sparse=True)
    assert sparse.meta is None
    assert full.meta["Language"] == "de"
    assert sparse.plural == full.plural == "nplurals=2; plural=(n != 1);"
    assert sparse.messages == full.messages
    assert sparse.messages["This is another message"][1] == "Dies sind andere Nachrichten"
    assert sparse.messages["This contains … unicode."][0] == "Das hier enthält … Unicode."


def test_untranslated_entries_left_out_of_catalog():
    data = parse_catalog(read_po("de"))
    assert "New text" not in data.messages
    assert message_key("menu", "open") in data.messages


def test_file_without_comments_parses_in_both_modes():
    source = read_po("de", "sparse")
    assert parse_catalog(source).messages == parse_catalog(source, sparse=True).messages
    assert "This is a message" in parse_catalog(source, sparse=True).messages


def test_empty_input():
    po = parse("")
    assert po.entries == []
    assert po.meta == {}
    assert parse_catalog("   \n\n", sparse=True).messages == {}


def test_header_line_without_value():
    po = parse('msgid ""\nmsgstr "Language-Team:\\nLanguage: fr\\n"\n')
    assert po.meta == {"Language-Team": "", "Language": "fr"}


def _line_of(error: FormatError) -> int:
    assert error.line is not None
    return error.line


@pytest.mark.parametrize(
    "source, line",
    [
        ('msgid "a"\nmsgstr "b"\n#* strange comment\n', 3),
        ('msgid "a"\nmsgfoo "b"\n', 2),
        ('"dangling"\n', 1),
        ('# comment\n"dangling"\n', 2),
        ('msgid "a"\nmsgstr "b"\nwhat is this\n', 3),
        ('msgid[0] "a"\nmsgstr "b"\n', 1),
        ('msgstr "b"\n', 1),
    ],
)
def test_format_errors_cite_line_number(source, line):
    with pytest.raises(FormatError) as info:
        parse(source)
    assert _line_of(info.value) == line


def test_malformed_header_line():
    with pytest.raises(FormatError) as info:
        parse('msgid ""\nmsgstr "no separator here\\n"\n')
    assert info.value.text == "no separator here"


def test_missing_msgstr():
    with pytest.raises(FormatError):
        parse('msgid "a"\n\nmsgid "b"\nmsgstr "c"\n')


def test_duplicate_messages_rejected():
    with pytest.raises(FormatError):
        parse('msgid "a"\nmsgstr "1"\n\nmsgid "a"\nmsgstr "2"\n')


def test_msgctxt_without_msgid():
    with pytest.raises(FormatError):
        parse('msgctxt "x"\n')


def test_unknown_escape_carries_line_number():
    with pytest.raises(UnescapeError) as info:
        parse('msgid "a"\nmsgstr "bad \\z"\n')
    assert info.value.line == 2
    assert info.value.sequence == "\\z"


def test_sparse_mode_still_validates_comments():
    with pytest.raises(FormatError):
        parse_catalog('#? huh\nmsgid "a"\nmsgstr "b"\n', sparse=True)
