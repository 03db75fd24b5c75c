from sf2tf.services.ddl_parsing.scanner import (
    LexState,
    find_balanced_span,
    find_keyword,
    normalize_sql_text,
    scan_regions,
    split_statements,
    strip_comments,
)


def test_semicolon_inside_quotes_does_not_split():
    assert split_statements("SELECT 'a;b'; SELECT \"x;y\";") == ["SELECT 'a;b'", 'SELECT "x;y"']


def test_semicolon_inside_comments_does_not_split():
    statements = split_statements("SELECT 1; -- c;\nSELECT 2 /* ; */;")
    assert statements == ["SELECT 1", "-- c;\nSELECT 2 /* ; */"]


def test_semicolon_inside_dollar_body_does_not_split():
    statements = split_statements("CREATE PROCEDURE p() AS $$ a; b; $$; SELECT 1")
    assert len(statements) == 2
    assert statements[0].endswith("$$")
    assert statements[1] == "SELECT 1"


def test_tagged_dollar_quote_ignores_other_dollar_runs():
    statements = split_statements("AS $body$ x; $$ y; $body$; SELECT 2;")
    assert statements == ["AS $body$ x; $$ y; $body$", "SELECT 2"]


def test_empty_statements_dropped_and_trailing_text_kept():
    assert split_statements(";;  ; SELECT 1; SELECT 2 ") == ["SELECT 1", "SELECT 2"]


def test_unterminated_quote_runs_to_end_of_input():
    assert split_statements("SELECT 'abc; def") == ["SELECT 'abc; def"]


def test_strip_comments_keeps_newline_and_replaces_block_comment():
    assert strip_comments("a -- x\nb /* y */ c") == "a \nb   c"


def test_strip_comments_leaves_quoted_text_alone():
    assert strip_comments("SELECT '--x', $$/* y */$$ -- z") == "SELECT '--x', $$/* y */$$ "


def test_normalize_removes_bom_and_carriage_returns():
    assert normalize_sql_text("\ufeffa\r\nb\rc") == "a\nb\nc"


def test_dollar_glued_to_identifier_is_plain_text():
    regions = scan_regions("a$b$c")
    assert [r.state for r in regions] == [LexState.NORMAL]


def test_find_keyword_skips_quoted_text():
    m = find_keyword("SELECT 'AS' AS x", r"\bAS\b")
    assert m.start() == 12


def test_find_balanced_span_ignores_quoted_parenthesis():
    assert find_balanced_span("f(a, ')', (b))", 1) == (1, 13)


def test_find_balanced_span_returns_none_when_unclosed():
    assert find_balanced_span("f(a, (b)", 1) is None
