from __future__ import annotations

from gladest.core.models import FormulaMode
from gladest.core.scanner import find_placeholders, placeholder_token, resolve_mode, scan


def _restore(document: str, originals: dict[str, str]) -> str:
    for token, markup in originals.items():
        document = document.replace(token, markup)
    return document


def test_scan_assigns_distinct_placeholders_in_document_order() -> None:
    html = '<p><eq env="math">a</eq> <eq env="math">b</eq> <eq env="displaymath">c</eq></p>'

    document, tasks = scan(html)

    assert [task.formula_text for task in tasks] == ["a", "b", "c"]
    assert [task.task_index for task in tasks] == [0, 1, 2]
    assert len({task.placeholder_id for task in tasks}) == 3
    assert find_placeholders(document) == [task.placeholder_id for task in tasks]
    for task in tasks:
        assert document.count(task.placeholder_id) == 1


def test_scan_preserves_surrounding_markup_byte_for_byte() -> None:
    pieces = [
        '<!DOCTYPE html>\n<html><head><meta charset="utf-8"></head>\n<body>\r\n',
        "<p class='x'>Let &nbsp; ",
        '<eq env="math">x^2</eq>',
        " be <b>bold</b>\n\n",
        '<EQ env="displaymath">\n  sum_(i=1)^n i\n</EQ>',
        "<!-- comment <eq>not a formula</eq> -->\n<br>\n</body></html>",
    ]
    html = "".join(pieces)

    result = scan(html)

    assert len(result.tasks) == 2
    restored = _restore(
        result.document,
        {
            result.tasks[0].placeholder_id: pieces[2],
            result.tasks[1].placeholder_id: pieces[4],
        },
    )
    assert restored == html


def test_scan_reads_modes_and_warns_on_unknown_values(emitter) -> None:
    html = (
        '<eq env="math">a</eq><eq env="displaymath">b</eq>'
        '<eq>c</eq><eq env="">d</eq><eq env="equation">e</eq>'
    )

    result = scan(html, emitter=emitter)

    assert [task.mode for task in result.tasks] == [
        FormulaMode.INLINE,
        FormulaMode.DISPLAY,
        FormulaMode.UNSPECIFIED,
        FormulaMode.UNSPECIFIED,
        FormulaMode.INLINE,
    ]
    assert len(result.warnings) == 1
    assert "equation" in result.warnings[0]
    assert emitter.warnings == result.warnings


def test_scan_without_formulas_returns_document_unchanged() -> None:
    html = "<p>No math here &amp; nothing to do.</p>\n"

    result = scan(html)

    assert result.document == html
    assert result.tasks == []


def test_scan_decodes_entities_in_formula_text() -> None:
    document, tasks = scan('<eq env="math">a &lt; b &amp;&amp; c</eq>')

    assert tasks[0].formula_text == "a < b && c"
    assert find_placeholders(document) == [tasks[0].placeholder_id]


def test_scan_handles_quoted_angle_brackets_in_attributes() -> None:
    html = '<eq env="math" data-note="a>b">z</eq><span>tail</span>'

    result = scan(html)

    assert result.tasks[0].formula_text == "z"
    assert result.document.endswith("<span>tail</span>")
    assert result.document == result.tasks[0].placeholder_id + "<span>tail</span>"


def test_scan_treats_nested_formula_elements_as_one_formula() -> None:
    html = "<div><eq>outer <eq>inner</eq> tail</eq></div>"

    result = scan(html)

    assert len(result.tasks) == 1
    assert result.tasks[0].formula_text == "outer inner tail"
    assert result.document == f"<div>{result.tasks[0].placeholder_id}</div>"


def test_scan_honours_custom_tag_and_mode_attribute() -> None:
    html = '<p><tex kind="displaymath">y</tex><eq env="math">ignored</eq></p>'

    result = scan(html, tag="tex", mode_attribute="kind")

    assert len(result.tasks) == 1
    assert result.tasks[0].mode is FormulaMode.DISPLAY
    assert '<eq env="math">ignored</eq>' in result.document


def test_placeholder_tokens_do_not_collide_with_document_text() -> None:
    html = '<eq env="math">q</eq>'
    first, _ = scan(html)
    second, _ = scan(html)

    token = find_placeholders(first)[0]
    assert token not in html
    assert find_placeholders(second)
    assert placeholder_token("abc", 3) != placeholder_token("abc", 4)


def test_resolve_mode_accepts_surrounding_whitespace(emitter) -> None:
    mode, warning = resolve_mode("  displaymath ", task_index=0, emitter=emitter)

    assert mode is FormulaMode.DISPLAY
    assert warning is None
    assert emitter.warnings == []


def test_scan_ignores_closing_tags_inside_comments() -> None:
    html = "<p><eq>a <!-- see </eq> below --> b</eq> after</p><div><eq>c<!-- <eq> --></eq></div>"

    result = scan(html)

    assert [task.formula_text for task in result.tasks] == ["a  b", "c"]
    first, second = (task.placeholder_id for task in result.tasks)
    assert result.document == f"<p>{first} after</p><div>{second}</div>"


def test_scan_reads_mode_from_multi_valued_attribute() -> None:
    result = scan('<eq class="displaymath">x</eq><eq class="math">y</eq>', mode_attribute="class")

    assert [task.mode for task in result.tasks] == [FormulaMode.DISPLAY, FormulaMode.INLINE]
