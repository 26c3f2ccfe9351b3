import io
import json

import pytest

from silly.silly_ast import BinaryOp, Function, NumberLiteral, Prototype, VariableRef
from silly.silly_driver import Driver, parse_source, render_json, start_repl
from silly.silly_parser import Parser
from silly.silly_precedence import PrecedenceTable


def run(source: str, diagnostics: io.StringIO) -> tuple[list, Driver]:  # type: ignore[type-arg]
    driver = Driver(Parser.from_source(source, diagnostics=diagnostics), diagnostics)
    return driver.run(), driver


def test_dispatches_each_form(diagnostics: io.StringIO) -> None:
    forms, driver = run("extern sin(x); def f(x) sin(x) * 2; f(1)", diagnostics)
    assert [type(f).__name__ for f in forms] == ["Prototype", "Function", "Function"]
    assert forms[0] == Prototype("sin", ["x"])
    assert forms[1].proto.name == "f"
    assert forms[2].is_anonymous
    assert driver.errors == 0
    assert diagnostics.getvalue().splitlines() == [
        "Parsed an extern",
        "Parsed a function definition.",
        "Parsed a top-level expr",
    ]


def test_semicolons_are_ignored(diagnostics: io.StringIO) -> None:
    forms, driver = run(";;; 1 ;;", diagnostics)
    assert len(forms) == 1
    assert driver.errors == 0


def test_empty_input(diagnostics: io.StringIO) -> None:
    forms, driver = run("", diagnostics)
    assert forms == []
    assert diagnostics.getvalue() == ""


def test_recovery_after_bad_prototype(diagnostics: io.StringIO) -> None:
    forms, driver = run("def 1 2\n3+4", diagnostics)
    assert driver.errors == 1
    assert diagnostics.getvalue().count("Error: ") == 1
    assert "Error: Expected function name in prototype" in diagnostics.getvalue()
    # the bad `1` is discarded, `2` then parses as its own expression
    assert forms[-1] == Function(
        Prototype("__anon_expr", []), BinaryOp("+", NumberLiteral(3), NumberLiteral(4))
    )


def test_recovery_skips_exactly_one_token(diagnostics: io.StringIO) -> None:
    forms, driver = run("def 1 2", diagnostics)
    assert driver.errors == 1
    assert [f.body for f in forms] == [NumberLiteral(2)]


def test_recovery_resumes_lexing_at_exact_point(diagnostics: io.StringIO) -> None:
    forms, driver = run("foo(1 2) bar", diagnostics)
    # `foo(1` fails at `2`, which is skipped; `)` then fails and is skipped too
    assert driver.errors == 2
    assert [f.body for f in forms] == [VariableRef("bar")]


def test_error_inside_definition_body(diagnostics: io.StringIO) -> None:
    forms, driver = run("def f(x) (x + 1; g(2)", diagnostics)
    assert "Error: expected ')'" in diagnostics.getvalue()
    assert driver.errors == 1
    assert forms[-1].body.callee == "g"


def test_echo_prints_forms(diagnostics: io.StringIO) -> None:
    echo = io.StringIO()
    parser = Parser.from_source("x", diagnostics=diagnostics)
    Driver(parser, diagnostics, echo=echo).run()
    assert echo.getvalue() == (
        "Function(Prototype('__anon_expr', []), VariableRef('x'))\n"
    )


def test_prompt_written_before_each_dispatch(diagnostics: io.StringIO) -> None:
    parser = Parser.from_source("1; 2", diagnostics=diagnostics)
    Driver(parser, diagnostics, prompt="ready> ").run()
    out = diagnostics.getvalue()
    # forms `1`, `;`, `2`, then end of input
    assert out.count("ready> ") == 4


def test_parse_source_is_silent_by_default(capsys: pytest.CaptureFixture[str]) -> None:
    forms = parse_source("def f(a) a; )")
    assert len(forms) == 1
    captured = capsys.readouterr()
    assert captured.out == ""
    assert captured.err == ""


def test_parse_source_with_precedence_and_diagnostics(diagnostics: io.StringIO) -> None:
    table = PrecedenceTable.default()
    table.configure({"/": 50})
    forms = parse_source("a / b * c", table, diagnostics)
    assert forms[0].body == BinaryOp(
        "*", BinaryOp("/", VariableRef("a"), VariableRef("b")), VariableRef("c")
    )
    assert "Parsed a top-level expr" in diagnostics.getvalue()


def test_parse_source_from_stream() -> None:
    forms = parse_source(io.StringIO("extern f()\nf()"))
    assert len(forms) == 2


def test_start_repl_reads_stdin(
    monkeypatch: pytest.MonkeyPatch, capsys: pytest.CaptureFixture[str]
) -> None:
    monkeypatch.setattr("sys.stdin", io.StringIO("def id(x) x\nid(4)\n"))
    start_repl(verbose=True)
    captured = capsys.readouterr()
    assert "ready> " in captured.err
    assert "Parsed a function definition." in captured.err
    assert "Parsed a top-level expr" in captured.err
    assert "Function(Prototype('id', ['x']), VariableRef('x'))" in captured.out


def test_start_repl_quiet_reports_errors(
    monkeypatch: pytest.MonkeyPatch, capsys: pytest.CaptureFixture[str]
) -> None:
    monkeypatch.setattr("sys.stdin", io.StringIO("extern 3\n"))
    start_repl()
    captured = capsys.readouterr()
    assert captured.out == ""
    assert "Error: Expected function name in prototype" in captured.err


def test_start_repl_keyboard_interrupt(
    monkeypatch: pytest.MonkeyPatch, capsys: pytest.CaptureFixture[str]
) -> None:
    class Interrupting(io.StringIO):
        def read(self, size: int | None = -1) -> str:
            raise KeyboardInterrupt

    monkeypatch.setattr("sys.stdin", Interrupting())
    start_repl()
    assert capsys.readouterr().err.startswith("ready> ")


def test_render_json_is_one_line() -> None:
    node = Function(Prototype("f", ["a"]), VariableRef("a"))
    text = render_json(node)
    assert "\n" not in text
    assert json.loads(text) == node.to_dict()


def test_start_repl_json_echo(
    monkeypatch: pytest.MonkeyPatch, capsys: pytest.CaptureFixture[str]
) -> None:
    monkeypatch.setattr("sys.stdin", io.StringIO("1 < 2\n"))
    start_repl(as_json=True)
    body = json.loads(capsys.readouterr().out)["body"]
    assert body == {
        "kind": "binary",
        "op": "<",
        "lhs": {"kind": "number", "value": 1.0},
        "rhs": {"kind": "number", "value": 2.0},
    }
