import io

import pytest

from conftest import BraceFormatter, lines
from rewrap.cli import build_parser, execute_rewrap

LONG_LINE = '  String s = someMethodWithQuiteALongNameThatWillGetUsUpCloseToTheColumnLimit() + "foo bar foo bar foo bar";'
SOURCE = lines("class T {", LONG_LINE, "}")


def run(path, **overrides):
    options = dict(
        input_file=str(path),
        output_file=None,
        formatter=BraceFormatter(),
        column_limit=100,
        indent_width=2,
        primary=False,
        in_place=False,
        check=False,
        force_overwrite=False,
        verbose=False,
    )
    options.update(overrides)
    return execute_rewrap(**options)


def test_parser_defaults():
    args = build_parser().parse_args(["A.java", "--check"])

    assert args.files == ["A.java"]
    assert args.check is True
    assert args.column_limit is None
    assert args.skip_primary is False


def test_writes_result_to_stdout(tmp_path, capsys):
    path = tmp_path / "T.java"
    path.write_text(SOURCE, encoding="utf-8")

    code, summary, message = run(path)

    assert code == 0 and message is None
    assert summary.rewritten_units == 1
    assert capsys.readouterr().out.startswith("class T {\n  String s =\n")
    assert path.read_text(encoding="utf-8") == SOURCE


def test_in_place_rewrites_file(tmp_path):
    path = tmp_path / "T.java"
    path.write_text(SOURCE, encoding="utf-8")

    code, _, _ = run(path, in_place=True)

    assert code == 0
    assert path.read_text(encoding="utf-8").count("\n") == 5


def test_check_reports_files_that_would_change(tmp_path):
    path = tmp_path / "T.java"
    path.write_text(SOURCE, encoding="utf-8")

    code, _, message = run(path, check=True)

    assert code == 1
    assert "would be rewrapped" in message
    assert path.read_text(encoding="utf-8") == SOURCE


def test_output_refuses_to_overwrite(tmp_path):
    path = tmp_path / "T.java"
    path.write_text(SOURCE, encoding="utf-8")
    target = tmp_path / "out.java"
    target.write_text("keep", encoding="utf-8")

    code, _, message = run(path, output_file=str(target))

    assert code == 1
    assert "already exists" in message
    assert target.read_text(encoding="utf-8") == "keep"

    code, _, _ = run(path, output_file=str(target), force_overwrite=True)
    assert code == 0
    assert target.read_text(encoding="utf-8") != "keep"


def test_document_failure_is_reported(tmp_path):
    path = tmp_path / "Broken.java"
    path.write_text("class T {\n", encoding="utf-8")

    code, summary, message = run(path, primary=True)

    assert code == 1
    assert summary is None
    assert "rejected the document" in message


def test_missing_input(tmp_path):
    code, _, message = run(tmp_path / "Nope.java")

    assert code == 1
    assert "not found" in message


def test_reads_standard_input(monkeypatch, capsys):
    monkeypatch.setattr("sys.stdin", io.StringIO(SOURCE))

    code, _, _ = run("-")

    assert code == 0
    assert "          + \"foo bar foo bar foo bar\";" in capsys.readouterr().out


def test_main_uses_configuration(tmp_path, monkeypatch, capsys):
    pytest.importorskip("prepper")
    from rewrap import configuration
    from rewrap.cli import main

    monkeypatch.chdir(tmp_path)
    monkeypatch.setenv("REWRAP_FORMATTER", "identity")
    configuration._load_settings.cache_clear()
    path = tmp_path / "T.java"
    path.write_text(lines("class T {", "  int x;", "}"), encoding="utf-8")

    try:
        assert main([str(path), "--check"]) == 0
    finally:
        configuration._load_settings.cache_clear()


@pytest.mark.parametrize("option", ["-l", "--column-limit", "--indent-width"])
@pytest.mark.parametrize("value", ["0", "-4"])
def test_main_rejects_non_positive_widths(option, value, capsys):
    from rewrap.cli import main

    with pytest.raises(SystemExit) as excinfo:
        main(["A.java", option, value])

    assert excinfo.value.code == 2
    assert "must be a positive integer" in capsys.readouterr().err


def test_configured_column_limit_must_be_positive(tmp_path, monkeypatch, capsys):
    pytest.importorskip("prepper")
    from rewrap import configuration
    from rewrap.cli import main

    monkeypatch.chdir(tmp_path)
    monkeypatch.setenv("REWRAP_COLUMN_LIMIT", "0")
    configuration._load_settings.cache_clear()
    path = tmp_path / "T.java"
    path.write_text(lines("class T {", "}"), encoding="utf-8")

    try:
        assert main([str(path), "--check"]) == 1
    finally:
        configuration._load_settings.cache_clear()

    assert "REWRAP_COLUMN_LIMIT must be positive" in capsys.readouterr().err
