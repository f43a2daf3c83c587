from __future__ import annotations

import json
from pathlib import Path

import pytest

from goimpl.cli import main, parse_impl
from goimpl.errors import ConfigError

DOC = {
    "interface": {
        "kind": "named",
        "pkg": "io",
        "name": "ReadCloser",
        "pkg_path": "io",
        "methods": [
            {"name": "Close", "outputs": ["error"]},
            {"name": "Read", "inputs": ["[]uint8"], "outputs": ["int", "error"]},
        ],
    },
    "existing": {
        "kind": "pointer",
        "elem": {"kind": "named", "pkg": "store", "name": "File", "pkg_path": "example.com/store"},
        "methods": [{"name": "Close", "inputs": ["*store.File"], "outputs": ["error"]}],
    },
}


@pytest.fixture
def doc_path(tmp_path: Path) -> Path:
    p = tmp_path / "readcloser.json"
    p.write_text(json.dumps(DOC), encoding="utf-8")
    return p


def test_parse_impl():
    assert parse_impl("*pkg.Impl") == ("pkg", "*Impl")
    assert parse_impl(" Impl ") == ("", "Impl")
    with pytest.raises(ConfigError, match="expected \\[package.\\]type"):
        parse_impl("a.b.C")


def test_cli_writes_stub(doc_path: Path, tmp_path: Path):
    out = tmp_path / "out" / "impl.go"
    main([str(doc_path), "*pkg.Impl", "--no-goimports", "--out", str(out), "--comment", "Close=Close it."])
    text = out.read_text(encoding="utf-8")
    assert text.startswith("package pkg\n")
    assert "// Close it.\nfunc (i *Impl) Close() error {" in text
    assert "func (i *Impl) Read(u []uint8) (int, error) {" in text


def test_cli_existing_to_stdout(doc_path: Path, capsys):
    main([str(doc_path), "--existing", "--no-goimports", "--named", "--import", "io"])
    text = capsys.readouterr().out
    assert text.startswith("package store\n")
    assert '\t"io"\n' in text
    assert "Close" not in text
    assert "func (f *File) Read(u []uint8) (i int, err error) {" in text


def test_cli_reports_errors(doc_path: Path, tmp_path: Path, capsys):
    out = tmp_path / "impl.go"
    with pytest.raises(SystemExit) as ei:
        main([str(doc_path), "pkg.Impl", "--existing", "--no-goimports", "--out", str(out)])
    assert ei.value.code == 1
    assert "only one of impl_name and existing" in capsys.readouterr().err
    assert not out.exists()

    with pytest.raises(SystemExit) as ei:
        main([str(doc_path), "--no-goimports"])
    assert ei.value.code == 1
    assert "implementation type is required" in capsys.readouterr().err


def test_cli_verbose_prints_generated_text(doc_path: Path, capsys):
    with pytest.raises(SystemExit):
        main([str(doc_path), "pkg.1Impl", "--no-goimports", "--verbose"])
    err = capsys.readouterr().err
    assert "error parsing generated code" in err
    assert "func (i 1Impl) Close() error {" in err
