import pytest
from typer.testing import CliRunner

from llmsedit.cli import app

runner = CliRunner()


@pytest.fixture
def guide_file(tmp_path, guide_text):
    path = tmp_path / "llms.txt"
    path.write_text(guide_text, encoding="utf-8")
    return path


def test_tree(guide_file):
    result = runner.invoke(app, ["--approximate", "tree", str(guide_file)])
    assert result.exit_code == 0, result.output
    lines = result.output.splitlines()
    assert lines[0].startswith("[x] section-0 : (Preface)")
    assert any(line.startswith("         [x] section-3 : Linux") for line in lines)
    assert lines[-1].startswith("Document has 13 sections")


def test_tree_line_break_surcharge_changes_counts(guide_file):
    plain = runner.invoke(app, ["--approximate", "tree", str(guide_file)])
    heavier = runner.invoke(
        app, ["--approximate", "--line-break-surcharge", "5", "tree", str(guide_file)]
    )
    assert plain.output != heavier.output


def test_dups(guide_file):
    result = runner.invoke(app, ["--approximate", "dups", str(guide_file)])
    assert result.exit_code == 0, result.output
    assert "Examples::3\tExamples (L3, 3x)" in result.output


def test_dups_none_found(tmp_path):
    path = tmp_path / "small.txt"
    path.write_text("# One\n# Two\n", encoding="utf-8")
    result = runner.invoke(app, ["--approximate", "dups", str(path)])
    assert result.exit_code == 0
    assert "No significant duplicates" in result.output


def test_export_to_file(guide_file, tmp_path):
    out = tmp_path / "trimmed.txt"
    result = runner.invoke(
        app,
        [
            "-vv",
            "--approximate",
            "export",
            str(guide_file),
            str(out),
            "--exclude",
            "section-2",
            "--exclude-group",
            "Examples::3",
        ],
    )
    assert result.exit_code == 0, result.output
    assert out.read_text(encoding="utf-8") == "## Usage\nRun it.\n"
    assert "1 of 13 sections selected" in result.output


def test_export_include_from_nothing(guide_file):
    result = runner.invoke(
        app,
        ["--approximate", "export", str(guide_file), "-", "--none", "--include", "section-2"],
    )
    assert result.exit_code == 0, result.output
    assert "## Install\npip install thing\n\n### Linux\napt get" in result.output
    assert "# Guide" not in result.output


def test_export_nothing_selected_fails(guide_file, tmp_path):
    out = tmp_path / "empty.txt"
    result = runner.invoke(app, ["--approximate", "export", str(guide_file), str(out), "--none"])
    assert result.exit_code == 1
    assert not out.exists()


def test_missing_source(tmp_path):
    result = runner.invoke(app, ["--approximate", "tree", str(tmp_path / "absent.txt")])
    assert result.exit_code == 1
    assert "Error loading" in result.output


def test_undecodable_source(tmp_path):
    path = tmp_path / "binary.txt"
    path.write_bytes(b"\xff\xfe# not utf-8\n")
    result = runner.invoke(app, ["--approximate", "tree", str(path)])
    assert result.exit_code == 1
    assert "Error loading" in result.output
