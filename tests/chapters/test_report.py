from __future__ import annotations

from pathlib import Path

import pandas as pd

from apm.chapters.report import NotesWriter, save_table


def test_notes_writer_renders_markdown(tmp_path: Path) -> None:
    notes = NotesWriter("Title")
    notes.heading("Section").paragraph("  Some text.  ").bullets(["one", "two"])
    notes.table(pd.DataFrame({"a": [1.23456], "b": ["x"]}))
    notes.table(pd.DataFrame())
    notes.image(tmp_path / "plot.png", "A plot")

    text = notes.render()
    assert text.startswith("# Title\n")
    assert "## Section" in text
    assert "Some text." in text
    assert "- one\n- two" in text
    assert "```csv\na,b\n1.2346,x\n```" in text
    assert "No rows." in text
    assert "![A plot](plot.png)" in text

    path = notes.write(tmp_path / "nested" / "notes.md")
    assert path.read_text(encoding="utf-8") == text


def test_save_table_writes_csv(tmp_path: Path) -> None:
    path = save_table(pd.DataFrame({"a": [1, 2]}), tmp_path / "t" / "table.csv")
    assert pd.read_csv(path)["a"].tolist() == [1, 2]
