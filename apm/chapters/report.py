"""
Markdown notes writer shared by every chapter.
Tables are embedded as csv code blocks so the notes stay diff-friendly and need no extra renderer.
"""

from __future__ import annotations

from pathlib import Path

import pandas as pd


class NotesWriter:
    def __init__(self, title: str) -> None:
        self._lines: list[str] = [f"# {title}", ""]

    def heading(self, text: str, level: int = 2) -> NotesWriter:
        self._lines.extend([f"{'#' * level} {text}", ""])
        return self

    def paragraph(self, text: str) -> NotesWriter:
        self._lines.extend([text.strip(), ""])
        return self

    def bullets(self, items: list[str]) -> NotesWriter:
        self._lines.extend([f"- {item}" for item in items])
        self._lines.append("")
        return self

    def table(self, frame: pd.DataFrame, *, max_rows: int = 50, float_format: str = "%.4f") -> NotesWriter:
        if frame.empty:
            self._lines.extend(["No rows.", ""])
            return self
        body = frame.head(max_rows).to_csv(index=False, float_format=float_format).strip()
        self._lines.extend(["```csv", body, "```", ""])
        return self

    def image(self, path: Path, caption: str) -> NotesWriter:
        self._lines.extend([f"![{caption}]({path.name})", ""])
        return self

    def render(self) -> str:
        return "\n".join(self._lines).rstrip() + "\n"

    def write(self, path: Path) -> Path:
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_text(self.render(), encoding="utf-8")
        return path


def save_table(frame: pd.DataFrame, path: Path) -> Path:
    path.parent.mkdir(parents=True, exist_ok=True)
    frame.to_csv(path, index=False)
    return path
