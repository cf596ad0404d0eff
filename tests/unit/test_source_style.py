from __future__ import annotations

from pathlib import Path

import pytest

import retrypolicy

PACKAGE_ROOT = Path(retrypolicy.__file__).parent
MAX_LINE_LENGTH = 88


class TestSourceLineLength:
    @pytest.mark.parametrize(
        "path",
        sorted(PACKAGE_ROOT.rglob("*.py")),
        ids=lambda path: str(path.relative_to(PACKAGE_ROOT)),
    )
    def test_lines_fit_black_default(self, path: Path) -> None:
        """Test package sources stay within black's default line length."""
        long_lines = [
            number
            for number, line in enumerate(
                path.read_text(encoding="utf-8").splitlines(), start=1
            )
            if len(line) > MAX_LINE_LENGTH
        ]
        assert long_lines == []
