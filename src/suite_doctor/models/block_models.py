"""Models for test files and the blocks recovered from them."""

from enum import Enum

from pydantic import Field

from suite_doctor.models.base import ReportModel


class BlockKind(str, Enum):
    SUITE = "suite"    # describe(...)
    CASE = "case"      # test(...) / it(...)
    HOOK = "hook"      # beforeEach / afterEach / beforeAll / afterAll


class TestFile(ReportModel):
    path: str
    content: str
    newline: str = "\n"        # line ending found on disk; content always uses "\n"

    @property
    def lines(self) -> list[str]:
        return self.content.split("\n")


class TestBlock(ReportModel):
    name: str                   # quoted literal argument, or the hook name
    start_line: int             # 1-based line of the opening call
    content: str                # opening line through closing line
    kind: BlockKind = BlockKind.CASE
    children: list["TestBlock"] = Field(default_factory=list)

    @property
    def line_count(self) -> int:
        return len(self.content.split("\n"))

    @property
    def end_line(self) -> int:
        return self.start_line + self.line_count - 1

    @property
    def body_lines(self) -> list[str]:
        """Lines between the opening and closing lines."""
        lines = self.content.split("\n")
        return lines[1:-1] if len(lines) > 2 else []
