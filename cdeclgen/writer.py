"""Indentation-aware output stream used to write declarations.

:class:`SourceWriter` tracks the current line so declarations can align
continuation lines (vertical argument lists) and probe whether text fits in
a width bound before committing it (:meth:`SourceWriter.try_write`).
"""

from __future__ import (
    annotations,
)

import io
from typing import (
    Callable,
    Optional,
    TextIO,
)


class SourceWriter:
    """Writes text to ``out`` while tracking line state.

    Indentation is a stack of absolute column counts. It is emitted lazily,
    on the first write of each line, so blank lines carry no trailing spaces.

    :param out: Destination stream; a fresh :class:`io.StringIO` if omitted.
    :param tab_width: Width of one :meth:`push_tab` level.

    Example
    -------
    ::

        out = SourceWriter()
        out.write("void f(")
        out.push_set_spaces(out.line_length_for_align())
        out.write("int a,")
        out.new_line()
        out.write("int b);")
        out.pop_tab()
        print(out.getvalue())
    """

    def __init__(self, out: Optional[TextIO] = None, tab_width: int = 2) -> None:
        self.out: TextIO = out if out is not None else io.StringIO()
        self.tab_width = tab_width
        self._spaces: list[int] = [0]
        self.line_started = False
        self.line_length = 0
        self.line_number = 1
        # Widest line written so far, used by try_write to measure
        self.max_line_length = 0

    def spaces(self) -> int:
        return self._spaces[-1]

    def push_tab(self) -> None:
        spaces = self.spaces() - self.spaces() % self.tab_width + self.tab_width
        self._spaces.append(spaces)

    def push_set_spaces(self, spaces: int) -> None:
        self._spaces.append(spaces)

    def pop_tab(self) -> None:
        assert len(self._spaces) > 1, "pop_tab without matching push"
        self._spaces.pop()

    def line_length_for_align(self) -> int:
        """Column where the next character of the current line will go."""
        if self.line_started:
            return self.line_length
        return self.spaces()

    def new_line(self) -> None:
        self.out.write("\n")
        self.line_started = False
        self.line_length = 0
        self.line_number += 1

    def new_line_if_not_start(self) -> None:
        if self.line_started:
            self.new_line()

    def write(self, text: str) -> None:
        """Write ``text``; embedded newlines start new lines."""
        for i, part in enumerate(text.split("\n")):
            if i:
                self.new_line()
            if part:
                self._write_part(part)

    def _write_part(self, text: str) -> None:
        if not self.line_started:
            self.out.write(" " * self.spaces())
            self.line_started = True
            self.line_length += self.spaces()
        self.out.write(text)
        self.line_length += len(text)
        self.max_line_length = max(self.max_line_length, self.line_length)

    def try_write(self, func: Callable[[SourceWriter], None], max_line_length: int) -> bool:
        """Write what ``func`` writes only if no line gets wider than ``max_line_length``.

        ``func`` runs against a measuring writer that starts from the current
        line state and writes to a scratch buffer. On failure nothing reaches
        this writer's stream and its state is unchanged.

        :returns: True if the output was committed.
        """
        if self.line_length > max_line_length:
            return False

        measurer = SourceWriter(io.StringIO(), self.tab_width)
        measurer._spaces = list(self._spaces)
        measurer.line_started = self.line_started
        measurer.line_length = self.line_length
        measurer.line_number = self.line_number
        measurer.max_line_length = self.line_length
        func(measurer)

        if measurer.max_line_length > max_line_length:
            return False

        self.out.write(measurer.out.getvalue())  # type: ignore[attr-defined]
        self.line_started = measurer.line_started
        self.line_length = measurer.line_length
        self.line_number = measurer.line_number
        self.max_line_length = max(self.max_line_length, measurer.max_line_length)
        return True

    def getvalue(self) -> str:
        """Everything written so far, if the stream is a :class:`io.StringIO`."""
        return self.out.getvalue()  # type: ignore[attr-defined]
