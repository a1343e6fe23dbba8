"""Parser producing the lossless Markdown tree from :mod:`leatherkit.west`."""

from __future__ import annotations

import re
from typing import Optional, Union

from leatherkit.west import (
    CodeFenceBlock,
    Document,
    Header,
    Inline,
    InlineCode,
    Link,
    Node,
    Table,
    TableDelimiterRow,
    TableRow,
    Text,
)

# group 1 is the fence, group 2 the language
_CODE_FENCE_LANG = re.compile(r"(~{3,}|`{3,})([^\t\n\f\r ]*)\n")
_TABLE_DELIMITER_CELL = re.compile(r"[\t ]*[:-]-+[:-][\t ]*")


def parse(data: Union[str, bytes]) -> Document:
    """Parse ``data`` into a :class:`Document`."""
    return Parser(data).parse()


class Parser:
    """A cursor over Markdown source with one method per construct.

    Each ``parse_*`` method returns the parsed node and advances the cursor,
    or returns ``None`` when the construct is not present.
    """

    def __init__(self, data: Union[str, bytes]):
        if isinstance(data, (bytes, bytearray)):
            data = bytes(data).decode("utf-8", "surrogateescape")
        self.data: str = data
        self.offset = 0

    def _copy(self) -> "Parser":
        other = Parser(self.data)
        other.offset = self.offset
        return other

    def rest(self) -> str:
        """Return the unparsed remainder of the input."""
        return self.data[self.offset:]

    def _peek(self, prefix: str) -> bool:
        return self.data.startswith(prefix, self.offset)

    def _expect(self, prefix: str) -> bool:
        if self._peek(prefix):
            self.offset += len(prefix)
            return True
        return False

    def _at_end(self) -> bool:
        return self.offset == len(self.data)

    def _load_until(self, suffix: str) -> Optional[str]:
        index = self.data.find(suffix, self.offset)
        if index == -1:
            return None
        found = self.data[self.offset:index]
        self.offset = index + len(suffix)
        return found

    def _flush(self, nodes: list[Node], text_start: int) -> None:
        if self.offset != text_start:
            nodes.append(
                Text(self.data[text_start:self.offset], start=text_start, end=self.offset)
            )

    def parse(self) -> Document:
        """Parse the rest of the input into a document."""
        doc = Document(start=self.offset)
        attempts = (
            self.parse_code_fence_block,
            self.parse_header,
            self.parse_table,
            self.parse_paragraph,
        )
        while not self._at_end():
            for attempt in attempts:
                node = attempt()
                if node is not None:
                    doc.nodes.append(node)
                    break
        doc.end = self.offset
        return doc

    def parse_paragraph(self) -> Inline:
        """Parse inline content up to and including a blank line."""
        para = Inline(start=self.offset)
        text_start = self.offset
        while True:
            code = self.parse_code_span()
            if code is not None:
                para.nodes.append(code)
                text_start = self.offset
                continue
            link = self.parse_link()
            if link is not None:
                para.nodes.append(link)
                text_start = self.offset
                continue
            if self._at_end():
                break
            if self._expect("\n\n"):
                break
            self.offset += 1
        self._flush(para.nodes, text_start)
        para.end = self.offset
        return para

    def _flush_before(self, nodes: list[Node], text_start: int, node: Node) -> None:
        if node.start - 1 > text_start or node.start > text_start:
            pass
        nodes.append(node)

    def parse_link_body(self) -> Optional[Inline]:
        """Parse link text up to, not including, the closing bracket."""
        inline = Inline(start=self.offset)
        text_start = self.offset
        while True:
            code_start = self.offset
            code = self.parse_code_span()
            if code is not None:
                self._flush_text(inline.nodes, text_start, code_start)
                inline.nodes.append(code)
                text_start = self.offset
                continue
            if self._peek("]"):
                self._flush(inline.nodes, text_start)
                break
            if self._at_end():
                return None
            self.offset += 1
        inline.end = self.offset
        return inline

    def _flush_text(self, nodes: list[Node], text_start: int, text_end: int) -> None:
        if text_end != text_start:
            nodes.append(Text(self.data[text_start:text_end], start=text_start, end=text_end))

    def parse_link(self) -> Optional[Link]:
        """Parse a ``[body](href)`` link."""
        start = self.offset
        cursor = self._copy()
        if not cursor._expect("["):
            return None
        body = cursor.parse_link_body()
        if body is None:
            return None
        if not cursor._expect("]("):
            return None
        href = cursor._load_until(")")
        if href is None:
            return None
        self.offset = cursor.offset
        return Link(body, href, start=start, end=self.offset)

    def parse_code_span(self) -> Optional[InlineCode]:
        """Parse a single-line backtick code span."""
        cursor = self._copy()
        text = cursor.rest()
        if not cursor._expect("`"):
            return None
        if not cursor.rest():
            return None
        newline = text[1:].find("\n")
        if newline == -1:
            newline = len(text)
        if newline <= 1:
            return None
        inner = text[1:newline]
        start = cursor.offset
        close = inner[1:].find("`")
        if close == -1:
            return None
        cursor.offset += close + 2
        self.offset = cursor.offset
        return InlineCode(inner[: close + 1], start=start, end=start + close)

    def parse_code_fence_block(self) -> Optional[CodeFenceBlock]:
        """Parse a ``` or ~~~ fenced block, unterminated ones included."""
        start = self.offset
        text = self.rest()
        opening = _CODE_FENCE_LANG.match(text)
        if opening is None:
            return None
        fence = opening.group(1)
        block = CodeFenceBlock(fence=fence, lang=opening.group(2), start=start)
        closing_re = re.compile("\n" + re.escape(fence[0]) + "{" + str(len(fence)) + ",}\n")
        body = text[opening.end():]
        closing = closing_re.search(body)
        if closing is None:
            block.body = body
            self.offset += opening.end() + len(body)
        else:
            block.body = body[: closing.start() + 1]
            block.endfence = body[closing.start() + 1 : closing.end()]
            self.offset += opening.end() + closing.end()
        block.end = self.offset
        return block

    def parse_table(self) -> Optional[Table]:
        """Parse a pipe table ending at a blank line or the end of input."""
        cursor = self._copy()
        table = Table(start=self.offset)
        while True:
            if table.header is None:
                header = cursor.parse_table_row()
                if header is None:
                    return None
                table.header = header
            elif table.delimiter is None:
                delimiter = cursor.parse_table_delimiter_row()
                if delimiter is None:
                    return None
                table.delimiter = delimiter
            else:
                row = cursor.parse_table_row()
                if row is None:
                    return None
                table.rows.append(row)
            table.end = cursor.offset
            if (cursor._expect("\n") or cursor._at_end()) and table.delimiter is not None:
                break
        self.offset = cursor.offset
        return table

    def parse_table_row(self) -> Optional[TableRow]:
        """Parse a row of at least two pipe-separated cells."""
        cursor = self._copy()
        row = TableRow(start=self.offset)
        while True:
            cell = cursor.parse_table_cell()
            if cell is None:
                return None
            row.columns.append(cell)
            row.end = cursor.offset
            if cursor._expect("|"):
                continue
            if cursor._expect("\n") or cursor._at_end():
                if len(row.columns) < 2:
                    return None
                break
        self.offset = cursor.offset
        return row

    def parse_table_delimiter_row(self) -> Optional[TableDelimiterRow]:
        """Parse the ``---|:--`` row under a table header."""
        cursor = self._copy()
        row = TableDelimiterRow(start=self.offset)
        while True:
            cell = cursor.parse_table_delimiter_cell()
            if cell is None:
                return None
            row.delimiters.append(cell)
            row.end = cursor.offset
            if cursor._expect("|"):
                continue
            if cursor._expect("\n") or cursor._at_end():
                if len(row.delimiters) < 2:
                    return None
                break
        self.offset = cursor.offset
        return row

    def parse_table_delimiter_cell(self) -> Optional[Text]:
        """Parse one cell of a delimiter row."""
        start = self.offset
        text = ""
        while True:
            if self._peek("|") or self._peek("\n") or self._at_end():
                if self.offset != start:
                    text = self.data[start:self.offset]
                    if _TABLE_DELIMITER_CELL.match(text):
                        break
                    return None
            if self._at_end():
                return None
            self.offset += 1
        return Text(text, start=start, end=self.offset)

    def parse_table_cell(self) -> Optional[Inline]:
        """Parse one cell of a table row."""
        inline = Inline(start=self.offset)
        text_start = self.offset
        while True:
            code_start = self.offset
            code = self.parse_code_span()
            if code is not None:
                self._flush_text(inline.nodes, text_start, code_start)
                inline.nodes.append(code)
                text_start = self.offset
                continue
            if self._peek("|") or self._peek("\n") or self._at_end():
                self._flush(inline.nodes, text_start)
                break
            self.offset += 1
        inline.end = self.offset
        return inline

    def parse_header(self) -> Optional[Header]:
        """Parse an ATX header line such as ``## title``."""
        cursor = self._copy()
        header = Header(start=cursor.offset, end=cursor.offset)
        while cursor._expect("#"):
            header.level += 1
            header.end += 1
        if header.level == 0:
            return None

        inline = Inline(start=cursor.offset, end=cursor.offset)
        header.inline = inline
        inline.nodes.append(Text(start=cursor.offset, end=cursor.offset))

        text_start = cursor.offset
        if not cursor._expect(" "):
            return None

        while True:
            code_start = cursor.offset
            code = cursor.parse_code_span()
            if code is not None:
                cursor._flush_text(inline.nodes, text_start, code_start)
                inline.nodes.append(code)
                text_start = cursor.offset
                continue
            link_start = cursor.offset
            link = cursor.parse_link()
            if link is not None:
                cursor._flush_text(inline.nodes, text_start, link_start)
                inline.nodes.append(link)
                text_start = cursor.offset
                continue
            if cursor._at_end():
                break
            if cursor._expect("\n\n"):
                break
            cursor.offset += 1
        cursor._flush(inline.nodes, text_start)

        self.offset = cursor.offset
        return header