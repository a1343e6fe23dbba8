import pytest

from leatherkit.west import (
    CodeFenceBlock,
    Header,
    Inline,
    InlineCode,
    Link,
    Text,
    WalkBreak,
    walk,
)
from leatherkit.west_parse import Parser, parse


def test_parse_code_span():
    span = Parser("`chill it out`").parse_code_span()
    assert span.text == "chill it out"


def test_parse_code_span_rejects_lone_backtick():
    assert Parser("`").parse_code_span() is None


def test_parse_link_body():
    source = "`code` foo `morse code`"
    body = Parser(source + "]").parse_link_body()
    assert len(body.nodes) == 3
    assert isinstance(body.nodes[0], InlineCode) and body.nodes[0].text == "code"
    assert isinstance(body.nodes[1], Text) and body.nodes[1].text == " foo "
    assert isinstance(body.nodes[2], InlineCode) and body.nodes[2].text == "morse code"
    assert body.markdown() == source

    body = Parser("foo]").parse_link_body()
    assert len(body.nodes) == 1
    assert body.nodes[0].text == "foo"


def test_parse_link_body_unterminated():
    assert Parser("foo").parse_link_body() is None


def test_parse_link():
    source = "[foo](/bar)"
    link = Parser(source).parse_link()
    assert link.href == "/bar"
    assert len(link.body.nodes) == 1
    assert link.markdown() == source


def test_parse_link_leaves_cursor_on_failure():
    parser = Parser("[foo](/bar")
    assert parser.parse_link() is None
    assert parser.rest() == "[foo](/bar"


def test_parse_table():
    source = " foo | bar | baz\n--- | :-- | --:\nbuzz | borp | bapzinga"
    table = Parser(source).parse_table()
    assert len(table.rows) == 1
    assert len(table.rows[0].columns) == 3
    assert table.markdown() == source

    assert Parser(" foo\nbiff\nbuzz").parse_table() is None


def test_parse_paragraph():
    source = (
        "\nthis is a test\nof some [link3](/url3) words\nwoo ` code is here! ` \nhoo\n"
        "[link](/url)  [`link2`](/url2)\n\t"
    )
    para = Parser(source).parse_paragraph()
    assert len(para.nodes) == 9
    assert para.nodes[0].text == "\nthis is a test\nof some "
    assert para.nodes[1].href == "/url3"
    assert para.nodes[2].text == " words\nwoo "
    assert isinstance(para.nodes[3], InlineCode)
    assert para.nodes[3].text == " code is here! "
    assert para.nodes[4].text == " \nhoo\n"
    assert para.nodes[5].href == "/url"
    assert para.nodes[6].text == "  "
    assert para.nodes[7].href == "/url2"
    assert para.nodes[8].text == "\n\t"
    assert para.markdown() == source


def test_parse_document():
    source = (
        "\nthis is a test\nof some [link3](/url3) words\nwoo ` code is here! ` \nhoo\n"
        "[link](/url)  [`link2`](/url2)\n\nxyzzy\n"
    )
    assert Parser(source).parse().markdown() == source


def test_mutate_document():
    source = "\n * [a](/a?x=1)\n * [c](/c?x=1)\n * [b](/b?x=1)\n"
    doc = Parser(source).parse()

    def visit(node):
        if isinstance(node, Link) and node.body.nodes[0].text == "a":
            node.href += "&y=xyzzy"
            raise WalkBreak

    walk(doc, visit)
    assert doc.markdown() == "\n * [a](/a?x=1&y=xyzzy)\n * [c](/c?x=1)\n * [b](/b?x=1)\n"

    doc = Parser("[a](/a?x=1), [c](/c?x=1), [b](/b?x=1)").parse()
    para = doc.nodes[0]
    assert isinstance(para, Inline)
    para.nodes[2], para.nodes[4] = para.nodes[4], para.nodes[2]
    assert doc.markdown() == "[a](/a?x=1), [b](/b?x=1), [c](/c?x=1)"


def test_parse_header():
    source = "### station `foo` [bar](/baz)\n"
    header = Parser(source).parse_header()
    assert isinstance(header, Header)
    assert header.level == 3
    assert len(header.inline.nodes) == 6
    assert header.markdown() == source


def test_parse_header_needs_space():
    assert Parser("#foo").parse_header() is None


@pytest.mark.parametrize("source", ["`", "`\n", "```\n"])
def test_crashers(source):
    assert Parser(source).parse().markdown() == source


def test_parse_code_fence_block_unterminated():
    block = Parser("~~~\nthis a test\n").parse_code_fence_block()
    assert isinstance(block, CodeFenceBlock)
    assert block.body == "this a test\n"


def test_parse_code_fence_block_terminated():
    parser = Parser("~~~\nthis a test 2\n~~~\nrest\n")
    block = parser.parse_code_fence_block()
    assert block.body == "this a test 2\n"
    assert block.endfence == "~~~\n"
    assert parser.rest() == "rest\n"


@pytest.mark.parametrize(
    "source",
    [
        "",
        "plain text",
        "# h\n\nbody",
        "```go\nx\n```\nafter",
        "~~~\nunterminated",
        "[l](u) `c` tail",
        "a\n\nb\n\nc\n",
    ],
)
def test_roundtrips(source):
    assert parse(source).markdown() == source


def test_parse_accepts_bytes():
    assert parse(b"# title\n\ntext").markdown() == "# title\n\ntext"
    assert isinstance(parse(b"# title\n\ntext").nodes[0], Header)