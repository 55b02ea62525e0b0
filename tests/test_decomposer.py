import pytest

from terraformat.core.errors import LocateItemSpanError
from terraformat.formatting.decomposer import decompose
from terraformat.hcl.parser import parse_config
from terraformat.hcl.tokens import Token, TokenType, render_tokens
from terraformat.hcl.tree import Attribute, Body


def root_body(source: str) -> Body:
    file, diagnostics = parse_config(source.encode("utf-8"))
    assert not diagnostics
    return file.body


SOURCE = '''
# detached

b = 2
# about a
a = 1
block "x" {
  c = 3
}

# tail
'''


def test_concatenation_reproduces_body():
    body = root_body(SOURCE)
    parts = decompose(body)

    tokens = list(parts.leading)
    for item in parts.items:
        tokens += item.prefix + item.tokens
    tokens += parts.trailing

    assert tokens == body.build_tokens()
    assert all(a is b for a, b in zip(tokens, body.build_tokens()))


def test_items_in_physical_order():
    parts = decompose(root_body(SOURCE))
    assert [(i.name, i.orig_index) for i in parts.items] == [("b", 0), ("a", 1), ("block", 2)]
    assert [i.label_key for i in parts.items] == ["", "", "x"]
    starts = [i.start for i in parts.items]
    assert starts == sorted(starts)


def test_first_prefix_moves_to_leading():
    parts = decompose(root_body(SOURCE))
    assert parts.items[0].prefix == []
    assert render_tokens(parts.leading) == b"\n# detached\n\n"


def test_lead_comment_is_part_of_item_tokens():
    parts = decompose(root_body(SOURCE))
    a = parts.items[1]
    assert a.tokens[0].bytes == b"# about a\n"
    assert a.prefix == []


def test_trailing_run():
    parts = decompose(root_body(SOURCE))
    assert render_tokens(parts.trailing) == b"\n# tail\n"


def test_label_key_joins_labels():
    parts = decompose(root_body('resource "aws_instance" "web" {\n}\n'))
    assert parts.items[0].label_key == "aws_instance.web"


def test_empty_body():
    parts = decompose(root_body("# only a comment\n"))
    assert parts.is_empty()


def test_unlocatable_item_raises():
    stray = Token(TokenType.IDENT, b"ghost")
    attribute = Attribute("ghost", [], stray, Token(TokenType.EQUAL, b"="),
                          [Token(TokenType.NUMBER, b"1")], [], [])

    class Detached(Body):
        def build_tokens(self):
            return []

    body = Detached([attribute])
    with pytest.raises(LocateItemSpanError):
        decompose(body)
