from terraformat.core.models import Span
from terraformat.formatting.spans import find_span
from terraformat.hcl.tokens import Token, TokenType


def make(n):
    return [Token(TokenType.IDENT, b"x") for _ in range(n)]


def test_finds_item_by_identity():
    tokens = make(5)
    assert find_span(tokens, tokens[1:3]) == Span(1, 2)


def test_equal_looking_tokens_do_not_match():
    tokens = make(3)
    lookalikes = make(2)
    assert find_span(tokens, lookalikes) is None


def test_empty_item_is_not_found():
    assert find_span(make(3), []) is None


def test_item_longer_than_body():
    tokens = make(2)
    assert find_span(tokens[:1], tokens) is None


def test_whole_body():
    tokens = make(4)
    assert find_span(tokens, list(tokens)) == Span(0, 3)
