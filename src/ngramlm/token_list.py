from typing import Iterable, Iterator, Tuple

UNKNOWN_WORD_TOKEN = "<unk>"


class TokenList:
    """
    Immutable ordered list of tokens, the unit for a single n-gram.
    - head()/tail() decompose it front to back
    - add_first()/add_last() return a new list; the original is never touched
    """
    def __init__(self, tokens: Iterable[str] = ()):
        self._tokens: Tuple[str, ...] = tuple(tokens)

    def head(self) -> str:
        return self._tokens[0]

    def tail(self) -> "TokenList":
        """Every token except the first one."""
        return TokenList(self._tokens[1:])

    def add_first(self, token: str) -> "TokenList":
        return TokenList((token,) + self._tokens)

    def add_last(self, token: str) -> "TokenList":
        return TokenList(self._tokens + (token,))

    def size(self) -> int:
        return len(self._tokens)

    def contains_unknown(self) -> bool:
        return UNKNOWN_WORD_TOKEN in self._tokens

    def as_tuple(self) -> Tuple[str, ...]:
        return self._tokens

    def __len__(self) -> int:
        return len(self._tokens)

    def __iter__(self) -> Iterator[str]:
        return iter(self._tokens)

    def __eq__(self, other) -> bool:
        if not isinstance(other, TokenList):
            return NotImplemented
        return self._tokens == other._tokens

    def __hash__(self) -> int:
        return hash(self._tokens)

    def __repr__(self) -> str:
        return "[ " + "".join(t + " " for t in self._tokens) + "]"
