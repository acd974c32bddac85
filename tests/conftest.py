import pytest

from ngramlm.corpus import create_ngram_models
from ngramlm.token_list import TokenList

SCENARIO_TEXT = "the cat sat. the dog sat."
SCENARIO_TOKENS = ["the", "cat", "sat", ".", "the", "dog", "sat", "."]


def builder_from_tokens(builder, tokens, n):
    """Feed every length-n window of tokens into builder."""
    for i in range(len(tokens) - n + 1):
        builder.add_tokens(TokenList(tokens[i:i + n]))
    return builder


@pytest.fixture
def scenario_models():
    return create_ngram_models([SCENARIO_TOKENS], [1, 2], 0)


@pytest.fixture
def books(tmp_path):
    """train/ and test/ folders with two tiny genres each."""
    texts = {
        "cats": "The cat sat. The cat ran.\nA cat sat.",
        "dogs": "The dog sat. The dog ran.\nA dog ran.",
    }
    for split in ("train", "test"):
        for genre, text in texts.items():
            folder = tmp_path / split / genre
            folder.mkdir(parents=True)
            (folder / "book1.txt").write_text(text, encoding="utf-8")
    (tmp_path / "train" / "cats" / "book2.txt").write_text("The cat ran.", encoding="utf-8")
    return tmp_path
