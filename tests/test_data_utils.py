import ngramlm.data_utils as du


def test_tokenize_line_splits_punctuation():
    tokens = du.tokenize_line("Hello, World! It's a well-known fact.")
    assert tokens == ["hello", ",", "world", "!", "it's", "a", "well-known", "fact", "."]


def test_tokenize_line_lowercases():
    assert du.tokenize_line("The Cat.") == ["the", "cat", "."]


def test_tokenize_line_drops_empty_tokens():
    assert du.tokenize_line("  a\tb  (c)  ") == ["a", "b", "(", "c", ")"]
    assert du.tokenize_line("   ") == []


def test_is_punctuation():
    assert du.is_punctuation(".")
    assert du.is_punctuation(";")
    assert not du.is_punctuation("-")
    assert not du.is_punctuation("cat")
    assert not du.is_punctuation("")


def test_tokens_from_text_spans_lines():
    assert list(du.tokens_from_text("one two.\nthree")) == ["one", "two", ".", "three"]


def test_stream_tokens(tmp_path):
    path = tmp_path / "book.txt"
    path.write_text("The cat sat.\n\nThe end!\n", encoding="utf-8")
    assert list(du.stream_tokens(str(path))) == ["the", "cat", "sat", ".", "the", "end", "!"]


def test_genre_folders(books):
    train = str(books / "train")
    assert du.list_genres(train) == ["cats", "dogs"]
    files = du.genre_files(train, "cats")
    assert [f.rsplit("/", 1)[-1].rsplit("\\", 1)[-1] for f in files] == ["book1.txt", "book2.txt"]
    assert du.genre_files(train, "history") is None
    assert du.list_genres(str(books / "nowhere")) == []


def test_stream_tokens_keeps_undecodable_bytes_apart(tmp_path):
    path = tmp_path / "broken.txt"
    path.write_bytes(b"na\xefve cat\n")
    assert list(du.stream_tokens(str(path))) == ["na", "\ufffd", "ve", "cat"]
