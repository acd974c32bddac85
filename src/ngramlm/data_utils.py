import os, re
from typing import Iterator, List, Optional

# Characters that become tokens of their own: anything but letters, digits,
# apostrophes, hyphens and spaces
PUNCTUATION = r"([^a-zA-Z0-9' -])"

_punctre = re.compile(PUNCTUATION)
_wsre = re.compile(r"\s+")

##################################
#          TOKENIZATION          #
##################################

def is_punctuation(token: str) -> bool:
    return _punctre.fullmatch(token) is not None

def tokenize_line(line: str) -> List[str]:
    """Lower-case a line and split it on whitespace after isolating every punctuation character."""
    line = line.lower()
    line = _punctre.sub(r" \1 ", line)
    return [w for w in _wsre.split(line.strip()) if w]

def tokens_from_text(text: str) -> Iterator[str]:
    for line in text.splitlines():
        yield from tokenize_line(line)

def stream_tokens(path: str) -> Iterator[str]:
    """
    Lazily tokenize a file line by line. The file is opened on first use.
    Undecodable bytes become U+FFFD, which then stands alone as punctuation.
    """
    with open(path, "r", encoding="utf-8", errors="replace") as f:
        for line in f:
            yield from tokenize_line(line)

##################################
#          GENRE FOLDERS         #
##################################

def list_genres(directory: str) -> List[str]:
    """Names of the genre subfolders in directory (empty if it does not exist)."""
    if not os.path.isdir(directory):
        return []
    return sorted(d for d in os.listdir(directory)
                  if os.path.isdir(os.path.join(directory, d)))

def genre_files(directory: str, genre: str) -> Optional[List[str]]:
    """Files of directory/genre in name order, or None if that folder is missing."""
    genre_dir = os.path.join(directory, genre)
    if not os.path.isdir(genre_dir):
        return None
    return [os.path.join(genre_dir, f) for f in sorted(os.listdir(genre_dir))
            if os.path.isfile(os.path.join(genre_dir, f))]
