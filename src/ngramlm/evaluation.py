import os, time
from typing import Dict, Iterator, List, Optional

import numpy as np
import pandas as pd
import matplotlib
matplotlib.use("Agg")
import matplotlib.pyplot as plt

import ngramlm.data_utils as du
from ngramlm.corpus import Corpus, DEFAULT_SEED
from ngramlm.ngram import get_ngram_name


# CORPUS LOADING

def load_genre_corpus(directory: str, genre: str, max_n: int, unknown_threshold: int,
                      min_n: int = 1, verbose: bool = True) -> Optional[Corpus]:
    """Build a genre corpus and report how long it took. None if the genre folder is missing."""
    start = time.time()
    if verbose:
        print(f"> Loading corpus {genre}... ", end="")
    corpus = Corpus.from_genre(directory, genre, max_n, unknown_threshold, min_n=min_n)
    if verbose:
        if corpus is None:
            print("not found.")
        else:
            print(f"loaded in {time.time() - start:.3f} seconds.")
    return corpus


# PERPLEXITY

def perplexity_table(train_directory: str, test_directory: str, genres: Optional[List[str]],
                     n: int, unknown_threshold: int, verbose: bool = True) -> pd.DataFrame:
    """
    Perplexity of every training genre against every test genre at order n.
    Test corpora keep all their words (threshold 0) and only build order n.
    genres=None uses every genre folder found in train_directory.
    """
    if genres is None:
        genres = du.list_genres(train_directory)
    test_corpora: Dict[str, Corpus] = {}
    for genre in genres:
        try:
            corpus = Corpus.from_genre(test_directory, genre, n, 0, min_n=n)
        except OSError as e:
            print(f"Error: {e}")
            continue
        if corpus is None:
            if verbose:
                print(f"[Skip] No test texts for genre {genre} in {test_directory}")
            continue
        test_corpora[genre] = corpus

    rows = []
    for train_genre in genres:
        try:
            train = load_genre_corpus(train_directory, train_genre, n, unknown_threshold, verbose=verbose)
        except OSError as e:
            print(f"Error: {e}")
            continue
        if train is None:
            if verbose:
                print(f"[Skip] No training texts for genre {train_genre} in {train_directory}")
            continue
        for test_genre, test in test_corpora.items():
            pp = train.calculate_perplexity_from_model(test, n)
            if verbose:
                print(f"Train: {train_genre} | Test: {test_genre} | N: {n} | Perplexity: {pp}")
            rows.append({"train": train_genre, "test": test_genre, "n": n, "perplexity": pp})
    return pd.DataFrame(rows, columns=["train", "test", "n", "perplexity"])

def perplexity_matrix(df: pd.DataFrame) -> pd.DataFrame:
    """Pivot a perplexity table into train (rows) x test (columns)."""
    return df.pivot(index="train", columns="test", values="perplexity")

def classify_genres(df: pd.DataFrame) -> Dict[str, str]:
    """For each test genre, the training genre whose model gives the lowest perplexity."""
    result: Dict[str, str] = {}
    if df.empty:
        return result
    scored = df[df["perplexity"] > 0]
    for test_genre, group in scored.groupby("test"):
        result[test_genre] = group.loc[group["perplexity"].idxmin(), "train"]
    return result

def plot_perplexity_matrix(matrix: pd.DataFrame, path: str, title: str = "Perplexity"):
    """Save a heatmap of a train x test perplexity matrix."""
    if os.path.dirname(path):
        os.makedirs(os.path.dirname(path), exist_ok=True)
    with np.errstate(divide="ignore"):
        values = np.ma.masked_invalid(np.log10(matrix.to_numpy(dtype=float)))
    fig, ax = plt.subplots(figsize=(1.5 + 1.2 * len(matrix.columns), 1.2 + 1.0 * len(matrix.index)))
    im = ax.imshow(values, cmap="viridis")
    ax.set_xticks(range(len(matrix.columns)))
    ax.set_xticklabels(matrix.columns)
    ax.set_yticks(range(len(matrix.index)))
    ax.set_yticklabels(matrix.index)
    ax.set_xlabel("test")
    ax.set_ylabel("train")
    ax.set_title(title)
    fig.colorbar(im, ax=ax, label="log10 perplexity")
    fig.tight_layout()
    fig.savefig(path)
    plt.close(fig)


# TEXT GENERATION

def sentence_table(corpus: Corpus, max_n: int, num_words: int) -> pd.DataFrame:
    """One generated sentence per order 1..max_n."""
    rows = []
    for n in range(1, max_n + 1):
        rows.append({
            "corpus": corpus.get_name(),
            "n": n,
            "model": get_ngram_name(n),
            "sentence": corpus.create_sentence(n, num_words),
        })
    return pd.DataFrame(rows, columns=["corpus", "n", "model", "sentence"])


# CORPUS OVERVIEW

def corpus_summary(corpus: Corpus) -> pd.DataFrame:
    rows = []
    for n in sorted(corpus.ngram_models):
        model = corpus.ngram_models[n]
        rows.append({
            "corpus": corpus.get_name(),
            "n": n,
            "model": get_ngram_name(n),
            "total_count": model.get_total_count(),
            "unique_count": model.get_total_unique_count(),
            "vocabulary_size": model.get_vocabulary_size(),
            "unseen_count": model.frequency_count_map.get(0, 0),
        })
    return pd.DataFrame(rows, columns=["corpus", "n", "model", "total_count", "unique_count",
                                       "vocabulary_size", "unseen_count"])

def save_table_csv(df: pd.DataFrame, csv_path: str):
    if os.path.dirname(csv_path):
        os.makedirs(os.path.dirname(csv_path), exist_ok=True)
    df.to_csv(csv_path, index=False, encoding="utf-8")


# RANDOM DIGIT SANITY CHECK

def random_digit_tokens(num_digits: int, seed: int = 0) -> Iterator[str]:
    """Stream of uniformly random single-digit tokens."""
    rng = np.random.RandomState(seed)
    for _ in range(num_digits):
        yield str(rng.randint(10))

def random_digit_perplexity(num_digits: int = 10000, n: int = 5, unknown_threshold: int = 1,
                            seed: int = 0) -> float:
    """Perplexity of a random digit corpus against an identical copy of itself."""
    train = Corpus.from_token_sources("digits", [random_digit_tokens(num_digits, seed)],
                                      1, n, unknown_threshold, seed=DEFAULT_SEED)
    test = Corpus.from_token_sources("digits", [random_digit_tokens(num_digits, seed)],
                                     1, n, unknown_threshold, seed=DEFAULT_SEED)
    return train.calculate_perplexity_from_model(test, n)
