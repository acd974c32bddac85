"""
Command line driver for training genre corpora and reporting on them.

Activities:
    - perplexity: every train genre against every test genre at order --n
    - generate:   random sentences from each train genre, orders 1..--n
    - summary:    per-order counts of each train genre
    - digits:     perplexity of a random digit corpus against itself
"""
import argparse
from typing import List, Optional

import pandas as pd

import ngramlm.evaluation as ev
from ngramlm.corpus import DEFAULT_SEED

PATH_TO_BOOKS_TRAIN = "data/books/train_books/"
PATH_TO_BOOKS_TEST = "data/books/test_books/"
DEFAULT_GENRES = ["children", "crime", "history"]
DEFAULT_N = 3
DEFAULT_UNKNOWN_THRESHOLD = 2
DEFAULT_NUM_WORDS = 300


def do_perplexity(args: argparse.Namespace) -> None:
    df = ev.perplexity_table(args.train_dir, args.test_dir, args.genres, args.n,
                             args.unknown_threshold, verbose=not args.quiet)
    if df.empty:
        print("No perplexities computed.")
        return
    print(ev.perplexity_matrix(df).to_string())
    for test_genre, train_genre in ev.classify_genres(df).items():
        print(f"Test: {test_genre} | Closest train genre: {train_genre}")
    if args.csv:
        ev.save_table_csv(df, args.csv)
        print(f"Saved table to {args.csv}")
    if args.plot:
        ev.plot_perplexity_matrix(ev.perplexity_matrix(df), args.plot,
                                  title=f"{args.n}-gram perplexity")
        print(f"Saved plot to {args.plot}")


def do_generate(args: argparse.Namespace) -> None:
    tables = []
    for genre in args.genres:
        try:
            corpus = ev.load_genre_corpus(args.train_dir, genre, args.n, args.unknown_threshold,
                                          verbose=not args.quiet)
        except OSError as e:
            print(f"Error: {e}")
            continue
        if corpus is None:
            print(f"[Skip] No training texts for genre {genre} in {args.train_dir}")
            continue
        table = ev.sentence_table(corpus, args.n, args.num_words)
        for row in table.itertuples(index=False):
            print(f"> {args.num_words}-word random sentence from {row.corpus} corpus using {row.model}:")
            print(row.sentence)
        tables.append(table)
    if args.csv and tables:
        ev.save_table_csv(pd.concat(tables, ignore_index=True), args.csv)
        print(f"Saved table to {args.csv}")


def do_summary(args: argparse.Namespace) -> None:
    for genre in args.genres:
        try:
            corpus = ev.load_genre_corpus(args.train_dir, genre, args.n, args.unknown_threshold,
                                          verbose=not args.quiet)
        except OSError as e:
            print(f"Error: {e}")
            continue
        if corpus is None:
            print(f"[Skip] No training texts for genre {genre} in {args.train_dir}")
            continue
        print(ev.corpus_summary(corpus).to_string(index=False))


def do_digits(args: argparse.Namespace) -> None:
    pp = ev.random_digit_perplexity(num_digits=args.num_words, n=args.n,
                                    unknown_threshold=args.unknown_threshold, seed=args.seed)
    print(f"N: {args.n} | Perplexity: {pp}")


def build_arg_parser() -> argparse.ArgumentParser:
    p = argparse.ArgumentParser(description="N-gram corpus language models")
    p.add_argument("activity", choices=["perplexity", "generate", "summary", "digits"],
                   help="Select which activity to perform")
    p.add_argument("--train-dir", type=str, default=PATH_TO_BOOKS_TRAIN,
                   help="Folder with one subfolder of training texts per genre")
    p.add_argument("--test-dir", type=str, default=PATH_TO_BOOKS_TEST,
                   help="Folder with one subfolder of test texts per genre")
    p.add_argument("--genres", nargs="+", default=DEFAULT_GENRES, help="Genres to process")
    p.add_argument("--n", type=int, default=DEFAULT_N, help="Highest n-gram order")
    p.add_argument("--unknown-threshold", type=int, default=DEFAULT_UNKNOWN_THRESHOLD,
                   help="Words seen at most this many times become the unknown token")
    p.add_argument("--num-words", type=int, default=DEFAULT_NUM_WORDS,
                   help="Words per generated sentence (digits per corpus for 'digits')")
    p.add_argument("--seed", type=int, default=DEFAULT_SEED, help="Seed for the random digits")
    p.add_argument("--csv", type=str, default=None, help="Write the result table to this CSV")
    p.add_argument("--plot", type=str, default=None, help="Write the perplexity heatmap here")
    p.add_argument("--quiet", action="store_true", help="Only print results")
    return p


def main(argv: Optional[List[str]] = None) -> None:
    parser = build_arg_parser()
    args = parser.parse_args(argv)
    if args.n < 1:
        parser.error("--n must be at least 1")
    if args.unknown_threshold < 0:
        parser.error("--unknown-threshold must not be negative")

    if args.activity == "perplexity":
        do_perplexity(args)
    elif args.activity == "generate":
        do_generate(args)
    elif args.activity == "summary":
        do_summary(args)
    elif args.activity == "digits":
        do_digits(args)


if __name__ == "__main__":
    main()
