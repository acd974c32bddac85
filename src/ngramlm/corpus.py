from collections import Counter, deque
from typing import Deque, Dict, Iterable, List, Optional

import numpy as np

import ngramlm.data_utils as du
from ngramlm.ngram import (NgramModel, NgramModelBuilder, SmoothOptions,
                           anomaly_score, get_ngram_model_builder)
from ngramlm.token_list import TokenList

DEFAULT_SEED = 0


# MODEL TRAINING

def create_ngram_models(token_sources: Iterable[Iterable[str]], n_list: List[int],
                        unknown_threshold: int) -> Dict[int, NgramModel]:
    """
    Stream the tokens of every source through one builder per order in n_list.
    Words seen at most unknown_threshold times are folded into the unknown token
    before the models are built.
    """
    builders: List[NgramModelBuilder] = [get_ngram_model_builder(n) for n in n_list]
    windows: List[Deque[str]] = [deque(maxlen=n) for n in n_list]
    word_counts: Counter = Counter()

    # windows carry over from one source to the next
    for source in token_sources:
        for token in source:
            if not token:
                continue
            word_counts[token] += 1
            for n, window, builder in zip(n_list, windows, builders):
                window.append(token)
                if len(window) == n:
                    builder.add_tokens(TokenList(window))

    rare_words = {w for w, c in word_counts.items() if c <= unknown_threshold}
    models: Dict[int, NgramModel] = {}
    for builder in builders:
        model = builder.collapse_rare_words(rare_words).build()
        models[model.get_n()] = model
    return models


# CORPUS

class Corpus:
    """A named body of text with one n-gram model per order."""

    def __init__(self, name: str, ngram_models: Optional[Dict[int, NgramModel]] = None,
                 seed: int = DEFAULT_SEED):
        self.name = name
        self.ngram_models: Dict[int, NgramModel] = ngram_models or {}
        # sampling source owned by this corpus, fixed seed for reproducible output
        self.random = np.random.RandomState(seed)

    # -----------------
    # Construction
    # -----------------
    @classmethod
    def from_token_sources(cls, name: str, token_sources: Iterable[Iterable[str]],
                           min_n: int, max_n: int, unknown_threshold: int,
                           seed: int = DEFAULT_SEED) -> "Corpus":
        """Train models of every order in [min_n, max_n]. I/O errors from the sources propagate."""
        assert 1 <= min_n <= max_n
        models = create_ngram_models(token_sources, list(range(min_n, max_n + 1)), unknown_threshold)
        return cls(name, models, seed=seed)

    @classmethod
    def from_text(cls, name: str, text: str, max_n: int, unknown_threshold: int,
                  seed: int = DEFAULT_SEED) -> "Corpus":
        return cls.from_token_sources(name, [du.tokens_from_text(text)], 1, max_n,
                                      unknown_threshold, seed=seed)

    @classmethod
    def from_genre(cls, directory: str, genre: str, max_n: int, unknown_threshold: int,
                   min_n: int = 1, seed: int = DEFAULT_SEED) -> Optional["Corpus"]:
        """Corpus from every file of directory/genre, or None if that folder does not exist."""
        paths = du.genre_files(directory, genre)
        if paths is None:
            return None
        sources = [du.stream_tokens(p) for p in paths]
        return cls.from_token_sources(genre, sources, min_n, max_n, unknown_threshold, seed=seed)

    # -----------------
    # Queries
    # -----------------
    def get_name(self) -> str:
        return self.name

    def get_ngram_model(self, n: int) -> Optional[NgramModel]:
        return self.ngram_models.get(n)

    def get_probability(self, tokens: TokenList,
                        smooth_options: SmoothOptions = SmoothOptions.DEFAULT) -> float:
        """Probability of tokens under the model of matching order, 0.0 if there is none."""
        model = self.ngram_models.get(len(tokens))
        if model is None:
            return 0.0
        return model.get_probability(tokens, smooth_options)

    def calculate_perplexity_from_model(self, test_corpus: "Corpus", n: int) -> float:
        """
        Perplexity of this corpus's order-n model over the n-grams of test_corpus.
        Each distinct test n-gram is weighted by how often it occurs in the test set.
        """
        train_model = self.ngram_models.get(n)
        test_model = test_corpus.ngram_models.get(n)
        if train_model is None or test_model is None or test_model.get_total_count() == 0:
            return 0.0
        total = 0.0
        for tokens in test_model.get_iterator():
            occurrences = test_model.get_unsmoothed_token_frequency(tokens)
            total += occurrences * anomaly_score(train_model.get_probability(tokens, SmoothOptions.DEFAULT))
        total /= test_model.get_total_count()
        return float(np.exp(total))

    # -----------------
    # Generation
    # -----------------
    def create_sentence(self, n: int, num_words: int) -> str:
        """Generate num_words tokens with the order-n model, backing off while context is short."""
        if num_words <= 0 or n not in self.ngram_models or 1 not in self.ngram_models:
            return ""
        model = self.ngram_models[n]
        first = self.ngram_models[1].get_word(None, self.random.random_sample())
        parts = [first]
        previous_words = TokenList((first,))
        for _ in range(num_words - 1):
            next_word = self._generate_next_word(model, previous_words)
            previous_words = previous_words.add_last(next_word)
            if len(previous_words) > n - 1:
                previous_words = previous_words.tail()
            parts.append(next_word if du.is_punctuation(next_word) else " " + next_word)
        return "".join(parts)

    def _generate_next_word(self, model: NgramModel, previous_words: TokenList) -> str:
        """
        Sample the next word. When the context is shorter than model needs, use the
        highest available order the context can feed, dropping its oldest word when
        that order needs one word less.
        """
        if model.get_n() - 1 > len(previous_words):
            found = None
            for order in range(len(previous_words) + 1, 0, -1):
                found = self.ngram_models.get(order)
                if found is not None:
                    break
            if found is None:
                return ""
            model = found
            while len(previous_words) > model.get_n() - 1:
                previous_words = previous_words.tail()
        return model.get_word(previous_words, self.random.random_sample())

    def __repr__(self) -> str:
        return f"Corpus(name={self.name!r}, orders={sorted(self.ngram_models)})"


def merge_corpora(name: str, corpora: List[Corpus], seed: int = DEFAULT_SEED) -> Corpus:
    """Combine the raw counts of several corpora, order by order."""
    builders: Dict[int, NgramModelBuilder] = {}
    for corpus in corpora:
        for n, model in corpus.ngram_models.items():
            if n in builders:
                builders[n].absorb(model.deconstruct())
            else:
                builders[n] = model.deconstruct()
    return Corpus(name, {n: b.build() for n, b in builders.items()}, seed=seed)
