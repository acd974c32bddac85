import math
from bisect import bisect_right
from collections import Counter
from dataclasses import dataclass
from typing import Dict, Iterator, List, NamedTuple, Optional, Set, Union

from ngramlm.token_list import TokenList, UNKNOWN_WORD_TOKEN

# Saturation value for counts derived from the vocabulary size
MAX_COUNT = 2**31 - 1

# HELPERS

def saturating_pow(base: int, exponent: int) -> int:
    """Return min(MAX_COUNT, base ** exponent) without building huge ints."""
    result = 1
    for _ in range(exponent):
        result *= base
        if result >= MAX_COUNT:
            return MAX_COUNT
    return result

def anomaly_score(probability: float) -> float:
    """Negative natural log of a probability; infinite for p <= 0."""
    if probability <= 0:
        return float("inf")
    return -math.log(probability)

def get_ngram_name(n: int) -> str:
    """Human-readable name of an n-gram order."""
    names = {1: "unigram", 2: "bigram", 3: "trigram"}
    return names.get(n, f"{n}-gram")


@dataclass(frozen=True)
class SmoothOptions:
    """
    Frequencies >= cutoff are used as observed, lower ones are smoothed.
    cutoff=0 never smooths, cutoff=inf always smooths.
    """
    cutoff: float

    @classmethod
    def with_cutoff(cls, cutoff: float) -> "SmoothOptions":
        return cls(cutoff)

SmoothOptions.UNSMOOTHED = SmoothOptions(0)
SmoothOptions.SMOOTHED = SmoothOptions(math.inf)
SmoothOptions.DEFAULT = SmoothOptions(5)


class TokenFrequency(NamedTuple):
    value: str
    frequency: int
    cumulative_frequency: int  # sum of the frequencies listed before this token


# N-GRAM MODEL

class NgramModel:
    """
    Read-only n-gram model produced by NgramModelBuilder.build().

    Order 1 keeps a list of TokenFrequency entries (with cumulative offsets for
    sampling) and an index into it. Order n > 1 keeps a map from the first token
    to an order n-1 sub-model.
    """

    def __init__(self, n: int):
        assert n >= 1
        self.n = n
        self.total_count = 0
        self.total_unique_count = 0
        self.frequency_count_map: Dict[int, int] = {}
        self.vocabulary: Set[str] = set()
        # order 1
        self.token_frequencies: List[TokenFrequency] = []
        self.token_index: Dict[str, int] = {}
        self.cumulative_frequencies: List[int] = []
        # order > 1
        self.children: Dict[str, "NgramModel"] = {}

    # -----------------
    # Counts
    # -----------------
    def get_n(self) -> int:
        return self.n

    def get_total_count(self) -> int:
        return self.total_count

    def get_total_unique_count(self) -> int:
        return self.total_unique_count

    def get_vocabulary_size(self) -> int:
        return len(self.vocabulary)

    def is_in_vocabulary(self, token: str) -> bool:
        return token in self.vocabulary

    def get_unsmoothed_token_frequency(self, tokens: TokenList) -> int:
        """Observed count of an n-gram of exactly this model's order."""
        assert len(tokens) == self.n, "n-gram length must match the model order"
        token = tokens.head().lower()
        if self.n == 1:
            if token in self.token_index:
                return self.token_frequencies[self.token_index[token]].frequency
            if not self.is_in_vocabulary(token) and UNKNOWN_WORD_TOKEN in self.token_index:
                return self.token_frequencies[self.token_index[UNKNOWN_WORD_TOKEN]].frequency
            return 0
        if token in self.children:
            return self.children[token].get_unsmoothed_token_frequency(tokens.tail())
        if not self.is_in_vocabulary(token) and UNKNOWN_WORD_TOKEN in self.children:
            return self.children[UNKNOWN_WORD_TOKEN].get_unsmoothed_token_frequency(tokens.tail())
        return 0

    def get_token_frequency(self, tokens: TokenList,
                            smooth_options: SmoothOptions = SmoothOptions.DEFAULT) -> float:
        """Observed frequency, or its Good-Turing estimate when below the cutoff."""
        c = self.get_unsmoothed_token_frequency(tokens)
        if c >= smooth_options.cutoff:
            return c
        one_larger = self.frequency_count_map.get(c + 1)
        if one_larger is None:
            return c
        current = self.frequency_count_map.get(c)
        if not current:
            return c
        return (c + 1) * (one_larger / current)

    def get_probability(self, tokens: TokenList,
                        smooth_options: SmoothOptions = SmoothOptions.DEFAULT) -> float:
        """Probability of the n-gram among all n-grams of this model."""
        if self.total_count == 0:
            return 0.0
        frequency = self.get_token_frequency(tokens, smooth_options)
        result = frequency / self.total_count
        if result < 0:
            # the unseen bucket goes negative when more n-grams were seen than V^n allows
            return frequency
        return result

    # -----------------
    # Sampling
    # -----------------
    def get_word(self, previous_tokens: Optional[TokenList], p: float) -> str:
        """
        Pick a word by where p in [0, 1) falls among the cumulative frequencies.
        Order n > 1 first follows previous_tokens (n-1 tokens) down to a unigram.
        Returns "" when p is out of range or the context was never observed.
        """
        if self.n == 1:
            if self.total_count == 0 or p < 0.0 or p >= 1.0:
                return ""
            scaled = p * self.total_count
            i = bisect_right(self.cumulative_frequencies, scaled) - 1
            if i < 0:
                return ""
            entry = self.token_frequencies[i]
            if entry.cumulative_frequency <= scaled < entry.cumulative_frequency + entry.frequency:
                return entry.value
            return ""
        token = previous_tokens.head().lower()
        if token in self.children:
            return self.children[token].get_word(previous_tokens.tail(), p)
        return ""

    # -----------------
    # Enumeration
    # -----------------
    def get_iterator(self) -> Iterator[TokenList]:
        """Lazily yield every distinct observed n-gram once."""
        if self.n == 1:
            for entry in self.token_frequencies:
                yield TokenList((entry.value,))
            return
        for token, child in self.children.items():
            for tokens in child.get_iterator():
                yield tokens.add_first(token)

    def __iter__(self) -> Iterator[TokenList]:
        return self.get_iterator()

    def replace_unknowns(self, tokens: TokenList) -> TokenList:
        """Copy of tokens with out-of-vocabulary words turned into the unknown token."""
        if tokens.contains_unknown():
            return tokens
        return TokenList(t if self.is_in_vocabulary(t) else UNKNOWN_WORD_TOKEN for t in tokens)

    def deconstruct(self) -> "NgramModelBuilder":
        """Builder pre-filled with every n-gram of this model at its observed count."""
        builder = get_ngram_model_builder(self.n)
        for tokens in self.get_iterator():
            builder.add_tokens_num_times(tokens, self.get_unsmoothed_token_frequency(tokens))
        return builder

    def __repr__(self) -> str:
        return (f"NgramModel(n={self.n}, total_count={self.total_count}, "
                f"total_unique_count={self.total_unique_count})")


# N-GRAM MODEL BUILDER

class NgramModelBuilder:
    """
    Mutable counterpart of NgramModel used while training.
    frequency_map holds token -> count for order 1 and token -> builder otherwise.
    """

    def __init__(self, n: int):
        assert n >= 1
        self.n = n
        self.frequency_map: Dict[str, Union[int, "NgramModelBuilder"]] = {}

    def _child(self, token: str) -> "NgramModelBuilder":
        if token not in self.frequency_map:
            self.frequency_map[token] = get_ngram_model_builder(self.n - 1)
        return self.frequency_map[token]

    def add_tokens(self, tokens: TokenList) -> "NgramModelBuilder":
        """Count one occurrence of the n-gram."""
        return self.add_tokens_num_times(tokens, 1)

    def add_tokens_num_times(self, tokens: TokenList, num: int) -> "NgramModelBuilder":
        if num == 0:
            return self
        assert len(tokens) == self.n, "n-gram length must match the builder order"
        token = tokens.head()
        if self.n == 1:
            self.frequency_map[token] = self.frequency_map.get(token, 0) + num
        else:
            self._child(token).add_tokens_num_times(tokens.tail(), num)
        return self

    def absorb(self, other: "NgramModelBuilder") -> "NgramModelBuilder":
        """Merge the counts of a same-order builder into this one. other is consumed."""
        assert other.n == self.n, "can only absorb a builder of the same order"
        for token, value in other.frequency_map.items():
            if token not in self.frequency_map:
                self.frequency_map[token] = value
            elif self.n == 1:
                self.frequency_map[token] += value
            else:
                self.frequency_map[token].absorb(value)
        return self

    def collapse_rare_words(self, rare_words: Set[str]) -> "NgramModelBuilder":
        """Fold every rare token, at every position, into the unknown token."""
        if not rare_words:
            return self
        if self.n > 1:
            for child in self.frequency_map.values():
                child.collapse_rare_words(rare_words)
        collapsed: Dict[str, Union[int, "NgramModelBuilder"]] = {}
        for token, value in self.frequency_map.items():
            key = UNKNOWN_WORD_TOKEN if token in rare_words else token
            if key not in collapsed:
                collapsed[key] = value
            elif self.n == 1:
                collapsed[key] += value
            else:
                collapsed[key].absorb(value)
        self.frequency_map = collapsed
        return self

    def build(self) -> NgramModel:
        model = NgramModel(self.n)
        if self.n == 1:
            for token, frequency in self.frequency_map.items():
                model.vocabulary.add(token)
                model.token_frequencies.append(TokenFrequency(token, frequency, model.total_count))
                model.token_index[token] = len(model.token_frequencies) - 1
                model.cumulative_frequencies.append(model.total_count)
                model.total_count += frequency
                model.total_unique_count += 1
            model.frequency_count_map = dict(Counter(self.frequency_map.values()))
            model.frequency_count_map[0] = 0
            return model

        counts: Counter = Counter()
        for token, child_builder in self.frequency_map.items():
            child = child_builder.build()
            model.vocabulary.update(child.vocabulary)
            model.total_count += child.total_count
            model.total_unique_count += child.total_unique_count
            counts.update(child.frequency_count_map)
            model.children[token] = child
        model.frequency_count_map = dict(counts)
        # V only counts last-position tokens, so this can end up below zero
        unseen = saturating_pow(model.get_vocabulary_size(), self.n)
        if unseen < MAX_COUNT:
            unseen -= model.total_unique_count
        model.frequency_count_map[0] = unseen
        return model


def get_ngram_model_builder(n: int) -> NgramModelBuilder:
    """Empty builder for an order-n model."""
    return NgramModelBuilder(n)
