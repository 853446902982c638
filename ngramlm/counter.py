"""
Frequency Distributions

Two-level counting structures used by every estimator. A distribution is
mutable while counts are accumulated and becomes read-only once it has been
normalized into probabilities.
"""

import bisect
import random
from collections import Counter, defaultdict
from typing import Dict, Hashable, Iterator, List, Optional, Tuple

from .corpus import UNK_TOKEN


class FrequencyDistribution:
    """
    Mapping from token to accumulated weight.

    Attributes:
        is_normalized: True once the weights have been turned into a
            probability distribution; further mutation is rejected.
    """

    def __init__(self):
        self._weights: Counter = Counter()
        self.is_normalized = False

    def _check_mutable(self) -> None:
        if self.is_normalized:
            raise RuntimeError("Distribution is normalized and can no longer be modified")

    def increment(self, key: Hashable, amount: float = 1.0) -> None:
        """Add ``amount`` to the weight of ``key``."""
        self._check_mutable()
        self._weights[key] += amount

    def set_weight(self, key: Hashable, value: float) -> None:
        self._check_mutable()
        self._weights[key] = value

    def weight_of(self, key: Hashable) -> float:
        """Return the weight of ``key``, or 0.0 if it was never seen."""
        return self._weights.get(key, 0.0)

    def total_weight(self) -> float:
        return sum(self._weights.values())

    def normalize(self) -> None:
        """
        Divide every weight by the current total.

        A distribution with zero total weight is frozen unchanged. Calling
        normalize twice raises RuntimeError instead of dividing again.
        """
        if self.is_normalized:
            raise RuntimeError("Distribution is already normalized")

        total = self.total_weight()
        if total > 0:
            for key in self._weights:
                self._weights[key] /= total
        self.is_normalized = True

    def keys(self):
        return self._weights.keys()

    def items(self):
        return self._weights.items()

    def sampler(self, fallback: Hashable = UNK_TOKEN) -> 'CumulativeSampler':
        """Build a sampler over the current weights in insertion order."""
        return CumulativeSampler(self._weights.items(), fallback=fallback)

    def __contains__(self, key: Hashable) -> bool:
        return key in self._weights

    def __iter__(self) -> Iterator[Hashable]:
        return iter(self._weights)

    def __len__(self) -> int:
        return len(self._weights)

    def __repr__(self) -> str:
        state = "normalized" if self.is_normalized else "accumulating"
        return f"FrequencyDistribution({len(self)} keys, {state})"


class ConditionalFrequencyDistribution:
    """
    Mapping from a context tuple to a FrequencyDistribution of next tokens.

    Each context has its own distribution and is normalized independently.
    """

    def __init__(self):
        self._distributions: Dict[Tuple, FrequencyDistribution] = defaultdict(FrequencyDistribution)
        self.is_normalized = False

    def increment(self, context: Tuple, key: Hashable, amount: float = 1.0) -> None:
        if self.is_normalized:
            raise RuntimeError("Distribution is normalized and can no longer be modified")
        self._distributions[context].increment(key, amount)

    def distribution(self, context: Tuple) -> FrequencyDistribution:
        """
        Return the distribution for ``context``.

        Unseen contexts get a fresh empty distribution that is not stored.
        """
        dist = self._distributions.get(context)
        if dist is None:
            dist = FrequencyDistribution()
        return dist

    def weight_of(self, context: Tuple, key: Hashable) -> float:
        dist = self._distributions.get(context)
        return dist.weight_of(key) if dist is not None else 0.0

    def total_weight(self, context: Tuple) -> float:
        dist = self._distributions.get(context)
        return dist.total_weight() if dist is not None else 0.0

    def normalize(self) -> None:
        if self.is_normalized:
            raise RuntimeError("Distribution is already normalized")
        for dist in self._distributions.values():
            dist.normalize()
        self.is_normalized = True

    def contexts(self):
        return self._distributions.keys()

    def items(self):
        return self._distributions.items()

    def __contains__(self, context: Tuple) -> bool:
        return context in self._distributions

    def __len__(self) -> int:
        return len(self._distributions)


class CumulativeSampler:
    """
    Draws tokens from a fixed list of (token, cumulative weight) pairs.

    The list is materialized once, so the same random source always yields
    the same tokens.
    """

    def __init__(self, weighted_items, fallback: Hashable = UNK_TOKEN):
        self.tokens: List[Hashable] = []
        self.cumulative: List[float] = []
        self.fallback = fallback

        running = 0.0
        for token, weight in weighted_items:
            running += weight
            self.tokens.append(token)
            self.cumulative.append(running)

    def sample(self, rng: Optional[random.Random] = None) -> Hashable:
        """
        Return the first token whose cumulative weight exceeds a uniform draw.

        Falls back to ``fallback`` if the weights sum to less than the
        draw (floating-point shortfall or an under-full distribution).
        """
        draw = (rng or random).random()
        idx = bisect.bisect_right(self.cumulative, draw)
        if idx < len(self.tokens):
            return self.tokens[idx]
        return self.fallback
