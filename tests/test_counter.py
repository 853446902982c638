import random

import pytest

from ngramlm.corpus import UNK_TOKEN
from ngramlm.counter import ConditionalFrequencyDistribution, CumulativeSampler, FrequencyDistribution


class FixedRandom:
    def __init__(self, value):
        self.value = value

    def random(self):
        return self.value


def test_weight_of_missing_key_is_zero():
    dist = FrequencyDistribution()
    dist.increment("a", 2.0)
    assert dist.weight_of("a") == 2.0
    assert dist.weight_of("b") == 0.0
    assert "b" not in dist


def test_normalize_produces_probabilities():
    dist = FrequencyDistribution()
    dist.increment("a", 3.0)
    dist.increment("b")
    dist.normalize()

    assert dist.is_normalized
    assert dist.weight_of("a") == pytest.approx(0.75)
    assert dist.total_weight() == pytest.approx(1.0)


def test_normalize_twice_is_rejected():
    dist = FrequencyDistribution()
    dist.increment("a")
    dist.normalize()
    with pytest.raises(RuntimeError):
        dist.normalize()
    assert dist.weight_of("a") == 1.0


def test_frozen_distribution_rejects_increment():
    dist = FrequencyDistribution()
    dist.increment("a")
    dist.normalize()
    with pytest.raises(RuntimeError):
        dist.increment("a")
    with pytest.raises(RuntimeError):
        dist.set_weight("b", 0.5)


def test_normalize_empty_distribution_is_noop():
    dist = FrequencyDistribution()
    dist.normalize()
    assert dist.is_normalized
    assert dist.total_weight() == 0.0


def test_conditional_distribution_per_context():
    cfd = ConditionalFrequencyDistribution()
    cfd.increment(("a",), "x")
    cfd.increment(("a",), "y", 3.0)
    cfd.increment(("b",), "x")

    assert cfd.total_weight(("a",)) == 4.0
    assert cfd.weight_of(("c",), "x") == 0.0

    cfd.normalize()
    assert cfd.weight_of(("a",), "y") == pytest.approx(0.75)
    assert cfd.weight_of(("b",), "x") == 1.0
    with pytest.raises(RuntimeError):
        cfd.increment(("a",), "x")


def test_unseen_context_is_not_stored():
    cfd = ConditionalFrequencyDistribution()
    dist = cfd.distribution(("nothing",))
    assert len(dist) == 0
    assert ("nothing",) not in cfd


def test_lookups_do_not_create_entries():
    dist = FrequencyDistribution()
    dist.increment("a")
    dist.increment("a", 0.5)
    assert dist.weight_of("a") == 1.5
    assert dist.weight_of("missing") == 0.0
    assert list(dist) == ["a"]

    cfd = ConditionalFrequencyDistribution()
    cfd.increment(("a",), "x")
    assert cfd.weight_of(("b",), "x") == 0.0
    assert cfd.total_weight(("b",)) == 0.0
    assert list(cfd.contexts()) == [("a",)]


def test_tuple_contexts_do_not_collide_with_tokens():
    cfd = ConditionalFrequencyDistribution()
    cfd.increment(("ab", "c"), "x")
    cfd.increment(("a", "bc"), "y")
    assert cfd.weight_of(("ab", "c"), "y") == 0.0
    assert len(cfd) == 2


def test_sampler_walks_cumulative_weights():
    sampler = CumulativeSampler([("a", 0.2), ("b", 0.5), ("c", 0.3)])
    assert sampler.sample(FixedRandom(0.1)) == "a"
    assert sampler.sample(FixedRandom(0.2)) == "b"
    assert sampler.sample(FixedRandom(0.69)) == "b"
    assert sampler.sample(FixedRandom(0.95)) == "c"


def test_sampler_skips_zero_weights_and_falls_back():
    sampler = CumulativeSampler([("a", 0.0), ("b", 0.5)])
    assert sampler.sample(FixedRandom(0.0)) == "b"
    assert sampler.sample(FixedRandom(0.7)) == UNK_TOKEN

    custom = CumulativeSampler([("a", 0.1)], fallback="<unk>")
    assert custom.sample(FixedRandom(0.5)) == "<unk>"


def test_sampler_is_repeatable_with_same_seed():
    dist = FrequencyDistribution()
    for token, weight in [("a", 1.0), ("b", 2.0), ("c", 3.0)]:
        dist.increment(token, weight)
    dist.normalize()
    sampler = dist.sampler()

    first = [sampler.sample(random.Random(7)) for _ in range(5)]
    second = [sampler.sample(random.Random(7)) for _ in range(5)]
    assert first == second
