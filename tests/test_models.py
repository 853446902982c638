import math

import pytest

from ngramlm.corpus import END_TOKEN, START_TOKEN, UNK_TOKEN, SentenceCollection
from ngramlm.errors import ConfigurationError
from ngramlm.model import BigramLanguageModel, TrigramLanguageModel, UnigramLanguageModel


def test_unigram_relative_frequencies(toy_sentences):
    model = UnigramLanguageModel(toy_sentences)

    # the=2, cat=sat=dog=ran=1, </S>=2, unknown=1
    assert model.unigram_probability("the") == pytest.approx(2 / 9)
    assert model.unigram_probability(END_TOKEN) == pytest.approx(2 / 9)
    assert model.sentence_probability(["the", "cat", "sat"]) == pytest.approx(
        (2 / 9) * (1 / 9) * (1 / 9) * (2 / 9))


def test_unknown_word_gets_unknown_weight(toy_sentences):
    model = UnigramLanguageModel(toy_sentences)
    assert model.unigram_probability(UNK_TOKEN) > 0
    assert model.unigram_probability("zebra") == pytest.approx(1 / 9)


def test_unknown_weight_positive_for_every_model(small_corpus):
    for cls in (UnigramLanguageModel, BigramLanguageModel, TrigramLanguageModel):
        model = cls(small_corpus)
        assert model.word_counts.weight_of(UNK_TOKEN) > 0


def test_bigram_start_distribution(toy_sentences):
    model = BigramLanguageModel(toy_sentences)
    assert model.bigram_counts.weight_of((START_TOKEN,), "the") == 1.0
    assert model.sentence_probability(["the", "cat", "sat"]) > 0


def test_bigram_interpolation(toy_sentences):
    model = BigramLanguageModel(toy_sentences)
    expected = 0.6 * 0.5 + 0.4 * (1 / 9)
    assert model.bigram_probability("the", "cat") == pytest.approx(expected)

    # Unseen pair and unseen word only get the unigram share
    assert model.bigram_probability("cat", "zebra") == pytest.approx(0.4 * (1 / 9))


def test_bigram_lambda_is_configurable(toy_sentences):
    model = BigramLanguageModel(toy_sentences, lambda_=1.0)
    assert model.bigram_probability("the", "cat") == pytest.approx(0.5)


def test_trigram_interpolation(toy_sentences):
    model = TrigramLanguageModel(toy_sentences)
    expected = 0.5 * 1.0 + 0.3 * 1.0 + 0.2 * (1 / 9)
    assert model.trigram_probability("the", "cat", "sat") == pytest.approx(expected)
    assert model.trigram_counts.weight_of((START_TOKEN, START_TOKEN), "the") == 1.0


@pytest.mark.parametrize("cls", [BigramLanguageModel, TrigramLanguageModel])
def test_context_distributions_sum_to_one(cls, small_corpus):
    model = cls(small_corpus)
    tables = [model.bigram_counts]
    if cls is TrigramLanguageModel:
        tables.append(model.trigram_counts)

    for table in tables:
        for context, dist in table.items():
            assert dist.total_weight() == pytest.approx(1.0), context
    assert model.word_counts.total_weight() == pytest.approx(1.0)


def test_interpolated_bigram_sums_to_one_over_vocabulary(small_corpus):
    model = BigramLanguageModel(small_corpus)
    for (previous_word,) in model.bigram_counts.contexts():
        total = sum(model.bigram_probability(previous_word, word) for word in model.word_counts)
        assert total == pytest.approx(1.0)


def test_sentence_is_not_mutated(toy_sentences):
    model = TrigramLanguageModel(toy_sentences)
    sentence = ["the", "cat", "sat"]
    model.sentence_probability(sentence)
    assert sentence == ["the", "cat", "sat"]
    assert toy_sentences[0] == ["the", "cat", "sat"]


def test_log_probability_matches_product(small_corpus):
    model = TrigramLanguageModel(small_corpus)
    sentence = ["the", "dog", "sat", "on", "the", "mat"]
    assert model.sentence_log_probability(sentence) == pytest.approx(
        math.log(model.sentence_probability(sentence)))


def test_counts_are_frozen_after_training(toy_sentences):
    model = BigramLanguageModel(toy_sentences)
    with pytest.raises(RuntimeError):
        model.word_counts.increment("the")
    with pytest.raises(RuntimeError):
        model.bigram_counts.increment(("the",), "cat")


@pytest.mark.parametrize("kwargs", [
    {"lambda1": 1.5},
    {"lambda1": 0.7, "lambda2": 0.5},
    {"lambda2": -0.1},
])
def test_invalid_trigram_weights(kwargs, toy_sentences):
    with pytest.raises(ConfigurationError):
        TrigramLanguageModel(toy_sentences, **kwargs)


def test_invalid_bigram_weight(toy_sentences):
    with pytest.raises(ConfigurationError):
        BigramLanguageModel(toy_sentences, lambda_=1.2)


def test_training_stats(small_corpus):
    model = TrigramLanguageModel(small_corpus)
    stats = model.training_stats
    assert stats['model'] == "trigram"
    assert stats['n'] == 3
    assert stats['num_sentences'] == len(small_corpus)
    assert stats['total_tokens'] == sum(len(s) + 1 for s in small_corpus)


def test_generation_is_repeatable_with_seed(small_corpus):
    first = UnigramLanguageModel(small_corpus, seed=11)
    second = UnigramLanguageModel(small_corpus, seed=11)
    assert first.generate_sentence(max_length=40) == second.generate_sentence(max_length=40)


def test_generation_stays_in_vocabulary(small_corpus):
    model = BigramLanguageModel(small_corpus, seed=3)
    for _ in range(5):
        sentence = model.generate_sentence(max_length=15)
        assert len(sentence) <= 15
        assert END_TOKEN not in sentence
        assert all(word in model.word_counts for word in sentence)


def test_training_from_sentence_file(tmp_path):
    path = tmp_path / "train.txt"
    path.write_text("The Cat sat\n\nthe dog RAN\n", encoding="utf-8")

    collection = SentenceCollection(path)
    assert len(collection) == 2

    model = BigramLanguageModel(collection)
    assert model.bigram_counts.weight_of((START_TOKEN,), "the") == 1.0
    assert "Cat" not in model.word_counts
