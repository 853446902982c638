import math

import pytest

from ngramlm.errors import ConfigurationError, MissingModelFileError
from ngramlm.sri import SriLanguageModel


ARPA = """\\data\\
ngram 1=5
ngram 2=3
ngram 3=1

\\1-grams:
-1.0\t<s>\t-0.5
-0.5\tthe\t-0.3
-0.7\tcat\t-0.2
-0.9\t</s>
-2.0\t<unk>

\\2-grams:
-0.2\t<s> the\t-0.1
-0.3\tthe cat
-0.4\tcat </s>

\\3-grams:
-0.1\t<s> <s> the

\\end\\
"""


@pytest.fixture
def arpa_file(tmp_path):
    path = tmp_path / "lm.arpa"
    path.write_text(ARPA, encoding="utf-8")
    return path


def test_values_are_converted_to_natural_log(arpa_file):
    model = SriLanguageModel(arpa_file)
    assert model.probabilities[("the",)] == pytest.approx(-0.5 * math.log(10))
    assert model.backoffs[("<s>", "the")] == pytest.approx(-0.1 * math.log(10))
    assert ("the", "cat") not in model.backoffs
    assert len(model.probabilities) == 9
    assert model.diagnostics == []


def test_trigram_hit(arpa_file):
    model = SriLanguageModel(arpa_file)
    assert model.trigram_probability("<s>", "<s>", "the") == pytest.approx(10 ** -0.1)


def test_bigram_fallback_uses_trigram_context_backoff(arpa_file):
    model = SriLanguageModel(arpa_file)
    assert model.trigram_probability("<s>", "the", "cat") == pytest.approx(10 ** (-0.3 - 0.1))


def test_unigram_fallback_uses_previous_word_backoff(arpa_file):
    model = SriLanguageModel(arpa_file)
    assert model.trigram_probability("the", "cat", "the") == pytest.approx(10 ** (-0.5 - 0.2))
    assert model.trigram_probability("the", "cat", "dog") == pytest.approx(10 ** (-2.0 - 0.2))


def test_sentence_probability(arpa_file):
    model = SriLanguageModel(arpa_file)
    assert model.sentence_probability(["the", "cat"]) == pytest.approx(10 ** -0.9)
    assert model.sentence_log_probability(["the", "cat"]) == pytest.approx(-0.9 * math.log(10))


def test_missing_path_is_configuration_error():
    with pytest.raises(MissingModelFileError):
        SriLanguageModel(None)
    assert issubclass(MissingModelFileError, ConfigurationError)


def test_missing_file_propagates(tmp_path):
    with pytest.raises(FileNotFoundError):
        SriLanguageModel(tmp_path / "absent.arpa")


def test_malformed_lines_are_reported(tmp_path):
    path = tmp_path / "bad.arpa"
    path.write_text(
        "-1.0\n-0.5\tthe\n-1.5\ta\tb\tc\n-abc\tfoo\n-0.7\tcat\tnan-ish\n-1.0\t<unk>\n",
        encoding="utf-8")
    model = SriLanguageModel(path)
    assert list(model.probabilities) == [("the",), ("<unk>",)]
    assert model.backoffs == {}
    assert len(model.diagnostics) == 4
    assert {d.context[0] for d in model.diagnostics} == {1, 3, 4, 5}
    assert all(d.message == "Malformed n-gram line" for d in model.diagnostics)


def test_missing_unknown_entry_scores_zero(tmp_path):
    path = tmp_path / "nounk.arpa"
    path.write_text("-0.5\tthe\n-0.5\t</s>\n", encoding="utf-8")
    model = SriLanguageModel(path)
    assert model.sentence_probability(["zebra"]) == 0.0
    messages = [d.message for d in model.diagnostics]
    assert "Underflow" in messages
    assert any("unknown" in message for message in messages)


def test_generation_uses_unigrams(arpa_file):
    model = SriLanguageModel(arpa_file, seed=2)
    sentence = model.generate_sentence(max_length=10)
    assert len(sentence) <= 10
    assert set(sentence) <= {"the", "cat", "<unk>"}
