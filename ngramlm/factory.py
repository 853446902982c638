"""
Model Selection

Maps model descriptors to language model classes and validates a
selection before any data is read.
"""

from enum import Enum
from typing import Iterable, Optional, Sequence

from .backoff import KatzBigramLanguageModel, KatzGoodTuringBigramLanguageModel
from .base import LanguageModel
from .errors import MissingModelFileError, ModelNotImplementedError, UnknownModelError
from .model import BigramLanguageModel, TrigramLanguageModel, UnigramLanguageModel
from .sri import SriLanguageModel


class ModelKind(Enum):
    """Available language models."""
    BASELINE = "baseline"              # Unigram
    SRI = "sri"                        # Pre-trained ARPA file
    BIGRAM = "bigram"                  # Interpolated bigram
    TRIGRAM = "trigram"                # Interpolated trigram
    KATZ_BIGRAM = "katz-bigram"        # Fixed-discount Katz backoff
    KATZ_BIGRAM_PP = "katz-bigram-pp"  # Good-Turing Katz backoff
    KATZ_TRIGRAM = "katz-trigram"      # Not implemented

    @classmethod
    def parse(cls, name: str) -> 'ModelKind':
        """Case-insensitive lookup by descriptor."""
        try:
            return cls(name.lower())
        except ValueError:
            raise UnknownModelError(name) from None


_MODEL_CLASSES = {
    ModelKind.BASELINE: UnigramLanguageModel,
    ModelKind.BIGRAM: BigramLanguageModel,
    ModelKind.TRIGRAM: TrigramLanguageModel,
    ModelKind.KATZ_BIGRAM: KatzBigramLanguageModel,
    ModelKind.KATZ_BIGRAM_PP: KatzGoodTuringBigramLanguageModel,
}


def check_model_config(model, sri_path: Optional[str] = None) -> ModelKind:
    """
    Validate a model selection.

    Args:
        model: ModelKind or descriptor string
        sri_path: ARPA file, required by the sri model

    Returns:
        The selected ModelKind

    Raises:
        UnknownModelError, ModelNotImplementedError, MissingModelFileError
    """
    kind = model if isinstance(model, ModelKind) else ModelKind.parse(model)

    if kind == ModelKind.KATZ_TRIGRAM:
        raise ModelNotImplementedError(kind.value)
    if kind == ModelKind.SRI and sri_path is None:
        raise MissingModelFileError("SRI data file required for the sri model (use --sri)")

    return kind


def get_model(model, sentences: Optional[Iterable[Sequence[str]]] = None,
              sri_path: Optional[str] = None, **params) -> LanguageModel:
    """
    Factory function to build the selected language model.

    Args:
        model: ModelKind or descriptor string
        sentences: Training sentences (ignored by the sri model)
        sri_path: ARPA file for the sri model
        **params: Hyperparameters forwarded to the model constructor

    Returns:
        A trained (or loaded) LanguageModel
    """
    kind = check_model_config(model, sri_path)

    if kind == ModelKind.SRI:
        return SriLanguageModel(sri_path, **params)

    if sentences is None:
        raise ValueError(f"The {kind.value} model needs training sentences")
    return _MODEL_CLASSES[kind](sentences, **params)
