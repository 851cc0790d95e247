"""tinybpe: byte-level byte pair encoding tokenizer."""

from .codec import FORMAT_TAG, MODEL_SUFFIX, VOCAB_SUFFIX
from .errors import (
    InvalidArgumentError,
    MalformedModelError,
    ModelLoadError,
    TinyBPEError,
    TrainingError,
    UnknownTokenError,
    VersionMismatchError,
)
from .factory import from_pretrained
from .tokenizer import Tokenizer
from .types import BASE_VOCAB_SIZE, MAX_VOCAB_SIZE

from importlib.metadata import PackageNotFoundError, version

try:
    __version__ = version("tinybpe")
except PackageNotFoundError:
    __version__ = "dev"

__all__ = [
    "Tokenizer",
    "from_pretrained",
    "TinyBPEError",
    "InvalidArgumentError",
    "TrainingError",
    "UnknownTokenError",
    "ModelLoadError",
    "VersionMismatchError",
    "MalformedModelError",
    "BASE_VOCAB_SIZE",
    "MAX_VOCAB_SIZE",
    "FORMAT_TAG",
    "MODEL_SUFFIX",
    "VOCAB_SUFFIX",
]
