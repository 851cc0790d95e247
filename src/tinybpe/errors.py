"""Custom exception hierarchy for tinybpe errors."""

from .types import Token


class TinyBPEError(Exception):
    """Base exception for all tinybpe errors."""


class InvalidArgumentError(TinyBPEError, ValueError):
    """Raised when a caller supplies an out-of-range size or a bad model path."""

    def __init__(
        self,
        message: str,
        *,
        vocab_size: object | None = None,
        model_path: str | None = None,
    ) -> None:
        """Initialize with optional vocab_size and model_path that get appended to the message."""
        extra = " "
        if vocab_size is not None:
            extra += f"(vocab size: {vocab_size}) "
        if model_path:
            extra += f"(path: {model_path}) "
        super().__init__((message + extra).rstrip())
        self.vocab_size = vocab_size
        self.model_path = model_path


class TrainingError(TinyBPEError):
    """Raised when tokenizer training cannot proceed."""

    def __init__(self, message: str, *, corpus_size: int | None = None) -> None:
        if corpus_size is not None:
            message = f"{message} (corpus size: {corpus_size})"
        super().__init__(message)
        self.corpus_size = corpus_size


class UnknownTokenError(TinyBPEError):
    """Raised when decoding meets a token id that is not in the vocabulary."""

    def __init__(self, token: Token, position: int) -> None:
        super().__init__(f"unknown token {token} at position {position}")
        self.token = token
        self.position = position


class ModelLoadError(TinyBPEError):
    """Raised when loading a tokenizer model fails."""

    def __init__(
        self,
        message: str,
        *,
        model_path: str | None = None,
        line_no: int | None = None,
    ) -> None:
        extra = " "
        if model_path:
            extra += f"(path: {model_path}) "
        if line_no is not None:
            extra += f"(line: {line_no}) "
        super().__init__((message + extra).rstrip())
        self.model_path = model_path
        self.line_no = line_no


class VersionMismatchError(ModelLoadError):
    """Raised when the model header is not the expected format tag."""

    def __init__(
        self, message: str, *, model_path: str | None = None, found: str, expected: str
    ) -> None:
        super().__init__(
            f"{message} (expected: {expected!r}) (got {found!r})",
            model_path=model_path,
        )
        self.found = found
        self.expected = expected


class MalformedModelError(ModelLoadError):
    """Raised when a merge line cannot be parsed into a valid pair of token ids."""
