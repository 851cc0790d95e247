"""Factory functions for creating tokenizers."""

from pathlib import Path

from .tokenizer import Tokenizer


def from_pretrained(model_path: str | Path) -> Tokenizer:
    """
    Load a pre-trained tokenizer from disk.

    :param model_path: Path to the .model file.
    :return: Loaded tokenizer instance with merges and vocabulary.
    :raises InvalidArgumentError: If the path does not end in .model.
    :raises ModelLoadError: If the file has the wrong header or a malformed merge line.
    :raises OSError: If the file cannot be read.

    .. code-block:: python

        tokenizer = from_pretrained("models/shakespeare.model")
        tokens = tokenizer.encode(b"Hello world")
    """
    tokenizer = Tokenizer()
    tokenizer.load(model_path)
    return tokenizer
