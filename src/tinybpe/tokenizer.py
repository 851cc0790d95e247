"""
Byte-level BPE tokenizer.
"""

from collections.abc import Iterable
from concurrent.futures import ThreadPoolExecutor
import logging
import os
from pathlib import Path

from ._bpe import apply_merges, base_vocab, build_vocab
from ._decorators import measure_time
from .codec import load_merges, save_model, save_vocab
from .errors import InvalidArgumentError, UnknownTokenError
from .trainer import train_bpe
from .types import BASE_VOCAB_SIZE, MAX_VOCAB_SIZE, Encoding, Token, Vocabulary

log = logging.getLogger(__name__)


class Tokenizer:
    """
    Tokenizer that learns byte pair merges directly on raw bytes.

    Holds the merge table (the canonical trained state) and the vocabulary
    derived from it. ``train`` and ``load`` replace both together; after
    either returns, ``encode`` and ``decode`` only read them and are safe to
    call from several threads.
    """

    def __init__(self) -> None:
        """Initialize tokenizer with base 256 vocabulary and no merges."""
        # byte pair -> merge token
        self.merges: Encoding = {}
        # tokens -> bytes
        self.vocab: Vocabulary = base_vocab()

    @measure_time
    def train(self, corpus: bytes, vocab_size: int, verbose: bool = False) -> None:
        """
        Train the tokenizer on a raw byte corpus.

        Learns ``vocab_size - 256`` merges on top of the base byte vocabulary,
        replacing any previously trained or loaded state.

        :param corpus: Training data as bytes.
        :param vocab_size: Target vocabulary size including the base 256 bytes.
        :param verbose: Log each learned merge when ``True``.
        :raises InvalidArgumentError: If ``vocab_size`` is outside ``[256, MAX_VOCAB_SIZE)``.
        :raises TrainingError: If merges are requested from a corpus shorter than 2 bytes.
        """
        # bool is an int subclass but never a meaningful size
        if (
            not isinstance(vocab_size, int)
            or isinstance(vocab_size, bool)
            or not BASE_VOCAB_SIZE <= vocab_size < MAX_VOCAB_SIZE
        ):
            raise InvalidArgumentError(
                f"vocab size must be within [{BASE_VOCAB_SIZE}, {MAX_VOCAB_SIZE})",
                vocab_size=vocab_size,
            )

        tokens = list(bytes(corpus))
        # merges beyond base byte vocabulary
        n_merges = vocab_size - BASE_VOCAB_SIZE

        log.info(f"training on {len(tokens)} bytes for {n_merges} merges")
        result = train_bpe(tokens, n_merges, verbose=verbose)

        # swap both structures at once
        self.merges, self.vocab = result.merges, result.vocab

    def encode(self, data: bytes) -> list[Token]:
        """
        Encode bytes into tokens, applying the earliest learned merges first.

        :param data: Input bytes to encode.
        :returns: Encoded token sequence.
        """
        # convert each byte to [0-255] token range
        return apply_merges(list(bytes(data)), self.merges)

    def decode(self, tokens: Iterable[Token]) -> bytes:
        """
        Decode a sequence of tokens back into bytes.

        :param tokens: Token sequence to decode.
        :returns: Concatenation of the bytes of every token.
        :raises UnknownTokenError: On the first token not in the vocabulary.
        """
        vocab = self.vocab
        chunks: list[bytes] = []
        for position, tok in enumerate(tokens):
            # floats and bools hash like ints but are not token ids
            if not isinstance(tok, int) or isinstance(tok, bool):
                raise UnknownTokenError(tok, position)
            try:
                chunks.append(vocab[tok])
            except KeyError:
                raise UnknownTokenError(tok, position) from None
        return b"".join(chunks)

    def encode_batch(
        self, inputs: list[bytes], num_workers: int | None = None
    ) -> list[list[Token]]:
        """
        Encode independent inputs, in parallel when there is more than one.

        Parallelization happens across inputs, never within one, because
        merges can span arbitrary byte boundaries inside a single input.

        :param inputs: Byte strings to encode.
        :param num_workers: Worker count, defaults to the CPU count.
        :returns: Encoded token sequences in input order.
        """
        if len(inputs) <= 1:
            return [self.encode(data) for data in inputs]
        with ThreadPoolExecutor(max_workers=_workers(num_workers)) as pool:
            return list(pool.map(self.encode, inputs))

    def decode_batch(
        self, token_batch: list[list[Token]], num_workers: int | None = None
    ) -> list[bytes]:
        """
        Decode independent token sequences, in parallel when there is more than one.

        :raises UnknownTokenError: If any sequence holds an unknown token.
        """
        if len(token_batch) <= 1:
            return [self.decode(tokens) for tokens in token_batch]
        with ThreadPoolExecutor(max_workers=_workers(num_workers)) as pool:
            return list(pool.map(self.decode, token_batch))

    def vocab_size(self) -> int:
        """Return the number of tokens in the vocabulary."""
        return len(self.vocab)

    def save(self, file_prefix: str | Path) -> Path:
        """
        Save tokenizer state to disk.

        Creates two files: a .model file with the merge pairs and a .vocab file
        with human-readable token representations. Missing parent directories
        are created.

        :param file_prefix: Path prefix for output files.
        :returns: Path of the written .model file.
        :raises OSError: If either file cannot be written.
        """
        log.info(f"saving tokenizer to {file_prefix}")
        model_path = save_model(self.merges, file_prefix)
        save_vocab(self.merges, self.vocab, file_prefix)
        log.info("tokenizer saved successfully")
        return model_path

    def load(self, model_filename: str | Path) -> None:
        """
        Load tokenizer state from a .model file.

        Restores merge mappings and rebuilds vocabulary. The current state is
        only replaced once the whole file has been read successfully.

        :param model_filename: Path to the .model file.
        :raises InvalidArgumentError: If the extension is not .model.
        :raises VersionMismatchError: If the header is not the expected format tag.
        :raises MalformedModelError: If a merge line is invalid.
        :raises OSError: If the file cannot be read.
        """
        merges = load_merges(model_filename)
        vocab = build_vocab(merges)

        self.merges, self.vocab = merges, vocab

        log.info(
            f"model loaded successfully: {len(self.merges)} merge rules, {len(self.vocab)} total tokens"
        )


def _workers(num_workers: int | None) -> int:
    if num_workers is None:
        return os.cpu_count() or 1
    return max(1, num_workers)
