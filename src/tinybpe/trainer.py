"""Standalone BPE training module."""

from dataclasses import dataclass
import logging

from ._bpe import base_vocab, bpe_merge, most_frequent_pair
from ._sanitise import quote_bytes
from .errors import TrainingError
from .types import BASE_VOCAB_SIZE, Encoding, Token, Vocabulary

log = logging.getLogger(__name__)


@dataclass
class BPETrainingResult:
    """Results from one BPE training run."""

    vocab: Vocabulary
    merges: Encoding
    n_merges_completed: int


def train_bpe(
    tokens: list[Token], n_merges: int, verbose: bool = False
) -> BPETrainingResult:
    """
    Learn up to ``n_merges`` merges from a token sequence.

    Each iteration picks the most frequent adjacent pair (ties go to the pair
    that reached the top count first in the scan), gives it the next free id
    and rewrites the sequence with it.

    :param tokens: Input token sequence, one token per corpus byte.
    :param n_merges: Number of merge operations to perform.
    :param verbose: Log each learned merge when ``True``.
    :returns: Training output containing vocab, merge rules, and completed merge count.
        If the sequence collapses to a single token first, training stops early and
        the result holds fewer than ``n_merges`` merges (ids stay dense from 256).
    :raises TrainingError: If merges are requested but ``tokens`` holds no pair.
    """
    if n_merges > 0 and len(tokens) < 2:
        raise TrainingError(
            "corpus too short to learn any merge", corpus_size=len(tokens)
        )

    merges: Encoding = {}
    vocab: Vocabulary = base_vocab()

    for i in range(n_merges):
        best = most_frequent_pair(tokens)
        if best is None:
            log.warning(
                f"no more byte pairs to merge after {i} merges "
                f"(requested {n_merges}) stopping early"
            )
            break

        pair, count = best
        new_tok = BASE_VOCAB_SIZE + i
        merges[pair] = new_tok
        vocab[new_tok] = vocab[pair[0]] + vocab[pair[1]]
        tokens = bpe_merge(tokens, pair, new_tok)

        if verbose:
            log.info(
                "merge %d/%d: %s -> %d %s (%d occurrences)",
                i + 1,
                n_merges,
                pair,
                new_tok,
                quote_bytes(vocab[new_tok]),
                count,
            )

    return BPETrainingResult(
        vocab=vocab,
        merges=merges,
        n_merges_completed=len(merges),
    )


__all__ = ["BPETrainingResult", "train_bpe"]
