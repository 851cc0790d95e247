"""
Model file serialization.

A trained tokenizer is stored as two files sharing a path prefix:

- ``<prefix>.model`` holds the format tag followed by one ``"<left> <right>"``
  line per merge in ascending id order. It is the only file read back.
- ``<prefix>.vocab`` is a human-readable dump of every token.
"""

import logging
from pathlib import Path
from typing import Final

from ._sanitise import quote_bytes
from .errors import InvalidArgumentError, MalformedModelError, VersionMismatchError
from .types import BASE_VOCAB_SIZE, Encoding, TokenPair, Vocabulary

FORMAT_TAG: Final[str] = "tinybpe v1"
MODEL_SUFFIX: Final[str] = ".model"
VOCAB_SUFFIX: Final[str] = ".vocab"

_LINE_END: Final[bytes] = b"\r\n"

log = logging.getLogger(__name__)


def _merge_history(merges: Encoding) -> list[tuple[TokenPair, int]]:
    """Return merges sorted by merge token id (child pairs before parents)."""
    return sorted(merges.items(), key=lambda x: x[1])


def _with_suffix(file_prefix: str | Path, suffix: str) -> Path:
    # append rather than replace: "tok.v2" becomes "tok.v2.model"
    prefix = Path(file_prefix)
    return prefix.with_name(prefix.name + suffix)


def save_model(merges: Encoding, file_prefix: str | Path) -> Path:
    """Persist merge pairs to a .model file and return its path."""
    model_path = _with_suffix(file_prefix, MODEL_SUFFIX)
    # create directory if does not exist
    model_path.parent.mkdir(parents=True, exist_ok=True)

    log.debug(f"saving {len(merges)} merge rules to {model_path}")

    with model_path.open("w", encoding="utf-8", newline="\n") as f:
        f.write(f"{FORMAT_TAG}\n")
        # merge ids are implied by line order
        for (tok0, tok1), _ in _merge_history(merges):
            f.write(f"{tok0} {tok1}\n")

    return model_path


def save_vocab(merges: Encoding, vocab: Vocabulary, file_prefix: str | Path) -> Path:
    """Persist human-readable token representations to a .vocab file and return its path."""
    vocab_path = _with_suffix(file_prefix, VOCAB_SUFFIX)
    vocab_path.parent.mkdir(parents=True, exist_ok=True)

    log.debug(f"saving vocab to {vocab_path}")

    inverted_merges = {mtok: pair for pair, mtok in merges.items()}

    with vocab_path.open("w", encoding="utf-8", newline="\n") as f:
        for tok in sorted(vocab):
            subword = quote_bytes(vocab[tok])
            # token arises from merging: show derivation from child tokens
            if tok in inverted_merges:
                ctok0, ctok1 = inverted_merges[tok]
                subword0, subword1 = quote_bytes(vocab[ctok0]), quote_bytes(vocab[ctok1])
                f.write(f"[{subword0}][{subword1}] -> [{subword}] {tok}\n")
            else:
                # one of base 256 tokens: no merging
                f.write(f"[{subword}] {tok}\n")

    return vocab_path


def _parse_token(field: bytes) -> int | None:
    """Parse an unsigned ASCII decimal token id; ``None`` if the field is not one."""
    # bytes.isdigit() only accepts ASCII 0-9
    if field.isdigit():
        return int(field)
    return None


def load_merges(model_filename: str | Path) -> Encoding:
    """
    Read a merge table from a .model file.

    Ids are assigned from 256 upwards in file order. A line may only refer to
    ids defined on earlier lines, and a pair may only appear once. The file is
    read as bytes, so non-UTF-8 content surfaces as a model error.

    :param model_filename: Path to the .model file.
    :raises InvalidArgumentError: If the path does not end in ``.model``.
    :raises VersionMismatchError: If the first line is not the format tag.
    :raises MalformedModelError: If a merge line is not two valid token ids.
    :raises OSError: If the file cannot be read.
    """
    path = Path(model_filename)

    if path.suffix != MODEL_SUFFIX:
        raise InvalidArgumentError(
            f"expected {MODEL_SUFFIX} file", model_path=str(path)
        )

    log.info(f"loading model from {path}")

    merges: Encoding = {}

    with path.open("rb") as f:
        header = f.readline().rstrip(_LINE_END)
        if header != FORMAT_TAG.encode("ascii"):
            raise VersionMismatchError(
                "model version mismatch",
                model_path=str(path),
                found=header.decode("utf-8", errors="backslashreplace"),
                expected=FORMAT_TAG,
            )

        # the header is line 1
        for line_no, line in enumerate(f, start=2):
            fields = line.rstrip(_LINE_END).split(b" ")
            if len(fields) != 2:
                raise MalformedModelError(
                    f"expected 2 token ids, got {len(fields)} fields",
                    model_path=str(path),
                    line_no=line_no,
                )

            tok0, tok1 = _parse_token(fields[0]), _parse_token(fields[1])
            if tok0 is None or tok1 is None:
                raise MalformedModelError(
                    f"token id is not a number: {line.strip()!r}",
                    model_path=str(path),
                    line_no=line_no,
                )

            mtok = BASE_VOCAB_SIZE + len(merges)
            # out-of-order files would otherwise yield a silently wrong vocab
            if tok0 >= mtok or tok1 >= mtok:
                raise MalformedModelError(
                    f"merge refers to a token not defined yet: ({tok0}, {tok1}) -> {mtok}",
                    model_path=str(path),
                    line_no=line_no,
                )
            if (tok0, tok1) in merges:
                raise MalformedModelError(
                    f"duplicate merge pair: ({tok0}, {tok1})",
                    model_path=str(path),
                    line_no=line_no,
                )

            merges[(tok0, tok1)] = mtok

    log.debug(f"loaded {len(merges)} merge rules")
    return merges


__all__ = [
    "FORMAT_TAG",
    "MODEL_SUFFIX",
    "VOCAB_SUFFIX",
    "save_model",
    "save_vocab",
    "load_merges",
]
