"""Command line interface: train, encode and decode with tinybpe models."""

import argparse
import json
import logging
import os
import sys
import time
from pathlib import Path
from typing import Final

from . import __version__
from .errors import InvalidArgumentError, TinyBPEError
from .factory import from_pretrained
from .tokenizer import Tokenizer
from .types import BASE_VOCAB_SIZE, MAX_VOCAB_SIZE, Token

DEFAULT_VOCAB_SIZE: Final[int] = 512
DEFAULT_MODELS_DIR: Final[str] = "models"


def read_corpus(files: list[str]) -> bytes:
    """Concatenate the given files in order, or read all of stdin when none are given."""
    if not files:
        return sys.stdin.buffer.read()
    return b"".join(Path(name).read_bytes() for name in files)


def parse_tokens(data: bytes) -> list[Token]:
    """Parse a JSON list of token ids."""
    try:
        tokens = json.loads(data)
    except ValueError as e:
        raise InvalidArgumentError(f"can't decode tokens: {e}") from e
    if not isinstance(tokens, list) or not all(
        isinstance(tok, int) and not isinstance(tok, bool) for tok in tokens
    ):
        raise InvalidArgumentError("can't decode tokens: expected a JSON list of integers")
    return tokens


def _vocab_size(value: str) -> int:
    """argparse type for the target vocabulary size."""
    msg = f"values for -s should be within the range [{BASE_VOCAB_SIZE}...{MAX_VOCAB_SIZE})"
    try:
        size = int(value)
    except ValueError:
        raise argparse.ArgumentTypeError(msg) from None
    if not BASE_VOCAB_SIZE <= size < MAX_VOCAB_SIZE:
        raise argparse.ArgumentTypeError(msg)
    return size


def _cmd_train(args: argparse.Namespace) -> int:
    corpus = read_corpus(args.files)
    name = args.output or f"model_{args.size}_{int(time.time())}"

    tokenizer = Tokenizer()
    start = time.perf_counter()
    tokenizer.train(corpus, args.size, verbose=args.verbose)
    if args.verbose:
        elapsed = time.perf_counter() - start
        print(f"Elapsed time: {elapsed:.3f}s")
        n_iters = args.size - BASE_VOCAB_SIZE
        if n_iters:
            print(f"Average time per iteration: {elapsed / n_iters:.4f}s")

    model_path = tokenizer.save(Path(args.models_dir) / name)
    print(f"Model saved: {model_path}")
    return 0


def _cmd_encode(args: argparse.Namespace) -> int:
    tokenizer = from_pretrained(args.model)
    tokens = tokenizer.encode(read_corpus(args.files))
    print(json.dumps(tokens))
    return 0


def _cmd_decode(args: argparse.Namespace) -> int:
    tokenizer = from_pretrained(args.model)
    tokens = parse_tokens(read_corpus(args.files))
    data = tokenizer.decode(tokens)
    sys.stdout.flush()
    sys.stdout.buffer.write(data + b"\n")
    sys.stdout.buffer.flush()
    return 0


def _cmd_version(args: argparse.Namespace) -> int:
    print(__version__)
    return 0


def build_parser() -> argparse.ArgumentParser:
    """Create the ``tinybpe`` argument parser."""
    parser = argparse.ArgumentParser(
        prog="tinybpe",
        description="Train byte pair encoding tokenizers and tokenize with them.",
    )
    sub = parser.add_subparsers(dest="command", required=True, metavar="COMMAND")

    train = sub.add_parser(
        "train", help="Start training process from the set of files or stdin."
    )
    train.add_argument("-o", "--output", default="", help="The name of the model and vocab.")
    train.add_argument(
        "-s",
        "--size",
        type=_vocab_size,
        default=DEFAULT_VOCAB_SIZE,
        help=f"The size of vocabulary (default: {DEFAULT_VOCAB_SIZE}).",
    )
    train.add_argument("-v", "--verbose", action="store_true", help="Show training progress.")
    train.add_argument(
        "--models-dir",
        default=os.environ.get("TINYBPE_MODELS_DIR", DEFAULT_MODELS_DIR),
        help="Directory the model files are written to (default: $TINYBPE_MODELS_DIR or ./models).",
    )
    train.add_argument("files", nargs="*", help="Input files; stdin when omitted.")
    train.set_defaults(func=_cmd_train)

    for name, help_text, run in (
        ("encode", "Tokenize the set of files or stdin with a trained model.", _cmd_encode),
        ("decode", "Convert JSON tokens from files or stdin to bytes.", _cmd_decode),
    ):
        cmd = sub.add_parser(name, help=help_text)
        cmd.add_argument("-m", "--model", required=True, help="Path to trained .model file.")
        cmd.add_argument("files", nargs="*", help="Input files; stdin when omitted.")
        cmd.set_defaults(func=run)

    version = sub.add_parser("version", help="Show version and exit.")
    version.set_defaults(func=_cmd_version)

    return parser


def _configure_logging(verbose: bool) -> None:
    level = os.environ.get("TINYBPE_LOG_LEVEL", "").strip().upper()
    if not level:
        level = "INFO" if verbose else "WARNING"
    logging.basicConfig(
        level=level,
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
        datefmt="%H:%M:%S",
    )


def main(argv: list[str] | None = None) -> int:
    """Run the command line interface and return the process exit status."""
    args = build_parser().parse_args(argv)
    _configure_logging(getattr(args, "verbose", False))

    try:
        return args.func(args)
    except (TinyBPEError, OSError) as e:
        print(f"tinybpe: {e}", file=sys.stderr)
        return 1


if __name__ == "__main__":
    sys.exit(main())
