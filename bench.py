"""Benchmark training, encoding and decoding on a slice of the Sci-Fi Gutenberg dataset."""

import argparse
import logging
import time
from pathlib import Path

from datasets import load_dataset

from tinybpe import Tokenizer, from_pretrained

HF_DATASET = "stevez80/Sci-Fi-Books-gutenberg"

logging.basicConfig(
    level=logging.INFO,
    format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
    datefmt="%H:%M:%S",
)


def format_bytes(num_bytes: float) -> str:
    """Format bytes to human-readable string."""
    for unit in ["B", "KB", "MB", "GB"]:
        if num_bytes < 1024.0:
            return f"{num_bytes:.2f} {unit}"
        num_bytes /= 1024.0
    return f"{num_bytes:.2f} TB"


def load_corpus(num_docs: int) -> bytes:
    """Load the first `num_docs` documents as one UTF-8 byte string."""
    print(f"Loading {HF_DATASET} …")
    ds = load_dataset(HF_DATASET, split="train")
    return "".join(ds[:num_docs]["text"]).encode("utf-8")


def load_or_train(model_path: Path | None, corpus: bytes, vocab_size: int) -> Tokenizer:
    """Return a tokenizer, loading from disk when the model file exists."""
    if model_path and model_path.exists():
        print(f"Loaded model from {model_path}")
        return from_pretrained(model_path)
    tok = Tokenizer()
    print(f"Training new model (vocab_size={vocab_size:,}) …")
    start = time.perf_counter()
    tok.train(corpus, vocab_size=vocab_size)
    print(f"   Training time: {time.perf_counter() - start:.3f}s")
    if model_path:
        tok.save(model_path.with_suffix(""))
    return tok


def main() -> None:
    """Run the benchmark and print throughput and compression figures."""
    parser = argparse.ArgumentParser(description="Benchmark tinybpe on a Gutenberg slice.")
    parser.add_argument("--num-docs", type=int, default=20, help="Documents to load.")
    parser.add_argument("--vocab-size", type=int, default=1024, help="Target vocab size.")
    parser.add_argument(
        "--model", type=Path, default=None, help="Load this .model (or save to it)."
    )
    args = parser.parse_args()

    corpus = load_corpus(args.num_docs)
    print(f"   Corpus size: {format_bytes(len(corpus))}")

    tok = load_or_train(args.model, corpus, args.vocab_size)

    start = time.perf_counter()
    encoded = tok.encode(corpus)
    encode_time = time.perf_counter() - start

    start = time.perf_counter()
    decoded = tok.decode(encoded)
    decode_time = time.perf_counter() - start

    assert decoded == corpus, "decode(encode(corpus)) does not match the corpus"

    print(f"   Encode throughput: {len(corpus) / encode_time / (1024 * 1024):.2f} MB/s")
    print(f"   Decode throughput: {len(encoded) / decode_time:,.0f} tokens/s")
    print(f"   Compression ratio: {len(corpus) / max(1, len(encoded)):.2f}x")


if __name__ == "__main__":
    main()
