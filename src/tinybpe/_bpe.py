"""
Core Byte Pair Encoding (BPE) operations.
"""

from collections import Counter

from .types import BASE_VOCAB_SIZE, Encoding, Token, TokenPair, Vocabulary


def bpe_freqs(tokens: list[Token]) -> Counter[TokenPair]:
    """
    Compute the frequency of all consecutive token pairs in the token list.

    :param tokens: Token sequence to analyze.
    :returns: Mapping of token pairs to their occurrence counts.
    """
    return Counter(zip(tokens, tokens[1:]))


def most_frequent_pair(tokens: list[Token]) -> tuple[TokenPair, int] | None:
    """
    Return the most frequent adjacent pair and its count in one forward scan.

    The running maximum only moves on a strict increase, so among pairs with
    equal final counts the winner is the one that reached that count first.
    Plain ``max()`` over a counter would not give this guarantee.

    :param tokens: Token sequence to analyze.
    :returns: ``(pair, count)`` or ``None`` when fewer than two tokens remain.
    """
    counts: dict[TokenPair, int] = {}
    best: TokenPair | None = None
    best_count = 0

    for pair in zip(tokens, tokens[1:]):
        count = counts.get(pair, 0) + 1
        counts[pair] = count
        if count > best_count:
            best, best_count = pair, count

    if best is None:
        return None
    return best, best_count


def lowest_rank_pair(tokens: list[Token], merges: Encoding) -> TokenPair | None:
    """
    Return the adjacent pair with the lowest merge id, or ``None`` if no pair is mergeable.

    Lower ids were learned earlier and later merges may be built on top of
    them, so they must be applied first.
    """
    pairs = bpe_freqs(tokens)
    mergeable = [pair for pair in pairs if pair in merges]
    if not mergeable:
        return None
    return min(mergeable, key=merges.__getitem__)


def bpe_merge(tokens: list[Token], target: TokenPair, new_tok: Token) -> list[Token]:
    """
    Merge all occurrences of a target token pair into a single new token.

    Occurrences are replaced left to right without overlap: after a match the
    scan skips both members, so ``[a, a, a]`` merged on ``(a, a)`` becomes
    ``[new, a]``.

    :param tokens: Original list of tokens.
    :param target: The consecutive pair of tokens to merge.
    :param new_tok: The new token that replaces the target pair.
    :returns: New token list with all target pairs replaced by ``new_tok``.
    """
    newtoks: list[Token] = []
    n = len(tokens)

    i = 0
    while i < n:
        # check if we can form a pair and it matches the target
        if i < n - 1 and tokens[i] == target[0] and tokens[i + 1] == target[1]:
            newtoks.append(new_tok)
            i += 2
        else:
            newtoks.append(tokens[i])
            i += 1

    return newtoks


def apply_merges(tokens: list[Token], merges: Encoding) -> list[Token]:
    """
    Apply learned merges to a token sequence in rank order.

    :param tokens: List of tokens (initially bytes 0-255).
    :param merges: Learned merge table.
    :returns: Compressed token sequence after applying learned merges.
    """
    # every merge shortens the sequence, so this runs at most len(tokens) - 1 times
    while len(tokens) >= 2:
        pair = lowest_rank_pair(tokens, merges)
        # no pair to merge
        if pair is None:
            break
        tokens = bpe_merge(tokens, pair, merges[pair])

    return tokens


def base_vocab() -> Vocabulary:
    """Return the mapping for the 256 single-byte tokens."""
    return {btok: bytes([btok]) for btok in range(BASE_VOCAB_SIZE)}


def build_vocab(merges: Encoding) -> Vocabulary:
    """
    Build token-to-bytes vocabulary mapping from a merge table.

    Merges are replayed in ascending id order so that child tokens are always
    present before their parent.
    """
    vocab = base_vocab()
    for (tok0, tok1), mtok in sorted(merges.items(), key=lambda x: x[1]):
        vocab[mtok] = vocab[tok0] + vocab[tok1]
    return vocab
