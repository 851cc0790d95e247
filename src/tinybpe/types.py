"""
Core types for tokenization.
"""

import sys
from typing import Final, TypeAlias

Token: TypeAlias = int
TokenBytes: TypeAlias = bytes
TokenPair: TypeAlias = tuple[Token, Token]
Encoding: TypeAlias = dict[TokenPair, Token]
Vocabulary: TypeAlias = dict[Token, TokenBytes]

# ids 0..255 are the raw bytes; merged tokens start right after them
BASE_VOCAB_SIZE: Final[int] = 256
# exclusive upper bound for a target vocabulary size
MAX_VOCAB_SIZE: Final[int] = sys.maxsize
