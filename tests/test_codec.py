"""Tests for saving and loading tinybpe model files."""

import pytest

import tinybpe as tbpe
from tinybpe import (
    FORMAT_TAG,
    InvalidArgumentError,
    MalformedModelError,
    ModelLoadError,
    TinyBPEError,
    VersionMismatchError,
)
from tinybpe._sanitise import render_bytes


CORPUS = b"she sells sea shells by the sea shore. " * 3 + bytes(range(256))


# Fixtures
# ---------------------------------------------------------------------------


@pytest.fixture
def tokenizer():
    """Return a trained Tokenizer."""
    tok = tbpe.Tokenizer()
    tok.train(CORPUS, vocab_size=320)
    return tok


@pytest.fixture
def write_model(tmp_path):
    """Write raw text to a .model file and return its path."""

    def _write(content: str, name: str = "handmade.model"):
        path = tmp_path / name
        path.write_bytes(content.encode("utf-8"))
        return path

    return _write


# Save and load round-trip
# ---------------------------------------------------------------------------


def test_save_load_roundtrip(tokenizer, tmp_path):
    """Loading a saved model restores merges, vocab and encode/decode behavior."""
    model_path = tokenizer.save(tmp_path / "tok")
    assert model_path == tmp_path / "tok.model"

    loaded = tbpe.from_pretrained(model_path)
    assert list(loaded.merges.items()) == list(tokenizer.merges.items())
    assert loaded.vocab == tokenizer.vocab

    for data in [b"sea shells", b"", bytes(range(256)), b"\xff\xfe shore"]:
        tokens = tokenizer.encode(data)
        assert loaded.encode(data) == tokens
        assert loaded.decode(tokens) == data


def test_load_into_existing_instance(tokenizer, tmp_path):
    """Tokenizer.load replaces the state of an existing instance."""
    tokenizer.save(tmp_path / "tok")
    other = tbpe.Tokenizer()
    other.train(b"aaabdaaabac", vocab_size=258)
    other.load(str(tmp_path / "tok.model"))
    assert other.merges == tokenizer.merges
    assert other.vocab == tokenizer.vocab


def test_save_untrained_tokenizer(tmp_path):
    """A zero-merge model is just the header and loads back empty."""
    tbpe.Tokenizer().save(tmp_path / "empty")
    assert (tmp_path / "empty.model").read_text() == f"{FORMAT_TAG}\n"
    loaded = tbpe.from_pretrained(tmp_path / "empty.model")
    assert loaded.merges == {}
    assert loaded.vocab_size() == 256


def test_save_creates_missing_directories(tokenizer, tmp_path):
    """Parent directories of the prefix are created."""
    tokenizer.save(tmp_path / "nested" / "dir" / "tok")
    assert (tmp_path / "nested" / "dir" / "tok.model").is_file()
    assert (tmp_path / "nested" / "dir" / "tok.vocab").is_file()


# File format
# ---------------------------------------------------------------------------


def test_model_file_layout(tmp_path):
    """The model file is the tag followed by one pair per line in id order."""
    tok = tbpe.Tokenizer()
    tok.train(b"aaabdaaabac", vocab_size=258)
    tok.save(tmp_path / "textbook")
    lines = (tmp_path / "textbook.model").read_text().splitlines()
    assert lines == [FORMAT_TAG, "97 97", "256 97"]


def test_vocab_file_layout(tmp_path):
    """The vocab dump lists every id with quoted bytes and merge derivations."""
    tok = tbpe.Tokenizer()
    tok.train(b"aaabdaaabac", vocab_size=258)
    tok.save(tmp_path / "textbook")
    lines = (tmp_path / "textbook.vocab").read_text(encoding="utf-8").splitlines()
    assert len(lines) == 258
    assert lines[0] == r'["\u0000"] 0'
    assert lines[34] == r'["\""] 34'
    assert lines[97] == '["a"] 97'
    assert lines[255] == r'["\xff"] 255'
    assert lines[256] == '["a"]["a"] -> ["aa"] 256'
    assert lines[257] == '["aa"]["a"] -> ["aaa"] 257'


def test_load_accepts_crlf_line_endings(write_model):
    """Windows line endings are stripped from header and merge lines."""
    path = write_model(f"{FORMAT_TAG}\r\n97 97\r\n256 97\r\n")
    loaded = tbpe.from_pretrained(path)
    assert loaded.merges == {(97, 97): 256, (256, 97): 257}
    assert loaded.vocab[257] == b"aaa"


def test_load_assigns_ids_in_file_order(write_model):
    """The n-th merge line receives id 256 + n - 1."""
    path = write_model(f"{FORMAT_TAG}\n98 99\n97 98\n")
    loaded = tbpe.from_pretrained(path)
    assert loaded.merges == {(98, 99): 256, (97, 98): 257}
    assert loaded.encode(b"abc") == [97, 256]


# Load errors
# ---------------------------------------------------------------------------


def test_load_wrong_extension_raises(tmp_path):
    """Paths without the .model suffix are rejected."""
    with pytest.raises(InvalidArgumentError):
        tbpe.from_pretrained("foo.txt")

    (tmp_path / "tok.txt").write_text(f"{FORMAT_TAG}\n")
    with pytest.raises(InvalidArgumentError):
        tbpe.from_pretrained(tmp_path / "tok.txt")


def test_load_missing_file_raises_os_error(tmp_path):
    """Storage errors propagate unchanged."""
    with pytest.raises(FileNotFoundError):
        tbpe.from_pretrained(tmp_path / "missing.model")


@pytest.mark.parametrize("header", ["bytetok v1", "tinybpe v2", "", " tinybpe v1"])
def test_load_version_mismatch_raises(write_model, header):
    """The first line must equal the format tag exactly."""
    path = write_model(f"{header}\n97 97\n")
    with pytest.raises(VersionMismatchError) as exc_info:
        tbpe.from_pretrained(path)
    assert exc_info.value.expected == FORMAT_TAG
    assert exc_info.value.found == header


def test_load_empty_file_is_version_mismatch(write_model):
    """An empty file has no header."""
    with pytest.raises(VersionMismatchError):
        tbpe.from_pretrained(write_model(""))


def test_load_non_utf8_header_is_version_mismatch(tmp_path):
    """Undecodable header bytes are a version mismatch, not a UnicodeDecodeError."""
    path = tmp_path / "binary.model"
    path.write_bytes(b"\xff\xfe garbage\n97 98\n")
    with pytest.raises(VersionMismatchError) as exc_info:
        tbpe.from_pretrained(path)
    assert exc_info.value.found == "\\xff\\xfe garbage"


@pytest.mark.parametrize("line", [b"97 \xff", b"\xc3\xa9 97", "٣ 97".encode("utf-8")])
def test_load_non_ascii_merge_line_raises(tmp_path, line):
    """Merge ids are ASCII digits only; other bytes are reported with the line."""
    path = tmp_path / "binary.model"
    path.write_bytes(FORMAT_TAG.encode("ascii") + b"\n" + line + b"\n")
    with pytest.raises(MalformedModelError) as exc_info:
        tbpe.from_pretrained(path)
    assert exc_info.value.line_no == 2


@pytest.mark.parametrize(
    "line",
    [
        "97 97 256",
        "97",
        "",
        "97  97",
        "a b",
        "-1 97",
        "+1 97",
        "97 9.5",
    ],
)
def test_load_malformed_line_raises(write_model, line):
    """Every merge line must be exactly two decimal ids separated by a space."""
    path = write_model(f"{FORMAT_TAG}\n97 97\n{line}\n")
    with pytest.raises(MalformedModelError) as exc_info:
        tbpe.from_pretrained(path)
    assert exc_info.value.line_no == 3


def test_load_forward_reference_raises(write_model):
    """A merge may only use ids defined on earlier lines."""
    path = write_model(f"{FORMAT_TAG}\n256 97\n97 97\n")
    with pytest.raises(MalformedModelError):
        tbpe.from_pretrained(path)


def test_load_duplicate_pair_raises(write_model):
    """Each pair can be merged only once."""
    path = write_model(f"{FORMAT_TAG}\n97 97\n97 97\n")
    with pytest.raises(MalformedModelError):
        tbpe.from_pretrained(path)


def test_failed_load_keeps_previous_state(tokenizer, write_model):
    """State is only replaced after the whole file parsed."""
    merges, vocab = dict(tokenizer.merges), dict(tokenizer.vocab)
    with pytest.raises(MalformedModelError):
        tokenizer.load(write_model(f"{FORMAT_TAG}\n97 97\n1 2 3\n"))
    assert tokenizer.merges == merges
    assert tokenizer.vocab == vocab


def test_load_error_hierarchy():
    """Load errors share the ModelLoadError and TinyBPEError bases."""
    assert issubclass(VersionMismatchError, ModelLoadError)
    assert issubclass(MalformedModelError, ModelLoadError)
    assert issubclass(ModelLoadError, TinyBPEError)
    assert issubclass(InvalidArgumentError, TinyBPEError)


# Byte rendering
# ---------------------------------------------------------------------------


@pytest.mark.parametrize(
    ("raw", "rendered"),
    [
        (b"Hello, World!", "Hello, World!"),
        (b"Line 1\nLine 2", r"Line 1\u000aLine 2"),
        (b"tab\there", r"tab\u0009here"),
        (b'say "hi"', r"say \"hi\""),
        (b"back\\slash", r"back\\slash"),
        (b"", ""),
        (b"\xe6\x97", r"\xe6\x97"),
        ("日本".encode("utf-8"), "日本"),
    ],
)
def test_render_bytes(raw, rendered):
    """Control characters, quotes and invalid UTF-8 are escaped."""
    assert render_bytes(raw) == rendered


def test_save_appends_suffix_to_dotted_prefix(tokenizer, tmp_path):
    """A prefix that already contains a dot keeps it."""
    model_path = tokenizer.save(tmp_path / "tok.v2")
    assert model_path == tmp_path / "tok.v2.model"
    assert (tmp_path / "tok.v2.vocab").is_file()
