# /// script
# requires-python = ">=3.10"
# dependencies = ["mcp>=1.10"]
# ///
"""MCP server for adverb detection: flags adverbs and adverbial phrases in text.

Tools: check_adverbs(text) and check_adverbs_file(file_path) report every
match from a curated word/phrase list together with a count.
"""

from __future__ import annotations

import argparse
import logging
import os
import re
from bisect import bisect_right
from dataclasses import dataclass, field
from pathlib import Path
from typing import Iterable, NamedTuple

from mcp.server.fastmcp import FastMCP
from mcp.server.fastmcp.exceptions import ToolError

MCP_SERVER_NAME = "Adverb Checker"

WORDLIST_ENV = "ADVERB_CHECKER_WORDLIST"
TRANSPORT_ENV = "ADVERB_CHECKER_TRANSPORT"
LOG_LEVEL_ENV = "ADVERB_CHECKER_LOG_LEVEL"

DEFAULT_WORDLIST = Path(__file__).resolve().parent / "all_adverbs.txt"

NO_ADVERBS_MESSAGE = "No adverbs found in the text."

logger = logging.getLogger(__name__)

# ---------------------------------------------------------------------------
# Normalization parameters
# ---------------------------------------------------------------------------

_MAX_STRIP_DEPTH = 10

_QUOTE_TABLE = str.maketrans({
    "‘": "'", "’": "'",
    "“": '"', "”": '"',
})

_SENTENCE_PUNCT = frozenset(".,!?;:—–")
_BRACKET_QUOTE = frozenset("()[]{}\"'")
_WRAPPER_PAIRS = (("(", ")"), ("[", "]"), ("{", "}"), ('"', '"'))

_ASCII_ALNUM_RE = re.compile(r"[A-Za-z0-9]")
_TOKEN_RE = re.compile(r"\S+")


class LexiconError(RuntimeError):
    """Raised when the adverb word list cannot be read."""


# ---------------------------------------------------------------------------
# Lexicon
# ---------------------------------------------------------------------------

def _phrase_pattern(phrase: str) -> re.Pattern[str]:
    """Compile a literal phrase, boundary-anchored on alphanumeric ends."""
    pattern = re.escape(phrase)
    if _ASCII_ALNUM_RE.match(phrase[0]):
        pattern = r"\b" + pattern
    if _ASCII_ALNUM_RE.match(phrase[-1]):
        pattern = pattern + r"\b"
    return re.compile(pattern, re.IGNORECASE)


@dataclass(frozen=True)
class Lexicon:
    """Single-word adverbs plus multi-word phrases, longest phrase first."""

    single_words: frozenset[str]
    phrases: tuple[str, ...]
    phrase_patterns: tuple[re.Pattern[str], ...] = field(repr=False, compare=False)


def build_lexicon(entries: Iterable[str]) -> Lexicon:
    """Partition raw word-list entries into single words and phrases.

    Blank entries are dropped and everything is lower-cased. Phrases (entries
    with an interior space) are ordered by descending word count; entries of
    equal length keep their input order.
    """
    single_words: set[str] = set()
    phrases: dict[str, None] = {}
    for entry in entries:
        entry = entry.strip().lower()
        if not entry:
            continue
        if " " in entry:
            phrases.setdefault(entry)
        else:
            single_words.add(entry)

    ordered = sorted(phrases, key=lambda p: len(p.split()), reverse=True)
    return Lexicon(
        single_words=frozenset(single_words),
        phrases=tuple(ordered),
        phrase_patterns=tuple(_phrase_pattern(p) for p in ordered),
    )


def default_lexicon_path() -> Path:
    env_path = os.environ.get(WORDLIST_ENV)
    if env_path:
        return Path(env_path)
    return DEFAULT_WORDLIST


def load_lexicon(path: str | Path | None = None) -> Lexicon:
    """Read a newline-delimited UTF-8 word list and build a Lexicon."""
    p = Path(path) if path is not None else default_lexicon_path()
    try:
        text = p.read_text(encoding="utf-8")
    except (OSError, UnicodeDecodeError) as e:
        raise LexiconError(f"Could not read adverb list {p}: {e}") from e

    lexicon = build_lexicon(text.splitlines())
    logger.info(
        "Loaded %d single-word adverbs and %d phrases from %s",
        len(lexicon.single_words), len(lexicon.phrases), p,
    )
    return lexicon


# ---------------------------------------------------------------------------
# Normalization
# ---------------------------------------------------------------------------

def normalize_quotes(text: str) -> str:
    """Replace curly single/double quotes with straight ones.

    The mapping is one character to one character, so offsets into the
    result are valid offsets into the input.
    """
    return text.translate(_QUOTE_TABLE)


def _unwrap(candidate: str) -> str | None:
    if len(candidate) > 2:
        for left, right in _WRAPPER_PAIRS:
            if candidate.startswith(left) and candidate.endswith(right):
                return candidate[1:-1]
    return None


def _drop_trailing_punct(candidate: str) -> str | None:
    return candidate[:-1] if candidate[-1] in _SENTENCE_PUNCT else None


def _drop_leading_punct(candidate: str) -> str | None:
    return candidate[1:] if candidate[0] in _SENTENCE_PUNCT else None


def _drop_trailing_bracket(candidate: str) -> str | None:
    return candidate[:-1] if candidate[-1] in _BRACKET_QUOTE else None


def _drop_leading_bracket(candidate: str) -> str | None:
    return candidate[1:] if candidate[0] in _BRACKET_QUOTE else None


# Tried in this order; earlier rules are explored first.
_STRIP_RULES = (
    _unwrap,
    _drop_trailing_punct,
    _drop_leading_punct,
    _drop_trailing_bracket,
    _drop_leading_bracket,
)


def normalize_word(word: str, single_words: frozenset[str] | set[str]) -> str | None:
    """Strip punctuation from a token until it matches a single-word adverb.

    Returns the matching candidate (original casing) or None. The search is
    depth-first over the strip rules and gives up after _MAX_STRIP_DEPTH
    strip steps.
    """
    stack: list[tuple[str, int]] = [(normalize_quotes(word), 0)]
    explored: dict[str, int] = {}

    while stack:
        candidate, depth = stack.pop()
        if not candidate or depth > _MAX_STRIP_DEPTH:
            continue
        # Already searched at least as deeply from here without a hit
        if explored.get(candidate, _MAX_STRIP_DEPTH + 1) <= depth:
            continue
        explored[candidate] = depth

        if candidate.lower() in single_words:
            return candidate

        children = [rule(candidate) for rule in _STRIP_RULES]
        for child in reversed(children):
            if child is not None:
                stack.append((child, depth + 1))

    return None


# ---------------------------------------------------------------------------
# Matching
# ---------------------------------------------------------------------------

class AdverbMatch(NamedTuple):
    text: str
    start: int
    end: int


def spans_overlap(start1: int, end1: int, start2: int, end2: int) -> bool:
    return not (end1 <= start2 or end2 <= start1)


class _ClaimedSpans:
    """Disjoint claimed spans kept sorted by start for bisect lookup."""

    def __init__(self) -> None:
        self._starts: list[int] = []
        self._ends: list[int] = []

    def overlaps(self, start: int, end: int) -> bool:
        i = bisect_right(self._starts, start)
        if i > 0 and spans_overlap(start, end, self._starts[i - 1], self._ends[i - 1]):
            return True
        return i < len(self._starts) and spans_overlap(start, end, self._starts[i], self._ends[i])

    def claim(self, start: int, end: int) -> None:
        i = bisect_right(self._starts, start)
        self._starts.insert(i, start)
        self._ends.insert(i, end)


def _scan_phrases(text: str, lexicon: Lexicon, claimed: _ClaimedSpans) -> list[AdverbMatch]:
    normalized = normalize_quotes(text)
    matches: list[AdverbMatch] = []
    for pattern in lexicon.phrase_patterns:
        for m in pattern.finditer(normalized):
            start, end = m.span()
            if claimed.overlaps(start, end):
                continue
            claimed.claim(start, end)
            matches.append(AdverbMatch(text[start:end], start, end))
    return matches


def _scan_words(text: str, lexicon: Lexicon, claimed: _ClaimedSpans) -> list[AdverbMatch]:
    # Tokens are disjoint and visited left to right, so a word match can
    # never overlap a later token; only phrase claims need checking.
    matches: list[AdverbMatch] = []
    for m in _TOKEN_RE.finditer(text):
        start, end = m.span()
        if claimed.overlaps(start, end):
            continue
        if normalize_word(m.group(0), lexicon.single_words) is not None:
            matches.append(AdverbMatch(m.group(0), start, end))
    return matches


def find_adverb_matches(text: str, lexicon: Lexicon) -> list[AdverbMatch]:
    """Return non-overlapping matches: phrases (longest first), then words.

    Phrases are claimed before any single word is considered, so a word
    inside a matched phrase is never reported on its own.
    """
    claimed = _ClaimedSpans()
    matches = _scan_phrases(text, lexicon, claimed)
    matches.extend(_scan_words(text, lexicon, claimed))
    return matches


def check_adverbs(text: str, lexicon: Lexicon) -> dict:
    adverbs = [m.text for m in find_adverb_matches(text, lexicon)]
    return {"adverbs": adverbs, "count": len(adverbs)}


def format_report(result: dict) -> str:
    if result["count"] == 0:
        return NO_ADVERBS_MESSAGE
    return f"Found {result['count']} adverb(s): {', '.join(result['adverbs'])}"


# ---------------------------------------------------------------------------
# MCP server
# ---------------------------------------------------------------------------

def run_check(text: str, lexicon: Lexicon) -> str:
    """Check text and render the tool response, surfacing failures as ToolError."""
    try:
        result = check_adverbs(text, lexicon)
    except Exception as e:
        logger.exception("Adverb check failed")
        raise ToolError(f"Error checking adverbs: {e}") from e
    logger.debug("Checked %d chars, %d adverb(s)", len(text), result["count"])
    return format_report(result)


def run_check_file(file_path: str, lexicon: Lexicon) -> str:
    p = Path(file_path)
    if not p.is_file():
        raise ToolError(f"File not found: {file_path}")
    try:
        text = p.read_text(encoding="utf-8")
    except (OSError, UnicodeDecodeError) as e:
        raise ToolError(f"Could not read file: {e}") from e
    return run_check(text, lexicon)


def create_server(lexicon: Lexicon) -> FastMCP:
    """Build the MCP server with its tools bound to a loaded lexicon."""
    mcp_server = FastMCP(MCP_SERVER_NAME)

    @mcp_server.tool(title="Check Adverbs")
    def check_adverbs(text: str) -> str:
        """Find adverbs and adverbial phrases in text.

        Returns the number of matches followed by each matched passage as it
        appears in the text, or a note that none were found.
        """
        return run_check(text, lexicon)

    @mcp_server.tool(title="Check Adverbs in File")
    def check_adverbs_file(file_path: str) -> str:
        """Find adverbs and adverbial phrases in a UTF-8 text file.

        Reads the file at the given path and runs the same check as
        check_adverbs.
        """
        return run_check_file(file_path, lexicon)

    return mcp_server


def parse_args(argv: list[str] | None = None) -> argparse.Namespace:
    """Parse command-line options."""
    parser = argparse.ArgumentParser(description="Serve the adverb checker over MCP.")
    parser.add_argument(
        "--wordlist",
        default=str(default_lexicon_path()),
        help=f"Adverb list, one entry per line. Env: {WORDLIST_ENV}.",
    )
    parser.add_argument(
        "--transport",
        choices=["stdio", "sse", "streamable-http"],
        default=os.environ.get(TRANSPORT_ENV, "stdio"),
        help=f"MCP transport. Env: {TRANSPORT_ENV}.",
    )
    parser.add_argument(
        "--log-level",
        type=str.upper,
        choices=["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"],
        default=os.environ.get(LOG_LEVEL_ENV, "WARNING"),
        help=f"Logging level (logs go to stderr). Env: {LOG_LEVEL_ENV}.",
    )
    return parser.parse_args(argv)


def main(argv: list[str] | None = None) -> None:
    args = parse_args(argv)
    logging.basicConfig(
        level=args.log_level,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )
    try:
        lexicon = load_lexicon(args.wordlist)
    except LexiconError as e:
        logger.error("%s", e)
        raise SystemExit(1) from e

    create_server(lexicon).run(transport=args.transport)


if __name__ == "__main__":
    main()
