import re
import logging
from functools import partial

import tiktoken

logger = logging.getLogger(__name__)

DEFAULT_ENCODING = "o200k_base"
LINE_BREAK_SURCHARGE = 1

_WORDS = re.compile(r'\w+', re.ASCII)
_PUNCT = re.compile(r'[.,!?;:"\'()\[\]{}]')
_WHTSPC = re.compile(r'\s+')
_URLISH = re.compile(r'https?://\S+|www\.\S+|\S+\.\S+')


def approx_count_tokens(text: str) -> int:
    """
    Estimate the token count of ``text`` without a BPE vocabulary.

    Words, punctuation marks and whitespace runs each count as one token, anything
    that looks like a URL or dotted name adds three more, and the sum is scaled by
    1.3 (rounded up) to account for subword splits.
    """
    if not text:
        return 0
    est = (len(_WORDS.findall(text)) + len(_PUNCT.findall(text)) + len(_WHTSPC.findall(text))
           + 3 * len(_URLISH.findall(text)))
    return -(-est * 13 // 10)


def _encode_count(enc, text):
    return len(enc.encode_ordinary(text)) if text else 0


def tiktoken_counter(encoding: str = DEFAULT_ENCODING):
    """Exact counter over a tiktoken encoding; special-token text is counted as ordinary text."""
    return partial(_encode_count, tiktoken.get_encoding(encoding))


def load_tokenizer(encoding: str = DEFAULT_ENCODING, approximate: bool = False):
    """
    Return a ``count(text) -> int`` callable.

    The tiktoken encoding is tried first and smoke-tested on a short sample; when it
    cannot be loaded (missing vocabulary, no network for the first download, unknown
    encoding name) the approximate counter is returned instead.
    """
    if approximate:
        logger.info("Using approximate token counts")
        return approx_count_tokens
    try:
        counter = tiktoken_counter(encoding)
        counter("Hello, world!")
    except Exception:
        logger.warning("Could not load tiktoken encoding %r, using approximate token counts",
                       encoding, exc_info=True)
        return approx_count_tokens
    logger.info("Using tiktoken encoding %s", encoding)
    return counter


def count_tokens(text: str, tokenizer) -> int:
    # a failing backend must not abort a parse: fall back for this one text
    try:
        n = tokenizer(text)
    except Exception:
        logger.warning("Tokenizer failed on %d chars, using approximate count", len(text), exc_info=True)
        return approx_count_tokens(text)
    if not isinstance(n, int) or n < 0:
        logger.warning("Tokenizer returned %r for %d chars, using approximate count", n, len(text))
        return approx_count_tokens(text)
    return n


def exclusive_tokens(section, tokenizer, line_break_surcharge: int = LINE_BREAK_SURCHARGE) -> int:
    """
    Token cost of a section's own heading and content.

    ``count(heading) + count(content joined by newlines) + surcharge * number of content
    lines``. The preface has no heading line, so only its content is counted.
    """
    heading = count_tokens(section.heading, tokenizer) if section.level else 0
    return heading + count_tokens('\n'.join(section.content), tokenizer) + line_break_surcharge * len(section.content)


def total_tokens(section_id: str, index) -> int:
    """
    Subtree-inclusive token cost of ``section_id``, memoized on every visited node.

    Post-order over ``children_ids`` with an explicit stack. Nodes whose total is
    already set are reused as-is. Meeting an unfinished node a second time means the
    parent/child graph is not a forest, which parsing never produces, so it raises.
    """
    root = index.get(section_id)
    if root is None:
        return 0
    if root.total_tokens is not None:
        return root.total_tokens
    seen = set()
    stack = [(section_id, False)]
    while stack:
        sid, expanded = stack.pop()
        node = index[sid]
        if node.total_tokens is not None:
            continue
        if expanded:
            node.total_tokens = node.exclusive_tokens + sum(index[c].total_tokens for c in node.children_ids)
            continue
        if sid in seen:
            raise RuntimeError(f'Section graph is not a forest: {sid} reached twice')
        seen.add(sid)
        stack.append((sid, True))
        stack.extend((c, False) for c in reversed(node.children_ids))
    return root.total_tokens


def document_tokens(sections, index) -> int:
    return sum(total_tokens(s.id, index) for s in sections if s.parent_id is None)
