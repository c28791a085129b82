from ._tokens import (
    DEFAULT_ENCODING,
    LINE_BREAK_SURCHARGE,
    approx_count_tokens,
    document_tokens,
    exclusive_tokens,
    load_tokenizer,
    tiktoken_counter,
    total_tokens,
)
from ._markdown import PREFACE_TITLE, ParsedDocument, Section, parse
from ._duplicates import MIN_DUPLICATES, DuplicateGroup, find_duplicates, parse_group_key
from ._selection import (
    Selection,
    SelectionEngine,
    State,
    apply_group_toggle,
    apply_toggle,
    derive_state,
    fill,
    find_inconsistencies,
)
from ._export import SelectionSummary, export_text, summarize
from ._source import aload_text, aload_tokenizer
from ._session import Session, SessionBusyError

__all__ = [
    "DEFAULT_ENCODING",
    "LINE_BREAK_SURCHARGE",
    "approx_count_tokens",
    "document_tokens",
    "exclusive_tokens",
    "load_tokenizer",
    "tiktoken_counter",
    "total_tokens",
    "PREFACE_TITLE",
    "ParsedDocument",
    "Section",
    "parse",
    "MIN_DUPLICATES",
    "DuplicateGroup",
    "find_duplicates",
    "parse_group_key",
    "Selection",
    "SelectionEngine",
    "State",
    "apply_group_toggle",
    "apply_toggle",
    "derive_state",
    "fill",
    "find_inconsistencies",
    "SelectionSummary",
    "export_text",
    "summarize",
    "aload_text",
    "aload_tokenizer",
    "Session",
    "SessionBusyError",
]
