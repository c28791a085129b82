import re
import logging
from itertools import count
from dataclasses import dataclass, field

from ._tokens import LINE_BREAK_SURCHARGE, approx_count_tokens, document_tokens, exclusive_tokens

logger = logging.getLogger(__name__)

PREFACE_TITLE = '(Preface)'

_FIND_HDR = re.compile(r'^(#+)\s+(.*)')


@dataclass(slots=True)
class Section:
    id: str
    level: int
    title: str
    content: list[str] = field(default_factory=list)
    parent_id: str | None = None
    children_ids: list[str] = field(default_factory=list)
    exclusive_tokens: int = 0
    total_tokens: int | None = None

    @property
    def heading(self) -> str:
        return f"{'#' * self.level} {self.title}" if self.level else ''

    @property
    def key(self) -> tuple[str, int]:
        return self.title, self.level

    @property
    def is_preface(self) -> bool:
        return self.level == 0


class ParsedDocument:
    """
    Sections of one parse, in document order, plus an id-keyed index over them.

    Parent/child links are ids resolved through ``index``; nothing holds a direct
    reference to another section. ``total_tokens`` is the sum of every root's
    subtree total.
    """

    __slots__ = ('sections', 'index', 'total_tokens')

    def __init__(self, sections, total_tokens=0):
        self.sections = sections
        self.index = {s.id: s for s in sections}
        self.total_tokens = total_tokens

    def __len__(self):
        return len(self.sections)

    def __iter__(self):
        return iter(self.sections)

    def __contains__(self, section_id):
        return section_id in self.index

    def __getitem__(self, section_id) -> Section:
        return self.index[section_id]

    @property
    def roots(self) -> list[Section]:
        return [s for s in self.sections if s.parent_id is None]

    def descendants(self, section_id):
        # pre-order, document order
        stack = list(reversed(self.index[section_id].children_ids))
        while stack:
            s = self.index[stack.pop()]
            yield s
            stack.extend(reversed(s.children_ids))

    def ancestors(self, section_id):
        parent_id = self.index[section_id].parent_id
        while parent_id is not None:
            parent = self.index[parent_id]
            yield parent
            parent_id = parent.parent_id

    def depth(self, section_id) -> int:
        return sum(1 for _ in self.ancestors(section_id))

    def outline(self, selection=None) -> str:
        depth = {}
        pls = []
        for s in self.sections:
            d = depth[s.id] = depth[s.parent_id] + 1 if s.parent_id is not None else 0
            mark = f'{selection.sections[s.id].marker} ' if selection is not None else ''
            pls.append(f'{"   " * d}{mark}{s.id} : {s.title} (~{s.total_tokens} total, {s.exclusive_tokens} exclusive)')
        pls.append(f'Document has {len(self.sections)} sections, ~{self.total_tokens} tokens in total.')
        return '\n'.join(pls)

    def __str__(self):
        return self.outline()

    def __repr__(self):
        return f'ParsedDocument({len(self.sections)} sections, {self.total_tokens} tokens)'


def parse(text: str, tokenizer=None, line_break_surcharge: int = LINE_BREAK_SURCHARGE) -> ParsedDocument:
    """
    Split ``text`` into heading-delimited sections.

    **Headings**

    - A line is a heading when it starts with one or more ``#`` followed by
      whitespace. The number of ``#`` is the level, the rest of the line (stripped)
      is the title.
    - A heading becomes a child of the nearest open section with a strictly smaller
      level; with none open it is a root.

    **Content**

    - Lines before the first heading form a level-0 ``"(Preface)"`` root, created
      only once a non-blank line shows up. It stays open as the level-0 ancestor,
      so every heading after it is its descendant.
    - Leading blank lines of every section are dropped; blank lines after the first
      non-blank one are kept.

    Each section's ``exclusive_tokens`` is computed when it closes, and all subtree
    totals are filled in before returning.

    :param text: Raw newline-delimited document.
    :param tokenizer: ``count(text) -> int``; the approximate counter when omitted.
    :param line_break_surcharge: Tokens added per content line.
    :returns: A :class:`ParsedDocument`, empty for empty or all-blank text.
    """
    if tokenizer is None:
        tokenizer = approx_count_tokens
    sections = []
    if not text:
        return ParsedDocument(sections)

    ids = count()
    stack = []  # open sections; empty means the synthetic root
    current = None

    def close(section):
        section.exclusive_tokens = exclusive_tokens(section, tokenizer, line_break_surcharge)
        sections.append(section)

    for line in text.split('\n'):
        m = _FIND_HDR.match(line)
        if m:
            if current is not None:
                close(current)
            level = len(m.group(1))
            while stack and stack[-1].level >= level:
                stack.pop()
            parent = stack[-1] if stack else None
            current = Section(f'section-{next(ids)}', level, m.group(2).strip(),
                              parent_id=parent.id if parent is not None else None)
            if parent is not None:
                parent.children_ids.append(current.id)
            stack.append(current)
            continue
        if current is None:
            if not line.strip() and not sections:
                continue
            current = Section(f'section-{next(ids)}', 0, PREFACE_TITLE)
            stack.append(current)
        if line.strip() or current.content:
            current.content.append(line)
    if current is not None:
        close(current)

    doc = ParsedDocument(sections)
    doc.total_tokens = document_tokens(sections, doc.index)
    logger.info('Parsed %d sections, ~%d tokens', len(sections), doc.total_tokens)
    return doc
