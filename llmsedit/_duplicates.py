from collections import defaultdict
from dataclasses import dataclass

MIN_DUPLICATES = 3

_KEY_SEP = '::'


@dataclass(frozen=True, slots=True)
class DuplicateGroup:
    """Sections sharing one ``(title, level)``, in document order."""

    title: str
    level: int
    member_ids: tuple[str, ...]

    @property
    def key(self) -> tuple[str, int]:
        return self.title, self.level

    def __len__(self):
        return len(self.member_ids)

    def __str__(self):
        return f'{self.title} (L{self.level}, {len(self.member_ids)}x)'


def find_duplicates(sections, min_members: int = MIN_DUPLICATES) -> list[DuplicateGroup]:
    """
    Group sections by exact title and level, keeping groups of at least ``min_members``.

    Groups come back sorted by ``(title, level)``.
    """
    by_key = defaultdict(list)
    for s in sections:
        by_key[s.title, s.level].append(s.id)
    return [DuplicateGroup(title, level, tuple(ids))
            for (title, level), ids in sorted(by_key.items()) if len(ids) >= min_members]


def format_group_key(key) -> str:
    return f'{key[0]}{_KEY_SEP}{key[1]}'


def parse_group_key(text: str) -> tuple[str, int]:
    """``"Title::2"`` -> ``("Title", 2)``; the title itself may contain ``::``."""
    title, sep, level = text.rpartition(_KEY_SEP)
    if not sep or not level.strip().isdigit():
        raise ValueError(f'Invalid group key {text!r}, expected "TITLE{_KEY_SEP}LEVEL"')
    return title, int(level)
