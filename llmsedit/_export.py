import logging
from dataclasses import dataclass

from ._selection import State

logger = logging.getLogger(__name__)


def _block(section):
    body = list(section.content)
    while body and not body[-1].strip():
        body.pop()
    return '\n'.join([section.heading, *body] if section.level else body)


def export_text(document, selection=None) -> str:
    """
    Rebuild document text from the sections marked ``ON`` (all sections without a selection).

    Each section is its heading line followed by its content, trailing blank lines
    dropped; sections are separated by one blank line and the result ends in exactly
    one newline.
    """
    blocks = [_block(s) for s in document.sections
              if selection is None or selection.sections.get(s.id) is State.ON]
    return '\n\n'.join(blocks).rstrip() + '\n'


@dataclass(frozen=True, slots=True)
class SelectionSummary:
    sections: int
    selected_sections: int
    total_tokens: int
    selected_tokens: int

    @property
    def percent_removed(self) -> float:
        if self.total_tokens <= 0:
            return 0.0
        return (self.total_tokens - self.selected_tokens) / self.total_tokens * 100

    def __str__(self):
        return (f'{self.selected_sections:,} of {self.sections:,} sections selected, '
                f'~{self.selected_tokens:,} of ~{self.total_tokens:,} tokens ({self.percent_removed:.1f}% removed)')


def summarize(document, selection) -> SelectionSummary:
    selected = selection.selected_ids()
    return SelectionSummary(len(document.sections), len(selected), document.total_tokens,
                            sum(document[sid].exclusive_tokens for sid in selected))


def write_export(path, text: str):
    with open(path, 'w', encoding='utf-8') as f:
        f.write(text)
    logger.info('Wrote %d chars to %s', len(text), path)
