import logging
from contextlib import contextmanager

from ._duplicates import find_duplicates
from ._export import export_text, summarize
from ._markdown import ParsedDocument, parse
from ._selection import SelectionEngine, State
from ._source import DEFAULT_TIMEOUT, aload_text, aload_tokenizer
from ._tokens import LINE_BREAK_SURCHARGE, load_tokenizer

logger = logging.getLogger(__name__)


class SessionBusyError(RuntimeError):
    """A document load was requested while another one is still in flight."""


class Session:
    """
    One editable document: parse result, duplicate groups and selection.

    Loading a new document replaces all three at once after parsing has finished;
    a second load while one is running raises :class:`SessionBusyError` instead of
    interleaving with it.
    """

    __slots__ = ('tokenizer', 'line_break_surcharge', 'document', 'groups', 'engine', '_processing')

    def __init__(self, tokenizer=None, line_break_surcharge: int = LINE_BREAK_SURCHARGE):
        self.tokenizer = tokenizer
        self.line_break_surcharge = line_break_surcharge
        self.document = ParsedDocument([])
        self.groups = []
        self.engine = SelectionEngine(self.document)
        self._processing = False

    @property
    def is_processing(self) -> bool:
        return self._processing

    @contextmanager
    def _busy(self):
        if self._processing:
            raise SessionBusyError('A document is already being loaded')
        self._processing = True
        try:
            yield
        finally:
            self._processing = False

    def _install(self, text):
        if self.tokenizer is None:
            self.tokenizer = load_tokenizer()
        document = parse(text, self.tokenizer, self.line_break_surcharge)
        groups = find_duplicates(document.sections)
        engine = SelectionEngine(document, groups)
        self.document, self.groups, self.engine = document, groups, engine
        logger.info('Loaded %d sections, %d duplicate groups', len(document), len(groups))
        return document

    def load_text(self, text: str) -> ParsedDocument:
        with self._busy():
            return self._install(text)

    async def open(self, source, client=None, timeout: float = DEFAULT_TIMEOUT) -> ParsedDocument:
        with self._busy():
            if self.tokenizer is None:
                self.tokenizer = await aload_tokenizer()
            text = await aload_text(source, client=client, timeout=timeout)
            return self._install(text)

    @property
    def selection(self):
        return self.engine.selection

    def toggle(self, section_id, state) -> int:
        return self.engine.toggle(section_id, state)

    def toggle_group(self, key, state) -> int:
        return self.engine.toggle_group(key, state)

    def select_all(self, state=State.ON) -> int:
        return self.engine.select_all(state)

    def selected_tokens(self) -> int:
        return self.engine.selected_tokens()

    def export(self) -> str:
        return export_text(self.document, self.engine.selection)

    def summary(self):
        return summarize(self.document, self.engine.selection)
