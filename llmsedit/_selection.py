"""
Tri-state selection over a parsed document and its duplicate groups.

The selection lives apart from the parse result: a :class:`Selection` maps section
ids and group keys to :class:`State`. The ``apply_*`` functions are reducers, each
one returns a new selection computed from ``(document, groups, selection)`` and never
touches its input. :class:`SelectionEngine` holds the current selection and swaps in
the reducer result, so a toggle is observed whole or not at all.

Rules kept after every operation:

- a section with children is ``ON`` when all children are ``ON``, ``OFF`` when all
  are ``OFF`` and ``MIXED`` otherwise;
- a duplicate group follows the same rule over its members;
- leaves are never ``MIXED``.
"""
import logging
from enum import StrEnum
from dataclasses import dataclass

from ._duplicates import parse_group_key

logger = logging.getLogger(__name__)


class State(StrEnum):
    ON = 'on'
    OFF = 'off'
    MIXED = 'mixed'

    @property
    def marker(self) -> str:
        return _MARKERS[self]


_MARKERS = {State.ON: '[x]', State.OFF: '[ ]', State.MIXED: '[-]'}


def derive_state(states) -> State:
    """``ON`` if every state is ``ON``, ``OFF`` if every one is ``OFF``, else ``MIXED``; empty is ``OFF``."""
    seen = set(states)
    if not seen or seen == {State.OFF}:
        return State.OFF
    if seen == {State.ON}:
        return State.ON
    return State.MIXED


def as_state(value) -> State:
    """Coerce a user request (``State``, bool or ``"on"``/``"off"``) to ``ON``/``OFF``."""
    if isinstance(value, bool):
        return State.ON if value else State.OFF
    state = State(value)
    if state is State.MIXED:
        raise ValueError('A section or group can only be set to on or off')
    return state


@dataclass(slots=True)
class Selection:
    sections: dict[str, State]
    groups: dict[tuple[str, int], State]

    def copy(self) -> 'Selection':
        return Selection(dict(self.sections), dict(self.groups))

    def selected_ids(self) -> list[str]:
        return [sid for sid, state in self.sections.items() if state is State.ON]


def fill(document, groups, state=State.ON) -> Selection:
    """Every section and every group set to ``state``."""
    return Selection({s.id: state for s in document.sections}, {key: state for key in groups})


def _cascade(document, selection, section_id, state, touched):
    stack = [section_id]
    while stack:
        sid = stack.pop()
        selection.sections[sid] = state
        touched.append(sid)
        stack.extend(document[sid].children_ids)


def _propagate(document, selection, section_id, touched):
    # every ancestor up to the root: a grandparent depends on the freshly derived parent
    for parent in document.ancestors(section_id):
        selection.sections[parent.id] = derive_state(selection.sections[c] for c in parent.children_ids)
        touched.append(parent.id)


def _sync_group(groups, selection, key):
    group = groups[key]
    selection.groups[key] = derive_state(selection.sections[m] for m in group.member_ids if m in selection.sections)


def _sync_groups(document, groups, selection, touched):
    for key in dict.fromkeys(document[sid].key for sid in touched):
        if key in groups:
            _sync_group(groups, selection, key)


def _toggle(document, groups, selection, section_id, state):
    touched = []
    _cascade(document, selection, section_id, state, touched)
    _propagate(document, selection, section_id, touched)
    _sync_groups(document, groups, selection, touched)


def apply_toggle(document, groups, selection, section_id, state) -> Selection:
    """
    Set ``section_id`` and its whole subtree to ``state``.

    Ancestors are re-derived bottom-up from their children, and every duplicate group
    holding a section that changed is re-derived from its members.
    """
    new = selection.copy()
    _toggle(document, groups, new, section_id, state)
    return new


def apply_group_toggle(document, groups, selection, key, state) -> Selection:
    """Toggle every member of group ``key`` in document order; the group itself ends at ``state``."""
    new = selection.copy()
    for member_id in groups[key].member_ids:
        _toggle(document, groups, new, member_id, state)
    new.groups[key] = state
    return new


def find_inconsistencies(document, groups, selection) -> list[str]:
    """Describe every place where ``selection`` breaks the tri-state rules; empty when consistent."""
    problems = []
    for s in document.sections:
        state = selection.sections.get(s.id)
        if state is None:
            problems.append(f'{s.id} has no state')
        elif s.children_ids:
            expected = derive_state(selection.sections.get(c) for c in s.children_ids)
            if state is not expected:
                problems.append(f'{s.id} is {state}, children say {expected}')
        elif state is State.MIXED:
            problems.append(f'{s.id} is a leaf in mixed state')
    for key, group in groups.items():
        expected = derive_state(selection.sections[m] for m in group.member_ids if m in selection.sections)
        if selection.groups.get(key) is not expected:
            problems.append(f'group {key} is {selection.groups.get(key)}, members say {expected}')
    return problems


def _known(mapping, key) -> bool:
    try:
        return key in mapping
    except TypeError:  # unhashable
        return False


class SelectionEngine:
    """
    Current selection for one parsed document.

    Unknown section ids and group keys are logged and ignored. Every mutating call
    returns the selected-token total afterwards.
    """

    __slots__ = ('document', 'groups', 'selection')

    def __init__(self, document, groups=(), selection=None):
        self.document = document
        self.groups = {g.key: g for g in groups}
        self.selection = selection if selection is not None else fill(document, self.groups)
        for key in self.groups:
            _sync_group(self.groups, self.selection, key)

    def state(self, section_id) -> State | None:
        return self.selection.sections.get(section_id)

    def group_state(self, key) -> State | None:
        return self.selection.groups.get(key)

    def selected_ids(self) -> list[str]:
        return self.selection.selected_ids()

    def selected_tokens(self) -> int:
        # mixed ancestors count nothing of their own, only sections marked on do
        index = self.document.index
        return sum(index[sid].exclusive_tokens for sid in self.selection.selected_ids())

    def toggle(self, section_id, state) -> int:
        state = as_state(state)
        if not _known(self.document.index, section_id):
            logger.warning('Ignoring toggle of unknown section %r', section_id)
            return self.selected_tokens()
        logger.debug('Toggle %s -> %s', section_id, state)
        self.selection = apply_toggle(self.document, self.groups, self.selection, section_id, state)
        return self.selected_tokens()

    def toggle_group(self, key, state) -> int:
        state = as_state(state)
        if isinstance(key, str):
            try:
                key = parse_group_key(key)
            except ValueError as e:
                logger.warning('Ignoring group toggle: %s', e)
                return self.selected_tokens()
        if not _known(self.groups, key):
            logger.warning('Ignoring toggle of unknown duplicate group %r', key)
            return self.selected_tokens()
        logger.debug('Toggle group %s -> %s (%d members)', key, state, len(self.groups[key]))
        self.selection = apply_group_toggle(self.document, self.groups, self.selection, key, state)
        return self.selected_tokens()

    def select_all(self, state=State.ON) -> int:
        self.selection = fill(self.document, self.groups, as_state(state))
        return self.selected_tokens()

    def inconsistencies(self) -> list[str]:
        return find_inconsistencies(self.document, self.groups, self.selection)
