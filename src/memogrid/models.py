"""Defines classes for representing notes, filter criteria, and statistics.

The most important classes are :class:`Note` and :class:`FilterState`. The functions :func:`filter_notes`
and :func:`sort_notes` implement the order in which notes are shown.
"""

from __future__ import annotations
from collections import Counter
from dataclasses import dataclass, field, replace
from datetime import date, datetime, timezone, tzinfo
from enum import Enum
from typing import Any, Dict, Iterable, Iterator, List, Optional, Set, Union
from urllib.parse import unquote_plus

from memogrid.tags import extract_tags, normalize_tags

TODO_MARKERS = ('- [ ]', '- [x]')
TODO_DONE_MARKER = '- [x]'

_EARLIEST = datetime(1, 1, 1, tzinfo=timezone.utc)
_TRUE_STRINGS = ('true', '1', 'yes')
_FALSE_STRINGS = ('false', '0', 'no', '')


def _first(record: dict, *keys: str, default: Any = None) -> Any:
    for key in keys:
        if record.get(key) is not None:
            return record[key]
    return default


def parse_timestamp(value: Any) -> Optional[datetime]:
    """Converts a timestamp from a provider into an aware datetime.

    Accepts datetimes, ISO-8601 strings (a trailing ``Z`` is allowed), and epoch seconds or milliseconds
    as numbers or digit strings. Naive values are assumed to be UTC. Returns None for anything else.
    """
    if isinstance(value, datetime):
        return value if value.tzinfo else value.replace(tzinfo=timezone.utc)
    if isinstance(value, bool) or value is None:
        return None
    if isinstance(value, (int, float)):
        if value > 1e11:
            # milliseconds
            value = value / 1000
        try:
            return datetime.fromtimestamp(value, tz=timezone.utc)
        except (OverflowError, OSError, ValueError):
            return None
    if isinstance(value, str):
        text = value.strip()
        if text.isdigit():
            return parse_timestamp(int(text))
        if text.endswith('Z'):
            text = text[:-1] + '+00:00'
        try:
            return parse_timestamp(datetime.fromisoformat(text))
        except ValueError:
            return None
    return None


def parse_flag(value: Any) -> Optional[bool]:
    """Interprets a boolean field from a provider.

    Strings such as ``"true"``, ``"false"``, ``"1"`` and ``"0"`` are read by their meaning rather than
    their truthiness. Returns None for None or a string that isn't recognized.
    """
    if value is None:
        return None
    if isinstance(value, str):
        text = value.strip().lower()
        if text in _TRUE_STRINGS:
            return True
        if text in _FALSE_STRINGS:
            return False
        return None
    return bool(value)


def has_todo_items(content: str) -> bool:
    """Returns True if the content contains a Markdown checkbox, checked or not."""
    return any(marker in (content or '') for marker in TODO_MARKERS)


@dataclass
class Note:
    """A single short Markdown note (memo).

    Instances are normally created from provider data with :meth:`from_json`, which takes care of
    the various shapes that data comes in.
    """

    id: str
    """Opaque identifier, unique within a collection."""

    content: str = ''
    """The Markdown text of the note, possibly containing hashtags."""

    tags: List[str] = field(default_factory=list)
    """The hashtags found in :attr:`content` when the note was last saved, in order of appearance.

    Tag data in other shapes (JSON text, None) is normalized on construction, see
    :func:`memogrid.tags.normalize_tags`.

    This is stored rather than recomputed on display; use :meth:`edit` to change content and tags together.
    """

    created: Optional[datetime] = None
    updated: Optional[datetime] = None
    pinned: bool = False
    todo: bool = False
    visibility: str = 'PRIVATE'

    def __post_init__(self):
        self.tags = normalize_tags(self.tags)

    @classmethod
    def from_json(cls, record: dict) -> Note:
        """Builds a note from a raw record as returned by a provider.

        Field names used by the memos service are recognized (``name``, ``createTime``, ``is_pinned``, etc).
        Tags stored as JSON text are decoded, and malformed tags are treated as empty. When the record has
        no todo flag, the note is considered a todo if its content contains a Markdown checkbox.
        """
        content = _first(record, 'content')
        content = content if isinstance(content, str) else ''
        todo = parse_flag(_first(record, 'todo', 'is_todo'))
        return cls(
            id=str(_first(record, 'id', 'name', 'uid', default='')),
            content=content,
            tags=record.get('tags'),
            created=parse_timestamp(_first(record, 'createTime', 'create_time', 'created_at', 'created')),
            updated=parse_timestamp(_first(record, 'updateTime', 'update_time', 'updated_at', 'updated')),
            pinned=bool(parse_flag(_first(record, 'pinned', 'is_pinned'))),
            todo=has_todo_items(content) if todo is None else todo,
            visibility=_first(record, 'visibility') or 'PRIVATE')

    def as_json(self) -> dict:
        """Returns a dict representing the instance, suitable for serializing as json."""
        return {
            'id': self.id,
            'content': self.content,
            'tags': list(self.tags),
            'created': self.created.isoformat() if self.created else None,
            'updated': self.updated.isoformat() if self.updated else None,
            'pinned': self.pinned,
            'todo': self.todo,
            'visibility': self.visibility,
        }

    def edit(self, content: str, now: Optional[datetime] = None) -> Note:
        """Returns a copy with new content, freshly extracted tags, and an updated timestamp.

        This is the same extraction that happens when a note is saved, so it can be used for immediate
        feedback before the provider has the new version.
        """
        return replace(self, content=content, tags=extract_tags(content),
                       updated=now or datetime.now(timezone.utc))

    def local_date(self, tz: Optional[tzinfo] = None) -> Optional[date]:
        """Returns the calendar date on which the note was created, in the given zone (default: system zone)."""
        if not self.created:
            return None
        return self.created.astimezone(tz).date()


class Category(Enum):
    ALL = 'all'
    PINNED = 'pinned'
    TODO = 'todo'


@dataclass
class FilterState:
    """Represents the criteria for choosing which notes are shown.

    Some methods that take a FilterState parameter also accept strings as a convenience, which they
    pass to :meth:`parse`.

    A note is shown only if it satisfies *all* the criteria.
    """

    search: Optional[str] = None
    """If non-empty, notes must contain this text (ignoring case)."""

    date: Optional[date] = None
    """If set, notes must have been created on this calendar date."""

    tags: Set[str] = field(default_factory=set)
    """If non-empty, notes must have *all* of the specified tags."""

    category: Category = Category.ALL
    """Restricts notes to pinned ones or todo ones."""

    tz: Optional[tzinfo] = None
    """The zone used to turn creation timestamps into calendar dates. If None, the system zone is used."""

    @classmethod
    def parse(cls, strquery: FilterStateIsh) -> FilterState:
        """Converts the parameter to a FilterState, if it isn't one already.

        Query strings are split on spaces. Each part can be one of the following:

        * ``tag:TAG1,TAG2`` - notes must include all the specified tags (tags are case-sensitive)
        * ``date:YYYY-MM-DD`` - notes must have been created on that date
        * ``is:pinned`` or ``is:todo`` - notes must be pinned, or be todos
        * anything else is part of the search text; multiple words are joined with single spaces

        Raises :exc:`ValueError` for an invalid date or category.

        Examples:

        * ``"tag:work,urgent is:todo"`` - todo notes tagged both "work" and "urgent"
        * ``"date:2024-05-01 groceries"`` - notes from May 1st mentioning groceries
        """
        if isinstance(strquery, FilterState):
            return strquery
        query = cls()
        words = []
        for term in (strquery or '').split():
            lower = term.lower()
            if lower.startswith('tag:'):
                query.tags.update(unquote_plus(t) for t in term[4:].split(',') if t)
            elif lower.startswith('date:'):
                query.date = date.fromisoformat(term[5:])
            elif lower.startswith('is:'):
                query.category = Category(lower[3:])
            else:
                words.append(term)
        if words:
            query.search = ' '.join(words)
        return query

    def is_empty(self) -> bool:
        """Returns True if no criteria are set, meaning every note matches."""
        return not (self.search or self.date or self.tags) and self.category == Category.ALL

    def toggle_tag(self, tag: str) -> FilterState:
        """Returns a copy with the tag added to :attr:`tags`, or removed if it was already there."""
        return replace(self, tags=self.tags.symmetric_difference({tag}))

    def matches(self, note: Note) -> bool:
        """Returns True if the note satisfies all the criteria. Never raises for malformed notes."""
        if self.category == Category.PINNED and not note.pinned:
            return False
        if self.category == Category.TODO and not note.todo:
            return False
        if self.search and self.search.lower() not in (note.content or '').lower():
            return False
        if self.date and not note.local_date(self.tz) == self.date:
            return False
        if self.tags and not self.tags.issubset(note.tags):
            return False
        return True

    def apply_filtering(self, notes: Iterable[Note]) -> Iterator[Note]:
        """Yields the entries from the given iterable which match the criteria of this query."""
        for note in notes:
            if self.matches(note):
                yield note


FilterStateIsh = Union[str, FilterState]


def filter_notes(notes: Iterable[Note], state: FilterStateIsh) -> List[Note]:
    """Returns the notes matching the filter, in their original order."""
    return list(FilterState.parse(state).apply_filtering(notes))


def _created_key(note: Note) -> datetime:
    created = note.created or _EARLIEST
    if not created.tzinfo:
        created = created.replace(tzinfo=timezone.utc)
    return created


def sort_notes(notes: Iterable[Note]) -> List[Note]:
    """Returns a copy of the notes in display order.

    Pinned notes come first. Within the pinned and unpinned groups, newer notes come first;
    notes without a creation timestamp go last. The sort is stable.
    """
    result = list(notes)
    result.sort(key=_created_key, reverse=True)
    result.sort(key=lambda note: not note.pinned)
    return result


@dataclass
class NoteStats:
    """Counts shown alongside the category filters."""

    total: int = 0
    pinned: int = 0
    todo: int = 0
    todo_done: int = 0
    """Todo notes that contain at least one checked box."""

    @classmethod
    def of(cls, notes: Iterable[Note]) -> NoteStats:
        stats = cls()
        for note in notes:
            stats.total += 1
            if note.pinned:
                stats.pinned += 1
            if note.todo:
                stats.todo += 1
                if TODO_DONE_MARKER in (note.content or ''):
                    stats.todo_done += 1
        return stats

    def as_json(self) -> dict:
        return {'total': self.total, 'pinned': self.pinned, 'todo': self.todo, 'todo_done': self.todo_done}


def notes_per_day(notes: Iterable[Note], tz: Optional[tzinfo] = None) -> Dict[date, int]:
    """Returns a map of calendar dates to the number of notes created on that date."""
    return dict(Counter(d for d in (note.local_date(tz) for note in notes) if d))
