"""Provides the main entry point for using the library, :class:`MemoBoard`"""

from __future__ import annotations
from dataclasses import replace
from datetime import date
import logging
from typing import Callable, Dict, List, Optional

from memogrid.conf import MemogridConf
from memogrid.layout import ColumnAssignment, MasonryLayout
from memogrid.models import FilterState, FilterStateIsh, Note, NoteStats, filter_notes, notes_per_day, sort_notes
from memogrid.providers.base import ProviderError
from memogrid import tags

logger = logging.getLogger(__name__)

BoardListener = Callable[[FilterState, List[Note]], None]


class MemoBoard:
    """Holds a collection of notes together with the filter and layout used to display them.

    Filter controls (search box, calendar, tag list, category buttons) change the filter through methods
    like :meth:`set_filters` and :meth:`toggle_tag`. Views that show the filter or the notes register
    with :meth:`subscribe`; views that show columns subscribe to :attr:`layout` instead. Every change
    re-runs filtering and sorting on the full collection and hands the result to the layout.

    Generally, you should get an instance using the :meth:`MemoBoard.for_user` method. Call :meth:`close` when
    you're done with it, or else use it as a context manager.

    .. attribute:: conf
       :type: memogrid.conf.MemogridConf

    .. attribute:: provider
       :type: memogrid.providers.base.Provider

    .. attribute:: filters
       :type: memogrid.models.FilterState

    .. attribute:: layout
       :type: memogrid.layout.MasonryLayout

    Here's an example that prints the ids in each column of a 1000px-wide board of notes tagged "work":

    .. code-block:: python

       from memogrid.api import MemoBoard
       with MemoBoard.for_user() as board:
           board.refresh()
           board.set_filters(tags={'work'})
           board.layout.resize(1000)
           print(board.layout.assignment.columns)
    """

    @staticmethod
    def for_user() -> MemoBoard:
        """Creates an instance using the user's ``~/.memogrid.conf.py`` file.

        Raises :exc:`Exception` if it does not exist or does not define configuration.
        """
        return MemogridConf.for_user().instantiate()

    def __init__(self, conf: MemogridConf):
        self.conf = conf
        self.provider = conf.provider_conf.instantiate()
        self.notes: List[Note] = []
        self.filters = FilterState(tz=conf.timezone)
        self.layout = MasonryLayout(conf.layout_conf)
        self._listeners: List[BoardListener] = []
        self._generation = 0

    def subscribe(self, callback: BoardListener) -> Callable[[], None]:
        """Registers a callback that receives the filter and the visible notes after every change.

        Returns a function that unregisters it.
        """
        self._listeners.append(callback)

        def unsubscribe():
            if callback in self._listeners:
                self._listeners.remove(callback)
        return unsubscribe

    def refresh(self) -> List[Note]:
        """Reloads all notes from the provider and returns them.

        If the provider fails, the failure is logged and the board is left with no notes.
        """
        try:
            self.notes = self.provider.fetch_notes()
        except ProviderError as e:
            logger.warning('Failed to fetch notes: %s', e)
            self.notes = []
        self._update()
        return self.notes

    def visible(self) -> List[Note]:
        """Returns the notes matching the current filter, in display order."""
        return sort_notes(filter_notes(self.notes, self.filters))

    def set_filters(self, **changes) -> FilterState:
        """Changes some attributes of :attr:`filters`, for example ``set_filters(search='milk', date=None)``."""
        self.filters = replace(self.filters, **changes)
        self._update()
        return self.filters

    def apply_query(self, query: FilterStateIsh) -> FilterState:
        """Replaces the filter with the given query (see :meth:`memogrid.models.FilterState.parse`)."""
        self.filters = replace(FilterState.parse(query), tz=self.conf.timezone)
        self._update()
        return self.filters

    def toggle_tag(self, tag: str) -> FilterState:
        """Selects the tag if it isn't selected, otherwise deselects it."""
        self.filters = self.filters.toggle_tag(tag)
        self._update()
        return self.filters

    def clear_filters(self) -> FilterState:
        self.filters = FilterState(tz=self.conf.timezone)
        self._update()
        return self.filters

    def upsert(self, note: Note) -> None:
        """Adds a note that was just created, or replaces the existing note with the same id after an edit."""
        for i, existing in enumerate(self.notes):
            if existing.id == note.id:
                self.notes[i] = note
                break
        else:
            self.notes.insert(0, note)
        self._update()

    def remove(self, note_id: str) -> Optional[Note]:
        """Drops the note with the given id after it was deleted. Returns the removed note, if any."""
        for i, existing in enumerate(self.notes):
            if existing.id == note_id:
                removed = self.notes.pop(i)
                self._update()
                return removed
        return None

    def tag_counts(self) -> Dict[str, int]:
        """Returns a map of tag names to the number of notes (ignoring the filter) which possess that tag."""
        return tags.tag_counts(self.notes)

    def stats(self) -> NoteStats:
        return NoteStats.of(self.notes)

    def notes_per_day(self) -> Dict[date, int]:
        """Returns a map of calendar dates to the number of notes created on that date, for the calendar."""
        return notes_per_day(self.notes, self.conf.timezone)

    def columns(self) -> List[List[Note]]:
        """Returns the notes in each column of the current layout."""
        by_id = {note.id: note for note in self.notes}
        return [[by_id[i] for i in column if i in by_id] for column in self.layout.assignment.columns]

    def _update(self) -> ColumnAssignment:
        self._generation += 1
        generation = self._generation
        visible = self.visible()
        for listener in list(self._listeners):
            if generation != self._generation:
                break
            listener(self.filters, visible)
        if generation != self._generation:
            # a listener changed the board, and the newer update has laid it out
            return self.layout.assignment
        return self.layout.set_items(visible)

    def close(self):
        """Closes the associated provider and releases any other resources."""
        self.provider.close()

    def __enter__(self):
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        self.close()
