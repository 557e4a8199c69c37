"""Arranges notes of varying heights into balanced columns.

:func:`distribute` is the core algorithm: each note, in display order, goes into whichever column is currently
shortest (the leftmost one on ties). :class:`MasonryLayout` keeps the inputs for that algorithm (notes, container
width, measured heights, list mode) and recomputes the whole assignment whenever any of them changes.
"""

from dataclasses import dataclass, field
import logging
from typing import Callable, Dict, Iterable, List, Optional, Sequence, Union

from memogrid.conf import DEFAULT_BREAKPOINTS, LayoutConf
from memogrid.models import Note

logger = logging.getLogger(__name__)

LayoutItem = Union[Note, str]
"""Layout functions accept either notes or bare note ids."""


def _item_id(item: LayoutItem) -> str:
    return item if isinstance(item, str) else item.id


def derive_column_count(width: float, breakpoints=DEFAULT_BREAKPOINTS) -> int:
    """Returns the number of columns for a container of the given width in pixels.

    With the default breakpoints: 3 columns from 1200px, 2 from 768px, otherwise 1.
    """
    for min_width, count in sorted(breakpoints, reverse=True):
        if width >= min_width:
            return count
    return 1


@dataclass
class ColumnAssignment:
    """The result of a distribution pass: which notes go in which column, in order."""

    columns: List[List[str]]
    """One list of note ids per column, top to bottom."""

    heights: List[float] = field(default_factory=list)
    """Accumulated height of each column, including spacing."""

    def column_of(self, note_id: str) -> Optional[int]:
        """Returns the index of the column containing the note, or None if it is not laid out."""
        for index, column in enumerate(self.columns):
            if note_id in column:
                return index
        return None

    def as_json(self) -> dict:
        return {'columns': [list(c) for c in self.columns], 'heights': list(self.heights)}


def distribute(items: Iterable[LayoutItem], column_count: int, heights: Dict[str, float],
               spacing: float = 16, default_height: float = 200) -> ColumnAssignment:
    """Assigns each item to the column with the smallest accumulated height, processing items in order.

    Ties go to the lowest column index. After an item is placed, its column grows by the item's height plus
    ``spacing``. Items missing from ``heights`` (or with a height of None or 0, i.e. not measured yet) count
    as ``default_height``.

    The result depends only on the arguments, so calling this repeatedly with the same input gives the same
    assignment.

    Raises :exc:`ValueError` if column_count is less than 1.
    """
    if column_count < 1:
        raise ValueError(f'column_count must be at least 1, got {column_count}')
    columns = [[] for _ in range(column_count)]
    totals = [0] * column_count
    for item in items:
        item_id = _item_id(item)
        shortest = min(range(column_count), key=lambda i: totals[i])
        columns[shortest].append(item_id)
        totals[shortest] += (heights.get(item_id) or default_height) + spacing
    return ColumnAssignment(columns, totals)


def layout_columns(items: Iterable[LayoutItem], column_count: int, heights: Dict[str, float]) -> List[List[str]]:
    """Returns ``column_count`` lists of note ids, using the default spacing and placeholder height."""
    return distribute(items, column_count, heights).columns


class MasonryLayout:
    """Keeps a column assignment up to date as notes, width, and measured heights change.

    There is no incremental update: every change triggers a complete :func:`distribute` pass over the
    current inputs. Subscribers registered with :meth:`subscribe` receive each new :class:`ColumnAssignment`.

    If a subscriber triggers another change while being notified, the newer pass wins and the remaining
    subscribers are not told about the older result.

    .. attribute:: assignment
       :type: ColumnAssignment

       The most recent result.
    """

    def __init__(self, conf: LayoutConf = None):
        self.conf = conf or LayoutConf()
        self.items: List[LayoutItem] = []
        self.heights: Dict[str, float] = {}
        self.list_mode = self.conf.list_mode
        self.width: Optional[float] = None
        self.column_count = 1
        self._listeners: List[Callable[[ColumnAssignment], None]] = []
        self._generation = 0
        self.assignment = ColumnAssignment([[]], [0])

    def subscribe(self, callback: Callable[[ColumnAssignment], None]) -> Callable[[], None]:
        """Registers a callback for new assignments. Returns a function that unregisters it."""
        self._listeners.append(callback)

        def unsubscribe():
            if callback in self._listeners:
                self._listeners.remove(callback)
        return unsubscribe

    def set_items(self, items: Sequence[LayoutItem]) -> ColumnAssignment:
        """Replaces the notes to lay out. They should already be filtered and sorted."""
        self.items = list(items)
        return self.redistribute()

    def resize(self, width: float) -> ColumnAssignment:
        """Records a new container width. In list mode the width is remembered but doesn't affect columns."""
        self.width = width
        if not self.list_mode:
            self.column_count = derive_column_count(width, self.conf.breakpoints)
        return self.redistribute()

    def report_height(self, note_id: str, height: float) -> ColumnAssignment:
        """Records the rendered height of a note, as measured by the view."""
        self.heights[note_id] = height
        return self.redistribute()

    def set_list_mode(self, list_mode: bool) -> ColumnAssignment:
        self.list_mode = list_mode
        if list_mode:
            self.column_count = 1
        elif self.width is not None:
            self.column_count = derive_column_count(self.width, self.conf.breakpoints)
        return self.redistribute()

    def redistribute(self) -> ColumnAssignment:
        """Recomputes the assignment from the current inputs and notifies subscribers."""
        self._generation += 1
        generation = self._generation
        if self.list_mode:
            assignment = ColumnAssignment([[_item_id(i) for i in self.items]], [0])
        else:
            assignment = distribute(self.items, self.column_count, self.heights,
                                    spacing=self.conf.spacing, default_height=self.conf.default_height)
        logger.debug('Laid out %d notes in %d columns (pass %d)',
                     len(self.items), len(assignment.columns), generation)
        self.assignment = assignment
        for listener in list(self._listeners):
            if not generation == self._generation:
                break
            listener(assignment)
        return self.assignment
