"""Renders a laid-out board as a standalone HTML page using Mako."""

from datetime import tzinfo
import os.path
from typing import List, Optional

from mako.template import Template

from memogrid.models import Category, FilterState, Note

BOARD_TEMPLATE = """\
<!DOCTYPE html>
<html>
<head>
<meta charset="utf-8">
<title>memogrid</title>
<style>
body { font-family: sans-serif; background: #f9fafb; margin: 24px; }
.board { display: grid; grid-template-columns: repeat(${len(columns)}, 1fr); gap: 16px; }
.column > .note { margin-bottom: 16px; }
.note { background: #fff; border: 1px solid #e5e7eb; border-radius: 8px; padding: 12px; white-space: pre-wrap; }
.note.pinned { border-color: #6366f1; }
.meta { color: #6b7280; font-size: 12px; margin-top: 8px; }
.tag { color: #4f46e5; margin-right: 6px; }
</style>
</head>
<body>
% if not filter_state.is_empty():
<p class="meta">Filter: ${describe(filter_state)}</p>
% endif
<div class="board${' list' if list_mode else ''}">
% for column in columns:
<div class="column">
  % for note in column:
  <div class="note${' pinned' if note.pinned else ''}" id="note-${note.id}">
    <div class="content">${note.content}</div>
    <div class="meta">
      % if note.created:
      ${note.created.astimezone(tz).strftime('%Y-%m-%d %H:%M')}
      % endif
      % for tag in note.tags:
      <span class="tag">#${tag}</span>
      % endfor
    </div>
  </div>
  % endfor
</div>
% endfor
</div>
</body>
</html>
"""


def describe(filters: FilterState) -> str:
    """Returns the filter in the query syntax accepted by :meth:`memogrid.models.FilterState.parse`."""
    parts = []
    if filters.tags:
        parts.append('tag:' + ','.join(sorted(filters.tags)))
    if filters.date:
        parts.append(f'date:{filters.date.isoformat()}')
    if not filters.category == Category.ALL:
        parts.append(f'is:{filters.category.value}')
    if filters.search:
        parts.append(filters.search)
    return ' '.join(parts)


def render_board(columns: List[List[Note]], filter_state: FilterState = None, list_mode: bool = False,
                 template_path: Optional[str] = None, tz: Optional[tzinfo] = None) -> str:
    """Returns an HTML page showing the notes in their columns.

    Expressions in the template are HTML-escaped. If template_path is given, that Mako template is used
    instead of :data:`BOARD_TEMPLATE`; it receives the same ``columns``, ``filter_state``, ``list_mode``,
    ``tz`` and ``describe`` names. Creation times are shown in the zone tz (default: system zone).

    Raises :exc:`FileNotFoundError` if template_path does not exist.
    """
    if template_path:
        if not os.path.isfile(template_path):
            raise FileNotFoundError(f'Template does not exist: {template_path}')
        template = Template(filename=os.path.abspath(template_path), default_filters=['str', 'h'])
    else:
        template = Template(BOARD_TEMPLATE, default_filters=['str', 'h'])
    return template.render(columns=columns, filter_state=filter_state or FilterState(), list_mode=list_mode,
                           tz=tz, describe=describe)
