"""Command-line interface for memogrid."""


import argparse
from datetime import datetime, timezone
import json
import logging
import sys
from typing import Dict, Optional
from terminaltables import AsciiTable
from memogrid.api import MemoBoard
from memogrid.models import Note
from memogrid.render import render_board
from memogrid.tags import tag_counts


def preview(content: str, max_length: int = 100) -> str:
    """Returns the first line of the content, shortened to max_length characters."""
    line = (content or '').strip().split('\n', 1)[0]
    return line[:max_length] + '...' if len(line) > max_length else line


def format_age(created: Optional[datetime], now: datetime = None) -> str:
    if not created:
        return ''
    now = now or datetime.now(timezone.utc)
    minutes = int((now - created).total_seconds() // 60)
    if minutes < 1:
        return 'just now'
    if minutes < 60:
        return f'{minutes} minutes ago'
    if minutes < 60 * 24:
        return f'{minutes // 60} hours ago'
    if minutes < 60 * 24 * 7:
        return f'{minutes // (60 * 24)} days ago'
    return created.astimezone().strftime('%Y-%m-%d')


def _print_note(note: Note) -> None:
    print(f'id: {note.id}')
    print(f'created: {note.created}')
    print(f'tags: {", ".join(note.tags)}')
    flags = [name for name, on in (('pinned', note.pinned), ('todo', note.todo)) if on]
    if flags:
        print(f'flags: {", ".join(flags)}')
    print(note.content)


def _query(args, board: MemoBoard) -> int:
    notes = board.visible()
    if args.json:
        print(json.dumps([n.as_json() for n in notes]))
    elif args.table:
        data = [('Id', 'Age', 'Pinned', 'Tags', 'Preview')]
        for note in notes:
            data.append((note.id, format_age(note.created), '*' if note.pinned else '',
                         '\n'.join(note.tags), preview(note.content, 40)))
        print(AsciiTable(data).table)
    else:
        for note in notes:
            print('--------------------')
            _print_note(note)
    return 0


def _tags(args, board: MemoBoard) -> int:
    counts = tag_counts(board.visible())
    if args.json:
        print(json.dumps(counts))
    else:
        tags = sorted(counts.keys())
        data = [('Tag', 'Count')] + [(t, counts[t]) for t in tags]
        table = AsciiTable(data)
        table.justify_columns[1] = 'right'
        print(table.table)
    return 0


def _stats(args, board: MemoBoard) -> int:
    stats = board.stats()
    if args.json:
        days = {d.isoformat(): c for d, c in sorted(board.notes_per_day().items())}
        print(json.dumps(dict(stats.as_json(), days=days)))
    else:
        data = [('Total', 'Pinned', 'Todo', 'Todo done'),
                (stats.total, stats.pinned, stats.todo, stats.todo_done)]
        print(AsciiTable(data).table)
    return 0


def _load_heights(path: str) -> Dict[str, float]:
    with open(path, 'r') as file:
        data = json.load(file)
    if not isinstance(data, dict):
        raise ValueError(f'Heights file must contain an object mapping note ids to heights: {path}')
    heights = {}
    for note_id, height in data.items():
        try:
            heights[note_id] = float(height)
        except (TypeError, ValueError) as e:
            raise ValueError(f'Height of note {note_id} is not a number: {height!r}') from e
    return heights


def _arrange(args, board: MemoBoard) -> None:
    if args.heights:
        board.layout.heights.update(_load_heights(args.heights[0]))
    board.layout.set_list_mode(args.list)
    board.layout.resize(args.width)


def _layout(args, board: MemoBoard) -> int:
    _arrange(args, board)
    if args.json:
        print(json.dumps(board.layout.assignment.as_json()))
    else:
        columns = board.columns()
        heading = tuple(f'Column {i + 1}' for i in range(len(columns)))
        row = tuple('\n'.join(f'{n.id}: {preview(n.content, 30)}' for n in column) for column in columns)
        print(AsciiTable([heading, row]).table)
    return 0


def _render(args, board: MemoBoard) -> int:
    _arrange(args, board)
    html = render_board(board.columns(), board.filters, board.layout.list_mode, board.conf.board_template,
                        board.conf.timezone)
    if args.output:
        with open(args.output[0], 'w', encoding='utf-8') as file:
            file.write(html)
        print(f'Wrote {args.output[0]}')
    else:
        print(html)
    return 0


def argparser() -> argparse.ArgumentParser:
    query_help = ('Query string, e.g. "tag:work,urgent date:2024-05-01 is:pinned milk". '
                  'Bare words are searched for in note content. If omitted, all notes are used.')

    parser = argparse.ArgumentParser()
    parser.set_defaults(func=None)
    parser.add_argument('-v', '--verbose', action='store_true', help='Log debugging details to stderr.')

    subs = parser.add_subparsers(title='Commands')

    p_q = subs.add_parser('query', help='List notes matching a query, pinned first, then newest first.')
    p_q.add_argument('query', nargs='?', help=query_help)
    p_q_formats = p_q.add_mutually_exclusive_group()
    p_q_formats.add_argument('-j', '--json', help='Output as JSON.', action='store_true')
    p_q_formats.add_argument('-t', '--table', help='Format output as a table.', action='store_true')
    p_q.set_defaults(func=_query)

    p_tags = subs.add_parser('tags', help='Show a list of tags and the number of notes that have each tag.')
    p_tags.add_argument('query', nargs='?', help=query_help)
    p_tags.add_argument('-j', '--json', action='store_true',
                        help='Output as JSON. The output is an object whose keys are tags and whose values '
                             'are the number of notes that matched the query and also possess that tag.')
    p_tags.set_defaults(func=_tags)

    p_stats = subs.add_parser('stats', help='Show counts of all, pinned, and todo notes.')
    p_stats.add_argument('-j', '--json', action='store_true',
                         help='Output as JSON, including the number of notes created on each day.')
    p_stats.set_defaults(func=_stats, query=None)

    for name, func, help_text in (('layout', _layout, 'Show how notes would be arranged into columns.'),
                                  ('render', _render, 'Render the arranged notes as an HTML page.')):
        p = subs.add_parser(name, help=help_text)
        p.add_argument('query', nargs='?', help=query_help)
        p.add_argument('-w', '--width', type=float, default=1200,
                       help='Container width in pixels, which determines the number of columns. Default 1200.')
        p.add_argument('-l', '--list', action='store_true', help='Use list mode: one note per row.')
        p.add_argument('-H', '--heights', nargs=1,
                       help='JSON file mapping note ids to measured heights in pixels. '
                            'Unmeasured notes use the configured default height.')
        if name == 'layout':
            p.add_argument('-j', '--json', action='store_true',
                           help='Output as JSON, with column contents as lists of note ids.')
        else:
            p.add_argument('-o', '--output', nargs=1, help='File to write. By default the page is printed.')
        p.set_defaults(func=func)

    return parser


def main(args=None) -> int:
    """Runs the tool and returns its exit code.

    args may be an array of string command-line arguments; if absent,
    the process's arguments are used.
    """
    parser = argparser()
    args = parser.parse_args(args)
    logging.basicConfig(level=logging.DEBUG if args.verbose else logging.WARNING, stream=sys.stderr)
    if not args.func:
        parser.print_help()
        return 1
    with MemoBoard.for_user() as board:
        board.refresh()
        if args.query:
            board.apply_query(args.query)
        return args.func(args, board)
