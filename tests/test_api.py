from datetime import date, datetime, timezone
import json
import logging
import os.path
from memogrid.api import MemoBoard
from memogrid.conf import MemogridConf, FileProviderConf, LayoutConf
from memogrid.models import Category, FilterState, Note, NoteStats
from memogrid.providers.base import ProviderError

RECORDS = [
    {'id': 'a', 'content': 'Plan #work #urgent', 'tags': ['work', 'urgent'], 'createTime': '2024-05-01T09:00:00Z'},
    {'id': 'b', 'content': 'Notes #work', 'tags': ['work'], 'createTime': '2024-05-02T09:00:00Z'},
    {'id': 'c', 'content': 'Groceries\n- [ ] milk', 'tags': [], 'createTime': '2024-05-02T10:00:00Z',
     'pinned': True},
]


def config(**kwargs):
    return MemogridConf(provider_conf=FileProviderConf(path='/notes/memos.json'), timezone=timezone.utc, **kwargs)


def board_with_notes(fs, **kwargs):
    fs.create_file('/notes/memos.json', contents=json.dumps(RECORDS))
    board = config(**kwargs).instantiate()
    board.refresh()
    return board


def ids(notes):
    return [n.id for n in notes]


def test_for_user(fs):
    confpy = """from memogrid.conf import *
conf = MemogridConf(provider_conf=FileProviderConf(path='/notes/memos.json'))"""
    fs.create_file('/notes/memos.json', contents='[]')
    fs.create_file(os.path.expanduser('~/.memogrid.conf.py'), contents=confpy)
    with MemoBoard.for_user() as board:
        assert board.refresh() == []


def test_refresh(fs):
    board = board_with_notes(fs)
    assert ids(board.notes) == ['a', 'b', 'c']
    assert ids(board.visible()) == ['c', 'b', 'a']


def test_refresh_failure(fs, mocker, caplog):
    board = board_with_notes(fs)
    mocker.patch.object(board.provider, 'fetch_notes', side_effect=ProviderError('Unable to read notes', 'x'))
    with caplog.at_level(logging.WARNING):
        assert board.refresh() == []
    assert 'Failed to fetch notes' in caplog.text
    assert board.visible() == []
    assert board.layout.assignment.columns == [[]]


def test_filters(fs):
    board = board_with_notes(fs)
    board.set_filters(tags={'work', 'urgent'})
    assert ids(board.visible()) == ['a']
    board.toggle_tag('urgent')
    assert board.filters.tags == {'work'}
    assert ids(board.visible()) == ['b', 'a']
    board.set_filters(date=date(2024, 5, 2))
    assert ids(board.visible()) == ['b']
    board.clear_filters()
    assert board.filters == FilterState(tz=timezone.utc)
    board.set_filters(category=Category.TODO)
    assert ids(board.visible()) == ['c']
    board.apply_query('tag:work plan')
    assert ids(board.visible()) == ['a']
    assert board.filters.tz == timezone.utc


def test_subscribe(fs):
    board = board_with_notes(fs)
    received = []
    unsubscribe = board.subscribe(lambda filters, notes: received.append((filters.search, ids(notes))))
    board.set_filters(search='notes')
    board.set_filters(search=None)
    unsubscribe()
    board.set_filters(search='plan')
    assert received == [('notes', ['b']), (None, ['c', 'b', 'a'])]


def test_listener_change_wins(fs):
    board = board_with_notes(fs)
    late = []

    def add_work(filters, notes):
        if not filters.tags:
            board.set_filters(tags={'work'})

    board.subscribe(add_work)
    board.subscribe(lambda filters, notes: late.append((filters.tags, ids(notes))))
    board.set_filters(search=None)
    assert ids(board.visible()) == ['b', 'a']
    assert board.layout.assignment.columns == [['b', 'a']]
    assert late == [({'work'}, ['b', 'a'])]


def test_layout_follows_filters(fs):
    board = board_with_notes(fs)
    board.layout.resize(800)
    assert board.layout.assignment.columns == [['c', 'a'], ['b']]
    board.layout.report_height('c', 500)
    assert board.layout.assignment.columns == [['c'], ['b', 'a']]
    board.set_filters(tags={'work'})
    assert board.layout.assignment.columns == [['b'], ['a']]
    assert [ids(c) for c in board.columns()] == [['b'], ['a']]


def test_list_mode_conf(fs):
    board = board_with_notes(fs, layout_conf=LayoutConf(list_mode=True))
    board.layout.resize(2000)
    assert board.layout.assignment.columns == [['c', 'b', 'a']]


def test_upsert_and_remove(fs):
    board = board_with_notes(fs)
    edited = board.notes[1].edit('Notes #home', now=datetime(2024, 5, 3, tzinfo=timezone.utc))
    board.upsert(edited)
    assert board.notes[1].tags == ['home']
    assert len(board.notes) == 3
    board.upsert(Note('d', 'New', created=datetime(2024, 5, 4, tzinfo=timezone.utc)))
    assert ids(board.visible()) == ['c', 'd', 'b', 'a']
    assert board.remove('a').id == 'a'
    assert board.remove('zzz') is None
    assert ids(board.visible()) == ['c', 'd', 'b']
    assert board.layout.assignment.columns == [['c', 'd', 'b']]


def test_counts(fs):
    board = board_with_notes(fs)
    board.set_filters(tags={'urgent'})
    assert board.tag_counts() == {'work': 2, 'urgent': 1}
    assert board.stats() == NoteStats(total=3, pinned=1, todo=1, todo_done=0)
    assert board.notes_per_day() == {date(2024, 5, 1): 1, date(2024, 5, 2): 2}
