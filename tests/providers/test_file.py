from datetime import datetime, timezone
import json
import pytest
from memogrid.conf import FileProviderConf
from memogrid.models import Note
from memogrid.providers.base import ProviderError


def provider(path='/notes/memos.json'):
    return FileProviderConf(path=path).instantiate()


def test_fetch_list(fs):
    records = [
        {'id': '1', 'content': 'Hello #world', 'tags': ['world'], 'created_at': 1714557600, 'is_pinned': 1},
        {'id': '2', 'content': 'Bye', 'tags': '[]'},
        'not a record',
    ]
    fs.create_file('/notes/memos.json', contents=json.dumps(records))
    assert provider().fetch_notes() == [
        Note('1', 'Hello #world', ['world'], created=datetime(2024, 5, 1, 10, tzinfo=timezone.utc), pinned=True),
        Note('2', 'Bye'),
    ]


def test_fetch_memos_response(fs):
    response = {'memos': [{'name': 'memos/1', 'content': '#a', 'tags': ['a']}], 'nextPageToken': ''}
    fs.create_file('/notes/memos.json', contents=json.dumps(response))
    assert [n.id for n in provider().fetch_notes()] == ['memos/1']


def test_fetch_yaml(fs):
    doc = """notes:
- id: one
  content: "Shopping #errands\\n- [ ] milk"
  tags: [errands]
  created: 2024-05-01 10:00:00
- id: two
  content: nothing
"""
    fs.create_file('/notes/memos.yaml', contents=doc)
    notes = provider('/notes/memos.yaml').fetch_notes()
    assert notes[0] == Note('one', 'Shopping #errands\n- [ ] milk', ['errands'],
                            created=datetime(2024, 5, 1, 10, tzinfo=timezone.utc), todo=True)
    assert notes[1] == Note('two', 'nothing')


def test_fetch_unexpected_shape(fs):
    fs.create_file('/notes/memos.json', contents='{"hello": "world"}')
    assert provider().fetch_notes() == []


def test_fetch_missing(fs):
    with pytest.raises(ProviderError) as excinfo:
        provider().fetch_notes()
    assert excinfo.value.source == '/notes/memos.json'
    assert isinstance(excinfo.value.cause, FileNotFoundError)


def test_fetch_invalid(fs):
    fs.create_file('/notes/memos.json', contents='[{"id": ')
    with pytest.raises(ProviderError, match='Unable to read notes: /notes/memos.json'):
        provider().fetch_notes()
