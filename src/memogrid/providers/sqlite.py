"""Provides the :class:`SqliteProvider` class."""

import logging
import os.path
from pathlib import Path
import re
import sqlite3
from typing import List, Set

from memogrid.conf import SqliteProviderConf
from memogrid.models import Note
from memogrid.providers.base import Provider, ProviderError

logger = logging.getLogger(__name__)

_IDENTIFIER_RE = re.compile(r'[A-Za-z_][A-Za-z0-9_]*')


class SqliteProvider(Provider):
    """Reads notes from a table in a SQLite database, such as a copy of the memos service's database.

    Each row is one note. Columns are matched by name the same way as :meth:`memogrid.models.Note.from_json`
    matches record keys, so ``name``, ``content``, ``tags`` (JSON text), ``pinned``, ``create_time`` and
    ``update_time`` all work. If the table has a ``row_status`` column, archived rows are skipped.

    The database is opened read-only. Remember to call :meth:`close` when done with the instance, or use the
    instance as a context manager.

    .. attribute:: conf
       :type: memogrid.conf.SqliteProviderConf
    """
    def __init__(self, conf: SqliteProviderConf):
        if not conf.path:
            raise ValueError('`path` must be set in SqliteProviderConf.')
        if not _IDENTIFIER_RE.fullmatch(conf.table or ''):
            raise ValueError(f'Invalid table name in SqliteProviderConf: {conf.table!r}')
        self.conf = conf
        self.connection = None

    def _connect(self):
        if not os.path.isfile(self.conf.path):
            raise ProviderError('Database does not exist', self.conf.path)
        uri = Path(self.conf.path).as_uri() + '?mode=ro'
        self.connection = sqlite3.connect(uri, uri=True)
        self.connection.row_factory = sqlite3.Row

    def _columns(self, cursor) -> Set[str]:
        cursor.execute(f'PRAGMA table_info({self.conf.table})')
        return {row['name'] for row in cursor}

    def fetch_notes(self) -> List[Note]:
        try:
            if not self.connection:
                self._connect()
            cursor = self.connection.cursor()
            columns = self._columns(cursor)
            if not columns:
                raise ProviderError(f'Table {self.conf.table} not found', self.conf.path)
            sql = f'SELECT * FROM {self.conf.table}'
            if 'row_status' in columns:
                sql += " WHERE row_status IS NULL OR row_status != 'ARCHIVED'"
            cursor.execute(sql)
            notes = [Note.from_json(dict(row)) for row in cursor]
        except sqlite3.Error as e:
            raise ProviderError('Unable to read notes', self.conf.path, e)
        logger.debug('Loaded %d notes from table %s', len(notes), self.conf.table)
        return notes

    def close(self):
        if self.connection:
            self.connection.close()
            self.connection = None
