"""Provides the :class:`FileProvider` class."""

import json
import logging
import os.path
from typing import List

import yaml

from memogrid.conf import FileProviderConf
from memogrid.models import Note
from memogrid.providers.base import Provider, ProviderError

logger = logging.getLogger(__name__)

YAML_SUFFIXES = ('.yaml', '.yml')


def _records(data) -> list:
    if isinstance(data, dict):
        for key in ('memos', 'notes'):
            if isinstance(data.get(key), list):
                return data[key]
        return []
    if isinstance(data, list):
        return data
    return []


class FileProvider(Provider):
    """Reads notes from a JSON or YAML file, such as an export of the memos API.

    The file may hold a list of records, or an object with the list under ``memos`` (the shape of a
    ``GET /api/v1/memos`` response) or ``notes``. Entries that are not objects are skipped.

    .. attribute:: conf
       :type: memogrid.conf.FileProviderConf
    """
    def __init__(self, conf: FileProviderConf):
        if not conf.path:
            raise ValueError('`path` must be set in FileProviderConf.')
        self.conf = conf

    def fetch_notes(self) -> List[Note]:
        path = self.conf.path
        try:
            with open(path, 'r', encoding='utf-8') as file:
                if path.lower().endswith(YAML_SUFFIXES):
                    data = yaml.safe_load(file)
                else:
                    data = json.load(file)
        except (OSError, ValueError, yaml.YAMLError) as e:
            raise ProviderError('Unable to read notes', path, e)
        notes = [Note.from_json(r) for r in _records(data) if isinstance(r, dict)]
        logger.debug('Loaded %d notes from %s', len(notes), os.path.basename(path))
        return notes
