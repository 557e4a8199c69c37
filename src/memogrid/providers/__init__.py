"""Loads notes from wherever they are stored.

:class:`memogrid.providers.base.Provider` defines an API.
:class:`memogrid.providers.file.FileProvider` reads a JSON or YAML export, and
:class:`memogrid.providers.sqlite.SqliteProvider` reads the ``memos`` table of a SQLite database.
"""
