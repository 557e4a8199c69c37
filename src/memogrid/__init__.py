"""Filters, sorts, and arranges short Markdown notes into balanced columns.

If you installed via ``pip``, run ``memogrid -h`` to get help.

To use the Python API, look at :class:`memogrid.api.MemoBoard`, or use the pure functions
:func:`memogrid.tags.extract_tags`, :func:`memogrid.models.filter_notes`, :func:`memogrid.models.sort_notes`,
:func:`memogrid.layout.derive_column_count` and :func:`memogrid.layout.layout_columns` directly.
"""
