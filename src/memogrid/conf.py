from __future__ import annotations
from dataclasses import dataclass, field, replace
from datetime import tzinfo
import os.path
from typing import Optional, Tuple

DEFAULT_BREAKPOINTS = ((1200, 3), (768, 2))


@dataclass
class ProviderConf:
    """Base class for provider config. Use a subclass such as :class:`FileProviderConf`."""

    def instantiate(self):
        raise NotImplementedError("Please use a subclass like FileProviderConf instead!")

    def standardize(self):
        return self


@dataclass
class FileProviderConf(ProviderConf):
    """Configures memogrid to read notes from a JSON or YAML export, via :class:`memogrid.providers.FileProvider`."""

    path: str = None
    """Required. Path to a ``.json``, ``.yaml`` or ``.yml`` file.

    The file may contain a list of note records, or an object whose ``memos`` or ``notes`` key holds that list.
    """

    def instantiate(self):
        from memogrid.providers.file import FileProvider
        return FileProvider(self.standardize())

    def standardize(self):
        return replace(self, path=self.path and os.path.realpath(os.path.expanduser(self.path)))


@dataclass
class SqliteProviderConf(FileProviderConf):
    """Configures memogrid to read notes from a SQLite database, via :class:`memogrid.providers.SqliteProvider`."""

    table: str = 'memos'
    """Name of the table holding one row per note."""

    def instantiate(self):
        from memogrid.providers.sqlite import SqliteProvider
        return SqliteProvider(self.standardize())


@dataclass
class LayoutConf:
    """Controls how notes are arranged into columns by :class:`memogrid.layout.MasonryLayout`."""

    breakpoints: Tuple[Tuple[int, int], ...] = DEFAULT_BREAKPOINTS
    """Pairs of (minimum container width in pixels, column count), widest first.

    Widths below every breakpoint get a single column. The default gives 3 columns from 1200px,
    2 columns from 768px, and 1 column otherwise.
    """

    spacing: float = 16
    """Vertical space added below each note when accumulating column heights."""

    default_height: float = 200
    """Height assumed for notes that have not been measured yet."""

    list_mode: bool = False
    """If True, notes are shown one per row in a single column, regardless of width."""


@dataclass
class MemogridConf:
    provider_conf: ProviderConf
    """Configures where notes come from."""

    layout_conf: LayoutConf = field(default_factory=LayoutConf)

    timezone: Optional[tzinfo] = None
    """Zone used when filtering or counting notes by calendar date. Defaults to the system zone."""

    board_template: Optional[str] = None
    """Path to a Mako template used by the ``render`` command instead of the built-in one.

    The template receives ``columns`` (a list of lists of :class:`memogrid.models.Note`), ``filter_state``,
    ``list_mode`` and ``tz``.
    """

    @classmethod
    def for_user(cls) -> MemogridConf:
        path = os.path.expanduser(os.path.join('~', '.memogrid.conf.py'))
        if not os.path.exists(path):
            raise Exception(f'You need to create the config file: {path}')
        with open(path, 'r') as file:
            conf_script = file.read()
        context = {}
        exec(conf_script, context)
        if 'conf' not in context or not isinstance(context['conf'], cls):
            raise Exception('You need to assign an instance of MemogridConf to the variable `conf` '
                            f'in your config file: {path}')
        return context['conf']

    def standardize(self):
        return replace(
            self,
            provider_conf=self.provider_conf.standardize(),
            board_template=self.board_template and os.path.realpath(os.path.expanduser(self.board_template))
        )

    def instantiate(self):
        from memogrid.api import MemoBoard
        return MemoBoard(self.standardize())
