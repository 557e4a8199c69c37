"""Helpers for finding and normalizing hashtags in note content.

A hashtag is a ``#`` immediately followed by one or more letters (any script, so ``#工作`` works),
digits, underscores or hyphens. The ``#`` is not part of the tag. Examples:

* ``"hello #world and #foo-bar #4 test"`` yields ``["world", "foo-bar", "4"]``
* ``"# heading"`` and ``"##"`` yield nothing
* ``"##double"`` yields ``["double"]``, since the second ``#`` starts a valid tag
"""

from collections import defaultdict
import json
import re
from typing import Any, Dict, Iterable, List

TAG_RE = re.compile(r'#([\w\-]+)')


def extract_tags(content: str) -> List[str]:
    """Returns the hashtags in the content, in order of first appearance.

    Tags are case-sensitive. When a tag occurs more than once, only its first occurrence is kept.
    Returns an empty list if there are no hashtags, or if content is not a string.
    """
    if not isinstance(content, str):
        return []
    result = []
    seen = set()
    for tag in TAG_RE.findall(content):
        if tag not in seen:
            seen.add(tag)
            result.append(tag)
    return result


def normalize_tags(value: Any) -> List[str]:
    """Converts tag data from a provider into a list of strings.

    Providers may hand back a list, or a JSON-encoded list stored as text. Anything that can't be
    interpreted as a list is treated as having no tags, and non-string entries are dropped.
    """
    if isinstance(value, str):
        try:
            value = json.loads(value)
        except ValueError:
            return []
    if not isinstance(value, (list, tuple)):
        return []
    return [t for t in value if isinstance(t, str) and t]


def tag_counts(notes: Iterable) -> Dict[str, int]:
    """Returns a map of tag names to the number of notes which possess that tag."""
    result = defaultdict(int)
    for note in notes:
        for tag in set(note.tags):
            result[tag] += 1
    return dict(result)


def all_tags(notes: Iterable) -> List[str]:
    """Returns every distinct tag used by the notes, sorted."""
    return sorted({t for note in notes for t in note.tags})
