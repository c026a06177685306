"""Tag filtering over the items of one result category."""
from __future__ import annotations

from typing import Iterable, List, Sequence, Tuple

from ..models import ResultItem

ALL_TAGS = "all"


def available_tags(items: Iterable[ResultItem]) -> Tuple[str, ...]:
    """``"all"`` followed by every distinct tag, in first-seen order."""
    seen = {ALL_TAGS: None}
    for item in items:
        for tag in item.tags:
            seen.setdefault(tag, None)
    return tuple(seen)


def filter_by_tag(items: Sequence[ResultItem], tag: str) -> List[ResultItem]:
    """Items whose tags contain ``tag`` exactly; ``"all"`` keeps everything."""
    if not tag or tag == ALL_TAGS:
        return list(items)
    return [item for item in items if item.has_tag(tag)]
