"""Split the ``;`` separated tag column into clean tag tokens."""

from __future__ import annotations

TAG_SEPARATOR = ";"
# tag.tag is varchar(100); tokens that reach the limit are dropped, not cut.
MAX_TAG_LENGTH = 100


def split_tags(raw: str) -> frozenset[str]:
    tags: set[str] = set()
    for token in raw.split(TAG_SEPARATOR):
        tag = token.strip()
        if not tag or len(tag) >= MAX_TAG_LENGTH:
            continue
        tags.add(tag)
    return frozenset(tags)
