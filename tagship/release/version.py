from __future__ import annotations

from tagship.core.result import Err, Ok, Result
from tagship.release.config import DEFAULT_TAG_PREFIX
from tagship.release.errors import InvalidTagFormat


def resolve_version(tag: str, prefix: str = DEFAULT_TAG_PREFIX) -> Result[str, InvalidTagFormat]:
    """Strip the release prefix from a pushed tag reference.

    ``refs/tags/v1.2.3`` with the default prefix resolves to ``1.2.3``. The
    remainder is returned as-is; a tag that lacks the prefix, or carries
    nothing after it, is rejected.
    """
    if not tag.startswith(prefix):
        return Err(InvalidTagFormat(tag=tag, prefix=prefix))

    version = tag[len(prefix) :]
    if not version:
        return Err(InvalidTagFormat(tag=tag, prefix=prefix))
    return Ok(version)
