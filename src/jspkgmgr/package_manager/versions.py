"""Pick versions out of the lists returned by package managers."""

from __future__ import annotations

import logging
from typing import Iterable, Optional

import semantic_version

logger = logging.getLogger(__name__)


def max_satisfying(versions: Iterable[str], constraint: str) -> Optional[str]:
    """Highest version in ``versions`` matching the npm range ``constraint``.

    Entries that are not valid semantic versions are ignored. Returns ``None``
    when the constraint is invalid or nothing satisfies it.
    """
    try:
        spec = semantic_version.NpmSpec(constraint)
    except ValueError:
        logger.warning("Invalid version constraint: %s", constraint)
        return None

    parsed = []
    for v in versions:
        try:
            parsed.append(semantic_version.Version(v))
        except ValueError:
            continue  # Skip invalid versions

    best = spec.select(parsed)
    return str(best) if best is not None else None
