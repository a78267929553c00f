import re
from typing import Optional, Tuple

from models import ReleaseInfo, UpdateDescriptor

_LEADING_DIGITS = re.compile(r"\d+")


def normalize_version(tag: str) -> str:
    """Drop the leading "v" GitHub tags usually carry ("v1.4.0" -> "1.4.0")."""
    tag = (tag or "").strip()
    if tag[:1] in ("v", "V"):
        return tag[1:]
    return tag


def _component(part: str) -> int:
    match = _LEADING_DIGITS.match(part)
    return int(match.group()) if match else 0


def version_tuple(version: str) -> Tuple[int, ...]:
    """
    Numeric components of a dotted version. Each component contributes its
    leading digits, or 0 when it has none ("1.x.3" -> (1, 0, 3)).
    """
    normalized = normalize_version(version)
    if not normalized:
        return (0,)
    return tuple(_component(part) for part in normalized.split("."))


def compare_versions(a: str, b: str) -> int:
    """Return -1, 0 or 1. Missing trailing components count as 0."""
    left, right = version_tuple(a), version_tuple(b)
    width = max(len(left), len(right))
    left += (0,) * (width - len(left))
    right += (0,) * (width - len(right))
    if left > right:
        return 1
    if left < right:
        return -1
    return 0


def build_update_descriptor(release: Optional[ReleaseInfo], current_version: str, slug: str) -> Optional[UpdateDescriptor]:
    if release is None:
        return None
    if compare_versions(release.version, current_version) <= 0:
        return None
    return UpdateDescriptor(
        slug=slug,
        new_version=release.version,
        info_url=release.html_url,
        download_url=release.download_url,
    )
