"""Path normalization for matching tracks across libraries."""


def normalize_path(path: str, root: str = "") -> str:
    """Build the matching key for a track path.

    The whole path is lower-cased because case-insensitive file systems can
    change casing without the library noticing. ``root`` is removed when it is
    a literal prefix of the lower-cased path and ignored otherwise. No
    unescaping happens here.

    Args:
        path: Path as reported by the library
        root: Library root, already lower-cased

    Returns:
        Normalized key
    """
    key = path.lower()
    if root and key.startswith(root):
        return key[len(root) :]
    return key


def has_root(path: str, root: str) -> bool:
    """Check whether a path lives under the given root."""
    return path.lower().startswith(root)
