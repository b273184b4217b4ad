import os
import re
from typing import Optional

# letters, digits, underscore, hyphen, dot, space and the path separator
SAFE_PATH_RE = re.compile(r"^[A-Za-z0-9_\-. /]+$")

PLAINTEXT = "plaintext"

LANGUAGE_BY_EXTENSION = {
    "js": "javascript",
    "jsx": "javascript",
    "mjs": "javascript",
    "ts": "typescript",
    "tsx": "typescript",
    "html": "html",
    "htm": "html",
    "css": "css",
    "scss": "scss",
    "json": "json",
    "md": "markdown",
    "py": "python",
    "yml": "yaml",
    "yaml": "yaml",
    "svg": "xml",
    "xml": "xml",
    "txt": PLAINTEXT,
}


def extension_of(path: str) -> str:
    name = path.rsplit("/", 1)[-1]
    if "." not in name:
        return ""
    return name.rsplit(".", 1)[-1].lower()


def language_for_path(path: str) -> str:
    """Language tag for a file path; unknown extensions map to plaintext."""
    return LANGUAGE_BY_EXTENSION.get(extension_of(path), PLAINTEXT)


def is_safe_name(path: str) -> bool:
    if not isinstance(path, str) or not SAFE_PATH_RE.match(path):
        return False
    if path.startswith("/") or path.endswith("/"):
        return False
    for segment in path.split("/"):
        if not segment.strip() or segment in (".", ".."):
            return False
    return True


# --- Helper: safe path normalize & reject traversal/abs paths ---
def _safe_normalize(p: str) -> Optional[str]:
    if not isinstance(p, str) or p.strip() == "":
        return None
    p = p.replace("\\", "/")
    # disallow absolute paths
    if p.startswith("/") or os.path.isabs(p):
        return None
    clean = os.path.normpath(p).replace("\\", "/")
    if clean.startswith("..") or "/.." in clean or clean == "..":
        return None
    while clean.startswith("./"):
        clean = clean[2:]
    if clean in ("", "."):
        return None
    return clean
