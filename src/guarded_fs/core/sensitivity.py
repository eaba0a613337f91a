"""Heuristics for spotting files that are risky to delete or overwrite.

These checks guard against accidents, not against a malicious caller:
the allow-list in PathAuthorizer is the actual security boundary.
"""

import os
import re
import stat

SYSTEM_DIRECTORY_PATTERNS = [
    re.compile(r"(?:^|[/\\])(?:System32|SysWOW64|Windows|Program Files|Applications)[/\\]", re.IGNORECASE),
    re.compile(r"(?:^|[/\\])(?:etc|bin|sbin|usr[/\\]bin|usr[/\\]sbin)[/\\]", re.IGNORECASE),
]

SENSITIVE_EXTENSIONS = frozenset({
    # configuration
    ".ini", ".cfg", ".conf", ".config", ".json", ".xml", ".yaml", ".yml",
    # executables and scripts
    ".exe", ".dll", ".sys", ".bat", ".cmd", ".ps1", ".sh", ".bash",
    # databases
    ".db", ".sqlite", ".mdb", ".accdb",
    # keys and certificates
    ".key", ".pem", ".crt", ".cert", ".p12", ".pfx",
})


def is_sensitive_path(path: str) -> bool:
    """Check whether a path looks like a system, config, executable, database or key file."""
    if any(pattern.search(path) for pattern in SYSTEM_DIRECTORY_PATTERNS):
        return True
    return os.path.splitext(path)[1].lower() in SENSITIVE_EXTENSIONS


def is_read_only_mode(mode: int) -> bool:
    """Check whether the owner-write bit is unset in a st_mode value."""
    return not mode & stat.S_IWUSR
