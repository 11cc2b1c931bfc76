from __future__ import annotations

import os

SEPARATOR = "/"
COLLISION_PREFIX = "NEW-"


def clean_file_name(path: str) -> str:
    """
    Strip the directory part of a path, accepting both separators.

    Example: /User/Albums/Doolittle/debaser.wav --> debaser.wav
    """
    index = max(path.rfind("/"), path.rfind("\\"))
    return path[index + 1:]


class OutputPathResolver:
    """Picks a destination path that does not clobber an existing file.

    Only one fallback level exists: if ``<dir>/<name>`` is taken the
    ``NEW-`` prefixed name is used, and if that is taken too it gets
    overwritten.
    """

    def __init__(self, prefix: str = COLLISION_PREFIX):
        self.prefix = prefix

    def resolve(self, source_path: str, destination_dir: str) -> str:
        name = clean_file_name(str(source_path))
        candidate = f"{destination_dir}{SEPARATOR}{name}"
        if os.path.exists(candidate):
            # Keep the user's existing file.
            candidate = f"{destination_dir}{SEPARATOR}{self.prefix}{name}"
        return candidate
