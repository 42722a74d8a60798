"""Validation of owner ids and comma-space separated file lists."""

import re
from typing import Any, List

from common.constants import FILE_LIST_DELIMITER
from common.exceptions import ValidationError

# Runs of 2+ whitespace, whitespace not directly after a comma, or
# whitespace at either end of the string.
IRREGULAR_WHITESPACE = re.compile(r'\s{2,}|(?<=[^,])\s|^\s|\s$')

# POSIX root or a Windows drive letter ("C:").
ABSOLUTE_PATH = re.compile(r'^(?:/|\w:)')


def validate_owner(owner: Any) -> str:
    """
    Check that owner is a non-empty string.

    Raises:
        ValidationError: If owner is missing, not a string or blank
    """
    if not isinstance(owner, str) or not owner.strip():
        raise ValidationError("Owner cannot be empty", code="INVALID_OWNER")
    return owner


def is_absolute_path(path: str) -> bool:
    return ABSOLUTE_PATH.match(path) is not None


def parse_file_list(files: Any) -> List[str]:
    """
    Parse a file list such as "/a/b.txt, /c/d.txt" into its paths.

    The whole string is checked before anything is returned, so callers can
    rely on either getting every path or an exception.

    Args:
        files: Raw file list string

    Returns:
        Paths in order of first appearance, duplicates dropped

    Raises:
        ValidationError: If files is nil, empty, irregularly spaced or
            contains a relative path
    """
    if files is None:
        raise ValidationError("Files cannot be nil", code="FILES_NIL")
    if not isinstance(files, str):
        raise ValidationError("Invalid format for files", code="INVALID_FORMAT")
    if files == "":
        raise ValidationError("Files cannot be empty", code="FILES_EMPTY")

    if IRREGULAR_WHITESPACE.search(files):
        raise ValidationError("Invalid format for files", code="INVALID_FORMAT")

    paths = files.split(FILE_LIST_DELIMITER)

    if not all(is_absolute_path(path) for path in paths):
        raise ValidationError("Files must be absolute paths", code="NOT_ABSOLUTE")

    return list(dict.fromkeys(paths))
