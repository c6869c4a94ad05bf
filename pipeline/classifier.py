#!/usr/bin/env python3
"""
Error Classifier

Maps an exiftool diagnostic to one ErrorKind plus any values captured from
the message. Patterns are tried top to bottom and the first match wins.
Classification is a pure function of the text.
"""

import re
from dataclasses import dataclass, field
from enum import Enum
from typing import Callable, Dict, List, Optional, Tuple


class ErrorKind(str, Enum):
    """Failure categories that have a dedicated remediation"""

    MISSING_METADATA = "missing_metadata"
    MAKER_NOTES = "maker_notes"
    INCORRECT_EXTENSION = "incorrect_extension"
    TRUNCATED_MEDIA = "truncated_media"
    FILE_EXISTS = "file_exists"
    UNKNOWN = "unknown"


@dataclass(frozen=True)
class ErrorClassification:
    """ErrorKind plus named values captured from the diagnostic"""

    kind: ErrorKind
    params: Dict[str, str] = field(default_factory=dict)


Extractor = Callable[[re.Match, str], Dict[str, str]]


def _no_params(match: re.Match, text: str) -> Dict[str, str]:
    return {}


def _extension_params(match: re.Match, text: str) -> Dict[str, str]:
    return {"current": match.group(1), "expected": match.group(2)}


def _existing_path(match: re.Match, text: str) -> Dict[str, str]:
    return {"existing_path": match.group(1)}


ERROR_PATTERNS: List[Tuple[re.Pattern, ErrorKind, Extractor]] = [
    (
        re.compile(r"no json file found|no metadata found", re.IGNORECASE),
        ErrorKind.MISSING_METADATA,
        _no_params,
    ),
    (
        re.compile(r"\[minor\] maker notes could not be parsed", re.IGNORECASE),
        ErrorKind.MAKER_NOTES,
        _no_params,
    ),
    (
        re.compile(r"not a valid (\w+) \(looks more like an? (\w+)\)", re.IGNORECASE),
        ErrorKind.INCORRECT_EXTENSION,
        _extension_params,
    ),
    (
        re.compile(r"truncated mdat atom", re.IGNORECASE),
        ErrorKind.TRUNCATED_MEDIA,
        _no_params,
    ),
    (
        re.compile(r"'([^']+)' already exists", re.IGNORECASE),
        ErrorKind.FILE_EXISTS,
        _existing_path,
    ),
]


def classify(text: Optional[str]) -> ErrorClassification:
    """Classify an exiftool diagnostic.

    Args:
        text: Diagnostic text; None or blank means no sidecar was ever found

    Returns:
        ErrorClassification for the first matching pattern, or UNKNOWN with
        the raw text under "raw"

    Example:
        >>> classify("Error: Not a valid HEIC (looks more like a JPEG) - /x/a.heic")
        ErrorClassification(kind=<ErrorKind.INCORRECT_EXTENSION: 'incorrect_extension'>, params={'current': 'HEIC', 'expected': 'JPEG'})
    """
    if text is None or not text.strip():
        return ErrorClassification(ErrorKind.MISSING_METADATA)

    for pattern, kind, extractor in ERROR_PATTERNS:
        match = pattern.search(text)
        if match:
            return ErrorClassification(kind, extractor(match, text))

    return ErrorClassification(ErrorKind.UNKNOWN, {"raw": text})
