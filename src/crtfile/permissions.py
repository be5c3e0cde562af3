"""Permission mini-language: ``[ugoa]`` subject plus ``[rwx]`` letters."""

from __future__ import annotations

import logging
import stat
from dataclasses import dataclass
from enum import Enum
from typing import Iterable

from .errors import InvalidPermissionLetter, PermissionNotSet

logger = logging.getLogger(__name__)


class Subject(str, Enum):
    USER = "u"
    GROUP = "g"
    OTHER = "o"
    ALL = "a"


@dataclass(frozen=True)
class ModeSpec:
    subject: Subject
    letters: str


_BITS: dict[str, dict[Subject, int]] = {
    "r": {
        Subject.USER: stat.S_IRUSR,
        Subject.GROUP: stat.S_IRGRP,
        Subject.OTHER: stat.S_IROTH,
    },
    "w": {
        Subject.USER: stat.S_IWUSR,
        Subject.GROUP: stat.S_IWGRP,
        Subject.OTHER: stat.S_IWOTH,
    },
    "x": {
        Subject.USER: stat.S_IXUSR,
        Subject.GROUP: stat.S_IXGRP,
        Subject.OTHER: stat.S_IXOTH,
    },
}

DEFAULT_SPEC = ModeSpec(Subject.ALL, "rw")


def _letter_bits(letter: str, subject: Subject) -> int:
    by_subject = _BITS[letter]
    if subject is Subject.ALL:
        return by_subject[Subject.USER] | by_subject[Subject.GROUP] | by_subject[Subject.OTHER]
    return by_subject[subject]


def resolve(letters: str, subject: Subject) -> int:
    """Return the mask bits ``letters`` grant to ``subject``.

    Repeated letters are harmless. Any character outside ``rwx`` raises
    InvalidPermissionLetter.
    """
    mask = 0
    for letter in letters:
        if letter not in _BITS:
            raise InvalidPermissionLetter(letter, letters)
        mask |= _letter_bits(letter, subject)
    return mask


def resolve_specs(specs: Iterable[ModeSpec]) -> int:
    """OR every ModeSpec into one mask.

    With no ModeSpec at all the result is ``a=rw``. When some were given but they
    grant nothing, PermissionNotSet is raised instead of falling back.
    """
    specs = list(specs)
    if not specs:
        specs = [DEFAULT_SPEC]
        logger.debug("No mode given; using default %s=%s", DEFAULT_SPEC.subject.value, DEFAULT_SPEC.letters)

    mask = 0
    for spec in specs:
        mask |= resolve(spec.letters, spec.subject)

    if not mask:
        raise PermissionNotSet()

    logger.debug("Resolved mask %s (%s)", oct(mask), format_mask(mask))
    return mask


def format_mask(mask: int) -> str:
    """Render the permission bits of ``mask`` as ``rwxr-x---``."""
    return stat.filemode(mask)[1:]
