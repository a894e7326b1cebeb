# Copyright (c) 2025 Kutay Demir.
# Licensed under the PolyForm Shield License 1.0.0. See LICENSE file for details.

"""
Distinct-name allocation for generated identifiers.

User variables and procedures are free-form labels in the editor; the
generated program needs legal Python identifiers that never clash with each
other, with keywords, or with the names the generator itself introduces
(pin objects, helper functions, loop counters).
"""

import logging
import re
from enum import Enum
from typing import Dict, Iterable, Optional, Set, Tuple

logger = logging.getLogger(__name__)


class NameRealm(Enum):
    """Kind of logical name; realms share one output namespace."""
    VARIABLE = 'VARIABLE'
    PROCEDURE = 'PROCEDURE'
    GENERATED = 'GENERATED'


_INVALID_CHARS = re.compile(r'[^a-zA-Z0-9_]')


class NameDatabase:
    """
    Maps logical names to unique output identifiers.

    Example:
        >>> db = NameDatabase({'print'})
        >>> db.get_name('print', NameRealm.VARIABLE)
        'print_2'
        >>> db.get_name('print', NameRealm.VARIABLE)
        'print_2'
    """

    def __init__(self, reserved_words: Iterable[str] = ()) -> None:
        self.reserved_words: Set[str] = set(reserved_words)
        self._db: Dict[Tuple[NameRealm, str], str] = {}
        self._logical: Dict[str, Tuple[NameRealm, str]] = {}
        self._used: Set[str] = set()

    def reset(self) -> None:
        self._db.clear()
        self._logical.clear()
        self._used.clear()

    def get_name(self, name: str, realm: NameRealm = NameRealm.VARIABLE) -> str:
        """
        Output identifier for a logical name, allocated on first use.

        Repeated calls with the same (name, realm) return the same identifier.
        """
        key = (realm, name)
        if key in self._db:
            return self._db[key]
        output = self._allocate(name)
        self._db[key] = output
        self._logical[output] = key
        logger.debug("Allocated %s name %r -> %r", realm.value, name, output)
        return output

    def get_distinct_name(self, preferred: str, realm: NameRealm = NameRealm.GENERATED) -> str:
        """A fresh identifier based on ``preferred``; never memoized."""
        output = self._allocate(preferred)
        self._logical[output] = (realm, preferred)
        logger.debug("Allocated distinct %s name %r -> %r", realm.value, preferred, output)
        return output

    def get_logical_name(self, output: str) -> Optional[str]:
        """Logical name an output identifier was allocated for, if any."""
        entry = self._logical.get(output)
        return entry[1] if entry is not None else None

    def is_taken(self, identifier: str) -> bool:
        return identifier in self._used or identifier in self.reserved_words

    @staticmethod
    def sanitize(name: str) -> str:
        """Turn an arbitrary label into a legal ASCII identifier."""
        clean = _INVALID_CHARS.sub('_', str(name or ''))
        if not clean:
            return 'unnamed'
        if clean[0].isdigit():
            clean = 'my_' + clean
        return clean

    def _allocate(self, name: str) -> str:
        candidate = self.sanitize(name)
        if self.is_taken(candidate):
            counter = 2
            while self.is_taken(f'{candidate}_{counter}'):
                counter += 1
            candidate = f'{candidate}_{counter}'
        self._used.add(candidate)
        return candidate
