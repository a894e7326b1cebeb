# Copyright (c) 2025 Kutay Demir.
# Licensed under the PolyForm Shield License 1.0.0. See LICENSE file for details.

"""
Tag-keyed registries for program-wide code fragments.

Blocks do not write imports, pin objects or helper functions inline. They
register them under a tag naming the resource (a pin number, a helper
function), so many blocks touching the same resource produce one entry.
"""

import logging
from enum import Enum
from typing import Dict, Iterator, List, Optional, Union

from mpyblocks.config import FUNCTION_NAME_PLACEHOLDER
from mpyblocks.codegen.names import NameDatabase, NameRealm

logger = logging.getLogger(__name__)


class CodeRegistry:
    """
    Ordered tag -> code store; first writer wins unless overwrite is asked for.
    """

    def __init__(self, name: str) -> None:
        self.name = name
        self._entries: Dict[str, str] = {}

    def add(self, tag: str, code: str, overwrite: bool = False) -> bool:
        """
        Store ``code`` under ``tag``.

        Args:
            tag: Stable key of the resource the code belongs to
            code: Code fragment
            overwrite: Replace an existing entry instead of keeping it

        Returns:
            True if the stored value changed
        """
        if tag in self._entries:
            if not overwrite or self._entries[tag] == code:
                return False
        self._entries[tag] = code
        logger.debug("%s[%s] set", self.name, tag)
        return True

    def get(self, tag: str) -> Optional[str]:
        return self._entries.get(tag)

    def pop(self, tag: str) -> Optional[str]:
        return self._entries.pop(tag, None)

    def values(self) -> List[str]:
        """Stored code in insertion order."""
        return list(self._entries.values())

    def tags(self) -> List[str]:
        return list(self._entries)

    def reset(self) -> None:
        self._entries.clear()

    def __contains__(self, tag: str) -> bool:
        return tag in self._entries

    def __len__(self) -> int:
        return len(self._entries)

    def __iter__(self) -> Iterator[str]:
        return iter(self._entries)


class FunctionRegistry(CodeRegistry):
    """
    Helper functions written by the generator plus procedures written by the user.

    Helpers are requested by preferred name; the first request allocates the
    real identifier and later requests reuse it.
    """

    def __init__(self, names: NameDatabase, name: str = 'functions') -> None:
        super().__init__(name)
        self._names = names
        self._function_names: Dict[str, str] = {}
        self._user_functions: Dict[str, str] = {}

    def function_name(self, preferred: str) -> str:
        """Identifier assigned to helper ``preferred``, allocating it if needed."""
        if preferred not in self._function_names:
            self._function_names[preferred] = self._names.get_distinct_name(
                preferred, NameRealm.GENERATED)
        return self._function_names[preferred]

    def provide(self, preferred: str, code: Union[str, List[str]]) -> str:
        """
        Register a helper function once and return its identifier.

        Args:
            preferred: Desired function name, also used as the tag
            code: Source text or lines, using FUNCTION_NAME_PLACEHOLDER as the name

        Returns:
            The identifier callers must use
        """
        name = self.function_name(preferred)
        if preferred not in self:
            if not isinstance(code, str):
                code = '\n'.join(code)
            self.add(preferred, code.replace(FUNCTION_NAME_PLACEHOLDER, name))
        return name

    def add_user_function(self, name: str, code: str) -> None:
        self._user_functions[name] = code

    def user_functions(self) -> List[str]:
        return list(self._user_functions.values())

    def values(self) -> List[str]:
        """Helpers first, then user procedures."""
        return super().values() + self.user_functions()

    def reset(self) -> None:
        super().reset()
        self._function_names.clear()
        self._user_functions.clear()

    def __len__(self) -> int:
        return super().__len__() + len(self._user_functions)


class PinType(Enum):
    """Tasks a pin can be assigned to."""
    INPUT = 'INPUT'
    OUTPUT = 'OUTPUT'
    PWM = 'PWM'
    SERVO = 'SERVO'
    STEPPER = 'STEPPER'
    SERIAL = 'SERIAL'
    I2C = 'I2C/TWI'
    SPI = 'SPI'


class PinRegistry:
    """Tracks the usage kind of every reserved pin within one run."""

    def __init__(self) -> None:
        self._pins: Dict[str, PinType] = {}

    def reserve(self, pin, kind: PinType) -> bool:
        """
        Claim ``pin`` for ``kind``.

        Returns:
            True if the pin is already claimed for a different kind
        """
        key = str(pin)
        existing = self._pins.get(key)
        if existing is None:
            self._pins[key] = kind
            return False
        return existing is not kind

    def usage(self, pin) -> Optional[PinType]:
        return self._pins.get(str(pin))

    def reset(self) -> None:
        self._pins.clear()

    def __len__(self) -> int:
        return len(self._pins)
