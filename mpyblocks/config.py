# Copyright (c) 2025 Kutay Demir.
# Licensed under the PolyForm Shield License 1.0.0. See LICENSE file for details.

"""
Centralized configuration management for mpyblocks.

This module contains the constants and tunables used by the code generator:
the reserved identifiers handed to the name database, the text used for
indentation and section markers, and the logging setup. Modify these values
to tune the generated program without changing core logic.
"""

import keyword
import logging
from dataclasses import dataclass, field
from typing import List, Optional


# ============================================================================
# LOGGING CONFIGURATION
# ============================================================================

# Default logging level (DEBUG, INFO, WARNING, ERROR, CRITICAL)
DEFAULT_LOG_LEVEL = logging.INFO

# Log format string
LOG_FORMAT = '%(asctime)s - %(name)s - %(levelname)s - %(message)s'
LOG_DATE_FORMAT = '%Y-%m-%d %H:%M:%S'

# Enable file logging (set path to enable, None to disable)
LOG_FILE_PATH: Optional[str] = None


# ============================================================================
# NAMING
# ============================================================================

# Names the generated program relies on. User identifiers must never shadow
# them, so they are reserved alongside the Python keywords.
MICROPYTHON_RESERVED_WORDS: List[str] = [
    'Blockly', 'setup', 'loop', 'HIGH', 'LOW', 'INPUT', 'OUTPUT', 'INPUT_PULLUP',
    'BUILT_IN_LED', 'machine', 'micropython', 'time', 'math', 'random',
    'Pin', 'PWM', 'ADC', 'UART', 'const', 'time_pulse_us',
    'print', 'range', 'len', 'str', 'int', 'float', 'bool', 'abs', 'min', 'max',
    'round', 'isinstance',
]

RESERVED_WORDS = frozenset(keyword.kwlist + MICROPYTHON_RESERVED_WORDS)

# Marker replaced by the final helper function name once it is known
FUNCTION_NAME_PLACEHOLDER = '{{FUNCTION_NAME}}'

# Setup registry tag holding the user's own setup branch (always emitted last)
USER_SETUP_TAG = 'userSetupCode'

PIN_CONFLICT_WARNING = 'Pin {pin} is needed for {tag} as pin {kind}. Already used as {existing}.'


# ============================================================================
# GENERATOR SETTINGS
# ============================================================================

@dataclass
class GeneratorConfig:
    """Configuration for program text generation."""

    # Indentation unit for nested blocks
    INDENT: str = '    '

    # Statement emitted where the language forbids an empty block
    PASS: str = 'pass'

    # Prefix for block comments copied into the program
    COMMENT_PREFIX: str = '# '

    # Section markers written by the assembler
    SETUP_HEADER: str = '# ---- setup ----'
    BODY_HEADER: str = '# ---- main ----'

    # Optional instrumentation templates, '%1' is replaced by the block id
    STATEMENT_PREFIX: Optional[str] = None
    INFINITE_LOOP_TRAP: Optional[str] = None

    # Highest PWM duty value accepted by machine.PWM.duty()
    PWM_DUTY_MAX: int = 1023

    # Extra identifiers reserved on top of RESERVED_WORDS
    EXTRA_RESERVED_WORDS: List[str] = field(default_factory=list)

    @property
    def reserved_words(self) -> frozenset:
        return RESERVED_WORDS.union(self.EXTRA_RESERVED_WORDS)


# ============================================================================
# SINGLETON INSTANCES
# ============================================================================

# Global configuration instance (modify to change behavior)
generator_config = GeneratorConfig()


# ============================================================================
# LOGGING SETUP FUNCTION
# ============================================================================

def setup_logging(level: int = DEFAULT_LOG_LEVEL,
                  log_file: Optional[str] = LOG_FILE_PATH) -> None:
    """
    Configure logging for applications embedding the generator.

    Args:
        level: Logging level (logging.DEBUG, INFO, WARNING, ERROR, CRITICAL)
        log_file: Optional path to log file
    """
    handlers = [logging.StreamHandler()]

    if log_file:
        handlers.append(logging.FileHandler(log_file))

    logging.basicConfig(
        level=level,
        format=LOG_FORMAT,
        datefmt=LOG_DATE_FORMAT,
        handlers=handlers,
        force=True  # Override any existing configuration
    )

    logger = logging.getLogger(__name__)
    logger.info(f"mpyblocks logging initialized at level: {logging.getLevelName(level)}")
