# Copyright (c) 2025 Kutay Demir.
# Licensed under the PolyForm Shield License 1.0.0. See LICENSE file for details.

"""List blocks; the MicroPython target has no translation for them yet."""

from mpyblocks.codegen.rules.base import no_generator_code_inline, no_generator_code_line, rule

rule(
    'lists_create_empty',
    'lists_create_with',
    'lists_repeat',
    'lists_length',
    'lists_isEmpty',
    'lists_indexOf',
    'lists_getIndex',
    'lists_getSublist',
)(no_generator_code_inline)

rule('lists_setIndex')(no_generator_code_line)
