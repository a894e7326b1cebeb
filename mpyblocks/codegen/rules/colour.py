# Copyright (c) 2025 Kutay Demir.
# Licensed under the PolyForm Shield License 1.0.0. See LICENSE file for details.

"""Colour blocks; no MicroPython translation."""

from mpyblocks.codegen.rules.base import no_generator_code_inline, rule

rule('colour_picker', 'colour_random', 'colour_rgb', 'colour_blend')(no_generator_code_inline)
