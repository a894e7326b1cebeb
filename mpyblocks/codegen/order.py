# Copyright (c) 2025 Kutay Demir.
# Licensed under the PolyForm Shield License 1.0.0. See LICENSE file for details.

"""
Operator precedence for generated expressions.

Every expression carries the rank of its outermost operator. A parent asks
for a child at the loosest rank its slot tolerates; the child is wrapped in
parentheses only when it binds looser than that.
"""


class Order:
    """Python operator precedence, tightest first."""
    ATOMIC = 0             # literals, names, parenthesized
    COLLECTION = 1         # tuples, lists, dicts
    STRING_CONVERSION = 1  # `expression...`
    MEMBER = 2             # . []
    FUNCTION_CALL = 2      # ()
    EXPONENTIATION = 3     # **
    UNARY_SIGN = 4         # + -
    BITWISE_NOT = 4        # ~
    MULTIPLICATIVE = 5     # * / // %
    ADDITIVE = 6           # + -
    BITWISE_SHIFT = 7      # << >>
    BITWISE_AND = 8        # &
    BITWISE_XOR = 9        # ^
    BITWISE_OR = 10        # |
    RELATIONAL = 11        # in, not in, is, is not, <, <=, >, >=, <>, !=, ==
    LOGICAL_NOT = 12       # not
    LOGICAL_AND = 13       # and
    LOGICAL_OR = 14        # or
    CONDITIONAL = 15       # if else
    LAMBDA = 16            # lambda
    NONE = 99              # (...)


def needs_parens(inner: int, outer: int) -> bool:
    return inner > outer


def wrap(code: str, inner: int, outer: int) -> str:
    """
    Parenthesize ``code`` if its rank binds looser than the slot allows.

    Args:
        code: Expression text
        inner: Rank of the expression's outermost operator
        outer: Loosest rank accepted by the receiving slot

    Returns:
        The expression, wrapped when ``inner > outer``
    """
    if code and needs_parens(inner, outer):
        return f'({code})'
    return code
