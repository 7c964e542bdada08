"""Source validators deciding whether a buffer is complete enough to submit.

A validator takes the buffer text and returns ``True`` when it is a
complete, well-formed submission. Validators used by the editor are wrapped
with ``safe_validator`` so a failing parser only suppresses submission.
"""

from __future__ import annotations

import ast
import functools
import logging
from typing import Callable

logger = logging.getLogger(__name__)

SourceValidator = Callable[[str], bool]

_CLOSERS = {")": "(", "]": "[", "}": "{"}
_OPENERS = frozenset("([{")
# Reader macros that need a following form; ' and # only at a token start.
_PREFIXES = frozenset("`~@")
_TOKEN_PREFIXES = frozenset("'#")


def is_balanced_form(source: str) -> bool:
    """Check that *source* reads as complete s-expression forms.

    Brackets must be balanced and properly nested, strings closed, and every
    reader macro (quote, backtick, ``~``, ``@``, ``#``) followed by a form.
    ``;`` starts a line comment and ``\\`` escapes the next character
    (character literals like ``\\(``). Blank or comment-only source reads as
    nothing and counts as complete.
    """
    stack: list[str] = []
    in_string = False
    in_comment = False
    in_atom = False
    dangling = False
    i = 0
    n = len(source)

    while i < n:
        ch = source[i]
        if in_comment:
            if ch == "\n":
                in_comment = False
        elif in_string:
            if ch == "\\":
                i += 1
            elif ch == '"':
                in_string = False
        elif ch.isspace() or ch == ",":
            in_atom = False
        elif ch == ";":
            in_comment = True
            in_atom = False
        elif ch in _PREFIXES or (ch in _TOKEN_PREFIXES and not in_atom):
            dangling = True
            in_atom = False
        elif ch == '"':
            in_string = True
            dangling = in_atom = False
        elif ch == "\\":
            if i + 1 >= n:
                return False
            i += 1
            dangling = False
            in_atom = True
        elif ch in _OPENERS:
            stack.append(ch)
            dangling = in_atom = False
        elif ch in _CLOSERS:
            if dangling or not stack or stack.pop() != _CLOSERS[ch]:
                return False
            in_atom = False
        else:
            dangling = False
            in_atom = True
        i += 1

    return not stack and not in_string and not dangling


def is_valid_python(source: str) -> bool:
    """Check that *source* is non-blank, syntactically valid Python."""
    if not source.strip():
        return False
    try:
        ast.parse(source)
    except (SyntaxError, ValueError):
        return False
    return True


def safe_validator(validator: SourceValidator) -> SourceValidator:
    """Wrap *validator* so that any exception counts as "invalid"."""

    @functools.wraps(validator)
    def wrapper(source: str) -> bool:
        try:
            return bool(validator(source))
        except Exception:
            logger.debug("Validator %r failed; treating source as invalid", validator, exc_info=True)
            return False

    return wrapper
