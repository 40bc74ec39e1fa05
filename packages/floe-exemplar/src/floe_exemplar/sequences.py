"""Successor values for sequence-style generators.

Block generators receive their previous value, so a sequence is simply a block
that returns the successor of what it produced last:

    >>> Widget.generator_for("name", start="widget-a", block=succ)
    >>> [Widget.spawn().name for _ in range(3)]
    ['widget-a', 'widget-b', 'widget-c']
"""

from __future__ import annotations

from typing import Any

# Characters that wrap around, mapped to (replacement, carry inserted on overflow)
_WRAPPING = {
    "9": ("0", "1"),
    "z": ("a", "a"),
    "Z": ("A", "A"),
}


def succ(value: Any) -> Any:
    """Return the successor of an integer or string.

    Integers are incremented. Strings are incremented from the rightmost ASCII
    letter or digit, carrying leftwards over other letters and digits while
    skipping punctuation; when the carry runs off the left end a new character
    of the same kind is inserted. Strings without letters or digits have their
    last character incremented.

    Args:
        value: Integer or string.

    Returns:
        The next value in the sequence.

    Raises:
        TypeError: If value is neither an integer nor a string.

    Example:
        >>> succ("test"), succ("az"), succ("zz"), succ("a9"), succ(41)
        ('tesu', 'ba', 'aaa', 'b0', 42)
    """
    if isinstance(value, int) and not isinstance(value, bool):
        return value + 1
    if not isinstance(value, str):
        msg = f"succ() expects an int or str, got {type(value).__name__}"
        raise TypeError(msg)
    if not value:
        return value

    chars = list(value)
    positions = [i for i, ch in enumerate(chars) if ch.isascii() and ch.isalnum()]
    if not positions:
        chars[-1] = chr(ord(chars[-1]) + 1)
        return "".join(chars)

    carry = ""
    for index in reversed(positions):
        replacement, carry = _WRAPPING.get(chars[index], (chr(ord(chars[index]) + 1), ""))
        chars[index] = replacement
        if not carry:
            return "".join(chars)

    chars.insert(positions[0], carry)
    return "".join(chars)
