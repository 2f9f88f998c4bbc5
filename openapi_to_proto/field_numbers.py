"""
Counters that hand out field numbers for messages and values for enums. Each
counter belongs to exactly one message or enum block.
"""


class FieldNumberAllocator:
    """Sequential number source for a single message or enum"""

    def __init__(self, start: int):
        self._next = start

    def next(self) -> int:
        """Return the current number and advance"""
        number = self._next
        self._next += 1
        return number


def message_counter() -> FieldNumberAllocator:
    """Field numbers for a message start at 1"""
    return FieldNumberAllocator(1)


def enum_counter() -> FieldNumberAllocator:
    """Values for an enum start at 0"""
    return FieldNumberAllocator(0)
