"""
Type-safe wrapper classes for Discord identifiers.

Discord snowflakes are 64-bit integers but travel as strings in JSON payloads
and as integers through the Discord API. These wrappers keep one canonical
representation (a string) and convert on the way in and out, so a guild id can
never be silently passed where a channel id is expected.
"""

from __future__ import annotations

from typing import Any


class Snowflake:
    """
    Base class for typed snowflake identifiers.

    Instances compare equal to other instances of the *same* subclass, and to
    plain ``int``/``str`` values with the same numeric content.

    Example:
        >>> gid = GuildID(123456789012345678)
        >>> gid.to_int()
        123456789012345678
        >>> GuildID("123456789012345678") == 123456789012345678
        True
    """

    __slots__ = ("_value",)

    def __init__(self, value: Any) -> None:
        """
        Initialize from a string, an int, or another identifier of the same kind.

        Raises:
            ValueError: If the value cannot be converted to a valid snowflake.
        """
        if isinstance(value, type(self)):
            self._value = value._value
        elif isinstance(value, bool):
            raise ValueError(f"Cannot create {type(self).__name__} from bool: {value}")
        elif isinstance(value, (int, str)):
            number = int(value.strip()) if isinstance(value, str) else value
            if number < 0:
                raise ValueError(f"Snowflake ids are non-negative, got {value}")
            self._value = str(number)
        else:
            raise ValueError(f"Cannot create {type(self).__name__} from {type(value).__name__}: {value}")

    @classmethod
    def from_object(cls, obj: Any):
        """Build an identifier from any object exposing an ``id`` attribute (guild, member, channel...)."""
        return cls(obj.id)

    @classmethod
    def parse(cls, value: Any):
        """Lenient constructor: return None instead of raising for missing or malformed values."""
        if value is None or value == "":
            return None
        try:
            return cls(value)
        except (TypeError, ValueError):
            return None

    def to_int(self) -> int:
        """Convert to an integer for Discord API calls and SQLite columns."""
        return int(self._value)

    def __int__(self) -> int:
        return int(self._value)

    def __str__(self) -> str:
        return self._value

    def __repr__(self) -> str:
        return f"{type(self).__name__}({self._value!r})"

    def __eq__(self, other: object) -> bool:
        if type(other) is type(self):
            return self._value == other._value  # type: ignore[attr-defined]
        if isinstance(other, str):
            return self._value == other
        if isinstance(other, int) and not isinstance(other, bool):
            return self._value == str(other)
        return NotImplemented

    def __hash__(self) -> int:
        return hash(self._value)


class GuildID(Snowflake):
    """Identifier of a guild (tenant)."""

    __slots__ = ()


class ChannelID(Snowflake):
    """Identifier of a text channel or thread."""

    __slots__ = ()

    @property
    def mention(self) -> str:
        return f"<#{self._value}>"


class UserID(Snowflake):
    """Identifier of a user or guild member."""

    __slots__ = ()

    @property
    def mention(self) -> str:
        return f"<@{self._value}>"


class MessageID(Snowflake):
    """Identifier of a single message."""

    __slots__ = ()
