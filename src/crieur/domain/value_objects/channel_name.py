"""
ChannelName value object - immutable channel name with validation.
"""

import re
from dataclasses import dataclass
from typing import ClassVar

from crieur.domain.exceptions import InvalidChannelNameError


@dataclass(frozen=True)
class ChannelName:
    """
    Value object representing a validated channel name.

    Channel naming rules:
    - Letters, digits, dots, underscores and hyphens
    - Maximum 100 characters

    Examples:
        - lobby
        - game.42
        - room_a-1
    """

    name: str

    PATTERN: ClassVar[re.Pattern] = re.compile(r"^[A-Za-z0-9._\-]+$")
    MAX_LENGTH: ClassVar[int] = 100

    def __post_init__(self):
        """Validate channel name on creation."""
        if not self.name:
            raise InvalidChannelNameError(self.name, "cannot be empty")

        if len(self.name) > self.MAX_LENGTH:
            raise InvalidChannelNameError(
                self.name, f"too long (max {self.MAX_LENGTH} characters)"
            )

        if not self.PATTERN.match(self.name):
            raise InvalidChannelNameError(
                self.name,
                "must contain only letters, numbers, dots, underscores "
                "and hyphens",
            )

    @property
    def value(self) -> str:
        """Get channel name value."""
        return self.name

    def __str__(self) -> str:
        return self.name

    def __repr__(self) -> str:
        return f"ChannelName({self.name!r})"
