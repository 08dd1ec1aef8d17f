"""Configuration for expression arenas and the textual tree dump."""

from __future__ import annotations

from dataclasses import dataclass
import os


_TRUE_VALUES = frozenset({"1", "true", "yes", "on"})
_FALSE_VALUES = frozenset({"0", "false", "no", "off"})


@dataclass(frozen=True)
class ExpressionConfig:
    """Settings shared by every node in an arena.

    Attributes:
        open_token: Emitted before a non-terminal's dump
        close_token: Emitted after a non-terminal's dump
        separator: Placed between a node's own text and its children's dumps
        reuse_slots: Reuse arena slots released by destroyed nodes
    """

    open_token: str = "("
    close_token: str = ")"
    separator: str = " "
    reuse_slots: bool = True

    def __post_init__(self) -> None:
        if not self.separator:
            raise ValueError("separator must be a non-empty string")

    @classmethod
    def from_env(cls, prefix: str = "GPTREE_") -> "ExpressionConfig":
        """Build a config with overrides from environment variables.

        Reads {prefix}OPEN_TOKEN, {prefix}CLOSE_TOKEN, {prefix}SEPARATOR and
        {prefix}REUSE_SLOTS; unset variables keep the defaults.
        """
        defaults = cls()
        reuse_raw = os.environ.get(f"{prefix}REUSE_SLOTS")
        if reuse_raw is None:
            reuse_slots = defaults.reuse_slots
        elif reuse_raw.strip().lower() in _TRUE_VALUES:
            reuse_slots = True
        elif reuse_raw.strip().lower() in _FALSE_VALUES:
            reuse_slots = False
        else:
            raise ValueError(f"Invalid boolean for {prefix}REUSE_SLOTS: {reuse_raw!r}")

        return cls(
            open_token=os.environ.get(f"{prefix}OPEN_TOKEN", defaults.open_token),
            close_token=os.environ.get(f"{prefix}CLOSE_TOKEN", defaults.close_token),
            separator=os.environ.get(f"{prefix}SEPARATOR", defaults.separator),
            reuse_slots=reuse_slots,
        )
