"""Requests to attach to channels or to receive messages from one channel."""

from __future__ import annotations

import re
from collections.abc import Sequence
from dataclasses import dataclass, field

from .errors import CommandError
from .publishing import ChannelKind


def _compile(patterns: Sequence[str], flag: str) -> tuple[re.Pattern[str], ...]:
    compiled = []
    for pattern in patterns:
        try:
            compiled.append(re.compile(pattern))
        except re.error as exc:
            raise CommandError(f"invalid {flag} regex '{pattern}': {exc}") from exc
    return tuple(compiled)


@dataclass(frozen=True)
class AttachRequest:
    """Channels to watch, with regex filters on what is shown."""

    kind: ChannelKind
    channels: tuple[str, ...]
    include: tuple[str, ...] = ()
    exclude: tuple[str, ...] = ()
    _include_patterns: tuple[re.Pattern[str], ...] = field(
        init=False, repr=False, compare=False
    )
    _exclude_patterns: tuple[re.Pattern[str], ...] = field(
        init=False, repr=False, compare=False
    )

    def __post_init__(self) -> None:
        object.__setattr__(self, "_include_patterns", _compile(self.include, "include"))
        object.__setattr__(self, "_exclude_patterns", _compile(self.exclude, "exclude"))

    @property
    def resources(self) -> tuple[str, ...]:
        """Resource names in the "<kind>/<channel>" form, in argument order."""
        return tuple(f"{self.kind.value}/{channel}" for channel in self.channels)

    def matches(self, text: str) -> bool:
        """Whether text passes the filters: any include matches, no exclude does."""
        if self._include_patterns and not any(
            pattern.search(text) for pattern in self._include_patterns
        ):
            return False
        return not any(pattern.search(text) for pattern in self._exclude_patterns)


@dataclass(frozen=True)
class ReceiveRequest:
    """A subscription to one channel, optionally in a consumer group."""

    kind: ChannelKind
    channel: str
    group: str = ""
    auto_response: bool = False


def parse_attach_args(
    kind: ChannelKind | str,
    args: Sequence[str],
    include: Sequence[str] = (),
    exclude: Sequence[str] = (),
) -> AttachRequest:
    """Build an attach request from channel arguments and filter flags."""
    kind = ChannelKind(kind)
    if not args:
        raise CommandError("missing channel argument")
    return AttachRequest(
        kind=kind,
        channels=tuple(args),
        include=tuple(include),
        exclude=tuple(exclude),
    )


def parse_receive_args(
    kind: ChannelKind | str,
    args: Sequence[str],
    group: str = "",
    auto_response: bool = False,
) -> ReceiveRequest:
    """Build a receive request; auto response applies to commands only."""
    kind = ChannelKind(kind)
    if not args:
        raise CommandError("missing channel argument")
    return ReceiveRequest(
        kind=kind,
        channel=args[0],
        group=group,
        auto_response=auto_response and kind is ChannelKind.COMMANDS,
    )