"""Exceptions and pluggable interfaces.

The framing core only ever talks to a :class:`Validator` and a
:class:`Publisher`; concrete implementations live in :mod:`parrot.validate`
and :mod:`parrot.publish`.
"""

from __future__ import annotations

from abc import ABC, abstractmethod


class BridgeError(Exception):
    """Base class for all parrot errors."""


class ConfigurationError(BridgeError, ValueError):
    """A configuration option is unknown or has an invalid value."""


class BindError(BridgeError):
    """A listening endpoint (TCP or PUB) could not be bound."""


class PublishError(BridgeError):
    """A message could not be handed to the publisher."""


class Validator(ABC):
    """Decide whether a completed frame may be published."""

    @abstractmethod
    def validate(self, frame: bytes) -> bool:
        """Return True if *frame* should be published."""

    def __call__(self, frame: bytes) -> bool:
        return self.validate(frame)


class Publisher(ABC):
    """Accept completed frames for broadcast under a topic."""

    @abstractmethod
    def publish(self, topic: str, payload: bytes) -> None:
        """Broadcast *payload* under *topic*. Must be safe to call from
        multiple threads, and must preserve the order of calls made from
        any one thread."""

    def close(self) -> None:
        """Release any resources held by the publisher."""
