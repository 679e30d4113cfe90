"""
Exception types for the message pipeline.

A message that is missing text or was written by the bot itself is not an
error; it is dropped before classification.
"""


class BotError(Exception):
    """Base exception for pipeline failures."""
    pass


class StoreError(BotError):
    """The prefix store could not be read or written."""
    pass


class DeliveryError(BotError):
    """A message or file could not be delivered to Slack."""
    pass


class IdentityError(BotError):
    """A user's display name could not be resolved."""
    pass
