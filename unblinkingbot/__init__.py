"""
Core package for the unblinking Slack bot.

Listens for messages, picks out snapshot requests and greetings, and answers
from the snapshot store.
"""

from .models import (
    SNAPSHOT_PREFIX,
    BotIdentity,
    Command,
    ExecutionResponse,
    HandlerResult,
    InboundMessage,
    MessagingSession,
    PrefixStore,
    Responder,
    SnapshotRecord,
)
from .errors import BotError, DeliveryError, IdentityError, StoreError
from .classifier import classify
from .executor import CommandExecutor
from .dispatcher import Dispatcher
from .storage import SqlitePrefixStore, UsageLogger, configure_storage

__all__ = [
    'SNAPSHOT_PREFIX',
    'BotIdentity',
    'Command',
    'ExecutionResponse',
    'HandlerResult',
    'InboundMessage',
    'MessagingSession',
    'PrefixStore',
    'Responder',
    'SnapshotRecord',
    'BotError',
    'DeliveryError',
    'IdentityError',
    'StoreError',
    'classify',
    'CommandExecutor',
    'Dispatcher',
    'SqlitePrefixStore',
    'UsageLogger',
    'configure_storage',
]
