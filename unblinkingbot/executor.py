"""
Command executor.

Runs the side-effecting action for a classified command:
- SNAPSHOT_LIST: post the names of all stored snapshots
- SNAPSHOT_FETCH: upload every snapshot named in the message
- GREETING: reply to the sender by name

Every failure is logged and contained to the narrowest unit of work (one
handler, one upload). Nothing raised by a collaborator leaves execute().
"""

import logging
import time
from concurrent.futures import ThreadPoolExecutor, as_completed
from typing import Callable, Optional

from .errors import IdentityError, StoreError
from .models import (
    SNAPSHOT_PREFIX,
    Command,
    ExecutionResponse,
    HandlerResult,
    InboundMessage,
    MessagingSession,
    PrefixStore,
    Responder,
    SnapshotRecord,
)

logger = logging.getLogger(__name__)

LIST_HEADER = "Here are the snapshot names that you requested:"
NO_SNAPSHOT_REPLY = (
    "Did you want a snapshot? If so, next time ask for one that exists. "
    "(hint: ask for the snapshot list)"
)
GREETING_TEMPLATE = "That's my name @{name}, don't wear it out!"

DEFAULT_UPLOAD_WORKERS = 5


def format_snapshot_list(records: list[SnapshotRecord]) -> str:
    """Header line followed by one bullet per snapshot name."""
    lines = [LIST_HEADER]
    lines.extend(f"• {record.name}" for record in records)
    return "\n".join(lines)


def find_requested(records: list[SnapshotRecord], text: str) -> list[SnapshotRecord]:
    """Records whose name appears anywhere in text, ignoring case."""
    lowered = text.lower()
    return [record for record in records if record.name.lower() in lowered]


def snapshot_filename(name: str, timestamp_ms: int) -> str:
    return f"snapshot_{name}_{timestamp_ms}.jpg"


class CommandExecutor:
    """Dispatches a command to its handler."""

    def __init__(
        self,
        store: PrefixStore,
        session: MessagingSession,
        responder: Responder,
        fetch_snapshot: Callable[[str], bytes],
        upload_workers: int = DEFAULT_UPLOAD_WORKERS,
        clock: Callable[[], float] = time.time
    ):
        self.store = store
        self.session = session
        self.responder = responder
        self.fetch_snapshot = fetch_snapshot
        self.upload_workers = upload_workers
        self.clock = clock

        self.handlers: dict[Command, Callable[[InboundMessage], ExecutionResponse]] = {
            Command.SNAPSHOT_LIST: self.send_snapshot_list,
            Command.SNAPSHOT_FETCH: self.send_snapshots,
            Command.GREETING: self.send_greeting,
        }

    def execute(self, command: Command, message: InboundMessage) -> ExecutionResponse:
        """Run the handler for command. Never raises."""
        handler = self.handlers.get(command)
        if handler is None:
            return ExecutionResponse(command=command, result=HandlerResult.NO_ACTION)

        try:
            return handler(message)
        except Exception as e:
            logger.exception(f"Handler for {command.value} failed")
            return ExecutionResponse(
                command=command,
                result=HandlerResult.ERROR,
                error=str(e)
            )

    # ------------------------------------------------------------------
    # Handlers
    # ------------------------------------------------------------------

    def send_snapshot_list(self, message: InboundMessage) -> ExecutionResponse:
        records, store_error = self._load_snapshots()
        error = self._post(message.channel_id, format_snapshot_list(records))

        return ExecutionResponse(
            command=Command.SNAPSHOT_LIST,
            result=HandlerResult.ERROR if error else HandlerResult.SUCCESS,
            error=error or store_error,
            metadata={"snapshot_count": len(records)}
        )

    def send_snapshots(self, message: InboundMessage) -> ExecutionResponse:
        records, store_error = self._load_snapshots()
        matches = find_requested(records, message.text or "")

        if not matches:
            error = self._post(message.channel_id, NO_SNAPSHOT_REPLY)
            return ExecutionResponse(
                command=Command.SNAPSHOT_FETCH,
                result=HandlerResult.ERROR if error else HandlerResult.NO_ACTION,
                error=error or store_error,
                metadata={"matched": 0, "uploaded": 0, "failed": 0}
            )

        failures = self._upload_all(matches, message.channel_id)
        uploaded = len(matches) - len(failures)

        return ExecutionResponse(
            command=Command.SNAPSHOT_FETCH,
            result=HandlerResult.ERROR if failures else HandlerResult.SUCCESS,
            error="; ".join(failures) if failures else None,
            metadata={"matched": len(matches), "uploaded": uploaded, "failed": len(failures)}
        )

    def send_greeting(self, message: InboundMessage) -> ExecutionResponse:
        try:
            name = self.session.get_display_name(message.sender_id)
        except IdentityError as e:
            logger.error(f"Could not resolve name for {message.sender_id}: {e}")
            return ExecutionResponse(
                command=Command.GREETING,
                result=HandlerResult.ERROR,
                error=str(e)
            )

        error = self._post(message.channel_id, GREETING_TEMPLATE.format(name=name))
        return ExecutionResponse(
            command=Command.GREETING,
            result=HandlerResult.ERROR if error else HandlerResult.SUCCESS,
            error=error
        )

    # ------------------------------------------------------------------
    # Helpers
    # ------------------------------------------------------------------

    def _load_snapshots(self) -> tuple[list[SnapshotRecord], Optional[str]]:
        """Snapshot records in store order. A store failure reads as empty."""
        try:
            entries = self.store.get_by_prefix(SNAPSHOT_PREFIX)
        except StoreError as e:
            logger.error(f"Snapshot lookup failed, treating as empty: {e}")
            return [], str(e)

        records = []
        for key, value in entries.items():
            record = SnapshotRecord.from_value(key, value)
            if record is None:
                logger.warning(f"Skipping malformed snapshot entry: {key}")
                continue
            records.append(record)
        return records, None

    def _post(self, channel_id: str, text: str) -> Optional[str]:
        """Send text, returning an error description instead of raising."""
        try:
            self.responder.post_message(channel_id, text)
        except Exception as e:
            logger.error(f"Failed to post message to {channel_id}: {e}")
            return str(e)
        return None

    def _upload_one(self, record: SnapshotRecord, channel_id: str) -> None:
        timestamp_ms = int(self.clock() * 1000)
        self.responder.upload_file(
            filename=snapshot_filename(record.name, timestamp_ms),
            file_stream=self.fetch_snapshot(record.url),
            title=f"Snapshot of {record.name}",
            channel_id=channel_id,
            caption=f"Here's that picture of the {record.name} that you wanted."
        )

    def _upload_all(self, records: list[SnapshotRecord], channel_id: str) -> list[str]:
        """
        Upload every record concurrently.

        Each upload succeeds or fails on its own; the returned list holds one
        description per failed upload.
        """
        failures = []

        with ThreadPoolExecutor(max_workers=self.upload_workers) as pool:
            future_to_record = {
                pool.submit(self._upload_one, record, channel_id): record
                for record in records
            }

            for future in as_completed(future_to_record):
                record = future_to_record[future]
                try:
                    future.result()
                    logger.info(f"Uploaded snapshot '{record.name}' to {channel_id}")
                except Exception as e:
                    logger.error(f"Snapshot upload '{record.name}' failed: {e}")
                    failures.append(f"{record.name}: {e}")

        return failures
