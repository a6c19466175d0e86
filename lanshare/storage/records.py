import json
import logging
from typing import Any, Iterable, Optional

from pydantic import ValidationError

from lanshare.capability import Capability
from lanshare.errors import InvalidCapability, InvalidRecord, WriteFailure
from lanshare.models import Database, Record

logger = logging.getLogger(__name__)


def serialize(records: Iterable[Record]) -> str:
    """Render records as the pretty-printed JSON array kept in the backing file."""
    return json.dumps([r.model_dump() for r in records], indent=2, ensure_ascii=False) + "\n"


def parse(text: str) -> Optional[Database]:
    """Parse backing-file text; None means it is not a valid sequence of Records."""
    if not text.strip():
        return ()
    try:
        data = json.loads(text)
    except json.JSONDecodeError:
        return None
    if not isinstance(data, list):
        return None
    try:
        return tuple(Record.model_validate(item) for item in data)
    except ValidationError:
        return None


def coerce_record(value: Any) -> Record:
    if isinstance(value, Record):
        return value
    try:
        return Record.model_validate(value)
    except ValidationError as e:
        raise InvalidRecord(f"Not a well-formed record: {e.error_count()} error(s)") from e


class RecordStore:
    """
    In-memory mirror of the backing file plus the whole-file
    read-modify-write cycle against it.
    """

    def load(self, capability: Capability) -> Database:
        """
        Read the backing file. Missing, empty, malformed or non-array
        content all load as an empty Database; this never raises.
        """
        try:
            text = capability.read_text()
        except FileNotFoundError:
            logger.warning("Backing file %s is missing; starting fresh", capability.path)
            return ()
        except (OSError, UnicodeDecodeError, InvalidCapability) as e:
            logger.warning("Could not read backing file %s (%s); starting fresh", capability.path, e)
            return ()

        records = parse(text)
        if records is None:
            logger.warning("Backing file %s is not a valid record list; starting fresh", capability.path)
            return ()
        logger.debug("Loaded %d records from %s", len(records), capability.path)
        return records

    def append(self, capability: Optional[Capability], current: Database, record: Any) -> Database:
        """
        Write `current + [record]` to the backing file and return it.

        Raises InvalidCapability or InvalidRecord before any write is
        attempted, and WriteFailure if the write itself fails. On failure
        `current` is still the caller's source of truth.
        """
        if capability is None or not capability.is_valid:
            raise InvalidCapability("Pick the shared JSON file first.")
        rec = coerce_record(record)

        updated = tuple(current) + (rec,)
        try:
            text = serialize(updated)
            capability.write_text(text)
        except InvalidCapability:
            raise
        except (OSError, TypeError, ValueError) as e:
            logger.error("Write to %s failed: %s", capability.path, e)
            raise WriteFailure(f"Could not write {capability.path}: {e}") from e

        logger.info("Appended record #%d to %s", len(updated), capability.path)
        return updated
