"""Recording / Transcript / Analysis collections on top of a blob backend.

Each collection is one JSON array under a fixed key. Writes are whole-array
read-modify-write, which is only safe with a single writer; nothing here
coordinates concurrent writers.

The store is advisory: backend failures and unreadable data are logged and
swallowed. Reads then fall back to an empty collection; a write whose
preceding read failed is skipped, so earlier entries are never replaced.
"""
import json
import logging

from pydantic import ValidationError

from ..models import Analysis, Recording, Transcript
from .backends import StoreBackendError

logger = logging.getLogger(__name__)

RECORDINGS = "recordings"
TRANSCRIPTS = "transcripts"
ANALYSES = "analyses"

STORAGE_KEYS = {
    RECORDINGS: "sales_analysis_recordings",
    TRANSCRIPTS: "sales_analysis_transcripts",
    ANALYSES: "sales_analysis_analyses",
}

RECORD_TYPES = {
    RECORDINGS: Recording,
    TRANSCRIPTS: Transcript,
    ANALYSES: Analysis,
}

# child collection -> Recording attribute pointing back at the child
BACK_REFERENCES = {
    TRANSCRIPTS: "transcript_id",
    ANALYSES: "analysis_id",
}


class RecordStore:
    def __init__(self, backend):
        self.backend = backend

    def _model(self, kind):
        try:
            return RECORD_TYPES[kind]
        except KeyError:
            raise ValueError(f"unknown record kind: {kind!r}") from None

    def _load(self, kind):
        """Records of ``kind``, or None when the backend could not be read.

        Writers must not proceed on None: writing back a partial list would
        replace the collection.
        """
        model = self._model(kind)
        key = STORAGE_KEYS[kind]
        try:
            raw = self.backend.get(key)
        except StoreBackendError:
            logger.exception("Error reading %s from store", key)
            return None
        if not raw:
            return []
        try:
            items = json.loads(raw)
        except ValueError:
            logger.exception("Error parsing %s from store", key)
            return []
        if not isinstance(items, list):
            logger.error("Expected a list under %s, got %s", key, type(items).__name__)
            return []
        records = []
        for pos, item in enumerate(items):
            try:
                records.append(model.model_validate(item))
            except ValidationError as e:
                logger.warning("Dropping malformed %s entry #%d: %s", kind, pos, e)
        return records

    def _read(self, kind):
        return self._load(kind) or []

    def _write(self, kind, records):
        key = STORAGE_KEYS[kind]
        try:
            payload = json.dumps([r.to_json() for r in records])
            self.backend.set(key, payload)
        except (StoreBackendError, TypeError, ValueError):
            logger.exception("Error saving %s to store", key)

    def list(self, kind):
        return self._read(kind)

    def save(self, kind, record):
        """Append ``record``; never replaces an existing entry.

        Saving a transcript or analysis also points the owning recording at
        it, unless the recording already references one.
        """
        model = self._model(kind)
        if not isinstance(record, model):
            record = model.model_validate(record)
        records = self._load(kind)
        if records is None:
            logger.warning("Skipping save of %s %s: store unreadable", kind, record.id)
            return record
        records.append(record)
        self._write(kind, records)

        attr = BACK_REFERENCES.get(kind)
        if attr:
            self._link_recording(record.recording_id, attr, record.id)
        return record

    def _link_recording(self, recording_id, attr, child_id):
        recordings = self._load(RECORDINGS)
        if recordings is None:
            logger.warning("Skipping link %s=%s on recording %s: store unreadable", attr, child_id, recording_id)
            return
        for i, rec in enumerate(recordings):
            if rec.id != recording_id:
                continue
            if getattr(rec, attr) is None:
                recordings[i] = rec.model_copy(update={attr: child_id})
                self._write(RECORDINGS, recordings)
            return
        logger.warning("No recording %s to link %s=%s", recording_id, attr, child_id)

    def update(self, kind, record_id, patch):
        """Replace the entry with ``record_id`` by a patched copy, in place.

        ``patch`` may use attribute or JSON field names. The result is
        validated as a whole; returns the updated record, or None when there
        is no such entry. Nothing is written, and None returned, when the
        store cannot be read.
        """
        model = self._model(kind)
        records = self._load(kind)
        if records is None:
            logger.warning("Skipping update of %s %s: store unreadable", kind, record_id)
            return None
        for i, rec in enumerate(records):
            if rec.id != record_id:
                continue
            data = rec.to_json()
            for name, value in patch.items():
                attr = model.resolve_field(name)
                if attr is None:
                    raise ValueError(f"{model.__name__} has no field {name!r}")
                data[model.model_fields[attr].alias or attr] = value
            updated = model.model_validate(data)
            records[i] = updated
            self._write(kind, records)
            return updated
        return None

    def find_by_id(self, kind, record_id):
        return self.find_by_field(kind, "id", record_id)

    def find_by_field(self, kind, field, value):
        """First record (insertion order) whose ``field`` equals ``value``."""
        attr = self._model(kind).resolve_field(field)
        if attr is None:
            raise ValueError(f"{kind} records have no field {field!r}")
        for rec in self._read(kind):
            if getattr(rec, attr) == value:
                return rec
        return None

    def get_result(self, recording_id):
        recording = self.find_by_id(RECORDINGS, recording_id)
        transcript = self.find_by_field(TRANSCRIPTS, "recordingId", recording_id)
        analysis = self.find_by_field(ANALYSES, "recordingId", recording_id)
        return recording, transcript, analysis

    def clear_all(self):
        for key in STORAGE_KEYS.values():
            try:
                self.backend.delete(key)
            except StoreBackendError:
                logger.exception("Error removing %s from store", key)
