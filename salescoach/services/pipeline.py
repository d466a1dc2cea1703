"""Upload -> transcribe -> analyze -> persist, for one audio file.

``AnalysisPipeline`` drives a single job through

    idle -> uploading -> transcribing -> analyzing -> persisting -> done

and moves to ``failed`` from any of the working states when a stage raises.
Records written before a failure stay in the store; nothing is rolled back.
A pipeline object runs one job and is then spent.
"""
import enum
import logging
from dataclasses import dataclass

from ..models import Analysis, Recording, Transcript
from .record_store import ANALYSES, RECORDINGS, TRANSCRIPTS
from .sample_data import generate_demo_data, generate_id
from ..models.base import utcnow

logger = logging.getLogger(__name__)


class PipelineState(str, enum.Enum):
    IDLE = "idle"
    UPLOADING = "uploading"
    TRANSCRIBING = "transcribing"
    ANALYZING = "analyzing"
    PERSISTING = "persisting"
    DONE = "done"
    FAILED = "failed"


TERMINAL_STATES = {PipelineState.DONE, PipelineState.FAILED}

FAILURE_MESSAGES = {
    PipelineState.UPLOADING: "Error uploading audio. Please try again.",
    PipelineState.TRANSCRIBING: "Error transcribing audio. Please try again.",
    PipelineState.ANALYZING: "Error analyzing the transcript. Please try again.",
    PipelineState.PERSISTING: "Error saving the analysis. Please try again.",
}


class UploadValidationError(ValueError):
    pass


class PipelineError(Exception):
    def __init__(self, stage, message):
        super().__init__(message)
        self.stage = stage
        self.message = message


@dataclass
class AudioUpload:
    filename: str
    mimetype: str
    payload: bytes = b""


def validate_upload(upload):
    if not upload.filename:
        raise UploadValidationError("No file selected.")
    if not (upload.mimetype or "").startswith("audio/"):
        raise UploadValidationError("Please upload an audio file.")


class AnalysisPipeline:
    """Runs one analysis job against a record store.

    ``transcribe(payload, filename=, mimetype=)`` and ``analyze(text)`` are the
    external services; ``save_audio(filename, payload, prefix=,
    content_type=)`` stores the upload and returns its URL.
    """

    def __init__(self, store, transcribe, analyze, save_audio=None, clock=utcnow):
        self.store = store
        self.transcribe = transcribe
        self.analyze = analyze
        self.save_audio = save_audio
        self.clock = clock

        self.state = PipelineState.IDLE
        self.history = [PipelineState.IDLE]
        self.failed_stage = None
        self.error = None

        self.recording = None
        self.transcript = None
        self.analysis = None

    def _enter(self, state):
        logger.debug("pipeline %s -> %s", self.state.value, state.value)
        self.state = state
        self.history.append(state)

    def _require_idle(self):
        if self.state is not PipelineState.IDLE:
            raise RuntimeError(f"pipeline already ran (state={self.state.value})")

    def select_file(self, upload):
        """Validate the chosen file; on success the job starts uploading."""
        self._require_idle()
        validate_upload(upload)
        self._enter(PipelineState.UPLOADING)

    def submit(self, upload):
        """Run the whole job; returns the new recording's id.

        Raises ``UploadValidationError`` (state stays idle) or
        ``PipelineError`` (state is failed, ``failed_stage`` set).
        """
        self.select_file(upload)
        self._run_stage(self._upload, upload)
        self._run_stage(self._transcribe, upload)
        self._run_stage(self._analyze)
        self._run_stage(self._persist)
        return self.recording.id

    def _run_stage(self, step, *args):
        stage = self.state
        try:
            step(*args)
        except Exception as e:
            self.failed_stage = stage
            self.error = e
            self._enter(PipelineState.FAILED)
            logger.exception("pipeline failed while %s", stage.value)
            raise PipelineError(stage, FAILURE_MESSAGES.get(stage, "Error processing audio. Please try again.")) from e

    def _upload(self, upload):
        recording_id = generate_id()
        file_url = ""
        if self.save_audio is not None:
            file_url = self.save_audio(
                upload.filename, upload.payload, prefix=f"recordings/{recording_id}", content_type=upload.mimetype
            )
        # saved right away so the recording exists even if a later stage fails
        self.recording = self.store.save(RECORDINGS, Recording(
            id=recording_id,
            file_name=upload.filename,
            file_url=file_url,
            duration=0,
            created_at=self.clock(),
        ))
        self._enter(PipelineState.TRANSCRIBING)

    def _transcribe(self, upload):
        result = self.transcribe(upload.payload, filename=upload.filename, mimetype=upload.mimetype)
        transcript = Transcript(
            id=str(result.get("id") or generate_id()),
            recording_id=self.recording.id,
            text=result.get("text") or "",
            utterances=result.get("utterances") or [],
            highlights=[],
            created_at=self.clock(),
        )
        self.transcript = self.store.save(TRANSCRIPTS, transcript)
        self._enter(PipelineState.ANALYZING)

    def _analyze(self):
        result = self.analyze(self.transcript.text)
        self.analysis = Analysis(
            id=str(result.get("id") or generate_id()),
            recording_id=self.recording.id,
            transcript_id=self.transcript.id,
            overall_score=result.get("overallScore"),
            metrics=result.get("metrics") or [],
            suggestions=result.get("suggestions") or [],
            created_at=self.clock(),
        )
        data = self.transcript.to_json()
        data["highlights"] = result.get("highlights") or []
        # validates the highlight offsets against the transcript text
        self.transcript = Transcript.model_validate(data)
        self._enter(PipelineState.PERSISTING)

    def _persist(self):
        updated = self.store.update(TRANSCRIPTS, self.transcript.id, {"highlights": self.transcript.highlights})
        if updated is None:
            logger.warning("transcript %s not in store; highlights not attached", self.transcript.id)
        self.store.save(ANALYSES, self.analysis)
        self._enter(PipelineState.DONE)

    def run_demo(self, seed=None):
        """Store a generated sample triple in one step; returns the recording id."""
        self._require_idle()
        self.recording, self.transcript, self.analysis = generate_demo_data(seed, now=self.clock())
        self.store.save(RECORDINGS, self.recording)
        self.store.save(TRANSCRIPTS, self.transcript)
        self.store.save(ANALYSES, self.analysis)
        self._enter(PipelineState.DONE)
        return self.recording.id
