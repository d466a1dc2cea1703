import os
import sys

sys.path.append(os.path.abspath(os.path.join(os.path.dirname(__file__), '..')))

import pytest

from salescoach import create_app
from salescoach.models import Recording, Transcript, Utterance, Analysis, Metric
from salescoach.services.backends import MemoryBackend
from salescoach.services.record_store import RecordStore


@pytest.fixture
def app(tmp_path):
    app = create_app({
        "TESTING": True,
        "WTF_CSRF_ENABLED": False,
        "STORE_BACKEND": "memory",
        "SQLALCHEMY_DATABASE_URI": "sqlite://",
        "STORAGE_BACKEND": "local",
        "LOCAL_STORAGE_DIR": str(tmp_path / "storage"),
        "DEEPGRAM_API_KEY": None,
        "OPENAI_API_KEY": None,
    })
    yield app


@pytest.fixture
def client(app):
    return app.test_client()


@pytest.fixture
def store():
    return RecordStore(MemoryBackend())


def make_recording(rec_id="rec1", **kw):
    return Recording(id=rec_id, file_name=kw.pop("file_name", "call.mp3"), file_url=kw.pop("file_url", ""), **kw)


def make_transcript(tr_id="tr1", recording_id="rec1", highlights=None):
    text = "Agent: Hello there.\n\nCustomer: Hi!"
    utterances = [
        Utterance(speaker="Agent", text="Hello there.", start_index=7, end_index=19),
        Utterance(speaker="Customer", text="Hi!", start_index=31, end_index=34),
    ]
    return Transcript(id=tr_id, recording_id=recording_id, text=text, utterances=utterances,
                      highlights=highlights or [])


def make_analysis(an_id="an1", recording_id="rec1", transcript_id="tr1", score=72):
    return Analysis(id=an_id, recording_id=recording_id, transcript_id=transcript_id, overall_score=score,
                    metrics=[Metric(name="Closing Techniques", value=score, description="")])
