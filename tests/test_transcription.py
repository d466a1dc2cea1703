import pytest
import requests

from salescoach.services import transcription
from salescoach.services.sample_data import SAMPLE_TRANSCRIPT
from salescoach.services.transcription import (
    TranscriptionError, assemble_turns, split_labelled_text, transcribe_audio, turns_from_deepgram,
)


class FakeResponse:
    def __init__(self, payload, status_code=200):
        self._payload = payload
        self.status_code = status_code

    def json(self):
        return self._payload

    def raise_for_status(self):
        if self.status_code >= 400:
            raise requests.exceptions.HTTPError(str(self.status_code))


DEEPGRAM_UTTERANCES = {
    "metadata": {"request_id": "dg-123"},
    "results": {
        "channels": [{"alternatives": [{"transcript": "hello there hi"}]}],
        "utterances": [
            {"speaker": 0, "transcript": "Hello there."},
            {"speaker": 1, "transcript": "Hi!"},
        ],
    },
}

DEEPGRAM_WORDS = {
    "results": {
        "channels": [{"alternatives": [{
            "transcript": "hello there hi",
            "words": [
                {"word": "hello", "punctuated_word": "Hello", "speaker": 0},
                {"word": "there", "punctuated_word": "there.", "speaker": 0},
                {"word": "hi", "punctuated_word": "Hi!", "speaker": 1},
            ],
        }]}],
    },
}


def test_sample_transcript_round_trips():
    text, utterances = assemble_turns(split_labelled_text(SAMPLE_TRANSCRIPT))
    assert text == SAMPLE_TRANSCRIPT
    assert utterances[0].speaker == "Agent"
    assert utterances[1].speaker == "Customer"
    for u in utterances:
        assert text[u.start_index:u.end_index] == u.text


def test_assemble_skips_empty_turns():
    text, utterances = assemble_turns([("Agent", "Hello there."), ("Customer", "  "), ("Customer", "Hi!")])
    assert text == "Agent: Hello there.\n\nCustomer: Hi!"
    assert [(u.start_index, u.end_index) for u in utterances] == [(7, 19), (31, 34)]


def test_turns_from_utterances():
    assert turns_from_deepgram(DEEPGRAM_UTTERANCES) == [("Speaker 0", "Hello there."), ("Speaker 1", "Hi!")]


def test_turns_from_words():
    assert turns_from_deepgram(DEEPGRAM_WORDS) == [("Speaker 0", "Hello there."), ("Speaker 1", "Hi!")]


def test_turns_from_plain_transcript():
    raw = {"results": {"channels": [{"alternatives": [{"transcript": "hello"}]}]}}
    assert turns_from_deepgram(raw) == [("Speaker 0", "hello")]
    assert turns_from_deepgram({"results": {"channels": []}}) == []


def test_without_key_returns_sample(app):
    with app.app_context():
        out = transcribe_audio(b"RIFF", filename="call.wav")
    assert out["text"] == SAMPLE_TRANSCRIPT
    assert out["utterances"][0]["startIndex"] == len("Agent: ")


def test_deepgram_request(app, monkeypatch):
    sent = {}

    def fake_post(url, params=None, headers=None, data=None, timeout=None):
        sent.update(url=url, params=params, headers=headers, data=data)
        return FakeResponse(DEEPGRAM_UTTERANCES)

    monkeypatch.setattr(transcription.requests, "post", fake_post)
    app.config["DEEPGRAM_API_KEY"] = "dg-key"
    with app.app_context():
        out = transcribe_audio(b"ID3", filename="call.mp3")

    assert sent["url"] == transcription.DEEPGRAM_URL
    assert sent["headers"]["Authorization"] == "Token dg-key"
    assert sent["headers"]["Content-Type"] == "audio/mpeg"
    assert sent["params"]["diarize"] == "true"
    assert sent["data"] == b"ID3"
    assert out["id"] == "dg-123"
    assert out["text"] == "Speaker 0: Hello there.\n\nSpeaker 1: Hi!"
    assert out["utterances"][1] == {"speaker": "Speaker 1", "text": "Hi!", "startIndex": 36, "endIndex": 39}


def test_deepgram_failure_raises(app, monkeypatch):
    monkeypatch.setattr(transcription.requests, "post", lambda *a, **k: FakeResponse({}, status_code=401))
    app.config["DEEPGRAM_API_KEY"] = "dg-key"
    with app.app_context():
        with pytest.raises(TranscriptionError):
            transcribe_audio(b"ID3", mimetype="audio/mpeg")


def test_silence_raises(app, monkeypatch):
    raw = {"results": {"channels": [{"alternatives": [{"transcript": ""}]}]}}
    monkeypatch.setattr(transcription.requests, "post", lambda *a, **k: FakeResponse(raw))
    app.config["DEEPGRAM_API_KEY"] = "dg-key"
    with app.app_context():
        with pytest.raises(TranscriptionError):
            transcribe_audio(b"ID3", mimetype="audio/mpeg")
