"""Speech-to-text through the Deepgram REST API.

The transcript text is assembled here from the diarized turns as
``"<speaker>: <words>"`` blocks separated by a blank line, so utterance
offsets index into it exactly. Without ``DEEPGRAM_API_KEY`` a fixed sample
response is returned instead.
"""
import mimetypes
import uuid

import requests
from flask import current_app

from ..models import Utterance

DEEPGRAM_URL = "https://api.deepgram.com/v1/listen"
TURN_SEPARATOR = "\n\n"


class TranscriptionError(Exception):
    pass


def split_labelled_text(text, separator=TURN_SEPARATOR):
    """``"Agent: hi\\n\\nCustomer: hello"`` -> ``[("Agent", "hi"), ("Customer", "hello")]``"""
    turns = []
    for block in (text or "").split(separator):
        if not block.strip():
            continue
        colon = block.find(":")
        if colon == -1:
            continue
        turns.append((block[:colon].strip(), block[colon + 1:].strip()))
    return turns


def assemble_turns(turns, separator=TURN_SEPARATOR):
    """Join (speaker, text) turns into one transcript string.

    Returns ``(text, utterances)``; each utterance covers only the spoken part
    of its block, not the ``"speaker: "`` label.
    """
    parts = []
    utterances = []
    pos = 0
    for speaker, said in turns:
        said = (said or "").strip()
        if not said:
            continue
        if parts:
            pos += len(separator)
        label = f"{speaker}: "
        start = pos + len(label)
        end = start + len(said)
        parts.append(label + said)
        utterances.append(Utterance(speaker=speaker, text=said, start_index=start, end_index=end))
        pos = end
    return separator.join(parts), utterances


def _speaker_label(spk):
    if spk is None:
        spk = 0
    return f"Speaker {spk}"


def turns_from_deepgram(raw):
    """Extract (speaker, text) turns from a Deepgram response.

    Prefers the ``utterances`` array; otherwise groups the word list by
    speaker; otherwise returns the whole transcript as one turn.
    """
    results = raw.get("results") or {}
    utt = results.get("utterances") or raw.get("utterances")
    if utt:
        return [(_speaker_label(u.get("speaker")), u.get("transcript") or u.get("text") or "") for u in utt]

    try:
        alt = results.get("channels", [])[0].get("alternatives", [])[0]
    except (IndexError, AttributeError):
        return []

    words = alt.get("words") or []
    if words and any(w.get("speaker") is not None for w in words):
        turns = []
        current_spk = None
        current = []
        for w in words:
            spk = w.get("speaker") if w.get("speaker") is not None else 0
            token = w.get("punctuated_word") or w.get("word") or ""
            if current and spk != current_spk:
                turns.append((_speaker_label(current_spk), " ".join(current)))
                current = []
            current_spk = spk
            if token:
                current.append(token)
        if current:
            turns.append((_speaker_label(current_spk), " ".join(current)))
        return turns

    transcript = alt.get("transcript")
    return [(_speaker_label(0), transcript)] if transcript else []


def deepgram_raw_transcribe(audio_bytes, filename=None, mimetype=None):
    """POST the audio to Deepgram and return the JSON response."""
    cfg = current_app.config
    opts = cfg.get("DEEPGRAM_OPTIONS") or {}
    params = {}
    if opts.get("punctuate", True):
        params["punctuate"] = "true"
    if opts.get("diarize") or opts.get("diarization"):
        params["diarize"] = "true"
    if opts.get("utterances"):
        params["utterances"] = "true"
    if "utt_split" in opts:
        try:
            params["utt_split"] = float(opts.get("utt_split"))
        except (TypeError, ValueError):
            current_app.logger.warning("Ignoring invalid utt_split option: %r", opts.get("utt_split"))
    language = cfg.get("DEEPGRAM_LANGUAGE")
    if language:
        params["language"] = language

    content_type = mimetype or "audio/wav"
    if not mimetype and filename:
        guessed = mimetypes.guess_type(filename)[0]
        if guessed:
            content_type = guessed

    headers = {
        "Authorization": f"Token {cfg.get('DEEPGRAM_API_KEY')}",
        "Content-Type": content_type,
    }
    r = requests.post(DEEPGRAM_URL, params=params, headers=headers, data=audio_bytes, timeout=120)
    r.raise_for_status()
    return r.json()


def transcribe_audio(audio_bytes, filename=None, mimetype=None):
    """Transcribe an audio payload.

    Returns ``{"id", "text", "utterances"}`` with utterances as JSON dicts.
    Raises ``TranscriptionError`` when the provider call fails or yields no
    speech.
    """
    if not current_app.config.get("DEEPGRAM_API_KEY"):
        from .sample_data import sample_transcription
        current_app.logger.warning("DEEPGRAM_API_KEY not set; using sample transcription")
        return sample_transcription()

    try:
        raw = deepgram_raw_transcribe(audio_bytes, filename=filename, mimetype=mimetype)
    except (requests.exceptions.RequestException, ValueError) as e:
        current_app.logger.exception("Deepgram transcription failed")
        raise TranscriptionError("Failed to transcribe audio") from e

    text, utterances = assemble_turns(turns_from_deepgram(raw))
    if not text:
        raise TranscriptionError("Transcription returned no speech")
    request_id = (raw.get("metadata") or {}).get("request_id") or uuid.uuid4().hex
    return {
        "id": request_id,
        "text": text,
        "utterances": [u.to_json() for u in utterances],
    }
