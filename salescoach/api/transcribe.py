# salescoach/api/transcribe.py
from flask import request, jsonify, current_app

from . import bp
from ..services.transcription import transcribe_audio, TranscriptionError


@bp.post("/transcribe")
def transcribe():
    """Transcribe the uploaded ``file`` (multipart) or the raw request body."""
    f = request.files.get("file")
    if f is not None:
        payload, filename, mimetype = f.read(), f.filename, f.mimetype
    else:
        payload, filename, mimetype = request.get_data(), None, request.mimetype
    try:
        return jsonify(transcribe_audio(payload, filename=filename, mimetype=mimetype))
    except TranscriptionError:
        current_app.logger.exception("api transcribe failed")
        return jsonify({"error": "Failed to transcribe audio"}), 500
