# salescoach/api/analyze.py
from flask import request, jsonify, current_app

from . import bp
from ..services.analysis_service import analyze_transcript, AnalysisServiceError


@bp.post("/analyze")
def analyze():
    body = request.get_json(silent=True)
    if not isinstance(body, dict):
        body = {}
    transcript = body.get("transcript")
    if not transcript:
        return jsonify({"error": "Transcript is required"}), 400
    if not isinstance(transcript, str):
        return jsonify({"error": "Transcript must be a string"}), 400
    try:
        return jsonify(analyze_transcript(transcript))
    except AnalysisServiceError:
        current_app.logger.exception("api analyze failed")
        return jsonify({"error": "Failed to analyze transcript"}), 500
