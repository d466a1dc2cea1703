from flask import jsonify

from . import bp
from ..extensions import records
from ..services.aggregation import summarize_analysis
from ..services.record_store import RECORDINGS


@bp.get("/recordings")
def list_recordings():
    return jsonify([r.to_json() for r in records.store.list(RECORDINGS)])


@bp.get("/recordings/<recording_id>")
def get_recording(recording_id):
    recording, transcript, analysis = records.store.get_result(recording_id)
    if recording is None:
        return jsonify({"error": "Recording not found"}), 404
    return jsonify({
        "recording": recording.to_json(),
        "transcript": transcript.to_json() if transcript else None,
        "analysis": analysis.to_json() if analysis else None,
        "summary": summarize_analysis(analysis) if analysis else None,
    })
