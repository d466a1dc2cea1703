from flask import render_template, redirect, url_for, flash

from . import bp
from ...extensions import records
from ...services.aggregation import summarize_analysis
from ...services.compositor import AnnotatedTranscript


@bp.get("/<recording_id>")
def show(recording_id):
    recording, transcript, analysis = records.store.get_result(recording_id)
    # any missing piece sends the user back to start over
    if not recording:
        flash("Recording not found", "error")
        return redirect(url_for("main.index"))
    if not transcript:
        flash("Transcript not found", "error")
        return redirect(url_for("main.index"))
    if not analysis:
        flash("Analysis not found", "error")
        return redirect(url_for("main.index"))

    return render_template(
        "analysis/show.html",
        recording=recording,
        transcript=AnnotatedTranscript.from_transcript(transcript),
        highlights=transcript.highlights,
        summary=summarize_analysis(analysis),
    )
