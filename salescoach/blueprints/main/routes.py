import mimetypes
from io import BytesIO

from botocore.exceptions import BotoCoreError, ClientError
from flask import render_template, redirect, url_for, flash, abort, send_file, current_app

from . import bp
from .forms import UploadForm, DemoForm, ClearForm
from ...extensions import records
from ...services.analysis_service import analyze_transcript
from ...services.pipeline import AnalysisPipeline, AudioUpload, PipelineError, UploadValidationError
from ...services.record_store import RECORDINGS
from ...services.storage import save_audio, download_bytes
from ...services.transcription import transcribe_audio


def make_pipeline(store):
    return AnalysisPipeline(store, transcribe_audio, analyze_transcript, save_audio=save_audio)


@bp.get("/")
def index():
    recordings = sorted(records.store.list(RECORDINGS), key=lambda r: r.created_at, reverse=True)
    return render_template(
        "main/index.html",
        form=UploadForm(),
        demo_form=DemoForm(),
        clear_form=ClearForm(),
        recordings=recordings,
    )


@bp.post("/upload")
def upload():
    form = UploadForm()
    if not form.validate_on_submit():
        for errors in form.errors.values():
            for msg in errors:
                flash(msg, "error")
        return redirect(url_for("main.index"))

    f = form.file.data
    audio = AudioUpload(filename=f.filename or "", mimetype=f.mimetype or "", payload=f.read())
    pipeline = make_pipeline(records.store)
    try:
        recording_id = pipeline.submit(audio)
    except UploadValidationError as e:
        flash(str(e), "error")
        return redirect(url_for("main.index"))
    except PipelineError as e:
        current_app.logger.warning("analysis pipeline failed at %s: %r", e.stage.value, pipeline.error)
        flash(e.message, "error")
        return redirect(url_for("main.index"))

    flash("Analysis complete!", "success")
    return redirect(url_for("analysis.show", recording_id=recording_id))


@bp.post("/demo")
def demo():
    form = DemoForm()
    if not form.validate_on_submit():
        flash("Error generating demo. Please try again.", "error")
        return redirect(url_for("main.index"))
    recording_id = make_pipeline(records.store).run_demo()
    return redirect(url_for("analysis.show", recording_id=recording_id))


@bp.post("/clear")
def clear():
    form = ClearForm()
    if form.validate_on_submit():
        records.store.clear_all()
        flash("All recordings were removed.", "success")
    return redirect(url_for("main.index"))


@bp.get("/recordings/<recording_id>/audio")
def audio(recording_id):
    rec = records.store.find_by_id(RECORDINGS, recording_id)
    if not rec or not rec.file_url:
        abort(404)
    try:
        data = download_bytes(rec.file_url)
    except (OSError, ValueError, BotoCoreError, ClientError):
        current_app.logger.exception("Could not read audio for recording %s", recording_id)
        abort(404)
    mimetype = mimetypes.guess_type(rec.file_name)[0] or "application/octet-stream"
    return send_file(BytesIO(data), mimetype=mimetype, download_name=rec.file_name)
