"""Run the analysis pipeline once, synchronously, without going through HTTP.

Usage:
  python scripts/smoke_test_pipeline.py [path/to/call.mp3]

Without a path a few dummy bytes are used; with no DEEPGRAM_API_KEY /
OPENAI_API_KEY configured the sample transcription and analysis kick in, so
this also works offline.
"""
import mimetypes
import os
import sys

# ensure project root is on sys.path so `import salescoach` works from scripts/
sys.path.insert(0, os.path.abspath(os.path.join(os.path.dirname(__file__), "..")))

from salescoach import create_app
from salescoach.extensions import records
from salescoach.blueprints.main.routes import make_pipeline
from salescoach.services.pipeline import AudioUpload, PipelineError


def main(argv):
    if len(argv) > 1:
        path = argv[1]
        with open(path, 'rb') as f:
            payload = f.read()
        filename = os.path.basename(path)
        mimetype = mimetypes.guess_type(path)[0] or 'application/octet-stream'
    else:
        payload, filename, mimetype = b"RIFF....WAVE", "smoke_test.wav", "audio/wav"

    app = create_app()
    with app.app_context():
        pipeline = make_pipeline(records.store)
        try:
            recording_id = pipeline.submit(AudioUpload(filename=filename, mimetype=mimetype, payload=payload))
        except PipelineError as e:
            print('pipeline failed at', e.stage.value, '->', repr(pipeline.error))
            return 1
        recording, transcript, analysis = records.store.get_result(recording_id)
        print('states:', ' -> '.join(s.value for s in pipeline.history))
        print('recording:', recording.id, recording.file_url)
        print('transcript:', transcript.id, len(transcript.utterances), 'utterances,', len(transcript.highlights), 'highlights')
        print('analysis:', analysis.id, 'overall', analysis.overall_score)
    return 0


if __name__ == '__main__':
    sys.exit(main(sys.argv))
