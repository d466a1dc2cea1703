"""Print what the configured record store currently holds."""
import os
import sys

sys.path.insert(0, os.path.abspath(os.path.join(os.path.dirname(__file__), "..")))

from salescoach import create_app
from salescoach.extensions import records
from salescoach.services.record_store import RECORDINGS, TRANSCRIPTS, ANALYSES


def inspect(store):
    recordings = store.list(RECORDINGS)
    transcripts = store.list(TRANSCRIPTS)
    analyses = store.list(ANALYSES)
    print(f"recordings: {len(recordings)}  transcripts: {len(transcripts)}  analyses: {len(analyses)}")
    for r in recordings:
        print(f"- {r.id} {r.file_name} transcript={r.transcript_id} analysis={r.analysis_id}")
        dupes = [t.id for t in transcripts if t.recording_id == r.id]
        if len(dupes) > 1:
            print(f"    more than one transcript: {dupes}")
    known = {r.id for r in recordings}
    for t in transcripts:
        if t.recording_id not in known:
            print(f"orphan transcript {t.id} -> {t.recording_id}")
    for a in analyses:
        if a.recording_id not in known:
            print(f"orphan analysis {a.id} -> {a.recording_id}")


if __name__ == '__main__':
    app = create_app()
    with app.app_context():
        inspect(records.store)
    print('\nDone.')
