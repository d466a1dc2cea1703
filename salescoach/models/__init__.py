from .recording import Recording
from .transcript import Transcript, Utterance, Highlight, HIGHLIGHT_TYPES
from .analysis import Analysis, Metric, Suggestion, REAL_ESTATE_METRICS, PRIORITIES
from .store_entry import StoreEntry
