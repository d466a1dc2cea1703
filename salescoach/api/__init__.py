from flask import Blueprint

bp = Blueprint("api", __name__)

from . import transcribe, analyze, recordings  # noqa: E402,F401
