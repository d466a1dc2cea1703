"""Sales-call analysis through the OpenAI Responses HTTP API.

We call the API with `requests` rather than the `openai` SDK, matching the
transcription client. The model's JSON is normalised before it reaches the
record models: scores are clamped, unknown priorities dropped and highlights
that do not fit the transcript removed.
"""
import json
import random
import re
import time
import uuid

import requests
from flask import current_app

from ..models import HIGHLIGHT_TYPES, PRIORITIES

OPENAI_URL = "https://api.openai.com/v1/responses"

SYSTEM_PROMPT = "You are an expert real estate sales coach."

PROMPT_TEMPLATE = """\
You are an expert real estate sales coach. Analyze the following sales call transcript between a real estate agent and a potential client.

Focus on these key areas:
1. Information Gathering: How well did the agent collect customer details and understand their needs?
2. Property Presentation: How effectively did the agent present property features and benefits?
3. Amenities Coverage: How thoroughly did the agent discuss building amenities and facilities?
4. Neighborhood Benefits: How well did the agent highlight location advantages and nearby services?
5. Objection Handling: How effectively did the agent address customer concerns and objections?
6. Closing Techniques: How well did the agent move the conversation toward a commitment?

For each area, provide:
- A score from 0-100
- A brief description of performance

Also provide:
- An overall score from 0-100
- 3-5 specific, actionable suggestions for improvement with priority levels (high, medium, low)
- Highlight key moments in the transcript (positive points, negative points, questions, objections, closing attempts).
  startIndex and endIndex are character offsets into the transcript text below.

Format your response as JSON with the following structure:
{{
  "overallScore": number,
  "metrics": [
    {{ "name": "Information Gathering", "value": number, "description": "string" }},
    ...
  ],
  "suggestions": [
    {{ "title": "string", "description": "string", "priority": "high|medium|low" }},
    ...
  ],
  "highlights": [
    {{ "startIndex": number, "endIndex": number, "type": "positive|negative|question|objection|closing", "comment": "string" }},
    ...
  ]
}}

Transcript:
{transcript}
"""


class AnalysisServiceError(Exception):
    pass


def _clamp_score(value):
    try:
        v = int(round(float(value)))
    except (TypeError, ValueError):
        return 0
    return max(0, min(100, v))


def normalize_analysis(data, text):
    """Coerce a model response into the analysis-response shape.

    ``text`` is the transcript the highlights refer to.
    """
    size = len(text or "")
    metrics = []
    for m in data.get("metrics") or []:
        if not isinstance(m, dict) or not m.get("name"):
            continue
        metrics.append({
            "name": str(m["name"]),
            "value": _clamp_score(m.get("value")),
            "description": str(m.get("description") or ""),
        })

    suggestions = []
    for s in data.get("suggestions") or []:
        if not isinstance(s, dict) or not s.get("title"):
            continue
        priority = str(s.get("priority") or "").strip().lower()
        suggestions.append({
            "title": str(s["title"]),
            "description": str(s.get("description") or ""),
            "priority": priority if priority in PRIORITIES else None,
        })

    highlights = []
    for h in data.get("highlights") or []:
        try:
            start = int(h.get("startIndex"))
            end = int(h.get("endIndex"))
        except (AttributeError, TypeError, ValueError):
            continue
        kind = str(h.get("type") or "").strip().lower()
        if kind not in HIGHLIGHT_TYPES or not (0 <= start <= end <= size):
            try:
                current_app.logger.warning("Dropping highlight %r (text length %d)", h, size)
            except RuntimeError:
                pass
            continue
        highlights.append({"startIndex": start, "endIndex": end, "type": kind, "comment": str(h.get("comment") or "")})

    return {
        "id": str(data.get("id") or uuid.uuid4().hex),
        "overallScore": _clamp_score(data.get("overallScore")),
        "metrics": metrics,
        "suggestions": suggestions,
        "highlights": highlights,
    }


def _extract_output_text(jr):
    text = jr.get("output_text") or ""
    if text:
        return text
    parts = []
    for item in jr.get("output") or []:
        if isinstance(item, dict):
            for c in item.get("content", []):
                if isinstance(c, dict) and "text" in c:
                    parts.append(c["text"])
                elif isinstance(c, str):
                    parts.append(c)
        elif isinstance(item, str):
            parts.append(item)
    return "\n".join(parts)


def _post_with_retries(url, headers, body, max_attempts):
    """POST, retrying 429/5xx/network errors up to ``max_attempts`` in total.

    Returns the JSON body. With ``max_attempts=1`` (the default config) the
    first failure raises ``AnalysisServiceError``.
    """
    max_attempts = max(1, max_attempts)
    backoff = 1.0
    for attempt in range(1, max_attempts + 1):
        last = attempt == max_attempts
        try:
            r = requests.post(url, headers=headers, json=body, timeout=60)
        except requests.exceptions.RequestException as e:
            if last:
                current_app.logger.error(f"OpenAI network error, attempt {attempt}/{max_attempts}: {e}")
                raise AnalysisServiceError("Analysis service unreachable") from e
            current_app.logger.warning(f"OpenAI network error, attempt {attempt}/{max_attempts}, retrying in {backoff}s")
            time.sleep(backoff + random.uniform(0, 0.5))
            backoff *= 2
            continue

        if r.status_code == 429 or 500 <= r.status_code < 600:
            body_text = r.text or ""
            if r.status_code == 429 and "insufficient_quota" in body_text:
                current_app.logger.error("OpenAI 429 indicates insufficient quota; body=%s", body_text[:2000])
                raise AnalysisServiceError("Analysis service quota exhausted")
            if last:
                current_app.logger.error(f"OpenAI request returned {r.status_code} on final attempt; body={body_text[:1000]}")
                raise AnalysisServiceError(f"Analysis service unavailable after {max_attempts} attempts ({r.status_code})")
            ra = r.headers.get("Retry-After")
            try:
                wait = float(ra) if ra else backoff
            except ValueError:
                # Retry-After may be an HTTP-date
                wait = backoff
            current_app.logger.warning(
                f"OpenAI request returned {r.status_code}, attempt {attempt}/{max_attempts}, retrying in {wait}s; body={body_text[:1000]}"
            )
            time.sleep(wait + random.uniform(0, 0.5))
            backoff *= 2
            continue

        try:
            r.raise_for_status()
        except requests.exceptions.HTTPError as e:
            current_app.logger.error(f"OpenAI HTTP error {r.status_code}: {(r.text or '')[:1000]}")
            raise AnalysisServiceError(f"Analysis service rejected the request ({r.status_code})") from e
        try:
            return r.json()
        except ValueError as e:
            raise AnalysisServiceError("Analysis service returned invalid JSON") from e


def analyze_transcript(text):
    """Score a sales call transcript.

    Returns ``{"id", "overallScore", "metrics", "suggestions", "highlights"}``.
    Raises ``AnalysisServiceError`` when the provider cannot be reached or its
    answer cannot be parsed.
    """
    api_key = current_app.config.get("OPENAI_API_KEY")
    if not api_key:
        from .sample_data import sample_analysis
        current_app.logger.warning("OPENAI_API_KEY not set; using sample analysis")
        return sample_analysis(text)

    headers = {"Authorization": f"Bearer {api_key}", "Content-Type": "application/json"}
    body = {
        "model": current_app.config.get("OPENAI_MODEL", "gpt-4o-mini"),
        "instructions": SYSTEM_PROMPT,
        "input": PROMPT_TEMPLATE.format(transcript=text),
        "text": {"format": {"type": "json_object"}},
        "temperature": 0.2,
    }
    jr = _post_with_retries(OPENAI_URL, headers, body, int(current_app.config.get("OPENAI_MAX_ATTEMPTS", 1)))

    out = _extract_output_text(jr)
    m = re.search(r"\{[\s\S]*\}", out)
    try:
        data = json.loads(m.group(0) if m else out)
    except ValueError as e:
        current_app.logger.exception("OpenAI analysis response was not JSON")
        raise AnalysisServiceError("Analysis response could not be parsed") from e
    if not isinstance(data, dict):
        raise AnalysisServiceError("Analysis response was not a JSON object")
    return normalize_analysis(data, text)
