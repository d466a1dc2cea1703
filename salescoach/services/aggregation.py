# dashboard view model for an Analysis record; pure functions, no I/O

DEFAULT_PRIORITY = "medium"


def score_band(score):
    if score >= 80:
        return "good"
    if score >= 60:
        return "fair"
    return "poor"


def priority_label(suggestion):
    p = getattr(suggestion, "priority", None)
    return p or DEFAULT_PRIORITY


def summarize_analysis(analysis):
    metrics = [
        {
            "name": m.name,
            "value": m.value,
            "description": m.description,
            "band": score_band(m.value),
        }
        for m in analysis.metrics
    ]
    suggestions = [
        {"title": s.title, "description": s.description, "priority": priority_label(s)}
        for s in analysis.suggestions
    ]
    chart = [{"subject": m.name, "value": m.value, "fullMark": 100} for m in analysis.metrics]
    return {
        "overallScore": analysis.overall_score,
        "overallBand": score_band(analysis.overall_score),
        "metrics": metrics,
        "suggestions": suggestions,
        "chart": chart,
    }
