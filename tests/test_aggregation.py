from conftest import make_analysis
from salescoach.models import Metric, Suggestion
from salescoach.services.aggregation import priority_label, score_band, summarize_analysis


def test_score_bands():
    assert score_band(100) == "good"
    assert score_band(80) == "good"
    assert score_band(79) == "fair"
    assert score_band(60) == "fair"
    assert score_band(59) == "poor"
    assert score_band(0) == "poor"


def test_priority_defaults_to_medium():
    assert priority_label(Suggestion(title="Ask more questions")) == "medium"
    assert priority_label(Suggestion(title="Close earlier", priority="high")) == "high"


def test_summarize_analysis():
    analysis = make_analysis(score=85)
    analysis.metrics = [
        Metric(name="Objection Handling", value=55, description="Weak on price"),
        Metric(name="Closing Techniques", value=81, description=""),
    ]
    analysis.suggestions = [Suggestion(title="Emphasize value", description="...", priority=None)]
    summary = summarize_analysis(analysis)
    assert summary["overallScore"] == 85
    assert summary["overallBand"] == "good"
    assert [m["band"] for m in summary["metrics"]] == ["poor", "good"]
    assert summary["suggestions"][0]["priority"] == "medium"
    assert summary["chart"][0] == {"subject": "Objection Handling", "value": 55, "fullMark": 100}
