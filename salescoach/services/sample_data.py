"""Canned real-estate sales call used for the demo and when no transcription
or analysis provider is configured."""
import random
import uuid
from datetime import datetime, timedelta, timezone

from ..models import (
    Analysis, Highlight, Metric, Recording, Suggestion, Transcript, REAL_ESTATE_METRICS,
)
from .transcription import assemble_turns, split_labelled_text

SAMPLE_TRANSCRIPT = """\
Agent: Good morning! Thanks for calling Luxury Homes Realty. This is Alex speaking. How can I help you today?

Customer: Hi Alex, I'm interested in the two-bedroom apartment you have listed on Oak Street. I'd like to know more about it.

Agent: Absolutely! I'd be happy to tell you all about our Oak Street property. It's one of our most popular listings right now. Before we dive in, may I have your name please?

Customer: Sure, it's Jamie Smith.

Agent: Thank you, Jamie. And are you looking for a place for yourself or will others be living there as well?

Customer: It's for me and my partner. We're looking to move in the next couple of months.

Agent: Perfect, thank you for sharing that. The Oak Street apartment is actually perfect for couples. It features two spacious bedrooms with the master having an en-suite bathroom. The living area is open concept with large windows that let in plenty of natural light.

Customer: That sounds nice. What about the kitchen? We both love to cook.

Agent: You're going to love the kitchen! It was completely renovated last year with quartz countertops, stainless steel appliances, and a gas range. There's also a breakfast bar that's perfect for casual dining or entertaining guests.

Customer: Great. And what about the neighborhood? Is it safe? Are there grocery stores nearby?

Agent: That's a great question. Oak Street is located in one of our safest neighborhoods with very low crime rates. There's a Whole Foods just two blocks away, and a farmer's market every Saturday morning within walking distance. You're also just a 5-minute walk from Central Park, which has great jogging trails.

Customer: What about parking? We have one car.

Agent: The building includes one designated parking spot for each unit, and there's also ample street parking for visitors. Additionally, there's a bus stop right outside and the subway station is just a 10-minute walk away if you prefer public transportation.

Customer: And how much is the rent again?

Agent: The apartment is $2,200 per month with a 12-month lease. This includes water and trash service. Tenants are responsible for electricity and internet. There's also a security deposit equal to one month's rent.

Customer: That's a bit higher than we were hoping to spend. Do you have any flexibility on the price?

Agent: I understand your concern about the budget. While the listed price is competitive for the neighborhood, the owner might consider $2,150 for qualified applicants with excellent credit. Also, if you sign an 18-month lease instead of 12 months, we could potentially offer a small discount. Would either of those options work better for your budget?

Customer: The 18-month lease might work. Can we see the apartment before making a decision?

Agent: Absolutely! I'd be happy to arrange a viewing for you. We have availability tomorrow afternoon at 3 PM or Saturday morning at 10 AM. Which would work better for you and your partner?

Customer: Saturday at 10 would be perfect.

Agent: Excellent! I'll schedule you for Saturday at 10 AM. Could I get your email address to send you a confirmation and some additional information about the property?

Customer: Sure, it's jamie.smith@email.com.

Agent: Thank you, Jamie. I've got you scheduled for Saturday at 10 AM. You'll receive an email confirmation shortly with all the details including the address and my contact information. Is there anything else you'd like to know about the property before our meeting?

Customer: No, I think that covers it for now. Thanks for your help.

Agent: You're very welcome! I'm looking forward to meeting you and your partner on Saturday and showing you this beautiful apartment. I think you'll really love it. If you have any questions before then, please don't hesitate to call me. Have a great day!

Customer: You too. Goodbye.

Agent: Goodbye, Jamie."""

METRIC_DESCRIPTIONS = {
    "Information Gathering": "How well you collected customer details and understood their needs.",
    "Property Presentation": "How effectively you presented the property features and benefits.",
    "Amenities Coverage": "How thoroughly you discussed building amenities and facilities.",
    "Neighborhood Benefits": "How well you highlighted location advantages and nearby services.",
    "Objection Handling": "How effectively you addressed customer concerns and objections.",
    "Closing Techniques": "How well you moved the conversation toward a commitment.",
}

SAMPLE_HIGHLIGHTS = [
    (190, 290, "positive", "Good job gathering basic customer information to understand their needs."),
    (590, 750, "positive", "Excellent property description highlighting key features that match customer needs."),
    (1050, 1250, "positive", "Great neighborhood description covering safety and amenities."),
    (1650, 1800, "objection", "Customer raised a price objection that could have been addressed more effectively."),
    (1800, 1950, "closing", "Good attempt at addressing the price objection with alternative options."),
    (2200, 2400, "closing", "Excellent job scheduling a viewing and collecting contact information."),
]

SAMPLE_SUGGESTIONS = [
    ("Improve objection handling techniques",
     "When customers raise concerns about price, try to emphasize value rather than immediately offering "
     "discounts. Highlight the unique features that justify the price point.",
     "high"),
    ("Enhance property presentation",
     "Use more sensory language when describing the property. Help customers visualize themselves living "
     "in the space by painting a picture with your words.",
     "medium"),
    ("Strengthen closing techniques",
     "After scheduling a viewing, try to create more excitement about the next steps. Consider mentioning "
     "the application process to prepare them for a potential decision after the viewing.",
     "medium"),
    ("Expand neighborhood benefits discussion",
     "Include more details about lifestyle elements like restaurants, entertainment options, and community "
     "events to help customers connect emotionally with the neighborhood.",
     "low"),
]


def generate_id(rng=None):
    if rng is None:
        return uuid.uuid4().hex
    return uuid.UUID(int=rng.getrandbits(128), version=4).hex


def recent_date(rng=None, days=30, now=None):
    rng = rng or random
    now = now or datetime.now(timezone.utc)
    return now - timedelta(days=rng.randrange(days))


def score(rng=None, low=40, high=95):
    rng = rng or random
    return rng.randint(low, high)


def sample_utterances(text=SAMPLE_TRANSCRIPT):
    return assemble_turns(split_labelled_text(text))[1]


def sample_highlights(text_length=None):
    """The canned highlights, minus any that would run past ``text_length``."""
    out = []
    for start, end, kind, comment in SAMPLE_HIGHLIGHTS:
        if text_length is not None and end > text_length:
            continue
        out.append(Highlight(start_index=start, end_index=end, type=kind, comment=comment))
    return out


def sample_metrics(rng=None):
    return [
        Metric(name=name, value=score(rng), description=METRIC_DESCRIPTIONS.get(name, "Performance in this area."))
        for name in REAL_ESTATE_METRICS
    ]


def sample_suggestions():
    return [Suggestion(title=t, description=d, priority=p) for t, d, p in SAMPLE_SUGGESTIONS]


def sample_transcription(rng=None):
    """A transcription-service response for the sample call."""
    text, utterances = assemble_turns(split_labelled_text(SAMPLE_TRANSCRIPT))
    return {
        "id": generate_id(rng),
        "text": text,
        "utterances": [u.to_json() for u in utterances],
    }


def sample_analysis(text, rng=None):
    """An analysis-service response; overall score is random in 65-95."""
    return {
        "id": generate_id(rng),
        "overallScore": score(rng, 65, 95),
        "metrics": [m.to_json() for m in sample_metrics(rng)],
        "suggestions": [s.to_json() for s in sample_suggestions()],
        "highlights": [h.to_json() for h in sample_highlights(len(text or ""))],
    }


def generate_demo_data(seed=None, now=None):
    """Build a consistent recording/transcript/analysis triple.

    With a ``seed`` the ids, scores and date offsets are reproducible. Dates
    count back from ``now`` (default: the current time), so pass both to get
    identical records.
    """
    rng = random.Random(seed)
    recording_id = generate_id(rng)
    transcript_id = generate_id(rng)
    analysis_id = generate_id(rng)
    text, utterances = assemble_turns(split_labelled_text(SAMPLE_TRANSCRIPT))

    recording = Recording(
        id=recording_id,
        file_name=f"call-recording-{recording_id[:5]}.mp3",
        file_url="",
        duration=180 + rng.randrange(240),
        created_at=recent_date(rng, now=now),
        transcript_id=transcript_id,
        analysis_id=analysis_id,
    )
    transcript = Transcript(
        id=transcript_id,
        recording_id=recording_id,
        text=text,
        utterances=utterances,
        highlights=sample_highlights(len(text)),
        created_at=recent_date(rng, now=now),
    )
    analysis = Analysis(
        id=analysis_id,
        recording_id=recording_id,
        transcript_id=transcript_id,
        overall_score=score(rng, 60, 85),
        metrics=sample_metrics(rng),
        suggestions=sample_suggestions(),
        created_at=recent_date(rng, now=now),
    )
    return recording, transcript, analysis
