"""
Built-in measure definitions.

PHQ-9 (depression) and GAD-7 (anxiety) screening instruments. Every question
is answered on the same 0-3 frequency scale over the last two weeks.
"""

from mbc_tracker.domain.entities.measure import Measure, QuestionDefinition, SeverityBand

FREQUENCY_SCALE: dict[int, str] = {
    0: "Not at all",
    1: "Several days",
    2: "More than half the days",
    3: "Nearly every day",
}

TWO_WEEK_INSTRUCTIONS = (
    "Over the last 2 weeks, how often have you been bothered by any of the following problems?"
)

PHQ9_QUESTIONS = [
    "Little interest or pleasure in doing things",
    "Feeling down, depressed, or hopeless",
    "Trouble falling or staying asleep, or sleeping too much",
    "Feeling tired or having little energy",
    "Poor appetite or overeating",
    "Feeling bad about yourself - or that you are a failure or have let yourself "
    "or your family down",
    "Trouble concentrating on things, such as reading the newspaper or watching television",
    "Moving or speaking so slowly that other people could have noticed. Or the opposite - "
    "being so fidgety or restless that you have been moving around a lot more than usual",
    "Thoughts that you would be better off dead, or of hurting yourself in some way",
]

PHQ9_SEVERITY_BANDS = [
    SeverityBand("minimal", 0, 4),
    SeverityBand("mild", 5, 9),
    SeverityBand("moderate", 10, 14),
    SeverityBand("moderately_severe", 15, 19),
    SeverityBand("severe", 20, 27),
]

GAD7_QUESTIONS = [
    "Feeling nervous, anxious, or on edge",
    "Not being able to stop or control worrying",
    "Worrying too much about different things",
    "Trouble relaxing",
    "Being so restless that it is hard to sit still",
    "Becoming easily annoyed or irritable",
    "Feeling afraid, as if something awful might happen",
]

GAD7_SEVERITY_BANDS = [
    SeverityBand("minimal", 0, 4),
    SeverityBand("mild", 5, 9),
    SeverityBand("moderate", 10, 14),
    SeverityBand("severe", 15, 21),
]


def _questions(texts: list[str]) -> list[QuestionDefinition]:
    return [
        QuestionDefinition(number=index, text=text, min_value=0, max_value=3)
        for index, text in enumerate(texts, start=1)
    ]


def build_phq9() -> Measure:
    return Measure(
        name="PHQ-9",
        full_name="Patient Health Questionnaire-9",
        description="Patient Health Questionnaire-9: A 9-item depression screening tool",
        instructions=TWO_WEEK_INSTRUCTIONS,
        questions=_questions(PHQ9_QUESTIONS),
        severity_bands=list(PHQ9_SEVERITY_BANDS),
    )


def build_gad7() -> Measure:
    return Measure(
        name="GAD-7",
        full_name="Generalized Anxiety Disorder-7",
        description="Generalized Anxiety Disorder-7: A 7-item anxiety screening tool",
        instructions=TWO_WEEK_INSTRUCTIONS,
        questions=_questions(GAD7_QUESTIONS),
        severity_bands=list(GAD7_SEVERITY_BANDS),
    )


def default_catalog() -> dict[str, Measure]:
    """Catalog keyed by upper-cased measure name."""
    return {measure.name.upper(): measure for measure in (build_phq9(), build_gad7())}
