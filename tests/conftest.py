"""Pytest configuration, Hypothesis settings and shared flow fixtures"""
import pytest
from hypothesis import settings, Verbosity

from formflow.models import Ending, Flow, Question

# Configure Hypothesis for property-based testing
settings.register_profile("default", max_examples=100, verbosity=Verbosity.normal)
settings.register_profile("ci", max_examples=1000, verbosity=Verbosity.verbose)
settings.register_profile("dev", max_examples=10, verbosity=Verbosity.verbose)

# Load default profile
settings.load_profile("default")


@pytest.fixture
def qualification_flow() -> Flow:
    """Three-question qualifier with a jump, a disqualify rule and scoring"""
    return Flow(
        id="flow-1",
        title="Demo Qualifier",
        questions=[
            Question(
                id="q1",
                type="single-choice",
                title="Company size?",
                options=["1-10", "11-50", "Enterprise"],
                lead_scoring_enabled=True,
                lead_scoring={"1-10": 5, "11-50": 10, "Enterprise": 30},
                conditional_logic=[
                    {"condition": {"field": "q1", "operator": "equals", "value": "Enterprise"},
                     "action": "jump", "thenGoTo": "q3"},
                    {"condition": {"field": "q1", "operator": "equals", "value": "1-10"},
                     "action": "disqualify", "message": "Too small for now"},
                ],
            ),
            Question(id="q2", type="short-text", title="What do you do?"),
            Question(id="q3", type="email", title="Work email", required=True),
        ],
        endings=[
            Ending(id="end-ok", title="Qualified", message="We'll be in touch", mark_as_qualified=True),
        ],
    )
