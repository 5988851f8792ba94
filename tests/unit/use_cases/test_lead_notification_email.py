"""Unit tests for owner notification email rendering."""

from datetime import datetime, timezone

import pytest

from lead_funnel.application.dtos.conversation import LeadAnalysis
from lead_funnel.application.dtos.lead import Lead
from lead_funnel.application.dtos.notification import EmailVariant
from lead_funnel.application.dtos.task import Task
from lead_funnel.application.use_cases.lead_notification_email import render_lead_notification


@pytest.fixture
def task():
    """Create a task."""
    return Task(id="T1", title="Business Magnet")


def _lead(**overrides) -> Lead:
    data = {
        "id": "lead-1",
        "task_id": "T1",
        "phone": "050-123-4567",
        "name": "Dana",
        "email": "dana@example.com",
        "created_at": datetime.now(timezone.utc),
    }
    data.update(overrides)
    return Lead(**data)


def _render(task, lead, variant, **kwargs):
    return render_lead_notification(
        recipient="owner@example.com",
        task=task,
        lead=lead,
        variant=variant,
        dialogue_turns=kwargs.pop("dialogue_turns", 2),
        analysis_min_turns=4,
        site_url="https://magnt.ai/",
        **kwargs,
    )


def test_subject_names_task_and_lead(task):
    """Test the subject carries the task title and lead name."""
    message = _render(task, _lead(), EmailVariant.LOW_ENGAGEMENT)

    assert message.recipient == "owner@example.com"
    assert message.subject == "🧲 ליד חדש מהמגנט: Business Magnet - Dana"


def test_subject_falls_back_to_phone(task):
    """Test a lead without a name is named by phone."""
    message = _render(task, _lead(name=None), EmailVariant.LOW_ENGAGEMENT)

    assert message.subject.endswith("- 050-123-4567")
    assert "לא צוין" in message.html


def test_html_is_rtl_with_whatsapp_link(task):
    """Test the body is right-to-left and links the lead on WhatsApp."""
    message = _render(task, _lead(), EmailVariant.LOW_ENGAGEMENT)

    assert 'dir="rtl"' in message.html
    assert "https://wa.me/972501234567" in message.html
    assert "https://magnt.ai/logo.png" in message.html


def test_rating_row_only_when_rated(task):
    """Test the rating appears only for rated leads."""
    unrated = _render(task, _lead(), EmailVariant.LOW_ENGAGEMENT)
    rated = _render(task, _lead(rating=3), EmailVariant.LOW_ENGAGEMENT)

    assert "(3/5)" not in unrated.html
    assert "⭐⭐⭐ (3/5)" in rated.html


def test_analysis_variant_renders_all_sections(task):
    """Test the analysis block lists summary, pains, benefits and script."""
    analysis = LeadAnalysis(
        summary="Wants more clients",
        pains=["No leads", "Low budget"],
        benefits=["Steady pipeline"],
        sales_script="Open with the budget question",
    )

    message = _render(task, _lead(), EmailVariant.ANALYSIS, dialogue_turns=6, analysis=analysis)

    for text in ("Wants more clients", "No leads", "Low budget", "Steady pipeline"):
        assert text in message.html
    assert "Open with the budget question" in message.html


def test_low_engagement_variant_states_turns(task):
    """Test the low-engagement notice names the turn count and threshold."""
    message = _render(task, _lead(), EmailVariant.LOW_ENGAGEMENT, dialogue_turns=1)

    assert "ליד זה ענה רק 1 הודעות (פחות מ-4)" in message.html


def test_unavailable_variant_shows_stored_summary(task):
    """Test a failed analysis falls back to the stored summary."""
    message = _render(
        task,
        _lead(),
        EmailVariant.ANALYSIS_UNAVAILABLE,
        dialogue_turns=5,
        stored_summary="Summary from an earlier run",
    )

    assert "לא הצלחנו להפיק דוח ניתוח" in message.html
    assert "Summary from an earlier run" in message.html


def test_visitor_input_is_escaped(task):
    """Test visitor-provided fields cannot inject markup."""
    message = _render(task, _lead(name="<script>alert(1)</script>"), EmailVariant.LOW_ENGAGEMENT)

    assert "<script>" not in message.html
    assert "&lt;script&gt;" in message.html
