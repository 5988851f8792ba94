"""Owner notification email rendering."""

from html import escape
from typing import Optional

from lead_funnel.application.dtos.conversation import LeadAnalysis
from lead_funnel.application.dtos.lead import Lead
from lead_funnel.application.dtos.notification import EmailMessage, EmailVariant
from lead_funnel.application.dtos.task import Task
from lead_funnel.application.use_cases.user_messages_he import UserMessagesHE
from lead_funnel.domain.value_objects.contact_identity import to_whatsapp_number

_BOX = (
    "background: linear-gradient(135deg, #1a1a2e 0%, #16213e 100%); border-radius: 12px; "
    "padding: 24px; margin-bottom: 24px; border: 1px solid {border};"
)


def _text(value: Optional[str]) -> str:
    return escape(value) if value else UserMessagesHE.EMAIL_NOT_GIVEN


def _items(values: list[str]) -> str:
    return "".join(f"<li style=\"margin-bottom: 4px;\">{escape(v)}</li>" for v in values)


def _lead_details(lead: Lead) -> str:
    whatsapp = to_whatsapp_number(lead.phone) if lead.phone else ""
    rating_row = ""
    if lead.rating is not None:
        rating_row = (
            f"<tr><td style=\"padding: 8px 0; font-weight: bold;\">{UserMessagesHE.EMAIL_RATING}</td>"
            f"<td style=\"padding: 8px 0;\">{'⭐' * lead.rating} ({lead.rating}/5)</td></tr>"
        )
    whatsapp_button = ""
    if whatsapp:
        whatsapp_button = (
            f"<a href=\"https://wa.me/{escape(whatsapp)}\" style=\"display: inline-block; "
            "background: #25D366; color: white; padding: 12px 24px; border-radius: 8px; "
            f"text-decoration: none; font-weight: bold; margin-top: 16px;\">"
            f"{UserMessagesHE.EMAIL_WHATSAPP}</a>"
        )
    return f"""
    <div style="background: linear-gradient(135deg, #667eea 0%, #764ba2 100%); border-radius: 12px; padding: 24px; margin: 24px 0;">
      <h2 style="color: white; margin: 0 0 16px 0; font-size: 18px;">{UserMessagesHE.EMAIL_LEAD_DETAILS}</h2>
      <table style="width: 100%; color: white;">
        <tr><td style="padding: 8px 0; font-weight: bold;">{UserMessagesHE.EMAIL_NAME}</td><td style="padding: 8px 0;">{_text(lead.name)}</td></tr>
        <tr><td style="padding: 8px 0; font-weight: bold;">{UserMessagesHE.EMAIL_PHONE}</td><td style="padding: 8px 0;"><a href="tel:{escape(lead.phone or '')}" style="color: white; direction: ltr;">{_text(lead.phone)}</a></td></tr>
        <tr><td style="padding: 8px 0; font-weight: bold;">{UserMessagesHE.EMAIL_EMAIL}</td><td style="padding: 8px 0;"><a href="mailto:{escape(lead.email or '')}" style="color: white; direction: ltr;">{_text(lead.email)}</a></td></tr>
        {rating_row}
      </table>
      {whatsapp_button}
    </div>"""


def _analysis_block(analysis: LeadAnalysis) -> str:
    sections = [
        f"<h2 style=\"color: #667eea; margin: 0 0 16px 0; font-size: 18px;\">{UserMessagesHE.EMAIL_ANALYSIS_HEADING}</h2>",
        f"<h3 style=\"color: #a78bfa; margin: 0 0 8px 0; font-size: 14px;\">{UserMessagesHE.EMAIL_SUMMARY}</h3>",
        f"<p style=\"color: #e0e0e0; margin: 0 0 16px 0; line-height: 1.6;\">{escape(analysis.summary)}</p>",
    ]
    if analysis.pains:
        sections.append(
            f"<h3 style=\"color: #f87171; margin: 0 0 8px 0; font-size: 14px;\">{UserMessagesHE.EMAIL_PAINS}</h3>"
            f"<ul style=\"color: #e0e0e0; margin: 0 0 16px 0;\">{_items(analysis.pains)}</ul>"
        )
    if analysis.benefits:
        sections.append(
            f"<h3 style=\"color: #4ade80; margin: 0 0 8px 0; font-size: 14px;\">{UserMessagesHE.EMAIL_BENEFITS}</h3>"
            f"<ul style=\"color: #e0e0e0; margin: 0 0 16px 0;\">{_items(analysis.benefits)}</ul>"
        )
    if analysis.sales_script:
        sections.append(
            f"<h3 style=\"color: #fbbf24; margin: 0 0 8px 0; font-size: 14px;\">{UserMessagesHE.EMAIL_SALES_SCRIPT}</h3>"
            f"<div style=\"color: #e0e0e0; line-height: 1.6; white-space: pre-wrap;\">{escape(analysis.sales_script)}</div>"
        )
    return f"<div style=\"{_BOX.format(border='#667eea')}\">{''.join(sections)}</div>"


def _notice_block(html_text: str, summary: Optional[str] = None) -> str:
    body = f"<p style=\"color: #fbbf24; margin: 0; font-size: 14px; line-height: 1.6;\">{html_text}</p>"
    if summary:
        body += (
            f"<h3 style=\"color: #a78bfa; margin: 16px 0 8px 0; font-size: 14px;\">{UserMessagesHE.EMAIL_SUMMARY}</h3>"
            f"<div style=\"color: #e0e0e0; line-height: 1.6; white-space: pre-wrap;\">{escape(summary)}</div>"
        )
    return f"<div style=\"{_BOX.format(border='#fbbf24')}\">{body}</div>"


def render_lead_notification(
    recipient: str,
    task: Task,
    lead: Lead,
    variant: EmailVariant,
    dialogue_turns: int,
    analysis_min_turns: int,
    site_url: str,
    analysis: Optional[LeadAnalysis] = None,
    stored_summary: Optional[str] = None,
) -> EmailMessage:
    """
    Render the owner notification email.

    Args:
        recipient: Owner address
        task: Task the lead came from
        lead: Lead to report
        variant: Which body to render
        dialogue_turns: Visitor turns outside capture intervals
        analysis_min_turns: Threshold used for the low-engagement notice
        site_url: Public site URL (logo)
        analysis: Analysis, required for the ANALYSIS variant
        stored_summary: Previously stored summary shown when analysis failed

    Returns:
        EmailMessage ready for the transport
    """
    if variant == EmailVariant.ANALYSIS and analysis is not None:
        body = _analysis_block(analysis)
    elif variant == EmailVariant.LOW_ENGAGEMENT:
        body = _notice_block(UserMessagesHE.low_engagement(dialogue_turns, analysis_min_turns))
    else:
        body = _notice_block(UserMessagesHE.ANALYSIS_UNAVAILABLE, stored_summary)

    base_url = site_url.rstrip("/")
    html = f"""<!DOCTYPE html>
<html dir="rtl" lang="he">
<head><meta charset="UTF-8"><meta name="viewport" content="width=device-width, initial-scale=1.0"></head>
<body style="margin: 0; padding: 0; background-color: #0f0f16; font-family: -apple-system, BlinkMacSystemFont, 'Segoe UI', Roboto, sans-serif; direction: rtl;">
  <div style="max-width: 600px; margin: 0 auto; padding: 20px; text-align: right;">
    <div style="text-align: center; padding: 32px 0; border-bottom: 1px solid #333;">
      <img src="{escape(base_url)}/logo.png" alt="Magnt.AI" style="height: 40px;">
      <h1 style="color: white; margin: 16px 0 0 0; font-size: 24px;">{UserMessagesHE.EMAIL_HEADING}</h1>
      <p style="color: #a0a0a0; margin: 8px 0 0 0;">{escape(UserMessagesHE.email_source(task.title))}</p>
    </div>
    {_lead_details(lead)}
    {body}
    <div style="text-align: center; padding: 24px 0; margin-top: 24px; border-top: 1px solid #333;">
      <p style="color: #666; margin: 0; font-size: 12px;">{UserMessagesHE.EMAIL_FOOTER}</p>
    </div>
  </div>
</body>
</html>"""

    return EmailMessage(
        recipient=recipient,
        subject=UserMessagesHE.email_subject(task.title, lead.name or lead.phone),
        html=html,
    )
