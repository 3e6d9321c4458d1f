"""
Email delivery for plans and bonus roadmaps.

Supports:
- SendGrid API
- SMTP (Gmail, etc.)
- Local file output (for testing)
"""

import base64
import re
import smtplib
from datetime import datetime
from email import encoders
from email.mime.base import MIMEBase
from email.mime.multipart import MIMEMultipart
from email.mime.text import MIMEText
from pathlib import Path
from typing import List, Optional, Sequence, Tuple

from .bonus_roadmap import roadmap_title
from .config_loader import EmailSettings
from .constants import DEFAULT_DISPLAY_NAME, duration_text
from .errors import DeliveryError
from .logger import get_logger
from .models import PlanDocument, RenderedDocument, UserProfile
from .pdf_generator import esc
from .plan_text import format_plan_text

log = get_logger('fitness_wizard.email_delivery')


class EmailDelivery:
    """Sends transactional email through the configured provider."""

    def __init__(self, settings: EmailSettings):
        self.settings = settings
        self.provider = (settings.provider or 'none').lower()

    @property
    def enabled(self) -> bool:
        return self.settings.enabled

    @property
    def sender(self) -> str:
        return f"{self.settings.from_name} <{self.settings.from_email}>"

    def send_message(
        self,
        to_email: str,
        subject: str,
        plain_text: str,
        html: str,
        attachments: Sequence[RenderedDocument] = (),
    ) -> Tuple[bool, str]:
        """
        Send one message with optional PDF attachments.

        Returns:
            (success, message) tuple
        """
        if self.provider == 'none':
            return False, "Email delivery disabled (provider=none). Set WIZARD_EMAIL_PROVIDER or update config.yaml"

        senders = {
            'sendgrid': self._send_via_sendgrid,
            'smtp': self._send_via_smtp,
            'file': self._save_to_file,
        }
        send = senders.get(self.provider)
        if send is None:
            return False, f"Unknown email provider: {self.provider}"

        try:
            message = send(to_email, subject, plain_text, html, list(attachments))
        except DeliveryError as e:
            log.error(f"Email send failed: {e}", provider=self.provider, to=to_email)
            return False, str(e)

        log.info(message, provider=self.provider, to=to_email, attachments=len(attachments))
        return True, message

    def _send_via_sendgrid(self, to_email, subject, plain_text, html,
                           attachments: List[RenderedDocument]) -> str:
        """Send via SendGrid API."""
        import sendgrid
        from sendgrid.helpers.mail import Attachment, Disposition, FileContent, FileName, FileType, Mail

        if not self.settings.sendgrid_api_key:
            raise DeliveryError("SENDGRID_API_KEY not set")

        message = Mail(
            from_email=(self.settings.from_email, self.settings.from_name),
            to_emails=to_email,
            subject=subject,
            plain_text_content=plain_text,
            html_content=html,
        )
        if self.settings.reply_to:
            message.reply_to = self.settings.reply_to

        for document in attachments:
            message.add_attachment(Attachment(
                FileContent(base64.b64encode(document.content).decode()),
                FileName(document.filename),
                FileType(document.mime_type),
                Disposition('attachment'),
            ))

        try:
            sg = sendgrid.SendGridAPIClient(self.settings.sendgrid_api_key)
            response = sg.send(message)
        except Exception as e:
            raise DeliveryError(f"SendGrid error: {e}") from e

        if response.status_code not in (200, 201, 202):
            raise DeliveryError(f"SendGrid returned status {response.status_code}")
        return f"Email sent via SendGrid (status {response.status_code})"

    def _send_via_smtp(self, to_email, subject, plain_text, html,
                       attachments: List[RenderedDocument]) -> str:
        """Send via SMTP."""
        settings = self.settings
        if not settings.smtp_user or not settings.smtp_pass:
            raise DeliveryError("SMTP credentials not configured (SMTP_USER, SMTP_PASS)")

        msg = MIMEMultipart('mixed')
        msg['Subject'] = subject
        msg['From'] = self.sender
        msg['To'] = to_email
        if settings.reply_to:
            msg['Reply-To'] = settings.reply_to

        body = MIMEMultipart('alternative')
        body.attach(MIMEText(plain_text, 'plain', 'utf-8'))
        body.attach(MIMEText(html, 'html', 'utf-8'))
        msg.attach(body)

        for document in attachments:
            maintype, subtype = document.mime_type.split('/', 1)
            part = MIMEBase(maintype, subtype)
            part.set_payload(document.content)
            encoders.encode_base64(part)
            part.add_header('Content-Disposition', f'attachment; filename="{document.filename}"')
            msg.attach(part)

        try:
            with smtplib.SMTP(settings.smtp_host, settings.smtp_port) as server:
                server.starttls()
                server.login(settings.smtp_user, settings.smtp_pass)
                server.send_message(msg)
        except (smtplib.SMTPException, OSError) as e:
            raise DeliveryError(f"SMTP error: {e}") from e

        return f"Email sent via SMTP ({settings.smtp_host})"

    def _save_to_file(self, to_email, subject, plain_text, html,
                      attachments: List[RenderedDocument]) -> str:
        """Save email to file (for testing)."""
        if self.settings.preview_dir:
            output_dir = Path(self.settings.preview_dir)
        else:
            output_dir = Path.home() / 'Downloads' / 'email_previews'

        try:
            output_dir.mkdir(parents=True, exist_ok=True)

            timestamp = datetime.now().strftime('%Y%m%d_%H%M%S_%f')
            recipient = re.sub(r'[^a-z0-9]+', '-', to_email.lower()).strip('-')
            stem = f"{timestamp}_{recipient}"

            with open(output_dir / f"{stem}_email.txt", 'w', encoding='utf-8') as f:
                f.write(f"To: {to_email}\n")
                f.write(f"From: {self.sender}\n")
                f.write(f"Subject: {subject}\n")
                f.write("---\n\n")
                f.write(plain_text)

            with open(output_dir / f"{stem}_email.html", 'w', encoding='utf-8') as f:
                f.write(html)

            for document in attachments:
                (output_dir / f"{stem}_{document.filename}").write_bytes(document.content)
        except OSError as e:
            raise DeliveryError(f"Could not write email preview: {e}") from e

        return f"Email preview saved to {output_dir}"


# =============================================================================
# MESSAGE BODIES
# =============================================================================

EMAIL_CSS = """
body { font-family: -apple-system, BlinkMacSystemFont, 'Segoe UI', Roboto, sans-serif; line-height: 1.6; color: #333; }
.container { max-width: 600px; margin: 0 auto; padding: 20px; }
h1 { color: #7c3aed; }
.note { background: #f0f9ff; padding: 15px; border-radius: 8px; border-left: 4px solid #7c3aed; margin: 20px 0; }
.footer { color: #666; font-size: 12px; margin-top: 30px; border-top: 1px solid #ddd; padding-top: 15px; }
"""


def _wrap_html(body: str) -> str:
    return f"""<!DOCTYPE html>
<html>
<head><meta charset="UTF-8"><style>{EMAIL_CSS}</style></head>
<body>
<div class="container">
{body}
<div class="footer">This email was sent automatically by the AI Fitness Wizard.</div>
</div>
</body>
</html>
"""


def plan_email_subject(profile: UserProfile) -> str:
    return f"Your Personalized {duration_text(profile.timeline)} Fitness Plan 🚀"


def build_plan_email(profile: UserProfile, plan: Optional[PlanDocument]) -> Tuple[str, str, str]:
    """(subject, plain_text, html) for the main plan email."""
    first_name = profile.first_name or DEFAULT_DISPLAY_NAME
    bonus_note = ''
    if profile.is_multi_cycle:
        bonus_note = ("Because you chose a longer journey, your bonus roadmap "
                      "is on its way in a separate email.")

    plain_text = f"Hi {first_name},\n\nYour personalized fitness plan is ready! The PDF is attached.\n\n"
    if bonus_note:
        plain_text += bonus_note + "\n\n"
    if profile.bmi is not None:
        plain_text += f"Your current BMI: {profile.bmi} ({profile.bmi_category})\n\n"
    if plan is not None:
        plain_text += format_plan_text(plan, profile.timeline) + "\n"
    plain_text += "Stay consistent!\nThe Fitness Wizard Team\n"

    html = f"""<h1>Your Plan is Ready! 🚀</h1>
<p>Hi {esc(first_name)},</p>
<p>Your personalized <strong>{duration_text(profile.timeline)}</strong> fitness plan is attached to this email
(desktop and mobile versions).</p>
"""
    if bonus_note:
        html += f'<div class="note"><p style="margin: 0;">{bonus_note}</p></div>\n'
    html += "<p>Stay consistent!<br><strong>The Fitness Wizard Team</strong></p>"

    return plan_email_subject(profile), plain_text, _wrap_html(html)


def build_bonus_email(profile: UserProfile) -> Tuple[str, str, str]:
    """(subject, plain_text, html) for the bonus roadmap follow-up."""
    first_name = profile.first_name or DEFAULT_DISPLAY_NAME
    duration = duration_text(profile.timeline)
    subject = f"Your Bonus {duration} Roadmap! 🎁"

    plain_text = (
        f"Hi {first_name},\n\n"
        f"As promised, here is your {duration} bonus roadmap ({roadmap_title(profile.timeline)}) "
        "to guide your long-term success.\n\n"
        "It includes your milestones, progression phases, and key focus areas for the next few months.\n\n"
        "Keep crushing your goals!\nThe Fitness Wizard Team\n"
    )

    html = f"""<h1>Your Bonus Roadmap is Here! 🎁</h1>
<p>Hi {esc(first_name)},</p>
<p>As promised, here is your <strong>{duration}</strong> bonus roadmap to guide your long-term success.</p>
<div class="note"><p style="margin: 0;">This roadmap includes your milestones, progression phases,
and key focus areas for the next few months.</p></div>
<p>Keep crushing your goals!<br><strong>The Fitness Wizard Team</strong></p>"""

    return subject, plain_text, _wrap_html(html)
