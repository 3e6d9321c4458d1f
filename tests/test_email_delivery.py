"""
Tests for the email provider layer and message bodies.

Run with: pytest tests/test_email_delivery.py -v
"""

import smtplib
from pathlib import Path
from unittest.mock import MagicMock, patch

from fitness_wizard.config_loader import EmailSettings
from fitness_wizard.email_delivery import EmailDelivery, build_bonus_email, build_plan_email
from fitness_wizard.models import RenderedDocument, UserProfile

ATTACHMENT = RenderedDocument('Your_4_Week_Plan.pdf', b'%PDF-1.7 test')


class TestProviders:
    """Tests for provider selection and sending."""

    def test_disabled_provider(self):
        delivery = EmailDelivery(EmailSettings(provider='none'))
        ok, message = delivery.send_message('jo@example.com', 'S', 'text', '<p>html</p>')
        assert not ok
        assert 'disabled' in message
        assert not delivery.enabled

    def test_unknown_provider(self):
        ok, message = EmailDelivery(EmailSettings(provider='pigeon')).send_message('a@b.co', 'S', 't', 'h')
        assert not ok
        assert 'Unknown email provider' in message

    def test_file_provider_writes_preview(self, file_email_settings):
        delivery = EmailDelivery(file_email_settings)
        ok, message = delivery.send_message('jo@example.com', 'Subject line', 'plain body',
                                            '<p>html</p>', [ATTACHMENT])
        assert ok
        outbox = Path(file_email_settings.preview_dir)
        txt = next(outbox.glob('*_email.txt')).read_text(encoding='utf-8')
        assert 'To: jo@example.com' in txt
        assert 'Subject: Subject line' in txt
        assert 'plain body' in txt
        assert next(outbox.glob('*_Your_4_Week_Plan.pdf')).read_bytes() == b'%PDF-1.7 test'

    def test_smtp_requires_credentials(self):
        ok, message = EmailDelivery(EmailSettings(provider='smtp')).send_message('a@b.co', 'S', 't', 'h')
        assert not ok
        assert 'SMTP credentials' in message

    def test_smtp_sends_with_attachment(self):
        settings = EmailSettings(provider='smtp', smtp_user='user', smtp_pass='pass')
        with patch('fitness_wizard.email_delivery.smtplib.SMTP') as mock_smtp:
            server = mock_smtp.return_value.__enter__.return_value
            ok, _ = EmailDelivery(settings).send_message('a@b.co', 'S', 't', 'h', [ATTACHMENT])
        assert ok
        server.starttls.assert_called_once()
        server.login.assert_called_once_with('user', 'pass')
        msg = server.send_message.call_args.args[0]
        assert msg['To'] == 'a@b.co'
        filenames = [part.get_filename() for part in msg.walk() if part.get_filename()]
        assert filenames == ['Your_4_Week_Plan.pdf']

    def test_smtp_failure_reported(self):
        settings = EmailSettings(provider='smtp', smtp_user='user', smtp_pass='pass')
        with patch('fitness_wizard.email_delivery.smtplib.SMTP',
                   side_effect=smtplib.SMTPConnectError(421, 'busy')):
            ok, message = EmailDelivery(settings).send_message('a@b.co', 'S', 't', 'h')
        assert not ok
        assert message.startswith('SMTP error')

    def test_sendgrid_requires_key(self):
        ok, message = EmailDelivery(EmailSettings(provider='sendgrid')).send_message('a@b.co', 'S', 't', 'h')
        assert not ok
        assert 'SENDGRID_API_KEY' in message

    def test_sendgrid_sends(self):
        settings = EmailSettings(provider='sendgrid', sendgrid_api_key='SG.key')
        with patch('sendgrid.SendGridAPIClient') as mock_client:
            mock_client.return_value.send.return_value = MagicMock(status_code=202)
            ok, message = EmailDelivery(settings).send_message('a@b.co', 'S', 't', 'h', [ATTACHMENT])
        assert ok
        assert '202' in message
        sent = mock_client.return_value.send.call_args.args[0].get()
        assert sent['attachments'][0]['filename'] == 'Your_4_Week_Plan.pdf'

    def test_sendgrid_bad_status(self):
        settings = EmailSettings(provider='sendgrid', sendgrid_api_key='SG.key')
        with patch('sendgrid.SendGridAPIClient') as mock_client:
            mock_client.return_value.send.return_value = MagicMock(status_code=400)
            ok, message = EmailDelivery(settings).send_message('a@b.co', 'S', 't', 'h')
        assert not ok
        assert '400' in message


class TestMessageBodies:
    """Tests for plan and bonus email content."""

    def test_plan_email(self, profile, plan):
        subject, plain_text, html = build_plan_email(profile, plan)
        assert subject == 'Your Personalized 4-Week Fitness Plan 🚀'
        assert plain_text.startswith('Hi Jo,')
        assert 'Week 1: Foundation' in plain_text
        assert 'bonus roadmap' not in plain_text
        assert 'Hi Jo,' in html

    def test_plan_email_mentions_bonus_for_multi_cycle(self, multi_cycle_profile, plan):
        subject, plain_text, html = build_plan_email(multi_cycle_profile, plan)
        assert subject == 'Your Personalized 3-Month Fitness Plan 🚀'
        assert 'bonus roadmap' in plain_text
        assert 'bonus roadmap' in html

    def test_plan_email_includes_bmi(self, plan):
        profile = UserProfile.from_dict({'name': 'Jo', 'email': 'jo@x.co', 'weight': '70', 'height': '175'})
        _, plain_text, _ = build_plan_email(profile, plan)
        assert 'Your current BMI: 22.9 (Healthy)' in plain_text

    def test_bonus_email(self, multi_cycle_profile):
        subject, plain_text, html = build_bonus_email(multi_cycle_profile)
        assert subject == 'Your Bonus 3-Month Roadmap! 🎁'
        assert '3-Month Transformation' in plain_text
        assert 'Your Bonus Roadmap is Here!' in html
