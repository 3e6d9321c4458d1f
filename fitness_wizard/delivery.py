"""
Delivery dispatcher: hands the rendered plan back to the caller, emails it,
and queues the bonus roadmap for multi-cycle timelines.

Email problems are reported in the result, never raised. The bonus roadmap
runs on the background queue and its outcome is not reported to the caller.
"""

from typing import Callable, List, Optional

from .background import BackgroundQueue
from .bonus_roadmap import render_bonus_pdf
from .email_delivery import EmailDelivery, build_bonus_email, build_plan_email
from .errors import SecondaryRequestError
from .logger import get_logger
from .models import DeliveryOptions, DeliveryResult, PlanDocument, RenderedDocument, UserProfile

log = get_logger('fitness_wizard.delivery')

BONUS_TASK_NAME = 'generate_bonus'


def is_bonus_eligible(profile: UserProfile) -> bool:
    return profile.is_multi_cycle


class DeliveryDispatcher:
    """Routes a rendered plan to the response, the inbox and the bonus queue."""

    def __init__(
        self,
        email: EmailDelivery,
        queue: BackgroundQueue,
        bonus_renderer: Callable[[UserProfile], RenderedDocument] = render_bonus_pdf,
    ):
        self.email = email
        self.queue = queue
        self.bonus_renderer = bonus_renderer

    def deliver(
        self,
        profile: UserProfile,
        documents: List[RenderedDocument],
        options: DeliveryOptions,
        plan: Optional[PlanDocument] = None,
    ) -> DeliveryResult:
        result = DeliveryResult(is_bonus_eligible=is_bonus_eligible(profile))

        if options.pdf and documents:
            result.pdf_url = documents[0].data_uri()
            if len(documents) > 1:
                result.mobile_pdf_url = documents[1].data_uri()

        if options.email:
            if not self.email.enabled:
                log.warning("Email requested but delivery is disabled", to=profile.email)
            else:
                subject, plain_text, html = build_plan_email(profile, plan)
                ok, message = self.email.send_message(profile.email, subject, plain_text, html, documents)
                result.email_sent = ok
                if not ok:
                    result.email_error = message

        if result.is_bonus_eligible:
            self.queue.submit(BONUS_TASK_NAME, self.generate_bonus, profile, options)
            result.bonus_status = 'queued'
            log.info("Bonus roadmap queued", timeline=profile.timeline, to=profile.email)

        return result

    def generate_bonus(self, profile: UserProfile, options: DeliveryOptions) -> str:
        """
        Render the bonus roadmap and email it when wanted.

        Returns 'not_eligible', 'generated' or 'sent'. Raises
        SecondaryRequestError if the email could not be sent.
        """
        if not is_bonus_eligible(profile):
            log.info("Not eligible for bonus, skipping", timeline=profile.timeline)
            return 'not_eligible'

        document = self.bonus_renderer(profile)
        log.success("Bonus roadmap generated", filename=document.filename)

        if not (options.email and self.email.enabled):
            return 'generated'

        subject, plain_text, html = build_bonus_email(profile)
        ok, message = self.email.send_message(profile.email, subject, plain_text, html, [document])
        if not ok:
            raise SecondaryRequestError(f"Bonus email failed: {message}")
        return 'sent'
