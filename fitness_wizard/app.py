"""
Fitness Wizard API

Receives wizard submissions, generates a 4-week plan with the language
model, renders it to PDF, and delivers it inline and/or by email.

Run locally:
    fitness-wizard            (or: python -m fitness_wizard.app)
"""

import os
import traceback
from typing import Callable, List, Optional

from flask import Flask, jsonify, request

from .background import BackgroundQueue
from .config_loader import Config, get_config
from .delivery import DeliveryDispatcher, is_bonus_eligible
from .email_delivery import EmailDelivery
from .errors import RenderError, UpstreamError, ValidationError
from .logger import configure_logging, get_logger
from .models import DeliveryOptions, PlanDocument, RenderedDocument, UserProfile
from .pdf_generator import render_plan_documents
from .plan_generator import PlanGenerator
from .plan_text import format_plan_text
from .profile_validator import require_valid_profile

logger = get_logger('fitness_wizard.app')

Renderer = Callable[[UserProfile, PlanDocument], List[RenderedDocument]]


def create_app(
    config: Optional[Config] = None,
    generator: Optional[PlanGenerator] = None,
    renderer: Optional[Renderer] = None,
    dispatcher: Optional[DeliveryDispatcher] = None,
    queue: Optional[BackgroundQueue] = None,
) -> Flask:
    """Build the Flask app. Any collaborator can be swapped for a fake."""
    config = config or get_config()
    llm_settings = config.llm_settings()
    email_settings = config.email_settings()

    generator = generator or PlanGenerator(llm_settings)
    renderer = renderer or render_plan_documents
    queue = queue or BackgroundQueue(max_workers=config.bonus_workers)
    dispatcher = dispatcher or DeliveryDispatcher(EmailDelivery(email_settings), queue)

    show_details = config.is_development or bool(config.get('app.debug_details', False))

    app = Flask(__name__)
    app.extensions['fitness_wizard'] = {
        'config': config,
        'generator': generator,
        'renderer': renderer,
        'dispatcher': dispatcher,
        'queue': queue,
    }

    def error_response(message: str, status: int):
        body = {'error': message}
        if show_details:
            body['details'] = traceback.format_exc()
        return jsonify(body), status

    # =========================================================================
    # SECURITY HEADERS
    # =========================================================================

    @app.after_request
    def set_security_headers(response):
        response.headers['X-Content-Type-Options'] = 'nosniff'
        response.headers['X-Frame-Options'] = 'DENY'
        response.headers['Referrer-Policy'] = 'strict-origin-when-cross-origin'
        return response

    # =========================================================================
    # ROUTES
    # =========================================================================

    @app.route('/health', methods=['GET'])
    def health():
        """Health check endpoint with dependency checks."""
        checks = {
            'service': 'fitness-wizard',
            'status': 'ok',
            'llm_configured': llm_settings.is_configured,
            'email_provider': email_settings.provider,
        }

        if not checks['llm_configured']:
            checks['status'] = 'degraded'

        status_code = 200 if checks['status'] == 'ok' else 503
        return jsonify(checks), status_code

    @app.route('/api/generate-plan', methods=['POST'])
    def generate_plan():
        """Profile in; plan, PDFs and delivery status out."""
        data = request.get_json(silent=True)
        if not isinstance(data, dict):
            return jsonify({'error': 'Invalid JSON'}), 400

        profile = UserProfile.from_dict(data)
        options = DeliveryOptions.from_dict(data.get('want'))

        try:
            validation = require_valid_profile(profile, data)
        except ValidationError as e:
            logger.warning(f"Rejected submission: {e}")
            return jsonify({'error': str(e)}), 400

        for warning in validation.warnings:
            logger.warning(warning, email=profile.email)

        logger.info("Generating plan", email=profile.email, timeline=profile.timeline,
                    pdf=options.pdf, send_email=options.email)

        try:
            plan = generator.generate_plan(profile)
            documents = renderer(profile, plan)
        except UpstreamError as e:
            logger.error(f"Plan generation failed: {e}")
            return error_response('Failed to generate plan', 502)
        except RenderError as e:
            logger.exception(f"PDF rendering failed: {e}")
            return error_response('Failed to render plan', 500)
        except Exception as e:
            logger.exception(f"Generate plan error: {e}")
            return error_response('Internal server error', 500)

        result = dispatcher.deliver(profile, documents, options, plan)

        body = {
            'success': True,
            'plan': plan.to_dict(),
            'planText': format_plan_text(plan, profile.timeline),
        }
        body.update(result.to_response())
        logger.success("Plan delivered", email=profile.email,
                       email_sent=result.email_sent, bonus=result.bonus_status)
        return jsonify(body)

    @app.route('/api/generate-bonus', methods=['POST'])
    def generate_bonus():
        """Bonus roadmap on demand; the plan endpoint queues the same task."""
        data = request.get_json(silent=True) or {}
        form_data = data.get('formData') if isinstance(data, dict) else None
        if not isinstance(form_data, dict) or not form_data.get('email'):
            return jsonify({'error': 'Missing form data'}), 400

        profile = UserProfile.from_dict(form_data)
        if not is_bonus_eligible(profile):
            logger.info("Not eligible for bonus, skipping", timeline=profile.timeline)
            return jsonify({'success': True, 'message': 'No bonus required'})

        options = DeliveryOptions.from_dict(form_data.get('want'))
        try:
            status = dispatcher.generate_bonus(profile, options)
        except Exception as e:
            logger.exception(f"Bonus generation error: {e}")
            return error_response('Failed to generate bonus', 500)

        return jsonify({'success': True, 'status': status})

    return app


# =============================================================================
# MAIN
# =============================================================================

def main():
    config = get_config()
    configure_logging(config.get('logging.format'), config.get('logging.level'))

    app = create_app(config)
    port = int(os.environ.get('PORT', 8080))
    app.run(host='0.0.0.0', port=port, debug=config.is_development)


if __name__ == '__main__':
    main()
