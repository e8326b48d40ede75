"""
Outbound attendance email through Brevo's transactional API.

Every send attempt writes an EmailLog row (sent, failed or dry_run).
Delivery is best-effort: send_email reports failures in its result and
in the log, it never raises. Each API call is bounded by
EMAIL_TIMEOUT_SECONDS.
"""

import os
import re
from flask import current_app
import sib_api_v3_sdk
from sib_api_v3_sdk.rest import ApiException

from rollcall import db
from rollcall.models import EmailLog

PLACEHOLDER = r'\{\{\s*params\.%s\s*\}\}'


class EmailService:
    """Brevo client bound to a Flask app."""

    def __init__(self, app=None):
        self.app = app
        self._client = None

    def init_app(self, app):
        self.app = app
        self._client = None

    @property
    def client(self):
        """Lazily built TransactionalEmailsApi; needs BREVO_API_KEY."""
        if self._client is None:
            api_key = current_app.config.get('BREVO_API_KEY')
            if not api_key:
                raise ValueError("BREVO_API_KEY is not configured")

            configuration = sib_api_v3_sdk.Configuration()
            configuration.api_key['api-key'] = api_key
            self._client = sib_api_v3_sdk.TransactionalEmailsApi(sib_api_v3_sdk.ApiClient(configuration))
        return self._client

    def render(self, template_file: str, params: dict) -> str:
        path = os.path.join(current_app.root_path, 'templates', template_file)
        with open(path, 'r', encoding='utf-8') as f:
            html = f.read()
        for key, value in params.items():
            html = re.sub(PLACEHOLDER % re.escape(key), lambda _: str(value), html)
        return html

    def _deliver(self, to_email: str, to_name: str, subject: str, html: str) -> str:
        message = sib_api_v3_sdk.SendSmtpEmail(
            sender={
                'name': current_app.config.get('EMAIL_SENDER_NAME'),
                'email': current_app.config.get('EMAIL_SENDER_ADDRESS'),
            },
            to=[{'email': to_email, 'name': to_name}],
            subject=subject,
            html_content=html,
        )
        response = self.client.send_transac_email(
            message,
            _request_timeout=current_app.config.get('EMAIL_TIMEOUT_SECONDS', 10)
        )
        return response.message_id

    def send_email(self, to_email: str, to_name: str, subject: str, template_file: str, params: dict,
                   email_type: str, event_id: int = None, dry_run: bool = None) -> dict:
        """
        Render `template_file` with `params` and send it to one recipient.

        `dry_run` defaults to the EMAIL_DRY_RUN setting; a dry run only
        writes the log row.

        Returns:
            dict with 'success', 'message_id' and 'error'
        """
        if dry_run is None:
            dry_run = current_app.config.get('EMAIL_DRY_RUN', False)

        log = EmailLog(
            email_type=email_type,
            recipient_email=to_email,
            subject=subject,
            event_id=event_id,
            status='pending'
        )
        db.session.add(log)

        if dry_run:
            log.status = 'dry_run'
            log.error_message = 'Dry run - email not sent'
            db.session.commit()
            return {'success': True, 'message_id': 'dry_run', 'error': None}

        try:
            message_id = self._deliver(to_email, to_name, subject, self.render(template_file, params))
        except ApiException as e:
            current_app.logger.error(f"Brevo rejected {email_type} email to {to_email}: {e}")
            return self._failed(log, e)
        except Exception as e:
            current_app.logger.error(f"Could not send {email_type} email to {to_email}: {e}")
            return self._failed(log, e)

        log.brevo_message_id = message_id
        log.status = 'sent'
        db.session.commit()
        return {'success': True, 'message_id': message_id, 'error': None}

    @staticmethod
    def _failed(log: EmailLog, error: Exception) -> dict:
        log.status = 'failed'
        log.error_message = str(error)
        db.session.commit()
        return {'success': False, 'message_id': None, 'error': str(error)}


email_service = EmailService()
