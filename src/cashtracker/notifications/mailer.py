# Copyright (C) 2026 Bernardo Gómez Bey
# SPDX-License-Identifier: AGPL-3.0-or-later

"""Account emails.

Services only emit :class:`EmailEvent` values through a ``notify`` callable.
The app hands each event to :meth:`Mailer.deliver` as a background task, so a
failed delivery is logged and never reaches the request that caused it.
"""

from __future__ import annotations

import smtplib
from dataclasses import dataclass
from email.message import EmailMessage
from pathlib import Path
from typing import Callable, Dict

import structlog
from jinja2 import Environment, FileSystemLoader, select_autoescape

from cashtracker.core import config

TEMPLATES_DIR = Path(__file__).resolve().parent / "templates"

CONFIRM_ACCOUNT = "confirm_account"
RESET_PASSWORD = "reset_password"

SUBJECTS: Dict[str, str] = {
    CONFIRM_ACCOUNT: "CashTracker - Confirm your account",
    RESET_PASSWORD: "CashTracker - Reset your password",
}

logger = structlog.get_logger(__name__)


@dataclass(frozen=True)
class EmailEvent:
    kind: str
    email: str
    name: str
    token: str


Notifier = Callable[[EmailEvent], None]


class Mailer:
    def __init__(self, templates_dir: Path = TEMPLATES_DIR):
        self._env = Environment(
            loader=FileSystemLoader(str(templates_dir)),
            autoescape=select_autoescape(["html", "j2"]),
        )

    def render(self, event: EmailEvent) -> EmailMessage:
        if event.kind not in SUBJECTS:
            raise ValueError(f"Unknown email kind '{event.kind}'")
        html = self._env.get_template(f"{event.kind}.html.j2").render(
            name=event.name,
            token=event.token,
            frontend_url=config.frontend_url(),
        )
        msg = EmailMessage()
        msg["From"] = config.mail_from()
        msg["To"] = event.email
        msg["Subject"] = SUBJECTS[event.kind]
        msg.set_content(f"Your CashTracker code is: {event.token}")
        msg.add_alternative(html, subtype="html")
        return msg

    def send(self, msg: EmailMessage) -> bool:
        smtp = config.smtp_settings()
        if not smtp["host"]:
            logger.warning("email_delivery_skipped", to=msg["To"], reason="no_smtp_host")
            return False
        with smtplib.SMTP(smtp["host"], smtp["port"], timeout=30) as client:
            if smtp["starttls"]:
                client.starttls()
            if smtp["user"]:
                client.login(smtp["user"], smtp["password"])
            client.send_message(msg)
        return True

    def deliver(self, event: EmailEvent) -> bool:
        """Render and send. Returns False instead of raising on any failure."""
        try:
            sent = self.send(self.render(event))
        except Exception:
            logger.exception("email_delivery_failed", kind=event.kind, to=event.email)
            return False
        if sent:
            logger.info("email_delivered", kind=event.kind, to=event.email)
        return sent
