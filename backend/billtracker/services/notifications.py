# billtracker/services/notifications.py
"""Reminder e-mails: compose, deliver, record, and the two scheduled sweeps.

The sweeps take no locks. Two overlapping runs could both see "no record yet"
for a bill and mail it twice, so the scheduler must not start a sweep while
the previous one is still going (billtracker.scheduler runs each job with
max_instances=1).
"""
import html
import logging
from dataclasses import dataclass, field
from datetime import date, datetime
from typing import List, Optional

from sqlalchemy.orm import Session

from billtracker.db import models
from billtracker.db.repositories import BillRepository, NotificationLedger
from billtracker.services.due_dates import local_today
from billtracker.services.eligibility import (
    DEFAULT_DAYS_BEFORE,
    is_regular_reminder_due,
    is_urgent_reminder_due,
)
from billtracker.services.errors import AttachmentMissing, DeliveryFailure, NoDestination
from billtracker.services.files import invoice_path, read_attachment
from billtracker.services.formatting import format_brl, format_date
from billtracker.services.mailer import MailAttachment

logger = logging.getLogger(__name__)

URGENT_PREFIX = "🔥 URGENTE - "


@dataclass
class ReminderMessage:
    to: str
    subject: str
    html: str
    text: str
    attachments: List[MailAttachment] = field(default_factory=list)


def resolve_destination(user: models.User) -> str:
    address = user.notification_email or user.email
    if not address:
        raise NoDestination(f"user {user.id} has no e-mail to notify")
    return address


def _when(due_date: date, today: date) -> str:
    days = (due_date - today).days
    if days == 0:
        return "HOJE"
    if days == 1:
        return "AMANHÃ"
    return f"em {days} dias"


def _invoice_attachment(bill: models.Bill, file_store) -> Optional[MailAttachment]:
    if not bill.invoice_file or file_store is None:
        return None
    path = invoice_path(bill.invoice_file)
    try:
        content = read_attachment(file_store, path)
    except AttachmentMissing:
        logger.warning("Invoice for bill %s not found in storage: %s", bill.id, path)
        return None
    return MailAttachment.guess(bill.invoice_filename or "boleto.pdf", content)


def compose_reminder(
    user: models.User,
    bill: models.Bill,
    is_urgent: bool = False,
    today: Optional[date] = None,
    file_store=None,
) -> ReminderMessage:
    today = today or local_today()
    to = resolve_destination(user)
    when = _when(bill.due_date, today)
    amount = format_brl(bill.amount)
    due = format_date(bill.due_date)
    days_before = user.notification_days_before or DEFAULT_DAYS_BEFORE

    subject = f"{URGENT_PREFIX if is_urgent else ''}⚠️ Lembrete: {bill.name} vence {when}"

    attachment = _invoice_attachment(bill, file_store)
    attachments = [attachment] if attachment else []

    # payment instructions go out exactly as stored, both bodies
    instructions = bill.payment_instructions

    name = html.escape(bill.name)
    heading = "🔥 LEMBRETE URGENTE - Vence Hoje!" if is_urgent else "Lembrete de Vencimento"
    heading_color = "#dc2626" if is_urgent else "#1e40af"
    box_style = (
        "background-color: #fee2e2; border-left: 4px solid #ef4444;" if is_urgent else "background-color: #f3f4f6;"
    )
    parts = [
        '<div style="font-family: Arial, sans-serif; max-width: 600px; margin: 0 auto;">',
        f'<h2 style="color: {heading_color};">{heading}</h2>',
        f"<p>Olá <strong>{html.escape(user.name or '')}</strong>,</p>",
        "<p>Esta conta vence HOJE! Não se esqueça de pagar.</p>"
        if is_urgent
        else "<p>Este é um lembrete de que sua conta está próxima do vencimento:</p>",
        f'<div style="{box_style} padding: 15px; border-radius: 8px; margin: 20px 0;">',
        f'<p style="margin: 5px 0;"><strong>Conta:</strong> {name}</p>',
        f'<p style="margin: 5px 0;"><strong>Valor:</strong> {amount}</p>',
        f'<p style="margin: 5px 0;"><strong>Vencimento:</strong> {due}</p>',
        f'<p style="margin: 5px 0;"><strong>Status:</strong> Vence {when}</p>',
    ]
    if bill.category:
        parts.append(f'<p style="margin: 5px 0;"><strong>Categoria:</strong> {html.escape(bill.category)}</p>')
    parts.append("</div>")
    if attachments:
        parts.append(
            '<div style="background-color: #dbeafe; padding: 15px; border-radius: 8px; margin: 20px 0;">'
            "<p><strong>📎 Boleto Anexado</strong></p>"
            "<p>O boleto desta conta está anexado a este email.</p></div>"
        )
    if instructions:
        parts.append(
            '<div style="background-color: #f0fdf4; padding: 15px; border-radius: 8px; margin: 20px 0;">'
            "<p><strong>📱 Informações do PIX</strong></p>"
            '<pre style="white-space: pre-wrap; word-wrap: break-word;">' + instructions + "</pre>"
            "<p>💡 Copie as informações acima e cole no app do seu banco para pagar via PIX</p></div>"
        )
    if is_urgent:
        parts.append("<p><strong>Atenção:</strong> Este é um lembrete urgente. A conta vence hoje!</p>")
        footer = "Você receberá lembretes a cada 3 horas enquanto a conta estiver pendente no dia do vencimento."
    else:
        parts.append("<p>Não se esqueça de realizar o pagamento para evitar juros e multas.</p>")
        footer = (
            "Este é um email automático. Você configurou para receber notificações "
            f"{days_before} dia(s) antes do vencimento."
        )
    parts.append(f'<hr><p style="font-size: 12px; color: #6b7280;">{footer}</p></div>')

    lines = [
        f"Olá {user.name},",
        "",
        f'{URGENT_PREFIX if is_urgent else ""}Este é um lembrete de que sua conta "{bill.name}" vence {when}.',
        "",
        f"Valor: {amount}",
        f"Vencimento: {due}",
    ]
    if bill.category:
        lines.append(f"Categoria: {bill.category}")
    if attachments:
        lines += ["", "📎 Boleto anexado a este email."]
    if instructions:
        lines += ["", "📱 Informações do PIX:", instructions, "",
                  "💡 Copie as informações acima e cole no app do seu banco para pagar via PIX"]
    lines.append("")
    if is_urgent:
        lines.append("ATENÇÃO: Esta conta vence HOJE! Não se esqueça de pagar.")
    else:
        lines.append("Não se esqueça de realizar o pagamento para evitar juros e multas.")

    return ReminderMessage(to=to, subject=subject, html="\n".join(parts), text="\n".join(lines), attachments=attachments)


class NotificationDispatcher:
    def __init__(self, mailer, ledger: NotificationLedger, file_store=None):
        self.mailer = mailer
        self.ledger = ledger
        self.file_store = file_store

    def dispatch(
        self, user: models.User, bill: models.Bill, is_urgent: bool = False, now: Optional[datetime] = None
    ) -> models.Notification:
        """
        Send one reminder and append it to the ledger. A delivery error raises
        DeliveryFailure and records nothing, so the next run retries.
        """
        now = now or datetime.utcnow()
        message = compose_reminder(user, bill, is_urgent, local_today(now), self.file_store)
        try:
            self.mailer.send(message.to, message.subject, message.html, message.text, message.attachments)
        except Exception as exc:
            raise DeliveryFailure(f"could not mail {message.to} about bill {bill.id}: {exc}") from exc

        record = models.Notification(
            user_id=user.id,
            bill_id=bill.id,
            channel=models.NotificationChannel.email,
            message=message.subject[:500],
            sent_at=now,
        )
        self.ledger.insert(record)
        logger.info("%s reminder for bill %s sent to %s", "Urgent" if is_urgent else "Regular", bill.id, message.to)
        return record


class NotificationService:
    def __init__(self, bills: BillRepository, ledger: NotificationLedger, dispatcher: NotificationDispatcher):
        self.bills = bills
        self.ledger = ledger
        self.dispatcher = dispatcher

    @classmethod
    def from_session(cls, db: Session, mailer, file_store=None) -> "NotificationService":
        ledger = NotificationLedger(db)
        return cls(BillRepository(db), ledger, NotificationDispatcher(mailer, ledger, file_store))

    def run_regular_notification_sweep(self, now: Optional[datetime] = None) -> int:
        now = now or datetime.utcnow()
        today = local_today(now)
        bills = self.bills.find_pending_with_owner()
        logger.info("Regular reminder sweep for %s: %d pending bill(s)", today.isoformat(), len(bills))

        sent = 0
        for bill in bills:
            user = bill.user
            try:
                records = self.ledger.find_by_bill(bill.id)
                if not is_regular_reminder_due(bill, user.notification_days_before, records, today):
                    continue
                self.dispatcher.dispatch(user, bill, is_urgent=False, now=now)
                sent += 1
            except Exception:
                self.bills.db.rollback()
                logger.exception("Regular reminder failed for bill %s (user %s)", bill.id, bill.user_id)

        logger.info("Regular reminder sweep done: %d sent", sent)
        return sent

    def run_urgent_notification_sweep(self, now: Optional[datetime] = None) -> int:
        now = now or datetime.utcnow()
        today = local_today(now)
        bills = self.bills.find_pending_with_owner(due_on=today)
        logger.info("Urgent reminder sweep for %s: %d bill(s) due today", today.isoformat(), len(bills))

        sent = 0
        for bill in bills:
            try:
                records = self.ledger.find_by_bill(bill.id)
                if not is_urgent_reminder_due(bill, records, now, today):
                    logger.debug("Bill %s reminded less than 3h ago, skipping", bill.id)
                    continue
                self.dispatcher.dispatch(bill.user, bill, is_urgent=True, now=now)
                sent += 1
            except Exception:
                self.bills.db.rollback()
                logger.exception("Urgent reminder failed for bill %s (user %s)", bill.id, bill.user_id)

        logger.info("Urgent reminder sweep done: %d sent", sent)
        return sent
