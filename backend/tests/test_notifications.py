import io
from datetime import date, datetime, timedelta

import pytest

from billtracker.db import models
from billtracker.db.repositories import NotificationLedger
from billtracker.services.errors import DeliveryFailure, NoDestination
from billtracker.services.files import INVOICE_DIR
from billtracker.services.notifications import (
    NotificationDispatcher,
    NotificationService,
    compose_reminder,
    resolve_destination,
)

# 18:00 in São Paulo on 2024-06-08
EVENING = datetime(2024, 6, 8, 21, 0)
# 09:00 in São Paulo on 2024-06-10
DUE_MORNING = datetime(2024, 6, 10, 12, 0)

PIX = "Chave PIX: 123.456.789-00\n<Banco & Cia> \"Conta\" 'corrente'\n  fim"


class TestCompose:
    def test_regular_subject_and_body(self, make_user, make_bill):
        user = make_user()
        bill = make_bill(user, name="Conta de luz", category="Casa", due_date=date(2024, 6, 10))
        msg = compose_reminder(user, bill, today=date(2024, 6, 8))
        assert msg.to == "ana@example.com"
        assert msg.subject == "⚠️ Lembrete: Conta de luz vence em 2 dias"
        assert "R$ 120.50" in msg.text
        assert "10/06/2024" in msg.html
        assert "Categoria: Casa" in msg.text
        assert msg.attachments == []

    def test_urgent_subject(self, make_user, make_bill):
        user = make_user()
        bill = make_bill(user, due_date=date(2024, 6, 10))
        msg = compose_reminder(user, bill, is_urgent=True, today=date(2024, 6, 10))
        assert msg.subject.startswith("🔥 URGENTE - ")
        assert "vence HOJE" in msg.subject

    def test_tomorrow(self, make_user, make_bill):
        user = make_user()
        bill = make_bill(user, due_date=date(2024, 6, 10))
        assert compose_reminder(user, bill, today=date(2024, 6, 9)).subject.endswith("vence AMANHÃ")

    def test_payment_instructions_reproduced_verbatim(self, make_user, make_bill):
        user = make_user()
        bill = make_bill(user, name="Água <SAAE>", payment_instructions=PIX)
        msg = compose_reminder(user, bill, today=date(2024, 6, 8))
        assert PIX in msg.text
        assert PIX in msg.html
        # the bill name is still escaped in the html body
        assert "Água &lt;SAAE&gt;" in msg.html

    def test_notification_email_overrides_login(self, make_user, make_bill):
        user = make_user(notification_email="alertas@example.com")
        assert compose_reminder(user, make_bill(user), today=date(2024, 6, 8)).to == "alertas@example.com"

    def test_no_destination(self):
        with pytest.raises(NoDestination):
            resolve_destination(models.User(id=9, name="Sem email", email=None, notification_email=None))

    def test_invoice_attached(self, make_user, make_bill, file_store):
        user = make_user()
        stored = file_store.save(INVOICE_DIR, "boleto-junho.pdf", io.BytesIO(b"%PDF-1.4 boleto"))
        bill = make_bill(user, invoice_file=stored, invoice_filename="boleto-junho.pdf")
        msg = compose_reminder(user, bill, today=date(2024, 6, 8), file_store=file_store)
        assert len(msg.attachments) == 1
        att = msg.attachments[0]
        assert att.filename == "boleto-junho.pdf"
        assert att.content == b"%PDF-1.4 boleto"
        assert att.content_type == "application/pdf"

    def test_missing_invoice_is_skipped(self, make_user, make_bill, file_store):
        user = make_user()
        bill = make_bill(user, invoice_file="gone.pdf", invoice_filename="gone.pdf")
        msg = compose_reminder(user, bill, today=date(2024, 6, 8), file_store=file_store)
        assert msg.attachments == []


class TestDispatcher:
    def test_success_appends_record(self, db, mailer, make_user, make_bill):
        user = make_user()
        bill = make_bill(user)
        ledger = NotificationLedger(db)
        record = NotificationDispatcher(mailer, ledger).dispatch(user, bill, now=EVENING)

        assert len(mailer.sent) == 1
        assert record.sent_at == EVENING
        assert record.channel is models.NotificationChannel.email
        assert record.message == mailer.sent[0].subject
        assert [r.id for r in ledger.find_by_bill(bill.id)] == [record.id]

    def test_failure_records_nothing(self, db, mailer, make_user, make_bill):
        user = make_user()
        bill = make_bill(user)
        mailer.fail_for.add(user.email)
        ledger = NotificationLedger(db)
        with pytest.raises(DeliveryFailure):
            NotificationDispatcher(mailer, ledger).dispatch(user, bill, now=EVENING)
        assert ledger.find_by_bill(bill.id) == []


class TestRegularSweep:
    def test_sends_once_per_bill(self, db, mailer, make_user, make_bill):
        user = make_user()
        make_bill(user, due_date=date(2024, 6, 10))
        make_bill(user, name="Fora da janela", due_date=date(2024, 6, 20))
        make_bill(user, name="Paga", due_date=date(2024, 6, 9), status=models.BillStatus.paid,
                  paid_at=datetime(2024, 6, 1))
        service = NotificationService.from_session(db, mailer)

        assert service.run_regular_notification_sweep(now=EVENING) == 1
        assert service.run_regular_notification_sweep(now=EVENING + timedelta(days=1)) == 0
        assert [m.subject for m in mailer.sent] == ["⚠️ Lembrete: Conta de luz vence em 2 dias"]

    def test_failing_bill_does_not_stop_sweep(self, db, mailer, make_user, make_bill):
        broken = make_user(email="quebrado@example.com")
        ok = make_user(email="ok@example.com")
        broken_bill = make_bill(broken, due_date=date(2024, 6, 9))
        make_bill(ok, due_date=date(2024, 6, 10))
        mailer.fail_for.add("quebrado@example.com")
        service = NotificationService.from_session(db, mailer)

        assert service.run_regular_notification_sweep(now=EVENING) == 1
        assert [m.to for m in mailer.sent] == ["ok@example.com"]

        # nothing was recorded for the failed one, so the next run retries it
        mailer.fail_for.clear()
        assert service.run_regular_notification_sweep(now=EVENING + timedelta(hours=1)) == 1
        assert len(NotificationLedger(db).find_by_bill(broken_bill.id)) == 1

    def test_uses_each_users_window(self, db, mailer, make_user, make_bill):
        user = make_user(notification_days_before=10)
        make_bill(user, due_date=date(2024, 6, 17))
        assert NotificationService.from_session(db, mailer).run_regular_notification_sweep(now=EVENING) == 1


class TestUrgentSweep:
    def test_repeats_after_cooldown(self, db, mailer, make_user, make_bill):
        user = make_user()
        make_bill(user, due_date=date(2024, 6, 10))
        make_bill(user, name="Amanhã", due_date=date(2024, 6, 11))
        service = NotificationService.from_session(db, mailer)

        assert service.run_urgent_notification_sweep(now=DUE_MORNING) == 1
        assert service.run_urgent_notification_sweep(now=DUE_MORNING + timedelta(hours=1)) == 0
        assert service.run_urgent_notification_sweep(now=DUE_MORNING + timedelta(hours=3)) == 1
        assert all(m.subject.startswith("🔥 URGENTE - ") for m in mailer.sent)

    def test_regular_and_urgent_are_independent(self, db, mailer, make_user, make_bill):
        user = make_user()
        make_bill(user, due_date=date(2024, 6, 10))
        service = NotificationService.from_session(db, mailer)

        assert service.run_regular_notification_sweep(now=EVENING) == 1
        assert service.run_urgent_notification_sweep(now=DUE_MORNING) == 1
        assert len(mailer.sent) == 2
