import io
import os
import zipfile

from billtracker.db import models


def _create_bill(client, headers, **overrides):
    payload = {"name": "Conta de luz", "category": "Casa", "amount": "120.50", "due_date": "2024-06-10"}
    payload.update(overrides)
    resp = client.post("/api/v1/bills", json=payload, headers=headers)
    assert resp.status_code == 201, resp.text
    return resp.json()


class TestAuth:
    def test_register_then_login(self, client):
        resp = client.post("/api/v1/auth/register", json={"name": "Ana", "email": "Ana@Example.com", "password": "segredo123"})
        assert resp.status_code == 201
        assert resp.json()["token_type"] == "bearer"

        resp = client.post("/api/v1/auth/login", json={"email": "ana@example.com", "password": "segredo123"})
        assert resp.status_code == 200
        me = client.get("/api/v1/users/me", headers={"Authorization": f"Bearer {resp.json()['access_token']}"})
        assert me.json()["email"] == "ana@example.com"
        assert me.json()["notification_days_before"] == 3

    def test_duplicate_email(self, client, auth_headers):
        auth_headers()
        resp = client.post("/api/v1/auth/register", json={"name": "Ana", "email": "ana@example.com", "password": "outrasenha"})
        assert resp.status_code == 409

    def test_wrong_password(self, client, auth_headers):
        auth_headers()
        resp = client.post("/api/v1/auth/login", json={"email": "ana@example.com", "password": "errada123"})
        assert resp.status_code == 401

    def test_bad_token(self, client):
        resp = client.get("/api/v1/bills", headers={"Authorization": "Bearer nope"})
        assert resp.status_code == 401

    def test_health(self, client):
        assert client.get("/api/v1/health").json() == {"status": "ok"}


class TestNotificationSettings:
    def test_update_and_clear(self, client, auth_headers):
        headers = auth_headers()
        resp = client.patch(
            "/api/v1/users/me/notifications",
            json={"notification_email": "alertas@example.com", "notification_days_before": 7},
            headers=headers,
        )
        assert resp.status_code == 200
        assert resp.json()["notification_email"] == "alertas@example.com"
        assert resp.json()["notification_days_before"] == 7

        resp = client.patch("/api/v1/users/me/notifications", json={"notification_email": ""}, headers=headers)
        assert resp.json()["notification_email"] is None

    def test_days_before_range(self, client, auth_headers):
        resp = client.patch("/api/v1/users/me/notifications", json={"notification_days_before": 31}, headers=auth_headers())
        assert resp.status_code == 422


class TestBills:
    def test_create_and_list(self, client, auth_headers):
        headers = auth_headers()
        _create_bill(client, headers, name="Depois", due_date="2024-07-01")
        created = _create_bill(client, headers)
        assert created["status"] == "pending"
        assert created["paid_at"] is None
        assert created["due_status"] in {"overdue", "due_today", "upcoming", "not_due"}

        names = [b["name"] for b in client.get("/api/v1/bills", headers=headers).json()]
        assert names == ["Conta de luz", "Depois"]

    def test_recurring_create(self, client, auth_headers):
        headers = auth_headers()
        resp = client.post(
            "/api/v1/bills",
            json={"name": "Aluguel", "amount": "1500", "start_date": "2024-01-31", "end_date": "2024-04-15"},
            headers=headers,
        )
        assert resp.status_code == 201
        assert [b["due_date"] for b in resp.json()] == ["2024-01-31", "2024-02-29", "2024-03-31", "2024-04-30"]

    def test_recurring_invalid_range(self, client, auth_headers):
        resp = client.post(
            "/api/v1/bills",
            json={"name": "Aluguel", "amount": "1500", "start_date": "2024-05-01", "end_date": "2024-04-01"},
            headers=auth_headers(),
        )
        assert resp.status_code == 400

    def test_missing_due_date(self, client, auth_headers):
        resp = client.post("/api/v1/bills", json={"name": "X", "amount": "10"}, headers=auth_headers())
        assert resp.status_code == 400

    def test_status_toggle_keeps_paid_at_consistent(self, client, auth_headers):
        headers = auth_headers()
        bill = _create_bill(client, headers)
        paid = client.patch(f"/api/v1/bills/{bill['id']}/status", json={"status": "paid"}, headers=headers).json()
        assert paid["status"] == "paid"
        assert paid["paid_at"] is not None
        assert paid["due_status"] == "paid"

        pending = client.patch(f"/api/v1/bills/{bill['id']}/status", json={"status": "pending"}, headers=headers).json()
        assert pending["status"] == "pending"
        assert pending["paid_at"] is None

    def test_update_rejects_null_required_fields(self, client, auth_headers):
        headers = auth_headers()
        bill = _create_bill(client, headers)
        for field in ("name", "amount", "due_date"):
            resp = client.patch(f"/api/v1/bills/{bill['id']}", json={field: None}, headers=headers)
            assert resp.status_code == 400, field
            assert field in resp.json()["detail"]

        # session still usable and the row untouched
        current = client.get(f"/api/v1/bills/{bill['id']}", headers=headers).json()
        assert current["name"] == "Conta de luz"
        assert current["amount"] == bill["amount"]
        assert current["due_date"] == "2024-06-10"

    def test_update_strips_and_rejects_blank_name(self, client, auth_headers):
        headers = auth_headers()
        bill = _create_bill(client, headers)
        url = f"/api/v1/bills/{bill['id']}"
        assert client.patch(url, json={"name": "   "}, headers=headers).status_code == 422
        resp = client.patch(url, json={"name": "  Água  "}, headers=headers)
        assert resp.status_code == 200
        assert resp.json()["name"] == "Água"

    def test_payment_instructions_stored_verbatim(self, client, auth_headers):
        headers = auth_headers()
        bill = _create_bill(client, headers)
        text = "PIX: 00020126<b>&amp;\n  linha 2"
        resp = client.patch(
            f"/api/v1/bills/{bill['id']}/payment-instructions", json={"payment_instructions": text}, headers=headers
        )
        assert resp.json()["payment_instructions"] == text

    def test_other_users_bill_is_not_found(self, client, auth_headers):
        bill = _create_bill(client, auth_headers())
        intruder = auth_headers(email="bia@example.com", name="Bia")
        assert client.get(f"/api/v1/bills/{bill['id']}", headers=intruder).status_code == 404
        assert client.patch(f"/api/v1/bills/{bill['id']}", json={"name": "x"}, headers=intruder).status_code == 404
        assert client.delete(f"/api/v1/bills/{bill['id']}", headers=intruder).status_code == 404

    def test_delete_removes_attachment(self, client, auth_headers, file_store):
        headers = auth_headers()
        bill = _create_bill(client, headers)
        resp = client.post(
            f"/api/v1/bills/{bill['id']}/invoice",
            files={"file": ("boleto.pdf", b"%PDF boleto", "application/pdf")},
            headers=headers,
        )
        assert resp.status_code == 200
        assert resp.json()["invoice_filename"] == "boleto.pdf"
        stored = os.listdir(os.path.join(file_store.root, "invoices"))
        assert len(stored) == 1

        assert client.delete(f"/api/v1/bills/{bill['id']}", headers=headers).status_code == 204
        assert os.listdir(os.path.join(file_store.root, "invoices")) == []
        assert client.get(f"/api/v1/bills/{bill['id']}", headers=headers).status_code == 404


class TestAttachments:
    def test_upload_replace_and_download(self, client, auth_headers, file_store):
        headers = auth_headers()
        bill = _create_bill(client, headers)
        url = f"/api/v1/bills/{bill['id']}/proof"
        client.post(url, files={"file": ("pix.png", b"first", "image/png")}, headers=headers)
        client.post(url, files={"file": ("pix2.png", b"second", "image/png")}, headers=headers)

        assert len(os.listdir(os.path.join(file_store.root, "proofs"))) == 1
        resp = client.get(url, headers=headers)
        assert resp.status_code == 200
        assert resp.content == b"second"
        assert "pix2.png" in resp.headers["content-disposition"]

    def test_rejects_extension_and_size(self, client, auth_headers):
        headers = auth_headers()
        bill = _create_bill(client, headers)
        url = f"/api/v1/bills/{bill['id']}/invoice"
        assert client.post(url, files={"file": ("virus.exe", b"MZ", "application/octet-stream")}, headers=headers).status_code == 400
        # test settings cap uploads at 1 KiB
        assert client.post(url, files={"file": ("big.pdf", b"x" * 2048, "application/pdf")}, headers=headers).status_code == 413

    def test_download_without_file(self, client, auth_headers):
        headers = auth_headers()
        bill = _create_bill(client, headers)
        assert client.get(f"/api/v1/bills/{bill['id']}/invoice", headers=headers).status_code == 404


class TestCategories:
    def test_case_insensitive_unique(self, client, auth_headers):
        headers = auth_headers()
        resp = client.post("/api/v1/categories", json={"name": "Casa", "color": "#ff0000"}, headers=headers)
        assert resp.status_code == 201
        assert resp.json()["icon"] == "📁"
        assert client.post("/api/v1/categories", json={"name": "casa"}, headers=headers).status_code == 409

        # another user may reuse the name
        other = auth_headers(email="bia@example.com", name="Bia")
        assert client.post("/api/v1/categories", json={"name": "Casa"}, headers=other).status_code == 201

    def test_invalid_color(self, client, auth_headers):
        resp = client.post("/api/v1/categories", json={"name": "Casa", "color": "red"}, headers=auth_headers())
        assert resp.status_code == 422

    def test_update_and_delete(self, client, auth_headers):
        headers = auth_headers()
        cat = client.post("/api/v1/categories", json={"name": "Casa"}, headers=headers).json()
        resp = client.put(f"/api/v1/categories/{cat['id']}", json={"color": "#00ff00"}, headers=headers)
        assert resp.json()["color"] == "#00ff00"
        assert client.delete(f"/api/v1/categories/{cat['id']}", headers=headers).status_code == 204
        assert client.get("/api/v1/categories", headers=headers).json() == []


class TestReports:
    def test_csv_download(self, client, auth_headers):
        headers = auth_headers()
        _create_bill(client, headers, name="Junho", due_date="2024-06-10")
        _create_bill(client, headers, name="Julho", due_date="2024-07-10")
        resp = client.get("/api/v1/reports/monthly/2024/6/csv", headers=headers)
        assert resp.status_code == 200
        assert "relatorio-2024-06.csv" in resp.headers["content-disposition"]
        body = resp.content.decode("utf-8")
        assert "Junho" in body and "Julho" not in body

    def test_status_filter(self, client, auth_headers):
        headers = auth_headers()
        bill = _create_bill(client, headers, name="Paga")
        _create_bill(client, headers, name="Aberta")
        client.patch(f"/api/v1/bills/{bill['id']}/status", json={"status": "paid"}, headers=headers)
        body = client.get("/api/v1/reports/monthly/2024/6/csv?status=paid&category=todas", headers=headers).text
        assert "Paga" in body and "Aberta" not in body

    def test_zip_with_missing_attachment(self, client, auth_headers, db):
        headers = auth_headers()
        bill = _create_bill(client, headers)
        db.query(models.Bill).filter(models.Bill.id == bill["id"]).update(
            {"invoice_file": "nao-existe.pdf", "invoice_filename": "boleto.pdf"}
        )
        db.commit()
        resp = client.get("/api/v1/reports/monthly/2024/6/zip", headers=headers)
        assert resp.status_code == 200
        assert resp.headers["content-type"] == "application/zip"
        with zipfile.ZipFile(io.BytesIO(resp.content)) as zf:
            assert zf.namelist() == ["relatorio-2024-06.pdf"]

    def test_bad_format_and_status(self, client, auth_headers):
        headers = auth_headers()
        assert client.get("/api/v1/reports/monthly/2024/6/docx", headers=headers).status_code == 400
        assert client.get("/api/v1/reports/monthly/2024/6/pdf?status=late", headers=headers).status_code == 400
        assert client.get("/api/v1/reports/monthly/2024/13/pdf", headers=headers).status_code == 422

    def test_date_range_needs_both_bounds(self, client, auth_headers):
        headers = auth_headers()
        _create_bill(client, headers, name="Junho", due_date="2024-06-10")
        base = "/api/v1/reports/monthly/2024/6/csv"
        assert client.get(f"{base}?start_date=2024-06-01", headers=headers).status_code == 400
        assert client.get(f"{base}?end_date=2024-06-30", headers=headers).status_code == 400
        resp = client.get(f"{base}?start_date=2024-06-01&end_date=2024-06-30", headers=headers)
        assert resp.status_code == 200
        assert "Junho" in resp.text


class TestNotificationTrigger:
    def test_manual_sweep(self, client, auth_headers):
        headers = auth_headers()
        resp = client.post("/api/v1/notifications/test", headers=headers)
        assert resp.status_code == 200
        assert resp.json() == {"processed": 0}
