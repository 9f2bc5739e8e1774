"""Tests for invoice webhook reconciliation."""

from conftest import invoice_event, payment_intent_event


class TestInvoicePaid:
    def test_activates_subscription_and_sends_receipt(self, post_event, container, record, email_sender):
        response = post_event(invoice_event())

        assert response.status_code == 200
        stored = container.subscription_repository.get_by_subscription_id("sub_1")
        assert stored.status == "active"
        assert stored.subscription_start == 1702592000
        assert stored.subscription_end == 1705270400
        assert stored.latest_invoice["id"] == "in_2"
        assert stored.latest_invoice["hosted_invoice_url"] == "https://invoice.stripe.com/i/in_2"
        assert stored.payment_intent_id == "pi_2"

        assert len(email_sender.sent) == 1
        receipt = email_sender.sent[0]
        assert receipt.email == "a@x.com"
        assert receipt.subject == "[Socialbio] Invoice paid"
        assert "$20.00" in receipt.message_plain_text
        assert "Pro" in receipt.message_plain_text

    def test_payment_succeeded_updates_without_receipt(self, post_event, container, record, email_sender):
        post_event(invoice_event("invoice.payment_succeeded"))

        stored = container.subscription_repository.get_by_subscription_id("sub_1")
        assert stored.status == "active"
        assert stored.subscription_end == 1705270400
        assert email_sender.sent == []

    def test_renewal_sends_one_receipt(self, post_event, record, email_sender):
        renewal = {"payment_intent": "pi_2", "billing_reason": "subscription_cycle"}
        post_event(invoice_event("invoice.payment_succeeded", event_id="evt_inv_1", **renewal))
        post_event(invoice_event("invoice.paid", event_id="evt_inv_2", **renewal))

        assert [sent.subject for sent in email_sender.to("a@x.com")] == ["[Socialbio] Invoice paid"]

    def test_first_payment_sends_single_email(self, post_event, record, email_sender):
        post_event(payment_intent_event())
        post_event(invoice_event(
            "invoice.payment_succeeded",
            event_id="evt_inv_1",
            payment_intent="pi_1",
            billing_reason="subscription_create",
        ))
        post_event(invoice_event(
            "invoice.paid",
            event_id="evt_inv_2",
            payment_intent="pi_1",
            billing_reason="subscription_create",
        ))

        assert [sent.subject for sent in email_sender.to("a@x.com")] == ["[Socialbio] Payment succeeded"]

    def test_same_payment_intent_keeps_stored_details(self, post_event, container, record):
        post_event(invoice_event(payment_intent="pi_1"))

        stored = container.subscription_repository.get_by_subscription_id("sub_1")
        assert stored.latest_invoice["payment_intent"] == {
            "id": "pi_1",
            "status": "requires_payment_method",
        }

    def test_portuguese_receipt(self, post_event, record, email_sender):
        post_event(invoice_event(currency="brl"))

        assert "Recebemos o pagamento de R$20.00" in email_sender.sent[0].message_plain_text


class TestInvoicePaymentFailed:
    def test_marks_past_due_and_links_invoice(self, post_event, container, record, email_sender):
        post_event(invoice_event("invoice.payment_failed", status="open", amount_paid=0))

        stored = container.subscription_repository.get_by_subscription_id("sub_1")
        assert stored.status == "past_due"
        assert stored.subscription_start == 1700000000
        assert len(email_sender.sent) == 1
        assert "https://invoice.stripe.com/i/in_2" in email_sender.sent[0].message_html


class TestInvoiceUpcoming:
    def test_sends_reminder_without_touching_record(self, post_event, container, record, email_sender):
        event = invoice_event("invoice.upcoming", status="draft")
        del event["data"]["object"]["id"]

        post_event(event)

        stored = container.subscription_repository.get_by_subscription_id("sub_1")
        assert stored.status == "incomplete"
        assert stored.latest_invoice["id"] == "in_1"
        assert len(email_sender.sent) == 1
        assert "2023-12-14" in email_sender.sent[0].message_plain_text


class TestInvoiceOtherSubtypes:
    def test_finalized_updates_invoice_only(self, post_event, container, record, email_sender):
        post_event(invoice_event("invoice.finalized", status="open"))

        stored = container.subscription_repository.get_by_subscription_id("sub_1")
        assert stored.status == "incomplete"
        assert stored.latest_invoice["id"] == "in_2"
        assert email_sender.sent == []


class TestInvoiceLookupMisses:
    def test_unknown_customer_email(self, post_event, container, record, email_sender):
        post_event(invoice_event(customer_email="nobody@x.com"))

        stored = container.subscription_repository.get_by_subscription_id("sub_1")
        assert stored.status == "incomplete"
        assert email_sender.sent == []

    def test_unknown_subscription_logs_error(self, post_event, record, email_sender, caplog):
        response = post_event(invoice_event(subscription="sub_missing"))

        assert response.status_code == 200
        assert email_sender.sent == []
        assert "sub_missing" in caplog.text

    def test_invoice_without_subscription(self, post_event, record, email_sender):
        post_event(invoice_event(subscription=None))

        assert email_sender.sent == []
