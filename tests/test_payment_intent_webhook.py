"""
Tests for payment intent webhook reconciliation.

Tests cover:
- Signature verification at the endpoint
- Status and payment intent updates on the correlated subscription
- User and operational notifications
- Lookup misses that must not touch any record
"""

import json

from conftest import SYSTEM_EMAIL, make_record, payment_intent_event, sign_payload


class TestWebhookSignature:
    def test_invalid_signature_is_rejected(self, post_event, container, record, email_sender):
        response = post_event(payment_intent_event(), secret="whsec_wrong")

        assert response.status_code == 500
        body = response.json()
        assert body["message"] == "Webhook Error"
        assert body["status_code"] == 500
        stored = container.subscription_repository.get_by_subscription_id("sub_1")
        assert stored.status == "incomplete"
        assert email_sender.sent == []
        assert container.webhook_event_repository.get_status("evt_1") is None

    def test_missing_signature_is_rejected(self, client, record, email_sender):
        response = client.post("/api/webhooks/stripe", content=b'{"id": "evt_1"}')

        assert response.status_code == 500
        assert email_sender.sent == []

    def test_expired_signature_is_rejected(self, post_event, record, email_sender):
        event = payment_intent_event()
        payload = json.dumps(event)
        response = post_event(event, signature=sign_payload(payload, timestamp=1000))

        assert response.status_code == 500
        assert email_sender.sent == []

    def test_missing_secret_is_internal_error(self, post_event, container, record, email_sender):
        container.settings.stripe_webhook_secret = None

        response = post_event(payment_intent_event())

        assert response.status_code == 500
        assert response.json()["message"] == "Internal error"
        assert email_sender.sent == []

    def test_signed_malformed_payload_is_rejected(self, post_event, email_sender):
        response = post_event({"type": "payment_intent.succeeded"})

        assert response.status_code == 500
        assert email_sender.sent == []

    def test_unknown_event_type_is_accepted(self, post_event, container, record, email_sender):
        event = payment_intent_event()
        event["type"] = "customer.created"

        response = post_event(event)

        assert response.status_code == 200
        assert response.content == b""
        assert email_sender.sent == []
        stored = container.subscription_repository.get_by_subscription_id("sub_1")
        assert stored.status == "incomplete"


class TestPaymentSucceeded:
    def test_updates_record_and_notifies(self, post_event, container, record, email_sender, stripe_client):
        response = post_event(payment_intent_event())

        assert response.status_code == 200
        stored = container.subscription_repository.get_by_subscription_id("sub_1")
        assert stored.status == "succeeded"
        assert stored.latest_invoice["payment_intent"]["amount_received"] == 2000
        assert stored.latest_invoice["id"] == "in_1"

        user_emails = email_sender.to("a@x.com")
        assert len(user_emails) == 1
        assert "Congratulations" in user_emails[0].message_html
        assert "Pro" in user_emails[0].message_plain_text
        assert user_emails[0].subject == "[Socialbio] Payment succeeded"

        ops_emails = email_sender.to(SYSTEM_EMAIL)
        assert len(ops_emails) == 1
        assert "Pro" in ops_emails[0].message_plain_text
        assert "$20.00" in ops_emails[0].message_plain_text
        assert "(USD)" in ops_emails[0].message_plain_text

    def test_creates_subscription_schedule(self, post_event, container, record, stripe_client):
        post_event(payment_intent_event())

        stripe_client.subscription_schedules.create.assert_called_once_with(
            params={"from_subscription": "sub_1"}
        )
        stored = container.subscription_repository.get_by_subscription_id("sub_1")
        assert stored.subscription_schedule_id == "sub_sched_1"

    def test_existing_schedule_is_not_recreated(self, post_event, container, user, stripe_client):
        container.subscription_repository.create(
            make_record(user.id, subscription_schedule_id="sub_sched_0")
        )

        post_event(payment_intent_event())

        stripe_client.subscription_schedules.create.assert_not_called()

    def test_missing_schedule_leaves_record_unchanged(self, post_event, container, record, stripe_client):
        stripe_client.subscription_schedules.create.return_value = None

        post_event(payment_intent_event())

        stored = container.subscription_repository.get_by_subscription_id("sub_1")
        assert stored.status == "succeeded"
        assert stored.subscription_schedule_id is None

    def test_brl_payment_uses_portuguese(self, post_event, record, email_sender):
        post_event(payment_intent_event(currency="brl"))

        user_emails = email_sender.to("a@x.com")
        assert len(user_emails) == 1
        assert "Olá, Ana!" in user_emails[0].message_html
        assert "Parabéns" in user_emails[0].message_plain_text
        assert user_emails[0].subject == "[Socialbio] Pagamento realizado com sucesso"

        ops_emails = email_sender.to(SYSTEM_EMAIL)
        assert "R$20.00" in ops_emails[0].message_plain_text
        assert "Hey Team!" in ops_emails[0].message_plain_text

    def test_no_operational_email_without_system_mailbox(self, post_event, container, record, email_sender):
        handler = container.webhook_dispatcher._payment_intents
        handler._system_email = None

        post_event(payment_intent_event())

        assert len(email_sender.sent) == 1
        assert email_sender.sent[0].email == "a@x.com"

    def test_receipt_email_match_ignores_case(self, post_event, container, record, email_sender):
        post_event(payment_intent_event(receipt_email="A@X.com"))

        stored = container.subscription_repository.get_by_subscription_id("sub_1")
        assert stored.status == "succeeded"


class TestPaymentFailed:
    def test_updates_status_and_sends_failure(self, post_event, container, record, email_sender, stripe_client):
        post_event(
            payment_intent_event(
                "payment_intent.payment_failed",
                status="requires_payment_method",
                amount_received=0,
            )
        )

        stored = container.subscription_repository.get_by_subscription_id("sub_1")
        assert stored.status == "requires_payment_method"
        assert len(email_sender.sent) == 1
        assert "Sorry, your payment failed!" in email_sender.sent[0].message_html
        assert email_sender.sent[0].subject == "[Socialbio] Payment"
        stripe_client.subscription_schedules.create.assert_not_called()

    def test_portuguese_failure(self, post_event, record, email_sender):
        post_event(
            payment_intent_event(
                "payment_intent.payment_failed",
                status="requires_payment_method",
                currency="brl",
            )
        )

        assert "Seu pagamento falhou" in email_sender.sent[0].message_html


class TestOtherSubtypes:
    def test_updates_status_without_notification(self, post_event, container, record, email_sender):
        post_event(payment_intent_event("payment_intent.processing", status="processing"))

        stored = container.subscription_repository.get_by_subscription_id("sub_1")
        assert stored.status == "processing"
        assert email_sender.sent == []


class TestLookupMisses:
    def test_unknown_user_changes_nothing(self, post_event, container, record, email_sender, stripe_client):
        response = post_event(payment_intent_event(receipt_email="nobody@x.com"))

        assert response.status_code == 200
        stored = container.subscription_repository.get_by_subscription_id("sub_1")
        assert stored.status == "incomplete"
        assert email_sender.sent == []
        stripe_client.subscription_schedules.create.assert_not_called()

    def test_missing_receipt_email_changes_nothing(self, post_event, container, record, email_sender):
        post_event(payment_intent_event(receipt_email=None))

        stored = container.subscription_repository.get_by_subscription_id("sub_1")
        assert stored.status == "incomplete"
        assert email_sender.sent == []

    def test_unmatched_payment_intent_logs_error(self, post_event, container, record, email_sender, caplog):
        response = post_event(payment_intent_event(id="pi_unknown"))

        assert response.status_code == 200
        assert email_sender.sent == []
        assert "pi_unknown" in caplog.text
        assert any(entry.levelname == "ERROR" for entry in caplog.records)
        stored = container.subscription_repository.get_by_subscription_id("sub_1")
        assert stored.status == "incomplete"


class TestNotificationFailures:
    def test_send_failure_keeps_bookkeeping(self, post_event, container, record, email_sender):
        email_sender.error = ConnectionError("smtp down")

        response = post_event(payment_intent_event())

        assert response.status_code == 200
        stored = container.subscription_repository.get_by_subscription_id("sub_1")
        assert stored.status == "succeeded"
        assert stored.subscription_schedule_id == "sub_sched_1"
        # both sends were attempted despite the first failing
        assert len(email_sender.sent) == 2
        assert container.webhook_event_repository.get_status("evt_1") == "processed"


class TestRedelivery:
    def test_duplicate_event_is_handled_once(self, post_event, container, record, email_sender):
        first = post_event(payment_intent_event())
        second = post_event(payment_intent_event())

        assert first.status_code == 200
        assert second.status_code == 200
        assert len(email_sender.to("a@x.com")) == 1
        assert len(email_sender.to(SYSTEM_EMAIL)) == 1

    def test_distinct_events_for_same_intent_are_both_handled(self, post_event, record, email_sender):
        post_event(payment_intent_event(event_id="evt_1"))
        post_event(payment_intent_event(event_id="evt_2"))

        assert len(email_sender.to("a@x.com")) == 2
