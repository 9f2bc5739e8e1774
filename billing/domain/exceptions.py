"""Errors raised by the billing domain and its provider adapter."""


class BillingError(Exception):
    """Base class for billing failures."""


class PaymentProviderError(BillingError):
    """The payment provider is unavailable or refused an operation."""


class WebhookConfigurationError(BillingError):
    """Webhook handling cannot proceed because configuration is missing."""


class WebhookSignatureError(BillingError):
    """The webhook signature header does not match the payload."""


class WebhookPayloadError(BillingError):
    """The webhook body is not a well-formed provider event."""
