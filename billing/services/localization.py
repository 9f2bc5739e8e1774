"""Language selection and message dictionaries for outgoing emails."""

from typing import Dict

DEFAULT_LANGUAGE = "en"

CURRENCY_LANGUAGES = {
    "brl": "pt",
}

DICTIONARIES: Dict[str, Dict[str, str]] = {
    "en": {
        "payment": "Payment",
        "paymentSucceed": "Payment succeeded",
        "invoicePaid": "Invoice paid",
        "invoicePaymentFailed": "Invoice payment failed",
        "invoiceUpcoming": "Your subscription renews soon",
        "clickHere": "CLICK HERE",
        "viewInvoice": "VIEW INVOICE",
    },
    "pt": {
        "payment": "Pagamento",
        "paymentSucceed": "Pagamento realizado com sucesso",
        "invoicePaid": "Fatura paga",
        "invoicePaymentFailed": "Falha no pagamento da fatura",
        "invoiceUpcoming": "Sua assinatura será renovada em breve",
        "clickHere": "CLIQUE AQUI",
        "viewInvoice": "VER FATURA",
    },
}


def language_from_currency(currency: str) -> str:
    return CURRENCY_LANGUAGES.get((currency or "").lower(), DEFAULT_LANGUAGE)


def get_dictionary(language: str) -> Dict[str, str]:
    """Dictionary for a language, filling missing keys from English."""
    dictionary = dict(DICTIONARIES[DEFAULT_LANGUAGE])
    dictionary.update(DICTIONARIES.get(language, {}))
    return dictionary
