import pytest

from billing.domain.models import User
from billing.services.email_templates import EmailTemplates
from billing.services.localization import get_dictionary, language_from_currency
from billing.services.pricing import PriceCatalog, format_amount


@pytest.mark.parametrize(
    "amount, currency, expected",
    [
        (2000, "usd", "$20.00"),
        (2000, "USD", "$20.00"),
        (1990, "brl", "R$19.90"),
        (123456, "eur", "€1,234.56"),
        (2000, "chf", "20.00 CHF"),
    ],
)
def test_format_amount(amount, currency, expected):
    assert format_amount(amount, currency) == expected


def test_language_from_currency():
    assert language_from_currency("brl") == "pt"
    assert language_from_currency("BRL") == "pt"
    assert language_from_currency("usd") == "en"
    assert language_from_currency("") == "en"


def test_unknown_language_falls_back_to_english():
    assert get_dictionary("fr") == get_dictionary("en")
    assert get_dictionary("pt")["payment"] == "Pagamento"


def test_price_catalog_lookups():
    catalog = PriceCatalog({("month", "pro"): "price_pro_month", ("year", "basic"): "price_basic_year"})

    assert catalog.price_id_for("month", "pro") == "price_pro_month"
    assert catalog.price_id_for("month", "PRO") == "price_pro_month"
    assert catalog.price_id_for("year", "pro") is None
    assert catalog.plan_for_price_id("price_basic_year") == "Basic"
    assert catalog.plan_for_price_id("price_other") == "price_other"
    assert catalog.plan_for_price_id(None) == "Unknown"


def test_templates_escape_user_values_in_html():
    templates = EmailTemplates("Socialbio", "https://socialbio.me")
    user = User(id=1, email="a@x.com", first_name="<b>Ana</b>")

    email = templates.invoice_paid(user, "en", "Pro & Co", "$20.00", None)

    assert "&lt;b&gt;Ana&lt;/b&gt;" in email.message_html
    assert "<b>Ana</b>" not in email.message_html
    assert "Pro &amp; Co" in email.message_html
    assert email.message_plain_text.startswith("Hey <b>Ana</b>!")
