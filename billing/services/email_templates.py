"""HTML and plain-text bodies for billing notifications."""

from datetime import datetime, timezone
from html import escape
from typing import Optional

from billing.domain.models import EmailRecipient, User

from .localization import get_dictionary


class EmailTemplates:
    """Builds localized email descriptors for billing events."""

    def __init__(self, app_name: str, app_url: str) -> None:
        self.app_name = app_name
        self.app_url = app_url

    # Layout ---------------------------------------------------------------
    def html_body(self, content: str) -> str:
        return f"""
        <html>
            <body style="font-family: Arial, sans-serif; max-width: 600px; margin: 0 auto; padding: 20px;">
                <div style="background-color: #0f172a; padding: 30px; border-radius: 10px; text-align: center;">
                    <h1 style="color: #93c5fd; margin: 0;">{self.app_name}</h1>
                </div>
                <div style="padding: 30px 0; color: #475569; line-height: 1.6;">
                    {content}
                </div>
            </body>
        </html>
        """

    @staticmethod
    def html_button(url: str, label: str) -> str:
        return (
            f'<a href="{url}" style="background-color: #3b82f6; color: white; padding: 15px 30px; '
            f'text-decoration: none; border-radius: 5px; display: inline-block; font-weight: bold;">'
            f"{label}</a>"
        )

    def _subject(self, text: str) -> str:
        return f"[{self.app_name}] {text}"

    # Payment intents ------------------------------------------------------
    def payment_failed(self, user: User, language: str) -> EmailRecipient:
        dictionary = get_dictionary(language)
        button = self.html_button(self.app_url, dictionary["clickHere"])
        if language == "pt":
            html = f"""
            <b>Olá, {escape(user.first_name)}!</b><br>
            <br>
            Desculpe! Seu pagamento falhou!<br>
            Por favor tente fazer sua assinatura novamente.<br>
            <br>
            {button}<br>
            <br>
            ou abra esse link no seu navegador: {self.app_url}.<br>
            <br>
            Equipe {self.app_name}<br>
            """
            text = (
                f"Olá, {user.first_name}! Desculpe! Seu pagamento falhou! Por favor tente fazer "
                f"sua assinatura novamente no {self.app_url}. Equipe {self.app_name}"
            )
        else:
            html = f"""
            <b>Hey {escape(user.first_name)},</b><br>
            <br>
            Sorry, your payment failed!<br>
            Please try to subscribe again.<br>
            <br>
            {button}<br>
            <br>
            or open this link in your browser: {self.app_url}.<br>
            <br>
            {self.app_name} Team<br>
            """
            text = (
                f"Hey {user.first_name}! Sorry, your payment failed! Please try to subscribe again. "
                f"Try again opening this link in your browser: {self.app_url}. {self.app_name} Team"
            )
        return EmailRecipient(
            name=user.first_name,
            email=user.email,
            subject=self._subject(dictionary["payment"]),
            message_html=self.html_body(html),
            message_plain_text=text,
        )

    def payment_succeeded(self, user: User, language: str, plan: str) -> EmailRecipient:
        dictionary = get_dictionary(language)
        link = f'<a href="{self.app_url}">{self.app_url}</a>'
        if language == "pt":
            html = f"""
            <b>Olá, {escape(user.first_name)}!</b><br>
            <br>
            Parabéns! Seu pagamento foi finalizado com sucesso!<br>
            Agora você é um assinante {escape(plan)}!<br>
            Bem-vindo a bordo!<br>
            <br>
            Equipe {self.app_name}<br>
            {link}
            """
            text = (
                f"Olá, {user.first_name}! Parabéns, seu pagamento foi finalizado com sucesso! "
                f"Agora você é um assinante {plan}! Bem-vindo a bordo! "
                f"Equipe {self.app_name} ({self.app_url})"
            )
        else:
            html = f"""
            <b>Hey {escape(user.first_name)},</b><br>
            <br>
            Congratulations! Your payment was finished with success!<br>
            You are now a {escape(plan)} subscriber!<br>
            Welcome onboard!<br>
            <br>
            {self.app_name} Team<br>
            {link}
            """
            text = (
                f"Hey {user.first_name}! Congratulations, your payment was finished with success! "
                f"You are now a {plan} subscriber! Welcome onboard! "
                f"{self.app_name} Team ({self.app_url})"
            )
        return EmailRecipient(
            name=user.first_name,
            email=user.email,
            subject=self._subject(dictionary["paymentSucceed"]),
            message_html=self.html_body(html),
            message_plain_text=text,
        )

    def payment_summary(
        self,
        system_email: str,
        user: User,
        plan: str,
        amount: str,
        currency: str,
    ) -> EmailRecipient:
        """Operational notice for the team; always in English."""
        summary = (
            f"User {user.first_name} ({user.email}) has just paid for a {plan} "
            f"subscription of {amount} ({currency.upper()})"
        )
        html = f"""
        <b>Hey Team!</b><br>
        <br>
        {escape(summary)}<br>
        <br>
        {self.app_name} System<br>
        """
        return EmailRecipient(
            name="System",
            email=system_email,
            subject=self._subject("Payment"),
            message_html=self.html_body(html),
            message_plain_text=f"Hey Team! {summary}. {self.app_name} System",
        )

    # Invoices -------------------------------------------------------------
    def invoice_paid(
        self,
        user: User,
        language: str,
        plan: str,
        amount: str,
        invoice_url: Optional[str],
    ) -> EmailRecipient:
        dictionary = get_dictionary(language)
        url = invoice_url or self.app_url
        button = self.html_button(url, dictionary["viewInvoice"])
        if language == "pt":
            html = f"""
            <b>Olá, {escape(user.first_name)}!</b><br>
            <br>
            Recebemos o pagamento de {amount} da sua assinatura {escape(plan)}.<br>
            Obrigado!<br>
            <br>
            {button}<br>
            <br>
            Equipe {self.app_name}<br>
            """
            text = (
                f"Olá, {user.first_name}! Recebemos o pagamento de {amount} da sua assinatura "
                f"{plan}. Obrigado! Fatura: {url}. Equipe {self.app_name}"
            )
        else:
            html = f"""
            <b>Hey {escape(user.first_name)},</b><br>
            <br>
            We received your payment of {amount} for your {escape(plan)} subscription.<br>
            Thank you!<br>
            <br>
            {button}<br>
            <br>
            {self.app_name} Team<br>
            """
            text = (
                f"Hey {user.first_name}! We received your payment of {amount} for your {plan} "
                f"subscription. Thank you! Invoice: {url}. {self.app_name} Team"
            )
        return EmailRecipient(
            name=user.first_name,
            email=user.email,
            subject=self._subject(dictionary["invoicePaid"]),
            message_html=self.html_body(html),
            message_plain_text=text,
        )

    def invoice_payment_failed(
        self,
        user: User,
        language: str,
        amount: str,
        invoice_url: Optional[str],
    ) -> EmailRecipient:
        dictionary = get_dictionary(language)
        url = invoice_url or self.app_url
        button = self.html_button(url, dictionary["clickHere"])
        if language == "pt":
            html = f"""
            <b>Olá, {escape(user.first_name)}!</b><br>
            <br>
            Não conseguimos cobrar {amount} da sua assinatura.<br>
            Por favor atualize sua forma de pagamento para continuar assinante.<br>
            <br>
            {button}<br>
            <br>
            Equipe {self.app_name}<br>
            """
            text = (
                f"Olá, {user.first_name}! Não conseguimos cobrar {amount} da sua assinatura. "
                f"Por favor atualize sua forma de pagamento: {url}. Equipe {self.app_name}"
            )
        else:
            html = f"""
            <b>Hey {escape(user.first_name)},</b><br>
            <br>
            We could not charge {amount} for your subscription.<br>
            Please update your payment method to keep your subscription.<br>
            <br>
            {button}<br>
            <br>
            {self.app_name} Team<br>
            """
            text = (
                f"Hey {user.first_name}! We could not charge {amount} for your subscription. "
                f"Please update your payment method: {url}. {self.app_name} Team"
            )
        return EmailRecipient(
            name=user.first_name,
            email=user.email,
            subject=self._subject(dictionary["invoicePaymentFailed"]),
            message_html=self.html_body(html),
            message_plain_text=text,
        )

    def invoice_upcoming(
        self,
        user: User,
        language: str,
        plan: str,
        amount: str,
        renews_at: Optional[int],
    ) -> EmailRecipient:
        dictionary = get_dictionary(language)
        when = (
            datetime.fromtimestamp(renews_at, tz=timezone.utc).strftime("%Y-%m-%d")
            if renews_at
            else ""
        )
        if language == "pt":
            html = f"""
            <b>Olá, {escape(user.first_name)}!</b><br>
            <br>
            Sua assinatura {escape(plan)} será renovada em {when} no valor de {amount}.<br>
            <br>
            Equipe {self.app_name}<br>
            """
            text = (
                f"Olá, {user.first_name}! Sua assinatura {plan} será renovada em {when} "
                f"no valor de {amount}. Equipe {self.app_name}"
            )
        else:
            html = f"""
            <b>Hey {escape(user.first_name)},</b><br>
            <br>
            Your {escape(plan)} subscription renews on {when} for {amount}.<br>
            <br>
            {self.app_name} Team<br>
            """
            text = (
                f"Hey {user.first_name}! Your {plan} subscription renews on {when} "
                f"for {amount}. {self.app_name} Team"
            )
        return EmailRecipient(
            name=user.first_name,
            email=user.email,
            subject=self._subject(dictionary["invoiceUpcoming"]),
            message_html=self.html_body(html),
            message_plain_text=text,
        )
