"""
Email Service - renders and sends price alert emails
"""
import logging
import smtplib
from email.message import EmailMessage
from email.utils import formataddr

from jinja2 import Environment, PackageLoader, TemplateError, select_autoescape

from price_notifier.config import Settings
from price_notifier.exceptions import EmailDeliveryError
from price_notifier.schemas.events import AlertType

logger = logging.getLogger(__name__)


class EmailDispatcher:
    """Service for sending price alert emails over the configured transport"""
    
    def __init__(self, settings: Settings):
        self.email_service = settings.EMAIL_SERVICE
        self.smtp_host = settings.SMTP_HOST
        self.smtp_port = settings.SMTP_PORT
        self.smtp_user = settings.SMTP_USER
        self.smtp_password = settings.SMTP_PASSWORD
        self.smtp_timeout = settings.SMTP_TIMEOUT
        self.from_email = settings.SMTP_FROM_EMAIL
        self.from_name = settings.SMTP_FROM_NAME
        self.product_url = settings.PRODUCT_URL
        
        self.env = Environment(
            loader=PackageLoader("price_notifier", "templates"),
            autoescape=select_autoescape(['html', 'xml'])
        )
    
    def render_price_alert(
        self,
        recipient: str,
        product_name: str,
        old_price: float,
        new_price: float,
        change_percentage: float,
        direction: AlertType
    ) -> EmailMessage:
        """Build the multipart (text + HTML) alert message"""
        is_increase = direction == AlertType.INCREASE
        headline = "Price increase" if is_increase else "Price drop"
        context = {
            "headline": headline,
            "product_name": product_name,
            "old_price": old_price,
            "new_price": new_price,
            "change_percentage": change_percentage,
            "is_increase": is_increase,
            "product_url": self.product_url,
        }
        
        message = EmailMessage()
        message["Subject"] = f"{headline}: {product_name}"
        message["From"] = formataddr((self.from_name, self.from_email))
        message["To"] = recipient
        message.set_content(self.env.get_template("price_alert.txt").render(**context))
        message.add_alternative(
            self.env.get_template("price_alert.html").render(**context),
            subtype="html"
        )
        return message
    
    def send_price_alert(
        self,
        recipient: str,
        product_name: str,
        old_price: float,
        new_price: float,
        change_percentage: float,
        direction: AlertType
    ) -> None:
        """
        Render and send one price alert
        
        Raises:
            EmailDeliveryError: If rendering or the transport failed
        """
        try:
            message = self.render_price_alert(
                recipient, product_name, old_price, new_price, change_percentage, direction
            )
        except TemplateError as e:
            raise EmailDeliveryError(f"Could not render alert for {recipient}: {e}") from e
        
        if self.email_service == "console":
            self._send_console(message)
        elif self.email_service == "smtp":
            self._send_smtp(message)
        else:
            raise EmailDeliveryError(f"Unknown email service: {self.email_service}")
    
    def _send_console(self, message: EmailMessage) -> None:
        """
        Simulate email sending by logging the text part
        
        This is for development/testing purposes
        """
        body = message.get_body(preferencelist=("plain",)).get_content()
        logger.info(
            "📧 EMAIL NOTIFICATION (Console Mode)\nTo: %s\nSubject: %s\n%s",
            message["To"], message["Subject"], body
        )
    
    def _send_smtp(self, message: EmailMessage) -> None:
        """Send email via SMTP with STARTTLS"""
        try:
            with smtplib.SMTP(self.smtp_host, self.smtp_port, timeout=self.smtp_timeout) as smtp:
                smtp.starttls()
                if self.smtp_user:
                    smtp.login(self.smtp_user, self.smtp_password)
                smtp.send_message(message)
        except (smtplib.SMTPException, OSError) as e:
            raise EmailDeliveryError(f"SMTP delivery to {message['To']} failed: {e}") from e
        
        logger.info("Email sent to %s via %s:%s", message["To"], self.smtp_host, self.smtp_port)
