import html
import resend
from typing import Optional, Protocol, Tuple
from config import config
from constants import NotificationTypes
from logging_config import get_logger

logger = get_logger("email")

# Set the API key for the resend SDK
if config.RESEND_API_KEY:
    resend.api_key = config.RESEND_API_KEY


class MailDeliveryError(Exception):
    """The mail transport rejected or failed to deliver a message."""


class MailSender(Protocol):
    def send(self, to: str, subject: str, html: str): ...


class ResendMailSender:
    """
    MailSender backed by Resend.
    Raises MailDeliveryError when RESEND_API_KEY is not configured or Resend rejects
    the message, so the caller never treats an unsent email as delivered.
    """

    def __init__(self, api_key: Optional[str] = None, mail_from: Optional[str] = None):
        self.api_key = api_key if api_key is not None else config.RESEND_API_KEY
        self.mail_from = mail_from or config.MAIL_FROM

    @property
    def configured(self) -> bool:
        return bool(self.api_key) and self.api_key != "your_resend_api_key_here"

    def send(self, to: str, subject: str, html: str):
        if not self.configured:
            logger.warning(f"Resend API key not configured. Email to {to} with subject '{subject}' not sent")
            raise MailDeliveryError("Resend API key not configured")

        resend.api_key = self.api_key
        params = {
            "from": self.mail_from,
            "to": [to],
            "subject": subject,
            "html": html,
        }
        try:
            response = resend.Emails.send(params)
        except Exception as e:
            raise MailDeliveryError(f"Failed to send email to {to}: {e}") from e

        logger.info(f"Email sent successfully to {to}", extra={"data": {"email_id": response.get("id")}})
        return response


def base_email_template(title: str, preheader: str, content: str, cta_url: str = None, cta_text: str = None, footer_text: str = "") -> str:
    """
    Generates a responsive HTML skeleton for all Taskboard emails.
    """
    cta_html = f"""
    <div style="text-align: center; margin: 32px 0;">
        <a href="{cta_url}" style="background-color: #2563eb; color: #ffffff; padding: 14px 28px; text-decoration: none; border-radius: 8px; font-weight: 600; font-size: 16px; display: inline-block;">
            {cta_text}
        </a>
    </div>
    """ if cta_url and cta_text else ""

    return f"""
    <!DOCTYPE html>
    <html lang="en">
    <head>
        <meta charset="UTF-8">
        <meta name="viewport" content="width=device-width, initial-scale=1.0">
        <title>{title}</title>
    </head>
    <body style="font-family: system-ui, -apple-system, 'Segoe UI', Roboto, Helvetica, Arial, sans-serif; background-color: #f3f4f6; margin: 0; padding: 0; line-height: 1.6;">
        <!-- Preheader text (hidden in the email body, visible in inbox preview) -->
        <div style="display: none; max-height: 0px; overflow: hidden;">
            {preheader}
        </div>

        <table width="100%" cellpadding="0" cellspacing="0" border="0" style="background-color: #f3f4f6; margin: 0; padding: 40px 20px;">
            <tr>
                <td align="center">
                    <table width="100%" cellpadding="0" cellspacing="0" border="0" style="max-width: 600px; background-color: #ffffff; border-radius: 12px; overflow: hidden;">
                        <tr>
                            <td style="padding: 40px 32px; color: #374151;">
                                {content}
                                {cta_html}
                            </td>
                        </tr>
                        <tr>
                            <td style="background-color: #f9fafb; padding: 24px 32px; text-align: center; border-top: 1px solid #e5e7eb;">
                                <p style="color: #6b7280; font-size: 12px; margin: 0; line-height: 1.5;">
                                    {footer_text}
                                </p>
                            </td>
                        </tr>
                    </table>
                </td>
            </tr>
        </table>
    </body>
    </html>
    """


EMAIL_HEADINGS = {
    NotificationTypes.OVERDUE: "Task Overdue",
    NotificationTypes.UPDATE: "Task Updated",
    NotificationTypes.REMINDER: "Task Reminder",
}


def notification_subject(notification_type: str, task_title: Optional[str]) -> str:
    title = task_title or "Task"
    if notification_type == NotificationTypes.OVERDUE:
        return f"Overdue: {title}"
    if notification_type == NotificationTypes.UPDATE:
        return f"Update: {title}"
    return f"Reminder: {title} due soon"


def render_notification_email(notification: dict, task: Optional[dict]) -> Tuple[str, str]:
    """
    Builds (subject, html) for an emailed notification.
    `task` may be None when the task record is gone.
    """
    task = task or {}
    notification_type = notification.get("type")
    task_title = task.get("title") or "Task"
    deadline = task.get("deadline")
    deadline_str = deadline.strftime("%a, %d %b %Y %H:%M") if deadline else "N/A"
    heading = EMAIL_HEADINGS.get(notification_type, "Task Reminder")
    message = notification.get("message") or ""

    content = f"""
        <h2 style="color: #111827; font-size: 20px; font-weight: 600; margin-top: 0; margin-bottom: 16px;">{heading}</h2>
        <p style="margin: 0 0 8px 0; font-size: 16px; font-weight: 600; color: #111827;">{html.escape(task_title)}</p>
        <p style="margin: 0 0 16px 0;">{html.escape(message)}</p>
        <p style="margin: 0 0 16px 0;"><strong>Deadline:</strong> {deadline_str}</p>
    """

    html_content = base_email_template(
        title=heading,
        preheader=html.escape(message),
        content=content,
        cta_url=f"{config.FRONTEND_URL}/tasks",
        cta_text="View Task",
        footer_text="You are receiving this because you are assigned to this task.",
    )
    return notification_subject(notification_type, task.get("title")), html_content
