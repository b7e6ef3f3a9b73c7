"""
Push notifications through ntfy.

One POST per message to {ntfy_base_url}/{topic} with a fixed title.
"""

from typing import Optional

import httpx
import structlog

from checker.errors import NotifyError
from utilities.config import CheckerConfig

logger = structlog.get_logger(__name__)


NOTIFICATION_TITLE = "JLPT Update"
ERROR_MESSAGE = "JLPT checker error: {error}"


class NtfyNotifier:
    """Delivers messages to an ntfy topic."""

    def __init__(self, config: CheckerConfig, transport: Optional[httpx.AsyncBaseTransport] = None):
        """
        Initialize the notifier.

        Args:
            config: Checker configuration holding the topic
            transport: Optional httpx transport, used to swap out the network
        """
        self.url = config.get_ntfy_url()
        self.topic = config.ntfy_topic
        self.logger = logger.bind(component="notifier")

        self.client_config = {
            "timeout": config.request_timeout,
            "headers": {"Title": NOTIFICATION_TITLE},
        }
        if transport is not None:
            self.client_config["transport"] = transport

    async def send(self, message: str) -> None:
        """
        Send a message.

        Args:
            message: Notification body

        Raises:
            NotifyError: On a transport failure or a non-2xx response
        """
        try:
            async with httpx.AsyncClient(**self.client_config) as client:
                response = await client.post(self.url, content=message.encode("utf-8"))
        except (httpx.HTTPError, httpx.InvalidURL) as e:
            self.logger.error("Notification request failed", topic=self.topic, error=str(e))
            raise NotifyError(f"Failed to reach ntfy: {e}") from e

        if not response.is_success:
            self.logger.error("Notification rejected", topic=self.topic, status_code=response.status_code)
            raise NotifyError(
                f"ntfy returned HTTP {response.status_code}",
                status_code=response.status_code
            )

        self.logger.info("Notification sent", topic=self.topic)


def compose_error_message(error: Exception) -> str:
    """Build the failure notification body."""
    return ERROR_MESSAGE.format(error=error)
