"""Channel sender registry and HTTP delivery."""

import logging
from typing import Awaitable, Callable, Optional

import httpx

from schemawatch.channels import ChannelPayload, NotificationContext
from schemawatch.channels.discord import format_discord
from schemawatch.channels.slack import format_slack
from schemawatch.channels.webhook import format_webhook
from schemawatch.config import settings
from schemawatch.errors import DeliveryError
from schemawatch.security import guarded_http_client

logger = logging.getLogger(__name__)

Sender = Callable[[str, NotificationContext], Awaitable[None]]
Formatter = Callable[[str, NotificationContext], ChannelPayload]
ClientFactory = Callable[[], httpx.AsyncClient]

# Adding a channel means adding a formatter here and its id to
# ``schemawatch.environments.CHANNELS``.
FORMATTERS: dict[str, Formatter] = {
    "slack": format_slack,
    "discord": format_discord,
    "webhook": format_webhook,
}


def _default_client() -> httpx.AsyncClient:
    return guarded_http_client(
        timeout=settings.notify_timeout,
        allow_private=settings.allow_private_targets,
    )


async def send_payload(channel: str, payload: ChannelPayload, client: httpx.AsyncClient) -> None:
    """
    Send a single notification via HTTP.

    Raises:
        DeliveryError: on transport failure or an HTTP error status
    """
    try:
        response = await client.request(
            method=payload.method,
            url=payload.url,
            headers=payload.headers,
            content=payload.body,
        )
    except httpx.HTTPError as exc:
        raise DeliveryError.transport(channel, exc) from exc

    if response.status_code >= 400:
        raise DeliveryError.rejected(channel, response.status_code, response.text)
    logger.debug("Delivered %s notification (status %s)", channel, response.status_code)


class HttpSender:
    """Format a notification for one channel and POST it."""

    def __init__(self, channel: str, formatter: Formatter, client_factory: ClientFactory) -> None:
        self.channel = channel
        self.formatter = formatter
        self.client_factory = client_factory

    async def __call__(self, url: str, ctx: NotificationContext) -> None:
        payload = self.formatter(url, ctx)
        async with self.client_factory() as client:
            await send_payload(self.channel, payload, client)


def default_senders(client_factory: Optional[ClientFactory] = None) -> dict[str, Sender]:
    """Build the channel id -> sender registry used by the dispatcher."""
    factory = client_factory or _default_client
    return {
        channel: HttpSender(channel, formatter, factory)
        for channel, formatter in FORMATTERS.items()
    }
