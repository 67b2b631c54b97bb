"""
Approved outbound webhooks (signup notifications, billing portal links).
"""

import logging
from dataclasses import dataclass
from typing import Any, Dict, List, Optional
from urllib.parse import urlparse

import httpx

from .config import Settings

logger = logging.getLogger(__name__)

SIGNUP_WEBHOOK = "SIGNUP_WEBHOOK"
BILLING_WEBHOOK = "BILLING_WEBHOOK"

USER_AGENT = "Ovio-Merchant-App/1.0"


@dataclass(frozen=True)
class WebhookConfig:
    url: str
    name: str
    description: str
    enabled: bool = True


@dataclass
class WebhookResult:
    success: bool
    data: Any = None
    error: Optional[str] = None


class WebhookRegistry:
    """Webhook endpoints the backend is allowed to call."""

    def __init__(self, webhooks: Dict[str, WebhookConfig], timeout: float = 10.0,
                 transport: Optional[httpx.AsyncBaseTransport] = None):
        self.webhooks = webhooks
        self.timeout = timeout
        self.transport = transport

    @classmethod
    def from_settings(cls, settings: Settings, **kwargs) -> "WebhookRegistry":
        return cls(
            {
                SIGNUP_WEBHOOK: WebhookConfig(
                    url=settings.signup_webhook_url,
                    name="Signup Webhook",
                    description="Handles new merchant signup notifications",
                    enabled=settings.signup_webhook_enabled,
                ),
                BILLING_WEBHOOK: WebhookConfig(
                    url=settings.billing_webhook_url,
                    name="Billing Webhook",
                    description="Handles billing and payment notifications",
                    enabled=settings.billing_webhook_enabled,
                ),
            },
            timeout=settings.webhook_timeout,
            **kwargs,
        )

    def get_webhook_url(self, key: str) -> Optional[str]:
        webhook = self.webhooks.get(key)
        return webhook.url if webhook and webhook.enabled else None

    def is_approved_webhook(self, url: str) -> bool:
        """Registered, enabled and served over https."""
        if urlparse(url).scheme != "https":
            return False
        return any(w.enabled and w.url == url for w in self.webhooks.values())

    def enabled_webhooks(self) -> List[WebhookConfig]:
        return [w for w in self.webhooks.values() if w.enabled]

    async def call(self, key: str, payload: Dict[str, Any]) -> WebhookResult:
        url = self.get_webhook_url(key)
        if not url:
            return WebhookResult(False, error="Webhook not configured or disabled")
        if not self.is_approved_webhook(url):
            logger.error(f"Refusing to call unapproved webhook {key}: {url}")
            return WebhookResult(False, error="Webhook URL is not approved")

        try:
            async with httpx.AsyncClient(timeout=self.timeout, transport=self.transport) as client:
                response = await client.post(
                    url,
                    json=payload,
                    headers={"Content-Type": "application/json", "User-Agent": USER_AGENT},
                )
        except httpx.HTTPError as e:
            logger.error(f"Webhook {key} request failed: {e}")
            return WebhookResult(False, error=str(e) or type(e).__name__)

        if response.is_error:
            return WebhookResult(
                False,
                error=f"Webhook responded with status {response.status_code}: {response.reason_phrase}",
            )

        try:
            result = response.json()
        except ValueError:
            return WebhookResult(False, error="Webhook returned invalid JSON")

        error = validate_webhook_response(result)
        if error:
            return WebhookResult(False, error=error)
        return WebhookResult(True, data=result)


def validate_webhook_response(response: Any) -> Optional[str]:
    """Error message for an unusable webhook response, or None if it is fine."""
    if not response:
        return "Empty response"

    if isinstance(response, dict) and "success" in response:
        if response["success"] is True:
            return None
        return response.get("error") or "Webhook returned success: false"

    # No success field: any response counts
    return None
