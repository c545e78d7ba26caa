"""Shopify webhook HMAC-SHA256 signature validator."""

import base64
import hashlib
import hmac
import logging

from src.common.config.settings import settings
from src.inventory_domain.domain.validators.webhook_validator import IWebhookValidator

logger = logging.getLogger(__name__)


class ShopifyWebhookValidator(IWebhookValidator):
    """
    Verifies the X-Shopify-Hmac-SHA256 header.

    Shopify signs the raw request body with the app's shared secret and sends
    the base64-encoded HMAC-SHA256 digest. Only that encoding is accepted.
    """

    def __init__(self, shared_secret: str | None = None) -> None:
        self.shared_secret = settings.SHOPIFY_WEBHOOK_SECRET if shared_secret is None else shared_secret

    def compute_signature(self, raw_body: str) -> str:
        """Returns the base64 HMAC-SHA256 digest of the body under the shared secret."""
        digest = hmac.new(
            self.shared_secret.encode("utf-8"),
            raw_body.encode("utf-8"),
            hashlib.sha256,
        ).digest()
        return base64.b64encode(digest).decode("utf-8")

    def validate(self, raw_body: str, signature: str | None) -> bool:
        if not self.shared_secret:
            logger.warning("SHOPIFY_WEBHOOK_SECRET not set, rejecting webhook")
            return False

        if not signature:
            logger.warning("Missing X-Shopify-Hmac-SHA256 signature")
            return False

        if not raw_body:
            logger.warning("Empty webhook body")
            return False

        # Compared as base64 text; a hex digest of the same MAC does not match
        is_valid = hmac.compare_digest(self.compute_signature(raw_body).encode("utf-8"), signature.encode("utf-8"))

        if not is_valid:
            logger.warning("Invalid webhook signature")

        return is_valid
