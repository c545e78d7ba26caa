# src/inventory_domain/domain/validators/webhook_validator.py
"""Webhook signature validator interface."""
from abc import ABC, abstractmethod


class IWebhookValidator(ABC):

    @abstractmethod
    def validate(self, raw_body: str, signature: str | None) -> bool:
        """Returns True if the signature authenticates the raw body. Never raises."""
        pass
