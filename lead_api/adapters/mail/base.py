from __future__ import annotations

from abc import ABC, abstractmethod
from dataclasses import dataclass


@dataclass(frozen=True)
class EmailMessage:
	"""A single transactional email, provider-agnostic."""

	sender: str
	to: str
	subject: str
	reply_to: str | None = None
	text: str | None = None
	html: str | None = None


class AbstractMailer(ABC):
	"""Interface for transactional email providers."""

	@abstractmethod
	async def send(self, message: EmailMessage) -> str:
		"""Hand one message to the provider.

		Args:
			message: Fully rendered message to deliver.

		Returns:
			str: Provider-assigned message id.

		Raises:
			DeliveryAppError: If the provider call fails or is rejected.
		"""
		...
