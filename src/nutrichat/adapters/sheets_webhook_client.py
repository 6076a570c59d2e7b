"""Spreadsheet webhook adapter."""

from dataclasses import dataclass

import httpx

from nutrichat.services.sync import SheetsWebhookClient

DEFAULT_TIMEOUT_SECONDS = 5.0


@dataclass
class HttpxSheetsWebhookClient(SheetsWebhookClient):
    """Posts meal rows to a Google Apps Script web app.

    Rows are posted while the assistant turn waits, so the timeout bounds how
    long a slow spreadsheet can hold up a reply.
    """

    http_client: httpx.AsyncClient
    timeout: float = DEFAULT_TIMEOUT_SECONDS

    @classmethod
    def create(
        cls, timeout: float = DEFAULT_TIMEOUT_SECONDS
    ) -> "HttpxSheetsWebhookClient":
        """Create a webhook client with a managed httpx session."""
        # Apps Script answers POSTs with a redirect to the script output.
        return cls(
            http_client=httpx.AsyncClient(follow_redirects=True), timeout=timeout
        )

    async def post_row(self, url: str, row: dict[str, object]) -> None:
        """POST a JSON row to the webhook URL."""
        response = await self.http_client.post(url, json=row, timeout=self.timeout)
        response.raise_for_status()

    async def close(self) -> None:
        """Close the underlying HTTP client session."""
        await self.http_client.aclose()
