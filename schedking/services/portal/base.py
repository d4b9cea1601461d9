"""Shared plumbing for the portal endpoint handlers."""

from typing import Any, Callable

import aiohttp
from loguru import logger

from ...core.exceptions import PortalResponseError


class PortalEndpoint:
    """Base class for handlers that talk to one scheduler URL through a shared HTTP session."""

    def __init__(
        self,
        scheduler_url: str,
        http_session_getter: Callable[[], aiohttp.ClientSession],
    ):
        """
        Initialize portal endpoint handler.

        Args:
            scheduler_url: Scheduler page URL
            http_session_getter: Callable that returns the HTTP session
        """
        self.scheduler_url = scheduler_url
        self._http_session_getter = http_session_getter

    @property
    def _session(self) -> aiohttp.ClientSession:
        """Get HTTP session from parent client."""
        return self._http_session_getter()

    async def _read_text(self, response: aiohttp.ClientResponse, step: str) -> str:
        """
        Read a markup response body.

        Raises:
            PortalResponseError: If the portal did not answer with 200
        """
        body = await response.text()
        if response.status != 200:
            logger.error(f"{step} failed with status {response.status}")
            logger.debug(f"Error details: {body[:200]}...")
            raise PortalResponseError(
                f"{step} failed with status {response.status}", status=response.status
            )
        return body

    async def _read_json(self, response: aiohttp.ClientResponse, step: str) -> Any:
        """
        Read a JSON response body.

        The portal serves JSON with an HTML content type, so the content type
        is not checked.

        Raises:
            PortalResponseError: If the status is not 200 or the body is not JSON
        """
        if response.status != 200:
            error_text = await response.text()
            logger.error(f"{step} failed with status {response.status}")
            logger.debug(f"Error details: {error_text[:200]}...")
            raise PortalResponseError(
                f"{step} failed with status {response.status}", status=response.status
            )
        try:
            return await response.json(content_type=None)
        except (aiohttp.ContentTypeError, ValueError):
            error_text = await response.text()
            logger.error(
                f"Unexpected non-JSON response from {step} (status={response.status}): "
                f"{error_text[:200]}..."
            )
            raise PortalResponseError(f"Non-JSON response from {step}", status=response.status)
