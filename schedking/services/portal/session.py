"""Session bootstrap - obtains the portal's session and login tokens."""

from loguru import logger

from ...utils.masking import mask_token
from .base import PortalEndpoint
from .models import PortalSession
from .parser import parse_session_tokens


class SessionManager(PortalEndpoint):
    """Starts portal sessions for a location."""

    async def bootstrap(self, location_id: str) -> PortalSession:
        """
        Load the location's landing page and read the session tokens from it.

        A new session object is returned on every call; identity and filter
        options resolved on a previous session are not carried over.

        Args:
            location_id: Portal location identifier (domid)

        Returns:
            PortalSession with both tokens set

        Raises:
            SessionError: If the landing page does not carry both tokens
            PortalResponseError: If the landing page could not be loaded
        """
        logger.info(f"Creating portal session for location {location_id}")

        async with self._session.get(
            self.scheduler_url, params={"domid": location_id}
        ) as response:
            html = await self._read_text(response, "Session bootstrap")

        session_token, login_token = parse_session_tokens(html)
        logger.debug(f"Session {mask_token(session_token)} created for location {location_id}")
        return PortalSession(
            location_id=location_id,
            session_token=session_token,
            login_token=login_token,
        )
