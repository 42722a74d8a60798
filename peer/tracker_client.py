"""HTTP client giving peers the registry interface of a remote tracker."""

import asyncio
import uuid
from typing import Dict, List, Optional, Tuple
from urllib.parse import quote

import httpx

from common.exceptions import P2PShareError, TrackerUnavailableError, ValidationError
from common.logging_config import get_logger
from common.types import PeerAddress
from peer.config import TRACKER_MAX_RETRIES, TRACKER_TIMEOUT, TRACKER_URL

logger = get_logger(__name__)


def _quote(owner: str) -> str:
    """Encode owner as a single URL path segment."""
    return quote(owner, safe='')


class TrackerClient:
    """
    Async tracker API client with retry logic and error handling.

    Exposes the same coroutine methods as tracker.registry.Registry, so a
    listener, port allocator or peer node can use either one.
    """

    def __init__(
        self,
        base_url: str = TRACKER_URL,
        timeout: float = TRACKER_TIMEOUT,
        max_retries: int = TRACKER_MAX_RETRIES,
        retry_backoff_multiplier: float = 2,
        transport: Optional[httpx.AsyncBaseTransport] = None
    ):
        """
        Initialize tracker client.

        Args:
            base_url: Tracker base URL (e.g. "http://localhost:8000")
            timeout: Per-request timeout in seconds
            max_retries: Retries on network errors and 5xx responses
            retry_backoff_multiplier: Delay before retry n is multiplier ** n seconds
            transport: Optional httpx transport (tests inject mock/ASGI transports)
        """
        self.base_url = base_url
        self.max_retries = max_retries
        self.retry_backoff_multiplier = retry_backoff_multiplier
        self.session = httpx.AsyncClient(
            base_url=base_url,
            timeout=timeout,
            transport=transport
        )
        logger.info(f"Initialized TrackerClient [base_url={base_url}]")

    async def close(self) -> None:
        await self.session.aclose()

    async def __aenter__(self) -> 'TrackerClient':
        return self

    async def __aexit__(self, exc_type, exc, tb) -> None:
        await self.close()

    async def _request_with_retry(self, method: str, endpoint: str, **kwargs) -> httpx.Response:
        """
        Make HTTP request with retry logic on 5xx errors and transport failures
        (connect, read and write errors, timeouts, protocol errors).

        Returns:
            HTTP response object (2xx or 4xx)

        Raises:
            TrackerUnavailableError: If retries are exhausted
        """
        request_id = str(uuid.uuid4())
        kwargs.setdefault('headers', {})['X-Request-ID'] = request_id

        logger.debug(f"Making request: {method} {endpoint} [request_id={request_id}]")

        last_error = None
        for attempt in range(self.max_retries + 1):
            try:
                response = await self.session.request(method, endpoint, **kwargs)
            except httpx.TransportError as e:
                last_error = f"{type(e).__name__}: {e}"
            else:
                if response.status_code < 500:
                    return response
                last_error = f"status={response.status_code}"

            if attempt < self.max_retries:
                delay = self.retry_backoff_multiplier ** attempt
                logger.warning(
                    f"Tracker request failed (attempt {attempt + 1}/{self.max_retries + 1}): "
                    f"{method} {endpoint} {last_error}, retrying in {delay}s [request_id={request_id}]"
                )
                await asyncio.sleep(delay)

        logger.error(
            f"Tracker request failed (max retries exceeded): {method} {endpoint} "
            f"{last_error} [request_id={request_id}]"
        )
        raise TrackerUnavailableError(f"Cannot reach tracker at {self.base_url} ({last_error})")

    @staticmethod
    def _raise_for_error(response: httpx.Response) -> None:
        """Translate tracker error responses back into exceptions."""
        if response.status_code < 400:
            return

        try:
            body = response.json()
        except ValueError:
            body = None
        if not isinstance(body, dict):
            body = {}

        detail = body.get('detail', response.text)

        if response.status_code == 400:
            raise ValidationError(str(detail), code=body.get('code', 'VALIDATION_ERROR'))
        if response.status_code == 422:
            raise ValidationError(f"Request rejected by tracker: {detail}", code="INVALID_REQUEST")
        raise P2PShareError(f"Tracker error {response.status_code}: {detail}")

    async def register(self, owner: str, files: Optional[str], address: Optional[PeerAddress] = None) -> None:
        payload = {'owner': owner, 'files': files}
        if address is not None:
            payload.update(address.to_dict())
        response = await self._request_with_retry('POST', '/files', json=payload)
        self._raise_for_error(response)

    async def unregister(self, owner: str, files: Optional[str]) -> None:
        response = await self._request_with_retry(
            'POST', '/files/unregister', json={'owner': owner, 'files': files}
        )
        self._raise_for_error(response)

    async def add_peer(self, owner: str, address: PeerAddress) -> None:
        response = await self._request_with_retry(
            'POST', '/peers', json={'owner': owner, **address.to_dict()}
        )
        self._raise_for_error(response)

    async def remove_peer(self, owner: str) -> None:
        response = await self._request_with_retry('DELETE', f'/peers/{_quote(owner)}')
        self._raise_for_error(response)

    async def list_all(self) -> List[Tuple[str, List[str]]]:
        response = await self._request_with_retry('GET', '/files')
        self._raise_for_error(response)
        return [(record['owner'], record['paths']) for record in response.json()['records']]

    async def files_of(self, owner: str) -> List[str]:
        response = await self._request_with_retry('GET', f'/files/{_quote(owner)}')
        self._raise_for_error(response)
        return response.json()['paths']

    async def address_of(self, owner: str) -> Optional[PeerAddress]:
        response = await self._request_with_retry('GET', f'/peers/{_quote(owner)}/address')
        if response.status_code == 404:
            return None
        self._raise_for_error(response)
        data = response.json()
        return PeerAddress(data['ip'], data['port'])

    async def port_of(self, owner: str) -> Optional[int]:
        address = await self.address_of(owner)
        return address.port if address else None

    async def all_correspondence(self) -> Dict[str, PeerAddress]:
        response = await self._request_with_retry('GET', '/peers')
        self._raise_for_error(response)
        return {
            owner: PeerAddress(address['ip'], address['port'])
            for owner, address in response.json()['peers'].items()
        }
