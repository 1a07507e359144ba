# ABOUTME: Async client for the Strapi upload plugin's file metadata endpoint
# ABOUTME: Looks up a file's id, url and updatedAt from the URL found in rich text

import httpx
from pydantic import ValidationError
from tenacity import retry, retry_if_exception_type, stop_after_attempt, wait_exponential

from strapi_media.core.base import FileMetadataError
from strapi_media.core.models import RemoteFileDescriptor
from strapi_media.utils.logging import get_logger, log_api_call


class StrapiClient:
    """Queries Strapi for uploaded file metadata."""

    FILES_ENDPOINT = "/api/upload/files"

    def __init__(
        self,
        api_url: str,
        api_token: str = "",
        client: httpx.AsyncClient | None = None,
        timeout: float = 30.0,
    ):
        """Initialize the client.

        Args:
            api_url: Base URL of the Strapi instance
            api_token: Bearer token, omitted from requests when empty
            client: Pre-configured HTTP client (tests pass one with a mock transport)
            timeout: Request timeout in seconds
        """
        self.api_url = api_url.rstrip("/")
        headers = {"Authorization": f"Bearer {api_token}"} if api_token else {}
        self.http_client = client or httpx.AsyncClient(base_url=self.api_url, headers=headers, timeout=timeout)
        self.logger = get_logger(__name__)

    async def find_file(self, url: str) -> RemoteFileDescriptor | None:
        """Return the file whose URL matches ``url``, or None.

        Args:
            url: File URL as stored by Strapi, e.g. ``/uploads/pic.png``

        Raises:
            FileMetadataError: If the request fails or the response is not a file list
        """
        try:
            files = await self._query_files(url)
        except (httpx.HTTPError, ValueError) as e:
            raise FileMetadataError(f"File lookup failed for {url}: {e}") from e

        if not isinstance(files, list):
            raise FileMetadataError(f"Unexpected file lookup response for {url}: {type(files).__name__}")
        if not files:
            self.logger.debug("No Strapi file matches URL", url=url)
            return None
        try:
            return RemoteFileDescriptor.model_validate(files[0])
        except ValidationError as e:
            raise FileMetadataError(f"Malformed file metadata for {url}: {e}") from e

    @retry(
        stop=stop_after_attempt(3),
        wait=wait_exponential(multiplier=0.5, max=4),
        retry=retry_if_exception_type(httpx.TransportError),
        reraise=True,
    )
    @log_api_call("strapi_upload_files")
    async def _query_files(self, url: str):
        response = await self.http_client.get(self.FILES_ENDPOINT, params={"filters[url]": url})
        response.raise_for_status()
        return response.json()

    async def close(self) -> None:
        await self.http_client.aclose()
