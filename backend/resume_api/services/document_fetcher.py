"""
Resume download over plain HTTP GET.
"""
import logging

import httpx

from ..schemas.candidate import RawDocument
from .error_handler import DocumentDownloadError

logger = logging.getLogger(__name__)


def _too_large(max_bytes: int) -> DocumentDownloadError:
    return DocumentDownloadError(
        f"Failed to download document: file exceeds {max_bytes // (1024 * 1024)}MB limit"
    )


async def download_document(
    url: str,
    client: httpx.AsyncClient,
    max_bytes: int = 10 * 1024 * 1024
) -> RawDocument:
    """
    Stream the resume bytes from the file host.

    The body is read chunk by chunk and abandoned as soon as it passes
    max_bytes, so an oversized file is never held in memory.

    Raises:
        DocumentDownloadError on transport failures, non-2xx responses or
        documents larger than max_bytes
    """
    logger.info(f"Downloading document: {url}")
    try:
        async with client.stream("GET", url, follow_redirects=True) as response:
            if not response.is_success:
                raise DocumentDownloadError(f"Failed to download document: {response.status_code}")

            declared = response.headers.get("content-length", "")
            if declared.isdigit() and int(declared) > max_bytes:
                raise _too_large(max_bytes)

            chunks = []
            received = 0
            async for chunk in response.aiter_bytes():
                received += len(chunk)
                if received > max_bytes:
                    raise _too_large(max_bytes)
                chunks.append(chunk)
    except httpx.TimeoutException:
        raise DocumentDownloadError("Failed to download document: request timed out")
    except (httpx.HTTPError, httpx.InvalidURL) as e:
        raise DocumentDownloadError(f"Failed to download document: {e}")

    content = b"".join(chunks)
    logger.info(f"Document downloaded: {len(content)} bytes")
    return RawDocument(data=content, source_url=url)
