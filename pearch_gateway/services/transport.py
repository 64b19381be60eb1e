import os
import time
from typing import Any, Dict, Optional
import httpx
from prometheus_client import Counter, Histogram
from pearch_gateway.errors import TransportError
from pearch_gateway.utils.logger import logger

PEARCH_REQUESTS = Counter(
    "pearch_http_requests_total",
    "Total number of requests sent to the Pearch API",
    ["method", "status"]
)

PEARCH_REQUEST_DURATION = Histogram(
    "pearch_http_request_duration_seconds",
    "Histogram of Pearch API request duration",
    ["method"]
)


class PearchTransport:
    """Sends one request to the Pearch API and returns the decoded JSON body.

    A shared ``httpx.AsyncClient`` may be injected; otherwise a short-lived
    client is opened per request.
    """

    def __init__(self, client: Optional[httpx.AsyncClient] = None, timeout: Optional[float] = None):
        self.client = client
        self.timeout = timeout if timeout is not None else float(os.getenv("PEARCH_HTTP_TIMEOUT", "30"))

    async def request(
        self,
        method: str,
        url: str,
        headers: Dict[str, str],
        body: Optional[Dict[str, Any]] = None
    ) -> Dict[str, Any]:
        start_time = time.time()
        try:
            if self.client is not None:
                response = await self.client.request(method, url, headers=headers, json=body)
            else:
                async with httpx.AsyncClient(timeout=self.timeout) as client:
                    response = await client.request(method, url, headers=headers, json=body)
        except httpx.HTTPError as e:
            PEARCH_REQUESTS.labels(method=method, status="exception").inc()
            logger.error("%s %s failed: %s", method, url, e)
            raise TransportError(f"{method} {url} failed: {e}") from e
        finally:
            PEARCH_REQUEST_DURATION.labels(method=method).observe(time.time() - start_time)

        if response.status_code >= 400:
            PEARCH_REQUESTS.labels(method=method, status="error").inc()
            logger.warning("%s %s returned status %s: %s", method, url, response.status_code, response.text)
            raise TransportError(
                f"{method} {url} returned status {response.status_code}: {response.text}",
                status_code=response.status_code
            )

        try:
            data = response.json()
        except ValueError as e:
            PEARCH_REQUESTS.labels(method=method, status="error").inc()
            raise TransportError(
                f"{method} {url} returned a non-JSON body",
                status_code=response.status_code
            ) from e

        if not isinstance(data, dict):
            PEARCH_REQUESTS.labels(method=method, status="error").inc()
            raise TransportError(
                f"{method} {url} returned {type(data).__name__}, expected a JSON object",
                status_code=response.status_code
            )

        PEARCH_REQUESTS.labels(method=method, status="success").inc()
        return data


transport = PearchTransport()
