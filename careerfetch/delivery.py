"""
Signed webhook delivery of fetched jobs.

The body is serialized once; the HMAC-SHA256 signature is computed over those
exact bytes and the same bytes are POSTed, so a receiver can recompute it.
"""

from __future__ import annotations

import hashlib
import hmac
import json
import logging
import secrets
import time
from typing import Any, Dict, Optional

from careerfetch.fetchers.http import HttpClient, HttpResponse
from careerfetch.models import FetchResult, now_utc_iso

logger = logging.getLogger(__name__)

SIGNATURE_PREFIX = "sha256="
MIN_SECRET_LENGTH = 32


class DeliveryError(Exception):
    """The webhook endpoint did not accept the payload."""

    def __init__(self, message: str, status: Optional[int] = None, response: Any = None):
        super().__init__(message)
        self.status = status
        self.response = response


def sign_payload(body: bytes, secret: str) -> str:
    """``sha256=<hex HMAC-SHA256 of body>``"""
    digest = hmac.new(
        secret.encode(),
        body,
        hashlib.sha256
    ).hexdigest()
    return f"{SIGNATURE_PREFIX}{digest}"


def verify_signature(body: bytes, signature: str, secret: str) -> bool:
    """Verify a webhook signature over the exact received bytes."""
    if not signature:
        return False
    expected_signature = sign_payload(body, secret)
    if not signature.startswith(SIGNATURE_PREFIX):
        signature = SIGNATURE_PREFIX + signature
    return hmac.compare_digest(expected_signature, signature)


def generate_request_id() -> str:
    return f"req_{secrets.token_hex(16)}"


def build_payload(
    result: FetchResult,
    source: str,
    request_id: Optional[str] = None,
    timestamp: Optional[str] = None,
) -> bytes:
    payload: Dict[str, Any] = {
        "source": source,
        "jobs": [job.to_dict() for job in result.jobs],
        "timestamp": timestamp or now_utc_iso(),
        "requestId": request_id or generate_request_id(),
        "totalCount": result.total_count,
    }
    return json.dumps(payload, separators=(",", ":"), ensure_ascii=False).encode("utf-8")


class WebhookClient:
    """
    POSTs signed job payloads to a downstream webhook.
    """

    USER_AGENT = "careerfetch-webhook/1.0"

    def __init__(self, url: str, secret: str, http_client: Optional[HttpClient] = None):
        if not url:
            raise ValueError("webhook url is required")
        if not secret or len(secret) < MIN_SECRET_LENGTH:
            raise ValueError(f"webhook secret must be at least {MIN_SECRET_LENGTH} characters")
        self.url = url
        self.secret = secret
        self.http_client = http_client

    async def deliver(self, result: FetchResult, source: str) -> HttpResponse:
        request_id = generate_request_id()
        body = build_payload(result, source, request_id=request_id)
        headers = {
            "Content-Type": "application/json",
            "X-Signature": sign_payload(body, self.secret),
            "X-Webhook-Timestamp": str(int(time.time())),
            "X-Request-ID": request_id,
            "User-Agent": self.USER_AGENT,
        }

        logger.info("Delivering %d jobs to webhook (request %s)", result.total_count, request_id)

        if self.http_client is not None:
            response = await self.http_client.post(self.url, data=body, headers=headers)
        else:
            async with HttpClient() as client:
                response = await client.post(self.url, data=body, headers=headers)

        if not response.success:
            raise DeliveryError(
                f"Webhook delivery failed with status {response.status}",
                status=response.status,
                response=response.data,
            )

        logger.info("Webhook delivery %s accepted (HTTP %d)", request_id, response.status)
        return response
