"""
Akamai purge client (Fast Purge v3, cache tags).

Requests are authenticated with an Edge Grid ``EG1-HMAC-SHA256`` signature
computed per request.
"""

import base64
import hashlib
import hmac
import json
import uuid
from datetime import datetime, timezone
from typing import Any, Mapping, Optional, Sequence
from urllib.parse import urlsplit

import httpx

from ...context import RequestContext, next_request_id
from .base import INVALID_CONFIG_MESSAGE, assert_required_properties, purge_failure, record_request

DEFAULT_TIMEOUT_SECONDS = 10.0
AUTH_SCHEME = "EG1-HMAC-SHA256"


def _b64(data: bytes) -> str:
    return base64.b64encode(data).decode("ascii")


def _hmac_sha256(secret: str, message: str) -> str:
    return _b64(hmac.new(secret.encode("utf-8"), message.encode("utf-8"), hashlib.sha256).digest())


def edgegrid_timestamp(now: Optional[datetime] = None) -> str:
    """Format ``now`` as ``yyyyMMddTHH:mm:ss+0000`` (UTC, whole seconds)."""
    now = now or datetime.now(timezone.utc)
    return now.astimezone(timezone.utc).strftime("%Y%m%dT%H:%M:%S+0000")


def content_hash(method: str, body: str) -> str:
    """Base64 SHA-256 of a non-empty POST body; empty otherwise."""
    if method.upper() == "POST" and body:
        return _b64(hashlib.sha256(body.encode("utf-8")).digest())
    return ""


def data_to_sign(method: str, url: str, body: str, auth_header: str) -> str:
    parts = urlsplit(url)
    path = parts.path + (f"?{parts.query}" if parts.query else "")
    return "\t".join([
        method.upper(),
        parts.scheme,
        parts.netloc,
        path,
        "",
        content_hash(method, body),
        auth_header,
    ])


def sign_request(method: str, url: str, body: str, timestamp: str, client_secret: str, auth_header: str) -> str:
    # the signing key is the base64 text of the timestamp HMAC
    signing_key = _hmac_sha256(client_secret, timestamp)
    return _hmac_sha256(signing_key, data_to_sign(method, url, body, auth_header))


def compute_authorization_header(
    config: Mapping[str, Any],
    method: str,
    url: str,
    body: str,
    *,
    timestamp: Optional[str] = None,
    nonce: Optional[str] = None,
) -> str:
    """Build the signed ``Authorization`` header value for one request."""
    timestamp = timestamp or edgegrid_timestamp()
    nonce = nonce or str(uuid.uuid4())

    pairs = [
        ("client_token", config["clientToken"]),
        ("access_token", config["accessToken"]),
        ("timestamp", timestamp),
        ("nonce", nonce),
    ]
    auth_header = f"{AUTH_SCHEME} " + "".join(f"{key}={value};" for key, value in pairs)
    signature = sign_request(method, url, body, timestamp, config["clientSecret"], auth_header)
    return f"{auth_header}signature={signature}"


class AkamaiPurgeClient:
    """Purges Akamai cache tags in a single signed request."""

    name = "akamai"
    batch_size = None

    @staticmethod
    def validate(config: Mapping[str, Any]) -> None:
        assert_required_properties(
            config, INVALID_CONFIG_MESSAGE, "host", "endpoint", "clientSecret", "clientToken", "accessToken"
        )

    @staticmethod
    def supports_purge_by_key() -> bool:
        return True

    @staticmethod
    async def send_purge_request(
        ctx: RequestContext,
        purge_config: Mapping[str, Any],
        purge_type: str,
        objects: Sequence[str],
    ) -> httpx.Response:
        """POST a production delete request for ``objects`` (``tag`` or ``url``)."""
        url = f"https://{purge_config['endpoint']}/ccu/v3/delete/{purge_type}/production"
        body = json.dumps({"objects": list(objects)})
        headers = {
            "Accept": "application/json",
            "Content-Type": "application/json",
            "Authorization": compute_authorization_header(purge_config, "POST", url, body),
        }
        timeout = ctx.settings.akamai_timeout_seconds or DEFAULT_TIMEOUT_SECONDS
        async with httpx.AsyncClient(timeout=timeout) as client:
            return await client.post(url, headers=headers, content=body)

    @classmethod
    async def purge(cls, ctx: RequestContext, purge_config: Mapping[str, Any], keys: Sequence[str]) -> None:
        if not keys:
            return

        host = purge_config["host"]
        request_id = next_request_id(ctx)
        log = ctx.logger.bind(site_id=ctx.site_id, request_id=request_id, provider=cls.name, host=host)
        log.info("Purging cache tags", keys=list(keys))

        try:
            response = await cls.send_purge_request(ctx, purge_config, "tag", keys)
        except Exception as exc:
            raise purge_failure(
                ctx, request_id, cls.name, host,
                f"key purge failed: {exc}",
                key_count=len(keys),
            ) from exc

        if not response.is_success:
            raise purge_failure(
                ctx, request_id, cls.name, host,
                f"key purge failed: {response.status_code} - {response.text}",
                key_count=len(keys),
                status_code=response.status_code,
                body=response.text,
            )

        log.info("Key purge succeeded", status_code=response.status_code, response=response.text)
        record_request(ctx, cls.name, "ok", len(keys))
