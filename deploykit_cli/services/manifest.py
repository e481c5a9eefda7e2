"""Retrieve the variant manifest (``recipe.json``).

Network installs download it from the release server; offline installs
read the copy shipped on the live media.
"""

from __future__ import annotations

import asyncio
import json
from pathlib import Path

import aiohttp

from deploykit_cli.config import settings
from deploykit_cli.daemon.exceptions import ManifestError
from deploykit_cli.domain import VariantManifest
from deploykit_cli.logging import get_logger

log = get_logger(source="manifest", tags=["manifest"])


async def fetch_manifest(
    url: str,
    *,
    user_agent: str | None = None,
    timeout_seconds: float | None = None,
) -> VariantManifest:
    """Download and parse the manifest.

    Raises:
        ManifestError: Network error, non-2xx status or malformed document
    """
    user_agent = user_agent or settings.get_setting("http_user_agent", "deploykit")
    if timeout_seconds is None:
        timeout_seconds = settings.get_float("http_timeout_seconds", 60)
    timeout = aiohttp.ClientTimeout(total=timeout_seconds)

    log.info("Downloading recipe file ...")
    try:
        async with aiohttp.ClientSession(
            timeout=timeout, headers={"User-Agent": user_agent}
        ) as session:
            async with session.get(url) as resp:
                resp.raise_for_status()
                data = await resp.json(content_type=None)
    except aiohttp.ClientResponseError as e:
        raise ManifestError(url, f"HTTP {e.status}") from e
    except aiohttp.ClientError as e:
        log.error(f"Network error fetching manifest: {e}")
        raise ManifestError(url, f"Network error: {e}") from e
    except (asyncio.TimeoutError, ValueError) as e:
        raise ManifestError(url, str(e) or type(e).__name__) from e

    return parse_manifest(data, source=url)


def read_manifest(path: str | Path) -> VariantManifest:
    """Read the manifest from the live media."""
    path = Path(path)
    try:
        data = json.loads(path.read_text(encoding="utf-8"))
    except OSError as e:
        raise ManifestError(str(path), e.strerror or str(e)) from e
    except UnicodeDecodeError as e:
        raise ManifestError(str(path), f"not valid UTF-8: {e}") from e
    except json.JSONDecodeError as e:
        raise ManifestError(str(path), f"invalid JSON: {e}") from e
    return parse_manifest(data, source=str(path))


def parse_manifest(data, source: str) -> VariantManifest:
    try:
        manifest = VariantManifest.from_dict(data)
    except (KeyError, TypeError, ValueError) as e:
        raise ManifestError(source, f"malformed manifest: {e}") from e
    log.debug(f"Manifest from {source} lists {len(manifest.variants)} variant(s)")
    return manifest


def load_manifest(offline: bool) -> VariantManifest:
    """Load the manifest for the selected install mode."""
    if offline:
        return read_manifest(settings.get_setting("offline_manifest_path"))
    return asyncio.run(fetch_manifest(settings.get_setting("manifest_url")))
