"""Torrent helpers: info hashes from magnets and .torrent files, magnet synthesis."""

import base64
import hashlib
import re
from dataclasses import dataclass
from typing import Any, Optional, Tuple
from urllib.parse import parse_qs, urljoin, urlparse

import requests

from torrentrss.core.logger import setup_logger

logger = setup_logger(__name__)

_BTIH = re.compile(r"urn:btih:([a-fA-F0-9]{40}|[a-zA-Z0-9]{32})")
_HEX = re.compile(r"^[a-fA-F0-9]+$")
_REDIRECT_CODES = (301, 302, 303, 307, 308)


@dataclass
class TorrentInfo:
    """What we learned from a release's download URL."""

    info_hash: Optional[str]
    """Lowercase hex info_hash, or None if extraction failed."""

    torrent_data: Optional[bytes]
    """Raw .torrent file content, only populated for .torrent URLs."""

    is_magnet: bool

    magnet_url: Optional[str] = None


def build_magnet_uri(info_hash: str) -> str:
    """Synthesize a bare magnet URI for a hash."""
    return f"magnet:?xt=urn:btih:{info_hash}"


def extract_hash_from_magnet(magnet_url: str) -> Optional[str]:
    """Return a magnet link's BitTorrent info hash as lowercase hex.

    Both the 40-char hex and 32-char base32 forms of ``xt=urn:btih:`` are
    accepted. Returns None for anything that is not a magnet with a btih.
    """
    if not magnet_url or not magnet_url.startswith("magnet:"):
        return None

    for xt in parse_qs(urlparse(magnet_url).query).get("xt", []):
        match = _BTIH.match(xt)
        if not match:
            continue
        hash_value = match.group(1)
        if len(hash_value) == 32 and not _HEX.match(hash_value):
            try:
                return base64.b32decode(hash_value.upper()).hex()
            except ValueError:
                logger.debug(f"Magnet hash is not valid base32: {hash_value}")
        return hash_value.lower()

    return None


def _decode_at(data: bytes, pos: int) -> Tuple[Any, int]:
    token = data[pos:pos + 1]

    if token == b'i':
        end = data.index(b'e', pos)
        return int(data[pos + 1:end]), end + 1

    if token.isdigit():
        colon = data.index(b':', pos)
        start = colon + 1
        end = start + int(data[pos:colon])
        if end > len(data):
            raise ValueError(f"Bencoded string at offset {pos} runs past the end of the data")
        return data[start:end], end

    if token in (b'l', b'd'):
        items = []
        pos += 1
        while data[pos:pos + 1] != b'e':
            if pos >= len(data):
                raise ValueError("Unterminated bencoded container")
            value, pos = _decode_at(data, pos)
            items.append(value)
        if token == b'l':
            return items, pos + 1
        return dict(zip(items[::2], items[1::2])), pos + 1

    raise ValueError(f"Invalid bencode token {token!r} at offset {pos}")


def bencode_decode(data: bytes) -> Tuple[Any, bytes]:
    """Decode one bencoded value. Returns (value, remaining_bytes)."""
    value, end = _decode_at(data, 0)
    return value, data[end:]


def bencode_encode(value: Any) -> bytes:
    """Encode str, bytes, int, list or dict values. Dict keys are sorted."""
    if isinstance(value, str):
        value = value.encode('utf-8')
    if isinstance(value, bytes):
        return b'%d:%s' % (len(value), value)
    if isinstance(value, bool) or not isinstance(value, (int, list, dict)):
        raise ValueError(f"Cannot bencode type {type(value).__name__}")
    if isinstance(value, int):
        return b'i%de' % value
    if isinstance(value, list):
        return b'l' + b''.join(bencode_encode(item) for item in value) + b'e'
    return b'd' + b''.join(
        bencode_encode(key) + bencode_encode(value[key]) for key in sorted(value)
    ) + b'e'


def extract_info_hash_from_torrent(torrent_data: bytes) -> Optional[str]:
    """Compute the info_hash (sha1 of the bencoded info dict) of a .torrent file."""
    try:
        decoded, _ = bencode_decode(torrent_data)
        if not isinstance(decoded, dict) or b'info' not in decoded:
            return None
        return hashlib.sha1(bencode_encode(decoded[b'info'])).hexdigest().lower()
    except (ValueError, IndexError, TypeError, RecursionError) as e:
        logger.debug(f"Failed to parse torrent file: {e}")
        return None


def _magnet_info(magnet_url: str) -> TorrentInfo:
    return TorrentInfo(
        info_hash=extract_hash_from_magnet(magnet_url),
        torrent_data=None,
        is_magnet=True,
        magnet_url=magnet_url,
    )


def fetch_torrent(url: str, timeout: int = 30) -> TorrentInfo:
    """Resolve a download URL to a magnet link or .torrent file.

    Some indexers redirect to a magnet link or return one as the response
    body, so both are handled before treating the response as a .torrent.

    Raises:
        requests.RequestException: The URL could not be fetched.
    """
    if url.startswith("magnet:"):
        return _magnet_info(url)

    logger.debug(f"Fetching torrent file from: {url[:80]}...")
    resp = requests.get(url, timeout=timeout, allow_redirects=False)

    if resp.status_code in _REDIRECT_CODES:
        redirect_url = urljoin(url, resp.headers.get("Location", ""))
        if redirect_url.startswith("magnet:"):
            logger.debug("Download URL redirected to magnet link")
            return _magnet_info(redirect_url)
        logger.debug(f"Following redirect to: {redirect_url[:80]}...")
        resp = requests.get(redirect_url, timeout=timeout)

    resp.raise_for_status()
    torrent_data = resp.content

    # Magnet links returned as plain text are short
    if len(torrent_data) < 2000:
        text_content = torrent_data.decode("utf-8", errors="ignore").strip()
        if text_content.startswith("magnet:"):
            logger.debug("Download URL returned magnet link as response body")
            return _magnet_info(text_content)

    info_hash = extract_info_hash_from_torrent(torrent_data)
    if info_hash:
        logger.debug(f"Extracted hash from torrent file: {info_hash}")
    else:
        logger.warning(f"Could not extract hash from torrent file at {url[:80]}")
    return TorrentInfo(info_hash=info_hash, torrent_data=torrent_data, is_magnet=False)
