"""RSS document codec for the release feed.

The feed file is both our durable state and what torrent clients subscribe to,
so every encode must produce a document the next decode reads back unchanged.

Layout::

    <rss version="2.0">
      <title/> <link/> <description/>
      <channel>
        <item>
          <title/> <link/> <guid isPermaLink="false"/> <pubDate/>
          <description/>            (optional)
          <enclosure url="..." length="0" type="application/x-bittorrent"/>
        </item>
        ...
      </channel>
    </rss>
"""

import re
import xml.etree.ElementTree as ET
from dataclasses import dataclass, field
from datetime import datetime
from email.utils import parsedate_to_datetime
from typing import List, Optional

from torrentrss.feed.errors import CorruptFeedError

FEED_TITLE = "torrentrss feed"
FEED_LINK = "https://github.com/torrentrss/torrentrss"
FEED_DESCRIPTION = "Releases announced by torrentrss"

ENCLOSURE_TYPE = "application/x-bittorrent"

# Fixed English names; strftime's %a/%b follow the process locale.
_WEEKDAYS = ("Mon", "Tue", "Wed", "Thu", "Fri", "Sat", "Sun")
_MONTHS = ("Jan", "Feb", "Mar", "Apr", "May", "Jun", "Jul", "Aug", "Sep", "Oct", "Nov", "Dec")

# Code points XML 1.0 cannot carry, even as character references.
_XML_ILLEGAL = re.compile("[^\t\n\r\x20-\ud7ff\ue000-\ufffd\U00010000-\U0010ffff]")


@dataclass(frozen=True)
class ReleaseRecord:
    """One announced release in the feed."""

    title: str
    content_hash: str
    magnet_uri: str
    published_at: datetime
    description: Optional[str] = None

    def matches_hash(self, content_hash: str) -> bool:
        return self.content_hash.lower() == content_hash.lower()


@dataclass
class Feed:
    """Ordered feed contents, oldest record first."""

    records: List[ReleaseRecord] = field(default_factory=list)
    title: str = FEED_TITLE
    link: str = FEED_LINK
    description: str = FEED_DESCRIPTION

    @classmethod
    def empty(cls) -> "Feed":
        return cls()

    def __len__(self) -> int:
        return len(self.records)

    def contains_hash(self, content_hash: str) -> bool:
        return any(record.matches_hash(content_hash) for record in self.records)


def strip_illegal_xml_chars(value: Optional[str]) -> Optional[str]:
    """Drop characters that cannot appear in an XML document."""
    if value is None:
        return None
    return _XML_ILLEGAL.sub("", value)


def format_pub_date(value: datetime) -> str:
    """Format a timestamp like ``Wed, 4 Sep 2024 10:15:30 +0000``.

    Naive datetimes are taken as local time.
    """
    if value.tzinfo is None:
        value = value.astimezone()

    offset = value.strftime("%z") or "+0000"
    return (
        f"{_WEEKDAYS[value.weekday()]}, {value.day} {_MONTHS[value.month - 1]} "
        f"{value.year:04d} {value:%H:%M:%S} {offset}"
    )


def parse_pub_date(value: str) -> datetime:
    """Parse a pubDate written by format_pub_date (or any RFC 822 date)."""
    try:
        return parsedate_to_datetime(value.strip())
    except (TypeError, ValueError, IndexError) as e:
        raise CorruptFeedError(f"Invalid pubDate: {value!r}") from e


def _text(parent: ET.Element, tag: str, default: Optional[str] = None) -> Optional[str]:
    child = parent.find(tag)
    if child is None:
        return default
    return child.text or ""


def _record_to_element(record: ReleaseRecord) -> ET.Element:
    magnet_uri = strip_illegal_xml_chars(record.magnet_uri)
    item = ET.Element("item")
    ET.SubElement(item, "title").text = strip_illegal_xml_chars(record.title)
    ET.SubElement(item, "link").text = magnet_uri
    guid = ET.SubElement(item, "guid", {"isPermaLink": "false"})
    guid.text = strip_illegal_xml_chars(record.content_hash)
    ET.SubElement(item, "pubDate").text = format_pub_date(record.published_at)
    if record.description is not None:
        ET.SubElement(item, "description").text = strip_illegal_xml_chars(record.description)
    ET.SubElement(
        item,
        "enclosure",
        {"url": magnet_uri, "length": "0", "type": ENCLOSURE_TYPE},
    )
    return item


def _element_to_record(item: ET.Element) -> ReleaseRecord:
    content_hash = _text(item, "guid")
    if not content_hash:
        raise CorruptFeedError("Feed item is missing its guid")

    magnet_uri = _text(item, "link")
    if not magnet_uri:
        enclosure = item.find("enclosure")
        magnet_uri = enclosure.get("url", "") if enclosure is not None else ""

    pub_date = _text(item, "pubDate")
    if not pub_date:
        raise CorruptFeedError(f"Feed item {content_hash} is missing its pubDate")

    return ReleaseRecord(
        title=_text(item, "title", ""),
        content_hash=content_hash,
        magnet_uri=magnet_uri,
        published_at=parse_pub_date(pub_date),
        description=_text(item, "description"),
    )


def decode(data: Optional[bytes]) -> Feed:
    """Parse feed bytes. Absent or empty input yields an empty feed.

    Raises:
        CorruptFeedError: The document is not a feed we can read.
    """
    if not data or not data.strip():
        return Feed.empty()

    try:
        root = ET.fromstring(data)
    except ET.ParseError as e:
        raise CorruptFeedError(f"Feed is not well-formed XML: {e}") from e

    if root.tag != "rss":
        raise CorruptFeedError(f"Unexpected root element <{root.tag}>")

    channel = root.find("channel")
    if channel is None:
        raise CorruptFeedError("Feed has no <channel> element")

    return Feed(
        records=[_element_to_record(item) for item in channel.findall("item")],
        title=_text(root, "title", FEED_TITLE),
        link=_text(root, "link", FEED_LINK),
        description=_text(root, "description", FEED_DESCRIPTION),
    )


def encode(feed: Feed) -> bytes:
    """Serialize a feed to UTF-8 XML bytes."""
    root = ET.Element("rss", {"version": "2.0"})
    ET.SubElement(root, "title").text = strip_illegal_xml_chars(feed.title)
    ET.SubElement(root, "link").text = strip_illegal_xml_chars(feed.link)
    ET.SubElement(root, "description").text = strip_illegal_xml_chars(feed.description)
    channel = ET.SubElement(root, "channel")
    for record in feed.records:
        channel.append(_record_to_element(record))

    ET.indent(root)
    data = ET.tostring(root, encoding="utf-8", xml_declaration=True)
    # ElementTree leaves \r in text raw and parsers fold it into \n.
    return data.replace(b"\r", b"&#13;")
