"""Torznab XML presenter.

Renders Torznab-compliant caps and RSS/XML feeds according to:
- Torznab specification: http://torznab.com/schemas/2015/feed
- RSS 2.0 specification

Every payload starts with ``<?xml version='1.0' encoding='utf-8'?>``;
clients validate the charset-qualified declaration.
"""

from __future__ import annotations

from dataclasses import dataclass
from xml.etree import ElementTree as ET

from amarr.domain.entities import (
    TorznabCaps,
    TorznabCategory,
    TorznabFeed,
    TorznabItem,
    TorznabSearchMode,
)

_TORZNAB_NS = "http://torznab.com/schemas/2015/feed"
_ATOM_NS = "http://www.w3.org/2005/Atom"

# Process-wide, registered once at import.
ET.register_namespace("torznab", _TORZNAB_NS)
ET.register_namespace("atom", _ATOM_NS)

_ENCLOSURE_TYPE = "application/x-bittorrent"


@dataclass(frozen=True)
class TorznabRendered:
    """Rendered Torznab XML response."""

    payload: bytes
    media_type: str = "application/xml"


def _tostring(root: ET.Element) -> TorznabRendered:
    return TorznabRendered(ET.tostring(root, encoding="utf-8", xml_declaration=True))


def render_caps_xml(caps: TorznabCaps) -> TorznabRendered:
    """Render Torznab capabilities XML.

    Args:
        caps: TorznabCaps advertised by the indexer.

    Returns:
        TorznabRendered with XML payload.
    """
    root = ET.Element("caps")

    server = ET.SubElement(root, "server")
    server.set("version", caps.server_version)
    server.set("title", caps.server_title)

    limits = ET.SubElement(root, "limits")
    limits.set("max", str(caps.limits_max))
    limits.set("default", str(caps.limits_default))

    searching = ET.SubElement(root, "searching")
    _add_search_mode(searching, "search", caps.search)
    _add_search_mode(searching, "tv-search", caps.tv_search)
    _add_search_mode(searching, "movie-search", caps.movie_search)

    categories = ET.SubElement(root, "categories")
    for category in caps.categories:
        _add_category(categories, "category", category)

    return _tostring(root)


def _add_search_mode(
    parent: ET.Element, tag: str, mode: TorznabSearchMode | None
) -> None:
    el = ET.SubElement(parent, tag)
    if mode is None or not mode.available:
        el.set("available", "no")
        el.set("supportedParams", "")
        return
    el.set("available", "yes")
    el.set("supportedParams", ",".join(mode.supported_params))


def _add_category(parent: ET.Element, tag: str, category: TorznabCategory) -> None:
    el = ET.SubElement(parent, tag)
    el.set("id", str(category.id))
    el.set("name", category.name)
    for sub in category.subcategories:
        _add_category(el, "subcat", sub)


def render_rss_xml(feed: TorznabFeed) -> TorznabRendered:
    """Render a Torznab RSS 2.0 feed.

    Items are written in the order the indexer returned them.

    Args:
        feed: TorznabFeed produced by the indexer.

    Returns:
        TorznabRendered with RSS XML payload.
    """
    rss = ET.Element("rss", attrib={"version": "2.0"})
    channel = ET.SubElement(rss, "channel")

    if feed.link:
        atom_link = ET.SubElement(channel, f"{{{_ATOM_NS}}}link")
        atom_link.set("href", feed.link)
        atom_link.set("rel", "self")
        atom_link.set("type", "application/rss+xml")

    ET.SubElement(channel, "title").text = feed.title
    if feed.description:
        ET.SubElement(channel, "description").text = feed.description
    if feed.link:
        ET.SubElement(channel, "link").text = feed.link

    response = ET.SubElement(channel, f"{{{_TORZNAB_NS}}}response")
    response.set("offset", str(feed.offset))
    total = feed.total if feed.total is not None else len(feed.items)
    response.set("total", str(total))

    for it in feed.items:
        _add_item(channel, it)

    return _tostring(rss)


def _add_item(channel: ET.Element, it: TorznabItem) -> None:
    item = ET.SubElement(channel, "item")

    ET.SubElement(item, "title").text = it.title

    # Sonarr/Radarr use guid to detect duplicates across indexers
    guid = ET.SubElement(item, "guid", isPermaLink="false")
    guid.text = it.guid or it.download_url

    ET.SubElement(item, "link").text = it.download_url
    if it.pub_date:
        ET.SubElement(item, "pubDate").text = it.pub_date
    ET.SubElement(item, "size").text = str(it.size)
    if it.description:
        ET.SubElement(item, "description").text = it.description
    if it.category is not None:
        ET.SubElement(item, "category").text = str(it.category)

    enclosure = ET.SubElement(item, "enclosure")
    enclosure.set("url", it.download_url)
    enclosure.set("length", str(it.size))
    enclosure.set("type", _ENCLOSURE_TYPE)

    if it.category is not None:
        _add_torznab_attr(item, "category", str(it.category))
    _add_torznab_attr(item, "size", str(it.size))
    if it.seeders is not None:
        _add_torznab_attr(item, "seeders", str(it.seeders))
    if it.peers is not None:
        _add_torznab_attr(item, "peers", str(it.peers))
    if it.info_hash:
        _add_torznab_attr(item, "infohash", it.info_hash)
    for name, value in it.attributes:
        _add_torznab_attr(item, name, value)


def _add_torznab_attr(parent: ET.Element, name: str, value: str) -> None:
    """Add Torznab attribute element.

    Args:
        parent: Parent XML element.
        name: Attribute name.
        value: Attribute value.
    """
    attr = ET.SubElement(parent, f"{{{_TORZNAB_NS}}}attr")
    attr.set("name", name)
    attr.set("value", value)
