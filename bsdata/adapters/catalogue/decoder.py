"""
Catalogue decoder - bytes to Catalogue.

Accepts plain XML catalogue documents (``.cat``, ``.cat.xml``) and
zip-compressed ones (``.catz``), which hold a single XML member.
"""

from __future__ import annotations

import io
import logging
import xml.etree.ElementTree as ET
import zipfile

from bsdata.common.exceptions import DecodeError

from .models import Catalogue, _local_name

logger = logging.getLogger(__name__)

ZIP_MAGIC = b"PK\x03\x04"


def _unpack(content: bytes, source: str) -> bytes:
    """Return the first member of a zipped catalogue."""
    try:
        with zipfile.ZipFile(io.BytesIO(content)) as archive:
            members = [info for info in archive.infolist() if not info.is_dir()]
            if not members:
                raise DecodeError(source, "archive is empty")
            logger.debug("Unpacking %s from %s", members[0].filename, source)
            return archive.read(members[0])
    except zipfile.BadZipFile as e:
        raise DecodeError(source, f"invalid archive: {e}") from e


def decode_catalogue(content: bytes, source: str = "<memory>") -> Catalogue:
    """Decode one catalogue document.

    Args:
        content: Raw file content (XML or zip archive)
        source: Name used in error messages, usually the file name

    Returns:
        The decoded Catalogue

    Raises:
        DecodeError: If the content is not a well-formed catalogue document,
            or nests deeper than the interpreter recursion limit allows
    """
    if content.startswith(ZIP_MAGIC):
        content = _unpack(content, source)

    try:
        root = ET.fromstring(content)
    except ET.ParseError as e:
        raise DecodeError(source, f"malformed XML: {e}") from e

    root_name = _local_name(root.tag)
    if root_name != Catalogue.TAG:
        raise DecodeError(
            source, f"expected <{Catalogue.TAG}> root element, found <{root_name}>"
        )

    try:
        return Catalogue.from_element(root)
    except RecursionError as e:
        raise DecodeError(source, "document nesting too deep") from e
