"""
Text armor for license keys.

A PEM-style block with a type tag, cleartext headers and a base64 body:

    -----BEGIN LICENSE KEY-----
    id: 5e7f1d2a-0c6b-4d1e-9a53-7b2f0e8c41d9

    8L3Bm...
    -----END LICENSE KEY-----
"""

import base64
import binascii
import re
import textwrap
from typing import Dict, Mapping, Optional, Tuple

from licensekey.errors import MalformedContainerError

LICENSE_KEY_TYPE = "LICENSE KEY"

LINE_LENGTH = 64

_BEGIN_RE = re.compile(r"-----BEGIN ([^\r\n-]+)-----\r?\n")


def wrap(type_tag: str, headers: Optional[Mapping[str, str]], payload: bytes) -> str:
    """
    Produce an armored text block.

    Raises:
        MalformedContainerError: If a header key or value cannot be
            represented on a single line.
    """
    lines = [f"-----BEGIN {type_tag}-----"]

    if headers:
        for key in sorted(headers):
            value = headers[key]
            if not key or ":" in key or _has_line_break(key) or _has_line_break(value):
                raise MalformedContainerError(f"invalid armor header: {key!r}")
            lines.append(f"{key}: {value}")
        lines.append("")

    body = base64.b64encode(payload).decode("ascii")
    lines.extend(textwrap.wrap(body, LINE_LENGTH))
    lines.append(f"-----END {type_tag}-----")
    return "\n".join(lines) + "\n"


def unwrap(text, expected_type: str = LICENSE_KEY_TYPE) -> Tuple[str, Dict[str, str], bytes]:
    """
    Parse the first armored block found in text.

    Args:
        text: Armored text (str or bytes). Text around the block is ignored.
        expected_type: Type tag the block must carry.

    Returns:
        Tuple of (type_tag, headers, payload).

    Raises:
        MalformedContainerError: If no block can be parsed or the type tag
            differs from expected_type.
    """
    if isinstance(text, bytes):
        try:
            text = text.decode("utf-8")
        except UnicodeDecodeError as e:
            raise MalformedContainerError("armored text is not valid UTF-8") from e

    begin = _BEGIN_RE.search(text)
    if begin is None:
        raise MalformedContainerError("malformed license: no armor block found")

    type_tag = begin.group(1)
    end_marker = f"-----END {type_tag}-----"
    end = text.find(end_marker, begin.end())
    if end < 0:
        raise MalformedContainerError("malformed license: missing armor end line")

    if type_tag != expected_type:
        raise MalformedContainerError(
            f"malformed license: unexpected block type {type_tag!r}"
        )

    lines = text[begin.end():end].splitlines()
    headers: Dict[str, str] = {}

    if lines and ":" in lines[0]:
        while lines and lines[0].strip():
            key, sep, value = lines.pop(0).partition(":")
            if not sep:
                raise MalformedContainerError("malformed license: bad armor header line")
            headers[key.strip()] = value.strip()
        if not lines:
            raise MalformedContainerError("malformed license: missing armor body")
        lines.pop(0)

    body = "".join(line.strip() for line in lines)
    try:
        payload = base64.b64decode(body, validate=True)
    except (binascii.Error, ValueError) as e:
        raise MalformedContainerError(f"malformed license: bad armor body: {e}") from e

    # Unused trailing bits must be zero so each payload has one encoding
    if base64.b64encode(payload).decode("ascii") != body:
        raise MalformedContainerError("malformed license: non-canonical armor body")

    return type_tag, headers, payload


def _has_line_break(value: str) -> bool:
    return "\n" in value or "\r" in value
