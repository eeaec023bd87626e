# -*- test-case-name: mailtrap.test.test_mime -*-
# Copyright (c) Twisted Matrix Laboratories.
# See LICENSE for details.

"""
Decoding of the small subset of MIME that mailtrap understands.

Only the top-level headers of a message are looked at.  Multipart bodies
are not split, and the only transfer encoding which is actually reversed
is base64.
"""

import base64
import re
from typing import List, Optional

from attrs import frozen

_SUBJECT = "Subject:"
_CONTENT_TYPE = "Content-Type:"
_TRANSFER_ENCODING = "Content-Transfer-Encoding:"
_MIME_VERSION = "MIME-Version:"

_lineBreak = re.compile(r"\r\n|\n")
_charset = re.compile(r"charset=([^;\s]+)", re.I)

# Applied in order by cleanForDisplay.
_displayRules = [
    (re.compile(r"<br\s*/?>", re.I), "\n"),
    (re.compile(r"<hr\s*/?>", re.I), "\n" + "-" * 40 + "\n"),
    (re.compile(r"</?(?:p|div)(?:\s[^>]*)?>", re.I), "\n"),
    (re.compile(r"<h[1-6](?:\s[^>]*)?>", re.I), "\n=== "),
    (re.compile(r"</h[1-6]\s*>", re.I), " ===\n"),
    (re.compile(r"<[^>]*>"), ""),
]

_entities = [
    ("&lt;", "<"),
    ("&gt;", ">"),
    ("&quot;", '"'),
    ("&#39;", "'"),
    ("&nbsp;", " "),
    # Last, so that "&amp;lt;" comes out as "&lt;" and not "<".
    ("&amp;", "&"),
]


@frozen
class ParsedMessage:
    """
    The interesting parts of a received message.

    @ivar subject: The value of the I{Subject} header, if there was one.
    @ivar contentType: The full value of the I{Content-Type} header.
    @ivar isHtml: C{True} if C{contentType} names C{text/html}.
    @ivar transferEncoding: The value of the I{Content-Transfer-Encoding}
        header.
    @ivar mimeVersion: The value of the I{MIME-Version} header.
    @ivar decodedContent: The body with its transfer encoding undone, or a
        bracketed explanation of why that could not be done.
    """

    subject: Optional[str] = None
    contentType: Optional[str] = None
    isHtml: bool = False
    transferEncoding: Optional[str] = None
    mimeVersion: Optional[str] = None
    decodedContent: str = ""


def _headerValue(line: str, name: str) -> Optional[str]:
    """
    Return the stripped value of C{line} if it is a C{name} header, compared
    case-insensitively, or L{None} if it is not.
    """
    if line[: len(name)].lower() == name.lower():
        return line[len(name) :].strip()
    return None


def _splitLines(raw: str) -> List[str]:
    lines = _lineBreak.split(raw)
    # A terminator after the last line does not start another one.
    if lines and lines[-1] == "":
        lines.pop()
    return lines


def decodeMessage(raw: str) -> ParsedMessage:
    """
    Pick the known headers out of a raw message and decode its body.

    Header scanning stops at the first blank (or all-whitespace) line, which
    is discarded.  Unknown headers are ignored; a repeated known header
    replaces the earlier value.

    This never raises: a base64 body that cannot be decoded, or that does
    not decode to UTF-8, produces a C{decodedContent} which describes the
    problem.

    @param raw: The message exactly as received in the I{DATA} phase.
    @type raw: L{str}

    @rtype: L{ParsedMessage}
    """
    subject = contentType = transferEncoding = mimeVersion = None
    isHtml = isBase64 = False
    inHeaders = True
    encoded: List[str] = []
    plain: List[str] = []

    for line in _splitLines(raw):
        if inHeaders:
            if not line.strip():
                inHeaders = False
                continue

            value = _headerValue(line, _SUBJECT)
            if value is not None:
                subject = value
                continue

            value = _headerValue(line, _CONTENT_TYPE)
            if value is not None:
                contentType = value
                isHtml = "text/html" in value.lower()
                continue

            value = _headerValue(line, _TRANSFER_ENCODING)
            if value is not None:
                transferEncoding = value
                isBase64 = value.lower() == "base64"
                continue

            value = _headerValue(line, _MIME_VERSION)
            if value is not None:
                mimeVersion = value
        elif isBase64:
            # Encoders wrap base64 at whatever column they like.
            encoded.append(line.strip())
        else:
            plain.append(line + "\n")

    payload = "".join(encoded)
    if isBase64 and payload:
        try:
            decodedContent = base64.b64decode(payload, validate=True).decode(
                "utf-8"
            )
        except ValueError as e:
            # Bad base64, non-ASCII characters, or a body that is not UTF-8.
            decodedContent = f"[Failed to decode base64 content: {e}]"
    else:
        decodedContent = "".join(plain)

    return ParsedMessage(
        subject=subject,
        contentType=contentType,
        isHtml=isHtml,
        transferEncoding=transferEncoding,
        mimeVersion=mimeVersion,
        decodedContent=decodedContent,
    )


def formatLabel(message: ParsedMessage) -> str:
    """
    Describe the format of C{message} for a human, for example
    C{"HTML | Base64 Encoded | MIME 1.0 | Charset: utf-8"}.

    @rtype: L{str}
    """
    contentType = (message.contentType or "").strip()
    parts = []

    if message.isHtml:
        parts.append("HTML")
    elif "text/plain" in contentType.lower():
        parts.append("Plain Text")
    elif contentType:
        parts.append(contentType.split(";", 1)[0].strip())
    else:
        parts.append("Plain Text")

    encoding = (message.transferEncoding or "").strip()
    if encoding:
        lowered = encoding.lower()
        if lowered == "base64":
            parts.append("Base64 Encoded")
        elif lowered == "quoted-printable":
            parts.append("Quoted-Printable")
        elif lowered not in ("7bit", "8bit"):
            parts.append(f"{encoding} Encoded")

    if message.mimeVersion:
        parts.append(f"MIME {message.mimeVersion}")

    match = _charset.search(contentType)
    if match is not None:
        parts.append(f"Charset: {match.group(1)}")

    return " | ".join(parts)


def cleanForDisplay(html: str) -> str:
    """
    Turn an HTML body into something readable on a console.

    Line-breaking tags become newlines, headings are set off with C{===},
    every other tag is dropped and a handful of common entities are
    decoded.  This is only for display; the stored message is untouched.

    @rtype: L{str}
    """
    text = html
    for pattern, replacement in _displayRules:
        text = pattern.sub(replacement, text)
    for entity, character in _entities:
        text = text.replace(entity, character)
    text = re.sub(r"\n{3,}", "\n\n", text)
    text = re.sub(r"[ \t]+", " ", text)
    return text.strip()


def displayContent(message: ParsedMessage) -> str:
    """
    Return the body of C{message} as it should be shown in the log.
    """
    if message.isHtml:
        return cleanForDisplay(message.decodedContent)
    return message.decodedContent


__all__ = [
    "ParsedMessage",
    "decodeMessage",
    "formatLabel",
    "cleanForDisplay",
    "displayContent",
]
