"""Client for the unofficial Google Translate web API.

The endpoint is undocumented: every request must carry a ``tk`` signature and
the response is a deeply nested JSON array whose meaning depends on position
only.  Decoding is therefore defensive; values with an unexpected shape are
skipped instead of failing the whole translation.
"""

from __future__ import annotations

import enum
import http.client
import json
import logging
import socket
import time
import urllib.error
import urllib.parse
import urllib.request
from dataclasses import dataclass, field
from typing import Any, Callable, Dict, List, Optional, Union

from language_tags import is_valid_language
from token_generator import DEFAULT_SEED, generate_token


logger = logging.getLogger(__name__)

DEFAULT_HOST = "google.com"
DEFAULT_TRIES = 2
DEFAULT_TIMEOUT = 5.0
USER_AGENT = "Mozilla/5.0"

_PATH = "/translate_a/single"
_DT_FLAGS = ("at", "bd", "ex", "ld", "md", "qca", "rw", "rm", "ss", "t")


class TranslationError(RuntimeError):
    """Raised when the translation service cannot complete a request."""


class NetworkUnavailableError(TranslationError):
    """Raised when the endpoint could not be reached before the timeout."""


class MalformedResponseError(TranslationError):
    """Raised when the response body is not the JSON array the endpoint normally sends."""


class Part(enum.Enum):
    TRANSLATION = "translation"
    ALL_TRANSLATIONS = "all-translations"
    ORIGINAL_LANGUAGE = "original-language"
    POSSIBLE_TRANSLATIONS = "possible-translations"
    CONFIDENCE = "confidence"
    POSSIBLE_MISTAKES = "possible-mistakes"
    LANGUAGE = "language"
    SYNONYMS = "synonyms"
    DEFINITIONS = "definitions"
    EXAMPLES = "examples"
    SEE_ALSO = "see-also"


# Position of each section in the top-level response array.
PART_INDEX_MAP: Dict[int, Part] = {
    0: Part.TRANSLATION,
    1: Part.ALL_TRANSLATIONS,
    2: Part.ORIGINAL_LANGUAGE,
    5: Part.POSSIBLE_TRANSLATIONS,
    6: Part.CONFIDENCE,
    7: Part.POSSIBLE_MISTAKES,
    8: Part.LANGUAGE,
    11: Part.SYNONYMS,
    12: Part.DEFINITIONS,
    13: Part.EXAMPLES,
    14: Part.SEE_ALSO,
}


@dataclass
class TranslationParams:
    """Options accepted by :meth:`GoogleTranslateClient.translate_with_params`."""

    src: str = "auto"
    dest: str = "en"
    tries: int = DEFAULT_TRIES
    delay: float = 0.0
    host: str = ""


@dataclass(frozen=True)
class TranslationRequest:
    text: str
    src: str
    dest: str
    host: str = DEFAULT_HOST
    tries: int = DEFAULT_TRIES
    delay: float = 0.0


@dataclass(frozen=True)
class FetchResponse:
    status: int
    body: bytes


@dataclass
class AdvancedResult:
    original: str = ""
    original_language: str = ""
    original_pronunciation: str = ""
    text: str = ""
    pronunciation: str = ""
    definitions: List[str] = field(default_factory=list)
    examples: List[str] = field(default_factory=list)


def _base_url(host: str) -> str:
    host = host.strip().rstrip("/")
    if "://" in host:
        return host
    return f"https://translate.{host}"


def build_url(request: TranslationRequest, token: str) -> str:
    """Return the full request URL for ``request`` signed with ``token``."""

    params = [
        ("client", "gtx"),
        ("sl", request.src),
        ("tl", request.dest),
        ("hl", request.dest),
    ]
    params.extend(("dt", flag) for flag in _DT_FLAGS)
    params.extend(
        [
            ("ie", "UTF-8"),
            ("oe", "UTF-8"),
            ("otf", "1"),
            ("ssel", "0"),
            ("tsel", "0"),
            ("kc", "7"),
            ("q", request.text),
            ("tk", token),
        ]
    )
    return f"{_base_url(request.host)}{_PATH}?{urllib.parse.urlencode(params)}"


def _load_tree(body: Union[bytes, str]) -> List[Any]:
    try:
        if isinstance(body, bytes):
            body = body.decode("utf-8")
        data = json.loads(body)
    except (ValueError, RecursionError) as exc:
        raise MalformedResponseError("Invalid response from Google Translate") from exc
    if not isinstance(data, list):
        raise MalformedResponseError(
            f"Unexpected translation response structure: {type(data).__name__}"
        )
    return data


def decode_simple(body: Union[bytes, str]) -> str:
    """Concatenate the translated segments found in the first response slot."""

    data = _load_tree(body)
    if not data or not isinstance(data[0], list):
        return ""

    parts: List[str] = []
    for segment in data[0]:
        if not isinstance(segment, list):
            continue
        if not segment:
            break
        if isinstance(segment[0], str):
            parts.append(segment[0])
    return "".join(parts)


def _decode_translation(value: Any, result: AdvancedResult) -> None:
    if not isinstance(value, list):
        return

    parts: List[str] = []
    last_index = len(value) - 1
    for index, segment in enumerate(value):
        if not isinstance(segment, list) or not segment:
            continue
        if isinstance(segment[0], str):
            parts.append(segment[0])

        # Pronunciations ride on the trailing segment.
        if index != last_index and len(segment) < 2:
            continue
        if isinstance(segment[-1], str):
            result.original_pronunciation = segment[-1]
        if len(segment) >= 2 and isinstance(segment[-2], str):
            result.pronunciation = segment[-2]
    result.text = "".join(parts)


def _decode_definitions(value: Any, result: AdvancedResult) -> None:
    if not isinstance(value, list):
        return

    for category in value:
        # [label, [[text, reference_id, example?, tags?], ...], word]
        if not isinstance(category, list) or len(category) < 2:
            continue
        entries = category[1]
        if not isinstance(entries, list) or not entries:
            continue
        entry = entries[0]
        if not isinstance(entry, list) or not entry:
            continue
        if not isinstance(entry[0], str):
            continue
        result.definitions.append(entry[0])

        if len(entry) < 3 or not isinstance(entry[2], str):
            continue
        result.examples.append(entry[2])


def decode_advanced(body: Union[bytes, str], original: str) -> AdvancedResult:
    """Decode the translation, pronunciations, source language and dictionary data."""

    data = _load_tree(body)
    result = AdvancedResult(original=original)

    for index, value in enumerate(data):
        part = PART_INDEX_MAP.get(index)
        if part is Part.TRANSLATION:
            _decode_translation(value, result)
        elif part is Part.ORIGINAL_LANGUAGE:
            if isinstance(value, str):
                result.original_language = value
        elif part is Part.DEFINITIONS:
            _decode_definitions(value, result)
        elif part is not None:
            logger.debug("Ignoring response part %s", part.value)
    return result


def _is_timeout(exc: BaseException) -> bool:
    if isinstance(exc, (socket.timeout, TimeoutError)):
        return True
    reason = getattr(exc, "reason", None)
    return isinstance(reason, (socket.timeout, TimeoutError))


class GoogleTranslateClient:
    """Translate text through the ``translate_a/single`` endpoint.

    The client owns the signing seed and the default host, so separate
    clients (or separate threads sharing one client) never interfere with each
    other.  Network access goes through :func:`urllib.request.urlopen`.
    """

    def __init__(
        self,
        host: str = DEFAULT_HOST,
        *,
        seed: str = DEFAULT_SEED,
        timeout: float = DEFAULT_TIMEOUT,
        sleep: Callable[[float], None] = time.sleep,
        language_validator: Callable[[str], bool] = is_valid_language,
    ) -> None:
        self.host = host or DEFAULT_HOST
        self.seed = seed
        self.timeout = timeout
        self._sleep = sleep
        self._language_validator = language_validator

    def translate(self, text: str, src: Any = "auto", dest: Any = "en", host: Optional[str] = None) -> str:
        """Translate ``text`` and return the translated string."""

        request = self._make_request(text, str(src), str(dest), host, DEFAULT_TRIES, 0.0)
        return decode_simple(self._execute(request).body)

    def translate_with_params(self, text: str, params: TranslationParams) -> str:
        """Translate ``text`` using explicit retry options and validated language codes."""

        src, dest = self._validate_languages(params.src, params.dest)
        request = self._make_request(text, src, dest, params.host, params.tries, params.delay)
        return decode_simple(self._execute(request).body)

    def translate_advanced(
        self,
        text: str,
        src: Any = "auto",
        dest: Any = "en",
        host: Optional[str] = None,
        *,
        tries: int = DEFAULT_TRIES,
        delay: float = 0.0,
    ) -> AdvancedResult:
        """Translate ``text`` and include pronunciations and dictionary entries."""

        request = self._make_request(text, str(src), str(dest), host, tries, delay)
        return decode_advanced(self._execute(request).body, original=text)

    def _make_request(
        self,
        text: str,
        src: str,
        dest: str,
        host: Optional[str],
        tries: int,
        delay: float,
    ) -> TranslationRequest:
        if not text:
            raise TranslationError("Cannot translate empty text")
        if not tries or tries < 1:
            tries = DEFAULT_TRIES
        return TranslationRequest(
            text=text,
            src=src,
            dest=dest,
            host=host or self.host,
            tries=tries,
            delay=max(delay or 0.0, 0.0),
        )

    def _validate_languages(self, src: str, dest: str) -> tuple[str, str]:
        if src != "auto" and not self._language_validator(src):
            logger.warning("'%s' is an invalid language, switching to 'auto'", src)
            src = "auto"
        if not self._language_validator(dest):
            logger.warning("'%s' is an invalid language, switching to 'en'", dest)
            dest = "en"
        return src, dest

    def _execute(self, request: TranslationRequest) -> FetchResponse:
        token = generate_token(request.text, self.seed)
        return self._fetch(build_url(request, token), request.tries, request.delay)

    def _fetch(self, url: str, tries: int, delay: float) -> FetchResponse:
        """GET ``url``, retrying only while the endpoint answers 403."""

        response: Optional[FetchResponse] = None
        remaining = tries
        while remaining > 0:
            logger.debug("Requesting %s (attempts left: %d)", url, remaining)
            response = self._open(url)
            if response.status == 200:
                return response
            if response.status != 403:
                logger.warning("Translation endpoint returned HTTP %d", response.status)
                return response

            remaining -= 1
            logger.warning("Translation endpoint rate limited the request (HTTP 403)")
            if remaining > 0:
                self._sleep(delay)

        logger.warning("Giving up after %d attempts; decoding the last response", tries)
        return response  # type: ignore[return-value]

    def _open(self, url: str) -> FetchResponse:
        try:
            request = urllib.request.Request(url, headers={"User-Agent": USER_AGENT})
            with urllib.request.urlopen(request, timeout=self.timeout) as response:
                return FetchResponse(status=response.status, body=response.read())
        except urllib.error.HTTPError as exc:
            try:
                body = exc.read()
            finally:
                exc.close()
            return FetchResponse(status=exc.code, body=body or b"")
        except (urllib.error.URLError, OSError) as exc:
            if _is_timeout(exc):
                raise NetworkUnavailableError(
                    "Network unavailable: request to Google Translate timed out"
                ) from exc
            raise TranslationError("Network error while contacting Google Translate") from exc
        except (http.client.HTTPException, ValueError) as exc:
            raise TranslationError(f"Invalid request or response from Google Translate: {exc}") from exc


_default_client: Optional[GoogleTranslateClient] = None


def get_default_client() -> GoogleTranslateClient:
    global _default_client
    if _default_client is None:
        _default_client = GoogleTranslateClient()
    return _default_client


def translate(text: str, src: Any = "auto", dest: Any = "en", host: Optional[str] = None) -> str:
    return get_default_client().translate(text, src, dest, host=host)


def translate_with_params(text: str, params: TranslationParams) -> str:
    return get_default_client().translate_with_params(text, params)


def translate_advanced(
    text: str,
    src: Any = "auto",
    dest: Any = "en",
    host: Optional[str] = None,
    *,
    tries: int = DEFAULT_TRIES,
    delay: float = 0.0,
) -> AdvancedResult:
    return get_default_client().translate_advanced(text, src, dest, host=host, tries=tries, delay=delay)


__all__ = [
    "AdvancedResult",
    "DEFAULT_HOST",
    "DEFAULT_TRIES",
    "FetchResponse",
    "GoogleTranslateClient",
    "MalformedResponseError",
    "NetworkUnavailableError",
    "PART_INDEX_MAP",
    "Part",
    "TranslationError",
    "TranslationParams",
    "TranslationRequest",
    "build_url",
    "decode_advanced",
    "decode_simple",
    "get_default_client",
    "translate",
    "translate_advanced",
    "translate_with_params",
]
