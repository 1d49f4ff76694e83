"""Client for the DeepL REST API.

``DeepL`` represents one DeepL developer account. Each public method maps to one API endpoint, blocks until the
HTTP exchange is complete and returns typed models from ``models.translation_models``.

Example::

    deepl = DeepL(os.environ["DEEPL_API_KEY"])
    texts = TranslatableTextList(source_language="DE", target_language="EN-US", texts=["ja"])
    translated = deepl.translate(None, texts)
    assert translated[0].text == "yes"
"""

from __future__ import annotations

import asyncio
from enum import Enum
from typing import TYPE_CHECKING, Final, Literal, TypeAlias, TypeVar
from urllib.parse import quote

from marshmallow import ValidationError

from core.exceptions import (
    AuthorizationError,
    DeserializationError,
    NotFoundError,
    ServerError,
    TransportError,
)
from handlers.async_comm import AsyncCommError, AsyncHttp
from models.translation_models import (
    Formality,
    Glossary,
    GlossaryEntriesFormat,
    GlossaryListing,
    LanguageInformation,
    SplitSentences,
    TranslatedTextList,
    UsageInformation,
)
from utils.logger_utils import LoggerUtils

if TYPE_CHECKING:
    import logging

    from dataclasses_json import DataClassJsonMixin

    from handlers.async_comm import HTTPMethod, HttpResponse
    from models.translation_models import (
        LanguageList,
        TranslatableTextList,
        TranslatedText,
        TranslationOptions,
    )

__all__: list[str] = ["FREE_API_URL", "PRO_API_URL", "DeepL"]

logger: logging.Logger = LoggerUtils.get_logger(__name__)

T = TypeVar("T", bound="DataClassJsonMixin")

Params: TypeAlias = "list[tuple[str, str]]"

PRO_API_URL: Final[str] = "https://api.deepl.com/v2"
FREE_API_URL: Final[str] = "https://api-free.deepl.com/v2"
FREE_KEY_SUFFIX: Final[str] = ":fx"

# Option values as the DeepL API expects them on the wire.
WIRE_VALUES: Final[dict[Enum | bool, str]] = {
    SplitSentences.NONE: "0",
    SplitSentences.PUNCTUATION_AND_NEWLINES: "1",
    SplitSentences.PUNCTUATION: "nonewlines",
    Formality.DEFAULT: "default",
    Formality.MORE: "more",
    Formality.LESS: "less",
    GlossaryEntriesFormat.TSV: "tsv",
    GlossaryEntriesFormat.CSV: "csv",
    False: "0",
    True: "1",
}

_QUERY_METHODS: Final[frozenset[str]] = frozenset({"GET"})
_FORM_METHODS: Final[frozenset[str]] = frozenset({"POST", "PUT", "PATCH"})


class DeepL:
    """The main API entry point, representing a DeepL developer account with its API key.

    Create one instance per account. Instances only hold the key, so they can be shared between threads.
    Calls must not be made from inside a running asyncio event loop, because each call runs its own loop.

    Error handling:
        Every method raises a subclass of ``core.exceptions.DeepLError`` on failure:
        ``AuthorizationError`` if the key is refused, ``NotFoundError`` for unknown resources,
        ``ServerError`` for any other error status, ``DeserializationError`` if a successful response
        cannot be decoded and ``TransportError`` if the server could not be reached at all.
    """

    def __init__(self, api_key: str) -> None:
        self._api_key: str = api_key

    def __repr__(self) -> str:
        return f"{self.__class__.__name__}(base_url={self.base_url!r})"

    @property
    def base_url(self) -> str:
        """API base URL: keys of free accounts end with ':fx' and must use the free API host."""
        return FREE_API_URL if self._api_key.endswith(FREE_KEY_SUFFIX) else PRO_API_URL

    def _http_request(self, method: HTTPMethod, path: str, params: Params | None = None) -> HttpResponse:
        """Perform an HTTP call against the API and classify the response.

        Args:
            method (HTTPMethod): HTTP method.
            path (str): Path relative to the API base URL, starting with '/'.
            params (Params | None): Request parameters. Sent as query string for GET, as form body for
                POST, PUT and PATCH.

        Returns:
            HttpResponse: The successful (2xx) response.

        Raises:
            ValueError: If parameters are given for a method that cannot carry them.
            AuthorizationError: On HTTP 401 or 403.
            NotFoundError: On HTTP 404.
            ServerError: On any other non-success status.
            TransportError: If the request could not be completed.
        """
        url: str = f"{self.base_url}{path}"
        query: Params | None = None
        form: Params | None = None
        if params is not None:
            if method in _QUERY_METHODS:
                query = params
            elif method in _FORM_METHODS:
                form = params
            else:
                msg: str = f"Parameters are not supported with {method} requests"
                raise ValueError(msg)

        logger.debug("[%s] %s params=%s", method, url, [key for key, _ in params or []])
        try:
            response: HttpResponse = asyncio.run(self._send(method, url, query=query, form=form))
        except AsyncCommError as err:
            logger.info("Request to '%s' failed: %s", url, err)
            raise TransportError(str(err)) from err

        return self._check_status(response)

    async def _send(
        self, method: HTTPMethod, url: str, *, query: Params | None, form: Params | None
    ) -> HttpResponse:
        async with AsyncHttp(headers={"Authorization": f"DeepL-Auth-Key {self._api_key}"}) as http:
            return await http.request(method, url, query=query, form=form)

    def _check_status(self, response: HttpResponse) -> HttpResponse:
        if response.ok:
            return response
        logger.debug("Error response: %s", response.status_line)
        if response.status in (401, 403):
            raise AuthorizationError
        if response.status == 404:  # noqa: PLR2004
            raise NotFoundError
        # DeepL sends error messages in the response body; use them for more helpful errors.
        raise ServerError(self._server_message(response))

    @staticmethod
    def _server_message(response: HttpResponse) -> str:
        try:
            content = response.json()
        except ValueError:
            return response.status_line
        if isinstance(content, dict) and isinstance(content.get("message"), str):
            return f"{content['message']}: {content.get('detail') or ''}"
        return response.status_line

    @staticmethod
    def _decode(response: HttpResponse, model: type[T]) -> T:
        try:
            return model.schema().load(response.json())
        except (ValidationError, ValueError, TypeError, KeyError, AttributeError) as err:
            logger.debug("Cannot decode %s: %s", model.__name__, err)
            raise DeserializationError from err

    @staticmethod
    def _decode_list(response: HttpResponse, model: type[T]) -> list[T]:
        try:
            return model.schema(many=True).load(response.json())
        except (ValidationError, ValueError, TypeError, KeyError, AttributeError) as err:
            logger.debug("Cannot decode list of %s: %s", model.__name__, err)
            raise DeserializationError from err

    @staticmethod
    def _glossary_path(glossary_id: str) -> str:
        """Build the resource path of a glossary, escaping the ID so it stays a single path segment.

        Raises:
            NotFoundError: If the ID cannot name a glossary ('', '.' or '..').
        """
        if glossary_id in {"", ".", ".."}:
            raise NotFoundError
        return f"/glossaries/{quote(glossary_id, safe='')}"

    def usage_information(self) -> UsageInformation:
        """Retrieve API usage and limits.

        This can also be used to verify an API key without consuming translation contingent.
        """
        response: HttpResponse = self._http_request("POST", "/usage")
        return self._decode(response, UsageInformation)

    def source_languages(self) -> LanguageList:
        """Retrieve all currently available source languages."""
        return self._languages("source")

    def target_languages(self) -> LanguageList:
        """Retrieve all currently available target languages."""
        return self._languages("target")

    def _languages(self, language_type: Literal["source", "target"]) -> LanguageList:
        response: HttpResponse = self._http_request("POST", "/languages", [("type", language_type)])
        return self._decode_list(response, LanguageInformation)

    def translate(self, options: TranslationOptions | None, text_list: TranslatableTextList) -> list[TranslatedText]:
        """Translate one or more text blocks at once.

        Args:
            options (TranslationOptions | None): Optional translation flags. Unset flags are not sent.
            text_list (TranslatableTextList): Languages and the texts to translate.

        Returns:
            list[TranslatedText]: One result per input text, in input order.
        """
        response: HttpResponse = self._http_request("POST", "/translate", self.translate_params(options, text_list))
        translated: list[TranslatedText] = self._decode(response, TranslatedTextList).translations
        logger.info("translation completed (%s > %s)", text_list.source_language, text_list.target_language)
        return translated

    @staticmethod
    def translate_params(options: TranslationOptions | None, text_list: TranslatableTextList) -> Params:
        """Build the request parameters for a translate call, in the order they are sent."""
        params: Params = [("target_lang", text_list.target_language)]
        if text_list.source_language is not None:
            params.append(("source_lang", text_list.source_language))
        params.extend(("text", text) for text in text_list.texts)

        if options is None:
            return params
        if options.split_sentences is not None:
            params.append(("split_sentences", WIRE_VALUES[options.split_sentences]))
        if options.preserve_formatting is not None:
            params.append(("preserve_formatting", WIRE_VALUES[options.preserve_formatting]))
        if options.formality is not None:
            params.append(("formality", WIRE_VALUES[options.formality]))
        if options.glossary_id is not None:
            params.append(("glossary_id", options.glossary_id))
        return params

    def create_glossary(
        self,
        name: str,
        source_lang: str,
        target_lang: str,
        entries: str,
        entries_format: GlossaryEntriesFormat,
    ) -> Glossary:
        """Create a glossary.

        The returned glossary may not be ready yet; check ``Glossary.ready`` via ``get_glossary``
        before using it in a translate request.

        Args:
            name (str): Name of the glossary.
            source_lang (str): Language of the source terms.
            target_lang (str): Language of the target terms.
            entries (str): Entries, one 'source<separator>target' pair per line.
            entries_format (GlossaryEntriesFormat): Separator used in ``entries`` (tab or comma).
        """
        params: Params = [
            ("name", name),
            ("source_lang", source_lang),
            ("target_lang", target_lang),
            ("entries", entries),
            ("entries_format", WIRE_VALUES[entries_format]),
        ]
        response: HttpResponse = self._http_request("POST", "/glossaries", params)
        glossary: Glossary = self._decode(response, Glossary)
        logger.info("glossary '%s' created (%s)", glossary.name, glossary.glossary_id)
        return glossary

    def list_glossaries(self) -> GlossaryListing:
        """List all glossaries of the account."""
        response: HttpResponse = self._http_request("GET", "/glossaries")
        return self._decode(response, GlossaryListing)

    def get_glossary(self, glossary_id: str) -> Glossary:
        """Retrieve the details of a glossary.

        Raises:
            NotFoundError: If no glossary with this ID exists.
        """
        response: HttpResponse = self._http_request("GET", self._glossary_path(glossary_id))
        return self._decode(response, Glossary)

    def delete_glossary(self, glossary_id: str) -> None:
        """Delete a glossary.

        Raises:
            NotFoundError: If no glossary with this ID exists.
        """
        self._http_request("DELETE", self._glossary_path(glossary_id))
        logger.info("glossary '%s' deleted", glossary_id)
