from __future__ import annotations

from datetime import UTC, datetime
from typing import TYPE_CHECKING, Any

import pytest

from core.client import FREE_API_URL, PRO_API_URL, DeepL
from core.exceptions import (
    AuthorizationError,
    DeserializationError,
    NotFoundError,
    ServerError,
    TransportError,
)
from handlers.async_comm import AsyncCommError, AsyncCommTimeoutError, HttpResponse
from models.translation_models import (
    Formality,
    GlossaryEntriesFormat,
    SplitSentences,
    TranslatableTextList,
    TranslatedText,
    TranslationOptions,
)
from tests.fakes import json_response

if TYPE_CHECKING:
    from collections.abc import Callable

    from tests.fakes import FakeHttp

GLOSSARY: dict[str, Any] = {
    "glossary_id": "def3a26b-3e84-45b3-84ae-0c0aaf3525f7",
    "name": "test_glossary",
    "ready": True,
    "source_lang": "en",
    "target_lang": "de",
    "creation_time": "2021-08-03T14:16:18.329Z",
    "entry_count": 1,
}


@pytest.fixture
def deepl() -> DeepL:
    return DeepL("secret-key")


def test_base_url_depends_on_key_suffix() -> None:
    assert DeepL("secret-key").base_url == PRO_API_URL
    assert DeepL("secret-key:fx").base_url == FREE_API_URL


def test_free_key_requests_go_to_free_host(fake_http: type[FakeHttp]) -> None:
    fake_http.queue(json_response({"character_limit": 500000, "character_count": 12}))

    DeepL("secret-key:fx").usage_information()

    assert fake_http.calls[0]["url"] == "https://api-free.deepl.com/v2/usage"


def test_key_is_sent_as_authorization_header(fake_http: type[FakeHttp], deepl: DeepL) -> None:
    fake_http.queue(json_response({"character_limit": 500000, "character_count": 12}))

    deepl.usage_information()

    call: dict[str, Any] = fake_http.calls[0]
    assert call["headers"] == {"Authorization": "DeepL-Auth-Key secret-key"}
    assert call["form"] is None
    assert call["query"] is None


def test_repr_does_not_leak_key(deepl: DeepL) -> None:
    assert "secret-key" not in repr(deepl)


def test_usage_information(fake_http: type[FakeHttp], deepl: DeepL) -> None:
    fake_http.queue(json_response({"character_limit": 500000, "character_count": 3317}))

    usage = deepl.usage_information()

    assert usage.character_limit == 500000
    assert usage.character_count == 3317
    assert fake_http.calls[0]["method"] == "POST"
    assert fake_http.calls[0]["url"] == "https://api.deepl.com/v2/usage"


def test_source_and_target_languages(fake_http: type[FakeHttp], deepl: DeepL) -> None:
    fake_http.queue(
        json_response([{"language": "DE", "name": "German"}, {"language": "ZH", "name": "Chinese"}]),
        json_response([{"language": "EN-GB", "name": "English (British)"}]),
    )

    source = deepl.source_languages()
    target = deepl.target_languages()

    assert [lang.language for lang in source] == ["DE", "ZH"]
    assert source[-1].name == "Chinese"
    assert target[0].language == "EN-GB"
    assert all(lang.language and lang.name for lang in source + target)
    assert fake_http.calls[0]["form"] == [("type", "source")]
    assert fake_http.calls[1]["form"] == [("type", "target")]
    assert fake_http.calls[1]["url"].endswith("/languages")


def test_translate_without_options_sends_languages_and_texts(fake_http: type[FakeHttp], deepl: DeepL) -> None:
    fake_http.queue(json_response({"translations": [{"detected_source_language": "DE", "text": "yes"}]}))

    result = deepl.translate(None, TranslatableTextList(source_language="DE", target_language="EN-US", texts=["ja"]))

    assert result == [TranslatedText(detected_source_language="DE", text="yes")]
    assert fake_http.calls[0]["url"] == "https://api.deepl.com/v2/translate"
    assert fake_http.calls[0]["form"] == [("target_lang", "EN-US"), ("source_lang", "DE"), ("text", "ja")]


def test_translate_omits_source_language_when_not_given(fake_http: type[FakeHttp], deepl: DeepL) -> None:
    fake_http.queue(json_response({"translations": [{"detected_source_language": "DE", "text": "yes"}]}))

    deepl.translate(TranslationOptions(), TranslatableTextList(target_language="EN-US", texts=["ja"]))

    assert fake_http.calls[0]["form"] == [("target_lang", "EN-US"), ("text", "ja")]


def test_translate_keeps_order_of_multiple_texts(fake_http: type[FakeHttp], deepl: DeepL) -> None:
    fake_http.queue(
        json_response(
            {
                "translations": [
                    {"detected_source_language": "DE", "text": "yes"},
                    {"detected_source_language": "DE", "text": "no"},
                    {"detected_source_language": "FR", "text": "good morning"},
                ]
            }
        )
    )

    texts = TranslatableTextList(target_language="EN-US", texts=["ja", "nein", "bonjour"])
    result = deepl.translate(None, texts)

    assert [item.text for item in result] == ["yes", "no", "good morning"]
    assert [value for key, value in fake_http.calls[0]["form"] if key == "text"] == ["ja", "nein", "bonjour"]


def test_translate_serializes_all_options(fake_http: type[FakeHttp], deepl: DeepL) -> None:
    fake_http.queue(json_response({"translations": [{"detected_source_language": "EN", "text": "Handlung"}]}))

    options = TranslationOptions(
        split_sentences=SplitSentences.PUNCTUATION,
        preserve_formatting=False,
        formality=Formality.LESS,
        glossary_id="glossary-1",
    )
    deepl.translate(options, TranslatableTextList(source_language="en", target_language="de", texts=["Action"]))

    assert fake_http.calls[0]["form"] == [
        ("target_lang", "de"),
        ("source_lang", "en"),
        ("text", "Action"),
        ("split_sentences", "nonewlines"),
        ("preserve_formatting", "0"),
        ("formality", "less"),
        ("glossary_id", "glossary-1"),
    ]


@pytest.mark.parametrize(
    ("split_sentences", "expected"),
    [
        (SplitSentences.NONE, "0"),
        (SplitSentences.PUNCTUATION_AND_NEWLINES, "1"),
        (SplitSentences.PUNCTUATION, "nonewlines"),
    ],
)
def test_translate_params_split_sentences(split_sentences: SplitSentences, expected: str) -> None:
    params = DeepL.translate_params(
        TranslationOptions(split_sentences=split_sentences), TranslatableTextList(target_language="DE", texts=["x"])
    )

    assert ("split_sentences", expected) in params


@pytest.mark.parametrize(
    ("formality", "expected"),
    [(Formality.DEFAULT, "default"), (Formality.MORE, "more"), (Formality.LESS, "less")],
)
def test_translate_params_formality(formality: Formality, expected: str) -> None:
    params = DeepL.translate_params(
        TranslationOptions(formality=formality, preserve_formatting=True),
        TranslatableTextList(target_language="DE", texts=["x"]),
    )

    assert params[-2:] == [("preserve_formatting", "1"), ("formality", expected)]


def test_translate_empty_text_list_reports_server_message(fake_http: type[FakeHttp], deepl: DeepL) -> None:
    fake_http.queue(json_response({"message": "Parameter 'text' not specified."}, status=400, reason="Bad Request"))

    with pytest.raises(ServerError) as exc_info:
        deepl.translate(None, TranslatableTextList(source_language="DE", target_language="EN-US", texts=[]))

    assert exc_info.value.message.startswith("Parameter 'text' not specified.")
    assert fake_http.calls[0]["form"] == [("target_lang", "EN-US"), ("source_lang", "DE")]


def test_translate_unknown_target_language(fake_http: type[FakeHttp], deepl: DeepL) -> None:
    fake_http.queue(json_response({"message": "Value for 'target_lang' not supported."}, status=400))

    with pytest.raises(ServerError) as exc_info:
        deepl.translate(None, TranslatableTextList(target_language="NONEXISTING", texts=["ja"]))

    assert str(exc_info.value) == (
        "An error occurred while communicating with the DeepL server: 'Value for 'target_lang' not supported.: '."
    )


def test_server_error_includes_detail(fake_http: type[FakeHttp], deepl: DeepL) -> None:
    fake_http.queue(json_response({"message": "Bad request", "detail": "Invalid glossary entries."}, status=400))

    with pytest.raises(ServerError) as exc_info:
        deepl.create_glossary("g", "en", "de", "broken", GlossaryEntriesFormat.CSV)

    assert exc_info.value.message == "Bad request: Invalid glossary entries."


@pytest.mark.parametrize(
    "body",
    [b"<html>Service Unavailable</html>", b'["not", "an", "object"]', b'{"error": "no message key"}'],
)
def test_server_error_falls_back_to_status_line(fake_http: type[FakeHttp], deepl: DeepL, body: bytes) -> None:
    fake_http.queue(HttpResponse(status=503, reason="Service Unavailable", body=body, content_type="text/html"))

    with pytest.raises(ServerError) as exc_info:
        deepl.usage_information()

    assert exc_info.value.message == "503 Service Unavailable"


def test_quota_exceeded_is_a_server_error(fake_http: type[FakeHttp], deepl: DeepL) -> None:
    fake_http.queue(json_response({"message": "Quota Exceeded"}, status=456, reason=""))

    with pytest.raises(ServerError, match="Quota Exceeded"):
        deepl.translate(None, TranslatableTextList(target_language="DE", texts=["x"]))


@pytest.mark.parametrize("status", [401, 403])
@pytest.mark.parametrize(
    "operation",
    [
        lambda deepl: deepl.usage_information(),
        lambda deepl: deepl.source_languages(),
        lambda deepl: deepl.target_languages(),
        lambda deepl: deepl.translate(None, TranslatableTextList(target_language="EN-US", texts=["ja"])),
        lambda deepl: deepl.create_glossary("g", "en", "de", "a\tb", GlossaryEntriesFormat.TSV),
        lambda deepl: deepl.list_glossaries(),
        lambda deepl: deepl.get_glossary("id"),
        lambda deepl: deepl.delete_glossary("id"),
    ],
)
def test_invalid_key_raises_authorization_error(
    fake_http: type[FakeHttp], status: int, operation: Callable[[DeepL], object]
) -> None:
    fake_http.queue(HttpResponse(status=status, reason="Forbidden", body=b""))

    with pytest.raises(AuthorizationError) as exc_info:
        operation(DeepL("wrong_key"))

    assert str(exc_info.value) == "Authorization failed, is your API key correct?"


@pytest.mark.parametrize(
    "body",
    [
        b"not json",
        b'{"character_limit": 10}',
        b"[1, 2]",
        b'{"character_limit": 10, "character_count": 1',
    ],
)
def test_undecodable_usage_raises_deserialization_error(
    fake_http: type[FakeHttp], deepl: DeepL, body: bytes
) -> None:
    fake_http.queue(HttpResponse(status=200, reason="OK", body=body))

    with pytest.raises(DeserializationError):
        deepl.usage_information()


def test_languages_must_be_a_list(fake_http: type[FakeHttp], deepl: DeepL) -> None:
    fake_http.queue(json_response({"language": "DE", "name": "German"}))

    with pytest.raises(DeserializationError, match="deserializing"):
        deepl.source_languages()


def test_translate_with_malformed_translations(fake_http: type[FakeHttp], deepl: DeepL) -> None:
    fake_http.queue(json_response({"translations": [{"text": "yes"}]}))

    with pytest.raises(DeserializationError):
        deepl.translate(None, TranslatableTextList(target_language="EN-US", texts=["ja"]))


def test_glossary_with_invalid_creation_time(fake_http: type[FakeHttp], deepl: DeepL) -> None:
    fake_http.queue(json_response(GLOSSARY | {"creation_time": "yesterday"}))

    with pytest.raises(DeserializationError):
        deepl.get_glossary(GLOSSARY["glossary_id"])


@pytest.mark.parametrize(
    "content",
    [
        {"character_limit": 10, "character_count": None},
        {"character_limit": 10.5, "character_count": 1},
        {"character_limit": "10", "character_count": 1},
        {"character_limit": True, "character_count": 1},
    ],
)
def test_usage_with_wrong_field_types(fake_http: type[FakeHttp], deepl: DeepL, content: dict[str, Any]) -> None:
    fake_http.queue(json_response(content))

    with pytest.raises(DeserializationError):
        deepl.usage_information()


def test_usage_ignores_unknown_keys(fake_http: type[FakeHttp], deepl: DeepL) -> None:
    fake_http.queue(json_response({"character_limit": 10, "character_count": 1, "document_limit": 5}))

    assert deepl.usage_information().character_limit == 10


def test_translation_with_null_text(fake_http: type[FakeHttp], deepl: DeepL) -> None:
    fake_http.queue(json_response({"translations": [{"detected_source_language": "EN", "text": None}]}))

    with pytest.raises(DeserializationError):
        deepl.translate(None, TranslatableTextList(target_language="DE", texts=["yes"]))


@pytest.mark.parametrize(
    "override",
    [
        {"ready": "false"},
        {"ready": 1},
        {"name": None},
        {"glossary_id": 5},
        {"creation_time": None},
        {"entry_count": 1.5},
    ],
)
def test_glossary_with_wrong_field_types(
    fake_http: type[FakeHttp], deepl: DeepL, override: dict[str, Any]
) -> None:
    fake_http.queue(json_response(GLOSSARY | override))

    with pytest.raises(DeserializationError):
        deepl.get_glossary(GLOSSARY["glossary_id"])


def test_glossary_listing_with_wrong_entry(fake_http: type[FakeHttp], deepl: DeepL) -> None:
    fake_http.queue(json_response({"glossaries": [GLOSSARY, GLOSSARY | {"ready": None}]}))

    with pytest.raises(DeserializationError):
        deepl.list_glossaries()


def test_glossary_creation_time_without_offset_is_utc(fake_http: type[FakeHttp], deepl: DeepL) -> None:
    fake_http.queue(
        json_response(GLOSSARY | {"creation_time": "2021-08-03T14:16:18"}),
        json_response(GLOSSARY | {"creation_time": "2021-08-03T16:16:18+02:00"}),
    )

    naive = deepl.get_glossary(GLOSSARY["glossary_id"])
    shifted = deepl.get_glossary(GLOSSARY["glossary_id"])

    assert naive.creation_time == datetime(2021, 8, 3, 14, 16, 18, tzinfo=UTC)
    assert naive.creation_time.tzinfo is UTC
    assert shifted.creation_time.tzinfo is UTC
    assert shifted.creation_time.hour == 14


@pytest.mark.parametrize(
    ("glossary_id", "path"),
    [
        ("../usage", "/glossaries/..%2Fusage"),
        ("a?b#c", "/glossaries/a%3Fb%23c"),
        ("name with space", "/glossaries/name%20with%20space"),
    ],
)
def test_glossary_id_is_a_single_path_segment(
    fake_http: type[FakeHttp], deepl: DeepL, glossary_id: str, path: str
) -> None:
    fake_http.queue(HttpResponse(status=204, reason="No Content"), json_response(GLOSSARY))

    deepl.delete_glossary(glossary_id)
    deepl.get_glossary(glossary_id)

    assert [call["url"] for call in fake_http.calls] == [f"{PRO_API_URL}{path}"] * 2


@pytest.mark.parametrize("glossary_id", ["", ".", ".."])
def test_glossary_id_without_name_is_not_sent(fake_http: type[FakeHttp], deepl: DeepL, glossary_id: str) -> None:
    with pytest.raises(NotFoundError):
        deepl.delete_glossary(glossary_id)
    with pytest.raises(NotFoundError):
        deepl.get_glossary(glossary_id)

    assert fake_http.calls == []


def test_transport_failure_raises_transport_error(fake_http: type[FakeHttp], deepl: DeepL) -> None:
    cause = AsyncCommError("Unable to connect to the server: Cannot connect to host api.deepl.com:443")
    fake_http.queue(cause)

    with pytest.raises(TransportError) as exc_info:
        deepl.usage_information()

    assert exc_info.value.__cause__ is cause
    assert "Cannot connect to host" in str(exc_info.value)


def test_timeout_raises_transport_error(fake_http: type[FakeHttp], deepl: DeepL) -> None:
    fake_http.queue(AsyncCommTimeoutError("Timeout due to a lack of response from the server."))

    with pytest.raises(TransportError, match="Timeout"):
        deepl.list_glossaries()


def test_params_are_rejected_for_delete(fake_http: type[FakeHttp], deepl: DeepL) -> None:
    with pytest.raises(ValueError, match="DELETE"):
        deepl._http_request("DELETE", "/glossaries/id", [("name", "x")])

    assert fake_http.calls == []


def test_get_params_are_sent_as_query(fake_http: type[FakeHttp], deepl: DeepL) -> None:
    fake_http.queue(HttpResponse(status=200, reason="OK", body=b"{}"))

    deepl._http_request("GET", "/glossaries", [("page", "1")])

    assert fake_http.calls[0]["query"] == [("page", "1")]
    assert fake_http.calls[0]["form"] is None


def test_create_glossary(fake_http: type[FakeHttp], deepl: DeepL) -> None:
    fake_http.queue(json_response(GLOSSARY | {"ready": False}, status=201, reason="Created"))

    glossary = deepl.create_glossary("test_glossary", "en", "de", "Action,Handlung", GlossaryEntriesFormat.CSV)

    assert glossary.name == "test_glossary"
    assert glossary.entry_count == 1
    assert glossary.ready is False
    assert glossary.creation_time == datetime(2021, 8, 3, 14, 16, 18, 329000, tzinfo=UTC)
    assert fake_http.calls[0]["method"] == "POST"
    assert fake_http.calls[0]["url"] == "https://api.deepl.com/v2/glossaries"
    assert fake_http.calls[0]["form"] == [
        ("name", "test_glossary"),
        ("source_lang", "en"),
        ("target_lang", "de"),
        ("entries", "Action,Handlung"),
        ("entries_format", "csv"),
    ]


def test_create_glossary_tsv_format(fake_http: type[FakeHttp], deepl: DeepL) -> None:
    fake_http.queue(json_response(GLOSSARY, status=201))

    deepl.create_glossary("test_glossary", "en", "de", "Action\tHandlung", GlossaryEntriesFormat.TSV)

    assert ("entries_format", "tsv") in fake_http.calls[0]["form"]


def test_list_glossaries(fake_http: type[FakeHttp], deepl: DeepL) -> None:
    other: dict[str, Any] = GLOSSARY | {"glossary_id": "other", "name": "other", "entry_count": 7}
    fake_http.queue(json_response({"glossaries": [GLOSSARY, other]}))

    listing = deepl.list_glossaries()

    assert [glossary.name for glossary in listing.glossaries] == ["test_glossary", "other"]
    assert listing.glossaries[1].entry_count == 7
    assert fake_http.calls[0]["method"] == "GET"
    assert fake_http.calls[0]["query"] is None


def test_glossary_lifecycle(fake_http: type[FakeHttp], deepl: DeepL) -> None:
    glossary_id: str = GLOSSARY["glossary_id"]
    fake_http.queue(
        json_response(GLOSSARY, status=201),
        json_response(GLOSSARY),
        json_response({"translations": [{"detected_source_language": "EN", "text": "Handlung"}]}),
        HttpResponse(status=204, reason="No Content"),
        json_response({"message": "Glossary not found"}, status=404, reason="Not Found"),
    )

    created = deepl.create_glossary("test_glossary", "en", "de", "Action,Handlung", GlossaryEntriesFormat.CSV)
    fetched = deepl.get_glossary(created.glossary_id)
    translated = deepl.translate(
        TranslationOptions(glossary_id=fetched.glossary_id),
        TranslatableTextList(source_language="en", target_language="de", texts=["Action"]),
    )
    deepl.delete_glossary(glossary_id)
    with pytest.raises(NotFoundError) as exc_info:
        deepl.get_glossary(glossary_id)

    assert (fetched.name, fetched.source_lang, fetched.target_lang, fetched.entry_count) == (
        "test_glossary",
        "en",
        "de",
        1,
    )
    assert translated[0].text == "Handlung"
    assert str(exc_info.value) == "The requested resource was not found."
    assert [(call["method"], call["url"].removeprefix(PRO_API_URL)) for call in fake_http.calls] == [
        ("POST", "/glossaries"),
        ("GET", f"/glossaries/{glossary_id}"),
        ("POST", "/translate"),
        ("DELETE", f"/glossaries/{glossary_id}"),
        ("GET", f"/glossaries/{glossary_id}"),
    ]
