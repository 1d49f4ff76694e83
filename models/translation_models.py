"""Models for DeepL API requests and responses.

Response models are dataclasses_json dataclasses; field names match the JSON keys used by the DeepL REST API.
They are decoded through their marshmallow schema (``Model.schema().load(...)``), so a value of the wrong type,
a null or a missing key raises ``marshmallow.ValidationError`` instead of being coerced. Keys the models do not
know are ignored. Request-side models (text lists, options) are plain dataclasses that the client serializes
into form parameters.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import UTC, datetime
from enum import Enum, auto
from typing import Any, TypeAlias

from dataclasses_json import DataClassJsonMixin, Undefined, config, dataclass_json
from marshmallow import fields

__all__: list[str] = [
    "Formality",
    "Glossary",
    "GlossaryEntriesFormat",
    "GlossaryListing",
    "LanguageInformation",
    "LanguageList",
    "SplitSentences",
    "TranslatableTextList",
    "TranslatedText",
    "TranslatedTextList",
    "TranslationOptions",
    "UsageInformation",
    "parse_utc_datetime",
]


def parse_utc_datetime(value: str) -> datetime:
    """Parse an ISO 8601 timestamp and return it in UTC.

    Timestamps without an offset are taken as UTC.

    Raises:
        ValueError: If the value is not an ISO 8601 timestamp.
    """
    parsed: datetime = datetime.fromisoformat(value)
    if parsed.tzinfo is None:
        return parsed.replace(tzinfo=UTC)
    return parsed.astimezone(UTC)


class _StrictBoolean(fields.Boolean):
    """Accepts JSON true/false only, not strings or numbers."""

    def _deserialize(self, value: Any, attr: str | None, data: Any, **kwargs) -> bool:
        if not isinstance(value, bool):
            raise self.make_error("invalid", input=value)
        return value


class _UtcDateTime(fields.Field):
    default_error_messages = {"invalid": "Not a valid ISO 8601 timestamp."}  # noqa: RUF012

    def _deserialize(self, value: Any, attr: str | None, data: Any, **kwargs) -> datetime:
        if not isinstance(value, str):
            raise self.make_error("invalid")
        try:
            return parse_utc_datetime(value)
        except ValueError as err:
            raise self.make_error("invalid") from err

    def _serialize(self, value: datetime | None, attr: str | None, obj: Any, **kwargs) -> str | None:
        return None if value is None else value.isoformat()


def _str_field() -> Any:
    return field(metadata=config(mm_field=fields.String(required=True)))


def _int_field() -> Any:
    return field(metadata=config(mm_field=fields.Integer(required=True, strict=True)))


def _bool_field() -> Any:
    return field(metadata=config(mm_field=_StrictBoolean(required=True)))


@dataclass_json(undefined=Undefined.EXCLUDE)
@dataclass(frozen=True)
class UsageInformation(DataClassJsonMixin):
    """API usage and limits for the current billing period.

    Attributes:
        character_limit (int): Characters that can be translated per billing period.
        character_count (int): Characters already translated in the current billing period.
    """

    character_limit: int = _int_field()
    character_count: int = _int_field()


@dataclass_json(undefined=Undefined.EXCLUDE)
@dataclass(frozen=True)
class LanguageInformation(DataClassJsonMixin):
    """A single supported language.

    Attributes:
        language (str): Language identifier used by DeepL, e.g. 'EN-US'. Use it as source or target language.
        name (str): English display name, e.g. 'English (American)'.
    """

    language: str = _str_field()
    name: str = _str_field()


LanguageList: TypeAlias = "list[LanguageInformation]"


class SplitSentences(Enum):
    """Controls how the input is split into sentences before translation."""

    NONE = auto()
    PUNCTUATION = auto()
    PUNCTUATION_AND_NEWLINES = auto()


class Formality(Enum):
    """Whether the translation should lean towards formal or informal language."""

    DEFAULT = auto()
    MORE = auto()
    LESS = auto()


class GlossaryEntriesFormat(Enum):
    """Serialization format of glossary entries on creation."""

    TSV = auto()
    CSV = auto()


@dataclass(frozen=True)
class TranslationOptions:
    """Optional flags for a translate request. Fields left as None are not sent.

    Attributes:
        split_sentences (SplitSentences | None): Sentence splitting mode. The service splits by default.
        preserve_formatting (bool | None): Keep the original formatting even where it would usually be corrected.
        formality (Formality | None): Formality bias of the translated text.
        glossary_id (str | None): Glossary to apply. Requires a source language.
    """

    split_sentences: SplitSentences | None = None
    preserve_formatting: bool | None = None
    formality: Formality | None = None
    glossary_id: str | None = None


@dataclass(frozen=True)
class TranslatableTextList:
    """Texts to translate together in one request.

    Attributes:
        source_language (str | None): Source language, auto-detected by DeepL when None.
        target_language (str): Target language.
        texts (list[str]): Text blocks, translated independently and returned in the same order.
    """

    target_language: str
    texts: list[str] = field(default_factory=list)
    source_language: str | None = None


@dataclass_json(undefined=Undefined.EXCLUDE)
@dataclass(frozen=True)
class TranslatedText(DataClassJsonMixin):
    """One translated text block.

    Attributes:
        detected_source_language (str): The source language provided, or the one DeepL detected.
        text (str): Translated text.
    """

    detected_source_language: str = _str_field()
    text: str = _str_field()


@dataclass_json(undefined=Undefined.EXCLUDE)
@dataclass(frozen=True)
class TranslatedTextList(DataClassJsonMixin):
    translations: list[TranslatedText] = field(
        metadata=config(mm_field=fields.List(fields.Nested(TranslatedText.schema()), required=True))
    )


@dataclass_json(undefined=Undefined.EXCLUDE)
@dataclass(frozen=True)
class Glossary(DataClassJsonMixin):
    """A glossary owned by the account.

    Attributes:
        glossary_id (str): Unique ID assigned by DeepL.
        name (str): Name associated with the glossary.
        ready (bool): Whether the glossary can already be used in translate requests.
        source_lang (str): Language of the source terms.
        target_lang (str): Language of the target terms.
        creation_time (datetime): Creation time in UTC. A timestamp sent without offset is taken as UTC.
        entry_count (int): Number of entries.
    """

    glossary_id: str = _str_field()
    name: str = _str_field()
    ready: bool = _bool_field()
    source_lang: str = _str_field()
    target_lang: str = _str_field()
    creation_time: datetime = field(
        metadata=config(
            encoder=datetime.isoformat,
            decoder=parse_utc_datetime,
            mm_field=_UtcDateTime(required=True),
        )
    )
    entry_count: int = _int_field()


@dataclass_json(undefined=Undefined.EXCLUDE)
@dataclass(frozen=True)
class GlossaryListing(DataClassJsonMixin):
    glossaries: list[Glossary] = field(
        metadata=config(mm_field=fields.List(fields.Nested(Glossary.schema()), required=True))
    )
