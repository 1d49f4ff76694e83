"""Data models for the DeepL client.

This package contains the dataclasses for configuration and for DeepL API requests and responses.
"""

from __future__ import annotations

from models.config_models import Config
from models.translation_models import (
    Formality,
    Glossary,
    GlossaryEntriesFormat,
    GlossaryListing,
    LanguageInformation,
    SplitSentences,
    TranslatableTextList,
    TranslatedText,
    TranslationOptions,
    UsageInformation,
)

__all__: list[str] = [
    "Config",
    "Formality",
    "Glossary",
    "GlossaryEntriesFormat",
    "GlossaryListing",
    "LanguageInformation",
    "SplitSentences",
    "TranslatableTextList",
    "TranslatedText",
    "TranslationOptions",
    "UsageInformation",
]
