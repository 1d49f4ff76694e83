"""Command line client for the DeepL API.

Reads from standard input and writes to standard output by default, so it fits into shell pipelines::

    $ echo "Please go home." | deepl translate --source-language EN --target-language DE
    Bitte gehen Sie nach Hause.

The API key is taken from the DEEPL_API_KEY environment variable.

Exit codes: 0 on success, 1 on any operational error (printed as 'Error: <message>' on stderr),
2 on invalid command-line arguments.
"""

from __future__ import annotations

import argparse
import os
import sys
from typing import TYPE_CHECKING, Final, NoReturn

from config.loader import ConfigLoader, ConfigLoaderError
from core.client import DeepL
from core.exceptions import ConfigurationError, DeepLError
from models.translation_models import (
    Formality,
    GlossaryEntriesFormat,
    SplitSentences,
    TranslatableTextList,
    TranslationOptions,
)
from utils.file_utils import FileUtils, FileUtilsError
from utils.logger_utils import LoggerUtils

if TYPE_CHECKING:
    import logging
    from collections.abc import Sequence

    from models.config_models import Config
    from models.translation_models import Glossary, LanguageList, TranslatedText, UsageInformation

__all__: list[str] = ["main", "parse_arguments"]

VERSION: Final[str] = "0.2.0"

logger: logging.Logger = LoggerUtils.get_logger(__name__)

SPLIT_SENTENCES_CHOICES: Final[dict[str, SplitSentences]] = {
    "none": SplitSentences.NONE,
    "punctuation": SplitSentences.PUNCTUATION,
    "all": SplitSentences.PUNCTUATION_AND_NEWLINES,
}

ENTRIES_FORMAT_CHOICES: Final[dict[str, GlossaryEntriesFormat]] = {
    "tsv": GlossaryEntriesFormat.TSV,
    "csv": GlossaryEntriesFormat.CSV,
}


class _ArgumentParser(argparse.ArgumentParser):
    def error(self, message: str) -> NoReturn:
        print(f"\n{message}\n", file=sys.stderr)
        self.print_help(sys.stderr)
        raise SystemExit(2)


def parse_arguments(argv: Sequence[str] | None = None) -> argparse.Namespace:
    """Parse the command line.

    Exits with status 2 and prints the usage on stderr if the arguments are invalid.
    """
    parser = _ArgumentParser(prog="deepl", description="Command line client for the DeepL API.")
    parser.add_argument("--version", action="version", version=f"%(prog)s {VERSION}")
    parser.add_argument("--config", dest="config", metavar="PATH", help="configuration file (default: deepl.ini)")
    parser.add_argument("--debug", action="store_true", help="show debug messages")
    subparsers = parser.add_subparsers(dest="command", metavar="SUBCOMMAND", required=True)

    translate = subparsers.add_parser("translate", help="translate text")
    translate.add_argument("--source-language", help="source language (optional, auto-detected by default)")
    translate.add_argument("--target-language", required=True, help="target language (required)")
    translate.add_argument("--input-file", help="input file path (optional, reads from STDIN by default)")
    translate.add_argument("--output-file", help="output file path (optional, prints to STDOUT by default)")
    translate.add_argument("--preserve-formatting", action="store_true", help="preserve formatting")
    formality = translate.add_mutually_exclusive_group()
    formality.add_argument("--formality-more", action="store_true", help="increase formality")
    formality.add_argument("--formality-less", action="store_true", help="decrease formality")
    translate.add_argument(
        "--split-sentences",
        choices=list(SPLIT_SENTENCES_CHOICES),
        help="sentence splitting: none, on punctuation only, or on punctuation and newlines (all)",
    )
    translate.add_argument("--glossary-id", help="glossary to use (requires --source-language)")
    translate.set_defaults(handler=translate_command)

    usage = subparsers.add_parser("usage-information", help="fetch information about account usage & limits")
    usage.set_defaults(handler=usage_information_command)

    languages = subparsers.add_parser("languages", help="fetch list of available source and target languages")
    languages.set_defaults(handler=languages_command)

    glossary = subparsers.add_parser("glossary", help="manage glossaries")
    glossary_commands = glossary.add_subparsers(dest="glossary_command", metavar="ACTION", required=True)

    glossary_list = glossary_commands.add_parser("list", help="list all glossaries")
    glossary_list.set_defaults(handler=glossary_list_command)

    glossary_show = glossary_commands.add_parser("show", help="show a glossary")
    glossary_show.add_argument("glossary_id", metavar="GLOSSARY_ID")
    glossary_show.set_defaults(handler=glossary_show_command)

    glossary_create = glossary_commands.add_parser("create", help="create a glossary")
    glossary_create.add_argument("--name", required=True, help="glossary name")
    glossary_create.add_argument("--source-language", required=True, help="language of the source terms")
    glossary_create.add_argument("--target-language", required=True, help="language of the target terms")
    glossary_create.add_argument("--entries-file", help="entries file path (optional, reads from STDIN by default)")
    glossary_create.add_argument(
        "--entries-format", choices=list(ENTRIES_FORMAT_CHOICES), default="tsv", help="entries format (default: tsv)"
    )
    glossary_create.set_defaults(handler=glossary_create_command)

    glossary_delete = glossary_commands.add_parser("delete", help="delete a glossary")
    glossary_delete.add_argument("glossary_id", metavar="GLOSSARY_ID")
    glossary_delete.set_defaults(handler=glossary_delete_command)

    return parser.parse_args(argv)


def load_config(args: argparse.Namespace) -> Config:
    """Load the configuration file and apply command-line overrides.

    Raises:
        ConfigLoaderError: If the configuration file cannot be loaded.
    """
    return ConfigLoader(config_filename=args.config, debug=args.debug).config


def setup_logging(config: Config) -> None:
    logger_utils = LoggerUtils(config.GENERAL.LOG_FILE, verbose=config.GENERAL.DEBUG)
    logger_utils.set_level("DEBUG" if config.GENERAL.DEBUG else config.GENERAL.LOG_LEVEL)


def get_api_key(config: Config) -> str:
    """Read the API key from the environment.

    Raises:
        ConfigurationError: If the variable is unset or empty.
    """
    key_env: str = config.API.KEY_ENV
    api_key: str = os.getenv(key_env, "")
    if not api_key:
        msg: str = f"no {key_env} found. Please provide your API key in this environment variable."
        raise ConfigurationError(msg)
    return api_key


def translate_command(deepl: DeepL, args: argparse.Namespace) -> None:
    formality: Formality | None = None
    if args.formality_more:
        formality = Formality.MORE
    elif args.formality_less:
        formality = Formality.LESS

    options = TranslationOptions(
        split_sentences=SPLIT_SENTENCES_CHOICES[args.split_sentences] if args.split_sentences else None,
        preserve_formatting=True if args.preserve_formatting else None,
        formality=formality,
        glossary_id=args.glossary_id,
    )

    text: str = FileUtils.read_text(args.input_file)
    text_list = TranslatableTextList(
        source_language=args.source_language,
        target_language=args.target_language,
        texts=[text],
    )

    translations: list[TranslatedText] = deepl.translate(options, text_list)
    FileUtils.write_text(args.output_file, "".join(translation.text for translation in translations))


def usage_information_command(deepl: DeepL, args: argparse.Namespace) -> None:
    _ = args
    usage: UsageInformation = deepl.usage_information()
    print(f"Available characters per billing period: {usage.character_limit}")
    print(f"Characters already translated in the current billing period: {usage.character_count}")


def languages_command(deepl: DeepL, args: argparse.Namespace) -> None:
    _ = args
    source_languages: LanguageList = deepl.source_languages()
    target_languages: LanguageList = deepl.target_languages()

    print("DeepL can translate from the following source languages:")
    for language in source_languages:
        print(f"  {language.language:<5} ({language.name})")
    print()
    print("DeepL can translate to the following target languages:")
    for language in target_languages:
        print(f"  {language.language:<5} ({language.name})")


def format_glossary(glossary: Glossary) -> str:
    return (
        f"{glossary.glossary_id}  {glossary.name}  {glossary.source_lang}->{glossary.target_lang}  "
        f"entries={glossary.entry_count}  ready={'yes' if glossary.ready else 'no'}  "
        f"created={glossary.creation_time.isoformat()}"
    )


def glossary_list_command(deepl: DeepL, args: argparse.Namespace) -> None:
    _ = args
    for glossary in deepl.list_glossaries().glossaries:
        print(format_glossary(glossary))


def glossary_show_command(deepl: DeepL, args: argparse.Namespace) -> None:
    print(format_glossary(deepl.get_glossary(args.glossary_id)))


def glossary_create_command(deepl: DeepL, args: argparse.Namespace) -> None:
    entries: str = FileUtils.read_text(args.entries_file)
    glossary: Glossary = deepl.create_glossary(
        args.name,
        args.source_language,
        args.target_language,
        entries,
        ENTRIES_FORMAT_CHOICES[args.entries_format],
    )
    print(format_glossary(glossary))


def glossary_delete_command(deepl: DeepL, args: argparse.Namespace) -> None:
    deepl.delete_glossary(args.glossary_id)


def main(argv: Sequence[str] | None = None) -> int:
    """Run the command-line tool and return the process exit code."""
    args: argparse.Namespace = parse_arguments(argv)
    try:
        config: Config = load_config(args)
        setup_logging(config)
        deepl = DeepL(get_api_key(config))
        logger.debug("Running '%s' against %s", args.command, deepl.base_url)
        args.handler(deepl, args)
    except (DeepLError, ConfigLoaderError, FileUtilsError) as err:
        logger.debug("'%s' failed", args.command, exc_info=True)
        print(f"Error: {err}", file=sys.stderr)
        return 1
    return 0


def run() -> NoReturn:
    """Console script entry point."""
    sys.exit(main())


if __name__ == "__main__":
    run()
