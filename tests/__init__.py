"""Unit tests for the DeepL client and the deepl command-line tool."""
