from __future__ import annotations

import os
import sys
from pathlib import Path

__all__: list[str] = [
    "FileMissingError",
    "FilePermissionError",
    "FileUtils",
    "FileUtilsError",
    "InvalidFileTypeError",
]


class FileUtils:
    """File operations for the input and output of the command-line tool.

    All methods raise FileUtilsError subclasses with a readable message instead of bare OSError.
    """

    @staticmethod
    def resolve_path(path: str | Path, *, strict: bool = False) -> Path:
        """Convert a user-input path to an absolute path.

        Expands environment variables (e.g., $HOME) and ~, and resolves relative paths against the
        current working directory.

        Args:
            path (str | Path): The input path.
            strict (bool): Whether to raise if the path does not exist. Defaults to False.

        Returns:
            Path: The absolute path.
        """
        expanded: str = os.path.expandvars(str(path))
        user_expanded: Path = Path(expanded).expanduser()
        if not user_expanded.is_absolute():
            user_expanded = Path.cwd() / user_expanded
        return user_expanded.resolve(strict=strict)

    @staticmethod
    def read_text(path: str | Path | None) -> str:
        """Read a whole UTF-8 text file, or standard input when no path is given.

        Raises:
            FileMissingError: If the file does not exist.
            InvalidFileTypeError: If the path is a directory or the content is not UTF-8 text.
            FilePermissionError: If the file cannot be read.
        """
        if path is None:
            try:
                return sys.stdin.read()
            except UnicodeDecodeError as err:
                msg: str = "Standard input is not valid UTF-8 text"
                raise InvalidFileTypeError(msg) from err
            except OSError as err:
                msg = f"Cannot read standard input: {err.strerror}"
                raise FileUtilsError(msg) from err

        file_path: Path = FileUtils.resolve_path(path)
        if not file_path.exists():
            msg = f"File does not exist: {file_path}"
            raise FileMissingError(msg)
        if file_path.is_dir():
            msg = f"Invalid file type (directory): {file_path}"
            raise InvalidFileTypeError(msg)
        try:
            return file_path.read_text(encoding="utf-8")
        except PermissionError as err:
            msg = f"Insufficient permissions to read the file: {file_path}"
            raise FilePermissionError(msg) from err
        except UnicodeDecodeError as err:
            msg = f"File is not valid UTF-8 text: {file_path}"
            raise InvalidFileTypeError(msg) from err
        except OSError as err:
            msg = f"Cannot read the file: {file_path}: {err.strerror}"
            raise FileUtilsError(msg) from err

    @staticmethod
    def write_text(path: str | Path | None, content: str) -> None:
        """Write text to a UTF-8 file, or to standard output followed by a newline when no path is given.

        The file content is written exactly as given, without an added newline.

        Raises:
            FileMissingError: If the parent directory does not exist.
            InvalidFileTypeError: If the path is a directory.
            FilePermissionError: If the file cannot be written.
        """
        if path is None:
            print(content)
            return

        file_path: Path = FileUtils.resolve_path(path)
        if not file_path.parent.is_dir():
            msg: str = f"Directory does not exist: {file_path.parent}"
            raise FileMissingError(msg)
        if file_path.is_dir():
            msg = f"Invalid file type (directory): {file_path}"
            raise InvalidFileTypeError(msg)
        try:
            file_path.write_text(content, encoding="utf-8")
        except PermissionError as err:
            msg = f"Insufficient permissions to write the file: {file_path}"
            raise FilePermissionError(msg) from err
        except OSError as err:
            msg = f"Cannot write the file: {file_path}: {err.strerror}"
            raise FileUtilsError(msg) from err


class FileUtilsError(Exception):
    """An input or output file could not be processed."""


class FileMissingError(FileUtilsError):
    """The file, or its parent directory, does not exist."""


class InvalidFileTypeError(FileUtilsError):
    """The path does not point to a regular text file."""


class FilePermissionError(FileUtilsError):
    """The file cannot be accessed with the current permissions."""
