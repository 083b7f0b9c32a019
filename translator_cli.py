"""Command-line front end for translating text via Google Translate."""

from __future__ import annotations

import argparse
import json
import logging
import sys
from logging.handlers import RotatingFileHandler
from pathlib import Path
from typing import IO, Callable, Optional, Protocol, Sequence

try:  # pragma: no cover - executed during module import
    import pyperclip  # type: ignore
except ImportError:  # pragma: no cover - handled when --copy is used
    pyperclip = None  # type: ignore

from language_tags import is_valid_language
from translation_service import (
    DEFAULT_HOST,
    DEFAULT_TRIES,
    AdvancedResult,
    GoogleTranslateClient,
    TranslationError,
    TranslationParams,
)


LOG_FILE_NAME = ".gtranslate.log"
LOG_MAX_BYTES = 2_097_152
LOG_BACKUP_COUNT = 3

PREFERENCES_FILE = Path.home() / ".gtranslate_preferences.json"

DEFAULT_PREFERENCES = {
    "dest_language": "en",
    "host": DEFAULT_HOST,
    "tries": DEFAULT_TRIES,
    "delay": 0.0,
}

EXIT_OK = 0
EXIT_TRANSLATION_ERROR = 1
EXIT_CLIPBOARD_ERROR = 3

logger = logging.getLogger("gtranslate")


def _configure_logging(verbose: bool = False) -> logging.Logger:
    if logger.handlers:
        return logger

    formatter = logging.Formatter("%(asctime)s [%(levelname)s] %(message)s")
    handlers: list[logging.Handler] = []
    log_path = PREFERENCES_FILE.parent / LOG_FILE_NAME
    try:
        file_handler = RotatingFileHandler(
            log_path,
            maxBytes=LOG_MAX_BYTES,
            backupCount=LOG_BACKUP_COUNT,
            encoding="utf-8",
        )
    except OSError:
        pass
    else:
        file_handler.setLevel(logging.DEBUG if verbose else logging.INFO)
        handlers.append(file_handler)
    console = logging.StreamHandler()
    console.setLevel(logging.DEBUG if verbose else logging.WARNING)
    handlers.append(console)

    # translation_service logs under its module name.
    for target in (logger, logging.getLogger("translation_service")):
        target.setLevel(logging.DEBUG)
        for handler in handlers:
            handler.setFormatter(formatter)
            target.addHandler(handler)
    return logger


def _load_preferences() -> dict:
    try:
        data = json.loads(PREFERENCES_FILE.read_text(encoding="utf-8"))
    except (FileNotFoundError, json.JSONDecodeError, OSError):
        return {}
    return data if isinstance(data, dict) else {}


def _save_preferences(preferences: dict) -> None:
    try:
        PREFERENCES_FILE.parent.mkdir(parents=True, exist_ok=True)
        PREFERENCES_FILE.write_text(json.dumps(preferences, indent=2, ensure_ascii=False), encoding="utf-8")
    except OSError:
        pass


def load_settings() -> dict:
    """Return the saved preferences merged over the defaults, dropping invalid values."""

    data = _load_preferences()
    result = dict(DEFAULT_PREFERENCES)

    dest = data.get("dest_language")
    if isinstance(dest, str) and dest.strip():
        result["dest_language"] = dest.strip()

    host = data.get("host")
    if isinstance(host, str) and host.strip():
        result["host"] = host.strip()

    tries = data.get("tries")
    if isinstance(tries, int) and not isinstance(tries, bool) and tries >= 1:
        result["tries"] = tries

    delay = data.get("delay")
    if isinstance(delay, (int, float)) and not isinstance(delay, bool) and delay >= 0:
        result["delay"] = float(delay)

    return result


def _save_dest_language(dest: str) -> None:
    data = _load_preferences()
    data["dest_language"] = dest
    _save_preferences(data)


class TranslatorProtocol(Protocol):  # pragma: no cover - protocol is for type checking only
    def translate_with_params(self, text: str, params: TranslationParams) -> str:
        """Translate text with explicit options."""

    def translate_advanced(
        self,
        text: str,
        src: str,
        dest: str,
        host: Optional[str] = None,
        *,
        tries: int = DEFAULT_TRIES,
        delay: float = 0.0,
    ) -> AdvancedResult:
        """Translate text and return dictionary data."""


def format_advanced(result: AdvancedResult) -> str:
    lines = [f"{result.original}"]
    if result.original_language:
        lines[0] += f" [{result.original_language}]"
    if result.original_pronunciation:
        lines.append(f"  /{result.original_pronunciation}/")
    lines.append(result.text)
    if result.pronunciation:
        lines.append(f"  /{result.pronunciation}/")
    if result.definitions:
        lines.append("")
        lines.append("Definitions:")
        lines.extend(f"  {number}. {text}" for number, text in enumerate(result.definitions, 1))
    if result.examples:
        lines.append("")
        lines.append("Examples:")
        lines.extend(f"  {number}. {text}" for number, text in enumerate(result.examples, 1))
    return "\n".join(lines)


class TranslatorCLI:
    """Runs one translation per invocation and prints the result."""

    def __init__(
        self,
        *,
        translator_factory: Callable[[], TranslatorProtocol] = GoogleTranslateClient,
        clipboard_module=pyperclip,
        stdout: Optional[IO[str]] = None,
        stderr: Optional[IO[str]] = None,
    ) -> None:
        self._translator_factory = translator_factory
        self._clipboard = clipboard_module
        self._stdout = stdout if stdout is not None else sys.stdout
        self._stderr = stderr if stderr is not None else sys.stderr

    def run(self, args: argparse.Namespace, text: str) -> int:
        text = text.strip()
        if not text:
            self._stderr.write("Nothing to translate.\n")
            return EXIT_TRANSLATION_ERROR

        translator = self._translator_factory()
        try:
            if args.advanced:
                result = translator.translate_advanced(
                    text, args.src, args.dest, host=args.host, tries=args.tries, delay=args.delay
                )
                translated = result.text
                output = format_advanced(result)
            else:
                params = TranslationParams(
                    src=args.src,
                    dest=args.dest,
                    tries=args.tries,
                    delay=args.delay,
                    host=args.host,
                )
                translated = translator.translate_with_params(text, params)
                output = translated
        except TranslationError as exc:
            logger.error("Translation failed: %s", exc)
            self._stderr.write(f"Error during translation: {exc}\n")
            return EXIT_TRANSLATION_ERROR

        self._stdout.write(output + "\n")
        # Invalid codes fall back to "en" and are not remembered.
        if is_valid_language(args.dest):
            _save_dest_language(args.dest)

        if args.copy:
            return self._copy_to_clipboard(translated)
        return EXIT_OK

    def _copy_to_clipboard(self, text: str) -> int:
        if self._clipboard is None:
            self._stderr.write(
                "The 'pyperclip' package is required for --copy. Install it with 'pip install pyperclip'.\n"
            )
            return EXIT_CLIPBOARD_ERROR
        try:
            self._clipboard.copy(text)
        except Exception as exc:
            if pyperclip is not None and isinstance(exc, pyperclip.PyperclipException):
                message = f"Failed to write clipboard: {exc}"
            else:
                message = f"Unexpected error while accessing clipboard: {exc}"
            logger.error(message)
            self._stderr.write(message + "\n")
            return EXIT_CLIPBOARD_ERROR
        return EXIT_OK


def parse_args(argv: Optional[Sequence[str]] = None) -> argparse.Namespace:
    settings = load_settings()
    parser = argparse.ArgumentParser(description="Translate text with the Google Translate web endpoint.")
    parser.add_argument("text", nargs="*", help="Text to translate. Read from stdin when omitted.")
    parser.add_argument("--src", default="auto", help="Source language (default: auto-detect).")
    parser.add_argument(
        "--dest",
        default=settings["dest_language"],
        help="Destination language (default: last saved or en). Use Google Translate language codes.",
    )
    parser.add_argument("--host", default=settings["host"], help="Google domain or base URL (default: google.com).")
    parser.add_argument(
        "--tries",
        type=int,
        default=settings["tries"],
        help="Number of attempts while the endpoint answers 403.",
    )
    parser.add_argument(
        "--delay",
        type=float,
        default=settings["delay"],
        help="Seconds to wait between rate-limited attempts.",
    )
    parser.add_argument(
        "--advanced",
        action="store_true",
        help="Show pronunciation, detected language, definitions and examples.",
    )
    parser.add_argument("--copy", action="store_true", help="Copy the translation to the clipboard.")
    parser.add_argument("--verbose", action="store_true", help="Log requests to the console.")
    return parser.parse_args(argv)


def main(argv: Optional[Sequence[str]] = None) -> int:
    args = parse_args(argv)
    _configure_logging(args.verbose)
    text = " ".join(args.text) if args.text else sys.stdin.read()
    return TranslatorCLI().run(args, text)


if __name__ == "__main__":
    sys.exit(main())
