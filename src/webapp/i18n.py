# Copyright (C) 2026 Bernardo Gómez Bey
# SPDX-License-Identifier: AGPL-3.0-or-later

"""Message catalogs.

One YAML file per language in ``webapp/locales/``; nested keys are addressed
with dotted paths (``errors.email_taken``) and formatted with ``str.format``.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Dict, Optional, Tuple

import yaml

from webapp.models import DEFAULT_LANGUAGE, UserConfig

logger = logging.getLogger(__name__)

CATALOG_DIR = Path(__file__).resolve().parent / "locales"


def _flatten(prefix: str, node: Any, out: Dict[str, str]) -> None:
    if isinstance(node, dict):
        for k, v in node.items():
            _flatten(f"{prefix}.{k}" if prefix else str(k), v, out)
    elif node is not None:
        out[prefix] = str(node)


def load_catalogs(directory: Path = CATALOG_DIR) -> Dict[str, Dict[str, str]]:
    catalogs: Dict[str, Dict[str, str]] = {}
    if not directory.exists():
        logger.warning("Translation directory %s not found", directory)
        return catalogs
    for path in sorted(directory.glob("*.yaml")):
        try:
            raw = yaml.safe_load(path.read_text(encoding="utf-8")) or {}
        except (OSError, yaml.YAMLError) as e:
            logger.error("error loading translation file %s: %s", path, e)
            continue
        messages: Dict[str, str] = {}
        _flatten("", raw, messages)
        catalogs[path.stem.lower()] = messages
    return catalogs


@dataclass(frozen=True)
class LanguageChoice:
    language: str
    notice: str = ""


class Translator:
    def __init__(self, catalogs: Dict[str, Dict[str, str]], default_language: str = DEFAULT_LANGUAGE):
        self.catalogs = catalogs
        self.default_language = default_language if default_language in catalogs else DEFAULT_LANGUAGE

    @classmethod
    def from_directory(cls, directory: Path = CATALOG_DIR, default_language: str = DEFAULT_LANGUAGE) -> "Translator":
        return cls(load_catalogs(directory), default_language)

    @property
    def available_languages(self) -> Tuple[str, ...]:
        return tuple(sorted(self.catalogs))

    def is_available(self, language: Optional[str]) -> bool:
        return bool(language) and language in self.catalogs

    def translate(self, language: str, key: str, **params: Any) -> str:
        for lang in (language, self.default_language):
            message = self.catalogs.get(lang, {}).get(key)
            if message is not None:
                break
        else:
            message = key
        if params:
            try:
                return message.format(**params)
            except (KeyError, IndexError, ValueError):
                return message
        return message

    def resolve(self, requested: Optional[str], config: Optional[UserConfig]) -> LanguageChoice:
        """Pick the display language: ?lang= first, then the user's setting, then the default."""
        if requested:
            lang = requested.strip().lower()[:2]
            if self.is_available(lang):
                return LanguageChoice(lang)
            return LanguageChoice(
                self.default_language,
                self.translate(self.default_language, "notices.language_unavailable", lang=lang),
            )

        if config is not None and config.language:
            if self.is_available(config.language):
                return LanguageChoice(config.language)
            return LanguageChoice(
                self.default_language,
                self.translate(self.default_language, "notices.language_unavailable", lang=config.language),
            )

        return LanguageChoice(self.default_language)
