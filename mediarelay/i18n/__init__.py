import json
import logging
from pathlib import Path
from typing import Any, Dict, Optional

from mediarelay.config.settings import config

logger = logging.getLogger(__name__)

LOCALES_DIR = Path(__file__).resolve().parent.parent / "locales"


class I18n:
    """
    Message catalog, one JSON file per locale under mediarelay/locales.
    Keys are dotted paths ("error.missing_url"); a key missing from the
    requested locale falls back to the default locale, then to the key itself.
    """

    def __init__(self, locales_dir: Path = LOCALES_DIR, default_locale: Optional[str] = None):
        self.default_locale = default_locale or config.i18n.default_locale
        self.locales: Dict[str, Dict[str, Any]] = {}

        for path in sorted(locales_dir.glob("*.json")):
            try:
                self.locales[path.stem] = json.loads(path.read_text(encoding="utf-8"))
            except (OSError, ValueError) as e:
                logger.error(f"Error loading locale {path.stem}: {e}")

        if self.default_locale not in self.locales:
            logger.warning(f"Default locale '{self.default_locale}' not found in {locales_dir}")

    def _lookup(self, locale: str, key: str) -> Optional[str]:
        value: Any = self.locales.get(locale)
        for part in key.split("."):
            if not isinstance(value, dict):
                return None
            value = value.get(part)
        return value if isinstance(value, str) else None

    def get(self, key: str, locale: Optional[str] = None, **kwargs) -> str:
        """Get translated string by key with optional interpolation"""
        template = self._lookup(locale or self.default_locale, key)
        if template is None:
            template = self._lookup(self.default_locale, key)
        if template is None:
            return key

        try:
            return template.format(**kwargs)
        except KeyError:
            return template


i18n = I18n()
