"""Catalog-backed implementation of Translator.

Catalogs map namespace -> source text -> translated text. Text with no
catalog entry is returned as-is, so an empty catalog yields the source
language.
"""

import re
from typing import Mapping

_PLACEHOLDER = re.compile(r"\{(\w+)\}")


class CatalogTranslator:
    def __init__(self, catalogs: Mapping[str, Mapping[str, str]] | None = None):
        self.catalogs = {ns: dict(entries) for ns, entries in (catalogs or {}).items()}

    def translate(
        self,
        text: str,
        namespace: str,
        variables: dict[str, object] | None = None,
    ) -> str:
        translated = self.catalogs.get(namespace, {}).get(text, text)
        if not variables:
            return translated
        # Unknown placeholders are left intact instead of raising KeyError.
        return _PLACEHOLDER.sub(
            lambda m: str(variables[m.group(1)]) if m.group(1) in variables else m.group(0),
            translated,
        )
