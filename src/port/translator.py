from typing import Protocol


class Translator(Protocol):
    """Port for localized text lookup."""

    def translate(
        self,
        text: str,
        namespace: str,
        variables: dict[str, object] | None = None,
    ) -> str:
        """Return `text` localized in `namespace` with `{name}` placeholders filled."""
        ...
