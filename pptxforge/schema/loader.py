"""Deck loader - YAML serialization and deserialization for Presentation.

Provides round-trip save/load so decks can be reviewed, version-controlled,
and edited as human-readable YAML files. Asset paths inside a deck file are
resolved relative to the file's directory.
"""

from pathlib import Path

import yaml

from pptxforge.errors import InvalidInputError, MissingAssetError
from pptxforge.schema.presentation import Presentation


def save_deck(deck: Presentation, path: str | Path) -> None:
    """Serialize a Presentation to a YAML file."""
    path = Path(path)
    path.parent.mkdir(parents=True, exist_ok=True)
    data = deck.to_dict()
    with open(path, "w", encoding="utf-8") as f:
        yaml.dump(data, f, default_flow_style=False, sort_keys=False,
                  allow_unicode=True, width=120)


def load_deck(path: str | Path) -> Presentation:
    """Deserialize a Presentation from a YAML (or JSON) file."""
    path = Path(path)
    try:
        with open(path, encoding="utf-8") as f:
            data = yaml.safe_load(f)
    except OSError as exc:
        raise MissingAssetError(f"Cannot read deck {path}: {exc.strerror or exc}") from exc
    except yaml.YAMLError as exc:
        raise InvalidInputError(f"Deck {path} is not valid YAML: {exc}") from exc
    if not isinstance(data, dict):
        raise InvalidInputError(f"Deck {path} must contain a mapping at the top level")
    return Presentation.from_dict(data, base_dir=path.parent)


def loads_deck(text: str, base_dir: str | Path | None = None) -> Presentation:
    """Deserialize a Presentation from a YAML string."""
    try:
        data = yaml.safe_load(text)
    except yaml.YAMLError as exc:
        raise InvalidInputError(f"Deck is not valid YAML: {exc}") from exc
    if not isinstance(data, dict):
        raise InvalidInputError("Deck must contain a mapping at the top level")
    return Presentation.from_dict(data, base_dir=Path(base_dir) if base_dir else None)
