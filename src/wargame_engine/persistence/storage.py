"""Load and save the designer-authored game system as JSON."""

from __future__ import annotations

import logging
from pathlib import Path

from pydantic import ValidationError

from wargame_engine.domain.mechanics import GameSystem
from wargame_engine.persistence.mappers import FORMAT_VERSION, build_document, game_system_from_document
from wargame_engine.persistence.schemas import GameSystemDocument

logger = logging.getLogger(__name__)


class RulesError(ValueError):
    """Error loading or validating a game system."""


def game_system_to_json(system: GameSystem) -> str:
    return build_document(system).model_dump_json(by_alias=True, indent=2)


def game_system_from_json(text: str, *, source: str = "<string>") -> GameSystem:
    try:
        document = GameSystemDocument.model_validate_json(text)
    except ValidationError as exc:
        raise RulesError(f"Invalid game system in {source}: {exc}") from exc
    if document.format_version > FORMAT_VERSION:
        raise RulesError(
            f"{source}: format version {document.format_version} is newer than supported ({FORMAT_VERSION})"
        )
    try:
        return game_system_from_document(document)
    except ValueError as exc:
        raise RulesError(f"{source}: {exc}") from exc


def load_game_system(path: Path) -> GameSystem:
    try:
        text = path.read_text(encoding="utf-8")
    except FileNotFoundError as exc:
        raise RulesError(f"Game system file not found: {path}") from exc
    system = game_system_from_json(text, source=str(path))
    logger.debug(
        "Loaded game system %r: %d phases, %dx%d CRT, %d modifiers",
        system.name,
        len(system.turn_structure.phases),
        len(system.combat_results_table.rows),
        len(system.combat_results_table.columns),
        len(system.combat_modifiers),
    )
    return system


def save_game_system(system: GameSystem, path: Path) -> None:
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(game_system_to_json(system), encoding="utf-8")
