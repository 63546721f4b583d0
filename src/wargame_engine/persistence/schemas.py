from __future__ import annotations

from typing import Annotated, List, Literal, Optional, Union

from pydantic import BaseModel, ConfigDict, Field


class CamelModel(BaseModel):
    model_config = ConfigDict(populate_by_name=True, validate_by_name=True)


class Phase(CamelModel):
    id: str
    name: str
    phase_type: Literal["movement", "combat", "admin"] = Field(..., alias="phaseType")
    description: str = ""


class TurnStructure(CamelModel):
    phases: List[Phase] = Field(default_factory=list)
    player_order: Literal["alternating", "simultaneous", "activation_based"] = Field(
        "alternating", alias="playerOrder"
    )


class CrtColumn(CamelModel):
    label: str
    column_type: Literal["odds_ratio", "differential"] = Field(..., alias="columnType")
    threshold: float


class CrtRow(CamelModel):
    label: str
    die_value_min: int = Field(..., alias="dieValueMin")
    die_value_max: int = Field(..., alias="dieValueMax")


class NoEffect(CamelModel):
    kind: Literal["no_effect"] = "no_effect"


class Retreat(CamelModel):
    kind: Literal["retreat"] = "retreat"
    hexes: int = Field(..., ge=0)


class StepLoss(CamelModel):
    kind: Literal["step_loss"] = "step_loss"
    steps: int = Field(..., ge=0)


class AttackerStepLoss(CamelModel):
    kind: Literal["attacker_step_loss"] = "attacker_step_loss"
    steps: int = Field(..., ge=0)


class Exchange(CamelModel):
    kind: Literal["exchange"] = "exchange"
    attacker_steps: int = Field(..., alias="attackerSteps", ge=0)
    defender_steps: int = Field(..., alias="defenderSteps", ge=0)


class AttackerEliminated(CamelModel):
    kind: Literal["attacker_eliminated"] = "attacker_eliminated"


class DefenderEliminated(CamelModel):
    kind: Literal["defender_eliminated"] = "defender_eliminated"


OutcomeEffect = Annotated[
    Union[NoEffect, Retreat, StepLoss, AttackerStepLoss, Exchange, AttackerEliminated, DefenderEliminated],
    Field(discriminator="kind"),
]


class CombatOutcome(CamelModel):
    label: str
    effect: Optional[OutcomeEffect] = None


class CombatResultsTable(CamelModel):
    id: str
    name: str
    columns: List[CrtColumn] = Field(default_factory=list)
    rows: List[CrtRow] = Field(default_factory=list)
    outcomes: List[List[CombatOutcome]] = Field(default_factory=list)
    combat_concept_id: Optional[str] = Field(None, alias="combatConceptId")


class DefenderTerrain(CamelModel):
    kind: Literal["defender_terrain"] = "defender_terrain"


class AttackerTerrain(CamelModel):
    kind: Literal["attacker_terrain"] = "attacker_terrain"


class AttackerProperty(CamelModel):
    kind: Literal["attacker_property"] = "attacker_property"
    property_name: str = Field(..., alias="propertyName")


class DefenderProperty(CamelModel):
    kind: Literal["defender_property"] = "defender_property"
    property_name: str = Field(..., alias="propertyName")


class Custom(CamelModel):
    kind: Literal["custom"] = "custom"
    tag: str


ModifierSource = Annotated[
    Union[DefenderTerrain, AttackerTerrain, AttackerProperty, DefenderProperty, Custom],
    Field(discriminator="kind"),
]


class CombatModifier(CamelModel):
    id: str
    name: str
    source: ModifierSource
    column_shift: int = Field(..., alias="columnShift")
    priority: int = 0
    cap: Optional[int] = Field(None, ge=0)
    terrain_type_filter: Optional[str] = Field(None, alias="terrainTypeFilter")


class GameSystemDocument(CamelModel):
    format_version: int = Field(..., alias="formatVersion", ge=1)
    name: str
    turn_structure: TurnStructure = Field(default_factory=TurnStructure, alias="turnStructure")
    combat_results_table: CombatResultsTable = Field(..., alias="combatResultsTable")
    combat_modifiers: List[CombatModifier] = Field(default_factory=list, alias="combatModifiers")
