import pytest

from tests.helpers.factories import d6_rows, make_crt, make_resolver, make_unit, ratio_columns
from wargame_engine.domain.combat_models import ActiveCombat, CombatStage
from wargame_engine.domain.errors import EmptyTable, InvalidCombatState, NoMatchingRow, StrengthUnresolved
from wargame_engine.domain.mechanics import (
    CombatModifierDefinition,
    CombatOutcome,
    CombatResultsTable,
    CrtRow,
    Custom,
    DefenderTerrain,
    Exchange,
    NoEffect,
    Retreat,
)
from wargame_engine.domain.types import CombatRole, TerrainRef
from wargame_engine.sim.pipeline import (
    CombatContext,
    apply_die_roll,
    begin_combat,
    confirm_outcome,
    record_failure,
    reset_combat,
    select_unit,
)


def _ctx(crt=None, modifiers=(), terrain=None, tags=frozenset()) -> CombatContext:
    terrain = terrain or {}
    return CombatContext(
        crt=crt or make_crt(ratio_columns(1.0, 2.0, 3.0), d6_rows()),
        modifiers=modifiers,
        strength_resolver=make_resolver(),
        terrain_of=lambda unit: terrain.get(unit.id),
        active_tags=tags,
    )


ATTACKER = make_unit("a", attack=6, defense=1)
DEFENDER = make_unit("d", attack=1, defense=2)
OTHER = make_unit("o", attack=1, defense=6)


def test_begin_combat_example() -> None:
    combat = begin_combat(ATTACKER, DEFENDER, _ctx())
    assert combat.stage == CombatStage.DEFENDER_SELECTED
    assert combat.attacker_strength == 6.0
    assert combat.defender_strength == 2.0
    assert combat.raw_value == 3.0
    assert combat.base_column == 2
    assert combat.resolved_column == 2
    assert combat.total_shift == 0
    assert combat.applied_modifiers == ()


def test_modifiers_shift_resolved_column() -> None:
    forest = CombatModifierDefinition(
        id="f", name="Forest", source=DefenderTerrain(), column_shift=-1, priority=10, terrain_type_filter="forest"
    )
    ctx = _ctx(modifiers=[forest], terrain={"d": TerrainRef("forest")})
    combat = begin_combat(ATTACKER, DEFENDER, ctx)
    assert combat.base_column == 2
    assert combat.total_shift == -1
    assert combat.resolved_column == 1
    assert combat.applied_modifiers == (("Forest", -1),)
    assert [e.name for e in combat.factor_events] == ["Forest"]


def test_shift_clamped_to_table_bounds() -> None:
    boost = CombatModifierDefinition(id="b", name="Boost", source=Custom("on"), column_shift=2)
    combat = begin_combat(ATTACKER, DEFENDER, _ctx(modifiers=[boost], tags=frozenset({"on"})))
    assert combat.total_shift == 2
    assert combat.resolved_column == 2


def test_unit_cannot_attack_itself() -> None:
    with pytest.raises(InvalidCombatState):
        begin_combat(ATTACKER, ATTACKER, _ctx())


def test_begin_combat_surfaces_strength_failure() -> None:
    crt = make_crt(ratio_columns(1.0), d6_rows(), combat_concept_id=None)
    with pytest.raises(StrengthUnresolved):
        begin_combat(ATTACKER, DEFENDER, _ctx(crt=crt))


def test_select_flow_idle_to_defender_selected() -> None:
    ctx = _ctx()
    combat = select_unit(ActiveCombat.idle(), ATTACKER, ctx)
    assert combat.stage == CombatStage.ATTACKER_SELECTED
    assert combat.attacker == ATTACKER
    combat = select_unit(combat, DEFENDER, ctx)
    assert combat.stage == CombatStage.DEFENDER_SELECTED
    assert combat.defender == DEFENDER


def test_reselecting_attacker_cancels() -> None:
    ctx = _ctx()
    combat = select_unit(ActiveCombat.idle(), ATTACKER, ctx)
    assert select_unit(combat, ATTACKER, ctx).is_idle


@pytest.mark.parametrize("unit", [ATTACKER, DEFENDER])
def test_selecting_either_unit_again_resets(unit) -> None:
    combat = begin_combat(ATTACKER, DEFENDER, _ctx())
    assert select_unit(combat, unit, _ctx()) == ActiveCombat.idle()


def test_selecting_third_unit_retargets() -> None:
    combat = begin_combat(ATTACKER, DEFENDER, _ctx())
    combat = select_unit(combat, OTHER, _ctx())
    assert combat.stage == CombatStage.DEFENDER_SELECTED
    assert combat.defender == OTHER
    assert combat.raw_value == 1.0
    assert combat.resolved_column == 0


def test_empty_table_blocks_combat_start() -> None:
    ctx = _ctx(crt=CombatResultsTable(id="e", name="Empty"))
    with pytest.raises(EmptyTable):
        select_unit(ActiveCombat.idle(), ATTACKER, ctx)


def test_roll_reads_outcome_cell() -> None:
    ctx = _ctx()
    combat = begin_combat(ATTACKER, DEFENDER, ctx)
    rolled = apply_die_roll(combat, 4, ctx)
    assert rolled.stage == CombatStage.ROLLED
    assert rolled.die_roll == 4
    assert rolled.resolved_row == 3
    assert rolled.outcome == CombatOutcome("r3c2")
    assert rolled.pending_effect is None


def test_roll_carries_pending_effect_without_applying() -> None:
    crt = make_crt(ratio_columns(1.0, 2.0, 3.0), d6_rows())
    crt.set_outcome(3, 2, CombatOutcome("EX", Exchange(attacker_steps=1, defender_steps=2)))
    ctx = _ctx(crt=crt)
    rolled = apply_die_roll(begin_combat(ATTACKER, DEFENDER, ctx), 4, ctx)
    pending = rolled.pending_effect
    assert pending is not None
    assert pending.attacker_steps == 1
    assert pending.defender_steps == 2
    assert pending.affected_roles == (CombatRole.ATTACKER, CombatRole.DEFENDER)
    assert pending.requires_action
    assert ATTACKER.properties["attack"] == 6


def test_no_effect_pending_requires_nothing() -> None:
    crt = make_crt(ratio_columns(1.0, 2.0, 3.0), d6_rows())
    crt.set_outcome(0, 2, CombatOutcome("NE", NoEffect()))
    crt.set_outcome(1, 2, CombatOutcome("DR", Retreat(hexes=2)))
    ctx = _ctx(crt=crt)
    combat = begin_combat(ATTACKER, DEFENDER, ctx)
    assert not apply_die_roll(combat, 1, ctx).pending_effect.requires_action
    retreat = apply_die_roll(combat, 2, ctx).pending_effect
    assert retreat.retreat_hexes == 2
    assert retreat.affected_roles == (CombatRole.DEFENDER,)


def test_roll_before_defender_rejected() -> None:
    ctx = _ctx()
    with pytest.raises(InvalidCombatState):
        apply_die_roll(ActiveCombat.idle(), 3, ctx)
    with pytest.raises(InvalidCombatState):
        apply_die_roll(select_unit(ActiveCombat.idle(), ATTACKER, ctx), 3, ctx)


def test_second_roll_rejected() -> None:
    ctx = _ctx()
    rolled = apply_die_roll(begin_combat(ATTACKER, DEFENDER, ctx), 2, ctx)
    with pytest.raises(InvalidCombatState):
        apply_die_roll(rolled, 3, ctx)
    with pytest.raises(InvalidCombatState):
        select_unit(rolled, OTHER, ctx)


def test_roll_outside_rows() -> None:
    crt = make_crt(ratio_columns(1.0, 2.0, 3.0), [CrtRow("1-3", 1, 3)])
    ctx = _ctx(crt=crt)
    with pytest.raises(NoMatchingRow):
        apply_die_roll(begin_combat(ATTACKER, DEFENDER, ctx), 5, ctx)


def test_roll_after_table_shrinks_is_rejected() -> None:
    ctx = _ctx()
    combat = begin_combat(ATTACKER, DEFENDER, ctx)
    ctx.crt.remove_column(2)
    with pytest.raises(InvalidCombatState):
        apply_die_roll(combat, 1, ctx)


def test_confirm_emits_resolved_event() -> None:
    ctx = _ctx()
    rolled = apply_die_roll(begin_combat(ATTACKER, DEFENDER, ctx), 6, ctx)
    resolved, event = confirm_outcome(rolled, ctx)
    assert resolved.stage == CombatStage.RESOLVED
    assert event.attacker_id == "a"
    assert event.defender_id == "d"
    assert event.die_roll == 6
    assert event.column_label == "3:1"
    assert event.outcome.label == "r5c2"


def test_confirm_requires_roll() -> None:
    with pytest.raises(InvalidCombatState):
        confirm_outcome(begin_combat(ATTACKER, DEFENDER, _ctx()), _ctx())


def test_resolved_combat_accepts_new_attacker() -> None:
    ctx = _ctx()
    resolved, _ = confirm_outcome(apply_die_roll(begin_combat(ATTACKER, DEFENDER, ctx), 1, ctx), ctx)
    combat = select_unit(resolved, OTHER, ctx)
    assert combat.stage == CombatStage.ATTACKER_SELECTED
    assert combat.attacker == OTHER
    assert combat.defender is None


def test_reset_is_idempotent() -> None:
    assert reset_combat() == reset_combat() == ActiveCombat.idle()


def test_record_failure_for_strength_returns_to_attacker_selected() -> None:
    combat = select_unit(ActiveCombat.idle(), ATTACKER, _ctx())
    failed = record_failure(combat, StrengthUnresolved("defender", "no binding"))
    assert failed.stage == CombatStage.ATTACKER_SELECTED
    assert failed.attacker == ATTACKER
    assert failed.defender is None
    assert failed.failure.kind == "strength_unresolved"
    assert failed.failure.user_message == "cannot calculate odds"


def test_record_failure_for_row_keeps_odds() -> None:
    combat = begin_combat(ATTACKER, DEFENDER, _ctx())
    failed = record_failure(combat, NoMatchingRow(9))
    assert failed.stage == CombatStage.DEFENDER_SELECTED
    assert failed.resolved_column == combat.resolved_column
    assert failed.die_roll == 9
    assert failed.outcome is None
    assert failed.failure.kind == "no_matching_row"


def test_record_failure_for_empty_table_goes_idle() -> None:
    failed = record_failure(ActiveCombat.idle(), EmptyTable("empty"))
    assert failed.stage == CombatStage.IDLE
    assert failed.failure.kind == "empty_table"
