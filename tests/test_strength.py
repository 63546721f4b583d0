import pytest

from tests.helpers.factories import COMBAT_CONCEPT, make_bindings, make_resolver, make_unit
from wargame_engine.domain.errors import StrengthUnresolved
from wargame_engine.domain.types import CombatRole, GameEntity
from wargame_engine.rules.strength import BindingStrengthResolver, ConceptBindingTable, resolve_strength


def test_resolves_bound_fields_per_role() -> None:
    resolver = make_resolver()
    unit = make_unit("u1", attack=6, defense=2)
    assert resolver.resolve(COMBAT_CONCEPT, CombatRole.ATTACKER, unit) == 6.0
    assert resolver.resolve(COMBAT_CONCEPT, CombatRole.DEFENDER, unit) == 2.0


def test_dotted_field_path() -> None:
    table = ConceptBindingTable()
    table.bind("c", CombatRole.ATTACKER, "stats.combat.attack")
    unit = GameEntity(id="u", entity_type_id="armor", properties={"stats": {"combat": {"attack": 7.5}}})
    assert BindingStrengthResolver(table).resolve("c", CombatRole.ATTACKER, unit) == 7.5


def test_missing_concept_on_crt() -> None:
    with pytest.raises(StrengthUnresolved) as excinfo:
        make_resolver().resolve(None, CombatRole.ATTACKER, make_unit("u"))
    assert excinfo.value.role == "attacker"
    assert excinfo.value.user_message == "cannot calculate odds"


def test_unknown_concept() -> None:
    with pytest.raises(StrengthUnresolved, match="unknown combat concept"):
        make_resolver().resolve("movement", CombatRole.ATTACKER, make_unit("u"))


def test_missing_role_binding() -> None:
    table = ConceptBindingTable()
    table.bind(COMBAT_CONCEPT, CombatRole.ATTACKER, "attack")
    with pytest.raises(StrengthUnresolved, match="no defender binding"):
        BindingStrengthResolver(table).resolve(COMBAT_CONCEPT, CombatRole.DEFENDER, make_unit("u"))


def test_missing_field() -> None:
    unit = GameEntity(id="u", entity_type_id="infantry", properties={"attack": 3})
    with pytest.raises(StrengthUnresolved, match="has no field 'defense'"):
        make_resolver().resolve(COMBAT_CONCEPT, CombatRole.DEFENDER, unit)


@pytest.mark.parametrize("value", ["4", True, None, [4], float("nan")])
def test_non_numeric_field(value) -> None:
    unit = make_unit("u", attack=value)
    with pytest.raises(StrengthUnresolved):
        make_resolver().resolve(COMBAT_CONCEPT, CombatRole.ATTACKER, unit)


def test_resolve_strength_accepts_callable() -> None:
    def fixed(concept_id, role, entity) -> float:
        return 9 if role == CombatRole.ATTACKER else 3

    unit = make_unit("u")
    assert resolve_strength(fixed, COMBAT_CONCEPT, CombatRole.ATTACKER, unit) == 9.0
    assert resolve_strength(fixed, COMBAT_CONCEPT, CombatRole.DEFENDER, unit) == 3.0


def test_resolve_strength_logs_and_reraises(caplog) -> None:
    with pytest.raises(StrengthUnresolved):
        resolve_strength(make_resolver(), "nope", CombatRole.ATTACKER, make_unit("u"))
    assert "Strength unresolved" in caplog.text


def test_binding_table_lookup() -> None:
    table = make_bindings()
    assert table.has_concept(COMBAT_CONCEPT)
    assert not table.has_concept("other")
    assert table.bound_field(COMBAT_CONCEPT, CombatRole.DEFENDER) == "defense"
    assert table.bound_field("other", CombatRole.DEFENDER) is None


@pytest.mark.parametrize("value", [None, float("nan"), True, "6"])
def test_callable_results_are_checked(value) -> None:
    def broken(concept_id, role, entity):
        return value

    with pytest.raises(StrengthUnresolved):
        resolve_strength(broken, COMBAT_CONCEPT, CombatRole.DEFENDER, make_unit("u"))
