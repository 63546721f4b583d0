from __future__ import annotations

from hypothesis import given, settings
from hypothesis import strategies as st

from tests.helpers.factories import d6_rows, make_crt, make_system
from tests.helpers.strategies import custom_modifiers, mixed_columns, outcomes, strengths, turn_structures
from wargame_engine.persistence.storage import game_system_from_json, game_system_to_json
from wargame_engine.rules.crt import resolve_crt


@st.composite
def game_systems(draw):
    columns = draw(mixed_columns(max_size=5))
    crt = make_crt(columns, d6_rows())
    for row in range(len(crt.rows)):
        for column in range(len(columns)):
            crt.set_outcome(row, column, draw(outcomes()))
    return make_system(crt=crt, modifiers=draw(custom_modifiers(max_size=4)), turn_structure=draw(turn_structures()))


@given(system=game_systems(), attack=strengths(), defense=strengths(), die=st.integers(min_value=1, max_value=6))
@settings(max_examples=30)
def test_reloaded_system_resolves_identically(system, attack: int, defense: int, die: int) -> None:
    loaded = game_system_from_json(game_system_to_json(system))
    assert loaded == system
    before = resolve_crt(system.combat_results_table, attack, defense, die)
    after = resolve_crt(loaded.combat_results_table, attack, defense, die)
    assert before == after
