"""Tests for the barrage and shoot-look-shoot engagement doctrines.

Scripted draw streams pin down exactly which draws each doctrine consumes:
    - Barrage charges its whole allocation even after an early kill
    - Shoot-look-shoot charges per shot and draws a re-engage check after
      every miss
    - Both respect the shared inventory and never engage from zero stock
"""

from __future__ import annotations

import numpy as np
import pytest
from hypothesis import given, settings
from hypothesis import strategies as st

from shield.core.config import SimulationConfig
from shield.core.random_draws import ReplaySource
from shield.engine.doctrine.barrage import BarrageDoctrine
from shield.engine.doctrine.shoot_look_shoot import ShootLookShootDoctrine


def _barrage(shots: int) -> BarrageDoctrine:
    return BarrageDoctrine(SimulationConfig(doctrine_mode="barrage", shots_per_target=shots))


def _sls(max_shots: int, p_reengage: float) -> ShootLookShootDoctrine:
    return ShootLookShootDoctrine(
        SimulationConfig(
            doctrine_mode="sls", max_shots_per_target=max_shots, p_reengage=p_reengage
        )
    )


# ---------------------------------------------------------------------------
# Tests: Barrage
# ---------------------------------------------------------------------------

class TestBarrage:
    """Tests for fixed-allocation salvos."""

    def test_kill_on_first_shot_charges_full_allocation(self) -> None:
        src = ReplaySource([0.1])
        out = _barrage(3).engage(0.5, 10, src)
        assert out.killed
        assert out.shots_fired == 3
        assert out.inventory_remaining == 7
        assert src.consumed == 1

    def test_all_miss(self) -> None:
        src = ReplaySource([0.9, 0.9, 0.9])
        out = _barrage(3).engage(0.5, 10, src)
        assert not out.killed
        assert out.shots_fired == 3
        assert src.remaining == 0

    def test_kill_on_last_shot(self) -> None:
        out = _barrage(2).engage(0.5, 10, ReplaySource([0.9, 0.2]))
        assert out.killed
        assert out.shots_fired == 2

    def test_allocation_capped_by_inventory(self) -> None:
        out = _barrage(5).engage(0.0, 2, ReplaySource([0.5, 0.5]))
        assert out.shots_fired == 2
        assert out.inventory_remaining == 0

    def test_zero_allocation_consumes_nothing(self) -> None:
        src = ReplaySource([])
        out = _barrage(0).engage(1.0, 10, src)
        assert not out.killed
        assert out.shots_fired == 0
        assert out.inventory_remaining == 10

    def test_name(self) -> None:
        assert BarrageDoctrine.name == "barrage"


# ---------------------------------------------------------------------------
# Tests: Shoot-Look-Shoot
# ---------------------------------------------------------------------------

class TestShootLookShoot:
    """Tests for sequential shots with re-engagement checks."""

    def test_miss_reengage_kill(self) -> None:
        # miss (0.9), re-engage ok (0.1 < 0.5), kill (0.2 < 0.5)
        src = ReplaySource([0.9, 0.1, 0.2])
        out = _sls(4, 0.5).engage(0.5, 10, src)
        assert out.killed
        assert out.shots_fired == 2
        assert out.inventory_remaining == 8
        assert src.remaining == 0

    def test_reengage_fails(self) -> None:
        src = ReplaySource([0.9, 0.9])
        out = _sls(4, 0.5).engage(0.5, 10, src)
        assert not out.killed
        assert out.shots_fired == 1
        assert out.inventory_remaining == 9

    def test_reengage_drawn_after_last_miss(self) -> None:
        """The cap ends the loop but the re-engage check is still taken."""
        src = ReplaySource([0.5, 0.0, 0.5, 0.0])
        out = _sls(2, 1.0).engage(0.0, 10, src)
        assert out.shots_fired == 2
        assert src.consumed == 4

    def test_capped_by_inventory(self) -> None:
        src = ReplaySource([0.5] * 4)
        out = _sls(6, 1.0).engage(0.0, 2, src)
        assert out.shots_fired == 2
        assert out.inventory_remaining == 0
        assert src.consumed == 4

    def test_zero_cap(self) -> None:
        src = ReplaySource([])
        out = _sls(0, 1.0).engage(1.0, 5, src)
        assert out.shots_fired == 0
        assert out.inventory_remaining == 5

    def test_name(self) -> None:
        assert ShootLookShootDoctrine.name == "sls"


# ---------------------------------------------------------------------------
# Tests: shared rules
# ---------------------------------------------------------------------------

class TestSharedRules:
    """Rules every doctrine obeys."""

    @pytest.mark.parametrize("doctrine", [_barrage(3), _sls(3, 1.0)])
    def test_zero_inventory_no_engagement(self, doctrine) -> None:
        src = ReplaySource([])
        out = doctrine.engage(1.0, 0, src)
        assert not out.killed
        assert out.shots_fired == 0
        assert out.inventory_remaining == 0
        assert src.consumed == 0

    @given(
        shots=st.integers(min_value=0, max_value=6),
        inventory=st.integers(min_value=0, max_value=10),
        pk=st.floats(min_value=0.0, max_value=1.0),
        reengage=st.floats(min_value=0.0, max_value=1.0),
        seed=st.integers(min_value=0, max_value=10_000),
    )
    @settings(max_examples=60, deadline=5000)
    def test_inventory_accounting(
        self, shots: int, inventory: int, pk: float, reengage: float, seed: int
    ) -> None:
        rng = np.random.default_rng(seed)
        for doctrine in (_barrage(shots), _sls(shots, reengage)):
            out = doctrine.engage(pk, inventory, rng)
            assert 0 <= out.shots_fired <= min(shots, inventory)
            assert out.inventory_remaining == inventory - out.shots_fired
            if out.shots_fired == 0:
                assert not out.killed
