"""Tests for compartments.integrators: Euler/RK4 steppers and invariant checks."""

import math

import numpy as np
import pytest

from compartments.buffers import TrajectoryBuffers
from compartments.errors import ConfigurationError
from compartments.integrators import (
    advance,
    check_invariants,
    euler_step,
    get_stepper,
    integrate,
    rk4_step,
)
from compartments.odes import sir_rhs
from compartments.reporting import PrintTrace, format_snapshot


def decay(y):
    return -y


def rotation(y):
    # x' = -y, y' = x : couples the two components
    return np.array([-y[1], y[0]])


# ── single steps ──────────────────────────────────────────────────────

class TestSteps:
    def test_euler_step_formula(self):
        y = np.array([1.0, 0.5])
        assert np.array_equal(euler_step(decay, y, 0.1), y + 0.1 * decay(y))

    def test_rk4_step_formula(self):
        y, h = np.array([1.0, 0.0]), 0.2
        k1 = rotation(y)
        k2 = rotation(y + 0.5 * h * k1)
        k3 = rotation(y + 0.5 * h * k2)
        k4 = rotation(y + h * k3)
        expected = y + (h / 6.0) * (k1 + 2.0 * k2 + 2.0 * k3 + k4)
        np.testing.assert_allclose(rk4_step(rotation, y, h), expected, rtol=1e-15, atol=0)

    def test_rk4_much_more_accurate_than_euler(self):
        y0 = np.array([1.0])
        exact = math.exp(-1.0)
        euler = integrate(decay, y0, 11, 0.1, "euler")[-1, 0]
        rk4 = integrate(decay, y0, 11, 0.1, "rk4")[-1, 0]
        assert abs(euler - exact) > 1e-2
        assert abs(rk4 - exact) < 1e-6

    def test_rk4_fourth_order_convergence(self):
        y0 = np.array([1.0, 0.0])

        def err(h, n):
            y = integrate(rotation, y0, n + 1, h, "rk4")[-1]
            return np.abs(y - [math.cos(1.0), math.sin(1.0)]).max()

        ratio = err(0.1, 10) / err(0.05, 20)
        assert 12.0 < ratio < 20.0

    def test_stages_see_consistent_state(self):
        # with per-component independent stages the coupling term in
        # rotation() would use stale values; the full-vector step stays
        # on the unit circle to high accuracy
        y = np.array([1.0, 0.0])
        for _ in range(100):
            y = rk4_step(rotation, y, 0.01)
        assert np.hypot(*y) == pytest.approx(1.0, abs=1e-10)


class TestMethodLookup:
    @pytest.mark.parametrize("name,fn", [("euler", euler_step), ("fdm", euler_step), ("rk4", rk4_step)])
    def test_known(self, name, fn):
        assert get_stepper(name) is fn

    @pytest.mark.parametrize("name", ["RK4", "midpoint", None, ""])
    def test_unknown(self, name):
        with pytest.raises(ConfigurationError):
            get_stepper(name)


# ── integrate() ───────────────────────────────────────────────────────

class TestIntegrate:
    def test_shape_and_initial_row(self):
        out = integrate(decay, [1.0, 2.0], 5, 1.0)
        assert out.shape == (5, 2)
        assert np.array_equal(out[0], [1.0, 2.0])

    def test_single_point_writes_nothing(self):
        out = integrate(decay, [1.0], 1, 1.0)
        assert out.shape == (1, 1)

    def test_deterministic(self):
        a = integrate(rotation, [1.0, 0.0], 50, 0.1, "rk4")
        b = integrate(rotation, [1.0, 0.0], 50, 0.1, "rk4")
        assert np.array_equal(a, b)

    def test_observer_sees_every_step(self):
        seen = []
        integrate(decay, [1.0], 4, 0.5, observer=lambda t, snap: seen.append((t, snap)))
        assert [t for t, _ in seen] == [1, 2, 3]
        assert seen[0][1] == {"x0": 0.5}

    def test_observer_uses_names_and_trace_every(self):
        seen = []
        integrate(rotation, [1.0, 0.0], 11, 0.1, names=("x", "y"),
                  observer=lambda t, snap: seen.append((t, snap)), trace_every=3)
        assert [t for t, _ in seen] == [3, 6, 9, 10]
        assert set(seen[0][1]) == {"x", "y"}

    def test_print_trace_sink(self, sir_params, capsys):
        out = integrate(lambda y: sir_rhs(y, sir_params), [0.99, 0.01, 0.0], 3, 1.0,
                        names=("s", "i", "r"), observer=PrintTrace())
        lines = capsys.readouterr().out.splitlines()
        assert len(lines) == 2
        assert lines[0].startswith("t=1: s=0.990202 i=")
        assert lines[1] == format_snapshot(2, dict(zip(("s", "i", "r"), out[2])))

    def test_bad_names(self):
        with pytest.raises(ConfigurationError):
            integrate(decay, [1.0, 2.0], 3, 1.0, names=("a",))

    def test_bad_trace_every(self):
        with pytest.raises(ConfigurationError):
            integrate(decay, [1.0], 3, 1.0, trace_every=0)

    def test_bad_n_points(self):
        with pytest.raises(ConfigurationError):
            integrate(decay, [1.0], 0, 1.0)


# ── advance() over buffers ────────────────────────────────────────────

class TestAdvance:
    def make(self, n, backend="array"):
        bufs = TrajectoryBuffers(("x", "y"), n, backend)
        bufs.write(0, np.array([1.0, 0.0]))
        return bufs

    @pytest.mark.parametrize("method", ["euler", "rk4"])
    def test_matches_integrate(self, method):
        bufs = advance(self.make(12), rotation, 0.25, method)
        assert np.array_equal(bufs.to_numpy(), integrate(rotation, [1.0, 0.0], 12, 0.25, method))

    def test_backends_agree(self):
        a = advance(self.make(8, "array"), rotation, 0.5, "rk4").to_numpy()
        b = advance(self.make(8, "matrix"), rotation, 0.5, "rk4").to_numpy()
        assert np.array_equal(a, b)

    def test_trace_every_includes_last_index(self):
        seen = []
        advance(self.make(11), rotation, 0.1, observer=lambda t, snap: seen.append(t), trace_every=3)
        assert seen == [3, 6, 9, 10]

    def test_observer_receives_snapshot(self):
        seen = []
        advance(self.make(2), rotation, 1.0, observer=lambda t, snap: seen.append(snap))
        assert seen == [{"x": 1.0, "y": 1.0}]

    def test_start_continues_from_previous_index(self):
        full = advance(self.make(10), rotation, 0.1, "rk4").to_numpy()
        part = self.make(10)
        advance(part, rotation, 0.1, "rk4")
        part.write(6, np.zeros(2))
        advance(part, rotation, 0.1, "rk4", start=6)
        assert np.array_equal(part.to_numpy(), full)

    def test_bad_start(self):
        with pytest.raises(ConfigurationError):
            advance(self.make(5), rotation, 1.0, start=0)
        with pytest.raises(ConfigurationError):
            advance(self.make(5), rotation, 1.0, start=6)

    def test_bad_trace_every(self):
        with pytest.raises(ConfigurationError):
            advance(self.make(5), rotation, 1.0, trace_every=0)


# ── check_invariants() ────────────────────────────────────────────────

class TestCheckInvariants:
    names = ("s", "i", "r")

    def test_valid_trajectory(self):
        traj = np.array([[0.9, 0.1, 0.0], [0.8, 0.15, 0.05]])
        report = check_invariants(traj, self.names)
        assert report.ok
        assert report.first_violation is None
        assert report.out_of_bounds == {}
        assert report.describe() == "population invariant holds"

    def test_out_of_bounds(self):
        traj = np.array([[0.5, 0.5, 0.0], [0.75, 0.5, -0.25], [1.25, -0.25, 0.0]])
        report = check_invariants(traj, self.names)
        assert not report.ok
        assert report.first_violation == 1
        assert list(report.out_of_bounds["r"]) == [1]
        assert list(report.out_of_bounds["s"]) == [2]
        assert list(report.out_of_bounds["i"]) == [2]

    def test_sum_drift(self):
        traj = np.array([[0.5, 0.5, 0.0], [0.5, 0.5, 0.1]])
        report = check_invariants(traj, self.names)
        assert not report.ok
        assert report.first_violation == 1
        assert report.max_sum_error == pytest.approx(0.1)
        assert "max |sum - 1|" in report.describe()

    def test_tolerance(self):
        traj = np.array([[0.5, 0.5 + 1e-12, 0.0]])
        assert check_invariants(traj, self.names).ok
        assert not check_invariants(traj, self.names, tol=1e-14).ok

    def test_nan_is_a_violation(self):
        traj = np.array([[0.5, 0.5, 0.0], [np.nan, 0.5, 0.0]])
        report = check_invariants(traj, self.names)
        assert not report.ok
        assert report.first_violation == 1
