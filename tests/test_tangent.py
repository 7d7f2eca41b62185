import numpy as np
import pytest

from analysis.gali import normalize_deviations, singular_values
from compute.errors import ArgumentError
from compute.state import BufferState, FrozenState, make_state
from compute.tangent import (
    ContinuousTangentIntegrator, DiscreteTangentIntegrator, IntegrationConfig,
)

W0 = np.array([[3.0, 0.0],
               [4.0, 2.0]])


def test_buffer_state_normalizes_in_place(henon):
    integ = henon.tangent_integrator(W0, u0=[0.1, 0.2])
    buffer = integ.u
    assert isinstance(integ.state, BufferState)

    norms = normalize_deviations(integ)

    assert integ.u is buffer
    np.testing.assert_allclose(norms, [5.0, 2.0])
    np.testing.assert_array_equal(integ.u[:, 0], [0.1, 0.2])
    np.testing.assert_allclose(integ.u[:, 1:], [[0.6, 0.0], [0.8, 1.0]])


def test_frozen_state_normalizes_out_of_place(henon):
    integ = DiscreteTangentIntegrator(henon, [0.1, 0.2], W0, state_type='frozen')
    before = integ.u
    assert isinstance(integ.state, FrozenState)
    assert not before.flags.writeable

    norms = normalize_deviations(integ)

    assert integ.u is not before
    assert not integ.u.flags.writeable
    np.testing.assert_allclose(norms, [5.0, 2.0])
    np.testing.assert_array_equal(integ.u[:, 0], [0.1, 0.2])
    np.testing.assert_allclose(integ.u[:, 1:], [[0.6, 0.0], [0.8, 1.0]])
    # the old block is untouched
    np.testing.assert_array_equal(before[:, 1:], W0)


def test_normalize_marks_integrator_modified(henon):
    integ = henon.tangent_integrator(W0)
    integ.step(1)
    assert not integ._modified
    normalize_deviations(integ)
    assert integ._modified


def test_state_interface():
    u = np.column_stack(([1.0, 2.0], W0))
    for state in (make_state(u, 'buffer'), make_state(u, 'frozen')):
        assert state.num_deviation_vectors() == 2
        np.testing.assert_array_equal(state.get_column(0), [1.0, 2.0])
        np.testing.assert_array_equal(state.trajectory(), [1.0, 2.0])
        state.set_deviation_block(np.eye(2))
        np.testing.assert_array_equal(state.deviations(), np.eye(2))
        np.testing.assert_array_equal(state.get_column(0), [1.0, 2.0])
        with pytest.raises(ArgumentError):
            state.set_deviation_block(np.eye(3))
        with pytest.raises(ArgumentError):
            state.assign(np.zeros((3, 3)))

    with pytest.raises(ArgumentError):
        make_state(u, 'static')


def test_singular_values():
    u = np.column_stack(([9.0, 9.0], np.diag([3.0, 2.0])))
    np.testing.assert_allclose(singular_values(u), [3.0, 2.0])
    np.testing.assert_allclose(singular_values(u, 1), [3.0])


def test_henon_step_matches_manual_iteration(henon):
    u0 = np.array([0.1, 0.2])
    integ = henon.tangent_integrator(W0, u0=u0)
    integ.step(3)

    x, W = u0.copy(), W0.copy()
    for _ in range(3):
        J = henon.jacobian(x)
        x = henon.rule(x)
        W = J @ W

    assert integ.t == 3
    np.testing.assert_allclose(integ.u[:, 0], x)
    np.testing.assert_allclose(integ.u[:, 1:], W)


def test_numba_kernel_matches_python_loop(henon, python_henon):
    fast = henon.tangent_integrator(W0, u0=[0.1, 0.2])
    slow = python_henon.tangent_integrator(W0, u0=[0.1, 0.2])
    for _ in range(5):
        fast.step(2)
        slow.step(2)
    assert fast.t == slow.t == 10
    np.testing.assert_allclose(fast.u, slow.u, rtol=1e-10)


def test_generic_map_without_kernel(linear_map):
    integ = linear_map.tangent_integrator(np.eye(2))
    integ.step(2)
    np.testing.assert_allclose(integ.u[:, 0], [4.0, 0.25])
    np.testing.assert_allclose(integ.u[:, 1:], np.diag([4.0, 0.25]))


def test_discrete_step_needs_whole_iterations(henon):
    integ = henon.tangent_integrator(W0)
    with pytest.raises(ArgumentError):
        integ.step(0.5)


def test_wrong_initial_state_shape(henon):
    with pytest.raises(ArgumentError):
        henon.tangent_integrator(W0, u0=[1.0, 2.0, 3.0])
    with pytest.raises(ArgumentError):
        henon.tangent_integrator(np.ones((3, 2)))


def test_continuous_step_follows_flow(oscillators):
    w0 = np.eye(4)[:, :2]
    integ = oscillators.tangent_integrator(w0, u0=[1.0, 0.0, 0.0, 0.0])
    integ.step(1.0)

    t = integ.t
    assert t >= 1.0
    np.testing.assert_allclose(integ.u[:, 0], [np.cos(t), 0.0, -np.sin(t), 0.0], atol=1e-4)
    np.testing.assert_allclose(integ.u[:, 1], [np.cos(t), 0.0, -np.sin(t), 0.0], atol=1e-4)


def test_continuous_steps_are_at_least_dt(oscillators):
    integ = oscillators.tangent_integrator(np.eye(4)[:, :2])
    times = [integ.t]
    for _ in range(5):
        integ.step(0.5)
        times.append(integ.t)
    assert np.all(np.diff(times) >= 0.5)


def test_continuous_reinit(oscillators):
    integ = oscillators.tangent_integrator(np.eye(4)[:, :2])
    integ.step(2.0)
    integ.reinit([0.0, 0.0, 1.0, 0.0], np.eye(4)[:, 2:])

    assert integ.t == 0.0
    np.testing.assert_array_equal(integ.u[:, 0], [0.0, 0.0, 1.0, 0.0])
    np.testing.assert_array_equal(integ.u[:, 1:], np.eye(4)[:, 2:])
    integ.step(1.0)
    assert integ.t >= 1.0


def test_continuous_frozen_state(oscillators):
    integ = ContinuousTangentIntegrator(oscillators, oscillators.state, np.eye(4)[:, :2],
                                        state_type='frozen')
    integ.step(1.0)
    normalize_deviations(integ)
    integ.step(1.0)
    assert integ.t >= 2.0
    assert not integ.u.flags.writeable


def test_integration_config_validation():
    assert IntegrationConfig().method == 'DOP853'
    with pytest.raises(ArgumentError):
        IntegrationConfig(method='Euler')
    with pytest.raises(ArgumentError):
        IntegrationConfig(rtol=0.0)
