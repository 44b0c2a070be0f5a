import numpy as np
import pytest

from adcs_simulation.core.config import SimulationConfig, load_config
from adcs_simulation.core.exceptions import SimulatorStateError
from adcs_simulation.core.simulator import RunOutcome, Simulator, SimulatorStatus



def build(make_document, **kwargs):
    return Simulator(SimulationConfig.from_dict(make_document(**kwargs)))


def event_times(events, name):
    return [e.time_ms for e in events if e.device == name]


def test_gyro_sampled_only_on_its_interval(make_document, sensor_node):
    sim = build(make_document, sensors={"Gyro1": sensor_node(polling=10)}, Timeout=30)
    result = sim.run()

    assert event_times(result.events, "Gyro1") == [10, 20, 30]
    assert result.step_count == 30


def test_sustained_command_saturates_wheel_at_max_velocity(make_document, wheel_node):
    sim = build(make_document,
                actuators={"RW": wheel_node(MaxAngVel=1000, MaxAngAccel=1000)},
                Timeout=1000)
    sim.command("RW", 5000.0)
    result = sim.run()

    final = [e for e in result.events if e.device == "RW"][-1]
    assert final.time_ms == 1000
    assert final.payload.velocity == 1000.0
    assert sim.actuators["RW"].state.velocity == 1000.0
    for event in result.events:
        assert 0.0 <= event.payload.velocity <= 1000.0
        assert 0.0 <= event.payload.acceleration <= 1000.0


def test_times_out_exactly_at_timeout(make_document, sensor_node):
    sim = build(make_document, sensors={"Gyro1": sensor_node(polling=3)}, Timeout=10)
    result = sim.run()

    assert result.outcome is RunOutcome.TIMED_OUT
    assert not result.objective_reached
    assert result.end_time_ms == 10
    assert sim.status is SimulatorStatus.TIMED_OUT
    assert max(e.time_ms for e in result.events) <= 10

    with pytest.raises(SimulatorStateError):
        sim.step()
    assert len(sim.events) == len(result.events)


def test_reference_configuration(data_dir):
    sim = Simulator(load_config(data_dir / "unit_test_1.yaml"))
    result = sim.run()

    assert result.outcome is RunOutcome.TIMED_OUT
    assert result.end_time_ms == 10
    assert [(e.time_ms, e.device) for e in result.events] == [
        (10, "ReactionWheel1"), (10, "Gyro1"), (10, "Accel1"),
    ]

    # Held initial acceleration of 1 rad/s² for 10 ms
    wheel_state = result.events[0].payload
    assert wheel_state.velocity == pytest.approx(0.01)
    assert wheel_state.acceleration == pytest.approx(1.0)

    # Body reacts opposite to the wheel
    gyro = result.events[1].payload.value
    assert gyro[2] == pytest.approx(-0.01 / 0.16666666666)
    assert np.allclose(gyro[:2], 0.0)


def test_controller_stop_takes_effect_at_next_tick(make_document, sensor_node):
    sim = build(make_document, sensors={"Gyro1": sensor_node(polling=10)}, Timeout=100)

    def controller(simulator, events):
        if events:
            simulator.stop()

    sim.add_controller(controller)
    result = sim.run()

    assert result.outcome is RunOutcome.STOPPED
    assert result.objective_reached
    assert result.end_time_ms == 10
    assert event_times(result.events, "Gyro1") == [10]


def test_commands_consumed_at_next_integration(make_document, sensor_node, wheel_node):
    sim = build(make_document,
                actuators={"RW": wheel_node(PollingTime=10, MinAngAccel=-1000)},
                sensors={"Gyro1": sensor_node(polling=10)},
                Timeout=30)
    sim.add_controller(lambda s, events: s.command("RW", 100.0) if events else None)
    result = sim.run()

    wheel = [e.payload for e in result.events if e.device == "RW"]
    assert [w.acceleration for w in wheel] == [0.0, 100.0, 100.0]
    assert wheel[-1].velocity == pytest.approx(2.0)


def test_angular_momentum_is_conserved(make_document, wheel_node):
    doc = make_document(
        actuators={
            "RWX": wheel_node(AxisOfRotation=[1, 0, 0], Moment=0.01, PollingTime=7,
                              MinAngVel=-1000, MinAngAccel=-1000),
            "RWZ": wheel_node(AxisOfRotation=[0, 0, 1], Moment=0.02, PollingTime=3,
                              MinAngVel=-1000, MinAngAccel=-1000),
        },
        Timeout=500,
    )
    doc["Satellite"]["Moment"] = [[2.0, 0, 0], [0, 3.0, 0], [0, 0, 4.0]]
    doc["Satellite"]["Velocity"] = [0.1, 0.0, -0.2]
    sim = Simulator(SimulationConfig.from_dict(doc))
    h0 = sim.body.angular_momentum()

    sim.command("RWX", 300.0)
    sim.command("RWZ", -150.0)
    sim.run()

    h_wheels = sum(w.momentum_vector() for w in sim.actuators.values())
    assert np.allclose(sim.body.angular_momentum(h_wheels), h0)
    assert not np.allclose(sim.body.velocity, [0.1, 0.0, -0.2])


def test_identical_runs_produce_identical_event_streams(data_dir):
    def run_once():
        sim = Simulator(load_config(data_dir / "adaptive.yaml"))
        return [e.as_tuple() for e in sim.run().events]

    assert run_once() == run_once()


def test_replay_with_commands_is_bit_identical(make_document, sensor_node, wheel_node):
    doc = make_document(
        actuators={"RW": wheel_node(PollingTime=4, MinAngVel=-50, MaxAngVel=50,
                                    MinAngAccel=-500, MaxAngAccel=500)},
        sensors={"Gyro1": sensor_node(polling=5), "Accel1": sensor_node("Accelerometer", 7, (0.1, 0.2, 0))},
        VariableTimestep=True, TimeStepMin=2, TimeStepMax=9, Timeout=400,
    )
    doc["Satellite"]["Velocity"] = [0.01, 0.02, 0.03]

    def run_once():
        sim = Simulator(SimulationConfig.from_dict(doc))

        def controller(simulator, events):
            for event in events:
                if event.device == "Gyro1":
                    simulator.command("RW", -3000.0 * event.payload.value[2])

        sim.add_controller(controller)
        return [e.as_tuple() for e in sim.run().events]

    first, second = run_once(), run_once()
    assert len(first) > 100
    assert first == second


def test_device_time_never_exceeds_clock(make_document, sensor_node, wheel_node):
    sim = build(make_document,
                actuators={"RW": wheel_node(PollingTime=7)},
                sensors={"Gyro1": sensor_node(polling=3), "Accel1": sensor_node("Accelerometer", 11)},
                VariableTimestep=True, TimeStepMin=2, TimeStepMax=20, Timeout=300)
    last_seen = {}

    def controller(simulator, events):
        now = simulator.current_time_ms
        assert simulator.actuators["RW"].state.time_ms <= now
        for name, device in list(simulator.actuators.items()) + list(simulator.sensors.items()):
            assert device.last_poll_ms <= now
            assert device.last_poll_ms >= last_seen.get(name, 0)
            last_seen[name] = device.last_poll_ms

    sim.add_controller(controller)
    sim.run()


def test_polled_devices_respect_their_interval(make_document, sensor_node, wheel_node):
    intervals = {"Gyro1": 3, "Accel1": 11, "RW": 7}
    sim = build(make_document,
                actuators={"RW": wheel_node(PollingTime=intervals["RW"])},
                sensors={"Gyro1": sensor_node(polling=intervals["Gyro1"]),
                         "Accel1": sensor_node("Accelerometer", intervals["Accel1"])},
                VariableTimestep=True, TimeStepMin=2, TimeStepMax=20, Timeout=500)
    result = sim.run()

    for name, interval in intervals.items():
        times = event_times(result.events, name)
        assert times
        assert all(b - a >= interval for a, b in zip(times, times[1:]))


def test_fixed_mode_steps_by_timestep(make_document, sensor_node):
    sim = build(make_document, sensors={"Gyro1": sensor_node(polling=10)}, TimeStep=2, Timeout=40)
    steps = []
    sim.add_controller(lambda s, events: steps.append(s.clock.state.last_step_ms))
    sim.run()

    assert steps == [2] * 20


def test_step_api_and_state_machine(make_document, sensor_node):
    sim = build(make_document, sensors={"Gyro1": sensor_node(polling=2)}, Timeout=4)
    assert sim.status is SimulatorStatus.IDLE
    assert not sim.is_running

    with pytest.raises(SimulatorStateError):
        sim.step()
    with pytest.raises(SimulatorStateError):
        sim.result()

    sim.start()
    with pytest.raises(SimulatorStateError):
        sim.start()
    assert sim.is_running

    assert sim.step() == []
    assert [e.time_ms for e in sim.step()] == [2]
    sim.step()
    sim.step()
    assert sim.status is SimulatorStatus.TIMED_OUT
    assert not sim.is_running and sim.is_finished
    assert event_times(sim.events, "Gyro1") == [2, 4]


def test_reset_allows_identical_rerun(data_dir):
    sim = Simulator(load_config(data_dir / "unit_test_1.yaml"))
    first = [e.as_tuple() for e in sim.run().events]

    sim.reset()
    assert sim.status is SimulatorStatus.IDLE
    assert sim.events == []
    second = [e.as_tuple() for e in sim.run().events]
    assert first == second


def test_unknown_actuator_command(make_document):
    sim = build(make_document)
    with pytest.raises(KeyError):
        sim.command("RW9", 1.0)


def test_histories_and_telemetry(make_document, sensor_node, wheel_node):
    sim = build(make_document,
                actuators={"RW": wheel_node(PollingTime=5)},
                sensors={"Gyro1": sensor_node(polling=10)},
                Timeout=20)
    sim.command("RW", 10.0)
    sim.run()

    wheel = sim.actuator_history("RW")
    gyro = sim.sensor_history("Gyro1")
    assert wheel.shape == (4, 4)
    assert list(wheel[:, 0]) == [5, 10, 15, 20]
    assert gyro.shape == (2, 4)
    assert sim.actuator_history("missing").shape == (0, 4)

    telemetry = sim.get_telemetry()
    assert telemetry['time_ms'] == 20
    assert telemetry['status'] == 'timed_out'
    assert telemetry['actuators']['RW']['velocity'] == pytest.approx(0.2)


def test_body_acceleration_holds_torque_of_every_wheel(make_document, wheel_node):
    sim = build(make_document,
                actuators={"RWX": wheel_node(AxisOfRotation=[1, 0, 0], PollingTime=2, Acceleration=10),
                           "RWZ": wheel_node(AxisOfRotation=[0, 0, 1], PollingTime=3, Acceleration=20)},
                Timeout=10)
    sim.start()

    assert sim.step() == []
    assert np.allclose(sim.body.acceleration, 0.0)

    # Only RWX is due at 2 ms; RWZ still contributes its held torque
    assert [e.device for e in sim.step()] == ["RWX"]
    assert np.allclose(sim.body.acceleration, [-10.0, 0.0, -20.0])
