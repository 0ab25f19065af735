import pytest

from shanshui.config import LAYERS
from shanshui.engine import FrameClock, LandscapeEngine, PointerState
from shanshui.terrain import breathing


def test_step_without_surface_is_skipped(engine):
    assert engine.step(0, 600, 16.0) is None
    assert engine.step(800, 0, 16.0) is None
    assert engine.clock.frame == 0
    assert engine.pointer.x == 0.0


def test_step_builds_frame_in_paint_order(engine):
    frame = engine.step(800, 600, 1000.0)
    assert frame is not None
    assert frame.frame == 1
    assert frame.time == pytest.approx(1.0)
    assert [s.layer for s in frame.layers] == list(LAYERS)
    assert len(frame.grain) == 400
    assert len(frame.dust) == 40
    assert frame.ripples == []
    assert frame.ink == []


def test_grain_is_regenerated_every_frame(engine):
    first = engine.step(800, 600, 0.0).grain
    second = engine.step(800, 600, 16.0).grain
    assert first != second


def test_all_layers_share_the_frame_time_sample(engine):
    frame = engine.step(640, 480, 2500.0)
    breath = breathing(2.5)
    for sample in frame.layers:
        assert sample.baseline == pytest.approx(480 * sample.layer.y_offset + breath)


def test_pointer_target_is_relative_to_centre():
    pointer = PointerState()
    pointer.aim(500.0, 250.0, 800.0, 600.0)
    assert (pointer.target_x, pointer.target_y) == (100.0, -50.0)
    assert (pointer.raw_x, pointer.raw_y) == (500.0, 250.0)
    assert (pointer.x, pointer.y) == (0.0, 0.0)


def test_pointer_is_smoothed_once_per_frame(engine):
    engine.pointer_move(500.0, 300.0, 800, 600)
    engine.step(800, 600, 0.0)
    assert engine.pointer.x == pytest.approx(5.0)
    engine.step(800, 600, 16.0)
    assert engine.pointer.x == pytest.approx(9.75)
    assert engine.pointer.y == pytest.approx(0.0)


def test_parallax_follows_smoothed_pointer(engine):
    still = LandscapeEngine(seed=1)
    still.merge_state({"system": {"debugEvery": 0}})
    engine.pointer_move(800.0, 300.0, 800, 600)
    moved = engine.step(800, 600, 0.0)
    static = still.step(800, 600, 0.0)
    assert moved.layers[3].points != static.layers[3].points


def test_clock_never_goes_backwards():
    clock = FrameClock()
    assert clock.advance(2000.0) == pytest.approx(2.0)
    assert clock.advance(1500.0) == pytest.approx(2.0)
    assert clock.advance(2100.0) == pytest.approx(2.1)
    assert clock.frame == 3


def test_input_only_mutates_pools(engine):
    for i in range(6):
        engine.pointer_move(100.0 + i, 100.0, 800, 600)
    engine.pointer_click(100.0, 100.0)
    assert len(engine.ink) == 3
    assert len(engine.ripples) == 1
    assert engine.clock.frame == 0

    frame = engine.step(800, 600, 0.0)
    assert len(frame.ink) == 3
    assert len(frame.ripples) == 1
    assert frame.ripples[0].r == pytest.approx(1.5)


def test_ripple_scenario_through_the_engine(engine):
    engine.pointer_click(100.0, 100.0)
    frame = None
    for tick in range(14):
        frame = engine.step(800, 600, tick * 16.0)
    radii = sorted(r.r for r in frame.ripples)
    assert radii == pytest.approx([6.0, 21.0])


def test_resize_wraps_dust_without_crashing(engine):
    engine.step(800, 600, 0.0)
    p = engine.dust.particles[0]
    p.x, p.y = 750.0, 100.0
    frame = engine.step(400, 300, 16.0)
    assert p.x == 0.0
    assert frame.width == 400 and frame.height == 300
    assert len(engine.dust) == 40


def test_merge_state_reconfigures_pools(engine):
    engine.merge_state({"dust": {"count": 12}, "ripple": {"growth": 3.0}})
    assert len(engine.dust) == 12
    engine.pointer_click(0.0, 0.0)
    engine.step(800, 600, 0.0)
    assert engine.ripples.ripples[0].radius == pytest.approx(3.0)
    for tick in range(5):
        engine.step(800, 600, 16.0 * tick)
    assert len(engine.dust) == 12


def test_merge_state_ignores_unknown_keys(engine):
    engine.merge_state({"nope": {"x": 1}, "ink": {"bogus": 2, "decay": "0.5"}})
    assert "nope" not in engine.state
    assert "bogus" not in engine.state["ink"]
    assert engine.ink.decay == pytest.approx(0.5)


def test_reset_visual_state_clears_transients(engine):
    engine.pointer_move(10.0, 10.0, 800, 600)
    engine.pointer_move(10.0, 10.0, 800, 600)
    engine.pointer_click(10.0, 10.0)
    engine.step(800, 600, 0.0)
    engine.reset_visual_state()
    assert len(engine.ink) == 0
    assert len(engine.ripples) == 0
    assert engine.pointer.x == 0.0
    assert engine.pointer.raw_x is None
    assert len(engine.dust) == 40


def test_debug_report(capsys):
    eng = LandscapeEngine(seed=5)
    eng.merge_state({"system": {"debugEvery": 2}})
    eng.step(100, 100, 0.0)
    eng.step(100, 100, 16.0)
    out = capsys.readouterr().out
    assert "[Shanshui][DEBUG] frame=2" in out
    assert "dust=40" in out


def test_dust_is_seeded_over_the_first_real_surface():
    eng = LandscapeEngine({"system": {"debugEvery": 0}}, seed=11, width=100.0, height=30.0)
    eng.step(1200, 800, 0.0)
    xs = [p.x for p in eng.dust.particles]
    ys = [p.y for p in eng.dust.particles]
    assert max(xs) > 600
    assert max(ys) > 400
    # later ticks and resizes never reseed
    pool = eng.dust
    eng.step(600, 400, 16.0)
    assert eng.dust is pool
    assert len(pool) == 40


def test_merge_state_keeps_dust_positions_for_visual_tunables(engine):
    engine.step(800, 600, 0.0)
    pool = engine.dust
    positions = [(p.x, p.y) for p in pool.particles]
    engine.merge_state({"dust": {"twinkleAmp": 0.1, "color": "#ffffff"}})
    assert engine.dust is pool
    assert [(p.x, p.y) for p in engine.dust.particles] == positions
    assert engine.dust.twinkle_amp == pytest.approx(0.1)
    assert all(p.color == "#ffffff" for p in engine.dust.particles)


def test_merge_state_reseeds_dust_when_population_changes(engine):
    engine.step(800, 600, 0.0)
    pool = engine.dust
    engine.merge_state({"dust": {"velocity": 0.4}})
    assert engine.dust is not pool
    assert len(engine.dust) == 40
