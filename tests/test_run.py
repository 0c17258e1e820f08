import run_region_map


def test_demo_run():
    before, after = run_region_map.main(size=(16, 16, 1), cell_size=(1.0, 1.0, 1.0), dx=3)
    assert abs(before.sum() - 1.0) < 1e-12
    assert before[1] > 0 and before[2] > 0
    # the slab and disc stay inside the window after a 3-cell shift
    assert after[1] > before[1]
    assert abs(after.sum() - 1.0) < 1e-12
