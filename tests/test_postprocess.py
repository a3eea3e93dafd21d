import numpy as np
import pytest

from yolotrack.postprocess import (
    OBJ_NUMB_MAX_SIZE,
    PROP_BOX_SIZE,
    BoxRect,
    DetectResult,
    calculate_overlap,
    dequantize,
    load_label_names,
    post_process,
    quantize,
)

SCALE = 0.125
ZP = 0


def make_inputs(h, w):
    return [
        np.full((3, PROP_BOX_SIZE, h // s, w // s), -128, dtype=np.int8)
        for s in (8, 16, 32)
    ]


def set_cell(tensor, a, i, j, xywh, conf, cls, prob):
    tensor[a, 0:4, i, j] = xywh
    tensor[a, 4, i, j] = conf
    tensor[a, 5 + cls, i, j] = prob


def run(inputs, h, w, nms=0.45):
    return post_process(
        inputs[0], inputs[1], inputs[2], h, w, 0.25, nms, 1.0, 1.0,
        [ZP, ZP, ZP], [SCALE, SCALE, SCALE],
    )


def test_load_label_names_keeps_inner_empty_lines(tmp_path):
    path = tmp_path / "labels.txt"
    path.write_text("person\nbicycle\n\ncar\n", encoding="utf-8")
    assert load_label_names(path, 80) == ["person", "bicycle", "", "car"]


def test_load_label_names_limit_and_no_trailing_newline(tmp_path):
    path = tmp_path / "labels.txt"
    path.write_text("a\nb\nc", encoding="utf-8")
    assert load_label_names(path, 2) == ["a", "b"]
    assert load_label_names(path, 10) == ["a", "b", "c"]


def test_load_label_names_empty_file(tmp_path):
    path = tmp_path / "labels.txt"
    path.write_text("", encoding="utf-8")
    assert load_label_names(path, 5) == []


def test_load_label_names_missing_file(tmp_path):
    with pytest.raises(FileNotFoundError):
        load_label_names(tmp_path / "missing.txt", 5)


def test_quantize_clips_to_int8_range():
    assert quantize(1000.0, 0, 0.1) == 127
    assert quantize(-1000.0, 0, 0.1) == -128


@pytest.mark.parametrize("raw", [-128, -5, 0, 3, 127])
def test_dequantize_quantize_round_trip(raw):
    assert quantize(dequantize(raw, ZP, SCALE), ZP, SCALE) == raw


def test_calculate_overlap_identical_and_disjoint():
    assert calculate_overlap(0, 0, 9, 9, 0, 0, 9, 9) == pytest.approx(1.0)
    assert calculate_overlap(0, 0, 9, 9, 50, 50, 60, 60) == 0.0


def test_calculate_overlap_is_symmetric():
    a = calculate_overlap(0, 0, 20, 10, 5, 3, 30, 40)
    b = calculate_overlap(5, 3, 30, 40, 0, 0, 20, 10)
    assert a == b
    assert 0.0 < a < 1.0


def test_no_detections_on_background():
    inputs = make_inputs(64, 64)
    assert run(inputs, 64, 64) == []


def test_single_detection():
    inputs = make_inputs(64, 64)
    # raw 4 -> 0.5, raw 8 -> 1.0 with scale 0.125
    set_cell(inputs[0], 0, 2, 3, [4, 4, 4, 4], 8, 7, 8)
    results = run(inputs, 64, 64)
    assert len(results) == 1
    det = results[0]
    assert det.id == 7
    assert det.prop == pytest.approx(1.0)
    assert det.box == BoxRect(left=23, right=33, top=13, bottom=26)


def test_same_class_duplicates_are_suppressed():
    inputs = make_inputs(64, 64)
    # Two neighbouring cells that decode to the same box.
    set_cell(inputs[0], 0, 2, 3, [8, 4, 4, 4], 8, 0, 8)
    set_cell(inputs[0], 0, 2, 4, [4, 4, 4, 4], 6, 0, 8)
    results = run(inputs, 64, 64)
    assert len(results) == 1
    assert results[0].prop == pytest.approx(dequantize(8, ZP, SCALE) ** 2)


def test_disjoint_boxes_sorted_by_confidence():
    inputs = make_inputs(64, 64)
    set_cell(inputs[0], 0, 0, 0, [4, 4, 4, 4], 5, 1, 8)
    set_cell(inputs[0], 0, 6, 6, [4, 4, 4, 4], 8, 2, 8)
    results = run(inputs, 64, 64)
    assert [r.id for r in results] == [2, 1]
    assert results[0].prop > results[1].prop
    for r in results:
        assert 0 <= r.box.left <= r.box.right <= 64
        assert 0 <= r.box.top <= r.box.bottom <= 64


def test_result_count_is_capped():
    inputs = make_inputs(128, 128)
    inputs[0][0, 0:4] = 4
    inputs[0][0, 4] = 8
    inputs[0][0, 5] = 8
    results = run(inputs, 128, 128)
    assert len(results) == OBJ_NUMB_MAX_SIZE
    assert all(isinstance(r, DetectResult) and r.id == 0 for r in results)


def test_short_input_raises():
    inputs = make_inputs(64, 64)
    with pytest.raises(ValueError):
        post_process(
            inputs[0].ravel()[:10], inputs[1], inputs[2], 64, 64, 0.25, 0.45,
            1.0, 1.0, [ZP, ZP, ZP], [SCALE, SCALE, SCALE],
        )


def test_accepts_bytes_input():
    inputs = make_inputs(64, 64)
    set_cell(inputs[0], 0, 2, 3, [4, 4, 4, 4], 8, 7, 8)
    from_arrays = run(inputs, 64, 64)
    from_bytes = run([t.tobytes() for t in inputs], 64, 64)
    assert from_bytes == from_arrays