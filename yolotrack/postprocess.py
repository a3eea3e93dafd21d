"""Decoding of quantised YOLOv5 output tensors into detection results."""

from __future__ import annotations

import os
from dataclasses import dataclass
from typing import Sequence

import numpy as np

OBJ_CLASS_NUM = 80
OBJ_NUMB_MAX_SIZE = 64
NMS_THRESH = 0.45
BOX_THRESH = 0.25
PROP_BOX_SIZE = 5 + OBJ_CLASS_NUM

ANCHORS = (
    (10, 13, 16, 30, 33, 23),
    (30, 61, 62, 45, 59, 119),
    (116, 90, 156, 198, 373, 326),
)
STRIDES = (8, 16, 32)


@dataclass(frozen=True)
class BoxRect:
    """Axis-aligned box in output image pixels."""

    left: int
    right: int
    top: int
    bottom: int


@dataclass(frozen=True)
class DetectResult:
    """One detected object: class id, box and confidence."""

    id: int
    box: BoxRect
    prop: float


def _f32(value: float) -> float:
    return float(np.float32(value))


def load_label_names(path: str | os.PathLike, max_labels: int) -> list[str]:
    """Read up to ``max_labels`` label lines from a text file.

    Lines are split on ``\\n`` only; empty lines in the middle are kept,
    a trailing newline does not produce an extra empty label.
    """
    with open(path, encoding="utf-8", newline="") as handle:
        content = handle.read()
    if not content:
        return []
    lines = content.split("\n")
    if lines[-1] == "":
        lines.pop()
    return lines[:max_labels]


def quantize(value: float, zp: int, scale: float) -> int:
    """Convert a float to its affine int8 representation."""
    dst = _f32(_f32(_f32(value) / _f32(scale)) + zp)
    clipped = -128.0 if dst <= -128 else (127.0 if dst >= 127 else dst)
    return int(clipped)


def dequantize(qnt: int, zp: int, scale: float) -> float:
    """Convert an affine int8 value back to float."""
    return _f32(_f32(float(qnt) - float(zp)) * _f32(scale))


def calculate_overlap(xmin0, ymin0, xmax0, ymax0, xmin1, ymin1, xmax1, ymax1) -> float:
    """Intersection over union of two boxes given by inclusive pixel corners."""
    w = _f32(max(0.0, min(xmax0, xmax1) - max(xmin0, xmin1) + 1.0))
    h = _f32(max(0.0, min(ymax0, ymax1) - max(ymin0, ymin1) + 1.0))
    inter = _f32(w * h)
    union = _f32(
        (xmax0 - xmin0 + 1.0) * (ymax0 - ymin0 + 1.0)
        + (xmax1 - xmin1 + 1.0) * (ymax1 - ymin1 + 1.0)
        - inter
    )
    return 0.0 if union <= 0.0 else _f32(inter / union)


def _as_int8(data) -> np.ndarray:
    if isinstance(data, (bytes, bytearray, memoryview)):
        return np.frombuffer(data, dtype=np.int8)
    return np.asarray(data).astype(np.int8, copy=False).ravel()


def _process(data, anchor, stride, model_h, model_w, threshold, zp, scale,
             boxes, probs, class_ids) -> None:
    grid_h = model_h // stride
    grid_w = model_w // stride
    needed = 3 * PROP_BOX_SIZE * grid_h * grid_w
    flat = _as_int8(data)
    if flat.size < needed:
        raise ValueError(
            f"output tensor for stride {stride} holds {flat.size} values, {needed} needed"
        )
    tensor = flat[:needed].reshape(3, PROP_BOX_SIZE, grid_h, grid_w)
    thres_i8 = quantize(threshold, zp, scale)

    confidence = tensor[:, 4]
    class_scores = tensor[:, 5:]
    max_probs = class_scores.max(axis=1)
    max_ids = class_scores.argmax(axis=1)
    selected = (confidence >= thres_i8) & (max_probs > thres_i8)

    for a, i, j in zip(*np.nonzero(selected)):
        cell = tensor[a, :, i, j]
        box_x = _f32(dequantize(int(cell[0]), zp, scale) * 2.0 - 0.5)
        box_y = _f32(dequantize(int(cell[1]), zp, scale) * 2.0 - 0.5)
        box_w = _f32(dequantize(int(cell[2]), zp, scale) * 2.0)
        box_h = _f32(dequantize(int(cell[3]), zp, scale) * 2.0)
        box_x = _f32(_f32(box_x + int(j)) * stride)
        box_y = _f32(_f32(box_y + int(i)) * stride)
        box_w = _f32(_f32(box_w * box_w) * anchor[a * 2])
        box_h = _f32(_f32(box_h * box_h) * anchor[a * 2 + 1])
        box_x = _f32(box_x - box_w / 2.0)
        box_y = _f32(box_y - box_h / 2.0)

        probs.append(_f32(
            dequantize(int(max_probs[a, i, j]), zp, scale)
            * dequantize(int(confidence[a, i, j]), zp, scale)
        ))
        class_ids.append(int(max_ids[a, i, j]))
        boxes.append((box_x, box_y, box_w, box_h))


def _sort_descending(values: list[float], indices: list[int]) -> None:
    """In-place quicksort of ``values`` (descending), carrying ``indices`` along."""
    pending = [(0, len(values) - 1)]
    while pending:
        left, right = pending.pop()
        if left >= right:
            continue
        key = values[left]
        key_index = indices[left]
        low, high = left, right
        while low < high:
            while low < high and values[high] <= key:
                high -= 1
            values[low] = values[high]
            indices[low] = indices[high]
            while low < high and values[low] >= key:
                low += 1
            values[high] = values[low]
            indices[high] = indices[low]
        values[low] = key
        indices[low] = key_index
        pending.append((left, low - 1))
        pending.append((low + 1, right))


def _nms(boxes, class_ids, order, filter_id, threshold) -> None:
    count = len(order)
    for i in range(count):
        if order[i] == -1 or class_ids[i] != filter_id:
            continue
        n = order[i]
        x0, y0, w0, h0 = boxes[n]
        for j in range(i + 1, count):
            m = order[j]
            if m == -1:
                continue
            x1, y1, w1, h1 = boxes[m]
            iou = calculate_overlap(
                x0, y0, _f32(x0 + w0), _f32(y0 + h0),
                x1, y1, _f32(x1 + w1), _f32(y1 + h1),
            )
            if iou > threshold:
                order[j] = -1


def _clamp(value: float, low: int, high: int) -> int:
    return int(value if value < high else high) if value > low else low


def post_process(input0, input1, input2, model_in_h, model_in_w, conf_threshold,
                 nms_threshold, scale_w, scale_h, qnt_zps: Sequence[int],
                 qnt_scales: Sequence[float]) -> list[DetectResult]:
    """Decode the three YOLOv5 heads (strides 8, 16, 32) into at most 64 detections."""
    boxes: list[tuple[float, float, float, float]] = []
    probs: list[float] = []
    class_ids: list[int] = []

    for data, anchor, stride, zp, scale in zip(
        (input0, input1, input2), ANCHORS, STRIDES, qnt_zps, qnt_scales
    ):
        _process(data, anchor, stride, model_in_h, model_in_w, conf_threshold,
                 zp, scale, boxes, probs, class_ids)

    if not probs:
        return []

    order = list(range(len(probs)))
    _sort_descending(probs, order)

    for class_id in sorted(set(class_ids)):
        _nms(boxes, class_ids, order, class_id, nms_threshold)

    results: list[DetectResult] = []
    for position, n in enumerate(order):
        if n == -1 or len(results) >= OBJ_NUMB_MAX_SIZE:
            continue
        x1, y1, w, h = boxes[n]
        x2 = _f32(x1 + w)
        y2 = _f32(y1 + h)
        box = BoxRect(
            left=int(_f32(_clamp(x1, 0, model_in_w) / scale_w)),
            right=int(_f32(_clamp(x2, 0, model_in_w) / scale_w)),
            top=int(_f32(_clamp(y1, 0, model_in_h) / scale_h)),
            bottom=int(_f32(_clamp(y2, 0, model_in_h) / scale_h)),
        )
        results.append(DetectResult(id=class_ids[n], box=box, prop=probs[position]))
    return results