# yolotrack

Decode the quantized output heads of a YOLOv5 model into detections, and use
the pieces needed to follow boxes between frames: a constant-velocity Kalman
filter, IoU cost matrices and a Jonker–Volgenant linear assignment solver.
Everything is plain Python on top of numpy.

## Install

```
pip install .
```

For the test suite:

```
pip install ".[test]"
pytest
```

## Decoding detections

`yolotrack.postprocess.post_process` takes the three int8 output tensors of a
YOLOv5 model (strides 8, 16 and 32), each laid out as
`3 anchors x (5 + 80 classes) x grid_h x grid_w`, together with the zero point
and scale of each tensor. A tensor may be given as `bytes` or as anything numpy
can turn into an array; a tensor that is too small raises `ValueError`.

It returns a list of frozen `DetectResult` dataclasses, each with a class `id`,
a `box` (`BoxRect` with `left`, `right`, `top`, `bottom`) and a confidence
`prop`. Results come in order of falling confidence. Boxes are clamped to the
model input and divided by `scale_w` / `scale_h` to map them back to the source
image. Non-maximum suppression is applied per class and at most 64 results are
kept.

```python
from yolotrack.postprocess import BOX_THRESH, NMS_THRESH, load_label_names, post_process

labels = load_label_names("coco_80_labels_list.txt", 80)
results = post_process(out0, out1, out2, 640, 640, BOX_THRESH, NMS_THRESH,
                       scale_w, scale_h, zero_points, scales)
for det in results:
    print(labels[det.id], f"{det.prop * 100:.1f}%", det.box)
```

`load_label_names(path, max_labels)` reads up to `max_labels` lines of a UTF-8
text file, one label per line.

`quantize(value, zp, scale)` and `dequantize(qnt, zp, scale)` convert between
floats and affine int8 values; `calculate_overlap(...)` gives the IoU of two
boxes given by inclusive pixel corners.

## Kalman filter

`yolotrack.kalman.KalmanFilter` works on an 8-value state: box centre `x`, `y`,
aspect ratio `a`, height `h` and their velocities. All values are `float32`
numpy arrays.

```python
from yolotrack.kalman import KalmanFilter

kf = KalmanFilter()
mean, cov = kf.initiate([320.0, 240.0, 0.5, 100.0])
mean, cov = kf.predict(mean, cov)
mean, cov = kf.update(mean, cov, [322.0, 241.0, 0.5, 101.0])
projected_mean, projected_cov = kf.project(mean, cov)
distances = kf.gating_distance(mean, cov, [[322.0, 241.0, 0.5, 101.0]])
```

`gating_distance` returns the squared Mahalanobis distance to each measurement;
with `only_position=True` it raises `ValueError`. `KalmanFilter.chi2inv95`
holds the 95% chi-square quantiles for 0 to 9 degrees of freedom.

## Matching

`yolotrack.matching` builds costs between boxes and solves the assignment:

- `ious(atlbrs, btlbrs)` — pairwise IoU of `(left, top, right, bottom)` boxes,
  as a list of lists; empty if either side is empty.
- `iou_distance(atracks, btracks)` — `1 - IoU` between the `tlbr` attributes of
  two sequences of objects.
- `lapjv(cost, extend_cost=False, cost_limit=..., return_cost=True)` — returns
  `(total_cost, rowsol, colsol)`, with `-1` for rows or columns left
  unassigned. A non-square matrix needs `extend_cost=True`, otherwise
  `ValueError` is raised; with a `cost_limit`, pairs dearer than the limit stay
  unassigned.
- `linear_assignment(cost_matrix, n_rows, n_cols, thresh)` — returns
  `(matches, unmatched_rows, unmatched_cols)`; an empty matrix leaves all
  `n_rows` rows and `n_cols` columns unmatched.

```python
from yolotrack.matching import linear_assignment

cost = [[0.1, 0.9], [0.8, 0.2], [0.95, 0.99]]
matches, unmatched_rows, unmatched_cols = linear_assignment(cost, 3, 2, 0.8)
# matches == [(0, 0), (1, 1)], unmatched_rows == [2], unmatched_cols == []
```

`yolotrack.lapjv.solve_dense(cost)` is the underlying solver for square
matrices; it returns `(x, y)` where `x[row]` is the column of each row and
`y[col]` the row of each column.

## What the package does not do

The package has no multi-frame tracker: there is no track object that keeps an
identity, a state and a history, and nothing that runs the per-frame loop of
predicting, matching detections in two rounds, starting new tracks and retiring
lost ones. The Kalman filter and the matching functions are the parts such a
tracker is built from, but that loop is left to the caller. There is also no
model inference, no video input and no drawing of results; `post_process`
starts from output tensors already in memory.