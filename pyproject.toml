[build-system]
requires = ["hatchling"]
build-backend = "hatchling.build"

[project]
name = "yolotrack"
version = "0.1.0"
description = "YOLOv5 output decoding, box Kalman filtering and linear assignment for object tracking"
requires-python = ">=3.10"
keywords = [
    "yolov5",
    "object-detection",
    "nms",
    "kalman-filter",
    "linear-assignment",
    "jonker-volgenant",
    "iou",
]
classifiers = [
    "Development Status :: 4 - Beta",
    "Intended Audience :: Developers",
    "Intended Audience :: Science/Research",
    "Operating System :: OS Independent",
    "Programming Language :: Python :: 3",
    "Programming Language :: Python :: 3 :: Only",
    "Programming Language :: Python :: 3.10",
    "Programming Language :: Python :: 3.11",
    "Programming Language :: Python :: 3.12",
    "Programming Language :: Python :: 3.13",
    "Topic :: Scientific/Engineering :: Image Recognition",
]
dependencies = [
    "numpy",
]

[project.optional-dependencies]
test = [
    "pytest",
]

[tool.hatch.build.targets.wheel]
packages = ["yolotrack"]

[tool.pytest.ini_options]
testpaths = ["tests"]
addopts = "-ra"

[tool.ruff]
line-length = 100
target-version = "py310"

[tool.mypy]
python_version = "3.10"
ignore_missing_imports = true
