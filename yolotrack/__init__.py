"""YOLOv5 output decoding, box Kalman filtering and linear assignment for tracking."""

__version__ = "0.1.0"