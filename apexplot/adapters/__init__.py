from .normalize import coerce_values, normalize_points, normalize_xy

__all__ = [
    "coerce_values",
    "normalize_points",
    "normalize_xy",
]
