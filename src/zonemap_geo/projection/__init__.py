# projection/__init__.py
"""
Projection layer: canvas pixel <-> lat/lng.

- CanvasProjector: 1 枚のキャンバスと bounds に対する変換器
- pixel_to_geo / geo_to_pixel / geometry_to_geo: 関数 API
"""
__all__ = ["projection"]
