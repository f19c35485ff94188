# visualizer2d/__init__.py
"""
2D preview と CLI。

- config:   ExportConfig（JSON config + CLI 上書き）
- overlay:  TileOverlay（contextily で背景タイル取得）
- renderer: LandmarkPlotter（matplotlib）
- cli:      zonemap-geo コマンド
"""
__all__ = ["config", "overlay", "renderer", "cli"]
