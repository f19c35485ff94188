# overlay.py
from dataclasses import dataclass
import numpy as np
import contextily as ctx

INITIAL_RES = 156543.03392804097  # m/px at z=0 (3857, 256px)


@dataclass(frozen=True)
class TileOverlay:
    """Basemap for the landmark preview, fetched for the map's bounds."""
    tiles: str = "OpenStreetMap.Mapnik"
    zoom: int | None = None
    target_px: int = 1024
    max_px: int = 8192

    def provider(self):
        """URL template as-is, else a dotted contextily provider name."""
        if self.tiles.startswith(("http://", "https://")):
            return self.tiles
        node = ctx.providers
        for part in filter(None, self.tiles.split(".")):
            try:
                node = node[part]
            except KeyError:
                raise ValueError(f"unknown tile provider {self.tiles!r}") from None
        return node

    def auto_zoom(self, extent_m: float, provider) -> int:
        """bounds の横幅が target_px 程度に収まるズーム"""
        target_m_per_px = max(1e-9, extent_m / max(1, self.target_px))
        zoom = int(round(np.log2(INITIAL_RES / target_m_per_px)))
        zmin = getattr(provider, "min_zoom", 0)
        zmax = getattr(provider, "max_zoom", 22)
        return int(np.clip(zoom, zmin, zmax))

    def cap_zoom(self, extent_m: float, zoom: int) -> int:
        """画像の横幅が max_px を超えないズームまで下げる"""
        if extent_m <= 0:
            return zoom
        limit = int(np.floor(np.log2(INITIAL_RES * self.max_px / extent_m)))
        return max(0, min(zoom, limit))

    def fetch(self, xmin, ymin, xmax, ymax):
        """EPSG:3857 の範囲でタイル画像を取得 -> (img, extent, zoom)"""
        provider = self.provider()
        extent_m = xmax - xmin
        z = self.zoom if self.zoom is not None else self.auto_zoom(extent_m, provider)
        z = self.cap_zoom(extent_m, z)
        img, extent_wm = ctx.bounds2img(xmin, ymin, xmax, ymax, source=provider, zoom=z, ll=False)
        return img, extent_wm, z
