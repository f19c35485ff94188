# renderer.py
from typing import List, Tuple
import matplotlib.pyplot as plt
from matplotlib import patches
from matplotlib.colors import is_color_like

from zonemap_geo.model.models import DEFAULT_COLOR, GeographicBounds, LandmarkRecord
from zonemap_geo.projection.projection import Projection, web_mercator
from .overlay import TileOverlay


class LandmarkPlotter:
    """Landmarks in Web Mercator metres, optionally over a tile basemap."""

    def __init__(self, overlay: TileOverlay | None = None, proj: Projection | None = None):
        self.ov = overlay
        self.p = proj or web_mercator()

    def _extent(self, bounds: GeographicBounds) -> Tuple[float, float, float, float]:
        xmin, ymin = self.p.lonlat_to_xy(bounds.min_lng, bounds.min_lat)
        xmax, ymax = self.p.lonlat_to_xy(bounds.max_lng, bounds.max_lat)
        return xmin, ymin, xmax, ymax

    def draw(self, landmarks: List[LandmarkRecord], bounds: GeographicBounds, title: str | None = None):
        fig, ax = plt.subplots(figsize=(10, 8), dpi=120)
        xmin, ymin, xmax, ymax = self._extent(bounds)

        # 背景地図
        if self.ov:
            img, extent_wm, _ = self.ov.fetch(xmin, ymin, xmax, ymax)
            ax.imshow(img, extent=extent_wm, interpolation="bilinear", zorder=0)

        # キャンバス範囲
        ax.add_patch(patches.Rectangle(
            (xmin, ymin), xmax - xmin, ymax - ymin,
            fill=False, ec="gray", ls="--", linewidth=1.0, zorder=2,
        ))

        # マーカー
        for lm in landmarks:
            x_m, y_m = self.p.lonlat_to_xy(lm.lon, lm.lat)
            face = lm.color if lm.color and is_color_like(lm.color) else DEFAULT_COLOR
            ax.plot(x_m, y_m, marker="o", markersize=8,
                    mec="black", mfc=face, zorder=6)
            if lm.name:
                ax.annotate(lm.name, (x_m, y_m),
                            xytext=(5, 8), textcoords="offset points",
                            fontsize=10,
                            bbox=dict(boxstyle="round,pad=0.25",
                                      fc="white", ec="gray", alpha=0.85),
                            zorder=7)

        # 軸
        pad_x, pad_y = 0.05 * (xmax - xmin), 0.05 * (ymax - ymin)
        ax.set_xlim(xmin - pad_x, xmax + pad_x)
        ax.set_ylim(ymin - pad_y, ymax + pad_y)
        ax.set_aspect("equal", adjustable="box")
        ax.set_xlabel("X (EPSG:3857) [m]")
        ax.set_ylabel("Y (EPSG:3857) [m]")
        if title:
            ax.set_title(title)
        fig.tight_layout()
        return fig, ax

    def show(self):
        plt.show()

    def save(self, fig, path: str):
        fig.savefig(path)
        plt.close(fig)
