from __future__ import annotations
import pathlib, json, logging, math
from dataclasses import astuple
from typing import Any, Dict, Mapping, Optional, Union

from jsonschema import validate, ValidationError

from .errors import MalformedZonePayload, UnsupportedZoneType
from .models import (
    CanvasConfig,
    CircleGeometry,
    GeographicBounds,
    Geometry,
    MapRecord,
    Payload,
    PointGeometry,
    RectangleGeometry,
    Zone,
    ZoneContent,
    ZoneRecord,
    ZoneStyle,
    ZoneType,
)

logger = logging.getLogger(__name__)

_GEOMETRY_SCHEMAS = {
    ZoneType.POINT.value: "point.schema.json",
    ZoneType.RECTANGLE.value: "rectangle.schema.json",
    ZoneType.CIRCLE.value: "circle.schema.json",
}


def _reject_constant(name: str) -> float:
    raise ValueError(f"non-finite number {name} is not allowed")


def _decode_json(text: str) -> Any:
    # NaN / Infinity は json.loads が既定で受け付けてしまう
    return json.loads(text, parse_constant=_reject_constant)


class ModelLoader:
    """JSON payload / map record をモデル化する共通ローダ"""

    def __init__(self, validate_schema: bool = True, schema_dir: str | pathlib.Path | None = None):
        self.validate_schema = validate_schema
        # デフォルト: このパッケージの schemas ディレクトリ
        if schema_dir is None:
            self.schema_dir = pathlib.Path(__file__).parent.parent / "schemas"
        else:
            self.schema_dir = pathlib.Path(schema_dir)
        self._schemas: Dict[str, Any] = {}

    def _load_json(self, path: str | pathlib.Path) -> Any:
        with open(path, "r", encoding="utf-8") as f:
            return json.load(f)

    def _schema(self, schema_name: str) -> Any:
        if schema_name not in self._schemas:
            self._schemas[schema_name] = self._load_json(self.schema_dir / schema_name)
        return self._schemas[schema_name]

    def _validate(self, instance: Any, schema_name: str) -> None:
        if self.validate_schema:
            validate(instance=instance, schema=self._schema(schema_name))

    def _payload(self, zone_id: str, field: str, raw: Optional[Payload], schema_name: str) -> Dict[str, Any]:
        """JSON text (or decoded object) -> validated dict, else MalformedZonePayload."""
        try:
            data = _decode_json(raw) if isinstance(raw, (str, bytes)) else raw
        except ValueError as e:
            raise MalformedZonePayload(zone_id, field, str(e)) from e
        if not isinstance(data, Mapping):
            raise MalformedZonePayload(zone_id, field, f"expected a JSON object, got {type(data).__name__}")
        try:
            self._validate(data, schema_name)
        except ValidationError as e:
            raise MalformedZonePayload(zone_id, field, e.message) from e
        return dict(data)

    # --- 公開API ------------------------------------------------------

    def decode_geometry(self, zone_id: str, zone_type: str, raw: Payload) -> Geometry:
        """Unknown zone types are read as a point ({x, y})."""
        schema_name = _GEOMETRY_SCHEMAS.get(zone_type, _GEOMETRY_SCHEMAS[ZoneType.POINT.value])
        c = self._payload(zone_id, "coordinates", raw, schema_name)
        try:
            if zone_type == ZoneType.RECTANGLE.value:
                geometry = RectangleGeometry(
                    x=float(c["x"]), y=float(c["y"]),
                    width=float(c["width"]), height=float(c["height"]),
                )
            elif zone_type == ZoneType.CIRCLE.value:
                geometry = CircleGeometry(x=float(c["x"]), y=float(c["y"]), radius=float(c["radius"]))
            else:
                geometry = PointGeometry(x=float(c["x"]), y=float(c["y"]))
        except (KeyError, TypeError, ValueError) as e:
            raise MalformedZonePayload(zone_id, "coordinates", f"missing or invalid field {e}") from e
        # 1e400 などは json.loads で inf になる
        values = (*astuple(geometry), *geometry.anchor())
        if not all(math.isfinite(v) for v in values):
            raise MalformedZonePayload(zone_id, "coordinates", f"coordinates must be finite, got {astuple(geometry)}")
        return geometry

    def decode_zone(self, record: Union[ZoneRecord, Zone], strict: bool = False) -> Zone:
        """ZoneRecord -> Zone. Already decoded zones pass through."""
        if strict and record.type not in _GEOMETRY_SCHEMAS:
            raise UnsupportedZoneType(record.type, record.id)
        if isinstance(record, Zone):
            return record

        geometry = self.decode_geometry(record.id, record.type, record.coordinates)
        content = self._model(record.id, "content", ZoneContent.from_dict,
                              self._payload(record.id, "content", record.content, "content.schema.json"))

        if record.style is None or (isinstance(record.style, str) and not record.style.strip()):
            style = ZoneStyle()
        else:
            raw_style = _decode_json_or_fail(record.id, record.style)
            style = ZoneStyle() if raw_style is None else self._model(
                record.id, "style", ZoneStyle.from_dict,
                self._payload(record.id, "style", raw_style, "style.schema.json"),
            )

        return Zone(
            id=record.id,
            type=record.type,
            geometry=geometry,
            content=content,
            style=style,
        )

    @staticmethod
    def _model(zone_id: str, field: str, factory, data: Dict[str, Any]):
        # validate_schema=False のときは型エラーがここまで来る
        try:
            return factory(data)
        except (KeyError, TypeError, ValueError) as e:
            raise MalformedZonePayload(zone_id, field, f"missing or invalid field {e}") from e

    def load_map_record(self, path: str | pathlib.Path) -> MapRecord:
        """map.json (persistence service export) -> MapRecord"""
        data = self._load_json(path)
        self._validate(data, "map_record.schema.json")

        canvas = data["canvasConfig"]
        if isinstance(canvas, str):
            canvas = _decode_json(canvas)
        bounds = data.get("geographicBounds")
        if isinstance(bounds, str):
            bounds = _decode_json(bounds)

        record = MapRecord(
            canvas=CanvasConfig.from_dict(canvas),
            bounds=GeographicBounds.from_dict(bounds) if bounds else None,
            zones=tuple(ZoneRecord.from_dict(z) for z in data["zones"]),
            id=data.get("id"),
            title=data.get("title"),
        )
        logger.debug("loaded map record %s from %s: %d zones", record.id, path, len(record.zones))
        return record


def _decode_json_or_fail(zone_id: str, raw: Payload) -> Any:
    # style は "null" (JSON text) も許容する
    if not isinstance(raw, (str, bytes)):
        return raw
    try:
        return _decode_json(raw)
    except ValueError as e:
        raise MalformedZonePayload(zone_id, "style", str(e)) from e


__all__ = ["ModelLoader"]
