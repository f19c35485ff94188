# landmark/__init__.py
"""
Landmark layer: zone -> landmark record -> CSV.

- builder: zones_to_landmarks（globe viewer 向けの in-memory 形式）
- csv_io:  zones_to_csv / landmarks_to_csv / parse_landmarks_csv
"""
__all__ = ["builder", "csv_io"]
