# model/__init__.py
"""
Model layer: 値オブジェクトとエラー分類。

- models: bounds / canvas / geometry / zone / landmark
- errors: ZoneMapError とそのサブクラス
- loader: JSON payload -> Zone (JSON Schema で検証)
"""
__all__ = ["models", "errors", "loader"]
