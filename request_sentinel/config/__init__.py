"""Security configuration: runtime holder, schema and YAML loader."""

from request_sentinel.config.settings import Config

__all__ = ["Config"]
