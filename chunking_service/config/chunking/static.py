"""Static chunking pipeline loader. Read-only; no business logic."""

import json
from pathlib import Path
from typing import Any

from pydantic import ValidationError

from chunking_service.config.chunking.models import ProcessorConfig
from chunking_service.services.chunking.errors import ConfigurationError

_config_dir = Path(__file__).resolve().parent
_config_path = _config_dir / "static.json"

_cached: dict[str, ProcessorConfig] | None = None
_active_profile: str | None = None


def _load_raw_data() -> dict[str, Any]:
    """Load raw JSON; used to read both profiles and active."""
    raw = _config_path.read_text(encoding="utf-8")
    return json.loads(raw)


def load_pipeline_profiles() -> dict[str, ProcessorConfig]:
    """Load chunking pipeline profiles from static.json. Keys are profile names."""
    global _cached
    if _cached is not None:
        return _cached
    data = _load_raw_data()
    profiles = data.get("profiles", {})
    _cached = {k: ProcessorConfig.model_validate(v) for k, v in profiles.items()}
    return _cached


def get_pipeline_config(profile_name: str) -> ProcessorConfig | None:
    """Return the pipeline definition for the given profile, or None if missing."""
    return load_pipeline_profiles().get(profile_name)


def get_active_profile_name() -> str:
    """Return the profile name marked as active in static.json. Defaults to 'default' if missing."""
    global _active_profile
    if _active_profile is not None:
        return _active_profile
    data = _load_raw_data()
    _active_profile = data.get("active", "default")
    return _active_profile


def resolve_pipeline_config(
    profile_name: str | None = None, inline_config: dict[str, Any] | ProcessorConfig | None = None
) -> ProcessorConfig:
    """
    Resolve a pipeline definition from an inline config or a profile name.
    Inline config wins; no profile name means the active profile.
    Raises ConfigurationError if the profile is unknown or the inline config is invalid.
    """
    if isinstance(inline_config, ProcessorConfig):
        return inline_config
    if inline_config:
        try:
            return ProcessorConfig.model_validate(inline_config)
        except ValidationError as e:
            raise ConfigurationError(f"Invalid chunking processor definition: {e}", cause=e) from e
    name = profile_name or get_active_profile_name()
    cfg = get_pipeline_config(name)
    if cfg is None:
        raise ConfigurationError(f"Unknown chunking pipeline profile: {name!r}")
    return cfg
