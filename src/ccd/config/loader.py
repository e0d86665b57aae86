"""Configuration loading with pydantic-settings.

Supports loading configuration from multiple sources with precedence:
1. Direct kwargs (highest priority)
2. Environment variables (CCD__SECTION__KEY)
3. YAML config file (~/.config/ccd/config.yaml unless overridden)
4. Built-in defaults (lowest priority)

The loaded CcdConfig is passed explicitly into every pipeline stage; nothing
here is cached at module level.
"""

from pathlib import Path
from typing import Any

import yaml
from pydantic import ValidationError
from pydantic_settings import BaseSettings, PydanticBaseSettingsSource, SettingsConfigDict

from ccd.config.models import (
    CONFIG_DIR,
    CcdConfig,
    IndexConfig,
    LoggingConfig,
    PatternsConfig,
    SelectorConfig,
)
from ccd.core.errors import ConfigError

GLOBAL_CONFIG_PATH = (CONFIG_DIR / "config.yaml").expanduser()


def _load_yaml(path: Path) -> dict[str, Any]:
    if not path.exists():
        return {}
    try:
        with path.open() as f:
            data = yaml.safe_load(f) or {}
    except yaml.YAMLError as e:
        raise ConfigError.parse_error(str(path), str(e)) from e
    except OSError as e:
        raise ConfigError.unreadable(str(path), e.strerror or str(e)) from e
    if not isinstance(data, dict):
        raise ConfigError.parse_error(str(path), "top level must be a mapping")
    return data


def _deep_merge(base: dict[str, Any], override: dict[str, Any]) -> dict[str, Any]:
    result = base.copy()
    for key, value in override.items():
        if key in result and isinstance(result[key], dict) and isinstance(value, dict):
            result[key] = _deep_merge(result[key], value)
        else:
            result[key] = value
    return result


class _YamlSource(PydanticBaseSettingsSource):
    """Settings source that reads from pre-loaded YAML config."""

    def __init__(self, settings_cls: type[BaseSettings], yaml_config: dict[str, Any]) -> None:
        super().__init__(settings_cls)
        self._yaml_config = yaml_config

    def get_field_value(
        self,
        field: Any,  # noqa: ARG002
        field_name: str,
    ) -> tuple[Any, str, bool]:
        val = self._yaml_config.get(field_name)
        return val, field_name, val is not None

    def __call__(self) -> dict[str, Any]:
        # A section holding only comments parses as None; treat it as absent
        return {k: v for k, v in self._yaml_config.items() if v is not None}


def _make_settings_class(yaml_config: dict[str, Any]) -> type[BaseSettings]:
    """Create a Settings class bound to one YAML payload (no shared state)."""

    class CcdSettings(BaseSettings):
        """Root config. Env vars: CCD__LOGGING__LEVEL, CCD__INDEX__ROOT, etc."""

        model_config = SettingsConfigDict(
            env_prefix="CCD__",
            env_nested_delimiter="__",
            case_sensitive=False,
        )

        logging: LoggingConfig = LoggingConfig()
        index: IndexConfig = IndexConfig()
        patterns: PatternsConfig = PatternsConfig()
        selector: SelectorConfig = SelectorConfig()
        editor: str | None = None

        @classmethod
        def settings_customise_sources(
            cls,
            settings_cls: type[BaseSettings],
            init_settings: PydanticBaseSettingsSource,
            env_settings: PydanticBaseSettingsSource,
            dotenv_settings: PydanticBaseSettingsSource,  # noqa: ARG003
            file_secret_settings: PydanticBaseSettingsSource,  # noqa: ARG003
        ) -> tuple[PydanticBaseSettingsSource, ...]:
            # Precedence (first wins): init kwargs > env vars > yaml file
            return (init_settings, env_settings, _YamlSource(settings_cls, yaml_config))

    return CcdSettings


def load_config(config_path: Path | None = None, **kwargs: Any) -> CcdConfig:
    """Load config: defaults < YAML file < env vars < kwargs.

    Args:
        config_path: YAML file to read. Defaults to ~/.config/ccd/config.yaml.
                     A missing file is not an error.
        **kwargs: Override values (highest precedence), keyed by section.

    Returns:
        Fully resolved configuration object.

    Raises:
        ConfigError: On invalid YAML syntax or validation errors.
    """
    path = (config_path or GLOBAL_CONFIG_PATH).expanduser()
    yaml_config = _load_yaml(path)

    settings_cls = _make_settings_class(yaml_config)
    try:
        settings = settings_cls(**kwargs)
    except ValidationError as e:
        err = e.errors()[0]
        field = ".".join(str(loc) for loc in err["loc"])
        raise ConfigError.invalid_value(field, err.get("input"), err["msg"]) from e
    return CcdConfig.model_validate(settings.model_dump())


def write_default_config(path: Path, config: CcdConfig | None = None) -> None:
    """Write a commented YAML config file.

    Values equal to the defaults are written as comments so later changes to
    the built-in defaults still reach the user.
    """
    cfg = config or CcdConfig()
    defaults = CcdConfig()

    def _line(key: str, value: Any, default: Any) -> str:
        rendered = yaml.safe_dump({key: value}, default_flow_style=False, width=4096).strip()
        return f"  {rendered}" if value != default else f"  # {rendered}"

    lines = [
        "# ccd configuration",
        "# Environment variables override this file: CCD__<SECTION>__<KEY>",
        "",
        "index:",
        "  # Directory 'ccd rebuild' starts from",
        _line("root", cfg.index.root, defaults.index.root),
        "  # Index file, replaced atomically on every rebuild",
        _line("index_path", cfg.index.index_path, defaults.index.index_path),
        "  # Per-directory keyword file name",
        _line("keyword_file", cfg.index.keyword_file, defaults.index.keyword_file),
        "  # Queries warn when the index is older than this many days",
        _line("stale_after_days", cfg.index.stale_after_days, defaults.index.stale_after_days),
        "",
        "patterns:",
        _line("ignore_file", cfg.patterns.ignore_file, defaults.patterns.ignore_file),
        _line("markers_file", cfg.patterns.markers_file, defaults.patterns.markers_file),
        "",
        "selector:",
        "  # auto, fzf, prompt or first",
        _line("mode", cfg.selector.mode, defaults.selector.mode),
        "",
        "logging:",
        "  # DEBUG, INFO, WARNING, ERROR, CRITICAL",
        _line("level", cfg.logging.level, defaults.logging.level),
        "",
    ]
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text("\n".join(lines))
