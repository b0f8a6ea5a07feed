"""Configuration loading from environment variables and config.toml."""

from __future__ import annotations

import logging
import os
import sys
from dataclasses import dataclass, field, replace

if sys.version_info >= (3, 11):
    import tomllib
else:
    import tomli as tomllib
from pathlib import Path

from aictx import __version__
from aictx.errors import InvalidInput, IOFailure

logger = logging.getLogger(__name__)

SYSTEM_NAME = "context"
_CONFIG_FILENAME = "config.toml"
_USER_DIR_MODE = 0o700

PROVIDER_FORMATS = ("markdown_reference", "plaintext", "markdown", "symlink")

DEFAULT_CONFIG_TOML = f"""\
# Context Management System v{__version__}
# Values here override the built-in defaults; environment variables win over both.

log_level = "WARNING"

[features]
auto_sync = true

[security]
audit_logging = true

# [providers.claude]
# enabled = true
# file = "CLAUDE.md"
"""


def _xdg_dir(env_var: str, fallback: str) -> Path:
    base = os.getenv(env_var) or str(Path.home() / fallback)
    return Path(base) / SYSTEM_NAME


@dataclass
class ProviderConfig:
    """One provider file kept in sync with the project log."""

    name: str
    file: str
    format: str
    enabled: bool = True


def default_providers() -> list[ProviderConfig]:
    return [
        ProviderConfig(name="claude", file="CLAUDE.md", format="markdown_reference"),
        ProviderConfig(name="cursor", file=".cursorrules", format="plaintext"),
        ProviderConfig(
            name="copilot", file=".github/copilot-instructions.md", format="markdown"
        ),
        ProviderConfig(name="gemini", file="GEMINI.md", format="symlink"),
    ]


@dataclass
class FeatureConfig:
    """Optional behaviours."""

    auto_sync: bool = True


@dataclass
class SecurityConfig:
    """Security-related switches."""

    audit_logging: bool = True


@dataclass
class ContextConfig:
    """Top-level configuration, built once at startup and passed around."""

    config_dir: Path = field(default_factory=lambda: _xdg_dir("XDG_CONFIG_HOME", ".config"))
    data_dir: Path = field(default_factory=lambda: _xdg_dir("XDG_DATA_HOME", ".local/share"))
    cache_dir: Path = field(default_factory=lambda: _xdg_dir("XDG_CACHE_HOME", ".cache"))
    context_dir_name: str = ".ai-context"
    log_level: str = "WARNING"
    features: FeatureConfig = field(default_factory=FeatureConfig)
    security: SecurityConfig = field(default_factory=SecurityConfig)
    providers: list[ProviderConfig] = field(default_factory=default_providers)

    @property
    def config_file(self) -> Path:
        return self.config_dir / _CONFIG_FILENAME

    @property
    def audit_log(self) -> Path:
        return self.data_dir / "audit.log"

    def enabled_providers(self) -> list[ProviderConfig]:
        return [p for p in self.providers if p.enabled]


def _merge_providers(overrides: dict) -> list[ProviderConfig]:
    """Apply [providers.<name>] tables on top of the defaults."""
    providers = []
    for provider in default_providers():
        data = overrides.get(provider.name, {})
        providers.append(
            replace(
                provider,
                file=data.get("file", provider.file),
                enabled=bool(data.get("enabled", provider.enabled)),
            )
        )
    unknown = set(overrides) - {p.name for p in providers}
    if unknown:
        logger.warning("Ignoring unknown providers in config: %s", ", ".join(sorted(unknown)))
    return providers


def load_config(config_path: Path | None = None) -> ContextConfig:
    """Load configuration from environment variables and optional config.toml.

    Priority: environment variables > config.toml > defaults.
    """
    config = ContextConfig()

    env_path = os.getenv("CONTEXT_CONFIG")
    path = config_path or (Path(env_path) if env_path else config.config_file)

    file_data: dict = {}
    if path.exists():
        try:
            file_data = tomllib.loads(path.read_text(encoding="utf-8"))
        except (tomllib.TOMLDecodeError, UnicodeDecodeError) as exc:
            raise InvalidInput(f"Invalid configuration file {path}: {exc}") from exc
        except OSError as exc:
            raise IOFailure(f"Cannot read {path}: {exc}") from exc

    features_data = file_data.get("features", {})
    security_data = file_data.get("security", {})

    config.log_level = os.getenv("CONTEXT_LOG_LEVEL", file_data.get("log_level", "WARNING"))
    config.features = FeatureConfig(
        auto_sync=bool(features_data.get("auto_sync", True)),
    )
    config.security = SecurityConfig(
        audit_logging=bool(security_data.get("audit_logging", True)),
    )
    config.providers = _merge_providers(file_data.get("providers", {}))
    return config


def ensure_user_dirs(config: ContextConfig) -> None:
    """Create per-user directories (owner-only) and a default config file. Idempotent."""
    try:
        for d in (config.config_dir, config.data_dir, config.cache_dir):
            d.mkdir(parents=True, exist_ok=True)
            d.chmod(_USER_DIR_MODE)

        if not config.config_file.exists():
            config.config_file.write_text(DEFAULT_CONFIG_TOML, encoding="utf-8")
            logger.debug("Wrote default configuration: %s", config.config_file)
    except OSError as exc:
        raise IOFailure(f"Cannot prepare user directories: {exc}") from exc
