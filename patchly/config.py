"""
Configuration — Centralized settings management

Config hierarchy (highest to lowest priority):
  1. Project config (.patchly/config.yaml)
  2. User config (~/.patchly/config.yaml)
  3. Environment variables
  4. Defaults

API keys are NEVER stored in config files.
They must be provided via environment variables.
"""

import logging
import os
import yaml
from pathlib import Path
from dataclasses import dataclass, field
from typing import Optional, Dict, Any, List

from .presentation.symbols import get_symbols

logger = logging.getLogger(__name__)


# Supported providers and their defaults
PROVIDERS = {
    "openai": {
        "env_key": "OPENAI_API_KEY",
        "default_model": "gpt-4o",
        "models": [
            "gpt-4o",
            "gpt-4.1",
            "gpt-4o-mini",
            "gpt-4.1-mini",
        ]
    },
    "claude": {
        "env_key": "ANTHROPIC_API_KEY",
        "default_model": "claude-sonnet-4-20250514",
        "models": [
            "claude-opus-4-20250514",
            "claude-sonnet-4-20250514",
            "claude-3-5-haiku-20241022"
        ]
    },
}

DEFAULT_PROVIDER = "openai"

DEFAULT_RULE = "redos"

# Languages whose regex literals use the /body/flags syntax
DEFAULT_EXTENSIONS = [".js", ".jsx", ".mjs", ".cjs", ".ts", ".tsx"]


@dataclass
class LLMConfig:
    """LLM provider configuration."""
    provider: str = DEFAULT_PROVIDER
    model: Optional[str] = None  # None = use provider default

    @property
    def effective_model(self) -> str:
        """Get model, falling back to provider default."""
        if self.model:
            return self.model
        return PROVIDERS.get(self.provider, {}).get("default_model", "")

    @property
    def api_key_env(self) -> str:
        """Get environment variable name for API key."""
        return PROVIDERS.get(self.provider, {}).get("env_key", "")

    @property
    def api_key(self) -> Optional[str]:
        """Get API key from environment. Never stored."""
        if not self.api_key_env:
            return None
        return os.environ.get(self.api_key_env)

    @property
    def is_available(self) -> bool:
        """Check if provider is configured and available."""
        return bool(self.api_key)

    def validate(self) -> Optional[str]:
        """Validate config. Returns error message or None if valid."""
        if self.provider not in PROVIDERS:
            valid = ", ".join(PROVIDERS.keys())
            return f"Unknown provider '{self.provider}'. Valid: {valid}"

        if self.model:
            valid_models = PROVIDERS[self.provider]["models"]
            if self.model not in valid_models:
                return f"Unknown model '{self.model}' for {self.provider}. Valid: {', '.join(valid_models)}"

        return None


@dataclass
class ScanConfig:
    """Which files to scan and which rule the directives are scoped to."""
    rule: str = DEFAULT_RULE
    extensions: List[str] = field(default_factory=lambda: list(DEFAULT_EXTENSIONS))

    def matches(self, path: Path) -> bool:
        return Path(path).suffix.lower() in self.extensions

    def validate(self) -> Optional[str]:
        if not self.rule or any(ch.isspace() for ch in self.rule):
            return f"Invalid rule '{self.rule}'. Rule identifiers cannot be empty or contain spaces"
        bad = [ext for ext in self.extensions if not ext.startswith(".")]
        if bad:
            return f"Extensions must start with '.': {', '.join(bad)}"
        return None


@dataclass
class DisplayConfig:
    """Display preferences."""
    symbols: str = "auto"  # "unicode" | "ascii" | "auto"

    def validate(self) -> Optional[str]:
        """Validate config. Returns error message or None if valid."""
        valid_symbols = ("unicode", "ascii", "auto")
        if self.symbols not in valid_symbols:
            return f"Unknown symbols setting '{self.symbols}'. Valid: {', '.join(valid_symbols)}"
        return None


@dataclass
class Config:
    """Application configuration."""
    llm: LLMConfig = field(default_factory=LLMConfig)
    scan: ScanConfig = field(default_factory=ScanConfig)
    display: DisplayConfig = field(default_factory=DisplayConfig)

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary for serialization."""
        return {
            "llm": {
                "provider": self.llm.provider,
                "model": self.llm.model
            },
            "scan": {
                "rule": self.scan.rule,
                "extensions": list(self.scan.extensions)
            },
            "display": {
                "symbols": self.display.symbols
            }
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> 'Config':
        """Create from dictionary."""
        llm_data = data.get("llm", {}) or {}
        scan_data = data.get("scan", {}) or {}
        display_data = data.get("display", {}) or {}

        extensions = scan_data.get("extensions") or DEFAULT_EXTENSIONS
        if isinstance(extensions, str):
            extensions = [ext.strip() for ext in extensions.split(",") if ext.strip()]

        return cls(
            llm=LLMConfig(
                provider=llm_data.get("provider", DEFAULT_PROVIDER),
                model=llm_data.get("model")
            ),
            scan=ScanConfig(
                rule=scan_data.get("rule", DEFAULT_RULE),
                extensions=[ext.lower() for ext in extensions]
            ),
            display=DisplayConfig(
                symbols=display_data.get("symbols", "auto")
            )
        )


class ConfigManager:
    """
    Manages configuration loading and persistence.

    Hierarchy:
      1. Project config (.patchly/config.yaml)
      2. User config (~/.patchly/config.yaml)
      3. Defaults
    """

    USER_CONFIG_DIR = Path.home() / ".patchly"
    USER_CONFIG_FILE = USER_CONFIG_DIR / "config.yaml"
    PROJECT_CONFIG_DIR = ".patchly"
    PROJECT_CONFIG_FILE = "config.yaml"

    def __init__(self, project_dir: Optional[Path] = None):
        self.project_dir = Path(project_dir) if project_dir else Path.cwd()
        self._config: Optional[Config] = None

    @property
    def project_config_path(self) -> Path:
        return self.project_dir / self.PROJECT_CONFIG_DIR / self.PROJECT_CONFIG_FILE

    @property
    def user_config_path(self) -> Path:
        return self.USER_CONFIG_FILE

    def load(self) -> Config:
        """Load configuration from all sources."""
        if self._config is not None:
            return self._config

        # Start with defaults
        config_data: Dict[str, Any] = {}

        # Layer 1: User config, then layer 2: project config (higher priority)
        for path in (self.user_config_path, self.project_config_path):
            if path.exists():
                config_data = self._merge(config_data, self._read(path))

        # Layer 3: Environment overrides
        if os.environ.get("PATCHLY_LLM_PROVIDER"):
            config_data.setdefault("llm", {})["provider"] = os.environ["PATCHLY_LLM_PROVIDER"]
        if os.environ.get("PATCHLY_LLM_MODEL"):
            config_data.setdefault("llm", {})["model"] = os.environ["PATCHLY_LLM_MODEL"]

        self._config = Config.from_dict(config_data)
        return self._config

    def _read(self, path: Path) -> Dict[str, Any]:
        try:
            with open(path) as f:
                data = yaml.safe_load(f) or {}
        except (OSError, yaml.YAMLError) as e:
            logger.warning("Ignoring malformed config %s: %s", path, e)
            return {}
        if not isinstance(data, dict):
            logger.warning("Ignoring config %s: top level must be a mapping", path)
            return {}
        return data

    def save_project(self, config: Config):
        """Save configuration to project config file."""
        self.project_config_path.parent.mkdir(parents=True, exist_ok=True)

        with open(self.project_config_path, 'w') as f:
            yaml.dump(config.to_dict(), f, default_flow_style=False)

        self._config = config

    def save_user(self, config: Config):
        """Save configuration to user config file."""
        self.user_config_path.parent.mkdir(parents=True, exist_ok=True)

        with open(self.user_config_path, 'w') as f:
            yaml.dump(config.to_dict(), f, default_flow_style=False)

        self._config = config

    def set(self, key: str, value: str, scope: str = "project") -> Optional[str]:
        """
        Set a configuration value.

        Args:
            key: Dot-separated key (e.g., "llm.provider")
            value: Value to set
            scope: "project" or "user"

        Returns:
            Error message or None if successful
        """
        config = self.load()

        parts = key.split(".")
        if len(parts) != 2:
            return f"Invalid key format: {key}. Use 'section.setting' (e.g., 'llm.provider')"

        section, setting = parts

        if section == "llm":
            if setting == "provider":
                config.llm.provider = value
            elif setting == "model":
                config.llm.model = value
            else:
                return f"Unknown LLM setting: {setting}. Valid: provider, model"
            error = config.llm.validate()
            if error:
                return error

        elif section == "scan":
            if setting == "rule":
                config.scan.rule = value
            elif setting == "extensions":
                config.scan.extensions = [ext.strip().lower() for ext in value.split(",") if ext.strip()]
            else:
                return f"Unknown scan setting: {setting}. Valid: rule, extensions"
            error = config.scan.validate()
            if error:
                return error

        elif section == "display":
            if setting == "symbols":
                config.display.symbols = value
            else:
                return f"Unknown display setting: {setting}. Valid: symbols"
            error = config.display.validate()
            if error:
                return error
        else:
            return f"Unknown section: {section}. Valid: llm, scan, display"

        if scope == "project":
            self.save_project(config)
        else:
            self.save_user(config)

        return None

    def get(self, key: str) -> Optional[str]:
        """Get a configuration value."""
        config = self.load()

        parts = key.split(".")
        if len(parts) != 2:
            return None

        section, setting = parts

        if section == "llm":
            if setting == "provider":
                return config.llm.provider
            elif setting == "model":
                return config.llm.effective_model
        elif section == "scan":
            if setting == "rule":
                return config.scan.rule
            elif setting == "extensions":
                return ",".join(config.scan.extensions)
        elif section == "display":
            if setting == "symbols":
                return config.display.symbols

        return None

    def _merge(self, base: Dict, override: Dict) -> Dict:
        """Deep merge two dicts, override wins."""
        result = base.copy()
        for key, value in override.items():
            if key in result and isinstance(result[key], dict) and isinstance(value, dict):
                result[key] = self._merge(result[key], value)
            else:
                result[key] = value
        return result

    def display(self) -> str:
        """Format config for display."""
        config = self.load()
        symbols = get_symbols(config.display.symbols)

        api_key_status = f"{symbols.check_pass} Set" if config.llm.is_available else f"{symbols.check_fail} Missing"
        lines = [
            "Configuration:",
            "",
            "LLM:",
            f"  Provider: {config.llm.provider}",
            f"  Model: {config.llm.effective_model}",
            f"  API Key: {api_key_status}",
        ]

        if not config.llm.is_available:
            lines.append(f"  (Set {config.llm.api_key_env} environment variable)")

        lines.extend([
            "",
            "Scan:",
            f"  Rule: {config.scan.rule}",
            f"  Extensions: {', '.join(config.scan.extensions)}",
            "",
            "Display:",
            f"  Symbols: {config.display.symbols}",
            "",
            "Config files:",
            f"  User: {self.user_config_path}",
            f"  Project: {self.project_config_path}",
        ])

        return "\n".join(lines)


# Convenience function
def get_config(project_dir: Optional[Path] = None) -> Config:
    """Load configuration for a project."""
    return ConfigManager(project_dir).load()
