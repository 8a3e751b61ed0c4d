"""
Rejuvenator Configuration Management

Centralized configuration system with JSON loading and validation.
"""

import json
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Dict, Optional

from .exceptions import ConfigurationError, InvalidConfigError
from .constants import (
    ModelTier,
    DEFAULT_MODELS,
    BIBLE_SCRIPT_CAP,
    IDENTIFIER_BIBLE_CAP,
    SYNTHESIS_BIBLE_CAP,
    SYNTHESIS_CONTEXT_CAP,
    ANCHOR_LENGTH,
    CONTEXT_BEFORE,
    CONTEXT_AFTER,
    SCENE_LINE_INDEX,
    TEXT_EXTENSION,
    DEFAULT_STYLE,
    DEFAULT_ASPECT_RATIO,
    VALID_ASPECT_RATIOS,
    PROJECT_NAME,
    VERSION,
)


@dataclass
class ModelConfig:
    """Model identifiers per pipeline stage."""
    bible_model: str = DEFAULT_MODELS[ModelTier.PRO]
    analysis_model: str = DEFAULT_MODELS[ModelTier.FLASH]
    identify_model: str = DEFAULT_MODELS[ModelTier.FLASH]
    synthesis_model: str = DEFAULT_MODELS[ModelTier.PRO]
    image_model: str = DEFAULT_MODELS[ModelTier.IMAGE]
    api_key_env: str = "GOOGLE_API_KEY"

    @classmethod
    def from_dict(cls, data: dict) -> 'ModelConfig':
        """Create ModelConfig from dictionary."""
        defaults = cls()
        return cls(
            bible_model=data.get('bible_model', defaults.bible_model),
            analysis_model=data.get('analysis_model', defaults.analysis_model),
            identify_model=data.get('identify_model', defaults.identify_model),
            synthesis_model=data.get('synthesis_model', defaults.synthesis_model),
            image_model=data.get('image_model', defaults.image_model),
            api_key_env=data.get('api_key_env', defaults.api_key_env),
        )


@dataclass
class BudgetConfig:
    """Context-window budgets, in characters."""
    bible_script_cap: int = BIBLE_SCRIPT_CAP
    identifier_bible_cap: int = IDENTIFIER_BIBLE_CAP
    synthesis_bible_cap: int = SYNTHESIS_BIBLE_CAP
    synthesis_context_cap: int = SYNTHESIS_CONTEXT_CAP
    anchor_length: int = ANCHOR_LENGTH
    context_before: int = CONTEXT_BEFORE
    context_after: int = CONTEXT_AFTER

    def validate(self) -> None:
        for name, value in self.__dict__.items():
            if not isinstance(value, int) or value < 0:
                raise InvalidConfigError(f"Budget '{name}' must be a non-negative integer, got {value!r}")


@dataclass
class PipelineConfig:
    """Pipeline configuration settings."""
    default_style: str = DEFAULT_STYLE
    aspect_ratio: str = DEFAULT_ASPECT_RATIO
    text_extension: str = TEXT_EXTENSION
    scene_line_index: int = SCENE_LINE_INDEX

    def validate(self) -> None:
        if self.aspect_ratio not in VALID_ASPECT_RATIOS:
            raise InvalidConfigError(
                f"Unsupported aspect ratio: {self.aspect_ratio}",
                {"valid": list(VALID_ASPECT_RATIOS)}
            )
        if self.scene_line_index < 0:
            raise InvalidConfigError(f"scene_line_index must be >= 0, got {self.scene_line_index}")


@dataclass
class RejuvenatorConfig:
    """Main configuration class for the Rejuvenator."""

    project_name: str = PROJECT_NAME
    version: str = VERSION

    # Paths
    output_dir: Path = field(default_factory=lambda: Path("output"))
    logs_dir: Path = field(default_factory=lambda: Path("logs"))

    # Sub-configurations
    models: ModelConfig = field(default_factory=ModelConfig)
    budgets: BudgetConfig = field(default_factory=BudgetConfig)
    pipeline: PipelineConfig = field(default_factory=PipelineConfig)

    # Feature flags
    verbose_logging: bool = True
    write_run_log: bool = True

    def validate(self) -> None:
        """Validate nested settings, raising InvalidConfigError on bad values."""
        self.budgets.validate()
        self.pipeline.validate()

    @classmethod
    def from_dict(cls, data: dict) -> 'RejuvenatorConfig':
        """Create RejuvenatorConfig from dictionary."""
        config = cls()

        config.project_name = data.get('project_name', config.project_name)
        config.version = data.get('version', config.version)
        config.verbose_logging = data.get('verbose_logging', config.verbose_logging)
        config.write_run_log = data.get('write_run_log', config.write_run_log)

        if 'paths' in data:
            paths = data['paths']
            config.output_dir = Path(paths.get('output_dir', 'output'))
            config.logs_dir = Path(paths.get('logs_dir', 'logs'))

        if 'models' in data:
            config.models = ModelConfig.from_dict(data['models'])

        if 'budgets' in data:
            budget_data = data['budgets']
            defaults = BudgetConfig()
            config.budgets = BudgetConfig(**{
                name: budget_data.get(name, getattr(defaults, name))
                for name in defaults.__dict__
            })

        if 'pipeline' in data:
            pipe_data = data['pipeline']
            config.pipeline = PipelineConfig(
                default_style=pipe_data.get('default_style', DEFAULT_STYLE),
                aspect_ratio=pipe_data.get('aspect_ratio', DEFAULT_ASPECT_RATIO),
                text_extension=pipe_data.get('text_extension', TEXT_EXTENSION),
                scene_line_index=pipe_data.get('scene_line_index', SCENE_LINE_INDEX)
            )

        config.validate()
        return config

    def to_dict(self) -> Dict[str, Any]:
        return {
            'project_name': self.project_name,
            'version': self.version,
            'verbose_logging': self.verbose_logging,
            'write_run_log': self.write_run_log,
            'paths': {
                'output_dir': str(self.output_dir),
                'logs_dir': str(self.logs_dir),
            },
            'models': dict(self.models.__dict__),
            'budgets': dict(self.budgets.__dict__),
            'pipeline': dict(self.pipeline.__dict__),
        }


def load_config(config_path: Path = None) -> RejuvenatorConfig:
    """
    Load configuration from JSON file.

    Args:
        config_path: Path to configuration file. If None, uses default.

    Returns:
        Loaded RejuvenatorConfig instance
    """
    if config_path is None:
        config_path = Path("config/rejuvenator_config.json")
    config_path = Path(config_path)

    if not config_path.exists():
        return RejuvenatorConfig()

    try:
        with open(config_path, 'r', encoding='utf-8') as f:
            data = json.load(f)
    except json.JSONDecodeError as e:
        raise InvalidConfigError(f"Invalid JSON in config file: {e}")
    except OSError as e:
        raise ConfigurationError(f"Failed to load config: {e}")

    return RejuvenatorConfig.from_dict(data)


# Global config instance
_config: Optional[RejuvenatorConfig] = None


def get_config() -> RejuvenatorConfig:
    """Get the global configuration instance."""
    global _config
    if _config is None:
        _config = load_config()
    return _config


def set_config(config: RejuvenatorConfig) -> None:
    """Set the global configuration instance."""
    global _config
    _config = config
