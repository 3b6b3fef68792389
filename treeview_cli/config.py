# treeview_cli/config.py
import os
import sys
from dataclasses import dataclass, replace
from typing import Any, Dict, Optional

from loguru import logger

DEFAULT_SPACE_X = 60.0
DEFAULT_SPACE_Y = 100.0
VARIANT_SINGLE = "single"
VARIANT_START_GOAL = "start_goal"
VARIANTS = (VARIANT_SINGLE, VARIANT_START_GOAL)

ENV_PREFIX = "TREEVIEW_"


@dataclass(frozen=True)
class LayoutConfig:
    # Horizontal distance between neighbouring leaves.
    space_x: float = DEFAULT_SPACE_X

    # Vertical distance between depth levels.
    space_y: float = DEFAULT_SPACE_Y

    # "single": one root. "start_goal": root plus pinned "start"/"goal" children.
    variant: str = VARIANT_SINGLE

    log_level: str = "WARNING"


def _positive_float(name: str, value: Any) -> float:
    try:
        number = float(value)
    except (TypeError, ValueError) as e:
        raise ValueError(f"{name} must be a number, got {value!r}") from e
    if number <= 0:
        raise ValueError(f"{name} must be positive, got {number}")
    return number


def validate_config(config: LayoutConfig) -> LayoutConfig:
    """Checks a config and returns it with spacings normalized to floats."""
    if config.variant not in VARIANTS:
        raise ValueError(f"Unknown variant '{config.variant}'. Expected one of: {', '.join(VARIANTS)}")
    return replace(
        config,
        space_x=_positive_float("space_x", config.space_x),
        space_y=_positive_float("space_y", config.space_y),
        log_level=str(config.log_level).upper(),
    )


def load_config(environ: Optional[Dict[str, str]] = None, **overrides: Any) -> LayoutConfig:
    """
    Builds a LayoutConfig from defaults, then TREEVIEW_* environment variables,
    then explicit keyword overrides. Overrides that are None are ignored so
    argparse namespaces can be passed through unchanged.
    """
    env = os.environ if environ is None else environ
    values: Dict[str, Any] = {}
    for field_name in ("space_x", "space_y", "variant", "log_level"):
        env_value = env.get(ENV_PREFIX + field_name.upper())
        if env_value not in (None, ""):
            values[field_name] = env_value
    for key, value in overrides.items():
        if value is not None:
            values[key] = value
    return validate_config(LayoutConfig(**values))


def setup_logging(level: str = "WARNING") -> None:
    """Routes loguru output to stderr at the given level."""
    logger.remove()
    logger.add(sys.stderr, level=level.upper(), format="<level>{level: <8}</level> | {name}:{function} - {message}")
