# conllview/config.py
import copy
import logging
from pathlib import Path
from typing import Any, Dict, Optional, Union

import yaml

logger = logging.getLogger(__name__)

# Определение базовых путей относительно корня проекта
BASE_DIR = Path(__file__).resolve().parent.parent
CONFIG_DIR = BASE_DIR / "config"
DEFAULT_CONFIG_PATH = CONFIG_DIR / "viewer.yaml"

# Допустимые значения для ключей-перечислений
INPUT_FORMATS = ("conllu", "conllx")
LAYERS = ("surface", "projective")
ERROR_POLICIES = ("skip", "abort")

DEFAULT_CONFIG: Dict[str, Any] = {
    # Формат входного трибанка: CoNLL-U (10 колонок UD) или CoNLL-X (PHEAD/PDEPREL в колонках 9-10)
    "format": "conllu",
    # Слой разметки для построения дерева
    "layer": "surface",
    # skip - пропускать битые предложения, abort - падать на первой ошибке
    "on_error": "skip",
    # Команда Graphviz для DOT -> SVG
    "dot_command": "dot",
    # Куда сохранять s<n>.dot / s<n>.tikz / s<n>.svg
    "output_dir": ".",
    "log_level": "WARNING",
}


def _validate(cfg: Dict[str, Any]) -> None:
    checks = {
        "format": INPUT_FORMATS,
        "layer": LAYERS,
        "on_error": ERROR_POLICIES,
    }
    for key, allowed in checks.items():
        if cfg[key] not in allowed:
            raise ValueError(f"Invalid value for '{key}': {cfg[key]!r} (expected one of {', '.join(allowed)})")

    if not isinstance(logging.getLevelName(str(cfg["log_level"]).upper()), int):
        raise ValueError(f"Invalid log_level: {cfg['log_level']!r}")


def load_config(path: Optional[Union[str, Path]] = None) -> Dict[str, Any]:
    """
    Загружает конфигурацию: значения по умолчанию, поверх них - YAML файл.

    Args:
        path: Путь к YAML. Если None - используется config/viewer.yaml, если он существует.

    Returns:
        Словарь с полным набором ключей DEFAULT_CONFIG.
    """
    cfg = copy.deepcopy(DEFAULT_CONFIG)

    if path is None:
        if not DEFAULT_CONFIG_PATH.exists():
            return cfg
        path = DEFAULT_CONFIG_PATH

    path = Path(path)
    logger.info(f"Loading config from {path}")
    with open(path, "r", encoding="utf-8") as f:
        overrides = yaml.safe_load(f) or {}

    if not isinstance(overrides, dict):
        raise ValueError(f"Config {path} must be a mapping, got {type(overrides).__name__}")

    unknown = set(overrides) - set(DEFAULT_CONFIG)
    if unknown:
        # Не падаем: лишние ключи могут остаться от старых версий конфига
        logger.warning(f"Ignoring unknown config keys in {path.name}: {sorted(unknown)}")

    for key in DEFAULT_CONFIG:
        if key in overrides and overrides[key] is not None:
            cfg[key] = overrides[key]

    _validate(cfg)
    return cfg
