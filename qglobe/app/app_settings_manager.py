from __future__ import annotations

import logging
import math
from dataclasses import asdict, dataclass, field
from enum import Enum
from typing import Any, Dict

from PySide6.QtCore import QSettings

from qglobe.viewers.markers import DEFAULT_LABEL_HORIZON_DEG, DEFAULT_MARKER_HORIZON_DEG

logger = logging.getLogger(__name__)


class RunMode(str, Enum):
    DEVELOPMENT = "development"
    PRODUCTION = "production"
    VERBOSE = "verbose"

    def __str__(self):
        return self.value

    def __repr__(self):
        return self.value


# ----------------------
# Defaults
# ----------------------
DEFAULTS: Dict[str, Any] = {
    "general": {
        "run_mode": RunMode.PRODUCTION.value,
        "logging_level": "INFO",  # "DEBUG", "INFO", "WARNING", "ERROR"
    },
    "view": {
        "scale": 300.0,
        "clip_angle": 90.0,
        "marker_horizon_deg": DEFAULT_MARKER_HORIZON_DEG,
        "label_horizon_deg": DEFAULT_LABEL_HORIZON_DEG,
        "zoom_min": 0.1,
        "zoom_max": 20.0,
    },
}

SECTIONS = ("general", "view")


# ---------------------
# Data model
# ---------------------
@dataclass
class GeneralConfig:
    run_mode: RunMode = RunMode.PRODUCTION
    logging_level: str = "INFO"


@dataclass
class ViewConfig:
    scale: float = 300.0
    clip_angle: float = 90.0
    marker_horizon_deg: float = DEFAULT_MARKER_HORIZON_DEG
    label_horizon_deg: float = DEFAULT_LABEL_HORIZON_DEG
    zoom_min: float = 0.1
    zoom_max: float = 20.0

    @property
    def scale_extent(self) -> tuple[float, float]:
        return self.zoom_min, self.zoom_max


@dataclass
class AppSettingsData:
    general: GeneralConfig = field(default_factory=GeneralConfig)
    view: ViewConfig = field(default_factory=ViewConfig)


# ----------------------
# Validation
# ----------------------
def _to_float(v: Any) -> float | None:
    try:
        f = float(v)
    except (TypeError, ValueError):
        return None
    return f if math.isfinite(f) else None


def _validate_run_mode(v: Any) -> RunMode:
    if isinstance(v, RunMode):
        return v
    mode = str(v).strip().lower()
    try:
        return RunMode(mode)
    except ValueError:
        return RunMode(DEFAULTS["general"]["run_mode"])


def _validate_logging_level(v: Any) -> str:
    v = str(v).upper()
    return v if v in ("DEBUG", "INFO", "WARNING", "ERROR") else "INFO"


def _validate_scale(v: Any) -> float:
    f = _to_float(v)
    return f if (f is not None and f > 0) else DEFAULTS["view"]["scale"]


def _validate_angle(v: Any, default: float) -> float:
    f = _to_float(v)
    return f if (f is not None and 0 < f <= 180) else default


def _validate_zoom_extent(lo: Any, hi: Any) -> tuple[float, float]:
    lo_f, hi_f = _to_float(lo), _to_float(hi)
    if lo_f is None or hi_f is None or not (0 < lo_f <= hi_f):
        return DEFAULTS["view"]["zoom_min"], DEFAULTS["view"]["zoom_max"]
    return lo_f, hi_f


# ---------------------
# AppSettingsManager
# ---------------------
class AppSettingsManager:
    """
    Application settings.
    Starts from DEFAULTS, applies QSettings overrides and validates them;
    out of range values fall back to the default.
    set_* persists to QSettings immediately.
    """
    def __init__(self, org_domain: str = "qglobe.org", app_name: str = "QGlobe"):
        self._settings = QSettings(org_domain, app_name)
        self._data = self._load_effective()

    @property
    def data(self) -> AppSettingsData:
        return self._data

    @property
    def run_mode(self) -> RunMode:
        return self._data.general.run_mode

    @property
    def dev_mode(self) -> bool:
        return self.run_mode is RunMode.DEVELOPMENT

    @property
    def logging_level(self) -> str:
        return self._data.general.logging_level

    @property
    def view(self) -> ViewConfig:
        return self._data.view

    # Writes
    def set_run_mode(self, v: str | RunMode) -> None:
        mode = _validate_run_mode(v)
        self._settings.setValue("general/run_mode", mode.value)
        self._data.general.run_mode = mode

    def set_logging_level(self, v: str) -> None:
        level = _validate_logging_level(v)
        self._settings.setValue("general/logging_level", level)
        self._data.general.logging_level = level

    def set_scale(self, v: float) -> None:
        scale = _validate_scale(v)
        self._settings.setValue("view/scale", scale)
        self._data.view.scale = scale

    def set_clip_angle(self, v: float) -> None:
        angle = _validate_angle(v, DEFAULTS["view"]["clip_angle"])
        self._settings.setValue("view/clip_angle", angle)
        self._data.view.clip_angle = angle

    def set_horizons(self, marker_deg: float, label_deg: float) -> None:
        marker = _validate_angle(marker_deg, DEFAULTS["view"]["marker_horizon_deg"])
        label = _validate_angle(label_deg, DEFAULTS["view"]["label_horizon_deg"])
        self._settings.setValue("view/marker_horizon_deg", marker)
        self._settings.setValue("view/label_horizon_deg", label)
        self._data.view.marker_horizon_deg = marker
        self._data.view.label_horizon_deg = label

    def set_zoom_extent(self, zoom_min: float, zoom_max: float) -> None:
        lo, hi = _validate_zoom_extent(zoom_min, zoom_max)
        self._settings.setValue("view/zoom_min", lo)
        self._settings.setValue("view/zoom_max", hi)
        self._data.view.zoom_min = lo
        self._data.view.zoom_max = hi

    # Reset
    def reset_all_to_default(self) -> None:
        """Remove every user setting."""
        for section in SECTIONS:
            self._settings.remove(section)
        self._data = self._load_effective()

    def reset_section(self, section: str) -> None:
        """Restore one section to its defaults."""
        if section not in SECTIONS:
            raise ValueError(f"Invalid section: {section}")
        self._settings.remove(section)
        self._data = self._load_effective()
        logger.info(f"Settings section reset: {section}")

    def to_dict(self) -> dict[str, Any]:
        data = {
            "general": asdict(self._data.general),
            "view": asdict(self._data.view),
        }
        data["general"]["run_mode"] = self._data.general.run_mode.value
        return data

    # ---------- internals ---------------
    def _load_effective(self) -> AppSettingsData:
        """Apply QSettings overrides on top of DEFAULTS, validate, build the model."""
        merged = self._apply_qsettings_overrides(DEFAULTS)
        return self._make_model_from(merged)

    def _apply_qsettings_overrides(self, base: dict[str, Any]) -> dict[str, Any]:
        """
        Read the dict based settings and apply QSettings overrides.
        :param base:
        :return: merged settings
        """
        g = dict(base.get("general", {}))
        v = self._settings.value("general/run_mode", None)
        if v is not None:
            g["run_mode"] = _validate_run_mode(v).value
        v = self._settings.value("general/logging_level", None)
        if v is not None:
            g["logging_level"] = _validate_logging_level(v)

        vw = dict(base.get("view", {}))
        for key in vw:
            v = self._settings.value(f"view/{key}", None)
            if v is not None:
                vw[key] = v

        return {"general": g, "view": vw}

    def _make_model_from(self, merged: dict[str, Any]) -> AppSettingsData:
        """
        Build AppSettingsData from the merged dict.
        :param merged:
        :return: AppSettingsData
        """
        g = merged.get("general", {})
        vw = merged.get("view", {})
        view_defaults = DEFAULTS["view"]
        zoom_min, zoom_max = _validate_zoom_extent(
            vw.get("zoom_min", view_defaults["zoom_min"]),
            vw.get("zoom_max", view_defaults["zoom_max"]),
        )
        return AppSettingsData(
            general=GeneralConfig(
                run_mode=_validate_run_mode(g.get("run_mode", DEFAULTS["general"]["run_mode"])),
                logging_level=_validate_logging_level(g.get("logging_level", DEFAULTS["general"]["logging_level"])),
            ),
            view=ViewConfig(
                scale=_validate_scale(vw.get("scale", view_defaults["scale"])),
                clip_angle=_validate_angle(vw.get("clip_angle"), view_defaults["clip_angle"]),
                marker_horizon_deg=_validate_angle(
                    vw.get("marker_horizon_deg"), view_defaults["marker_horizon_deg"]),
                label_horizon_deg=_validate_angle(
                    vw.get("label_horizon_deg"), view_defaults["label_horizon_deg"]),
                zoom_min=zoom_min,
                zoom_max=zoom_max,
            ),
        )
