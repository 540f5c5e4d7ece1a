"""
A6Cutter - Settings and Presets

Persisted cutting settings, named presets and the mapping from the
user-facing settings (with their section toggles) to the immutable
CutParameters handed to the assembler.
"""

import logging
from dataclasses import asdict, dataclass, fields, replace
from typing import Any, Final

from a6cutter.constants import PARAMETERS_VERSION
from a6cutter.services.parameters import CutParameters
from a6cutter.utils.config_manager import ConfigManager, get_config_manager
from a6cutter.utils.exceptions import ConfigurationError, PresetError, ValidationError

logger = logging.getLogger(__name__)

DEFAULT_PRESET: Final[str] = "Default"
FEDEX_PRESET: Final[str] = "FedEx"


def parse_skip_pages(text: str, strict: bool = False) -> list[int]:
    """Parse a comma-separated list of page numbers, e.g. ``"2, 4,5,6"``.

    Empty fragments are ignored. Fragments that are not whole numbers are
    ignored too, unless *strict* is set.

    Args:
        text: Page list as typed by the user
        strict: Raise instead of ignoring invalid fragments

    Returns:
        Page numbers in the order given, without duplicates.

    Raises:
        ValidationError: In strict mode, for a non-numeric or non-positive entry.
    """
    pages: list[int] = []
    for part in text.split(","):
        part = part.strip()
        if not part:
            continue
        try:
            number = int(part)
        except ValueError:
            if strict:
                raise ValidationError(
                    "skip_pages", part, f"'{part}' is not a page number"
                ) from None
            continue
        if number < 1:
            if strict:
                raise ValidationError("skip_pages", part, "page numbers start at 1")
            continue
        if number not in pages:
            pages.append(number)
    return pages


@dataclass(frozen=True)
class CutSettings:
    """User-facing cutting settings, as stored on disk and in presets.

    The three ``*_enabled`` flags switch whole sections on or off without
    losing the values inside them.
    """

    horizontal_shift: float = 0.0
    vertical_shift: float = 0.0
    skip_pages: str = ""
    rotate_to_portrait: bool = False
    disable_cutting: bool = False
    rotate_clockwise: bool = True
    rotation_enabled: bool = False
    cutting_enabled: bool = True
    skip_pages_enabled: bool = False

    def to_parameters(self) -> CutParameters:
        """Derive the effective parameters for a run.

        An enabled rotation section always turns landscape pages; a disabled
        cutting section passes pages through; a disabled skip section skips
        nothing.
        """
        skip = parse_skip_pages(self.skip_pages) if self.skip_pages_enabled else []
        return CutParameters(
            horizontal_shift=self.horizontal_shift,
            vertical_shift=self.vertical_shift,
            skip_pages=frozenset(skip),
            rotate_to_portrait=self.rotation_enabled,
            rotate_clockwise=self.rotate_clockwise if self.rotation_enabled else True,
            disable_cutting=self.disable_cutting if self.cutting_enabled else True,
        )

    def to_dict(self) -> dict[str, Any]:
        return asdict(self)

    @classmethod
    def from_dict(cls, data: dict[str, Any], base: "CutSettings | None" = None) -> "CutSettings":
        """Build settings from a stored dict.

        Keys missing from *data* keep the value from *base* (or the default).
        Unknown keys are ignored.

        Raises:
            ConfigurationError: If a value has the wrong type.
        """
        base = base or cls()
        values: dict[str, Any] = {}
        for f in fields(cls):
            if f.name not in data:
                continue
            value = data[f.name]
            default = getattr(base, f.name)
            try:
                if isinstance(default, bool):
                    if not isinstance(value, bool):
                        raise TypeError(f"expected true/false, got {value!r}")
                elif isinstance(default, float):
                    if isinstance(value, bool):
                        raise TypeError(f"expected a number, got {value!r}")
                    value = float(value)
                elif not isinstance(value, str):
                    raise TypeError(f"expected text, got {value!r}")
            except (TypeError, ValueError) as e:
                raise ConfigurationError(f.name, str(e)) from e
            values[f.name] = value
        return replace(base, **values)


@dataclass(frozen=True)
class Preset:
    """A named, versioned set of cutting settings."""

    name: str
    settings: CutSettings
    version: int = PARAMETERS_VERSION

    @property
    def builtin(self) -> bool:
        return self.name in BUILTIN_PRESETS

    def to_dict(self) -> dict[str, Any]:
        return {"version": self.version, "settings": self.settings.to_dict()}

    @classmethod
    def from_dict(cls, name: str, data: dict[str, Any]) -> "Preset":
        if not isinstance(data, dict):
            raise ConfigurationError(f"presets.{name}", "preset is not an object")
        settings = data.get("settings", {})
        if not isinstance(settings, dict):
            raise ConfigurationError(f"presets.{name}", "settings is not an object")
        try:
            version = int(data.get("version", PARAMETERS_VERSION))
        except (TypeError, ValueError) as e:
            raise ConfigurationError(f"presets.{name}.version", str(e)) from e
        return cls(name=name, settings=CutSettings.from_dict(settings), version=version)


BUILTIN_PRESETS: Final[dict[str, CutSettings]] = {
    DEFAULT_PRESET: CutSettings(),
    FEDEX_PRESET: CutSettings(
        horizontal_shift=-15.0,
        vertical_shift=30.0,
        skip_pages="2,4,5,6",
        rotate_to_portrait=True,
        disable_cutting=False,
        rotate_clockwise=True,
        rotation_enabled=True,
        cutting_enabled=True,
        skip_pages_enabled=True,
    ),
}


class PresetStore:
    """Named presets and the current settings, persisted through ConfigManager.

    The built-in presets always exist and cannot be deleted. Stored presets
    that cannot be read are logged and left out rather than failing the load.
    """

    def __init__(self, config: ConfigManager | None = None) -> None:
        self._config = config or get_config_manager()
        self._presets: dict[str, Preset] = {}
        self._load()

    def _load(self) -> None:
        stored = self._config.get("presets", {})
        if not isinstance(stored, dict):
            logger.warning("Ignoring malformed preset collection")
            stored = {}

        presets: dict[str, Preset] = {}
        for name, data in stored.items():
            try:
                presets[name] = Preset.from_dict(name, data)
            except ConfigurationError as e:
                logger.warning("Ignoring preset %r: %s", name, e)

        missing = [name for name in BUILTIN_PRESETS if name not in presets]
        for name in missing:
            presets[name] = Preset(name=name, settings=BUILTIN_PRESETS[name])

        self._presets = presets
        if missing:
            logger.info("Initialized built-in presets: %s", ", ".join(missing))
            self._save_presets()

    def _save_presets(self) -> None:
        self._config.set(
            "presets",
            {name: preset.to_dict() for name, preset in sorted(self._presets.items())},
        )

    def names(self) -> list[str]:
        return sorted(self._presets)

    def get(self, name: str) -> Preset:
        try:
            return self._presets[name]
        except KeyError:
            raise PresetError(name, "no such preset") from None

    @property
    def current(self) -> str:
        name = self._config.get("current_preset", DEFAULT_PRESET)
        return name if name in self._presets else DEFAULT_PRESET

    def select(self, name: str) -> CutSettings:
        """Make *name* the current preset and store its settings as current."""
        preset = self.get(name)
        self._config.set("current_preset", name, save_immediately=False)
        self.save_settings(preset.settings)
        logger.info("Applied preset %s", name)
        return preset.settings

    def add(self, name: str, settings: CutSettings) -> Preset:
        """Create a preset and make it current.

        Raises:
            PresetError: If the name is empty or already taken.
        """
        name = name.strip()
        if not name:
            raise PresetError(name, "name must not be empty")
        if name in self._presets:
            raise PresetError(name, "a preset with this name already exists")

        preset = Preset(name=name, settings=settings)
        self._presets[name] = preset
        self._config.set("current_preset", name, save_immediately=False)
        self._save_presets()
        logger.info("Added preset %s", name)
        return preset

    def delete(self, name: str) -> None:
        """Delete a custom preset; deleting the current one switches to Default.

        Raises:
            PresetError: For built-in or unknown presets.
        """
        if name in BUILTIN_PRESETS:
            raise PresetError(name, "built-in presets cannot be deleted")
        if name not in self._presets:
            raise PresetError(name, "no such preset")

        was_current = self.current == name
        del self._presets[name]
        self._save_presets()
        logger.info("Deleted preset %s", name)

        if was_current:
            self.select(DEFAULT_PRESET)

    def load_settings(self) -> CutSettings:
        """Current settings; falls back to the current preset's values."""
        base = self.get(self.current).settings
        stored = self._config.get("settings", {})
        if not isinstance(stored, dict) or not stored:
            return base
        try:
            return CutSettings.from_dict(stored, base=base)
        except ConfigurationError as e:
            logger.warning("Ignoring stored settings: %s", e)
            return base

    def save_settings(self, settings: CutSettings) -> None:
        self._config.set("settings", settings.to_dict())
