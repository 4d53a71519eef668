"""Configuration management for mentionlink."""

from pathlib import Path
from typing import Any, Dict, List, Literal, Optional

import yaml
from loguru import logger
from pydantic import BaseModel, ConfigDict, Field, field_validator


DEFAULT_SYMBOL = "@"


class ScopeRule(BaseModel):
    """Restricts which folder a trigger symbol may link into."""

    model_config = ConfigDict(frozen=True)

    folder: str = ""
    symbol: str = ""
    full_path: bool = False

    @field_validator("folder", "symbol", mode="before")
    @classmethod
    def strip_text(cls, v: Any) -> str:
        if v is None:
            return ""
        return str(v).strip()

    @property
    def trigger(self) -> str:
        """Symbol this rule applies to; a blank symbol means the default."""
        return self.symbol or DEFAULT_SYMBOL

    @property
    def is_inert(self) -> bool:
        return self.folder == ""

    def contains(self, path: str) -> bool:
        """Directory-prefix match of a vault path against this rule's folder."""
        folder = self.folder.rstrip("/")
        if not folder:
            return False
        return path == folder or path.startswith(folder + "/")


class LinkingSettings(BaseModel):
    """
    Immutable settings snapshot for the mention engine.

    A snapshot is handed to every on_trigger / get_candidates call, so edits
    take effect on the next call rather than mid-session.
    """

    model_config = ConfigDict(frozen=True)

    scope_rules: List[ScopeRule] = Field(default_factory=list)
    include_symbol: bool = True

    show_add_new_note: bool = False
    add_new_note_template_file: str = ""
    add_new_note_directory: str = ""

    leave_popup_open_for_x_spaces: int = 0

    default_extension: str = "md"
    link_style: Literal["wikilink", "markdown"] = "wikilink"
    link_path_format: Literal["shortest", "relative", "absolute"] = "shortest"
    date_format: str = "YYYY-MM-DD"
    time_format: str = "HH:mm"

    @field_validator("add_new_note_template_file", "add_new_note_directory", mode="before")
    @classmethod
    def strip_paths(cls, v: Any) -> str:
        if v is None:
            return ""
        return str(v).strip()

    @field_validator("default_extension", mode="before")
    @classmethod
    def strip_extension(cls, v: Any) -> str:
        v = str(v or "md").strip().lstrip(".")
        return v or "md"

    @field_validator("leave_popup_open_for_x_spaces", mode="before")
    @classmethod
    def coerce_space_budget(cls, v: Any) -> int:
        # Bad values fall back to zero instead of failing the whole config
        try:
            count = int(str(v).strip())
        except (TypeError, ValueError):
            logger.warning(f"Invalid leave_popup_open_for_x_spaces {v!r}, using 0")
            return 0
        if count < 0:
            logger.warning(f"Negative leave_popup_open_for_x_spaces {count}, using 0")
            return 0
        return count

    @property
    def trigger_symbols(self) -> List[str]:
        """Configured trigger symbols, longest first."""
        symbols: List[str] = []
        for rule in self.scope_rules:
            if rule.trigger not in symbols:
                symbols.append(rule.trigger)
        if not symbols:
            symbols = [DEFAULT_SYMBOL]
        return sorted(symbols, key=len, reverse=True)

    @classmethod
    def load(cls, config_path: Optional[Path] = None) -> "LinkingSettings":
        """Load settings from a YAML file."""
        if config_path is None:
            candidates = [
                Path("mentionlink.yaml"),
                Path.home() / ".config" / "mentionlink" / "config.yaml",
            ]
            for candidate in candidates:
                if candidate.exists():
                    config_path = candidate
                    break
            else:
                raise FileNotFoundError(
                    f"No config file found. Searched: {[str(c) for c in candidates]}"
                )

        logger.info(f"Loading config from: {config_path}")
        with open(config_path, "r", encoding="utf-8") as f:
            data = yaml.safe_load(f) or {}

        return cls(**data)

    def save(self, config_path: Path) -> None:
        """Save settings to a YAML file."""
        config_path = Path(config_path)
        config_path.parent.mkdir(parents=True, exist_ok=True)
        with open(config_path, "w", encoding="utf-8") as f:
            yaml.safe_dump(self.model_dump(), f, default_flow_style=False, sort_keys=False)

    @classmethod
    def from_plugin_data(cls, data: Dict[str, Any]) -> "LinkingSettings":
        """
        Build settings from the Obsidian plugin's data.json layout.

        The plugin stores folders and their options as two parallel arrays,
        `limitLinkDirectories` and `limitLinkDirectoryOptions`.
        """
        folders = data.get("limitLinkDirectories") or []
        options = data.get("limitLinkDirectoryOptions") or []

        rules = []
        for index, folder in enumerate(folders):
            option = options[index] if index < len(options) and options[index] else {}
            rules.append(ScopeRule(
                folder=folder,
                symbol=option.get("symbol", ""),
                full_path=bool(option.get("fullpath", False)),
            ))

        return cls(
            scope_rules=rules,
            include_symbol=data.get("includeSymbol", True),
            show_add_new_note=data.get("showAddNewNote", False),
            add_new_note_template_file=data.get("addNewNoteTemplateFile", ""),
            add_new_note_directory=data.get("addNewNoteDirectory", ""),
            leave_popup_open_for_x_spaces=data.get("leavePopupOpenForXSpaces", 0),
        )
