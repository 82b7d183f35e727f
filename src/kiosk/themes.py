"""Theme registry loaded from a declared JSON resource."""

import json
import logging
import threading
from pathlib import Path
from typing import Dict, List, Optional

from pydantic import BaseModel, ConfigDict, Field, ValidationError as SchemaError
from watchdog.events import FileSystemEventHandler
from watchdog.observers import Observer


DEFAULT_REGISTRY_PATH = Path(__file__).parent / "themes.json"


class ThemeInfo(BaseModel):
    """Display metadata for one theme."""
    model_config = ConfigDict(populate_by_name=True)

    name: str = Field(..., min_length=1)
    category: str = Field(default="basic")
    has_background: bool = Field(default=False, alias="hasBackground")


FALLBACK_THEMES: Dict[str, ThemeInfo] = {
    "default": ThemeInfo(name="Par défaut", category="basic", has_background=False)
}


class ThemeFileHandler(FileSystemEventHandler):
    """Invalidates the registry cache when the registry file changes."""

    def __init__(self, registry: "ThemeRegistry"):
        """Initialize file handler."""
        self.registry = registry
        self.logger = logging.getLogger(__name__)

    def _matches(self, path: str) -> bool:
        return Path(path) == self.registry.registry_path

    def on_modified(self, event):
        """Handle file modification events."""
        if not event.is_directory and self._matches(event.src_path):
            self.logger.info("Theme registry changed, reloading")
            self.registry.invalidate()

    def on_created(self, event):
        """Handle file creation events."""
        self.on_modified(event)

    def on_moved(self, event):
        """Handle editors that save by renaming over the file."""
        if not event.is_directory and self._matches(event.dest_path):
            self.logger.info("Theme registry replaced, reloading")
            self.registry.invalidate()


class ThemeRegistry:
    """Maps theme ids to their display metadata."""

    def __init__(self, registry_path: Optional[str] = None):
        """Initialize theme registry."""
        self.registry_path = Path(registry_path).resolve() if registry_path else DEFAULT_REGISTRY_PATH.resolve()
        self.logger = logging.getLogger(__name__)

        # Cached registry, rebuilt on next access after invalidate()
        self._themes: Optional[Dict[str, ThemeInfo]] = None
        self._lock = threading.Lock()

        # File watching
        self.observer: Optional[Observer] = None

    def get_themes(self) -> Dict[str, ThemeInfo]:
        """Get the theme registry, loading it if needed."""
        with self._lock:
            if self._themes is None:
                self._themes = self._load()
            return self._themes

    def available_themes(self) -> List[str]:
        """Get all theme ids."""
        return list(self.get_themes().keys())

    def is_valid_theme(self, theme_id: str) -> bool:
        """Check if a theme exists."""
        return theme_id in self.get_themes()

    def get_theme_name(self, theme_id: str) -> str:
        """Get a theme's display name, or the id if unknown."""
        theme = self.get_themes().get(theme_id)
        return theme.name if theme else theme_id

    def theme_has_background(self, theme_id: str) -> bool:
        theme = self.get_themes().get(theme_id)
        return theme.has_background if theme else False

    def to_dict(self) -> Dict[str, Dict[str, object]]:
        """Registry in its JSON form."""
        return {theme_id: theme.model_dump(by_alias=True) for theme_id, theme in self.get_themes().items()}

    def invalidate(self) -> None:
        """Drop the cached registry."""
        with self._lock:
            self._themes = None

    def _load(self) -> Dict[str, ThemeInfo]:
        """Load themes from the registry file, falling back to the default theme."""
        try:
            with open(self.registry_path, "r", encoding="utf-8") as f:
                data = json.load(f)

            themes = {theme_id: ThemeInfo.model_validate(info) for theme_id, info in data.items()}
            if not themes:
                self.logger.warning(f"Theme registry {self.registry_path} is empty, using fallback")
                return dict(FALLBACK_THEMES)

            self.logger.debug(f"Loaded {len(themes)} themes from {self.registry_path}")
            return themes

        except FileNotFoundError:
            self.logger.warning(f"Theme registry not found at {self.registry_path}, using fallback")
        except (json.JSONDecodeError, AttributeError, SchemaError) as e:
            self.logger.error(f"Failed to load themes from {self.registry_path}: {e}")

        return dict(FALLBACK_THEMES)

    def start_watching(self) -> None:
        """Start watching the registry file for changes."""
        if self.observer:
            return

        watch_dir = self.registry_path.parent
        if not watch_dir.is_dir():
            self.logger.warning(f"Theme directory {watch_dir} does not exist, not watching")
            return

        try:
            self.observer = Observer()
            self.observer.schedule(ThemeFileHandler(self), str(watch_dir), recursive=False)
            self.observer.start()
            self.logger.info("Theme registry watching started")

        except OSError as e:
            self.logger.error(f"Failed to start theme watching: {e}")
            self.observer = None

    def stop_watching(self) -> None:
        """Stop watching the registry file."""
        if self.observer:
            self.observer.stop()
            self.observer.join(timeout=5)
            self.observer = None
            self.logger.info("Theme registry watching stopped")
