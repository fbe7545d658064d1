"""Light/dark theme preference."""
from typing import MutableMapping, Optional
import logging

logger = logging.getLogger(__name__)

THEME_KEY = "theme"
DARK = "dark"
LIGHT = "light"
THEMES = (DARK, LIGHT)


def system_theme(preference: Optional[str]) -> str:
    """Map a platform color-scheme report to a theme; anything but 'dark' is light."""
    if preference and preference.strip().strip('"').lower() == DARK:
        return DARK
    return LIGHT


class ThemeStore:
    """
    Theme setting backed by a persistent key/value storage.
    
    The storage is any mutable mapping: a cookie jar in the web front end,
    a plain dict in tests.
    """
    
    def __init__(self, storage: MutableMapping[str, str], theme: str):
        if theme not in THEMES:
            raise ValueError(f"Unknown theme: {theme!r}")
        self.storage = storage
        self.theme = theme
    
    @classmethod
    def from_environment(
        cls,
        storage: MutableMapping[str, str],
        system_preference: Optional[str] = None
    ) -> "ThemeStore":
        """
        Resolve the initial theme and apply it.
        
        Args:
            storage: Persisted settings
            system_preference: Platform color-scheme report, e.g. "dark"
            
        Returns:
            ThemeStore whose choice is already persisted
        """
        persisted = storage.get(THEME_KEY)
        if persisted in THEMES:
            theme = persisted
        else:
            theme = system_theme(system_preference)
            logger.debug(f"No stored theme; using system preference {theme}")
        
        store = cls(storage, theme)
        store.persist()
        return store
    
    @property
    def is_dark(self) -> bool:
        return self.theme == DARK
    
    @property
    def document_class(self) -> str:
        """Class applied to the document root."""
        return DARK if self.is_dark else ""
    
    def persist(self) -> None:
        self.storage[THEME_KEY] = self.theme
    
    def toggle(self) -> str:
        """Flip between dark and light and persist the new choice."""
        self.theme = LIGHT if self.is_dark else DARK
        self.persist()
        logger.info(f"Theme switched to {self.theme}")
        return self.theme
