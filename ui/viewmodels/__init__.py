"""ViewModels package for the assistant UI."""

from ui.viewmodels.settings_viewmodel import SettingsViewModel

__all__ = [
    "SettingsViewModel",
]
