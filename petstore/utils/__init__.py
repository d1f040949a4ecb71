"""
Utility modules for the pet API and contract tooling
"""
from .config_loader import load_settings, Settings
from .server_thread import ServerThread

__all__ = [
    'load_settings',
    'Settings',
    'ServerThread',
]
