"""
Drop-folder watcher for continuous case intake.
"""

from .watcher import DropFolderWatcher

__all__ = ['DropFolderWatcher']
