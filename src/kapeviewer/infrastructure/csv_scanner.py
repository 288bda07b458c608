"""
Case folder scanning.

This module walks a case folder, discovers CSV artifact exports and groups
them by the first-level subfolder they live in.
"""

import os
from pathlib import Path
from typing import Union

from ..core.models import DEFAULT_GROUP_NAME, CsvFileEntry, Group
from .logging_config import get_logger
from .paths import get_relative_path, is_csv_file

logger = get_logger(__name__)


class CsvScanner:
    """
    Scans a case folder and groups its CSV files.

    Group names come from the first path segment below the root; files that
    sit directly in the root go to DEFAULT_GROUP_NAME. Group names are
    compared case-insensitively and the first spelling seen is kept.

    Scanning has no side effects and can be repeated: an unchanged folder
    always yields the same groups in the same order. Directories are walked
    in sorted order and files are sorted by relative path inside each group.
    """

    def scan_folder(self, root_path: Union[str, Path]) -> list[Group]:
        """
        Scan a folder recursively for CSV files.

        Args:
            root_path: Path to the case folder.

        Returns:
            Groups sorted by name (case-insensitive).

        Raises:
            FileNotFoundError: If root_path does not exist.
            NotADirectoryError: If root_path is not a directory.
        """
        root = Path(root_path)
        logger.info(f"Scanning case folder: {root}")

        if not root.exists():
            raise FileNotFoundError(f"Case folder does not exist: {root}")

        if not root.is_dir():
            raise NotADirectoryError(f"Path is not a directory: {root}")

        root = root.resolve()
        groups: dict[str, Group] = {}
        relative_paths: dict[Path, str] = {}

        for file_path in self._iter_csv_files(root):
            relative = get_relative_path(file_path, root)
            if relative is None:
                continue

            try:
                file_size = file_path.stat().st_size
            except OSError as e:
                # File vanished or became unreadable mid-scan
                logger.debug(f"Skipping {file_path}: {e}")
                continue

            group_name = relative.parts[0] if len(relative.parts) > 1 else DEFAULT_GROUP_NAME

            group = groups.get(group_name.casefold())
            if group is None:
                group = Group(name=group_name)
                groups[group_name.casefold()] = group

            entry = CsvFileEntry(
                file_name=file_path.name,
                full_path=file_path,
                group_name=group.name,
                file_size=file_size
            )
            group.files.append(entry)
            relative_paths[file_path] = relative.as_posix().casefold()

        for group in groups.values():
            group.files.sort(key=lambda entry: relative_paths[entry.full_path])

        result = sorted(groups.values(), key=lambda g: g.name.casefold())

        total_files = sum(group.file_count for group in result)
        logger.info(f"Found {total_files} CSV files in {len(result)} groups")

        return result

    def refresh_scan(self, root_path: Union[str, Path], existing_groups: list[Group]) -> None:
        """
        Re-scan a folder and replace the contents of an existing group list.

        The list object is kept so that views bound to it stay valid; its
        groups are rebuilt from scratch.

        Args:
            root_path: Path to the case folder.
            existing_groups: List to refill in place.

        Raises:
            FileNotFoundError: If root_path does not exist.
            NotADirectoryError: If root_path is not a directory.
        """
        new_groups = self.scan_folder(root_path)
        existing_groups[:] = new_groups

    def _iter_csv_files(self, root: Path):
        """Yield every CSV file below root, walking directories in sorted order."""
        for dirpath, dirnames, filenames in os.walk(root, onerror=self._on_walk_error):
            dirnames.sort()
            for filename in sorted(filenames):
                file_path = Path(dirpath) / filename
                if is_csv_file(file_path):
                    yield file_path

    @staticmethod
    def _on_walk_error(error: OSError) -> None:
        logger.warning(f"Cannot read directory {error.filename}: {error.strerror}")


def scan_folder(root_path: Union[str, Path]) -> list[Group]:
    """
    Scan a case folder for CSV files using a default scanner.

    Args:
        root_path: Path to the case folder.

    Returns:
        Groups sorted by name.
    """
    return CsvScanner().scan_folder(root_path)
