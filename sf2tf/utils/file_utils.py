"""
Common file utilities used across the application.
Consolidates SQL file discovery and reading/writing of converted output.
"""
import os
from typing import List, Optional
from pathlib import Path


DEFAULT_EXCLUDE_DIRS = ['.git', '.terraform', 'node_modules', 'logs', '__pycache__']


def find_sql_files(input_path: str, exclude_dirs: Optional[List[str]] = None, extension: str = '.sql') -> List[str]:
    """
    Find all SQL files in a given path.

    Args:
        input_path: Path to a directory or a SQL file
        exclude_dirs: List of directory names to exclude (e.g., ['.git', 'logs'])
        extension: File extension to keep (case-insensitive)

    Returns:
        Sorted list of paths to SQL files
    """
    if exclude_dirs is None:
        exclude_dirs = DEFAULT_EXCLUDE_DIRS

    extension = extension.lower()
    sql_files = []
    normalized_input_path = os.path.normpath(input_path)

    if os.path.isdir(normalized_input_path):
        for root, dirs, files in os.walk(normalized_input_path):
            # Remove excluded directories from the walk
            dirs[:] = [d for d in dirs if d not in exclude_dirs]

            for file in files:
                if file.lower().endswith(extension):
                    sql_files.append(os.path.join(root, file))
    elif os.path.isfile(normalized_input_path) and normalized_input_path.lower().endswith(extension):
        sql_files = [normalized_input_path]

    return sorted(sql_files)


def make_relative_path(file_path: str, base_path: str) -> str:
    """
    Make a file path relative to a base path, with error handling.

    Args:
        file_path: Absolute file path
        base_path: Base path to make relative to

    Returns:
        Relative path or original path if conversion fails
    """
    if not file_path or not base_path:
        return file_path

    try:
        return os.path.relpath(file_path, base_path)
    except (ValueError, OSError):
        # Return original path if relative path conversion fails
        return file_path


def read_file_content(file_path: str) -> Optional[str]:
    """
    Read content from a file.

    Args:
        file_path: Path to the file to read

    Returns:
        File content as string, or None if the file is blank
    """
    with open(file_path, 'r', encoding='utf-8') as f:
        content = f.read()

    if not content.strip():
        return None

    return content


def write_file_content(file_path: str | Path, content: str):
    Path(file_path).parent.mkdir(parents=True, exist_ok=True)
    with open(file_path, 'w', encoding='utf-8') as f:
        f.write(content)

