"""
Helper Utilities Module.

Small, generic helpers shared across the converter.

Functions:
    - ensure_directory: Create directory if it doesn't exist
    - get_file_extension: Extract file extension safely
    - generate_timestamp: Generate formatted timestamps
    - safe_filename: Sanitize filenames for filesystem
    - format_file_size: Human-readable byte counts
"""

import re
from datetime import datetime
from pathlib import Path
from typing import Union


def ensure_directory(path: Union[str, Path]) -> Path:
    """
    Ensure a directory exists, creating it and its parents if necessary.

    Args:
        path: Directory path to ensure exists.

    Returns:
        Path object pointing to the directory.

    Example:
        >>> ensure_directory("outputs/vouchers")
        PosixPath('outputs/vouchers')
    """
    dir_path = Path(path)
    dir_path.mkdir(parents=True, exist_ok=True)
    return dir_path


def get_file_extension(filepath: Union[str, Path]) -> str:
    """
    Return the lowercase file extension including the dot.

    Example:
        >>> get_file_extension("scan.PDF")
        '.pdf'
        >>> get_file_extension("noextension")
        ''
    """
    return Path(filepath).suffix.lower()


def generate_timestamp(format_str: str = "%Y%m%d_%H%M%S") -> str:
    """
    Generate a formatted timestamp string.

    Example:
        >>> generate_timestamp("%Y-%m-%d")
        '2026-01-21'
    """
    return datetime.now().strftime(format_str)


def safe_filename(filename: str, replacement: str = "_") -> str:
    """
    Sanitize a filename by replacing characters that are invalid on common
    filesystems. Invoice numbers like "INV/2024/001" end up in file names.

    Example:
        >>> safe_filename("INV/2024:001.xml")
        'INV_2024_001.xml'
    """
    invalid_chars = r'[<>:"/\\|?*\x00-\x1f]'
    sanitized = re.sub(invalid_chars, replacement, filename)
    sanitized = sanitized.strip('. ')

    if not sanitized:
        sanitized = "unnamed"

    return sanitized


def format_file_size(size_bytes: float) -> str:
    """
    Format file size in human-readable format.

    Example:
        >>> format_file_size(1536)
        '1.5 KB'
    """
    for unit in ['B', 'KB', 'MB', 'GB', 'TB']:
        if size_bytes < 1024.0:
            return f"{size_bytes:.1f} {unit}"
        size_bytes /= 1024.0
    return f"{size_bytes:.1f} PB"
