"""File naming helpers shared by the dashboard and the client portal."""

import os
from typing import Optional

FILE_CATEGORIES = {
    'code': (
        'js', 'ts', 'jsx', 'tsx', 'py', 'rb', 'go', 'rs', 'java', 'cpp', 'c', 'h',
        'css', 'scss', 'html', 'php', 'swift',
    ),
    'document': ('pdf', 'doc', 'docx', 'txt', 'md', 'rtf'),
    'image': ('png', 'jpg', 'jpeg', 'gif', 'svg', 'webp', 'ico'),
    'archive': ('zip', 'tar', 'gz', 'rar', '7z'),
    'data': ('json', 'xml', 'csv', 'sql', 'yml', 'yaml'),
    'design': ('fig', 'sketch', 'psd', 'ai', 'xd'),
}

EXTENSION_CATEGORY = {
    ext: category
    for category, extensions in FILE_CATEGORIES.items()
    for ext in extensions
}

SIZE_UNITS = ('B', 'KB', 'MB', 'GB')


def get_extension(file_name: str) -> str:
    """'Report.PDF' -> 'pdf'; names without a dot give ''."""
    return os.path.splitext(file_name or '')[1].lstrip('.').lower()


def get_category(file_name: str) -> str:
    return EXTENSION_CATEGORY.get(get_extension(file_name), 'other')


def format_file_size(size: Optional[int]) -> Optional[str]:
    """1536 -> '1.5 KB'. Unknown sizes stay None."""
    if size is None:
        return None
    if size == 0:
        return '0 B'

    value = float(size)
    unit = 0
    while value >= 1024 and unit < len(SIZE_UNITS) - 1:
        value /= 1024
        unit += 1

    if unit == 0:
        return f'{int(value)} B'
    return f'{round(value, 1):g} {SIZE_UNITS[unit]}'
