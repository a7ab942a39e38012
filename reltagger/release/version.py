"""Version string from the pull request title."""

from pathlib import Path

TITLE_PREFIX = "release: "


def extract_version(title: str, prefix: str = TITLE_PREFIX) -> str:
    """Strip prefix from the start of title.

    A title without the exact prefix at position 0 is returned unchanged;
    the result is not validated as a tag name.

    >>> extract_version("release: v1.2.3")
    'v1.2.3'
    >>> extract_version("2.0.0")
    '2.0.0'
    """
    return title.removeprefix(prefix)


def write_step_output(name: str, value: str, path: Path | str) -> None:
    """Append NAME=value to a GitHub Actions step output file."""
    with open(path, "a", encoding="utf-8") as f:
        f.write(f"{name}={value}\n")
