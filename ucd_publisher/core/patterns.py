"""Include/exclude file pattern handling."""

import fnmatch
import hashlib
import logging
import os
from dataclasses import dataclass
from pathlib import Path
from typing import Iterable, List, Tuple

from ucd_publisher.core.errors import ConfigurationError
from ucd_publisher.core.models import FileEntry

logger = logging.getLogger(__name__)

DEFAULT_INCLUDE = "**/*"


@dataclass(frozen=True)
class PatternLine:
    pattern: str
    component: str | None = None

    def applies_to(self, component: str) -> bool:
        return self.component is None or self.component == component


def split_patterns(text: str | None) -> List[PatternLine]:
    """
    Split newline separated patterns, dropping blank and duplicate lines.

    A line of the form pattern=componentName only applies to that component.
    """
    lines: List[PatternLine] = []
    seen = set()

    if not text:
        return lines

    for raw in text.splitlines():
        raw = raw.strip()
        if not raw:
            continue

        pattern, sep, component = raw.rpartition("=")
        if sep and pattern.strip() and component.strip():
            line = PatternLine(pattern.strip(), component.strip())
        else:
            line = PatternLine(raw)

        if line not in seen:
            seen.add(line)
            lines.append(line)

    return lines


def patterns_for(lines: Iterable[PatternLine], component: str) -> List[str]:
    """Patterns that apply to uploads for the given component, in order."""
    result: List[str] = []
    for line in lines:
        if line.applies_to(component) and line.pattern not in result:
            result.append(line.pattern)
    return result


def resolve_patterns(includes: str | None, excludes: str | None, component: str) -> Tuple[List[str], List[str]]:
    """
    Include and exclude patterns for one component.

    Only an empty include text defaults to **/*. Include lines that are all
    scoped to other components are a configuration error.

    Raises:
        ConfigurationError: If include lines exist but none applies to component
    """
    include_lines = split_patterns(includes)
    exclude_list = patterns_for(split_patterns(excludes), component)

    if not include_lines:
        return [DEFAULT_INCLUDE], exclude_list

    include_list = patterns_for(include_lines, component)
    if not include_list:
        scoped = ", ".join(f"{line.pattern}={line.component}" for line in include_lines)
        raise ConfigurationError(
            f"No include pattern applies to component '{component}'. Lines of the form "
            f"pattern=component are scoped to that component: {scoped}"
        )

    return include_list, exclude_list


def matches(path: str, pattern: str) -> bool:
    """Ant-style match of a relative posix path against a glob pattern."""
    if fnmatch.fnmatchcase(path, pattern):
        return True

    # '**/' also matches zero directories
    while pattern.startswith("**/"):
        pattern = pattern[3:]
        if fnmatch.fnmatchcase(path, pattern):
            return True

    if pattern.endswith("/**"):
        prefix = pattern[:-3]
        return path == prefix or fnmatch.fnmatchcase(path, prefix + "/*")

    return False


def collect_files(work_dir: Path, includes: List[str], excludes: List[str]) -> List[FileEntry]:
    """
    Walk work_dir and return the files matched by includes and not by excludes.

    Symlinks are reported as links, not followed. Executable bits are kept.
    """
    entries: List[FileEntry] = []

    for root, dirs, files in os.walk(work_dir, followlinks=False):
        dirs.sort()
        root_path = Path(root)

        candidates = sorted(files) + sorted(d for d in dirs if (root_path / d).is_symlink())

        for name in candidates:
            full = root_path / name
            rel = full.relative_to(work_dir).as_posix()

            if not any(matches(rel, p) for p in includes):
                continue
            if any(matches(rel, p) for p in excludes):
                continue

            entries.append(_entry_for(full, rel))

    logger.debug(f"[patterns] {len(entries)} file(s) selected under {work_dir}")

    return entries


def _entry_for(full: Path, rel: str) -> FileEntry:
    if full.is_symlink():
        return FileEntry(
            path=rel,
            size=0,
            sha256=None,
            link_target=os.readlink(full),
        )

    digest = hashlib.sha256()
    with open(full, "rb") as fh:
        for chunk in iter(lambda: fh.read(65536), b""):
            digest.update(chunk)

    return FileEntry(
        path=rel,
        size=full.stat().st_size,
        sha256=digest.hexdigest(),
        executable=os.access(full, os.X_OK),
    )
