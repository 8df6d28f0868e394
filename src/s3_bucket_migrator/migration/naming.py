"""Bucket name transformation."""

from __future__ import annotations

import logging
import re
from dataclasses import dataclass
from typing import Iterable

from ..exceptions import DuplicateTargetError, InvalidNameError, MigrationConfigError

logger = logging.getLogger(__name__)

DEFAULT_SEPARATOR = "."
DEFAULT_SUBSTITUTE = "-"

MIN_LENGTH = 3
MAX_LENGTH = 63

# General purpose bucket naming rules
SOURCE_PATTERN = re.compile(r"^[a-z0-9][a-z0-9.\-]*[a-z0-9]$")
TARGET_PATTERN = re.compile(r"^[a-z0-9][a-z0-9\-]*[a-z0-9]$")
IP_ADDRESS_PATTERN = re.compile(r"^\d{1,3}(\.\d{1,3}){3}$")
RESERVED_PREFIXES = ("xn--", "sthree-", "amzn-s3-demo-")
RESERVED_SUFFIXES = ("-s3alias", "--ol-s3", ".mrap", "--x-s3")


@dataclass(frozen=True)
class NameMapping:
    """A source bucket name paired with its transformed target name."""

    source: str
    target: str


def _check_source(name: str) -> None:
    if not MIN_LENGTH <= len(name) <= MAX_LENGTH:
        raise InvalidNameError(name, f"length must be between {MIN_LENGTH} and {MAX_LENGTH}")
    if not SOURCE_PATTERN.match(name):
        raise InvalidNameError(
            name, "only lowercase letters, digits, '.' and '-' allowed; must start and end alphanumeric"
        )
    if ".." in name:
        raise InvalidNameError(name, "adjacent periods are not allowed")
    if IP_ADDRESS_PATTERN.match(name):
        raise InvalidNameError(name, "must not be formatted as an IP address")


def _check_target(source: str, target: str, substitute: str) -> None:
    if not MIN_LENGTH <= len(target) <= MAX_LENGTH:
        raise InvalidNameError(source, f"target '{target}' exceeds the {MAX_LENGTH} character limit")
    if target.startswith(substitute) or target.endswith(substitute):
        raise InvalidNameError(source, f"target '{target}' would start or end with '{substitute}'")
    if not TARGET_PATTERN.match(target):
        raise InvalidNameError(source, f"target '{target}' is not a valid bucket name")
    if target.startswith(RESERVED_PREFIXES):
        raise InvalidNameError(source, f"target '{target}' uses a reserved prefix")
    if target.endswith(RESERVED_SUFFIXES):
        raise InvalidNameError(source, f"target '{target}' uses a reserved suffix")


def transform(
    source: str,
    separator: str = DEFAULT_SEPARATOR,
    substitute: str = DEFAULT_SUBSTITUTE,
) -> str:
    """Map a source bucket name to its target name.

    Every occurrence of the separator is replaced by the substitute. Nothing
    is truncated and case is preserved. A name without separators maps to
    itself.

    Args:
        source: Source bucket name
        separator: Forbidden character in target names
        substitute: Replacement character

    Returns:
        Target bucket name

    Raises:
        InvalidNameError: If the source is not a valid bucket name or the
            target would fall outside the naming grammar
    """
    _check_source(source)
    target = source.replace(separator, substitute)
    _check_target(source, target, substitute)
    return target


def build_mappings(
    sources: Iterable[str],
    separator: str = DEFAULT_SEPARATOR,
    substitute: str = DEFAULT_SUBSTITUTE,
) -> tuple[NameMapping, ...]:
    """Transform a batch of source names and check the result is injective.

    Repeats of an identical source name are collapsed to the first
    occurrence. Every collision is collected before failing. A name without
    the separator is rejected; its target would be the source bucket itself.

    Raises:
        MigrationConfigError: If the batch is empty
        InvalidNameError: If a source name cannot be transformed
        DuplicateTargetError: If distinct sources share a target
    """
    mappings: list[NameMapping] = []
    seen_sources: set[str] = set()
    by_target: dict[str, list[str]] = {}

    for source in sources:
        if source in seen_sources:
            logger.warning(f"Ignoring repeated source bucket {source}")
            continue
        seen_sources.add(source)
        target = transform(source, separator, substitute)
        if target == source:
            raise InvalidNameError(source, f"name contains no '{separator}'; target would be the source bucket")
        by_target.setdefault(target, []).append(source)
        mappings.append(NameMapping(source=source, target=target))

    if not mappings:
        raise MigrationConfigError("at least one source bucket is required")

    duplicates = {target: names for target, names in by_target.items() if len(names) > 1}
    if duplicates:
        raise DuplicateTargetError(duplicates)

    return tuple(mappings)
