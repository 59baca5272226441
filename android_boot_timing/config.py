"""
Configuration loading — environment variables and the timing labels YAML.

Example timing labels file:

    timing_labels:
      - label: "init took"
        kind: duration
      - label: "boot started at"
        kind: start_time

Extra labels are tried after the built-in ones, in file order.
"""

import os
from dataclasses import dataclass
from typing import Mapping, Optional, Tuple

import yaml

from .constants import TIMING_KINDS, TIMING_LABELS_KEY, TIMING_PATTERNS_ENV
from .errors import PatternConfigError

TimingLabels = Tuple[Tuple[str, str], ...]


@dataclass(frozen=True)
class Config:
    timing_patterns_path: Optional[str] = None
    extra_timing_labels: TimingLabels = ()


def load_config(environ: Optional[Mapping[str, str]] = None) -> Config:
    """Build Config from environment variables; no variable means no extras."""
    if environ is None:
        environ = os.environ
    path = environ.get(TIMING_PATTERNS_ENV) or None
    return Config(
        timing_patterns_path=path,
        extra_timing_labels=load_timing_labels(path),
    )


def load_timing_labels(yaml_path: Optional[str]) -> TimingLabels:
    """
    Load extra timing labels from a YAML file.

    Returns an empty tuple if no path is given or the file doesn't exist.
    A file that exists but is malformed raises PatternConfigError.
    """
    if yaml_path is None or not os.path.exists(yaml_path):
        return ()

    with open(yaml_path, "r") as f:
        try:
            data = yaml.safe_load(f)
        except yaml.YAMLError as e:
            raise PatternConfigError(f"{yaml_path}: invalid YAML: {e}") from e

    if not data:
        return ()
    if not isinstance(data, dict):
        raise PatternConfigError(f"{yaml_path}: expected a mapping at top level")
    return parse_timing_labels(data.get(TIMING_LABELS_KEY) or [], source=yaml_path)


def parse_timing_labels(entries, source: str = "<config>") -> TimingLabels:
    """Validate a list of {label, kind} mappings into (label, kind) pairs."""
    if not isinstance(entries, list):
        raise PatternConfigError(f"{source}: {TIMING_LABELS_KEY} must be a list")

    labels = []
    for i, entry in enumerate(entries):
        if not isinstance(entry, dict):
            raise PatternConfigError(f"{source}: entry {i} is not a mapping")
        label = entry.get("label")
        kind = entry.get("kind")
        if not isinstance(label, str) or not label.strip():
            raise PatternConfigError(f"{source}: entry {i} has no label")
        if kind not in TIMING_KINDS:
            raise PatternConfigError(
                f"{source}: entry {i} kind {kind!r} not in {TIMING_KINDS}")
        labels.append((label.strip(), kind))
    return tuple(labels)
