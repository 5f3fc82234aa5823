"""Chooses the ingestion adapter for an input file."""

import json
from pathlib import Path

from stratibreak.ingestion.base import BaseAdapter
from stratibreak.ingestion.jira import JiraAdapter
from stratibreak.ingestion.manual import ManualAdapter


def detect_adapter(file_path: Path) -> BaseAdapter:
    """Pick the adapter for a file by looking at its JSON shape.

    Anything that is not a Jira search export goes to the manual adapter,
    which reports its own errors for unrecognized input.
    """
    if not file_path.exists():
        raise FileNotFoundError(f"File not found: {file_path}")
    try:
        raw = json.loads(file_path.read_text())
    except json.JSONDecodeError:
        return ManualAdapter()
    if JiraAdapter.is_jira_export(raw):
        return JiraAdapter()
    return ManualAdapter()
