"""Ingestion adapters for importing project snapshots from various sources."""

from stratibreak.ingestion.base import BaseAdapter, ImportResult
from stratibreak.ingestion.detect import detect_adapter
from stratibreak.ingestion.jira import JiraAdapter
from stratibreak.ingestion.manual import ManualAdapter

__all__ = ["BaseAdapter", "ImportResult", "JiraAdapter", "ManualAdapter", "detect_adapter"]
