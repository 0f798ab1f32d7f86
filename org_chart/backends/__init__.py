"""Backend implementations."""

from org_chart.backends.http import HttpBackend
from org_chart.backends.notion import NotionBackend
from org_chart.backends.yaml_file import YamlBackend

__all__ = ["HttpBackend", "NotionBackend", "YamlBackend"]
