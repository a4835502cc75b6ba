#
# src/prologtester/discovery/__init__.py
#
"""
Test discovery sub-package: marker scanning and tree population.
"""
from .engine import DiscoveryEngine, FileSourceReader, SourceReader, list_source_files
from .scanner import ScanEvent, ScanWarning, SuiteBegin, SuiteEnd, TestCase, extract_name, scan_markers

__all__ = [
    "DiscoveryEngine",
    "FileSourceReader",
    "ScanEvent",
    "ScanWarning",
    "SourceReader",
    "SuiteBegin",
    "SuiteEnd",
    "TestCase",
    "extract_name",
    "list_source_files",
    "scan_markers",
]

# 🔼⚙️
