"""
tfsentinel - static security scanner for Terraform configuration.

Parses a directory of .tf files into a tree of blocks and attributes, then
runs a registry of independent checks over it. Each finding carries a check
code, a description, a severity and the file/line range it refers to.

Check families:
    AWS001-AWS018 - Amazon Web Services resources
    AZU001-AZU005 - Azure resources
    GCP001-GCP004 - Google Cloud resources
    GEN001-GEN003 - Credentials hard coded anywhere in the configuration

Quick Start:
    >>> from tfsentinel import scan_directory
    >>> results = scan_directory("/path/to/terraform")
    >>> for result in results:
    ...     print(result.code, result.range)

Findings on a line can be suppressed with a comment:
    acl = "public-read" # tfsentinel:ignore:AWS001
"""

__version__ = "0.3.0"
__author__ = "tfsentinel"

from .errors import ConfigError, DuplicateCheckError, InputError, ParseError, TfSentinelError
from .models import Range, Result, Severity
from .hcl import Attribute, Block, Parser, Value, ValueKind, parse_directory
from .checks import BUILTIN_CHECKS, Check, CheckRegistry, ResourceCheck, default_registry
from .scanner import Scanner, create_scanner, scan_directory

__all__ = [
    # Models
    'Range',
    'Result',
    'Severity',
    # Parsing
    'Attribute',
    'Block',
    'Parser',
    'Value',
    'ValueKind',
    'parse_directory',
    # Checks
    'BUILTIN_CHECKS',
    'Check',
    'CheckRegistry',
    'ResourceCheck',
    'default_registry',
    # Scanning
    'Scanner',
    'create_scanner',
    'scan_directory',
    # Errors
    'ConfigError',
    'DuplicateCheckError',
    'InputError',
    'ParseError',
    'TfSentinelError',
]
