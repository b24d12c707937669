"""
SARIF Output Format Reporter

Generates SARIF (Static Analysis Results Interchange Format) output
for code scanning integrations such as GitHub Security and GitLab SAST.

SARIF Spec: https://sarifweb.azurewebsites.net/
"""

import json
from datetime import datetime, timezone
from pathlib import Path
from typing import Any, Dict, Iterable, List, Optional

from .. import __version__
from ..checks.base import Check
from ..models import Result, Severity


SARIF_VERSION = "2.1.0"
SARIF_SCHEMA = "https://raw.githubusercontent.com/oasis-tcs/sarif-spec/master/Schemata/sarif-schema-2.1.0.json"
TOOL_NAME = "tfsentinel"


def severity_to_sarif_level(severity: Severity) -> str:
    """Convert severity to SARIF level."""
    mapping = {
        'error': 'error',
        'warning': 'warning',
        'info': 'note',
    }
    return mapping.get(severity.value, 'warning')


def create_rule(code: str, description: str, severity: Severity, provider: str = "") -> Dict[str, Any]:
    """Create a SARIF rule descriptor."""
    rule = {
        "id": code,
        "name": code,
        "shortDescription": {
            "text": description
        },
        "defaultConfiguration": {
            "level": severity_to_sarif_level(severity)
        },
        "properties": {
            "tags": ["security", "terraform"]
        }
    }
    if provider:
        rule["properties"]["tags"].append(provider)
    return rule


def _relative_uri(filename: str, base_path: Optional[str]) -> str:
    if base_path:
        try:
            return Path(filename).relative_to(base_path).as_posix()
        except ValueError:
            pass
    return Path(filename).as_posix()


def create_result(result: Result, rule_index: int, base_path: Optional[str] = None) -> Dict[str, Any]:
    """Create a SARIF result from a scan result."""
    sarif_result = {
        "ruleId": result.code,
        "ruleIndex": rule_index,
        "level": severity_to_sarif_level(result.severity),
        "message": {
            "text": result.description
        },
        "locations": [
            {
                "physicalLocation": {
                    "artifactLocation": {
                        "uri": _relative_uri(result.range.filename, base_path),
                    },
                    "region": {
                        "startLine": result.range.start_line,
                        "endLine": result.range.end_line,
                    }
                }
            }
        ]
    }

    if result.range_annotation:
        sarif_result["properties"] = {"annotation": result.range_annotation}

    return sarif_result


def generate_sarif(
    results: List[Result],
    checks: Optional[Iterable[Check]] = None,
    tool_version: str = __version__,
    base_path: Optional[str] = None,
) -> Dict[str, Any]:
    """
    Generate a SARIF document.

    Args:
        results: Scan results to convert
        checks: Checks that ran; each becomes a rule descriptor even without results
        tool_version: Version reported for the tool
        base_path: Directory that result paths are made relative to

    Returns:
        SARIF document as dictionary
    """
    rules: List[Dict[str, Any]] = []
    rule_indices: Dict[str, int] = {}

    for check in checks or ():
        rule_indices[check.code] = len(rules)
        rules.append(create_rule(check.code, check.description, check.severity, check.provider))

    for result in results:
        if result.code not in rule_indices:
            rule_indices[result.code] = len(rules)
            rules.append(create_rule(result.code, result.description, result.severity))

    sarif_results = [
        create_result(result, rule_indices[result.code], base_path)
        for result in results
    ]

    return {
        "$schema": SARIF_SCHEMA,
        "version": SARIF_VERSION,
        "runs": [
            {
                "tool": {
                    "driver": {
                        "name": TOOL_NAME,
                        "version": tool_version,
                        "rules": rules
                    }
                },
                "results": sarif_results,
                "invocations": [
                    {
                        "executionSuccessful": True,
                        "endTimeUtc": datetime.now(timezone.utc).strftime('%Y-%m-%dT%H:%M:%SZ')
                    }
                ]
            }
        ]
    }


class SARIFReporter:
    """SARIF reporter"""

    def __init__(self, checks: Optional[Iterable[Check]] = None, base_path: Optional[str] = None):
        self.checks = list(checks or ())
        self.base_path = base_path

    def generate(self, results: List[Result]) -> Dict[str, Any]:
        return generate_sarif(results, self.checks, base_path=self.base_path)

    def report(self, results: List[Result], output: Optional[str] = None) -> str:
        """Generate SARIF report and optionally write to file."""
        content = json.dumps(self.generate(results), indent=2)
        if output:
            with open(output, 'w', encoding='utf-8') as f:
                f.write(content)
        else:
            print(content)
        return content
