"""
Provider independent checks.

These look for credentials written straight into the configuration. A name
is "sensitive" when it looks like a password, secret, token or key (see
`is_sensitive_name`); only non-empty literal strings are reported, so
references such as `var.db_password` never match.
"""

from typing import List

from ..hcl.blocks import Attribute, Block
from ..models import Result, Severity
from .base import Check, is_sensitive_name

# Blocks whose attributes are not resource arguments
_NON_RESOURCE_KINDS = ("variable", "locals", "output", "terraform")


def _hard_coded(attribute: Attribute) -> bool:
    return bool(attribute.value.as_str())


class SensitiveVariableDefault(Check):
    code = "GEN001"
    description = "Potentially sensitive data stored in a variable default."
    severity = Severity.WARNING

    def apply(self, block: Block) -> List[Result]:
        if block.kind != "variable" or not block.labels:
            return []
        if not is_sensitive_name(block.labels[0]):
            return []

        default = block.get_attribute("default")
        if default is not None and _hard_coded(default):
            return [self.result(
                default,
                f"Variable '{block.full_name}' includes a potentially sensitive default value.",
            )]
        return []


class SensitiveLocal(Check):
    code = "GEN002"
    description = "Potentially sensitive data stored in a local value."
    severity = Severity.WARNING

    def apply(self, block: Block) -> List[Result]:
        if block.kind != "locals":
            return []

        results = []
        for name, attribute in block.attributes.items():
            if is_sensitive_name(name) and _hard_coded(attribute):
                results.append(self.result(
                    attribute,
                    f"Local 'local.{name}' includes a potentially sensitive value "
                    "which is defined within the project.",
                ))
        return results


class SensitiveAttribute(Check):
    code = "GEN003"
    description = "Potentially sensitive data stored in a block attribute."
    severity = Severity.WARNING

    def apply(self, block: Block) -> List[Result]:
        if block.kind in _NON_RESOURCE_KINDS:
            return []
        if any(ancestor.kind in _NON_RESOURCE_KINDS for ancestor in block.ancestors()):
            return []

        results = []
        for name, attribute in block.attributes.items():
            if is_sensitive_name(name) and _hard_coded(attribute):
                results.append(self.result(
                    attribute,
                    f"Block '{block.full_name}' includes a potentially sensitive attribute "
                    f"'{name}' which is defined within the project.",
                ))
        return results
