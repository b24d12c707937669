"""
Google Cloud checks.
"""

from typing import List

from ..hcl.blocks import Block
from ..models import Result, Severity
from .base import ResourceCheck, is_public_cidr


class UnencryptedComputeDisk(ResourceCheck):
    code = "GCP001"
    description = "Compute disk has no customer supplied encryption key."
    severity = Severity.WARNING
    provider = "google"
    resource_types = ("google_compute_disk",)

    def check_resource(self, block: Block) -> List[Result]:
        if block.get_block("disk_encryption_key") is None:
            return [self.result(
                block,
                f"Resource '{block.full_name}' defines an unencrypted disk. "
                "Specify a customer supplied disk_encryption_key.",
            )]
        return []


class UniformBucketLevelAccess(ResourceCheck):
    code = "GCP002"
    description = "Storage bucket without uniform bucket level access."
    severity = Severity.WARNING
    provider = "google"
    resource_types = ("google_storage_bucket",)

    def check_resource(self, block: Block) -> List[Result]:
        message = f"Resource '{block.full_name}' does not enable uniform bucket level access."
        uniform = block.get_attribute("uniform_bucket_level_access")
        if uniform is None:
            # older provider versions call it bucket_policy_only
            legacy = block.get_attribute("bucket_policy_only")
            if legacy is not None and legacy.value.as_bool() is not False:
                return []
            return [self.result(block, message, annotation="uniform_bucket_level_access is not set")]
        if uniform.value.as_bool() is False:
            return [self.result(uniform, message, annotation=str(uniform.value))]
        return []


class OpenIngressFirewall(ResourceCheck):
    code = "GCP003"
    description = "Firewall allows ingress from the public internet."
    severity = Severity.WARNING
    provider = "google"
    resource_types = ("google_compute_firewall",)

    def check_resource(self, block: Block) -> List[Result]:
        direction = block.get_attribute("direction")
        if direction is not None and not direction.value.equals("INGRESS"):
            return []
        if block.get_block("allow") is None:
            return []

        ranges = block.get_attribute("source_ranges")
        if ranges is None:
            return []
        for cidr in ranges.value.strings():
            if is_public_cidr(cidr):
                return [self.result(
                    ranges,
                    f"Resource '{block.full_name}' defines a fully open ingress firewall rule.",
                    annotation=f'"{cidr}"',
                )]
        return []


class PublicBucketIAM(ResourceCheck):
    code = "GCP004"
    description = "Storage bucket IAM grants access to allUsers or allAuthenticatedUsers."
    severity = Severity.ERROR
    provider = "google"
    resource_types = ("google_storage_bucket_iam_binding", "google_storage_bucket_iam_member")

    PUBLIC_MEMBERS = {"allUsers", "allAuthenticatedUsers"}

    def check_resource(self, block: Block) -> List[Result]:
        name = "members" if block.type_label == "google_storage_bucket_iam_binding" else "member"
        attribute = block.get_attribute(name)
        if attribute is None:
            return []
        for member in attribute.value.strings():
            if member in self.PUBLIC_MEMBERS:
                return [self.result(
                    attribute,
                    f"Resource '{block.full_name}' grants bucket access to {member}.",
                    annotation=f'"{member}"',
                )]
        return []
