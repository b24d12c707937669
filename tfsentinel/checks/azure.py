"""
Azure checks.
"""

from typing import List

from ..hcl.blocks import Block
from ..models import Result, Severity
from .base import ResourceCheck, is_public_cidr


class UnencryptedManagedDisk(ResourceCheck):
    code = "AZU001"
    description = "Unencrypted managed disk."
    severity = Severity.ERROR
    provider = "azure"
    resource_types = ("azurerm_managed_disk",)

    def check_resource(self, block: Block) -> List[Result]:
        settings = block.get_block("encryption_settings")
        if settings is None:
            return []
        enabled = settings.get_attribute("enabled")
        if enabled is not None and enabled.value.as_bool() is False:
            return [self.result(
                enabled,
                f"Resource '{block.full_name}' defines an unencrypted managed disk.",
                annotation=str(enabled.value),
            )]
        return []


class OpenInboundSecurityRule(ResourceCheck):
    code = "AZU002"
    description = "An inbound network security rule allows traffic from /0."
    severity = Severity.WARNING
    provider = "azure"
    resource_types = ("azurerm_network_security_rule",)

    OPEN_SOURCES = {"*", "0.0.0.0", "internet", "any"}

    def check_resource(self, block: Block) -> List[Result]:
        direction = block.get_attribute("direction")
        access = block.get_attribute("access")
        if direction is None or access is None:
            return []
        if (direction.value.as_str() or "").lower() != "inbound":
            return []
        if (access.value.as_str() or "").lower() != "allow":
            return []

        results = []
        for name in ("source_address_prefix", "source_address_prefixes"):
            attribute = block.get_attribute(name)
            if attribute is None:
                continue
            for prefix in attribute.value.strings():
                if self._is_open(prefix):
                    results.append(self.result(
                        attribute,
                        f"Resource '{block.full_name}' defines a fully open inbound security rule.",
                        annotation=f'"{prefix}"',
                    ))
                    break
        return results

    def _is_open(self, prefix: str) -> bool:
        prefix = prefix.strip()
        return prefix.lower() in self.OPEN_SOURCES or is_public_cidr(prefix)


class UnencryptedDataLakeStore(ResourceCheck):
    code = "AZU003"
    description = "Unencrypted data lake store."
    severity = Severity.ERROR
    provider = "azure"
    resource_types = ("azurerm_data_lake_store",)

    def check_resource(self, block: Block) -> List[Result]:
        state = block.get_attribute("encryption_state")
        if state is not None and state.value.equals("Disabled"):
            return [self.result(
                state,
                f"Resource '{block.full_name}' defines an unencrypted data lake store.",
                annotation=str(state.value),
            )]
        return []


class PublicBlobAccess(ResourceCheck):
    code = "AZU004"
    description = "Storage allows public access to blobs."
    severity = Severity.ERROR
    provider = "azure"
    resource_types = ("azurerm_storage_account", "azurerm_storage_container")

    PUBLIC_ACCESS_TYPES = {"blob", "container"}

    def check_resource(self, block: Block) -> List[Result]:
        if block.type_label == "azurerm_storage_account":
            allow = block.get_attribute("allow_blob_public_access")
            if allow is not None and allow.value.as_bool() is True:
                return [self.result(
                    block,
                    f"Resource '{block.full_name}' allows public access to blobs.",
                    annotation=f"allow_blob_public_access = {allow.value}",
                )]
            return []

        access_type = block.get_attribute("container_access_type")
        if access_type is None:
            return []
        value = access_type.value.as_str()
        if value is not None and value.lower() in self.PUBLIC_ACCESS_TYPES:
            return [self.result(
                access_type,
                f"Resource '{block.full_name}' defines a publicly accessible storage container.",
                annotation=str(access_type.value),
            )]
        return []


class StorageHTTPSOnly(ResourceCheck):
    code = "AZU005"
    description = "Storage account allows unencrypted HTTP traffic."
    severity = Severity.ERROR
    provider = "azure"
    resource_types = ("azurerm_storage_account",)

    def check_resource(self, block: Block) -> List[Result]:
        https_only = block.get_attribute("enable_https_traffic_only")
        if https_only is not None and https_only.value.as_bool() is False:
            return [self.result(
                https_only,
                f"Resource '{block.full_name}' explicitly allows plain HTTP traffic.",
                annotation=str(https_only.value),
            )]
        return []
