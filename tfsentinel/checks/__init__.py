"""
Built-in checks and registry construction.

Checks are listed explicitly in BUILTIN_CHECKS; nothing registers itself on
import. Callers (the CLI, tests) build the registry they need:

    registry = default_registry(exclude=["AWS002"])
    registry = CheckRegistry([S3BucketPublicACL()])
"""

import logging
from typing import Iterable, List, Optional, Type

from ..models import Severity
from .aws import (
    ClassicSecurityGroup,
    MissingSecurityGroupDescription,
    OutdatedSSLPolicy,
    PlainHTTPListener,
    PublicIPAddress,
    PublicLoadBalancer,
    PubliclyAccessibleDatabase,
    S3BucketLogging,
    S3BucketPublicACL,
    SecurityGroupEgress,
    SecurityGroupIngress,
    SecurityGroupRuleEgress,
    SecurityGroupRuleIngress,
    UnencryptedBlockDevice,
    UnencryptedS3Bucket,
    UnencryptedSNSTopic,
    UnencryptedSQSQueue,
)
from .azure import (
    OpenInboundSecurityRule,
    PublicBlobAccess,
    StorageHTTPSOnly,
    UnencryptedDataLakeStore,
    UnencryptedManagedDisk,
)
from .base import Check, ResourceCheck, is_public_cidr, is_sensitive_name
from .general import SensitiveAttribute, SensitiveLocal, SensitiveVariableDefault
from .google import (
    OpenIngressFirewall,
    PublicBucketIAM,
    UnencryptedComputeDisk,
    UniformBucketLevelAccess,
)
from .registry import CheckRegistry

logger = logging.getLogger(__name__)

# Registration order, and therefore result order
BUILTIN_CHECKS: List[Type[Check]] = [
    S3BucketPublicACL,
    S3BucketLogging,
    ClassicSecurityGroup,
    PlainHTTPListener,
    PublicLoadBalancer,
    SecurityGroupRuleIngress,
    SecurityGroupRuleEgress,
    SecurityGroupIngress,
    SecurityGroupEgress,
    OutdatedSSLPolicy,
    PubliclyAccessibleDatabase,
    PublicIPAddress,
    UnencryptedBlockDevice,
    UnencryptedSQSQueue,
    UnencryptedSNSTopic,
    UnencryptedS3Bucket,
    MissingSecurityGroupDescription,
    UnencryptedManagedDisk,
    OpenInboundSecurityRule,
    UnencryptedDataLakeStore,
    PublicBlobAccess,
    StorageHTTPSOnly,
    UnencryptedComputeDisk,
    UniformBucketLevelAccess,
    OpenIngressFirewall,
    PublicBucketIAM,
    SensitiveVariableDefault,
    SensitiveLocal,
    SensitiveAttribute,
]


def default_registry(exclude: Optional[Iterable[str]] = None,
                     minimum_severity: Optional[Severity] = None) -> CheckRegistry:
    """
    Build a registry holding the built-in checks.

    Args:
        exclude: Check codes to leave out (case-insensitive)
        minimum_severity: Leave out checks whose severity is lower than this

    Returns:
        A new CheckRegistry
    """
    excluded = {code.strip().upper() for code in (exclude or ()) if code.strip()}
    known = {check_class.code for check_class in BUILTIN_CHECKS}
    for code in sorted(excluded - known):
        logger.warning(f"Excluded check {code} does not exist")

    registry = CheckRegistry()
    for check_class in BUILTIN_CHECKS:
        if check_class.code in excluded:
            logger.debug(f"Skipping excluded check {check_class.code}")
            continue
        if minimum_severity is not None and check_class.severity.priority < minimum_severity.priority:
            logger.debug(f"Skipping check {check_class.code} below {minimum_severity.value}")
            continue
        registry.register(check_class())

    logger.info(f"Loaded {len(registry)} checks")
    return registry


__all__ = [
    'BUILTIN_CHECKS',
    'Check',
    'CheckRegistry',
    'ResourceCheck',
    'default_registry',
    'is_public_cidr',
    'is_sensitive_name',
]
