"""
AWS checks.

Each check follows the same pattern: match the resource type, read the
attributes it cares about through the typed Value accessors (which return
None for unresolved expressions), and report against the attribute when one
is at fault or against the whole block when something is missing.
"""

from typing import List

from ..hcl.blocks import Attribute, Block
from ..models import Result, Severity
from .base import ResourceCheck, is_public_cidr

_LISTENER_TYPES = ("aws_lb_listener", "aws_alb_listener")
_CIDR_ATTRIBUTES = ("cidr_blocks", "ipv6_cidr_blocks")


def _first_public_cidr(attribute: Attribute) -> str:
    for cidr in attribute.value.strings():
        if is_public_cidr(cidr):
            return cidr
    return ""


class S3BucketPublicACL(ResourceCheck):
    code = "AWS001"
    description = "S3 Bucket has an ACL defined which allows public access."
    severity = Severity.WARNING
    provider = "aws"
    resource_types = ("aws_s3_bucket", "aws_s3_bucket_acl")

    PUBLIC_ACLS = {"public-read", "public-read-write", "website", "authenticated-read"}

    def check_resource(self, block: Block) -> List[Result]:
        acl = block.get_attribute("acl")
        if acl is None:
            return []
        value = acl.value.as_str()
        if value is not None and value.lower() in self.PUBLIC_ACLS:
            return [self.result(
                acl,
                f"Resource '{block.full_name}' has an ACL which allows public access.",
                annotation=str(acl.value),
            )]
        return []


class S3BucketLogging(ResourceCheck):
    code = "AWS002"
    description = "S3 Bucket does not have logging enabled."
    severity = Severity.ERROR
    provider = "aws"
    resource_types = ("aws_s3_bucket",)

    def check_resource(self, block: Block) -> List[Result]:
        if block.get_block("logging") is None:
            return [self.result(block, f"Resource '{block.full_name}' does not have logging enabled.")]
        return []


class ClassicSecurityGroup(ResourceCheck):
    code = "AWS003"
    description = "AWS Classic resource usage."
    severity = Severity.ERROR
    provider = "aws"
    resource_types = (
        "aws_db_security_group",
        "aws_redshift_security_group",
        "aws_elasticache_security_group",
    )

    def check_resource(self, block: Block) -> List[Result]:
        return [self.result(
            block,
            f"Resource '{block.full_name}' uses EC2 Classic. Use a VPC instead.",
        )]


class PlainHTTPListener(ResourceCheck):
    code = "AWS004"
    description = "Use of plain HTTP."
    severity = Severity.ERROR
    provider = "aws"
    resource_types = _LISTENER_TYPES

    def check_resource(self, block: Block) -> List[Result]:
        protocol = block.get_attribute("protocol")
        if protocol is not None:
            value = protocol.value.as_str()
            if value is None or value.upper() != "HTTP":
                return []

        if self._redirects(block):
            return []

        message = f"Resource '{block.full_name}' uses plain HTTP instead of HTTPS."
        if protocol is None:
            return [self.result(block, message, annotation="protocol defaults to HTTP")]
        return [self.result(protocol, message, annotation=str(protocol.value))]

    @staticmethod
    def _redirects(block: Block) -> bool:
        for action in block.get_blocks("default_action"):
            action_type = action.get_attribute("type")
            if action_type is None:
                continue
            value = action_type.value.as_str()
            # an unresolved action type counts as a redirect
            if value is None or value.lower() == "redirect":
                return True
        return False


class PublicLoadBalancer(ResourceCheck):
    code = "AWS005"
    description = "Load balancer is exposed to the internet."
    severity = Severity.WARNING
    provider = "aws"
    resource_types = ("aws_alb", "aws_elb", "aws_lb")

    def check_resource(self, block: Block) -> List[Result]:
        message = f"Resource '{block.full_name}' is exposed publicly."
        internal = block.get_attribute("internal")
        if internal is None:
            return [self.result(block, message, annotation="internal is not set")]
        if internal.value.as_bool() is False:
            return [self.result(internal, message, annotation=str(internal.value))]
        return []


class _SecurityGroupRuleCheck(ResourceCheck):
    rule_type = ""
    resource_types = ("aws_security_group_rule",)
    provider = "aws"
    severity = Severity.WARNING

    def check_resource(self, block: Block) -> List[Result]:
        rule_type = block.get_attribute("type")
        if rule_type is None or not rule_type.value.equals(self.rule_type):
            return []

        results = []
        for name in _CIDR_ATTRIBUTES:
            attribute = block.get_attribute(name)
            if attribute is None:
                continue
            cidr = _first_public_cidr(attribute)
            if cidr:
                results.append(self.result(
                    attribute,
                    f"Resource '{block.full_name}' defines a fully open {self.rule_type} security group rule.",
                    annotation=f'"{cidr}"',
                ))
        return results


class SecurityGroupRuleIngress(_SecurityGroupRuleCheck):
    code = "AWS006"
    description = "An ingress security group rule allows traffic from /0."
    rule_type = "ingress"


class SecurityGroupRuleEgress(_SecurityGroupRuleCheck):
    code = "AWS007"
    description = "An egress security group rule allows traffic to /0."
    rule_type = "egress"


class _InlineSecurityGroupCheck(ResourceCheck):
    direction = ""
    resource_types = ("aws_security_group",)
    provider = "aws"
    severity = Severity.WARNING

    def check_resource(self, block: Block) -> List[Result]:
        results = []
        for rule in block.get_blocks(self.direction):
            for name in _CIDR_ATTRIBUTES:
                attribute = rule.get_attribute(name)
                if attribute is None:
                    continue
                cidr = _first_public_cidr(attribute)
                if cidr:
                    results.append(self.result(
                        attribute,
                        f"Resource '{block.full_name}' defines a fully open {self.direction} security group.",
                        annotation=f'"{cidr}"',
                    ))
        return results


class SecurityGroupIngress(_InlineSecurityGroupCheck):
    code = "AWS008"
    description = "An inline ingress security group rule allows traffic from /0."
    direction = "ingress"


class SecurityGroupEgress(_InlineSecurityGroupCheck):
    code = "AWS009"
    description = "An inline egress security group rule allows traffic to /0."
    direction = "egress"


class OutdatedSSLPolicy(ResourceCheck):
    code = "AWS010"
    description = "An outdated SSL policy is in use by a load balancer."
    severity = Severity.ERROR
    provider = "aws"
    resource_types = _LISTENER_TYPES

    OUTDATED_POLICIES = {
        "ELBSecurityPolicy-2015-05",
        "ELBSecurityPolicy-2016-08",
        "ELBSecurityPolicy-TLS-1-0-2015-04",
        "ELBSecurityPolicy-TLS-1-1-2017-01",
    }

    def check_resource(self, block: Block) -> List[Result]:
        policy = block.get_attribute("ssl_policy")
        if policy is None:
            return []
        if policy.value.as_str() in self.OUTDATED_POLICIES:
            return [self.result(
                policy,
                f"Resource '{block.full_name}' is using an outdated SSL policy.",
                annotation=str(policy.value),
            )]
        return []


class PubliclyAccessibleDatabase(ResourceCheck):
    code = "AWS011"
    description = "A database resource is marked as publicly accessible."
    severity = Severity.ERROR
    provider = "aws"
    resource_types = (
        "aws_db_instance",
        "aws_dms_replication_instance",
        "aws_rds_cluster_instance",
        "aws_redshift_cluster",
    )

    def check_resource(self, block: Block) -> List[Result]:
        attribute = block.get_attribute("publicly_accessible")
        if attribute is not None and attribute.value.as_bool() is True:
            return [self.result(
                attribute,
                f"Resource '{block.full_name}' is exposed publicly.",
                annotation=str(attribute.value),
            )]
        return []


class PublicIPAddress(ResourceCheck):
    code = "AWS012"
    description = "A resource has a public IP address."
    severity = Severity.WARNING
    provider = "aws"
    resource_types = ("aws_instance", "aws_launch_configuration")

    def check_resource(self, block: Block) -> List[Result]:
        attribute = block.get_attribute("associate_public_ip_address")
        if attribute is not None and attribute.value.as_bool() is True:
            return [self.result(
                attribute,
                f"Resource '{block.full_name}' has a public IP address associated.",
                annotation=str(attribute.value),
            )]
        return []


class UnencryptedBlockDevice(ResourceCheck):
    code = "AWS014"
    description = "Launch configuration with unencrypted block device."
    severity = Severity.ERROR
    provider = "aws"
    resource_types = ("aws_launch_configuration",)

    def check_resource(self, block: Block) -> List[Result]:
        if block.get_block("root_block_device") is None:
            return [self.result(
                block,
                f"Resource '{block.full_name}' uses an unencrypted root EBS block device.",
                annotation="root_block_device is not set",
            )]

        results = []
        for kind in ("root_block_device", "ebs_block_device"):
            for device in block.get_blocks(kind):
                message = f"Resource '{block.full_name}' uses an unencrypted {kind.replace('_', ' ')}."
                encrypted = device.get_attribute("encrypted")
                if encrypted is None:
                    results.append(self.result(device, message, annotation="encrypted is not set"))
                elif encrypted.value.as_bool() is False:
                    results.append(self.result(encrypted, message, annotation=str(encrypted.value)))
        return results


class _KmsKeyCheck(ResourceCheck):
    """Resources that are only encrypted when kms_master_key_id is set"""
    severity = Severity.ERROR
    provider = "aws"
    noun = "resource"

    def check_resource(self, block: Block) -> List[Result]:
        message = f"Resource '{block.full_name}' defines an unencrypted {self.noun}."
        key = block.get_attribute("kms_master_key_id")
        if key is None:
            if self.has_alternative_encryption(block):
                return []
            return [self.result(block, message, annotation="kms_master_key_id is not set")]
        if key.value.as_str() == "":
            return [self.result(key, message, annotation=str(key.value))]
        return []

    def has_alternative_encryption(self, block: Block) -> bool:
        return False


class UnencryptedSQSQueue(_KmsKeyCheck):
    code = "AWS015"
    description = "Unencrypted SQS queue."
    resource_types = ("aws_sqs_queue",)
    noun = "SQS queue"

    def has_alternative_encryption(self, block: Block) -> bool:
        managed = block.get_attribute("sqs_managed_sse_enabled")
        return managed is not None and managed.value.as_bool() is not False


class UnencryptedSNSTopic(_KmsKeyCheck):
    code = "AWS016"
    description = "Unencrypted SNS topic."
    resource_types = ("aws_sns_topic",)
    noun = "SNS topic"


class UnencryptedS3Bucket(ResourceCheck):
    code = "AWS017"
    description = "Unencrypted S3 bucket."
    severity = Severity.ERROR
    provider = "aws"
    resource_types = ("aws_s3_bucket",)

    def check_resource(self, block: Block) -> List[Result]:
        if block.get_block("server_side_encryption_configuration") is None:
            return [self.result(
                block,
                f"Resource '{block.full_name}' defines an unencrypted S3 bucket.",
            )]
        return []


class MissingSecurityGroupDescription(ResourceCheck):
    code = "AWS018"
    description = "Missing description for security group/security group rule."
    severity = Severity.WARNING
    provider = "aws"
    resource_types = ("aws_security_group", "aws_security_group_rule")

    def check_resource(self, block: Block) -> List[Result]:
        message = f"Resource '{block.full_name}' should include a description for auditing purposes."
        description = block.get_attribute("description")
        if description is None:
            return [self.result(block, message)]
        if description.value.as_str() == "":
            return [self.result(description, message, annotation=str(description.value))]
        return []
