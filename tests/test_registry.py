"""Tests for CheckRegistry and default_registry"""

import pytest
from tfsentinel.checks import BUILTIN_CHECKS, default_registry
from tfsentinel.checks.aws import S3BucketLogging, S3BucketPublicACL
from tfsentinel.checks.base import Check
from tfsentinel.checks.registry import CheckRegistry
from tfsentinel.errors import DuplicateCheckError
from tfsentinel.models import Severity


class NoCodeCheck(Check):
    def apply(self, block):
        return []


class TestCheckRegistry:
    def test_registration_order(self):
        registry = CheckRegistry([S3BucketLogging(), S3BucketPublicACL()])
        assert registry.codes() == ["AWS002", "AWS001"]
        assert [c.code for c in registry.all()] == ["AWS002", "AWS001"]

    def test_duplicate_code_rejected(self):
        registry = CheckRegistry([S3BucketPublicACL()])
        with pytest.raises(DuplicateCheckError, match="AWS001"):
            registry.register(S3BucketPublicACL())
        assert len(registry) == 1

    def test_duplicate_is_a_value_error(self):
        with pytest.raises(ValueError):
            CheckRegistry([S3BucketPublicACL(), S3BucketPublicACL()])

    def test_check_without_code_rejected(self):
        with pytest.raises(ValueError):
            CheckRegistry([NoCodeCheck()])

    def test_lookup(self):
        check = S3BucketPublicACL()
        registry = CheckRegistry([check])
        assert registry.get("AWS001") is check
        assert registry.get("AWS999") is None
        assert "AWS001" in registry
        assert "AWS002" not in registry
        assert list(registry) == [check]

    def test_empty_registry(self):
        registry = CheckRegistry()
        assert len(registry) == 0
        assert registry.all() == ()


class TestDefaultRegistry:
    def test_builtin_codes_unique(self):
        codes = [c.code for c in BUILTIN_CHECKS]
        assert len(codes) == len(set(codes))

    def test_holds_every_builtin(self):
        registry = default_registry()
        assert registry.codes() == [c.code for c in BUILTIN_CHECKS]

    def test_every_check_described(self):
        for check_class in BUILTIN_CHECKS:
            assert check_class.code
            assert check_class.description
            assert isinstance(check_class.severity, Severity)

    def test_exclude(self):
        registry = default_registry(exclude=["aws002", "GEN003"])
        assert "AWS002" not in registry
        assert "GEN003" not in registry
        assert "AWS001" in registry

    def test_unknown_exclude_is_logged(self, caplog):
        default_registry(exclude=["NOPE001"])
        assert "NOPE001" in caplog.text

    def test_minimum_severity(self):
        registry = default_registry(minimum_severity=Severity.ERROR)
        assert len(registry) > 0
        assert all(c.severity is Severity.ERROR for c in registry)

    def test_registries_are_independent(self):
        first = default_registry()
        second = default_registry(exclude=["AWS001"])
        assert "AWS001" in first
        assert first.get("AWS002") is not second.get("AWS002")
