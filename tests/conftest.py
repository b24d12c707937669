"""Shared test fixtures for tfsentinel test suite."""

import sys
import textwrap
import pytest
from pathlib import Path

# Ensure tfsentinel is importable
sys.path.insert(0, str(Path(__file__).parent.parent))

from tfsentinel.checks.registry import CheckRegistry
from tfsentinel.hcl.parser import Parser
from tfsentinel.models import Range, Result, Severity
from tfsentinel.scanner import Scanner

FIXTURES_DIR = Path(__file__).parent / "fixtures"


def parse_source(source, filename="main.tf"):
    """Parse dedented source held in memory."""
    return Parser().parse_source(textwrap.dedent(source), filename)


def run_check(check, source, filename="main.tf"):
    """Scan source with a registry holding only the given check."""
    parser = Parser()
    blocks = parser.parse_source(textwrap.dedent(source), filename)
    return Scanner(CheckRegistry([check]), ignores=parser.ignores).scan(blocks)


@pytest.fixture
def fixtures_dir():
    """Path to test fixtures directory."""
    return FIXTURES_DIR


@pytest.fixture
def parse_tf():
    """parse_source(source, filename="main.tf") -> blocks"""
    return parse_source


@pytest.fixture
def scan_check():
    """run_check(check, source, filename="main.tf") -> results"""
    return run_check


@pytest.fixture
def write_tf(tmp_path):
    """Write dedented Terraform source below tmp_path and return the file path."""
    def _write(source, name="main.tf"):
        target = tmp_path / name
        target.parent.mkdir(parents=True, exist_ok=True)
        target.write_text(textwrap.dedent(source), encoding="utf-8")
        return target
    return _write


@pytest.fixture
def sample_range():
    return Range("main.tf", 2, 5)


@pytest.fixture
def sample_result(sample_range):
    """A result pointing at a whole bucket block."""
    return Result(
        code="AWS002",
        description="Resource 'aws_s3_bucket.logs' does not have logging enabled.",
        range=sample_range,
        severity=Severity.ERROR,
    )


@pytest.fixture
def sample_results():
    """Results from two files with and without annotations."""
    return [
        Result(
            code="AWS001",
            description="Resource 'aws_s3_bucket.public' has an ACL which allows public access.",
            range=Range("main.tf", 3, 3),
            severity=Severity.WARNING,
            range_annotation='"public-read"',
        ),
        Result(
            code="GEN001",
            description="Variable 'variable.db_password' includes a potentially sensitive default value.",
            range=Range("variables.tf", 2, 2),
            severity=Severity.WARNING,
        ),
    ]


@pytest.fixture
def insecure_dir(tmp_path):
    """Copy the insecure fixture configuration to tmp and return the directory."""
    target = tmp_path / "insecure"
    target.mkdir()
    for name in ("main.tf", "variables.tf"):
        content = (FIXTURES_DIR / "insecure" / name).read_text(encoding="utf-8")
        (target / name).write_text(content, encoding="utf-8")
    return target


@pytest.fixture
def secure_dir(tmp_path):
    """Copy the secure fixture configuration to tmp and return the directory."""
    target = tmp_path / "secure"
    target.mkdir()
    content = (FIXTURES_DIR / "secure" / "main.tf").read_text(encoding="utf-8")
    (target / "main.tf").write_text(content, encoding="utf-8")
    return target
