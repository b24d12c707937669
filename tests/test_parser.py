"""Tests for the HCL parser"""

import gc
import logging
import pytest
from tfsentinel.errors import InputError, ParseError
from tfsentinel.hcl.parser import Parser, parse_directory
from tfsentinel.hcl.values import UNRESOLVED
from tfsentinel.models import Range, Result, Severity


BUCKET = '''\
resource "aws_s3_bucket" "logs" {
  bucket = "company-logs"
  acl    = "private"

  versioning {
    enabled = true
  }
}
'''


class TestBlocks:
    def test_block_kind_and_labels(self, parse_tf):
        blocks = parse_tf(BUCKET)
        assert len(blocks) == 1
        block = blocks[0]
        assert block.kind == "resource"
        assert block.labels == ("aws_s3_bucket", "logs")
        assert block.type_label == "aws_s3_bucket"

    def test_block_range_spans_keyword_to_closing_brace(self, parse_tf):
        block = parse_tf(BUCKET)[0]
        assert block.range == Range("main.tf", 1, 8)

    def test_attribute_values_and_ranges(self, parse_tf):
        block = parse_tf(BUCKET)[0]
        acl = block.get_attribute("acl")
        assert acl.value.as_str() == "private"
        assert acl.range == Range("main.tf", 3, 3)
        assert list(block.attributes) == ["bucket", "acl"]

    def test_nested_block(self, parse_tf):
        block = parse_tf(BUCKET)[0]
        versioning = block.get_block("versioning")
        assert versioning.range == Range("main.tf", 5, 7)
        assert versioning.get_attribute("enabled").value.as_bool() is True
        assert versioning.parent is block

    def test_multi_line_attribute_range(self, parse_tf):
        source = '''\
        resource "aws_security_group_rule" "r" {
          cidr_blocks = [
            "10.0.0.0/8",
            "0.0.0.0/0",
          ]
          type = "ingress"
        }
        '''
        block = parse_tf(source)[0]
        cidrs = block.get_attribute("cidr_blocks")
        assert cidrs.range == Range("main.tf", 2, 5)
        assert cidrs.value.strings() == ["10.0.0.0/8", "0.0.0.0/0"]
        assert block.get_attribute("type").range.start_line == 6

    def test_heredoc_attribute_range(self, parse_tf):
        source = '''\
        resource "aws_iam_policy" "p" {
          policy = <<EOF
        {"Version": "2012-10-17"}
        EOF
          name = "p"
        }
        '''
        block = parse_tf(source)[0]
        assert block.get_attribute("policy").range == Range("main.tf", 2, 4)
        assert block.get_attribute("name").value.as_str() == "p"

    def test_one_line_block(self, parse_tf):
        blocks = parse_tf('variable "x" { default = 1 }\n')
        assert blocks[0].get_attribute("default").value.as_number() == 1
        assert blocks[0].range == Range("main.tf", 1, 1)

    def test_empty_block(self, parse_tf):
        blocks = parse_tf('terraform {}\n')
        assert blocks[0].kind == "terraform"
        assert blocks[0].labels == ()
        assert blocks[0].attributes == {}

    def test_identifier_labels(self, parse_tf):
        blocks = parse_tf('resource aws_s3_bucket b {\n}\n')
        assert blocks[0].labels == ("aws_s3_bucket", "b")

    def test_repeated_child_blocks_keep_order(self, parse_tf):
        source = '''\
        resource "aws_security_group" "sg" {
          ingress {
            from_port = 22
          }
          egress {
            from_port = 0
          }
          ingress {
            from_port = 443
          }
        }
        '''
        block = parse_tf(source)[0]
        assert [c.kind for c in block.children] == ["ingress", "egress", "ingress"]
        ports = [b.get_attribute("from_port").value.as_number() for b in block.get_blocks("ingress")]
        assert ports == [22, 443]

    def test_references_are_unresolved(self, parse_tf):
        blocks = parse_tf('resource "a" "b" {\n  name = var.name\n}\n')
        assert blocks[0].get_attribute("name").value is UNRESOLVED

    def test_escaped_template_is_a_literal_string(self, parse_tf):
        blocks = parse_tf('locals {\n  e = "$${literal}"\n}\n')
        assert blocks[0].get_attribute("e").value.as_str() == "${literal}"

    def test_unicode_attribute_name(self, parse_tf):
        blocks = parse_tf('locals {\n  café = "x"\n}\n')
        assert blocks[0].get_attribute("café").value.as_str() == "x"

    def test_blocks_in_source_order(self, parse_tf):
        source = 'provider "aws" {}\nvariable "a" {}\nresource "x" "y" {}\noutput "o" {\n  value = 1\n}\n'
        assert [b.kind for b in parse_tf(source)] == ["provider", "variable", "resource", "output"]

    def test_comments_are_ignored(self, parse_tf):
        source = '''\
        # header
        resource "a" "b" { // trailing
          /* inline */ name = "x" # after
        }
        '''
        block = parse_tf(source)[0]
        assert block.get_attribute("name").value.as_str() == "x"

    def test_top_level_attribute_skipped_with_warning(self, parse_tf, caplog):
        with caplog.at_level(logging.WARNING):
            blocks = parse_tf('stray = 1\nresource "a" "b" {}\n')
        assert len(blocks) == 1
        assert "stray" in caplog.text


class TestParent:
    def test_parent_is_weak(self, parse_tf):
        blocks = parse_tf(BUCKET)
        child = blocks[0].get_block("versioning")
        del blocks
        gc.collect()
        assert child.parent is None

    def test_top_level_has_no_parent(self, parse_tf):
        assert parse_tf(BUCKET)[0].parent is None


class TestSyntaxErrors:
    def test_unclosed_block(self, parse_tf):
        with pytest.raises(ParseError) as exc_info:
            parse_tf('resource "a" "b" {\n  x = 1\n', "broken.tf")
        assert exc_info.value.filename == "broken.tf"
        assert "broken.tf" in str(exc_info.value)
        assert "Unclosed block" in str(exc_info.value)

    def test_unexpected_closing_brace(self, parse_tf):
        with pytest.raises(ParseError, match="Unexpected '}'"):
            parse_tf('resource "a" "b" {\n}\n}\n')

    def test_missing_value(self, parse_tf):
        with pytest.raises(ParseError) as exc_info:
            parse_tf('resource "a" "b" {\n  x =\n}\n')
        assert exc_info.value.line == 2

    def test_missing_brace_after_labels(self, parse_tf):
        with pytest.raises(ParseError, match="Expected '\\{'"):
            parse_tf('resource "a" "b"\n')

    def test_duplicate_attribute(self, parse_tf):
        with pytest.raises(ParseError, match="redefined"):
            parse_tf('resource "a" "b" {\n  x = 1\n  x = 2\n}\n')

    def test_unbalanced_brackets(self, parse_tf):
        with pytest.raises(ParseError):
            parse_tf('resource "a" "b" {\n  x = [1, 2\n}\n')

    def test_interpolated_label(self, parse_tf):
        with pytest.raises(ParseError, match="block labels"):
            parse_tf('resource "${var.t}" "b" {}\n')

    def test_error_location(self, parse_tf):
        with pytest.raises(ParseError) as exc_info:
            parse_tf('resource "a" "b" {\n  x = 1 @\n}\n')
        error = exc_info.value
        assert (error.line, error.column) == (2, 9)
        assert str(error).startswith("main.tf:2:9: ")


class TestParseDirectory:
    def test_files_in_lexicographic_order(self, write_tf, tmp_path):
        write_tf('resource "x" "from_b" {}\n', "b.tf")
        write_tf('resource "x" "from_a" {}\n', "a.tf")
        blocks = parse_directory(tmp_path)
        assert [b.labels[1] for b in blocks] == ["from_a", "from_b"]

    def test_only_tf_files(self, write_tf, tmp_path):
        write_tf('resource "x" "y" {}\n', "main.tf")
        (tmp_path / "notes.txt").write_text("not { terraform")
        (tmp_path / "vars.tfvars").write_text('x = "y"\n')
        assert len(parse_directory(tmp_path)) == 1

    def test_recurses_and_skips_tool_directories(self, write_tf, tmp_path):
        write_tf('resource "x" "root" {}\n', "main.tf")
        write_tf('resource "x" "nested" {}\n', "modules/net/main.tf")
        write_tf('resource "x" "cached" {}\n', ".terraform/modules/m/main.tf")
        blocks = parse_directory(tmp_path)
        assert sorted(b.labels[1] for b in blocks) == ["nested", "root"]

    def test_ranges_name_the_file(self, write_tf, tmp_path):
        path = write_tf(BUCKET, "s3.tf")
        block = parse_directory(tmp_path)[0]
        assert block.range.filename == str(path)

    def test_empty_directory(self, tmp_path):
        assert parse_directory(tmp_path) == []

    def test_missing_directory(self, tmp_path):
        with pytest.raises(InputError):
            parse_directory(tmp_path / "nope")

    def test_file_is_not_a_directory(self, write_tf):
        path = write_tf(BUCKET)
        with pytest.raises(InputError):
            parse_directory(path)

    def test_syntax_error_names_file(self, write_tf, tmp_path):
        write_tf(BUCKET, "good.tf")
        bad = write_tf('resource "a" "b" {\n  acl = "private"\n', "unbalanced.tf")
        with pytest.raises(ParseError) as exc_info:
            parse_directory(tmp_path)
        assert exc_info.value.filename == str(bad)

    def test_parallel_parse_keeps_order(self, write_tf, tmp_path):
        for i in range(15):
            write_tf(f'resource "x" "r{i:02d}" {{}}\n', f"f{i:02d}.tf")
        blocks = Parser(max_workers=4).parse_directory(tmp_path)
        assert [b.labels[1] for b in blocks] == [f"r{i:02d}" for i in range(15)]

    def test_deterministic(self, write_tf, tmp_path):
        write_tf(BUCKET, "a.tf")
        write_tf(BUCKET.replace("logs", "data"), "b.tf")
        first = [(b.full_name, b.range) for b in parse_directory(tmp_path)]
        second = [(b.full_name, b.range) for b in parse_directory(tmp_path)]
        assert first == second

    def test_latin1_file(self, tmp_path):
        (tmp_path / "main.tf").write_bytes('resource "x" "y" {\n  name = "caf\xe9"\n}\n'.encode("latin-1"))
        block = parse_directory(tmp_path)[0]
        assert block.get_attribute("name").value.as_str() == "caf\xe9"

    def test_files_parsed_recorded(self, write_tf, tmp_path):
        write_tf(BUCKET, "a.tf")
        parser = Parser()
        parser.parse_directory(tmp_path)
        assert parser.files_parsed == [str(tmp_path / "a.tf")]

    def test_parse_file_normalises_path(self, write_tf, tmp_path, monkeypatch):
        write_tf('resource "aws_s3_bucket" "b" {\n  acl = "x" # tfsentinel:ignore:AWS001\n}\n', "x.tf")
        monkeypatch.chdir(tmp_path)
        parser = Parser()
        blocks = parser.parse_file("./x.tf")
        assert blocks[0].range.filename == "x.tf"
        assert parser.files_parsed == ["x.tf"]
        result = Result(code="AWS001", description="d", range=Range("x.tf", 2, 2), severity=Severity.WARNING)
        assert parser.ignores.is_ignored(result)
