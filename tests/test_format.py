from pathlib import Path

import pytest

from terraformat.core.config import FormatConfig
from terraformat.core.errors import ParseConfigError
from terraformat.formatting.pipeline import FormatPipeline, ensure_trailing_newline, format_source

FIXTURES = Path(__file__).parent / "fixtures"


def fmt(source: str, cfg: FormatConfig = None) -> str:
    return format_source(source.encode("utf-8"), cfg).decode("utf-8")


def test_attribute_reorder_inside_resource():
    source = 'resource "aws_instance" "a" {\n  ami = "x"\n  count = 1\n}\n'
    assert fmt(source) == 'resource "aws_instance" "a" {\n  count = 1\n  ami = "x"\n}\n'


def test_lifecycle_sinks_to_the_bottom():
    source = (
        'resource "aws_instance" "a" {\n'
        '  lifecycle {\n'
        '    create_before_destroy = true\n'
        '  }\n'
        '  ami = "x"\n'
        '  ebs_block_device {\n'
        '    device_name = "sda"\n'
        '  }\n'
        '}\n'
    )
    assert fmt(source) == (
        'resource "aws_instance" "a" {\n'
        '  ami = "x"\n'
        '  ebs_block_device {\n'
        '    device_name = "sda"\n'
        '  }\n'
        '  lifecycle {\n'
        '    create_before_destroy = true\n'
        '  }\n'
        '}\n'
    )


def test_top_level_ordering_and_spacing():
    source = (
        'resource "aws_s3_bucket" "b" {\n'
        '  bucket = "b"\n'
        '}\n'
        'terraform {\n'
        '  required_version = ">= 1.0"\n'
        '}\n'
        '\n'
        'variable "b" {}\n'
        '\n'
        '\n'
        'variable "a" {}\n'
    )
    assert fmt(source) == (
        'terraform {\n'
        '  required_version = ">= 1.0"\n'
        '}\n'
        '\n'
        'variable "a" {}\n'
        '\n'
        'variable "b" {}\n'
        '\n'
        'resource "aws_s3_bucket" "b" {\n'
        '  bucket = "b"\n'
        '}\n'
    )


def test_comment_moves_with_its_attribute():
    source = 'resource "aws_instance" "a" {\n  ami = "x"\n  # how many\n  count = 1\n}\n'
    assert fmt(source) == 'resource "aws_instance" "a" {\n  # how many\n  count = 1\n  ami = "x"\n}\n'


def test_canonical_input_is_unchanged():
    source = (FIXTURES / "mixed.golden.tf").read_bytes()
    assert format_source(source) == source


def test_unknown_block_types_sort_last_in_input_order():
    source = 'foo "b" {}\n\nresource "r" "x" {}\n\nbar {}\n\nfoo "a" {}\n'
    assert fmt(source) == 'resource "r" "x" {}\n\nfoo "b" {}\n\nbar {}\n\nfoo "a" {}\n'


@pytest.mark.parametrize("name", ["mixed", "module"])
def test_golden_files(name):
    source = (FIXTURES / f"{name}.input.tf").read_bytes()
    golden = (FIXTURES / f"{name}.golden.tf").read_bytes()
    assert format_source(source, filename=f"{name}.input.tf") == golden
    assert format_source(golden) == golden


def test_tfvars_attributes_sorted_by_name():
    assert fmt('region = "eu"\nenv = "prod"\n') == 'env = "prod"\nregion = "eu"\n'


def test_unterminated_last_item_gets_a_newline_when_moved():
    assert fmt("b = 1\na = 2") == "a = 2\nb = 1\n"


def test_eof_newline_added():
    assert fmt("a = 1") == "a = 1\n"


def test_eof_newline_can_be_disabled():
    cfg = FormatConfig(ensure_eof_newline=False)
    assert fmt("a = 1", cfg) == "a = 1"


def test_no_spacing_rule():
    cfg = FormatConfig(enforce_top_level_spacing=False)
    source = 'provider "aws" {}\nterraform {}\n'
    assert fmt(source, cfg) == 'terraform {}\nprovider "aws" {}\n'


def test_all_rules_disabled_only_normalizes_whitespace():
    cfg = FormatConfig(False, False, False, False)
    source = 'provider "aws" {}\n\n\nterraform {}'
    assert fmt(source, cfg) == 'provider "aws" {}\nterraform {}'


def test_detached_comment_kept_above_next_block():
    source = 'terraform {}\n\n# detached\n\nprovider "aws" {}\n'
    assert fmt(source) == 'terraform {}\n\n# detached\nprovider "aws" {}\n'


def test_header_comment_stays_at_the_top():
    source = '# header\n\nresource "r" "x" {}\nterraform {}\n'
    assert fmt(source) == '# header\nterraform {}\n\nresource "r" "x" {}\n'


def test_brace_line_comment_is_not_moved():
    source = 'resource "a" "b" { # note\n  ami = "x"\n  count = 1\n}\n'
    assert fmt(source) == 'resource "a" "b" { # note\n  count = 1\n  ami = "x"\n}\n'


def test_blank_lines_inside_blocks_collapse():
    source = 'locals {\n\n  a = 1\n\n\n  b = 2\n\n}\n'
    assert fmt(source) == 'locals {\n  a = 1\n  b = 2\n\n}\n'


def test_single_line_blocks_survive_reordering():
    source = 'variable "x" { default = 1 }\nterraform { required_version = ">= 1" }\n'
    assert fmt(source) == 'terraform { required_version = ">= 1" }\n\nvariable "x" { default = 1 }\n'


def test_block_comment_prefix():
    source = 'b = 1\n/* about a */\na = 2\n'
    assert fmt(source) == '/* about a */\na = 2\nb = 1\n'


def test_heredoc_is_carried_verbatim():
    source = 'output "o" {\n  value = <<-EOT\n    b = 1\n    a = 2\n  EOT\n  description = "d"\n}\n'
    assert fmt(source) == 'output "o" {\n  description = "d"\n  value = <<-EOT\n    b = 1\n    a = 2\n  EOT\n}\n'


def test_crlf_line_endings_are_preserved():
    source = b'b = 1\r\na = 2\r\n'
    assert format_source(source) == b'a = 2\r\nb = 1\r\n'


def test_crlf_blank_line_between_blocks_uses_crlf():
    source = b'provider "aws" {}\r\nterraform {}\r\n'
    assert format_source(source) == b'terraform {}\r\n\r\nprovider "aws" {}\r\n'


def test_crlf_unterminated_last_item_gets_crlf():
    assert format_source(b"b = 1\r\na = 2") == b"a = 2\r\nb = 1\r\n"
    assert format_source(b"a = 1\r\nb = 2") == b"a = 1\r\nb = 2\r\n"


def test_detached_comment_after_leading_blank_line_is_stable():
    source = b'\nresource "a" "b" {}\n/* about terraform */\nterraform {}\n'
    once = format_source(source)
    assert once == b'\n/* about terraform */\nterraform {}\n\nresource "a" "b" {}\n'
    assert format_source(once) == once


def test_empty_document():
    assert format_source(b"") == b""


def test_parse_error_raises():
    with pytest.raises(ParseConfigError) as info:
        format_source(b'resource "a" "b" {\n', filename="broken.tf")
    assert str(info.value).startswith("parse config: broken.tf:")
    assert info.value.diagnostics[0].summary == "Unclosed configuration block"


def test_pipeline_is_reusable():
    pipeline = FormatPipeline()
    assert pipeline.run(b"b = 1\na = 2\n") == b"a = 2\nb = 1\n"
    assert pipeline.run(b"d = 1\nc = 2\n") == b"c = 2\nd = 1\n"


def test_ensure_trailing_newline():
    assert ensure_trailing_newline(b"") == b""
    assert ensure_trailing_newline(b"x") == b"x\n"
    assert ensure_trailing_newline(b"x\n") == b"x\n"
    assert ensure_trailing_newline(b"x", b"\r\n") == b"x\r\n"
