import pytest

from pipesh.exceptions import MissingRedirectionTarget
from pipesh.shell_parser import (
    RedirectMode,
    Stream,
    parse_pipeline,
    parse_redirections,
    split_pipeline,
)
from pipesh.tokenizer import tokenize


def test_parse_pipeline_empty_returns_no_segments():
    pipeline = parse_pipeline("   ")
    assert pipeline.segments == []
    assert pipeline.redirections == {}


def test_single_command_is_one_segment():
    pipeline = parse_pipeline("ls -la /tmp")
    assert len(pipeline) == 1
    segment = pipeline.segments[0]
    assert segment.name == "ls"
    assert segment.args == ["-la", "/tmp"]
    assert segment.argv == ["ls", "-la", "/tmp"]


@pytest.mark.parametrize(
    "operator, stream, mode",
    [
        (">", Stream.STDOUT, RedirectMode.TRUNCATE),
        ("1>", Stream.STDOUT, RedirectMode.TRUNCATE),
        (">>", Stream.STDOUT, RedirectMode.APPEND),
        ("1>>", Stream.STDOUT, RedirectMode.APPEND),
        ("2>", Stream.STDERR, RedirectMode.TRUNCATE),
        ("2>>", Stream.STDERR, RedirectMode.APPEND),
    ],
)
def test_redirection_operators(operator, stream, mode):
    tokens, specs = parse_redirections(tokenize(f"echo hi {operator} out.txt"))
    assert tokens == ["echo", "hi"]
    assert list(specs) == [stream]
    assert specs[stream].mode is mode
    assert specs[stream].path == "out.txt"


def test_last_redirection_for_a_stream_wins():
    tokens, specs = parse_redirections(tokenize("cmd > a.txt arg >> b.txt 2> e1 2>> e2"))
    assert tokens == ["cmd", "arg"]
    assert specs[Stream.STDOUT].path == "b.txt"
    assert specs[Stream.STDOUT].append
    assert specs[Stream.STDERR].path == "e2"
    assert specs[Stream.STDERR].append


def test_quoted_operator_is_an_argument():
    tokens, specs = parse_redirections(tokenize("echo '>' x \\| y"))
    assert tokens == ["echo", ">", "x", "|", "y"]
    assert specs == {}
    assert len(split_pipeline(tokens)) == 1


def test_operator_glued_to_word_is_not_a_redirection():
    tokens, specs = parse_redirections(tokenize("echo a>b"))
    assert tokens == ["echo", "a>b"]
    assert specs == {}


def test_missing_redirection_target():
    with pytest.raises(MissingRedirectionTarget):
        parse_pipeline("echo hi >")


def test_split_on_pipes():
    pipeline = parse_pipeline("cat file | grep x | wc -l")
    assert [segment.argv for segment in pipeline.segments] == [
        ["cat", "file"],
        ["grep", "x"],
        ["wc", "-l"],
    ]


def test_empty_middle_segment_is_dropped():
    pipeline = parse_pipeline("cmd1 | | cmd2")
    assert [segment.name for segment in pipeline.segments] == ["cmd1", "cmd2"]


def test_leading_and_trailing_pipes_are_dropped():
    pipeline = parse_pipeline("| cmd |")
    assert [segment.name for segment in pipeline.segments] == ["cmd"]
    assert parse_pipeline("| |").segments == []


def test_redirection_applies_to_whole_pipeline():
    pipeline = parse_pipeline("echo hi | tr a b > out.txt")
    assert [segment.name for segment in pipeline.segments] == ["echo", "tr"]
    assert pipeline.redirections[Stream.STDOUT].path == "out.txt"


def test_redirection_only_line_has_no_segments():
    pipeline = parse_pipeline("> out.txt")
    assert pipeline.segments == []
    assert pipeline.redirections[Stream.STDOUT].path == "out.txt"
