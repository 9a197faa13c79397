"""Tests for the CLI command parser."""

import pytest

from cli.models import (
    DeleteCommand,
    DownloadCommand,
    InfoCommand,
    ListCommand,
    LoginCommand,
    LogoutCommand,
    RegisterCommand,
    UploadCommand,
)
from cli.parser import ParseError, parse_command


@pytest.mark.parametrize(
    "line,expected",
    [
        ("register alice pw", RegisterCommand(username="alice", password="pw")),
        ("login alice pw", LoginCommand(username="alice", password="pw")),
        ("logout", LogoutCommand()),
        ("upload data.bin", UploadCommand(path="data.bin")),
        ("upload 'my file.bin'", UploadCommand(path="my file.bin")),
        ("upload pic.jpg --thumbnail small.jpg", UploadCommand(path="pic.jpg", thumbnail_path="small.jpg")),
        ("list", ListCommand()),
        ("info abc", InfoCommand(transfer_id="abc")),
        ("download abc", DownloadCommand(transfer_id="abc")),
        ("download abc out.bin", DownloadCommand(transfer_id="abc", output_path="out.bin")),
        ("delete abc", DeleteCommand(transfer_id="abc")),
    ],
)
def test_parse_valid_commands(line, expected):
    assert parse_command(line) == expected


@pytest.mark.parametrize(
    "line",
    [
        "",
        "   ",
        "frobnicate",
        "register alice",
        "login a b c",
        "upload",
        "upload a b",
        "upload a --thumbnail",
        "list extra",
        "info",
        "download",
        "download a b c",
        "delete",
        "upload 'unterminated",
    ],
)
def test_parse_invalid_commands(line):
    with pytest.raises(ParseError):
        parse_command(line)
