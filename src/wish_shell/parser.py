# wish — Minimal Parallel Command Shell
# Copyright (c) 2025
# TriFactoria (Andrew Blankfield)
#
# Licensed under the Business Source License 1.1 (BSL 1.1).
# You may use, modify, and redistribute this file under the terms of the BSL.
# On the Change Date (2029-01-01), this file will be licensed under
# the Apache License, Version 2.0.

"""
Command-line parsing for wish.

Handles:
- splitting a line into '&'-separated parallel commands
- space and tab tokenization (no quoting, no escaping)
- output redirection ('>' glued to its neighbours or standing alone)
"""

from __future__ import annotations

from dataclasses import dataclass

from .errors import RedirectionSyntaxError

PARALLEL_SEPARATOR = "&"
REDIRECT = ">"


@dataclass(frozen=True)
class ParsedCommand:
    """Argument tokens plus an optional output file."""

    argv: list[str]
    output_file: str | None = None

    @property
    def name(self) -> str:
        return self.argv[0]


def trim(text: str) -> str:
    """Strip leading/trailing spaces, tabs and line endings."""
    return text.strip(" \t\r\n")


def split_command_group(line: str) -> list[str]:
    """Split a command line on the parallel separator.

    Members are trimmed and empty members dropped, so a line made only of
    whitespace and '&' yields an empty list.

    Args:
        line: Raw command line

    Returns:
        List of non-empty command strings, in left-to-right order
    """
    members = []
    for part in line.split(PARALLEL_SEPARATOR):
        part = trim(part)
        if part:
            members.append(part)
    return members


def tokenize(command: str) -> list[str]:
    """Split a command string on runs of spaces and tabs.

    Other whitespace (a stray carriage return, say) is ordinary text.
    """
    return [tok for tok in command.replace("\t", " ").split(" ") if tok]


def parse_command(tokens: list[str]) -> ParsedCommand:
    """Separate argument tokens from an optional redirection target.

    Accepted spellings (all equivalent):
        cmd>file   cmd > file   cmd >file   cmd> file

    Rules:
    - a '>' with no argument token before it is an error
    - a '>' with nothing after it is an error
    - a spaced target followed by more tokens is an error
    - anything after an already-resolved target is an error
      (a second '>' included)

    Args:
        tokens: Output of tokenize()

    Returns:
        ParsedCommand

    Raises:
        RedirectionSyntaxError: if the redirection is malformed
    """
    argv: list[str] = []
    output_file: str | None = None

    i = 0
    while i < len(tokens):
        token = tokens[i]

        if output_file is not None:
            raise RedirectionSyntaxError(
                f"unexpected token after redirection target: {token!r}"
            )

        pos = token.find(REDIRECT)
        if pos < 0:
            argv.append(token)
            i += 1
            continue

        before = token[:pos]
        after = token[pos + 1:]

        if before:
            argv.append(before)

        if not argv:
            raise RedirectionSyntaxError("no command before '>'")

        if after:
            output_file = after
            i += 1
        else:
            remaining = tokens[i + 1:]
            if not remaining:
                raise RedirectionSyntaxError("missing redirection target")
            if len(remaining) > 1:
                raise RedirectionSyntaxError(
                    "more than one token after '>'"
                )
            output_file = remaining[0]
            i += 2

        if REDIRECT in output_file:
            raise RedirectionSyntaxError(
                f"multiple redirections: {output_file!r}"
            )

    return ParsedCommand(argv=argv, output_file=output_file)


def parse(command: str) -> ParsedCommand:
    """Tokenize and parse one command string."""
    return parse_command(tokenize(command))
