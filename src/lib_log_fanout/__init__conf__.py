"""Static package metadata surfaced by the CLI banner."""

from __future__ import annotations

from typing import Callable

name = "lib_log_fanout"
title = "Structured logging façade fanning records out to console and syslog sinks"
version = "0.1.0"
homepage = "https://github.com/bitranox/lib_log_fanout"
author = "bitranox"
author_email = "bitranox@gmail.com"
shell_command = "lib_log_fanout"


def print_info(writer: Callable[[str], None] = print) -> None:
    """Emit the metadata banner line by line through ``writer``."""

    fields = [
        ("name", name),
        ("title", title),
        ("version", version),
        ("homepage", homepage),
        ("author", author),
        ("author_email", author_email),
        ("shell_command", shell_command),
    ]
    pad = max(len(label) for label, _ in fields)
    writer(f"Info for {name}:\n\n")
    for label, value in fields:
        writer(f"    {label:<{pad}} = {value}\n")
