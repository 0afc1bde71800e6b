from __future__ import annotations


def truncate_output(text: str, max_chars: int) -> str:
    if max_chars <= 0 or len(text) <= max_chars:
        return text
    omitted = len(text) - max_chars
    return text[:max_chars] + f"\n... [output truncated, {omitted} chars omitted]\n"


def is_single_line(value: str) -> bool:
    # cho phép 1 newline ở cuối (input gõ từ form thường có)
    return "\n" not in value.rstrip("\r\n")
