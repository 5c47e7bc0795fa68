"""Tokenizer for single lines of a Saleae CSV export."""

from typing import List

UTF8_BOM = "\ufeff"


def parse_csv_line(line: str) -> List[str]:
    """
    Split one CSV line into fields.

    Fields are comma separated and may be double-quoted. Inside quotes a
    doubled quote is a literal quote and commas are literal. An unterminated
    quote runs to the end of the line instead of failing.

    Args:
        line: One logical line without its newline

    Returns:
        List of fields; always at least one (``""`` for an empty line)
    """
    fields = []
    field = []
    in_quotes = False
    i = 0
    n = len(line)
    while i < n:
        c = line[i]
        if in_quotes:
            if c == '"':
                if i + 1 < n and line[i + 1] == '"':
                    field.append('"')
                    i += 1
                else:
                    in_quotes = False
            else:
                field.append(c)
        elif c == '"':
            in_quotes = True
        elif c == ",":
            fields.append("".join(field))
            field = []
        else:
            field.append(c)
        i += 1
    fields.append("".join(field))
    return fields


def strip_utf8_bom(value: str) -> str:
    if value.startswith(UTF8_BOM):
        return value[len(UTF8_BOM) :]
    return value
