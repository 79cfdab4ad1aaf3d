"""
Lightweight template engine for contract and email text.

Supports {{placeholder}} substitution (with dot notation), conditional
blocks {% if name %}...{% else %}...{% endif %} and loops
{% for item in items %}...{% endfor %}, plus a small markdown to HTML
conversion for contract display.
"""
import re
from decimal import Decimal
from typing import Any, Dict, List, Optional

MAX_CONDITIONAL_PASSES = 50

PLACEHOLDER_RE = re.compile(r'\{\{\s*([\w.]+)\s*\}\}')

# Innermost conditional only: the bodies may not contain another {% if
IF_RE = re.compile(
    r'\{%\s*if\s+([\w.]+)\s*%\}'
    r'((?:(?!\{%\s*if).)*?)'
    r'(?:\{%\s*else\s*%\}((?:(?!\{%\s*if).)*?))?'
    r'\{%\s*endif\s*%\}',
    re.DOTALL,
)
LEFTOVER_TAG_RES = [
    re.compile(r'\{%\s*if\s+[\w.]+\s*%\}'),
    re.compile(r'\{%\s*else\s*%\}'),
    re.compile(r'\{%\s*endif\s*%\}'),
]

FOR_RE = re.compile(r'\{%\s*for\s+(\w+)\s+in\s+([\w.]+)\s*%\}(.*?)\{%\s*endfor\s*%\}', re.DOTALL)


def lookup(data: Dict[str, Any], key: str) -> Any:
    """Resolve "a.b.c" against nested dicts or object attributes."""
    value: Any = data
    for part in key.split('.'):
        if value is None:
            return None
        if isinstance(value, dict):
            value = value.get(part)
        else:
            value = getattr(value, part, None)
    return value


def is_truthy(value) -> bool:
    """None, False, numeric zero and the empty string are false; everything else is true."""
    if value is None or value is False or value == '':
        return False
    if isinstance(value, (int, float, Decimal)) and value == 0:
        return False
    return True


def replace_placeholders(template: str, data: Dict[str, Any]) -> str:
    def substitute(match):
        value = lookup(data, match.group(1))
        return '' if value is None else str(value)

    return PLACEHOLDER_RE.sub(substitute, template)


def process_conditionals(template: str, data: Dict[str, Any]) -> str:
    """
    Resolve conditional blocks from the innermost outwards.

    Each pass removes one level of nesting; unbalanced tags left after the
    last pass are stripped.
    """
    def choose(match):
        condition, if_block, else_block = match.group(1), match.group(2), match.group(3) or ''
        return if_block.strip() if is_truthy(lookup(data, condition)) else else_block.strip()

    result = template
    for _ in range(MAX_CONDITIONAL_PASSES):
        updated = IF_RE.sub(choose, result)
        if updated == result:
            break
        result = updated

    for pattern in LEFTOVER_TAG_RES:
        result = pattern.sub('', result)
    return result


def process_loops(template: str, data: Dict[str, Any]) -> str:
    """Expand loop blocks; a missing or empty list renders nothing."""
    def expand(match):
        item_name, list_name, body = match.groups()
        items = lookup(data, list_name)
        if not isinstance(items, (list, tuple)) or not items:
            return ''

        rendered = []
        for item in items:
            item_data = {**data, item_name: item}
            text = process_loops(body, item_data)
            text = process_conditionals(text, item_data)
            text = replace_placeholders(text, item_data)
            # Trailing newlines would break markdown tables built row by row
            rendered.append(text.rstrip('\n'))
        return ''.join(rendered)

    return FOR_RE.sub(expand, template)


def render_template(template: str, data: Dict[str, Any]) -> str:
    """Loops first, then conditionals, then plain placeholders."""
    result = process_loops(template, data)
    result = process_conditionals(result, data)
    return replace_placeholders(result, data)


# Markdown

HEADER_RES = [
    (re.compile(r'^### (.*)$', re.MULTILINE), r'<h3>\1</h3>'),
    (re.compile(r'^## (.*)$', re.MULTILINE), r'<h2>\1</h2>'),
    (re.compile(r'^# (.*)$', re.MULTILINE), r'<h1>\1</h1>'),
]
BOLD_RE = re.compile(r'\*\*(.*?)\*\*')
ITALIC_RE = re.compile(r'\*(.*?)\*')
TABLE_ROW_RE = re.compile(r'^\|.+?\|')
TABLE_SEPARATOR_RE = re.compile(r'^\|[\s\-:]+\|')


def _cells(row: str) -> List[str]:
    return [cell.strip() for cell in row.split('|')[1:-1]]


def build_html_table(header: Optional[str], rows: List[str]) -> str:
    if not rows and not header:
        return ''

    parts = ['<table class="contract-table">']
    if header:
        parts.append('<thead><tr>')
        parts.extend(f'<th>{cell}</th>' for cell in _cells(header))
        parts.append('</tr></thead>')
    if rows:
        parts.append('<tbody>')
        for row in rows:
            parts.append('<tr>')
            parts.extend(f'<td>{cell}</td>' for cell in _cells(row))
            parts.append('</tr>')
        parts.append('</tbody>')
    parts.append('</table>')
    return ''.join(parts)


def _convert_tables(text: str) -> str:
    output = []
    rows: List[str] = []
    header = None
    in_table = False

    for line in text.split('\n'):
        stripped = line.strip()
        is_separator = bool(TABLE_SEPARATOR_RE.match(stripped))
        is_row = bool(TABLE_ROW_RE.match(stripped))

        if is_row and not is_separator:
            if not in_table:
                in_table, rows, header = True, [], None
            rows.append(stripped)
        elif is_separator:
            # The row just above a separator is the header
            if rows and header is None:
                header = rows.pop()
            elif not in_table:
                in_table, rows, header = True, [], None
        else:
            if in_table:
                output.append(build_html_table(header, rows))
                in_table, rows, header = False, [], None
            output.append(line)

    if in_table:
        output.append(build_html_table(header, rows))
    return '\n'.join(output)


def markdown_to_html(markdown: str) -> str:
    """Headers, bold, italic, pipe tables and blank-line separated paragraphs."""
    html = markdown
    for pattern, replacement in HEADER_RES:
        html = pattern.sub(replacement, html)
    html = BOLD_RE.sub(r'<strong>\1</strong>', html)
    html = ITALIC_RE.sub(r'<em>\1</em>', html)
    html = _convert_tables(html)

    paragraphs = []
    for block in html.split('\n\n'):
        block = block.strip()
        if not block:
            continue
        if block.startswith(('<h', '<p>', '<table')):
            paragraphs.append(block)
        else:
            paragraphs.append(f'<p>{block}</p>')
    return '\n\n'.join(paragraphs)
