"""
Contract template registry.

Markdown templates live in contracts/templates/contracts/ and are rendered
with the template engine, converted to HTML and wrapped in a printable
document.
"""
import logging
import re
from pathlib import Path
from typing import Dict, Optional

from django.template.loader import render_to_string

from rights.roles import ContractType
from .template_engine import markdown_to_html, render_template

logger = logging.getLogger(__name__)

TEMPLATE_DIR = Path(__file__).resolve().parent.parent / 'templates' / 'contracts'

TEMPLATE_FILES = {
    ContractType.SONGWRITER_PUBLISHING.value: 'publishing-assignment.md',
    ContractType.DIGITAL_MASTER_ONLY.value: 'master-revenue-share.md',
}

DOCUMENT_TEMPLATE = 'contracts/contract_document.html'

# Dropbox Sign text tags: [sig|req|signer1] or [date|req|signer2|Label|id]
TEXT_TAG_RE = re.compile(r'\[([a-z_]+)\|([a-z]+)\|([a-z0-9]+)(?:\|([^\]]+))?\]', re.IGNORECASE)


class ContractTemplateNotFound(Exception):
    """Raised when a contract type has no template file."""


def get_template_path(contract_type) -> Optional[Path]:
    filename = TEMPLATE_FILES.get(contract_type)
    return TEMPLATE_DIR / filename if filename else None


def has_template(contract_type) -> bool:
    path = get_template_path(contract_type)
    return path is not None and path.exists()


def load_template(contract_type) -> str:
    path = get_template_path(contract_type)
    if path is None:
        raise ContractTemplateNotFound(f"No template available for contract type: {contract_type}")
    try:
        return path.read_text(encoding='utf-8')
    except OSError as e:
        raise ContractTemplateNotFound(f"Failed to load template from {path}: {e}")


def hide_text_tags(html: str) -> str:
    """Keep signature text tags in the document text layer but render them invisible."""
    return TEXT_TAG_RE.sub(
        lambda match: f'<span class="text-tag" style="color: white; background: white;">{match.group(0)}</span>',
        html
    )


def render_contract_template(contract_type, data: Dict) -> str:
    """Render the body HTML for a contract type."""
    rendered = render_template(load_template(contract_type), data)
    return hide_text_tags(markdown_to_html(rendered))


def render_contract_document(contract_type, data: Dict, title: str = '') -> str:
    """Full HTML document ready to be sent for signature."""
    body = render_contract_template(contract_type, data)
    return render_to_string(DOCUMENT_TEMPLATE, {'title': title, 'body': body})
