"""Syntax check for generated Terraform documents.

The compiler never re-parses its own output during export. This check is an
opt-in safety net for the CLI and the test-suite: it runs the text through
python-hcl2 and reports parser errors.
"""

import logging
from typing import List

import hcl2

from exporter.exceptions import HCLSyntaxError

logger = logging.getLogger(__name__)


def validate_hcl(text: str) -> List[str]:
    """Return a list of parser errors (empty when the document parses)."""
    try:
        hcl2.loads(text)
    except Exception as e:  # lark raises several unrelated exception types
        logger.debug(f"HCL parse failure: {e}")
        return [str(e).strip() or type(e).__name__]
    return []


def assert_valid_hcl(text: str) -> None:
    """Raise :class:`HCLSyntaxError` if ``text`` is not valid HCL2."""
    errors = validate_hcl(text)
    if errors:
        raise HCLSyntaxError("Generated Terraform is not valid HCL", {"error": errors[0]})
