"""cagent-security scanner package.

Pattern tables (definitions.py), the secret registry (registry.py) and the three
text gates built on them: output leak scanner, input risk classifier and prompt
advisory scanner. Every gate is a pure function of its input and the
pre-compiled tables.
"""

from cagent_security.scanner.input_classifier import classify_input, strip_comment_lines
from cagent_security.scanner.output_scanner import scan_output
from cagent_security.scanner.prompt_advisor import advise
from cagent_security.scanner.registry import SecretPatternRegistry

__all__ = [
    "SecretPatternRegistry",
    "advise",
    "classify_input",
    "scan_output",
    "strip_comment_lines",
]
