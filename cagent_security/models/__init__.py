"""cagent-security models package.

Defines the data contracts shared by the gates and the CLI:

  - scan.py    — RiskLevel, ClassificationResult, AuthorizationResult, AdvisoryResult
  - block.py   — human-readable block, leak-incident and authorization-failure messages

These models are the single contract between the pattern scanners and the CI
steps that act on their verdicts.
"""
