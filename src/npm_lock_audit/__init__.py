"""npm-lock-audit core package.

Detects supply-chain-compromised packages in npm lockfiles and classifies each
match by severity. The scanning logic in ``core`` is shared by the CLI and any
other front end.
"""

__all__ = [
    "core",
]
