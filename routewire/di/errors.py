"""
DI-specific error types with rich diagnostics.
"""

from typing import List, Optional

from ..faults import Fault, FaultDomain


class DIError(Fault):
    """Base exception for DI errors."""

    code = "DI_ERROR"
    domain = FaultDomain.DI

    def __init__(self, message: str, *, code: Optional[str] = None, **metadata):
        super().__init__(code=code or self.code, message=message, metadata=metadata)


class ProviderNotFoundError(DIError):
    """Provider not found for requested token."""

    def __init__(
        self,
        token: str,
        tag: Optional[str] = None,
        candidates: Optional[List[str]] = None,
    ):
        self.token = token
        self.tag = tag
        self.candidates = candidates or []

        msg = f"No provider found for token={token}"
        if tag:
            msg += f" (tag={tag})"

        if self.candidates:
            msg += "\n\nCandidates found:"
            for candidate in self.candidates:
                msg += f"\n  - {candidate}"
            msg += "\n\nSuggested fixes:"
            msg += f"\n  - Register a provider for {token}"
            msg += "\n  - Pass the registered tag to disambiguate"

        super().__init__(msg, code="PROVIDER_NOT_FOUND", token=token, tag=tag)


class DependencyCycleError(DIError):
    """Circular dependency detected."""

    def __init__(self, cycle: List[str]):
        self.cycle = cycle

        msg = "Detected dependency cycle:"
        for i, token in enumerate(cycle):
            arrow = " -> " if i < len(cycle) - 1 else ""
            msg += f"\n  {token}{arrow}"

        msg += "\n\nSuggested fixes:"
        msg += "\n  - Extract interface to decouple directionally"
        msg += "\n  - Restructure dependencies to remove cycle"

        super().__init__(msg, code="DEPENDENCY_CYCLE", cycle=list(cycle))


class DuplicateProviderError(DIError):
    """A different provider is already registered under the same key."""

    def __init__(self, token: str, tag: Optional[str], existing: str):
        msg = f"Provider for {token} (tag={tag}) already registered: {existing}"
        super().__init__(msg, code="DUPLICATE_PROVIDER", token=token, tag=tag)
