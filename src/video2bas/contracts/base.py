"""Base contract enforcement utilities.

The require() function is the single enforcement mechanism for all contracts.
"""

from video2bas.contracts.failure import ContractViolation


def require(condition: bool, message: str) -> None:
    """Enforce a pipeline contract.

    Called at stage boundaries to verify the preceding stage produced the
    guaranteed invariants. Fail-fast: no recovery, no fallback.

    Parameters
    ----------
    condition : bool
        The invariant that must be true. If False, ContractViolation is raised.

    message : str
        Error message explaining the contract violation.

    Raises
    ------
    ContractViolation
        If condition is False.

    Examples
    --------
    >>> require(len(palette) > 0, "Palette contract: at least one color expected")
    """
    if not condition:
        raise ContractViolation(message)
