"""Actions package - Installer steps that change the host.

Each action wraps one external collaborator (clpctl, apt-get, systemctl,
ssh-keygen, plain files) behind a small class that receives the runner and
settings explicitly.
"""

from dataclasses import dataclass


@dataclass(frozen=True)
class ActionContract:
    """Explicit contract for an action."""

    read_only: bool
    reversible: bool
    prerequisites: list[str]
