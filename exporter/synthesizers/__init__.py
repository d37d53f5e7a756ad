"""Resource synthesizers with family-based dispatch.

Each resource family from the provider configuration maps to one
synthesizer function taking ``(group, ctx)`` and returning a list of
:class:`~exporter.values.ResourceDescriptor`. The base resource comes first,
followed by any auxiliary resources it needs.
"""

from typing import Callable, Dict, List, Sequence

from exporter.snapshot import PlacedNode
from exporter.values import ResourceDescriptor

from .common import SynthesisContext
from .compute import (
    synthesize_elastic_ip,
    synthesize_instance,
    synthesize_lambda_function,
    synthesize_security_group,
)
from .database import synthesize_db_instance
from .network import synthesize_distribution, synthesize_vpc
from .storage import synthesize_bucket

Synthesizer = Callable[[Sequence[PlacedNode], SynthesisContext], List[ResourceDescriptor]]

SYNTHESIZERS: Dict[str, Synthesizer] = {
    "compute": synthesize_instance,
    "security_group": synthesize_security_group,
    "elastic_ip": synthesize_elastic_ip,
    "storage": synthesize_bucket,
    "network": synthesize_vpc,
    "cdn": synthesize_distribution,
    "function": synthesize_lambda_function,
    "database": synthesize_db_instance,
}


def get_synthesizer(family: str) -> Synthesizer:
    """Look up the synthesizer for a family.

    Raises:
        KeyError: If no synthesizer is registered for the family
    """
    return SYNTHESIZERS[family]


__all__ = ["SYNTHESIZERS", "SynthesisContext", "get_synthesizer"]
