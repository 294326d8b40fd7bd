"""
Raw response inspection.

- completeness: is this body a whole SOAP envelope, a truncated one, or
  not an envelope at all?
- extractor: recover fields from a body the strict decoder rejected,
  using the prioritized tag strategies in strategies.
"""

from inventory_client.parsing.completeness import (
    CompletenessDetector,
    classify,
)
from inventory_client.parsing.extractor import (
    TolerantExtractor,
    extract,
    lenient_number,
)
from inventory_client.parsing.strategies import (
    AnyPrefixTagStrategy,
    ExactTagStrategy,
    GenericReturnStrategy,
    PrefixedTagStrategy,
    TagStrategy,
)

__all__ = [
    "CompletenessDetector",
    "classify",
    "TolerantExtractor",
    "extract",
    "lenient_number",
    "TagStrategy",
    "ExactTagStrategy",
    "PrefixedTagStrategy",
    "AnyPrefixTagStrategy",
    "GenericReturnStrategy",
]
