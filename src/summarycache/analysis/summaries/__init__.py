"""Cross-run persistence of per-unit analysis summaries.

**Architecture:**
- identifiers: Stable, name-based identifiers (UnitId, TypeId, FieldId)
- summary: Summary and PersistedSummary records
- hashing: Validity fingerprints (HashingStrategy)
- resolution: Identifier <-> live handle translation (ResolutionStrategy)
- codec: Summary <-> SerializedSummary conversion (SummaryCodec)
- container: The JSON summary file
- eligibility: Which summaries are persisted (SummaryFilter)
- storage: The cache itself (SummaryStorage)
- provider: Computation of summaries from scratch (AstSummaryProvider)
- invalidator: Skip sets for persistence (SummaryInvalidator)

**Usage:**
```python
storage = SummaryStorage(AstSummaryProvider(universe),
                         UniverseResolutionStrategy(universe), options)
storage.loadData()
summary = storage.getSummary(unit)
storage.persistData(invalidator.summariesToSkip())
```
"""

from .identifiers import FieldId, TypeId, UnitId
from .summary import PersistedSummary, Summary
from .hashing import BytecodeHashingStrategy, HashingStrategy, TrustAllHashingStrategy
from .resolution import MappingResolutionStrategy, ResolutionStrategy, UniverseResolutionStrategy
from .codec import SerializedSummary, SummaryCodec
from .eligibility import SummaryFilter
from .provider import AstSummaryProvider, SummaryProvider
from .invalidator import RecordingSummaryInvalidator, SummaryInvalidator
from .storage import LoadStats, PersistStats, SummaryStorage

__all__ = [
    "FieldId",
    "TypeId",
    "UnitId",
    "PersistedSummary",
    "Summary",
    "BytecodeHashingStrategy",
    "HashingStrategy",
    "TrustAllHashingStrategy",
    "MappingResolutionStrategy",
    "ResolutionStrategy",
    "UniverseResolutionStrategy",
    "SerializedSummary",
    "SummaryCodec",
    "SummaryFilter",
    "AstSummaryProvider",
    "SummaryProvider",
    "RecordingSummaryInvalidator",
    "SummaryInvalidator",
    "LoadStats",
    "PersistStats",
    "SummaryStorage",
]
