"""summarycache - Cross-run persistence of whole-program analysis summaries.
"""

__version__ = "0.1.0"

# Import main components for easy access
from .analysis.summaries.storage import SummaryStorage
from .analysis.summaries.summary import Summary, PersistedSummary
from .application.options import SummaryOptions
from .language.python.program import AnalysisUniverse

__all__ = [
    "SummaryStorage",
    "Summary",
    "PersistedSummary",
    "SummaryOptions",
    "AnalysisUniverse",
    "__version__",
]
