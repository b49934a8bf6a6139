from .classifier import ClassifierMode, ClassifierRule, classify_response, classify_string
from .deep_probe import DeepProber
from .harvest import CandidateCollector, InterceptListener, harvest_page
from .pipeline import EventStreamPipeline, SingleStreamPipeline

__all__ = [
    "CandidateCollector",
    "ClassifierMode",
    "ClassifierRule",
    "DeepProber",
    "EventStreamPipeline",
    "InterceptListener",
    "SingleStreamPipeline",
    "classify_response",
    "classify_string",
    "harvest_page",
]
