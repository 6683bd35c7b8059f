from enum import Enum


class InputMode(str, Enum):
    script = "SCRIPT"
    transcript = "TRANSCRIPT"
    idea = "IDEA"


# Labels offered to the model when classifying intent. search_intent itself
# stays an open string: models regularly answer with mixed labels.
KNOWN_SEARCH_INTENTS = ("Informational", "Transactional", "Entertainment")


class PipelineStatus(str, Enum):
    idle = "idle"
    analyzing = "analyzing"
    drafting = "drafting"
    succeeded = "succeeded"
    failed = "failed"


STATUS_TEXT = {
    PipelineStatus.idle: "",
    PipelineStatus.analyzing: "Thinking... Analyzing keyword intent and entities...",
    PipelineStatus.drafting: "Drafting... Generating optimized titles and descriptions...",
    PipelineStatus.succeeded: "",
    PipelineStatus.failed: "",
}


class ImageResolution(str, Enum):
    r1k = "1K"
    r2k = "2K"
    r4k = "4K"
